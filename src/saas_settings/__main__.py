"""Settings CLI - inspect and edit the stored application configuration.

Usage:
    python -m saas_settings show
    python -m saas_settings apply app-config.yml
    python -m saas_settings apply-service service.yml
    python -m saas_settings delete-service api
    python -m saas_settings settings app/APP_NAME SAAS_BOOST_BUCKET
    python -m saas_settings options --region us-west-2
    python -m saas_settings tier-list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson
import yaml
from pydantic import BaseModel, ValidationError

from saas_settings.adapters.sqlite import (
    SettingsDatabase,
    SqliteCatalogStore,
    SqliteParameterStore,
    SqliteTierTable,
)
from saas_settings.config.engine import SettingsEngine
from saas_settings.config.errors import NotFoundError, SettingsError
from saas_settings.config.models import AppConfiguration, ServiceConfiguration, Tier
from saas_settings.config.namespace import ParameterNamespace
from saas_settings.config.tiers import TierStore
from saas_settings.runtime.logging import configure_logging
from saas_settings.runtime.settings import EngineSettings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class Session:
    engine: SettingsEngine
    tiers: TierStore


@asynccontextmanager
async def open_session(settings: EngineSettings) -> AsyncIterator[Session]:
    """Open the settings database and wire the engine and tier store to it."""
    database = SettingsDatabase(settings.db_path)
    await database.connect()
    try:
        engine = SettingsEngine(
            SqliteParameterStore(database, settings.master_key_base64),
            ParameterNamespace(settings.environment),
            catalog=SqliteCatalogStore(database),
            region=settings.region,
        )
        yield Session(engine=engine, tiers=TierStore(SqliteTierTable(database)))
    finally:
        await database.close()


def _load_document(path: Path) -> Any:
    text = path.read_text()
    if path.suffix in (".yml", ".yaml"):
        return yaml.safe_load(text)
    return orjson.loads(text)


def _emit(result: Any) -> None:
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json")
    elif isinstance(result, list):
        result = [item.model_dump(mode="json") if isinstance(item, BaseModel) else item for item in result]
    sys.stdout.write(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode() + "\n")


async def run_command(args: argparse.Namespace, session: Session) -> Any:
    engine = session.engine
    if args.command == "show":
        return await engine.get_app_configuration()
    if args.command == "apply":
        config = AppConfiguration.model_validate(_load_document(args.file))
        return await engine.set_app_configuration(config)
    if args.command == "apply-service":
        service = ServiceConfiguration.model_validate(_load_document(args.file))
        return await engine.set_service_configuration(service)
    if args.command == "delete":
        await engine.delete_app_configuration()
        return {"deleted": True}
    if args.command == "delete-service":
        config = await engine.get_app_configuration()
        return {"deleted": await engine.delete_service_configuration(config, args.name)}
    if args.command == "settings":
        return await engine.get_named_settings(args.names)
    if args.command == "options":
        return await engine.get_orderable_options(args.region)
    if args.command == "tier-get":
        return await session.tiers.get_tier(args.id)
    if args.command == "tier-list":
        return await session.tiers.list_tiers()
    if args.command == "tier-put":
        tier = Tier.model_validate(_load_document(args.file))
        if tier.id:
            return await session.tiers.update_tier(tier)
        return await session.tiers.create_tier(tier)
    if args.command == "tier-delete":
        await session.tiers.delete_tier(args.id)
        return {"deleted": args.id}
    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="saas_settings", description=__doc__.splitlines()[0])
    parser.add_argument("--db", type=Path, help="SQLite database path (default: SETTINGS_DB_PATH)")
    parser.add_argument("--env", help="Environment name (default: SAAS_BOOST_ENV)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL)")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("show", help="Print the application configuration")
    apply = commands.add_parser("apply", help="Write an application configuration (YAML or JSON)")
    apply.add_argument("file", type=Path)
    apply_service = commands.add_parser("apply-service", help="Write one service configuration")
    apply_service.add_argument("file", type=Path)
    commands.add_parser("delete", help="Delete the application configuration")
    delete_service = commands.add_parser("delete-service", help="Delete one service")
    delete_service.add_argument("name")
    named = commands.add_parser("settings", help="Look up settings by name")
    named.add_argument("names", nargs="+")
    options = commands.add_parser("options", help="List orderable database options")
    options.add_argument("--region")
    tier_get = commands.add_parser("tier-get", help="Print one tier")
    tier_get.add_argument("id")
    commands.add_parser("tier-list", help="List tiers")
    tier_put = commands.add_parser("tier-put", help="Create or update a tier (YAML or JSON)")
    tier_put.add_argument("file", type=Path)
    tier_delete = commands.add_parser("tier-delete", help="Delete a tier")
    tier_delete.add_argument("id")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.env:
        overrides["environment"] = args.env
    if args.log_level:
        overrides["log_level"] = args.log_level
    if getattr(args, "region", None):
        overrides["region"] = args.region

    try:
        settings = load_settings(**overrides)
    except ValidationError as e:
        sys.stderr.write(f"Invalid settings: {e}\n")
        return 2

    configure_logging(settings.log_level)

    async def _run() -> Any:
        async with open_session(settings) as session:
            return await run_command(args, session)

    try:
        _emit(asyncio.run(_run()))
    except NotFoundError as e:
        logger.error(str(e))
        return 1
    except (SettingsError, ValueError, RuntimeError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
