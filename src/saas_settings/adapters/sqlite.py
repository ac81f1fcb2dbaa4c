"""SQLite-backed implementations of the store ports.

Provides:
- SettingsDatabase: shared aiosqlite connection (WAL mode) and schema
- SqliteParameterStore: versioned parameters, SecureString values encrypted at rest
- SqliteCatalogStore: orderable options catalog keyed by region and engine
- SqliteTierTable: keyed tier items
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import orjson

from saas_settings.config.attributes import AttributeMap, string_value
from saas_settings.config.crypto import decrypt_secret_async, encrypt_secret_async
from saas_settings.config.models import Parameter
from saas_settings.config.types import ParameterType

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Flat, versioned parameters (full path names)
CREATE TABLE IF NOT EXISTS parameters (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    type TEXT NOT NULL,
    version INTEGER NOT NULL,
    updated_at TEXT NOT NULL
);

-- Orderable database options, one raw record per region and engine
CREATE TABLE IF NOT EXISTS orderable_options (
    region TEXT NOT NULL,
    engine TEXT NOT NULL,
    item_json TEXT NOT NULL,
    PRIMARY KEY (region, engine)
);

-- Tier catalog items
CREATE TABLE IF NOT EXISTS tiers (
    id TEXT PRIMARY KEY,
    item_json TEXT NOT NULL
);
"""


class SettingsDatabase:
    """Async SQLite connection shared by the store adapters."""

    def __init__(self, db_path: str | Path):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Connect to database, enable WAL mode and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(str(self.db_path))
        # Enable WAL mode for concurrent reads
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA synchronous=NORMAL")
        await self._conn.execute("PRAGMA busy_timeout=5000")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Database not connected")
        return self._conn


def _placeholders(count: int) -> str:
    return ",".join("?" for _ in range(count))


class SqliteParameterStore:
    """Parameter store on SQLite.

    SecureString values are encrypted with the master key (the parameter name
    is bound as associated data) and only decrypted when a read asks for it.
    """

    def __init__(self, database: SettingsDatabase, master_key_base64: str | None = None):
        self.database = database
        self.master_key_base64 = master_key_base64

    async def get_parameter(self, name: str, decrypt: bool = False) -> Parameter | None:
        async with self.database.connection.execute(
            "SELECT name, value, type, version FROM parameters WHERE name = ?", (name,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return await self._to_parameter(row, decrypt)

    async def get_parameters(self, names: Sequence[str]) -> list[Parameter]:
        """Existing parameters among names, in the order requested; values not decrypted."""
        if not names:
            return []
        async with self.database.connection.execute(
            f"SELECT name, value, type, version FROM parameters WHERE name IN ({_placeholders(len(names))})",
            tuple(names),
        ) as cursor:
            rows = {row[0]: row for row in await cursor.fetchall()}
        return [await self._to_parameter(rows[name], False) for name in names if name in rows]

    async def get_parameters_by_path(
        self, path: str, recursive: bool = True, decrypt: bool = False
    ) -> list[Parameter]:
        """Parameters under a path prefix.

        Non-recursive reads return only names with no further separator below
        the path.
        """
        if not path.endswith("/"):
            path += "/"
        async with self.database.connection.execute(
            "SELECT name, value, type, version FROM parameters "
            "WHERE substr(name, 1, ?) = ? ORDER BY name",
            (len(path), path),
        ) as cursor:
            rows = await cursor.fetchall()
        if not recursive:
            rows = [row for row in rows if "/" not in row[0][len(path):]]
        return [await self._to_parameter(row, decrypt) for row in rows]

    async def put_parameter(self, parameter: Parameter) -> Parameter:
        """Create or overwrite a parameter, bumping its version.

        Returns:
            The parameter with its newly assigned version

        Raises:
            ValueError: If the value is empty
            RuntimeError: If a SecureString is written without a master key
        """
        if not parameter.value:
            raise ValueError(f"Parameter {parameter.name} value must not be empty")

        stored_value = parameter.value
        if parameter.secure:
            if not self.master_key_base64:
                raise RuntimeError("No master key configured for secure parameters")
            stored_value = await encrypt_secret_async(
                parameter.value, self.master_key_base64, parameter.name
            )

        conn = self.database.connection
        # Version is assigned in the same statement as the write
        async with conn.execute(
            """
            INSERT INTO parameters (name, value, type, version, updated_at)
            VALUES (?, ?, ?, 1, ?)
            ON CONFLICT(name) DO UPDATE SET
                value = excluded.value,
                type = excluded.type,
                version = parameters.version + 1,
                updated_at = excluded.updated_at
            RETURNING version
            """,
            (
                parameter.name,
                stored_value,
                parameter.type.value,
                datetime.now(UTC).isoformat(),
            ),
        ) as cursor:
            row = await cursor.fetchone()
        await conn.commit()
        return parameter.model_copy(update={"version": row[0]})

    async def delete_parameters(self, names: Sequence[str]) -> None:
        """Delete parameters; names that do not exist are ignored."""
        if not names:
            return
        conn = self.database.connection
        await conn.execute(
            f"DELETE FROM parameters WHERE name IN ({_placeholders(len(names))})", tuple(names)
        )
        await conn.commit()

    async def _to_parameter(self, row: Sequence, decrypt: bool) -> Parameter:
        name, value, type_, version = row
        parameter_type = ParameterType(type_)
        if decrypt and parameter_type is ParameterType.SECURE_STRING:
            if not self.master_key_base64:
                raise RuntimeError("No master key configured for secure parameters")
            value = await decrypt_secret_async(value, self.master_key_base64, name)
        return Parameter(name=name, value=value, type=parameter_type, version=version)


class SqliteCatalogStore:
    """Orderable options catalog on SQLite."""

    def __init__(self, database: SettingsDatabase):
        self.database = database

    async def query_by_region(self, region: str) -> list[AttributeMap]:
        async with self.database.connection.execute(
            "SELECT item_json FROM orderable_options WHERE region = ? ORDER BY engine", (region,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [orjson.loads(row[0]) for row in rows]

    async def put_option(self, item: AttributeMap) -> None:
        """Store one raw catalog record (keyed by its region and engine attributes)."""
        region = string_value(item.get("region"))
        engine = string_value(item.get("engine"))
        if not region or not engine:
            raise ValueError("Catalog record requires region and engine attributes")
        conn = self.database.connection
        await conn.execute(
            "INSERT OR REPLACE INTO orderable_options (region, engine, item_json) VALUES (?, ?, ?)",
            (region, engine, orjson.dumps(item).decode()),
        )
        await conn.commit()


class SqliteTierTable:
    """Tier items on SQLite, keyed by the ``id`` string attribute.

    Every read is consistent; ``consistent_read`` is accepted for interface
    compatibility.
    """

    key_attribute = "id"

    def __init__(self, database: SettingsDatabase):
        self.database = database

    def _key(self, key: AttributeMap) -> str:
        tier_id = string_value(key.get(self.key_attribute))
        if not tier_id:
            raise ValueError(f"Key must contain a non-empty '{self.key_attribute}' attribute")
        return tier_id

    async def get_item(self, key: AttributeMap, consistent_read: bool = False) -> AttributeMap | None:
        async with self.database.connection.execute(
            "SELECT item_json FROM tiers WHERE id = ?", (self._key(key),)
        ) as cursor:
            row = await cursor.fetchone()
        return orjson.loads(row[0]) if row else None

    async def put_item(self, item: AttributeMap) -> None:
        conn = self.database.connection
        await conn.execute(
            "INSERT OR REPLACE INTO tiers (id, item_json) VALUES (?, ?)",
            (self._key(item), orjson.dumps(item).decode()),
        )
        await conn.commit()

    async def update_item(
        self,
        key: AttributeMap,
        update_expression: str,
        attribute_names: Mapping[str, str],
        attribute_values: AttributeMap,
    ) -> AttributeMap:
        """Apply ``SET #attr=:attr`` assignments and return the updated item."""
        if not update_expression.startswith("SET "):
            raise ValueError(f"Unsupported update expression: {update_expression}")
        item = await self.get_item(key) or dict(key)
        for name_placeholder, attribute in attribute_names.items():
            item[attribute] = attribute_values[":" + name_placeholder.lstrip("#")]
        await self.put_item(item)
        return item

    async def delete_item(self, key: AttributeMap) -> None:
        conn = self.database.connection
        await conn.execute("DELETE FROM tiers WHERE id = ?", (self._key(key),))
        await conn.commit()

    async def scan(self) -> list[AttributeMap]:
        async with self.database.connection.execute("SELECT item_json FROM tiers") as cursor:
            rows = await cursor.fetchall()
        return [orjson.loads(row[0]) for row in rows]
