"""Shared pytest fixtures for saas-settings tests."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator
from unittest.mock import AsyncMock

import pytest

from saas_settings.adapters.sqlite import (
    SettingsDatabase,
    SqliteCatalogStore,
    SqliteParameterStore,
    SqliteTierTable,
)
from saas_settings.config.crypto import generate_master_key
from saas_settings.config.engine import SettingsEngine
from saas_settings.config.flattener import ConfigFlattener
from saas_settings.config.models import (
    AppConfiguration,
    BillingProvider,
    DatabaseConfiguration,
    FilesystemConfiguration,
    FsxSettings,
    ServiceConfiguration,
    ServiceTierConfiguration,
)
from saas_settings.config.namespace import ParameterNamespace
from saas_settings.config.tiers import TierStore
from saas_settings.config.types import ComputeSize, FilesystemType, OperatingSystem

ENVIRONMENT = "test"


@pytest.fixture
def namespace() -> ParameterNamespace:
    return ParameterNamespace(ENVIRONMENT)


@pytest.fixture
def flattener(namespace: ParameterNamespace) -> ConfigFlattener:
    return ConfigFlattener(namespace)


@pytest.fixture
def app_config() -> AppConfiguration:
    """Two services: 'api' (Linux, database + EFS on gold) and 'reports' (Windows, FSx)."""
    return AppConfiguration(
        name="acme",
        domain_name="acme.example.com",
        hosted_zone="Z0123456789ABC",
        ssl_certificate="arn:aws:acm:us-east-1:111122223333:certificate/abc",
        billing=BillingProvider(api_key="sk_test_123"),
        services={
            "api": ServiceConfiguration(
                name="api",
                description="Public API",
                path="/api/*",
                container_port=8080,
                container_repo="acme/api",
                health_check_url="/health",
                tiers={
                    "gold": ServiceTierConfiguration(
                        min_count=2,
                        max_count=6,
                        compute_size=ComputeSize.L,
                        database=DatabaseConfiguration(
                            engine="MYSQL",
                            version="8.0.28",
                            instance_class="t3.micro",
                            database_name="acme",
                            username="admin",
                            port=3306,
                            password="p@ss",
                        ),
                        filesystem=FilesystemConfiguration(
                            file_system_type=FilesystemType.EFS,
                            mount_point="/mnt/shared",
                        ),
                    ),
                    "free": ServiceTierConfiguration(compute_size=ComputeSize.S),
                },
            ),
            "reports": ServiceConfiguration(
                name="reports",
                public=False,
                container_port=80,
                operating_system=OperatingSystem.WIN_2019_FULL,
                tiers={
                    "gold": ServiceTierConfiguration(
                        cpu=1024,
                        memory=2048,
                        filesystem=FilesystemConfiguration(
                            file_system_type=FilesystemType.FSX,
                            mount_point="C:\\reports",
                            fsx=FsxSettings(storage_gb=64, throughput_mbs=16),
                        ),
                    ),
                },
            ),
        },
    )


@pytest.fixture
def mock_store() -> AsyncMock:
    """ParameterStore double: empty store that accepts every write.

    Configure return values or side effects per test.
    """
    store = AsyncMock()
    store.get_parameter.return_value = None
    store.get_parameters.return_value = []
    store.get_parameters_by_path.return_value = []

    async def put(parameter):
        return parameter.model_copy(update={"version": 1})

    store.put_parameter.side_effect = put
    store.delete_parameters.return_value = None
    return store


@pytest.fixture
def master_key() -> str:
    key, _ = generate_master_key()
    return key


@pytest.fixture
async def database(tmp_path: Path) -> AsyncIterator[SettingsDatabase]:
    """Temporary SQLite settings database."""
    db = SettingsDatabase(tmp_path / "settings.db")
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
def parameter_store(database: SettingsDatabase, master_key: str) -> SqliteParameterStore:
    return SqliteParameterStore(database, master_key)


@pytest.fixture
def catalog_store(database: SettingsDatabase) -> SqliteCatalogStore:
    return SqliteCatalogStore(database)


@pytest.fixture
def engine(
    parameter_store: SqliteParameterStore,
    catalog_store: SqliteCatalogStore,
    namespace: ParameterNamespace,
) -> SettingsEngine:
    return SettingsEngine(parameter_store, namespace, catalog=catalog_store, region="us-east-1")


@pytest.fixture
def tier_store(database: SettingsDatabase) -> TierStore:
    return TierStore(SqliteTierTable(database))
