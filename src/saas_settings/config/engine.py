"""Configuration persistence engine.

Reads and writes the application configuration graph against a parameter
store. Secure values are read in their encrypted representation; the secret
guard keeps an echoed encrypted value from being written back over the real
secret.

The engine holds no mutable state. All state lives in the injected store, and
concurrent updates are last-write-wins per parameter.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from saas_settings.config.errors import PartialWriteFailureError, SettingNotFoundError
from saas_settings.config.flattener import BILLING_API_KEY, ConfigFlattener
from saas_settings.config.models import (
    AppConfiguration,
    DatabaseOption,
    Parameter,
    ServiceConfiguration,
    SettingEntry,
)
from saas_settings.config.namespace import ParameterNamespace
from saas_settings.config.options import decode_option
from saas_settings.config.secret_guard import should_persist
from saas_settings.config.types import Decision
from saas_settings.domain import ports

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class SettingsEngine:
    """Get, set and delete application settings and configuration.

    Example:
        >>> database = SettingsDatabase("/data/settings.db")
        >>> await database.connect()
        >>> store = SqliteParameterStore(database, master_key)
        >>> engine = SettingsEngine(store, ParameterNamespace("production"))
        >>> config = await engine.get_app_configuration()
        >>> config.services["api"].tiers["gold"].min_count = 2
        >>> await engine.set_service_configuration(config.services["api"])
    """

    def __init__(
        self,
        store: ports.ParameterStore,
        namespace: ParameterNamespace,
        *,
        catalog: ports.CatalogStore | None = None,
        region: str | None = None,
    ):
        """Initialize engine.

        Args:
            store: Parameter store holding all settings
            namespace: Environment namespace the settings live under
            catalog: Orderable options catalog (optional)
            region: Default region for catalog queries
        """
        self.store = store
        self.namespace = namespace
        self.flattener = ConfigFlattener(namespace)
        self.catalog = catalog
        self.region = region

    # ===== Individual Settings =====

    async def get_all_settings(self) -> list[SettingEntry]:
        """All settings directly under the environment base (not recursive)."""
        parameters = await self._get_parameters_under(self.namespace.prefix, recursive=False)
        return [self.namespace.from_parameter(parameter) for parameter in parameters]

    async def get_app_config_settings(self) -> list[SettingEntry]:
        """All settings under ``app/``, recursively, secure values encrypted."""
        parameters = await self._get_parameters_under(self.namespace.app_prefix, recursive=True)
        return [self.namespace.from_app_parameter(parameter) for parameter in parameters]

    async def get_named_settings(self, names: Sequence[str]) -> list[SettingEntry]:
        """Batch lookup; names with no stored setting are left out of the result.

        Raises:
            InvalidNameError: If any name fails validation (no store call is made)
        """
        start = time.perf_counter()
        parameter_names = [self.namespace.parameter_name(name) for name in names]
        if not parameter_names:
            return []
        parameters = await self.store.get_parameters(parameter_names)
        settings = [self.namespace.from_parameter(parameter) for parameter in parameters]
        logger.info(
            f"get_named_settings found {len(settings)} of {len(parameter_names)} "
            f"in {_elapsed_ms(start)} ms"
        )
        return settings

    async def get_setting(self, name: str, decrypt: bool = False) -> SettingEntry | None:
        """Get one setting, or None if it is not stored.

        Raises:
            InvalidNameError: If the name fails validation
            NamespaceMismatchError: If the store returns a parameter outside this environment
        """
        parameter = await self.store.get_parameter(self.namespace.parameter_name(name), decrypt)
        if parameter is None:
            return None
        return self.namespace.from_parameter(parameter)

    async def get_secret(self, name: str) -> SettingEntry | None:
        """Get one setting with its secure value decrypted."""
        return await self.get_setting(name, decrypt=True)

    async def get_parameter_store_reference(self, name: str) -> str:
        """Versioned reference to a setting (``<full name>:<version>``).

        Raises:
            SettingNotFoundError: If the setting is not stored
        """
        setting = await self.get_setting(name)
        if setting is None:
            raise SettingNotFoundError(name)
        return f"{self.namespace.prefix}{setting.name}:{setting.version}"

    async def update_setting(self, entry: SettingEntry) -> SettingEntry:
        """Write one setting.

        Secure settings are returned in their stored encrypted form, never as
        the plaintext just written.
        """
        stored = await self.store.put_parameter(self.namespace.to_parameter(entry))
        updated = self.namespace.from_parameter(stored)
        if updated.secure:
            encrypted = await self.get_setting(updated.name)
            if encrypted is None:
                raise SettingNotFoundError(updated.name)
            updated = encrypted
        return updated

    # ===== Application Configuration =====

    async def get_app_configuration(self) -> AppConfiguration:
        """Read the whole application configuration.

        Secure values (billing key, database passwords) are returned encrypted.
        The billing provider is omitted unless a non-blank key is stored.
        """
        start = time.perf_counter()
        config = await self._inflate(await self.get_app_config_settings())
        logger.info(
            f"get_app_configuration loaded {len(config.services)} services "
            f"in {_elapsed_ms(start)} ms"
        )
        return config

    async def set_app_configuration(self, config: AppConfiguration) -> AppConfiguration:
        """Write the whole application configuration.

        Returns:
            The configuration as persisted, read back from the written entries

        Raises:
            InvalidNameError: If any entry name is invalid (nothing is written)
            PartialWriteFailureError: If a store call fails partway through
        """
        start = time.perf_counter()
        entries = self.flattener.app_config_to_entries(config)
        updated = await self._update_settings_and_secrets(entries, "set_app_configuration")
        persisted = await self._inflate(updated)
        logger.info(f"set_app_configuration wrote {len(entries)} entries in {_elapsed_ms(start)} ms")
        return persisted

    async def set_service_configuration(self, service: ServiceConfiguration) -> ServiceConfiguration:
        """Write one service's configuration without touching other services.

        Returns:
            The service as persisted
        """
        start = time.perf_counter()
        entries = self.flattener.service_config_to_entries(service)
        updated = await self._update_settings_and_secrets(entries, "set_service_configuration")
        persisted = self.flattener.from_entries(updated, billing_api_key_set=False)
        logger.info(
            f"set_service_configuration {service.name} wrote {len(entries)} entries "
            f"in {_elapsed_ms(start)} ms"
        )
        return persisted.services[service.name]

    async def delete_app_configuration(self) -> None:
        """Delete every service's entries, then the application-level entries.

        Raises:
            PartialWriteFailureError: If a delete call fails partway through
        """
        start = time.perf_counter()
        config = await self.get_app_configuration()

        batches = [
            self._service_parameter_names(config.services[service_name])
            for service_name in config.services
        ]
        batches.append(
            [
                self.namespace.parameter_name(entry.name)
                for entry in self.flattener.top_level_entries(config)
            ]
        )

        deleted: list[str] = []
        for index, names in enumerate(batches):
            try:
                await self.store.delete_parameters(names)
            except Exception as e:
                pending = [name for batch in batches[index:] for name in batch]
                raise PartialWriteFailureError("delete_app_configuration", deleted, pending) from e
            deleted.extend(names)

        logger.info(
            f"delete_app_configuration deleted {len(deleted)} parameters "
            f"in {_elapsed_ms(start)} ms"
        )

    async def delete_service_configuration(
        self, config: AppConfiguration, service_name: str
    ) -> list[str]:
        """Delete exactly the entries a write of this service would produce.

        Returns:
            Fully qualified names deleted (empty if the service is unknown)
        """
        service = config.services.get(service_name)
        if service is None:
            logger.warning(f"Service {service_name} not in configuration, nothing to delete")
            return []
        names = self._service_parameter_names(service)
        await self.store.delete_parameters(names)
        logger.info(f"Deleted {len(names)} parameters for service {service_name}")
        return names

    # ===== Orderable Options =====

    async def get_orderable_options(self, region: str | None = None) -> list[DatabaseOption]:
        """Database options orderable in a region, instances sorted for display.

        Raises:
            RuntimeError: If no catalog store is configured
            ValueError: If no region is given and no default is configured
        """
        if self.catalog is None:
            raise RuntimeError("No options catalog configured")
        region = region or self.region
        if not region:
            raise ValueError("Region is required for orderable options")
        items = await self.catalog.query_by_region(region)
        return [decode_option(item) for item in items]

    # ===== Internals =====

    async def _get_parameters_under(self, path: str, recursive: bool) -> list[Parameter]:
        start = time.perf_counter()
        parameters = await self.store.get_parameters_by_path(path, recursive=recursive, decrypt=False)
        logger.info(f"Loaded {len(parameters)} parameters under {path} in {_elapsed_ms(start)} ms")
        return parameters

    async def _inflate(self, entries: Sequence[SettingEntry]) -> AppConfiguration:
        # Decide from the decrypted key: the encrypted empty sentinel is never blank
        billing = await self.get_secret(BILLING_API_KEY)
        billing_api_key_set = billing is not None and bool(billing.value.strip())
        return self.flattener.from_entries(entries, billing_api_key_set=billing_api_key_set)

    def _service_parameter_names(self, service: ServiceConfiguration) -> list[str]:
        return [
            self.namespace.parameter_name(entry.name)
            for entry in self.flattener.service_config_to_entries(service)
        ]

    async def _update_settings_and_secrets(
        self, entries: Sequence[SettingEntry], operation: str
    ) -> list[SettingEntry]:
        # Validate every name before the first write
        for entry in entries:
            self.namespace.parameter_name(entry.name)

        updated: list[SettingEntry] = []
        confirmed: list[str] = []
        for index, entry in enumerate(entries):
            try:
                if entry.secure:
                    existing = await self.get_setting(entry.name)
                    if should_persist(entry, existing) is Decision.SKIP:
                        updated.append(existing)
                        confirmed.append(entry.name)
                        continue
                logger.info(f"Updating setting {entry.name}")
                updated.append(await self.update_setting(entry))
                confirmed.append(entry.name)
            except Exception as e:
                pending = [pending_entry.name for pending_entry in entries[index:]]
                raise PartialWriteFailureError(operation, confirmed, pending) from e
        return updated
