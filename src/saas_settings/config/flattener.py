"""Flatten the application configuration graph to setting entries and back.

Layout under the ``app/`` base path::

    app/APP_NAME, app/DOMAIN_NAME, app/HOSTED_ZONE, app/SSL_CERT_ARN
    app/BILLING_API_KEY                         (secure, always written)
    app/<service>/SERVICE_JSON                  (one JSON document per service)
    app/<service>/<tier>/DB_MASTER_PASSWORD     (secure, one per tier with a database)

The service document never carries a real database password: each tier's
password is replaced by ``**encrypted**`` and ``password_param`` points at the
dedicated password entry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import orjson

from saas_settings.config.errors import SchemaVersionError
from saas_settings.config.models import (
    AppConfiguration,
    BillingProvider,
    ServiceConfiguration,
    ServiceTierConfiguration,
    SettingEntry,
)
from saas_settings.config.namespace import APP_BASE_PATH, ParameterNamespace
from saas_settings.config.validators import validate_name_segment

logger = logging.getLogger(__name__)

APP_NAME = APP_BASE_PATH + "APP_NAME"
DOMAIN_NAME = APP_BASE_PATH + "DOMAIN_NAME"
HOSTED_ZONE = APP_BASE_PATH + "HOSTED_ZONE"
SSL_CERT_ARN = APP_BASE_PATH + "SSL_CERT_ARN"
BILLING_API_KEY = APP_BASE_PATH + "BILLING_API_KEY"

SERVICE_JSON = "SERVICE_JSON"
DB_MASTER_PASSWORD = "DB_MASTER_PASSWORD"

ENCRYPTED_PASSWORD_MARKER = "**encrypted**"

# Bump when the service document layout changes; older documents stay readable
SERVICE_SCHEMA_VERSION = 1
SCHEMA_VERSION_KEY = "schema_version"


def service_json_name(service_name: str) -> str:
    return f"{APP_BASE_PATH}{service_name}/{SERVICE_JSON}"


def db_password_name(service_name: str, tier_name: str) -> str:
    return f"{APP_BASE_PATH}{service_name}/{tier_name}/{DB_MASTER_PASSWORD}"


def is_service_json_name(setting_name: str) -> bool:
    """True for ``app/<service>/SERVICE_JSON`` (exactly one separator below app/)."""
    if not setting_name.startswith(APP_BASE_PATH):
        return False
    relative = setting_name[len(APP_BASE_PATH):]
    return relative.count("/") == 1 and relative.endswith("/" + SERVICE_JSON)


def encode_service(service: ServiceConfiguration) -> str:
    """Serialize a service to its tagged JSON document."""
    document = {SCHEMA_VERSION_KEY: SERVICE_SCHEMA_VERSION}
    document.update(service.model_dump(mode="json"))
    return orjson.dumps(document).decode()


def decode_service(setting_name: str, raw: str) -> ServiceConfiguration:
    """Parse a service JSON document.

    Untagged documents are read as version 1.

    Raises:
        SchemaVersionError: If the document is newer than this code understands
        pydantic.ValidationError: If the document does not match the schema
    """
    document = orjson.loads(raw)
    version = document.pop(SCHEMA_VERSION_KEY, 1)
    if not isinstance(version, int) or not 1 <= version <= SERVICE_SCHEMA_VERSION:
        raise SchemaVersionError(setting_name, version, SERVICE_SCHEMA_VERSION)
    return ServiceConfiguration.model_validate(document)


class ConfigFlattener:
    """Bidirectional mapping between AppConfiguration and setting entries."""

    def __init__(self, namespace: ParameterNamespace):
        self.namespace = namespace

    def top_level_entries(self, config: AppConfiguration) -> list[SettingEntry]:
        """Entries for the application scalars and billing key, without services."""
        entries = [
            SettingEntry(name=APP_NAME, value=config.name),
            SettingEntry(name=DOMAIN_NAME, value=config.domain_name),
            SettingEntry(name=HOSTED_ZONE, value=config.hosted_zone),
            SettingEntry(name=SSL_CERT_ARN, value=config.ssl_certificate),
        ]
        entries.append(self._billing_entry(config))
        return entries

    def app_config_to_entries(self, config: AppConfiguration) -> list[SettingEntry]:
        """Flatten a whole application configuration.

        Order: application scalars, then each service's entries, then the
        billing key.
        """
        top_level = self.top_level_entries(config)
        entries = top_level[:-1]
        for service in config.services.values():
            entries.extend(self.service_config_to_entries(service))
        entries.append(top_level[-1])
        return entries

    def service_config_to_entries(self, service: ServiceConfiguration) -> list[SettingEntry]:
        """Flatten one service: a password entry per database tier, then the document.

        Raises:
            InvalidNameError: If the service or a tier name is not a single
                path segment
        """
        validate_name_segment(service.name)
        for tier_name in service.tiers:
            validate_name_segment(tier_name)

        entries: list[SettingEntry] = []
        redacted_tiers: dict[str, ServiceTierConfiguration] = {}

        for tier_name, tier in service.tiers.items():
            if not tier.has_database:
                redacted_tiers[tier_name] = tier
                continue

            password_entry = SettingEntry(
                name=db_password_name(service.name, tier_name),
                value=tier.database.password,
                secure=True,
            )
            entries.append(password_entry)

            database = tier.database.model_copy(
                update={
                    "password": ENCRYPTED_PASSWORD_MARKER,
                    "password_param": self.namespace.parameter_name(password_entry.name),
                }
            )
            redacted_tiers[tier_name] = tier.model_copy(update={"database": database})

        redacted = service.model_copy(update={"tiers": redacted_tiers})
        entries.append(
            SettingEntry(name=service_json_name(service.name), value=encode_service(redacted))
        )
        return entries

    def from_entries(
        self,
        entries: Iterable[SettingEntry],
        *,
        billing_api_key_set: bool | None = None,
    ) -> AppConfiguration:
        """Inflate setting entries into an application configuration.

        Args:
            entries: Entries under the ``app/`` base path
            billing_api_key_set: Whether a real billing key is stored. When None,
                the billing entry's own value decides (non-blank means present).
                Callers holding encrypted values must decide from the decrypted
                secret instead.

        Returns:
            Inflated configuration. A database tier with no stored password
            entry gets an empty password.
        """
        entries = list(entries)
        values: dict[str, str] = {entry.name: entry.value for entry in entries}

        if billing_api_key_set is None:
            billing_api_key_set = bool(values.get(BILLING_API_KEY, "").strip())
        billing = None
        if billing_api_key_set:
            billing = BillingProvider(api_key=values.get(BILLING_API_KEY, ""))

        services: dict[str, ServiceConfiguration] = {}
        for entry in entries:
            if not is_service_json_name(entry.name):
                continue
            service = decode_service(entry.name, entry.value)
            services[service.name] = self._restore_passwords(service, values)

        return AppConfiguration(
            name=values.get(APP_NAME, ""),
            domain_name=values.get(DOMAIN_NAME, ""),
            hosted_zone=values.get(HOSTED_ZONE, ""),
            ssl_certificate=values.get(SSL_CERT_ARN, ""),
            billing=billing,
            services=services,
        )

    def _restore_passwords(
        self, service: ServiceConfiguration, values: Mapping[str, str]
    ) -> ServiceConfiguration:
        tiers: dict[str, ServiceTierConfiguration] = {}
        for tier_name, tier in service.tiers.items():
            if tier.has_database:
                name = db_password_name(service.name, tier_name)
                if name not in values:
                    logger.debug(f"No stored password for {name}, using empty password")
                database = tier.database.model_copy(update={"password": values.get(name, "")})
                tier = tier.model_copy(update={"database": database})
            tiers[tier_name] = tier
        return service.model_copy(update={"tiers": tiers})

    @staticmethod
    def _billing_entry(config: AppConfiguration) -> SettingEntry:
        # Written even when billing is absent so any prior key is cleared
        api_key = config.billing.api_key if config.billing is not None else ""
        return SettingEntry(name=BILLING_API_KEY, value=api_key, secure=True)
