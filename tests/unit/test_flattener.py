"""Tests for flattening the application configuration to setting entries."""

from __future__ import annotations

import orjson
import pytest

from saas_settings.config.errors import InvalidNameError, SchemaVersionError
from saas_settings.config.flattener import (
    BILLING_API_KEY,
    ENCRYPTED_PASSWORD_MARKER,
    SERVICE_SCHEMA_VERSION,
    ConfigFlattener,
    db_password_name,
    decode_service,
    encode_service,
    is_service_json_name,
    service_json_name,
)
from saas_settings.config.models import AppConfiguration, ServiceConfiguration, SettingEntry
from saas_settings.config.types import FilesystemType


def _by_name(entries: list[SettingEntry]) -> dict[str, SettingEntry]:
    return {entry.name: entry for entry in entries}


def _with_password_params(config: AppConfiguration, flattener: ConfigFlattener) -> AppConfiguration:
    """Expected inflation result: every database tier points at its password entry."""
    services = {}
    for service_name, service in config.services.items():
        tiers = {}
        for tier_name, tier in service.tiers.items():
            if tier.has_database:
                param = flattener.namespace.parameter_name(db_password_name(service_name, tier_name))
                tier = tier.model_copy(
                    update={"database": tier.database.model_copy(update={"password_param": param})}
                )
            tiers[tier_name] = tier
        services[service_name] = service.model_copy(update={"tiers": tiers})
    return config.model_copy(update={"services": services})


class TestNames:
    def test_entry_names(self):
        assert service_json_name("api") == "app/api/SERVICE_JSON"
        assert db_password_name("api", "gold") == "app/api/gold/DB_MASTER_PASSWORD"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("app/api/SERVICE_JSON", True),
            ("app/SERVICE_JSON", False),
            ("app/api/gold/SERVICE_JSON", False),
            ("api/SERVICE_JSON", False),
            ("app/api/gold/DB_MASTER_PASSWORD", False),
        ],
    )
    def test_is_service_json_name(self, name, expected):
        assert is_service_json_name(name) is expected


class TestAppConfigToEntries:
    def test_layout(self, flattener, app_config):
        entries = flattener.app_config_to_entries(app_config)
        names = [entry.name for entry in entries]

        assert names == [
            "app/APP_NAME",
            "app/DOMAIN_NAME",
            "app/HOSTED_ZONE",
            "app/SSL_CERT_ARN",
            "app/api/gold/DB_MASTER_PASSWORD",
            "app/api/SERVICE_JSON",
            "app/reports/SERVICE_JSON",
            "app/BILLING_API_KEY",
        ]

        by_name = _by_name(entries)
        assert by_name["app/APP_NAME"].value == "acme"
        assert by_name["app/SSL_CERT_ARN"].value == app_config.ssl_certificate
        assert by_name["app/api/gold/DB_MASTER_PASSWORD"].secure
        assert by_name["app/api/gold/DB_MASTER_PASSWORD"].value == "p@ss"
        assert by_name[BILLING_API_KEY].secure
        assert by_name[BILLING_API_KEY].value == "sk_test_123"
        assert not by_name["app/api/SERVICE_JSON"].secure

    def test_service_document_never_contains_password(self, flattener, app_config):
        document_entry = _by_name(flattener.app_config_to_entries(app_config))["app/api/SERVICE_JSON"]

        assert "p@ss" not in document_entry.value
        document = orjson.loads(document_entry.value)
        database = document["tiers"]["gold"]["database"]
        assert database["password"] == ENCRYPTED_PASSWORD_MARKER
        assert database["password_param"] == "/saas-boost/test/app/api/gold/DB_MASTER_PASSWORD"
        assert document["schema_version"] == SERVICE_SCHEMA_VERSION

    def test_input_is_not_modified(self, flattener, app_config):
        flattener.app_config_to_entries(app_config)
        assert app_config.services["api"].tiers["gold"].database.password == "p@ss"
        assert app_config.services["api"].tiers["gold"].database.password_param is None

    def test_billing_entry_written_when_billing_absent(self, flattener, app_config):
        config = app_config.model_copy(update={"billing": None})
        billing = _by_name(flattener.app_config_to_entries(config))[BILLING_API_KEY]
        assert billing.secure
        assert billing.value == ""

    def test_empty_configuration(self, flattener):
        entries = flattener.app_config_to_entries(AppConfiguration())
        assert [entry.name for entry in entries] == [
            "app/APP_NAME",
            "app/DOMAIN_NAME",
            "app/HOSTED_ZONE",
            "app/SSL_CERT_ARN",
            "app/BILLING_API_KEY",
        ]
        assert all(entry.value == "" for entry in entries)


class TestServiceConfigToEntries:
    @pytest.mark.parametrize("name", ["api/extra", ""])
    def test_renamed_service_must_stay_one_segment(self, flattener, app_config, name):
        service = app_config.services["api"]
        service.name = name

        with pytest.raises(InvalidNameError):
            flattener.service_config_to_entries(service)
        with pytest.raises(InvalidNameError):
            flattener.app_config_to_entries(app_config)

    def test_added_tier_must_stay_one_segment(self, flattener, app_config):
        service = app_config.services["api"]
        service.tiers["gold/eu"] = service.tiers.pop("gold")

        with pytest.raises(InvalidNameError):
            flattener.service_config_to_entries(service)

    def test_only_database_tiers_get_password_entries(self, flattener, app_config):
        entries = flattener.service_config_to_entries(app_config.services["reports"])
        assert [entry.name for entry in entries] == ["app/reports/SERVICE_JSON"]

    def test_only_declared_filesystem_variant_serialized(self, flattener, app_config):
        entry = flattener.service_config_to_entries(app_config.services["reports"])[0]
        filesystem = orjson.loads(entry.value)["tiers"]["gold"]["filesystem"]
        assert filesystem["file_system_type"] == FilesystemType.FSX.value
        assert filesystem["efs"] is None
        assert filesystem["fsx"]["storage_gb"] == 64


class TestFromEntries:
    def test_round_trip(self, flattener, app_config):
        inflated = flattener.from_entries(flattener.app_config_to_entries(app_config))
        assert inflated == _with_password_params(app_config, flattener)

    def test_round_trip_is_stable(self, flattener, app_config):
        once = flattener.from_entries(flattener.app_config_to_entries(app_config))
        twice = flattener.from_entries(flattener.app_config_to_entries(once))
        assert twice == once

    def test_missing_password_entry_reads_as_empty(self, flattener, app_config):
        entries = [
            entry
            for entry in flattener.app_config_to_entries(app_config)
            if entry.name != "app/api/gold/DB_MASTER_PASSWORD"
        ]
        inflated = flattener.from_entries(entries)
        database = inflated.services["api"].tiers["gold"].database
        assert database.password == ""
        assert database.password_param == "/saas-boost/test/app/api/gold/DB_MASTER_PASSWORD"

    def test_blank_billing_key_means_no_billing(self, flattener, app_config):
        config = app_config.model_copy(update={"billing": None})
        assert flattener.from_entries(flattener.app_config_to_entries(config)).billing is None

    def test_explicit_billing_decision_wins(self, flattener, app_config):
        entries = flattener.app_config_to_entries(app_config)
        assert flattener.from_entries(entries, billing_api_key_set=False).billing is None

    def test_ignores_entries_outside_layout(self, flattener):
        entries = [
            SettingEntry(name="app/APP_NAME", value="acme"),
            SettingEntry(name="app/api/gold/EXTRA", value="x"),
        ]
        config = flattener.from_entries(entries)
        assert config.name == "acme"
        assert config.services == {}


class TestServiceDocument:
    def test_untagged_document_reads_as_version_one(self):
        raw = orjson.dumps({"name": "api"}).decode()
        assert decode_service("app/api/SERVICE_JSON", raw) == ServiceConfiguration(name="api")

    def test_newer_document_rejected(self):
        raw = orjson.dumps({"schema_version": SERVICE_SCHEMA_VERSION + 1, "name": "api"}).decode()
        with pytest.raises(SchemaVersionError) as exc_info:
            decode_service("app/api/SERVICE_JSON", raw)
        assert exc_info.value.found == SERVICE_SCHEMA_VERSION + 1

    def test_encode_tags_version(self):
        document = orjson.loads(encode_service(ServiceConfiguration(name="api")))
        assert document["schema_version"] == SERVICE_SCHEMA_VERSION
        assert document["name"] == "api"
