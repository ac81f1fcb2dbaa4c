"""Tests for parameter naming and the empty-value sentinel."""

from __future__ import annotations

import pytest

from saas_settings.config.errors import InvalidNameError, NamespaceMismatchError
from saas_settings.config.models import Parameter, SettingEntry
from saas_settings.config.namespace import EMPTY_SENTINEL, ParameterNamespace
from saas_settings.config.types import ParameterType
from saas_settings.config.validators import is_valid_setting_name


class TestParameterNames:
    def test_prefix_layout(self, namespace: ParameterNamespace):
        assert namespace.prefix == "/saas-boost/test/"
        assert namespace.app_prefix == "/saas-boost/test/app/"
        assert namespace.parameter_name("app/api/SERVICE_JSON") == "/saas-boost/test/app/api/SERVICE_JSON"

    @pytest.mark.parametrize(
        "name",
        ["", "/app/APP_NAME", "app/APP_NAME/", "app//APP_NAME", "app/APP NAME", "app/$HOME"],
    )
    def test_invalid_names_rejected(self, namespace: ParameterNamespace, name: str):
        assert not is_valid_setting_name(name)
        with pytest.raises(InvalidNameError):
            namespace.parameter_name(name)

    def test_none_name_rejected(self, namespace: ParameterNamespace):
        with pytest.raises(InvalidNameError):
            namespace.to_parameter(SettingEntry.model_construct(name=None, value="x", secure=False))

    @pytest.mark.parametrize("environment", ["", "  ", "prod/eu"])
    def test_invalid_environment(self, environment: str):
        with pytest.raises(ValueError):
            ParameterNamespace(environment)


class TestToParameter:
    def test_empty_value_written_as_sentinel(self, namespace: ParameterNamespace):
        parameter = namespace.to_parameter(SettingEntry(name="app/HOSTED_ZONE", value=""))
        assert parameter.value == EMPTY_SENTINEL
        assert parameter.type is ParameterType.STRING

    def test_secure_entry_becomes_secure_string(self, namespace: ParameterNamespace):
        parameter = namespace.to_parameter(
            SettingEntry(name="app/BILLING_API_KEY", value="sk", secure=True)
        )
        assert parameter.type is ParameterType.SECURE_STRING
        assert parameter.value == "sk"


class TestFromParameter:
    def test_sentinel_read_back_as_empty(self, namespace: ParameterNamespace):
        entry = namespace.from_parameter(
            Parameter(name="/saas-boost/test/app/HOSTED_ZONE", value=EMPTY_SENTINEL, version=3)
        )
        assert entry.name == "app/HOSTED_ZONE"
        assert entry.value == ""
        assert entry.version == 3

    def test_read_only_follows_allow_list(self, namespace: ParameterNamespace):
        bucket = namespace.from_parameter(
            Parameter(name="/saas-boost/test/SAAS_BOOST_BUCKET", value="bucket")
        )
        domain = namespace.from_parameter(
            Parameter(name="/saas-boost/test/DOMAIN_NAME", value="acme.example.com")
        )
        app_setting = namespace.from_parameter(
            Parameter(name="/saas-boost/test/app/APP_NAME", value="acme")
        )
        assert bucket.read_only
        assert not domain.read_only
        assert not app_setting.read_only

    def test_secure_flag_from_type(self, namespace: ParameterNamespace):
        entry = namespace.from_parameter(
            Parameter(
                name="/saas-boost/test/app/BILLING_API_KEY",
                value="AQICAH...",
                type=ParameterType.SECURE_STRING,
            )
        )
        assert entry.secure

    def test_other_environment_rejected(self, namespace: ParameterNamespace):
        with pytest.raises(NamespaceMismatchError) as exc_info:
            namespace.from_parameter(Parameter(name="/saas-boost/prod/APP_NAME", value="x"))
        assert exc_info.value.parameter_name == "/saas-boost/prod/APP_NAME"

    def test_app_parameter_outside_app_rejected(self, namespace: ParameterNamespace):
        with pytest.raises(NamespaceMismatchError):
            namespace.from_app_parameter(Parameter(name="/saas-boost/test/SAAS_BOOST_BUCKET", value="x"))

    def test_app_parameter_keeps_app_prefix(self, namespace: ParameterNamespace):
        entry = namespace.from_app_parameter(
            Parameter(name="/saas-boost/test/app/api/gold/DB_MASTER_PASSWORD", value="x")
        )
        assert entry.name == "app/api/gold/DB_MASTER_PASSWORD"
        assert not entry.read_only
