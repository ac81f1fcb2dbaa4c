"""Environment-scoped naming for settings store parameters.

Every setting lives under ``/<product>/<environment>/``; application
configuration lives one level further down under ``app/``::

    /saas-boost/production/SAAS_BOOST_BUCKET
    /saas-boost/test/app/APP_NAME
    /saas-boost/test/app/myService/SERVICE_JSON
    /saas-boost/test/app/myService/gold/DB_MASTER_PASSWORD
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from saas_settings.config.errors import NamespaceMismatchError
from saas_settings.config.models import Parameter, SettingEntry
from saas_settings.config.types import ParameterType
from saas_settings.config.validators import validate_setting_name

PRODUCT_PREFIX = "saas-boost"
APP_BASE_PATH = "app/"

# Stored in place of an empty value; never surfaced to callers
EMPTY_SENTINEL = "N/A"

READ_WRITE_SETTINGS: frozenset[str] = frozenset(
    {
        "DOMAIN_NAME",
        "HOSTED_ZONE",
        "SSL_CERT_ARN",
        "APP_NAME",
        "BILLING_API_KEY",
        "METRICS_STREAM",
        "CLUSTER_OS",
    }
)


class ParameterNamespace:
    """Translates between setting entries and fully qualified parameters."""

    def __init__(
        self,
        environment: str,
        *,
        product: str = PRODUCT_PREFIX,
        read_write_settings: Iterable[str] = READ_WRITE_SETTINGS,
    ):
        """Initialize namespace.

        Args:
            environment: Environment name scoping every parameter
            product: Top-level product prefix
            read_write_settings: Names outside ``app/`` that callers may write

        Raises:
            ValueError: If environment is blank or contains a separator
        """
        if not environment or not environment.strip():
            raise ValueError("Environment name is required")
        if "/" in environment:
            raise ValueError(f"Environment name '{environment}' must not contain '/'")

        self.environment = environment
        self.prefix = f"/{product}/{environment}/"
        self.app_prefix = self.prefix + APP_BASE_PATH
        self.read_write_settings = frozenset(read_write_settings)
        self.parameter_pattern = re.compile("^" + re.escape(self.prefix) + "(.+)$")
        self.app_pattern = re.compile("^" + re.escape(self.app_prefix) + "(.+)$")

    def parameter_name(self, setting_name: str) -> str:
        """Fully qualified parameter name for a setting.

        Raises:
            InvalidNameError: If the setting name fails validation
        """
        return self.prefix + validate_setting_name(setting_name)

    def is_read_only(self, setting_name: str) -> bool:
        if setting_name.startswith(APP_BASE_PATH):
            return False
        return setting_name not in self.read_write_settings

    def to_parameter(self, entry: SettingEntry) -> Parameter:
        """Convert a setting entry to a store parameter.

        Raises:
            InvalidNameError: If the entry name fails validation
        """
        return Parameter(
            name=self.parameter_name(entry.name),
            value=entry.value or EMPTY_SENTINEL,
            type=ParameterType.SECURE_STRING if entry.secure else ParameterType.STRING,
        )

    def from_parameter(self, parameter: Parameter) -> SettingEntry:
        """Convert a store parameter under the environment base to an entry.

        Raises:
            NamespaceMismatchError: If the parameter is outside this environment
        """
        match = self.parameter_pattern.match(parameter.name)
        if match is None:
            raise NamespaceMismatchError(parameter.name, self.parameter_pattern.pattern)
        setting_name = match.group(1)
        return SettingEntry(
            name=setting_name,
            value=_unwrap(parameter.value),
            read_only=self.is_read_only(setting_name),
            secure=parameter.secure,
            version=parameter.version,
        )

    def from_app_parameter(self, parameter: Parameter) -> SettingEntry:
        """Convert a store parameter under the ``app/`` base to an entry.

        Raises:
            NamespaceMismatchError: If the parameter is outside ``app/``
        """
        match = self.app_pattern.match(parameter.name)
        if match is None:
            raise NamespaceMismatchError(parameter.name, self.app_pattern.pattern)
        return SettingEntry(
            name=APP_BASE_PATH + match.group(1),
            value=_unwrap(parameter.value),
            read_only=False,
            secure=parameter.secure,
            version=parameter.version,
        )


def _unwrap(value: str) -> str:
    return "" if value == EMPTY_SENTINEL else value
