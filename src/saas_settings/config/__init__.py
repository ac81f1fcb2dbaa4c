"""Settings persistence core.

This module provides:
- Typed configuration graph and setting entry models
- Flattening of the graph to environment-scoped parameters and back
- Secret guard for echoed encrypted values
- The persistence engine and the tier catalog store
"""

from saas_settings.config.engine import SettingsEngine
from saas_settings.config.errors import (
    InvalidNameError,
    NamespaceMismatchError,
    NotFoundError,
    PartialWriteFailureError,
    SchemaVersionError,
    SettingNotFoundError,
    SettingsError,
    TierNotFoundError,
)
from saas_settings.config.flattener import ConfigFlattener
from saas_settings.config.models import (
    AppConfiguration,
    BillingProvider,
    DatabaseConfiguration,
    DatabaseInstance,
    DatabaseOption,
    EfsSettings,
    FilesystemConfiguration,
    FsxSettings,
    Parameter,
    ServiceConfiguration,
    ServiceTierConfiguration,
    SettingEntry,
    Tier,
)
from saas_settings.config.namespace import ParameterNamespace
from saas_settings.config.options import RDS_INSTANCE_COMPARATOR, RDS_INSTANCE_SORT_KEYS
from saas_settings.config.secret_guard import should_persist
from saas_settings.config.tiers import TierStore
from saas_settings.config.types import (
    ComputeSize,
    Decision,
    FilesystemType,
    OperatingSystem,
    ParameterType,
)

__all__ = [
    "AppConfiguration",
    "BillingProvider",
    "ComputeSize",
    "ConfigFlattener",
    "DatabaseConfiguration",
    "DatabaseInstance",
    "DatabaseOption",
    "Decision",
    "EfsSettings",
    "FilesystemConfiguration",
    "FilesystemType",
    "FsxSettings",
    "InvalidNameError",
    "NamespaceMismatchError",
    "NotFoundError",
    "OperatingSystem",
    "Parameter",
    "ParameterNamespace",
    "ParameterType",
    "PartialWriteFailureError",
    "RDS_INSTANCE_COMPARATOR",
    "RDS_INSTANCE_SORT_KEYS",
    "SchemaVersionError",
    "ServiceConfiguration",
    "ServiceTierConfiguration",
    "SettingEntry",
    "SettingNotFoundError",
    "SettingsEngine",
    "SettingsError",
    "Tier",
    "TierNotFoundError",
    "TierStore",
    "should_persist",
]
