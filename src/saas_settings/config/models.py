"""Pydantic models for application settings."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from saas_settings.config import validators
from saas_settings.config.types import (
    ComputeSize,
    FilesystemType,
    OperatingSystem,
    ParameterType,
)


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


# Blank round-trips as "", never None
BlankStr = Annotated[str, BeforeValidator(_none_to_empty)]


# Store-level Records


class SettingEntry(BaseModel):
    """A single key-value setting with security and read-only metadata."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., description="Hierarchical name relative to the environment base")
    value: BlankStr = Field(default="", description="Setting value (blank when unset)")
    read_only: bool = Field(default=False, description="Not in the writable allow-list")
    secure: bool = Field(default=False, description="Stored encrypted at rest")
    version: int | None = Field(None, description="Version assigned by the store on write")


class Parameter(BaseModel):
    """Raw parameter as held by the settings store (full path name)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., description="Fully qualified parameter name")
    value: str = Field(..., description="Stored value; never empty on the wire")
    type: ParameterType = Field(default=ParameterType.STRING)
    version: int | None = Field(None, description="Monotonic version")

    @property
    def secure(self) -> bool:
        return self.type is ParameterType.SECURE_STRING


# Application Configuration Graph


class BillingProvider(BaseModel):
    """Billing integration settings."""

    model_config = ConfigDict(extra="forbid")

    api_key: BlankStr = Field(default="", description="Billing provider API key (secure)")


class EfsSettings(BaseModel):
    """Shared block storage (NFS) attributes."""

    model_config = ConfigDict(extra="forbid")

    encrypt_at_rest: bool = Field(default=True)
    lifecycle_days: int = Field(
        default=0, ge=0, description="Days before moving files to infrequent access (0=never)"
    )


class FsxSettings(BaseModel):
    """Managed Windows file share attributes."""

    model_config = ConfigDict(extra="forbid")

    storage_gb: int = Field(default=32, ge=32, le=65536)
    throughput_mbs: int = Field(default=8, ge=8, le=2048)
    backup_retention_days: int = Field(default=7, ge=0, le=90)
    daily_backup_time: str = Field(default="01:00", description="HH:MM")
    weekly_maintenance_time: str = Field(default="7:01:00", description="d:HH:MM")
    windows_mount_drive: str = Field(default="G:", pattern=r"^[D-Zd-z]:$")

    @field_validator("daily_backup_time")
    @classmethod
    def validate_daily_backup_time(cls, v: str) -> str:
        return validators.validate_daily_time(v)

    @field_validator("weekly_maintenance_time")
    @classmethod
    def validate_weekly_maintenance_time(cls, v: str) -> str:
        return validators.validate_weekly_time(v)


class FilesystemConfiguration(BaseModel):
    """Filesystem attached to a service tier.

    Tagged by ``file_system_type``. Only the attribute set of the declared
    variant is kept; the other variant is always None so stale settings for an
    inapplicable filesystem are never stored.
    """

    model_config = ConfigDict(extra="forbid")

    file_system_type: FilesystemType = Field(default=FilesystemType.NONE)
    mount_point: str | None = Field(None, description="Container mount path")
    efs: EfsSettings | None = None
    fsx: FsxSettings | None = None

    @model_validator(mode="after")
    def keep_declared_variant(self) -> FilesystemConfiguration:
        if self.file_system_type is FilesystemType.EFS:
            self.efs = self.efs or EfsSettings()
            self.fsx = None
        elif self.file_system_type is FilesystemType.FSX:
            self.fsx = self.fsx or FsxSettings()
            self.efs = None
        else:
            self.efs = None
            self.fsx = None
        return self

    @property
    def variant(self) -> EfsSettings | FsxSettings | None:
        """Attribute set of the declared filesystem type."""
        if self.file_system_type is FilesystemType.EFS:
            return self.efs
        if self.file_system_type is FilesystemType.FSX:
            return self.fsx
        return None


class DatabaseConfiguration(BaseModel):
    """Relational database provisioned for a service tier."""

    model_config = ConfigDict(extra="forbid")

    engine: str = Field(..., description="Database engine (e.g., 'MYSQL', 'POSTGRES')")
    version: str | None = Field(None, description="Engine version")
    instance_class: str = Field(..., description="Instance class (e.g., 't3.micro')")
    database_name: str | None = None
    username: str | None = None
    port: int | None = None
    password: BlankStr = Field(default="", description="Master password, or its obfuscated marker")
    password_param: str | None = Field(
        None, description="Fully qualified parameter name holding the master password"
    )
    bootstrap_filename: str | None = None

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int | None) -> int | None:
        return validators.validate_port(v)


class ServiceTierConfiguration(BaseModel):
    """Per-tier compute, filesystem and database settings of a service."""

    model_config = ConfigDict(extra="forbid")

    min_count: int = Field(default=1, ge=0, description="Minimum task count")
    max_count: int = Field(default=1, ge=0, description="Maximum task count")
    compute_size: ComputeSize | None = None
    cpu: int | None = Field(None, gt=0, description="CPU units")
    memory: int | None = Field(None, gt=0, description="Memory (MiB)")
    instance_type: str | None = None
    filesystem: FilesystemConfiguration | None = None
    database: DatabaseConfiguration | None = None

    @model_validator(mode="after")
    def validate_scaling_bounds(self) -> ServiceTierConfiguration:
        if self.max_count < self.min_count:
            raise ValueError(
                f"max_count ({self.max_count}) must be >= min_count ({self.min_count})"
            )
        return self

    @property
    def has_database(self) -> bool:
        return self.database is not None


class ServiceConfiguration(BaseModel):
    """Configuration of one application service and its tiers."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Service name (one path segment)")
    description: str = ""
    public: bool = Field(default=True, description="Reachable through the public load balancer")
    path: str = Field(default="/*", description="Load balancer path pattern")
    container_port: int | None = None
    container_repo: str | None = None
    container_tag: str = "latest"
    health_check_url: str = "/"
    operating_system: OperatingSystem = Field(default=OperatingSystem.LINUX)
    tiers: dict[str, ServiceTierConfiguration] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validators.validate_path_segment(v, "Service name")

    @field_validator("container_port")
    @classmethod
    def validate_container_port(cls, v: int | None) -> int | None:
        return validators.validate_port(v)

    @field_validator("tiers")
    @classmethod
    def validate_tier_names(
        cls, v: dict[str, ServiceTierConfiguration]
    ) -> dict[str, ServiceTierConfiguration]:
        for tier_name in v:
            validators.validate_path_segment(tier_name, "Tier name")
        return v


class AppConfiguration(BaseModel):
    """Top-level application configuration."""

    model_config = ConfigDict(extra="forbid")

    name: BlankStr = ""
    domain_name: BlankStr = ""
    hosted_zone: BlankStr = ""
    ssl_certificate: BlankStr = ""
    billing: BillingProvider | None = None
    services: dict[str, ServiceConfiguration] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_service_keys(self) -> AppConfiguration:
        for key, service in self.services.items():
            if key != service.name:
                raise ValueError(f"Service key '{key}' does not match service name '{service.name}'")
        return self


# Tier Catalog


class Tier(BaseModel):
    """Catalog tier (e.g., a pricing or capability level)."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(None, description="Opaque primary key")
    name: str = ""
    description: str = ""
    default_tier: bool = False


# Orderable Database Options


class DatabaseInstance(BaseModel):
    """One orderable instance class with its supported engine versions."""

    model_config = ConfigDict(extra="forbid")

    instance: str = Field(..., description="Instance key (e.g., 't3.micro')")
    instance_class: str = Field(..., description="Provider instance class")
    description: str = ""
    versions: list[dict[str, str]] = Field(default_factory=list)


class DatabaseOption(BaseModel):
    """Orderable options for one database engine in a region."""

    model_config = ConfigDict(extra="forbid")

    engine: str
    region: str
    name: str = ""
    description: str = ""
    instances: list[DatabaseInstance] = Field(default_factory=list)
