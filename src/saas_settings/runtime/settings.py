"""Environment-driven settings for the settings engine and its stores."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineSettings(BaseModel):
    """Runtime settings, read from environment variables by default."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    environment: str = Field(
        default_factory=lambda: os.getenv("SAAS_BOOST_ENV", ""),
        validate_default=True,
        description="Environment name scoping every parameter",
    )
    region: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", ""),
        validate_default=True,
        description="Region for orderable options lookups",
    )
    db_path: Path = Field(
        default_factory=lambda: Path(os.getenv("SETTINGS_DB_PATH", "/data/settings/settings.db")),
        description="Path to SQLite settings database",
    )
    master_key_base64: Optional[str] = Field(
        default_factory=lambda: os.getenv("SETTINGS_MASTER_KEY_BASE64"),
        description="Base64-encoded AES-256 key for secure parameters",
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        description="Logging level",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing environment variable SAAS_BOOST_ENV")
        return v

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing environment variable AWS_REGION")
        return v


def load_settings(**overrides: object) -> EngineSettings:
    """Load settings from environment variables, with explicit overrides.

    Raises:
        pydantic.ValidationError: If the environment name or region is missing
    """
    return EngineSettings(**overrides)
