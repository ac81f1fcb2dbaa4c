"""Custom validators for settings names and configuration fields."""

from __future__ import annotations

import re

from saas_settings.config.errors import InvalidNameError

# Slash-separated segments of [A-Za-z0-9_.-]; no leading, trailing or doubled slash
SETTING_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+(?:/[A-Za-z0-9_.\-]+)*$")

# A service or tier name becomes one path segment
PATH_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")

DAILY_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
WEEKLY_TIME_PATTERN = re.compile(r"^[1-7]:([01]\d|2[0-3]):[0-5]\d$")


def is_valid_setting_name(name: str | None) -> bool:
    """Return True if name can be used as a settings store key."""
    return bool(name) and SETTING_NAME_PATTERN.match(name) is not None


def validate_setting_name(name: str | None) -> str:
    """Validate a setting name before any store operation.

    Args:
        name: Setting name relative to the environment base path

    Returns:
        The validated name

    Raises:
        InvalidNameError: If the name is blank or fails the pattern
    """
    if not is_valid_setting_name(name):
        raise InvalidNameError(name)
    return name  # type: ignore[return-value]


def validate_path_segment(value: str, field_name: str = "name") -> str:
    """Validate that a value can be used as a single path segment.

    Raises:
        ValueError: If the value contains a separator or invalid characters
    """
    if not PATH_SEGMENT_PATTERN.match(value):
        raise ValueError(
            f"{field_name} '{value}' may only contain letters, digits, '_', '.' and '-'"
        )
    return value


def validate_port(value: int | None) -> int | None:
    """Validate that a value is a valid network port.

    Raises:
        ValueError: If port is not in valid range
    """
    if value is None:
        return None

    if not (1 <= value <= 65535):
        raise ValueError(
            f"Port {value} is not valid. Must be between 1 and 65535."
        )

    return value


def validate_daily_time(value: str | None) -> str | None:
    """Validate an HH:MM daily time."""
    if value is None:
        return None
    if not DAILY_TIME_PATTERN.match(value):
        raise ValueError(f"Daily time '{value}' must be HH:MM (24h)")
    return value


def validate_weekly_time(value: str | None) -> str | None:
    """Validate a d:HH:MM weekly time, where d is 1 (Monday) to 7 (Sunday).

    A trailing seconds component (d:HH:MM:SS) is trimmed.
    """
    if value is None:
        return None
    parts = value.split(":")
    if len(parts) == 4:
        value = ":".join(parts[:3])
    if not WEEKLY_TIME_PATTERN.match(value):
        raise ValueError(f"Weekly time '{value}' must be d:HH:MM with d in 1-7")
    return value


def validate_name_segment(value: str | None) -> str:
    """Validate a service or tier name used as one segment of a setting name.

    Raises:
        InvalidNameError: If the value is blank or contains a separator
    """
    if not value or not PATH_SEGMENT_PATTERN.match(value):
        raise InvalidNameError(value)
    return value
