"""Type definitions for application settings."""

from __future__ import annotations

from enum import Enum


class ParameterType(str, Enum):
    """Storage type of a parameter in the settings store."""

    STRING = "String"
    SECURE_STRING = "SecureString"  # Encrypted at rest


class OperatingSystem(str, Enum):
    """Operating system a service's containers run on."""

    LINUX = "LINUX"
    WIN_2019_FULL = "WIN_2019_FULL"
    WIN_2019_CORE = "WIN_2019_CORE"
    WIN_2022_FULL = "WIN_2022_FULL"
    WIN_2022_CORE = "WIN_2022_CORE"

    @property
    def is_windows(self) -> bool:
        return self is not OperatingSystem.LINUX


class FilesystemType(str, Enum):
    """Shared filesystem variant attached to a service tier."""

    NONE = "NONE"
    EFS = "EFS"  # Shared block storage (NFS)
    FSX = "FSX"  # Managed Windows file share


class ComputeSize(str, Enum):
    """Preset compute sizes for a service tier."""

    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class Decision(str, Enum):
    """Outcome of the secret guard for one incoming entry."""

    WRITE = "write"
    SKIP = "skip"
