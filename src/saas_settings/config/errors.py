"""Error taxonomy for settings persistence."""

from __future__ import annotations

from collections.abc import Sequence


class SettingsError(Exception):
    """Base class for all settings persistence errors."""


class InvalidNameError(SettingsError, ValueError):
    """A setting name failed the name validation pattern.

    Raised before any store call is made, so the operation has no effect.
    """

    def __init__(self, name: str | None):
        self.name = name
        super().__init__(f"Invalid setting name: {name!r}")


class NamespaceMismatchError(SettingsError):
    """A raw parameter's name is outside the expected environment namespace.

    Signals cross-environment contamination, or a lookup for a name that does
    not follow the store's naming convention (as opposed to a name that is
    simply absent).
    """

    def __init__(self, parameter_name: str, pattern: str):
        self.parameter_name = parameter_name
        self.pattern = pattern
        super().__init__(
            f"Parameter {parameter_name!r} does not match namespace pattern {pattern!r}"
        )


class NotFoundError(SettingsError, LookupError):
    """Point lookup of a specific id or name returned nothing."""


class SettingNotFoundError(NotFoundError):
    """No setting stored under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Setting not found: {name}")


class TierNotFoundError(NotFoundError):
    """No tier stored under the requested id."""

    def __init__(self, tier_id: str | None):
        self.tier_id = tier_id
        super().__init__(f"Tier not found: {tier_id!r}")


class PartialWriteFailureError(SettingsError):
    """A multi-entry operation failed after committing a subset of entries.

    Attributes:
        committed: Names confirmed written (or deleted) before the failure
        pending: Names not confirmed, including the one that failed
    """

    def __init__(self, operation: str, committed: Sequence[str], pending: Sequence[str]):
        self.operation = operation
        self.committed = list(committed)
        self.pending = list(pending)
        super().__init__(
            f"{operation} failed after {len(self.committed)} of "
            f"{len(self.committed) + len(self.pending)} entries; "
            f"not confirmed: {', '.join(self.pending)}"
        )


class SchemaVersionError(SettingsError):
    """A stored service document has a schema version this code cannot read."""

    def __init__(self, name: str, found: object, supported: int):
        self.name = name
        self.found = found
        self.supported = supported
        super().__init__(
            f"Service document {name} has schema version {found!r}; "
            f"newest supported is {supported}"
        )
