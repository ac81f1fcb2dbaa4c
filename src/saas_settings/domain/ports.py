from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from saas_settings.config.attributes import AttributeMap
from saas_settings.config.models import Parameter


class ParameterStore(Protocol):
    """Flat, versioned key-value store with optional encryption at rest."""

    async def get_parameter(self, name: str, decrypt: bool = False) -> Parameter | None: ...

    async def get_parameters(self, names: Sequence[str]) -> list[Parameter]: ...

    async def get_parameters_by_path(
        self, path: str, recursive: bool = True, decrypt: bool = False
    ) -> list[Parameter]: ...

    async def put_parameter(self, parameter: Parameter) -> Parameter: ...

    async def delete_parameters(self, names: Sequence[str]) -> None: ...


class CatalogStore(Protocol):
    async def query_by_region(self, region: str) -> list[AttributeMap]: ...


class TierTable(Protocol):
    """Keyed record store holding one item per tier."""

    async def get_item(self, key: AttributeMap, consistent_read: bool = False) -> AttributeMap | None: ...

    async def put_item(self, item: AttributeMap) -> None: ...

    async def update_item(
        self,
        key: AttributeMap,
        update_expression: str,
        attribute_names: Mapping[str, str],
        attribute_values: AttributeMap,
    ) -> AttributeMap: ...

    async def delete_item(self, key: AttributeMap) -> None: ...

    async def scan(self) -> list[AttributeMap]: ...
