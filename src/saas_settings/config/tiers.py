"""Tier catalog store.

Each tier is one item in a keyed table, keyed by ``id``. Field mapping is
declarative: every TierAttribute knows how to encode its Tier field to an
attribute value and decode it back, with missing attributes reading as the
field's zero value.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from enum import Enum
from typing import Any

from saas_settings.config.attributes import (
    AttributeMap,
    AttributeValue,
    bool_attribute,
    bool_value,
    string_attribute,
    string_value,
)
from saas_settings.config.errors import TierNotFoundError
from saas_settings.config.models import Tier
from saas_settings.domain import ports

logger = logging.getLogger(__name__)


class TierAttribute(str, Enum):
    """Stored attribute names of a tier item."""

    ID = "id"
    NAME = "name"
    DESCRIPTION = "description"
    DEFAULT_TIER = "default_tier"

    def from_tier(self, tier: Tier) -> AttributeValue:
        encode, _ = _CODECS[self]
        return encode(getattr(tier, self.value))

    def to_field(self, attribute: AttributeValue | None) -> Any:
        _, decode = _CODECS[self]
        return decode(attribute)


_CODECS: dict[TierAttribute, tuple[Callable[[Any], AttributeValue], Callable[[AttributeValue | None], Any]]] = {
    TierAttribute.ID: (lambda value: string_attribute(value or ""), string_value),
    TierAttribute.NAME: (string_attribute, string_value),
    TierAttribute.DESCRIPTION: (string_attribute, string_value),
    TierAttribute.DEFAULT_TIER: (bool_attribute, bool_value),
}

PRIMARY_KEY = TierAttribute.ID


class TierRecord:
    """Stored representation of one tier."""

    def __init__(self, attributes: AttributeMap):
        self.attributes = attributes

    @classmethod
    def from_tier(cls, tier: Tier) -> TierRecord:
        record = cls({attribute.value: attribute.from_tier(tier) for attribute in TierAttribute})
        logger.debug(f"Created tier record: {record.attributes}")
        return record

    def to_tier(self) -> Tier:
        return Tier(
            **{
                attribute.value: attribute.to_field(self.attributes.get(attribute.value))
                for attribute in TierAttribute
            }
        )

    @staticmethod
    def key_for(tier_id: str) -> AttributeMap:
        return {PRIMARY_KEY.value: string_attribute(tier_id)}

    def primary_key(self) -> AttributeMap:
        return {PRIMARY_KEY.value: self.attributes[PRIMARY_KEY.value]}

    def _attributes_without_primary_key(self) -> AttributeMap:
        return {name: value for name, value in self.attributes.items() if name != PRIMARY_KEY.value}

    def update_expression(self) -> str:
        """``SET #name=:name,#description=:description,...``

        Names go through ``#`` placeholders because attributes such as
        ``name`` are reserved words in update expressions.
        """
        updates = [f"#{name}=:{name}" for name in self._attributes_without_primary_key()]
        return "SET " + ",".join(updates)

    def update_attribute_names(self) -> dict[str, str]:
        return {f"#{name}": name for name in self._attributes_without_primary_key()}

    def update_attribute_values(self) -> AttributeMap:
        return {f":{name}": value for name, value in self._attributes_without_primary_key().items()}


class TierStore:
    """CRUD access to the tier catalog.

    Reads are always strongly consistent: catalog edits must be visible to
    the very next lookup.
    """

    def __init__(self, table: ports.TierTable):
        self.table = table

    async def get_tier(self, tier_id: str | None) -> Tier:
        """Get a tier by id.

        Raises:
            TierNotFoundError: If the id is blank (no table call is made) or
                no item is stored under it
        """
        if tier_id is None or not tier_id.strip():
            raise TierNotFoundError(tier_id)
        item = await self.table.get_item(TierRecord.key_for(tier_id), consistent_read=True)
        if not item:
            raise TierNotFoundError(tier_id)
        return TierRecord(item).to_tier()

    async def list_tiers(self) -> list[Tier]:
        """All tiers, ordered by name."""
        tiers = [TierRecord(item).to_tier() for item in await self.table.scan()]
        return sorted(tiers, key=lambda tier: tier.name)

    async def create_tier(self, tier: Tier) -> Tier:
        """Store a new tier, assigning an id when none is given."""
        created = tier.model_copy(update={"id": tier.id or str(uuid.uuid4())})
        await self.table.put_item(TierRecord.from_tier(created).attributes)
        logger.info(f"Created tier {created.id} ({created.name})")
        return created

    async def update_tier(self, tier: Tier) -> Tier:
        """Overwrite every non-key attribute of an existing tier.

        Raises:
            TierNotFoundError: If the tier does not exist
        """
        await self.get_tier(tier.id)
        record = TierRecord.from_tier(tier)
        updated = await self.table.update_item(
            record.primary_key(),
            record.update_expression(),
            record.update_attribute_names(),
            record.update_attribute_values(),
        )
        logger.info(f"Updated tier {tier.id}")
        return TierRecord(updated).to_tier()

    async def delete_tier(self, tier_id: str | None) -> None:
        """Delete a tier.

        Raises:
            TierNotFoundError: If the id is blank
        """
        if tier_id is None or not tier_id.strip():
            raise TierNotFoundError(tier_id)
        await self.table.delete_item(TierRecord.key_for(tier_id))
        logger.info(f"Deleted tier {tier_id}")
