"""Helpers for typed attribute values (``{"S": ...}``, ``{"M": ...}``, ...).

Catalog and tier records are stored as maps of attribute name to a
single-key dict tagging the value's type.
"""

from __future__ import annotations

from typing import Any

AttributeValue = dict[str, Any]
AttributeMap = dict[str, AttributeValue]


def string_attribute(value: str) -> AttributeValue:
    return {"S": value}


def bool_attribute(value: bool) -> AttributeValue:
    return {"BOOL": value}


def string_value(attribute: AttributeValue | None) -> str:
    """String payload of an attribute, or "" when missing."""
    if not attribute:
        return ""
    return str(attribute.get("S", ""))


def bool_value(attribute: AttributeValue | None) -> bool:
    if not attribute:
        return False
    return bool(attribute.get("BOOL", False))


def map_value(attribute: AttributeValue | None) -> AttributeMap:
    if not attribute:
        return {}
    return attribute.get("M", {})


def list_value(attribute: AttributeValue | None) -> list[AttributeValue]:
    if not attribute:
        return []
    return attribute.get("L", [])
