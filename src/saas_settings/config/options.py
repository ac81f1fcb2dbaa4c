"""Orderable database options catalog.

Catalog records are stored per region and engine::

    {
        "region": {"S": "us-east-1"},
        "engine": {"S": "MYSQL"},
        "options": {"M": {
            "name": {"S": "MySQL"},
            "description": {"S": "..."},
            "instances": {"M": {
                "t3.micro": {"M": {
                    "class": {"S": "db.t3.micro"},
                    "description": {"S": "..."},
                    "versions": {"L": [{"M": {"version": {"S": "8.0.28"}, ...}}]},
                }},
            }},
        }},
    }

Instances are listed smallest and cheapest first within a family, with
families in the order T, M, R, then everything else.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from saas_settings.config.attributes import (
    AttributeMap,
    list_value,
    map_value,
    string_value,
)
from saas_settings.config.models import DatabaseInstance, DatabaseOption

FAMILY_PRIORITY = ("T", "M", "R")

INSTANCE_SIZES = ("MICRO", "SMALL", "MEDIUM", "LARGE", "XL", "2XL", "4XL", "12XL", "24XL")

_GENERATION_PATTERN = re.compile(r"^[A-Za-z](\d+)")
_SIZE_SEPARATOR = re.compile(r"[._]")


def instance_family_rank(instance: str) -> int:
    """T before M before R before anything else."""
    family = instance[:1].upper()
    if family in FAMILY_PRIORITY:
        return FAMILY_PRIORITY.index(family)
    return len(FAMILY_PRIORITY)


def instance_generation(instance: str) -> int:
    """Numeric generation following the family letter (``t3.micro`` -> 3)."""
    match = _GENERATION_PATTERN.match(instance)
    if match is None:
        return 2**31
    return int(match.group(1))


def instance_size_rank(instance: str) -> int:
    """Position of the size token in INSTANCE_SIZES; unknown sizes sort last."""
    parts = _SIZE_SEPARATOR.split(instance, maxsplit=1)
    if len(parts) < 2:
        return len(INSTANCE_SIZES)
    size = parts[1].upper()
    if size.endswith("XLARGE"):
        size = size[: -len("LARGE")] + "L"
    if size in INSTANCE_SIZES:
        return INSTANCE_SIZES.index(size)
    return len(INSTANCE_SIZES)


# Tie-break order: family, then generation, then size
RDS_INSTANCE_SORT_KEYS: tuple[Callable[[str], int], ...] = (
    instance_family_rank,
    instance_generation,
    instance_size_rank,
)


def rds_instance_sort_key(instance: str) -> tuple[int, ...]:
    """Composite sort key for an instance name, applying RDS_INSTANCE_SORT_KEYS in order."""
    return tuple(key(instance) for key in RDS_INSTANCE_SORT_KEYS)


RDS_INSTANCE_COMPARATOR = rds_instance_sort_key


def decode_option(item: AttributeMap) -> DatabaseOption:
    """Decode one raw catalog record into a DatabaseOption with sorted instances."""
    option_attributes = map_value(item.get("options"))

    instances = []
    for instance_name, instance_attribute in map_value(option_attributes.get("instances")).items():
        instance_attributes = map_value(instance_attribute)
        versions = [
            {key: string_value(value) for key, value in map_value(version).items()}
            for version in list_value(instance_attributes.get("versions"))
        ]
        instances.append(
            DatabaseInstance(
                instance=instance_name,
                instance_class=string_value(instance_attributes.get("class")),
                description=string_value(instance_attributes.get("description")),
                versions=versions,
            )
        )
    instances.sort(key=lambda instance: RDS_INSTANCE_COMPARATOR(instance.instance))

    return DatabaseOption(
        engine=string_value(item.get("engine")),
        region=string_value(item.get("region")),
        name=string_value(option_attributes.get("name")),
        description=string_value(option_attributes.get("description")),
        instances=instances,
    )
