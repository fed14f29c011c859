"""Type hierarchy model - entity types, instances and the definition DSL."""

from __future__ import annotations

from inherit_map.model.builder import HierarchyBuilder, hierarchy
from inherit_map.model.describe import Describer
from inherit_map.model.hierarchy import (
    EntityInstance,
    EntityType,
    Hierarchy,
    Property,
    coerce_value,
)

__all__ = [
    "hierarchy",
    "HierarchyBuilder",
    "Hierarchy",
    "EntityType",
    "Property",
    "EntityInstance",
    "coerce_value",
    "Describer",
]
