"""Mapping strategies - single-table, joined-table and concrete-table."""

from __future__ import annotations

from inherit_map.core.enums import MappingStrategyKind
from inherit_map.strategy.base import MappingContext, MappingStrategy
from inherit_map.strategy.concrete_table import ConcreteTableStrategy
from inherit_map.strategy.joined_table import JoinedTableStrategy
from inherit_map.strategy.single_table import SingleTableStrategy

# Strategies are stateless, one shared instance each.
_STRATEGIES: dict[MappingStrategyKind, MappingStrategy] = {
    MappingStrategyKind.SINGLE_TABLE: SingleTableStrategy(),
    MappingStrategyKind.JOINED_TABLE: JoinedTableStrategy(),
    MappingStrategyKind.CONCRETE_TABLE: ConcreteTableStrategy(),
}


def get_strategy(kind: MappingStrategyKind | str) -> MappingStrategy:
    """Return the strategy for *kind* (an enum member or its value)."""
    if isinstance(kind, str):
        kind = MappingStrategyKind(kind)
    return _STRATEGIES[kind]


__all__ = [
    "MappingContext",
    "MappingStrategy",
    "SingleTableStrategy",
    "JoinedTableStrategy",
    "ConcreteTableStrategy",
    "get_strategy",
]
