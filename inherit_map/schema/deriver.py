"""Schema derivation.

Turns a type hierarchy plus a mapping strategy into the ordered list of
physical tables the entity store has to create.
"""

from __future__ import annotations

import logging

from inherit_map.core.enums import MappingStrategyKind, ScalarKind
from inherit_map.model.hierarchy import Hierarchy
from inherit_map.schema.table import TableSchema
from inherit_map.strategy import MappingStrategy, get_strategy

logger = logging.getLogger(__name__)


def derive_schema(
    hierarchy: Hierarchy,
    strategy: MappingStrategy | MappingStrategyKind,
    id_kind: ScalarKind = ScalarKind.INTEGER,
) -> list[TableSchema]:
    """Derive the physical tables for *hierarchy* under *strategy*.

    Tables are ordered root first (when the strategy keeps a root table),
    then one per derived type in declaration order.

    Raises:
        SchemaDerivationError: If the hierarchy cannot be laid out under the
            strategy (e.g. ambiguous column kinds in a single table).
    """
    if isinstance(strategy, MappingStrategyKind):
        strategy = get_strategy(strategy)
    tables = strategy.derive_tables(hierarchy, id_kind)
    logger.debug(
        "Derived %d table(s) for '%s' using %s: %s",
        len(tables),
        hierarchy.root.name,
        strategy.kind.value,
        [t.name for t in tables],
    )
    return tables
