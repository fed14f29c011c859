"""Operation translation vocabulary - table actions, plans and predicates.

The translator itself lives in :mod:`inherit_map.translate.translator`.
"""

from __future__ import annotations

from inherit_map.translate.actions import (
    GENERATED_IDENTIFIER,
    AllOf,
    AnyOf,
    ColumnRef,
    Compare,
    CountPlan,
    Exists,
    Join,
    OrderBy,
    ReadBranch,
    ReadPlan,
    SelectColumn,
    TableAction,
    WritePlan,
)
from inherit_map.translate.predicate import And, Comparison, Or, Predicate, prop

__all__ = [
    "GENERATED_IDENTIFIER",
    "TableAction",
    "WritePlan",
    "ReadPlan",
    "ReadBranch",
    "CountPlan",
    "OrderBy",
    "ColumnRef",
    "SelectColumn",
    "Join",
    "Compare",
    "AllOf",
    "AnyOf",
    "Exists",
    "prop",
    "Predicate",
    "Comparison",
    "And",
    "Or",
]
