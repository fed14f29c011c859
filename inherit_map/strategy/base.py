"""Mapping strategy interface.

A strategy owns two decisions for a hierarchy: how its types are laid out
in tables, and which table actions each logical operation becomes. Strategies
are stateless; everything they need arrives in a MappingContext.
"""

from __future__ import annotations

import abc
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from inherit_map.core.enums import ActionKind, MappingStrategyKind, Operator, ScalarKind
from inherit_map.model.hierarchy import EntityInstance, Hierarchy, Property
from inherit_map.schema.table import ColumnSchema, TableSchema
from inherit_map.translate.actions import (
    ColumnRef,
    Compare,
    Condition,
    CountPlan,
    OrderBy,
    ReadBranch,
    ReadPlan,
    SelectColumn,
    TableAction,
    WritePlan,
    all_of,
)
from inherit_map.translate.predicate import Predicate, resolve


@dataclass(frozen=True)
class MappingContext:
    """Everything a strategy needs to translate one operation."""

    hierarchy: Hierarchy
    tables: dict[str, TableSchema]  # keyed by table name

    @property
    def identifier(self) -> str:
        return self.hierarchy.identifier

    def table(self, name: str) -> TableSchema:
        return self.tables[name]

    def root_table(self) -> TableSchema:
        return self.tables[self.hierarchy.root.table_name]

    def leaf_table(self, type_name: str) -> TableSchema:
        return self.tables[self.hierarchy.get_leaf(type_name).table_name]

    def targets(self, target: str) -> list[str]:
        """Concrete types a read of *target* covers, in declaration order."""
        if self.hierarchy.is_root(target):
            return self.hierarchy.type_names
        return [target]

    def resolve(
        self, predicate: Predicate | None, column_for: Callable[[str], ColumnRef | None]
    ) -> Condition | None:
        if predicate is None:
            return None
        return resolve(predicate, column_for)


def property_column(prop: Property, *, nullable: bool | None = None) -> ColumnSchema:
    """The column holding *prop*. ``nullable`` overrides the declared nullability."""
    return ColumnSchema(
        prop.name,
        prop.kind,
        nullable=prop.nullable if nullable is None else nullable,
        max_length=prop.max_length,
    )


def property_ref(table: TableSchema, name: str) -> ColumnRef | None:
    """Reference *name* on *table*, tagged with its kind, or None when absent."""
    column = table.get_column(name)
    if column is None:
        return None
    return ColumnRef(table.name, name, column.kind)


def id_equals(table: str, column: str, identifier: Any) -> Compare:
    return Compare(ColumnRef(table, column), Operator.EQ, identifier)


def select_columns(table: TableSchema, identifier: str) -> list[SelectColumn]:
    """Select every column of *table*, aliasing the primary key as *identifier*."""
    columns = []
    for column in table.columns:
        alias = identifier if column.name == table.primary_key else column.name
        columns.append(SelectColumn(ColumnRef(table.name, column.name), alias))
    return columns


def own_bindings(instance: EntityInstance, names: list[str]) -> dict[str, Any]:
    return {name: instance.values.get(name) for name in names}


class MappingStrategy(abc.ABC):
    """Base class of the three inheritance mapping strategies."""

    kind: MappingStrategyKind

    #: True when identifiers must come from one generator shared by all tables
    uses_global_identifiers: bool = False

    @abc.abstractmethod
    def derive_tables(self, hierarchy: Hierarchy, id_kind: ScalarKind) -> list[TableSchema]:
        """Produce the physical tables for *hierarchy*."""

    @abc.abstractmethod
    def plan_insert(self, ctx: MappingContext, instance: EntityInstance) -> WritePlan:
        """Plan the insert of a fully populated instance."""

    @abc.abstractmethod
    def plan_update(
        self, ctx: MappingContext, instance: EntityInstance, changed: list[str]
    ) -> WritePlan:
        """Plan an update of the *changed* properties of *instance*."""

    @abc.abstractmethod
    def plan_delete(self, ctx: MappingContext, type_name: str, identifier: Any) -> WritePlan:
        """Plan the delete of one entity."""

    @abc.abstractmethod
    def plan_read(
        self,
        ctx: MappingContext,
        target: str,
        predicate: Predicate | None,
        order_by: OrderBy | None,
    ) -> ReadPlan:
        """Plan a (possibly polymorphic) read."""

    @abc.abstractmethod
    def plan_count(
        self, ctx: MappingContext, target: str, predicate: Predicate | None
    ) -> CountPlan:
        """Plan a (possibly polymorphic) count."""

    # --- shared helpers ---

    def _read_plan(
        self,
        ctx: MappingContext,
        target: str,
        branches: list[ReadBranch],
        order_by: OrderBy | None,
    ) -> ReadPlan:
        hierarchy = ctx.hierarchy
        properties = {
            name: tuple(p.name for p in hierarchy.applicable_properties(name))
            for name in hierarchy.type_names
        }
        return ReadPlan(
            target=target,
            branches=tuple(branches),
            identifier=hierarchy.identifier,
            type_order=tuple(hierarchy.type_names),
            properties=properties,
            order_by=order_by,
        )

    def _count(
        self,
        table: str,
        condition: Condition | None,
        joins: tuple[Any, ...] = (),
    ) -> TableAction:
        return TableAction(table=table, kind=ActionKind.COUNT, condition=condition, joins=joins)

    @staticmethod
    def _where(*conditions: Condition | None) -> Condition | None:
        return all_of(conditions)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value}>"
