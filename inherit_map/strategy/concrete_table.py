"""Concrete-table mapping: one self-contained table per derived type.

The root has no table. Each derived table repeats the root's columns next
to its own. Nothing links the tables, so identifiers must come from a single
generator shared by all of them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from inherit_map.core.enums import ActionKind, MappingStrategyKind, ScalarKind
from inherit_map.core.exceptions import MissingIdentifierError
from inherit_map.model.hierarchy import EntityInstance, Hierarchy
from inherit_map.schema.table import ColumnSchema, TableSchema
from inherit_map.strategy.base import (
    MappingContext,
    MappingStrategy,
    id_equals,
    own_bindings,
    property_column,
    property_ref,
    select_columns,
)
from inherit_map.translate.actions import (
    ColumnRef,
    CountPlan,
    OrderBy,
    ReadBranch,
    ReadPlan,
    TableAction,
    WritePlan,
)
from inherit_map.translate.predicate import Predicate


class ConcreteTableStrategy(MappingStrategy):
    kind = MappingStrategyKind.CONCRETE_TABLE
    uses_global_identifiers = True

    def derive_tables(self, hierarchy: Hierarchy, id_kind: ScalarKind) -> list[TableSchema]:
        key = hierarchy.identifier
        tables = []
        for entity_type in hierarchy.derived:
            props = [*hierarchy.root.properties, *entity_type.properties]
            tables.append(
                TableSchema(
                    name=entity_type.table_name,
                    owner=entity_type.name,
                    columns=(
                        ColumnSchema(key, id_kind, primary_key=True),
                        *(property_column(p) for p in props),
                    ),
                    primary_key=key,
                )
            )
        return tables

    def plan_insert(self, ctx: MappingContext, instance: EntityInstance) -> WritePlan:
        if instance.identifier is None:
            raise MissingIdentifierError(
                instance.type_name,
                "concrete-table inserts take identifiers from the shared generator",
            )
        table = ctx.leaf_table(instance.type_name)
        names = [p.name for p in ctx.hierarchy.applicable_properties(instance.type_name)]

        checks = [
            TableAction(
                table=ctx.leaf_table(type_name).name,
                kind=ActionKind.EXISTS,
                condition=id_equals(
                    ctx.leaf_table(type_name).name,
                    ctx.leaf_table(type_name).primary_key,
                    instance.identifier,
                ),
                expect_rows=0,
            )
            for type_name in ctx.hierarchy.type_names
        ]
        insert = TableAction(
            table=table.name,
            kind=ActionKind.INSERT,
            bindings={table.primary_key: instance.identifier, **own_bindings(instance, names)},
        )
        return WritePlan(
            ActionKind.INSERT, instance.type_name, instance.identifier, (*checks, insert)
        )

    def plan_update(
        self, ctx: MappingContext, instance: EntityInstance, changed: list[str]
    ) -> WritePlan:
        actions: tuple[TableAction, ...] = ()
        if changed:
            table = ctx.leaf_table(instance.type_name)
            actions = (
                TableAction(
                    table=table.name,
                    kind=ActionKind.UPDATE,
                    bindings=own_bindings(instance, changed),
                    condition=id_equals(table.name, table.primary_key, instance.identifier),
                    expect_rows=1,
                ),
            )
        return WritePlan(ActionKind.UPDATE, instance.type_name, instance.identifier, actions)

    def plan_delete(self, ctx: MappingContext, type_name: str, identifier: Any) -> WritePlan:
        table = ctx.leaf_table(type_name)
        action = TableAction(
            table=table.name,
            kind=ActionKind.DELETE,
            condition=id_equals(table.name, table.primary_key, identifier),
        )
        return WritePlan(ActionKind.DELETE, type_name, identifier, (action,))

    def _column_for(
        self, table: TableSchema, identifier: str
    ) -> Callable[[str], ColumnRef | None]:
        def column_for(name: str) -> ColumnRef | None:
            if name == identifier:
                return ColumnRef(table.name, table.primary_key)
            return property_ref(table, name)

        return column_for

    def plan_read(
        self,
        ctx: MappingContext,
        target: str,
        predicate: Predicate | None,
        order_by: OrderBy | None,
    ) -> ReadPlan:
        branches = []
        for type_name in ctx.targets(target):
            table = ctx.leaf_table(type_name)
            action = TableAction(
                table=table.name,
                kind=ActionKind.SELECT,
                columns=tuple(select_columns(table, ctx.identifier)),
                condition=ctx.resolve(predicate, self._column_for(table, ctx.identifier)),
                order_by=(ColumnRef(table.name, table.primary_key),),
            )
            branches.append(ReadBranch(action, type_name=type_name))
        return self._read_plan(ctx, target, branches, order_by)

    def plan_count(
        self, ctx: MappingContext, target: str, predicate: Predicate | None
    ) -> CountPlan:
        actions = []
        for type_name in ctx.targets(target):
            table = ctx.leaf_table(type_name)
            condition = ctx.resolve(predicate, self._column_for(table, ctx.identifier))
            actions.append(self._count(table.name, condition))
        return CountPlan(target, tuple(actions))
