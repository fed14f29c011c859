"""Joined-table mapping: one table per type.

The root table holds root properties and generates identifiers. Each derived
table holds only its own properties; its primary key is also a foreign key
to the root, so a derived row shares its parent row's identifier.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from inherit_map.core.enums import ActionKind, MappingStrategyKind, ScalarKind
from inherit_map.model.hierarchy import EntityInstance, Hierarchy
from inherit_map.schema.table import ColumnSchema, ForeignKeySchema, TableSchema
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
    GENERATED_IDENTIFIER,
    ColumnRef,
    CountPlan,
    Exists,
    Join,
    OrderBy,
    ReadBranch,
    ReadPlan,
    TableAction,
    WritePlan,
)
from inherit_map.translate.predicate import Predicate, referenced_properties


class JoinedTableStrategy(MappingStrategy):
    kind = MappingStrategyKind.JOINED_TABLE

    def derive_tables(self, hierarchy: Hierarchy, id_kind: ScalarKind) -> list[TableSchema]:
        root = hierarchy.root
        key = hierarchy.identifier
        root_table = TableSchema(
            name=root.table_name,
            owner=root.name,
            columns=(
                ColumnSchema(
                    key, id_kind, primary_key=True, generated=id_kind is ScalarKind.INTEGER
                ),
                *(property_column(p) for p in root.properties),
            ),
            primary_key=key,
        )
        tables = [root_table]
        for entity_type in hierarchy.derived:
            tables.append(
                TableSchema(
                    name=entity_type.table_name,
                    owner=entity_type.name,
                    columns=(
                        ColumnSchema(key, id_kind, primary_key=True),
                        *(property_column(p) for p in entity_type.properties),
                    ),
                    primary_key=key,
                    foreign_key=ForeignKeySchema(key, root_table.name, key),
                )
            )
        return tables

    def _split(self, ctx: MappingContext, names: list[str]) -> tuple[list[str], list[str]]:
        """Split property names into (root-owned, type-owned)."""
        root_names = set(ctx.hierarchy.root.property_names())
        root_part = [n for n in names if n in root_names]
        own_part = [n for n in names if n not in root_names]
        return root_part, own_part

    def _leaf_exists(self, ctx: MappingContext, type_name: str, *, negated: bool = False) -> Exists:
        root = ctx.root_table()
        leaf = ctx.leaf_table(type_name)
        return Exists(
            table=leaf.name,
            column=leaf.primary_key,
            ref=ColumnRef(root.name, root.primary_key),
            negated=negated,
        )

    def plan_insert(self, ctx: MappingContext, instance: EntityInstance) -> WritePlan:
        root = ctx.root_table()
        leaf = ctx.leaf_table(instance.type_name)
        root_names, own_names = self._split(
            ctx,
            [p.name for p in ctx.hierarchy.applicable_properties(instance.type_name)],
        )
        generated = instance.identifier is None
        identifier = GENERATED_IDENTIFIER if generated else instance.identifier

        root_bindings: dict[str, Any] = {}
        if not generated:
            root_bindings[root.primary_key] = instance.identifier
        root_bindings.update(own_bindings(instance, root_names))

        leaf_bindings = {leaf.primary_key: identifier, **own_bindings(instance, own_names)}
        actions = (
            TableAction(
                table=root.name,
                kind=ActionKind.INSERT,
                bindings=root_bindings,
                returns_identifier=generated,
            ),
            TableAction(table=leaf.name, kind=ActionKind.INSERT, bindings=leaf_bindings),
        )
        return WritePlan(ActionKind.INSERT, instance.type_name, identifier, actions)

    def plan_update(
        self, ctx: MappingContext, instance: EntityInstance, changed: list[str]
    ) -> WritePlan:
        root = ctx.root_table()
        leaf = ctx.leaf_table(instance.type_name)
        root_names, own_names = self._split(ctx, changed)

        actions = []
        if root_names:
            actions.append(
                TableAction(
                    table=root.name,
                    kind=ActionKind.UPDATE,
                    bindings=own_bindings(instance, root_names),
                    condition=self._where(
                        id_equals(root.name, root.primary_key, instance.identifier),
                        self._leaf_exists(ctx, instance.type_name),
                    ),
                    expect_rows=1,
                )
            )
        if own_names:
            actions.append(
                TableAction(
                    table=leaf.name,
                    kind=ActionKind.UPDATE,
                    bindings=own_bindings(instance, own_names),
                    condition=id_equals(leaf.name, leaf.primary_key, instance.identifier),
                    expect_rows=1,
                )
            )
        return WritePlan(ActionKind.UPDATE, instance.type_name, instance.identifier, tuple(actions))

    def plan_delete(self, ctx: MappingContext, type_name: str, identifier: Any) -> WritePlan:
        root = ctx.root_table()
        leaf = ctx.leaf_table(type_name)
        # The root row may only go when no other derived table still owns it.
        guards = [
            self._leaf_exists(ctx, other, negated=True)
            for other in ctx.hierarchy.type_names
            if other != type_name
        ]
        actions = (
            TableAction(
                table=leaf.name,
                kind=ActionKind.DELETE,
                condition=id_equals(leaf.name, leaf.primary_key, identifier),
            ),
            TableAction(
                table=root.name,
                kind=ActionKind.DELETE,
                condition=self._where(id_equals(root.name, root.primary_key, identifier), *guards),
            ),
        )
        return WritePlan(ActionKind.DELETE, type_name, identifier, actions)

    def _join(self, ctx: MappingContext, type_name: str) -> Join:
        root = ctx.root_table()
        leaf = ctx.leaf_table(type_name)
        return Join(leaf.name, leaf.primary_key, ColumnRef(root.name, root.primary_key))

    def _column_for(
        self, ctx: MappingContext, type_name: str | None
    ) -> Callable[[str], ColumnRef | None]:
        root = ctx.root_table()
        leaf = ctx.leaf_table(type_name) if type_name is not None else None

        def column_for(name: str) -> ColumnRef | None:
            if name == ctx.identifier:
                return ColumnRef(root.name, root.primary_key)
            found = property_ref(root, name)
            if found is None and leaf is not None:
                found = property_ref(leaf, name)
            return found

        return column_for

    def plan_read(
        self,
        ctx: MappingContext,
        target: str,
        predicate: Predicate | None,
        order_by: OrderBy | None,
    ) -> ReadPlan:
        root = ctx.root_table()
        branches = []
        for type_name in ctx.targets(target):
            leaf = ctx.leaf_table(type_name)
            columns = [
                *select_columns(root, ctx.identifier),
                *[c for c in select_columns(leaf, ctx.identifier) if c.alias != ctx.identifier],
            ]
            action = TableAction(
                table=root.name,
                kind=ActionKind.SELECT,
                joins=(self._join(ctx, type_name),),
                columns=tuple(columns),
                condition=ctx.resolve(predicate, self._column_for(ctx, type_name)),
                order_by=(ColumnRef(root.name, root.primary_key),),
            )
            branches.append(ReadBranch(action, type_name=type_name))
        return self._read_plan(ctx, target, branches, order_by)

    def plan_count(
        self, ctx: MappingContext, target: str, predicate: Predicate | None
    ) -> CountPlan:
        root = ctx.root_table()
        if ctx.hierarchy.is_root(target):
            referenced = referenced_properties(predicate)
            root_only = {ctx.identifier, *ctx.hierarchy.root.property_names()}
            if referenced <= root_only:
                condition = ctx.resolve(predicate, self._column_for(ctx, None))
                return CountPlan(target, (self._count(root.name, condition),))

        actions = tuple(
            self._count(
                root.name,
                ctx.resolve(predicate, self._column_for(ctx, type_name)),
                joins=(self._join(ctx, type_name),),
            )
            for type_name in ctx.targets(target)
        )
        return CountPlan(target, actions)
