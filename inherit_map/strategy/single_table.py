"""Single-table mapping: the whole hierarchy lives in one table.

A required discriminator column names each row's concrete type. Columns of
derived types are nullable since rows of sibling types leave them unset.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from inherit_map.core.enums import ActionKind, MappingStrategyKind, Operator, ScalarKind
from inherit_map.core.exceptions import SchemaDerivationError
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
    GENERATED_IDENTIFIER,
    ColumnRef,
    Compare,
    CountPlan,
    OrderBy,
    ReadBranch,
    ReadPlan,
    TableAction,
    WritePlan,
)
from inherit_map.translate.predicate import Predicate


class SingleTableStrategy(MappingStrategy):
    kind = MappingStrategyKind.SINGLE_TABLE

    def derive_tables(self, hierarchy: Hierarchy, id_kind: ScalarKind) -> list[TableSchema]:
        root = hierarchy.root
        discriminator = hierarchy.discriminator

        columns: dict[str, ColumnSchema] = {
            hierarchy.identifier: ColumnSchema(
                hierarchy.identifier,
                id_kind,
                primary_key=True,
                generated=id_kind is ScalarKind.INTEGER,
            )
        }
        for prop in root.properties:
            columns[prop.name] = property_column(prop)
        if discriminator in columns:
            raise SchemaDerivationError(
                f"Property '{discriminator}' of '{root.name}' collides with "
                "the discriminator column"
            )
        columns[discriminator] = ColumnSchema(discriminator, ScalarKind.TEXT)

        owners: dict[str, str] = {}
        for entity_type in hierarchy.derived:
            for prop in entity_type.properties:
                if prop.name == discriminator:
                    raise SchemaDerivationError(
                        f"Property '{prop.name}' of '{entity_type.name}' collides with "
                        "the discriminator column"
                    )
                existing = columns.get(prop.name)
                if existing is None:
                    columns[prop.name] = property_column(prop, nullable=True)
                    owners[prop.name] = entity_type.name
                    continue
                if existing.kind is not prop.kind:
                    owner = owners.get(prop.name, root.name)
                    raise SchemaDerivationError(
                        f"Ambiguous column '{prop.name}': {existing.kind.value} in "
                        f"'{owner}' but {prop.kind.value} in '{entity_type.name}'"
                    )
                # Same name and kind in two siblings share one column.
                if existing.max_length != prop.max_length:
                    lengths = [n for n in (existing.max_length, prop.max_length) if n is not None]
                    merged = max(lengths) if len(lengths) == 2 else None
                    columns[prop.name] = ColumnSchema(
                        prop.name, prop.kind, nullable=True, max_length=merged
                    )

        return [
            TableSchema(
                name=root.table_name,
                owner=root.name,
                columns=tuple(columns.values()),
                primary_key=hierarchy.identifier,
                discriminator=discriminator,
                discriminator_values=tuple(hierarchy.type_names),
            )
        ]

    def _type_filter(self, ctx: MappingContext, type_name: str) -> Compare:
        table = ctx.root_table()
        return Compare(ColumnRef(table.name, ctx.hierarchy.discriminator), Operator.EQ, type_name)

    def plan_insert(self, ctx: MappingContext, instance: EntityInstance) -> WritePlan:
        table = ctx.root_table()
        names = [p.name for p in ctx.hierarchy.applicable_properties(instance.type_name)]
        bindings: dict[str, Any] = {}
        if instance.identifier is not None:
            bindings[ctx.identifier] = instance.identifier
        bindings.update(own_bindings(instance, names))
        bindings[ctx.hierarchy.discriminator] = instance.type_name
        action = TableAction(
            table=table.name,
            kind=ActionKind.INSERT,
            bindings=bindings,
            returns_identifier=instance.identifier is None,
        )
        return WritePlan(
            ActionKind.INSERT,
            instance.type_name,
            instance.identifier if instance.identifier is not None else GENERATED_IDENTIFIER,
            (action,),
        )

    def plan_update(
        self, ctx: MappingContext, instance: EntityInstance, changed: list[str]
    ) -> WritePlan:
        actions: tuple[TableAction, ...] = ()
        if changed:
            table = ctx.root_table()
            actions = (
                TableAction(
                    table=table.name,
                    kind=ActionKind.UPDATE,
                    bindings=own_bindings(instance, changed),
                    condition=self._where(
                        id_equals(table.name, table.primary_key, instance.identifier),
                        self._type_filter(ctx, instance.type_name),
                    ),
                    expect_rows=1,
                ),
            )
        return WritePlan(ActionKind.UPDATE, instance.type_name, instance.identifier, actions)

    def plan_delete(self, ctx: MappingContext, type_name: str, identifier: Any) -> WritePlan:
        table = ctx.root_table()
        action = TableAction(
            table=table.name,
            kind=ActionKind.DELETE,
            condition=self._where(
                id_equals(table.name, table.primary_key, identifier),
                self._type_filter(ctx, type_name),
            ),
        )
        return WritePlan(ActionKind.DELETE, type_name, identifier, (action,))

    def _column_for(self, ctx: MappingContext) -> Callable[[str], ColumnRef | None]:
        table = ctx.root_table()

        def column_for(name: str) -> ColumnRef | None:
            if name == ctx.identifier:
                return ColumnRef(table.name, table.primary_key)
            return property_ref(table, name)

        return column_for

    def _type_condition(self, ctx: MappingContext, target: str) -> Compare | None:
        if ctx.hierarchy.is_root(target):
            return None
        return self._type_filter(ctx, target)

    def plan_read(
        self,
        ctx: MappingContext,
        target: str,
        predicate: Predicate | None,
        order_by: OrderBy | None,
    ) -> ReadPlan:
        table = ctx.root_table()
        action = TableAction(
            table=table.name,
            kind=ActionKind.SELECT,
            columns=tuple(select_columns(table, ctx.identifier)),
            condition=self._where(
                self._type_condition(ctx, target),
                ctx.resolve(predicate, self._column_for(ctx)),
            ),
            order_by=(ColumnRef(table.name, table.primary_key),),
        )
        branch = ReadBranch(action, discriminator=ctx.hierarchy.discriminator)
        return self._read_plan(ctx, target, [branch], order_by)

    def plan_count(
        self, ctx: MappingContext, target: str, predicate: Predicate | None
    ) -> CountPlan:
        table = ctx.root_table()
        condition = self._where(
            self._type_condition(ctx, target),
            ctx.resolve(predicate, self._column_for(ctx)),
        )
        return CountPlan(target, (self._count(table.name, condition),))
