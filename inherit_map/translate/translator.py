"""Operation translator.

The single entry point turning logical operations into table action plans
for the active mapping strategy. Translation is a pure function of the
hierarchy, the strategy and the operation; no table action is planned for an
operation that fails validation.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from inherit_map.core.enums import MappingStrategyKind, Operator, ScalarKind
from inherit_map.core.exceptions import (
    AmbiguousOrderingError,
    MissingPropertyError,
    PropertyValueError,
    UnknownPropertyError,
)
from inherit_map.model.hierarchy import (
    EntityInstance,
    Hierarchy,
    Property,
    coerce_value,
    value_fits,
)
from inherit_map.schema.deriver import derive_schema
from inherit_map.schema.table import TableSchema
from inherit_map.strategy import MappingContext, MappingStrategy, get_strategy
from inherit_map.translate.actions import CountPlan, OrderBy, ReadPlan, WritePlan
from inherit_map.translate.predicate import Comparison, Predicate, iter_comparisons

# Kinds whose values order against each other
_NUMERIC = frozenset({ScalarKind.INTEGER, ScalarKind.DECIMAL})


class OperationTranslator:
    """Translates insert/update/delete/read/count into table actions.

    Args:
        hierarchy: The type hierarchy.
        strategy: Mapping strategy (instance or kind), fixed for the
            translator's lifetime.
        id_kind: Scalar kind of identifier columns.

    Raises:
        SchemaDerivationError: If the hierarchy cannot be mapped.
    """

    def __init__(
        self,
        hierarchy: Hierarchy,
        strategy: MappingStrategy | MappingStrategyKind,
        id_kind: ScalarKind = ScalarKind.INTEGER,
    ) -> None:
        if not isinstance(strategy, MappingStrategy):
            strategy = get_strategy(strategy)
        self._hierarchy = hierarchy
        self._strategy = strategy
        self._id_kind = id_kind
        self._tables = derive_schema(hierarchy, strategy, id_kind)
        self._ctx = MappingContext(hierarchy=hierarchy, tables={t.name: t for t in self._tables})

    @property
    def hierarchy(self) -> Hierarchy:
        return self._hierarchy

    @property
    def strategy(self) -> MappingStrategy:
        return self._strategy

    @property
    def tables(self) -> list[TableSchema]:
        """Derived physical tables, in creation order."""
        return list(self._tables)

    @property
    def generates_identifiers(self) -> bool:
        """True when the store's first table assigns identifiers on insert."""
        if self._strategy.uses_global_identifiers:
            return False
        first = self._tables[0]
        column = first.get_column(first.primary_key)
        return column is not None and column.generated

    # --- writes ---

    def insert(self, instance: EntityInstance) -> WritePlan:
        self._hierarchy.get_leaf(instance.type_name)
        values = self._hierarchy.validate_values(instance.type_name, instance.values)
        missing = [
            p.name
            for p in self._hierarchy.applicable_properties(instance.type_name)
            if values.get(p.name) is None and not p.nullable
        ]
        if missing:
            raise MissingPropertyError(instance.type_name, missing)
        instance = EntityInstance(instance.type_name, instance.identifier, values)
        return self._strategy.plan_insert(self._ctx, instance)

    def update(self, instance: EntityInstance, changed: Iterable[str] | None = None) -> WritePlan:
        """Plan an update. ``changed=None`` means every applicable property."""
        self._hierarchy.get_leaf(instance.type_name)
        if changed is None:
            names = [p.name for p in self._hierarchy.applicable_properties(instance.type_name)]
        else:
            names = list(dict.fromkeys(changed))
        values = dict(instance.values)
        for name in names:
            if name == self._hierarchy.identifier:
                raise UnknownPropertyError(instance.type_name, name)
            prop = self._hierarchy.find_property(instance.type_name, name)
            values[name] = coerce_value(prop, instance.values.get(name))
        instance = EntityInstance(instance.type_name, instance.identifier, values)
        return self._strategy.plan_update(self._ctx, instance, names)

    def delete(self, identifier: Any, type_name: str) -> WritePlan:
        self._hierarchy.get_leaf(type_name)
        return self._strategy.plan_delete(self._ctx, type_name, identifier)

    # --- reads ---

    def read(
        self,
        target: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | str | None = None,
    ) -> ReadPlan:
        """Plan a read of *target* (the root for a polymorphic read)."""
        self._hierarchy.get(target)
        self._check_predicate(target, predicate)
        if isinstance(order_by, str):
            order_by = OrderBy(order_by)
        if order_by is not None:
            self._check_ordering(target, order_by.property)
        return self._strategy.plan_read(self._ctx, target, predicate, order_by)

    def count(self, target: str, predicate: Predicate | None = None) -> CountPlan:
        self._hierarchy.get(target)
        self._check_predicate(target, predicate)
        return self._strategy.plan_count(self._ctx, target, predicate)

    # --- validation ---

    def _check_predicate(self, target: str, predicate: Predicate | None) -> None:
        if predicate is None:
            return
        for comparison in iter_comparisons(predicate):
            self._check_property(target, comparison.property)
            self._check_value(target, comparison)

    def _check_property(self, target: str, name: str) -> None:
        """Properties of a polymorphic read may come from any type in the hierarchy."""
        if name == self._hierarchy.identifier:
            return
        if self._hierarchy.is_root(target):
            if not self._hierarchy.owner_of(name):
                raise UnknownPropertyError(target, name)
            return
        self._hierarchy.find_property(target, name)

    def _declared(self, target: str, name: str) -> list[Property]:
        """Every declaration of *name* a read of *target* can meet."""
        return [
            p
            for type_name in self._ctx.targets(target)
            for p in self._hierarchy.applicable_properties(type_name)
            if p.name == name
        ]

    def _check_value(self, target: str, comparison: Comparison) -> None:
        """A compared value must fit at least one declaration of its property.

        Branches whose declaration it does not fit simply match nothing.
        """
        if comparison.property == self._hierarchy.identifier:
            return
        declared = self._declared(target, comparison.property)
        values = comparison.value if comparison.op is Operator.IN else (comparison.value,)
        for value in values:
            if not any(value_fits(p.kind, value) for p in declared):
                raise PropertyValueError(comparison.property, declared[0].kind.value, value)

    def _check_ordering(self, target: str, name: str) -> None:
        self._check_property(target, name)
        if name == self._hierarchy.identifier:
            return
        kinds = {p.kind for p in self._declared(target, name)}
        if len(kinds) > 1 and not kinds <= _NUMERIC:
            raise AmbiguousOrderingError(target, name, sorted(k.value for k in kinds))
