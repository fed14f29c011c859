"""Property-level predicates.

A deliberately small vocabulary: comparisons of one property against a
constant, combined with ``&`` and ``|``::

    (prop("Price") > 40000) & (prop("Brand") != "BMW")

Predicates name properties, not columns. The translator resolves them per
strategy and per read branch.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Union

from inherit_map.core.enums import Operator
from inherit_map.model.hierarchy import Property, coerce_value, value_fits
from inherit_map.translate.actions import AllOf, AnyOf, ColumnRef, Compare, Condition


class _Combinable:
    def __and__(self, other: Predicate) -> And:
        return And((*_flatten(self, And), *_flatten(other, And)))  # type: ignore[arg-type]

    def __or__(self, other: Predicate) -> Or:
        return Or((*_flatten(self, Or), *_flatten(other, Or)))  # type: ignore[arg-type]


@dataclass(frozen=True)
class Comparison(_Combinable):
    property: str
    op: Operator
    value: Any


@dataclass(frozen=True)
class And(_Combinable):
    parts: tuple[Predicate, ...]


@dataclass(frozen=True)
class Or(_Combinable):
    parts: tuple[Predicate, ...]


Predicate = Union[Comparison, And, Or]


def _flatten(predicate: Any, kind: type) -> tuple[Predicate, ...]:
    if isinstance(predicate, kind):
        return predicate.parts  # type: ignore[no-any-return]
    return (predicate,)


class PropertyRef:
    """Builds comparisons against one property."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, Operator.EQ, value)

    def __ne__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, Operator.NE, value)

    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LT, value)

    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LE, value)

    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GT, value)

    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GE, value)

    def in_(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.name, Operator.IN, tuple(values))

    __hash__ = None  # type: ignore[assignment]


def prop(name: str) -> PropertyRef:
    """Reference a property (or the identifier) by name."""
    return PropertyRef(name)


def iter_comparisons(predicate: Predicate) -> Iterator[Comparison]:
    """Yield every comparison contained in *predicate*."""
    if isinstance(predicate, Comparison):
        yield predicate
        return
    for part in predicate.parts:
        yield from iter_comparisons(part)


def referenced_properties(predicate: Predicate | None) -> set[str]:
    if predicate is None:
        return set()
    return {c.property for c in iter_comparisons(predicate)}


def _compare(comparison: Comparison, column: ColumnRef | None) -> Compare:
    value = comparison.value
    if column is None or column.kind is None or value is None:
        return Compare(column, comparison.op, value)
    target = Property(comparison.property, column.kind, nullable=True)
    if comparison.op is Operator.IN:
        kept = tuple(coerce_value(target, v) for v in value if value_fits(column.kind, v))
        return Compare(column, comparison.op, kept)
    if not value_fits(column.kind, value):
        # No row of this branch can hold the value, so the comparison is NULL.
        return Compare(None, comparison.op, value)
    return Compare(column, comparison.op, coerce_value(target, value))


def resolve(predicate: Predicate, column_for: Callable[[str], ColumnRef | None]) -> Condition:
    """Turn a property predicate into a column condition for one read branch.

    Args:
        predicate: The predicate to resolve.
        column_for: Maps a property name to its column on the current
            branch, or ``None`` when the branch has no such property.

    Values are coerced to the kind of the branch's own column, so siblings
    declaring one name with different kinds are each compared on their own
    terms.
    """
    if isinstance(predicate, Comparison):
        return _compare(predicate, column_for(predicate.property))
    parts = tuple(resolve(p, column_for) for p in predicate.parts)
    if isinstance(predicate, And):
        return AllOf(parts)
    return AnyOf(parts)
