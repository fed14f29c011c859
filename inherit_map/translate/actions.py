"""Table action plan data classes.

Frozen dataclasses representing the ordered, table-level work a logical
operation translates to. An entity store executes them in order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from inherit_map.core.enums import ActionKind, Operator, ScalarKind
from inherit_map.model.hierarchy import EntityInstance


class _GeneratedIdentifier:
    """Binding placeholder for the identifier an earlier action generated."""

    _instance: _GeneratedIdentifier | None = None

    def __new__(cls) -> _GeneratedIdentifier:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "GENERATED_IDENTIFIER"


GENERATED_IDENTIFIER = _GeneratedIdentifier()


# --- Conditions ---


@dataclass(frozen=True)
class ColumnRef:
    """A column of a specific table.

    ``kind`` is the scalar kind of the property stored there, when the
    reference names a property column. It takes no part in equality.
    """

    table: str
    column: str
    kind: ScalarKind | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Compare:
    """``column <op> value``.

    A ``None`` column stands for a property that does not exist on the
    branch being read; it behaves as SQL NULL.
    """

    column: ColumnRef | None
    op: Operator
    value: Any


@dataclass(frozen=True)
class AllOf:
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class AnyOf:
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class Exists:
    """True when *table* has a row whose *column* equals *ref* (none, if negated)."""

    table: str
    column: str
    ref: ColumnRef
    negated: bool = False


Condition = Union[Compare, AllOf, AnyOf, Exists]


def all_of(conditions: Iterable[Condition | None]) -> Condition | None:
    """Conjoin conditions, dropping ``None`` and collapsing single items."""
    items = tuple(c for c in conditions if c is not None)
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return AllOf(items)


# --- Actions ---


@dataclass(frozen=True)
class Join:
    """``INNER JOIN table ON table.column = ref``."""

    table: str
    column: str
    ref: ColumnRef


@dataclass(frozen=True)
class SelectColumn:
    """A selected column and the property (or key) name it is read into."""

    source: ColumnRef
    alias: str


@dataclass(frozen=True)
class TableAction:
    """One table-level action.

    ``bindings`` are the column values of INSERT/UPDATE. A binding whose
    value is :data:`GENERATED_IDENTIFIER` takes the identifier produced by
    the earlier action flagged ``returns_identifier``. ``expect_rows``, when
    set, is the exact affected/matched row count the action must produce.
    """

    table: str
    kind: ActionKind
    bindings: dict[str, Any] = field(default_factory=dict)
    condition: Condition | None = None
    joins: tuple[Join, ...] = ()
    columns: tuple[SelectColumn, ...] = ()
    order_by: tuple[ColumnRef, ...] = ()
    returns_identifier: bool = False
    expect_rows: int | None = None


@dataclass(frozen=True)
class WritePlan:
    """Ordered actions of an insert, update or delete."""

    operation: ActionKind
    type_name: str
    identifier: Any
    actions: tuple[TableAction, ...]

    @property
    def is_multi_table(self) -> bool:
        writes = {a.table for a in self.actions if a.kind is not ActionKind.EXISTS}
        return len(writes) > 1

    @property
    def tables(self) -> list[str]:
        return [a.table for a in self.actions]


@dataclass(frozen=True)
class OrderBy:
    """An explicit ordering key for polymorphic reads."""

    property: str
    descending: bool = False


@dataclass(frozen=True)
class ReadBranch:
    """One SELECT of a read plan and how to tag its rows with a type.

    Rows take ``type_name`` when set, otherwise the value of the
    ``discriminator`` alias.
    """

    action: TableAction
    type_name: str | None = None
    discriminator: str | None = None


@dataclass(frozen=True)
class ReadPlan:
    """Compiled read: branches plus the result reconstruction rule."""

    target: str
    branches: tuple[ReadBranch, ...]
    identifier: str
    type_order: tuple[str, ...]
    properties: dict[str, tuple[str, ...]]  # type name -> applicable property names
    order_by: OrderBy | None = None

    def reconstruct(
        self,
        rows_per_branch: Sequence[list[dict[str, Any]]],
        decode: Callable[[str, str, Any], Any] | None = None,
    ) -> list[EntityInstance]:
        """Build entities from each branch's rows and arrange them.

        Args:
            rows_per_branch: Row dicts keyed by alias, one list per branch.
            decode: Optional ``(type_name, property_name, raw) -> value``
                converter applied to every property value.
        """
        entities: list[EntityInstance] = []
        for branch, rows in zip(self.branches, rows_per_branch, strict=True):
            for row in rows:
                type_name = branch.type_name or row[branch.discriminator]  # type: ignore[index]
                values = {name: row.get(name) for name in self.properties[type_name]}
                if decode is not None:
                    values = {name: decode(type_name, name, raw) for name, raw in values.items()}
                entities.append(EntityInstance(type_name, row[self.identifier], values))
        return self.arrange(entities)

    def arrange(self, entities: list[EntityInstance]) -> list[EntityInstance]:
        """Order by declared type order then identifier, then by ``order_by`` if given.

        The explicit sort is stable, so ties keep the default order. Entities
        without a value for the ordering key come last.
        """
        rank = {name: index for index, name in enumerate(self.type_order)}
        ordered = sorted(entities, key=lambda e: (rank[e.type_name], e.identifier))
        if self.order_by is None:
            return ordered

        name = self.order_by.property

        def key(entity: EntityInstance) -> Any:
            if name == self.identifier:
                return entity.identifier
            return entity.values.get(name)

        present = [e for e in ordered if key(e) is not None]
        missing = [e for e in ordered if key(e) is None]
        present.sort(key=key, reverse=self.order_by.descending)
        return present + missing


@dataclass(frozen=True)
class CountPlan:
    """Count actions whose results are summed."""

    target: str
    actions: tuple[TableAction, ...]
