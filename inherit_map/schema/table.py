"""Physical table schema data classes.

Frozen dataclasses produced by schema derivation. Never mutated after
derivation.
"""

from __future__ import annotations

from dataclasses import dataclass

from inherit_map.core.enums import ScalarKind


@dataclass(frozen=True)
class ColumnSchema:
    """One column of a physical table."""

    name: str
    kind: ScalarKind
    nullable: bool = False
    primary_key: bool = False
    max_length: int | None = None
    # Store-generated value (auto-increment) when not bound explicitly
    generated: bool = False


@dataclass(frozen=True)
class ForeignKeySchema:
    """A foreign key from one column to another table's column."""

    column: str
    ref_table: str
    ref_column: str


@dataclass(frozen=True)
class TableSchema:
    """A derived physical table."""

    name: str
    owner: str  # entity type whose rows (or own properties) live here
    columns: tuple[ColumnSchema, ...]
    primary_key: str
    foreign_key: ForeignKeySchema | None = None
    discriminator: str | None = None
    discriminator_values: tuple[str, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> ColumnSchema | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None
