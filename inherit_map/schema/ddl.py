"""SQLite DDL rendering for derived tables."""

from __future__ import annotations

from inherit_map.core.enums import ScalarKind
from inherit_map.core.sql import quote
from inherit_map.schema.table import ColumnSchema, TableSchema

_TYPE_MAP: dict[ScalarKind, str] = {
    ScalarKind.INTEGER: "INTEGER",
    # TEXT affinity keeps every digit of a Decimal; comparisons cast to NUMERIC.
    ScalarKind.DECIMAL: "TEXT",
    ScalarKind.TEXT: "TEXT",
    ScalarKind.BOOLEAN: "INTEGER",
}


def _literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _column_ddl(column: ColumnSchema) -> str:
    parts = [quote(column.name), _TYPE_MAP[column.kind]]
    if column.primary_key:
        parts.append("PRIMARY KEY")
        if column.generated:
            parts.append("AUTOINCREMENT")
    if not column.nullable:
        parts.append("NOT NULL")
    if column.kind is ScalarKind.BOOLEAN:
        parts.append(f"CHECK ({quote(column.name)} IN (0, 1))")
    if column.max_length is not None:
        parts.append(f"CHECK (length({quote(column.name)}) <= {column.max_length})")
    return " ".join(parts)


def render_ddl(table: TableSchema) -> str:
    """Render ``CREATE TABLE IF NOT EXISTS`` for *table*."""
    lines = [_column_ddl(c) for c in table.columns]
    if table.discriminator is not None and table.discriminator_values:
        allowed = ", ".join(_literal(v) for v in table.discriminator_values)
        lines.append(f"CHECK ({quote(table.discriminator)} IN ({allowed}))")
    if table.foreign_key is not None:
        fk = table.foreign_key
        lines.append(
            f"FOREIGN KEY ({quote(fk.column)}) "
            f"REFERENCES {quote(fk.ref_table)} ({quote(fk.ref_column)})"
        )
    body = ",\n    ".join(lines)
    return f"CREATE TABLE IF NOT EXISTS {quote(table.name)} (\n    {body}\n)"
