"""SQL rendering of table actions for the reference entity store.

Renders :class:`TableAction` objects as SQLite statements with ``:name``
parameters, and converts values between Python scalars and SQLite storage.
Parameter names are generated (``p0``, ``p1``...), so column names never
leak into bindings.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from inherit_map.core.enums import ActionKind, Operator, ScalarKind
from inherit_map.translate.actions import (
    GENERATED_IDENTIFIER,
    AllOf,
    AnyOf,
    ColumnRef,
    Compare,
    Condition,
    Exists,
    TableAction,
)


def quote(identifier: str) -> str:
    """Quote a table or column name."""
    return '"' + identifier.replace('"', '""') + '"'


def column_sql(ref: ColumnRef) -> str:
    return f"{quote(ref.table)}.{quote(ref.column)}"


def to_db(value: Any) -> Any:
    """Convert a Python scalar to a value sqlite3 can bind."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return str(value)
    return value


def from_db(kind: ScalarKind, value: Any) -> Any:
    """Convert a stored value back to the Python type of *kind*."""
    if value is None:
        return None
    if kind is ScalarKind.DECIMAL:
        return Decimal(str(value))
    if kind is ScalarKind.BOOLEAN:
        return bool(value)
    if kind is ScalarKind.INTEGER:
        return int(value)
    return value


class _Params:
    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def add(self, value: Any) -> str:
        name = f"p{len(self.values)}"
        self.values[name] = to_db(value)
        return ":" + name


def _condition_sql(condition: Condition, params: _Params) -> str:
    if isinstance(condition, Compare):
        column = condition.column
        left = column_sql(column) if column is not None else "NULL"
        # Decimals are stored as exact text and compared by numeric value.
        numeric = column is not None and column.kind is ScalarKind.DECIMAL
        if numeric:
            left = f"CAST({left} AS NUMERIC)"

        def bind(v: Any) -> str:
            placeholder = params.add(v)
            return f"CAST({placeholder} AS NUMERIC)" if numeric else placeholder

        value = condition.value
        if condition.op is Operator.IN:
            if not value:
                return "0 = 1"
            placeholders = ", ".join(bind(v) for v in value)
            return f"{left} IN ({placeholders})"
        if value is None and condition.op is Operator.EQ:
            return f"{left} IS NULL"
        if value is None and condition.op is Operator.NE:
            return f"{left} IS NOT NULL"
        return f"{left} {condition.op.value} {bind(value)}"
    if isinstance(condition, Exists):
        prefix = "NOT EXISTS" if condition.negated else "EXISTS"
        return (
            f"{prefix} (SELECT 1 FROM {quote(condition.table)} "
            f"WHERE {column_sql(ColumnRef(condition.table, condition.column))} "
            f"= {column_sql(condition.ref)})"
        )
    joiner = " AND " if isinstance(condition, AllOf) else " OR "
    assert isinstance(condition, (AllOf, AnyOf))
    return "(" + joiner.join(_condition_sql(c, params) for c in condition.conditions) + ")"


def _from_sql(action: TableAction) -> str:
    parts = [quote(action.table)]
    for join in action.joins:
        parts.append(
            f"INNER JOIN {quote(join.table)} ON "
            f"{quote(join.table)}.{quote(join.column)} = {column_sql(join.ref)}"
        )
    return " ".join(parts)


def _where_sql(action: TableAction, params: _Params) -> str:
    if action.condition is None:
        return ""
    return " WHERE " + _condition_sql(action.condition, params)


def compile_action(
    action: TableAction, generated_identifier: Any = None
) -> tuple[str, dict[str, Any]]:
    """Render *action* as ``(sql, params)``.

    Args:
        action: The table action.
        generated_identifier: Value substituted for GENERATED_IDENTIFIER bindings.
    """
    params = _Params()
    table = quote(action.table)
    kind = action.kind

    if kind is ActionKind.INSERT:
        bindings = {
            column: generated_identifier if value is GENERATED_IDENTIFIER else value
            for column, value in action.bindings.items()
        }
        if not bindings:
            return f"INSERT INTO {table} DEFAULT VALUES", params.values
        columns = ", ".join(quote(c) for c in bindings)
        values = ", ".join(params.add(v) for v in bindings.values())
        return f"INSERT INTO {table} ({columns}) VALUES ({values})", params.values

    if kind is ActionKind.UPDATE:
        assignments = ", ".join(f"{quote(c)} = {params.add(v)}" for c, v in action.bindings.items())
        return f"UPDATE {table} SET {assignments}{_where_sql(action, params)}", params.values

    if kind is ActionKind.DELETE:
        return f"DELETE FROM {table}{_where_sql(action, params)}", params.values

    if kind is ActionKind.COUNT:
        sql = f"SELECT COUNT(*) FROM {_from_sql(action)}{_where_sql(action, params)}"
        return sql, params.values

    if kind is ActionKind.EXISTS:
        sql = f"SELECT 1 FROM {_from_sql(action)}{_where_sql(action, params)} LIMIT 1"
        return sql, params.values

    columns = (
        ", ".join(f"{column_sql(c.source)} AS {quote(c.alias)}" for c in action.columns) or "*"
    )
    sql = f"SELECT {columns} FROM {_from_sql(action)}{_where_sql(action, params)}"
    if action.order_by:
        sql += " ORDER BY " + ", ".join(column_sql(ref) for ref in action.order_by)
    return sql, params.values
