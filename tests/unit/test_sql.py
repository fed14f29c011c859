"""Unit tests for rendering table actions as SQLite statements."""

from __future__ import annotations

from decimal import Decimal

from inherit_map.core.enums import ActionKind, Operator, ScalarKind
from inherit_map.core.sql import compile_action, from_db, quote, to_db
from inherit_map.translate.actions import (
    GENERATED_IDENTIFIER,
    AllOf,
    AnyOf,
    ColumnRef,
    Compare,
    Exists,
    Join,
    SelectColumn,
    TableAction,
)


def _col(table: str, column: str) -> ColumnRef:
    return ColumnRef(table, column)


class TestValueConversion:
    def test_quote_escapes(self) -> None:
        assert quote('we"ird') == '"we""ird"'

    def test_to_db(self) -> None:
        assert to_db(True) == 1
        assert to_db(Decimal("12.50")) == "12.50"
        assert to_db("x") == "x"

    def test_from_db(self) -> None:
        assert from_db(ScalarKind.DECIMAL, "1234567890123456.78") == Decimal("1234567890123456.78")
        assert from_db(ScalarKind.DECIMAL, 12) == Decimal("12")
        assert from_db(ScalarKind.DECIMAL, 12.5) == Decimal("12.5")
        assert from_db(ScalarKind.BOOLEAN, 0) is False
        assert from_db(ScalarKind.INTEGER, 3) == 3
        assert from_db(ScalarKind.TEXT, None) is None


class TestCompileWrites:
    def test_insert(self) -> None:
        action = TableAction("Cars", ActionKind.INSERT, bindings={"Id": 1, "Brand": "VW"})
        sql, params = compile_action(action)
        assert sql == 'INSERT INTO "Cars" ("Id", "Brand") VALUES (:p0, :p1)'
        assert params == {"p0": 1, "p1": "VW"}

    def test_insert_generated_identifier(self) -> None:
        action = TableAction(
            "Cars", ActionKind.INSERT, bindings={"Id": GENERATED_IDENTIFIER, "Doors": 5}
        )
        _, params = compile_action(action, generated_identifier=42)
        assert params == {"p0": 42, "p1": 5}

    def test_insert_default_values(self) -> None:
        sql, params = compile_action(TableAction("Vehicles", ActionKind.INSERT))
        assert sql == 'INSERT INTO "Vehicles" DEFAULT VALUES'
        assert params == {}

    def test_update(self) -> None:
        action = TableAction(
            "Vehicles",
            ActionKind.UPDATE,
            bindings={"Price": Decimal("32500")},
            condition=Compare(_col("Vehicles", "Id"), Operator.EQ, 2),
        )
        sql, params = compile_action(action)
        assert sql == 'UPDATE "Vehicles" SET "Price" = :p0 WHERE "Vehicles"."Id" = :p1'
        assert params == {"p0": "32500", "p1": 2}

    def test_delete_with_not_exists(self) -> None:
        action = TableAction(
            "Vehicles",
            ActionKind.DELETE,
            condition=AllOf(
                (
                    Compare(_col("Vehicles", "Id"), Operator.EQ, 4),
                    Exists("Cars", "Id", _col("Vehicles", "Id"), negated=True),
                )
            ),
        )
        sql, _ = compile_action(action)
        assert sql == (
            'DELETE FROM "Vehicles" WHERE ("Vehicles"."Id" = :p0 AND NOT EXISTS '
            '(SELECT 1 FROM "Cars" WHERE "Cars"."Id" = "Vehicles"."Id"))'
        )


class TestCompileReads:
    def test_select_with_join_and_order(self) -> None:
        action = TableAction(
            "Vehicles",
            ActionKind.SELECT,
            joins=(Join("Cars", "Id", _col("Vehicles", "Id")),),
            columns=(
                SelectColumn(_col("Vehicles", "Id"), "Id"),
                SelectColumn(_col("Cars", "FuelType"), "FuelType"),
            ),
            order_by=(_col("Vehicles", "Id"),),
        )
        sql, _ = compile_action(action)
        assert sql == (
            'SELECT "Vehicles"."Id" AS "Id", "Cars"."FuelType" AS "FuelType" FROM "Vehicles" '
            'INNER JOIN "Cars" ON "Cars"."Id" = "Vehicles"."Id" ORDER BY "Vehicles"."Id"'
        )

    def test_count(self) -> None:
        action = TableAction(
            "Cars", ActionKind.COUNT, condition=Compare(_col("Cars", "Price"), Operator.GT, 1)
        )
        sql, params = compile_action(action)
        assert sql == 'SELECT COUNT(*) FROM "Cars" WHERE "Cars"."Price" > :p0'
        assert params == {"p0": 1}

    def test_exists(self) -> None:
        action = TableAction(
            "Trucks", ActionKind.EXISTS, condition=Compare(_col("Trucks", "Id"), Operator.EQ, 7)
        )
        sql, _ = compile_action(action)
        assert sql == 'SELECT 1 FROM "Trucks" WHERE "Trucks"."Id" = :p0 LIMIT 1'


class TestCompileConditions:
    def _where(self, condition) -> tuple[str, dict]:
        sql, params = compile_action(TableAction("t", ActionKind.COUNT, condition=condition))
        return sql.split(" WHERE ", 1)[1], params

    def test_is_null(self) -> None:
        assert self._where(Compare(_col("t", "a"), Operator.EQ, None))[0] == '"t"."a" IS NULL'
        assert self._where(Compare(_col("t", "a"), Operator.NE, None))[0] == '"t"."a" IS NOT NULL'

    def test_missing_column_is_null_literal(self) -> None:
        where, params = self._where(Compare(None, Operator.GT, 1000))
        assert where == "NULL > :p0"
        assert params == {"p0": 1000}

    def test_in(self) -> None:
        where, params = self._where(Compare(_col("t", "a"), Operator.IN, ("x", "y")))
        assert where == '"t"."a" IN (:p0, :p1)'
        assert params == {"p0": "x", "p1": "y"}

    def test_empty_in_matches_nothing(self) -> None:
        assert self._where(Compare(_col("t", "a"), Operator.IN, ()))[0] == "0 = 1"

    def test_or(self) -> None:
        where, _ = self._where(
            AnyOf(
                (
                    Compare(_col("t", "a"), Operator.EQ, 1),
                    Compare(_col("t", "b"), Operator.EQ, 2),
                )
            )
        )
        assert where == '("t"."a" = :p0 OR "t"."b" = :p1)'

    def test_decimal_compared_as_number(self) -> None:
        price = ColumnRef("t", "Price", ScalarKind.DECIMAL)
        where, params = self._where(Compare(price, Operator.GT, Decimal("40000.00")))
        assert where == 'CAST("t"."Price" AS NUMERIC) > CAST(:p0 AS NUMERIC)'
        assert params == {"p0": "40000.00"}

    def test_decimal_in(self) -> None:
        price = ColumnRef("t", "Price", ScalarKind.DECIMAL)
        where, _ = self._where(Compare(price, Operator.IN, (Decimal("1"), Decimal("2.5"))))
        assert where == (
            'CAST("t"."Price" AS NUMERIC) IN (CAST(:p0 AS NUMERIC), CAST(:p1 AS NUMERIC))'
        )
