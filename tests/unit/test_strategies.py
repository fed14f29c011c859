"""Unit tests for the table action plans each mapping strategy produces."""

from __future__ import annotations

import pytest

from inherit_map.core.enums import ActionKind, MappingStrategyKind, Operator
from inherit_map.core.exceptions import MissingIdentifierError
from inherit_map.model.hierarchy import Hierarchy
from inherit_map.strategy import (
    ConcreteTableStrategy,
    JoinedTableStrategy,
    SingleTableStrategy,
    get_strategy,
)
from inherit_map.translate.actions import (
    GENERATED_IDENTIFIER,
    AllOf,
    ColumnRef,
    Compare,
    Exists,
)
from inherit_map.translate.predicate import prop
from inherit_map.translate.translator import OperationTranslator


def _translator(vehicles: Hierarchy, kind: MappingStrategyKind) -> OperationTranslator:
    return OperationTranslator(vehicles, kind)


class TestGetStrategy:
    def test_by_kind_and_value(self) -> None:
        assert isinstance(get_strategy(MappingStrategyKind.SINGLE_TABLE), SingleTableStrategy)
        assert isinstance(get_strategy("joined_table"), JoinedTableStrategy)
        assert get_strategy("concrete_table") is get_strategy(MappingStrategyKind.CONCRETE_TABLE)

    def test_global_identifiers_only_for_concrete(self) -> None:
        assert ConcreteTableStrategy.uses_global_identifiers
        assert not SingleTableStrategy.uses_global_identifiers
        assert not JoinedTableStrategy.uses_global_identifiers

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            get_strategy("table_per_whim")


class TestSingleTablePlans:
    def test_insert_one_row_with_discriminator(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.SINGLE_TABLE)
        plan = t.insert(vehicles.new("Car", **car_values))
        (action,) = plan.actions
        assert action.table == "Vehicles"
        assert action.kind is ActionKind.INSERT
        assert action.bindings["Discriminator"] == "Car"
        assert "Id" not in action.bindings
        assert action.returns_identifier
        assert plan.identifier is GENERATED_IDENTIFIER
        assert not plan.is_multi_table

    def test_update_scoped_by_discriminator(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.SINGLE_TABLE)
        plan = t.update(vehicles.new("Car", 2, **car_values), ["Price"])
        (action,) = plan.actions
        assert action.bindings == {"Price": car_values["Price"]}
        assert action.expect_rows == 1
        assert action.condition == AllOf(
            (
                Compare(ColumnRef("Vehicles", "Id"), Operator.EQ, 2),
                Compare(ColumnRef("Vehicles", "Discriminator"), Operator.EQ, "Car"),
            )
        )

    def test_read_derived_filters_discriminator(self, vehicles) -> None:
        t = _translator(vehicles, MappingStrategyKind.SINGLE_TABLE)
        plan = t.read("Motorcycle", prop("EngineCC") > 1000)
        (branch,) = plan.branches
        assert branch.discriminator == "Discriminator"
        assert branch.action.condition == AllOf(
            (
                Compare(ColumnRef("Vehicles", "Discriminator"), Operator.EQ, "Motorcycle"),
                Compare(ColumnRef("Vehicles", "EngineCC"), Operator.GT, 1000),
            )
        )

    def test_read_root_is_one_scan(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.SINGLE_TABLE).read("Vehicle")
        assert len(plan.branches) == 1
        assert plan.branches[0].action.condition is None

    def test_count(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.SINGLE_TABLE).count("Truck")
        (action,) = plan.actions
        assert action.kind is ActionKind.COUNT


class TestJoinedTablePlans:
    def test_insert_root_then_leaf(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.JOINED_TABLE)
        plan = t.insert(vehicles.new("Car", **car_values))
        root, leaf = plan.actions
        assert (root.table, leaf.table) == ("Vehicles", "Cars")
        assert root.returns_identifier
        assert set(root.bindings) == {"Brand", "Model", "Year", "Price"}
        assert leaf.bindings["Id"] is GENERATED_IDENTIFIER
        assert set(leaf.bindings) == {"Id", "NumberOfDoors", "FuelType"}
        assert plan.is_multi_table

    def test_insert_explicit_identifier(self, vehicles, car_values) -> None:
        plan = _translator(vehicles, MappingStrategyKind.JOINED_TABLE).insert(
            vehicles.new("Car", 9, **car_values)
        )
        root, leaf = plan.actions
        assert root.bindings["Id"] == 9
        assert leaf.bindings["Id"] == 9
        assert not root.returns_identifier

    def test_update_only_touches_changed_tables(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.JOINED_TABLE)
        car = vehicles.new("Car", 1, **car_values)
        assert [a.table for a in t.update(car, ["FuelType"]).actions] == ["Cars"]
        assert [a.table for a in t.update(car, ["Price"]).actions] == ["Vehicles"]
        assert [a.table for a in t.update(car, ["FuelType", "Price"]).actions] == [
            "Vehicles",
            "Cars",
        ]

    def test_root_update_requires_leaf_row(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.JOINED_TABLE)
        (action,) = t.update(vehicles.new("Car", 1, **car_values), ["Price"]).actions
        assert Exists("Cars", "Id", ColumnRef("Vehicles", "Id")) in action.condition.conditions

    def test_delete_leaf_then_guarded_root(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.JOINED_TABLE).delete(3, "Motorcycle")
        leaf, root = plan.actions
        assert (leaf.table, root.table) == ("Motorcycles", "Vehicles")
        guards = [c for c in root.condition.conditions if isinstance(c, Exists)]
        assert {g.table for g in guards} == {"Cars", "Trucks"}
        assert all(g.negated for g in guards)

    def test_read_root_joins_each_leaf(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.JOINED_TABLE).read("Vehicle")
        assert [b.type_name for b in plan.branches] == ["Car", "Motorcycle", "Truck"]
        assert [b.action.joins[0].table for b in plan.branches] == ["Cars", "Motorcycles", "Trucks"]

    def test_read_inapplicable_property_compares_null(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.JOINED_TABLE).read(
            "Vehicle", prop("EngineCC") > 1000
        )
        car_branch = plan.branches[0]
        assert car_branch.action.condition == Compare(None, Operator.GT, 1000)

    def test_count_root_only_predicate_uses_root_table(self, vehicles) -> None:
        t = _translator(vehicles, MappingStrategyKind.JOINED_TABLE)
        (action,) = t.count("Vehicle", prop("Price") > 40000).actions
        assert action.table == "Vehicles"
        assert action.joins == ()

    def test_count_derived_predicate_joins_per_leaf(self, vehicles) -> None:
        t = _translator(vehicles, MappingStrategyKind.JOINED_TABLE)
        plan = t.count("Vehicle", prop("NumberOfAxles") == 3)
        assert len(plan.actions) == 3
        assert all(a.joins for a in plan.actions)


class TestConcreteTablePlans:
    def test_insert_requires_identifier(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.CONCRETE_TABLE)
        with pytest.raises(MissingIdentifierError):
            t.insert(vehicles.new("Car", **car_values))

    def test_insert_checks_every_table(self, vehicles, car_values) -> None:
        t = _translator(vehicles, MappingStrategyKind.CONCRETE_TABLE)
        plan = t.insert(vehicles.new("Car", 7, **car_values))
        *checks, insert = plan.actions
        assert [p.table for p in checks] == ["Cars", "Motorcycles", "Trucks"]
        assert all(p.kind is ActionKind.EXISTS and p.expect_rows == 0 for p in checks)
        assert insert.table == "Cars"
        assert insert.bindings["Id"] == 7
        assert insert.bindings["Brand"] == "Volkswagen"
        assert not plan.is_multi_table

    def test_read_root_one_scan_per_leaf(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.CONCRETE_TABLE).read("Vehicle")
        assert [b.action.table for b in plan.branches] == ["Cars", "Motorcycles", "Trucks"]
        assert all(not b.action.joins for b in plan.branches)

    def test_count_per_leaf(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.CONCRETE_TABLE).count("Vehicle")
        assert [a.table for a in plan.actions] == ["Cars", "Motorcycles", "Trucks"]

    def test_delete_single_table(self, vehicles) -> None:
        plan = _translator(vehicles, MappingStrategyKind.CONCRETE_TABLE).delete(5, "Truck")
        (action,) = plan.actions
        assert action.table == "Trucks"
