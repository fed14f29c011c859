"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

import pytest

from inherit_map.core.connection import ConnectionConfig, ConnectionManager
from inherit_map.core.enums import MappingStrategyKind, ScalarKind
from inherit_map.core.store import EntityStore
from inherit_map.model.builder import hierarchy
from inherit_map.model.hierarchy import Hierarchy

ALL_STRATEGIES = list(MappingStrategyKind)


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def vehicles() -> Hierarchy:
    """Vehicle root with Car, Motorcycle and Truck."""
    return (
        hierarchy("Vehicle")
        .property("Brand", ScalarKind.TEXT, max_length=100)
        .property("Model", ScalarKind.TEXT, max_length=100)
        .property("Year", ScalarKind.INTEGER)
        .property("Price", ScalarKind.DECIMAL)
        .derived("Car")
        .property("NumberOfDoors", ScalarKind.INTEGER)
        .property("FuelType", ScalarKind.TEXT, max_length=50)
        .derived("Motorcycle")
        .property("HasSidecar", ScalarKind.BOOLEAN)
        .property("EngineCC", ScalarKind.INTEGER)
        .derived("Truck")
        .property("LoadCapacity", ScalarKind.DECIMAL)
        .property("NumberOfAxles", ScalarKind.INTEGER)
        .build()
    )


@pytest.fixture
def car_values() -> dict:
    return {
        "Brand": "Volkswagen",
        "Model": "Golf",
        "Year": 2024,
        "Price": Decimal("28000"),
        "NumberOfDoors": 5,
        "FuelType": "Hybrid",
    }


@pytest.fixture
def truck_values() -> dict:
    return {
        "Brand": "Mercedes-Benz",
        "Model": "Actros",
        "Year": 2024,
        "Price": Decimal("95000"),
        "LoadCapacity": Decimal("12.0"),
        "NumberOfAxles": 2,
    }


@pytest.fixture
def seed_rows() -> list[tuple[str, int, dict]]:
    """Six vehicles, two of each type, with ids 1-6."""
    return [
        ("Car", 1, {"Brand": "Volkswagen", "Model": "Golf", "Year": 2024, "Price": 28000,
                    "NumberOfDoors": 5, "FuelType": "Hybrid"}),
        ("Car", 2, {"Brand": "Peugeot", "Model": "3008", "Year": 2024, "Price": 35000,
                    "NumberOfDoors": 5, "FuelType": "Electric"}),
        ("Motorcycle", 3, {"Brand": "BMW", "Model": "R 1250 GS", "Year": 2023, "Price": 18000,
                           "HasSidecar": False, "EngineCC": 1254}),
        ("Motorcycle", 4, {"Brand": "Ducati", "Model": "Monster", "Year": 2024, "Price": 12000,
                           "HasSidecar": False, "EngineCC": 937}),
        ("Truck", 5, {"Brand": "Mercedes-Benz", "Model": "Actros", "Year": 2024,
                      "Price": 95000, "LoadCapacity": Decimal("12.0"), "NumberOfAxles": 2}),
        ("Truck", 6, {"Brand": "Scania", "Model": "R 500", "Year": 2023, "Price": 125000,
                      "LoadCapacity": Decimal("18.0"), "NumberOfAxles": 3}),
    ]


@pytest.fixture
def make_store(vehicles: Hierarchy, sqlite_config: ConnectionConfig) -> Iterator:
    """Factory for in-memory stores with the schema created.

    Usage:
        store = make_store(MappingStrategyKind.JOINED_TABLE)
    """
    stores: list[EntityStore] = []

    def _make(strategy: MappingStrategyKind, **kwargs) -> EntityStore:
        store = EntityStore(
            kwargs.pop("hierarchy", vehicles),
            strategy,
            ConnectionManager(sqlite_config),
            **kwargs,
        )
        store.create_schema()
        stores.append(store)
        return store

    yield _make

    for store in stores:
        store.close()


@pytest.fixture(params=ALL_STRATEGIES, ids=lambda k: k.value)
def store(request, make_store) -> EntityStore:
    """An empty store, once per mapping strategy."""
    return make_store(request.param)


@pytest.fixture
def seeded_store(store: EntityStore, vehicles: Hierarchy, seed_rows) -> EntityStore:
    for type_name, identifier, values in seed_rows:
        store.insert(vehicles.new(type_name, identifier, **values))
    return store
