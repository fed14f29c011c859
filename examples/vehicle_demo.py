"""
Vehicle Demo: Inheritance Mapping

This example persists a Vehicle hierarchy (Car, Motorcycle, Truck) under the
mapping strategy chosen on the command line and runs the same canned
operations against it: polymorphic listing, type and property filters,
insert, update, delete and per-type counts.

    python examples/vehicle_demo.py --strategy joined_table
"""

import argparse
import logging
from decimal import Decimal

from inherit_map import (
    ConnectionConfig,
    Describer,
    EntityStore,
    MappingStrategyKind,
    OrderBy,
    Repository,
    ScalarKind,
    StoreConfig,
    hierarchy,
    prop,
)


def build_vehicles():
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


def build_describer(vehicles):
    def sidecar(values):
        return "with sidecar" if values["HasSidecar"] else "no sidecar"

    return (
        Describer(
            vehicles,
            lambda v: f"{v['Year']} {v['Brand']} {v['Model']} - ${v['Price']:,.2f}",
        )
        .register("Car", lambda v, base: f"{base} | {v['NumberOfDoors']}-door {v['FuelType']} Car")
        .register(
            "Motorcycle",
            lambda v, base: f"{base} | {v['EngineCC']}cc Motorcycle ({sidecar(v)})",
        )
        .register(
            "Truck",
            lambda v, base: (
                f"{base} | {v['LoadCapacity']}t capacity, {v['NumberOfAxles']}-axle Truck"
            ),
        )
    )


SEED = [
    ("Car", 1, dict(Brand="Volkswagen", Model="Golf", Year=2024, Price=28000,
                    NumberOfDoors=5, FuelType="Hybrid")),
    ("Car", 2, dict(Brand="Peugeot", Model="3008", Year=2024, Price=35000,
                    NumberOfDoors=5, FuelType="Electric")),
    ("Motorcycle", 3, dict(Brand="BMW", Model="R 1250 GS", Year=2023, Price=18000,
                           HasSidecar=False, EngineCC=1254)),
    ("Motorcycle", 4, dict(Brand="Ducati", Model="Monster", Year=2024, Price=12000,
                           HasSidecar=False, EngineCC=937)),
    ("Truck", 5, dict(Brand="Mercedes-Benz", Model="Actros", Year=2024, Price=95000,
                      LoadCapacity=Decimal("12.0"), NumberOfAxles=2)),
    ("Truck", 6, dict(Brand="Scania", Model="R 500", Year=2023, Price=125000,
                      LoadCapacity=Decimal("18.0"), NumberOfAxles=3)),
]


def heading(title):
    print("=" * 64)
    print(title)
    print("=" * 64)


def main():
    parser = argparse.ArgumentParser(description="Inheritance mapping demo")
    parser.add_argument(
        "--strategy",
        choices=[k.value for k in MappingStrategyKind],
        default=MappingStrategyKind.SINGLE_TABLE.value,
    )
    parser.add_argument("--database", default=":memory:")
    parser.add_argument("--sql", action="store_true", help="log generated SQL")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.sql else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    vehicles = build_vehicles()
    describer = build_describer(vehicles)
    config = StoreConfig(
        connection=ConnectionConfig(driver="sqlite", database=args.database),
        strategy=MappingStrategyKind(args.strategy),
    )

    with EntityStore.from_config(vehicles, config) as store:
        store.create_schema()
        print(f"Tables: {', '.join(t.name for t in store.tables)}\n")

        if store.count("Vehicle") == 0:
            for type_name, identifier, values in SEED:
                store.insert(vehicles.new(type_name, identifier, **values))

        all_vehicles = Repository(store, "Vehicle")
        cars = Repository(store, "Car")
        motorcycles = Repository(store, "Motorcycle")
        trucks = Repository(store, "Truck")

        heading("1. All vehicles (polymorphic read)")
        for vehicle in all_vehicles.all():
            print(f"  [{vehicle.type_name}] {describer.describe(vehicle)}")
        print()

        heading("2. Cars only")
        for car in cars.all():
            print(f"  {car['Brand']} {car['Model']} ({car['Year']})")
            print(f"    Doors: {car['NumberOfDoors']}, Fuel: {car['FuelType']}, "
                  f"Price: ${car['Price']:,.2f}")
        print()

        heading("3. Vehicles over $40,000, most expensive first")
        expensive = all_vehicles.filter(prop("Price") > 40000, OrderBy("Price", descending=True))
        for vehicle in expensive:
            print(f"  [{vehicle.type_name}] {vehicle['Brand']} {vehicle['Model']} "
                  f"- ${vehicle['Price']:,.2f}")
        print()

        heading("4. Motorcycles over 1000cc")
        for bike in motorcycles.filter(prop("EngineCC") > 1000):
            print(f"  {bike['Brand']} {bike['Model']} - {bike['EngineCC']}cc")
        print()

        heading("5. Adding new vehicles")
        new_car = cars.add(vehicles.new(
            "Car", Brand="Renault", Model="Clio", Year=2024, Price=22000,
            NumberOfDoors=5, FuelType="Diesel",
        ))
        new_truck = trucks.add(vehicles.new(
            "Truck", Brand="DAF", Model="XF", Year=2024, Price=110000,
            LoadCapacity=Decimal("15.0"), NumberOfAxles=3,
        ))
        print(f"  #{new_car.identifier} {describer.describe(new_car)}")
        print(f"  #{new_truck.identifier} {describer.describe(new_truck)}")
        print()

        heading("6. Updating a vehicle")
        found = cars.filter(prop("Brand") == "Peugeot")
        if found:
            peugeot = found[0]
            print(f"  Before: {describer.describe(peugeot)}")
            cars.save(peugeot.replace(Price=32500, Year=2025), ["Price", "Year"])
            print(f"  After:  {describer.describe(cars.get(peugeot.identifier))}")
        print()

        heading("7. Deleting a vehicle")
        found = motorcycles.filter(prop("Brand") == "Ducati")
        if found:
            print(f"  Deleting: {describer.describe(found[0])}")
            motorcycles.remove(found[0])
        print()

        heading("8. Inventory by type")
        print(f"  Cars:        {cars.count()}")
        print(f"  Motorcycles: {motorcycles.count()}")
        print(f"  Trucks:      {trucks.count()}")
        print(f"  Total:       {all_vehicles.count()}")


if __name__ == "__main__":
    main()
