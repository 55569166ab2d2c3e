"""Tests for the rental catalog: invariants, persistence and tolerant loading."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

from pyrental.catalog import CatalogProvider, RentalCatalog
from pyrental.config import RentalConfig
from pyrental.exceptions import RentalStorageError, RentalValidationError
from pyrental.models import Car, Customer, Motorcycle, RecordKind, SportCar, Truck, Vehicle, VehicleStatus
from pyrental.report import SkipReason, StoreName


def _catalog(data_dir: Path, **config: object) -> RentalCatalog:
    return RentalCatalog(RentalConfig(data_dir=data_dir, **config), clock=lambda: date(2024, 3, 1))


def _toyota() -> Car:
    return Car(license_plate="ABC123", make="Toyota", model="Corolla", year=2020, seats=5)


def _harley() -> Motorcycle:
    return Motorcycle(license_plate="XYZ789", make="Harley", model="Davidson", year=2019, has_sidecar=False)


def _john() -> Customer:
    return Customer(customer_id=1001, name="John Doe")


def _jane() -> Customer:
    return Customer(customer_id=1002, name="Jane Smith")


def _lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


# ------------------------------------------------------------------
# Adding entities
# ------------------------------------------------------------------


class TestAdd:
    def test_empty_data_dir_loads_nothing(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        report = catalog.load_report
        assert report is not None
        assert report.ok
        assert set(report.unavailable_stores) == set(StoreName)
        assert catalog.list_vehicles() == []
        assert catalog.list_customers() == []
        assert catalog.list_history() == []

    def test_add_vehicle_persists_canonical_line(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        assert catalog.add_vehicle(_toyota()) is True
        assert catalog.find_vehicle_by_plate("ABC123") is not None
        assert _lines(tmp_path / "vehicles.txt") == ["ABC123 | Toyota | Corolla | 2020 | AVAILABLE | Seats: 5"]

    def test_duplicate_vehicle_rejected(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        assert catalog.add_vehicle(_toyota()) is True
        duplicate = Car(license_plate="ABC123", make="Honda", model="Civic", year=2021, seats=5)
        assert catalog.add_vehicle(duplicate) is False
        assert len(catalog.list_vehicles()) == 1
        assert catalog.find_vehicle_by_plate("ABC123").make == "Toyota"  # type: ignore[union-attr]
        assert len(_lines(tmp_path / "vehicles.txt")) == 1

    def test_vehicle_without_plate_rejected(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        with pytest.raises(RentalValidationError):
            catalog.add_vehicle(Car(make="Toyota", model="Corolla", year=2020, seats=5))
        assert catalog.list_vehicles() == []

    def test_vehicle_added_as_rented_rejected(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        car.set_status(VehicleStatus.RENTED)
        with pytest.raises(RentalValidationError):
            catalog.add_vehicle(car)
        assert catalog.list_vehicles() == []
        assert not (tmp_path / "vehicles.txt").exists()

    def test_add_customer_and_duplicate(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        assert catalog.add_customer(_john()) is True
        assert catalog.add_customer(Customer(customer_id=1001, name="Someone Else")) is False
        assert catalog.list_customers() == [_john()]
        assert _lines(tmp_path / "customers.txt") == ["Customer ID: 1001 | Name: John Doe"]

    def test_multi_line_entry_is_not_written(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        with pytest.raises(RentalValidationError):
            catalog.add_customer(Customer(customer_id=7, name="John\nDoe"))
        assert catalog.list_customers() == []
        assert not (tmp_path / "customers.txt").exists()

    def test_write_failure_leaves_catalog_unchanged(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        catalog = _catalog(blocker / "data")
        with pytest.raises(RentalStorageError):
            catalog.add_vehicle(_toyota())
        assert catalog.list_vehicles() == []


# ------------------------------------------------------------------
# Lookups
# ------------------------------------------------------------------


class TestFind:
    def test_plate_lookup_ignores_case(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        assert catalog.find_vehicle_by_plate("abc123") is car
        assert catalog.find_vehicle_by_plate("ABC123") is car

    def test_find_among_several(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        catalog.add_vehicle(_toyota())
        catalog.add_vehicle(_harley())
        found = catalog.find_vehicle_by_plate("XYZ789")
        assert found is not None
        assert found.make == "Harley"

    def test_missing_entities_return_none(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        assert catalog.find_vehicle_by_plate("NON123") is None
        assert catalog.find_vehicle_by_plate("") is None
        assert catalog.find_customer_by_id(42) is None
        assert catalog.find_customer_by_name("Nobody") is None

    def test_customer_lookups(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        catalog.add_customer(_john())
        assert catalog.find_customer_by_id(1001) == _john()
        assert catalog.find_customer_by_name("  JOHN DOE ") == _john()


# ------------------------------------------------------------------
# Rent / return
# ------------------------------------------------------------------


class TestRentReturn:
    def test_rent_then_return(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        john = _john()
        catalog.add_vehicle(car)
        catalog.add_customer(john)

        assert catalog.rent_vehicle(car, john, date(2024, 1, 1), 50.00) is True
        assert car.status == VehicleStatus.RENTED
        history = catalog.list_history()
        assert len(history) == 1
        assert history[0].kind == RecordKind.RENT
        assert history[0].amount == 50.00
        assert history[0].vehicle is car

        assert catalog.return_vehicle(car, john, date(2024, 1, 2), 0.00) is True
        assert car.status == VehicleStatus.AVAILABLE
        assert [record.kind for record in catalog.list_history()] == [RecordKind.RENT, RecordKind.RETURN]
        assert _lines(tmp_path / "rental_records.txt") == [
            "RENT | Plate: ABC123 | Customer: John Doe | Date: 2024-01-01 | Amount: $50.00",
            "RETURN | Plate: ABC123 | Customer: John Doe | Date: 2024-01-02 | Amount: $0.00",
        ]

    def test_second_rent_fails_without_side_effects(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        catalog.add_customer(_john())
        catalog.add_customer(_jane())

        assert catalog.rent_vehicle(car, _john(), date(2024, 1, 1), 50.0) is True
        assert catalog.rent_vehicle(car, _jane(), date(2024, 1, 1), 50.0) is False
        assert car.status == VehicleStatus.RENTED
        assert len(catalog.list_history()) == 1
        assert len(_lines(tmp_path / "rental_records.txt")) == 1

    def test_return_of_available_vehicle_fails(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        catalog.add_customer(_john())
        assert catalog.return_vehicle(car, _john(), date(2024, 1, 2), 0.0) is False
        assert car.status == VehicleStatus.AVAILABLE
        assert catalog.list_history() == []

    def test_unknown_entities_cannot_transact(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_customer(_john())
        assert catalog.rent_vehicle(car, _john()) is False
        catalog.add_vehicle(car)
        assert catalog.rent_vehicle(car, _jane()) is False
        assert car.status == VehicleStatus.AVAILABLE
        assert catalog.list_history() == []

    def test_negative_amount_rejected(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        catalog.add_customer(_john())
        with pytest.raises(RentalValidationError):
            catalog.rent_vehicle(car, _john(), date(2024, 1, 1), -10.0)
        assert car.status == VehicleStatus.AVAILABLE
        assert catalog.list_history() == []

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_non_finite_amount_rejected(self, tmp_path: Path, amount: float) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        catalog.add_customer(_john())
        with pytest.raises(RentalValidationError):
            catalog.rent_vehicle(car, _john(), date(2024, 1, 1), amount)
        assert car.status == VehicleStatus.AVAILABLE
        assert catalog.list_history() == []
        assert not (tmp_path / "rental_records.txt").exists()

    def test_date_defaults_to_clock(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        catalog.add_vehicle(car)
        catalog.add_customer(_john())
        catalog.rent_vehicle(car, _john(), amount=30.0)
        assert catalog.list_history()[0].date == date(2024, 3, 1)

    def test_listings(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        car = _toyota()
        bike = _harley()
        catalog.add_vehicle(car)
        catalog.add_vehicle(bike)
        catalog.add_customer(_john())
        catalog.rent_vehicle(car, _john(), date(2024, 1, 1), 50.0)

        assert catalog.list_vehicles() == [car, bike]
        assert catalog.list_available_vehicles() == [bike]
        assert catalog.list_rented_vehicles() == [car]
        assert len(catalog.history_for_vehicle(car)) == 1
        assert catalog.history_for_vehicle(bike) == []


# ------------------------------------------------------------------
# Loading
# ------------------------------------------------------------------


class TestLoad:
    def test_reload_restores_state(self, tmp_path: Path) -> None:
        first = _catalog(tmp_path)
        first.add_vehicle(_toyota())
        first.add_vehicle(_harley())
        first.add_customer(_john())
        first.rent_vehicle(_toyota(), _john(), date(2024, 1, 1), 50.0)

        second = _catalog(tmp_path)
        car = second.find_vehicle_by_plate("ABC123")
        assert car is not None
        assert car.status == VehicleStatus.RENTED
        assert second.find_vehicle_by_plate("XYZ789").status == VehicleStatus.AVAILABLE  # type: ignore[union-attr]
        history = second.list_history()
        assert len(history) == 1
        assert history[0].vehicle is car
        assert history[0].customer is second.find_customer_by_id(1001)
        assert second.load_report is not None
        assert second.load_report.loaded == {
            StoreName.VEHICLES: 2,
            StoreName.CUSTOMERS: 1,
            StoreName.RECORDS: 1,
        }

    def test_status_kept_from_vehicle_store_when_not_derived(self, tmp_path: Path) -> None:
        first = _catalog(tmp_path)
        first.add_vehicle(_toyota())
        first.add_customer(_john())
        first.rent_vehicle(_toyota(), _john(), date(2024, 1, 1), 50.0)

        second = _catalog(tmp_path, derive_status_from_history=False)
        assert second.find_vehicle_by_plate("ABC123").status == VehicleStatus.AVAILABLE  # type: ignore[union-attr]

    def test_legacy_files(self, tmp_path: Path) -> None:
        (tmp_path / "vehicles.txt").write_text(
            "Car | ABC123 | Toyota | Corolla | 2020 | AVAILABLE | Seats: 5\n",
            encoding="utf-8",
        )
        (tmp_path / "customers.txt").write_text("ID: 1001 | Name: John Doe\n", encoding="utf-8")
        (tmp_path / "rental_records.txt").write_text(
            "Car,ABC123,1001,2024-01-01,50.0,RENT\nCar,QQQ111,1001,2024-01-01,50.0,RENT\n",
            encoding="utf-8",
        )

        catalog = _catalog(tmp_path)
        assert catalog.find_vehicle_by_plate("ABC123") is not None
        assert catalog.find_customer_by_id(1001) is not None
        assert len(catalog.list_history()) == 1
        assert catalog.find_vehicle_by_plate("ABC123").status == VehicleStatus.RENTED  # type: ignore[union-attr]
        assert catalog.load_report.count(SkipReason.MISSING_REFERENCE) == 1  # type: ignore[union-attr]

    def test_record_for_absent_vehicle_is_dropped_quietly(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "customers.txt").write_text("Customer ID: 1001 | Name: John Doe\n", encoding="utf-8")
        (tmp_path / "rental_records.txt").write_text("RENT,ABC123,1001,2024-01-01,50.0\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="pyrental"):
            catalog = _catalog(tmp_path)

        assert catalog.list_history() == []
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        report = catalog.load_report
        assert report is not None
        assert report.count(SkipReason.MISSING_REFERENCE, StoreName.RECORDS) == 1

    def test_malformed_and_duplicate_lines_are_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "vehicles.txt").write_text(
            "\n".join(
                [
                    "ABC123 | Toyota | Corolla | 2020 | AVAILABLE | Seats: 5",
                    "",
                    "this is not a vehicle",
                    "ABC123 | Honda | Civic | 2021 | AVAILABLE | Seats: 5",
                    "XYZ789 | Harley | Davidson | 2019 | AVAILABLE | Sidecar: No",
                ]
            )
            + "\n",
            encoding="utf-8",
        )
        (tmp_path / "customers.txt").write_text(
            "Customer ID: 1001 | Name: John Doe\nCustomer ID: oops | Name: Bad\n1001,Duplicate Doe\n",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING, logger="pyrental"):
            catalog = _catalog(tmp_path)

        assert [v.license_plate for v in catalog.list_vehicles()] == ["ABC123", "XYZ789"]
        assert catalog.find_vehicle_by_plate("ABC123").make == "Toyota"  # type: ignore[union-attr]
        assert catalog.list_customers() == [_john()]

        report = catalog.load_report
        assert report is not None
        assert not report.ok
        assert report.count(SkipReason.MALFORMED, StoreName.VEHICLES) == 1
        assert report.count(SkipReason.DUPLICATE_KEY, StoreName.VEHICLES) == 1
        assert report.count(SkipReason.MALFORMED, StoreName.CUSTOMERS) == 1
        assert report.count(SkipReason.DUPLICATE_KEY, StoreName.CUSTOMERS) == 1
        assert report.skipped[0].line_number == 3
        assert StoreName.RECORDS in report.unavailable_stores
        assert any("Skipping malformed" in r.getMessage() for r in caplog.records)

    def test_load_all_runs_once(self, tmp_path: Path) -> None:
        catalog = _catalog(tmp_path)
        report = catalog.load_report
        catalog.add_vehicle(_toyota())
        assert catalog.load_all() is report
        assert len(catalog.list_vehicles()) == 1

    def test_autoload_disabled(self, tmp_path: Path) -> None:
        (tmp_path / "customers.txt").write_text("Customer ID: 1001 | Name: John Doe\n", encoding="utf-8")
        catalog = RentalCatalog(RentalConfig(data_dir=tmp_path), autoload=False)
        assert catalog.load_report is None
        assert catalog.list_customers() == []
        catalog.load_all()
        assert catalog.list_customers() == [_john()]


# ------------------------------------------------------------------
# Reload fidelity
# ------------------------------------------------------------------


class TestReloadFidelity:
    @pytest.mark.parametrize(
        "vehicle",
        [
            Car(license_plate="ABC123", make="  Toyota ", model="Corolla  ", year=2020, seats=5),
            Car(license_plate="ABC123", make="Mercedes: AMG", model="C63, Coupe", year=2020, seats=0),
            SportCar(license_plate="FAS001", make="Porsche", model="911", year=-1, seats=-2, horsepower=10**18),
            Motorcycle(license_plate="XYZ789", make="Ural", model="Gear-Up", year=2019, has_sidecar=True),
            Truck(license_plate="TRK100", make="Volvo", model="FH16", year=2018, cargo_capacity_tons=1e-7),
            Truck(license_plate="TRK101", make="Volvo", model="FH16", year=2018, cargo_capacity_tons=-0.5),
        ],
        ids=["padded", "colon-and-comma", "extreme-numbers", "sidecar", "tiny-capacity", "negative-capacity"],
    )
    def test_added_vehicle_survives_reload(self, tmp_path: Path, vehicle: Vehicle) -> None:
        assert _catalog(tmp_path).add_vehicle(vehicle) is True

        reopened = _catalog(tmp_path)
        assert reopened.load_report is not None
        assert reopened.load_report.skipped == []
        reloaded = reopened.find_vehicle_by_plate(vehicle.license_plate)
        assert reloaded is not None
        assert type(reloaded) is type(vehicle)
        assert reloaded.model_dump() == vehicle.model_dump()

    @pytest.mark.parametrize(
        ("customer_id", "name"),
        [
            (1001, "  John Doe  "),
            (0, "Dr: Who"),
            (-7, "Doe, John"),
            (10**18, "Ann & Bob"),
        ],
    )
    def test_added_customer_and_history_survive_reload(self, tmp_path: Path, customer_id: int, name: str) -> None:
        first = _catalog(tmp_path)
        customer = Customer(customer_id=customer_id, name=name)
        first.add_vehicle(_toyota())
        first.add_customer(customer)
        assert first.rent_vehicle(_toyota(), customer, date(2024, 1, 1), 19.999) is True
        assert first.return_vehicle(_toyota(), customer, date(2024, 1, 5), 1e9) is True

        reopened = _catalog(tmp_path)
        assert reopened.load_report is not None
        assert reopened.load_report.skipped == []
        assert reopened.list_customers() == [customer]
        reloaded = [(r.kind, r.customer, r.date, r.amount) for r in reopened.list_history()]
        original = [(r.kind, r.customer, r.date, r.amount) for r in first.list_history()]
        assert reloaded == original
        assert reopened.find_vehicle_by_plate("ABC123").status == VehicleStatus.AVAILABLE  # type: ignore[union-attr]

    @pytest.mark.parametrize(
        "build",
        [
            lambda: Car(license_plate="ABC123", make="", model="Corolla", year=2020, seats=5),
            lambda: Car(license_plate="ABC123", make="Toyota", model="   ", year=2020, seats=5),
            lambda: Car(license_plate="ABC123", make="Toyota | Lexus", model="Corolla", year=2020, seats=5),
            lambda: Customer(customer_id=1, name="Ann | Bob"),
        ],
        ids=["empty-make", "blank-model", "separator-in-make", "separator-in-name"],
    )
    def test_values_that_cannot_be_stored_never_reach_disk(self, tmp_path: Path, build: Callable[[], object]) -> None:
        catalog = _catalog(tmp_path)
        with pytest.raises(RentalValidationError):
            entity = build()
            if isinstance(entity, Customer):
                catalog.add_customer(entity)
            else:
                catalog.add_vehicle(entity)  # type: ignore[arg-type]
        assert catalog.list_vehicles() == []
        assert catalog.list_customers() == []
        assert list(tmp_path.iterdir()) == []


# ------------------------------------------------------------------
# Provider
# ------------------------------------------------------------------


class TestCatalogProvider:
    def test_concurrent_first_access_builds_once(self, tmp_path: Path) -> None:
        built: list[RentalCatalog] = []
        lock = threading.Lock()

        def factory() -> RentalCatalog:
            catalog = _catalog(tmp_path)
            with lock:
                built.append(catalog)
            return catalog

        provider = CatalogProvider(factory)
        barrier = threading.Barrier(8)
        results: list[RentalCatalog] = []

        def worker() -> None:
            barrier.wait()
            catalog = provider.get()
            with lock:
                results.append(catalog)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(built) == 1
        assert len(results) == 8
        assert all(catalog is built[0] for catalog in results)
        assert provider.is_initialized

    def test_from_config(self, tmp_path: Path) -> None:
        provider = CatalogProvider.from_config(RentalConfig(data_dir=tmp_path))
        assert not provider.is_initialized
        catalog = provider.get()
        assert provider.get() is catalog
        assert catalog.config.data_dir == tmp_path
