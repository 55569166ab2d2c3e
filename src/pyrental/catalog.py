"""Rental catalog: vehicles, customers and the rental ledger.

:class:`RentalCatalog` is the only component that mutates the three
collections. Each successful mutation appends exactly one line to the
matching store before the in-memory state changes, so a failed write leaves
the catalog untouched.
"""

from __future__ import annotations

import datetime
import functools
import logging
import math
import threading
from collections.abc import Callable

from pyrental.codec import decode_customer, decode_record, decode_vehicle
from pyrental.config import RentalConfig
from pyrental.exceptions import RentalParseError, RentalReferenceError, RentalValidationError
from pyrental.models.customer import Customer
from pyrental.models.record import RecordKind, RentalRecord
from pyrental.models.vehicle import Vehicle, VehicleStatus
from pyrental.report import LoadReport, SkipReason, StoreName
from pyrental.storage import FlatFileStore

_logger = logging.getLogger(__name__)

# Status a vehicle must have before, and will have after, each transaction.
_TRANSITIONS: dict[RecordKind, tuple[VehicleStatus, VehicleStatus]] = {
    RecordKind.RENT: (VehicleStatus.AVAILABLE, VehicleStatus.RENTED),
    RecordKind.RETURN: (VehicleStatus.RENTED, VehicleStatus.AVAILABLE),
}


class RentalCatalog:
    """Fleet, customer roster and rental history backed by flat files.

    Usage::

        catalog = RentalCatalog(RentalConfig(data_dir=Path("data")))
        car = Car(license_plate="ABC123", make="Toyota", model="Corolla", year=2020, seats=5)
        catalog.add_vehicle(car)

    Construct one catalog per process and pass it to whoever needs it (or
    share a :class:`CatalogProvider`). Two catalogs over the same files would
    each append without seeing the other's writes.

    Expected business failures (duplicate keys, a vehicle in the wrong state,
    unknown entities) are reported as ``False``; only invalid input and
    storage failures raise.
    """

    def __init__(
        self,
        config: RentalConfig | None = None,
        *,
        store: FlatFileStore | None = None,
        clock: Callable[[], datetime.date] = datetime.date.today,
        autoload: bool = True,
    ) -> None:
        self._store = store or FlatFileStore(config)
        self._config = self._store.config
        self._clock = clock
        self._vehicles: list[Vehicle] = []
        self._customers: list[Customer] = []
        self._records: list[RentalRecord] = []
        self._load_report: LoadReport | None = None
        if autoload:
            self.load_all()

    @property
    def config(self) -> RentalConfig:
        return self._config

    @property
    def load_report(self) -> LoadReport | None:
        """Report from :meth:`load_all`, or ``None`` if nothing was loaded yet."""
        return self._load_report

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_vehicle(self, vehicle: Vehicle) -> bool:
        """Add *vehicle* to the fleet and persist it.

        Returns ``False`` if a vehicle with the same plate (ignoring case)
        already exists. Raises :class:`RentalValidationError` when the
        vehicle has no plate or is not ``AVAILABLE``, since a vehicle with no
        rental history cannot be rented.
        """
        if vehicle.license_plate is None:
            raise RentalValidationError("cannot add a vehicle without a license plate")
        if vehicle.status != VehicleStatus.AVAILABLE:
            raise RentalValidationError(
                f"cannot add vehicle {vehicle.license_plate} with status {vehicle.status}: new vehicles start AVAILABLE"
            )
        if self.find_vehicle_by_plate(vehicle.license_plate) is not None:
            _logger.info("Vehicle with license plate %s already exists", vehicle.license_plate)
            return False
        self._store.append_line(StoreName.VEHICLES, vehicle.info())
        self._vehicles.append(vehicle)
        _logger.debug("Added vehicle %s", vehicle.license_plate)
        return True

    def add_customer(self, customer: Customer) -> bool:
        """Add *customer* to the roster and persist it.

        Returns ``False`` if the customer ID is already taken.
        """
        if self.find_customer_by_id(customer.customer_id) is not None:
            _logger.info("Customer ID %s already exists", customer.customer_id)
            return False
        self._store.append_line(StoreName.CUSTOMERS, str(customer))
        self._customers.append(customer)
        _logger.debug("Added customer %s", customer.customer_id)
        return True

    def rent_vehicle(
        self,
        vehicle: Vehicle,
        customer: Customer,
        date: datetime.date | None = None,
        amount: float = 0.0,
    ) -> bool:
        """Rent an available vehicle to *customer*.

        On success the vehicle becomes ``RENTED`` and a RENT record is
        appended and persisted. Returns ``False`` without changing anything
        when the vehicle is not available or either entity is not in the
        catalog. *date* defaults to today.
        """
        return self._transact(RecordKind.RENT, vehicle, customer, date, amount)

    def return_vehicle(
        self,
        vehicle: Vehicle,
        customer: Customer,
        date: datetime.date | None = None,
        fees: float = 0.0,
    ) -> bool:
        """Take back a rented vehicle.

        On success the vehicle becomes ``AVAILABLE`` and a RETURN record
        carrying *fees* is appended and persisted. Returns ``False`` without
        changing anything when the vehicle is not rented.
        """
        return self._transact(RecordKind.RETURN, vehicle, customer, date, fees)

    def _transact(
        self,
        kind: RecordKind,
        vehicle: Vehicle,
        customer: Customer,
        date: datetime.date | None,
        amount: float,
    ) -> bool:
        if not math.isfinite(amount):
            raise RentalValidationError(f"amount must be a finite number, got {amount}")
        if amount < 0:
            raise RentalValidationError(f"amount must not be negative, got {amount}")

        stored_vehicle = self.find_vehicle_by_plate(vehicle.license_plate) if vehicle.license_plate else None
        if stored_vehicle is None:
            _logger.info("%s rejected: vehicle %s is not in the catalog", kind, vehicle.license_plate)
            return False
        stored_customer = self.find_customer_by_id(customer.customer_id)
        if stored_customer is None:
            _logger.info("%s rejected: customer %s is not in the catalog", kind, customer.customer_id)
            return False

        required, target = _TRANSITIONS[kind]
        if stored_vehicle.status != required:
            _logger.info(
                "%s rejected: vehicle %s is %s, expected %s",
                kind,
                stored_vehicle.license_plate,
                stored_vehicle.status,
                required,
            )
            return False

        record = RentalRecord(
            kind=kind,
            vehicle=stored_vehicle,
            customer=stored_customer,
            date=date or self._clock(),
            amount=amount,
        )
        self._store.append_line(StoreName.RECORDS, str(record))
        stored_vehicle.status = target
        self._records.append(record)
        _logger.debug("%s %s for customer %s", kind, stored_vehicle.license_plate, stored_customer.customer_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_vehicle_by_plate(self, plate: str | None) -> Vehicle | None:
        if not plate:
            return None
        for vehicle in self._vehicles:
            if vehicle.matches_plate(plate):
                return vehicle
        return None

    def find_customer_by_id(self, customer_id: int) -> Customer | None:
        for customer in self._customers:
            if customer.customer_id == customer_id:
                return customer
        return None

    def find_customer_by_name(self, name: str | None) -> Customer | None:
        if not name:
            return None
        wanted = name.strip().casefold()
        for customer in self._customers:
            if customer.name.casefold() == wanted:
                return customer
        return None

    def list_vehicles(self) -> list[Vehicle]:
        return list(self._vehicles)

    def list_available_vehicles(self) -> list[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.status == VehicleStatus.AVAILABLE]

    def list_rented_vehicles(self) -> list[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.status == VehicleStatus.RENTED]

    def list_customers(self) -> list[Customer]:
        return list(self._customers)

    def list_history(self) -> list[RentalRecord]:
        """All records in the order the transactions happened."""
        return list(self._records)

    def history_for_vehicle(self, vehicle: Vehicle) -> list[RentalRecord]:
        if vehicle.license_plate is None:
            return []
        return [record for record in self._records if record.vehicle.matches_plate(vehicle.license_plate)]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_all(self) -> LoadReport:
        """Read the vehicle, customer and record stores, in that order.

        Records are read last because decoding them looks up vehicles and
        customers. Loading happens once; later calls return the first report.
        """
        if self._load_report is not None:
            _logger.debug("Catalog already loaded; ignoring repeated load request")
            return self._load_report

        report = LoadReport()
        self._load_store(StoreName.VEHICLES, report, decode_vehicle, self._accept_vehicle)
        self._load_store(StoreName.CUSTOMERS, report, decode_customer, self._accept_customer)
        self._load_store(
            StoreName.RECORDS,
            report,
            lambda line: decode_record(line, self),
            self._accept_record,
        )
        if self._config.derive_status_from_history:
            self._derive_statuses()

        self._load_report = report
        _logger.info(
            "Loaded %d vehicles, %d customers, %d records (%d lines skipped)",
            report.loaded[StoreName.VEHICLES],
            report.loaded[StoreName.CUSTOMERS],
            report.loaded[StoreName.RECORDS],
            report.skipped_count,
        )
        return report

    def _load_store(
        self,
        store: StoreName,
        report: LoadReport,
        decode: Callable[[str], Vehicle | Customer | RentalRecord],
        accept: Callable[..., bool],
    ) -> None:
        lines = self._store.read_lines(store)
        if lines is None:
            report.mark_unavailable(store)
            return

        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entity = decode(line)
            except RentalReferenceError as err:
                _logger.debug("Dropping %s line %d: %s", store, line_number, err)
                report.add_skipped(store, line_number, line, SkipReason.MISSING_REFERENCE, str(err))
                continue
            except RentalParseError as err:
                _logger.warning("Skipping malformed %s line %d: %s (%r)", store, line_number, err, line)
                report.add_skipped(store, line_number, line, SkipReason.MALFORMED, str(err))
                continue

            if not accept(entity):
                _logger.warning("Skipping duplicate %s line %d: %r", store, line_number, line)
                report.add_skipped(store, line_number, line, SkipReason.DUPLICATE_KEY)
                continue
            report.add_loaded(store)

    def _accept_vehicle(self, vehicle: Vehicle) -> bool:
        if self.find_vehicle_by_plate(vehicle.license_plate) is not None:
            return False
        self._vehicles.append(vehicle)
        return True

    def _accept_customer(self, customer: Customer) -> bool:
        if self.find_customer_by_id(customer.customer_id) is not None:
            return False
        self._customers.append(customer)
        return True

    def _accept_record(self, record: RentalRecord) -> bool:
        self._records.append(record)
        return True

    def _derive_statuses(self) -> None:
        latest: dict[str, RecordKind] = {}
        for record in self._records:
            if record.vehicle.license_plate is not None:
                latest[record.vehicle.license_plate.casefold()] = record.kind

        for vehicle in self._vehicles:
            if vehicle.license_plate is None:
                continue
            kind = latest.get(vehicle.license_plate.casefold())
            if kind is None:
                continue
            status = _TRANSITIONS[kind][1]
            if vehicle.status != status:
                _logger.debug("Vehicle %s is %s according to its history", vehicle.license_plate, status)
                vehicle.status = status


class CatalogProvider:
    """Builds the catalog on first use, exactly once, from any thread.

    Hand the provider to collaborators instead of a module-level singleton;
    every :meth:`get` call returns the same fully loaded catalog.
    """

    def __init__(self, factory: Callable[[], RentalCatalog] = RentalCatalog) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._catalog: RentalCatalog | None = None

    @classmethod
    def from_config(cls, config: RentalConfig) -> CatalogProvider:
        return cls(functools.partial(RentalCatalog, config))

    @property
    def is_initialized(self) -> bool:
        return self._catalog is not None

    def get(self) -> RentalCatalog:
        catalog = self._catalog
        if catalog is None:
            with self._lock:
                if self._catalog is None:
                    self._catalog = self._factory()
                catalog = self._catalog
        return catalog
