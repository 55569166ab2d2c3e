"""pyrental - Rental fleet catalog with flat-file persistence."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyrental")
except PackageNotFoundError:
    __version__ = "0+local"
from pyrental.catalog import CatalogProvider, RentalCatalog
from pyrental.config import RentalConfig
from pyrental.exceptions import (
    RentalConfigError,
    RentalError,
    RentalParseError,
    RentalReferenceError,
    RentalStorageError,
    RentalValidationError,
)
from pyrental.models import (
    AnyVehicle,
    Car,
    Customer,
    Motorcycle,
    RecordKind,
    RentalRecord,
    SportCar,
    Truck,
    Vehicle,
    VehicleKind,
    VehicleStatus,
)
from pyrental.report import LoadReport, SkippedLine, SkipReason, StoreName
from pyrental.storage import FlatFileStore

__all__ = [
    "__version__",
    "AnyVehicle",
    "Car",
    "CatalogProvider",
    "Customer",
    "FlatFileStore",
    "LoadReport",
    "Motorcycle",
    "RecordKind",
    "RentalCatalog",
    "RentalConfig",
    "RentalConfigError",
    "RentalError",
    "RentalParseError",
    "RentalRecord",
    "RentalReferenceError",
    "RentalStorageError",
    "RentalValidationError",
    "SkipReason",
    "SkippedLine",
    "SportCar",
    "StoreName",
    "Truck",
    "Vehicle",
    "VehicleKind",
    "VehicleStatus",
]
