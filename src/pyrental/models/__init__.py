"""Entity models for the rental catalog."""

from pyrental.models._base import RentalBaseModel, RentalEnum
from pyrental.models.customer import Customer
from pyrental.models.record import RecordKind, RentalRecord
from pyrental.models.vehicle import (
    VEHICLE_CLASSES,
    AnyVehicle,
    Car,
    Motorcycle,
    SportCar,
    Truck,
    Vehicle,
    VehicleKind,
    VehicleStatus,
    validate_license_plate,
)

__all__ = [
    "VEHICLE_CLASSES",
    "AnyVehicle",
    "Car",
    "Customer",
    "Motorcycle",
    "RecordKind",
    "RentalBaseModel",
    "RentalEnum",
    "RentalRecord",
    "SportCar",
    "Truck",
    "Vehicle",
    "VehicleKind",
    "VehicleStatus",
    "validate_license_plate",
]
