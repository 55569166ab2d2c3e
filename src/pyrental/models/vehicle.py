"""Vehicle models.

Vehicles form a tagged union: a shared base record (plate, make, model,
year, status) plus a variant payload selected by the ``kind`` tag.
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from pyrental._constants import LICENSE_PLATE_PATTERN
from pyrental.exceptions import RentalValidationError
from pyrental.models._base import RentalBaseModel, RentalEnum, require_text


class VehicleStatus(RentalEnum):
    """Rental availability of a vehicle."""

    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"


class VehicleKind(RentalEnum):
    """Variant tag of the vehicle union."""

    CAR = "car"
    SPORT_CAR = "sport_car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"


def validate_license_plate(plate: str | None) -> str:
    """Check that *plate* is three uppercase letters followed by three digits.

    The plate is returned unchanged. Raises :class:`RentalValidationError`
    for ``None``, empty strings and anything not matching the pattern.
    """
    if plate is None or plate == "":
        raise RentalValidationError("license plate must not be empty")
    if not isinstance(plate, str) or LICENSE_PLATE_PATTERN.fullmatch(plate) is None:
        raise RentalValidationError(f"invalid license plate {plate!r}: expected 3 uppercase letters then 3 digits")
    return plate


class Vehicle(RentalBaseModel):
    """Fields shared by every vehicle variant.

    ``license_plate`` may be left unset at construction and assigned later
    through :meth:`set_license_plate`; either way it is validated. The
    catalog refuses vehicles that still have no plate.

    ``status`` is a plain attribute, but the catalog's rent/return protocol
    is the only code that should assign it.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    type_name: ClassVar[str] = "Vehicle"
    """Display name of the variant, as written by older builds in front of each line."""

    kind: VehicleKind
    license_plate: str | None = None
    make: str
    model: str
    year: int
    status: VehicleStatus = VehicleStatus.AVAILABLE

    @field_validator("license_plate")
    @classmethod
    def _check_plate(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return validate_license_plate(value)

    @field_validator("make", "model")
    @classmethod
    def _check_text(cls, value: str, info: ValidationInfo) -> str:
        return require_text(value, info.field_name or "field")

    def set_license_plate(self, plate: str | None) -> None:
        """Assign a validated license plate, stored exactly as given."""
        self.license_plate = validate_license_plate(plate)

    def get_license_plate(self) -> str | None:
        return self.license_plate

    def get_status(self) -> VehicleStatus:
        return self.status

    def set_status(self, status: VehicleStatus) -> None:
        self.status = status

    @property
    def is_available(self) -> bool:
        return self.status == VehicleStatus.AVAILABLE

    @property
    def label(self) -> str:
        """Short ``"<plate> - <make> <model>"`` form used in selection lists."""
        return f"{self.license_plate} - {self.make} {self.model}"

    def matches_plate(self, plate: str) -> bool:
        """Case-insensitive plate comparison."""
        if self.license_plate is None:
            return False
        return self.license_plate.casefold() == plate.strip().casefold()

    def info(self) -> str:
        """Canonical pipe-delimited line, used for display and persistence."""
        # Imported lazily: the codec imports these models.
        from pyrental.codec.vehicles import encode_vehicle

        return encode_vehicle(self)


class Car(Vehicle):
    type_name: ClassVar[str] = "Car"

    kind: Literal[VehicleKind.CAR] = VehicleKind.CAR
    seats: int


class SportCar(Vehicle):
    type_name: ClassVar[str] = "SportCar"

    kind: Literal[VehicleKind.SPORT_CAR] = VehicleKind.SPORT_CAR
    seats: int
    horsepower: int
    turbocharged: bool = False


class Motorcycle(Vehicle):
    type_name: ClassVar[str] = "Motorcycle"

    kind: Literal[VehicleKind.MOTORCYCLE] = VehicleKind.MOTORCYCLE
    has_sidecar: bool = False


class Truck(Vehicle):
    type_name: ClassVar[str] = "Truck"

    kind: Literal[VehicleKind.TRUCK] = VehicleKind.TRUCK
    cargo_capacity_tons: float = Field(allow_inf_nan=False)


AnyVehicle = Annotated[Car | SportCar | Motorcycle | Truck, Field(discriminator="kind")]
"""Discriminated union of every vehicle variant, keyed on ``kind``."""

VEHICLE_CLASSES: dict[VehicleKind, type[Vehicle]] = {
    VehicleKind.CAR: Car,
    VehicleKind.SPORT_CAR: SportCar,
    VehicleKind.MOTORCYCLE: Motorcycle,
    VehicleKind.TRUCK: Truck,
}
