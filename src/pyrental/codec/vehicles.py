"""Vehicle line encoding and decoding.

Canonical line::

    ABC123 | Toyota | Corolla | 2020 | AVAILABLE | Seats: 5

Older builds wrote the variant name in front of the plate::

    Car | ABC123 | Toyota | Corolla | 2020 | AVAILABLE | Seats: 5

Both are accepted. The variant is detected from the descriptor labels that
follow the status, never from the prefix alone.
"""

from __future__ import annotations

from pydantic import ValidationError

from pyrental._constants import (
    JOINER,
    LABEL_CARGO,
    LABEL_HORSEPOWER,
    LABEL_SEATS,
    LABEL_SIDECAR,
    LABEL_TURBO,
    format_flag,
)
from pyrental.codec.normalize import (
    FormatMismatchError,
    find_labelled,
    first_success,
    parse_flag,
    safe_float,
    safe_int,
    split_tokens,
)
from pyrental.exceptions import RentalParseError, RentalValidationError
from pyrental.models.vehicle import (
    VEHICLE_CLASSES,
    Car,
    Motorcycle,
    SportCar,
    Truck,
    Vehicle,
    VehicleKind,
    VehicleStatus,
    validate_license_plate,
)

# Plate, make, model, year, status and at least one descriptor.
_MIN_TOKENS = 6

_KIND_BY_TYPE_NAME: dict[str, VehicleKind] = {cls.type_name.casefold(): kind for kind, cls in VEHICLE_CLASSES.items()}


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _format_decimal(value: float) -> str:
    return repr(float(value))


def _descriptor_fields(vehicle: Vehicle) -> list[str]:
    if isinstance(vehicle, SportCar):
        return [
            f"{LABEL_SEATS}: {vehicle.seats}",
            f"{LABEL_HORSEPOWER}: {vehicle.horsepower}",
            f"{LABEL_TURBO}: {format_flag(vehicle.turbocharged)}",
        ]
    if isinstance(vehicle, Car):
        return [f"{LABEL_SEATS}: {vehicle.seats}"]
    if isinstance(vehicle, Motorcycle):
        return [f"{LABEL_SIDECAR}: {format_flag(vehicle.has_sidecar)}"]
    if isinstance(vehicle, Truck):
        return [f"{LABEL_CARGO}: {_format_decimal(vehicle.cargo_capacity_tons)}"]
    raise RentalValidationError(f"cannot encode {type(vehicle).__name__} without variant fields")


def encode_vehicle(vehicle: Vehicle) -> str:
    """Return the canonical line for *vehicle*.

    Raises :class:`RentalValidationError` when the vehicle has no plate yet.
    """
    if vehicle.license_plate is None:
        raise RentalValidationError("vehicle has no license plate")
    tokens = [
        vehicle.license_plate,
        vehicle.make,
        vehicle.model,
        str(vehicle.year),
        vehicle.status.value,
        *_descriptor_fields(vehicle),
    ]
    return JOINER.join(tokens)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _require_int(value: str | None, label: str, line: str) -> int:
    parsed = safe_int(value)
    if parsed is None:
        raise RentalParseError(f"{label} is not an integer: {value!r}", line=line)
    return parsed


def _require_flag(value: str | None, label: str, line: str) -> bool:
    parsed = parse_flag(value)
    if parsed is None:
        raise RentalParseError(f"{label} is not a Yes/No flag: {value!r}", line=line)
    return parsed


def _parse_capacity(value: str, line: str) -> float:
    text = value.strip()
    if text.lower().endswith("tons"):
        text = text[: -len("tons")]
    parsed = safe_float(text)
    if parsed is None:
        raise RentalParseError(f"{LABEL_CARGO} is not a number: {value!r}", line=line)
    return parsed


def _variant_payload(descriptors: list[str], line: str) -> tuple[VehicleKind, dict[str, object]]:
    seats = find_labelled(descriptors, LABEL_SEATS)
    if seats is not None:
        horsepower = find_labelled(descriptors, LABEL_HORSEPOWER)
        if horsepower is None:
            return VehicleKind.CAR, {"seats": _require_int(seats, LABEL_SEATS, line)}
        turbo = find_labelled(descriptors, LABEL_TURBO)
        return VehicleKind.SPORT_CAR, {
            "seats": _require_int(seats, LABEL_SEATS, line),
            "horsepower": _require_int(horsepower, LABEL_HORSEPOWER, line),
            "turbocharged": False if turbo is None else _require_flag(turbo, LABEL_TURBO, line),
        }

    sidecar = find_labelled(descriptors, LABEL_SIDECAR)
    if sidecar is not None:
        return VehicleKind.MOTORCYCLE, {"has_sidecar": _require_flag(sidecar, LABEL_SIDECAR, line)}

    cargo = find_labelled(descriptors, LABEL_CARGO)
    if cargo is not None:
        return VehicleKind.TRUCK, {"cargo_capacity_tons": _parse_capacity(cargo, line)}

    raise RentalParseError(f"unrecognised vehicle descriptor {descriptors!r}", line=line)


def _prefix_agrees(declared: VehicleKind, detected: VehicleKind) -> bool:
    if declared == detected:
        return True
    # A sport car is a car; older builds labelled both "Car".
    return declared == VehicleKind.CAR and detected == VehicleKind.SPORT_CAR


def _build_vehicle(fields: list[str], line: str, *, declared: VehicleKind | None = None) -> Vehicle:
    plate, make, model, year_text, status_text = fields[:5]
    try:
        validate_license_plate(plate)
    except RentalValidationError as err:
        raise RentalParseError(str(err), line=line) from err

    year = _require_int(year_text, "year", line)
    try:
        status = VehicleStatus.from_text(status_text)
    except ValueError as err:
        raise RentalParseError(f"unknown vehicle status {status_text!r}", line=line) from err

    kind, payload = _variant_payload(fields[5:], line)
    if declared is not None and not _prefix_agrees(declared, kind):
        raise RentalParseError(
            f"type prefix {VEHICLE_CLASSES[declared].type_name!r} does not match "
            f"{VEHICLE_CLASSES[kind].type_name!r} fields",
            line=line,
        )

    try:
        return VEHICLE_CLASSES[kind](
            license_plate=plate,
            make=make,
            model=model,
            year=year,
            status=status,
            **payload,
        )
    except (RentalValidationError, ValidationError) as err:
        raise RentalParseError(f"invalid vehicle fields: {err}", line=line) from err


def _declared_kind(token: str) -> VehicleKind | None:
    return _KIND_BY_TYPE_NAME.get(token.casefold())


def _decode_canonical(tokens: list[str], line: str) -> Vehicle:
    if len(tokens) < _MIN_TOKENS:
        raise FormatMismatchError(f"expected at least {_MIN_TOKENS} fields, got {len(tokens)}", line=line)
    if _declared_kind(tokens[0]) is not None:
        raise FormatMismatchError("line starts with a type prefix", line=line)
    return _build_vehicle(tokens, line)


def _decode_type_prefixed(tokens: list[str], line: str) -> Vehicle:
    declared = _declared_kind(tokens[0]) if tokens else None
    if declared is None:
        raise FormatMismatchError("line has no type prefix", line=line)
    if len(tokens) < _MIN_TOKENS + 1:
        raise FormatMismatchError(f"expected at least {_MIN_TOKENS + 1} fields, got {len(tokens)}", line=line)
    return _build_vehicle(tokens[1:], line, declared=declared)


def decode_vehicle(line: str) -> Vehicle:
    """Decode a vehicle line in canonical or type-prefixed form.

    Raises :class:`RentalParseError` when the line cannot be decoded.
    """
    tokens = split_tokens(line)
    return first_success(
        [
            lambda: _decode_canonical(tokens, line),
            lambda: _decode_type_prefixed(tokens, line),
        ]
    )
