"""Rental record line encoding and decoding.

Records only store the vehicle plate and a customer key, so decoding needs a
:class:`RecordResolver` (in practice the catalog) to turn those keys back
into the entities already loaded.

Canonical line::

    RENT | Plate: ABC123 | Customer: John Doe | Date: 2024-01-01 | Amount: $50.00

Comma-delimited lines from older builds are resolved by customer ID::

    RENT,ABC123,1001,2024-01-01,50.0
    Car,ABC123,1001,2024-01-01,50.0,RENT
"""

from __future__ import annotations

import datetime
from typing import Protocol

from pydantic import ValidationError

from pyrental._constants import (
    CURRENCY_SYMBOL,
    FIELD_SEPARATOR,
    JOINER,
    LABEL_AMOUNT,
    LABEL_CUSTOMER,
    LABEL_DATE,
    LABEL_PLATE,
    LEGACY_SEPARATOR,
)
from pyrental.codec.normalize import (
    FormatMismatchError,
    first_success,
    safe_amount,
    safe_int,
    split_label,
    split_tokens,
)
from pyrental.exceptions import RentalParseError, RentalReferenceError
from pyrental.models.customer import Customer
from pyrental.models.record import RecordKind, RentalRecord
from pyrental.models.vehicle import Vehicle


class RecordResolver(Protocol):
    """Lookups a record decoder needs to resolve its references."""

    def find_vehicle_by_plate(self, plate: str) -> Vehicle | None: ...

    def find_customer_by_id(self, customer_id: int) -> Customer | None: ...

    def find_customer_by_name(self, name: str) -> Customer | None: ...


def encode_record(record: RentalRecord) -> str:
    """Return the canonical pipe-delimited line for *record*."""
    return JOINER.join(
        [
            record.kind.value,
            f"{LABEL_PLATE}: {record.vehicle.license_plate}",
            f"{LABEL_CUSTOMER}: {record.customer.name}",
            f"{LABEL_DATE}: {record.date.isoformat()}",
            f"{LABEL_AMOUNT}: {CURRENCY_SYMBOL}{record.amount:.2f}",
        ]
    )


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def _parse_kind(value: str, line: str) -> RecordKind:
    try:
        return RecordKind.from_text(value)
    except ValueError as err:
        raise RentalParseError(f"unknown record type {value!r}", line=line) from err


def _parse_date(value: str, line: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value.strip())
    except ValueError as err:
        raise RentalParseError(f"invalid record date {value!r}", line=line) from err


def _parse_amount(value: str, line: str) -> float:
    amount = safe_amount(value)
    if amount is None:
        raise RentalParseError(f"invalid record amount {value!r}", line=line)
    if amount < 0:
        raise RentalParseError(f"negative record amount {value!r}", line=line)
    return amount


def _require_value(token: str, label: str, line: str) -> str:
    _, value = split_label(token)
    if not value:
        raise RentalParseError(f"{label} is empty", line=line)
    return value


def _build_record(
    *,
    kind: RecordKind,
    vehicle: Vehicle | None,
    customer: Customer | None,
    date: datetime.date,
    amount: float,
    plate: str,
    customer_key: str | int,
    line: str,
) -> RentalRecord:
    if vehicle is None:
        raise RentalReferenceError(f"unknown vehicle {plate!r}", line=line, plate=plate, customer=customer_key)
    if customer is None:
        raise RentalReferenceError(f"unknown customer {customer_key!r}", line=line, plate=plate, customer=customer_key)
    try:
        return RentalRecord(kind=kind, vehicle=vehicle, customer=customer, date=date, amount=amount)
    except ValidationError as err:
        raise RentalParseError(f"invalid record fields: {err.error_count()} error(s)", line=line) from err


# ---------------------------------------------------------------------------
# Decode strategies
# ---------------------------------------------------------------------------


def _decode_pipe(line: str, resolver: RecordResolver) -> RentalRecord:
    if FIELD_SEPARATOR not in line:
        raise FormatMismatchError("line is not pipe-delimited", line=line)
    tokens = split_tokens(line)
    if len(tokens) < 5:
        raise RentalParseError(f"expected 5 fields, got {len(tokens)}", line=line)

    kind = _parse_kind(tokens[0], line)
    plate = _require_value(tokens[1], LABEL_PLATE, line)
    name = _require_value(tokens[2], LABEL_CUSTOMER, line)
    date = _parse_date(_require_value(tokens[3], LABEL_DATE, line), line)
    amount = _parse_amount(_require_value(tokens[4], LABEL_AMOUNT, line), line)

    return _build_record(
        kind=kind,
        vehicle=resolver.find_vehicle_by_plate(plate),
        customer=resolver.find_customer_by_name(name),
        date=date,
        amount=amount,
        plate=plate,
        customer_key=name,
        line=line,
    )


def _decode_comma(line: str, resolver: RecordResolver) -> RentalRecord:
    if FIELD_SEPARATOR in line or LEGACY_SEPARATOR not in line:
        raise FormatMismatchError("line is not comma-delimited", line=line)
    fields = [field.strip() for field in line.split(LEGACY_SEPARATOR)]
    if len(fields) < 5:
        raise RentalParseError(f"expected at least 5 fields, got {len(fields)}", line=line)

    # Six columns: vehicle type first, transaction type last.
    kind = _parse_kind(fields[5] if len(fields) >= 6 else fields[0], line)
    plate = fields[1]
    if not plate:
        raise RentalParseError(f"{LABEL_PLATE} is empty", line=line)
    customer_id = safe_int(fields[2])
    if customer_id is None:
        raise RentalParseError(f"customer ID is not an integer: {fields[2]!r}", line=line)
    date = _parse_date(fields[3], line)
    amount = _parse_amount(fields[4], line)

    return _build_record(
        kind=kind,
        vehicle=resolver.find_vehicle_by_plate(plate),
        customer=resolver.find_customer_by_id(customer_id),
        date=date,
        amount=amount,
        plate=plate,
        customer_key=customer_id,
        line=line,
    )


def decode_record(line: str, resolver: RecordResolver) -> RentalRecord:
    """Decode a record line and resolve its vehicle and customer.

    Raises :class:`RentalReferenceError` when either reference is unknown
    to *resolver*, and :class:`RentalParseError` for malformed lines.
    """
    return first_success(
        [
            lambda: _decode_pipe(line, resolver),
            lambda: _decode_comma(line, resolver),
        ]
    )
