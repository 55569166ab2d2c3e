"""Rental record model."""

from __future__ import annotations

import datetime

from pydantic import ConfigDict, Field, field_validator

from pyrental.models._base import RentalBaseModel, RentalEnum
from pyrental.models.customer import Customer
from pyrental.models.vehicle import Vehicle


class RecordKind(RentalEnum):
    RENT = "RENT"
    RETURN = "RETURN"


class RentalRecord(RentalBaseModel):
    """One rent or return event.

    ``vehicle`` and ``customer`` point at the catalog's own instances; the
    record does not own them. Records are immutable and only ever appended
    to the history.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    kind: RecordKind
    vehicle: Vehicle
    customer: Customer
    date: datetime.date
    amount: float = Field(ge=0, allow_inf_nan=False)
    """Rental price for RENT records, extra fees for RETURN records."""

    @field_validator("amount")
    @classmethod
    def _to_cents(cls, value: float) -> float:
        # Lines carry two decimals.
        return round(value, 2)

    @property
    def plate(self) -> str | None:
        return self.vehicle.license_plate

    def get_vehicle(self) -> Vehicle:
        return self.vehicle

    def get_customer(self) -> Customer:
        return self.customer

    def __str__(self) -> str:
        from pyrental.codec.records import encode_record

        return encode_record(self)
