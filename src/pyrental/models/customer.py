"""Customer model."""

from __future__ import annotations

from pydantic import ConfigDict, field_validator

from pyrental.models._base import RentalBaseModel, require_text


class Customer(RentalBaseModel):
    """A renter on the customer roster.

    Customers are immutable once created; ``customer_id`` is the roster key.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    customer_id: int
    name: str

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        return require_text(value, "customer name")

    @classmethod
    def parse(cls, line: str) -> Customer:
        """Decode a persisted customer line.

        Accepts ``Customer ID: <id> | Name: <name>``, the older
        ``ID: <id> | Name: <name>`` and the comma form ``<id>,<name>[,...]``.
        Raises :class:`~pyrental.exceptions.RentalParseError` when a field is
        missing or the ID is not an integer.
        """
        from pyrental.codec.customers import decode_customer

        return decode_customer(line)

    def get_customer_id(self) -> int:
        return self.customer_id

    def get_customer_name(self) -> str:
        return self.name

    @property
    def label(self) -> str:
        """Short ``"<id> - <name>"`` form used in selection lists."""
        return f"{self.customer_id} - {self.name}"

    def __str__(self) -> str:
        from pyrental.codec.customers import encode_customer

        return encode_customer(self)
