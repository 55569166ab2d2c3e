"""Custom exception hierarchy for pyrental."""

from __future__ import annotations


class RentalError(Exception):
    """Base exception for all pyrental errors."""


class RentalConfigError(RentalError):
    """Invalid or missing configuration."""


class RentalValidationError(RentalError):
    """A value supplied by the caller is malformed.

    Covers license plates that do not match the three-letters/three-digits
    pattern, empty required fields and negative monetary amounts.
    """


class RentalParseError(RentalError):
    """A persisted line could not be decoded."""

    def __init__(self, message: str, *, line: str = "") -> None:
        self.line = line
        super().__init__(message)


class RentalReferenceError(RentalParseError):
    """A rental record references a vehicle or customer the catalog does not hold.

    The catalog drops such records while loading; no partial record is ever
    created.
    """

    def __init__(
        self,
        message: str,
        *,
        line: str = "",
        plate: str | None = None,
        customer: str | int | None = None,
    ) -> None:
        self.plate = plate
        self.customer = customer
        super().__init__(message, line=line)


class RentalStorageError(RentalError):
    """A store file could not be written."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
