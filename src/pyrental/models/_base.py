"""Base model and enum for pyrental entities.

Every entity model inherits from :class:`RentalBaseModel` which forbids
unknown fields, so typos in keyword arguments fail loudly instead of being
dropped.

Text enums inherit from :class:`RentalEnum` which adds a case-insensitive
:meth:`RentalEnum.from_text` lookup used by the line decoders. Stores written
by hand or by older builds do not always agree on capitalisation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from pyrental._constants import FIELD_SEPARATOR
from pyrental.exceptions import RentalValidationError

TEnum = TypeVar("TEnum", bound="RentalEnum")


class RentalEnum(StrEnum):
    """Base for text-valued enums that appear in persisted lines."""

    @classmethod
    def from_text(cls: type[TEnum], text: str) -> TEnum:
        """Return the member whose value or name matches *text*, ignoring case.

        Raises :class:`ValueError` when nothing matches.
        """
        wanted = text.strip().lower()
        for member in cls:
            if member.value.lower() == wanted or member.name.lower() == wanted:
                return member
        raise ValueError(f"{text!r} is not a valid {cls.__name__}")


class RentalBaseModel(BaseModel):
    """Base for pyrental entity models."""

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
    )


def require_text(value: str, field: str) -> str:
    """Return *value* stripped, rejecting text that cannot be stored on one line.

    Raises :class:`RentalValidationError` for blank text, the field separator
    and line breaks.
    """
    text = value.strip()
    if not text:
        raise RentalValidationError(f"{field} must not be empty")
    if FIELD_SEPARATOR in text:
        raise RentalValidationError(f"{field} must not contain {FIELD_SEPARATOR!r}: {value!r}")
    if "\n" in text or "\r" in text:
        raise RentalValidationError(f"{field} must not span several lines: {value!r}")
    return text
