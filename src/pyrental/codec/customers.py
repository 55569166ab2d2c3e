"""Customer line encoding and decoding."""

from __future__ import annotations

from pydantic import ValidationError

from pyrental._constants import FIELD_SEPARATOR, JOINER, LABEL_CUSTOMER_ID, LABEL_NAME, LEGACY_SEPARATOR
from pyrental.codec.normalize import FormatMismatchError, first_success, safe_int, split_label, split_tokens
from pyrental.exceptions import RentalParseError, RentalValidationError
from pyrental.models.customer import Customer


def encode_customer(customer: Customer) -> str:
    """Return ``Customer ID: <id> | Name: <name>``."""
    return JOINER.join(
        [
            f"{LABEL_CUSTOMER_ID}: {customer.customer_id}",
            f"{LABEL_NAME}: {customer.name}",
        ]
    )


def _build_customer(id_text: str | None, name: str | None, line: str) -> Customer:
    if not id_text:
        raise RentalParseError("customer ID is missing", line=line)
    customer_id = safe_int(id_text)
    if customer_id is None:
        raise RentalParseError(f"customer ID is not an integer: {id_text!r}", line=line)
    if not name:
        raise RentalParseError("customer name is missing", line=line)
    try:
        return Customer(customer_id=customer_id, name=name)
    except (RentalValidationError, ValidationError) as err:
        raise RentalParseError(f"invalid customer fields: {err}", line=line) from err


def _decode_labelled(line: str) -> Customer:
    # Positional: token 0 carries the ID, token 1 the name, whatever their labels say.
    if FIELD_SEPARATOR not in line:
        raise FormatMismatchError("line is not pipe-delimited", line=line)
    tokens = split_tokens(line)
    if len(tokens) < 2:
        raise RentalParseError(f"expected at least 2 fields, got {len(tokens)}", line=line)
    id_label, id_text = split_label(tokens[0])
    name_label, name = split_label(tokens[1])
    if id_label is None or name_label is None:
        raise RentalParseError("customer fields must be written as 'Label: value'", line=line)
    return _build_customer(id_text, name, line)


def _decode_comma(line: str) -> Customer:
    if LEGACY_SEPARATOR not in line or FIELD_SEPARATOR in line:
        raise FormatMismatchError("line is not comma-delimited", line=line)
    # Older builds kept a contact column after the name; it is not retained.
    fields = [field.strip() for field in line.split(LEGACY_SEPARATOR)]
    if len(fields) < 2:
        raise RentalParseError(f"expected at least 2 fields, got {len(fields)}", line=line)
    return _build_customer(fields[0], fields[1], line)


def decode_customer(line: str) -> Customer:
    """Decode a customer line.

    Accepts the canonical ``Customer ID: <id> | Name: <name>``, the older
    ``ID: <id> | Name: <name>``, and ``<id>,<name>[,<contact>]``.
    """
    return first_success(
        [
            lambda: _decode_labelled(line),
            lambda: _decode_comma(line),
        ]
    )
