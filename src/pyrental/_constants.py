"""Internal constants shared across the library."""

import re

VEHICLES_FILE = "vehicles.txt"
CUSTOMERS_FILE = "customers.txt"
RECORDS_FILE = "rental_records.txt"

# Three uppercase letters followed by three digits (AAA100 .. ZZZ999).
LICENSE_PLATE_PATTERN = re.compile(r"[A-Z]{3}[0-9]{3}")

FIELD_SEPARATOR = "|"
LEGACY_SEPARATOR = ","
JOINER = " | "

# ------------------------------------------------------------------
# Labels used in persisted lines
# ------------------------------------------------------------------

LABEL_SEATS = "Seats"
LABEL_HORSEPOWER = "Horsepower"
LABEL_TURBO = "Turbo"
LABEL_SIDECAR = "Sidecar"
LABEL_CARGO = "Cargo Capacity"

LABEL_CUSTOMER_ID = "Customer ID"
LABEL_NAME = "Name"

LABEL_PLATE = "Plate"
LABEL_CUSTOMER = "Customer"
LABEL_DATE = "Date"
LABEL_AMOUNT = "Amount"

CURRENCY_SYMBOL = "$"


def format_flag(value: bool) -> str:
    """Render a boolean the way persisted lines spell it (``Yes``/``No``)."""
    return "Yes" if value else "No"
