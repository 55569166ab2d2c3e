"""Normalization helpers.

Centralizes lenient token handling for the line decoders.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from pyrental._constants import CURRENCY_SYMBOL, FIELD_SEPARATOR
from pyrental.exceptions import RentalParseError, RentalReferenceError

T = TypeVar("T")

_TRUE_WORDS = frozenset({"yes", "y", "true", "1"})
_FALSE_WORDS = frozenset({"no", "n", "false", "0"})


def safe_float(value: Any) -> float | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        result = float(text)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    """Parse a whole number; ``"5"`` and ``"5.0"`` both give ``5``, ``"5.5"`` gives ``None``."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    parsed = safe_float(value)
    if parsed is None or not parsed.is_integer():
        return None
    return int(parsed)


def safe_amount(value: Any) -> float | None:
    """Parse a money amount, tolerating a leading currency symbol."""
    if value is None:
        return None
    text = str(value).strip()
    if text.startswith(CURRENCY_SYMBOL):
        text = text[len(CURRENCY_SYMBOL) :].strip()
    return safe_float(text)


def parse_flag(value: Any) -> bool | None:
    """Parse ``Yes``/``No`` style flags; ``None`` when unrecognised."""
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in _TRUE_WORDS:
        return True
    if normalized in _FALSE_WORDS:
        return False
    return None


def split_tokens(line: str, separator: str = FIELD_SEPARATOR) -> list[str]:
    """Split *line* on *separator*, strip every token and drop empty ones."""
    tokens = (token.strip() for token in line.split(separator))
    return [token for token in tokens if token]


def split_label(token: str) -> tuple[str | None, str]:
    """Split ``"Label: value"`` on the first colon.

    Returns ``(None, token)`` when the token carries no label.
    """
    label, sep, value = token.partition(":")
    if not sep:
        return None, token.strip()
    return label.strip(), value.strip()


def has_label(token: str, label: str) -> bool:
    found, _ = split_label(token)
    return found is not None and found.casefold() == label.casefold()


def find_labelled(tokens: Sequence[str], label: str) -> str | None:
    """Return the value of the first token labelled *label*, if any."""
    for token in tokens:
        if has_label(token, label):
            return split_label(token)[1]
    return None


class FormatMismatchError(RentalParseError):
    """The line is not laid out the way a decode strategy expects.

    Strategies raise this before looking at field values so the codec can
    tell "wrong layout" apart from "right layout, bad data".
    """


def first_success(strategies: Sequence[Callable[[], T]]) -> T:
    """Run decode *strategies* in order and return the first result.

    A :class:`RentalReferenceError` stops the search at once: the layout was
    understood and only the cross-reference is missing. Otherwise, when every
    strategy fails, the first error from a strategy whose layout matched is
    raised, falling back to the first layout mismatch.
    """
    matched_error: RentalParseError | None = None
    mismatch_error: RentalParseError | None = None
    for strategy in strategies:
        try:
            return strategy()
        except RentalReferenceError:
            raise
        except FormatMismatchError as err:
            if mismatch_error is None:
                mismatch_error = err
        except RentalParseError as err:
            if matched_error is None:
                matched_error = err
    error = matched_error or mismatch_error
    if error is None:
        raise RentalParseError("no decode strategy accepted the line")
    raise error
