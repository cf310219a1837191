"""Payment-instrument validation and keystroke formatting.

Pure functions, no shared state.  The formatters are cheap and run on
every keystroke; the validators are stricter and run on blur and when a
checkout step transition is attempted, so a half-typed card number does
not flash an error.

Every validator returns ``None`` when the input is valid, otherwise the
``FieldError`` naming why it is not.  ``None`` being falsy lets callers
write ``if validate_cvv(cvv): ...``.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum


class FieldError(Enum):
    REQUIRED = "is required"
    INVALID_FORMAT = "has an invalid format"
    INVALID_LENGTH = "has an invalid length"
    FAILED_CHECKSUM = "is not a valid card number"
    EXPIRED = "has expired"


CARD_MIN_DIGITS = 13
CARD_MAX_DIGITS = 19
CARD_DISPLAY_DIGITS = 16
CARD_GROUP_SIZE = 4
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15

_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")
_CVV_RE = re.compile(r"^[0-9]{3,4}$")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-+()]")
_WHITESPACE_RE = re.compile(r"\s")
_NON_DIGIT_RE = re.compile(r"[^0-9]")

FIELD_LABELS = {
    "shipping_address": "Shipping address",
    "shipping_phone": "Phone number",
    "card_number": "Card number",
    "card_expiry": "Expiry date",
    "card_cvv": "CVV",
    "card_holder_name": "Cardholder name",
}


def error_message(field: str, error: FieldError) -> str:
    """Human-readable message, e.g. ``"Expiry date has expired"``."""
    label = FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
    return f"{label} {error.value}"


def _is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


# --- Luhn --------------------------------------------------------------------


def luhn_checksum(digits: str) -> int:
    """Return the Luhn sum of *digits* modulo 10 (0 means valid).

    Every second digit counting from the rightmost is doubled, and 9 is
    subtracted from doubled values above 9.
    """
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10


def passes_luhn(digits: str) -> bool:
    return _is_ascii_digits(digits) and luhn_checksum(digits) == 0


# --- Validators --------------------------------------------------------------


def validate_required(raw: str | None) -> FieldError | None:
    if not raw or not raw.strip():
        return FieldError.REQUIRED
    return None


def validate_card_number(raw: str | None) -> FieldError | None:
    digits = _WHITESPACE_RE.sub("", raw or "")
    if not digits:
        return FieldError.REQUIRED
    if not _is_ascii_digits(digits):
        return FieldError.INVALID_FORMAT
    if not CARD_MIN_DIGITS <= len(digits) <= CARD_MAX_DIGITS:
        return FieldError.INVALID_LENGTH
    if luhn_checksum(digits) != 0:
        return FieldError.FAILED_CHECKSUM
    return None


def validate_expiry(raw: str | None, today: date | None = None) -> FieldError | None:
    """Validate an ``MM/YY`` expiry against the current month.

    The two-digit year is compared with ``today.year % 100``, so a card
    expiring in ``01/05`` is reported expired in 2026 even though it could
    mean 2105.  Known limitation: centuries are not disambiguated.
    """
    value = (raw or "").strip()
    if not value:
        return FieldError.REQUIRED
    match = _EXPIRY_RE.match(value)
    if match is None:
        return FieldError.INVALID_FORMAT

    today = today or date.today()
    month, year = int(match.group(1)), int(match.group(2))
    current_year = today.year % 100
    if year < current_year or (year == current_year and month < today.month):
        return FieldError.EXPIRED
    return None


def validate_cvv(raw: str | None) -> FieldError | None:
    value = (raw or "").strip()
    if not value:
        return FieldError.REQUIRED
    if _CVV_RE.match(value) is None:
        return FieldError.INVALID_FORMAT
    return None


def validate_phone(raw: str | None) -> FieldError | None:
    digits = _PHONE_SEPARATORS_RE.sub("", raw or "")
    if not digits:
        return FieldError.REQUIRED
    if not _is_ascii_digits(digits):
        return FieldError.INVALID_FORMAT
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return FieldError.INVALID_LENGTH
    return None


# --- Formatters --------------------------------------------------------------


def format_card_number(raw: str | None) -> str:
    """``"4532015112830366"`` -> ``"4532 0151 1283 0366"``.

    Non-digits are dropped and input beyond 16 digits is cut off, so
    applying the formatter to its own output changes nothing.
    """
    digits = _NON_DIGIT_RE.sub("", raw or "")[:CARD_DISPLAY_DIGITS]
    groups = [
        digits[i:i + CARD_GROUP_SIZE]
        for i in range(0, len(digits), CARD_GROUP_SIZE)
    ]
    return " ".join(groups)


def format_expiry(raw: str | None) -> str:
    """``"1228"`` -> ``"12/28"``; ``"12"`` -> ``"12/"``; ``"1"`` -> ``"1"``.

    The slash appears as soon as the month is complete.
    """
    digits = _NON_DIGIT_RE.sub("", raw or "")[:4]
    if len(digits) < 2:
        return digits
    return f"{digits[:2]}/{digits[2:]}"
