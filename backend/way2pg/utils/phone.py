"""Phone number normalization.

Users are keyed by phone number, so every lookup and insert goes through
`normalize_phone_number` to keep the unique index meaningful.
"""
import re
from typing import Optional

from way2pg.core.config import settings

NATIONAL_NUMBER_LENGTH = 10

_NON_DIGITS = re.compile(r"\D")
# Loose shape check applied before normalization: digits, spaces and dashes
_PHONE_SHAPE = re.compile(r"^\+?[\d\s-]{10,}$")


def normalize_phone_number(raw: str, prefix: Optional[str] = None) -> str:
    """
    Return the number as `<prefix><10 digits>`, e.g. `+919876543210`.

    Accepts `9876543210`, `+91 98765-43210`, `919876543210` and `09876543210`.
    Raises ValueError for anything that does not reduce to 10 national digits.
    """
    prefix = prefix or settings.PHONE_COUNTRY_PREFIX
    if raw is None or not _PHONE_SHAPE.match(raw.strip()):
        raise ValueError("Please provide a valid phone number")

    digits = _NON_DIGITS.sub("", raw)
    country_digits = _NON_DIGITS.sub("", prefix)

    if len(digits) > NATIONAL_NUMBER_LENGTH and digits.startswith(country_digits):
        digits = digits[len(country_digits):]
    elif len(digits) == NATIONAL_NUMBER_LENGTH + 1 and digits.startswith("0"):
        digits = digits[1:]

    if len(digits) != NATIONAL_NUMBER_LENGTH:
        raise ValueError("Please provide a valid phone number")

    return f"{prefix}{digits}"
