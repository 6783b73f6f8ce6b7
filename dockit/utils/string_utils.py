"""
String helpers for references and free-text inputs.
"""

import secrets
import string
import time
from typing import Optional

_ALPHABET = string.ascii_uppercase + string.digits
_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_reference(prefix: str, random_length: int = 5) -> str:
    """
    Human-readable unique reference such as ``STL1A2B3C4D5XYZ12``.

    Millisecond timestamp in base 36 followed by a random suffix.
    """
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(random_length))
    return f"{prefix}{stamp}{suffix}".upper()


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace; blank input becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
