"""
Registration Plate Normalization

The registry, the canonical record table and the staleness selector all key
on the same normalized plate, so "ab12 cde" and "AB12CDE" are one vehicle.
"""
import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")

# Current, prefix, suffix and dateless UK formats
_UK_PLATE = re.compile(r"^[A-Z]{1,3}[0-9]{1,4}[A-Z]{0,3}$")


def normalize_registration(registration: Optional[str]) -> Optional[str]:
    """
    Remove all whitespace from a registration and upper-case it.

    Args:
        registration: Plate as entered in stock

    Returns:
        Normalized plate, or None when the input is missing or blank
    """
    if registration is None:
        return None

    normalized = _WHITESPACE.sub("", str(registration)).upper()
    return normalized or None


def is_uk_registration(registration: Optional[str]) -> bool:
    """Basic shape check for a UK plate (after normalization)."""
    normalized = normalize_registration(registration)
    if not normalized:
        return False
    return bool(_UK_PLATE.match(normalized))
