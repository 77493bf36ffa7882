"""
Transformers Package

Normalization helpers applied before lookups and storage keys.
"""
from src.vehicle_registry.transformers.registration import (
    normalize_registration,
    is_uk_registration,
)

__all__ = [
    "normalize_registration",
    "is_uk_registration",
]
