"""
Registry Clients Package

HTTP client for the external vehicle registry and its retry policy.
"""
from src.vehicle_registry.clients.backoff import (
    backoff_delay,
    exponential_delay,
    throttle_delay,
)
from src.vehicle_registry.clients.registry_client import RegistryClient

__all__ = [
    "RegistryClient",
    "backoff_delay",
    "exponential_delay",
    "throttle_delay",
]
