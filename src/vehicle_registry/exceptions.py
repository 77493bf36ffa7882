"""
Error Taxonomy

Classified failures raised by the registry client, the persistence adapter and
the staleness selector. Per-vehicle errors are caught by the sweep and turned
into outcomes; only selection failures end a sweep early.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification carried on failed outcomes."""

    NOT_FOUND = "not-found"
    ACCESS_DENIED = "access-denied"
    THROTTLED = "throttled"
    NETWORK = "network"
    PERSISTENCE = "persistence"
    VEHICLE_NOT_FOUND = "vehicle-not-found"
    SELECTION = "selection"
    INTERNAL = "internal"

    @property
    def is_terminal(self) -> bool:
        """True when retrying the same lookup cannot succeed."""
        return self in (ErrorKind.NOT_FOUND, ErrorKind.ACCESS_DENIED)

    @property
    def is_retryable(self) -> bool:
        return self in (ErrorKind.THROTTLED, ErrorKind.NETWORK)


class RegistrySyncError(Exception):
    """Base class for all registry sync errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class RegistryConfigurationError(RegistrySyncError):
    """Raised when the registry credential is missing."""

    pass


class RegistryLookupError(RegistrySyncError):
    """Lookup failed after classification (and retries, where allowed)."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        attempts: int = 1,
    ):
        self.kind = kind
        self.status_code = status_code
        self.attempts = attempts
        super().__init__(message)


class PersistenceError(RegistrySyncError):
    """Storage write failed after a successful lookup."""

    kind = ErrorKind.PERSISTENCE

    def __init__(self, vehicle_id: str, registration: Optional[str], message: str):
        self.vehicle_id = vehicle_id
        self.registration = registration
        super().__init__(message)


class SelectionError(RegistrySyncError):
    """Candidate selection could not read storage."""

    kind = ErrorKind.SELECTION
