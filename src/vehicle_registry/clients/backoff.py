"""
Retry Backoff Strategies

Delay before the next registry attempt, by failure kind. Attempts are
numbered from 1; the delay returned is the wait after attempt `attempt`
failed and before attempt `attempt + 1`.
"""
from src.vehicle_registry.exceptions import ErrorKind


def exponential_delay(attempt: int, base_delay: float) -> float:
    """Network-class failures: base, 2*base, 4*base, ..."""
    if attempt < 1:
        raise ValueError("attempt numbers start at 1")
    return base_delay * (2 ** (attempt - 1))


def throttle_delay(attempt: int, base_delay: float) -> float:
    """Throttled responses: base, 2*base, 3*base, ..."""
    if attempt < 1:
        raise ValueError("attempt numbers start at 1")
    return base_delay * attempt


def backoff_delay(attempt: int, kind: ErrorKind, base_delay: float) -> float:
    """
    Select the delay policy for a retryable failure.

    Args:
        attempt: Number of the attempt that just failed
        kind: Classification of that failure
        base_delay: Base delay in seconds

    Returns:
        Seconds to wait before the next attempt

    Raises:
        ValueError: for terminal kinds, which are never retried
    """
    if kind == ErrorKind.THROTTLED:
        return throttle_delay(attempt, base_delay)
    if kind == ErrorKind.NETWORK:
        return exponential_delay(attempt, base_delay)
    raise ValueError(f"{kind.value} failures are not retried")
