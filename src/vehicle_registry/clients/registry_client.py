"""
DVLA Registry Client

Looks up one registration plate at a time against the DVLA Vehicle Enquiry
Service, with a hard per-attempt timeout, typed failure classification and
bounded retries. Knows nothing about batching or persistence.
"""
import time
from typing import Any, Callable, Optional

import requests

from config.settings import settings
from src.vehicle_registry.clients.backoff import backoff_delay
from src.vehicle_registry.exceptions import (
    ErrorKind,
    RegistryConfigurationError,
    RegistryLookupError,
)
from src.vehicle_registry.models.registry_facts import RegistryFacts
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.transformers.registration import (
    is_uk_registration,
    normalize_registration,
)
from src.vehicle_registry.utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_KINDS = {
    404: ErrorKind.NOT_FOUND,
    403: ErrorKind.ACCESS_DENIED,
    429: ErrorKind.THROTTLED,
}


class RegistryClient:
    """
    Client for the DVLA Vehicle Enquiry Service.

    A missing API key is a configuration fault and fails construction, so a
    misconfigured deployment never gets as far as its first lookup.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        config: Optional[SweepConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the registry client.

        Args:
            api_key: DVLA API key (defaults to settings.registry_api_key)
            base_url: Override the enquiry endpoint (for testing)
            config: Retry and timeout policy (defaults to settings)
            session: HTTP session to reuse
            sleep: Delay function used between retries
        """
        key = api_key if api_key is not None else settings.registry_api_key
        if not key or not key.strip():
            raise RegistryConfigurationError("DVLA registry API key is not configured")

        self.base_url = base_url or settings.registry_api_url
        self.config = config or SweepConfig.from_settings()
        self.session = session or requests.Session()
        self.session.headers.update({
            "x-api-key": key.strip(),
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": settings.registry_user_agent,
        })
        self._sleep = sleep
        logger.info(
            "registry_client_initialized",
            base_url=self.base_url,
            timeout=self.config.request_timeout_seconds,
            max_attempts=self.config.max_attempts
        )

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def lookup(self, registration: str) -> RegistryFacts:
        """
        Fetch registry facts for one plate.

        not-found and access-denied end the lookup after a single call.
        Throttled and network-class failures are retried up to
        config.max_attempts calls in total.

        Args:
            registration: Plate in any spacing or case

        Returns:
            Validated registry facts

        Raises:
            ValueError: if the registration is blank
            RegistryLookupError: with the classification of the last failure
        """
        normalized = normalize_registration(registration)
        if not normalized:
            raise ValueError("registration is required for a registry lookup")

        if not is_uk_registration(normalized):
            logger.warning("registry_lookup_unusual_registration", registration=normalized)

        max_attempts = self.config.max_attempts
        last_error: Optional[RegistryLookupError] = None

        for attempt in range(1, max_attempts + 1):
            try:
                facts = self._attempt(normalized)
                logger.info(
                    "registry_lookup_successful",
                    registration=normalized,
                    attempt=attempt,
                    mot_status=facts.mot_status,
                    mot_expiry_date=str(facts.mot_expiry_date) if facts.mot_expiry_date else None
                )
                return facts
            except RegistryLookupError as e:
                e.attempts = attempt
                last_error = e

                if e.kind.is_terminal:
                    logger.warning(
                        "registry_lookup_terminal_failure",
                        registration=normalized,
                        kind=e.kind.value,
                        status_code=e.status_code,
                        error=e.message
                    )
                    raise

                if attempt < max_attempts:
                    delay = backoff_delay(attempt, e.kind, self.config.retry_base_delay_seconds)
                    logger.warning(
                        "registry_lookup_retry",
                        registration=normalized,
                        kind=e.kind.value,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        delay_seconds=delay,
                        error=e.message
                    )
                    self._sleep(delay)

        logger.error(
            "registry_lookup_failed_after_retries",
            registration=normalized,
            kind=last_error.kind.value,
            max_attempts=max_attempts,
            error=last_error.message
        )
        raise last_error

    def _attempt(self, registration: str) -> RegistryFacts:
        """Issue a single enquiry and classify the response."""
        timeout = self.config.request_timeout_seconds

        try:
            response = self.session.post(
                self.base_url,
                json={"registrationNumber": registration},
                timeout=timeout,
            )
        except requests.Timeout:
            raise RegistryLookupError(
                ErrorKind.NETWORK,
                f"Registry request timed out after {timeout}s",
            )
        except requests.RequestException as e:
            raise RegistryLookupError(
                ErrorKind.NETWORK,
                f"{type(e).__name__}: {e}",
            )

        status = response.status_code
        if not 200 <= status < 300:
            kind = _STATUS_KINDS.get(status, ErrorKind.NETWORK)
            raise RegistryLookupError(
                kind,
                f"Registry returned HTTP {status}: {self._error_detail(response)}",
                status_code=status,
            )

        try:
            return RegistryFacts.from_response(response.json())
        except (ValueError, TypeError) as e:
            raise RegistryLookupError(
                ErrorKind.NETWORK,
                f"Malformed registry response: {e}",
                status_code=status,
            )

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Best-effort error text from a DVLA error body."""
        try:
            errors = response.json()["errors"]
            first = errors[0]
            return str(first.get("detail") or first.get("title"))
        except (ValueError, KeyError, IndexError, TypeError, AttributeError):
            return str(response.text)[:200]
