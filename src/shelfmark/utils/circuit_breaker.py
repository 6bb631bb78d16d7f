"""Per-catalog circuit breakers.

A breaker opens after ``failure_threshold`` network failures in a row and then
rejects calls with CircuitOpenError until ``recovery_timeout`` seconds have
passed. After that, calls go through as trials (HALF_OPEN): a success closes
the breaker, a failure opens it for another timeout.

Every thread using a source shares its breaker, so state changes hold a lock.

Usage:
    with google_books_breaker:
        response = client.get(url)
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """A call was rejected because its catalog's breaker is open."""

    def __init__(self, service_name: str, retry_after: float) -> None:
        self.service_name = service_name
        self.retry_after = retry_after
        super().__init__(f"{service_name} circuit is OPEN; retry in {retry_after:.1f}s")


class CircuitBreaker:
    """Context manager guarding calls to one catalog.

    Args:
        service_name: Name used in logs and errors
        failure_threshold: Consecutive failures that open the breaker
        recovery_timeout: Seconds an open breaker waits before allowing trials
        exceptions: Exception types counted as failures; others pass uncounted
    """

    def __init__(
        self,
        service_name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        exceptions: tuple[type[BaseException], ...] = (Exception,),
    ) -> None:
        self.service_name = service_name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.exceptions = exceptions
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._opened_at = 0.0

    def __enter__(self) -> CircuitBreaker:
        with self._lock:
            if self._state is CircuitState.OPEN:
                waited = time.monotonic() - self._opened_at
                if waited < self.recovery_timeout:
                    raise CircuitOpenError(self.service_name, self.recovery_timeout - waited)
                self._state = CircuitState.HALF_OPEN
                logger.info("Circuit for %s half-open, trying a request", self.service_name)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> Literal[False]:
        if exc_val is None:
            self._succeeded()
        elif isinstance(exc_val, self.exceptions):
            self._failed(exc_val)
        return False

    def _succeeded(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                logger.info("Circuit for %s closed, service recovered", self.service_name)
            self._state = CircuitState.CLOSED
            self._failures = 0

    def _failed(self, exc: BaseException) -> None:
        with self._lock:
            self._failures += 1
            if self._state is CircuitState.OPEN:
                return
            if self._state is CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                logger.warning(
                    "Circuit for %s opened after %d failures: %s",
                    self.service_name,
                    self._failures,
                    exc,
                )


_NETWORK_FAILURES: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
)

google_books_breaker = CircuitBreaker("google-books", exceptions=_NETWORK_FAILURES)
open_library_breaker = CircuitBreaker("open-library", exceptions=_NETWORK_FAILURES)


def reset_all_breakers() -> None:
    """Close both catalog breakers."""
    for breaker in (google_books_breaker, open_library_breaker):
        breaker.reset()
