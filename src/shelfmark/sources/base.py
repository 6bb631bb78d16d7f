"""
Catalog source interface and the shared HTTP plumbing behind it.

Every source maps one external catalog into CandidateBook values. The contract:

- Zero matches is an empty list (or None for identifier lookups), never an error.
- Transport errors, timeouts, non-success statuses, undecodable JSON, schema
  mismatches and open circuits all become SourceUnavailableError.
- No parsing exception escapes a source.

Sources are stateless: each request opens its own httpx.Client, so a single
source instance can be called from many threads at once. The only shared state
is the per-service circuit breaker, which is lock-guarded.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from shelfmark.exceptions import SourceUnavailableError
from shelfmark.models import CandidateBook
from shelfmark.utils.circuit_breaker import CircuitBreaker, CircuitOpenError
from shelfmark.utils.retry import (
    NETWORK_EXCEPTIONS,
    RETRYABLE_STATUS_CODES,
    RetryableError,
    retry_with_backoff,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class CatalogSource(Protocol):
    """A catalog that can be searched for books.

    Attributes:
        name: Short identifier used in logs and CandidateBook.source
    """

    name: str

    def search(self, query: str) -> list[CandidateBook]:
        """Free-text search. Results in source order."""
        ...

    def search_by_title_author(
        self, title: str | None, author: str | None
    ) -> list[CandidateBook]:
        """Structured title/author search."""
        ...

    def lookup_by_identifier(self, identifier: str) -> CandidateBook | None:
        """Single book by ISBN, or None when the catalog has no match."""
        ...


class HttpSource:
    """Base for JSON-over-HTTP catalog sources.

    Subclasses set ``name`` and call ``_get_json``.
    """

    name: str = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        breaker: CircuitBreaker | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: API root without trailing slash
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt for transient failures
            retry_base_delay: Initial backoff delay in seconds
            breaker: Circuit breaker guarding this service (None disables it)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.breaker = breaker
        self.transport = transport

    def _client(self) -> httpx.Client:
        if self.transport is not None:
            return httpx.Client(timeout=self.timeout, transport=self.transport)
        return httpx.Client(timeout=self.timeout, http2=True)

    def _fetch_once(self, url: str, params: dict[str, Any] | None) -> httpx.Response:
        """One HTTP GET under the circuit breaker. 429/5xx raise RetryableError."""
        if self.breaker is not None:
            with self.breaker:
                return self._send(url, params)
        return self._send(url, params)

    def _send(self, url: str, params: dict[str, Any] | None) -> httpx.Response:
        with self._client() as client:
            response = client.get(url, params=params)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableError(
                f"{self.name} returned {response.status_code}", status_code=response.status_code
            )
        return response

    def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET with retries. Returns the final response whatever its status.

        Raises:
            SourceUnavailableError: On transport failure, exhausted retries or open circuit.
        """
        url = f"{self.base_url}{path}"
        logger.debug("Fetching %s: %s params=%s", self.name, url, params)

        fetch = retry_with_backoff(
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            max_delay=10.0,
            jitter=self.retry_base_delay,
            retry_exceptions=NETWORK_EXCEPTIONS,
            logger_instance=logger,
        )(self._fetch_once)

        try:
            return fetch(url, params)
        except CircuitOpenError as e:
            raise SourceUnavailableError(str(e), source=self.name, url=url) from e
        except RetryableError as e:
            raise SourceUnavailableError(
                f"{self.name} kept failing: {e}",
                source=self.name,
                url=url,
                status_code=e.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise SourceUnavailableError(
                f"Timeout contacting {self.name}", source=self.name, url=url
            ) from e
        except (httpx.HTTPError, OSError) as e:
            raise SourceUnavailableError(
                f"Cannot reach {self.name}: {e}", source=self.name, url=url
            ) from e

    def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        not_found_ok: bool = False,
    ) -> Any:
        """GET and decode JSON.

        Args:
            path: Path appended to base_url
            params: Query parameters
            not_found_ok: Return None on 404 instead of raising

        Raises:
            SourceUnavailableError: Non-200 status or undecodable body.
        """
        response = self._get(path, params)
        url = str(response.request.url)

        if response.status_code == 404 and not_found_ok:
            logger.debug("%s has no record at %s", self.name, url)
            return None

        if response.status_code != 200:
            raise SourceUnavailableError(
                f"{self.name} returned HTTP {response.status_code}",
                source=self.name,
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.name} returned invalid JSON", source=self.name, url=url
            ) from e

    def _invalid_payload(self, error: ValidationError, what: str) -> SourceUnavailableError:
        logger.warning("Unexpected %s payload from %s: %s", what, self.name, error)
        return SourceUnavailableError(
            f"Unexpected {what} payload from {self.name}",
            source=self.name,
            details={"errors": [str(err["msg"]) for err in error.errors()]},
        )
