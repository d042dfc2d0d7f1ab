"""
HTTP Transport for the GitHub REST API.

Handles HTTP communication with automatic retry logic, token authentication,
pagination and error handling.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from cherrypicker.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CherryPickerError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from cherrypicker.logging import get_logger, log_http_request, log_http_response

logger = get_logger("http")

GITHUB_API_VERSION = "2022-11-28"


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class HTTPTransport:
    """
    HTTP transport layer with token authentication and retry logic.

    Handles:
    - Bearer token authentication (anonymous when no token is given)
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Link header pagination
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: GitHub token; requests are unauthenticated when None
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.authenticated = bool(token)

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("GitHub client will not be authenticated")

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> Any:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method
            path: API path (e.g., "/repos/owner/name/pulls/1")
            params: Query parameters
            body: JSON request body (for POST/PATCH)
            retry: Retry on retryable failures. Pass False for requests
                that must not be sent twice, such as creating a resource.

        Returns:
            Parsed JSON response

        Raises:
            CherryPickerError: On API errors
        """
        def make_request() -> httpx.Response:
            log_http_request(method, path, body=body)
            return self._client.request(method, path, params=params, json=body)

        return self._parse_json(self._execute_with_retry(make_request, retry=retry))

    def get_paginated(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        per_page: int = 100,
    ) -> list[Any]:
        """
        GET every page of a list endpoint, following Link headers.

        Args:
            path: API path of a list endpoint
            params: Extra query parameters
            per_page: Page size to request

        Returns:
            Concatenated items of all pages
        """
        items: list[Any] = []
        query: dict[str, Any] | None = {**(params or {}), "per_page": per_page}
        url = path

        while url:
            def make_request(url: str = url, query: dict[str, Any] | None = query) -> httpx.Response:
                log_http_request("GET", url)
                return self._client.request("GET", url, params=query)

            response = self._execute_with_retry(make_request)
            items.extend(self._parse_json(response))

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url", "")
            query = None

        return items

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response], retry: bool = True
    ) -> httpx.Response:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request
            retry: When False the first failure is raised as is

        Returns:
            The successful HTTP response

        Raises:
            CherryPickerError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                started = time.monotonic()
                response = request_fn()
                log_http_response(
                    response.status_code,
                    str(response.url),
                    elapsed_ms=(time.monotonic() - started) * 1000,
                )

                if response.status_code < 400:
                    return response

                error = self._parse_error_response(response)

                # 403 with an exhausted quota; 429s go through retry_on
                quota_exhausted = response.status_code == 403 and isinstance(error, RateLimitedError)

                if not retry or not (
                    self._should_retry(response.status_code, attempt)
                    or (quota_exhausted and self._should_wait_for_rate_limit(error, attempt))
                ):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                if retry_after is None and quota_exhausted:
                    retry_after = str(error.retry_after)
                wait_time = self._get_backoff_time(attempt, retry_after)
                logger.info(
                    "Retrying after HTTP %d in %.1fs (attempt %d)",
                    response.status_code, wait_time, attempt + 1,
                )
                time.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if not retry or attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                time.sleep(wait_time)

        if last_error:
            if isinstance(last_error, CherryPickerError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _should_wait_for_rate_limit(self, error: RateLimitedError, attempt: int) -> bool:
        """
        Determine if an exhausted rate limit is worth waiting out.

        GitHub answers 403 rather than 429 once the primary rate limit is
        used up. Such a request is retried only when the window resets
        within ``max_backoff`` seconds; otherwise the RateLimitedError is
        raised so the caller sees when to come back.
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return error.retry_after <= self.retry_config.max_backoff

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        """
        Decode a successful response body.

        Raises:
            ServerError: If the body is not JSON, as when a proxy answers
                with an HTML page
        """
        try:
            return response.json()
        except ValueError as e:
            raise ServerError(
                "INVALID_RESPONSE",
                f"invalid JSON in HTTP {response.status_code} response from {response.url}",
                response.headers.get("X-GitHub-Request-Id"),
            ) from e

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> CherryPickerError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate CherryPickerError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        message = data.get("message") or f"HTTP {status_code}"
        errors = data.get("errors")
        if errors:
            details = "; ".join(
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in errors
            )
            message = f"{message}: {details}"
        request_id = response.headers.get("X-GitHub-Request-Id")

        if status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, request_id)
        elif status_code == 403:
            if response.headers.get("X-RateLimit-Remaining") == "0":
                return RateLimitedError(
                    "RATE_LIMITED", message, self._rate_limit_reset(response), request_id
                )
            return AuthorizationError("FORBIDDEN", message, request_id)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, request_id)
        elif status_code == 409:
            return ConflictError("CONFLICT", message, request_id)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError("RATE_LIMITED", message, retry_after, request_id)
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, request_id)
        else:
            return ValidationError("VALIDATION_FAILED", message, request_id)

    @staticmethod
    def _rate_limit_reset(response: httpx.Response) -> int:
        """Seconds until the primary rate limit window resets."""
        try:
            reset_at = int(response.headers.get("X-RateLimit-Reset", "0"))
        except ValueError:
            return 60
        return max(reset_at - int(time.time()), 0) or 60
