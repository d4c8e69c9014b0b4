# -*- coding: utf-8 -*-
"""
Resilient HTTP execution with timeout and retry.

Each call walks the states Attempt(0) .. Attempt(retries):
- 2xx: the JSON body is returned
- 4xx: raised at once, never retried
- 5xx, timeout, transport failure: retried after 2**n seconds, then the last
  error is raised once attempts are exhausted

The state machine is driven by tenacity; retry state is never shared
between calls.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .context import REQUEST_ID_HEADER, get_request_id
from .errors import ErrorCode, ShotAPIError, is_retryable
from .models import APIErrorBody

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


async def backoff_sleep(seconds: float) -> None:
    """Wait between attempts."""
    await asyncio.sleep(seconds)


def error_from_response(response: httpx.Response) -> ShotAPIError:
    """
    Build an error from a non-2xx response.

    Uses the structured {error, code, details} body when it parses, otherwise
    synthesizes a message from the status line.
    """
    body: APIErrorBody | None = None
    try:
        body = APIErrorBody.model_validate(response.json())
    except ValueError:
        # Not JSON, or JSON without an "error" field
        body = None

    if body is not None:
        return ShotAPIError(
            body.error,
            body.code or ErrorCode.HTTP_ERROR,
            body.details,
            response.status_code,
        )

    return ShotAPIError(
        f"HTTP {response.status_code}: {response.reason_phrase}",
        ErrorCode.HTTP_ERROR,
        status_code=response.status_code,
    )


class RequestExecutor:
    """
    Issues GET requests against the API with a bounded retry policy.

    Args:
        client: Shared HTTP client
        timeout: Per-attempt deadline in milliseconds
        retries: Number of re-attempts after the first one
        sleep: Coroutine used for backoff waits (backoff_sleep by default)
    """

    def __init__(
            self,
            client: httpx.AsyncClient,
            timeout: int = 30000,
            retries: int = 2,
            sleep: SleepFunc | None = None,
    ):
        self._client = client
        self.timeout = timeout
        self.retries = retries
        self._sleep = sleep

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    def _headers(self) -> dict[str, str]:
        request_id = get_request_id()
        return {REQUEST_ID_HEADER: request_id} if request_id else {}

    async def _get(self, url: str) -> httpx.Response:
        """Single GET bounded by the per-attempt deadline."""
        try:
            return await asyncio.wait_for(
                self._client.get(url, headers=self._headers(), timeout=self.timeout_seconds),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise ShotAPIError(
                f"Request timeout after {self.timeout}ms", ErrorCode.TIMEOUT
            ) from None
        except httpx.RequestError as e:
            raise ShotAPIError(
                str(e) or "Network error", ErrorCode.NETWORK_ERROR, type(e).__name__
            ) from e

    async def _attempt(self, url: str) -> Any:
        try:
            response = await self._get(url)
        except ShotAPIError:
            raise
        except Exception as e:
            raise ShotAPIError(
                "Unknown error occurred", ErrorCode.UNKNOWN_ERROR, str(e) or type(e).__name__
            ) from e

        if not response.is_success:
            raise error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ShotAPIError(
                "Invalid JSON in response body",
                ErrorCode.UNKNOWN_ERROR,
                str(e),
                response.status_code,
            ) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Request failed (attempt {retry_state.attempt_number}/{self.retries + 1}), "
            f"retrying in {wait:g}s: {error}",
            extra={
                "attempt": retry_state.attempt_number,
                "wait_seconds": wait,
                "error_code": getattr(error, "code", None),
                "status_code": getattr(error, "status_code", None),
            },
        )

    async def execute(self, url: str) -> Any:
        """
        Perform the GET with retries and return the parsed JSON body.

        Raises:
            ShotAPIError: the 4xx error, or the last retryable error once
                attempts are exhausted.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=1, exp_base=2),
            sleep=self._sleep or backoff_sleep,
            before_sleep=self._log_retry,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self._attempt(url)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                f"Request failed after {self.retries + 1} attempts",
                extra={"error_code": getattr(last_error, "code", None)},
            )
            if isinstance(last_error, ShotAPIError):
                raise last_error from None
            raise ShotAPIError(
                "Request failed after retries", ErrorCode.MAX_RETRIES
            ) from e

        # Only reachable if tenacity stops without an outcome
        raise ShotAPIError("Request failed after retries", ErrorCode.MAX_RETRIES)

    async def fetch_bytes(self, url: str) -> bytes:
        """
        Download raw bytes of a rendered image. Not retried.

        Raises:
            ShotAPIError: IMAGE_FETCH_ERROR on a non-2xx status, TIMEOUT or
                NETWORK_ERROR on transport failures.
        """
        response = await self._get(url)
        if not response.is_success:
            raise ShotAPIError(
                f"Failed to fetch image: HTTP {response.status_code}",
                ErrorCode.IMAGE_FETCH_ERROR,
                status_code=response.status_code,
            )
        return response.content
