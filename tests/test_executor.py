# -*- coding: utf-8 -*-
"""
Tests for the resilient request executor.
"""
import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from shotapi.context import REQUEST_ID_HEADER, request_scope
from shotapi.errors import ErrorCode, ShotAPIError
from shotapi.executor import RequestExecutor, error_from_response

from .conftest import json_response, screenshot_payload

URL = "https://api.test/api/v1/screenshot?url=https%3A%2F%2Fexample.com&api_key=k"


def _executor(handler, retries=2, timeout=1000):
    """Executor over a mock transport, recording backoff waits."""
    sleep = AsyncMock()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RequestExecutor(client, timeout=timeout, retries=retries, sleep=sleep), sleep


def _sequence(*responses):
    """Handler replaying responses in order and counting calls."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = responses[len(calls) - 1]
        if isinstance(item, Exception):
            raise item
        return item

    return handler, calls


class TestErrorFromResponse:
    """Tests for error body parsing."""

    def test_structured_body(self):
        response = json_response(
            402, {"error": "Out of credits", "code": "INSUFFICIENT_CREDITS", "details": "0 left"}
        )
        error = error_from_response(response)

        assert error.message == "Out of credits"
        assert error.code == "INSUFFICIENT_CREDITS"
        assert error.details == "0 left"
        assert error.status_code == 402

    def test_structured_body_without_code(self):
        error = error_from_response(json_response(400, {"error": "Bad request"}))
        assert error.message == "Bad request"
        assert error.code is ErrorCode.HTTP_ERROR

    def test_unparseable_body_synthesizes_message(self):
        response = httpx.Response(502, content=b"<html>Bad Gateway</html>")
        error = error_from_response(response)

        assert error.message == "HTTP 502: Bad Gateway"
        assert error.code is ErrorCode.HTTP_ERROR
        assert error.status_code == 502

    def test_json_without_error_field(self):
        error = error_from_response(json_response(500, {"message": "oops"}))
        assert error.message == "HTTP 500: Internal Server Error"


@pytest.mark.asyncio
class TestRequestExecutor:
    """Tests for RequestExecutor.execute."""

    async def test_success_returns_json(self):
        handler, calls = _sequence(json_response(200, screenshot_payload()))
        executor, sleep = _executor(handler)

        data = await executor.execute(URL)

        assert data["creditsUsed"] == 1
        assert len(calls) == 1
        sleep.assert_not_called()

    async def test_retries_5xx_with_exponential_backoff(self):
        """503, 503, 200 with retries=2 yields the 200 after 1s then 2s."""
        handler, calls = _sequence(
            json_response(503, {"error": "Busy"}),
            json_response(503, {"error": "Busy"}),
            json_response(200, screenshot_payload()),
        )
        executor, sleep = _executor(handler, retries=2)

        data = await executor.execute(URL)

        assert data["url"] == "https://cdn.test/shot.png"
        assert len(calls) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2]

    async def test_backoff_doubles_each_attempt(self):
        handler, calls = _sequence(*[httpx.Response(500) for _ in range(4)])
        executor, sleep = _executor(handler, retries=3)

        with pytest.raises(ShotAPIError):
            await executor.execute(URL)

        assert len(calls) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2, 4]

    async def test_4xx_is_not_retried(self):
        handler, calls = _sequence(json_response(404, {"error": "Not found"}))
        executor, sleep = _executor(handler, retries=2)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert len(calls) == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not found"
        sleep.assert_not_called()

    async def test_4xx_with_transport_code_is_not_retried(self):
        """A 4xx body claiming TIMEOUT is still a client error."""
        handler, calls = _sequence(
            json_response(408, {"error": "Render timed out", "code": "TIMEOUT"}),
            json_response(200, screenshot_payload()),
        )
        executor, sleep = _executor(handler, retries=2)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert len(calls) == 1
        assert exc_info.value.code is ErrorCode.TIMEOUT
        assert exc_info.value.status_code == 408
        sleep.assert_not_called()

    async def test_4xx_after_5xx_stops_immediately(self):
        handler, calls = _sequence(
            httpx.Response(503),
            json_response(401, {"error": "Invalid API key", "code": "INVALID_API_KEY"}),
        )
        executor, _ = _executor(handler, retries=5)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert len(calls) == 2
        assert exc_info.value.code == "INVALID_API_KEY"

    async def test_exhausted_retries_raise_last_error(self):
        handler, calls = _sequence(
            json_response(500, {"error": "first"}),
            json_response(502, {"error": "second"}),
            json_response(503, {"error": "last"}),
        )
        executor, _ = _executor(handler, retries=2)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert len(calls) == 3
        assert exc_info.value.message == "last"
        assert exc_info.value.status_code == 503

    async def test_zero_retries_makes_one_attempt(self):
        handler, calls = _sequence(httpx.Response(500))
        executor, sleep = _executor(handler, retries=0)

        with pytest.raises(ShotAPIError):
            await executor.execute(URL)

        assert len(calls) == 1
        sleep.assert_not_called()

    async def test_httpx_timeout_is_retried_as_timeout(self):
        handler, calls = _sequence(
            httpx.ReadTimeout("timed out"),
            json_response(200, screenshot_payload()),
        )
        executor, sleep = _executor(handler)

        data = await executor.execute(URL)

        assert data["creditsRemaining"] == 99
        assert len(calls) == 2
        assert [c.args[0] for c in sleep.await_args_list] == [1]

    async def test_deadline_raises_timeout(self):
        """A response slower than the per-attempt deadline is a TIMEOUT."""

        async def slow_handler(request):
            await asyncio.sleep(1)
            return json_response(200, screenshot_payload())

        executor, _ = _executor(slow_handler, retries=0, timeout=20)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert exc_info.value.code is ErrorCode.TIMEOUT
        assert exc_info.value.message == "Request timeout after 20ms"

    async def test_network_error_is_retried(self):
        handler, calls = _sequence(
            httpx.ConnectError("connection refused"),
            httpx.ConnectError("connection refused"),
            httpx.ConnectError("connection refused"),
        )
        executor, sleep = _executor(handler, retries=2)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert exc_info.value.code is ErrorCode.NETWORK_ERROR
        assert "connection refused" in exc_info.value.message
        assert len(calls) == 3
        assert sleep.await_count == 2

    async def test_unexpected_exception_is_unknown_and_not_retried(self):
        handler, calls = _sequence(RuntimeError("bug"))
        executor, sleep = _executor(handler)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert exc_info.value.code is ErrorCode.UNKNOWN_ERROR
        assert len(calls) == 1
        sleep.assert_not_called()

    async def test_invalid_json_success_body(self):
        handler, _ = _sequence(httpx.Response(200, content=b"not json"))
        executor, _ = _executor(handler)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.execute(URL)

        assert exc_info.value.code is ErrorCode.UNKNOWN_ERROR
        assert exc_info.value.status_code == 200

    async def test_each_call_starts_fresh(self):
        """Retry state is not carried over between calls."""
        handler, calls = _sequence(
            httpx.Response(500),
            json_response(200, screenshot_payload()),
            httpx.Response(500),
            json_response(200, screenshot_payload()),
        )
        executor, sleep = _executor(handler, retries=1)

        await executor.execute(URL)
        await executor.execute(URL)

        assert len(calls) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1, 1]

    async def test_request_id_header(self):
        handler, calls = _sequence(
            json_response(500, {"error": "x"}),
            json_response(200, screenshot_payload()),
        )
        executor, _ = _executor(handler)

        with request_scope("req-42"):
            await executor.execute(URL)

        assert [c.headers[REQUEST_ID_HEADER] for c in calls] == ["req-42", "req-42"]

    async def test_retry_is_logged(self, caplog):
        handler, _ = _sequence(httpx.Response(503), json_response(200, screenshot_payload()))
        executor, _ = _executor(handler)

        with caplog.at_level("WARNING", logger="shotapi.executor"):
            await executor.execute(URL)

        assert "retrying in 1s" in caplog.text


@pytest.mark.asyncio
class TestFetchBytes:
    """Tests for RequestExecutor.fetch_bytes."""

    async def test_returns_content(self):
        handler, _ = _sequence(httpx.Response(200, content=b"\x89PNG"))
        executor, _ = _executor(handler)

        assert await executor.fetch_bytes("https://cdn.test/shot.png") == b"\x89PNG"

    async def test_non_2xx_is_image_fetch_error(self):
        handler, calls = _sequence(httpx.Response(503))
        executor, _ = _executor(handler)

        with pytest.raises(ShotAPIError) as exc_info:
            await executor.fetch_bytes("https://cdn.test/shot.png")

        assert exc_info.value.code is ErrorCode.IMAGE_FETCH_ERROR
        assert exc_info.value.status_code == 503
        assert len(calls) == 1
