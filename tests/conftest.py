# -*- coding: utf-8 -*-
"""
Pytest configuration and fixtures.
"""
import json
from typing import Callable
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from shotapi.client import ShotAPI
from shotapi.config import ShotAPIConfig

TEST_API_KEY = "test-key"
TEST_BASE_URL = "https://api.test"


def screenshot_payload(url: str = "https://cdn.test/shot.png", **overrides) -> dict:
    """Success body as returned by the API."""
    payload = {
        "url": url,
        "metadata": {"width": 1280, "height": 720, "format": "png", "size": 48213},
        "creditsUsed": 1,
        "creditsRemaining": 99,
    }
    payload.update(overrides)
    return payload


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode(),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def config() -> ShotAPIConfig:
    """Client configuration pointing at a fake host."""
    return ShotAPIConfig(
        api_key=TEST_API_KEY,
        base_url=TEST_BASE_URL,
        timeout=1000,
        retries=2,
        max_concurrent=2,
    )


@pytest.fixture
def make_client(config) -> Callable[..., ShotAPI]:
    """Factory building a ShotAPI whose HTTP traffic goes to a handler."""

    def _make(handler, **config_overrides) -> ShotAPI:
        transport = httpx.MockTransport(handler)
        http_client = httpx.AsyncClient(transport=transport)
        client_config = config.model_copy(update=config_overrides)
        return ShotAPI(config=client_config, http_client=http_client)

    return _make


@pytest.fixture
def no_sleep():
    """Replace backoff and pacing waits with recorders."""
    with patch("shotapi.executor.backoff_sleep", new=AsyncMock()) as backoff, \
            patch("shotapi.batch.pacing_sleep", new=AsyncMock()) as pacing:
        yield backoff, pacing
