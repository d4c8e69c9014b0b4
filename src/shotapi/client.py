# -*- coding: utf-8 -*-
"""
ShotAPI client.

Usage:
    async with ShotAPI(api_key="...") as client:
        result = await client.screenshot("https://example.com", full_page=True)
        print(result.url)
"""
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import aiofiles
import httpx
from pydantic import ValidationError

from .batch import BatchCoordinator
from .config import ShotAPIConfig, resolve_config
from .context import request_scope
from .devices import DevicePresetConfig, get_device_preset, list_device_presets
from .errors import ErrorCode, ShotAPIError
from .executor import RequestExecutor
from .models import ScreenshotOptions, ScreenshotResponse
from .params import build_request_url
from .validation import validate_options

logger = logging.getLogger(__name__)

OptionsInput = ScreenshotOptions | Mapping[str, Any] | str | None


def coerce_options(options: OptionsInput = None, **overrides: Any) -> ScreenshotOptions:
    """
    Normalize the accepted option inputs into a ScreenshotOptions.

    A bare string is taken as the target URL; keyword overrides win over
    values already present in options.
    """
    if isinstance(options, ScreenshotOptions):
        if not overrides:
            return options
        data = options.model_dump(exclude_unset=True)
    elif isinstance(options, str):
        data = {"url": options}
    elif options is None:
        data = {}
    else:
        data = dict(options)

    data.update(overrides)
    return ScreenshotOptions.model_validate(data)


async def save_bytes(file_path: str | Path, content: bytes) -> Path:
    """Write content to file_path, creating parent directories as needed."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "wb") as file:
        await file.write(content)

    logger.info("Screenshot saved", extra={"path": str(path), "size_bytes": len(content)})
    return path


class ShotAPI:
    """
    Async client for the ShotAPI screenshot service.

    Configuration is fixed at construction: explicit arguments win over
    SHOTAPI_* environment settings, which win over built-in defaults.
    The client owns one pooled HTTP connection shared by all requests; use it
    as an async context manager or call aclose() when done.
    """

    def __init__(
            self,
            api_key: str | None = None,
            *,
            base_url: str | None = None,
            timeout: int | None = None,
            retries: int | None = None,
            max_concurrent: int | None = None,
            config: ShotAPIConfig | None = None,
            http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or resolve_config(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            retries=retries,
            max_concurrent=max_concurrent,
        )
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._executor: RequestExecutor | None = None

    async def __aenter__(self) -> "ShotAPI":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def start(self) -> None:
        """Initialize the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
                limits=httpx.Limits(
                    max_connections=max(self.config.max_concurrent, 10),
                ),
            )
            self._owns_http_client = True
            logger.debug("HTTP client initialized")
        if self._executor is None:
            self._executor = RequestExecutor(
                self._http_client,
                timeout=self.config.timeout,
                retries=self.config.retries,
            )

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("HTTP client closed")
        self._executor = None

    async def _get_executor(self) -> RequestExecutor:
        if self._executor is None:
            await self.start()
        return self._executor

    def build_url(self, options: OptionsInput = None, **overrides: Any) -> str:
        """
        Signed screenshot request URL for the options, without any I/O.

        Raises:
            ShotAPIValidationError: if the options are invalid.
        """
        options = coerce_options(options, **overrides)
        validate_options(options)
        return build_request_url(self.config.base_url, self.config.api_key, options)

    async def screenshot(self, options: OptionsInput = None, **overrides: Any) -> ScreenshotResponse:
        """
        Capture a screenshot of a URL.

        Args:
            options: ScreenshotOptions, a mapping of option fields, or a bare URL
            **overrides: Option fields, e.g. full_page=True, format="jpeg"

        Returns:
            ScreenshotResponse with the image URL and metadata

        Raises:
            ShotAPIError: validation failures before any request, or the
                classified request failure.
        """
        options = coerce_options(options, **overrides)
        request_url = self.build_url(options)
        executor = await self._get_executor()

        with request_scope():
            logger.info("Screenshot request", extra={"url": options.url[:80]})
            data = await executor.execute(request_url)

        return self._parse_response(data)

    @staticmethod
    def _parse_response(data: Any) -> ScreenshotResponse:
        try:
            return ScreenshotResponse.model_validate(data)
        except ValidationError as e:
            raise ShotAPIError(
                "Unexpected response body", ErrorCode.UNKNOWN_ERROR, str(e)
            ) from e

    async def screenshot_bytes(self, options: OptionsInput = None, **overrides: Any) -> bytes:
        """Capture a screenshot and return the image bytes."""
        response = await self.screenshot(options, **overrides)
        return await self.fetch_bytes(response.url)

    async def screenshot_to_file(
            self,
            options: OptionsInput,
            file_path: str | Path,
            **overrides: Any,
    ) -> ScreenshotResponse:
        """
        Capture a screenshot and save it to a file.

        Parent directories are created as needed; filesystem errors propagate.
        """
        response = await self.screenshot(options, **overrides)
        content = await self.fetch_bytes(response.url)

        await save_bytes(file_path, content)
        return response

    async def thumbnail_bytes(self, response: ScreenshotResponse) -> bytes:
        """Fetch the thumbnail of a response captured with thumbnail_width."""
        if not response.thumbnail_url:
            raise ShotAPIError(
                "Response has no thumbnail URL (set thumbnail_width)",
                ErrorCode.IMAGE_FETCH_ERROR,
            )
        return await self.fetch_bytes(response.thumbnail_url)

    async def fetch_bytes(self, url: str) -> bytes:
        """Download a rendered image."""
        executor = await self._get_executor()
        return await executor.fetch_bytes(url)

    async def batch(
            self,
            urls: Sequence[str],
            options: OptionsInput = None,
            **overrides: Any,
    ) -> list[ScreenshotResponse]:
        """
        Capture several URLs with shared options.

        Requests run max_concurrent at a time. Results follow the order of
        urls; the first failure aborts the batch.
        """
        if isinstance(options, str):
            raise TypeError("batch options must not be a URL; pass URLs in urls")
        shared = coerce_options(options, **overrides)
        coordinator = BatchCoordinator(
            self.screenshot,
            max_concurrent=self.config.max_concurrent,
            pacing_ms=self.config.batch_pacing_ms,
        )
        return await coordinator.run(list(urls), shared)

    @staticmethod
    def get_device_preset(device: str) -> DevicePresetConfig:
        """Dimensions of a device preset."""
        return get_device_preset(device)

    @staticmethod
    def device_presets() -> list[str]:
        """Names of all available device presets."""
        return list_device_presets()
