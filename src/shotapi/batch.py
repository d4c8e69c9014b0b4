# -*- coding: utf-8 -*-
"""
Concurrency-bounded batch capture.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from .models import ScreenshotOptions, ScreenshotResponse

logger = logging.getLogger(__name__)

CaptureFunc = Callable[[ScreenshotOptions], Awaitable[ScreenshotResponse]]


async def pacing_sleep(seconds: float) -> None:
    """Pause between chunks."""
    await asyncio.sleep(seconds)


def chunked(items: Sequence[str], size: int) -> list[list[str]]:
    """Split items into consecutive chunks of at most size elements."""
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def _with_url(options: ScreenshotOptions, url: str) -> ScreenshotOptions:
    # model_copy skips validators, so rebuild to normalize the URL
    return ScreenshotOptions.model_validate({**options.model_dump(exclude_unset=True), "url": url})


class BatchCoordinator:
    """
    Runs one capture per URL, at most max_concurrent at a time.

    URLs are processed in consecutive chunks; a chunk starts only once the
    previous one has fully settled, with a short pacing delay in between.
    The first failure aborts the whole batch and no partial results are
    returned.
    """

    def __init__(
            self,
            capture: CaptureFunc,
            max_concurrent: int = 5,
            pacing_ms: int = 100,
            sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        self._capture = capture
        self.max_concurrent = max_concurrent
        self.pacing_ms = pacing_ms
        self._sleep = sleep

    async def _run_chunk(
            self, urls: list[str], options: ScreenshotOptions
    ) -> list[ScreenshotResponse]:
        tasks = [
            asyncio.ensure_future(self._capture(_with_url(options, url)))
            for url in urls
        ]
        try:
            # gather keeps input order regardless of completion order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def run(
            self, urls: Sequence[str], options: ScreenshotOptions | None = None
    ) -> list[ScreenshotResponse]:
        """
        Capture every URL with the shared options.

        Returns:
            Responses in the same order as urls.

        Raises:
            ShotAPIError: the first error raised by any capture.
        """
        if not urls:
            return []

        options = options or ScreenshotOptions()
        chunks = chunked(urls, self.max_concurrent)
        logger.info(
            "Batch capture started",
            extra={"url_count": len(urls), "chunk_count": len(chunks)},
        )

        results: list[ScreenshotResponse] = []
        for index, chunk in enumerate(chunks):
            if index > 0 and self.pacing_ms > 0:
                await (self._sleep or pacing_sleep)(self.pacing_ms / 1000)
            logger.debug(
                f"Running batch chunk {index + 1}/{len(chunks)}",
                extra={"chunk_size": len(chunk)},
            )
            results.extend(await self._run_chunk(chunk, options))

        logger.info("Batch capture completed", extra={"url_count": len(results)})
        return results
