# -*- coding: utf-8 -*-
"""
Request validation performed before any network I/O.
"""
from urllib.parse import urlsplit

from .errors import ErrorCode, ShotAPIValidationError
from .models import ScreenshotOptions

ALLOWED_SCHEMES = ("http", "https")

QUALITY_RANGE = (1, 100)
DELAY_RANGE = (0, 10000)


def is_valid_url(url: str) -> bool:
    """Check that url is absolute, has a host and uses http or https."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc)


def validate_options(options: ScreenshotOptions) -> None:
    """
    Validate screenshot options.

    Rules are checked in a fixed order (URL presence, URL format, quality,
    delay) and the first failure is raised.

    Raises:
        ShotAPIValidationError: with code MISSING_URL, INVALID_URL,
            INVALID_QUALITY or INVALID_DELAY.
    """
    if not options.url:
        raise ShotAPIValidationError("URL is required", ErrorCode.MISSING_URL)

    if not is_valid_url(options.url):
        raise ShotAPIValidationError(
            f"Invalid URL: {options.url}. URL must start with http:// or https://",
            ErrorCode.INVALID_URL,
        )

    if options.quality is not None:
        low, high = QUALITY_RANGE
        if not low <= options.quality <= high:
            raise ShotAPIValidationError(
                f"Quality must be between {low} and {high}",
                ErrorCode.INVALID_QUALITY,
            )

    if options.delay is not None:
        low, high = DELAY_RANGE
        if not low <= options.delay <= high:
            raise ShotAPIValidationError(
                f"Delay must be between {low} and {high} milliseconds",
                ErrorCode.INVALID_DELAY,
            )
