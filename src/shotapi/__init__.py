# -*- coding: utf-8 -*-
"""
ShotAPI - Async Python client for the ShotAPI screenshot service.
"""
__version__ = "1.0.0"

from .client import ShotAPI  # noqa: E402
from .config import ShotAPIConfig  # noqa: E402
from .devices import DevicePresetConfig, get_device_preset, list_device_presets  # noqa: E402
from .errors import ErrorCode, ShotAPIError, ShotAPIValidationError  # noqa: E402
from .models import ScreenshotOptions, ScreenshotResponse  # noqa: E402

__all__ = [
    "ShotAPI",
    "ShotAPIConfig",
    "ShotAPIError",
    "ShotAPIValidationError",
    "ErrorCode",
    "ScreenshotOptions",
    "ScreenshotResponse",
    "DevicePresetConfig",
    "get_device_preset",
    "list_device_presets",
    "__version__",
]
