# -*- coding: utf-8 -*-
"""
Pydantic data models for requests and responses.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .devices import DevicePreset

ImageFormat = Literal["png", "jpeg", "webp", "pdf"]


class ScreenshotOptions(BaseModel):
    """
    Screenshot request options.

    Field names are snake_case; the camelCase names used by the JavaScript SDK
    (fullPage, waitForSelector, ...) are accepted as aliases. Ranges are checked
    by shotapi.validation, not here, so that failures carry error codes; only
    the dimension fields are bounded here since they have no error code.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    url: str | None = Field(default=None, description="Target URL to capture")
    width: int | None = Field(default=None, gt=0, description="Viewport width in pixels")
    height: int | None = Field(default=None, gt=0, description="Viewport height in pixels")
    device: DevicePreset | None = Field(
        default=None, description="Device preset, overrides width/height/scale/mobile"
    )
    full_page: bool = Field(default=False, description="Capture the full scrollable page")
    format: ImageFormat | None = Field(default=None, description="Output format (server default: png)")
    quality: int | None = Field(default=None, description="Image quality 1-100 (jpeg/webp only)")
    scale: float | None = Field(default=None, gt=0, description="Device scale factor")
    delay: int | None = Field(default=None, description="Delay before capture in milliseconds")
    wait_for_selector: str | None = Field(default=None, description="CSS selector to wait for")
    selector: str | None = Field(default=None, description="CSS selector to capture (element screenshot)")
    css: str | None = Field(default=None, description="Custom CSS to inject before capture")
    js: str | None = Field(default=None, description="Custom JavaScript to run before capture")
    block_ads: bool = Field(default=False, description="Block ads and trackers")
    hide_cookie_banners: bool = Field(default=False, description="Hide cookie banners")
    dark_mode: bool = Field(default=False, description="Emulate prefers-color-scheme: dark")
    mobile: bool = Field(default=False, description="Emulate a mobile device")
    thumbnail_width: int | None = Field(default=None, gt=0, description="Generate a thumbnail of this width")

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class ScreenshotMetadata(BaseModel):
    """Metadata of a captured screenshot."""

    width: int
    height: int
    format: str
    size: int


class ScreenshotResponse(BaseModel):
    """Successful screenshot response."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    url: str
    thumbnail_url: str | None = None
    metadata: ScreenshotMetadata
    credits_used: int
    credits_remaining: int


class APIErrorBody(BaseModel):
    """Structured error payload returned by the API."""

    error: str
    code: str | None = None
    details: str | None = None
