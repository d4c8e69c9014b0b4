# -*- coding: utf-8 -*-
"""
Projection of screenshot options onto wire query parameters.

The mapping is a fixed, ordered table of rules. Each rule names the option
field, its wire name, how to serialize it and when to leave it out. Viewport
rules are skipped entirely when a device preset is selected: the preset
always wins over explicit width/height/scale/mobile values.
"""
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlencode

from .config import SCREENSHOT_ENDPOINT
from .devices import get_device_preset
from .models import ScreenshotOptions


def format_value(value: Any) -> str:
    """Serialize a parameter value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_unset(value: Any) -> bool:
    """None, False, zero and empty strings are never sent."""
    return not value


@dataclass(frozen=True)
class ParamRule:
    """One field-to-query-parameter mapping."""

    field: str
    wire: str
    serialize: Callable[[Any], str] = format_value
    omit: Callable[[Any], bool] = is_unset
    viewport: bool = False


PARAM_RULES: tuple[ParamRule, ...] = (
    ParamRule("width", "width", viewport=True),
    ParamRule("height", "height", viewport=True),
    ParamRule("full_page", "full_page"),
    ParamRule("format", "format"),
    ParamRule("quality", "quality"),
    ParamRule("scale", "scale", viewport=True),
    ParamRule("delay", "delay"),
    ParamRule("wait_for_selector", "wait_for"),
    ParamRule("dark_mode", "dark_mode"),
    ParamRule("mobile", "mobile", viewport=True),
    ParamRule("selector", "selector"),
    ParamRule("css", "css"),
    ParamRule("js", "js"),
    ParamRule("block_ads", "block_ads"),
    ParamRule("hide_cookie_banners", "hide_cookie_banners"),
    ParamRule("thumbnail_width", "thumbnail_width"),
)


def _device_params(device: str) -> list[tuple[str, str]]:
    preset = get_device_preset(device)
    pairs = [
        ("width", format_value(preset.width)),
        ("height", format_value(preset.height)),
    ]
    if preset.mobile:
        pairs.append(("mobile", "true"))
    if preset.scale != 1:
        pairs.append(("scale", format_value(preset.scale)))
    return pairs


def build_params(api_key: str, options: ScreenshotOptions) -> list[tuple[str, str]]:
    """
    Build the ordered query parameters for a validated request.

    Args:
        api_key: Key sent as the api_key parameter
        options: Options already accepted by validate_options

    Returns:
        List of (name, value) string pairs, url and api_key first.
    """
    params: list[tuple[str, str]] = [("url", options.url or ""), ("api_key", api_key)]

    if options.device:
        params.extend(_device_params(options.device))

    for rule in PARAM_RULES:
        if rule.viewport and options.device:
            continue
        value = getattr(options, rule.field)
        if rule.omit(value):
            continue
        params.append((rule.wire, rule.serialize(value)))

    return params


def build_query(api_key: str, options: ScreenshotOptions) -> str:
    """Url-encoded query string for the request."""
    return urlencode(build_params(api_key, options))


def build_request_url(base_url: str, api_key: str, options: ScreenshotOptions) -> str:
    """Full GET URL of the screenshot endpoint for these options."""
    return f"{base_url.rstrip('/')}{SCREENSHOT_ENDPOINT}?{build_query(api_key, options)}"
