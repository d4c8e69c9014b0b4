# -*- coding: utf-8 -*-
"""
Static device presets for responsive screenshots.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

DevicePreset = Literal[
    "desktop",
    "laptop",
    "tablet",
    "mobile",
    "iphone-14",
    "iphone-14-pro",
    "iphone-14-pro-max",
    "ipad",
    "ipad-pro",
    "galaxy-s23",
    "pixel-7",
]


@dataclass(frozen=True)
class DevicePresetConfig:
    """Viewport of a named device."""

    width: int
    height: int
    mobile: bool
    scale: float


DEVICE_PRESETS: MappingProxyType[str, DevicePresetConfig] = MappingProxyType(
    {
        "desktop": DevicePresetConfig(width=1920, height=1080, mobile=False, scale=1),
        "laptop": DevicePresetConfig(width=1366, height=768, mobile=False, scale=1),
        "tablet": DevicePresetConfig(width=768, height=1024, mobile=True, scale=2),
        "mobile": DevicePresetConfig(width=375, height=812, mobile=True, scale=3),
        "iphone-14": DevicePresetConfig(width=390, height=844, mobile=True, scale=3),
        "iphone-14-pro": DevicePresetConfig(width=393, height=852, mobile=True, scale=3),
        "iphone-14-pro-max": DevicePresetConfig(width=430, height=932, mobile=True, scale=3),
        "ipad": DevicePresetConfig(width=810, height=1080, mobile=True, scale=2),
        "ipad-pro": DevicePresetConfig(width=1024, height=1366, mobile=True, scale=2),
        "galaxy-s23": DevicePresetConfig(width=360, height=780, mobile=True, scale=3),
        "pixel-7": DevicePresetConfig(width=412, height=915, mobile=True, scale=2.625),
    }
)


def get_device_preset(name: str) -> DevicePresetConfig:
    """
    Look up a device preset by name.

    Raises:
        KeyError: if the name is not a known preset.
    """
    try:
        return DEVICE_PRESETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown device preset '{name}'. Available: {', '.join(DEVICE_PRESETS)}"
        ) from None


def list_device_presets() -> list[str]:
    """Names of all available presets, in table order."""
    return list(DEVICE_PRESETS)
