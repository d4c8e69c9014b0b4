# -*- coding: utf-8 -*-
"""
Command line entry point: python -m shotapi URL [URL ...]
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from shotapi import __version__
from shotapi.client import ShotAPI, save_bytes
from shotapi.devices import DEVICE_PRESETS, list_device_presets
from shotapi.errors import ErrorCode, ShotAPIError
from shotapi.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shotapi",
        description="Capture website screenshots with the ShotAPI service.",
    )
    parser.add_argument("urls", nargs="*", metavar="URL", help="Page(s) to capture")
    parser.add_argument("--api-key", help="API key (default: SHOTAPI_API_KEY)")
    parser.add_argument("--base-url", help="API base URL")
    parser.add_argument("--device", choices=list_device_presets(), help="Device preset")
    parser.add_argument("--width", type=int, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, help="Viewport height in pixels")
    parser.add_argument("--full-page", action="store_true", help="Capture the full page")
    parser.add_argument("--format", choices=["png", "jpeg", "webp", "pdf"], help="Output format")
    parser.add_argument("--quality", type=int, help="Image quality 1-100 (jpeg/webp)")
    parser.add_argument("--delay", type=int, help="Delay before capture in milliseconds")
    parser.add_argument("--dark-mode", action="store_true", help="Emulate dark mode")
    parser.add_argument("--block-ads", action="store_true", help="Block ads and trackers")
    parser.add_argument(
        "--hide-cookie-banners", action="store_true", help="Hide cookie banners"
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--output", "-o", type=Path, help="Save a single screenshot here")
    output.add_argument(
        "--output-dir", type=Path, help="Save every screenshot as <index>.<format> here"
    )
    parser.add_argument("--list-devices", action="store_true", help="List device presets and exit")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: SHOTAPI_LOG_LEVEL)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    options = {
        "device": args.device,
        "width": args.width,
        "height": args.height,
        "full_page": args.full_page,
        "format": args.format,
        "quality": args.quality,
        "delay": args.delay,
        "dark_mode": args.dark_mode,
        "block_ads": args.block_ads,
        "hide_cookie_banners": args.hide_cookie_banners,
    }
    return {key: value for key, value in options.items() if value is not None}


async def run(args: argparse.Namespace) -> int:
    options = _options_from_args(args)

    async with ShotAPI(api_key=args.api_key, base_url=args.base_url) as client:
        if args.output:
            response = await client.screenshot_to_file(args.urls[0], args.output, **options)
            print(response.model_dump_json(by_alias=True, indent=2))
            return 0

        if len(args.urls) == 1:
            responses = [await client.screenshot(args.urls[0], **options)]
        else:
            responses = await client.batch(args.urls, **options)

        if args.output_dir:
            for index, response in enumerate(responses):
                content = await client.fetch_bytes(response.url)
                await save_bytes(args.output_dir / f"{index}.{response.metadata.format}", content)

        payload = [response.model_dump(by_alias=True) for response in responses]
        print(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_devices:
        for name, preset in DEVICE_PRESETS.items():
            mobile = "mobile" if preset.mobile else "desktop"
            print(f"{name:<20} {preset.width}x{preset.height} @{preset.scale:g}x {mobile}")
        return 0

    if not args.urls:
        parser.error("at least one URL is required")
    if args.output and len(args.urls) > 1:
        parser.error("--output takes a single URL; use --output-dir for several")

    # stdout carries the JSON result
    setup_logging(level=args.log_level, stream=sys.stderr)

    try:
        return asyncio.run(run(args))
    except ShotAPIError as e:
        code = e.code.value if isinstance(e.code, ErrorCode) else e.code
        print(f"{code}: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
