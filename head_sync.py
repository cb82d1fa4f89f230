"""Command line entry point running the head coordinator against a demo bridge."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from core.logging import configure_async_logging
from pagehead.config import HeadConfig, load_config, load_config_file
from pagehead.demo import run_demo


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the head sync demo."""

    parser = argparse.ArgumentParser(
        description="Replay navigations through the serialized head bridge queue"
    )
    parser.add_argument("locations", nargs="+", help="Initial location followed by navigations")
    parser.add_argument("--suffix", type=str, default=None, help="Suffix appended to every title")
    parser.add_argument("--config", type=Path, default=None, help="KEY=VALUE configuration file")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per bridge call timeout in seconds (default: wait forever)",
    )
    parser.add_argument(
        "--fail-on",
        action="append",
        default=[],
        metavar="TITLE",
        help="Make the demo bridge reject this title (repeatable)",
    )
    parser.add_argument("--head-title", default=None, help="Title reported by head content")
    parser.add_argument("--latency", type=float, default=0.0, help="Simulated bridge latency")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> HeadConfig:
    config = load_config_file(args.config) if args.config is not None else load_config()
    if args.suffix is not None:
        config.suffix = args.suffix
    if args.timeout is not None:
        config.call_timeout_s = args.timeout
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point printing the bridge calls made for the given locations."""

    args = parse_args(argv)
    listener, _ = configure_async_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        bridge = asyncio.run(
            run_demo(
                args.locations,
                build_config(args),
                fail_titles=args.fail_on,
                head_title=args.head_title,
                latency_s=args.latency,
            )
        )
    finally:
        if listener is not None:
            listener.stop()
    for name, value in bridge.calls:
        print(f"{name}\t{value if value is not None else ''}")
    return 0


if __name__ == "__main__":  # pragma: no cover - convenience wrapper
    raise SystemExit(main())
