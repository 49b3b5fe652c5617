#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import sys
from contextlib import suppress
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, SIGTERM
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from diode_service.adapters.discovery import JsonLinesDiscoverySource
from diode_service.app import run_reconciler
from diode_service.common.logging import configure_logging, parse_log_level
from diode_service.config import ConfigurationError, get_service_config
from diode_service.domain.errors import ServiceStartError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from diode_service.config import ServiceConfig
    from diode_service.domain.ports import DiscoverySource


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile discovery facts into NetBox")
    parser.add_argument(
        "--facts",
        type=str,
        default="-",
        help="JSON-lines file of discovery facts, '-' for stdin (default: %(default)s)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Facts per reconciliation batch (overrides DIODE_SERVICE_BATCH_SIZE)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Concurrent NetBox calls per stage (overrides DIODE_SERVICE_MAX_CONCURRENCY)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="debug, info or warn (overrides DIODE_SERVICE_LOG_LEVEL)",
    )
    return parser.parse_args(list(argv))


def _apply_overrides(config: ServiceConfig, args: argparse.Namespace) -> ServiceConfig:
    if args.batch_size is not None and args.batch_size < 1:
        raise ValueError("--batch-size must be at least 1")
    if args.max_concurrency is not None and args.max_concurrency < 1:
        raise ValueError("--max-concurrency must be at least 1")
    return replace(
        config,
        batch_size=args.batch_size if args.batch_size is not None else config.batch_size,
        max_concurrency=(
            args.max_concurrency if args.max_concurrency is not None else config.max_concurrency
        ),
        log_level=args.log_level or config.log_level,
    )


def _build_source(facts: str, batch_size: int) -> JsonLinesDiscoverySource:
    if facts == "-":
        return JsonLinesDiscoverySource(path=None, batch_size=batch_size)
    path = Path(facts)
    if not path.is_file():
        raise ValueError(f"Facts file not found: {facts}")
    return JsonLinesDiscoverySource(path=path, batch_size=batch_size)


async def _serve(config: ServiceConfig, source: DiscoverySource) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (SIGINT, SIGTERM):
        # not available on every platform's event loop
        with suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)
    await run_reconciler(config, source=source, stop_event=stop)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    try:
        parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])
        config = _apply_overrides(get_service_config(), parsed_args)
        source = _build_source(parsed_args.facts, config.batch_size)
    except (ConfigurationError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=parse_log_level(config.log_level))

    try:
        asyncio.run(_serve(config, source))
    except ServiceStartError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
