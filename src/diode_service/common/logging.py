"""Shared logging helpers for the diode service."""

from __future__ import annotations

import logging
from types import MappingProxyType

LOG_LEVELS = MappingProxyType(
    {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
    }
)


def parse_log_level(name: str | None) -> int:
    """Map a configured level name to a ``logging`` level; unknown names mean INFO."""

    if name is None:
        return logging.INFO
    return LOG_LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Attach one stream handler to the root logger.

    Long-running service output carries full ISO-8601 timestamps. A root logger
    that already has handlers is left alone unless ``force=True``.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
        force=force,
    )
