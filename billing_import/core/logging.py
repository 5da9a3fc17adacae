"""Logging setup for the billing import CLI and pipeline."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LEVEL = "INFO"


def resolve_level(level: str | None = None) -> int:
    """Map a level name (argument, then ``LOG_LEVEL``) to a logging level.

    Unknown names fall back to ``INFO``.
    """

    name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | None = None) -> None:
    """Install the shared format on the root logger at the resolved level."""

    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    if level and not isinstance(logging.getLevelName(level.strip().upper()), int):
        logging.getLogger(__name__).warning("Unknown log level %r; using INFO", level)
