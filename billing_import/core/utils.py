"""Shared utility functions for the billing import package."""
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def get_config_value(key: str, default: str = "") -> str:
    """Get a configuration value from the environment.

    Values loaded from an env file via ``load_env_file`` are visible here too,
    since that helper only fills keys missing from ``os.environ``.
    """
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_config_flag(key: str, default: bool = False) -> bool:
    """Interpret an environment value such as ``1`` or ``true`` as a boolean."""
    raw = get_config_value(key)
    if not raw:
        return default
    return raw.lower() in TRUTHY_VALUES


def load_env_file(path: Path) -> None:
    """Load environment variables from a file if it exists."""
    if not path.exists():
        return

    try:
        with path.open(encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                if not key or key in os.environ:
                    continue
                os.environ[key] = value.strip().strip('"').strip("'")
    except OSError as exc:
        logger.debug("Could not load env file %s: %s", path, exc)
