"""Runtime settings for conversion jobs."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from billing_import.core.utils import get_config_flag, get_config_value, load_env_file

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = Path(".env")

# System account used as both the ordering staff member and site supervisor.
DEFAULT_SYSTEM_STAFF_ID = "925646"


@dataclass(frozen=True)
class Settings:
    """Defaults stamped onto every output row plus validation knobs."""

    deal_type: str = "紙発注"
    staff_id: str = DEFAULT_SYSTEM_STAFF_ID
    supervisor_id: str = DEFAULT_SYSTEM_STAFF_ID
    tax_flag: str = "課税"
    mappings_dir: Optional[Path] = None
    strict_totals: bool = False
    mismatch_tolerance: float = 0.01


def _parse_tolerance(raw: str, default: float) -> float:
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid mismatch tolerance %r", raw)
        return default
    if value < 0:
        logger.warning("Ignoring negative mismatch tolerance %r", raw)
        return default
    return value


def load_settings(env_file: Path | None = None) -> Settings:
    """Build ``Settings`` from the environment.

    An env file (``BILLING_IMPORT_ENV_FILE`` or ``.env``) is loaded first;
    variables already present in the environment win over the file.
    """

    path = env_file or Path(os.getenv("BILLING_IMPORT_ENV_FILE", DEFAULT_ENV_FILE))
    load_env_file(path)

    defaults = Settings()
    mappings_dir = get_config_value("BILLING_IMPORT_MAPPINGS_DIR")
    return Settings(
        deal_type=get_config_value("BILLING_IMPORT_DEAL_TYPE", defaults.deal_type),
        staff_id=get_config_value("BILLING_IMPORT_STAFF_ID", defaults.staff_id),
        supervisor_id=get_config_value("BILLING_IMPORT_SUPERVISOR_ID", defaults.supervisor_id),
        tax_flag=get_config_value("BILLING_IMPORT_TAX_FLAG", defaults.tax_flag),
        mappings_dir=Path(mappings_dir) if mappings_dir else None,
        strict_totals=get_config_flag("BILLING_IMPORT_STRICT_TOTALS", defaults.strict_totals),
        mismatch_tolerance=_parse_tolerance(
            get_config_value("BILLING_IMPORT_MISMATCH_TOLERANCE"), defaults.mismatch_tolerance
        ),
    )
