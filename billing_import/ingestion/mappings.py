"""Load vendor mapping descriptors from JSON files."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from billing_import.core.models import VendorMapping

logger = logging.getLogger(__name__)

DEFAULT_MAPPINGS_DIR = Path(__file__).resolve().parents[1] / "mappings"


def load_mapping_file(path: Path) -> VendorMapping:
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a JSON object")
    return VendorMapping.from_dict(data, source=path.name)


def load_mappings(directory: Optional[Path] = None) -> List[VendorMapping]:
    """Read every ``*.json`` mapping in ``directory`` (sorted by filename).

    Files that cannot be parsed are logged and skipped so one broken mapping
    does not disable every vendor.
    """

    folder = Path(directory) if directory else DEFAULT_MAPPINGS_DIR
    if not folder.is_dir():
        logger.error("Mappings directory not found: %s", folder)
        return []

    mappings: List[VendorMapping] = []
    for path in sorted(folder.glob("*.json")):
        try:
            mappings.append(load_mapping_file(path))
        except (OSError, ValueError) as exc:
            logger.error("Skipping mapping %s: %s", path.name, exc)
    logger.info("Loaded %s vendor mappings from %s", len(mappings), folder)
    return mappings
