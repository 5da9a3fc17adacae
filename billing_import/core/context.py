"""Job-scoped state for one conversion run.

Sequence counters and the site -> project id memo live here instead of at
module level; create one ``JobContext`` per job (a batch shares one context
across its files so identifiers stay unique in the combined output).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Tuple

from billing_import.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class JobContext:
    today: date = field(default_factory=date.today)
    settings: Settings = field(default_factory=Settings)
    alerts: List[str] = field(default_factory=list)
    site_project_ids: Dict[Tuple[str, str], str] = field(default_factory=dict)
    _management_sequence: int = 0
    _consolidated_sequence: int = 0
    _project_sequence: int = 0

    @property
    def date_stamp(self) -> str:
        return self.today.strftime("%Y%m%d")

    def next_management_id(self) -> str:
        """Return the next line-level management id, e.g. ``20251104001``."""

        self._management_sequence += 1
        return f"{self.date_stamp}{self._management_sequence:03d}"

    def next_consolidated_id(self) -> str:
        """Return the next management id for a consolidated output row."""

        self._consolidated_sequence += 1
        return f"{self.date_stamp}{self._consolidated_sequence:03d}"

    def generate_project_id(self) -> str:
        self._project_sequence += 1
        return f"PRJ-{self.date_stamp}-{self._project_sequence:03d}"

    def project_id_for_site(self, vendor: str, site: str) -> str:
        """Return the project id memoized for a vendor/site, generating one once."""

        key = (vendor, site)
        project_id = self.site_project_ids.get(key)
        if project_id is None:
            project_id = self.generate_project_id()
            self.site_project_ids[key] = project_id
            logger.info("New project id for %s / %s: %s", vendor, site or "(no site)", project_id)
        return project_id

    def record_alert(self, message: str) -> None:
        self.alerts.append(message)
