"""
core/logging/logic/audit_logger.py
==================================

File-backed implementation of :class:`core.contracts.audit.IAuditLogger`.

Each event is appended as one JSON line with a UTC timestamp. Writes are
serialized with a lock so concurrent exports in one process do not interleave
lines.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, List, Mapping

from core.contracts.audit import IAuditLogger
from core.helpers.date_time_helper import utc_now_iso

logger = logging.getLogger(__name__)


class JsonlAuditLogger(IAuditLogger):
    """Append-only JSON-lines audit log."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def log(
        self,
        feature: str,
        event: str,
        *,
        message: str = "",
        data: Mapping[str, Any] | None = None,
    ) -> None:
        payload = {
            "ts_utc": utc_now_iso(),
            "feature": feature,
            "event": event,
            "message": message,
            "data": dict(data or {}),
        }
        line = json.dumps(payload, ensure_ascii=False, default=str)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        logger.debug(f"Audit event {feature}/{event} written to {self.path}")

    def read_all(self) -> List[dict]:
        """Return all recorded events (oldest first)."""
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
