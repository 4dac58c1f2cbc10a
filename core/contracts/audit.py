"""core/contracts/audit.py
======================

Sink for export audit events.

An export records one event once its file exists: the feature that produced
it, an event name, a short message (the output file name) and a mapping of
details such as source location, page count, skipped fields and certificate
ids. Exports run unattended, so events carry no user identity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class IAuditLogger(ABC):
    """Append-only audit sink used by the export service."""

    @abstractmethod
    def log(
        self,
        feature: str,
        event: str,
        *,
        message: str = "",
        data: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Record one event. Values in *data* that are not JSON types may be
        stored by their ``str()`` form. Implementations raise ``OSError`` when
        the event cannot be stored; callers decide whether that is fatal.
        """
