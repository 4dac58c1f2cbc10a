from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from core.helpers.date_time_helper import iso_date

DEFAULT_TITLE = "signed_document"


@dataclass(frozen=True)
class NamingContext:
    document_title: str
    export_date: date


class NamingStrategy(Protocol):
    def propose_filename(self, ctx: NamingContext) -> str: ...


class TitleDateStrategy:
    """Default: 'Lease' exported on 2026-10-19 -> Lease_2026-10-19.pdf"""

    def propose_filename(self, ctx: NamingContext) -> str:
        title = (ctx.document_title or "").strip() or DEFAULT_TITLE
        # keep the file inside the target directory
        for sep in ("/", "\\", "\x00"):
            title = title.replace(sep, "_")
        return f"{title}_{iso_date(ctx.export_date)}.pdf"
