# signature/models/export_models.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .contact import Contact
from .document_field import DocumentField
from .draw_ops import DrawOp
from .field import Field
from .geometry import RenderedPage
from .signature_footprint import SignatureFootprint


@dataclass
class ExportOptions:
    """
    Everything one export run needs.

    current_pdf_file: http(s) URL, file:// URL or local path of the source PDF.
    rendered_page:    pixel size of the page as shown on screen when fields
                      were placed; required to map fields to PDF points.
    output_dir:       where the signed file is written; None keeps it in memory.
    """
    current_pdf_file: Optional[str]
    fields: Sequence[Field]
    rendered_page: Optional[RenderedPage]
    document_title: str = "signed_document"
    contacts: Sequence[Contact] = ()
    signature_footprints: Sequence[SignatureFootprint] = ()
    document_fields: Sequence[DocumentField] = ()
    include_certificate: bool = False
    output_dir: Optional[Path] = None
    on_error: Optional[Callable[[str], None]] = None
    on_success: Optional[Callable[[], None]] = None


@dataclass(frozen=True)
class SkippedField:
    field: Field
    reason: str


@dataclass
class RenderReport:
    """
    Outcome of drawing a field collection.

    succeeded: fields that produced draw operations
    empty:     fields with nothing to draw (signature/text without a value)
    skipped:   fields that failed and were left out
    operations: draw operations per 0-based page index, in draw order
    """
    succeeded: List[Field] = field(default_factory=list)
    empty: List[Field] = field(default_factory=list)
    skipped: List[SkippedField] = field(default_factory=list)
    operations: Dict[int, List[DrawOp]] = field(default_factory=dict)

    def skip(self, fld: Field, reason: str) -> None:
        self.skipped.append(SkippedField(fld, reason))


@dataclass
class ExportResult:
    filename: str
    pdf_bytes: bytes
    page_count: int
    output_path: Optional[Path] = None
    succeeded: List[Field] = field(default_factory=list)
    empty: List[Field] = field(default_factory=list)
    skipped: List[SkippedField] = field(default_factory=list)
    certificate_ids: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True when every field was drawn."""
        return not self.skipped
