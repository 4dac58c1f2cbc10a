"""
===============================================================================
CertificateGenerator – "certificate of signature" pages for signed exports
-------------------------------------------------------------------------------
One US Letter page per (contact, signature footprint) pair, holding the
document title, the signer's identity, the audit data captured at signing
time, a scaled copy of the signer's signature and a legal disclaimer. The
footprint id is printed as certificate id.

Pages are first described as draw operations (CertificatePage) and then
painted with reportlab and appended with pypdf.
===============================================================================
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Dict, List, Optional, Sequence

from pypdf import PageObject, PdfReader, PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from core.helpers.date_time_helper import us_long_date, us_long_timestamp
from ..exceptions.errors import CertificateError, SignatureImageError
from ..models.contact import Contact
from ..models.document_field import DocumentField
from ..models.draw_ops import DrawOp, ImageOp, TextOp
from ..models.field import Field, FieldType
from ..models.signature_footprint import SignatureFootprint
from .page_renderer import paint_ops
from .signature_image import load_signature_image

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = letter  # 612 x 792 pt
MARGIN_X = 50.0
BLACK = (0.0, 0.0, 0.0)
GREY = (0.5, 0.5, 0.5)

DISCLAIMER = (
    "This certificate verifies that the above-named individual has electronically signed "
    "the referenced document. The signature was captured using secure digital signature "
    "technology and includes verification of the signer's IP address, device information, "
    "and timestamp. This certificate serves as proof of signature for legal and compliance purposes."
)
IMAGE_ERROR_TEXT = "Signature image could not be embedded"


@dataclass
class CertificatePage:
    """Content of one certificate page, ready to paint."""
    certificate_id: str
    contact: Contact
    operations: List[DrawOp] = field(default_factory=list)
    image_error: Optional[str] = None

    @property
    def texts(self) -> List[str]:
        return [op.text for op in self.operations if isinstance(op, TextOp)]

    @property
    def has_image(self) -> bool:
        return any(isinstance(op, ImageOp) for op in self.operations)


def contact_signature_fields(fields: Sequence[Field], document_fields: Sequence[DocumentField],
                             contact_id: str) -> List[Field]:
    """Signature fields carrying a value that are assigned to *contact_id*."""
    assigned = {df.field_id for df in document_fields if df.contact_id == contact_id}
    return [
        f for f in fields
        if f.field_type is FieldType.SIGNATURE and f.value and f.id is not None and f.id in assigned
    ]


class CertificateGenerator:
    def __init__(self, *, image_width: float = 200.0, today: Optional[date] = None) -> None:
        self.image_width = image_width
        self.today = today

    # ------------------------------------------------------------------ #
    def build(self, contact: Contact, footprint: SignatureFootprint,
              signature_fields: Sequence[Field], document_title: str) -> CertificatePage:
        page = CertificatePage(certificate_id=footprint.id, contact=contact)
        ops = page.operations
        top = PAGE_HEIGHT

        def text(value: str, y: float, *, size: float = 12, bold: bool = False,
                 color=BLACK, x: float = MARGIN_X) -> None:
            font = "Helvetica-Bold" if bold else "Helvetica"
            ops.append(TextOp(value, x, top - y, font, size, color))

        text("CERTIFICATE OF SIGNATURE", 80, size=18, bold=True, x=PAGE_WIDTH / 2 - 120)

        text("Document Information:", 140, size=14, bold=True)
        text(f"Document Title: {document_title}", 165)
        text(f"Certificate Date: {us_long_date(self.today)}", 185)

        text("Signer Information:", 230, size=14, bold=True)
        text(f"Name: {contact.name}", 255)
        text(f"Email: {contact.email}", 275)
        if contact.phone:
            text(f"Phone: {contact.phone}", 295)

        text("Digital Signature Verification:", 340, size=14, bold=True)
        text(f"IP Address: {footprint.ip_address}", 365)
        if footprint.forwarded_ip:
            text(f"Forwarded IP: {footprint.forwarded_ip}", 385)
        if footprint.real_ip:
            text(f"Real IP: {footprint.real_ip}", 405)
        text(f"User Agent: {footprint.user_agent}", 425, size=10)
        text(f"Signature Timestamp: {us_long_timestamp(footprint.created_at)}", 445)

        signature = next((f for f in signature_fields if f.field_type is FieldType.SIGNATURE and f.value), None)
        if signature is not None:
            text("Signature Image:", 490, size=14, bold=True)
            try:
                image = load_signature_image(str(signature.value))
            except SignatureImageError as exc:
                logger.error(f"Error embedding signature image in certificate {footprint.id}: {exc}")
                page.image_error = str(exc)
                text(IMAGE_ERROR_TEXT, 520, size=10, color=GREY)
            else:
                # certificate copy keeps the image's aspect ratio
                width = self.image_width
                height = image.height * width / image.width
                ops.append(ImageOp(image, MARGIN_X, top - 490 - height - 20, width, height))

        text("Legal Disclaimer:", 650, bold=True)
        lines = simpleSplit(DISCLAIMER, "Helvetica", 10, PAGE_WIDTH - 2 * MARGIN_X)
        for i, line in enumerate(lines):
            text(line, 675 + i * 14, size=10)

        ops.append(TextOp(f"Certificate ID: {footprint.id}", MARGIN_X, 50, "Helvetica", 10, GREY))
        return page

    def build_all(self, *, fields: Sequence[Field], contacts: Sequence[Contact],
                  footprints: Sequence[SignatureFootprint], document_fields: Sequence[DocumentField],
                  document_title: str, include_certificate: bool) -> List[CertificatePage]:
        """
        Certificate pages in footprint order. Empty unless certificates were
        requested and both contacts and footprints are present.
        """
        if not (include_certificate and contacts and footprints):
            return []
        by_id: Dict[str, Contact] = {c.id: c for c in contacts}
        pages: List[CertificatePage] = []
        for footprint in footprints:
            contact = by_id.get(footprint.contact_id)
            if contact is None:
                logger.debug(f"No contact {footprint.contact_id} for footprint {footprint.id}")
                continue
            sig_fields = contact_signature_fields(fields, document_fields, contact.id)
            try:
                pages.append(self.build(contact, footprint, sig_fields, document_title))
            except Exception as exc:
                logger.error(f"Error creating certificate page for {contact.name}: {exc}", exc_info=True)
        return pages

    # ------------------------------------------------------------------ #
    @staticmethod
    def render_page(page: CertificatePage) -> PageObject:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
        c.setTitle(f"Certificate {page.certificate_id}")
        paint_ops(c, page.operations)
        c.showPage()
        c.save()
        reader = PdfReader(BytesIO(buf.getvalue()))
        if len(reader.pages) != 1:
            raise CertificateError(f"Certificate {page.certificate_id} rendered {len(reader.pages)} pages")
        return reader.pages[0]

    def append(self, writer: PdfWriter, pages: Sequence[CertificatePage]) -> List[str]:
        """Append painted certificate pages to *writer*; return their ids."""
        ids: List[str] = []
        for page in pages:
            try:
                writer.add_page(self.render_page(page))
            except Exception as exc:
                logger.error(f"Error rendering certificate page for {page.contact.name}: {exc}", exc_info=True)
                continue
            ids.append(page.certificate_id)
            logger.info(f"Created certificate page for {page.contact.name} with ID: {page.certificate_id}")
        return ids
