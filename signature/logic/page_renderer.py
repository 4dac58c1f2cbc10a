from __future__ import annotations

import logging
from datetime import date
from io import BytesIO
from typing import Dict, List, Optional, Sequence

from pypdf import PageObject, PdfReader, Transformation
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.helpers.date_time_helper import us_short_date
from ..exceptions.errors import (
    CoordinateError,
    FieldRenderError,
    FieldValueError,
    PageOutOfRangeError,
    UnsupportedTextError,
)
from ..models.draw_ops import DrawOp, ImageOp, LineOp, RectOp, TextOp
from ..models.export_models import RenderReport
from ..models.field import DEFAULT_FONT_SIZE, Field, FieldType
from ..models.geometry import PdfRect, RenderedPage
from .coordinate_transformer import page_size_of, transform
from .signature_image import load_signature_image

logger = logging.getLogger(__name__)

# (is_bold, is_italic) -> standard Type 1 face
FONT_FACES: Dict[tuple, str] = {
    (False, False): "Helvetica",
    (True, False): "Helvetica-Bold",
    (False, True): "Helvetica-Oblique",
    (True, True): "Helvetica-BoldOblique",
}

# the standard Type 1 faces are drawn with WinAnsiEncoding
TEXT_ENCODING = "cp1252"

CHECKBOX_BORDER_WIDTH = 1.5
CHECKMARK_WIDTH = 2.0
# checkmark vertices as fractions of the drawn box
CHECKMARK_POINTS = ((0.30, 0.50), (0.45, 0.30), (0.75, 0.70))


def font_face(is_bold: bool, is_italic: bool) -> str:
    return FONT_FACES[(bool(is_bold), bool(is_italic))]


class FieldPlanner:
    """
    Turns one field plus its PDF rectangle into draw operations.

    Planning is side-effect free; nothing touches a PDF here.
    """

    def __init__(self, *, text_inset: float = 8.0, baseline_offset: float = 4.0,
                 default_font_size: float = DEFAULT_FONT_SIZE, today: Optional[date] = None) -> None:
        self.text_inset = text_inset
        self.baseline_offset = baseline_offset
        self.default_font_size = default_font_size
        self.today = today

    def plan(self, fld: Field, rect: PdfRect) -> List[DrawOp]:
        if fld.field_type is FieldType.SIGNATURE:
            return self._plan_signature(fld, rect)
        if fld.field_type is FieldType.TEXT:
            return self._plan_text(fld, rect)
        if fld.field_type is FieldType.CHECKBOX:
            return self._plan_checkbox(fld, rect)
        if fld.field_type is FieldType.DATE:
            return self._plan_date(fld, rect)
        raise FieldValueError(f"Unhandled field type {fld.field_type!r}")

    # ------------------------------------------------------------------ #
    def _plan_signature(self, fld: Field, rect: PdfRect) -> List[DrawOp]:
        if not fld.value:
            return []
        image = load_signature_image(str(fld.value))
        # stretched to the field box; aspect ratio of the image is ignored
        return [ImageOp(image, rect.x, rect.y, rect.width, rect.height)]

    def _text_op(self, text: str, fld: Field, rect: PdfRect, font: str) -> TextOp:
        try:
            text.encode(TEXT_ENCODING)
        except UnicodeEncodeError as exc:
            bad = text[exc.start:exc.end]
            raise UnsupportedTextError(f"{font} cannot draw {bad!r} in {text!r}") from exc
        size = (fld.font_size or self.default_font_size) * rect.scale_y
        return TextOp(
            text=text,
            x=rect.x + self.text_inset * rect.scale_x,
            y=rect.y + rect.height / 2 - self.baseline_offset * rect.scale_y,
            font=font,
            size=size,
        )

    def _plan_text(self, fld: Field, rect: PdfRect) -> List[DrawOp]:
        if not fld.value:
            return []
        return [self._text_op(str(fld.value), fld, rect, font_face(fld.is_bold, fld.is_italic))]

    def _plan_date(self, fld: Field, rect: PdfRect) -> List[DrawOp]:
        text = str(fld.value) if fld.value else us_short_date(self.today)
        return [self._text_op(text, fld, rect, FONT_FACES[(False, False)])]

    def _plan_checkbox(self, fld: Field, rect: PdfRect) -> List[DrawOp]:
        factor = fld.checkbox_size / 100.0
        side = min(fld.size.width, fld.size.height)
        box_w = side * rect.scale_x * factor
        box_h = side * rect.scale_y * factor
        ops: List[DrawOp] = [RectOp(rect.x, rect.y, box_w, box_h, CHECKBOX_BORDER_WIDTH * rect.scale_x)]
        if fld.is_checked:
            points = [(rect.x + box_w * fx, rect.y + box_h * fy) for fx, fy in CHECKMARK_POINTS]
            for (x1, y1), (x2, y2) in zip(points, points[1:]):
                ops.append(LineOp(x1, y1, x2, y2, CHECKMARK_WIDTH * rect.scale_x))
        return ops


def paint_ops(c: canvas.Canvas, ops: Sequence[DrawOp]) -> None:
    """Execute draw operations on a reportlab canvas, in order."""
    for op in ops:
        if isinstance(op, ImageOp):
            c.drawImage(ImageReader(op.image), op.x, op.y, width=op.width, height=op.height, mask="auto")
        elif isinstance(op, TextOp):
            c.setFillColorRGB(*op.color)
            c.setFont(op.font, op.size)
            c.drawString(op.x, op.y, op.text)
        elif isinstance(op, RectOp):
            c.setStrokeColorRGB(0, 0, 0)
            c.setLineWidth(op.line_width)
            c.rect(op.x, op.y, op.width, op.height, stroke=1, fill=0)
        elif isinstance(op, LineOp):
            c.setStrokeColorRGB(0, 0, 0)
            c.setLineWidth(op.line_width)
            c.line(op.x1, op.y1, op.x2, op.y2)
        else:
            raise TypeError(f"Unknown draw operation {op!r}")


class PageRenderer:
    """
    Draws fields onto the pages of a loaded PDF.

    Each touched page receives one overlay page (same size, drawn with
    reportlab) merged on top with pypdf.
    """

    def __init__(self, planner: Optional[FieldPlanner] = None) -> None:
        self.planner = planner or FieldPlanner()

    @staticmethod
    def _make_overlay(width: float, height: float, ops: Sequence[DrawOp]) -> PageObject:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(width, height))
        paint_ops(c, ops)
        c.showPage()
        c.save()
        return PdfReader(BytesIO(buf.getvalue())).pages[0]

    @classmethod
    def paint(cls, page: PageObject, ops: Sequence[DrawOp]) -> None:
        size = page_size_of(page)
        overlay = cls._make_overlay(size.width, size.height, ops)
        box = page.mediabox
        left, bottom = float(box.left), float(box.bottom)
        if left or bottom:
            page.merge_transformed_page(overlay, Transformation().translate(left, bottom))
        else:
            page.merge_page(overlay)

    def plan_all(self, pages: Sequence[PageObject], fields: Sequence[Field],
                 rendered: RenderedPage) -> RenderReport:
        report = RenderReport()
        for fld in fields:
            index = fld.page - 1
            try:
                if index >= len(pages):
                    raise PageOutOfRangeError(f"page {fld.page} exceeds document page count {len(pages)}")
                rect = transform(fld.position, fld.size, rendered, page_size_of(pages[index]))
                ops = self.planner.plan(fld, rect)
            except (FieldRenderError, CoordinateError) as exc:
                logger.warning(f"Skipping {fld.field_type.value} field {fld.key}: {exc}")
                report.skip(fld, str(exc))
                continue
            if not ops:
                report.empty.append(fld)
                continue
            report.operations.setdefault(index, []).extend(ops)
            report.succeeded.append(fld)
            logger.debug(
                f"Planned {fld.field_type.value} field {fld.key} on page {fld.page} at "
                f"({rect.x:.2f}, {rect.y:.2f}) size {rect.width:.2f}x{rect.height:.2f}"
            )
        return report

    def render(self, pages: Sequence[PageObject], fields: Sequence[Field],
               rendered: RenderedPage) -> RenderReport:
        report = self.plan_all(pages, fields, rendered)
        for index in sorted(report.operations):
            self.paint(pages[index], report.operations[index])
        logger.info(
            f"Rendered {len(report.succeeded)} field(s), {len(report.skipped)} skipped, "
            f"{len(report.empty)} empty"
        )
        return report
