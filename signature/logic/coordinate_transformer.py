# signature/logic/coordinate_transformer.py
from __future__ import annotations

from typing import Tuple

from ..exceptions.errors import CoordinateError
from ..models.field import Position, Size
from ..models.geometry import PageSize, PdfRect, RenderedPage


def page_size_of(page) -> PageSize:
    """Native size of a pypdf page, read from its mediabox."""
    box = page.mediabox
    return PageSize(float(box.width), float(box.height))


def _scales(rendered: RenderedPage, page_size: PageSize) -> Tuple[float, float]:
    if rendered.width <= 0 or rendered.height <= 0:
        raise CoordinateError(f"Rendered page size must be positive, got {rendered.width}x{rendered.height}")
    if page_size.width <= 0 or page_size.height <= 0:
        raise CoordinateError(f"PDF page size must be positive, got {page_size.width}x{page_size.height}")
    return page_size.width / rendered.width, page_size.height / rendered.height


def transform(position: Position, size: Size, rendered: RenderedPage, page_size: PageSize) -> PdfRect:
    """
    Map a screen rectangle (top-left origin, pixels of the rendered page)
    onto the PDF page (bottom-left origin, points).

    Pure function: identical inputs always give an identical rectangle.
    """
    scale_x, scale_y = _scales(rendered, page_size)
    height = size.height * scale_y
    return PdfRect(
        x=position.x * scale_x,
        y=page_size.height - position.y * scale_y - height,
        width=size.width * scale_x,
        height=height,
        scale_x=scale_x,
        scale_y=scale_y,
    )


def to_screen(rect: PdfRect, rendered: RenderedPage, page_size: PageSize) -> Tuple[Position, Size]:
    """Inverse of :func:`transform`."""
    scale_x, scale_y = _scales(rendered, page_size)
    width = rect.width / scale_x
    height = rect.height / scale_y
    y = (page_size.height - rect.y - rect.height) / scale_y
    return Position(rect.x / scale_x, y), Size(width, height)
