# signature/models/geometry.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class RenderedPage:
    """
    Pixel size of the page as actually displayed (zoom already applied).
    """
    width: float
    height: float

    @property
    def usable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class PageSize:
    """Native PDF page size in points (1 pt = 1/72 inch)."""
    width: float
    height: float


@dataclass(frozen=True)
class PdfRect:
    """
    Field rectangle in PDF user space, origin bottom-left.
    The scale factors that produced it travel along so that insets, font
    sizes and stroke widths can be scaled the same way.
    """
    x: float
    y: float
    width: float
    height: float
    scale_x: float = 1.0
    scale_y: float = 1.0
