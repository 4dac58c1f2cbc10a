# signature/models/draw_ops.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class ImageOp:
    """Draw *image* (a Pillow image) stretched into the given box."""
    image: Any
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextOp:
    """Draw *text* with its baseline starting at (x, y)."""
    text: str
    x: float
    y: float
    font: str
    size: float
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class RectOp:
    """Stroke-only rectangle."""
    x: float
    y: float
    width: float
    height: float
    line_width: float


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    line_width: float


DrawOp = Union[ImageOp, TextOp, RectOp, LineOp]
