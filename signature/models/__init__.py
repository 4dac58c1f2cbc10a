from .contact import Contact  # noqa: F401
from .document_field import DocumentField  # noqa: F401
from .export_models import ExportOptions, ExportResult, RenderReport, SkippedField  # noqa: F401
from .field import Field, FieldType, Position, Size  # noqa: F401
from .geometry import PageSize, PdfRect, RenderedPage  # noqa: F401
from .signature_footprint import SignatureFootprint  # noqa: F401
from .draw_ops import DrawOp, ImageOp, LineOp, RectOp, TextOp  # noqa: F401
