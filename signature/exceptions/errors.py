"""Signature feature exceptions.

Fatal export failures derive from :class:`ExportError`; per-field failures
derive from :class:`FieldRenderError` and are reported, not raised, by the
renderer.
"""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for the signature feature."""


class FieldValueError(SignatureError, ValueError):
    """Raised when a field value does not match its field type."""


class CoordinateError(SignatureError, ValueError):
    """Raised when screen or page dimensions cannot be used for a transform."""


class ExportError(SignatureError):
    """Fatal error aborting a whole export."""


class SourcePdfFetchError(ExportError):
    """The source PDF location is missing or could not be fetched."""


class SourcePdfParseError(ExportError):
    """The source PDF bytes could not be parsed or contain no pages."""


class RenderedPageMissingError(ExportError):
    """No usable rendered page dimensions were supplied."""


class FieldRenderError(SignatureError):
    """A single field could not be drawn; the export continues without it."""


class PageOutOfRangeError(FieldRenderError):
    """The field targets a page the document does not have."""


class SignatureImageError(FieldRenderError):
    """The signature value is not valid base64-encoded PNG data."""


class UnsupportedTextError(FieldRenderError):
    """The text holds characters the standard PDF fonts cannot show."""


class CertificateError(SignatureError):
    """A certificate page could not be produced."""
