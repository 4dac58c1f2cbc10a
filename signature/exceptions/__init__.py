from .errors import (  # noqa: F401
    CertificateError,
    CoordinateError,
    ExportError,
    FieldRenderError,
    FieldValueError,
    PageOutOfRangeError,
    RenderedPageMissingError,
    SignatureError,
    SignatureImageError,
    SourcePdfFetchError,
    SourcePdfParseError,
    UnsupportedTextError,
)
