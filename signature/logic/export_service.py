# signature/logic/export_service.py
from __future__ import annotations

import asyncio
import logging
from datetime import date
from io import BytesIO
from typing import Optional

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from core.config.config_service import ConfigService, get_config
from core.contracts.audit import IAuditLogger
from core.logging.logic.audit_logger import JsonlAuditLogger
from ..exceptions.errors import (
    ExportError,
    RenderedPageMissingError,
    SourcePdfFetchError,
    SourcePdfParseError,
)
from ..models.export_models import ExportOptions, ExportResult
from .certificate_generator import CertificateGenerator
from .naming_strategy import NamingContext, NamingStrategy, TitleDateStrategy
from .page_renderer import FieldPlanner, PageRenderer
from .pdf_fetcher import PdfFetcher

logger = logging.getLogger(__name__)

_FEATURE_ID = "signature_export"


def output_filename(document_title: str, today: Optional[date] = None,
                    naming: Optional[NamingStrategy] = None) -> str:
    strategy = naming or TitleDateStrategy()
    return strategy.propose_filename(NamingContext(document_title, today or date.today()))


def _parse_pdf(data: bytes) -> PdfReader:
    try:
        reader = PdfReader(BytesIO(data))
        page_count = len(reader.pages)
    except (PdfReadError, ValueError, KeyError, TypeError) as exc:
        raise SourcePdfParseError(f"Failed to parse PDF: {exc}") from exc
    if page_count == 0:
        raise SourcePdfParseError("PDF has no pages")
    return reader


class ExportService:
    """
    Produces a signed PDF: draws every field onto its page, optionally
    appends certificate pages, serializes and writes the file.

    One instance may serve many exports; nothing is cached between them.
    """

    def __init__(self, *, config: Optional[ConfigService] = None,
                 fetcher: Optional[PdfFetcher] = None,
                 audit_logger: Optional[IAuditLogger] = None,
                 naming: Optional[NamingStrategy] = None) -> None:
        self._cfg = config or get_config()
        self._fetcher = fetcher or PdfFetcher(
            timeout=self._cfg.export.fetch_timeout,
            retries=self._cfg.export.fetch_retries,
            backoff=self._cfg.export.retry_backoff,
        )
        if audit_logger is None and self._cfg.audit.enabled:
            audit_logger = JsonlAuditLogger(self._cfg.audit.log_path)
        self._audit_logger = audit_logger
        self._naming = naming or TitleDateStrategy()

    # ------------------------------------------------------------------ #
    async def export(self, options: ExportOptions, *, today: Optional[date] = None) -> ExportResult:
        """
        Run one export. Fatal errors are reported through ``on_error`` and
        re-raised; ``on_success`` is called once the file is produced.
        """
        try:
            result = await self._export(options, today or date.today())
        except ExportError as exc:
            logger.error(f"Error signing PDF: {exc}")
            if options.on_error:
                options.on_error(str(exc))
            raise
        except Exception as exc:
            logger.exception("Error signing PDF")
            if options.on_error:
                options.on_error(str(exc) or "Unknown error occurred")
            raise
        if options.on_success:
            options.on_success()
        return result

    async def _export(self, options: ExportOptions, today: date) -> ExportResult:
        if not options.current_pdf_file:
            raise SourcePdfFetchError("No file URL available")
        source = await self._fetcher.fetch_async(options.current_pdf_file)
        reader = _parse_pdf(source)

        rendered = options.rendered_page
        if rendered is None or not rendered.usable:
            raise RenderedPageMissingError("Rendered page dimensions are missing; cannot map field positions")

        pages = list(reader.pages)
        planner = FieldPlanner(
            text_inset=self._cfg.render.text_inset,
            baseline_offset=self._cfg.render.baseline_offset,
            default_font_size=self._cfg.render.default_font_size,
            today=today,
        )
        report = PageRenderer(planner).render(pages, options.fields, rendered)
        await asyncio.sleep(0)

        writer = PdfWriter()
        for page in pages:
            writer.add_page(page)
        if reader.metadata:
            writer.add_metadata({k: v for k, v in reader.metadata.items() if isinstance(v, str)})

        generator = CertificateGenerator(image_width=self._cfg.certificate.image_width, today=today)
        certificate_pages = generator.build_all(
            fields=options.fields,
            contacts=options.contacts,
            footprints=options.signature_footprints,
            document_fields=options.document_fields,
            document_title=options.document_title,
            include_certificate=options.include_certificate,
        )
        if certificate_pages:
            logger.info("Adding certificate of signature pages...")
        certificate_ids = generator.append(writer, certificate_pages)
        await asyncio.sleep(0)

        buf = BytesIO()
        writer.write(buf)
        pdf_bytes = buf.getvalue()

        filename = self._naming.propose_filename(NamingContext(options.document_title, today))
        output_path = None
        if options.output_dir is not None:
            output_path = options.output_dir / filename
            try:
                options.output_dir.mkdir(parents=True, exist_ok=True)
                output_path.write_bytes(pdf_bytes)
            except OSError as exc:
                raise ExportError(f"Failed to write {output_path}: {exc}") from exc

        result = ExportResult(
            filename=filename,
            pdf_bytes=pdf_bytes,
            page_count=len(writer.pages),
            output_path=output_path,
            succeeded=report.succeeded,
            empty=report.empty,
            skipped=report.skipped,
            certificate_ids=certificate_ids,
        )
        logger.info(
            f"PDF '{filename}' exported: {len(result.succeeded)} field(s) drawn, "
            f"{len(result.skipped)} skipped, {len(certificate_ids)} certificate page(s)"
        )
        self._audit(options, result)
        return result

    def _audit(self, options: ExportOptions, result: ExportResult) -> None:
        if self._audit_logger is None:
            return
        try:
            self._audit_logger.log(
                feature=_FEATURE_ID,
                event="pdf_exported",
                message=result.filename,
                data={
                    "document_title": options.document_title,
                    "source": options.current_pdf_file,
                    "output_path": str(result.output_path) if result.output_path else None,
                    "page_count": result.page_count,
                    "fields_drawn": len(result.succeeded),
                    "fields_skipped": [
                        {"field": s.field.key, "reason": s.reason} for s in result.skipped
                    ],
                    "certificate_ids": result.certificate_ids,
                },
            )
        except OSError as exc:
            logger.warning(f"Audit event for {result.filename} could not be written: {exc}")


async def export_signed_pdf(options: ExportOptions, *, today: Optional[date] = None,
                            **service_kwargs) -> ExportResult:
    """Single entry point: ``await export_signed_pdf(options)``."""
    return await ExportService(**service_kwargs).export(options, today=today)


def export_signed_pdf_sync(options: ExportOptions, *, today: Optional[date] = None,
                           **service_kwargs) -> ExportResult:
    """Blocking variant for scripts and the command line."""
    return asyncio.run(export_signed_pdf(options, today=today, **service_kwargs))
