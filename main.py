"""
Command line entry point.

    python main.py export job.json --out-dir out/ [--certificate]

The job file uses the same camelCase shapes the document API returns:

    {
      "currentPdfFile": "https://.../contract.pdf",
      "documentTitle": "Lease",
      "renderedPage": {"width": 612, "height": 792},
      "fields": [...], "contacts": [...],
      "signatureFootprints": [...], "documentFields": [...],
      "includeCertificate": true
    }
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.config.config_service import get_config
from signature.exceptions.errors import SignatureError
from signature.logic.export_service import export_signed_pdf_sync
from signature.models import (
    Contact,
    DocumentField,
    ExportOptions,
    Field,
    RenderedPage,
    SignatureFootprint,
)

logger = logging.getLogger("signature.cli")


def load_job(path: Path, *, out_dir: Optional[Path], certificate: Optional[bool]) -> ExportOptions:
    with path.open("r", encoding="utf-8") as fh:
        job = json.load(fh)

    rendered = job.get("renderedPage")
    return ExportOptions(
        current_pdf_file=job.get("currentPdfFile"),
        fields=[Field.from_dict(f) for f in job.get("fields", [])],
        rendered_page=RenderedPage(float(rendered["width"]), float(rendered["height"])) if rendered else None,
        document_title=job.get("documentTitle") or "signed_document",
        contacts=[Contact.from_dict(c) for c in job.get("contacts", [])],
        signature_footprints=[SignatureFootprint.from_dict(s) for s in job.get("signatureFootprints", [])],
        document_fields=[DocumentField.from_dict(d) for d in job.get("documentFields", [])],
        include_certificate=bool(job.get("includeCertificate", False)) if certificate is None else certificate,
        output_dir=out_dir,
        on_error=lambda message: print(f"Export failed: {message}", file=sys.stderr),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="esign", description="Render signed PDFs from placed fields.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="export a signed PDF from a job file")
    exp.add_argument("job", type=Path, help="JSON job file")
    exp.add_argument("--out-dir", type=Path, default=None, help="target directory (default: config)")
    cert = exp.add_mutually_exclusive_group()
    cert.add_argument("--certificate", dest="certificate", action="store_true", default=None,
                      help="append certificate of signature pages")
    cert.add_argument("--no-certificate", dest="certificate", action="store_false", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    out_dir = args.out_dir or get_config().export.output_dir
    try:
        options = load_job(args.job, out_dir=out_dir, certificate=args.certificate)
    except (SignatureError, KeyError, ValueError, TypeError, OSError) as exc:
        logger.debug(f"Job file {args.job} rejected", exc_info=True)
        print(f"Invalid job file {args.job}: {exc!r}", file=sys.stderr)
        return 1

    try:
        result = export_signed_pdf_sync(options)
    except (SignatureError, ValueError, OSError):
        # already reported through on_error
        return 1

    print(result.output_path)
    for skipped in result.skipped:
        print(f"skipped {skipped.field.key}: {skipped.reason}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
