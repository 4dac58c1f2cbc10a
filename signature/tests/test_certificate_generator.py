from __future__ import annotations

import io
import unittest
from datetime import date, datetime, timezone

from pypdf import PdfReader, PdfWriter

from signature.logic.certificate_generator import (
    IMAGE_ERROR_TEXT,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    CertificateGenerator,
    contact_signature_fields,
)
from signature.models.contact import Contact
from signature.models.document_field import DocumentField
from signature.models.draw_ops import ImageOp
from signature.models.field import Field, FieldType, Position, Size
from signature.models.signature_footprint import SignatureFootprint
from signature.tests.pdf_fixtures import oversized_png_base64, png_data_url, truncated_ihdr_png_base64

ALICE = Contact(id="c1", name="Alice Example", email="alice@example.com", phone="+1 555 0100")
BOB = Contact(id="c2", name="Bob Example", email="bob@example.com")


def _footprint(fid: str, contact_id: str, **kw) -> SignatureFootprint:
    return SignatureFootprint(
        id=fid,
        contact_id=contact_id,
        ip_address="203.0.113.7",
        user_agent="Mozilla/5.0 (X11; Linux x86_64)",
        created_at=datetime(2026, 10, 19, 15, 4, 5, tzinfo=timezone.utc),
        **kw,
    )


def _sig(fid: str, value) -> Field:
    return Field(page=1, position=Position(0, 0), size=Size(300, 100),
                 field_type=FieldType.SIGNATURE, id=fid, value=value)


class TestBuild(unittest.TestCase):
    def setUp(self) -> None:
        self.gen = CertificateGenerator(today=date(2026, 10, 19))

    def test_identity_audit_and_footer(self) -> None:
        page = self.gen.build(ALICE, _footprint("fp-1", "c1", forwarded_ip="10.0.0.1", real_ip="10.0.0.2"),
                              [], "Lease")
        texts = page.texts
        self.assertIn("CERTIFICATE OF SIGNATURE", texts)
        self.assertIn("Document Title: Lease", texts)
        self.assertIn("Certificate Date: October 19, 2026", texts)
        self.assertIn("Name: Alice Example", texts)
        self.assertIn("Email: alice@example.com", texts)
        self.assertIn("Phone: +1 555 0100", texts)
        self.assertIn("IP Address: 203.0.113.7", texts)
        self.assertIn("Forwarded IP: 10.0.0.1", texts)
        self.assertIn("Real IP: 10.0.0.2", texts)
        self.assertIn("User Agent: Mozilla/5.0 (X11; Linux x86_64)", texts)
        self.assertIn("Signature Timestamp: October 19, 2026 at 03:04:05 PM UTC", texts)
        self.assertEqual(texts[-1], "Certificate ID: fp-1")
        self.assertEqual(page.certificate_id, "fp-1")
        self.assertFalse(page.has_image)

    def test_optional_lines_are_omitted(self) -> None:
        texts = self.gen.build(BOB, _footprint("fp-2", "c2"), [], "Lease").texts
        self.assertFalse(any(t.startswith("Phone:") for t in texts))
        self.assertFalse(any(t.startswith("Forwarded IP:") for t in texts))
        self.assertFalse(any(t.startswith("Real IP:") for t in texts))

    def test_signature_copy_keeps_aspect_ratio(self) -> None:
        page = self.gen.build(ALICE, _footprint("fp-1", "c1"), [_sig("f1", png_data_url(300, 100))], "Lease")
        images = [op for op in page.operations if isinstance(op, ImageOp)]
        self.assertEqual(len(images), 1)
        self.assertAlmostEqual(images[0].width, 200)
        self.assertAlmostEqual(images[0].height, 200 * 100 / 300)
        self.assertIn("Signature Image:", page.texts)

    def test_broken_signature_keeps_rest_of_page(self) -> None:
        page = self.gen.build(ALICE, _footprint("fp-1", "c1"), [_sig("f1", "not an image")], "Lease")
        self.assertFalse(page.has_image)
        self.assertIsNotNone(page.image_error)
        self.assertIn(IMAGE_ERROR_TEXT, page.texts)
        self.assertIn("Name: Alice Example", page.texts)
        self.assertEqual(page.texts[-1], "Certificate ID: fp-1")

    def test_malformed_png_header_keeps_rest_of_page(self) -> None:
        for value in (oversized_png_base64(), truncated_ihdr_png_base64()):
            page = self.gen.build(ALICE, _footprint("fp-1", "c1"), [_sig("f1", value)], "Lease")
            self.assertFalse(page.has_image)
            self.assertIn(IMAGE_ERROR_TEXT, page.texts)
            self.assertEqual(page.texts[-1], "Certificate ID: fp-1")

    def test_build_all_keeps_page_with_malformed_signature(self) -> None:
        pages = self.gen.build_all(
            fields=[_sig("f1", oversized_png_base64())],
            contacts=[ALICE],
            footprints=[_footprint("fp-1", "c1")],
            document_fields=[DocumentField(id="d1", field_id="f1", contact_id="c1")],
            document_title="Lease",
            include_certificate=True,
        )
        self.assertEqual([p.certificate_id for p in pages], ["fp-1"])
        self.assertIsNotNone(pages[0].image_error)

    def test_disclaimer_is_wrapped_inside_margins(self) -> None:
        page = self.gen.build(ALICE, _footprint("fp-1", "c1"), [], "Lease")
        idx = page.texts.index("Legal Disclaimer:")
        disclaimer = page.texts[idx + 1:-1]
        self.assertGreater(len(disclaimer), 1)
        self.assertTrue(disclaimer[0].startswith("This certificate verifies"))


class TestContactSignatureFields(unittest.TestCase):
    def test_only_assigned_signed_signature_fields(self) -> None:
        fields = [
            _sig("f1", png_data_url()),
            _sig("f2", png_data_url()),
            _sig("f3", None),
            Field(page=1, position=Position(0, 0), size=Size(10, 10), field_type=FieldType.TEXT,
                  id="f4", value="text"),
        ]
        links = [
            DocumentField(id="d1", field_id="f2", contact_id="c1"),
            DocumentField(id="d2", field_id="f3", contact_id="c1"),
            DocumentField(id="d3", field_id="f4", contact_id="c1"),
            DocumentField(id="d4", field_id="f1", contact_id="c2"),
        ]
        self.assertEqual([f.id for f in contact_signature_fields(fields, links, "c1")], ["f2"])
        self.assertEqual([f.id for f in contact_signature_fields(fields, links, "c2")], ["f1"])
        self.assertEqual(contact_signature_fields(fields, links, "c3"), [])


class TestBuildAllAndAppend(unittest.TestCase):
    def setUp(self) -> None:
        self.gen = CertificateGenerator(today=date(2026, 10, 19))
        self.kwargs = dict(fields=[], document_fields=[], document_title="Lease")

    def test_gating(self) -> None:
        fp = [_footprint("fp-1", "c1")]
        self.assertEqual(self.gen.build_all(contacts=[ALICE], footprints=fp, include_certificate=False,
                                            **self.kwargs), [])
        self.assertEqual(self.gen.build_all(contacts=[], footprints=fp, include_certificate=True,
                                            **self.kwargs), [])
        self.assertEqual(self.gen.build_all(contacts=[ALICE], footprints=[], include_certificate=True,
                                            **self.kwargs), [])

    def test_one_page_per_known_contact_footprint(self) -> None:
        footprints = [_footprint("fp-1", "c1"), _footprint("fp-x", "unknown"), _footprint("fp-2", "c2")]
        pages = self.gen.build_all(contacts=[ALICE, BOB], footprints=footprints, include_certificate=True,
                                   **self.kwargs)
        self.assertEqual([p.certificate_id for p in pages], ["fp-1", "fp-2"])
        self.assertEqual([p.contact for p in pages], [ALICE, BOB])

    def test_append_adds_letter_pages(self) -> None:
        pages = self.gen.build_all(contacts=[ALICE], footprints=[_footprint("fp-1", "c1")],
                                   include_certificate=True, **self.kwargs)
        writer = PdfWriter()
        ids = self.gen.append(writer, pages)
        self.assertEqual(ids, ["fp-1"])
        buf = io.BytesIO()
        writer.write(buf)
        reader = PdfReader(io.BytesIO(buf.getvalue()))
        self.assertEqual(len(reader.pages), 1)
        box = reader.pages[0].mediabox
        self.assertEqual((float(box.width), float(box.height)), (PAGE_WIDTH, PAGE_HEIGHT))
        self.assertIn("Certificate ID: fp-1", reader.pages[0].extract_text())


if __name__ == "__main__":
    unittest.main()
