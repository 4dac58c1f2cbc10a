from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from signature.exceptions.errors import SourcePdfFetchError
from signature.logic.pdf_fetcher import PdfFetcher


def _response(status: int, content: bytes = b"", reason: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    resp.reason = reason
    return resp


class TestPdfFetcher(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock()
        self.sleeps: list[float] = []
        self.fetcher = PdfFetcher(timeout=5, retries=2, backoff=0.5, session=self.session,
                                  sleep=self.sleeps.append)

    def test_success_returns_body(self) -> None:
        self.session.get.return_value = _response(200, b"%PDF-1.4")
        self.assertEqual(self.fetcher.fetch("https://files.example.com/a.pdf"), b"%PDF-1.4")
        self.session.get.assert_called_once_with("https://files.example.com/a.pdf", timeout=5)

    def test_client_error_is_not_retried(self) -> None:
        self.session.get.return_value = _response(404, reason="Not Found")
        with self.assertRaises(SourcePdfFetchError) as ctx:
            self.fetcher.fetch("https://files.example.com/missing.pdf")
        self.assertIn("404", str(ctx.exception))
        self.assertEqual(self.session.get.call_count, 1)
        self.assertEqual(self.sleeps, [])

    def test_server_errors_retry_with_backoff_then_fail(self) -> None:
        self.session.get.return_value = _response(503, reason="Service Unavailable")
        with self.assertRaises(SourcePdfFetchError):
            self.fetcher.fetch("https://files.example.com/a.pdf")
        self.assertEqual(self.session.get.call_count, 3)
        self.assertEqual(self.sleeps, [0.5, 1.0])

    def test_timeout_then_success(self) -> None:
        self.session.get.side_effect = [requests.exceptions.Timeout(), _response(200, b"ok")]
        self.assertEqual(self.fetcher.fetch("http://files.example.com/a.pdf"), b"ok")
        self.assertEqual(self.sleeps, [0.5])

    def test_connection_errors_exhaust_retries(self) -> None:
        self.session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(SourcePdfFetchError) as ctx:
            self.fetcher.fetch("http://files.example.com/a.pdf")
        self.assertIn("refused", str(ctx.exception))

    def test_missing_location(self) -> None:
        for location in (None, ""):
            with self.assertRaises(SourcePdfFetchError):
                self.fetcher.fetch(location)

    def test_local_path_and_file_url(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "doc.pdf"
            path.write_bytes(b"%PDF-local")
            self.assertEqual(self.fetcher.fetch(str(path)), b"%PDF-local")
            self.assertEqual(self.fetcher.fetch(path.as_uri()), b"%PDF-local")
            with self.assertRaises(SourcePdfFetchError):
                self.fetcher.fetch(str(Path(tmp) / "nope.pdf"))
        self.session.get.assert_not_called()


class TestOwnedSession(unittest.TestCase):
    def test_session_is_closed_after_each_download(self) -> None:
        session = MagicMock()
        session.get.side_effect = [_response(200, b"%PDF"), _response(404, reason="Not Found")]
        with patch("signature.logic.pdf_fetcher.requests.Session") as session_cls:
            session_cls.return_value.__enter__.return_value = session
            fetcher = PdfFetcher(retries=0)
            self.assertEqual(fetcher.fetch("https://files.example.com/a.pdf"), b"%PDF")
            with self.assertRaises(SourcePdfFetchError):
                fetcher.fetch("https://files.example.com/b.pdf")
        self.assertEqual(session_cls.call_count, 2)
        self.assertEqual(session_cls.return_value.__exit__.call_count, 2)

    def test_injected_session_is_left_open(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(200, b"%PDF")
        PdfFetcher(session=session).fetch("https://files.example.com/a.pdf")
        session.close.assert_not_called()
        session.__exit__.assert_not_called()


class TestFetchAsync(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_async_runs_fetch(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(200, b"bytes")
        fetcher = PdfFetcher(session=session)
        self.assertEqual(await fetcher.fetch_async("https://files.example.com/a.pdf"), b"bytes")


if __name__ == "__main__":
    unittest.main()
