# signature/logic/pdf_fetcher.py
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import requests

from ..exceptions.errors import SourcePdfFetchError

logger = logging.getLogger(__name__)


class PdfFetcher:
    """
    Loads the source PDF bytes for an export.

    http(s) locations are downloaded with a timeout and a bounded number of
    retries (exponential backoff) for timeouts, connection errors and 5xx
    answers. 4xx answers fail at once. file:// URLs and plain paths are
    read from disk. A session passed in is reused and left open; otherwise
    each download opens and closes its own.
    """

    def __init__(self, *, timeout: float = 30.0, retries: int = 3, backoff: float = 0.5,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self.backoff = backoff
        self._session = session
        self._sleep = sleep

    # ------------------------------------------------------------------ #
    def fetch(self, location: Optional[str]) -> bytes:
        if not location:
            raise SourcePdfFetchError("No file URL available")
        scheme = urlparse(location).scheme.lower()
        if scheme in ("http", "https"):
            return self._fetch_http(location)
        if scheme == "file":
            return self._read_file(Path(unquote(urlparse(location).path)))
        return self._read_file(Path(location))

    async def fetch_async(self, location: Optional[str]) -> bytes:
        """Run :meth:`fetch` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.fetch, location)

    # ------------------------------------------------------------------ #
    @staticmethod
    def _read_file(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SourcePdfFetchError(f"Failed to read PDF {path}: {exc}") from exc

    def _fetch_http(self, url: str) -> bytes:
        if self._session is not None:
            return self._fetch_with(self._session, url)
        with requests.Session() as session:
            return self._fetch_with(session, url)

    def _fetch_with(self, session: requests.Session, url: str) -> bytes:
        attempts = self.retries + 1
        last_error = "unknown error"
        for attempt in range(1, attempts + 1):
            try:
                response = session.get(url, timeout=self.timeout)
            except requests.exceptions.Timeout:
                last_error = f"Request timeout after {self.timeout} seconds"
                logger.warning(f"PDF fetch timeout (attempt {attempt}/{attempts}): {url}")
            except requests.exceptions.RequestException as exc:
                last_error = f"Request error: {exc}"
                logger.warning(f"PDF fetch error (attempt {attempt}/{attempts}): {exc}")
            else:
                if 200 <= response.status_code < 300:
                    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
                    return response.content
                last_error = f"Failed to fetch PDF: {response.status_code} {response.reason}"
                if response.status_code < 500:
                    raise SourcePdfFetchError(last_error)
                logger.warning(f"{last_error} (attempt {attempt}/{attempts})")

            if attempt < attempts:
                self._sleep(self.backoff * 2 ** (attempt - 1))

        raise SourcePdfFetchError(last_error)
