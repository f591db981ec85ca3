"""
Shared fixtures.

Nothing here touches the network: remote sites are served from an
``httpx.MockTransport`` route table and PDFs are built in memory.
"""

from typing import Callable, Union

import fitz  # PyMuPDF
import httpx
import pytest

from walaw.config import Settings
from walaw.models import LegalSection
from walaw.citations import parse_citation
from walaw.storage import DocumentStore


Route = Union[str, bytes, int, Exception]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with tiny courtesy delays and a throwaway store path."""
    return Settings(
        _env_file=None,
        db_path=tmp_path / "laws.db",
        request_delay_s=0.001,
        host_min_interval_s=0.001,
    )


@pytest.fixture
def store(settings):
    """A read-write store with the schema in place."""
    store = DocumentStore.open(settings.db_path)
    store.init_schema()
    yield store
    store.close()


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Build a PDF with one page per argument; newlines start new lines."""
    def _make(*pages: str) -> bytes:
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            page.insert_text((72, 72), text, fontsize=11)
        data = doc.tobytes()
        doc.close()
        return data
    return _make


@pytest.fixture
def mock_transport() -> Callable[[dict], httpx.MockTransport]:
    """Serve a route table of ``url -> body``.

    A ``str`` body is served as HTML, ``bytes`` as a PDF, an ``int`` as an
    empty response with that status, and an exception is raised. Unknown
    URLs get a 404.
    """
    def _build(routes: dict[str, Route]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            body = routes.get(str(request.url))
            if body is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(body, Exception):
                raise body
            if isinstance(body, int):
                return httpx.Response(body)
            if isinstance(body, bytes):
                return httpx.Response(200, content=body, headers={"content-type": "application/pdf"})
            return httpx.Response(200, text=body, headers={"content-type": "text/html; charset=utf-8"})
        return httpx.MockTransport(handler)
    return _build


def make_section(cite: str, text: str, separator: str = ".", **names) -> LegalSection:
    citation = parse_citation(cite, separator)
    return LegalSection(
        citation=str(citation),
        title_num=citation.title,
        chapter_num=citation.chapter,
        section_num=citation.section_num,
        full_text=text,
        **names,
    )

