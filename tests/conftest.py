"""
Fixtures communes : PDF texte minimal généré à la volée, faux service HTTP,
renderer qui écrit une vraie image PNG sans poppler ni Ghostscript.
"""

from pathlib import Path
from typing import List

import pytest
import requests
from PIL import Image

from manual_dataset.renderer import PageRenderer


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_text_pdf(path: Path, page_texts: List[str]) -> Path:
    """Écrit un PDF (Helvetica, une ligne par page) avec une table xref exacte."""
    n = len(page_texts)
    page_ids = [4 + 2 * i for i in range(n)]
    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: ("<< /Type /Pages /Kids [%s] /Count %d >>" % (" ".join(f"{p} 0 R" for p in page_ids), n)).encode(),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    for page_id, text in zip(page_ids, page_texts):
        stream = f"BT /F1 18 Tf 72 720 Td ({_pdf_escape(text)}) Tj ET".encode("latin-1")
        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
        ).encode()
        objects[page_id + 1] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += b"%d 0 obj\n" % obj_id + objects[obj_id] + b"\nendobj\n"
    xref_at = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for obj_id in range(1, size):
        out += b"%010d 00000 n \n" % offsets[obj_id]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    path.write_bytes(bytes(out))
    return path


@pytest.fixture
def make_pdf(tmp_path):
    def _make(page_texts: List[str], name: str = "manual.pdf") -> Path:
        return build_text_pdf(tmp_path / name, page_texts)

    return _make


class FakeResponse:
    def __init__(self, status_code: int = 200, body: str = "", content_type: str = "text/plain; charset=utf-8"):
        self.status_code = status_code
        self.content = body.encode("utf-8")
        self.headers = {"Content-Type": content_type}
        self.encoding = "utf-8" if "charset" in content_type else "ISO-8859-1"

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


class FakeSession:
    """Remplace requests.Session : réponses (ou exceptions) servies dans l'ordre."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []
        self.closed = False

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        reply = self.replies.pop(0) if self.replies else FakeResponse(200, "")
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def ok():
    return lambda body: FakeResponse(200, body)


class PngRenderer(PageRenderer):
    """Renderer de test : image blanche écrite sur disque, compte les appels."""

    def __init__(self, dpi: int = 10, fail_on=()):
        super().__init__(dpi=dpi)
        self.fail_on = set(fail_on)
        self.rendered = []

    def _render_to(self, pdf_path, page_index, target):
        if page_index in self.fail_on:
            return  # aucune image produite
        Image.new("RGB", (8, 8), "white").save(str(target), format="PNG")
        self.rendered.append(page_index)


@pytest.fixture
def png_renderer():
    return PngRenderer


@pytest.fixture
def fake_response():
    return FakeResponse
