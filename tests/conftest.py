import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from dochub.core.config import settings


def _pdf(pages) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in pages:
        if text:
            c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


def _image(fmt: str, mode: str = "RGB", size=(200, 100)) -> bytes:
    color = (30, 120, 200, 128) if mode == "RGBA" else (30, 120, 200)
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Single-page PDF with known text content."""
    return _pdf(["Hello PDF World"])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Three-page PDF with known text on each page."""
    return _pdf(["Page one content", "Page two content", "Page three content"])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    return _pdf([None])


@pytest.fixture()
def png_bytes() -> bytes:
    return _image("PNG")


@pytest.fixture()
def rgba_png_bytes() -> bytes:
    return _image("PNG", mode="RGBA")


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return _image("JPEG")


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture()
def client(upload_dir) -> TestClient:
    from dochub.main import app

    return TestClient(app)
