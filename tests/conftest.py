import io
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docflow.config.settings import Settings


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page invoice PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Invoice 123 from Acme Corp")
    c.drawString(72, 700, "Total due 1200.50")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        document_storage_path=str(tmp_path / "documents"),
        genai_api_url="https://genai.test/v1/analyze",
        amount_threshold=10000,
        high_risk_levels="high,critical",
        feedback_confidence_threshold=0.8,
        destination_client_id="dest-client",
        destination_client_secret="dest-secret",
        destination_auth_url="https://auth.test",
        destination_service_url="https://destination.test",
    )
