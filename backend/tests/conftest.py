"""
Pytest configuration and fixtures for Verity tests.
"""
import os
import sys
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set environment before importing app
os.environ.setdefault("TESSERACT_PATH", "/usr/bin/tesseract")
os.environ.setdefault("DEFAULT_TEMPLATE", "freelance_general")

from verity.config import Settings  # noqa: E402
from verity.ocr import OCRPageResult, OCRResult  # noqa: E402
from verity.scripts import tesseract_languages  # noqa: E402


class FakeOCREngine:
    """Stands in for OCREngine; returns canned text and records calls."""

    def __init__(self, text: str = "", confidence: float = 90.0, pages: int = 1):
        self.text = text
        self.confidence = confidence
        self.pages = pages
        self.calls: list[str] = []
        self.scripts = []

    def rasterize_pdf(self, content, timeout=None):
        self.calls.append("rasterize_pdf")
        return [object() for _ in range(self.pages)]

    def load_image(self, content):
        self.calls.append("load_image")
        return object()

    def recognize_pages(self, images, script, progress=None, deadline=None):
        self.calls.append("recognize_pages")
        self.scripts.append(script)
        page = OCRPageResult(
            page_number=1,
            text=self.text,
            confidence=self.confidence,
            word_count=len(self.text.split()),
        )
        return OCRResult(
            text=self.text,
            confidence=self.confidence,
            word_count=len(self.text.split()),
            pages=[page] * len(images),
            languages=tesseract_languages(script),
            processing_time=0.01,
        )


class StubExtractor:
    """Format extractor returning fixed text."""

    def __init__(self, raw):
        self.raw = raw

    def extract(self, content):
        return self.raw


@pytest.fixture
def settings() -> Settings:
    """Fresh settings with test defaults."""
    return Settings(tesseract_path="/usr/bin/tesseract")


@pytest.fixture
def fake_ocr():
    """Factory for fake OCR engines."""
    return FakeOCREngine


@pytest.fixture
def stub_extractor():
    return StubExtractor


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from main import app

    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def english_contract() -> str:
    """A plain English freelance contract with several problem clauses."""
    return (
        "FREELANCE SERVICES AGREEMENT\n"
        "1. Services. The Consultant will provide design services to the Client "
        "as described in the attached statement of work.\n"
        "2. Payment. The Client shall make payment within 60 days of invoice.\n"
        "3. Restrictions. The Consultant shall not compete with any similar business "
        "for a period of 2 years after termination of this agreement.\n"
        "4. Liability. The Consultant shall indemnify the Client against all claims "
        "arising from the services.\n"
        "5. Governing Law. This agreement and the governing law shall be that of "
        "the State of California.\n"
    )


@pytest.fixture
def fair_contract() -> str:
    """An English contract with no problem clauses."""
    return (
        "SERVICES AGREEMENT\n"
        "1. Scope. The designer will deliver a logo and a style guide for the brand.\n"
        "2. Fees. The total fee for the work is agreed in the attached schedule.\n"
        "3. Ownership. Rights in the final deliverables transfer to the client on "
        "receipt of the final payment.\n"
        "4. Law. This agreement is governed by the laws of India and disputes are "
        "settled by arbitration in Bengaluru.\n"
    )


@pytest.fixture
def kannada_contract() -> str:
    """Kannada text containing a non-compete and a penalty clause."""
    return (
        "ಸೇವಾ ಒಪ್ಪಂದ\n"
        "೧. ಒಪ್ಪಂದದ ಅವಧಿಯ ನಂತರ ಗುತ್ತಿಗೆದಾರರು ಯಾವುದೇ ಸ್ಪರ್ಧಾತ್ಮಕ ವ್ಯಾಪಾರ "
        "ಮಾಡಬಾರದು.\n"
        "೨. ತಡವಾದ ಕೆಲಸಕ್ಕೆ ದಂಡ ವಿಧಿಸಲಾಗುವುದು.\n"
    )
