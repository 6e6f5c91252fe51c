"""
Tests for OCR result handling.

Tesseract itself is never invoked; recognition or pytesseract is stubbed.
"""
import time

import pytesseract
import pytest
from PIL import Image

from verity.config import PAGE_BREAK_MARKER
from verity.errors import CorruptDocumentError, ExtractionTimeoutError, OCRError
from verity.ocr import OCREngine, OCRPageResult, OCRProgress, overall_confidence, parse_ocr_data
from verity.scripts import ScriptCode


class TestParseOCRData:
    """Tests for rebuilding text from Tesseract word boxes."""

    def test_lines_and_confidence(self):
        data = {
            "text": ["Payment", "within", "", "30", "days", "noise"],
            "conf": ["90", "80", "-1", "70", "60", "-1"],
            "block_num": [1, 1, 1, 1, 1, 1],
            "par_num": [1, 1, 1, 1, 1, 1],
            "line_num": [1, 1, 1, 2, 2, 2],
        }
        text, confidence = parse_ocr_data(data)

        assert text == "Payment within\n30 days"
        assert confidence == pytest.approx(75.0)

    def test_no_words(self):
        text, confidence = parse_ocr_data({"text": ["", " "], "conf": ["-1", "-1"]})
        assert text == ""
        assert confidence == 0.0


class TestOverallConfidence:
    """Tests for length-weighted confidence."""

    def test_weighted_by_text_length(self):
        pages = [
            OCRPageResult(1, "x" * 99, 90.0, 1),
            OCRPageResult(2, "", 10.0, 0),
        ]
        # weights 100 and 1
        assert overall_confidence(pages) == pytest.approx((90 * 100 + 10) / 101)

    def test_empty(self):
        assert overall_confidence([]) == 0.0


class TestRecognizePages:
    """Tests for multi-page recognition."""

    @pytest.fixture
    def engine(self, settings, monkeypatch):
        engine = OCREngine(settings)

        def fake_recognize(image, script, page_number=1, timeout=0):
            text = f"page {page_number} text"
            return OCRPageResult(page_number, text, 80.0, len(text.split()))

        monkeypatch.setattr(engine, "recognize", fake_recognize)
        return engine

    def test_pages_joined_with_marker(self, engine):
        result = engine.recognize_pages([object(), object()], ScriptCode.ENGLISH)

        assert result.text == f"page 1 text{PAGE_BREAK_MARKER}page 2 text"
        assert result.word_count == 6
        assert result.languages == "eng+hin"
        assert result.confidence == pytest.approx(80.0)

    def test_progress_reported(self, engine):
        updates: list[OCRProgress] = []
        engine.recognize_pages([object(), object()], ScriptCode.KANNADA, progress=updates.append)

        assert updates[0].progress == 0.0
        assert updates[-1].progress == 1.0
        assert updates[-1].status == "OCR complete"

    def test_expired_deadline_raises(self, engine):
        with pytest.raises(ExtractionTimeoutError) as exc_info:
            engine.recognize_pages([object()], ScriptCode.ENGLISH, deadline=time.monotonic() - 1)
        assert exc_info.value.reason == "timeout"


class TestRecognize:
    """Tests for single-page recognition and Tesseract failures."""

    @pytest.fixture
    def page(self):
        return Image.new("RGB", (40, 40), "white")

    def test_words_become_page_text(self, settings, page, monkeypatch):
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *args, **kwargs: {
            "text": ["Fee", "due"],
            "conf": ["90", "70"],
            "block_num": [1, 1],
            "par_num": [1, 1],
            "line_num": [1, 1],
        })

        result = OCREngine(settings).recognize(page, ScriptCode.ENGLISH, page_number=2)

        assert result.page_number == 2
        assert result.text == "Fee due"
        assert result.word_count == 2

    def test_tesseract_error(self, settings, page, monkeypatch):
        def fail(*args, **kwargs):
            raise pytesseract.TesseractError(1, "Error opening data file")

        monkeypatch.setattr(pytesseract, "image_to_data", fail)

        with pytest.raises(OCRError) as exc_info:
            OCREngine(settings).recognize(page, ScriptCode.KANNADA, page_number=3)
        assert exc_info.value.reason == "ocr_failed"
        assert "page 3" in exc_info.value.message

    def test_tesseract_timeout(self, settings, page, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(pytesseract, "image_to_data", fail)

        with pytest.raises(ExtractionTimeoutError) as exc_info:
            OCREngine(settings).recognize(page, ScriptCode.ENGLISH, timeout=1)
        assert exc_info.value.reason == "timeout"

    def test_other_runtime_error(self, settings, page, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("unexpected output")

        monkeypatch.setattr(pytesseract, "image_to_data", fail)

        with pytest.raises(OCRError):
            OCREngine(settings).recognize(page, ScriptCode.ENGLISH)

    def test_error_surfaces_through_recognize_pages(self, settings, page, monkeypatch):
        def fail(*args, **kwargs):
            raise pytesseract.TesseractError(1, "boom")

        monkeypatch.setattr(pytesseract, "image_to_data", fail)

        with pytest.raises(OCRError):
            OCREngine(settings).recognize_pages([page], ScriptCode.ENGLISH)


def test_load_image_rejects_garbage(settings):
    with pytest.raises(CorruptDocumentError):
        OCREngine(settings).load_image(b"not an image")
