"""
Verity OCR Module
=================
Rasterizes pages and recognizes text with Tesseract.

Key Features:
- PDF page rasterization (pdf2image / poppler)
- OpenCV preprocessing (grayscale, denoise, adaptive binarization)
- Script-aware language selection
- Per-page and overall confidence on Tesseract's 0-100 scale
- Progress callback and a hard time budget across all pages

The engine is synchronous; DocumentNormalizer runs it in a worker thread.
Failures and timeouts are raised, never papered over with partial text.
"""

import io
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import cv2
import numpy as np
import pytesseract
from pdf2image import convert_from_bytes
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from PIL import Image, UnidentifiedImageError

from verity.config import PAGE_BREAK_MARKER, Settings, get_settings
from verity.errors import CorruptDocumentError, ExtractionTimeoutError, OCRError
from verity.extractors import count_words
from verity.scripts import ScriptCode, tesseract_languages

logger = logging.getLogger(__name__)

TESSERACT_CONFIG = "--oem 1 --psm 3"


@dataclass(frozen=True)
class OCRProgress:
    """Progress update delivered to the caller."""
    status: str
    progress: float  # 0-1


ProgressCallback = Callable[[OCRProgress], None]


@dataclass(frozen=True)
class OCRPageResult:
    """Recognized content of a single page."""
    page_number: int
    text: str
    confidence: float  # 0-100
    word_count: int


@dataclass(frozen=True)
class OCRResult:
    """Combined recognition result across pages."""
    text: str
    confidence: float  # 0-100
    word_count: int
    pages: list[OCRPageResult]
    languages: str
    processing_time: float


def notify(progress: ProgressCallback | None, status: str, value: float) -> None:
    if progress is not None:
        progress(OCRProgress(status=status, progress=max(0.0, min(1.0, value))))


class OCREngine:
    """
    Wraps Tesseract for page recognition.

    This engine:
    1. Renders PDF pages to images
    2. Cleans each image up for recognition
    3. Recognizes text with the language packs for the script hint
    4. Scores confidence so callers can decide whether to trust the text
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        pytesseract.pytesseract.tesseract_cmd = self.settings.tesseract_path

    def rasterize_pdf(self, content: bytes, timeout: float | None = None) -> list[Image.Image]:
        """Render every page of a PDF to an image."""
        try:
            return convert_from_bytes(
                content,
                dpi=self.settings.ocr_dpi,
                timeout=timeout,
            )
        except PDFPopplerTimeoutError as e:
            raise ExtractionTimeoutError("Rendering PDF pages for OCR timed out.") from e
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise CorruptDocumentError(f"Failed to render PDF pages: {e}") from e
        except PDFInfoNotInstalledError as e:
            raise OCRError("Poppler is not installed; cannot render PDF pages for OCR.") from e

    @staticmethod
    def load_image(content: bytes) -> Image.Image:
        """Decode an uploaded image."""
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise CorruptDocumentError(f"Failed to read image: {e}") from e
        return image

    def preprocess(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image for optimal OCR results.

        Steps:
        1. Convert to grayscale
        2. Apply denoising (configurable, it is the slow step)
        3. Apply adaptive binarization
        """
        gray = cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2GRAY)

        if self.settings.ocr_denoise:
            gray = cv2.fastNlMeansDenoising(gray, None, 10, 7, 21)

        gray = cv2.adaptiveThreshold(
            gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY, 11, 2
        )
        return Image.fromarray(gray)

    def recognize(
        self,
        image: Image.Image,
        script: ScriptCode,
        page_number: int = 1,
        timeout: float = 0,
    ) -> OCRPageResult:
        """
        Recognize a single page.

        Args:
            image: Page image
            script: Working script hypothesis
            page_number: 1-based page index for reporting
            timeout: Seconds Tesseract may run; 0 disables the limit

        Raises:
            ExtractionTimeoutError: If Tesseract exceeded ``timeout``
            OCRError: If Tesseract is missing or fails
        """
        processed = self.preprocess(image)
        try:
            data = pytesseract.image_to_data(
                processed,
                lang=tesseract_languages(script),
                config=TESSERACT_CONFIG,
                output_type=pytesseract.Output.DICT,
                timeout=timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OCRError("Tesseract is not installed or not on PATH.") from e
        except pytesseract.TesseractError as e:
            raise OCRError(f"OCR failed on page {page_number}: {e}") from e
        except RuntimeError as e:
            # pytesseract signals its own timeout with a bare RuntimeError
            if "timeout" in str(e).lower():
                raise ExtractionTimeoutError(
                    f"OCR timed out on page {page_number}."
                ) from e
            raise OCRError(f"OCR failed on page {page_number}: {e}") from e

        text, confidence = parse_ocr_data(data)
        return OCRPageResult(
            page_number=page_number,
            text=text,
            confidence=confidence,
            word_count=count_words(text),
        )

    def recognize_pages(
        self,
        images: list[Image.Image],
        script: ScriptCode,
        progress: ProgressCallback | None = None,
        deadline: float | None = None,
    ) -> OCRResult:
        """
        Recognize all pages sequentially within an overall deadline.

        Args:
            images: Page images in order
            script: Working script hypothesis
            progress: Optional progress callback
            deadline: ``time.monotonic()`` value after which OCR is abandoned
        """
        started = time.monotonic()
        pages: list[OCRPageResult] = []
        total = len(images)

        for index, image in enumerate(images, start=1):
            timeout = 0.0
            if deadline is not None:
                timeout = deadline - time.monotonic()
                if timeout <= 0:
                    raise ExtractionTimeoutError(
                        f"OCR exceeded its time budget after {index - 1} of {total} pages."
                    )

            notify(progress, f"Processing page {index} of {total}", (index - 1) / total)
            pages.append(self.recognize(image, script, page_number=index, timeout=timeout))

        notify(progress, "OCR complete", 1.0)

        result = OCRResult(
            text=PAGE_BREAK_MARKER.join(p.text for p in pages),
            confidence=overall_confidence(pages),
            word_count=sum(p.word_count for p in pages),
            pages=pages,
            languages=tesseract_languages(script),
            processing_time=time.monotonic() - started,
        )
        logger.info(
            f"OCR finished: {total} pages, {result.word_count} words, "
            f"confidence {result.confidence:.1f}"
        )
        return result


def parse_ocr_data(ocr_data: dict) -> tuple[str, float]:
    """
    Rebuild page text from Tesseract word boxes and average the confidence.

    Words are regrouped by (block, paragraph, line) so line structure
    survives; boxes with non-positive confidence are dropped.
    """
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []
    n_boxes = len(ocr_data["text"])
    blocks = ocr_data.get("block_num") or [0] * n_boxes
    paragraphs = ocr_data.get("par_num") or [0] * n_boxes
    line_nums = ocr_data.get("line_num") or [0] * n_boxes

    for i in range(n_boxes):
        word = (ocr_data["text"][i] or "").strip()
        try:
            conf = float(ocr_data["conf"][i])
        except (TypeError, ValueError):
            continue
        if conf <= 0 or not word:
            continue

        key = (int(blocks[i]), int(paragraphs[i]), int(line_nums[i]))
        lines.setdefault(key, []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(words) for words in lines.values())
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return text, confidence


def overall_confidence(pages: list[OCRPageResult]) -> float:
    """Average page confidence weighted by text length."""
    if not pages:
        return 0.0

    total_weight = 0
    weighted = 0.0
    for page in pages:
        weight = len(page.text) + 1  # +1 keeps empty pages from vanishing
        weighted += page.confidence * weight
        total_weight += weight
    return weighted / total_weight
