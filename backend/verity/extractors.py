"""
Verity Format Extraction Module
===============================
Per-format strategies that pull text out of an uploaded container.

- PDF: direct text-layer extraction (pdfplumber), with PyPDF2 used for
  encryption checks, page count and metadata
- DOCX: paragraph and table text via python-docx, headings kept as structure
- TXT: passthrough decode
- Images carry no text layer and are routed straight to OCR

Any failure to open the container is terminal: there is no fallback for a
corrupt file, only for poor-quality text.
"""

import io
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any

import pdfplumber
from docx import Document
from PyPDF2 import PdfReader

from verity.errors import CorruptDocumentError, UnsupportedFormatError

logger = logging.getLogger(__name__)

WORDS_PER_PAGE = 500


class DocumentFormat(str, Enum):
    """Supported input container formats."""
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    IMAGE = "image"


DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

IMAGE_MIME_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/bmp",
    "image/tiff",
    "image/webp",
})

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".tif", ".webp"})

ACCEPTED_FILE_TYPES = (
    ".pdf,.docx,.txt,.png,.jpg,.jpeg,.bmp,.tiff,.webp,"
    "application/pdf,"
    f"{DOCX_MIME},"
    "text/plain,"
    "image/png,image/jpeg,image/bmp,image/tiff,image/webp"
)


@dataclass
class RawExtraction:
    """Text pulled directly from a container, before validation."""
    text: str
    page_count: int
    structure: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def word_count(self) -> int:
        return count_words(self.text)


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def estimate_pages(word_count: int) -> int:
    """Rough page estimate for formats without real pagination."""
    return max(1, math.ceil(word_count / WORDS_PER_PAGE))


def detect_format(filename: str | None = None, content_type: str | None = None) -> DocumentFormat:
    """
    Infer the container format from the declared MIME type or extension.

    Raises:
        UnsupportedFormatError: If neither identifies a supported format
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    suffix = PurePath(filename).suffix.lower() if filename else ""

    if mime == "application/pdf" or suffix == ".pdf":
        return DocumentFormat.PDF
    if mime == DOCX_MIME or suffix == ".docx":
        return DocumentFormat.DOCX
    if mime in IMAGE_MIME_TYPES or suffix in IMAGE_EXTENSIONS:
        return DocumentFormat.IMAGE
    if mime == "text/plain" or suffix == ".txt":
        return DocumentFormat.TXT

    raise UnsupportedFormatError(
        "Unsupported file format. Please upload a PDF, Word (.docx), "
        "image (PNG/JPG), or text file.",
    )


def is_supported_file(filename: str | None = None, content_type: str | None = None) -> bool:
    try:
        detect_format(filename, content_type)
    except UnsupportedFormatError:
        return False
    return True


def describe_file_type(filename: str | None = None, content_type: str | None = None) -> str:
    """User-facing description of a file type."""
    try:
        fmt = detect_format(filename, content_type)
    except UnsupportedFormatError:
        return "Document"
    return {
        DocumentFormat.PDF: "PDF Document",
        DocumentFormat.DOCX: "Word Document",
        DocumentFormat.TXT: "Text File",
        DocumentFormat.IMAGE: "Image (OCR)",
    }[fmt]


def estimate_processing_time(fmt: DocumentFormat, size_bytes: int) -> str:
    """Human-readable processing time hint."""
    if fmt == DocumentFormat.IMAGE:
        return "15-30 seconds (OCR)"
    if size_bytes > 5 * 1024 * 1024:
        return "10-20 seconds"
    return "2-5 seconds"


class PDFExtractor:
    """Extracts the embedded text layer of a PDF."""

    def extract(self, content: bytes) -> RawExtraction:
        reader = self._open_reader(content)
        metadata = self._extract_metadata(reader)

        try:
            page_texts = []
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                page_count = len(pdf.pages)
                for page in pdf.pages:
                    page_texts.append(self._clean_page_text(page.extract_text() or ""))
        except Exception as e:
            logger.warning(f"pdfplumber failed to read PDF: {e}")
            raise CorruptDocumentError(
                f"Failed to read PDF: {e}",
            ) from e

        text = "\n\n".join(t for t in page_texts if t).strip()
        return RawExtraction(
            text=text,
            page_count=page_count,
            structure=self._extract_headers(page_texts),
            metadata=metadata,
        )

    def _open_reader(self, content: bytes) -> PdfReader:
        """Open with PyPDF2 to reject encrypted or malformed files early."""
        if not content.lstrip().startswith(b"%PDF"):
            raise CorruptDocumentError(
                "This file is not a valid PDF document. Please check the file and try again."
            )
        try:
            reader = PdfReader(io.BytesIO(content))
        except Exception as e:
            raise CorruptDocumentError(f"Failed to read PDF: {e}") from e

        if reader.is_encrypted:
            # Owner-password-only PDFs open with an empty user password
            try:
                decrypted = reader.decrypt("")
            except Exception:
                decrypted = 0
            if not decrypted:
                raise CorruptDocumentError(
                    "This PDF is password protected. Please provide an unencrypted file.",
                    reason="encrypted",
                )
        return reader

    def _extract_metadata(self, reader: PdfReader) -> dict[str, Any]:
        try:
            info = reader.metadata
            return {
                "title": info.title if info and info.title else None,
                "author": info.author if info and info.author else None,
                "creation_date": str(info.creation_date) if info and info.creation_date else None,
            }
        except Exception as e:
            logger.warning(f"Error extracting metadata: {e}")
            return {}

    @staticmethod
    def _clean_page_text(text: str) -> str:
        return re.sub(r"\s+", " ", text).strip()

    @staticmethod
    def _extract_headers(page_texts: list[str]) -> list[str]:
        """Section headers such as 'ARTICLE 5: TERMINATION' or 'Section 3.'"""
        pattern = re.compile(
            r"\b(?:ARTICLE|Article|SECTION|Section)\s+[\dIVXLCDM]+(?:\.\d+)*[.:]\s*[A-Z][A-Za-z ]{2,40}"
        )
        headers: list[str] = []
        for text in page_texts:
            headers.extend(m.group(0).strip() for m in pattern.finditer(text))
        return headers


class DocxExtractor:
    """Converts Word markup to plain text."""

    HEADING_STYLES = ("Title", "Heading 1", "Heading 2", "Heading 3")

    def extract(self, content: bytes) -> RawExtraction:
        try:
            document = Document(io.BytesIO(content))
        except Exception as e:
            raise CorruptDocumentError(f"Failed to read Word document: {e}") from e

        lines: list[str] = []
        headings: list[str] = []
        for paragraph in document.paragraphs:
            text = paragraph.text.strip()
            if not text:
                continue
            lines.append(text)
            style_name = paragraph.style.name if paragraph.style is not None else ""
            if style_name in self.HEADING_STYLES:
                headings.append(text)

        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(" | ".join(cells))

        text = "\n".join(lines)
        return RawExtraction(
            text=text,
            page_count=estimate_pages(count_words(text)),
            structure=headings,
        )


class TextExtractor:
    """Plain text passthrough."""

    def extract(self, content: bytes) -> RawExtraction:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = content.decode("latin-1")
        return RawExtraction(text=text, page_count=estimate_pages(count_words(text)))


_EXTRACTORS = {
    DocumentFormat.PDF: PDFExtractor,
    DocumentFormat.DOCX: DocxExtractor,
    DocumentFormat.TXT: TextExtractor,
}


def get_extractor(fmt: DocumentFormat) -> PDFExtractor | DocxExtractor | TextExtractor:
    """Extractor instance for a text-bearing format."""
    try:
        return _EXTRACTORS[fmt]()
    except KeyError:
        raise UnsupportedFormatError(f"No text extractor for format '{fmt.value}'") from None
