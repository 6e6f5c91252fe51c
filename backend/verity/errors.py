"""
Verity Error Taxonomy
=====================
Terminal document failures. Each carries a machine-readable ``reason`` so
callers can tell corruption from timeouts from low-yield extraction.
"""


class DocumentError(Exception):
    """Base class for document normalization failures."""

    reason = "document_error"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {
            "error": type(self).__name__,
            "reason": self.reason,
            "message": self.message,
        }


class UnsupportedFormatError(DocumentError):
    """Raised before extraction when the format is not recognized."""

    reason = "unsupported_format"


class CorruptDocumentError(DocumentError):
    """Malformed or password-protected container."""

    reason = "corrupt"


class ExtractionTimeoutError(DocumentError):
    """Container parsing or OCR exceeded its time budget."""

    reason = "timeout"


class UnreadableDocumentError(DocumentError):
    """Too few words even after OCR escalation."""

    reason = "unreadable"


class LowConfidenceError(DocumentError):
    """OCR confidence below the acceptance threshold for image-only input."""

    reason = "low_confidence"


class OCRError(DocumentError):
    """Raised when the OCR library fails."""

    reason = "ocr_failed"
