"""
Verity Privacy Module
=====================
Redacts Indian personal identifiers before contract text leaves the core
for an external analysis service.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

# Order matters: GSTIN embeds a PAN, and emails may contain digit runs
PII_PATTERNS = MappingProxyType({
    "email": (re.compile(r"[\w.-]+@[\w.-]+\.\w{2,}"), "<REDACTED_EMAIL>"),
    "gst": (re.compile(r"\b\d{2}[A-Z]{5}\d{4}[A-Z]\d[Z][A-Z\d]\b"), "<REDACTED_GST>"),
    "pan": (re.compile(r"\b[A-Z]{5}[0-9]{4}[A-Z]\b"), "<REDACTED_PAN>"),
    "aadhaar": (re.compile(r"(?<!\d)\d{4}[\s-]?\d{4}[\s-]?\d{4}(?!\d)"), "<REDACTED_AADHAAR>"),
    "phone": (re.compile(r"(?:\+91[\s-]?|(?<!\d))[6-9]\d{9}(?!\d)"), "<REDACTED_PHONE>"),
})


@dataclass(frozen=True)
class RedactionResult:
    redacted_text: str
    redacted_count: int
    redacted_types: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "redacted_text": self.redacted_text,
            "redacted_count": self.redacted_count,
            "redacted_types": list(self.redacted_types),
        }


def redact_pii(text: str) -> RedactionResult:
    """Replace every PII occurrence with a typed placeholder."""
    redacted = text
    count = 0
    types: list[str] = []

    for pii_type, (pattern, replacement) in PII_PATTERNS.items():
        redacted, hits = pattern.subn(replacement, redacted)
        if hits:
            count += hits
            types.append(pii_type)

    return RedactionResult(redacted_text=redacted, redacted_count=count, redacted_types=types)


def detect_pii_types(text: str) -> list[str]:
    return [pii_type for pii_type, (pattern, _) in PII_PATTERNS.items() if pattern.search(text)]


def contains_pii(text: str) -> bool:
    return any(pattern.search(text) for pattern, _ in PII_PATTERNS.values())
