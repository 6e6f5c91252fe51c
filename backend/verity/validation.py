"""
Verity Extraction Validation Module
===================================
Decides whether text produced by a fast extractor can be trusted.

Two independent, pure checks:
- Script presence: an Indic PDF whose text layer decoded to the wrong
  encoding yields almost no characters of the expected script.
- English plausibility: mojibake is technically text but contains none of
  the common English function words.

A failed check is a signal to escalate to OCR, never an error.
"""

import re
from dataclasses import dataclass

from verity.scripts import INDIC_RANGES, ScriptCode

SCRIPT_SAMPLE_SIZE = 2000
MIN_SCRIPT_CHARS = 5
MIN_ENGLISH_LENGTH = 50
MIN_STOPWORD_HITS = 2

ENGLISH_STOPWORDS = (
    "the", "and", "is", "of", "to", "in", "it",
    "that", "with", "for", "are", "was", "on", "as",
)

_STOPWORD_PATTERNS = tuple(
    re.compile(rf"\b{word}\b") for word in ENGLISH_STOPWORDS
)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating extracted text."""
    passed: bool
    reason: str | None = None


def count_script_characters(text: str, script: ScriptCode, sample_size: int = SCRIPT_SAMPLE_SIZE) -> int:
    """Count characters of ``script`` in the first ``sample_size`` characters."""
    bounds = INDIC_RANGES.get(script)
    if bounds is None:
        return 0
    start, end = bounds
    return sum(1 for char in text[:sample_size] if start <= ord(char) <= end)


def validate_script_content(text: str, expected: ScriptCode) -> bool:
    """
    Check that text actually contains the expected Indic script.

    English, auto and unknown hints always pass. For Indic scripts the
    first 2,000 characters must contain more than 5 in-range characters.
    """
    if not expected.is_indic:
        return True
    return count_script_characters(text, expected) > MIN_SCRIPT_CHARS


def validate_english_content(text: str) -> bool:
    """
    Check that text looks like readable English.

    Text under 50 characters is always rejected; otherwise at least two
    distinct stop-words must appear as whole words.
    """
    if not text or len(text) < MIN_ENGLISH_LENGTH:
        return False

    lowered = text.lower()
    hits = 0
    for pattern in _STOPWORD_PATTERNS:
        if pattern.search(lowered):
            hits += 1
            if hits >= MIN_STOPWORD_HITS:
                return True
    return False


class ExtractionValidator:
    """Runs the check appropriate to the working script hypothesis."""

    def check(self, text: str, script: ScriptCode) -> ValidationOutcome:
        if script.is_indic:
            if not validate_script_content(text, script):
                return ValidationOutcome(
                    passed=False,
                    reason=f"fewer than {MIN_SCRIPT_CHARS + 1} {script.value} characters in text layer",
                )
            return ValidationOutcome(passed=True)

        if script == ScriptCode.ENGLISH and not validate_english_content(text):
            return ValidationOutcome(
                passed=False,
                reason="text layer does not look like readable English",
            )
        return ValidationOutcome(passed=True)
