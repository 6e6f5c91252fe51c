"""
Verity Clause Context Module
============================
Locates a finding's matched text inside the document and expands it to the
surrounding sentence and numbered clause for display.

OCR output routinely confuses look-alike glyphs, so lookup degrades in
steps: exact match, substitution-table variants, a three-word phrase, and
finally an edit-distance check of windows anchored on the span's words.
"""

import re
from dataclasses import dataclass
from typing import Any

# Common OCR confusions (both directions)
OCR_SUBSTITUTIONS = (
    ("0", ("O", "o")),
    ("O", ("0",)),
    ("l", ("1", "I", "|")),
    ("1", ("l", "I", "|")),
    ("I", ("l", "1", "|")),
    ("S", ("5", "$")),
    ("5", ("S",)),
    ("B", ("8",)),
    ("8", ("B",)),
    ("rn", ("m",)),
    ("m", ("rn",)),
)

PHRASE_WORDS = 3
MAX_FUZZY_SPAN = 120
FUZZY_TOLERANCE = 0.2  # max edit distance as a fraction of span length
MIN_ANCHOR_LENGTH = 3
MAX_FUZZY_CANDIDATES = 64

DEFAULT_CONTEXT_BEFORE = 150
DEFAULT_CONTEXT_AFTER = 150

_WORD = re.compile(r"\S+")
_SENTENCE_END = re.compile(r"[.!?]\s+")
_CLAUSE_HEADER = re.compile(
    r"(?:^|\n)\s*(?:\d+\.\d+\.?|\d+\.|\([a-z]\)|\([ivx]+\)|Section\s+\d+)",
    re.IGNORECASE,
)
_CLAUSE_NUMBER = re.compile(
    r"(?:^|\n)\s*((?:\d+\.)+\d*|Section\s+\d+)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class SpanLocation:
    start: int
    end: int
    method: str  # exact | ocr_variant | phrase | fuzzy


@dataclass(frozen=True)
class ClauseContext:
    """A matched span expanded to its sentence and clause."""
    full_clause: str
    clause_number: str | None
    start: int
    end: int
    match_start: int  # offsets within full_clause
    match_end: int
    locate_method: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_clause": self.full_clause,
            "clause_number": self.clause_number,
            "start": self.start,
            "end": self.end,
            "match_start": self.match_start,
            "match_end": self.match_end,
            "locate_method": self.locate_method,
        }


def ocr_variants(span: str) -> list[str]:
    """Variants of ``span`` with each confusable glyph swapped throughout."""
    variants = []
    for original, substitutes in OCR_SUBSTITUTIONS:
        if original in span:
            variants.extend(span.replace(original, sub) for sub in substitutes)
    return variants


def levenshtein(a: str, b: str, max_distance: int | None = None) -> int:
    """
    Edit distance between two strings.

    With ``max_distance`` the computation stops early and returns
    ``max_distance + 1`` once the bound cannot be met.
    """
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))

    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        if max_distance is not None and min(current) > max_distance:
            return max_distance + 1
        previous = current

    return previous[-1]


def _anchor_starts(haystack: str, needle: str) -> list[int]:
    """
    Candidate window starts, one per exact hit of a needle word.

    Rarer words are tried first and the total is capped, so a needle that
    shares no word with the text produces no candidates at all.
    """
    size = len(needle)
    anchors = [
        (haystack.count(m.group()), m.start(), m.group())
        for m in _WORD.finditer(needle)
        if len(m.group()) >= MIN_ANCHOR_LENGTH
    ]
    starts: list[int] = []
    seen = set()
    for count, offset, word in sorted(a for a in anchors if a[0]):
        index = haystack.find(word)
        while index != -1:
            start = index - offset
            if 0 <= start <= len(haystack) - size and start not in seen:
                seen.add(start)
                starts.append(start)
                if len(starts) >= MAX_FUZZY_CANDIDATES:
                    return starts
            index = haystack.find(word, index + 1)
    return starts


def _fuzzy_find(haystack: str, needle: str) -> int:
    size = len(needle)
    if size == 0 or size > MAX_FUZZY_SPAN or size > len(haystack):
        return -1

    bound = max(1, int(size * FUZZY_TOLERANCE))
    best_index, best_distance = -1, bound + 1
    for index in _anchor_starts(haystack, needle):
        distance = levenshtein(haystack[index:index + size], needle, bound)
        if distance < best_distance:
            best_index, best_distance = index, distance
            if distance == 0:
                break
    return best_index


def locate_span(text: str, span: str) -> SpanLocation | None:
    """Find ``span`` in ``text``, tolerating OCR errors."""
    if not text or not span:
        return None

    haystack = text.lower()
    needle = span.lower()

    index = haystack.find(needle)
    if index != -1:
        return SpanLocation(index, index + len(span), "exact")

    for variant in ocr_variants(span):
        index = haystack.find(variant.lower())
        if index != -1:
            return SpanLocation(index, index + len(variant), "ocr_variant")

    words = needle.split()
    if len(words) >= PHRASE_WORDS:
        for i in range(len(words) - PHRASE_WORDS + 1):
            phrase = " ".join(words[i:i + PHRASE_WORDS])
            index = haystack.find(phrase)
            if index != -1:
                return SpanLocation(index, index + len(phrase), "phrase")

    index = _fuzzy_find(haystack, needle)
    if index != -1:
        return SpanLocation(index, index + len(span), "fuzzy")
    return None


def _sentence_start(text: str, index: int) -> int:
    last_end = 0
    for match in _SENTENCE_END.finditer(text):
        if match.end() >= index:
            break
        last_end = match.end()
    return last_end


def _sentence_end(text: str, index: int) -> int:
    for match in _SENTENCE_END.finditer(text, index):
        return match.start() + 1
    return len(text)


def _clause_start(text: str, index: int) -> int | None:
    start = None
    for match in _CLAUSE_HEADER.finditer(text):
        if match.start() >= index:
            break
        start = match.start()
    return start


def _clause_end(text: str, index: int) -> int | None:
    match = _CLAUSE_HEADER.search(text, index)
    return match.start() if match else None


def _clause_number(text: str, index: int) -> str | None:
    number = None
    for match in _CLAUSE_NUMBER.finditer(text):
        if match.start() > index:
            break
        number = match.group(1).strip()
    return number


def extract_clause_context(
    text: str,
    span: str,
    context_before: int = DEFAULT_CONTEXT_BEFORE,
    context_after: int = DEFAULT_CONTEXT_AFTER,
    expand_to_sentence: bool = True,
    expand_to_clause: bool = True,
) -> ClauseContext | None:
    """
    Expand a matched span to the sentence and numbered clause around it.

    Returns None when the span cannot be located.
    """
    location = locate_span(text, span)
    if location is None:
        return None

    start = max(0, location.start - context_before)
    end = min(len(text), location.end + context_after)

    if expand_to_sentence:
        start = _sentence_start(text, start)
        end = _sentence_end(text, end)

    if expand_to_clause:
        clause_start = _clause_start(text, start)
        if clause_start is not None:
            start = clause_start
        clause_end = _clause_end(text, end)
        if clause_end is not None:
            end = clause_end

    raw = text[start:end]
    leading = len(raw) - len(raw.lstrip())
    full_clause = raw.strip()

    match_start = location.start - start - leading
    return ClauseContext(
        full_clause=full_clause,
        clause_number=_clause_number(text, location.start),
        start=start,
        end=end,
        match_start=match_start,
        match_end=match_start + (location.end - location.start),
        locate_method=location.method,
    )
