"""
Verity Script Classification Module
===================================
Classifies text by dominant writing system using code-point statistics.

Supported scripts are English (Latin letters) and the major Indic scripts.
Each script code doubles as the name of its Tesseract language pack.
"""

from enum import Enum
from types import MappingProxyType


class ScriptCode(str, Enum):
    """Writing systems understood by the pipeline."""
    ENGLISH = "eng"
    HINDI = "hin"  # Devanagari
    BENGALI = "ben"
    ORIYA = "ori"
    TELUGU = "tel"
    TAMIL = "tam"
    KANNADA = "kan"
    MALAYALAM = "mal"
    AUTO = "auto"  # input only
    UNKNOWN = "unknown"

    @property
    def is_indic(self) -> bool:
        return self in INDIC_RANGES


# Unicode blocks for each Indic script (inclusive)
INDIC_RANGES = MappingProxyType({
    ScriptCode.HINDI: (0x0900, 0x097F),
    ScriptCode.BENGALI: (0x0980, 0x09FF),
    ScriptCode.ORIYA: (0x0B00, 0x0B7F),
    ScriptCode.TAMIL: (0x0B80, 0x0BFF),
    ScriptCode.TELUGU: (0x0C00, 0x0C7F),
    ScriptCode.KANNADA: (0x0C80, 0x0CFF),
    ScriptCode.MALAYALAM: (0x0D00, 0x0D7F),
})

# Declaration order decides ties
CLASSIFIABLE_SCRIPTS = (
    ScriptCode.ENGLISH,
    ScriptCode.HINDI,
    ScriptCode.BENGALI,
    ScriptCode.ORIYA,
    ScriptCode.TELUGU,
    ScriptCode.TAMIL,
    ScriptCode.KANNADA,
    ScriptCode.MALAYALAM,
)

CLASSIFIER_SAMPLE_SIZE = 5000


def script_of_char(char: str) -> ScriptCode | None:
    """Return the script bucket containing ``char``, or None."""
    if ("a" <= char <= "z") or ("A" <= char <= "Z"):
        return ScriptCode.ENGLISH
    code = ord(char)
    for script, (start, end) in INDIC_RANGES.items():
        if start <= code <= end:
            return script
    return None


def script_character_counts(text: str, sample_size: int = CLASSIFIER_SAMPLE_SIZE) -> dict[ScriptCode, int]:
    """Count characters per script in the first ``sample_size`` characters."""
    counts = {script: 0 for script in CLASSIFIABLE_SCRIPTS}
    for char in text[:sample_size]:
        script = script_of_char(char)
        if script is not None:
            counts[script] += 1
    return counts


def classify_script(text: str) -> ScriptCode:
    """
    Classify text by its dominant writing system.

    Args:
        text: Text to classify; only the first 5,000 characters are sampled

    Returns:
        The script with the most characters, or English when no character
        fell inside any known range.
    """
    if not text or not text.strip():
        return ScriptCode.ENGLISH

    counts = script_character_counts(text)

    best = ScriptCode.ENGLISH
    best_count = 0
    for script in CLASSIFIABLE_SCRIPTS:
        if counts[script] > best_count:
            best = script
            best_count = counts[script]
    return best


def has_classifiable_text(text: str) -> bool:
    """True when at least one character falls in a known script range."""
    return any(script_of_char(c) is not None for c in text[:CLASSIFIER_SAMPLE_SIZE])


def tesseract_languages(script: ScriptCode) -> str:
    """
    Tesseract language string for a script hint.

    English documents in India routinely carry Devanagari fragments, so the
    English pack is always paired with Hindi. Unresolved hints get every
    supported pack.
    """
    if script in (ScriptCode.AUTO, ScriptCode.UNKNOWN):
        return "+".join(s.value for s in CLASSIFIABLE_SCRIPTS)
    if script == ScriptCode.ENGLISH:
        return "eng+hin"
    return f"{script.value}+eng"


def parse_script(value: str | None) -> ScriptCode:
    """Parse a caller-supplied script code; empty means auto-detect."""
    if not value:
        return ScriptCode.AUTO
    try:
        return ScriptCode(value.strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown script '{value}'. Expected one of: "
            + ", ".join(s.value for s in ScriptCode if s != ScriptCode.UNKNOWN)
        ) from None
