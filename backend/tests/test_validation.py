"""
Tests for extraction validation.
"""
from verity.scripts import ScriptCode
from verity.validation import (
    ExtractionValidator,
    count_script_characters,
    validate_english_content,
    validate_script_content,
)

KANNADA_CHAR = "ಕ"


class TestScriptContent:
    """Tests for the script presence check."""

    def test_five_characters_fail(self):
        text = "garbled text " + KANNADA_CHAR * 5
        assert count_script_characters(text, ScriptCode.KANNADA) == 5
        assert validate_script_content(text, ScriptCode.KANNADA) is False

    def test_six_characters_pass(self):
        text = "garbled text " + KANNADA_CHAR * 6
        assert validate_script_content(text, ScriptCode.KANNADA) is True

    def test_only_first_2000_characters_count(self):
        text = "x" * 2000 + KANNADA_CHAR * 100
        assert validate_script_content(text, ScriptCode.KANNADA) is False

    def test_other_script_characters_do_not_count(self):
        text = "यह अनुबंध दोनों पक्षों के बीच है"
        assert validate_script_content(text, ScriptCode.KANNADA) is False
        assert validate_script_content(text, ScriptCode.HINDI) is True

    def test_english_hint_always_passes(self):
        assert validate_script_content("", ScriptCode.ENGLISH) is True


class TestEnglishContent:
    """Tests for the English plausibility check."""

    def test_readable_english_passes(self):
        text = "The Client shall pay the Consultant within thirty days of the invoice date."
        assert validate_english_content(text) is True

    def test_short_text_rejected(self):
        assert validate_english_content("The cat and the dog.") is False

    def test_mojibake_rejected(self):
        text = "Ã¢â‚¬Å“Ã Â²â€™Ã Â²ÂªÃ Â³Â Ã Â²ÂªÃ Â²â€šÃ Â²Â¦Ã Â²Â¦ Ã Â²â€¦Ã Â²ÂµÃ Â²Â§"
        assert validate_english_content(text) is False

    def test_stop_words_must_be_whole_words(self):
        # "theory", "island", "often" contain stop-words only as substrings
        text = "theory island often bandwidth isotope tomato within forage candidate"
        assert validate_english_content(text) is False

    def test_single_distinct_stop_word_is_not_enough(self):
        text = "the " * 20
        assert validate_english_content(text) is False


class TestExtractionValidator:
    """Tests for the combined validator."""

    def test_indic_failure_has_reason(self):
        outcome = ExtractionValidator().check("plain latin text only", ScriptCode.TAMIL)
        assert outcome.passed is False
        assert "tam" in outcome.reason

    def test_english_failure(self):
        outcome = ExtractionValidator().check("xq zv", ScriptCode.ENGLISH)
        assert outcome.passed is False

    def test_auto_hypothesis_passes(self):
        assert ExtractionValidator().check("anything", ScriptCode.AUTO).passed is True
