"""
Tests for span location and clause expansion.
"""
import time

from verity.context import (
    extract_clause_context,
    levenshtein,
    locate_span,
    ocr_variants,
)


class TestLocateSpan:
    """Tests for OCR-tolerant span lookup."""

    def test_exact_is_case_insensitive(self):
        location = locate_span("The Consultant SHALL NOT COMPETE here.", "shall not compete")
        assert location.method == "exact"
        assert location.start == 15

    def test_ocr_variant(self):
        text = "The Consultant shall not cornpete with the Client."
        location = locate_span(text, "shall not compete")

        assert location.method == "ocr_variant"
        assert text[location.start:location.end] == "shall not cornpete"

    def test_phrase_fallback(self):
        text = "Here the consultant shall remit fees promptly."
        location = locate_span(text, "the consultant shall pay all invoices")

        assert location.method == "phrase"
        assert text[location.start:location.end] == "the consultant shall"

    def test_fuzzy_fallback(self):
        text = "The Freelancer pays liquidatde damages if late."
        location = locate_span(text, "liquidated damages")

        assert location.method == "fuzzy"
        assert location.start == text.index("liquidatde")

    def test_fuzzy_match_deep_in_long_text(self):
        text = "lorem ipsum dolor sit amet. " * 700 + "Fees are non refundabel in any case."
        location = locate_span(text, "non refundable in any")

        assert location.method == "fuzzy"
        assert location.start == text.index("non refundabel")

    def test_unlocatable_span_in_long_text_is_fast(self):
        text = "lorem ipsum dolor sit amet consectetur " * 500

        started = time.perf_counter()
        location = locate_span(text, "zq" * 50)

        assert location is None
        assert time.perf_counter() - started < 1.0

    def test_paraphrase_sharing_common_words_is_fast(self):
        text = "the client pays the fee. " * 800
        span = "the contractor must reimburse the travel costs incurred by the client"

        started = time.perf_counter()
        location = locate_span(text, span)

        assert location is None
        assert time.perf_counter() - started < 1.0

    def test_not_found(self):
        assert locate_span("Fee is due.", "zebra crossing sign") is None
        assert locate_span("", "anything") is None
        assert locate_span("text", "") is None


class TestHelpers:
    def test_variants(self):
        assert "C0PY" in ocr_variants("COPY")
        assert ocr_variants("xyz") == []

    def test_levenshtein(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("same", "same") == 0
        assert levenshtein("kitten", "sitting", max_distance=1) == 2


class TestExtractClauseContext:
    """Tests for sentence and clause expansion."""

    def test_numbered_clause(self, english_contract):
        context = extract_clause_context(
            english_contract, "shall not compete", context_before=0, context_after=0
        )

        assert context.clause_number == "3."
        assert context.full_clause.startswith("3. Restrictions.")
        assert context.full_clause.endswith("termination of this agreement.")
        assert context.full_clause[context.match_start:context.match_end] == "shall not compete"
        assert context.locate_method == "exact"

    def test_default_window_keeps_match_offsets(self, english_contract):
        context = extract_clause_context(english_contract, "within 60 days")

        assert context.full_clause[context.match_start:context.match_end] == "within 60 days"
        assert context.clause_number == "2."

    def test_without_expansion(self):
        text = "Alpha beta. The Client may terminate at will. Gamma delta."
        context = extract_clause_context(
            text, "terminate at will",
            context_before=0, context_after=0,
            expand_to_sentence=False, expand_to_clause=False,
        )

        assert context.full_clause == "terminate at will"
        assert context.clause_number is None

    def test_sentence_expansion_without_headers(self):
        text = "Alpha beta. The Client may terminate at will. Gamma delta."
        context = extract_clause_context(text, "terminate at will", context_before=0, context_after=0)
        assert context.full_clause == "The Client may terminate at will."

    def test_section_header(self):
        text = "Section 4\nThe Consultant waives all moral rights in the work.\nSection 5\nOther terms."
        context = extract_clause_context(text, "waives all moral rights", context_before=0, context_after=0)

        assert context.clause_number == "Section 4"
        assert "Section 5" not in context.full_clause

    def test_missing_span(self):
        assert extract_clause_context("Fee is due.", "zebra crossing sign") is None

    def test_to_dict(self, english_contract):
        data = extract_clause_context(english_contract, "shall not compete").to_dict()
        assert set(data) == {
            "full_clause", "clause_number", "start", "end",
            "match_start", "match_end", "locate_method",
        }
