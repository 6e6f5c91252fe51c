"""
Tests for PII redaction.
"""
import pytest

from verity.privacy import contains_pii, detect_pii_types, redact_pii


class TestRedactPII:
    """Tests for redact_pii."""

    def test_email_and_phone(self):
        result = redact_pii("Contact ravi.kumar@example.com or 9876543210 today.")

        assert result.redacted_text == "Contact <REDACTED_EMAIL> or <REDACTED_PHONE> today."
        assert result.redacted_count == 2
        assert result.redacted_types == ["email", "phone"]

    def test_phone_with_country_code(self):
        result = redact_pii("Call +91 9876543210.")
        assert result.redacted_text == "Call <REDACTED_PHONE>."

    def test_pan(self):
        assert redact_pii("PAN: ABCDE1234F").redacted_text == "PAN: <REDACTED_PAN>"

    def test_gstin_is_not_split_into_pan(self):
        result = redact_pii("GSTIN 29ABCDE1234F1Z5")

        assert result.redacted_text == "GSTIN <REDACTED_GST>"
        assert result.redacted_types == ["gst"]

    @pytest.mark.parametrize("number", ["1234 5678 9012", "1234-5678-9012", "123456789012"])
    def test_aadhaar(self, number):
        result = redact_pii(f"Aadhaar {number} on file.")
        assert result.redacted_text == "Aadhaar <REDACTED_AADHAAR> on file."

    def test_long_digit_runs_untouched(self):
        result = redact_pii("Account 123456789012345 at the bank.")
        assert result.redacted_count == 0

    def test_no_pii(self):
        text = "Payment within 30 days of invoice."
        result = redact_pii(text)

        assert result.redacted_text == text
        assert result.redacted_count == 0
        assert result.redacted_types == []

    def test_redaction_is_stable(self):
        once = redact_pii("Mail a@b.co, PAN ABCDE1234F").redacted_text
        assert redact_pii(once).redacted_count == 0


def test_detection_helpers():
    assert contains_pii("reach me at a@b.co")
    assert not contains_pii("no identifiers here")
    assert detect_pii_types("ABCDE1234F and 9876543210") == ["pan", "phone"]
