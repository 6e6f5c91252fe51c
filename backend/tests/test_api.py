"""
API endpoint tests for Verity.
"""
import io
import time

import pytest
from fastapi import status

from api.analyze import get_analyzer
from verity.analysis import ContractAnalyzer
from verity.normalizer import DocumentNormalizer


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check_returns_ok(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert set(data["services"]) == {"api", "detector", "ocr"}

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "Verity API"
        assert "docs" in data


class TestAnalyzeEndpoint:
    """Tests for document upload and analysis."""

    def test_analyze_text_file(self, test_client, english_contract):
        files = {"file": ("contract.txt", io.BytesIO(english_contract.encode()), "text/plain")}

        response = test_client.post("/analyze", files=files)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["filename"] == "contract.txt"
        assert data["risk_score"] == 97
        assert data["risk_level"]["level"] == "critical"
        assert data["summary"]["total_findings"] == 4
        assert data["provenance"]["extraction_method"] == "direct_text"
        assert data["provenance"]["script_hint"] == "eng"
        assert data["deviations"][0]["term"] == "payment_days"

    def test_template_form_field(self, test_client):
        text = "The Client shall make payment within 30 days of invoice for the design work. " * 8
        files = {"file": ("contract.txt", io.BytesIO(text.encode()), "text/plain")}

        response = test_client.post("/analyze", files=files, data={"template": "freelance_design"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["template"] == "freelance_design"
        assert data["deviations"][0]["severity"] == "warning"

    def test_unsupported_file_type(self, test_client):
        files = {"file": ("setup.exe", io.BytesIO(b"MZ\x90\x00"), "application/octet-stream")}

        response = test_client.post("/analyze", files=files)

        assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
        assert response.json()["detail"]["reason"] == "unsupported_format"

    def test_empty_file(self, test_client):
        files = {"file": ("empty.pdf", io.BytesIO(b""), "application/pdf")}

        response = test_client.post("/analyze", files=files)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"]["error"] == "EmptyFile"

    def test_invalid_pdf(self, test_client):
        files = {"file": ("fake.pdf", io.BytesIO(b"This is not a PDF"), "application/pdf")}

        response = test_client.post("/analyze", files=files)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        detail = response.json()["detail"]
        assert detail["reason"] == "corrupt"
        assert detail["error"] == "CorruptDocumentError"

    def test_invalid_script(self, test_client, english_contract):
        files = {"file": ("contract.txt", io.BytesIO(english_contract.encode()), "text/plain")}

        response = test_client.post("/analyze", files=files, data={"script": "klingon"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["error"] == "InvalidScript"

    def test_scanned_image_uses_ocr(self, test_client, settings, fake_ocr, kannada_contract):
        ocr = fake_ocr(text=kannada_contract, confidence=88.0)
        analyzer = ContractAnalyzer(settings, normalizer=DocumentNormalizer(settings, ocr_engine=ocr))
        test_client.app.dependency_overrides[get_analyzer] = lambda: analyzer

        files = {"file": ("scan.png", io.BytesIO(b"\x89PNG"), "image/png")}
        response = test_client.post("/analyze", files=files, data={"script": "kan"})

        assert response.status_code == status.HTTP_200_OK
        provenance = response.json()["provenance"]
        assert provenance["extraction_method"] == "ocr"
        assert provenance["ocr_confidence"] == pytest.approx(88.0)
        assert provenance["script_hint"] == "kan"

    def test_low_confidence_image(self, test_client, settings, fake_ocr):
        ocr = fake_ocr(text="blurry words " * 10, confidence=12.0)
        analyzer = ContractAnalyzer(settings, normalizer=DocumentNormalizer(settings, ocr_engine=ocr))
        test_client.app.dependency_overrides[get_analyzer] = lambda: analyzer

        files = {"file": ("scan.jpg", io.BytesIO(b"\xff\xd8"), "image/jpeg")}
        response = test_client.post("/analyze", files=files)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["reason"] == "low_confidence"


class TestAnalyzeTextEndpoint:
    """Tests for plain text analysis."""

    def test_analyze_text(self, test_client, english_contract):
        response = test_client.post("/analyze/text", json={"text": english_contract, "script": "eng"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["risk_score"] == 97
        assert data["provenance"] is None
        assert data["findings"][0]["severity"] >= data["findings"][-1]["severity"]

    def test_external_findings(self, test_client, fair_contract):
        response = test_client.post("/analyze/text", json={
            "text": fair_contract,
            "external_findings": [
                {"type": "penaltyClause", "severity": 85, "match": "total fee for the work"},
            ],
        })

        assert response.status_code == status.HTTP_200_OK
        finding = response.json()["findings"][0]
        assert finding["source_layer"] == "external"
        assert finding["type"] == "penalty_clause"
        assert finding["category"] == "legal"
        assert finding["clause"]["clause_number"] == "2."

    def test_unlocatable_external_match_on_long_text(self, test_client, fair_contract):
        text = fair_contract + "\n" + "lorem ipsum dolor sit amet consectetur " * 500

        started = time.perf_counter()
        response = test_client.post("/analyze/text", json={
            "text": text,
            "external_findings": [{"type": "penaltyClause", "severity": 70, "match": "zq" * 50}],
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["findings"][0]["clause"] is None
        assert time.perf_counter() - started < 5.0

    def test_blank_text_rejected(self, test_client):
        response = test_client.post("/analyze/text", json={"text": "   "})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_invalid_script(self, test_client):
        response = test_client.post("/analyze/text", json={"text": "Some text", "script": "xx"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestTemplatesEndpoint:
    def test_list_templates(self, test_client):
        response = test_client.get("/templates")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["default"] == "freelance_general"
        assert len(data["templates"]) == 7
        general = next(t for t in data["templates"] if t["name"] == "freelance_general")
        assert general["terms"]["payment_days"] == {"fair": 30, "warning": 45, "critical": 60}
        assert general["terms"]["revision_rounds"]["critical"] == "unlimited"


class TestRedactEndpoint:
    def test_redact(self, test_client):
        response = test_client.post("/redact", json={"text": "PAN ABCDE1234F, mail a@b.co"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["redacted_text"] == "PAN <REDACTED_PAN>, mail <REDACTED_EMAIL>"
        assert data["redacted_count"] == 2
        assert data["redacted_types"] == ["email", "pan"]


class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_headers_present(self, test_client):
        response = test_client.options(
            "/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code in [status.HTTP_200_OK, status.HTTP_405_METHOD_NOT_ALLOWED]


class TestErrorHandling:
    """Tests for error handling."""

    def test_404_for_unknown_endpoint(self, test_client):
        response = test_client.get("/nonexistent-endpoint")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_method_not_allowed(self, test_client):
        response = test_client.get("/analyze")
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
