"""
Verity API Schemas
==================
Pydantic models for API request/response validation.
All API contracts are defined here for type safety and documentation.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# === Enums ===

class CategoryEnum(str, Enum):
    """Violation category."""
    LEGAL = "legal"
    UNFAIR = "unfair"


class RiskLevelEnum(str, Enum):
    """Risk level categories."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class DeviationSeverityEnum(str, Enum):
    FAIR = "fair"
    WARNING = "warning"
    CRITICAL = "critical"


class ExtractionMethodEnum(str, Enum):
    """How document text was obtained."""
    DIRECT_TEXT = "direct_text"
    OCR = "ocr"


class SourceLayerEnum(str, Enum):
    PATTERN = "pattern"
    EXTERNAL = "external"


# === Finding Schemas ===

class ClauseContextSchema(BaseModel):
    """Sentence/clause surrounding a finding."""
    full_clause: str
    clause_number: str | None = None
    start: int
    end: int
    match_start: int
    match_end: int
    locate_method: str


class FindingSchema(BaseModel):
    """A detected violation."""
    id: str = Field(..., description="Finding identifier, e.g. regex-1")
    rule_id: str | None = Field(None, description="Catalog rule that matched")
    type: str = Field(..., description="Violation type")
    title: str = Field(..., description="Display title for the violation type")
    category: CategoryEnum
    severity: int = Field(..., ge=0, le=100)
    matched_span: str
    surrounding_context: str
    source_layer: SourceLayerEnum
    start: int | None = None
    section: str | None = None
    act_name: str | None = None
    case_law: str | None = None
    explanation: str = ""
    fair_alternative: str = ""
    clause: ClauseContextSchema | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "regex-1",
                "rule_id": "section27-eng",
                "type": "section27",
                "title": "Restraint of Trade",
                "category": "legal",
                "severity": 95,
                "matched_span": "shall not compete",
                "surrounding_context": "...The Consultant shall not compete with any similar business...",
                "source_layer": "pattern",
                "start": 16,
                "section": "Section 27",
                "act_name": "Indian Contract Act, 1872",
                "case_law": "Percept D'Mark (India) Pvt Ltd v. Zaheer Khan (2006) 4 SCC 227",
                "explanation": "This clause tries to stop you from working in your field after leaving.",
                "fair_alternative": "Non-solicitation clause limited to 6 months.",
                "clause": None
            }
        }


class ExternalFindingSchema(BaseModel):
    """Finding reported by an external analysis layer."""
    type: str = Field(..., description="Violation type (camelCase or snake_case)")
    category: CategoryEnum | None = None
    severity: float = Field(0, description="Severity, clamped to 0-100")
    match: str = Field("", description="Matched text")
    context: str | None = None
    section: str | None = None
    act_name: str | None = None
    case_law: str | None = None
    explanation: str | None = None
    fair_alternative: str | None = None


# === Deviation Schemas ===

class DeviationSchema(BaseModel):
    """A term below the fair template."""
    term: str
    term_label: str
    observed_value: int | str
    fair_value: int
    observed_display: str
    fair_display: str
    severity: DeviationSeverityEnum
    recommendation: str

    class Config:
        json_schema_extra = {
            "example": {
                "term": "payment_days",
                "term_label": "Payment Terms",
                "observed_value": 60,
                "fair_value": 30,
                "observed_display": "60 days",
                "fair_display": "30 days",
                "severity": "critical",
                "recommendation": "Payment terms of 60 days are excessive. Industry standard is 30 days."
            }
        }


# === Analysis Schemas ===

class RiskLevelSchema(BaseModel):
    level: RiskLevelEnum
    label: str
    recommendation: str


class AnalysisSummarySchema(BaseModel):
    total_findings: int
    legal_violations: int
    unfair_terms: int
    deviations: int


class ProvenanceSchema(BaseModel):
    """How the document was read."""
    extraction_method: ExtractionMethodEnum
    ocr_confidence: float | None = Field(None, ge=0, le=100)
    page_count: int
    word_count: int
    script_hint: str
    source_format: str
    warnings: list[str] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    """Response for contract analysis."""
    risk_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevelSchema
    template: str
    summary: AnalysisSummarySchema
    findings: list[FindingSchema]
    deviations: list[DeviationSchema]
    score_breakdown: dict[str, Any]
    provenance: ProvenanceSchema | None = Field(
        None, description="Present for uploaded documents"
    )
    filename: str | None = None
    analyzed_at: datetime


class TextAnalyzeRequest(BaseModel):
    """Request body for analyzing plain text."""
    text: str = Field(..., min_length=1, description="Contract text")
    script: str | None = Field(None, description="Script code, e.g. eng, kan; auto-detected when omitted")
    template: str | None = Field(None, description="Fair template name")
    external_findings: list[ExternalFindingSchema] | None = None

    @field_validator("text")
    @classmethod
    def check_text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v


# === Template Schemas ===

class TemplateSchema(BaseModel):
    name: str
    label: str
    terms: dict[str, dict[str, int | str]]


class TemplatesResponse(BaseModel):
    """Available fair templates."""
    default: str
    templates: list[TemplateSchema]


# === Redaction Schemas ===

class RedactRequest(BaseModel):
    text: str = Field(..., description="Text to redact")


class RedactResponse(BaseModel):
    """PII redaction result."""
    redacted_text: str
    redacted_count: int
    redacted_types: list[str]

    class Config:
        json_schema_extra = {
            "example": {
                "redacted_text": "Contact <REDACTED_EMAIL> or <REDACTED_PHONE>.",
                "redacted_count": 2,
                "redacted_types": ["email", "phone"]
            }
        }


# === Error Schemas ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    reason: str | None = Field(None, description="Machine-readable failure reason")
    details: dict[str, Any] | None = Field(None, description="Additional error details")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "CorruptDocumentError",
                "message": "This PDF is password protected. Please provide an unencrypted file.",
                "reason": "encrypted",
                "details": None
            }
        }


# === Health Check ===

class HealthCheckResponse(BaseModel):
    """API health check response."""
    status: str = Field(..., description="API status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Current server timestamp")
    services: dict[str, str] = Field(..., description="Status of dependent services")
