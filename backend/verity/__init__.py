"""
Verity Core Module
==================
Document normalization and offline contract-risk analysis.

Modules:
- scripts: Script classification and Tesseract language selection
- validation: Trust checks on directly extracted text
- extractors: PDF / DOCX / TXT text extraction
- ocr: Tesseract wrapper with preprocessing and time budget
- normalizer: Extraction -> validation -> OCR escalation state machine
- catalog: Violation rules for Indian contract law
- detector: Pattern-based violation detection
- risk_engine: Deterministic risk scoring and bands
- deviations: Fair-template term checks
- context: Clause context rendering with OCR-tolerant lookup
- privacy: PII redaction
- analysis: End-to-end ContractAnalyzer
- config: Application configuration
"""

from verity.analysis import AnalysisResult, ContractAnalyzer
from verity.catalog import RULES, Category, ViolationRule, ViolationType, rules_for_script
from verity.config import RISK_LEVELS, Settings, get_settings
from verity.deviations import (
    Deviation,
    DeviationSeverity,
    available_templates,
    check_deviations,
)
from verity.detector import Finding, SourceLayer, detect_violations, merge_findings
from verity.errors import (
    CorruptDocumentError,
    DocumentError,
    ExtractionTimeoutError,
    LowConfidenceError,
    OCRError,
    UnreadableDocumentError,
    UnsupportedFormatError,
)
from verity.normalizer import DocumentNormalizer, ExtractionMethod, NormalizedDocument
from verity.privacy import RedactionResult, redact_pii
from verity.risk_engine import RiskEngine, RiskLevel, calculate_risk_score, classify_risk
from verity.scripts import ScriptCode, classify_script

__all__ = [
    # Normalization
    "DocumentNormalizer",
    "NormalizedDocument",
    "ExtractionMethod",
    "ScriptCode",
    "classify_script",
    # Errors
    "DocumentError",
    "UnsupportedFormatError",
    "CorruptDocumentError",
    "ExtractionTimeoutError",
    "UnreadableDocumentError",
    "LowConfidenceError",
    "OCRError",
    # Detection
    "RULES",
    "ViolationRule",
    "ViolationType",
    "Category",
    "rules_for_script",
    "Finding",
    "SourceLayer",
    "detect_violations",
    "merge_findings",
    # Risk Engine
    "RiskEngine",
    "RiskLevel",
    "calculate_risk_score",
    "classify_risk",
    # Deviations
    "Deviation",
    "DeviationSeverity",
    "available_templates",
    "check_deviations",
    # Privacy
    "RedactionResult",
    "redact_pii",
    # Analysis
    "ContractAnalyzer",
    "AnalysisResult",
    # Config
    "Settings",
    "get_settings",
    "RISK_LEVELS",
]
