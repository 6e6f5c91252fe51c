"""
Verity Contract Analysis Module
===============================
End-to-end pipeline: normalize -> detect -> score -> check deviations.

Single-document analysis is sequential; each stage consumes the previous
stage's output. Nothing is shared between analyses except the immutable
rule and template tables.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from verity.catalog import Category
from verity.config import Settings, get_settings
from verity.context import ClauseContext, extract_clause_context
from verity.deviations import Deviation, check_deviations, resolve_template
from verity.detector import Finding, detect_violations, merge_findings
from verity.normalizer import DocumentNormalizer, NormalizedDocument
from verity.ocr import ProgressCallback
from verity.risk_engine import RiskClassification, RiskEngine, score_breakdown
from verity.scripts import ScriptCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analyzing one document. Immutable."""
    findings: tuple[Finding, ...]
    deviations: tuple[Deviation, ...]
    risk_score: int
    risk_level: RiskClassification
    template: str
    clauses: Mapping[str, ClauseContext] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def legal_count(self) -> int:
        return sum(1 for f in self.findings if f.category == Category.LEGAL)

    @property
    def unfair_count(self) -> int:
        return sum(1 for f in self.findings if f.category == Category.UNFAIR)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        findings = []
        for finding in self.findings:
            item = finding.to_dict()
            clause = self.clauses.get(finding.id)
            item["clause"] = clause.to_dict() if clause else None
            findings.append(item)

        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.to_dict(),
            "template": self.template,
            "summary": {
                "total_findings": len(self.findings),
                "legal_violations": self.legal_count,
                "unfair_terms": self.unfair_count,
                "deviations": len(self.deviations),
            },
            "findings": findings,
            "deviations": [d.to_dict() for d in self.deviations],
            "score_breakdown": score_breakdown(self.findings),
        }


class ContractAnalyzer:
    """
    Runs the full analysis pipeline.

    This analyzer:
    1. Normalizes the uploaded file to plain text (with OCR when needed)
    2. Detects violations against the pattern catalog
    3. Merges any externally reported findings
    4. Scores risk and checks terms against the fair template
    """

    def __init__(
        self,
        settings: Settings | None = None,
        normalizer: DocumentNormalizer | None = None,
    ):
        self.settings = settings or get_settings()
        self.normalizer = normalizer or DocumentNormalizer(self.settings)
        self.risk_engine = RiskEngine()

    def analyze_text(
        self,
        text: str,
        script: ScriptCode | None = None,
        template: str | None = None,
        external_findings: list[dict[str, Any]] | None = None,
    ) -> AnalysisResult:
        """
        Analyze already-normalized text.

        Args:
            text: Contract text
            script: Script of the text; None, AUTO or UNKNOWN run every rule
            template: Fair template name; defaults to the configured template
            external_findings: Finding-compatible dicts from an external layer

        Returns:
            AnalysisResult
        """
        fair_template = resolve_template(template or self.settings.default_template)

        findings = detect_violations(text, script)
        if external_findings:
            findings = merge_findings(findings, external_findings)

        score, classification = self.risk_engine.assess(findings)
        deviations = check_deviations(text, fair_template.name)

        clauses = {}
        for finding in findings:
            clause = extract_clause_context(text, finding.matched_span)
            if clause is not None:
                clauses[finding.id] = clause

        return AnalysisResult(
            findings=tuple(findings),
            deviations=tuple(deviations),
            risk_score=score,
            risk_level=classification,
            template=fair_template.name,
            clauses=MappingProxyType(clauses),
        )

    async def analyze_document(
        self,
        content: bytes,
        filename: str | None = None,
        content_type: str | None = None,
        script: ScriptCode = ScriptCode.AUTO,
        template: str | None = None,
        force_ocr: bool = False,
        progress: ProgressCallback | None = None,
    ) -> tuple[NormalizedDocument, AnalysisResult]:
        """
        Normalize and analyze an uploaded file.

        Raises:
            DocumentError: When the document cannot be normalized
        """
        document = await self.normalizer.normalize(
            content,
            filename=filename,
            content_type=content_type,
            script=script,
            force_ocr=force_ocr,
            progress=progress,
        )
        result = await asyncio.to_thread(
            self.analyze_text, document.text, script=document.script_hint, template=template,
        )
        logger.info(
            f"Analyzed {filename or 'upload'}: {len(result.findings)} findings, "
            f"{len(result.deviations)} deviations, risk {result.risk_score}"
        )
        return document, result
