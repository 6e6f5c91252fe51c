"""
Verity Violation Detector Module
================================
Deterministic, offline clause detection against the pattern catalog.

Every applicable rule is matched over the whole document. Near-duplicate
hits of the same rule are suppressed, and the result is ordered by
descending severity. Findings reported by an external analysis layer can
be mapped into the same shape and merged.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from verity.catalog import (
    DEFAULT_CATEGORIES,
    Category,
    ViolationRule,
    ViolationType,
    rules_for_script,
    violation_title,
    violation_type_from_external,
)
from verity.scripts import ScriptCode

logger = logging.getLogger(__name__)

CONTEXT_RADIUS = 100
DUPLICATE_LENGTH_TOLERANCE = 20


class SourceLayer(str, Enum):
    """Which layer produced a finding."""
    PATTERN = "pattern"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Finding:
    """A single detected violation."""
    id: str
    rule_id: str | None
    violation_type: ViolationType
    category: Category
    severity: int  # 0-100
    matched_span: str
    surrounding_context: str
    source_layer: SourceLayer
    start: int | None = None
    section: str | None = None
    act_name: str | None = None
    case_law: str | None = None
    explanation: str = ""
    fair_alternative: str = ""

    @property
    def title(self) -> str:
        return violation_title(self.violation_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "rule_id": self.rule_id,
            "type": self.violation_type.value,
            "title": self.title,
            "category": self.category.value,
            "severity": self.severity,
            "matched_span": self.matched_span,
            "surrounding_context": self.surrounding_context,
            "source_layer": self.source_layer.value,
            "start": self.start,
            "section": self.section,
            "act_name": self.act_name,
            "case_law": self.case_law,
            "explanation": self.explanation,
            "fair_alternative": self.fair_alternative,
        }


def _context_window(text: str, start: int, end: int) -> str:
    lo = max(0, start - CONTEXT_RADIUS)
    hi = min(len(text), end + CONTEXT_RADIUS)
    return f"...{text[lo:hi]}..."


def _is_duplicate(findings: list[Finding], rule: ViolationRule, matched: str) -> bool:
    return any(
        f.rule_id == rule.id
        and abs(len(f.matched_span) - len(matched)) < DUPLICATE_LENGTH_TOLERANCE
        and matched in f.surrounding_context
        for f in findings
    )


def detect_violations(text: str, script: ScriptCode | None = None) -> list[Finding]:
    """
    Match every applicable rule against ``text``.

    Args:
        text: Normalized document text
        script: Document script; None runs every rule

    Returns:
        Findings sorted by descending severity (ties keep emission order)
    """
    if not text:
        return []

    findings: list[Finding] = []
    counter = 1

    for rule in rules_for_script(script):
        for pattern in rule.patterns:
            # finditer gives a fresh scan per call, nothing carries over
            for match in pattern.regex.finditer(text):
                matched = match.group(0)
                if _is_duplicate(findings, rule, matched):
                    continue
                findings.append(Finding(
                    id=f"regex-{counter}",
                    rule_id=rule.id,
                    violation_type=rule.violation_type,
                    category=rule.category,
                    severity=rule.severity,
                    matched_span=matched,
                    surrounding_context=_context_window(text, match.start(), match.end()),
                    source_layer=SourceLayer.PATTERN,
                    start=match.start(),
                    section=rule.section,
                    act_name=rule.act_name,
                    case_law=rule.case_law,
                    explanation=rule.explanation,
                    fair_alternative=rule.fair_alternative,
                ))
                counter += 1

    findings.sort(key=lambda f: -f.severity)
    logger.debug(f"Pattern layer found {len(findings)} violations")
    return findings


def _clamp_severity(value: Any) -> int:
    try:
        severity = int(round(float(value)))
    except (TypeError, ValueError):
        severity = 0
    return max(0, min(100, severity))


def finding_from_external(payload: dict[str, Any], index: int = 1) -> Finding:
    """
    Build a Finding from a dict reported by an external analysis layer.

    Accepts either snake_case keys or the camelCase keys such layers
    usually emit (``match``, ``context``, ``actName``, ``eli5`` ...).
    """
    violation_type = violation_type_from_external(payload.get("type"))

    category = payload.get("category")
    try:
        category = Category(category)
    except ValueError:
        category = DEFAULT_CATEGORIES[violation_type]

    matched = payload.get("matched_span") or payload.get("match") or ""
    context = payload.get("surrounding_context") or payload.get("context") or matched

    return Finding(
        id=str(payload.get("id") or f"external-{index}"),
        rule_id=None,
        violation_type=violation_type,
        category=category,
        severity=_clamp_severity(payload.get("severity")),
        matched_span=matched,
        surrounding_context=context,
        source_layer=SourceLayer.EXTERNAL,
        section=payload.get("section"),
        act_name=payload.get("act_name") or payload.get("actName"),
        case_law=payload.get("case_law") or payload.get("caseLaw"),
        explanation=payload.get("explanation") or payload.get("eli5") or "",
        fair_alternative=payload.get("fair_alternative") or payload.get("fairAlternative") or "",
    )


def merge_findings(
    pattern_findings: list[Finding],
    external: list[dict[str, Any]] | list[Finding] | None,
) -> list[Finding]:
    """
    Combine pattern findings with externally reported ones.

    External findings whose matched text already appears in a pattern
    finding of the same type are dropped. The merged list is re-sorted by
    descending severity.
    """
    if not external:
        return list(pattern_findings)

    merged = list(pattern_findings)
    for index, item in enumerate(external, start=1):
        finding = item if isinstance(item, Finding) else finding_from_external(item, index)
        overlaps = finding.matched_span and any(
            f.violation_type == finding.violation_type
            and finding.matched_span.lower() in f.surrounding_context.lower()
            for f in pattern_findings
        )
        if overlaps:
            continue
        merged.append(finding)

    merged.sort(key=lambda f: -f.severity)
    return merged
