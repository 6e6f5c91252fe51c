"""
Verity Risk Engine Module
=========================
Calculates a deterministic, explainable 0-100 risk score from findings.

Scoring:
- Mean severity of legal findings weighted 60%
- Mean severity of unfair findings weighted 40%
- Count amplifier of 5% per finding, capped at 1.5x
- Result clamped to [0, 100] and rounded half up

The score depends only on the multiset of findings, never on their order.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from verity.catalog import Category
from verity.config import RISK_LEVELS
from verity.detector import Finding

logger = logging.getLogger(__name__)

LEGAL_WEIGHT = 0.6
UNFAIR_WEIGHT = 0.4
AMPLIFIER_STEP = 0.05
AMPLIFIER_CAP = 1.5


class RiskLevel(str, Enum):
    """Risk level categories."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class RiskClassification:
    """Band, label and advice for a score."""
    level: RiskLevel
    label: str
    recommendation: str

    def to_dict(self) -> dict[str, str]:
        return {
            "level": self.level.value,
            "label": self.label,
            "recommendation": self.recommendation,
        }


def _mean(values: list[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def _components(findings: list[Finding]) -> tuple[float, float, float, float]:
    legal = sorted(f.severity for f in findings if f.category == Category.LEGAL)
    unfair = sorted(f.severity for f in findings if f.category == Category.UNFAIR)
    legal_mean = _mean(legal)
    unfair_mean = _mean(unfair)
    base = LEGAL_WEIGHT * legal_mean + UNFAIR_WEIGHT * unfair_mean
    amplifier = min(AMPLIFIER_CAP, 1 + AMPLIFIER_STEP * len(findings))
    return legal_mean, unfair_mean, base, amplifier


def calculate_risk_score(findings: Iterable[Finding]) -> int:
    """
    Score a set of findings.

    Returns:
        Integer risk score in [0, 100]; 0 for no findings
    """
    findings = list(findings)
    if not findings:
        return 0

    _, _, base, amplifier = _components(findings)
    raw = max(0.0, min(100.0, base * amplifier))
    return min(100, math.floor(raw + 0.5))


def classify_risk(score: int) -> RiskClassification:
    """Map a score to its band (upper bounds inclusive)."""
    for level in (RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH):
        band = RISK_LEVELS[level.value]
        if score <= band["max"]:
            return RiskClassification(level, band["label"], band["recommendation"])

    band = RISK_LEVELS[RiskLevel.CRITICAL.value]
    return RiskClassification(RiskLevel.CRITICAL, band["label"], band["recommendation"])


def score_breakdown(findings: Iterable[Finding]) -> dict[str, Any]:
    """Explain how the score was reached."""
    findings = list(findings)
    legal_mean, unfair_mean, base, amplifier = _components(findings)
    score = calculate_risk_score(findings)
    return {
        "legal_count": sum(1 for f in findings if f.category == Category.LEGAL),
        "unfair_count": sum(1 for f in findings if f.category == Category.UNFAIR),
        "legal_mean_severity": round(legal_mean, 2),
        "unfair_mean_severity": round(unfair_mean, 2),
        "weights": {"legal": LEGAL_WEIGHT, "unfair": UNFAIR_WEIGHT},
        "base_score": round(base, 2),
        "count_amplifier": round(amplifier, 2),
        "final_score": score,
        "risk_level": classify_risk(score).level.value,
    }


class RiskEngine:
    """
    Deterministic risk scorer.

    Thin object wrapper so callers can hold a scorer alongside the other
    pipeline components.
    """

    def assess(self, findings: Iterable[Finding]) -> tuple[int, RiskClassification]:
        findings = list(findings)
        score = calculate_risk_score(findings)
        classification = classify_risk(score)
        logger.info(
            f"Risk score {score} ({classification.level.value}) from {len(findings)} findings"
        )
        return score, classification
