"""
Verity Deviation Checker Module
===============================
Flags terms that are legal but below a fair standard for the contract type.

A handful of numeric terms (payment window, revision rounds, notice periods,
kill fee) are pulled from the text with ordered regular expressions, first
match wins, and compared with a named fair template. Only below-fair
conditions are reported.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

UNLIMITED = "unlimited"
DEFAULT_TEMPLATE = "freelance_general"

TermValue = int | str  # str is only ever UNLIMITED


class Term(str, Enum):
    """Contract terms the checker understands."""
    PAYMENT_DAYS = "payment_days"
    REVISION_ROUNDS = "revision_rounds"
    CLIENT_NOTICE_DAYS = "client_notice_days"
    FREELANCER_NOTICE_DAYS = "freelancer_notice_days"
    KILL_FEE_PERCENT = "kill_fee_percent"


class DeviationSeverity(str, Enum):
    FAIR = "fair"
    WARNING = "warning"
    CRITICAL = "critical"


TERM_LABELS = MappingProxyType({
    Term.PAYMENT_DAYS: "Payment Terms",
    Term.REVISION_ROUNDS: "Revision Rounds",
    Term.CLIENT_NOTICE_DAYS: "Client Notice Period",
    Term.FREELANCER_NOTICE_DAYS: "Freelancer Notice Period",
    Term.KILL_FEE_PERCENT: "Kill Fee",
})

TERM_UNITS = MappingProxyType({
    Term.PAYMENT_DAYS: "days",
    Term.REVISION_ROUNDS: "rounds",
    Term.CLIENT_NOTICE_DAYS: "days",
    Term.FREELANCER_NOTICE_DAYS: "days",
    Term.KILL_FEE_PERCENT: "%",
})


@dataclass(frozen=True)
class TermThresholds:
    """Fair / warning / critical levels for one term."""
    fair: int
    warning: int
    critical: TermValue

    @property
    def applicable(self) -> bool:
        return not (self.fair == self.warning == self.critical)

    @property
    def lower_is_worse(self) -> bool:
        return self.critical != UNLIMITED and self.critical < self.fair

    def classify(self, value: TermValue) -> DeviationSeverity:
        if value == UNLIMITED:
            return DeviationSeverity.CRITICAL if self.critical == UNLIMITED else DeviationSeverity.FAIR

        if self.lower_is_worse:
            if value <= self.critical:
                return DeviationSeverity.CRITICAL
            if value <= self.warning:
                return DeviationSeverity.WARNING
            return DeviationSeverity.FAIR

        if self.critical != UNLIMITED and value >= self.critical:
            return DeviationSeverity.CRITICAL
        if value >= self.warning:
            return DeviationSeverity.WARNING
        return DeviationSeverity.FAIR


@dataclass(frozen=True)
class FairTemplate:
    """Named table of thresholds for a contract domain."""
    name: str
    label: str
    terms: MappingProxyType


def _template(name: str, label: str, **terms: tuple[int, int, TermValue]) -> FairTemplate:
    return FairTemplate(
        name=name,
        label=label,
        terms=MappingProxyType({
            Term(key): TermThresholds(*values) for key, values in terms.items()
        }),
    )


FAIR_TEMPLATES = MappingProxyType({
    t.name: t for t in (
        _template(
            "freelance_general", "General Freelance",
            payment_days=(30, 45, 60),
            revision_rounds=(3, 5, UNLIMITED),
            client_notice_days=(15, 7, 0),
            freelancer_notice_days=(15, 30, 60),
            kill_fee_percent=(50, 25, 0),
        ),
        _template(
            "freelance_design", "Freelance Design",
            payment_days=(15, 30, 45),
            revision_rounds=(2, 4, UNLIMITED),
            client_notice_days=(14, 7, 0),
            freelancer_notice_days=(14, 21, 30),
            kill_fee_percent=(50, 25, 0),
        ),
        _template(
            "freelance_development", "Freelance Development",
            payment_days=(30, 45, 60),
            revision_rounds=(3, 5, UNLIMITED),
            client_notice_days=(30, 14, 0),
            freelancer_notice_days=(30, 45, 60),
            kill_fee_percent=(50, 25, 0),
        ),
        _template(
            "employment_contract", "Employment Contract",
            payment_days=(7, 15, 30),
            revision_rounds=(0, 0, 0),  # not applicable
            client_notice_days=(30, 15, 0),
            freelancer_notice_days=(30, 60, 90),
            kill_fee_percent=(100, 50, 0),  # severance
        ),
        _template(
            "content_writing", "Content Writing",
            payment_days=(30, 45, 60),
            revision_rounds=(2, 3, UNLIMITED),
            client_notice_days=(7, 3, 0),
            freelancer_notice_days=(7, 14, 30),
            kill_fee_percent=(50, 25, 0),
        ),
        _template(
            "photography", "Photography",
            payment_days=(15, 30, 45),
            revision_rounds=(2, 3, UNLIMITED),
            client_notice_days=(7, 3, 0),
            freelancer_notice_days=(7, 14, 21),
            kill_fee_percent=(50, 25, 0),
        ),
        _template(
            "it_consulting", "IT Consulting",
            payment_days=(30, 45, 60),
            revision_rounds=(2, 4, UNLIMITED),
            client_notice_days=(30, 15, 0),
            freelancer_notice_days=(30, 45, 60),
            kill_fee_percent=(25, 10, 0),
        ),
    )
})


def available_templates() -> tuple[str, ...]:
    """Names of all fair templates."""
    return tuple(FAIR_TEMPLATES)


def resolve_template(name: str | None) -> FairTemplate:
    """Look up a template, falling back to the default for unknown names."""
    if name and name in FAIR_TEMPLATES:
        return FAIR_TEMPLATES[name]
    if name:
        logger.warning(f"Unknown template '{name}', using '{DEFAULT_TEMPLATE}'")
    return FAIR_TEMPLATES[DEFAULT_TEMPLATE]


# === Term extraction ===

_PAYMENT_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"within\s+(\d+)\s+days",
    r"(\d+)\s+days?\s+(?:of|from|after)",
    r"payment\s+terms?[:\s]+(\d+)\s+days",
    r"net\s+(\d+)",
))

_UNLIMITED_REVISIONS = re.compile(r"unlimited\s+revisions?", re.IGNORECASE)

_REVISION_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"(\d+)\s+(?:rounds?\s+of\s+)?revisions?",
    r"revisions?[:\s]+(\d+)",
    r"up\s+to\s+(\d+)\s+revisions?",
))

_CLIENT_PARTIES = ("company", "client", "employer", "principal")
_FREELANCER_PARTIES = ("contractor", "freelancer", "employee", "consultant")

_GENERIC_NOTICE = re.compile(
    r"(\d+)\s+days?\s+(?:prior\s+)?(?:written\s+)?notice", re.IGNORECASE
)

_NO_KILL_FEE = re.compile(r"no\s+(?:kill|cancellation)\s+fee", re.IGNORECASE)

_KILL_FEE_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"(?:kill|cancellation)\s+fee\s+(?:of\s+)?(\d+)\s*%",
    r"(\d+)\s*%\s+(?:kill|cancellation)\s+fee",
    r"(\d+)\s*%\s+of\s+the\s+(?:total\s+|project\s+)?fees?\s+(?:upon|on|if)\s+cancell?ation",
))


def _first_number(patterns: tuple[re.Pattern, ...], text: str) -> int | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def extract_payment_days(text: str) -> int | None:
    return _first_number(_PAYMENT_PATTERNS, text)


def extract_revision_rounds(text: str) -> TermValue | None:
    """Revision count, or ``UNLIMITED``."""
    if _UNLIMITED_REVISIONS.search(text):
        return UNLIMITED
    return _first_number(_REVISION_PATTERNS, text)


def _party_notice_pattern(parties: tuple[str, ...]) -> re.Pattern:
    return re.compile(
        rf"({'|'.join(parties)}).*?(\d+)\s+days?\s+(?:notice|written\s+notice)",
        re.IGNORECASE,
    )


_CLIENT_NOTICE = _party_notice_pattern(_CLIENT_PARTIES)
_FREELANCER_NOTICE = _party_notice_pattern(_FREELANCER_PARTIES)


def extract_notice_days(text: str, party: str) -> int | None:
    """
    Notice period for ``party`` ('client' or 'freelancer').

    Falls back to any notice period in the text when no party-specific
    one is found.
    """
    pattern = _CLIENT_NOTICE if party == "client" else _FREELANCER_NOTICE
    match = pattern.search(text)
    if match:
        return int(match.group(2))

    match = _GENERIC_NOTICE.search(text)
    if match:
        return int(match.group(1))
    return None


def extract_kill_fee_percent(text: str) -> int | None:
    if _NO_KILL_FEE.search(text):
        return 0
    return _first_number(_KILL_FEE_PATTERNS, text)


_EXTRACTORS = MappingProxyType({
    Term.PAYMENT_DAYS: extract_payment_days,
    Term.REVISION_ROUNDS: extract_revision_rounds,
    Term.CLIENT_NOTICE_DAYS: lambda text: extract_notice_days(text, "client"),
    Term.FREELANCER_NOTICE_DAYS: lambda text: extract_notice_days(text, "freelancer"),
    Term.KILL_FEE_PERCENT: extract_kill_fee_percent,
})


@dataclass(frozen=True)
class Deviation:
    """A term that falls short of the fair template."""
    term: Term
    observed_value: TermValue
    fair_value: int
    severity: DeviationSeverity
    recommendation: str

    @property
    def term_label(self) -> str:
        return TERM_LABELS[self.term]

    def to_dict(self) -> dict[str, Any]:
        unit = TERM_UNITS[self.term]
        return {
            "term": self.term.value,
            "term_label": self.term_label,
            "observed_value": self.observed_value,
            "fair_value": self.fair_value,
            "observed_display": _display(self.observed_value, unit),
            "fair_display": _display(self.fair_value, unit),
            "severity": self.severity.value,
            "recommendation": self.recommendation,
        }


def _display(value: TermValue, unit: str) -> str:
    if value == UNLIMITED:
        return "Unlimited"
    if unit == "%":
        return f"{value}%"
    return f"{value} {unit}"


def _recommendation(term: Term, value: TermValue, fair: int, severity: DeviationSeverity) -> str:
    critical = severity == DeviationSeverity.CRITICAL

    if term == Term.PAYMENT_DAYS:
        if critical:
            return (
                f"Payment terms of {value} days are excessive. Industry standard is "
                f"{fair} days. Under MSMED Act, payment to MSMEs must be within 45 days."
            )
        return (
            f"Payment terms of {value} days are above industry standard of {fair} days. "
            "Consider negotiating shorter terms."
        )

    if term == Term.REVISION_ROUNDS:
        if value == UNLIMITED:
            return (
                "Unlimited revisions create scope for exploitation. Negotiate a fixed "
                "number (typically 2-3 rounds) with additional revisions at extra cost."
            )
        return "Consider negotiating fewer revision rounds with clear scope definition."

    if term == Term.CLIENT_NOTICE_DAYS:
        if critical:
            return (
                "The client can end the engagement without notice. Ask for at least "
                f"{fair} days written notice and payment for work completed."
            )
        return f"Client notice of {value} days is short. A fair period is {fair} days."

    if term == Term.FREELANCER_NOTICE_DAYS:
        return (
            f"You must give {value} days notice to exit, well above the fair {fair} days. "
            "Negotiate a shorter or mutual notice period."
        )

    if critical:
        return (
            "There is no kill fee if the project is cancelled. Ask for a kill fee of "
            f"{fair}% of the remaining project value."
        )
    return f"A kill fee of {value}% is low. A fair kill fee is {fair}% of the project value."


def check_deviations(text: str, template: str | None = DEFAULT_TEMPLATE) -> list[Deviation]:
    """
    Compare extracted terms against a fair template.

    Args:
        text: Contract text
        template: Template name; unknown names use the default template

    Returns:
        Deviations in term order, Warning or Critical only
    """
    if not text:
        return []

    fair_template = resolve_template(template)
    deviations: list[Deviation] = []

    for term, thresholds in fair_template.terms.items():
        if not thresholds.applicable:
            continue

        value = _EXTRACTORS[term](text)
        if value is None:
            continue

        severity = thresholds.classify(value)
        if severity == DeviationSeverity.FAIR:
            continue

        deviations.append(Deviation(
            term=term,
            observed_value=value,
            fair_value=thresholds.fair,
            severity=severity,
            recommendation=_recommendation(term, value, thresholds.fair, severity),
        ))

    logger.debug(f"{len(deviations)} deviations against template '{fair_template.name}'")
    return deviations
