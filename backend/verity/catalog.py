"""
Verity Pattern Catalog
======================
Static table of violation rules for Indian contract law.

Each rule has a category (void/illegal vs merely unfair), a severity, one or
more compiled regular expressions tagged with the script they are written
in, and plain-language remediation text. The table is built once at import
and never mutated, so concurrent analyses share it without locking.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from verity.scripts import ScriptCode


class Category(str, Enum):
    """Violation category."""
    LEGAL = "legal"  # void or illegal under statute
    UNFAIR = "unfair"  # enforceable but one-sided


class ViolationType(str, Enum):
    """Closed set of violation types."""
    SECTION27 = "section27"
    SECTION23 = "section23"
    UNLIMITED_LIABILITY = "unlimited_liability"
    IP_OVERREACH = "ip_overreach"
    JURISDICTION = "jurisdiction"
    PAYMENT_TERMS = "payment_terms"
    TERMINATION = "termination"
    PENALTY_CLAUSE = "penalty_clause"
    MORAL_RIGHTS_WAIVER = "moral_rights_waiver"
    FOREIGN_LAW = "foreign_law"
    TERMINATION_ASYMMETRY = "termination_asymmetry"
    COPYRIGHT_OVERREACH = "copyright_overreach"
    JURISDICTION_TRAP = "jurisdiction_trap"
    UNLAWFUL_AGREEMENT = "unlawful_agreement"
    OTHER = "other"


# Display metadata per type
VIOLATION_TYPE_INFO = MappingProxyType({
    ViolationType.SECTION27: "Restraint of Trade",
    ViolationType.SECTION23: "Unlawful Object",
    ViolationType.UNLIMITED_LIABILITY: "Unlimited Liability",
    ViolationType.IP_OVERREACH: "IP Overreach",
    ViolationType.JURISDICTION: "Jurisdiction Issue",
    ViolationType.PAYMENT_TERMS: "Unfair Payment",
    ViolationType.TERMINATION: "Unfair Termination",
    ViolationType.PENALTY_CLAUSE: "Excessive Penalty",
    ViolationType.MORAL_RIGHTS_WAIVER: "Moral Rights Waiver",
    ViolationType.FOREIGN_LAW: "Foreign Jurisdiction",
    ViolationType.TERMINATION_ASYMMETRY: "Asymmetric Termination",
    ViolationType.COPYRIGHT_OVERREACH: "Copyright Overreach",
    ViolationType.JURISDICTION_TRAP: "Jurisdiction Trap",
    ViolationType.UNLAWFUL_AGREEMENT: "Unlawful Agreement",
    ViolationType.OTHER: "Other Issue",
})

# Category assumed for externally reported types
DEFAULT_CATEGORIES = MappingProxyType({
    ViolationType.SECTION27: Category.LEGAL,
    ViolationType.SECTION23: Category.LEGAL,
    ViolationType.UNLIMITED_LIABILITY: Category.LEGAL,
    ViolationType.IP_OVERREACH: Category.LEGAL,
    ViolationType.PENALTY_CLAUSE: Category.LEGAL,
    ViolationType.MORAL_RIGHTS_WAIVER: Category.LEGAL,
    ViolationType.COPYRIGHT_OVERREACH: Category.LEGAL,
    ViolationType.UNLAWFUL_AGREEMENT: Category.LEGAL,
    ViolationType.JURISDICTION: Category.UNFAIR,
    ViolationType.PAYMENT_TERMS: Category.UNFAIR,
    ViolationType.TERMINATION: Category.UNFAIR,
    ViolationType.FOREIGN_LAW: Category.UNFAIR,
    ViolationType.TERMINATION_ASYMMETRY: Category.UNFAIR,
    ViolationType.JURISDICTION_TRAP: Category.UNFAIR,
    ViolationType.OTHER: Category.UNFAIR,
})

# Keys are lowercased with separators stripped
_EXTERNAL_ALIASES = MappingProxyType({
    "section27": ViolationType.SECTION27,
    "restraintoftrade": ViolationType.SECTION27,
    "noncompete": ViolationType.SECTION27,
    "section23": ViolationType.SECTION23,
    "unlawfulobject": ViolationType.SECTION23,
    "unlimitedliability": ViolationType.UNLIMITED_LIABILITY,
    "ipoverreach": ViolationType.IP_OVERREACH,
    "jurisdiction": ViolationType.JURISDICTION,
    "paymentterms": ViolationType.PAYMENT_TERMS,
    "termination": ViolationType.TERMINATION,
    "section74": ViolationType.PENALTY_CLAUSE,
    "penaltyclause": ViolationType.PENALTY_CLAUSE,
    "moralrightswaiver": ViolationType.MORAL_RIGHTS_WAIVER,
    "foreignlaw": ViolationType.FOREIGN_LAW,
    "terminationasymmetry": ViolationType.TERMINATION_ASYMMETRY,
    "copyrightoverreach": ViolationType.COPYRIGHT_OVERREACH,
    "jurisdictiontrap": ViolationType.JURISDICTION_TRAP,
    "unlawfulagreement": ViolationType.UNLAWFUL_AGREEMENT,
})


def violation_type_from_external(value: str | None) -> ViolationType:
    """
    Map a type string from outside the core to the internal enum.

    Accepts camelCase, snake_case and known aliases; anything unrecognized
    becomes ``ViolationType.OTHER``.
    """
    if not value:
        return ViolationType.OTHER
    key = re.sub(r"[^a-z0-9]", "", value.lower())
    return _EXTERNAL_ALIASES.get(key, ViolationType.OTHER)


def violation_title(violation_type: ViolationType) -> str:
    return VIOLATION_TYPE_INFO[violation_type]


@dataclass(frozen=True)
class RulePattern:
    """A compiled expression and the script it is written in."""
    regex: re.Pattern
    script: ScriptCode | None  # None = script-agnostic


@dataclass(frozen=True)
class ViolationRule:
    """A typed violation rule. Immutable."""
    id: str
    violation_type: ViolationType
    category: Category
    severity: int  # 0-100
    patterns: tuple[RulePattern, ...]
    explanation: str
    fair_alternative: str
    section: str | None = None
    act_name: str | None = None
    case_law: str | None = None

    @property
    def scripts(self) -> frozenset[ScriptCode | None]:
        return frozenset(p.script for p in self.patterns)

    def applies_to(self, script: ScriptCode | None) -> bool:
        """True if any pattern is written in ``script`` or is script-agnostic."""
        if script is None or script in (ScriptCode.AUTO, ScriptCode.UNKNOWN):
            return True
        return script in self.scripts or None in self.scripts


def _compile(script: ScriptCode | None, *expressions: str) -> tuple[RulePattern, ...]:
    return tuple(
        RulePattern(regex=re.compile(expr, re.IGNORECASE), script=script)
        for expr in expressions
    )


CONTRACT_ACT = "Indian Contract Act, 1872"
COPYRIGHT_ACT = "Copyright Act, 1957"
PERCEPT_DMARK = "Percept D'Mark (India) Pvt Ltd v. Zaheer Khan (2006) 4 SCC 227"


RULES: tuple[ViolationRule, ...] = (
    # --- English ---
    ViolationRule(
        id="section27-eng",
        violation_type=ViolationType.SECTION27,
        category=Category.LEGAL,
        severity=95,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"shall\s+not\s+(compete|work\s+for|engage\s+with|provide\s+services?\s+to)",
            r"non[-\s]?compete",
            r"restraint\s+of\s+trade",
            r"exclusivity.*after.*termination",
            r"covenant\s+not\s+to\s+compete",
            r"prohibited\s+from\s+(working|engaging|competing)",
            r"cannot\s+(work\s+for|join|compete)",
            r"shall\s+not.*competitor",
            r"not\s+engage\s+in\s+any\s+(similar|competing)\s+business",
            r"refrain\s+from\s+(competing|working)",
        ),
        section="Section 27",
        act_name=CONTRACT_ACT,
        case_law=PERCEPT_DMARK,
        explanation=(
            "This clause tries to stop you from working in your field after leaving. "
            "In India, ALL such clauses are completely void under Section 27 - no "
            "exceptions for \"reasonableness\"."
        ),
        fair_alternative=(
            "Non-solicitation clause: \"For 6 months after termination, you shall not "
            "directly solicit clients you personally serviced during engagement.\""
        ),
    ),
    ViolationRule(
        id="section23-eng",
        violation_type=ViolationType.SECTION23,
        category=Category.LEGAL,
        severity=90,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"against\s+public\s+policy",
            r"defeat\s+the\s+provisions\s+of\s+any\s+law",
            r"fraudulent\s+purpose",
            r"immoral\s+or\s+opposed\s+to\s+public\s+policy",
        ),
        section="Section 23",
        act_name=CONTRACT_ACT,
        explanation=(
            "This clause has an unlawful object or purpose. Agreements with unlawful "
            "objects are void under Indian law."
        ),
        fair_alternative="Remove the clause entirely as it serves an unlawful purpose.",
    ),
    ViolationRule(
        id="unlimited-liability-eng",
        violation_type=ViolationType.UNLIMITED_LIABILITY,
        category=Category.LEGAL,
        severity=85,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"indemnif(y|ies|ication).*without\s+limit",
            r"unlimited\s+liability",
            r"indemnify.*all\s+(claims|losses|damages|liabilities)",
            r"hold\s+harmless.*against\s+all",
            r"liable\s+for\s+any\s+and\s+all\s+(damages|losses|claims)",
            r"shall\s+bear\s+all\s+(costs|expenses|damages)",
            r"indemnify.*regardless\s+of\s+(fault|cause)",
            r"full\s+indemnification",
            r"indemnify.*consequential\s+damages",
        ),
        section="Sections 73-74",
        act_name=CONTRACT_ACT,
        case_law="ONGC v. Saw Pipes (2003) 5 SCC 705",
        explanation=(
            "If anyone sues them for anything related to your work, even if it's not "
            "your fault, you could have to pay all the legal bills. This could cost "
            "you lakhs!"
        ),
        fair_alternative=(
            "Liability capped at contract value: \"Consultant's liability shall not "
            "exceed the total fees paid under this agreement.\""
        ),
    ),
    ViolationRule(
        id="ip-overreach-eng",
        violation_type=ViolationType.IP_OVERREACH,
        category=Category.LEGAL,
        severity=80,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"all\s+intellectual\s+property.*belongs\s+to",
            r"waive.*moral\s+rights",
            r"assign.*future\s+inventions",
            r"work.*outside.*hours.*belongs",
            r"relinquish.*all.*rights",
            r"transfer\s+all.*rights.*title.*interest",
            r"perpetual.*irrevocable.*license",
            r"work\s+product.*including.*ideas",
            r"inventions.*prior.*after.*employment",
        ),
        section="Section 57",
        act_name=COPYRIGHT_ACT,
        case_law="Amar Nath Sehgal v. Union of India (2005) 30 PTC 253",
        explanation=(
            "They claim ownership of everything you create, even ideas from your "
            "personal time. In India, moral rights (like attribution) cannot be waived!"
        ),
        fair_alternative=(
            "IP transfers upon full payment: \"IP rights in deliverables transfer to "
            "Client upon receipt of final payment. Consultant retains portfolio usage "
            "rights.\""
        ),
    ),
    ViolationRule(
        id="jurisdiction-eng",
        violation_type=ViolationType.JURISDICTION,
        category=Category.UNFAIR,
        severity=70,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"governing\s+law.*(california|new\s+york|delaware|texas|florida|uk|england|singapore|uae|dubai)",
            r"exclusive\s+jurisdiction.*(usa|united\s+states|london|singapore|dubai)",
            r"arbitration.*(singapore|london|new\s+york|hong\s+kong|dubai)",
            r"courts\s+of.*(california|new\s+york|delaware|london|singapore)",
            r"pursuant\s+to\s+the\s+laws\s+of.*(california|new\s+york|uk|singapore)",
        ),
        explanation=(
            "This contract uses foreign law/courts. If there's a dispute, you'd have to "
            "travel abroad and hire foreign lawyers, which is extremely expensive!"
        ),
        fair_alternative=(
            "Indian jurisdiction: \"This agreement shall be governed by Indian law. "
            "Disputes shall be subject to arbitration in [City], India under the "
            "Arbitration and Conciliation Act, 1996.\""
        ),
    ),
    ViolationRule(
        id="payment-terms-eng",
        violation_type=ViolationType.PAYMENT_TERMS,
        category=Category.UNFAIR,
        severity=65,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"payment.*within\s+(60|90|120)\s+days",
            r"net\s+(60|90|120)",
            r"upon\s+client\s+satisfaction",
            r"payment\s+at\s+(sole\s+)?discretion",
            r"no\s+payment.*incomplete",
            r"payment.*subject\s+to\s+approval",
        ),
        explanation=(
            "Payment terms are much longer than industry standard (30 days). You'll be "
            "waiting months to get paid for work already completed!"
        ),
        fair_alternative=(
            "Standard payment terms: \"Payment due within 30 days of invoice. Late "
            "payments accrue interest at 1.5% per month.\""
        ),
    ),
    ViolationRule(
        id="termination-eng",
        violation_type=ViolationType.TERMINATION,
        category=Category.UNFAIR,
        severity=75,
        patterns=_compile(
            ScriptCode.ENGLISH,
            r"may\s+terminate\s+immediately",
            r"terminate.*at\s+will",
            r"terminate.*without\s+(cause|reason|notice)",
            r"terminate.*sole\s+discretion",
            r"terminate.*any\s+time.*without",
            r"terminat(e|ion).*no\s+(compensation|payment)",
        ),
        case_law="Central Inland Water Transport Corp v. Brojo Nath Ganguly (1986) 3 SCC 156",
        explanation=(
            "They can fire you instantly without any notice or payment for work done. "
            "Extremely one-sided!"
        ),
        fair_alternative=(
            "Mutual termination rights: \"Either party may terminate with 30 days "
            "written notice. Consultant shall be paid for all work completed to date.\""
        ),
    ),

    # --- Kannada ---
    ViolationRule(
        id="section27-kan",
        violation_type=ViolationType.SECTION27,
        category=Category.LEGAL,
        severity=95,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ಸ್ಪರ್ಧಿಸಬಾರದು",  # should not compete
            r"ವ್ಯಾಪಾರವನ್ನು\s+ನಿರ್ಬಂಧಿಸುವ",  # restraint of trade
            r"ಸ್ಪರ್ಧಾತ್ಮಕ\s+ವ್ಯಾಪಾರ",  # competing business
            r"ಕೆಲಸ\s+ಮಾಡುವುದನ್ನು\s+ನಿಷೇಧಿಸಲಾಗಿದೆ",  # prohibited from working
            r"ಒಪ್ಪಂದದ\s+ಅವಧಿಯ\s+ನಂತರ",  # after the contract period
            r"ಸ್ಪರ್ಧಿ\s+ಕಂಪನಿಗೆ\s+ಸೇವೆ\s+ಸಲ್ಲಿಸುವಂತಿಲ್ಲ",
            r"ಯಾವುದೇ\s+ಪೈಪೋಟಿ\s+ಸಂಸ್ಥೆಯಲ್ಲಿ",
        ),
        section="Section 27",
        act_name=CONTRACT_ACT,
        case_law=PERCEPT_DMARK,
        explanation=(
            "ಈ ಷರತ್ತು ನೀವು ಕೆಲಸ ಬಿಟ್ಟ ನಂತರ ಬೇರೆ ಕಡೆ ಕೆಲಸ ಮಾಡುವುದನ್ನು ತಡೆಯುತ್ತದೆ. "
            "ಭಾರತದಲ್ಲಿ ಸೆಕ್ಷನ್ 27 ರ ಅಡಿಯಲ್ಲಿ ಇದು ಸಂಪೂರ್ಣವಾಗಿ ಕಾನೂನುಬಾಹಿರ."
        ),
        fair_alternative=(
            "Non-solicitation only: \"You can work anywhere, but cannot poach our "
            "specific clients for 6 months.\""
        ),
    ),
    ViolationRule(
        id="section23-kan",
        violation_type=ViolationType.SECTION23,
        category=Category.LEGAL,
        severity=90,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ಕಾನೂನುಬಾಹಿರ\s+ಉದ್ದೇಶ",
            r"ಸಾರ್ವಜನಿಕ\s+ನೀತಿಯ\s+ವಿರುದ್ಧ",
            r"ಅಕ್ರಮ\s+ಉದ್ದೇಶ",
        ),
        section="Section 23",
        act_name=CONTRACT_ACT,
        explanation="ಈ ಒಪ್ಪಂದದ ಉದ್ದೇಶ ಕಾನೂನುಬಾಹಿರವಾಗಿದೆ.",
        fair_alternative="Remove unlawful clauses.",
    ),
    ViolationRule(
        id="penalty-clause-kan",
        violation_type=ViolationType.PENALTY_CLAUSE,
        category=Category.LEGAL,
        severity=85,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ದಂಡವನ್ನು\s+ಪಾವತಿಸಬೇಕು",
            r"ದಂಡ\s+ವಿಧಿಸಲಾಗುವುದು",
            r"ದಂಡ",
        ),
        section="Section 74",
        act_name=CONTRACT_ACT,
        explanation="ನಿಜವಾದ ನಷ್ಟಕ್ಕಿಂತ ಹೆಚ್ಚಿನ ದಂಡವನ್ನು ಭಾರತೀಯ ಕಾನೂನು ಅನುಮತಿಸುವುದಿಲ್ಲ.",
        fair_alternative="ನಿಜವಾದ ನಷ್ಟಕ್ಕೆ ಸೀಮಿತವಾದ ಹಾನಿ ಮರುಪಾವತಿ.",
    ),
    ViolationRule(
        id="moral-rights-waiver-kan",
        violation_type=ViolationType.MORAL_RIGHTS_WAIVER,
        category=Category.LEGAL,
        severity=82,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ನೈತಿಕ\s+ಹಕ್ಕುಗಳನ್ನು\s+ತ್ಯಜಿಸುತ್ತಾರೆ",
            r"ಹಕ್ಕುಗಳನ್ನು\s+ಬಿಟ್ಟುಕೊಡುತ್ತಾರೆ",
        ),
        section="Section 57",
        act_name=COPYRIGHT_ACT,
        explanation="ನೈತಿಕ ಹಕ್ಕುಗಳನ್ನು (Moral Rights) ಭಾರತದಲ್ಲಿ ತ್ಯಜಿಸಲು ಸಾಧ್ಯವಿಲ್ಲ.",
        fair_alternative="ಕಲಾವಿದರು ತಮ್ಮ ನೈತಿಕ ಹಕ್ಕುಗಳನ್ನು ಕಾಪಾಡಿಕೊಳ್ಳುತ್ತಾರೆ.",
    ),
    ViolationRule(
        id="foreign-law-kan",
        violation_type=ViolationType.FOREIGN_LAW,
        category=Category.UNFAIR,
        severity=65,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ಕ್ಯಾಲಿಫೋರ್ನಿಯಾ\s+ರಾಜ್ಯದ\s+ಕಾನೂನು",
            r"ಸಿಂಗಾಪುರದಲ್ಲಿ\s+ಮಧ್ಯಸ್ಥಿಕೆ",
            r"ಈ\s+ಒಪ್ಪಂದವು\s+ಭಾರತದ\s+ಹೊರಗಿನ",
        ),
        explanation="ವಿದೇಶಿ ಕಾನೂನು ಅಥವಾ ನ್ಯಾಯಾಲಯಗಳ ಬಳಕೆ ನಿಮಗೆ ಅಪಾಯಕಾರಿ ಮತ್ತು ದುಬಾರಿಯಾಗಿದೆ.",
        fair_alternative="ಭಾರತೀಯ ಕಾನೂನು ಮತ್ತು ಸ್ಥಳೀಯ ನ್ಯಾಯಾಲಯಗಳ ಬಳಕೆ.",
    ),
    ViolationRule(
        id="termination-asymmetry-kan",
        violation_type=ViolationType.TERMINATION_ASYMMETRY,
        category=Category.UNFAIR,
        severity=70,
        patterns=_compile(
            ScriptCode.KANNADA,
            r"ನೋಟೀಸ್\s+ನೀಡಿ\s+ರದ್ದುಗೊಳಿಸಬಹುದು",
            r"೨೪\s+ಗಂಟೆಗಳ\s+ನೋಟೀಸ್",  # 24 hours notice
        ),
        explanation="ಒಪ್ಪಂದವನ್ನು ರದ್ದುಗೊಳಿಸುವ ನಿಯಮಗಳು ಅಸಮಾನವಾಗಿವೆ.",
        fair_alternative="ಎರಡೂ ಪಕ್ಷಗಳಿಗೆ ಸಮಾನ ನೋಟೀಸ್ ಅವಧಿ.",
    ),
)

RULES_BY_ID = MappingProxyType({rule.id: rule for rule in RULES})


def rules_for_script(script: ScriptCode | None) -> tuple[ViolationRule, ...]:
    """Rules with at least one pattern for ``script`` (all rules for None/auto/unknown)."""
    return tuple(rule for rule in RULES if rule.applies_to(script))
