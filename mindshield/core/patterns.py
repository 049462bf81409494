"""
Scam keyword pattern catalog.

Each entry pairs a case-insensitive, word-bounded regular expression with the
scam category it indicates and a severity weight. Generic urgency words carry
low weights (8-10); high-specificity phrases such as "social security number"
or "arrest warrant" carry the highest (18-20).
"""

import re
from dataclasses import dataclass
from typing import Tuple

GOVERNMENT_IMPERSONATION = "Government Impersonation"
FINANCIAL_FRAUD = "Financial Fraud"
URGENCY_PRESSURE = "Urgency/Pressure"
THREATS_INTIMIDATION = "Threats/Intimidation"
IDENTITY_THEFT = "Identity Theft"
PRIZE_LOTTERY = "Prize/Lottery Scam"
TECH_SUPPORT = "Tech Support Scam"


class PatternCatalogError(ValueError):
    """Raised when a catalog entry is malformed."""


@dataclass(frozen=True)
class ScamPattern:
    """A single weighted catalog entry."""
    matcher: re.Pattern
    category: str
    weight: int

    def __post_init__(self):
        if not self.matcher.pattern:
            raise PatternCatalogError("Pattern matcher must not be empty")
        if not self.category:
            raise PatternCatalogError(f"Pattern {self.matcher.pattern!r} has no category")
        if not isinstance(self.weight, int) or self.weight <= 0:
            raise PatternCatalogError(
                f"Pattern {self.matcher.pattern!r} must have a positive integer weight, got {self.weight!r}"
            )


def _pattern(regex: str, category: str, weight: int) -> ScamPattern:
    return ScamPattern(re.compile(regex, re.IGNORECASE), category, weight)


SCAM_PATTERNS: Tuple[ScamPattern, ...] = (
    # Government impersonation
    _pattern(r"\bIRS\b", GOVERNMENT_IMPERSONATION, 15),
    _pattern(r"\bsocial\s+security\b", GOVERNMENT_IMPERSONATION, 15),
    _pattern(r"\barrest\s+warrant\b", GOVERNMENT_IMPERSONATION, 20),
    _pattern(r"\blaw\s+enforcement\b", GOVERNMENT_IMPERSONATION, 12),
    _pattern(r"\bfederal\s+agent\b", GOVERNMENT_IMPERSONATION, 18),
    _pattern(r"\bbadge\s+number\b", GOVERNMENT_IMPERSONATION, 14),

    # Unusual payment methods and account details
    _pattern(r"\bgift\s+card\b", FINANCIAL_FRAUD, 18),
    _pattern(r"\bwire\s+transfer\b", FINANCIAL_FRAUD, 16),
    _pattern(r"\bwestern\s+union\b", FINANCIAL_FRAUD, 18),
    _pattern(r"\bmoneygram\b", FINANCIAL_FRAUD, 18),
    _pattern(r"\bbitcoin\b", FINANCIAL_FRAUD, 14),
    _pattern(r"\bcryptocurrency\b", FINANCIAL_FRAUD, 14),
    _pattern(r"\bbank\s+account\s+number\b", FINANCIAL_FRAUD, 16),

    # Urgency
    _pattern(r"\bact\s+now\b", URGENCY_PRESSURE, 10),
    _pattern(r"\blimited\s+time\b", URGENCY_PRESSURE, 10),
    _pattern(r"\bimmediately\b", URGENCY_PRESSURE, 8),
    _pattern(r"\bright\s+away\b", URGENCY_PRESSURE, 8),
    _pattern(r"\burgent\b", URGENCY_PRESSURE, 10),
    _pattern(r"\bdon'?t\s+hang\s+up\b", URGENCY_PRESSURE, 14),

    # Threats
    _pattern(r"\barrest(?:ed|ing)?\b", THREATS_INTIMIDATION, 12),
    _pattern(r"\blawsuit\b", THREATS_INTIMIDATION, 12),
    _pattern(r"\bsuspended\b", THREATS_INTIMIDATION, 10),
    _pattern(r"\bdeported\b", THREATS_INTIMIDATION, 14),
    _pattern(r"\bwarrant\b", THREATS_INTIMIDATION, 12),
    _pattern(r"\bpolice\b", THREATS_INTIMIDATION, 8),

    # Personal information requests
    _pattern(r"\bsocial\s+security\s+number\b", IDENTITY_THEFT, 20),
    _pattern(r"\bSSN\b", IDENTITY_THEFT, 20),
    _pattern(r"\bdate\s+of\s+birth\b", IDENTITY_THEFT, 14),
    _pattern(r"\bmother'?s\s+maiden\b", IDENTITY_THEFT, 18),
    _pattern(r"\bPIN\b", IDENTITY_THEFT, 14),
    _pattern(r"\bpassword\b", IDENTITY_THEFT, 14),
    _pattern(r"\bverify\s+your\s+identity\b", IDENTITY_THEFT, 12),

    # Prize / lottery
    _pattern(r"\byou'?ve\s+won\b", PRIZE_LOTTERY, 16),
    _pattern(r"\bcongratulations\b", PRIZE_LOTTERY, 8),
    _pattern(r"\bprize\b", PRIZE_LOTTERY, 10),
    _pattern(r"\blottery\b", PRIZE_LOTTERY, 16),
    _pattern(r"\bsweepstakes\b", PRIZE_LOTTERY, 16),
    _pattern(r"\bclaim\s+your\b", PRIZE_LOTTERY, 12),

    # Tech support
    _pattern(r"\bcomputer\s+has\s+a\s+virus\b", TECH_SUPPORT, 20),
    _pattern(r"\bmicrosoft\s+support\b", TECH_SUPPORT, 18),
    _pattern(r"\bapple\s+support\b", TECH_SUPPORT, 18),
    _pattern(r"\bremote\s+access\b", TECH_SUPPORT, 16),
    _pattern(r"\bteamviewer\b", TECH_SUPPORT, 18),
)


def catalog_categories() -> Tuple[str, ...]:
    """Distinct categories in catalog order."""
    return tuple(dict.fromkeys(entry.category for entry in SCAM_PATTERNS))
