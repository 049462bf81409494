"""
Risk level mapping for 0-100 scam risk scores.
"""

import math
from enum import Enum
from typing import Optional

# Inclusive upper bounds of the green and yellow bands; red is 70-100.
GREEN_MAX = 34
YELLOW_MAX = 69


class RiskLevel(str, Enum):
    """Ordinal risk level shown to the user."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


_LABELS = {
    RiskLevel.GREEN: "Safe",
    RiskLevel.YELLOW: "Caution",
    RiskLevel.RED: "Danger",
}

_DESCRIPTIONS = {
    RiskLevel.GREEN: "This call appears to be safe. No scam indicators were detected.",
    RiskLevel.YELLOW: "This call has some suspicious elements. Review the details carefully.",
    RiskLevel.RED: (
        "WARNING: This call shows strong signs of a scam. "
        "Do not share personal information or send money."
    ),
}


def get_risk_level(score: int) -> RiskLevel:
    """Map a risk score to its level using the fixed band thresholds."""
    if score <= GREEN_MAX:
        return RiskLevel.GREEN
    if score <= YELLOW_MAX:
        return RiskLevel.YELLOW
    return RiskLevel.RED


def clamp_score(value: float) -> int:
    """Round half up and clamp into the 0-100 score range."""
    return max(0, min(100, int(math.floor(value + 0.5))))


def get_risk_label(level: Optional[RiskLevel]) -> str:
    if level is None:
        return "Pending"
    return _LABELS[RiskLevel(level)]


def get_risk_description(level: Optional[RiskLevel]) -> str:
    if level is None:
        return "This call is still being analyzed."
    return _DESCRIPTIONS[RiskLevel(level)]
