"""Financial wellness score summary"""

from dataclasses import dataclass, field
from typing import List

from ewa_gateway.domain.models import WELLNESS_MAX_SCORE, WellnessScore

WELLNESS_TIPS = [
    "Try to limit advances to 20% of your earnings",
    "Review your spending weekly to stay on track",
    "Set aside 10% of each paycheck for emergencies",
    "Use vouchers for discounts on regular purchases",
]


@dataclass
class WellnessSummary:
    score: int
    max_score: int
    percentage: float
    band: str
    tips: List[str] = field(default_factory=lambda: list(WELLNESS_TIPS))


def score_band(score: int) -> str:
    """Map a 0-850 score to a coarse band"""
    if score < 580:
        return "needs_attention"
    elif score < 670:
        return "fair"
    elif score < 740:
        return "good"
    else:
        return "excellent"


def summarize_wellness(wellness: WellnessScore) -> WellnessSummary:
    max_score = wellness.max_score or WELLNESS_MAX_SCORE
    score = max(0, min(wellness.score, max_score))
    return WellnessSummary(
        score=score,
        max_score=max_score,
        percentage=round(score / max_score * 100, 1),
        band=score_band(score),
    )
