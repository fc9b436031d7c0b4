# src/xp_engine/engine/recommendations.py

"""Turns weak dimensions into plain-language guidance."""

from typing import List, Optional

from .models import Dimension, PerformanceMetrics, PerformanceWeights
from ..utils.helpers import format_number, humanize

ADVICE = {
    Dimension.TECHNICAL_ACCURACY: (
        "review technical documentation and practice scenarios to improve accuracy"
    ),
    Dimension.COMMUNICATION_QUALITY: (
        "practice clear, professional communication techniques"
    ),
    Dimension.CUSTOMER_SATISFACTION: (
        "focus on understanding customer needs and providing thorough explanations"
    ),
    Dimension.PROCESS_COMPLIANCE: (
        "follow the documented support procedures and verification steps"
    ),
}


class RecommendationGenerator:
    def __init__(self, threshold: float = 70.0):
        self.threshold = threshold

    def generate(
        self,
        metrics: PerformanceMetrics,
        weights: Optional[PerformanceWeights] = None,
    ) -> List[str]:
        """One recommendation per dimension below the threshold, weakest first.

        Ties go to the dimension carrying more weight.
        """
        weights = weights or PerformanceWeights.balanced()
        weak = [d for d in Dimension if metrics.dimension(d) < self.threshold]
        weak.sort(key=lambda d: (metrics.dimension(d), -weights.weight(d)))

        return [
            f"Improve {humanize(d.value)} "
            f"(scored {format_number(metrics.dimension(d))}, "
            f"target {format_number(self.threshold)}): {ADVICE[d]}"
            for d in weak
        ]
