# src/xp_engine/engine/scorer.py

"""Deterministic weighted scoring of performance metrics."""

from dataclasses import dataclass
from typing import Dict

from .models import Dimension, PerformanceMetrics, PerformanceWeights
from ..utils.helpers import clamp


@dataclass(frozen=True)
class ScoreBreakdown:
    """Overall score plus the per-dimension pieces it was built from."""

    overall_score: float
    weighted_scores: Dict[str, float]
    base_scores: Dict[str, float]


class ScoreCalculator:
    """Calculates a deterministic 0-100 score from the numeric dimensions.

    Only the four numeric dimensions take part; the boolean flags and the
    resolution time feed bonuses and adjustments instead.
    """

    def __init__(self, precision: int = 2):
        self.precision = precision

    def _score_dimension(self, value: float) -> float:
        """Clips a single raw dimension into the scoring range."""
        return clamp(value)

    def compute(
        self, metrics: PerformanceMetrics, weights: PerformanceWeights
    ) -> ScoreBreakdown:
        """Weighted sum of the four dimensions, clipped to [0, 100]."""
        base_scores = metrics.dimension_scores()
        weighted_scores = {
            d.value: self._score_dimension(metrics.dimension(d)) * weights.weight(d)
            for d in Dimension
        }

        overall_score = clamp(sum(weighted_scores.values()))

        return ScoreBreakdown(
            overall_score=round(overall_score, self.precision),
            weighted_scores={
                k: round(v, self.precision) for k, v in weighted_scores.items()
            },
            base_scores=base_scores,
        )

    def score(self, metrics: PerformanceMetrics, weights: PerformanceWeights) -> float:
        """Just the overall score."""
        return self.compute(metrics, weights).overall_score

    def simple_average(self, metrics: PerformanceMetrics) -> float:
        """Unweighted mean of the four dimensions, clipped to [0, 100]."""
        total = sum(self._score_dimension(metrics.dimension(d)) for d in Dimension)
        return round(total / len(Dimension), self.precision)
