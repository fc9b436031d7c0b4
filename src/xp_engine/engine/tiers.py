# src/xp_engine/engine/tiers.py

"""Maps an overall score onto a named performance tier."""

from typing import List, Optional, Sequence

from .models import Tier

DEFAULT_TIERS = (
    Tier(
        name="Outstanding",
        min_score=90,
        max_score=100,
        multiplier=1.5,
        color="#10b981",
        badge="★",
        description="Exceptional performance across all metrics",
    ),
    Tier(
        name="Excellent",
        min_score=80,
        max_score=90,
        multiplier=1.25,
        color="#3b82f6",
        badge="⭐",
        description="Strong performance with room for minor improvements",
    ),
    Tier(
        name="Good",
        min_score=70,
        max_score=80,
        multiplier=1.0,
        color="#f59e0b",
        badge="✓",
        description="Solid performance meeting expectations",
    ),
    Tier(
        name="Needs Improvement",
        min_score=60,
        max_score=70,
        multiplier=0.8,
        color="#ef4444",
        badge="⚠",
        description="Performance below expectations, improvement needed",
    ),
    Tier(
        name="Unsatisfactory",
        min_score=0,
        max_score=60,
        multiplier=0.5,
        color="#dc2626",
        badge="✗",
        description="Significant improvement required",
    ),
)


class TierClassifier:
    """Classifies scores against ordered, inclusive lower bounds."""

    def __init__(self, tiers: Optional[Sequence[Tier]] = None):
        self._tiers = sorted(
            DEFAULT_TIERS if tiers is None else tiers, key=lambda t: t.min_score, reverse=True
        )
        if not self._tiers:
            raise ValueError("At least one tier is required")

    def classify(self, score: float) -> Tier:
        for tier in self._tiers:
            if score >= tier.min_score:
                return tier
        # Below every bound (negative scores): lowest tier
        return self._tiers[-1]

    def tiers(self) -> List[Tier]:
        """Tiers from highest to lowest."""
        return list(self._tiers)
