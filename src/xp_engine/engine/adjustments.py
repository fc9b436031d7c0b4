# src/xp_engine/engine/adjustments.py

"""Context-derived score deltas, recorded so every change is auditable."""

from typing import List, Optional, Sequence, Tuple

from .models import (
    AdjustmentType,
    ContextRule,
    Difficulty,
    PerformanceAdjustment,
    PerformanceMetrics,
    ScoringContext,
)
from ..config.settings import Settings
from ..utils.helpers import clamp, format_number


class AdjustmentEngine:
    """Builds the ordered adjustment list and applies it to a base score."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def adjustments_for(
        self,
        metrics: PerformanceMetrics,
        context: ScoringContext,
        score_rules: Sequence[ContextRule] = (),
    ) -> List[PerformanceAdjustment]:
        s = self.settings
        adjustments = []

        for rule in score_rules:
            adjustments.append(
                PerformanceAdjustment(
                    type=AdjustmentType.CONTEXT_RULE,
                    applied=True,
                    value=rule.score_adjustment,
                    reason=rule.description or f"Context rule {rule.id}",
                )
            )

        if context.user_experience == "expert":
            adjustments.append(
                PerformanceAdjustment(
                    type=AdjustmentType.EXPERIENCE_BONUS,
                    applied=True,
                    value=s.expert_bonus,
                    reason="Expert user performance bonus",
                )
            )

        if context.difficulty == Difficulty.ADVANCED.value:
            # Always recorded for advanced work; zero unless the technical bar is met
            earned = metrics.technical_accuracy >= s.advanced_technical_threshold
            adjustments.append(
                PerformanceAdjustment(
                    type=AdjustmentType.DIFFICULTY_MODIFIER,
                    applied=earned,
                    value=s.advanced_bonus if earned else 0.0,
                    reason=(
                        "Advanced scenario excellence bonus"
                        if earned
                        else "Advanced scenario: technical accuracy below "
                        f"{format_number(s.advanced_technical_threshold)}, no bonus"
                    ),
                )
            )

        if metrics.resolution_time > s.slow_resolution_minutes:
            adjustments.append(
                PerformanceAdjustment(
                    type=AdjustmentType.TIME_PENALTY,
                    applied=True,
                    value=s.slow_resolution_penalty,
                    reason="Resolution time exceeded "
                    f"{format_number(s.slow_resolution_minutes)} minute target",
                )
            )

        return adjustments

    def apply(
        self, base_score: float, adjustments: Sequence[PerformanceAdjustment]
    ) -> Tuple[float, float]:
        """Returns (final score clipped to [0, 100], total delta applied)."""
        delta = sum(a.value for a in adjustments if a.applied)
        return round(clamp(base_score + delta), 2), delta
