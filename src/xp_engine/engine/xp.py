# src/xp_engine/engine/xp.py

"""XP calculation: base points scaled by difficulty and performance, plus bonuses."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .bonuses import BonusEngine
from .models import (
    ActivityBreakdown,
    ActivityData,
    ActivityType,
    BonusDetail,
    Difficulty,
    DifficultyBreakdown,
    FinalBreakdown,
    PerformanceXPBreakdown,
    ValidationResult,
    XPBreakdown,
    XPCalculationResult,
    XPRange,
)
from .scorer import ScoreCalculator
from .validator import MetricValidator
from ..config.settings import Settings
from ..utils.helpers import format_number, round_half_up

logger = logging.getLogger(__name__)

BASE_XP_VALUES = {
    ActivityType.TICKET_COMPLETION: 20,
    ActivityType.VERIFICATION: 8,
    ActivityType.DOCUMENTATION: 5,
    ActivityType.CUSTOMER_COMMUNICATION: 3,
    ActivityType.LEARNING_PROGRESS: 10,
    ActivityType.KNOWLEDGE_SEARCH: 2,
}

DIFFICULTY_MULTIPLIERS = {
    Difficulty.STARTER: 1.0,
    Difficulty.INTERMEDIATE: 1.5,
    Difficulty.ADVANCED: 2.0,
}

# (inclusive lower bound, band, multiplier), highest first
PERFORMANCE_BANDS = (
    (90.0, "excellent", 1.5),
    (75.0, "good", 1.0),
    (60.0, "acceptable", 0.8),
    (float("-inf"), "poor", 0.5),
)

MAX_PERFORMANCE_MULTIPLIER = PERFORMANCE_BANDS[0][2]

ActivityInput = Union[ActivityData, Mapping[str, Any]]


class XPCalculator:
    """Awards XP for completed activities."""

    def __init__(
        self,
        bonus_engine: Optional[BonusEngine] = None,
        scorer: Optional[ScoreCalculator] = None,
        validator: Optional[MetricValidator] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.bonus_engine = bonus_engine or BonusEngine(self.settings)
        self.scorer = scorer or ScoreCalculator()
        self.validator = validator or MetricValidator()

    def get_performance_band(self, score: float) -> Tuple[str, float]:
        """(band name, multiplier) for an unweighted performance average."""
        for lower, band, multiplier in PERFORMANCE_BANDS:
            if score >= lower:
                return band, multiplier
        return PERFORMANCE_BANDS[-1][1], PERFORMANCE_BANDS[-1][2]

    def scaled_points(
        self, base_xp: int, difficulty: Difficulty, performance_multiplier: float
    ) -> int:
        """Rounded ``base * difficulty * performance`` before bonuses.

        Every activity is worth at least one point, and each difficulty step
        is worth at least one point more than the step below it.
        """
        points = 0
        for level in Difficulty:
            points = max(
                points + 1,
                round_half_up(base_xp * DIFFICULTY_MULTIPLIERS[level] * performance_multiplier),
            )
            if level == difficulty:
                break
        return points

    def calculate_xp(self, activity: ActivityInput) -> XPCalculationResult:
        """Calculate XP for a given activity.

        ``total = scaled_points(base, difficulty, performance) + bonuses``.
        """
        activity = ActivityData.model_validate(activity)

        base_xp = BASE_XP_VALUES[activity.type]
        difficulty_multiplier = DIFFICULTY_MULTIPLIERS[activity.scenario_difficulty]
        overall = self.scorer.simple_average(activity.performance_metrics)
        band, performance_multiplier = self.get_performance_band(overall)

        bonuses = self.bonus_engine.evaluate(activity)
        bonus_xp = sum(b.points for b in bonuses)

        difficulty_points = round_half_up(base_xp * difficulty_multiplier)
        scaled = self.scaled_points(base_xp, activity.scenario_difficulty, performance_multiplier)
        total_xp = scaled + bonus_xp

        breakdown = XPBreakdown(
            activity=ActivityBreakdown(
                type=activity.type.value.replace("_", " ").upper(),
                base_points=base_xp,
            ),
            difficulty=DifficultyBreakdown(
                level=activity.scenario_difficulty.value.upper(),
                multiplier=difficulty_multiplier,
                adjusted_points=difficulty_points,
            ),
            performance=PerformanceXPBreakdown(
                overall=overall,
                band=band,
                multiplier=performance_multiplier,
                adjusted_points=scaled,
            ),
            bonuses=bonuses,
            final=FinalBreakdown(
                total_xp=total_xp,
                reasoning=(
                    f"Base ({base_xp}) × Difficulty ({format_number(difficulty_multiplier)}x) "
                    f"× Performance ({format_number(performance_multiplier)}x) "
                    f"+ Bonuses ({bonus_xp}) = {total_xp} XP"
                ),
            ),
        )

        logger.debug(
            "XP for %s/%s: %s (band %s, bonuses %s)",
            activity.type.value,
            activity.scenario_difficulty.value,
            total_xp,
            band,
            bonus_xp,
        )

        return XPCalculationResult(
            base_xp=base_xp,
            difficulty_multiplier=difficulty_multiplier,
            performance_multiplier=performance_multiplier,
            bonus_xp=bonus_xp,
            total_xp=total_xp,
            breakdown=breakdown,
            explanations=self._explain(breakdown),
        )

    def _explain(self, breakdown: XPBreakdown) -> List[str]:
        """Human-readable trail; the first line always states the base XP."""
        explanations = [
            f"You earned {breakdown.activity.base_points} base XP for completing "
            f"a {breakdown.activity.type.lower()} activity."
        ]

        difficulty = breakdown.difficulty
        if difficulty.multiplier != 1.0:
            direction = "increased" if difficulty.multiplier > 1.0 else "decreased"
            explanations.append(
                f"Your XP was {direction} by {format_number(difficulty.multiplier)}x "
                f"due to {difficulty.level.lower()} difficulty level."
            )

        performance = breakdown.performance
        if performance.multiplier != 1.0:
            explanations.append(
                f"Your performance score of {format_number(performance.overall)}% resulted "
                f"in a {format_number(performance.multiplier)}x multiplier for "
                f"{performance.band} performance."
            )

        if breakdown.bonuses:
            explanations.append(
                f"You earned {sum(b.points for b in breakdown.bonuses)} bonus XP for: "
                f"{', '.join(b.type for b in breakdown.bonuses)}."
            )

        explanations.append(breakdown.final.reasoning)
        return explanations

    def validate_activity_data(self, activity: ActivityInput) -> ValidationResult:
        return self.validator.validate_activity_data(activity)

    def calculate_max_possible_xp(
        self, activity_type: Union[ActivityType, str], difficulty: Union[Difficulty, str]
    ) -> int:
        """Theoretical maximum: excellent performance with every bonus earned."""
        base_xp = BASE_XP_VALUES[ActivityType(activity_type)]
        return (
            self.scaled_points(base_xp, Difficulty(difficulty), MAX_PERFORMANCE_MULTIPLIER)
            + self.bonus_engine.max_bonus_points()
        )

    def get_xp_ranges(self) -> Dict[str, XPRange]:
        """Static min / max / typical XP per activity type."""
        poor = PERFORMANCE_BANDS[-1][2]
        good = next(m for _, band, m in PERFORMANCE_BANDS if band == "good")
        ranges = {}
        for activity_type, base_xp in BASE_XP_VALUES.items():
            ranges[activity_type.value] = XPRange(
                min=self.scaled_points(base_xp, Difficulty.STARTER, poor),
                max=self.calculate_max_possible_xp(activity_type, Difficulty.ADVANCED),
                typical=self.scaled_points(base_xp, Difficulty.INTERMEDIATE, good),
            )
        return ranges

    def get_bonus_catalog(self) -> List[BonusDetail]:
        """Every bonus that can be earned, with its criteria."""
        return [rule.detail() for rule in self.bonus_engine.rules]
