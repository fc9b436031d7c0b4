# src/xp_engine/engine/bonuses.py

"""Fixed bonus rules evaluated against raw metrics and activity context."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import ActivityData, BonusDetail
from ..config.settings import Settings

Predicate = Callable[[ActivityData, Settings], bool]


@dataclass(frozen=True)
class BonusRule:
    type: str
    points: int
    reason: str
    criteria: str
    predicate: Predicate

    def detail(self) -> BonusDetail:
        return BonusDetail(
            type=self.type, points=self.points, reason=self.reason, criteria=self.criteria
        )


def _perfect_verification(activity: ActivityData, _: Settings) -> bool:
    m = activity.performance_metrics
    return m.verification_success and m.technical_accuracy >= 90


def _outstanding_service(activity: ActivityData, _: Settings) -> bool:
    m = activity.performance_metrics
    return m.customer_satisfaction >= 90 and m.communication_quality >= 85


def _technical_excellence(activity: ActivityData, _: Settings) -> bool:
    m = activity.performance_metrics
    return m.technical_accuracy >= 90 and m.process_compliance >= 85


def _first_try(activity: ActivityData, _: Settings) -> bool:
    return activity.performance_metrics.first_time_resolution


def _knowledge_sharing(activity: ActivityData, _: Settings) -> bool:
    return activity.performance_metrics.knowledge_sharing


def _speed(activity: ActivityData, settings: Settings) -> bool:
    return 0 <= activity.performance_metrics.resolution_time <= settings.speed_bonus_minutes


def _innovation(activity: ActivityData, _: Settings) -> bool:
    m = activity.performance_metrics
    return (
        bool(activity.additional_context.get("innovativeApproach"))
        and m.technical_accuracy >= 85
        and m.customer_satisfaction >= 85
    )


BONUS_RULES = (
    BonusRule(
        "Perfect Verification",
        10,
        "Achieved perfect customer verification with high technical accuracy",
        "Verification success + Technical accuracy ≥ 90%",
        _perfect_verification,
    ),
    BonusRule(
        "Outstanding Customer Service",
        15,
        "Delivered exceptional customer service experience",
        "Customer satisfaction ≥ 90% + Communication quality ≥ 85%",
        _outstanding_service,
    ),
    BonusRule(
        "Technical Excellence",
        12,
        "Demonstrated outstanding technical competency",
        "Technical accuracy ≥ 90% + Process compliance ≥ 85%",
        _technical_excellence,
    ),
    BonusRule(
        "First-Try Resolution",
        8,
        "Resolved issue on first attempt without escalation",
        "Issue resolved without requiring additional attempts",
        _first_try,
    ),
    BonusRule(
        "Knowledge Sharing",
        5,
        "Contributed knowledge or helped others learn",
        "Demonstrated knowledge sharing behavior",
        _knowledge_sharing,
    ),
    BonusRule(
        "Speed Bonus",
        5,
        "Completed the activity efficiently within time expectations",
        "Resolution time within the speed target (30 minutes by default)",
        _speed,
    ),
    BonusRule(
        "Innovation Bonus",
        8,
        "Used creative problem-solving approach",
        "Innovative approach + Technical accuracy ≥ 85% + Customer satisfaction ≥ 85%",
        _innovation,
    ),
)


class BonusEngine:
    """Every rule is independent; all that hold fire together."""

    def __init__(self, settings: Optional[Settings] = None, rules=BONUS_RULES):
        self.settings = settings or Settings()
        self.rules = tuple(rules)

    def evaluate(self, activity: ActivityData) -> List[BonusDetail]:
        return [rule.detail() for rule in self.rules if rule.predicate(activity, self.settings)]

    def total(self, activity: ActivityData) -> int:
        return sum(b.points for b in self.evaluate(activity))

    def max_bonus_points(self) -> int:
        """Points if every rule fired at once."""
        return sum(rule.points for rule in self.rules)
