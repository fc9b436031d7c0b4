# src/xp_engine/engine/models.py
"""Pydantic models for the performance and XP scoring engine.

Attribute names are snake_case; every model also accepts and emits the
camelCase names used by the rest of the training platform
(``model_dump(by_alias=True)``).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..utils.helpers import now_utc


class EngineModel(BaseModel):
    """Closed record: unknown fields are rejected at the boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class FrozenModel(EngineModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Enums
# =============================================================================


class Dimension(str, Enum):
    """The four weighted numeric performance dimensions."""

    TECHNICAL_ACCURACY = "technicalAccuracy"
    COMMUNICATION_QUALITY = "communicationQuality"
    CUSTOMER_SATISFACTION = "customerSatisfaction"
    PROCESS_COMPLIANCE = "processCompliance"

    @property
    def attr(self) -> str:
        """Snake-case attribute name on metrics and weights models."""
        return _DIMENSION_ATTRS[self]


_DIMENSION_ATTRS = {
    Dimension.TECHNICAL_ACCURACY: "technical_accuracy",
    Dimension.COMMUNICATION_QUALITY: "communication_quality",
    Dimension.CUSTOMER_SATISFACTION: "customer_satisfaction",
    Dimension.PROCESS_COMPLIANCE: "process_compliance",
}


class ActivityType(str, Enum):
    TICKET_COMPLETION = "ticket_completion"
    VERIFICATION = "verification"
    DOCUMENTATION = "documentation"
    CUSTOMER_COMMUNICATION = "customer_communication"
    LEARNING_PROGRESS = "learning_progress"
    KNOWLEDGE_SEARCH = "knowledge_search"


class Difficulty(str, Enum):
    STARTER = "starter"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContextField(str, Enum):
    """Context attributes a rule condition can inspect."""

    ACTIVITY_TYPE = "activityType"
    DIFFICULTY = "difficulty"
    USER_EXPERIENCE = "userExperience"
    TIME_OF_DAY = "timeOfDay"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IN_RANGE = "in_range"


class AdjustmentType(str, Enum):
    CONTEXT_RULE = "context_rule"
    EXPERIENCE_BONUS = "experience_bonus"
    DIFFICULTY_MODIFIER = "difficulty_modifier"
    TIME_PENALTY = "time_penalty"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class Significance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Metrics and weights
# =============================================================================


class PerformanceMetrics(FrozenModel):
    """Raw metrics for one evaluated activity.

    Numeric dimensions are expected in 0-100 and resolution time to be
    non-negative, but neither is enforced here: out-of-range values still
    score (clipped) and are reported by ``MetricValidator``.
    """

    technical_accuracy: float
    communication_quality: float
    customer_satisfaction: float
    process_compliance: float
    verification_success: bool
    first_time_resolution: bool
    knowledge_sharing: bool
    resolution_time: float

    def dimension(self, dimension: Dimension) -> float:
        return getattr(self, dimension.attr)

    def dimension_scores(self) -> Dict[str, float]:
        """Numeric dimensions keyed by their camelCase name."""
        return {d.value: self.dimension(d) for d in Dimension}


class PerformanceWeights(FrozenModel):
    """One weight per numeric dimension; a valid vector sums to 1.0."""

    technical_accuracy: float
    communication_quality: float
    customer_satisfaction: float
    process_compliance: float

    def weight(self, dimension: Dimension) -> float:
        return getattr(self, dimension.attr)

    def as_dict(self) -> Dict[str, float]:
        return {d.value: self.weight(d) for d in Dimension}

    def total(self) -> float:
        return sum(self.weight(d) for d in Dimension)

    def normalized(self) -> "PerformanceWeights":
        """Proportionally rescales the vector to sum to 1.0."""
        total = self.total()
        if total <= 0:
            return self
        return PerformanceWeights(
            **{d.attr: self.weight(d) / total for d in Dimension}
        )

    def with_overrides(self, override: "WeightOverride") -> "PerformanceWeights":
        """Replaces only the dimensions the override names."""
        changes = {
            d.attr: getattr(override, d.attr)
            for d in Dimension
            if getattr(override, d.attr) is not None
        }
        return self.model_copy(update=changes)

    @classmethod
    def balanced(cls) -> "PerformanceWeights":
        return cls(
            technical_accuracy=0.25,
            communication_quality=0.25,
            customer_satisfaction=0.25,
            process_compliance=0.25,
        )


class WeightOverride(FrozenModel):
    """Partial weight vector used by context rules."""

    technical_accuracy: Optional[float] = None
    communication_quality: Optional[float] = None
    customer_satisfaction: Optional[float] = None
    process_compliance: Optional[float] = None


# =============================================================================
# Context and configurations
# =============================================================================


class ScoringContext(FrozenModel):
    """Per-call context used to select configurations and rules."""

    activity_type: Optional[str] = None
    difficulty: Optional[str] = None
    user_experience: Optional[str] = None
    time_of_day: Optional[int] = Field(None, ge=0, le=23)
    user_id: Optional[str] = None
    customer_type: Optional[str] = None

    def value_for(self, field: ContextField) -> Any:
        return {
            ContextField.ACTIVITY_TYPE: self.activity_type,
            ContextField.DIFFICULTY: self.difficulty,
            ContextField.USER_EXPERIENCE: self.user_experience,
            ContextField.TIME_OF_DAY: self.time_of_day,
        }[field]


class ContextCondition(FrozenModel):
    field: ContextField
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: Any


class ContextRule(FrozenModel):
    """Condition plus either a weight override or a score delta (or both)."""

    id: str
    condition: ContextCondition
    weight_adjustments: Optional[WeightOverride] = None
    score_adjustment: Optional[float] = None
    priority: int = 0
    description: str = ""


class WeightConfiguration(FrozenModel):
    id: str
    name: str
    description: str = ""
    weights: PerformanceWeights
    context_rules: List[ContextRule] = Field(default_factory=list)
    active: bool = True
    priority: int = 0
    valid_from: datetime = Field(default_factory=now_utc)
    valid_until: Optional[datetime] = None
    created_by: str = "system"


class WeightConfigurationInput(EngineModel):
    """Payload for creating a configuration; the store assigns the id."""

    name: str
    description: str = ""
    weights: PerformanceWeights
    context_rules: List[ContextRule] = Field(default_factory=list)
    active: bool = True
    priority: int = 0
    valid_from: datetime = Field(default_factory=now_utc)
    valid_until: Optional[datetime] = None
    created_by: str = "system"


# =============================================================================
# Performance results
# =============================================================================


class Tier(FrozenModel):
    name: str
    min_score: float
    max_score: float
    multiplier: float
    color: str
    badge: str
    description: str = ""


class PerformanceAdjustment(EngineModel):
    type: AdjustmentType
    applied: bool
    value: float
    reason: str


class PerformanceBreakdown(EngineModel):
    base_scores: Dict[str, float]
    weighted_contributions: Dict[str, float]
    adjustments: List[PerformanceAdjustment] = Field(default_factory=list)
    tier: Tier
    final_calculation: str


class PerformanceCalculationResult(EngineModel):
    overall_score: float
    weighted_scores: Dict[str, float]
    applied_weights: PerformanceWeights
    context_rules_applied: List[str] = Field(default_factory=list)
    configuration_id: Optional[str] = None
    breakdown: PerformanceBreakdown
    tier: Tier
    recommendations: List[str] = Field(default_factory=list)


class ValidationResult(EngineModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


# =============================================================================
# XP
# =============================================================================


class ActivityData(FrozenModel):
    type: ActivityType
    scenario_difficulty: Difficulty
    performance_metrics: PerformanceMetrics
    additional_context: Dict[str, Any] = Field(default_factory=dict)


class BonusDetail(EngineModel):
    type: str
    points: int
    reason: str
    criteria: str


class ActivityBreakdown(EngineModel):
    type: str
    base_points: int


class DifficultyBreakdown(EngineModel):
    level: str
    multiplier: float
    adjusted_points: int


class PerformanceXPBreakdown(EngineModel):
    overall: float
    band: str
    multiplier: float
    adjusted_points: int


class FinalBreakdown(EngineModel):
    total_xp: int
    reasoning: str


class XPBreakdown(EngineModel):
    activity: ActivityBreakdown
    difficulty: DifficultyBreakdown
    performance: PerformanceXPBreakdown
    bonuses: List[BonusDetail] = Field(default_factory=list)
    final: FinalBreakdown


class XPCalculationResult(EngineModel):
    base_xp: int = Field(alias="baseXP")
    difficulty_multiplier: float
    performance_multiplier: float
    bonus_xp: int = Field(alias="bonusXP")
    total_xp: int = Field(alias="totalXP")
    breakdown: XPBreakdown
    explanations: List[str]


class XPRange(EngineModel):
    min: int
    max: int
    typical: int


# =============================================================================
# Optimisation and analytics
# =============================================================================


class OptimizationScenario(EngineModel):
    description: str
    current_score: float
    optimized_score: float
    improvement: float


class WeightOptimizationResult(EngineModel):
    current_weights: PerformanceWeights
    suggested_weights: PerformanceWeights
    reasoning: List[str] = Field(default_factory=list)
    expected_improvement: float
    confidence_score: float = Field(ge=0, le=100)
    test_scenarios: List[OptimizationScenario] = Field(default_factory=list)


class PerformanceTrend(EngineModel):
    metric: str
    direction: TrendDirection
    rate: float
    significance: Significance
    period: str


class PerformanceOutlier(EngineModel):
    sample_index: int
    metric: str
    value: float
    deviation: float
    context: str


class PerformanceAnalytics(EngineModel):
    average_scores: Dict[str, float] = Field(default_factory=dict)
    score_distribution: Dict[str, float] = Field(default_factory=dict)
    correlation_matrix: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    trends: List[PerformanceTrend] = Field(default_factory=list)
    outliers: List[PerformanceOutlier] = Field(default_factory=list)
