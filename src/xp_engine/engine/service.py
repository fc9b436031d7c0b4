# src/xp_engine/engine/service.py

"""Entry points for the scoring engine.

``create_engine`` builds an isolated set of collaborators around one
configuration repository, so tests and tenants never share state.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from .adjustments import AdjustmentEngine
from .analytics import AnalyticsEngine, SampleInput
from .bonuses import BonusEngine
from .models import (
    PerformanceAnalytics,
    PerformanceBreakdown,
    PerformanceCalculationResult,
    PerformanceMetrics,
    PerformanceWeights,
    ScoringContext,
    Tier,
    ValidationResult,
    WeightConfiguration,
    WeightOptimizationResult,
)
from .optimizer import WeightOptimizer
from .recommendations import RecommendationGenerator
from .resolver import WeightResolver
from .scorer import ScoreCalculator
from .tiers import TierClassifier
from .validator import MetricValidator
from .xp import XPCalculator
from ..config.settings import Settings
from ..data.store import ConfigurationRepository, WeightConfigurationStore
from ..utils.helpers import format_number, now_utc

logger = logging.getLogger(__name__)

ContextInput = Union[ScoringContext, Mapping[str, Any], None]
MetricsInput = Union[PerformanceMetrics, Mapping[str, Any]]


def _context(context: ContextInput) -> ScoringContext:
    if context is None:
        return ScoringContext()
    return ScoringContext.model_validate(context)


class PerformanceWeightingService:
    """Weighted performance scoring with configurable, contextual weights."""

    def __init__(
        self,
        store: WeightConfigurationStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.settings = settings or Settings()
        self.store = store
        self.validator = store.validator
        self.resolver = WeightResolver(store, clock=clock)
        self.scorer = ScoreCalculator()
        self.classifier = TierClassifier()
        self.adjustments = AdjustmentEngine(self.settings)
        self.recommender = RecommendationGenerator(self.settings.recommendation_threshold)
        self.optimizer = WeightOptimizer(self.resolver, self.scorer, self.settings)
        self.analytics = AnalyticsEngine(self.settings, self.scorer, self.classifier)

    def calculate_performance_score(
        self, metrics: MetricsInput, context: ContextInput = None
    ) -> PerformanceCalculationResult:
        """Score metrics under the weights that apply to ``context``.

        Out-of-range metrics are clipped rather than rejected; use
        ``validate_performance_metrics`` to surface them.
        """
        metrics = PerformanceMetrics.model_validate(metrics)
        context = _context(context)

        resolved = self.resolver.resolve(context)
        weights = resolved.weights
        score = self.scorer.compute(metrics, weights)

        adjustments = self.adjustments.adjustments_for(metrics, context, resolved.score_rules)
        final_score, delta = self.adjustments.apply(score.overall_score, adjustments)

        tier = self.classifier.classify(final_score)
        recommendations = self.recommender.generate(metrics, weights)

        breakdown = PerformanceBreakdown(
            base_scores=score.base_scores,
            weighted_contributions=score.weighted_scores,
            adjustments=adjustments,
            tier=tier,
            final_calculation=(
                f"Base: {format_number(score.overall_score)} + Adjustments: "
                f"{format_number(delta)} = {format_number(final_score)}"
            ),
        )

        logger.debug(
            "Scored %.2f (%s) with configuration %s",
            final_score,
            tier.name,
            resolved.configuration.id if resolved.configuration else "built-in",
        )

        return PerformanceCalculationResult(
            overall_score=final_score,
            weighted_scores=score.weighted_scores,
            applied_weights=weights,
            context_rules_applied=resolved.rule_descriptions,
            configuration_id=resolved.configuration.id if resolved.configuration else None,
            breakdown=breakdown,
            tier=tier,
            recommendations=recommendations,
        )

    def resolve_weights(
        self, context: ContextInput = None, base_weights: Optional[PerformanceWeights] = None
    ) -> PerformanceWeights:
        return self.resolver.resolve(_context(context), base_weights).weights

    def optimize_weights(
        self, context: ContextInput, historical: Sequence[SampleInput]
    ) -> WeightOptimizationResult:
        return self.optimizer.optimize_weights(_context(context), historical)

    def get_performance_analytics(
        self, samples: Sequence[SampleInput], period: str = "month"
    ) -> PerformanceAnalytics:
        return self.analytics.get_performance_analytics(samples, period)

    def create_weight_configuration(self, data) -> WeightConfiguration:
        return self.store.create(data)

    def update_weight_configuration(
        self, config_id: str, updates: Mapping[str, Any]
    ) -> Optional[WeightConfiguration]:
        return self.store.update(config_id, updates)

    def get_weight_configurations(self) -> List[WeightConfiguration]:
        return self.store.list()

    def get_weight_configuration(self, context: ContextInput = None) -> Optional[WeightConfiguration]:
        """The configuration that would be used for ``context``."""
        return self.resolver.select_configuration(_context(context))

    def validate_performance_metrics(
        self,
        metrics: MetricsInput,
        weights: Union[PerformanceWeights, Mapping[str, Any], None] = None,
    ) -> ValidationResult:
        return self.validator.validate_performance_metrics(metrics, weights)

    def get_tiers(self) -> List[Tier]:
        return self.classifier.tiers()


@dataclass
class Engine:
    """Everything one tenant needs, sharing a single configuration store."""

    settings: Settings
    store: WeightConfigurationStore
    performance: PerformanceWeightingService
    xp: XPCalculator


def create_engine(
    repository: Optional[ConfigurationRepository] = None,
    settings: Optional[Settings] = None,
    seed: bool = True,
    clock: Callable[[], datetime] = now_utc,
) -> Engine:
    """Build an engine around ``repository`` (in-memory when omitted)."""
    settings = settings or Settings()
    store = WeightConfigurationStore(repository, MetricValidator())
    if seed and not store.all():
        store.seed_defaults()

    performance = PerformanceWeightingService(store, settings, clock=clock)
    xp = XPCalculator(
        bonus_engine=BonusEngine(settings),
        scorer=performance.scorer,
        validator=store.validator,
        settings=settings,
    )
    return Engine(settings=settings, store=store, performance=performance, xp=xp)
