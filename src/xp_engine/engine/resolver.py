# src/xp_engine/engine/resolver.py

"""Resolves the effective weight vector for a scoring context."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from .models import (
    ConditionOperator,
    ContextCondition,
    ContextRule,
    PerformanceWeights,
    ScoringContext,
    WeightConfiguration,
)
from ..data.store import WeightConfigurationStore
from ..utils.helpers import now_utc

logger = logging.getLogger(__name__)


@dataclass
class ResolvedWeights:
    """Effective weights plus what produced them."""

    weights: PerformanceWeights
    configuration: Optional[WeightConfiguration] = None
    applied_rules: List[ContextRule] = field(default_factory=list)

    @property
    def rule_descriptions(self) -> List[str]:
        return [rule.description or rule.id for rule in self.applied_rules]

    @property
    def score_rules(self) -> List[ContextRule]:
        """Applied rules that carry a scalar score adjustment."""
        return [r for r in self.applied_rules if r.score_adjustment is not None]


def _plain(value: Any) -> Any:
    # Enum members compare by their value
    return getattr(value, "value", value)


def condition_matches(condition: ContextCondition, context: ScoringContext) -> bool:
    """Evaluates one rule condition; a missing context value never matches."""
    actual = _plain(context.value_for(condition.field))
    if actual is None:
        return False
    expected = _plain(condition.value)

    try:
        if condition.operator == ConditionOperator.EQUALS:
            return actual == expected
        if condition.operator == ConditionOperator.CONTAINS:
            if isinstance(expected, (list, tuple, set)):
                return actual in expected
            return str(expected) in str(actual)
        if condition.operator == ConditionOperator.GREATER_THAN:
            return float(actual) > float(expected)
        if condition.operator == ConditionOperator.LESS_THAN:
            return float(actual) < float(expected)
        if condition.operator == ConditionOperator.IN_RANGE:
            low, high = expected
            return float(low) <= float(actual) <= float(high)
    except (TypeError, ValueError):
        logger.debug("Condition %s not comparable with %r", condition, actual)
        return False
    return False


class WeightResolver:
    """Merges a configuration's weights with its matching context rules."""

    def __init__(
        self,
        store: WeightConfigurationStore,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.clock = clock

    def _is_applicable(self, config: WeightConfiguration, context: ScoringContext) -> bool:
        """General configurations (no rules) apply everywhere; others need a hit."""
        if not config.context_rules:
            return True
        return any(condition_matches(r.condition, context) for r in config.context_rules)

    def select_configuration(
        self, context: ScoringContext
    ) -> Optional[WeightConfiguration]:
        """Highest-priority active, unexpired, applicable configuration."""
        candidates = [
            c for c in self.store.candidates(self.clock()) if self._is_applicable(c, context)
        ]
        if not candidates:
            return None
        # max() keeps the first of equal priorities, i.e. the oldest
        return max(candidates, key=lambda c: c.priority)

    def resolve(
        self,
        context: Optional[ScoringContext] = None,
        base_weights: Optional[PerformanceWeights] = None,
    ) -> ResolvedWeights:
        context = context or ScoringContext()
        config = self.select_configuration(context)

        if base_weights is not None:
            weights = base_weights
        elif config is not None:
            weights = config.weights
        else:
            weights = PerformanceWeights.balanced()

        applied = []
        rules = config.context_rules if config else []
        # Ascending priority so the most important override is written last
        for rule in sorted(rules, key=lambda r: r.priority):
            if not condition_matches(rule.condition, context):
                continue
            if rule.weight_adjustments is not None:
                weights = weights.with_overrides(rule.weight_adjustments)
            applied.append(rule)

        if applied:
            logger.debug(
                "Applied context rules %s from %s",
                [r.id for r in applied],
                config.id,
            )

        return ResolvedWeights(
            weights=weights.normalized(), configuration=config, applied_rules=applied
        )
