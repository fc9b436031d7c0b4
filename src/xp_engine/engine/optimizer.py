# src/xp_engine/engine/optimizer.py

"""Suggests weight vectors from historical metric samples."""

import logging
from typing import Dict, List, Optional, Sequence

from .analytics import MetricsBatch, SampleInput
from .models import (
    Dimension,
    OptimizationScenario,
    PerformanceWeights,
    ScoringContext,
    WeightOptimizationResult,
)
from .resolver import WeightResolver
from .scorer import ScoreCalculator
from ..config.settings import Settings
from ..utils.helpers import clamp, humanize, safe_correlation, safe_mean, safe_pstdev

logger = logging.getLogger(__name__)

# Weight moves smaller than this are not worth a reasoning line
REPORTABLE_CHANGE = 0.01


class WeightOptimizer:
    """Shifts weight toward the dimensions that best separate performers.

    A dimension's signal is its spread across the sample, boosted by how
    strongly it tracks the unweighted overall average. The suggestion blends
    the current vector with the signal shares, is bounded per dimension, and
    is discarded if replaying the sample under it lowers the mean score.
    """

    def __init__(
        self,
        resolver: WeightResolver,
        scorer: Optional[ScoreCalculator] = None,
        settings: Optional[Settings] = None,
    ):
        self.resolver = resolver
        self.scorer = scorer or ScoreCalculator()
        self.settings = settings or Settings()

    def _signals(self, batch: MetricsBatch) -> Dict[Dimension, float]:
        overall = [self.scorer.simple_average(s) for s in batch.samples]
        return {
            d: safe_pstdev(batch.series[d.value])
            * (1 + abs(safe_correlation(batch.series[d.value], overall)))
            for d in Dimension
        }

    def _blend(
        self, current: PerformanceWeights, signals: Dict[Dimension, float]
    ) -> PerformanceWeights:
        s = self.settings
        total_signal = sum(signals.values())
        rate = s.optimizer_learning_rate
        blended = {
            d.attr: clamp(
                (1 - rate) * current.weight(d) + rate * signals[d] / total_signal,
                s.optimizer_min_weight,
                s.optimizer_max_weight,
            )
            for d in Dimension
        }
        normalized = PerformanceWeights(**blended).normalized()
        return PerformanceWeights(
            **{d.attr: round(normalized.weight(d), 4) for d in Dimension}
        )

    def _scenario_indices(self, size: int) -> List[int]:
        """Up to ``optimizer_max_scenarios`` evenly spaced sample positions."""
        limit = max(1, self.settings.optimizer_max_scenarios)
        if size <= limit:
            return list(range(size))
        if limit == 1:
            return [0]
        return sorted({round(i * (size - 1) / (limit - 1)) for i in range(limit)})

    def _replay(
        self,
        batch: MetricsBatch,
        current: PerformanceWeights,
        suggested: PerformanceWeights,
    ) -> List[OptimizationScenario]:
        scenarios = []
        for index in self._scenario_indices(len(batch)):
            sample = batch.samples[index]
            current_score = self.scorer.score(sample, current)
            optimized_score = self.scorer.score(sample, suggested)
            scenarios.append(
                OptimizationScenario(
                    description=f"Historical sample {index + 1}",
                    current_score=current_score,
                    optimized_score=optimized_score,
                    improvement=round(optimized_score - current_score, 2),
                )
            )
        return scenarios

    def _confidence(self, size: int, scenarios: Sequence[OptimizationScenario]) -> float:
        if size == 0:
            return 0.0
        size_factor = min(1.0, size / max(1, self.settings.optimizer_full_confidence_samples))
        if scenarios:
            consistency = sum(1 for s in scenarios if s.improvement >= 0) / len(scenarios)
        else:
            consistency = 1.0
        return round(clamp(100 * size_factor * (0.5 + 0.5 * consistency)), 1)

    def _explain(
        self,
        current: PerformanceWeights,
        suggested: PerformanceWeights,
        batch: MetricsBatch,
    ) -> List[str]:
        overall = [self.scorer.simple_average(s) for s in batch.samples]
        reasoning = []
        for d in Dimension:
            change = suggested.weight(d) - current.weight(d)
            if abs(change) <= REPORTABLE_CHANGE:
                continue
            series = batch.series[d.value]
            reasoning.append(
                f"{humanize(d.value).capitalize()} weight "
                f"{'increased' if change > 0 else 'decreased'} by {abs(change):.2f} "
                f"(spread {safe_pstdev(series):.1f}, correlation "
                f"{safe_correlation(series, overall):.2f} with overall performance "
                f"across {len(batch)} samples)"
            )
        return reasoning

    def optimize_weights(
        self,
        context: Optional[ScoringContext],
        historical: Sequence[SampleInput],
    ) -> WeightOptimizationResult:
        current = self.resolver.resolve(context).weights

        if not historical:
            return WeightOptimizationResult(
                current_weights=current,
                suggested_weights=current,
                reasoning=["No historical samples provided; current weights retained"],
                expected_improvement=0.0,
                confidence_score=0.0,
                test_scenarios=[],
            )

        batch = MetricsBatch(historical)
        signals = self._signals(batch)

        if sum(signals.values()) == 0:
            suggested = current
            reasoning = [
                "Historical samples show no variation between dimensions; "
                "current weights retained"
            ]
        else:
            suggested = self._blend(current, signals)
            reasoning = self._explain(current, suggested, batch)

        scenarios = self._replay(batch, current, suggested)
        expected = safe_mean([s.improvement for s in scenarios])

        if expected < 0:
            logger.info(
                "Discarding suggested weights: mean replayed score would drop by %.2f",
                -expected,
            )
            reasoning = [
                f"Suggested redistribution would lower the mean replayed score by "
                f"{-expected:.2f}; current weights retained"
            ]
            suggested = current
            scenarios = self._replay(batch, current, suggested)
            expected = 0.0

        if not reasoning:
            reasoning = ["Current weights already match the observed performance signal"]

        return WeightOptimizationResult(
            current_weights=current,
            suggested_weights=suggested,
            reasoning=reasoning,
            expected_improvement=round(expected, 2),
            confidence_score=self._confidence(len(batch), scenarios),
            test_scenarios=scenarios,
        )
