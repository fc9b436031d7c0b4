# src/xp_engine/engine/analytics.py

from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .models import (
    Dimension,
    PerformanceAnalytics,
    PerformanceMetrics,
    PerformanceOutlier,
    PerformanceTrend,
    Significance,
    TrendDirection,
)
from .scorer import ScoreCalculator
from .tiers import TierClassifier
from ..config.settings import Settings
from ..utils.helpers import (
    linear_slope,
    safe_correlation,
    safe_mean,
    safe_pstdev,
)

SampleInput = Union[PerformanceMetrics, Mapping[str, Any]]


class MetricsBatch:
    """Column view over a batch of samples, one series per dimension."""

    def __init__(self, samples: Sequence[SampleInput]):
        self.samples = [PerformanceMetrics.model_validate(s) for s in samples]
        self.series: Dict[str, List[float]] = {
            d.value: [s.dimension(d) for s in self.samples] for d in Dimension
        }

    def __len__(self) -> int:
        return len(self.samples)


class AnalyticsEngine:
    """Calculates aggregate statistics over a batch of metric samples."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scorer: Optional[ScoreCalculator] = None,
        classifier: Optional[TierClassifier] = None,
    ):
        self.settings = settings or Settings()
        self.scorer = scorer or ScoreCalculator()
        self.classifier = classifier or TierClassifier()

    def compute_averages(self, batch: MetricsBatch) -> Dict[str, float]:
        """Mean score per dimension."""
        return {name: round(safe_mean(values), 2) for name, values in batch.series.items()}

    def compute_distribution(self, batch: MetricsBatch) -> Dict[str, float]:
        """Share of samples per tier, by unweighted average score."""
        counts = Counter(
            self.classifier.classify(self.scorer.simple_average(s)).name
            for s in batch.samples
        )
        return {
            tier.name: round(counts.get(tier.name, 0) / len(batch), 4)
            for tier in self.classifier.tiers()
        }

    def compute_correlation_matrix(self, batch: MetricsBatch) -> Dict[str, Dict[str, float]]:
        """Symmetric Pearson matrix; constant series correlate 0 with everything else."""
        names = list(batch.series)
        matrix: Dict[str, Dict[str, float]] = {name: {} for name in names}
        for i, a in enumerate(names):
            matrix[a][a] = 1.0
            for b in names[i + 1 :]:
                r = round(safe_correlation(batch.series[a], batch.series[b]), 4)
                matrix[a][b] = r
                matrix[b][a] = r
        return matrix

    def compute_trends(self, batch: MetricsBatch, period: str = "month") -> List[PerformanceTrend]:
        """Least-squares slope per dimension over sample order."""
        band = self.settings.trend_stable_band
        trends = []
        for name, values in batch.series.items():
            slope = linear_slope(values)
            if slope > band:
                direction = TrendDirection.IMPROVING
            elif slope < -band:
                direction = TrendDirection.DECLINING
            else:
                direction = TrendDirection.STABLE

            magnitude = abs(slope)
            if magnitude < 1:
                significance = Significance.LOW
            elif magnitude < 2:
                significance = Significance.MEDIUM
            else:
                significance = Significance.HIGH

            trends.append(
                PerformanceTrend(
                    metric=name,
                    direction=direction,
                    rate=round(slope, 4),
                    significance=significance,
                    period=period,
                )
            )
        return trends

    def compute_outliers(self, batch: MetricsBatch) -> List[PerformanceOutlier]:
        """Samples whose z-score on a dimension exceeds the configured magnitude."""
        cutoff = self.settings.outlier_z_threshold
        outliers = []
        for name, values in batch.series.items():
            mean = safe_mean(values)
            spread = safe_pstdev(values)
            if spread == 0:
                continue
            for index, value in enumerate(values):
                z = (value - mean) / spread
                if abs(z) > cutoff:
                    outliers.append(
                        PerformanceOutlier(
                            sample_index=index,
                            metric=name,
                            value=value,
                            deviation=round(z, 4),
                            context=(
                                f"{'above' if z > 0 else 'below'} the batch mean "
                                f"of {mean:.1f} by {abs(z):.2f} standard deviations"
                            ),
                        )
                    )
        outliers.sort(key=lambda o: (o.sample_index, o.metric))
        return outliers

    def get_performance_analytics(
        self, samples: Sequence[SampleInput], period: str = "month"
    ) -> PerformanceAnalytics:
        """Orchestrates every statistic; an empty batch yields empty structures."""
        if not samples:
            return PerformanceAnalytics()

        batch = MetricsBatch(samples)
        return PerformanceAnalytics(
            average_scores=self.compute_averages(batch),
            score_distribution=self.compute_distribution(batch),
            correlation_matrix=self.compute_correlation_matrix(batch),
            trends=self.compute_trends(batch, period),
            outliers=self.compute_outliers(batch),
        )
