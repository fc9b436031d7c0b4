# src/xp_engine/engine/validator.py
"""Range and shape validation for metrics, weights and activities."""

from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from .models import (
    ActivityData,
    ActivityType,
    Difficulty,
    Dimension,
    PerformanceMetrics,
    PerformanceWeights,
    ValidationResult,
)
from ..utils.helpers import format_number

WEIGHT_SUM_TOLERANCE = 0.01

MetricsInput = Union[PerformanceMetrics, Mapping[str, Any]]
WeightsInput = Union[PerformanceWeights, Mapping[str, Any]]


def _describe(exc: ValidationError) -> List[str]:
    """One "loc: message" line per pydantic error."""
    return [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    ]


def _coerce(model, data, label: str):
    """Validates a raw mapping against a closed record, raising TypeError."""
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise TypeError(f"{label} must be a mapping, got {type(data).__name__}")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(_describe(exc))
        raise TypeError(f"Invalid {label}: {problems}") from exc


class MetricValidator:
    """Reports problems as data; only malformed shapes raise."""

    def validate_metrics(self, metrics: MetricsInput) -> ValidationResult:
        """Flags numeric dimensions outside 0-100 and negative resolution time."""
        metrics = _coerce(PerformanceMetrics, metrics, "performance metrics")
        errors = []

        for dimension in Dimension:
            value = metrics.dimension(dimension)
            if value < 0 or value > 100:
                errors.append(
                    f"{dimension.value} value {format_number(value)} "
                    "is outside valid range (0-100)"
                )

        if metrics.resolution_time < 0:
            errors.append(
                f"resolutionTime value {format_number(metrics.resolution_time)} "
                "cannot be negative"
            )

        return ValidationResult(valid=not errors, errors=errors)

    def validate_weights(self, weights: WeightsInput) -> ValidationResult:
        """Flags an unbalanced vector and individual weights outside 0-1."""
        weights = _coerce(PerformanceWeights, weights, "performance weights")
        errors = []

        total = weights.total()
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            errors.append(f"Weights sum to {total:.3f}, should sum to 1.0")

        for dimension in Dimension:
            value = weights.weight(dimension)
            if value < 0 or value > 1:
                errors.append(
                    f"{dimension.value} weight {format_number(value)} "
                    "is outside valid range (0-1)"
                )

        return ValidationResult(valid=not errors, errors=errors)

    def validate_performance_metrics(
        self, metrics: MetricsInput, weights: Optional[WeightsInput] = None
    ) -> ValidationResult:
        """Metric and weight checks combined into one result."""
        errors = self.validate_metrics(metrics).errors
        if weights is not None:
            errors += self.validate_weights(weights).errors
        return ValidationResult(valid=not errors, errors=errors)

    def validate_activity_data(self, activity: Any) -> ValidationResult:
        """Checks a raw activity record without raising.

        Unlike the metric checks above, a malformed activity is routine user
        input, so every problem (shape included) comes back as an error string.
        A valid result means ``calculate_xp`` accepts the record.
        """
        if isinstance(activity, ActivityData):
            return self.validate_metrics(activity.performance_metrics)
        if not isinstance(activity, Mapping):
            return ValidationResult(valid=False, errors=["Activity data must be a mapping"])

        errors = []

        activity_type = activity.get("type")
        if activity_type not in [t.value for t in ActivityType]:
            errors.append(f"Invalid activity type: {activity_type}")

        difficulty = activity.get("scenarioDifficulty", activity.get("scenario_difficulty"))
        if difficulty not in [d.value for d in Difficulty]:
            errors.append(f"Invalid scenario difficulty: {difficulty}")

        metrics = activity.get("performanceMetrics", activity.get("performance_metrics"))
        if metrics is None:
            errors.append("Performance metrics are required")
        else:
            try:
                errors.extend(self.validate_metrics(metrics).errors)
            except TypeError as exc:
                errors.append(str(exc))

        if errors:
            return ValidationResult(valid=False, errors=errors)

        # remaining shape problems: unknown keys, a non-mapping additionalContext
        try:
            ActivityData.model_validate(activity)
        except ValidationError as exc:
            errors.extend(_describe(exc))

        return ValidationResult(valid=not errors, errors=errors)
