# tests/test_engine/test_resolver.py

from datetime import datetime, timedelta, timezone

import pytest

from src.xp_engine.data.store import WeightConfigurationStore
from src.xp_engine.engine.models import (
    ContextCondition,
    ContextField,
    PerformanceWeights,
    ScoringContext,
)
from src.xp_engine.engine.resolver import WeightResolver, condition_matches

BALANCED = {
    "technicalAccuracy": 0.25,
    "communicationQuality": 0.25,
    "customerSatisfaction": 0.25,
    "processCompliance": 0.25,
}


def _condition(field, operator, value):
    return ContextCondition(field=field, operator=operator, value=value)


@pytest.mark.parametrize(
    "condition, context, expected",
    [
        (
            _condition(ContextField.DIFFICULTY, "equals", "advanced"),
            ScoringContext(difficulty="advanced"),
            True,
        ),
        (
            _condition(ContextField.DIFFICULTY, "equals", "advanced"),
            ScoringContext(difficulty="starter"),
            False,
        ),
        (
            _condition(ContextField.ACTIVITY_TYPE, "contains", "ticket"),
            ScoringContext(activity_type="ticket_completion"),
            True,
        ),
        (
            _condition(ContextField.USER_EXPERIENCE, "contains", ["expert", "senior"]),
            ScoringContext(user_experience="senior"),
            True,
        ),
        (
            _condition(ContextField.TIME_OF_DAY, "greater_than", 17),
            ScoringContext(time_of_day=20),
            True,
        ),
        (
            _condition(ContextField.TIME_OF_DAY, "less_than", 6),
            ScoringContext(time_of_day=6),
            False,
        ),
        (
            _condition(ContextField.TIME_OF_DAY, "in_range", [9, 17]),
            ScoringContext(time_of_day=17),
            True,
        ),
        (
            _condition(ContextField.TIME_OF_DAY, "in_range", [9, 17]),
            ScoringContext(time_of_day=8),
            False,
        ),
        # Missing context values never match
        (
            _condition(ContextField.TIME_OF_DAY, "less_than", 6),
            ScoringContext(),
            False,
        ),
        # Non-numeric comparisons are a non-match rather than an error
        (
            _condition(ContextField.DIFFICULTY, "greater_than", 3),
            ScoringContext(difficulty="advanced"),
            False,
        ),
    ],
)
def test_condition_matches(condition, context, expected):
    assert condition_matches(condition, context) is expected


def test_no_configurations_falls_back_to_balanced():
    resolved = WeightResolver(WeightConfigurationStore()).resolve(ScoringContext())

    assert resolved.weights == PerformanceWeights.balanced()
    assert resolved.configuration is None
    assert resolved.applied_rules == []


def test_general_configuration_applies_to_default_context(engine):
    resolved = engine.performance.resolver.resolve(ScoringContext())

    assert resolved.configuration.id == "default_balanced"
    assert resolved.weights == PerformanceWeights.balanced()


def test_advanced_context_selects_technical_configuration(engine):
    resolved = engine.performance.resolver.resolve(ScoringContext(difficulty="advanced"))
    weights = resolved.weights

    assert resolved.configuration.id == "technical_focused"
    assert resolved.rule_descriptions == ["Increase technical weight for advanced scenarios"]
    # 0.45 / 0.2 / 0.2 / 0.25 rescaled from 1.1 to 1.0
    assert weights.total() == pytest.approx(1.0)
    assert weights.technical_accuracy == pytest.approx(0.45 / 1.1)
    assert weights.process_compliance == pytest.approx(0.25 / 1.1)


def test_customer_context_selects_customer_configuration(engine):
    resolved = engine.performance.resolver.resolve(
        ScoringContext(activity_type="customer_communication")
    )

    assert resolved.configuration.id == "customer_focused"
    assert resolved.weights.communication_quality == pytest.approx(0.4 / 1.1)
    assert resolved.weights.total() == pytest.approx(1.0)


def test_equal_priority_prefers_oldest():
    store = WeightConfigurationStore()
    first = store.create({"name": "First", "weights": BALANCED, "priority": 5})
    store.create({"name": "Second", "weights": BALANCED, "priority": 5})

    selected = WeightResolver(store).select_configuration(ScoringContext())
    assert selected.id == first.id


def test_rules_apply_in_priority_order():
    """The highest-priority matching rule writes its override last."""
    store = WeightConfigurationStore()
    store.create(
        {
            "name": "Layered",
            "weights": BALANCED,
            "contextRules": [
                {
                    "id": "late",
                    "condition": {"field": "timeOfDay", "operator": "greater_than", "value": 17},
                    "weightAdjustments": {"technicalAccuracy": 0.7},
                    "priority": 2,
                },
                {
                    "id": "evening",
                    "condition": {"field": "timeOfDay", "operator": "greater_than", "value": 12},
                    "weightAdjustments": {"technicalAccuracy": 0.1},
                    "priority": 1,
                },
            ],
        }
    )

    resolved = WeightResolver(store).resolve(ScoringContext(time_of_day=20))

    assert [r.id for r in resolved.applied_rules] == ["evening", "late"]
    # 0.7 / (0.7 + 0.75)
    assert resolved.weights.technical_accuracy == pytest.approx(0.7 / 1.45)


def test_expired_and_future_configurations_are_skipped():
    store = WeightConfigurationStore()
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    store.create(
        {
            "name": "Expired",
            "weights": BALANCED,
            "priority": 9,
            "validFrom": now - timedelta(days=30),
            "validUntil": now - timedelta(days=1),
        }
    )
    store.create(
        {
            "name": "Future",
            "weights": BALANCED,
            "priority": 8,
            "validFrom": now + timedelta(days=1),
        }
    )
    current = store.create(
        {"name": "Current", "weights": BALANCED, "priority": 1, "validFrom": now - timedelta(days=1)}
    )

    resolver = WeightResolver(store, clock=lambda: now)
    assert resolver.select_configuration(ScoringContext()).id == current.id


def test_explicit_base_weights_take_precedence(engine):
    base = PerformanceWeights(
        technical_accuracy=0.1,
        communication_quality=0.2,
        customer_satisfaction=0.3,
        process_compliance=0.4,
    )
    weights = engine.performance.resolve_weights(ScoringContext(), base)
    assert weights == base
