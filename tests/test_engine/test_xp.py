# tests/test_engine/test_xp.py

import pytest

from src.xp_engine.engine.bonuses import BonusEngine
from src.xp_engine.engine.models import ActivityData, ActivityType, Difficulty
from src.xp_engine.engine.xp import XPCalculator


@pytest.fixture
def calculator():
    return XPCalculator()


@pytest.fixture
def perfect_metrics(make_metrics):
    return make_metrics(
        technicalAccuracy=95,
        communicationQuality=90,
        customerSatisfaction=95,
        processCompliance=90,
        verificationSuccess=True,
        firstTimeResolution=True,
        knowledgeSharing=True,
        resolutionTime=10,
    )


@pytest.fixture
def zero_metrics():
    return {
        "technicalAccuracy": 0,
        "communicationQuality": 0,
        "customerSatisfaction": 0,
        "processCompliance": 0,
        "verificationSuccess": False,
        "firstTimeResolution": False,
        "knowledgeSharing": False,
        "resolutionTime": 45,
    }


def _activity(activity_type, difficulty, metrics, **context):
    return ActivityData.model_validate(
        {
            "type": activity_type,
            "scenarioDifficulty": difficulty,
            "performanceMetrics": metrics,
            "additionalContext": context,
        }
    )


def test_intermediate_ticket(calculator, sample_activity):
    """Average 77.5 lands in the good band; first-try and speed bonuses fire."""
    result = calculator.calculate_xp(sample_activity)

    assert result.base_xp == 20
    assert result.difficulty_multiplier == 1.5
    assert result.performance_multiplier == 1.0
    assert result.bonus_xp == 13
    # 20 * 1.5 * 1.0 + 8 + 5
    assert result.total_xp == 43
    assert [b.type for b in result.breakdown.bonuses] == ["First-Try Resolution", "Speed Bonus"]


def test_breakdown_and_explanations(calculator, sample_activity):
    result = calculator.calculate_xp(sample_activity)
    breakdown = result.breakdown

    assert breakdown.activity.type == "TICKET COMPLETION"
    assert breakdown.difficulty.level == "INTERMEDIATE"
    assert breakdown.difficulty.adjusted_points == 30
    assert breakdown.performance.band == "good"
    assert breakdown.performance.overall == 77.5
    assert breakdown.final.reasoning == (
        "Base (20) × Difficulty (1.5x) × Performance (1x) + Bonuses (13) = 43 XP"
    )
    assert result.explanations[0] == "You earned 20 base XP for completing a ticket completion activity."
    assert result.explanations[-1] == breakdown.final.reasoning


def test_serialized_field_names(calculator, sample_activity):
    data = calculator.calculate_xp(sample_activity).model_dump(by_alias=True)

    assert data["baseXP"] == 20
    assert data["bonusXP"] == 13
    assert data["totalXP"] == 43
    assert data["difficultyMultiplier"] == 1.5
    assert data["breakdown"]["final"]["totalXp"] == 43


@pytest.mark.parametrize(
    "score, band, multiplier",
    [
        (100, "excellent", 1.5),
        (90, "excellent", 1.5),
        (89.99, "good", 1.0),
        (75, "good", 1.0),
        (74.99, "acceptable", 0.8),
        (60, "acceptable", 0.8),
        (59.99, "poor", 0.5),
        (0, "poor", 0.5),
    ],
)
def test_performance_bands(calculator, score, band, multiplier):
    assert calculator.get_performance_band(score) == (band, multiplier)


@pytest.mark.parametrize("overrides", [{}, {"technicalAccuracy": 95}, {"customerSatisfaction": 40}])
def test_xp_increases_with_difficulty(calculator, make_metrics, overrides):
    metrics = make_metrics(**overrides)
    totals = [
        calculator.calculate_xp(_activity("ticket_completion", difficulty, metrics)).total_xp
        for difficulty in ("starter", "intermediate", "advanced")
    ]

    assert totals[0] < totals[1] < totals[2]


@pytest.mark.parametrize("activity_type", [t.value for t in ActivityType])
def test_xp_is_always_positive(calculator, zero_metrics, activity_type):
    result = calculator.calculate_xp(_activity(activity_type, "starter", zero_metrics))

    assert isinstance(result.total_xp, int)
    assert result.total_xp >= 1
    assert result.bonus_xp == 0


def test_smallest_activity_keeps_one_point(calculator, zero_metrics):
    # 2 * 1.0 * 0.5 = 1
    result = calculator.calculate_xp(_activity("knowledge_search", "starter", zero_metrics))
    assert result.total_xp == 1


def test_every_bonus(calculator, perfect_metrics):
    activity = _activity("verification", "advanced", perfect_metrics, innovativeApproach=True)
    result = calculator.calculate_xp(activity)

    assert len(result.breakdown.bonuses) == 7
    assert result.bonus_xp == 63
    # 8 * 2.0 * 1.5 + 63
    assert result.total_xp == 87
    assert result.total_xp == calculator.calculate_max_possible_xp("verification", "advanced")


@pytest.mark.parametrize("activity_type", [t.value for t in ActivityType])
@pytest.mark.parametrize("difficulty", [d.value for d in Difficulty])
def test_max_possible_xp_is_an_upper_bound(
    calculator, sample_metrics, perfect_metrics, activity_type, difficulty
):
    ceiling = calculator.calculate_max_possible_xp(activity_type, difficulty)

    for metrics in (sample_metrics, perfect_metrics):
        activity = _activity(activity_type, difficulty, metrics, innovativeApproach=True)
        assert calculator.calculate_xp(activity).total_xp <= ceiling


def test_xp_ranges(calculator):
    ranges = calculator.get_xp_ranges()

    assert set(ranges) == {t.value for t in ActivityType}
    ticket = ranges["ticket_completion"]
    # min: 20 * 1.0 * 0.5, typical: 20 * 1.5 * 1.0, max: 20 * 2.0 * 1.5 + 63
    assert (ticket.min, ticket.typical, ticket.max) == (10, 30, 123)
    search = ranges["knowledge_search"]
    assert (search.min, search.typical, search.max) == (1, 3, 69)


def test_bonus_catalog(calculator):
    catalog = calculator.get_bonus_catalog()

    assert len(catalog) == 7
    assert sum(b.points for b in catalog) == 63
    assert catalog[0].type == "Perfect Verification"


def test_validate_activity_data(calculator, sample_activity):
    assert calculator.validate_activity_data(sample_activity).valid

    sample_activity["type"] = "bogus"
    result = calculator.validate_activity_data(sample_activity)
    assert result.errors == ["Invalid activity type: bogus"]


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"verificationSuccess": True, "technicalAccuracy": 90}, "Perfect Verification"),
        ({"customerSatisfaction": 90, "communicationQuality": 85}, "Outstanding Customer Service"),
        ({"technicalAccuracy": 90, "processCompliance": 85}, "Technical Excellence"),
        ({"knowledgeSharing": True}, "Knowledge Sharing"),
    ],
)
def test_bonus_thresholds(make_metrics, overrides, expected):
    metrics = make_metrics(firstTimeResolution=False, resolutionTime=45, **overrides)
    bonuses = BonusEngine().evaluate(_activity("ticket_completion", "starter", metrics))

    assert expected in [b.type for b in bonuses]


def test_bonus_thresholds_are_inclusive_only_at_the_bar(make_metrics):
    metrics = make_metrics(
        verificationSuccess=True,
        technicalAccuracy=89.9,
        firstTimeResolution=False,
        resolutionTime=45,
    )
    assert BonusEngine().evaluate(_activity("ticket_completion", "starter", metrics)) == []


@pytest.mark.parametrize("minutes, earned", [(0, True), (30, True), (30.5, False), (-1, False)])
def test_speed_bonus(make_metrics, minutes, earned):
    metrics = make_metrics(firstTimeResolution=False, resolutionTime=minutes)
    bonuses = BonusEngine().evaluate(_activity("documentation", "starter", metrics))

    assert ("Speed Bonus" in [b.type for b in bonuses]) is earned


def test_innovation_bonus_needs_performance(make_metrics):
    weak = make_metrics(technicalAccuracy=80, customerSatisfaction=90)
    strong = make_metrics(technicalAccuracy=85, customerSatisfaction=85)
    engine = BonusEngine()

    weak_types = [b.type for b in engine.evaluate(_activity("documentation", "starter", weak, innovativeApproach=True))]
    strong_types = [b.type for b in engine.evaluate(_activity("documentation", "starter", strong, innovativeApproach=True))]
    plain_types = [b.type for b in engine.evaluate(_activity("documentation", "starter", strong))]

    assert "Innovation Bonus" not in weak_types
    assert "Innovation Bonus" in strong_types
    assert "Innovation Bonus" not in plain_types


@pytest.mark.parametrize("activity_type", [t.value for t in ActivityType])
def test_every_difficulty_step_is_worth_more(calculator, zero_metrics, activity_type):
    """Rounding small base values never lets two difficulties tie."""
    totals = [
        calculator.calculate_xp(_activity(activity_type, difficulty, zero_metrics)).total_xp
        for difficulty in ("starter", "intermediate", "advanced")
    ]

    assert totals[0] < totals[1] < totals[2]


def test_scaled_points_floor(calculator):
    # knowledge search at poor performance: 1, 1.5 and 2 before the floor
    assert [calculator.scaled_points(2, d, 0.5) for d in Difficulty] == [1, 2, 3]
