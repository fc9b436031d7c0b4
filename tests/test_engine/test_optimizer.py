# tests/test_engine/test_optimizer.py

import pytest

from src.xp_engine.config.settings import Settings
from src.xp_engine.engine.models import PerformanceWeights, ScoringContext
from src.xp_engine.engine.service import create_engine


@pytest.fixture
def varied_samples(make_metrics):
    """Technical accuracy swings widely, drives the overall result and averages highest."""
    samples = []
    for i in range(12):
        samples.append(
            make_metrics(
                technicalAccuracy=76 + 2 * i,
                communicationQuality=78 + (i % 2),
                customerSatisfaction=80 + (i % 3),
                processCompliance=70,
            )
        )
    return samples


def test_no_history_keeps_current_weights(engine):
    result = engine.performance.optimize_weights(None, [])

    assert result.suggested_weights == result.current_weights
    assert result.confidence_score == 0
    assert result.expected_improvement == 0
    assert result.test_scenarios == []
    assert result.reasoning


def test_uniform_history_keeps_current_weights(engine, sample_metrics):
    result = engine.performance.optimize_weights(None, [sample_metrics] * 3)

    assert result.suggested_weights == result.current_weights
    assert result.expected_improvement == 0
    assert [s.improvement for s in result.test_scenarios] == [0, 0, 0]
    # 3 of 30 samples needed for full confidence, every scenario consistent
    assert result.confidence_score == pytest.approx(10.0)


def test_suggested_weights_are_normalized(engine, varied_samples):
    result = engine.performance.optimize_weights(ScoringContext(), varied_samples)
    suggested = result.suggested_weights

    assert suggested.total() == pytest.approx(1.0, abs=0.01)
    assert 0 <= result.confidence_score <= 100
    assert result.expected_improvement >= 0


def test_weight_moves_toward_the_strongest_signal(engine, varied_samples):
    result = engine.performance.optimize_weights(ScoringContext(), varied_samples)

    assert result.suggested_weights.technical_accuracy > 0.25
    assert result.suggested_weights.process_compliance < 0.25
    assert any("Technical accuracy weight increased" in line for line in result.reasoning)
    assert result.expected_improvement > 0


def test_scenarios_are_sampled_evenly(engine, varied_samples):
    result = engine.performance.optimize_weights(None, varied_samples)
    descriptions = [s.description for s in result.test_scenarios]

    assert len(descriptions) == 5
    assert descriptions[0] == "Historical sample 1"
    assert descriptions[-1] == "Historical sample 12"


def test_optimizer_starts_from_context_weights(engine, varied_samples):
    result = engine.performance.optimize_weights(
        ScoringContext(difficulty="advanced"), varied_samples
    )
    assert result.current_weights.technical_accuracy == pytest.approx(0.45 / 1.1)


def test_learning_rate_zero_changes_nothing(varied_samples):
    engine = create_engine(settings=Settings(optimizer_learning_rate=0.0))
    result = engine.performance.optimize_weights(None, varied_samples)

    assert result.suggested_weights == PerformanceWeights.balanced()
    assert result.expected_improvement == 0


def test_confidence_grows_with_history(engine, varied_samples):
    small = engine.performance.optimize_weights(None, varied_samples[:3])
    large = engine.performance.optimize_weights(None, varied_samples * 3)

    assert small.confidence_score < large.confidence_score
    assert large.confidence_score <= 100


def test_regressing_suggestion_is_discarded(engine, make_metrics):
    """Process compliance varies most but always trails, so favouring it lowers every score."""
    samples = [
        make_metrics(
            technicalAccuracy=80,
            communicationQuality=80,
            customerSatisfaction=80,
            processCompliance=20 if i % 2 == 0 else 60,
        )
        for i in range(4)
    ]

    result = engine.performance.optimize_weights(None, samples)

    assert result.suggested_weights == result.current_weights
    assert result.expected_improvement == 0
    assert len(result.reasoning) == 1
    assert "lower the mean replayed score" in result.reasoning[0]
    assert result.reasoning[0].endswith("current weights retained")
    assert [s.improvement for s in result.test_scenarios] == [0, 0, 0, 0]
