"""Pytest configuration for the XP scoring engine."""

import json
from typing import Any, Callable, Dict, List

import pytest

from src.xp_engine.config.settings import Settings
from src.xp_engine.engine.service import Engine, create_engine


@pytest.fixture
def sample_metrics() -> Dict[str, Any]:
    """A typical intermediate ticket: good but not outstanding."""
    return {
        "technicalAccuracy": 80,
        "communicationQuality": 75,
        "customerSatisfaction": 85,
        "processCompliance": 70,
        "verificationSuccess": True,
        "firstTimeResolution": True,
        "knowledgeSharing": False,
        "resolutionTime": 25,
    }


@pytest.fixture
def make_metrics(sample_metrics) -> Callable[..., Dict[str, Any]]:
    """Factory for metrics records; keyword overrides use camelCase keys."""

    def _make(**overrides: Any) -> Dict[str, Any]:
        return {**sample_metrics, **overrides}

    return _make


@pytest.fixture
def sample_activity(sample_metrics) -> Dict[str, Any]:
    return {
        "type": "ticket_completion",
        "scenarioDifficulty": "intermediate",
        "performanceMetrics": sample_metrics,
    }


@pytest.fixture
def trending_samples(make_metrics) -> List[Dict[str, Any]]:
    """Technical accuracy climbs, satisfaction falls, the rest stay flat."""
    return [
        make_metrics(technicalAccuracy=60, communicationQuality=80, customerSatisfaction=90),
        make_metrics(technicalAccuracy=70, communicationQuality=80, customerSatisfaction=85),
        make_metrics(technicalAccuracy=80, communicationQuality=80, customerSatisfaction=80),
        make_metrics(technicalAccuracy=90, communicationQuality=80, customerSatisfaction=75),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def engine(settings) -> Engine:
    """A fresh engine seeded with the system configurations."""
    return create_engine(settings=settings)


@pytest.fixture
def write_json(tmp_path) -> Callable[[str, Any], str]:
    """Writes a JSON document into the test's temp directory."""

    def _write(name: str, payload: Any) -> str:
        path = tmp_path / name
        path.write_text(json.dumps(payload))
        return str(path)

    return _write
