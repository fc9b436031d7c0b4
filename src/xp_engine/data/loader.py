# src/xp_engine/data/loader.py

"""Loads plain JSON records into engine models for the CLI."""

import json
from typing import Any, Dict, List

from pydantic import ValidationError

from ..engine.models import PerformanceMetrics, ScoringContext


class RecordLoader:
    """Reads JSON files produced by the surrounding platform."""

    @staticmethod
    def read_json(path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path} is not valid JSON: {exc}") from exc

    @classmethod
    def load_metrics(cls, path: str) -> PerformanceMetrics:
        """A single metrics record, optionally wrapped in ``performanceMetrics``."""
        data = cls.read_json(path)
        if isinstance(data, dict) and "performanceMetrics" in data:
            data = data["performanceMetrics"]
        return cls._validate(PerformanceMetrics, data, path)

    @classmethod
    def load_samples(cls, path: str) -> List[PerformanceMetrics]:
        """A list of metrics records, or ``{"samples": [...]}``."""
        data = cls.read_json(path)
        if isinstance(data, dict):
            data = data.get("samples", [])
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a list of metrics records")
        return [cls._validate(PerformanceMetrics, item, path) for item in data]

    @classmethod
    def load_activity(cls, path: str) -> Dict[str, Any]:
        """Raw activity record; validated by the caller so problems can be listed."""
        data = cls.read_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain an activity object")
        return data

    @classmethod
    def load_context(cls, path: str) -> ScoringContext:
        return cls._validate(ScoringContext, cls.read_json(path), path)

    @staticmethod
    def _validate(model, data: Any, path: str):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"{path}: {exc}") from exc
