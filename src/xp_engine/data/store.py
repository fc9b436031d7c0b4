# src/xp_engine/data/store.py

"""Weight configuration storage.

The store validates configurations; where they actually live is
delegated to a ``ConfigurationRepository``. The bundled in-memory repository
swaps immutable snapshots under a lock, so a reader resolving weights never
sees a half-applied update.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple, Union
from uuid import uuid4

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from ..engine.models import (
    ConditionOperator,
    ContextCondition,
    ContextField,
    ContextRule,
    PerformanceWeights,
    WeightConfiguration,
    WeightConfigurationInput,
    WeightOverride,
)
from ..engine.validator import MetricValidator
from ..utils.helpers import as_utc, now_utc

logger = logging.getLogger(__name__)

WEIGHT_SUM_MESSAGE = "Weight configuration weights must sum to 1.0"
WEIGHT_RANGE_MESSAGE = "Individual weights must be between 0 and 1"


class WeightConfigurationError(ValueError):
    """Raised for configurations that can never be valid as given."""


class ConfigurationRepository(ABC):
    """Where weight configurations are kept."""

    @abstractmethod
    def snapshot(self) -> Tuple[WeightConfiguration, ...]:
        """All configurations, in insertion order, as an immutable tuple."""

    @abstractmethod
    def add(self, config: WeightConfiguration) -> None:
        pass

    @abstractmethod
    def replace(self, config: WeightConfiguration) -> bool:
        """Replaces the configuration with the same id; False if absent."""


class InMemoryConfigurationRepository(ConfigurationRepository):
    """Copy-on-write registry: writers build a new tuple and swap it in."""

    def __init__(self, configs: Optional[List[WeightConfiguration]] = None):
        self._lock = threading.Lock()
        self._configs: Tuple[WeightConfiguration, ...] = tuple(configs or ())

    def snapshot(self) -> Tuple[WeightConfiguration, ...]:
        return self._configs

    def add(self, config: WeightConfiguration) -> None:
        with self._lock:
            self._configs = self._configs + (config,)

    def replace(self, config: WeightConfiguration) -> bool:
        with self._lock:
            ids = [c.id for c in self._configs]
            if config.id not in ids:
                return False
            index = ids.index(config.id)
            self._configs = (
                self._configs[:index] + (config,) + self._configs[index + 1 :]
            )
            return True


class WeightConfigurationStore:
    """CRUD and validation over named weight configurations."""

    def __init__(
        self,
        repository: Optional[ConfigurationRepository] = None,
        validator: Optional[MetricValidator] = None,
    ):
        self.repository = repository or InMemoryConfigurationRepository()
        self.validator = validator or MetricValidator()

    def _validate_weights(self, weights: PerformanceWeights) -> None:
        result = self.validator.validate_weights(weights)
        if result.valid:
            return
        logger.debug("Rejected weights %s: %s", weights.as_dict(), result.errors)
        if any(error.startswith("Weights sum to") for error in result.errors):
            raise WeightConfigurationError(WEIGHT_SUM_MESSAGE)
        raise WeightConfigurationError(WEIGHT_RANGE_MESSAGE)

    def _validate_rules(self, rules: List[ContextRule]) -> None:
        for rule in rules:
            override = rule.weight_adjustments
            if override is None:
                continue
            for value in override.model_dump(exclude_none=True).values():
                if value < 0 or value > 1:
                    raise WeightConfigurationError(WEIGHT_RANGE_MESSAGE)

    def create(
        self, data: Union[WeightConfigurationInput, Mapping[str, Any]]
    ) -> WeightConfiguration:
        """Validates and stores a new configuration, assigning its id."""
        try:
            payload = (
                data
                if isinstance(data, WeightConfigurationInput)
                else WeightConfigurationInput.model_validate(data)
            )
        except ValidationError as exc:
            raise WeightConfigurationError(f"Invalid weight configuration: {exc}") from exc

        self._validate_weights(payload.weights)
        self._validate_rules(payload.context_rules)

        config = WeightConfiguration(
            id=f"config_{uuid4().hex[:12]}", **payload.model_dump()
        )
        self.repository.add(config)
        logger.info("Created weight configuration %s (%s)", config.id, config.name)
        return config

    def update(
        self, config_id: str, updates: Mapping[str, Any]
    ) -> Optional[WeightConfiguration]:
        """Merges updates into an existing configuration.

        Returns None when the id is unknown. The id itself cannot be changed.
        """
        existing = self.get(config_id)
        if existing is None:
            return None

        merged = existing.model_dump()
        for key, value in updates.items():
            name = _FIELD_NAMES.get(key, key)
            if name == "id":
                continue
            merged[name] = value

        try:
            updated = WeightConfiguration.model_validate(merged)
        except ValidationError as exc:
            raise WeightConfigurationError(f"Invalid weight configuration: {exc}") from exc

        self._validate_weights(updated.weights)
        self._validate_rules(updated.context_rules)

        # Lost a race with another writer that removed it
        if not self.repository.replace(updated):
            return None
        logger.info("Updated weight configuration %s", config_id)
        return updated

    def get(self, config_id: str) -> Optional[WeightConfiguration]:
        for config in self.repository.snapshot():
            if config.id == config_id:
                return config
        return None

    def list(self) -> List[WeightConfiguration]:
        """Active configurations only."""
        return [c for c in self.repository.snapshot() if c.active]

    def all(self) -> List[WeightConfiguration]:
        return list(self.repository.snapshot())

    def candidates(self, as_of: Optional[datetime] = None) -> List[WeightConfiguration]:
        """Active configurations whose validity window covers ``as_of``."""
        as_of = as_utc(as_of or now_utc())
        return [
            c
            for c in self.repository.snapshot()
            if c.active
            and as_utc(c.valid_from) <= as_of
            and (c.valid_until is None or as_utc(c.valid_until) > as_of)
        ]

    def seed_defaults(self) -> List[WeightConfiguration]:
        """Installs the built-in system configurations."""
        seeded = []
        for config in default_configurations():
            self.repository.add(config)
            seeded.append(config)
        return seeded


_FIELD_NAMES = {to_camel(name): name for name in WeightConfiguration.model_fields}


def default_configurations(valid_from: Optional[datetime] = None) -> List[WeightConfiguration]:
    """The three system configurations every engine starts with."""
    valid_from = valid_from or datetime(2000, 1, 1)
    return [
        WeightConfiguration(
            id="default_balanced",
            name="Balanced Performance",
            description="Equal weighting across all performance metrics",
            weights=PerformanceWeights.balanced(),
            context_rules=[],
            priority=1,
            valid_from=valid_from,
        ),
        WeightConfiguration(
            id="technical_focused",
            name="Technical Excellence",
            description="Emphasizes technical accuracy and process compliance",
            weights=PerformanceWeights(
                technical_accuracy=0.4,
                communication_quality=0.2,
                customer_satisfaction=0.2,
                process_compliance=0.2,
            ),
            context_rules=[
                ContextRule(
                    id="advanced_scenarios",
                    condition=ContextCondition(
                        field=ContextField.DIFFICULTY,
                        operator=ConditionOperator.EQUALS,
                        value="advanced",
                    ),
                    weight_adjustments=WeightOverride(
                        technical_accuracy=0.45, process_compliance=0.25
                    ),
                    description="Increase technical weight for advanced scenarios",
                )
            ],
            priority=2,
            valid_from=valid_from,
        ),
        WeightConfiguration(
            id="customer_focused",
            name="Customer Experience",
            description="Prioritizes customer satisfaction and communication",
            weights=PerformanceWeights(
                technical_accuracy=0.2,
                communication_quality=0.35,
                customer_satisfaction=0.35,
                process_compliance=0.1,
            ),
            context_rules=[
                ContextRule(
                    id="customer_communication",
                    condition=ContextCondition(
                        field=ContextField.ACTIVITY_TYPE,
                        operator=ConditionOperator.EQUALS,
                        value="customer_communication",
                    ),
                    weight_adjustments=WeightOverride(
                        communication_quality=0.4, customer_satisfaction=0.4
                    ),
                    description="Emphasize communication for customer interaction activities",
                )
            ],
            priority=3,
            valid_from=valid_from,
        ),
    ]
