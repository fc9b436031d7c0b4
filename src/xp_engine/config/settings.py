# src/xp_engine/config/settings.py
"""Settings and environment variables for the XP scoring engine."""

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine tunables.

    Every field has a default, so the engine runs without any environment.
    Values can be overridden with ``XP_ENGINE_<FIELD>`` variables.
    """

    # Recommendations
    recommendation_threshold: float = 70.0

    # Adjustments
    expert_bonus: float = 2.0
    advanced_bonus: float = 3.0
    advanced_technical_threshold: float = 85.0
    slow_resolution_minutes: float = 60.0
    slow_resolution_penalty: float = -2.0

    # Bonuses
    speed_bonus_minutes: float = 30.0

    # Analytics
    outlier_z_threshold: float = 2.0
    trend_stable_band: float = 0.5

    # Optimizer
    optimizer_learning_rate: float = 0.3
    optimizer_min_weight: float = 0.05
    optimizer_max_weight: float = 0.6
    optimizer_full_confidence_samples: int = 30
    optimizer_max_scenarios: int = 5

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="XP_ENGINE_", env_file=".env", extra="ignore")

    @field_validator("optimizer_learning_rate")
    @classmethod
    def check_learning_rate(cls, value: float) -> float:
        """The learning rate blends two weight vectors, so it must stay in [0, 1]."""
        if not 0.0 <= value <= 1.0:
            raise ValueError("optimizer_learning_rate must be between 0 and 1")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return str(value).upper()


def get_settings() -> Settings:
    """Get the application settings."""
    # Pydantic will automatically handle loading from .env and validation
    return Settings()
