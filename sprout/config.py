"""Engine configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scheduling, unlock and reward constants loaded from environment variables."""

    PROJECT_NAME: str = "Sprout"
    LOG_LEVEL: str = Field("INFO", description="Minimum level for the loguru stderr sink")

    # Graded ladder: seed, sprout, seedling, plant, tree
    GRADED_INTERVAL_HOURS: List[float] = Field(
        default_factory=lambda: [4, 8, 24, 7 * 24, 180 * 24],
        description="Review interval per active graded stage, in hours",
    )
    GRADED_XP: List[int] = Field(
        default_factory=lambda: [5, 10, 15, 20, 30],
        description="XP awarded when a promotion lands on each active graded stage",
    )

    # Numeric ladder: level 0 (new) .. NUMERIC_MAX_LEVEL
    NUMERIC_MAX_LEVEL: int = Field(10, ge=1, description="Highest numeric SRS level")
    NUMERIC_INTERVAL_HOURS: List[float] = Field(
        default_factory=lambda: [1, 4, 8, 24, 48, 96, 168, 336, 720, 1440, 2880],
        description="Review interval per numeric level, in hours",
    )
    NUMERIC_MASTERY_LEVEL: int = Field(
        3, ge=1, description="Lowest numeric level that satisfies a prerequisite"
    )
    NUMERIC_XP_BASE: int = Field(10, ge=0, description="XP for reaching numeric level 0")
    NUMERIC_XP_PER_LEVEL: int = Field(2, ge=1, description="Extra XP per numeric level reached")

    LEVEL_UNLOCK_RATIO: float = Field(
        1.0,
        gt=0.0,
        le=1.0,
        description="Share of a level's items that must be mastered before the next level opens",
    )
    LEADERBOARD_LIMIT: int = Field(100, ge=1, description="Default leaderboard page size")

    model_config = SettingsConfigDict(
        env_prefix="SPROUT_",
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("GRADED_INTERVAL_HOURS", "NUMERIC_INTERVAL_HOURS")
    @classmethod
    def _intervals_increase(cls, value: List[float]) -> List[float]:
        if any(hours <= 0 for hours in value):
            raise ValueError("intervals must be positive")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("intervals must be strictly increasing")
        return value

    @field_validator("GRADED_XP")
    @classmethod
    def _xp_increases(cls, value: List[int]) -> List[int]:
        if any(points < 0 for points in value):
            raise ValueError("XP values must be non-negative")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("XP values must be strictly increasing")
        return value

    @model_validator(mode="after")
    def _ladder_lengths_match(self) -> "Settings":
        if len(self.GRADED_INTERVAL_HOURS) != 5 or len(self.GRADED_XP) != 5:
            raise ValueError("graded ladder needs exactly five intervals and five XP values")
        if len(self.NUMERIC_INTERVAL_HOURS) != self.NUMERIC_MAX_LEVEL + 1:
            raise ValueError("NUMERIC_INTERVAL_HOURS needs one entry per level 0..NUMERIC_MAX_LEVEL")
        if self.NUMERIC_MASTERY_LEVEL > self.NUMERIC_MAX_LEVEL:
            raise ValueError("NUMERIC_MASTERY_LEVEL must be reachable")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return cached engine settings instance."""

    return Settings()


settings = get_settings()
