"""
Detection configuration.

All thresholds used by the rule engine, the train journey tracker and the
continuity guard live here so they can be tuned without code changes.
Values are read from environment variables prefixed with TRANSPORT_MODE_
(e.g. TRANSPORT_MODE_MIN_STOP_DURATION_SECONDS=240); the speed bracket table
is given as JSON.
"""

import math
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .modes import TransportMode


class SpeedBracket(BaseModel):
    """A half-open speed interval [min_kmh, max_kmh) mapped to a mode."""

    min_kmh: float = Field(ge=0)
    max_kmh: float
    mode: TransportMode

    @model_validator(mode='after')
    def check_bounds(self) -> 'SpeedBracket':
        if not self.max_kmh > self.min_kmh:
            raise ValueError(
                f"max_kmh ({self.max_kmh}) must be greater than min_kmh ({self.min_kmh})"
            )
        return self

    def contains(self, speed_kmh: float) -> bool:
        return self.min_kmh <= speed_kmh < self.max_kmh


def default_speed_brackets() -> List[SpeedBracket]:
    return [
        SpeedBracket(min_kmh=0, max_kmh=1, mode=TransportMode.STATIONARY),
        SpeedBracket(min_kmh=1, max_kmh=8, mode=TransportMode.WALKING),
        SpeedBracket(min_kmh=8, max_kmh=25, mode=TransportMode.CYCLING),
        SpeedBracket(min_kmh=25, max_kmh=120, mode=TransportMode.CAR),
        SpeedBracket(min_kmh=120, max_kmh=300, mode=TransportMode.TRAIN),
        SpeedBracket(min_kmh=300, max_kmh=math.inf, mode=TransportMode.AIRPLANE),
    ]


class DetectionSettings(BaseSettings):
    """Tunable thresholds for transport mode detection."""

    # === Speed brackets ===
    speed_brackets: List[SpeedBracket] = Field(
        default_factory=default_speed_brackets,
        description="Ordered speed intervals; the first matching bracket wins",
    )
    speed_history_size: int = Field(default=10, gt=0)
    mode_history_size: int = Field(default=20, gt=0)

    # === Continuity ===
    min_stop_duration_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Gaps shorter than this are too short for a stop-and-switch",
    )

    # === Train journey ===
    train_entry_speed_kmh: float = Field(default=15.0, ge=0)
    train_continue_speed_kmh: float = Field(default=15.0, ge=0)
    train_exit_speed_kmh: float = Field(default=20.0, ge=0)
    train_retroactive_entry_speed_kmh: float = Field(default=25.0, ge=0)
    station_memory_seconds: float = Field(default=3600.0, gt=0)

    # === Train station confidence tiers ===
    platform_speed_kmh: float = Field(default=40.0, ge=0)
    boarding_speed_kmh: float = Field(default=20.0, ge=0)

    # === Airport ===
    airport_speed_kmh: float = Field(default=180.0, ge=0)

    # === Airplane journey ===
    airplane_continue_speed_kmh: float = Field(default=200.0, ge=0)
    airport_memory_seconds: float = Field(default=3600.0, gt=0)

    @field_validator('speed_brackets')
    @classmethod
    def require_brackets(cls, v: List[SpeedBracket]) -> List[SpeedBracket]:
        if not v:
            raise ValueError("at least one speed bracket is required")
        return v

    @property
    def station_memory_ms(self) -> int:
        return int(self.station_memory_seconds * 1000)

    @property
    def airport_memory_ms(self) -> int:
        return int(self.airport_memory_seconds * 1000)

    model_config = SettingsConfigDict(
        env_prefix="TRANSPORT_MODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Default settings instance
settings = DetectionSettings()
