from pathlib import Path
from typing import Dict
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import logging
from productivity_analytics.services.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {
    "application": 0.25,
    "visual": 0.25,
    "temporal": 0.20,
    "behavioral": 0.15,
    "contextual": 0.15,
}

class ScoringConfig(BaseModel):
    """Per-observation scoring configuration"""
    weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_WEIGHTS),
        description="Weight of each sub-score in the final score"
    )
    neutral_score: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Score used when a signal is unavailable"
    )
    switch_penalty_threshold: int = Field(
        default=3,
        ge=0,
        description="Recent application switches tolerated before penalizing"
    )
    switch_penalty_per_switch: float = Field(
        default=0.05,
        ge=0,
        le=1,
        description="Multiplicative penalty per recent switch"
    )
    switch_penalty_floor: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Lowest multiplier the switch penalty can reach"
    )
    fatigue_hours_threshold: float = Field(
        default=8.0,
        ge=0,
        description="Hours worked before fatigue reduces the score"
    )
    fatigue_penalty_per_hour: float = Field(
        default=0.05,
        ge=0,
        le=1,
        description="Multiplier reduction per hour beyond the fatigue threshold"
    )
    fatigue_floor: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Lowest fatigue multiplier"
    )
    stress_multiplier: float = Field(
        default=0.9,
        ge=0,
        le=1,
        description="Multiplier applied when stress indicators are present"
    )
    notification_penalty_per_item: float = Field(
        default=2.0,
        ge=0,
        description="Contextual points lost per pending notification"
    )
    notification_penalty_cap: float = Field(
        default=20.0,
        ge=0,
        description="Maximum contextual points lost to notifications"
    )
    meeting_bonus: float = Field(
        default=15.0,
        ge=0,
        description="Contextual points added while a meeting is active"
    )

    @model_validator(mode="after")
    def check_weights(self) -> "ScoringConfig":
        missing = set(DEFAULT_WEIGHTS) - set(self.weights)
        if missing:
            raise ValueError(f"Missing scoring weights: {sorted(missing)}")
        total = sum(self.weights[name] for name in DEFAULT_WEIGHTS)
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self

class PatternConfig(BaseModel):
    """Pattern recognition thresholds (0-100 score scale)"""
    min_observations: int = Field(
        default=3,
        ge=1,
        description="Observations required before any pattern analysis"
    )
    focus_threshold: float = Field(
        default=60.0,
        ge=0,
        le=100,
        description="Score at or above which an observation counts as focused"
    )
    max_break_minutes: float = Field(
        default=5.0,
        gt=0,
        description="Largest gap between focused observations within one session"
    )
    min_interruption_minutes: float = Field(
        default=2.0,
        ge=0,
        description="Session age before low scores count as interruptions"
    )
    rhythm_slot_minutes: int = Field(
        default=30,
        ge=5,
        le=240,
        description="Width of time-of-day buckets"
    )
    rhythm_min_observations: int = Field(
        default=10,
        ge=2,
        description="Observations required for rhythm analysis"
    )
    distraction_threshold: float = Field(
        default=40.0,
        ge=0,
        le=100,
        description="Score below which an observation is a distraction candidate"
    )
    recovery_threshold: float = Field(
        default=60.0,
        ge=0,
        le=100,
        description="Score at which productivity counts as recovered"
    )
    peak_slot_threshold: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Bucket average above which a slot is a peak period"
    )
    low_slot_threshold: float = Field(
        default=40.0,
        ge=0,
        le=100,
        description="Bucket average below which a slot is a low period"
    )
    workflow_min_occurrences: int = Field(
        default=2,
        ge=1,
        description="Runs of one activity type needed to call it a workflow"
    )

class InsightConfig(BaseModel):
    """Insight generation thresholds"""
    min_history: int = Field(default=5, ge=1, description="History needed for full insights")
    trend_min_points: int = Field(default=10, ge=2, description="Points needed to classify a trend")
    recent_window: int = Field(default=10, ge=1, description="Observations considered for immediate recommendations")
    minutes_per_observation: float = Field(default=3.0, gt=0, description="Assumed minutes covered by one observation")
    productive_threshold: float = Field(default=40.0, ge=0, le=100, description="Score above which time counts as work")
    flow_threshold: float = Field(default=80.0, ge=0, le=100, description="Score above which deep work counts as flow")
    low_hour_threshold: float = Field(default=40.0, ge=0, le=100, description="Hourly average flagged as an opportunity")
    switch_frequency_threshold: float = Field(default=0.3, ge=0, le=1, description="Switches per observation flagged as excessive")
    short_session_minutes: float = Field(default=15.0, gt=0, description="Average focus session length considered short")
    max_immediate: int = Field(default=3, ge=1)
    max_short_term: int = Field(default=5, ge=1)
    max_long_term: int = Field(default=3, ge=1)

class CacheConfig(BaseModel):
    """Result cache configuration"""
    ttl_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds a cached result stays valid"
    )
    max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached results"
    )

class HistoryConfig(BaseModel):
    """Rolling observation history configuration"""
    capacity: int = Field(
        default=5000,
        ge=1,
        description="Observations retained before the oldest are evicted"
    )

class BlendingConfig(BaseModel):
    """Provider score blending configuration"""
    ai_weight: float = Field(
        default=0.6,
        ge=0,
        le=1,
        description="Share of the provider score in a blended score"
    )
    provider_scale: float = Field(
        default=10.0,
        gt=0,
        description="Maximum of the provider's native score scale"
    )

class Config(BaseSettings):
    """Main configuration class"""
    model_config = SettingsConfigDict(
        env_prefix="PRODUCTIVITY_ANALYTICS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    scoring: ScoringConfig = ScoringConfig()
    patterns: PatternConfig = PatternConfig()
    insights: InsightConfig = InsightConfig()
    cache: CacheConfig = CacheConfig()
    history: HistoryConfig = HistoryConfig()
    blending: BlendingConfig = BlendingConfig()

    log_file: Path = Field(
        default=Path("logs/productivity_analytics.log"),
        description="Path to log file"
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )

def load_config(**overrides) -> Config:
    """Build a Config from the environment plus explicit overrides"""
    try:
        return Config(**overrides)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise ConfigError(f"Invalid configuration: {e}") from e

# Global configuration instance
config = Config()
