from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

def naive_utc(value: datetime) -> datetime:
    """Timezone-aware datetimes converted to naive UTC; naive ones are kept as given"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class FocusQuality(str, Enum):
    DEEP = "deep"
    MODERATE = "moderate"
    DISTRACTED = "distracted"

class Signal(BaseModel):
    """Base for telemetry records; all are immutable"""
    model_config = ConfigDict(frozen=True, extra="ignore")

class TextMetrics(Signal):
    density: float = Field(ge=0.0, le=1.0, description="Share of the screen covered by text")

class KeyboardActivity(Signal):
    wpm: Optional[float] = Field(default=None, ge=0, description="Typing rate in words per minute")
    consistency: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    burstiness: Optional[float] = Field(default=None, ge=0.0, le=1.0)

class MouseActivity(Signal):
    click_rate: Optional[float] = Field(default=None, ge=0, description="Clicks per second")
    movement_pattern: Optional[Literal["focused", "scattered", "idle"]] = None
    scroll_activity: Optional[Literal["reading", "browsing", "excessive"]] = None

class UsageHistory(Signal):
    consistent_apps: bool = False
    productive_streak: int = Field(default=0, ge=0)
    distraction_ratio: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    focus_session_length: Optional[float] = Field(default=None, ge=0, description="Minutes")

class FocusMetrics(Signal):
    session_length: float = Field(default=0.0, ge=0, description="Minutes")
    interruption_count: int = Field(default=0, ge=0)
    deep_work_time: float = Field(default=0.0, ge=0.0, le=1.0, description="Share of time in deep work")

class ProjectContext(Signal):
    active_project: Optional[str] = None
    complexity: Optional[Literal["high", "medium", "low"]] = None
    deadline: Optional[str] = None
    priority: Optional[Literal["high", "medium", "low"]] = None

class EnvironmentFactors(Signal):
    quiet_environment: bool = False
    good_lighting: bool = False
    comfortable_setup: bool = False
    minimal_distractions: bool = False

class RawSignals(Signal):
    """Behavioral telemetry captured alongside a snapshot. Every field is optional."""
    # Visual / content
    has_text: Optional[bool] = None
    text_metrics: Optional[TextMetrics] = None
    ui_complexity: Optional[Literal["high", "medium", "low"]] = None
    has_code: Optional[bool] = None
    has_media: Optional[bool] = None
    media_type: Optional[Literal["video", "image", "audio"]] = None
    has_errors: Optional[bool] = None
    is_loading: Optional[bool] = None
    is_fullscreen: Optional[bool] = None
    # Temporal
    session_duration_minutes: Optional[float] = Field(default=None, ge=0)
    minutes_since_break: Optional[float] = Field(default=None, ge=0)
    recent_switches: Optional[int] = Field(default=None, ge=0)
    # Behavioral
    keyboard_activity: Optional[KeyboardActivity] = None
    mouse_activity: Optional[MouseActivity] = None
    usage_history: Optional[UsageHistory] = None
    focus_metrics: Optional[FocusMetrics] = None
    # Contextual
    project_context: Optional[ProjectContext] = None
    meeting_active: Optional[bool] = None
    notification_count: Optional[int] = Field(default=None, ge=0)
    environment_factors: Optional[EnvironmentFactors] = None
    # Global modifiers
    working_hours: Optional[float] = Field(default=None, ge=0, description="Hours worked today")
    stress_indicators: Optional[bool] = None
    energy_level: Optional[float] = Field(default=None, ge=0, le=10, description="Self-reported energy (0-10)")
    stated_activity: Optional[str] = Field(default=None, description="Activity category stated by the user")

class ScoreComponent(BaseModel):
    """One weighted sub-score of a productivity score"""
    model_config = ConfigDict(frozen=True)

    raw_score: float = Field(ge=0, le=100)
    weight: float = Field(ge=0, le=1)
    weighted_score: float
    factors: Dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(ge=0.0, le=1.0)

class ScoreResult(BaseModel):
    """Result of scoring one observation"""
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    breakdown: Dict[str, ScoreComponent] = Field(default_factory=dict)
    multiplier: float = 1.0
    modifiers: Dict[str, float] = Field(default_factory=dict)
    confidence: float = Field(ge=0.0, le=1.0)

class Classification(BaseModel):
    """Enrichment returned by an external classification provider"""
    activity_type: Optional[str] = None
    rationale: Optional[str] = None
    score: Optional[float] = Field(default=None, ge=0, description="Score on the provider's native scale")
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)

class Observation(BaseModel):
    """One timestamped snapshot of user activity context"""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="When the snapshot was taken")
    primary_application: str = Field(default="unknown", description="Application or category in focus")
    secondary_applications: Tuple[str, ...] = Field(default=(), description="Other visible applications")
    window_label: Optional[str] = Field(default=None, description="Window title or tab descriptor")
    raw_signals: Optional[RawSignals] = None

    # Attached by the scoring engine
    score: Optional[int] = Field(default=None, ge=0, le=100)
    score_breakdown: Dict[str, ScoreComponent] = Field(default_factory=dict)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    computational_score: Optional[int] = Field(default=None, ge=0, le=100)

    # Attached by enrichment
    activity_type: Optional[str] = None
    rationale: Optional[str] = None
    focus_quality: Optional[FocusQuality] = None
    tags: Tuple[str, ...] = ()

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return naive_utc(value)

    @property
    def application(self) -> str:
        return (self.primary_application or "unknown").strip().lower() or "unknown"

    @property
    def signals(self) -> RawSignals:
        return self.raw_signals or RawSignals()

    @property
    def is_scored(self) -> bool:
        return self.score is not None

    def score_or(self, default: float) -> float:
        return float(self.score) if self.score is not None else default

    def with_score(self, result: ScoreResult) -> "Observation":
        """Copy of this observation with a scoring result attached"""
        return self.model_copy(update={
            "score": result.score,
            "score_breakdown": dict(result.breakdown),
            "confidence": result.confidence,
            "computational_score": result.score,
        })
