from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from productivity_analytics.models.patterns import CircadianProfile, Trend

class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class Horizon(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short-term"
    LONG_TERM = "long-term"

class GoalType(str, Enum):
    PRODUCTIVITY_TARGET = "productivity_target"
    FOCUS_IMPROVEMENT = "focus_improvement"
    TIME_MANAGEMENT = "time_management"
    HABIT_FORMATION = "habit_formation"
    GENERIC = "generic"

class Goal(BaseModel):
    """A user-stated goal"""
    id: str = Field(description="Identifier used to key progress reports")
    type: str = Field(default=GoalType.GENERIC.value, description="Goal type; unknown types are treated as generic")
    target: Optional[float] = Field(default=None, ge=0, description="Target value in the goal type's unit")
    description: Optional[str] = None

    @property
    def goal_type(self) -> GoalType:
        try:
            return GoalType(self.type)
        except ValueError:
            return GoalType.GENERIC

class UserPreferences(BaseModel):
    """User goals and preferences supplied by the host"""
    goals: List[Goal] = Field(default_factory=list)
    focus_block_minutes: int = Field(default=25, ge=5, le=180, description="Preferred focus block length")

@dataclass
class Insight:
    category: str
    title: str
    importance: Level
    data: Dict[str, Any] = field(default_factory=dict)

@dataclass
class Recommendation:
    action: str
    reason: str
    impact: Level
    effort: Level
    horizon: Horizon

@dataclass
class RecommendationSet:
    immediate: List[Recommendation] = field(default_factory=list)
    short_term: List[Recommendation] = field(default_factory=list)
    long_term: List[Recommendation] = field(default_factory=list)
    personalized: List[Recommendation] = field(default_factory=list)

    def all(self) -> List[Recommendation]:
        return self.immediate + self.short_term + self.long_term + self.personalized

@dataclass
class Factor:
    type: str  # application, timing, behavior
    name: str
    impact: Level

@dataclass
class ScorePoint:
    timestamp: Any
    score: float
    application: str

@dataclass
class Opportunity:
    type: str
    description: str
    impact: Level
    effort: Level

@dataclass
class Overview:
    average_score: float
    trend: Trend
    rating: str
    work_minutes: float
    daily_average_minutes: float
    work_efficiency: float  # percent
    focus_quality: float  # 0..100
    focus_consistency: float  # 0..100
    improvements: List[str]
    top_application: str
    best_hour: Optional[int]
    longest_productive_streak: int
    improvement_rate: float  # percent, first quarter vs last quarter

@dataclass
class ProductivityInsights:
    trend: Trend
    volatility: float
    peaks: List[ScorePoint]
    dips: List[ScorePoint]
    positive_factors: List[Factor]
    negative_factors: List[Factor]
    opportunities: List[Opportunity]

@dataclass
class FocusStrategy:
    strategy: str
    description: str
    confidence: float

@dataclass
class FocusInsights:
    session_count: int
    average_session_minutes: float
    longest_session_minutes: float
    flow_frequency: float
    distraction_frequency: float
    interruption_frequency: float
    average_interruption_drop: float
    average_recovery_minutes: float
    interruption_cost: float
    strategies: List[FocusStrategy]

@dataclass
class ApplicationInsights:
    usage_distribution: Dict[str, float]  # percent of observations
    productivity_by_application: Dict[str, float]
    switch_frequency: float
    recommendations: List[str]

@dataclass
class TemporalInsights:
    circadian_profile: CircadianProfile
    peak_hours: List[int]
    low_hours: List[int]
    weekly_averages: Dict[str, float]

@dataclass
class GoalProgress:
    goal_id: str
    goal_type: GoalType
    metric: str
    current: float
    target: float
    progress: float  # percent of target, capped at 100
    status: str  # achieved, on_track, behind
    message: str

@dataclass
class Predictions:
    next_period_score: float
    direction: Trend
    risks: List[str]
    opportunities: List[str]

@dataclass
class InsightResult:
    overview: Overview
    productivity: ProductivityInsights
    focus: FocusInsights
    applications: ApplicationInsights
    temporal: TemporalInsights
    recommendations: RecommendationSet
    goal_progress: List[GoalProgress]
    predictions: Predictions
    highlights: List[Insight]
    observation_count: int
    confidence: float  # 0..100

    @property
    def minimal(self) -> bool:
        return False

@dataclass
class MinimalInsights:
    """Returned while there is too little history for full insights"""
    message: str
    observation_count: int
    average_score: float
    top_application: str
    recommendations: RecommendationSet

    @property
    def minimal(self) -> bool:
        return True
