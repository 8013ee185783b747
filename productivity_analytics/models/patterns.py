"""Value objects produced by pattern recognition.

All of these are pure functions of the history slice they were computed
from and are rebuilt on every analysis run.
"""
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union
from productivity_analytics.models.focus_session import FocusSession, TaskSwitchEvent

class Trend(str, Enum):
    STRONGLY_IMPROVING = "strongly_improving"
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    STRONGLY_DECLINING = "strongly_declining"
    INSUFFICIENT_DATA = "insufficient_data"

    @property
    def is_improving(self) -> bool:
        return self in (Trend.STRONGLY_IMPROVING, Trend.IMPROVING)

    @property
    def is_declining(self) -> bool:
        return self in (Trend.STRONGLY_DECLINING, Trend.DECLINING)

class CircadianProfile(str, Enum):
    MORNING_PERSON = "morning_person"
    AFTERNOON_PEAK = "afternoon_peak"
    EVENING_PERSON = "evening_person"
    CONSISTENT = "consistent"

@dataclass(frozen=True)
class InsufficientData:
    """Explicit, displayable marker for an analysis that lacked input"""
    reason: str
    required: int
    provided: int

    @property
    def insufficient_data(self) -> bool:
        return True

@dataclass
class FocusPatterns:
    sessions: List[FocusSession]
    total_focus_minutes: float
    average_session_minutes: float
    focus_efficiency: float
    best_session: Optional[FocusSession] = None

    @property
    def total_interruptions(self) -> int:
        return sum(s.interruption_count for s in self.sessions)

    @property
    def longest_session_minutes(self) -> float:
        return max((s.duration_minutes for s in self.sessions), default=0.0)

@dataclass
class Transition:
    from_application: str
    to_application: str
    count: int

@dataclass
class TaskSwitchPatterns:
    switches: List[TaskSwitchEvent]
    total_switches: int
    switch_frequency: float  # switches per observation
    average_minutes_between_switches: float
    contextual_switches: int
    communication_switches: int
    distracting_switches: int
    application_minutes: Dict[str, float]
    most_used_applications: List[Tuple[str, float]]
    frequent_transitions: List[Transition]
    switching_efficiency: float

@dataclass
class TimeSlotBucket:
    slot_start: time
    average_score: float
    peak_score: float
    consistency: float
    sample_count: int
    dominant_activity: str = "unknown"

@dataclass
class RhythmPatterns:
    buckets: List[TimeSlotBucket]
    peak_periods: List[TimeSlotBucket]
    low_periods: List[TimeSlotBucket]
    overall_trend: Trend
    consistency_score: float
    recommendations: List[str] = field(default_factory=list)

@dataclass
class ApplicationUsage:
    application: str
    usage_count: int
    average_score: float
    peak_score: float
    usage_share: float  # percent of observations
    session_minutes: float  # first seen to last seen
    rating: str

@dataclass
class ApplicationPatterns:
    applications: List[ApplicationUsage]
    most_productive: List[ApplicationUsage]
    frequent_transitions: List[Transition]
    application_efficiency: float
    recommendations: List[str] = field(default_factory=list)

    def get(self, application: str) -> Optional[ApplicationUsage]:
        for usage in self.applications:
            if usage.application == application:
                return usage
        return None

@dataclass
class HourlyPattern:
    hour: int
    average_score: float
    consistency: float
    sample_count: int

@dataclass
class TemporalPatterns:
    hourly: List[HourlyPattern]
    peak_hours: List[HourlyPattern]
    low_hours: List[HourlyPattern]
    band_averages: Dict[str, float]
    circadian_profile: CircadianProfile
    recommendations: List[str] = field(default_factory=list)

@dataclass
class DistractionEpisode:
    timestamp: datetime
    application: str
    score: float
    source: str
    duration_minutes: float
    recovery_minutes: Optional[float] = None  # None when productivity never recovered

@dataclass
class DistractionSourceStats:
    source: str
    count: int
    total_minutes: float
    average_score: float

@dataclass
class DistractionPatterns:
    episodes: List[DistractionEpisode]
    total_distractions: int
    distraction_rate: float
    average_duration_minutes: float
    sources: List[DistractionSourceStats]
    hotspots: List[Tuple[int, int]]  # (hour, count)
    average_recovery_minutes: float
    recovery_rate: float

@dataclass
class ActivityRun:
    activity_type: str
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    average_score: float
    observation_count: int

@dataclass
class WorkflowPattern:
    activity_type: str
    frequency: int
    average_score: float
    average_duration_minutes: float
    efficiency: float  # 0..1, productivity-weighted time over total time

@dataclass
class WorkflowPatterns:
    runs: List[ActivityRun]
    workflows: List[WorkflowPattern]
    most_efficient: List[WorkflowPattern]
    recommendations: List[str] = field(default_factory=list)

@dataclass
class PatternResult:
    focus: FocusPatterns
    task_switching: TaskSwitchPatterns
    rhythm: Union[RhythmPatterns, InsufficientData]
    applications: ApplicationPatterns
    temporal: TemporalPatterns
    distractions: DistractionPatterns
    workflows: WorkflowPatterns
    observation_count: int
    time_span_minutes: float
    confidence: float  # 0..100

    @property
    def insufficient_data(self) -> bool:
        return False
