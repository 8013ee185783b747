from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from productivity_analytics.models.observation import Observation

class SwitchType(str, Enum):
    CONTEXTUAL = "contextual"
    COMMUNICATION = "communication"
    DISTRACTING = "distracting"
    NEUTRAL = "neutral"

@dataclass
class TaskSwitchEvent:
    from_application: str
    to_application: str
    timestamp: datetime
    elapsed_since_last_switch: Optional[timedelta]  # None for the first switch
    classification: SwitchType
    score: float = 0.0
    context_loss: float = 0.0  # 0 (none) to 1 (full context lost)

@dataclass
class FocusSession:
    start_time: datetime
    end_time: datetime
    peak_score: float
    average_score: float
    interruption_count: int = 0
    quality_score: float = 0.0
    source_observations: List[Observation] = field(default_factory=list)

    @classmethod
    def open(cls, observation: Observation, score: float) -> "FocusSession":
        """Start a session at a focused observation"""
        return cls(
            start_time=observation.timestamp,
            end_time=observation.timestamp,
            peak_score=score,
            average_score=score,
            source_observations=[observation],
        )

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60

    @property
    def efficiency(self) -> float:
        """Average score discounted by interruptions"""
        return self.average_score / (self.interruption_count + 1)

    def add_observation(self, observation: Observation, score: float, interruptions: int = 0):
        """Extend this session with another focused observation.

        ``interruptions`` counts the dips seen since the previous focused
        observation; they only become real interruptions once the session continues.
        """
        count = len(self.source_observations)
        self.end_time = observation.timestamp
        self.source_observations.append(observation)
        self.peak_score = max(self.peak_score, score)
        self.average_score = (self.average_score * count + score) / (count + 1)

        self.interruption_count += interruptions
