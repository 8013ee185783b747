"""Detect higher-level tasks and focus quality from scored observations"""
from typing import Dict, List, Optional
import logging
from productivity_analytics.config.tables import LookupTables, default_tables
from productivity_analytics.models.observation import FocusQuality, Observation

logger = logging.getLogger(__name__)

DEEP_FOCUS_SCORE = 80
MODERATE_FOCUS_SCORE = 60
HIGH_PRODUCTIVITY_SCORE = 70
LOW_PRODUCTIVITY_SCORE = 40

class TaskDetector:
    """Classifies observations into activity types and attaches focus tags"""

    def __init__(self, tables: Optional[LookupTables] = None):
        self.task_patterns: Dict[str, List[str]] = (tables or default_tables).activity_types

    def detect_activity_type(self, observation: Observation) -> str:
        """Activity type of an observation, preferring what the user stated"""
        if observation.activity_type:
            return observation.activity_type
        stated = observation.signals.stated_activity
        if stated:
            return stated.strip().lower()

        names = [observation.application]
        if observation.window_label:
            names.append(observation.window_label.lower())
        return self._detect_primary_task(names)

    def _detect_primary_task(self, names: List[str]) -> str:
        """Category with the most keyword matches; ties go to the first listed category"""
        task_scores = {category: 0 for category in self.task_patterns}
        for name in names:
            for category, patterns in self.task_patterns.items():
                if any(pattern in name for pattern in patterns):
                    task_scores[category] += 1

        if not task_scores or max(task_scores.values()) == 0:
            return "unknown"

        max_score = max(task_scores.values())
        return next(cat for cat, score in task_scores.items() if score == max_score)

    @staticmethod
    def focus_quality(score: Optional[float]) -> Optional[FocusQuality]:
        if score is None:
            return None
        if score >= DEEP_FOCUS_SCORE:
            return FocusQuality.DEEP
        if score >= MODERATE_FOCUS_SCORE:
            return FocusQuality.MODERATE
        return FocusQuality.DISTRACTED

    @staticmethod
    def tags_for(score: Optional[float], existing=()) -> tuple:
        tags = list(existing)
        if score is not None:
            if score >= DEEP_FOCUS_SCORE:
                tags.append("deep-work")
            elif score >= MODERATE_FOCUS_SCORE:
                tags.append("focused")
            else:
                tags.append("distracted")

            if score >= HIGH_PRODUCTIVITY_SCORE:
                tags.append("high-productivity")
            elif score < LOW_PRODUCTIVITY_SCORE:
                tags.append("low-productivity")

        # Keep first occurrence order
        return tuple(dict.fromkeys(tags))

    def enrich(self, observation: Observation) -> Observation:
        """Attach activity type, focus quality and tags to a scored observation"""
        score = observation.score
        activity_type = self.detect_activity_type(observation)
        enriched = observation.model_copy(update={
            "activity_type": activity_type,
            "focus_quality": self.focus_quality(score),
            "tags": self.tags_for(score, observation.tags),
        })
        logger.debug(f"Tagged {observation.application} as {activity_type} ({enriched.focus_quality})")
        return enriched
