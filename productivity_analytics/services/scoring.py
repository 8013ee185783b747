"""Multi-factor productivity scoring for single observations"""
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from productivity_analytics.config.config import ScoringConfig
from productivity_analytics.config.tables import LookupTables, default_tables
from productivity_analytics.models.observation import (
    EnvironmentFactors,
    FocusMetrics,
    KeyboardActivity,
    MouseActivity,
    Observation,
    ProjectContext,
    RawSignals,
    ScoreComponent,
    ScoreResult,
    UsageHistory,
)

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.95

@dataclass
class SubScore:
    """Intermediate result of one scoring component"""
    score: float
    present: int
    expected: int
    factors: Dict[str, Any] = field(default_factory=dict)

    @property
    def confidence(self) -> float:
        if self.expected == 0:
            return MIN_CONFIDENCE
        share = self.present / self.expected
        return MIN_CONFIDENCE + (MAX_CONFIDENCE - MIN_CONFIDENCE) * share

def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))

class ScoringEngine:
    """Converts one observation's raw signals into a 0-100 productivity score.

    Five sub-scores (application, visual, temporal, behavioral, contextual)
    are computed independently and combined with fixed weights, then scaled
    by a global modifier for fatigue, stress and energy. Missing signals are
    never an error: they fall back to neutral values and lower confidence.
    """

    def __init__(self, config: Optional[ScoringConfig] = None, tables: Optional[LookupTables] = None):
        self.config = config or ScoringConfig()
        self.tables = tables or default_tables
        self._code_patterns = [re.compile(p, re.IGNORECASE) for p in self.tables.code_patterns]

    def score(self, observation: Observation) -> ScoreResult:
        """Score an observation"""
        signals = observation.signals
        components = {
            "application": self._application_score(observation, signals),
            "visual": self._visual_score(observation, signals),
            "temporal": self._temporal_score(observation, signals),
            "behavioral": self._behavioral_score(signals),
            "contextual": self._contextual_score(signals),
        }

        total = 0.0
        breakdown = {}
        for name, sub in components.items():
            weight = self.config.weights[name]
            raw = clamp(sub.score)
            total += raw * weight
            breakdown[name] = ScoreComponent(
                raw_score=raw,
                weight=weight,
                weighted_score=raw * weight,
                factors=sub.factors,
                confidence=sub.confidence,
            )

        multiplier, modifiers = self._global_modifiers(signals)
        final = int(math.floor(clamp(total * multiplier) + 0.5))

        weight_sum = sum(c.weight for c in breakdown.values())
        confidence = (
            sum(c.confidence * c.weight for c in breakdown.values()) / weight_sum
            if weight_sum > 0 else MIN_CONFIDENCE
        )

        logger.debug(
            f"Scored {observation.application} at {observation.timestamp.isoformat()}: "
            f"{final} (confidence {confidence:.2f})"
        )
        return ScoreResult(
            score=final,
            breakdown=breakdown,
            multiplier=multiplier,
            modifiers=modifiers,
            confidence=clamp(confidence, 0.0, 1.0),
        )

    def score_observation(self, observation: Observation) -> Observation:
        """Return a copy of the observation with its score attached"""
        return observation.with_score(self.score(observation))

    def describe(self, result: ScoreResult) -> List[str]:
        """Short readings of a score and its weakest and strongest components"""
        readings = []
        if result.score >= 80:
            readings.append("Excellent productivity level detected")
        elif result.score >= 60:
            readings.append("Good productivity, with room for improvement")
        elif result.score >= 40:
            readings.append("Moderate productivity, consider optimizations")
        else:
            readings.append("Low productivity detected, investigate distractions")

        application = result.breakdown.get("application")
        if application and application.raw_score < 40:
            readings.append("Consider switching to more productive applications")
        temporal = result.breakdown.get("temporal")
        if temporal and temporal.raw_score < 40:
            readings.append("Consider adjusting work schedule to optimal hours")
        behavioral = result.breakdown.get("behavioral")
        if behavioral and behavioral.raw_score > 70:
            readings.append("Strong focus and behavioral patterns detected")
        return readings

    # Application

    def _application_score(self, observation: Observation, signals: RawSignals) -> SubScore:
        app = observation.application
        sub = SubScore(score=self.config.neutral_score, present=0, expected=4)

        if app != "unknown":
            sub.present += 1
            rating = self.application_rating(app)
            sub.score = rating * 10
            sub.factors["primary_app"] = {"app": app, "rating": rating}

            if observation.window_label:
                sub.present += 1
                if self.is_browser(app):
                    browser_rating = self.browser_rating(observation.window_label)
                    sub.score = browser_rating * 10
                    sub.factors["browser_context"] = browser_rating

        visible = {app} | {a.strip().lower() for a in observation.secondary_applications if a.strip()}
        if observation.secondary_applications:
            sub.present += 1
        penalty = self.multitasking_penalty(len(visible))
        if penalty < 1.0:
            sub.score *= penalty
            sub.factors["multitasking"] = penalty

        if signals.recent_switches is not None:
            sub.present += 1
            if signals.recent_switches > self.config.switch_penalty_threshold:
                switch_penalty = max(
                    self.config.switch_penalty_floor,
                    1 - signals.recent_switches * self.config.switch_penalty_per_switch
                )
                sub.score *= switch_penalty
                sub.factors["switching_penalty"] = switch_penalty

        return sub

    def application_rating(self, app: str) -> int:
        """Rating (0-10) of an application, falling back to partial matches"""
        app = app.lower()
        ratings = self.tables.app_ratings
        if app in ratings:
            return ratings[app]
        for key, value in ratings.items():
            if key in app or app in key:
                return value
        for rule in self.tables.app_category_fallbacks:
            if rule.matches(app):
                return rule.rating
        return 5

    def is_browser(self, app: str) -> bool:
        return any(browser in app for browser in self.tables.browsers)

    def browser_rating(self, window_label: str) -> int:
        label = window_label.lower()
        for rule in self.tables.browser_rules:
            if rule.matches(label):
                return rule.rating
        return 5

    @staticmethod
    def multitasking_penalty(app_count: int) -> float:
        if app_count <= 2:
            return 1.0
        if app_count <= 4:
            return 0.9
        if app_count <= 6:
            return 0.8
        return 0.7

    # Visual / content

    def _visual_score(self, observation: Observation, signals: RawSignals) -> SubScore:
        sub = SubScore(score=self.config.neutral_score, present=0, expected=6)

        if signals.text_metrics is not None or signals.has_text is not None:
            sub.present += 1
            density_score = self.text_density_score(signals)
            sub.score += density_score
            sub.factors["text_density"] = density_score

        if signals.ui_complexity is not None:
            sub.present += 1
            complexity_score = {"high": 10, "medium": 5, "low": -5}[signals.ui_complexity]
            sub.score += complexity_score
            sub.factors["ui_complexity"] = complexity_score

        code_detected = self.detect_code(observation.window_label)
        if signals.has_code is not None or code_detected:
            sub.present += 1
        if signals.has_code or code_detected:
            sub.score += 20
            sub.factors["code_presence"] = True

        if signals.has_media is not None:
            sub.present += 1
            if signals.has_media:
                media_score = {"video": -10, "image": -5, "audio": 0}.get(signals.media_type, 0)
                sub.score += media_score
                sub.factors["media_content"] = {"type": signals.media_type or "unknown", "score": media_score}

        if signals.has_errors is not None or signals.is_loading is not None:
            sub.present += 1
            if signals.has_errors or signals.is_loading:
                sub.score -= 15
                sub.factors["system_issues"] = True

        if signals.is_fullscreen is not None:
            sub.present += 1
            if signals.is_fullscreen:
                sub.score += 10
                sub.factors["fullscreen"] = True

        return sub

    @staticmethod
    def text_density_score(signals: RawSignals) -> float:
        if signals.text_metrics is None:
            return 0
        density = signals.text_metrics.density
        if density > 0.7:
            return 15
        if density > 0.4:
            return 10
        if density > 0.1:
            return 5
        return -5

    def detect_code(self, window_label: Optional[str]) -> bool:
        if not window_label:
            return False
        return any(pattern.search(window_label) for pattern in self._code_patterns)

    # Temporal

    def _temporal_score(self, observation: Observation, signals: RawSignals) -> SubScore:
        sub = SubScore(score=self.config.neutral_score, present=1, expected=3)
        timestamp = observation.timestamp

        period, time_modifier = self.time_modifier(timestamp.hour)
        sub.score *= time_modifier
        sub.factors["time_of_day"] = {"hour": timestamp.hour, "period": period, "modifier": time_modifier}

        day_modifier = self.tables.day_modifiers.get(timestamp.weekday(), 1.0)
        sub.score *= day_modifier
        sub.factors["day_of_week"] = {"day": timestamp.weekday(), "modifier": day_modifier}

        if signals.session_duration_minutes is not None:
            sub.present += 1
            bonus = self.duration_bonus(signals.session_duration_minutes)
            sub.score += bonus
            sub.factors["session_duration"] = bonus

        if signals.minutes_since_break is not None:
            sub.present += 1
            break_factor = self.break_factor(signals.minutes_since_break)
            sub.score *= break_factor
            sub.factors["break_pattern"] = break_factor

        return sub

    def time_modifier(self, hour: int) -> tuple:
        for band in self.tables.time_bands:
            if band.start <= hour < band.end:
                return band.name, band.modifier
        return "unknown", 1.0

    @staticmethod
    def duration_bonus(minutes: float) -> float:
        if minutes < 5:
            return -10
        if minutes < 15:
            return 0
        if minutes < 30:
            return 5
        if minutes < 60:
            return 10
        if minutes < 120:
            return 15
        return 20

    @staticmethod
    def break_factor(minutes: float) -> float:
        if minutes < 60:
            return 1.0
        if minutes < 90:
            return 0.95
        if minutes < 120:
            return 0.9
        return 0.85

    # Behavioral

    def _behavioral_score(self, signals: RawSignals) -> SubScore:
        sub = SubScore(score=self.config.neutral_score, present=0, expected=4)

        if signals.keyboard_activity is not None:
            sub.present += 1
            points = self.keyboard_score(signals.keyboard_activity)
            sub.score += points
            sub.factors["keyboard_activity"] = points

        if signals.mouse_activity is not None:
            sub.present += 1
            points = self.mouse_score(signals.mouse_activity)
            sub.score += points
            sub.factors["mouse_activity"] = points

        if signals.usage_history is not None:
            sub.present += 1
            points = self.usage_score(signals.usage_history)
            sub.score += points
            sub.factors["usage_patterns"] = points

        if signals.focus_metrics is not None:
            sub.present += 1
            points = self.focus_score(signals.focus_metrics)
            sub.score += points
            sub.factors["focus_consistency"] = points

        return sub

    @staticmethod
    def keyboard_score(activity: KeyboardActivity) -> float:
        score = 0.0
        if activity.wpm is not None:
            if activity.wpm > 60:
                score += 15
            elif activity.wpm > 40:
                score += 10
            elif activity.wpm > 20:
                score += 5
            elif activity.wpm == 0:
                score -= 10
        if activity.consistency is not None:
            if activity.consistency > 0.8:
                score += 5
            elif activity.consistency < 0.3:
                score -= 5
        if activity.burstiness is not None:
            if activity.burstiness > 0.7:
                score -= 5
            elif activity.burstiness < 0.3:
                score += 5
        return score

    @staticmethod
    def mouse_score(activity: MouseActivity) -> float:
        score = 0.0
        if activity.click_rate is not None:
            if activity.click_rate > 2:
                score -= 5
            elif activity.click_rate > 0.5:
                score += 5
        if activity.movement_pattern == "focused":
            score += 5
        elif activity.movement_pattern == "scattered":
            score -= 5
        if activity.scroll_activity == "reading":
            score += 5
        elif activity.scroll_activity == "excessive":
            score -= 5
        return score

    @staticmethod
    def usage_score(history: UsageHistory) -> float:
        score = 0.0
        if history.consistent_apps:
            score += 10
        if history.productive_streak > 3:
            score += 5
        if history.distraction_ratio is not None and history.distraction_ratio < 0.2:
            score += 5
        if history.focus_session_length is not None and history.focus_session_length > 30:
            score += 10
        return score

    @staticmethod
    def focus_score(metrics: FocusMetrics) -> float:
        score = min(15.0, metrics.session_length / 2)
        score -= metrics.interruption_count * 3
        if metrics.deep_work_time > 0.7:
            score += 10
        elif metrics.deep_work_time > 0.5:
            score += 5
        return score

    # Contextual

    def _contextual_score(self, signals: RawSignals) -> SubScore:
        sub = SubScore(score=self.config.neutral_score, present=0, expected=4)

        if signals.project_context is not None:
            sub.present += 1
            points = self.project_score(signals.project_context)
            sub.score += points
            sub.factors["project_context"] = points

        if signals.meeting_active is not None:
            sub.present += 1
            if signals.meeting_active:
                sub.score += self.config.meeting_bonus
                sub.factors["meeting_context"] = True

        if signals.notification_count is not None:
            sub.present += 1
            penalty = min(
                self.config.notification_penalty_cap,
                signals.notification_count * self.config.notification_penalty_per_item
            )
            sub.score -= penalty
            sub.factors["interruptions"] = penalty

        if signals.environment_factors is not None:
            sub.present += 1
            points = self.environment_score(signals.environment_factors)
            sub.score += points
            sub.factors["environment"] = points

        return sub

    @staticmethod
    def project_score(project: ProjectContext) -> float:
        score = 0.0
        if project.active_project:
            score += 5
        if project.complexity == "high":
            score += 10
        elif project.complexity == "medium":
            score += 5
        if project.deadline == "urgent":
            score += 5
        if project.priority == "high":
            score += 5
        return score

    @staticmethod
    def environment_score(environment: EnvironmentFactors) -> float:
        score = 0.0
        if environment.quiet_environment:
            score += 5
        if environment.good_lighting:
            score += 3
        if environment.comfortable_setup:
            score += 3
        if environment.minimal_distractions:
            score += 5
        return score

    # Global

    def _global_modifiers(self, signals: RawSignals) -> tuple:
        multiplier = 1.0
        modifiers: Dict[str, float] = {}

        if signals.working_hours is not None and signals.working_hours > self.config.fatigue_hours_threshold:
            fatigue = max(
                self.config.fatigue_floor,
                1 - (signals.working_hours - self.config.fatigue_hours_threshold) * self.config.fatigue_penalty_per_hour
            )
            multiplier *= fatigue
            modifiers["fatigue"] = fatigue

        if signals.stress_indicators:
            multiplier *= self.config.stress_multiplier
            modifiers["stress"] = self.config.stress_multiplier

        if signals.energy_level is not None:
            energy = signals.energy_level / 10
            multiplier *= energy
            modifiers["energy"] = energy

        return multiplier, modifiers
