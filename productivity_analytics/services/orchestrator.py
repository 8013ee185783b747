"""Owns the observation history and coordinates scoring, patterns and insights"""
import hashlib
import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple, Union
from pydantic import ValidationError
from productivity_analytics.config.config import Config
from productivity_analytics.config.tables import LookupTables, default_tables
from productivity_analytics.models.insights import InsightResult, MinimalInsights, UserPreferences
from productivity_analytics.models.observation import Classification, Observation, naive_utc
from productivity_analytics.models.patterns import InsufficientData, PatternResult
from productivity_analytics.services.blending import blend_scores, normalize_provider_score
from productivity_analytics.services.cache import TTLCache
from productivity_analytics.services.errors import InvalidObservationError, ProviderError
from productivity_analytics.services.history import ObservationHistory
from productivity_analytics.services.insights import InsightGenerator
from productivity_analytics.services.patterns import PatternRecognizer
from productivity_analytics.services.scoring import ScoringEngine
from productivity_analytics.services.task_detector import TaskDetector

logger = logging.getLogger(__name__)

class ActivityClassifier(Protocol):
    """External provider that classifies an observation"""

    def classify(self, observation: Observation) -> Classification:
        ...

@dataclass(frozen=True)
class WindowSelector:
    """Selects a slice of the history: a time range, then the last N entries"""
    last: Optional[int] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    def apply(self, observations: Sequence[Observation]) -> Tuple[Observation, ...]:
        since = naive_utc(self.since) if self.since else None
        until = naive_utc(self.until) if self.until else None
        selected = [
            o for o in observations
            if (since is None or o.timestamp >= since)
            and (until is None or o.timestamp <= until)
        ]
        if self.last is not None:
            selected = selected[-self.last:] if self.last > 0 else []
        return tuple(selected)

    @property
    def key(self) -> Tuple:
        return (
            self.last,
            self.since.isoformat() if self.since else None,
            self.until.isoformat() if self.until else None,
        )

ALL = WindowSelector()

def fingerprint(observation: Observation) -> str:
    """Stable hash of an observation's content"""
    payload = json.dumps(observation.model_dump(mode="json"), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

def round_score(value: float) -> int:
    return int(math.floor(max(0.0, min(100.0, value)) + 0.5))

class AnalysisOrchestrator:
    """Entry point for hosts: record observations, then ask for patterns or insights.

    One orchestrator is one independent analysis session. It owns its own
    history and cache, so several can run side by side in one process.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        classifier: Optional[ActivityClassifier] = None,
        tables: Optional[LookupTables] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or Config()
        self.classifier = classifier
        tables = tables or default_tables

        self.scoring_engine = ScoringEngine(self.config.scoring, tables)
        self.task_detector = TaskDetector(tables)
        self.recognizer = PatternRecognizer(self.config.patterns, tables)
        self.insight_generator = InsightGenerator(self.config.insights, self.recognizer)

        self.history = ObservationHistory(self.config.history.capacity)
        self.cache = TTLCache(
            max_entries=self.config.cache.max_entries,
            ttl=self.config.cache.ttl_seconds,
            clock=clock,
        )

    def record_observation(self, raw: Union[Observation, Mapping[str, Any]]) -> Observation:
        """Score, enrich and append one observation"""
        observation = self._process(raw)
        version = self.history.append(observation)
        self._invalidate_analyses()
        logger.info(
            f"Recorded {observation.application} at {observation.timestamp.isoformat()} "
            f"with score {observation.score} (history v{version})"
        )
        return observation

    def record_batch(self, raws: Iterable[Union[Observation, Mapping[str, Any]]]) -> List[Observation]:
        """Process every observation first, then append them as one write"""
        observations = [self._process(raw) for raw in raws]
        if observations:
            version = self.history.extend(observations)
            self._invalidate_analyses()
            logger.info(f"Recorded {len(observations)} observations (history v{version})")
        return observations

    def analyze_patterns(self, window: Optional[WindowSelector] = None) -> Union[PatternResult, InsufficientData]:
        window = window or ALL
        observations, version = self.history.snapshot()
        return self._patterns(window.apply(observations), window, version)

    def generate_insights(
        self,
        preferences: Optional[UserPreferences] = None,
        window: Optional[WindowSelector] = None,
    ) -> Union[InsightResult, MinimalInsights]:
        window = window or ALL
        preferences = preferences or UserPreferences()
        observations, version = self.history.snapshot()
        key = ("insights", window.key, preferences.model_dump_json(), version)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Insight cache hit for window {window.key}")
            return cached

        selected = window.apply(observations)
        patterns = None
        if len(selected) >= self.config.insights.min_history:
            patterns = self._patterns(selected, window, version)
        result = self.insight_generator.generate(selected, preferences, patterns)
        self.cache.set(key, result)
        return result

    def observations(self, window: Optional[WindowSelector] = None) -> Tuple[Observation, ...]:
        observations, _ = self.history.snapshot()
        return (window or ALL).apply(observations)

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    def clear(self):
        """Drop all history and cached results"""
        self.history.clear()
        self.cache.clear()
        logger.info("Cleared history and cache")

    # Internals

    def _coerce(self, raw: Union[Observation, Mapping[str, Any]]) -> Observation:
        if isinstance(raw, Observation):
            return raw
        try:
            return Observation.model_validate(raw)
        except ValidationError as e:
            raise InvalidObservationError(f"Invalid observation payload: {e}") from e

    def _patterns(self, selected, window: WindowSelector, version: int):
        key = ("patterns", window.key, version)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Pattern cache hit for window {window.key}")
            return cached

        result = self.recognizer.analyze_sequence(selected)
        self.cache.set(key, result)
        return result

    def _score(self, observation: Observation):
        key = ("score", fingerprint(observation))
        result = self.cache.get(key)
        if result is None:
            result = self.scoring_engine.score(observation)
            self.cache.set(key, result)
        return result

    def _classify(self, observation: Observation) -> Optional[Classification]:
        if self.classifier is None:
            return None
        try:
            return self.classifier.classify(observation)
        except Exception as e:
            logger.warning(f"Classification provider failed for {observation.application}: {e}")
            raise ProviderError(f"Classification failed: {e}") from e

    def _process(self, raw: Union[Observation, Mapping[str, Any]]) -> Observation:
        observation = self._coerce(raw)
        result = self._score(observation)
        classification = self._classify(observation)

        update: Dict[str, Any] = {
            "score_breakdown": dict(result.breakdown),
            "confidence": result.confidence,
            "computational_score": result.score,
        }
        if observation.score is None:
            # Only provider scores are blended; a supplied score is kept as-is
            provider_score = normalize_provider_score(
                classification.score if classification else None,
                self.config.blending.provider_scale,
            )
            blended = blend_scores(provider_score, result.score, self.config.blending.ai_weight)
            update["score"] = round_score(blended)

        if classification is not None:
            if classification.activity_type:
                update["activity_type"] = classification.activity_type
            if classification.rationale:
                update["rationale"] = classification.rationale

        return self.task_detector.enrich(observation.model_copy(update=update))

    def _invalidate_analyses(self):
        dropped = self.cache.discard_where(lambda key: key[0] != "score")
        if dropped:
            logger.info(f"Invalidated {dropped} cached analyses")
