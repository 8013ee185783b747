import threading
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock
from productivity_analytics.config.config import BlendingConfig, CacheConfig, Config, HistoryConfig
from productivity_analytics.models.insights import Goal, InsightResult, MinimalInsights, UserPreferences
from productivity_analytics.models.observation import Classification, FocusQuality, Observation
from productivity_analytics.models.patterns import InsufficientData, PatternResult
from productivity_analytics.services.errors import InvalidObservationError, ProviderError
from productivity_analytics.services.orchestrator import AnalysisOrchestrator, WindowSelector
from productivity_analytics.services.scoring import ScoringEngine

START = datetime(2024, 1, 9, 9, 0)

def payload(minutes, app="vscode", **kwargs):
    data = {"timestamp": (START + timedelta(minutes=minutes)).isoformat(), "primary_application": app}
    data.update(kwargs)
    return data

def test_record_observation_scores_and_tags(orchestrator):
    """Test a raw payload comes back scored, tagged and stored"""
    obs = orchestrator.record_observation(payload(0, window_label="engine.py"))

    assert 0 <= obs.score <= 100
    assert obs.computational_score == obs.score
    assert 0 <= obs.confidence <= 1
    assert obs.activity_type == "development"
    assert obs.focus_quality is not None
    assert obs.tags
    assert len(orchestrator.history) == 1

def test_supplied_score_is_preserved(orchestrator):
    obs = orchestrator.record_observation(payload(0, app="youtube", score=88))

    assert obs.score == 88
    assert obs.computational_score != 88
    assert obs.focus_quality == FocusQuality.DEEP
    assert "deep-work" in obs.tags

def test_invalid_payload_is_rejected(orchestrator):
    with pytest.raises(InvalidObservationError):
        orchestrator.record_observation(payload(0, score=150))
    with pytest.raises(InvalidObservationError):
        orchestrator.record_observation({"primary_application": "vscode"})
    assert len(orchestrator.history) == 0

def test_provider_score_is_blended():
    classifier = Mock()
    classifier.classify.return_value = Classification(
        activity_type="writing", rationale="Editing a report", score=10, confidence=0.9
    )
    orchestrator = AnalysisOrchestrator(Config(blending=BlendingConfig(ai_weight=0.6)), classifier=classifier)

    obs = orchestrator.record_observation(payload(0))
    computational = ScoringEngine().score(Observation(timestamp=START, primary_application="vscode")).score

    assert obs.computational_score == computational
    assert obs.score == int(0.6 * 100 + 0.4 * computational + 0.5)
    assert obs.activity_type == "writing"
    assert obs.rationale == "Editing a report"
    classifier.classify.assert_called_once()

def test_provider_failure_surfaces_and_keeps_history(make_observation):
    classifier = Mock()
    classifier.classify.side_effect = [Classification(), Classification(), Classification(), RuntimeError("timeout")]
    orchestrator = AnalysisOrchestrator(Config(), classifier=classifier)
    for minutes in (0, 5, 10):
        orchestrator.record_observation(make_observation(minutes, score=80))

    with pytest.raises(ProviderError) as excinfo:
        orchestrator.record_observation(make_observation(15, score=80))

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert len(orchestrator.history) == 3
    assert isinstance(orchestrator.analyze_patterns(), PatternResult)

def test_history_is_kept_in_time_order(orchestrator, make_observation):
    orchestrator.record_observation(make_observation(10, "late", 70))
    orchestrator.record_observation(make_observation(0, "early", 70))
    orchestrator.record_observation(make_observation(10, "tie", 70))

    apps = [o.application for o in orchestrator.observations()]
    assert apps == ["early", "late", "tie"]

def test_capacity_evicts_oldest(make_observation):
    orchestrator = AnalysisOrchestrator(Config(history=HistoryConfig(capacity=3)))
    orchestrator.record_batch([make_observation(m, score=70) for m in (0, 5, 10, 15)])

    observations = orchestrator.observations()
    assert len(observations) == 3
    assert observations[0].timestamp == START + timedelta(minutes=5)

def test_alternating_blocks_through_orchestrator(orchestrator, alternating_stream):
    orchestrator.record_batch(alternating_stream)
    result = orchestrator.analyze_patterns()

    assert len(result.focus.sessions) == 2
    assert result.focus.total_interruptions == 0
    assert result.distractions.total_distractions >= 1
    assert result.task_switching.switching_efficiency < 50

def test_insufficient_history(orchestrator, make_observation):
    orchestrator.record_observation(make_observation(0, score=70))
    orchestrator.record_observation(make_observation(5, score=70))

    assert isinstance(orchestrator.analyze_patterns(), InsufficientData)
    assert isinstance(orchestrator.generate_insights(), MinimalInsights)

def test_generate_insights_with_goals(orchestrator, rising_stream):
    orchestrator.record_batch(rising_stream)
    preferences = UserPreferences(goals=[Goal(id="score", type="productivity_target", target=60)])
    result = orchestrator.generate_insights(preferences)

    assert isinstance(result, InsightResult)
    assert result.goal_progress[0].status == "achieved"

def test_analysis_results_are_cached_until_a_write(orchestrator, alternating_stream, make_observation):
    orchestrator.record_batch(alternating_stream)

    first = orchestrator.analyze_patterns()
    second = orchestrator.analyze_patterns()
    assert first is second
    assert orchestrator.cache_stats()["hits"] >= 1

    orchestrator.record_observation(make_observation(60, "vscode", 85))
    third = orchestrator.analyze_patterns()
    assert third is not first
    assert third.observation_count == 13

def test_insights_cache_depends_on_preferences(orchestrator, rising_stream):
    orchestrator.record_batch(rising_stream)
    plain = orchestrator.generate_insights()
    assert orchestrator.generate_insights() is plain

    with_goal = orchestrator.generate_insights(UserPreferences(goals=[Goal(id="g")]))
    assert with_goal is not plain
    assert len(with_goal.goal_progress) == 1

def test_identical_inputs_are_scored_once():
    orchestrator = AnalysisOrchestrator(Config())
    orchestrator.scoring_engine = Mock(wraps=orchestrator.scoring_engine)

    orchestrator.record_observation(payload(0, window_label="notes"))
    orchestrator.record_observation(payload(0, window_label="notes"))

    assert orchestrator.scoring_engine.score.call_count == 1
    assert len(orchestrator.history) == 2

def test_cache_entries_expire():
    now = [0.0]
    orchestrator = AnalysisOrchestrator(Config(cache=CacheConfig(ttl_seconds=60)), clock=lambda: now[0])
    orchestrator.record_batch([payload(m, score=70) for m in (0, 5, 10)])

    first = orchestrator.analyze_patterns()
    now[0] = 61.0
    assert orchestrator.analyze_patterns() is not first

def test_window_selector(orchestrator, alternating_stream):
    orchestrator.record_batch(alternating_stream)

    last = orchestrator.analyze_patterns(WindowSelector(last=6))
    assert last.observation_count == 6

    since = WindowSelector(since=START + timedelta(minutes=30))
    assert len(orchestrator.observations(since)) == 6
    until = WindowSelector(until=START + timedelta(minutes=10))
    assert isinstance(orchestrator.analyze_patterns(until), PatternResult)
    assert orchestrator.analyze_patterns(until).observation_count == 3

def test_sessions_are_independent(make_observation):
    first = AnalysisOrchestrator(Config())
    second = AnalysisOrchestrator(Config())
    first.record_observation(make_observation(0, score=70))

    assert len(first.history) == 1
    assert len(second.history) == 0

def test_clear(orchestrator, alternating_stream):
    orchestrator.record_batch(alternating_stream)
    orchestrator.analyze_patterns()
    orchestrator.clear()

    assert len(orchestrator.history) == 0
    assert orchestrator.cache_stats()["size"] == 0

def test_concurrent_writers_and_readers(orchestrator):
    """Readers always see a complete, ordered history while writers append"""
    errors = []

    def writer(offset):
        for i in range(25):
            orchestrator.record_observation(payload(offset + i * 4, score=60 + (i % 30)))

    def reader():
        for _ in range(25):
            observations = orchestrator.observations()
            timestamps = [o.timestamp for o in observations]
            if timestamps != sorted(timestamps):
                errors.append("unsorted snapshot")
            result = orchestrator.analyze_patterns()
            if not isinstance(result, (PatternResult, InsufficientData)):
                errors.append(result)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(orchestrator.history) == 100

def test_naive_and_aware_timestamps_share_one_history(orchestrator):
    """Aware timestamps are stored as naive UTC next to naive ones"""
    orchestrator.record_observation({"timestamp": "2024-01-09T09:10:00", "primary_application": "later"})
    orchestrator.record_observation({"timestamp": "2024-01-09T11:05:00+02:00", "primary_application": "aware"})
    orchestrator.record_observation({"timestamp": "2024-01-09T09:00:00", "primary_application": "first"})

    observations = orchestrator.observations()
    assert [o.application for o in observations] == ["first", "aware", "later"]
    assert observations[1].timestamp == START + timedelta(minutes=5)
    assert all(o.timestamp.tzinfo is None for o in observations)

    since = WindowSelector(since=datetime(2024, 1, 9, 9, 5, tzinfo=timezone.utc))
    assert len(orchestrator.observations(since)) == 2
    assert isinstance(orchestrator.analyze_patterns(), PatternResult)
