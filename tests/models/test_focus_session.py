from datetime import timedelta
from pydantic import TypeAdapter
from productivity_analytics.models.focus_session import FocusSession
from productivity_analytics.services.patterns import session_quality

def test_focus_session_open(make_observation):
    """Test a session opened from a single observation"""
    obs = make_observation(0, score=80)
    session = FocusSession.open(obs, 80)

    assert session.start_time == obs.timestamp
    assert session.end_time == obs.timestamp
    assert session.duration_minutes == 0
    assert session.peak_score == 80
    assert session.average_score == 80
    assert session.interruption_count == 0
    assert session.source_observations == [obs]

def test_add_observation(make_observation):
    """Test extending a session updates end time, peak and running average"""
    session = FocusSession.open(make_observation(0, score=70), 70)
    later = make_observation(30, score=90)

    session.add_observation(later, 90)

    assert session.end_time == later.timestamp
    assert session.duration == timedelta(minutes=30)
    assert session.duration_minutes == 30
    assert session.peak_score == 90
    assert session.average_score == 80
    assert len(session.source_observations) == 2

def test_interruptions_commit_on_extension(make_observation):
    """Dips only count once the session continues"""
    session = FocusSession.open(make_observation(0, score=85), 85)
    assert session.interruption_count == 0

    session.add_observation(make_observation(4, score=85), 85, interruptions=2)
    assert session.interruption_count == 2

def test_serialized_session_shape(make_observation):
    session = FocusSession.open(make_observation(0, score=85), 85)
    data = TypeAdapter(FocusSession).dump_python(session, mode="json")

    assert set(data) == {
        "start_time", "end_time", "peak_score", "average_score",
        "interruption_count", "quality_score", "source_observations",
    }

def test_efficiency_discounts_interruptions(make_observation):
    session = FocusSession.open(make_observation(0, score=80), 80)
    session.interruption_count = 1
    assert session.efficiency == 40

def test_session_quality(make_observation):
    """Test quality from duration, average score and interruptions"""
    session = FocusSession.open(make_observation(0, score=100), 100)
    session.add_observation(make_observation(30, score=100), 100)
    assert session_quality(session) == 100

    session.interruption_count = 2
    assert session_quality(session) == 90

    short = FocusSession.open(make_observation(0, score=60), 60)
    short.add_observation(make_observation(15, score=60), 60)
    short.interruption_count = 10
    # 20 (half duration) + 24 (average) + 0 (interruptions floor)
    assert abs(session_quality(short) - 44) < 1e-9
