import pytest
from datetime import datetime, timedelta
from productivity_analytics.config.config import Config
from productivity_analytics.models.observation import Observation
from productivity_analytics.services.orchestrator import AnalysisOrchestrator

# A Tuesday morning
BASE_TIME = datetime(2024, 1, 9, 9, 0)

def observation_at(minutes, app="vscode", score=None, **kwargs):
    """Build an observation `minutes` after BASE_TIME"""
    return Observation(
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        primary_application=app,
        score=score,
        **kwargs
    )

@pytest.fixture
def make_observation():
    """Factory for observations relative to a fixed start time"""
    return observation_at

@pytest.fixture
def alternating_stream():
    """12 observations over an hour: 15-minute blocks of vscode (85) and youtube (15)"""
    stream = []
    for i in range(12):
        if (i // 3) % 2 == 0:
            stream.append(observation_at(i * 5, "vscode", 85))
        else:
            stream.append(observation_at(i * 5, "youtube", 15))
    return stream

@pytest.fixture
def rising_stream():
    """20 observations whose scores rise steadily from 40 to 90, mostly in vscode"""
    stream = []
    for i in range(20):
        app = "slack" if i < 4 else "vscode"
        stream.append(observation_at(i * 3, app, 40 + round(50 * i / 19)))
    return stream

@pytest.fixture
def full_signals():
    """Raw signals with every optional field present"""
    return {
        "has_text": True,
        "text_metrics": {"density": 0.8},
        "ui_complexity": "high",
        "has_code": True,
        "has_media": False,
        "has_errors": False,
        "is_loading": False,
        "is_fullscreen": True,
        "session_duration_minutes": 45,
        "minutes_since_break": 30,
        "recent_switches": 1,
        "keyboard_activity": {"wpm": 65, "consistency": 0.9, "burstiness": 0.2},
        "mouse_activity": {"click_rate": 1.0, "movement_pattern": "focused", "scroll_activity": "reading"},
        "usage_history": {"consistent_apps": True, "productive_streak": 5, "distraction_ratio": 0.1,
                          "focus_session_length": 40},
        "focus_metrics": {"session_length": 40, "interruption_count": 1, "deep_work_time": 0.8},
        "project_context": {"active_project": "engine", "complexity": "high", "deadline": "urgent",
                            "priority": "high"},
        "meeting_active": False,
        "notification_count": 2,
        "environment_factors": {"quiet_environment": True, "good_lighting": True,
                                "comfortable_setup": True, "minimal_distractions": True},
        "working_hours": 4,
        "stress_indicators": False,
        "energy_level": 9,
    }

@pytest.fixture
def orchestrator():
    """Provide a fresh orchestrator with default settings"""
    return AnalysisOrchestrator(Config())
