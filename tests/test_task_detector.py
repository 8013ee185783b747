import pytest
from productivity_analytics.config.tables import LookupTables
from productivity_analytics.models.observation import FocusQuality, RawSignals
from productivity_analytics.services.task_detector import TaskDetector

@pytest.fixture
def task_detector():
    """Create a TaskDetector instance"""
    return TaskDetector()

def test_detect_primary_task(task_detector):
    """Test primary task detection"""
    task = task_detector._detect_primary_task(["vscode", "stackoverflow"])
    assert task == "development"

def test_detect_primary_task_unknown(task_detector):
    """Test unknown task detection"""
    task = task_detector._detect_primary_task(["unknown_app"])
    assert task == "unknown"

def test_detect_primary_task_tie_goes_to_first_category(task_detector):
    # one development match, one communication match
    assert task_detector._detect_primary_task(["vscode", "slack"]) == "development"

def test_window_label_is_considered(task_detector, make_observation):
    obs = make_observation(0, "chrome", window_label="Figma - design review")
    # chrome matches research, the label matches design; design is listed first
    assert task_detector.detect_activity_type(obs) == "design"
    assert task_detector.detect_activity_type(make_observation(0, "notion")) == "writing"

def test_stated_activity_wins(task_detector, make_observation):
    obs = make_observation(0, "youtube", raw_signals=RawSignals(stated_activity=" Research "))
    assert task_detector.detect_activity_type(obs) == "research"

def test_existing_activity_type_is_kept(task_detector, make_observation):
    obs = make_observation(0, "youtube", activity_type="learning")
    assert task_detector.detect_activity_type(obs) == "learning"

@pytest.mark.parametrize("score,quality", [
    (None, None),
    (95, FocusQuality.DEEP),
    (80, FocusQuality.DEEP),
    (79, FocusQuality.MODERATE),
    (60, FocusQuality.MODERATE),
    (59, FocusQuality.DISTRACTED),
])
def test_focus_quality(score, quality):
    assert TaskDetector.focus_quality(score) == quality

def test_tags_for():
    assert TaskDetector.tags_for(85) == ("deep-work", "high-productivity")
    assert TaskDetector.tags_for(65) == ("focused",)
    assert TaskDetector.tags_for(30) == ("distracted", "low-productivity")
    assert TaskDetector.tags_for(None, ("manual",)) == ("manual",)

def test_tags_are_not_duplicated():
    assert TaskDetector.tags_for(90, ("deep-work",)) == ("deep-work", "high-productivity")

def test_enrich(task_detector, make_observation):
    """Test enrichment attaches type, quality and tags without touching the score"""
    obs = make_observation(0, "vscode", 72)
    enriched = task_detector.enrich(obs)

    assert enriched.score == 72
    assert enriched.activity_type == "development"
    assert enriched.focus_quality == FocusQuality.MODERATE
    assert enriched.tags == ("focused", "high-productivity")
    assert obs.tags == ()

def test_custom_tables(make_observation):
    tables = LookupTables(activity_types={"gaming": ["steam"]})
    detector = TaskDetector(tables)
    assert detector.detect_activity_type(make_observation(0, "Steam")) == "gaming"
    assert detector.detect_activity_type(make_observation(0, "vscode")) == "unknown"
