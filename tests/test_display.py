import pytest
from rich.console import Console
from productivity_analytics.services.display import TerminalDisplay, score_style
from productivity_analytics.services.insights import InsightGenerator
from productivity_analytics.services.patterns import PatternRecognizer

@pytest.fixture
def console():
    return Console(record=True, width=160)

@pytest.fixture
def display(console):
    return TerminalDisplay(console)

@pytest.mark.parametrize("score,style", [
    (None, "dim"), (90, "bold green"), (65, "green"), (45, "yellow"), (10, "red"),
])
def test_score_style(score, style):
    assert score_style(score) == style

def test_show_scores(display, console, make_observation):
    display.show_scores([make_observation(0, "vscode", 85, tags=("deep-work",))])
    output = console.export_text()
    assert "vscode" in output
    assert "85" in output
    assert "deep-work" in output

def test_show_scores_empty(display, console):
    display.show_scores([])
    assert "No observations to score" in console.export_text()

def test_show_patterns(display, console, alternating_stream):
    display.show_patterns(PatternRecognizer().analyze_sequence(alternating_stream))
    output = console.export_text()
    assert "Focus Sessions" in output
    assert "Applications" in output
    assert "youtube" in output

def test_show_insufficient_patterns(display, console, make_observation):
    display.show_patterns(PatternRecognizer().analyze_sequence([make_observation(0, score=70)]))
    assert "Insufficient data" in console.export_text()

def test_show_insights(display, console, rising_stream):
    display.show_insights(InsightGenerator().generate(rising_stream))
    output = console.export_text()
    assert "Productivity Overview" in output
    assert "Recommendations" in output

def test_show_minimal_insights(display, console, make_observation):
    display.show_insights(InsightGenerator().generate([make_observation(0, score=70)]))
    output = console.export_text()
    assert "Top application: vscode" in output
    assert "Recommendations" in output
