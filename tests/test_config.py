import logging
import pytest
from pydantic import ValidationError
from productivity_analytics.config.config import Config, ScoringConfig, load_config
from productivity_analytics.config.logging_config import setup_logging
from productivity_analytics.services.errors import ConfigError

def test_defaults():
    """Test the default configuration values"""
    config = Config()
    assert config.scoring.weights["application"] == 0.25
    assert config.patterns.focus_threshold == 60
    assert config.patterns.max_break_minutes == 5
    assert config.insights.min_history == 5
    assert config.blending.ai_weight == 0.6
    assert config.history.capacity == 5000

def test_weights_must_sum_to_one():
    with pytest.raises(ValidationError):
        ScoringConfig(weights={"application": 0.5, "visual": 0.5, "temporal": 0.5,
                               "behavioral": 0.0, "contextual": 0.0})

def test_weights_must_be_complete():
    with pytest.raises(ValidationError):
        ScoringConfig(weights={"application": 1.0})

def test_load_config_wraps_validation_errors():
    with pytest.raises(ConfigError):
        load_config(blending={"ai_weight": 2})

def test_load_config_overrides():
    config = load_config(patterns={"focus_threshold": 75})
    assert config.patterns.focus_threshold == 75
    assert config.patterns.max_break_minutes == 5

def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PRODUCTIVITY_ANALYTICS_PATTERNS__FOCUS_THRESHOLD", "70")
    monkeypatch.setenv("PRODUCTIVITY_ANALYTICS_LOG_LEVEL", "DEBUG")
    config = Config()
    assert config.patterns.focus_threshold == 70
    assert config.log_level == "DEBUG"

def test_setup_logging_creates_directory(tmp_path):
    log_file = tmp_path / "nested" / "analytics.log"
    setup_logging(log_file, "DEBUG")
    assert log_file.parent.is_dir()
    logging.getLogger("productivity_analytics").debug("still works")
