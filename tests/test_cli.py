import json
import pytest
from click.testing import CliRunner
from productivity_analytics.cli.commands import cli, read_payloads, read_preferences
from productivity_analytics.services.errors import AnalyticsError

def parse_json(output):
    """JSON document printed after any log lines"""
    start = min(i for i in (output.find("{"), output.find("[")) if i >= 0)
    return json.loads(output[start:])

@pytest.fixture
def runner():
    return CliRunner()

@pytest.fixture
def observations_file(tmp_path, alternating_stream):
    path = tmp_path / "observations.jsonl"
    lines = [
        json.dumps({"timestamp": o.timestamp.isoformat(), "primary_application": o.primary_application,
                    "score": o.score})
        for o in reversed(alternating_stream)
    ]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path

@pytest.fixture
def log_args(tmp_path):
    return ["--log-file", str(tmp_path / "logs" / "cli.log"), "--log-level", "WARNING"]

def test_read_payloads_accepts_array_and_lines(tmp_path):
    array = tmp_path / "array.json"
    array.write_text('[{"timestamp": "2024-01-09T09:00:00"}]', encoding="utf-8")
    lines = tmp_path / "lines.jsonl"
    lines.write_text('{"timestamp": "2024-01-09T09:00:00"}\n\n{"timestamp": "2024-01-09T09:05:00"}\n',
                     encoding="utf-8")
    empty = tmp_path / "empty.json"
    empty.write_text("", encoding="utf-8")

    assert len(read_payloads(array)) == 1
    assert len(read_payloads(lines)) == 2
    assert read_payloads(empty) == []

def test_read_preferences(tmp_path):
    assert read_preferences(None).goals == []

    goals = tmp_path / "goals.json"
    goals.write_text('[{"id": "focus", "type": "focus_improvement"}]', encoding="utf-8")
    assert read_preferences(goals).goals[0].id == "focus"

    bad = tmp_path / "bad.json"
    bad.write_text('{"goals": [{"type": "generic"}]}', encoding="utf-8")
    with pytest.raises(AnalyticsError):
        read_preferences(bad)

def test_score_command_json(runner, observations_file, log_args):
    result = runner.invoke(cli, log_args + ["score", str(observations_file), "--json"])

    assert result.exit_code == 0, result.output
    scored = parse_json(result.output)
    assert len(scored) == 12
    timestamps = [o["timestamp"] for o in scored]
    assert timestamps == sorted(timestamps)
    assert scored[0]["score"] == 85
    assert scored[0]["activity_type"] == "development"

def test_score_command_table(runner, observations_file, log_args):
    result = runner.invoke(cli, log_args + ["score", str(observations_file)])
    assert result.exit_code == 0, result.output
    assert "Observation Scores" in result.output

def test_patterns_command(runner, observations_file, log_args):
    result = runner.invoke(cli, log_args + ["patterns", str(observations_file), "--json"])

    assert result.exit_code == 0, result.output
    patterns = parse_json(result.output)
    assert len(patterns["focus"]["sessions"]) == 2
    assert patterns["observation_count"] == 12

def test_patterns_command_last_window(runner, observations_file, log_args):
    result = runner.invoke(cli, log_args + ["patterns", str(observations_file), "--last", "2", "--json"])
    assert result.exit_code == 0, result.output
    marker = parse_json(result.output)
    assert marker["required"] == 3
    assert marker["provided"] == 2

def test_insights_command_with_goals(runner, observations_file, tmp_path, log_args):
    goals = tmp_path / "goals.json"
    goals.write_text('{"goals": [{"id": "score", "type": "productivity_target", "target": 40}]}',
                     encoding="utf-8")
    result = runner.invoke(cli, log_args + ["insights", str(observations_file), "--goals", str(goals), "--json"])

    assert result.exit_code == 0, result.output
    insights = parse_json(result.output)
    assert "overview" in insights
    assert insights["goal_progress"][0]["status"] == "achieved"

def test_insights_command_table(runner, observations_file, log_args):
    result = runner.invoke(cli, log_args + ["insights", str(observations_file)])
    assert result.exit_code == 0, result.output
    assert "Recommendations" in result.output

def test_invalid_observation_exits_with_error(runner, tmp_path, log_args):
    path = tmp_path / "bad.jsonl"
    path.write_text('{"timestamp": "2024-01-09T09:00:00", "score": 150}', encoding="utf-8")

    result = runner.invoke(cli, log_args + ["score", str(path)])

    assert result.exit_code == 1
    assert "Error scoring observations" in result.output

def test_mixed_timestamp_forms(runner, tmp_path, log_args):
    path = tmp_path / "mixed.jsonl"
    path.write_text(
        '{"timestamp": "2024-01-09T09:00:00", "score": 70}\n'
        '{"timestamp": "2024-01-09T09:05:00+00:00", "score": 80}\n',
        encoding="utf-8",
    )
    result = runner.invoke(cli, log_args + ["score", str(path), "--json"])

    assert result.exit_code == 0, result.output
    assert [o["score"] for o in parse_json(result.output)] == [70, 80]
