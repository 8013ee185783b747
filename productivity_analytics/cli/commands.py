import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional
import click
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from productivity_analytics.config.config import config, load_config
from productivity_analytics.config.logging_config import setup_logging
from productivity_analytics.models.insights import UserPreferences
from productivity_analytics.services.display import TerminalDisplay
from productivity_analytics.services.errors import AnalyticsError
from productivity_analytics.services.orchestrator import AnalysisOrchestrator, WindowSelector

logger = logging.getLogger(__name__)

console = Console()

def read_payloads(path: Path) -> List[dict]:
    """Observation payloads from a JSON array or a JSON-lines file"""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]

def read_preferences(path: Optional[Path]) -> UserPreferences:
    if path is None:
        return UserPreferences()
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"goals": data}
    try:
        return UserPreferences.model_validate(data)
    except ValidationError as e:
        raise AnalyticsError(f"Invalid goals file {path}: {e}") from e

def load_orchestrator(path: Path) -> AnalysisOrchestrator:
    orchestrator = AnalysisOrchestrator(load_config())
    payloads = read_payloads(path)
    # The history keeps itself sorted, so input order does not matter
    orchestrator.record_batch(payloads)
    return orchestrator

def emit_json(result: Any):
    data = TypeAdapter(type(result)).dump_python(result, mode="json")
    click.echo(json.dumps(data, indent=2))

@click.group()
@click.option('--log-file', type=click.Path(path_type=Path), default=None, help='Log file path')
@click.option('--log-level', default=None, help='Logging level (DEBUG, INFO, ...)')
def cli(log_file, log_level):
    """Activity pattern and productivity analytics"""
    setup_logging(log_file or config.log_file, log_level or config.log_level)

@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of a table')
def score(file, as_json):
    """Score every observation in FILE"""
    try:
        orchestrator = load_orchestrator(file)
        observations = orchestrator.observations()
        if as_json:
            emit_json(list(observations))
        else:
            TerminalDisplay(console).show_scores(observations)
    except (AnalyticsError, OSError, ValueError) as e:
        logger.error(f"Failed to score observations: {e}", exc_info=True)
        console.print(f"[red]Error scoring observations: {e}[/red]")
        sys.exit(1)

@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--last', type=int, default=None, help='Only analyze the last N observations')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of tables')
def patterns(file, last, as_json):
    """Recognize activity patterns in FILE"""
    try:
        orchestrator = load_orchestrator(file)
        result = orchestrator.analyze_patterns(WindowSelector(last=last))
        if as_json:
            emit_json(result)
        else:
            TerminalDisplay(console).show_patterns(result)
    except (AnalyticsError, OSError, ValueError) as e:
        logger.error(f"Pattern analysis failed: {e}", exc_info=True)
        console.print(f"[red]Pattern analysis failed: {e}[/red]")
        sys.exit(1)

@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--goals', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help='JSON file with user goals')
@click.option('--last', type=int, default=None, help='Only analyze the last N observations')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of tables')
def insights(file, goals, last, as_json):
    """Generate insights and recommendations for FILE"""
    try:
        preferences = read_preferences(goals)
        orchestrator = load_orchestrator(file)
        result = orchestrator.generate_insights(preferences, WindowSelector(last=last))
        if as_json:
            emit_json(result)
        else:
            TerminalDisplay(console).show_insights(result)
    except (AnalyticsError, OSError, ValueError) as e:
        logger.error(f"Insight generation failed: {e}", exc_info=True)
        console.print(f"[red]Insight generation failed: {e}[/red]")
        sys.exit(1)

if __name__ == '__main__':
    cli()
