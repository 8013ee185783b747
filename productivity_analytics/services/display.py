from typing import Optional, Sequence, Union
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from productivity_analytics.models.insights import InsightResult, MinimalInsights, RecommendationSet
from productivity_analytics.models.observation import Observation
from productivity_analytics.models.patterns import InsufficientData, PatternResult, RhythmPatterns

def score_style(score: Optional[float]) -> str:
    if score is None:
        return "dim"
    if score >= 80:
        return "bold green"
    if score >= 60:
        return "green"
    if score >= 40:
        return "yellow"
    return "red"

class TerminalDisplay:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_scores(self, observations: Sequence[Observation]):
        """Table of scored observations"""
        if not observations:
            self.console.print("[yellow]No observations to score[/yellow]")
            return

        table = Table(title="Observation Scores")
        table.add_column("Time", justify="left", style="cyan")
        table.add_column("Application", justify="left", style="green")
        table.add_column("Activity", justify="left", style="blue")
        table.add_column("Score", justify="right")
        table.add_column("Confidence", justify="right", style="magenta")
        table.add_column("Tags", justify="left", style="dim")

        for obs in observations:
            table.add_row(
                obs.timestamp.strftime("%Y-%m-%d %H:%M"),
                obs.application,
                obs.activity_type or "-",
                Text(str(obs.score) if obs.score is not None else "-", style=score_style(obs.score)),
                f"{obs.confidence:.2f}" if obs.confidence is not None else "-",
                ", ".join(obs.tags),
            )
        self.console.print(table)

    def show_insufficient(self, marker: InsufficientData):
        self.console.print(Panel(
            f"[yellow]{marker.reason}[/yellow]\n"
            f"Need {marker.required} observations, have {marker.provided}",
            title="Insufficient data",
            expand=False,
        ))

    def show_patterns(self, result: Union[PatternResult, InsufficientData]):
        if isinstance(result, InsufficientData):
            self.show_insufficient(result)
            return

        header = Text()
        header.append("📊 Activity Patterns", style="bold cyan")
        header.append(
            f"\n{result.observation_count} observations over {result.time_span_minutes:.0f} minutes"
            f" (confidence {result.confidence:.0f}%)",
            style="dim",
        )
        self.console.print(Panel(header, expand=False))

        focus = result.focus
        sessions = Table(title="Focus Sessions")
        sessions.add_column("Start", style="cyan")
        sessions.add_column("End", style="cyan")
        sessions.add_column("Minutes", justify="right")
        sessions.add_column("Average", justify="right")
        sessions.add_column("Peak", justify="right")
        sessions.add_column("Interruptions", justify="right", style="yellow")
        sessions.add_column("Quality", justify="right", style="magenta")
        for session in focus.sessions:
            sessions.add_row(
                session.start_time.strftime("%H:%M"),
                session.end_time.strftime("%H:%M"),
                f"{session.duration_minutes:.0f}",
                Text(f"{session.average_score:.0f}", style=score_style(session.average_score)),
                f"{session.peak_score:.0f}",
                str(session.interruption_count),
                f"{session.quality_score:.0f}",
            )
        self.console.print(sessions)

        switching = result.task_switching
        self.console.print(
            f"\n[bold]Task switching:[/bold] {switching.total_switches} switches "
            f"({switching.contextual_switches} contextual, {switching.communication_switches} communication, "
            f"{switching.distracting_switches} distracting), efficiency {switching.switching_efficiency:.0f}"
        )

        apps = Table(title="Applications")
        apps.add_column("Application", style="green")
        apps.add_column("Uses", justify="right")
        apps.add_column("Share", justify="right")
        apps.add_column("Average", justify="right")
        apps.add_column("Rating", style="blue")
        for usage in result.applications.applications:
            apps.add_row(
                usage.application,
                str(usage.usage_count),
                f"{usage.usage_share:.0f}%",
                Text(f"{usage.average_score:.0f}", style=score_style(usage.average_score)),
                usage.rating,
            )
        self.console.print(apps)

        distractions = result.distractions
        self.console.print(
            f"[bold]Distractions:[/bold] {distractions.total_distractions} "
            f"(rate {distractions.distraction_rate:.0%}, recovery rate {distractions.recovery_rate:.0%})"
        )
        self.console.print(f"[bold]Circadian profile:[/bold] {result.temporal.circadian_profile.value}")

        if isinstance(result.rhythm, RhythmPatterns):
            peaks = ", ".join(b.slot_start.strftime("%H:%M") for b in result.rhythm.peak_periods)
            self.console.print(f"[bold]Peak periods:[/bold] {peaks} (trend {result.rhythm.overall_trend.value})")
        else:
            self.console.print(f"[dim]Rhythm: {result.rhythm.reason}[/dim]")

        if result.workflows.workflows:
            self.console.print("[bold]Workflows:[/bold]")
            for workflow in result.workflows.workflows:
                self.console.print(
                    f"  • {workflow.activity_type}: {workflow.frequency} runs, "
                    f"efficiency {workflow.efficiency:.0%}"
                )

    def show_recommendations(self, recommendations: RecommendationSet):
        table = Table(title="Recommendations")
        table.add_column("Horizon", style="cyan")
        table.add_column("Action", style="green")
        table.add_column("Impact", style="yellow")
        table.add_column("Effort", style="magenta")
        for rec in recommendations.all():
            table.add_row(rec.horizon.value, rec.action, rec.impact.value, rec.effort.value)
        self.console.print(table)

    def show_insights(self, result: Union[InsightResult, MinimalInsights]):
        if isinstance(result, MinimalInsights):
            self.console.print(Panel(
                f"[yellow]{result.message}[/yellow]\n"
                f"Observations: {result.observation_count}  "
                f"Average score: {result.average_score:.0f}  "
                f"Top application: {result.top_application}",
                title="Insights",
                expand=False,
            ))
            self.show_recommendations(result.recommendations)
            return

        overview = result.overview
        stats = Text()
        stats.append("📈 Productivity Overview\n", style="bold yellow")
        stats.append(f"Average score: {overview.average_score:.0f} ({overview.rating})\n",
                     style=score_style(overview.average_score))
        stats.append(f"Trend: {overview.trend.value}\n", style="dim")
        stats.append(f"Work time: {overview.work_minutes:.0f} minutes\n", style="dim")
        stats.append(f"Focus quality: {overview.focus_quality:.0f}\n", style="dim")
        stats.append(f"Top application: {overview.top_application}\n", style="dim")
        stats.append(f"Confidence: {result.confidence:.0f}%", style="dim")
        self.console.print(Panel(stats, expand=False))

        for highlight in result.highlights:
            self.console.print(f"  • {highlight.title}")

        if result.productivity.positive_factors or result.productivity.negative_factors:
            factors = Table(title="Contributing Factors")
            factors.add_column("Effect")
            factors.add_column("Type", style="blue")
            factors.add_column("Name", style="green")
            factors.add_column("Impact", style="yellow")
            for factor in result.productivity.positive_factors:
                factors.add_row(Text("+", style="green"), factor.type, factor.name, factor.impact.value)
            for factor in result.productivity.negative_factors:
                factors.add_row(Text("-", style="red"), factor.type, factor.name, factor.impact.value)
            self.console.print(factors)

        if result.goal_progress:
            goals = Table(title="Goal Progress")
            goals.add_column("Goal", style="cyan")
            goals.add_column("Metric", style="blue")
            goals.add_column("Progress", justify="right")
            goals.add_column("Status", style="yellow")
            for progress in result.goal_progress:
                goals.add_row(progress.goal_id, progress.metric, f"{progress.progress:.0f}%", progress.status)
            self.console.print(goals)

        self.show_recommendations(result.recommendations)
