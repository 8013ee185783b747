"""Turn observation history and recognized patterns into insights and recommendations"""
import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence, Union
from productivity_analytics.config.config import InsightConfig
from productivity_analytics.models.insights import (
    ApplicationInsights,
    FocusInsights,
    FocusStrategy,
    Factor,
    GoalProgress,
    GoalType,
    Horizon,
    Insight,
    InsightResult,
    Level,
    MinimalInsights,
    Opportunity,
    Overview,
    Predictions,
    ProductivityInsights,
    Recommendation,
    RecommendationSet,
    ScorePoint,
    TemporalInsights,
    UserPreferences,
    Goal,
)
from productivity_analytics.models.observation import Observation
from productivity_analytics.models.patterns import PatternResult
from productivity_analytics.services.patterns import PatternRecognizer, score_of
from productivity_analytics.services.trends import (
    classify_trend,
    ensure_chronological,
    half_means,
    mean,
    next_matching,
    std_dev,
)

logger = logging.getLogger(__name__)

PRODUCTIVE_STREAK_SCORE = 60
SEVERE_DISTRACTION_SCORE = 30
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# (metric, default target) per goal type
GOAL_METRICS = {
    GoalType.PRODUCTIVITY_TARGET: ("average_score", 70.0),
    GoalType.FOCUS_IMPROVEMENT: ("average_focus_session_minutes", 30.0),
    GoalType.TIME_MANAGEMENT: ("productive_hours_per_day", 6.0),
    GoalType.HABIT_FORMATION: ("productive_days", 5.0),
    GoalType.GENERIC: ("productive_share_percent", 60.0),
}

IMMEDIATE_ACTIONS = {
    "low_productivity": Recommendation(
        action="Take a 5-minute break and return to a high-productivity application",
        reason="Current productivity is below your usual level",
        impact=Level.HIGH, effort=Level.LOW, horizon=Horizon.IMMEDIATE,
    ),
    "excessive_switching": Recommendation(
        action="Focus on one application for the next 25 minutes",
        reason="Frequent application switching is reducing productivity",
        impact=Level.MEDIUM, effort=Level.LOW, horizon=Horizon.IMMEDIATE,
    ),
    "distraction_pattern": Recommendation(
        action="Close distracting applications and websites",
        reason="Distraction sources detected in recent activity",
        impact=Level.HIGH, effort=Level.LOW, horizon=Horizon.IMMEDIATE,
    ),
}

def productivity_rating(average: float) -> str:
    if average >= 80:
        return "excellent"
    if average >= 60:
        return "good"
    if average >= 40:
        return "fair"
    return "needs_improvement"

def unique_days(history: Sequence[Observation]) -> int:
    return max(1, len({o.timestamp.date() for o in history}))

class InsightGenerator:
    """Builds a full insight report from a chronological history slice.

    Patterns are recognized on demand unless the caller already has them.
    Histories shorter than ``min_history`` produce a MinimalInsights value
    instead of a report; that is a normal result, not an error.
    """

    def __init__(self, config: Optional[InsightConfig] = None, recognizer: Optional[PatternRecognizer] = None):
        self.config = config or InsightConfig()
        self.recognizer = recognizer or PatternRecognizer()

    def generate(
        self,
        history: Sequence[Observation],
        preferences: Optional[UserPreferences] = None,
        patterns: Optional[PatternResult] = None,
    ) -> Union[InsightResult, MinimalInsights]:
        history = ensure_chronological(history)
        preferences = preferences or UserPreferences()

        if len(history) < self.config.min_history:
            logger.warning(
                f"Insight generation needs {self.config.min_history} observations, got {len(history)}"
            )
            return self.minimal_insights(history)

        if patterns is None:
            patterns = self.recognizer.analyze_sequence(history)
        if not isinstance(patterns, PatternResult):
            return self.minimal_insights(history)

        overview = self.overview(history)
        productivity = self.productivity_insights(history, patterns, overview)
        focus = self.focus_insights(history, patterns, preferences)
        goal_progress = self.assess_goal_progress(history, patterns, preferences)

        result = InsightResult(
            overview=overview,
            productivity=productivity,
            focus=focus,
            applications=self.application_insights(patterns),
            temporal=self.temporal_insights(history, patterns),
            recommendations=self.recommendations(history, patterns, preferences, overview, goal_progress),
            goal_progress=goal_progress,
            predictions=self.predictions(history, patterns, overview),
            highlights=[],
            observation_count=len(history),
            confidence=self.insight_confidence(history),
        )
        result.highlights = self.highlights(result, patterns)
        logger.info(
            f"Generated insights from {len(history)} observations "
            f"(trend {overview.trend.value}, confidence {result.confidence:.0f})"
        )
        return result

    def minimal_insights(self, history: Sequence[Observation]) -> MinimalInsights:
        scores = [score_of(o) for o in history]
        return MinimalInsights(
            message="Collecting data for meaningful insights. Keep recording activity for a fuller analysis.",
            observation_count=len(history),
            average_score=mean(scores),
            top_application=self.top_application(history),
            recommendations=RecommendationSet(immediate=[
                Recommendation(
                    action="Keep collecting data by recording activity regularly",
                    reason="More observations enable trend and pattern insights",
                    impact=Level.HIGH, effort=Level.LOW, horizon=Horizon.IMMEDIATE,
                )
            ]),
        )

    # Overview

    def overview(self, history: Sequence[Observation]) -> Overview:
        scores = [score_of(o) for o in history]
        average = mean(scores)
        work_minutes = (
            sum(1 for s in scores if s > self.config.productive_threshold)
            * self.config.minutes_per_observation
        )

        improvements = []
        if self.focus_quality(history[-5:]) > self.focus_quality(history[:5]) + 10:
            improvements.append("Focus quality has improved recently")
        if any("deep-work" in o.tags for o in history):
            improvements.append("Deep work sessions detected")

        return Overview(
            average_score=average,
            trend=classify_trend(scores, self.config.trend_min_points),
            rating=productivity_rating(average),
            work_minutes=work_minutes,
            daily_average_minutes=work_minutes / unique_days(history),
            work_efficiency=sum(1 for s in scores if s > 50) / len(scores) * 100,
            focus_quality=self.focus_quality(history),
            focus_consistency=max(0.0, 100 - std_dev(scores)),
            improvements=improvements,
            top_application=self.top_application(history),
            best_hour=self.best_hour(history),
            longest_productive_streak=self.longest_streak(scores),
            improvement_rate=self.improvement_rate(scores),
        )

    @staticmethod
    def focus_quality(history: Sequence[Observation]) -> float:
        """0-100 focus quality from tags, falling back to scores"""
        values = []
        for obs in history:
            if "deep-work" in obs.tags:
                values.append(100)
            elif "focused" in obs.tags:
                values.append(80)
            elif "distracted" in obs.tags:
                values.append(30)
            else:
                values.append(70 if score_of(obs) > 60 else 40)
        return mean(values)

    @staticmethod
    def top_application(history: Sequence[Observation]) -> str:
        counts = Counter(o.application for o in history)
        return counts.most_common(1)[0][0] if counts else "unknown"

    @staticmethod
    def best_hour(history: Sequence[Observation]) -> Optional[int]:
        by_hour: Dict[int, List[float]] = {}
        for obs in history:
            if obs.is_scored:
                by_hour.setdefault(obs.timestamp.hour, []).append(float(obs.score))
        if not by_hour:
            return None
        return max(sorted(by_hour), key=lambda hour: mean(by_hour[hour]))

    @staticmethod
    def longest_streak(scores: Sequence[float]) -> int:
        longest = current = 0
        for score in scores:
            current = current + 1 if score > PRODUCTIVE_STREAK_SCORE else 0
            longest = max(longest, current)
        return longest

    def improvement_rate(self, scores: Sequence[float]) -> float:
        """Percent change from the first quarter to the last quarter"""
        if len(scores) < self.config.trend_min_points:
            return 0.0
        quarter = len(scores) // 4
        first, last = mean(scores[:quarter]), mean(scores[-quarter:])
        if first <= 0:
            return 0.0
        return (last - first) / first * 100

    # Productivity

    def productivity_insights(
        self, history: Sequence[Observation], patterns: PatternResult, overview: Overview
    ) -> ProductivityInsights:
        points = [ScorePoint(o.timestamp, score_of(o), o.application) for o in history]
        quintile = max(1, len(points) // 5)
        ranked = sorted(points, key=lambda p: p.score, reverse=True)

        positive, negative = self.productivity_factors(history, patterns, overview)
        return ProductivityInsights(
            trend=overview.trend,
            volatility=std_dev([p.score for p in points]),
            peaks=ranked[:quintile],
            dips=list(reversed(ranked[-quintile:])),
            positive_factors=positive,
            negative_factors=negative,
            opportunities=self.opportunities(patterns),
        )

    def productivity_factors(self, history, patterns: PatternResult, overview: Overview) -> tuple:
        positive: List[Factor] = []
        negative: List[Factor] = []

        usages = patterns.applications.applications
        for usage in usages:
            if usage.average_score >= 70:
                positive.append(Factor("application", usage.application, Level.HIGH))
            elif usage.average_score < 40:
                negative.append(Factor("application", usage.application, Level.HIGH))

        if not positive and usages:
            best = max(usages, key=lambda u: u.average_score)
            if best.average_score >= 60:
                positive.append(Factor("application", best.application, Level.MEDIUM))

        dominant = patterns.applications.get(overview.top_application)
        listed = {f.name for f in positive if f.type == "application"}
        if dominant and dominant.average_score >= 60 and dominant.application not in listed:
            positive.append(Factor("application", dominant.application, Level.MEDIUM))

        if overview.best_hour is not None:
            positive.append(Factor("timing", f"{overview.best_hour:02d}:00", Level.MEDIUM))
        if any("deep-work" in o.tags for o in history):
            positive.append(Factor("behavior", "deep work sessions", Level.HIGH))
        if any("distracted" in o.tags for o in history):
            negative.append(Factor("behavior", "frequent distractions", Level.MEDIUM))
        return positive, negative

    def opportunities(self, patterns: PatternResult) -> List[Opportunity]:
        opportunities = []
        for hour in patterns.temporal.hourly:
            if hour.average_score < self.config.low_hour_threshold:
                opportunities.append(Opportunity(
                    type="time_optimization",
                    description=f"Low productivity at {hour.hour:02d}:00, consider different activities",
                    impact=Level.MEDIUM,
                    effort=Level.LOW,
                ))
        if patterns.task_switching.switch_frequency > self.config.switch_frequency_threshold:
            opportunities.append(Opportunity(
                type="focus_improvement",
                description="High application switching detected, consider focus techniques",
                impact=Level.HIGH,
                effort=Level.MEDIUM,
            ))
        return opportunities

    # Focus

    def focus_insights(
        self, history: Sequence[Observation], patterns: PatternResult, preferences: UserPreferences
    ) -> FocusInsights:
        count = len(history)
        flow = [o for o in history if score_of(o) > self.config.flow_threshold and "deep-work" in o.tags]
        distracted = [
            o for o in history
            if "distracted" in o.tags or score_of(o) < SEVERE_DISTRACTION_SCORE
        ]

        scores = [score_of(o) for o in history]
        recovered_at = next_matching(scores, lambda s: s > 60)
        drops, recoveries = [], []
        for index in range(1, count):
            previous, current = scores[index - 1], scores[index]
            if previous > 60 and current < 40:
                drops.append(previous - current)
                if recovered_at[index] is not None:
                    later = history[recovered_at[index]]
                    recoveries.append(
                        (later.timestamp - history[index].timestamp).total_seconds() / 60
                    )
        interruption_frequency = len(drops) / count
        average_drop = mean(drops)
        average_recovery = mean(recoveries)

        sessions = patterns.focus
        distraction_frequency = len(distracted) / count
        strategies = []
        if len(sessions.sessions) < 3:
            strategies.append(FocusStrategy(
                strategy="pomodoro_technique",
                description=f"Try {preferences.focus_block_minutes}-minute focused work sessions with 5-minute breaks",
                confidence=0.8,
            ))
        if sessions.average_session_minutes < self.config.short_session_minutes:
            strategies.append(FocusStrategy(
                strategy="gradual_extension",
                description="Gradually increase focus session length by 5 minutes weekly",
                confidence=0.7,
            ))
        if distraction_frequency > 0.2:
            strategies.append(FocusStrategy(
                strategy="environment_optimization",
                description="Optimize your work environment to minimize distractions",
                confidence=0.9,
            ))

        return FocusInsights(
            session_count=len(sessions.sessions),
            average_session_minutes=sessions.average_session_minutes,
            longest_session_minutes=sessions.longest_session_minutes,
            flow_frequency=len(flow) / count,
            distraction_frequency=distraction_frequency,
            interruption_frequency=interruption_frequency,
            average_interruption_drop=average_drop,
            average_recovery_minutes=average_recovery,
            interruption_cost=interruption_frequency * average_drop * average_recovery,
            strategies=strategies,
        )

    # Applications and time

    @staticmethod
    def application_insights(patterns: PatternResult) -> ApplicationInsights:
        usages = patterns.applications.applications
        return ApplicationInsights(
            usage_distribution={u.application: u.usage_share for u in usages},
            productivity_by_application={u.application: u.average_score for u in usages},
            switch_frequency=patterns.task_switching.switch_frequency,
            recommendations=list(patterns.applications.recommendations),
        )

    @staticmethod
    def temporal_insights(history: Sequence[Observation], patterns: PatternResult) -> TemporalInsights:
        by_day: Dict[str, List[float]] = {}
        for obs in history:
            by_day.setdefault(WEEKDAYS[obs.timestamp.weekday()], []).append(score_of(obs))
        return TemporalInsights(
            circadian_profile=patterns.temporal.circadian_profile,
            peak_hours=[h.hour for h in patterns.temporal.peak_hours],
            low_hours=[h.hour for h in patterns.temporal.low_hours],
            weekly_averages={day: mean(scores) for day, scores in by_day.items()},
        )

    # Recommendations

    def recommendations(
        self,
        history: Sequence[Observation],
        patterns: PatternResult,
        preferences: UserPreferences,
        overview: Overview,
        goal_progress: List[GoalProgress],
    ) -> RecommendationSet:
        return RecommendationSet(
            immediate=self.immediate_recommendations(history)[:self.config.max_immediate],
            short_term=self.short_term_recommendations(patterns)[:self.config.max_short_term],
            long_term=self.long_term_recommendations(history, overview, goal_progress)[:self.config.max_long_term],
            personalized=self.personalized_recommendations(overview, preferences),
        )

    def current_issues(self, recent: Sequence[Observation]) -> List[str]:
        issues = []
        if mean([score_of(o) for o in recent]) < self.config.productive_threshold:
            issues.append("low_productivity")
        changes = sum(1 for a, b in zip(recent, recent[1:]) if a.application != b.application)
        if recent and changes / len(recent) > self.config.switch_frequency_threshold:
            issues.append("excessive_switching")
        tables = self.recognizer.tables
        if any(
            tables.category_of(o.application) == "distracting"
            and score_of(o) < self.recognizer.config.distraction_threshold
            for o in recent
        ):
            issues.append("distraction_pattern")
        return issues

    def immediate_recommendations(self, history: Sequence[Observation]) -> List[Recommendation]:
        recent = history[-self.config.recent_window:]
        return [IMMEDIATE_ACTIONS[issue] for issue in self.current_issues(recent)]

    def short_term_recommendations(self, patterns: PatternResult) -> List[Recommendation]:
        recommendations = []
        for usage in patterns.applications.applications:
            if usage.rating == "poor" and usage.usage_share >= 10:
                recommendations.append(Recommendation(
                    action=f"Reduce time spent in {usage.application}",
                    reason=f"{usage.application} averages {usage.average_score:.0f} and takes "
                           f"{usage.usage_share:.0f}% of your time",
                    impact=Level.HIGH, effort=Level.MEDIUM, horizon=Horizon.SHORT_TERM,
                ))
        if patterns.focus.average_session_minutes < self.config.short_session_minutes:
            recommendations.append(Recommendation(
                action="Extend focus sessions with scheduled, uninterrupted blocks",
                reason=f"Focus sessions average {patterns.focus.average_session_minutes:.0f} minutes",
                impact=Level.HIGH, effort=Level.MEDIUM, horizon=Horizon.SHORT_TERM,
            ))
        if patterns.distractions.distraction_rate > 0.2:
            top_source = patterns.distractions.sources[0].source if patterns.distractions.sources else "distractions"
            recommendations.append(Recommendation(
                action=f"Block {top_source.replace('_', ' ')} during work hours",
                reason=f"{patterns.distractions.distraction_rate:.0%} of observations are distractions",
                impact=Level.HIGH, effort=Level.LOW, horizon=Horizon.SHORT_TERM,
            ))
        if patterns.task_switching.switch_frequency > self.config.switch_frequency_threshold:
            recommendations.append(Recommendation(
                action="Batch communication into fixed check-in times",
                reason="Application switching is frequent across your history",
                impact=Level.MEDIUM, effort=Level.MEDIUM, horizon=Horizon.SHORT_TERM,
            ))
        for hour in patterns.temporal.low_hours:
            if hour.average_score < self.config.low_hour_threshold:
                recommendations.append(Recommendation(
                    action=f"Move routine tasks to around {hour.hour:02d}:00",
                    reason=f"Productivity around {hour.hour:02d}:00 averages {hour.average_score:.0f}",
                    impact=Level.MEDIUM, effort=Level.LOW, horizon=Horizon.SHORT_TERM,
                ))
                break
        for text in patterns.workflows.recommendations:
            recommendations.append(Recommendation(
                action=text,
                reason="Recurring workflow pattern",
                impact=Level.MEDIUM, effort=Level.MEDIUM, horizon=Horizon.SHORT_TERM,
            ))
        return recommendations

    def long_term_recommendations(
        self, history: Sequence[Observation], overview: Overview, goal_progress: List[GoalProgress]
    ) -> List[Recommendation]:
        recommendations = []
        if overview.trend.is_declining:
            recommendations.append(Recommendation(
                action="Review workload and recovery routines over the coming weeks",
                reason="Productivity has been declining",
                impact=Level.HIGH, effort=Level.HIGH, horizon=Horizon.LONG_TERM,
            ))
        elif overview.trend.is_improving:
            recommendations.append(Recommendation(
                action="Keep the routines behind your recent improvement",
                reason="Productivity has been improving",
                impact=Level.MEDIUM, effort=Level.LOW, horizon=Horizon.LONG_TERM,
            ))
        for progress in goal_progress:
            if progress.status != "achieved":
                recommendations.append(Recommendation(
                    action=f"Work toward goal '{progress.goal_id}': {progress.message}",
                    reason=f"Progress is at {progress.progress:.0f}% of target",
                    impact=Level.HIGH, effort=Level.MEDIUM, horizon=Horizon.LONG_TERM,
                ))
        if unique_days(history) >= 7 and overview.focus_consistency < 70:
            recommendations.append(Recommendation(
                action="Build a consistent weekly schedule",
                reason="Productivity varies widely across your history",
                impact=Level.MEDIUM, effort=Level.HIGH, horizon=Horizon.LONG_TERM,
            ))
        return recommendations

    @staticmethod
    def personalized_recommendations(overview: Overview, preferences: UserPreferences) -> List[Recommendation]:
        personalized = []
        if any(g.goal_type == GoalType.FOCUS_IMPROVEMENT for g in preferences.goals):
            personalized.append(Recommendation(
                action="Schedule deep work blocks during your peak hours",
                reason="Based on your focus improvement goal",
                impact=Level.HIGH, effort=Level.MEDIUM, horizon=Horizon.SHORT_TERM,
            ))
        if overview.best_hour is not None:
            personalized.append(Recommendation(
                action=f"Schedule your most important work around {overview.best_hour:02d}:00",
                reason="Based on your productivity peaks",
                impact=Level.MEDIUM, effort=Level.LOW, horizon=Horizon.SHORT_TERM,
            ))
        return personalized

    # Goals

    def goal_metric(self, goal_type: GoalType, history: Sequence[Observation], patterns: PatternResult) -> float:
        scores = [score_of(o) for o in history]
        if goal_type == GoalType.PRODUCTIVITY_TARGET:
            return mean(scores)
        if goal_type == GoalType.FOCUS_IMPROVEMENT:
            return patterns.focus.average_session_minutes
        if goal_type == GoalType.TIME_MANAGEMENT:
            productive = sum(1 for s in scores if s > self.config.productive_threshold)
            return productive * self.config.minutes_per_observation / 60 / unique_days(history)
        if goal_type == GoalType.HABIT_FORMATION:
            by_day: Dict[object, List[float]] = {}
            for obs in history:
                by_day.setdefault(obs.timestamp.date(), []).append(score_of(obs))
            return float(sum(1 for values in by_day.values() if mean(values) >= PRODUCTIVE_STREAK_SCORE))
        return sum(1 for s in scores if s >= PRODUCTIVE_STREAK_SCORE) / len(scores) * 100

    def assess_goal(self, goal: Goal, history: Sequence[Observation], patterns: PatternResult) -> GoalProgress:
        goal_type = goal.goal_type
        metric, default_target = GOAL_METRICS[goal_type]
        target = goal.target if goal.target is not None else default_target
        current = self.goal_metric(goal_type, history, patterns)
        progress = min(100.0, current / target * 100) if target > 0 else 100.0

        if current >= target:
            status = "achieved"
        elif progress >= 75:
            status = "on_track"
        else:
            status = "behind"
        label = metric.replace("_", " ")
        return GoalProgress(
            goal_id=goal.id,
            goal_type=goal_type,
            metric=metric,
            current=current,
            target=target,
            progress=progress,
            status=status,
            message=f"{label} is {current:.1f} against a target of {target:.1f}",
        )

    def assess_goal_progress(
        self, history: Sequence[Observation], patterns: PatternResult, preferences: UserPreferences
    ) -> List[GoalProgress]:
        return [self.assess_goal(goal, history, patterns) for goal in preferences.goals]

    # Predictions and highlights

    def predictions(self, history: Sequence[Observation], patterns: PatternResult, overview: Overview) -> Predictions:
        first, second = half_means([score_of(o) for o in history])
        forecast = max(0.0, min(100.0, second + (second - first)))

        risks = []
        if overview.trend.is_declining:
            risks.append("Productivity is trending down")
        if patterns.distractions.distraction_rate > 0.3:
            risks.append("Distractions take a large share of your time")
        if any(o.timestamp.hour >= 22 or o.timestamp.hour < 5 for o in history):
            risks.append("Late-night work may affect the next day")

        opportunities = []
        if overview.trend.is_improving:
            opportunities.append("Momentum is building; raise your productivity target")
        if patterns.workflows.most_efficient:
            best = patterns.workflows.most_efficient[0]
            opportunities.append(f"Expand {best.activity_type} time, your most efficient workflow")
        if overview.best_hour is not None:
            opportunities.append(f"Reserve {overview.best_hour:02d}:00 for your hardest task")

        return Predictions(
            next_period_score=forecast,
            direction=overview.trend,
            risks=risks,
            opportunities=opportunities,
        )

    @staticmethod
    def highlights(result: InsightResult, patterns: PatternResult) -> List[Insight]:
        overview = result.overview
        highlights = [Insight(
            category="overview",
            title=f"Productivity is {overview.rating.replace('_', ' ')} ({overview.average_score:.0f}/100)",
            importance=Level.HIGH,
            data={"trend": overview.trend.value},
        )]
        if patterns.focus.best_session is not None:
            best = patterns.focus.best_session
            highlights.append(Insight(
                category="focus",
                title=f"Best focus session lasted {best.duration_minutes:.0f} minutes",
                importance=Level.MEDIUM,
                data={"quality": best.quality_score, "interruptions": best.interruption_count},
            ))
        if patterns.distractions.sources:
            source = patterns.distractions.sources[0]
            highlights.append(Insight(
                category="distraction",
                title=f"Most common distraction: {source.source.replace('_', ' ')}",
                importance=Level.MEDIUM,
                data={"count": source.count},
            ))
        if overview.best_hour is not None:
            highlights.append(Insight(
                category="temporal",
                title=f"Peak productivity around {overview.best_hour:02d}:00",
                importance=Level.LOW,
                data={"circadian_profile": result.temporal.circadian_profile.value},
            ))
        return highlights

    @staticmethod
    def insight_confidence(history: Sequence[Observation]) -> float:
        """0-100 from data volume, scored share, time span and app diversity"""
        count = len(history)
        confidence = 0.0
        if count > 100:
            confidence += 30
        elif count > 50:
            confidence += 20
        elif count > 20:
            confidence += 10

        confidence += sum(1 for o in history if o.is_scored) / count * 30

        days = (history[-1].timestamp - history[0].timestamp).total_seconds() / 86400
        if days > 7:
            confidence += 20
        elif days > 3:
            confidence += 10
        elif days > 1:
            confidence += 5

        apps = {o.application for o in history}
        if 2 < len(apps) < count / 2:
            confidence += 20
        return min(100.0, confidence)
