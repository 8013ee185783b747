"""Recognize focus, switching, rhythm and distraction patterns in a history slice"""
import logging
from collections import Counter, OrderedDict
from datetime import time
from typing import Dict, List, Optional, Sequence, Union
from productivity_analytics.config.config import PatternConfig
from productivity_analytics.config.tables import LookupTables, default_tables
from productivity_analytics.models.focus_session import FocusSession, SwitchType, TaskSwitchEvent
from productivity_analytics.models.observation import Observation
from productivity_analytics.models.patterns import (
    ActivityRun,
    ApplicationPatterns,
    ApplicationUsage,
    CircadianProfile,
    DistractionEpisode,
    DistractionPatterns,
    DistractionSourceStats,
    FocusPatterns,
    HourlyPattern,
    InsufficientData,
    PatternResult,
    RhythmPatterns,
    TaskSwitchPatterns,
    TemporalPatterns,
    TimeSlotBucket,
    Transition,
    WorkflowPattern,
    WorkflowPatterns,
)
from productivity_analytics.services.task_detector import TaskDetector
from productivity_analytics.services.trends import (
    classify_trend,
    consistency,
    ensure_chronological,
    mean,
    minutes_between,
    next_matching,
)

logger = logging.getLogger(__name__)

# Unscored observations count as neutral
NEUTRAL_SCORE = 50.0

CONTEXT_LOSS = {
    SwitchType.CONTEXTUAL: 0.2,
    SwitchType.COMMUNICATION: 0.5,
    SwitchType.DISTRACTING: 0.8,
    SwitchType.NEUTRAL: 0.4,
}

# Weight each sub-analysis adds to the overall confidence when it had enough data
CONFIDENCE_WEIGHTS = {
    "focus": 20,
    "task_switching": 15,
    "rhythm": 25,
    "applications": 20,
    "temporal": 20,
}

BANDS = (
    ("morning", 6, 12, CircadianProfile.MORNING_PERSON),
    ("afternoon", 12, 18, CircadianProfile.AFTERNOON_PEAK),
    ("evening", 18, 24, CircadianProfile.EVENING_PERSON),
)

def score_of(observation: Observation) -> float:
    return observation.score_or(NEUTRAL_SCORE)

class PatternRecognizer:
    """Derives pattern summaries from a chronologically ordered history slice.

    Every analysis is a pure function of the observations it is given:
    nothing is cached or persisted here, and re-running on the same slice
    yields identical results. Each sub-analysis degrades on its own, so a
    sparse history still produces a partial result.
    """

    def __init__(self, config: Optional[PatternConfig] = None, tables: Optional[LookupTables] = None):
        self.config = config or PatternConfig()
        self.tables = tables or default_tables
        self.task_detector = TaskDetector(self.tables)

    def analyze_sequence(self, observations: Sequence[Observation]) -> Union[PatternResult, InsufficientData]:
        """Run every pattern analysis over the observations"""
        ordered = ensure_chronological(observations)
        if len(ordered) < self.config.min_observations:
            logger.warning(
                f"Pattern analysis needs {self.config.min_observations} observations, got {len(ordered)}"
            )
            return InsufficientData(
                reason="Not enough observations for pattern analysis",
                required=self.config.min_observations,
                provided=len(ordered),
            )

        focus = self.identify_focus_patterns(ordered)
        switching = self.identify_task_switching(ordered)
        rhythm = self.identify_rhythm(ordered)
        applications = self.identify_application_patterns(ordered, switching.frequent_transitions)
        temporal = self.identify_temporal_patterns(ordered)
        distractions = self.identify_distractions(ordered)
        workflows = self.identify_workflows(ordered)

        result = PatternResult(
            focus=focus,
            task_switching=switching,
            rhythm=rhythm,
            applications=applications,
            temporal=temporal,
            distractions=distractions,
            workflows=workflows,
            observation_count=len(ordered),
            time_span_minutes=minutes_between(ordered[0].timestamp, ordered[-1].timestamp),
            confidence=0.0,
        )
        result.confidence = self.pattern_confidence(result)
        logger.info(
            f"Analyzed {len(ordered)} observations: {len(focus.sessions)} focus sessions, "
            f"{switching.total_switches} switches, {distractions.total_distractions} distractions"
        )
        return result

    # Focus sessions

    def identify_focus_patterns(self, observations: Sequence[Observation]) -> FocusPatterns:
        sessions: List[FocusSession] = []
        current: Optional[FocusSession] = None
        # Dips since the last focused observation; dropped if the session never resumes
        pending = 0

        for obs in observations:
            score = score_of(obs)
            if score >= self.config.focus_threshold:
                if current is None:
                    current = FocusSession.open(obs, score)
                elif minutes_between(current.end_time, obs.timestamp) <= self.config.max_break_minutes:
                    current.add_observation(obs, score, pending)
                else:
                    sessions.append(self._finalize_session(current))
                    current = FocusSession.open(obs, score)
                pending = 0
            elif current is not None:
                if minutes_between(current.start_time, obs.timestamp) >= self.config.min_interruption_minutes:
                    pending += 1

        if current is not None:
            sessions.append(self._finalize_session(current))

        total_minutes = sum(s.duration_minutes for s in sessions)
        return FocusPatterns(
            sessions=sessions,
            total_focus_minutes=total_minutes,
            average_session_minutes=total_minutes / len(sessions) if sessions else 0.0,
            focus_efficiency=mean([s.efficiency for s in sessions]),
            best_session=max(sessions, key=lambda s: s.quality_score, default=None),
        )

    @staticmethod
    def _finalize_session(session: FocusSession) -> FocusSession:
        session.quality_score = session_quality(session)
        return session

    # Task switching

    def classify_switch(self, from_app: str, to_app: str) -> SwitchType:
        from_category = self.tables.category_of(from_app)
        to_category = self.tables.category_of(to_app)
        if from_category == "productive" and to_category == "productive":
            return SwitchType.CONTEXTUAL
        if to_category == "communication":
            return SwitchType.COMMUNICATION
        if to_category == "distracting":
            return SwitchType.DISTRACTING
        return SwitchType.NEUTRAL

    def identify_task_switching(self, observations: Sequence[Observation]) -> TaskSwitchPatterns:
        switches: List[TaskSwitchEvent] = []
        application_minutes: Dict[str, float] = {}
        transitions: Counter = Counter()
        last_switch_time = None

        for index, obs in enumerate(observations):
            app = obs.application
            if index + 1 < len(observations):
                elapsed = minutes_between(obs.timestamp, observations[index + 1].timestamp)
            else:
                elapsed = 0.0
            application_minutes[app] = application_minutes.get(app, 0.0) + elapsed

            if index == 0:
                continue
            previous = observations[index - 1].application
            if app == previous:
                continue

            classification = self.classify_switch(previous, app)
            switches.append(TaskSwitchEvent(
                from_application=previous,
                to_application=app,
                timestamp=obs.timestamp,
                elapsed_since_last_switch=obs.timestamp - last_switch_time if last_switch_time else None,
                classification=classification,
                score=score_of(obs),
                context_loss=CONTEXT_LOSS[classification],
            ))
            transitions[(previous, app)] += 1
            last_switch_time = obs.timestamp

        counts = Counter(s.classification for s in switches)
        total = len(switches)
        if total:
            efficiency = 50 + 100 * (counts[SwitchType.CONTEXTUAL] - counts[SwitchType.DISTRACTING]) / total
            efficiency = max(0.0, min(100.0, efficiency))
        else:
            efficiency = 100.0

        gaps = [
            s.elapsed_since_last_switch.total_seconds() / 60
            for s in switches if s.elapsed_since_last_switch is not None
        ]
        most_used = sorted(application_minutes.items(), key=lambda item: item[1], reverse=True)[:5]
        frequent = [
            Transition(from_application=pair[0], to_application=pair[1], count=count)
            for pair, count in transitions.most_common(10)
        ]

        return TaskSwitchPatterns(
            switches=switches,
            total_switches=total,
            switch_frequency=total / len(observations) if observations else 0.0,
            average_minutes_between_switches=mean(gaps),
            contextual_switches=counts[SwitchType.CONTEXTUAL],
            communication_switches=counts[SwitchType.COMMUNICATION],
            distracting_switches=counts[SwitchType.DISTRACTING],
            application_minutes=application_minutes,
            most_used_applications=most_used,
            frequent_transitions=frequent,
            switching_efficiency=efficiency,
        )

    # Rhythm

    def identify_rhythm(self, observations: Sequence[Observation]) -> Union[RhythmPatterns, InsufficientData]:
        required = self.config.rhythm_min_observations
        if len(observations) < required:
            logger.warning(f"Rhythm analysis needs {required} observations, got {len(observations)}")
            return InsufficientData(
                reason="Not enough observations for rhythm analysis",
                required=required,
                provided=len(observations),
            )

        slot = self.config.rhythm_slot_minutes
        grouped: Dict[int, List[Observation]] = {}
        for obs in observations:
            minute_of_day = obs.timestamp.hour * 60 + obs.timestamp.minute
            grouped.setdefault(minute_of_day // slot * slot, []).append(obs)

        buckets = []
        for start in sorted(grouped):
            members = grouped[start]
            scores = [score_of(o) for o in members]
            activities = Counter(self._activity_type(o) for o in members)
            buckets.append(TimeSlotBucket(
                slot_start=time(start // 60, start % 60),
                average_score=mean(scores),
                peak_score=max(scores),
                consistency=consistency(scores),
                sample_count=len(members),
                dominant_activity=activities.most_common(1)[0][0],
            ))

        ranked = sorted(buckets, key=lambda b: b.average_score, reverse=True)
        peaks = ranked[:3]
        lows = [b for b in reversed(ranked) if b not in peaks][:3]

        scores = [score_of(o) for o in observations]
        rhythm = RhythmPatterns(
            buckets=buckets,
            peak_periods=peaks,
            low_periods=lows,
            overall_trend=classify_trend(scores, required),
            consistency_score=mean([b.consistency for b in buckets]),
        )
        rhythm.recommendations = self._rhythm_recommendations(rhythm)
        return rhythm

    def _rhythm_recommendations(self, rhythm: RhythmPatterns) -> List[str]:
        recommendations = []
        for bucket in rhythm.peak_periods:
            if bucket.average_score >= self.config.peak_slot_threshold:
                recommendations.append(
                    f"Schedule demanding work around {bucket.slot_start.strftime('%H:%M')}"
                )
                break
        for bucket in rhythm.low_periods:
            if bucket.average_score < self.config.low_slot_threshold:
                recommendations.append(
                    f"Use the {bucket.slot_start.strftime('%H:%M')} slot for breaks or routine tasks"
                )
                break
        if rhythm.consistency_score < 0.6:
            recommendations.append("Keep a steadier daily routine to even out productivity")
        return recommendations

    # Applications

    def identify_application_patterns(
        self, observations: Sequence[Observation], transitions: Optional[List[Transition]] = None
    ) -> ApplicationPatterns:
        grouped: Dict[str, List[Observation]] = OrderedDict()
        for obs in observations:
            grouped.setdefault(obs.application, []).append(obs)

        total = len(observations)
        usages = []
        for app, members in grouped.items():
            scores = [score_of(o) for o in members]
            average = mean(scores)
            usages.append(ApplicationUsage(
                application=app,
                usage_count=len(members),
                average_score=average,
                peak_score=max(scores),
                usage_share=len(members) / total * 100 if total else 0.0,
                session_minutes=minutes_between(members[0].timestamp, members[-1].timestamp),
                rating=application_rating(average),
            ))
        usages.sort(key=lambda u: (-u.usage_count, u.application))

        most_productive = sorted(
            (u for u in usages if u.usage_count >= 3),
            key=lambda u: u.average_score, reverse=True
        )[:5]
        efficiency = sum(u.average_score * u.usage_count for u in usages) / total if total else 0.0

        patterns = ApplicationPatterns(
            applications=usages,
            most_productive=most_productive,
            frequent_transitions=list(transitions or []),
            application_efficiency=efficiency,
        )
        for usage in usages:
            if usage.rating == "poor" and usage.usage_share >= 10:
                patterns.recommendations.append(
                    f"Limit time in {usage.application} ({usage.usage_share:.0f}% of observations)"
                )
        for usage in most_productive:
            if usage.rating == "excellent":
                patterns.recommendations.append(f"Prioritize {usage.application} for focused work")
        return patterns

    # Temporal

    def identify_temporal_patterns(self, observations: Sequence[Observation]) -> TemporalPatterns:
        by_hour: Dict[int, List[float]] = {}
        for obs in observations:
            by_hour.setdefault(obs.timestamp.hour, []).append(score_of(obs))

        hourly = [
            HourlyPattern(hour=hour, average_score=mean(scores),
                          consistency=consistency(scores), sample_count=len(scores))
            for hour, scores in sorted(by_hour.items())
        ]
        ranked = sorted(hourly, key=lambda h: h.average_score, reverse=True)
        peak_hours = ranked[:3]
        low_hours = [h for h in reversed(ranked) if h not in peak_hours][:3]

        band_averages = {}
        for name, start, end, _ in BANDS:
            scores = [s for hour, values in by_hour.items() if start <= hour < end for s in values]
            if scores:
                band_averages[name] = mean(scores)

        temporal = TemporalPatterns(
            hourly=hourly,
            peak_hours=peak_hours,
            low_hours=low_hours,
            band_averages=band_averages,
            circadian_profile=circadian_profile(band_averages),
        )
        if peak_hours:
            hours = ", ".join(f"{h.hour:02d}:00" for h in peak_hours)
            temporal.recommendations.append(f"Protect your peak hours ({hours}) for deep work")
        for hour in low_hours:
            if hour.average_score < self.config.low_slot_threshold:
                temporal.recommendations.append(
                    f"Avoid demanding tasks around {hour.hour:02d}:00"
                )
                break
        return temporal

    # Distractions

    def classify_distraction(self, observation: Observation) -> str:
        app = observation.application
        for source, keywords in self.tables.distraction_sources.items():
            if any(keyword in app for keyword in keywords):
                return source
        if score_of(observation) < self.config.distraction_threshold / 2:
            return "severe_distraction"
        return "mild_distraction"

    def identify_distractions(self, observations: Sequence[Observation]) -> DistractionPatterns:
        threshold = self.config.distraction_threshold
        scores = [score_of(o) for o in observations]
        recovered_at = next_matching(scores, lambda s: s >= self.config.recovery_threshold)

        # Minutes from each observation to the end of the low run it starts
        run_minutes = [0.0] * len(observations)
        for i in range(len(observations) - 2, -1, -1):
            if scores[i] < threshold:
                run_minutes[i] = (
                    minutes_between(observations[i].timestamp, observations[i + 1].timestamp)
                    + run_minutes[i + 1]
                )

        episodes: List[DistractionEpisode] = []
        for index, obs in enumerate(observations):
            score = scores[index]
            if score >= threshold:
                continue

            recovery = None
            if recovered_at[index] is not None:
                recovery = minutes_between(obs.timestamp, observations[recovered_at[index]].timestamp)
            duration = run_minutes[index]

            episodes.append(DistractionEpisode(
                timestamp=obs.timestamp,
                application=obs.application,
                score=score,
                source=self.classify_distraction(obs),
                duration_minutes=duration,
                recovery_minutes=recovery,
            ))

        by_source: Dict[str, List[DistractionEpisode]] = {}
        for episode in episodes:
            by_source.setdefault(episode.source, []).append(episode)
        sources = sorted(
            (DistractionSourceStats(
                source=source,
                count=len(items),
                total_minutes=sum(e.duration_minutes for e in items),
                average_score=mean([e.score for e in items]),
            ) for source, items in by_source.items()),
            key=lambda s: s.count, reverse=True
        )

        hotspots = Counter(e.timestamp.hour for e in episodes).most_common(3)
        recoveries = [e.recovery_minutes for e in episodes if e.recovery_minutes is not None]

        return DistractionPatterns(
            episodes=episodes,
            total_distractions=len(episodes),
            distraction_rate=len(episodes) / len(observations) if observations else 0.0,
            average_duration_minutes=mean([e.duration_minutes for e in episodes]),
            sources=sources,
            hotspots=hotspots,
            average_recovery_minutes=mean(recoveries),
            recovery_rate=len(recoveries) / len(episodes) if episodes else 0.0,
        )

    # Workflows

    def _activity_type(self, observation: Observation) -> str:
        return observation.activity_type or self.task_detector.detect_activity_type(observation)

    def extract_runs(self, observations: Sequence[Observation]) -> List[ActivityRun]:
        """Maximal runs of the same activity type"""
        groups: List[List[Observation]] = []
        last_activity = None
        for obs in observations:
            activity = self._activity_type(obs)
            if groups and activity == last_activity:
                groups[-1].append(obs)
            else:
                groups.append([obs])
            last_activity = activity

        runs = []
        for index, members in enumerate(groups):
            # A run lasts until the next run starts
            if index + 1 < len(groups):
                end = groups[index + 1][0].timestamp
            else:
                end = members[-1].timestamp
            runs.append(ActivityRun(
                activity_type=self._activity_type(members[0]),
                start_time=members[0].timestamp,
                end_time=end,
                duration_minutes=minutes_between(members[0].timestamp, end),
                average_score=mean([score_of(o) for o in members]),
                observation_count=len(members),
            ))
        return runs

    def identify_workflows(self, observations: Sequence[Observation]) -> WorkflowPatterns:
        runs = self.extract_runs(observations)
        grouped: Dict[str, List[ActivityRun]] = OrderedDict()
        for run in runs:
            grouped.setdefault(run.activity_type, []).append(run)

        workflows = []
        for activity, items in grouped.items():
            if len(items) < self.config.workflow_min_occurrences:
                continue
            total_minutes = sum(r.duration_minutes for r in items)
            average = mean([r.average_score for r in items])
            if total_minutes > 0:
                efficiency = sum(r.average_score / 100 * r.duration_minutes for r in items) / total_minutes
            else:
                efficiency = average / 100
            workflows.append(WorkflowPattern(
                activity_type=activity,
                frequency=len(items),
                average_score=average,
                average_duration_minutes=total_minutes / len(items),
                efficiency=efficiency,
            ))

        most_efficient = sorted(workflows, key=lambda w: w.efficiency, reverse=True)[:3]
        patterns = WorkflowPatterns(runs=runs, workflows=workflows, most_efficient=most_efficient)
        if most_efficient and most_efficient[0].efficiency >= 0.7:
            best = most_efficient[0]
            patterns.recommendations.append(
                f"Your {best.activity_type} workflow is the most efficient; "
                f"plan blocks of about {best.average_duration_minutes:.0f} minutes for it"
            )
        for workflow in workflows:
            if workflow.efficiency < 0.4:
                patterns.recommendations.append(
                    f"Recurring {workflow.activity_type} runs are unproductive; batch or shorten them"
                )
        return patterns

    # Confidence

    @staticmethod
    def pattern_confidence(result: PatternResult) -> float:
        """0-100, the summed weight of the sub-analyses that had enough data"""
        confidence = 0
        if result.focus.sessions:
            confidence += CONFIDENCE_WEIGHTS["focus"]
        if result.task_switching.total_switches > 0:
            confidence += CONFIDENCE_WEIGHTS["task_switching"]
        if isinstance(result.rhythm, RhythmPatterns) and len(result.rhythm.buckets) > 3:
            confidence += CONFIDENCE_WEIGHTS["rhythm"]
        if len(result.applications.applications) > 2:
            confidence += CONFIDENCE_WEIGHTS["applications"]
        if len(result.temporal.hourly) > 4:
            confidence += CONFIDENCE_WEIGHTS["temporal"]
        return float(confidence)

def session_quality(session: FocusSession) -> float:
    """0-100 quality of a focus session from duration, average score and interruptions"""
    duration_points = min(session.duration_minutes / 30, 1.0) * 40
    score_points = session.average_score / 100 * 40
    interruption_points = max(0, 20 - 5 * session.interruption_count)
    return min(100.0, duration_points + score_points + interruption_points)

def application_rating(average_score: float) -> str:
    if average_score >= 80:
        return "excellent"
    if average_score >= 60:
        return "good"
    if average_score >= 40:
        return "moderate"
    return "poor"

def circadian_profile(band_averages: Dict[str, float]) -> CircadianProfile:
    """Band with a strictly highest average, or consistent"""
    if len(band_averages) < 2:
        return CircadianProfile.CONSISTENT
    for name, _, _, profile in BANDS:
        if name not in band_averages:
            continue
        others = [v for other, v in band_averages.items() if other != name]
        if all(band_averages[name] > v for v in others):
            return profile
    return CircadianProfile.CONSISTENT
