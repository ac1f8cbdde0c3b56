"""
Pattern Analyzer — builds PatternData from stated preferences and task history
when no precomputed patterns are available.

Stated preferences seed the productive hours, session length and break time;
completed history refines subject performance and, with enough completions,
moves measured peak hours ahead of the stated ones. Completion rates per
priority tier adjust the difficulty profile.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from ..scheduling.models import (
    DifficultyProfile,
    PatternData,
    Priority,
    SubjectInsights,
    SubjectPerformance,
    Task,
    TaskType,
    TimePattern,
    UserPreferences,
)

_PRODUCTIVE_HOURS = {
    "morning": [9, 10, 11],
    "afternoon": [14, 15, 16],
    "evening": [19, 20, 21],
    "night": [22, 23, 0],
}

_SESSION_MINUTES = {"short": 30, "medium": 45, "long": 60}
_BREAK_MINUTES = {"frequent": 5, "moderate": 10, "minimal": 15}

STRUGGLING_COMPLETION_RATE = 0.7
STRUGGLING_AVG_MINUTES = 90
PREFERRED_COMPLETION_RATE = 0.8
LEARNING_MIN_COMPLETIONS = 10
MAX_PRODUCTIVE_HOURS = 5
FULL_CONSISTENCY_COMPLETIONS = 50

EASIER_SUBJECT_DIFFICULTY = 3
HARDER_SUBJECT_DIFFICULTY = 7
COMFORTABLE_TIER_RATE = 0.8
UNCOMFORTABLE_TIER_RATE = 0.5

_ESTIMATE_BASE_MINUTES = 60
_PRIORITY_FACTOR = {Priority.HIGH: 1.5, Priority.MEDIUM: 1.0, Priority.LOW: 0.75}
_TYPE_FACTOR = {TaskType.ACADEMIC: 1.2, TaskType.PERSONAL: 0.8}
LONG_DESCRIPTION_CHARS = 200
LONG_DESCRIPTION_FACTOR = 1.3


def estimate_duration(task: Task) -> int:
    """Rough minutes for a task with no recorded or estimated duration."""
    minutes = _ESTIMATE_BASE_MINUTES * _PRIORITY_FACTOR[task.priority] * _TYPE_FACTOR[task.type]
    if len(task.description) > LONG_DESCRIPTION_CHARS:
        minutes *= LONG_DESCRIPTION_FACTOR
    return round(minutes)


class PatternAnalyzer:

    def __init__(self, preferences: UserPreferences, history: Sequence[Task] = ()):
        self._preferences = preferences
        self._history = list(history)

    def analyze(self) -> PatternData:
        prefs = self._preferences
        time_pattern = TimePattern(
            most_productive_hours=list(_PRODUCTIVE_HOURS.get(prefs.study_time_preference, [])),
            preferred_study_duration=_SESSION_MINUTES.get(prefs.session_length_preference, 45),
            average_break_time=_BREAK_MINUTES.get(prefs.break_frequency, 15),
        )
        insights = SubjectInsights(
            preferred_subjects=list(prefs.preferred_subjects),
            struggling_subjects=list(prefs.struggling_subjects),
        )

        difficulty = DifficultyProfile(subject_difficulty={
            **{s: EASIER_SUBJECT_DIFFICULTY for s in prefs.preferred_subjects},
            **{s: HARDER_SUBJECT_DIFFICULTY for s in prefs.struggling_subjects},
        })

        completed = [t for t in self._history if t.completed]
        self._learn_subjects(insights)
        if self._history:
            self._learn_difficulty(difficulty)
        if len(completed) > LEARNING_MIN_COMPLETIONS:
            self._learn_hours(time_pattern, completed)
        time_pattern.consistency_score = round(
            min(len(completed) / FULL_CONSISTENCY_COMPLETIONS, 1.0), 4
        )

        return PatternData(
            time_pattern=time_pattern,
            subject_insights=insights,
            difficulty_profile=difficulty,
            total_tasks_analyzed=len(self._history),
            data_quality=round(0.5 + 0.5 * time_pattern.consistency_score, 4),
        )

    # ------------------------------------------------------------------
    # Learning from history
    # ------------------------------------------------------------------

    def _learn_subjects(self, insights: SubjectInsights) -> None:
        stats: Dict[str, Dict[str, float]] = {}
        for task in self._history:
            if not task.subject:
                continue
            entry = stats.setdefault(task.subject, {"completed": 0, "total": 0, "minutes": 0.0})
            entry["total"] += 1
            if task.completed:
                entry["completed"] += 1
                entry["minutes"] += task.time_spent or task.estimated_duration or estimate_duration(task)

        for subject, entry in stats.items():
            rate = entry["completed"] / entry["total"]
            avg_minutes = entry["minutes"] / entry["completed"] if entry["completed"] else 0.0
            insights.subject_performance[subject] = SubjectPerformance(
                completion_rate=round(rate, 4),
                average_time_spent=round(avg_minutes, 1),
            )

            if rate < STRUGGLING_COMPLETION_RATE or avg_minutes > STRUGGLING_AVG_MINUTES:
                if subject not in insights.struggling_subjects:
                    insights.struggling_subjects.append(subject)
            else:
                if subject in insights.struggling_subjects:
                    insights.struggling_subjects.remove(subject)
                if rate > PREFERRED_COMPLETION_RATE and subject not in insights.preferred_subjects:
                    insights.preferred_subjects.append(subject)

    def _learn_difficulty(self, profile: DifficultyProfile) -> None:
        """Nudge the comfortable difficulty by how reliably each priority tier gets finished."""
        rates: Dict[Priority, float] = {}
        for tier in Priority:
            tasks = [t for t in self._history if t.priority == tier]
            rates[tier] = sum(1 for t in tasks if t.completed) / len(tasks) if tasks else 0.0

        if rates[Priority.HIGH] > COMFORTABLE_TIER_RATE:
            profile.average_task_difficulty = min(profile.average_task_difficulty + 1, 10)
        elif rates[Priority.HIGH] < UNCOMFORTABLE_TIER_RATE and rates[Priority.MEDIUM] > COMFORTABLE_TIER_RATE:
            profile.average_task_difficulty = max(profile.average_task_difficulty - 1, 1)

        profile.adaptation_rate = round(min(sum(rates.values()) / len(rates), 1.0), 4)

    @staticmethod
    def _learn_hours(time_pattern: TimePattern, completed: List[Task]) -> None:
        by_hour: Dict[int, List[float]] = {}
        for task in completed:
            if task.completed_at is None:
                continue
            by_hour.setdefault(task.completed_at.hour, []).append(
                task.duration / task.actual_duration
            )
        if not by_hour:
            return

        ranked = sorted(by_hour, key=lambda h: sum(by_hour[h]) / len(by_hour[h]), reverse=True)
        blended = list(dict.fromkeys(ranked[:4] + time_pattern.most_productive_hours))
        time_pattern.most_productive_hours = blended[:MAX_PRODUCTIVE_HOURS]

        durations = [t.actual_duration for t in completed]
        time_pattern.preferred_study_duration = round(sum(durations) / len(durations))
