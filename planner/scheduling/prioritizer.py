"""
Task Prioritizer — additive weighted score over priority tier, due-date
urgency, subject signals, estimated duration and how long similar tasks
actually took. Higher score = schedule first.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from .models import PatternData, Priority, Task, UserPreferences

_PRIORITY_WEIGHTS = {
    Priority.HIGH: 10.0,
    Priority.MEDIUM: 5.0,
    Priority.LOW: 2.0,
}

OVERDUE_BONUS = 20.0
STRUGGLING_BONUS = 8.0
COMPLETION_RATE_WEIGHT = 5.0
LONG_TASK_MINUTES = 120
LONG_TASK_BONUS = 3.0
UNDERESTIMATE_FACTOR = 1.2
UNDERESTIMATE_BONUS = 4.0


@dataclass
class RankedTask:
    task: Task
    score: float


class TaskPrioritizer:

    def __init__(
        self,
        preferences: UserPreferences,
        patterns: Optional[PatternData] = None,
        history: Sequence[Task] = (),
    ):
        self._preferences = preferences
        self._patterns = patterns
        self._history = [t for t in history if t.completed]

    def rank(self, tasks: Sequence[Task], now: datetime) -> List[RankedTask]:
        ranked = [RankedTask(t, self.score(t, now)) for t in tasks if not t.completed]
        # sorted() is stable: equal scores keep their input order
        return sorted(ranked, key=lambda r: r.score, reverse=True)

    def prioritize(self, tasks: Sequence[Task], now: datetime) -> List[Task]:
        return [r.task for r in self.rank(tasks, now)]

    def score(self, task: Task, now: datetime) -> float:
        score = _PRIORITY_WEIGHTS[task.priority]
        score += self._urgency(task, now)
        score += self._subject_signal(task)

        if task.duration > LONG_TASK_MINUTES:
            score += LONG_TASK_BONUS

        similar = self._similar_history(task)
        if similar:
            avg_actual = sum(t.actual_duration for t in similar) / len(similar)
            if avg_actual > task.duration * UNDERESTIMATE_FACTOR:
                score += UNDERESTIMATE_BONUS

        return score

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @staticmethod
    def _urgency(task: Task, now: datetime) -> float:
        if task.due_date is None:
            return 0.0
        remaining_days = (task.due_date - now).total_seconds() / 86400.0
        if remaining_days < 0:
            return OVERDUE_BONUS
        days = math.ceil(remaining_days)
        if days <= 1:
            return 15.0
        if days <= 3:
            return 10.0
        if days <= 7:
            return 5.0
        return 0.0

    def _subject_signal(self, task: Task) -> float:
        if not task.subject:
            return 0.0
        if task.subject in self._preferences.struggling_subjects:
            return STRUGGLING_BONUS
        if self._patterns is None:
            return 0.0
        perf = self._patterns.subject_insights.subject_performance.get(task.subject)
        if perf is None:
            return 0.0
        return (1.0 - perf.completion_rate) * COMPLETION_RATE_WEIGHT

    def _similar_history(self, task: Task) -> List[Task]:
        return [
            h for h in self._history
            if (task.subject and h.subject == task.subject)
            or h.type == task.type
            or h.priority == task.priority
        ]
