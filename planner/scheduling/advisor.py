"""
Schedule Adjustment Advisor — read-only inspection of a finished schedule.

Produces advisory ScheduleAdjustments for long unbroken study runs, uneven
subject time, hard tasks sitting in weak slots, and a follow-up for every
conflict the resolver settled. Never mutates the schedule.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from .models import (
    AdjustmentKind,
    ConflictResolution,
    ScheduleAdjustment,
    ScheduledTask,
)

HARD_TASK_DIFFICULTY = 7
WEAK_SLOT_EFFICIENCY = 0.6


class ScheduleAdjustmentAdvisor:

    def __init__(
        self,
        max_consecutive_hours: float = 3.0,
        break_gap_minutes: int = 30,
        imbalance_threshold: float = 0.7,
    ):
        self._max_consecutive_hours = max_consecutive_hours
        self._break_gap = timedelta(minutes=break_gap_minutes)
        self._imbalance_threshold = imbalance_threshold

    def advise(
        self,
        schedule: Sequence[ScheduledTask],
        resolutions: Sequence[ConflictResolution] = (),
        now: Optional[datetime] = None,
    ) -> List[ScheduleAdjustment]:
        now = now or datetime.now()
        ordered = sorted(schedule, key=lambda s: s.start)
        adjustments: List[ScheduleAdjustment] = []

        long_runs = [run for run in self.study_runs(ordered) if _hours(run) > self._max_consecutive_hours]
        if long_runs:
            affected = [s.task_id for run in long_runs for s in run]
            adjustments.append(ScheduleAdjustment(
                id=f"{AdjustmentKind.BREAK_INSERTION.value}-{len(adjustments)}",
                kind=AdjustmentKind.BREAK_INSERTION,
                title="Add Strategic Breaks",
                description="Consider adding 15-minute breaks between long study sessions to maintain focus",
                suggested_change="Insert breaks after every 2-3 hours of continuous work",
                priority="medium",
                impact="medium",
                effort="low",
                confidence=0.8,
                affected_task_ids=_unique(affected),
                original_time=long_runs[0][0].start,
                suggested_time=long_runs[0][0].start + timedelta(minutes=15),
            ))

        if self.subject_imbalance(ordered) > self._imbalance_threshold:
            adjustments.append(ScheduleAdjustment(
                id=f"{AdjustmentKind.SUBJECT_BALANCE.value}-{len(adjustments)}",
                kind=AdjustmentKind.SUBJECT_BALANCE,
                title="Balance Subject Distribution",
                description=(
                    "Your schedule is heavily focused on one subject. "
                    "Consider spreading subjects throughout the week"
                ),
                suggested_change="Redistribute tasks to ensure no subject dominates any single day",
                priority="high",
                impact="high",
                effort="medium",
                confidence=0.7,
                affected_task_ids=_unique(s.task_id for s in ordered),
                original_time=now,
                suggested_time=now + timedelta(hours=1),
            ))

        misplaced = [
            s for s in ordered
            if s.difficulty > HARD_TASK_DIFFICULTY and s.efficiency < WEAK_SLOT_EFFICIENCY
        ]
        if misplaced:
            adjustments.append(ScheduleAdjustment(
                id=f"{AdjustmentKind.DIFFICULTY_ORDER.value}-{len(adjustments)}",
                kind=AdjustmentKind.DIFFICULTY_ORDER,
                title="Optimize Difficulty Progression",
                description=(
                    "Start with easier tasks to build momentum, "
                    "then tackle harder ones during peak hours"
                ),
                suggested_change="Reorder tasks by difficulty within each study session",
                priority="medium",
                impact="medium",
                effort="low",
                confidence=0.75,
                affected_task_ids=_unique(s.task_id for s in misplaced),
                original_time=misplaced[0].start,
                suggested_time=misplaced[0].start + timedelta(minutes=30),
            ))

        for resolution in resolutions:
            loser = resolution.original_task
            adjustments.append(ScheduleAdjustment(
                id=f"{AdjustmentKind.CONFLICT_FOLLOW_UP.value}-{len(adjustments)}",
                kind=AdjustmentKind.CONFLICT_FOLLOW_UP,
                title=f"Resolve: {loser.title}",
                description=resolution.reason,
                suggested_change=f"{resolution.type.value} the conflicting task",
                priority="high",
                impact="high",
                effort="medium",
                confidence=0.6,
                affected_task_ids=[loser.task_id],
                original_time=loser.start,
                suggested_time=loser.start + timedelta(hours=1),
            ))

        return adjustments

    # ------------------------------------------------------------------
    # Analyses
    # ------------------------------------------------------------------

    def study_runs(self, ordered: Sequence[ScheduledTask]) -> List[List[ScheduledTask]]:
        """Group start-ordered tasks into runs separated by gaps longer than the break gap."""
        runs: List[List[ScheduledTask]] = []
        for item in ordered:
            if runs and item.start - runs[-1][-1].end <= self._break_gap:
                runs[-1].append(item)
            else:
                runs.append([item])
        return runs

    @staticmethod
    def subject_imbalance(schedule: Sequence[ScheduledTask]) -> float:
        """Sum of absolute deviations from an even per-subject split, as a fraction of total time."""
        hours: Dict[str, float] = {}
        for s in schedule:
            subject = s.subject or "Other"
            hours[subject] = hours.get(subject, 0.0) + s.duration_minutes / 60.0
        total = sum(hours.values())
        if total == 0 or len(hours) <= 1:
            return 0.0
        expected = total / len(hours)
        return sum(abs(h - expected) for h in hours.values()) / total


def _hours(run: Sequence[ScheduledTask]) -> float:
    return sum(s.duration_minutes for s in run) / 60.0


def _unique(ids) -> List[str]:
    return list(dict.fromkeys(ids))
