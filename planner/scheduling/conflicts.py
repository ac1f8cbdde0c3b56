"""
Conflict Resolver — walks scheduled tasks in start order and settles every
overlap with an already-accepted task using a fixed precedence chain:

  1. higher priority wins; the loser is pulled for rescheduling
  2. equal priority: the earlier due date wins; the loser is rescheduled
  3. otherwise, if the longer task runs over the split threshold, it is
     split: it gives up the overlapping hours and keeps the rest
  4. otherwise the incoming task is deferred

Each step settles one overlapping pair and only ever removes or shrinks
intervals, so the accepted list never contains two overlapping tasks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from .models import ConflictResolution, ResolutionType, ScheduledTask

logger = logging.getLogger(__name__)


@dataclass
class ResolvedSchedule:
    schedule: List[ScheduledTask]
    resolutions: List[ConflictResolution]


class ConflictResolver:

    def __init__(self, split_threshold_minutes: int = 90):
        self._split_threshold = split_threshold_minutes

    def resolve(self, scheduled: Sequence[ScheduledTask]) -> ResolvedSchedule:
        accepted: List[ScheduledTask] = []
        resolutions: List[ConflictResolution] = []

        for incoming in sorted(scheduled, key=lambda s: s.start):
            current: Optional[ScheduledTask] = incoming
            while current is not None:
                clash = next((a for a in accepted if a.overlaps(current)), None)
                if clash is None:
                    accepted.append(current)
                    break
                current = self._settle(current, clash, accepted, resolutions)

        accepted.sort(key=lambda s: s.start)
        return ResolvedSchedule(schedule=accepted, resolutions=resolutions)

    # ------------------------------------------------------------------
    # Pairwise precedence
    # ------------------------------------------------------------------

    def _settle(
        self,
        incoming: ScheduledTask,
        existing: ScheduledTask,
        accepted: List[ScheduledTask],
        resolutions: List[ConflictResolution],
    ) -> Optional[ScheduledTask]:
        """Resolve one overlapping pair; return what is left of `incoming` (None if it lost)."""

        winner = self._precedence_winner(incoming, existing)
        if winner is not None:
            loser = existing if winner is incoming else incoming
            resolutions.append(ConflictResolution(
                type=ResolutionType.RESCHEDULE,
                original_task=loser,
                kept_task=winner,
                reason=self._reschedule_reason(winner, loser),
            ))
            logger.debug("Conflict: %s rescheduled in favour of %s", loser.task_id, winner.task_id)
            if loser is existing:
                accepted.remove(existing)
                return incoming
            return None

        longer, shorter = (
            (incoming, existing)
            if incoming.duration_minutes > existing.duration_minutes
            else (existing, incoming)
        )
        if longer.duration_minutes > shorter.duration_minutes and longer.duration_minutes > self._split_threshold:
            trimmed = _trim_around(longer, shorter)
            resolutions.append(ConflictResolution(
                type=ResolutionType.SPLIT,
                original_task=longer,
                kept_task=shorter,
                reason="Split longer task to accommodate both",
            ))
            if longer is existing:
                accepted.remove(existing)
                if trimmed is not None:
                    accepted.append(trimmed)
                return incoming
            return trimmed

        resolutions.append(ConflictResolution(
            type=ResolutionType.DEFER,
            original_task=incoming,
            kept_task=existing,
            reason="Defer to next available slot",
        ))
        logger.debug("Conflict: %s deferred", incoming.task_id)
        return None

    @staticmethod
    def _precedence_winner(a: ScheduledTask, b: ScheduledTask) -> Optional[ScheduledTask]:
        if a.priority.rank != b.priority.rank:
            return a if a.priority.rank > b.priority.rank else b
        a_due, b_due = a.task.due_date, b.task.due_date
        if a_due is not None and b_due is not None and a_due != b_due:
            return a if a_due < b_due else b
        return None

    @staticmethod
    def _reschedule_reason(winner: ScheduledTask, loser: ScheduledTask) -> str:
        if winner.priority != loser.priority:
            return f"Higher priority task ({winner.title}) takes precedence"
        return f"Earlier due date ({winner.task.due_date:%b %d})"


def _trim_around(longer: ScheduledTask, shorter: ScheduledTask) -> Optional[ScheduledTask]:
    """Keep the larger part of `longer` that lies outside `shorter`, or None if nothing remains."""
    before = (shorter.start - longer.start) if shorter.start > longer.start else None
    after = (longer.end - shorter.end) if longer.end > shorter.end else None

    if before is not None and (after is None or before >= after):
        start, end = longer.start, shorter.start
    elif after is not None:
        start, end = shorter.end, longer.end
    else:
        return None

    hours = int((end - start).total_seconds() // 3600)
    if hours < 1:
        return None
    return replace(
        longer,
        start=start,
        end=end,
        allocated_slots=hours,
        duration_minutes=min(longer.duration_minutes, hours * 60),
        reasoning=longer.reasoning + " (shortened to resolve a conflict)",
    )
