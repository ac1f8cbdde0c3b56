"""
Slot Allocator — greedily binds prioritized tasks to the best free slots.

Single-hour tasks take the first suitable free slot (slots arrive sorted by
efficiency). Longer tasks take the best contiguous run of suitable free
slots; splittable tasks fall back to the best free slots anywhere, emitted as
one ScheduledTask per contiguous piece. Tasks that fit nowhere are dropped.

A multi-slot task gives up its slots when leaving them free lets strictly
more of the remaining tasks be placed. Without this, blocking one hour of a
long run could free the run for several shorter tasks and raise the number
of scheduled tasks.

Only suitable slots are ever chosen, so every placement carries full
suitability and confidence is the mean of slot efficiency and 1.0.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Dict, List, Sequence, Set

from .models import (
    ScheduledTask,
    Task,
    TaskType,
    TimeOfDay,
    TimeSlot,
    UserPreferences,
)
from .slots import SLOT_LENGTH

logger = logging.getLogger(__name__)

STRUGGLING_MIN_EFFICIENCY = 0.7
HARD_TASK_DIFFICULTY = 7
HARD_TASK_MIN_EFFICIENCY = 0.6
SUITABLE_SLOT_SCORE = 1.0


def _required_slots(task: Task) -> int:
    return max(1, math.ceil(task.duration / 60))


class SlotAllocator:

    def __init__(self, preferences: UserPreferences, split_threshold_minutes: int = 90):
        self._preferences = preferences
        self._split_threshold = split_threshold_minutes

    def allocate(self, tasks: Sequence[Task], slots: Sequence[TimeSlot]) -> List[ScheduledTask]:
        free = [s for s in slots if s.available]
        tasks = list(tasks)
        used: Set[datetime] = set()
        scheduled: List[ScheduledTask] = []

        for index, task in enumerate(tasks):
            required = _required_slots(task)
            chosen = self._find_slots(task, free, used, required)
            if not chosen:
                logger.debug("No suitable slots for task %s (%s); dropped", task.id, task.title)
                continue
            if required > 1 and self._crowds_out(tasks[index + 1:], free, used, chosen):
                logger.debug("Task %s (%s) yields %d slots to shorter tasks; dropped",
                             task.id, task.title, required)
                continue
            used.update(s.start for s in chosen)
            scheduled.extend(self._build(task, chosen))

        return scheduled

    def _crowds_out(
        self,
        rest: List[Task],
        free: List[TimeSlot],
        used: Set[datetime],
        chosen: List[TimeSlot],
    ) -> bool:
        """True when skipping the task lets more tasks in total be placed."""
        if not rest:
            return False
        taken = used | {s.start for s in chosen}
        return self._count_placeable(rest, free, used) > 1 + self._count_placeable(rest, free, taken)

    def _count_placeable(self, tasks: List[Task], free: List[TimeSlot], used: Set[datetime]) -> int:
        used = set(used)
        placed = 0
        for task in tasks:
            chosen = self._find_slots(task, free, used, _required_slots(task))
            if chosen:
                used.update(s.start for s in chosen)
                placed += 1
        return placed

    # ------------------------------------------------------------------
    # Slot selection
    # ------------------------------------------------------------------

    def is_suitable(self, task: Task, slot: TimeSlot) -> bool:
        if task.type == TaskType.ACADEMIC and slot.time_of_day == TimeOfDay.LATE_NIGHT:
            return False
        if task.subject and task.subject in self._preferences.struggling_subjects:
            return slot.efficiency > STRUGGLING_MIN_EFFICIENCY
        if task.difficulty_level > HARD_TASK_DIFFICULTY and slot.efficiency < HARD_TASK_MIN_EFFICIENCY:
            return False
        return True

    def can_split(self, task: Task) -> bool:
        return task.type != TaskType.PERSONAL and task.duration > self._split_threshold

    def _find_slots(
        self,
        task: Task,
        free: List[TimeSlot],
        used: Set[datetime],
        required: int,
    ) -> List[TimeSlot]:
        candidates = [s for s in free if s.start not in used and self.is_suitable(task, s)]
        if not candidates:
            return []
        if required == 1:
            return [candidates[0]]

        run = self._best_run(candidates, required)
        if run:
            return run

        if self.can_split(task) and len(candidates) >= required:
            return candidates[:required]
        return []

    @staticmethod
    def _best_run(candidates: List[TimeSlot], required: int) -> List[TimeSlot]:
        """Highest mean-efficiency run of `required` back-to-back slots; ties go to the earliest."""
        by_start: Dict[datetime, TimeSlot] = {s.start: s for s in candidates}
        best: List[TimeSlot] = []
        best_score = -1.0

        for first in sorted(candidates, key=lambda s: s.start):
            run = [first]
            while len(run) < required:
                nxt = by_start.get(run[-1].start + SLOT_LENGTH)
                if nxt is None:
                    break
                run.append(nxt)
            if len(run) < required:
                continue
            score = sum(s.efficiency for s in run) / required
            if score > best_score:
                best, best_score = run, score
        return best

    # ------------------------------------------------------------------
    # ScheduledTask construction
    # ------------------------------------------------------------------

    def _build(self, task: Task, chosen: List[TimeSlot]) -> List[ScheduledTask]:
        efficiency = sum(s.efficiency for s in chosen) / len(chosen)
        confidence = round((efficiency + SUITABLE_SLOT_SCORE) / 2, 4)

        pieces = _contiguous_pieces(sorted(chosen, key=lambda s: s.start))
        remaining = task.duration
        result = []
        for index, piece in enumerate(pieces, start=1):
            minutes = min(remaining, len(piece) * 60) if index < len(pieces) else remaining
            remaining -= minutes
            reasoning = (
                f"Scheduled during optimal productivity window with "
                f"{round(efficiency * 100)}% efficiency"
            )
            if len(pieces) > 1:
                reasoning += f" (part {index} of {len(pieces)})"
            result.append(ScheduledTask(
                task=task,
                start=piece[0].start,
                end=piece[-1].end,
                confidence=confidence,
                reasoning=reasoning,
                efficiency=round(sum(s.efficiency for s in piece) / len(piece), 4),
                allocated_slots=len(piece),
                duration_minutes=minutes,
                part=index,
                parts=len(pieces),
            ))
        return result


def _contiguous_pieces(slots: List[TimeSlot]) -> List[List[TimeSlot]]:
    pieces: List[List[TimeSlot]] = [[slots[0]]]
    for slot in slots[1:]:
        if slot.start == pieces[-1][-1].end:
            pieces[-1].append(slot)
        else:
            pieces.append([slot])
    return pieces
