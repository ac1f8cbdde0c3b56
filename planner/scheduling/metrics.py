"""
Schedule Metrics — aggregate efficiency and confidence for a finished schedule.

    efficiency = time-weighted mean slot efficiency
    confidence = 0.3 * data quality
               + 0.3 * task coverage
               + 0.2 * slot/difficulty alignment
               + 0.2 * overlap-free ratio
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .models import ScheduledTask

_CONFIDENCE_WEIGHTS = {
    "data_quality": 0.3,
    "coverage": 0.3,
    "alignment": 0.2,
    "overlap_free": 0.2,
}


def _clamp(value: float) -> float:
    return max(0.0, min(float(value), 1.0))


class ScheduleMetricsCalculator:
    """Pure functions of the final schedule; holds no state between calls."""

    def efficiency(self, schedule: Sequence[ScheduledTask]) -> float:
        if not schedule:
            return 0.0
        weights = np.array([s.duration_minutes for s in schedule], dtype=np.float64)
        if weights.sum() <= 0:
            return 0.0
        values = np.array([s.efficiency for s in schedule], dtype=np.float64)
        return round(_clamp(np.average(values, weights=weights)), 4)

    def confidence(
        self,
        schedule: Sequence[ScheduledTask],
        total_tasks: int,
        data_quality: float = 0.5,
    ) -> float:
        if not schedule:
            return 0.0
        factors = {
            "data_quality": _clamp(data_quality),
            "coverage": self.coverage(schedule, total_tasks),
            "alignment": self.alignment(schedule),
            "overlap_free": self.overlap_free_ratio(schedule),
        }
        score = sum(_CONFIDENCE_WEIGHTS[k] * v for k, v in factors.items())
        return round(_clamp(score), 4)

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def coverage(schedule: Sequence[ScheduledTask], total_tasks: int) -> float:
        if total_tasks <= 0:
            return 0.0
        scheduled = len({s.task_id for s in schedule})
        return min(scheduled / total_tasks, 1.0)

    @staticmethod
    def alignment(schedule: Sequence[ScheduledTask]) -> float:
        """Harder tasks in more efficient slots score higher."""
        if not schedule:
            return 0.0
        matches = np.array([s.efficiency * (s.difficulty / 10.0) for s in schedule])
        return _clamp(matches.mean())

    @staticmethod
    def overlap_free_ratio(schedule: Sequence[ScheduledTask]) -> float:
        if not schedule:
            return 0.0
        overlaps = sum(
            1
            for i, a in enumerate(schedule)
            for b in schedule[i + 1:]
            if a.overlaps(b)
        )
        return max(0.0, 1.0 - overlaps / len(schedule))
