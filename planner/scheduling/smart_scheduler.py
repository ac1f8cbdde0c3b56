"""
Smart Scheduler — runs the full scheduling pipeline for one request:

    windows → slots → prioritize → allocate → resolve conflicts
            → advise adjustments → metrics

Construct one per request; nothing is shared between runs.

Usage:
    scheduler = SmartScheduler(preferences, patterns=patterns)
    result = scheduler.generate(tasks, events=events, history=history)
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..settings import get_settings
from .advisor import ScheduleAdjustmentAdvisor
from .allocator import SlotAllocator
from .conflicts import ConflictResolver
from .metrics import ScheduleMetricsCalculator
from .models import (
    CalendarEvent,
    PatternData,
    ScheduleMetadata,
    ScheduleResult,
    Task,
    UserPreferences,
)
from .prioritizer import TaskPrioritizer
from .slots import TimeSlotGenerator
from .windows import ProductivityWindowAnalyzer

logger = logging.getLogger(__name__)


class SmartScheduler:

    def __init__(
        self,
        preferences: UserPreferences,
        patterns: Optional[PatternData] = None,
        settings: Optional[Dict[str, Any]] = None,
    ):
        self._preferences = preferences
        self._patterns = patterns
        self._settings = settings if settings is not None else get_settings()
        self._metrics = ScheduleMetricsCalculator()

    def generate(
        self,
        tasks: Sequence[Task],
        events: Sequence[CalendarEvent] = (),
        history: Sequence[Task] = (),
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        started = time.perf_counter()
        now = now or datetime.now()
        s = self._settings

        windows = ProductivityWindowAnalyzer(self._preferences, self._patterns, history).analyze()

        slots = TimeSlotGenerator(
            windows,
            events,
            horizon_days=s["horizon_days"],
            skip_weekends=not self._preferences.available_study_hours,
        ).generate(now)

        prioritized = TaskPrioritizer(self._preferences, self._patterns, history).prioritize(tasks, now)

        allocated = SlotAllocator(
            self._preferences, split_threshold_minutes=s["split_threshold_minutes"]
        ).allocate(prioritized, slots)

        resolved = ConflictResolver(split_threshold_minutes=s["split_threshold_minutes"]).resolve(allocated)

        adjustments = ScheduleAdjustmentAdvisor(
            max_consecutive_hours=s["max_consecutive_hours"],
            break_gap_minutes=s["break_gap_minutes"],
            imbalance_threshold=s["subject_imbalance_threshold"],
        ).advise(resolved.schedule, resolved.resolutions, now=now)

        total = len(prioritized)
        data_quality = self._patterns.data_quality if self._patterns else 0.5
        scheduled_ids = {item.task_id for item in resolved.schedule}
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        metadata = ScheduleMetadata(
            total_tasks=total,
            scheduled_tasks=len(scheduled_ids),
            conflicts=len(resolved.resolutions),
            efficiency=self._metrics.efficiency(resolved.schedule),
            confidence=self._metrics.confidence(resolved.schedule, total, data_quality),
            generated_at=now,
            elapsed_ms=round(elapsed_ms, 2),
        )

        logger.info(
            "Smart schedule generated in %.1fms: %d/%d tasks over %d slots, %d conflicts",
            elapsed_ms, metadata.scheduled_tasks, total, len(slots), metadata.conflicts,
        )
        if metadata.scheduled_tasks < total:
            dropped = [t.id for t in prioritized if t.id not in scheduled_ids]
            logger.debug("Unscheduled tasks: %s", ", ".join(dropped))

        return ScheduleResult(
            schedule=resolved.schedule,
            adjustments=adjustments,
            metadata=metadata,
            resolutions=resolved.resolutions,
        )
