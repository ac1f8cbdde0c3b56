"""
/schedule — generate a schedule, read back the stored one, record progress,
and query scheduling analytics.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...analysis.patterns import PatternAnalyzer
from ...api.schemas import (
    RecentPatternsOut,
    ScheduleAdjustmentOut,
    ScheduledTaskOut,
    ScheduleMetadataOut,
    ScheduleOut,
    ScheduleRequest,
    SchedulingAnalyticsOut,
    StoredScheduledTaskOut,
    TaskProgressIn,
    local_naive,
)
from ...scheduling.smart_scheduler import SmartScheduler
from ...settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _get_store(request: Request):
    return request.app.state.store


@router.post("", response_model=ScheduleOut)
def generate_schedule(req: ScheduleRequest, store=Depends(_get_store)):
    """Run the scheduler over the submitted tasks; optionally persist the result."""
    try:
        tasks = [t.to_domain() for t in req.tasks]
        history = [t.to_domain() for t in req.history]
        events = [e.to_domain() for e in req.events]
        preferences = req.preferences.to_domain()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    patterns = (
        req.patterns.to_domain()
        if req.patterns is not None
        else PatternAnalyzer(preferences, history).analyze()
    )

    scheduler = SmartScheduler(preferences, patterns=patterns, settings=get_settings())
    result = scheduler.generate(tasks, events=events, history=history, now=local_naive(req.now))

    persisted = store.save_schedule(result.schedule) if req.persist else 0

    return ScheduleOut(
        schedule=[ScheduledTaskOut.from_domain(s) for s in result.schedule],
        adjustments=[ScheduleAdjustmentOut.from_domain(a) for a in result.adjustments],
        metadata=ScheduleMetadataOut(**asdict(result.metadata)),
        persisted=persisted,
    )


@router.get("/current", response_model=List[StoredScheduledTaskOut])
def current_schedule(store=Depends(_get_store)):
    """Stored schedule entries starting within the configured horizon."""
    horizon = get_settings()["horizon_days"]
    return [
        StoredScheduledTaskOut(**{k: v for k, v in asdict(t).items() if k in StoredScheduledTaskOut.model_fields})
        for t in store.current_schedule(horizon_days=horizon)
    ]


@router.patch("/tasks/{task_id}/progress")
def update_progress(task_id: str, progress: TaskProgressIn, store=Depends(_get_store)):
    updated = store.update_task_progress(
        task_id,
        actual_start=local_naive(progress.actual_start),
        actual_end=local_naive(progress.actual_end),
        was_rescheduled=progress.was_rescheduled,
        reschedule_reason=progress.reschedule_reason,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Scheduled task not found")
    return {"status": "updated", "rows": updated}


@router.get("/analytics", response_model=SchedulingAnalyticsOut)
def analytics(
    days: int = Query(default=30, ge=1, le=365, description="Look-back window in days"),
    store=Depends(_get_store),
):
    return SchedulingAnalyticsOut(**asdict(store.analytics(days=days)))


@router.get("/patterns", response_model=RecentPatternsOut)
def recent_patterns(
    limit: int = Query(default=50, ge=1, le=500),
    store=Depends(_get_store),
):
    return RecentPatternsOut(**asdict(store.recent_patterns(limit=limit)))
