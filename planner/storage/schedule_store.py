"""
Schedule Store — SQLite persistence for generated schedules and their
follow-up (when scheduled tasks were actually worked on), plus the analytics
derived from that history.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from ..scheduling.models import ScheduledTask

logger = logging.getLogger(__name__)

ON_TIME_GRACE_S = 30 * 60

_COLUMNS = (
    "id, task_id, title, subject, priority, scheduled_start, scheduled_end, "
    "confidence, efficiency, reasoning, part, parts, created_at, "
    "actual_start, actual_end, was_rescheduled, reschedule_reason, updated_at"
)


@dataclass
class StoredScheduledTask:
    id: Optional[int]
    task_id: str
    title: str
    subject: Optional[str]
    priority: str
    scheduled_start: float          # Unix timestamps throughout
    scheduled_end: float
    confidence: float
    efficiency: float
    reasoning: str
    part: int = 1
    parts: int = 1
    created_at: float = 0.0
    actual_start: Optional[float] = None
    actual_end: Optional[float] = None
    was_rescheduled: bool = False
    reschedule_reason: Optional[str] = None
    updated_at: Optional[float] = None


@dataclass
class SchedulingAnalytics:
    total_scheduled: int
    completed_on_time: int
    average_actual_vs_scheduled: float
    most_productive_hours: List[int]
    reschedule_rate: float


@dataclass
class SubjectScheduleStats:
    completed: int
    total: int
    avg_confidence: float


@dataclass
class RecentPatterns:
    preferred_start_hours: List[int]
    average_session_minutes: float
    subject_performance: Dict[str, SubjectScheduleStats]


class ScheduleStore:
    """SQLite-backed store; one short-lived connection per call."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save_schedule(self, schedule: Sequence[ScheduledTask]) -> int:
        """
        Persist a generated schedule. Rows that have not been started and
        begin inside the new schedule's span are superseded by it.
        """
        if not schedule:
            return 0
        span_start = min(s.start for s in schedule).timestamp()
        span_end = max(s.end for s in schedule).timestamp()
        now = time.time()

        with self._conn() as conn:
            superseded = conn.execute(
                """
                DELETE FROM scheduled_tasks
                WHERE actual_start IS NULL
                  AND scheduled_start >= ? AND scheduled_start < ?
                """,
                (span_start, span_end),
            ).rowcount
            conn.executemany(
                """
                INSERT INTO scheduled_tasks
                    (task_id, title, subject, priority, scheduled_start, scheduled_end,
                     confidence, efficiency, reasoning, part, parts, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        s.task_id,
                        s.title,
                        s.subject,
                        s.priority.value,
                        s.start.timestamp(),
                        s.end.timestamp(),
                        s.confidence,
                        s.efficiency,
                        s.reasoning,
                        s.part,
                        s.parts,
                        now,
                    )
                    for s in schedule
                ],
            )

        logger.info("Saved %d scheduled tasks (%d superseded)", len(schedule), superseded)
        return len(schedule)

    def update_task_progress(
        self,
        task_id: str,
        actual_start: Optional[datetime] = None,
        actual_end: Optional[datetime] = None,
        was_rescheduled: Optional[bool] = None,
        reschedule_reason: Optional[str] = None,
    ) -> int:
        """Record progress on every stored row for *task_id*; returns rows updated."""
        assignments = ["updated_at = ?"]
        params: list = [time.time()]

        if actual_start is not None:
            assignments.append("actual_start = ?")
            params.append(actual_start.timestamp())
        if actual_end is not None:
            assignments.append("actual_end = ?")
            params.append(actual_end.timestamp())
        if was_rescheduled is not None:
            assignments.append("was_rescheduled = ?")
            params.append(int(was_rescheduled))
        if reschedule_reason:
            assignments.append("reschedule_reason = ?")
            params.append(reschedule_reason)

        params.append(task_id)
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE scheduled_tasks SET {', '.join(assignments)} WHERE task_id = ?",
                params,
            )
            return cur.rowcount

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def query(
        self,
        since: Optional[float] = None,
        until: Optional[float] = None,
        limit: int = 500,
        newest_first: bool = False,
    ) -> List[StoredScheduledTask]:
        clauses = []
        params: list = []

        if since is not None:
            clauses.append("scheduled_start >= ?")
            params.append(since)
        if until is not None:
            clauses.append("scheduled_start <= ?")
            params.append(until)

        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        order = "created_at DESC, scheduled_start DESC" if newest_first else "scheduled_start ASC"
        params.append(limit)

        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM scheduled_tasks {where} ORDER BY {order} LIMIT ?",
                params,
            ).fetchall()

        return [_row_to_task(row) for row in rows]

    def current_schedule(self, now: Optional[datetime] = None, horizon_days: int = 7) -> List[StoredScheduledTask]:
        now = now or datetime.now()
        return self.query(
            since=now.timestamp(),
            until=(now + timedelta(days=horizon_days)).timestamp(),
            limit=10_000,
        )

    def analytics(self, days: int = 30, now: Optional[datetime] = None) -> SchedulingAnalytics:
        now = now or datetime.now()
        since = (now - timedelta(days=days)).timestamp()
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM scheduled_tasks WHERE created_at >= ?",
                (since,),
            ).fetchall()
        tasks = [_row_to_task(row) for row in rows]

        if not tasks:
            return SchedulingAnalytics(0, 0, 0.0, [], 0.0)

        finished = [t for t in tasks if t.actual_end is not None]
        on_time = sum(1 for t in finished if t.actual_end <= t.scheduled_end + ON_TIME_GRACE_S)

        ratios = [
            (t.actual_end - t.actual_start) / (t.scheduled_end - t.scheduled_start)
            for t in finished
            if t.actual_start is not None and t.scheduled_end > t.scheduled_start
        ]
        avg_ratio = sum(ratios) / len(ratios) if ratios else 1.0

        hours = Counter(datetime.fromtimestamp(t.actual_end).hour for t in finished)
        top_hours = [h for h, _ in hours.most_common(3)]

        rescheduled = sum(1 for t in tasks if t.was_rescheduled)

        return SchedulingAnalytics(
            total_scheduled=len(tasks),
            completed_on_time=on_time,
            average_actual_vs_scheduled=round(avg_ratio, 4),
            most_productive_hours=top_hours,
            reschedule_rate=round(rescheduled / len(tasks), 4),
        )

    def recent_patterns(self, limit: int = 50) -> RecentPatterns:
        tasks = self.query(limit=limit, newest_first=True)
        if not tasks:
            return RecentPatterns([], 0.0, {})

        start_hours = sorted({datetime.fromtimestamp(t.scheduled_start).hour for t in tasks})
        lengths = [(t.scheduled_end - t.scheduled_start) / 60.0 for t in tasks]

        grouped: Dict[str, List[StoredScheduledTask]] = {}
        for t in tasks:
            grouped.setdefault(t.subject or "Unknown", []).append(t)

        subjects = {
            subject: SubjectScheduleStats(
                completed=sum(1 for t in items if t.actual_end is not None),
                total=len(items),
                avg_confidence=round(sum(t.confidence for t in items) / len(items), 4),
            )
            for subject, items in grouped.items()
        }

        return RecentPatterns(
            preferred_start_hours=start_hours,
            average_session_minutes=round(sum(lengths) / len(lengths), 1),
            subject_performance=subjects,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS scheduled_tasks (
                    id                INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id           TEXT    NOT NULL,
                    title             TEXT    NOT NULL,
                    subject           TEXT,
                    priority          TEXT    NOT NULL DEFAULT 'medium',
                    scheduled_start   REAL    NOT NULL,
                    scheduled_end     REAL    NOT NULL,
                    confidence        REAL    NOT NULL DEFAULT 0.5,
                    efficiency        REAL    NOT NULL DEFAULT 0.5,
                    reasoning         TEXT    NOT NULL DEFAULT '',
                    part              INTEGER NOT NULL DEFAULT 1,
                    parts             INTEGER NOT NULL DEFAULT 1,
                    created_at        REAL    NOT NULL,
                    actual_start      REAL,
                    actual_end        REAL,
                    was_rescheduled   INTEGER NOT NULL DEFAULT 0,
                    reschedule_reason TEXT,
                    updated_at        REAL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_sched_start ON scheduled_tasks(scheduled_start)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_sched_task ON scheduled_tasks(task_id)")

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


def _row_to_task(row) -> StoredScheduledTask:
    values = list(row)
    values[15] = bool(values[15])
    return StoredScheduledTask(*values)
