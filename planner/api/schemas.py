"""
Pydantic schemas for the planner HTTP API, plus the conversions between them
and the scheduling domain types.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, Field

from ..scheduling.models import (
    CalendarEvent,
    PatternData,
    ScheduleAdjustment,
    ScheduledTask,
    SubjectInsights,
    SubjectPerformance,
    Task,
    TimePattern,
    UserPreferences,
)


Hour = Annotated[int, Field(ge=0, le=23)]


def local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Scheduling runs on naive local wall-clock time; convert aware inputs."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# ── Inputs ─────────────────────────────────────────────────────────────────

class TaskIn(BaseModel):
    id: str
    title: str
    description: str = ""
    subject: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: str = Field("medium", pattern="^(high|medium|low)$")
    type: str = Field("academic", pattern="^(academic|personal)$")
    completed: bool = False
    completed_at: Optional[datetime] = None
    estimated_duration: Optional[int] = Field(None, gt=0, le=24 * 60)
    time_spent: Optional[int] = Field(None, ge=0)
    difficulty: Optional[int] = Field(None, ge=1, le=10)

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            subject=self.subject,
            due_date=local_naive(self.due_date),
            priority=self.priority,
            type=self.type,
            completed=self.completed,
            completed_at=local_naive(self.completed_at),
            estimated_duration=self.estimated_duration,
            time_spent=self.time_spent,
            difficulty=self.difficulty,
        )


class CalendarEventIn(BaseModel):
    id: str
    title: str = ""
    start_time: datetime
    end_time: datetime

    def to_domain(self) -> CalendarEvent:
        return CalendarEvent(
            id=self.id,
            title=self.title,
            start=local_naive(self.start_time),
            end=local_naive(self.end_time),
        )


class PreferencesIn(BaseModel):
    study_time_preference: str = Field("morning", pattern="^(morning|afternoon|evening|night)$")
    session_length_preference: str = Field("medium", pattern="^(short|medium|long)$")
    difficulty_comfort: str = Field("moderate", pattern="^(easy|moderate|challenging)$")
    break_frequency: str = Field("moderate", pattern="^(frequent|moderate|minimal)$")
    preferred_subjects: List[str] = Field(default_factory=list)
    struggling_subjects: List[str] = Field(default_factory=list)
    available_study_hours: List[Hour] = Field(default_factory=list)

    def to_domain(self) -> UserPreferences:
        return UserPreferences(**self.model_dump())


class SubjectPerformanceIn(BaseModel):
    completion_rate: float = Field(..., ge=0.0, le=1.0)
    average_time_spent: float = Field(0.0, ge=0.0)


class PatternsIn(BaseModel):
    most_productive_hours: List[Hour] = Field(default_factory=list)
    subject_performance: Dict[str, SubjectPerformanceIn] = Field(default_factory=dict)
    data_quality: float = Field(0.5, ge=0.0, le=1.0)

    def to_domain(self) -> PatternData:
        return PatternData(
            time_pattern=TimePattern(most_productive_hours=list(self.most_productive_hours)),
            subject_insights=SubjectInsights(
                subject_performance={
                    k: SubjectPerformance(v.completion_rate, v.average_time_spent)
                    for k, v in self.subject_performance.items()
                },
            ),
            data_quality=self.data_quality,
        )


class ScheduleRequest(BaseModel):
    tasks: List[TaskIn] = Field(default_factory=list)
    events: List[CalendarEventIn] = Field(default_factory=list)
    preferences: PreferencesIn = Field(default_factory=PreferencesIn)
    history: List[TaskIn] = Field(default_factory=list)
    patterns: Optional[PatternsIn] = None
    now: Optional[datetime] = None
    persist: bool = True


class TaskProgressIn(BaseModel):
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    was_rescheduled: Optional[bool] = None
    reschedule_reason: Optional[str] = None


# ── Outputs ────────────────────────────────────────────────────────────────

class ScheduledTaskOut(BaseModel):
    task_id: str
    title: str
    subject: Optional[str]
    priority: str
    scheduled_start: datetime
    scheduled_end: datetime
    duration_minutes: int
    confidence: float = Field(..., ge=0.0, le=1.0)
    efficiency: float = Field(..., ge=0.0, le=1.0)
    allocated_slots: int
    reasoning: str
    part: int
    parts: int

    @classmethod
    def from_domain(cls, s: ScheduledTask) -> "ScheduledTaskOut":
        return cls(
            task_id=s.task_id,
            title=s.title,
            subject=s.subject,
            priority=s.priority.value,
            scheduled_start=s.start,
            scheduled_end=s.end,
            duration_minutes=s.duration_minutes,
            confidence=s.confidence,
            efficiency=s.efficiency,
            allocated_slots=s.allocated_slots,
            reasoning=s.reasoning,
            part=s.part,
            parts=s.parts,
        )


class ScheduleAdjustmentOut(BaseModel):
    id: str
    kind: str
    title: str
    description: str
    suggested_change: str
    priority: str
    impact: str
    effort: str
    confidence: float
    affected_task_ids: List[str]
    original_time: Optional[datetime]
    suggested_time: Optional[datetime]

    @classmethod
    def from_domain(cls, a: ScheduleAdjustment) -> "ScheduleAdjustmentOut":
        return cls(
            id=a.id,
            kind=a.kind.value,
            title=a.title,
            description=a.description,
            suggested_change=a.suggested_change,
            priority=a.priority,
            impact=a.impact,
            effort=a.effort,
            confidence=a.confidence,
            affected_task_ids=a.affected_task_ids,
            original_time=a.original_time,
            suggested_time=a.suggested_time,
        )


class ScheduleMetadataOut(BaseModel):
    total_tasks: int
    scheduled_tasks: int
    conflicts: int
    efficiency: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    generated_at: datetime
    elapsed_ms: float


class ScheduleOut(BaseModel):
    schedule: List[ScheduledTaskOut]
    adjustments: List[ScheduleAdjustmentOut]
    metadata: ScheduleMetadataOut
    persisted: int = 0


class StoredScheduledTaskOut(BaseModel):
    task_id: str
    title: str
    subject: Optional[str]
    priority: str
    scheduled_start: float
    scheduled_end: float
    confidence: float
    efficiency: float
    reasoning: str
    part: int
    parts: int
    actual_start: Optional[float]
    actual_end: Optional[float]
    was_rescheduled: bool


class SchedulingAnalyticsOut(BaseModel):
    total_scheduled: int
    completed_on_time: int
    average_actual_vs_scheduled: float
    most_productive_hours: List[int]
    reschedule_rate: float


class SubjectScheduleStatsOut(BaseModel):
    completed: int
    total: int
    avg_confidence: float


class RecentPatternsOut(BaseModel):
    preferred_start_hours: List[int]
    average_session_minutes: float
    subject_performance: Dict[str, SubjectScheduleStatsOut]
