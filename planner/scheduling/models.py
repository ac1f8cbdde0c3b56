"""
Scheduling domain types — tasks, calendar inputs, and the records the
scheduler produces (slots, scheduled tasks, conflict resolutions, advisories).

Constructors reject malformed values with ValueError; everything downstream
can assume durations are positive and difficulty is on the 1-10 scale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

DEFAULT_TASK_MINUTES = 60
DEFAULT_DIFFICULTY = 5


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class TaskType(str, Enum):
    ACADEMIC = "academic"
    PERSONAL = "personal"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    LATE_NIGHT = "late_night"

    @classmethod
    def for_hour(cls, hour: int) -> "TimeOfDay":
        if 6 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 17:
            return cls.AFTERNOON
        if 17 <= hour < 22:
            return cls.EVENING
        return cls.LATE_NIGHT


class ResolutionType(str, Enum):
    RESCHEDULE = "reschedule"
    SPLIT = "split"
    DEFER = "defer"


class AdjustmentKind(str, Enum):
    BREAK_INSERTION = "break_insertion"
    SUBJECT_BALANCE = "subject_balance"
    DIFFICULTY_ORDER = "difficulty_order"
    CONFLICT_FOLLOW_UP = "conflict_follow_up"


# ── Inputs ─────────────────────────────────────────────────────────────────

@dataclass
class Task:
    id: str
    title: str
    due_date: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    type: TaskType = TaskType.ACADEMIC
    description: str = ""
    subject: Optional[str] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    estimated_duration: Optional[int] = None    # minutes
    time_spent: Optional[int] = None            # minutes actually spent
    difficulty: Optional[int] = None            # 1-10

    def __post_init__(self):
        self.priority = Priority(self.priority)
        self.type = TaskType(self.type)
        if self.estimated_duration is not None and self.estimated_duration <= 0:
            raise ValueError(f"Task {self.id!r}: estimated_duration must be positive")
        if self.time_spent is not None and self.time_spent < 0:
            raise ValueError(f"Task {self.id!r}: time_spent cannot be negative")
        if self.difficulty is not None and not 1 <= self.difficulty <= 10:
            raise ValueError(f"Task {self.id!r}: difficulty must be within 1-10")

    @property
    def duration(self) -> int:
        return self.estimated_duration or DEFAULT_TASK_MINUTES

    @property
    def actual_duration(self) -> int:
        return self.time_spent or self.estimated_duration or DEFAULT_TASK_MINUTES

    @property
    def difficulty_level(self) -> int:
        return self.difficulty or DEFAULT_DIFFICULTY


@dataclass
class CalendarEvent:
    id: str
    title: str
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Event {self.id!r} ends before it starts")

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end and self.start < end


@dataclass
class UserPreferences:
    study_time_preference: str = "morning"         # morning | afternoon | evening | night
    session_length_preference: str = "medium"      # short | medium | long
    difficulty_comfort: str = "moderate"           # easy | moderate | challenging
    break_frequency: str = "moderate"              # frequent | moderate | minimal
    preferred_subjects: List[str] = field(default_factory=list)
    struggling_subjects: List[str] = field(default_factory=list)
    available_study_hours: List[int] = field(default_factory=list)

    def __post_init__(self):
        for hour in self.available_study_hours:
            if not 0 <= hour <= 23:
                raise ValueError(f"Available study hour out of range: {hour}")


@dataclass
class TimePattern:
    most_productive_hours: List[int] = field(default_factory=list)
    preferred_study_duration: int = 45         # minutes
    average_break_time: int = 15               # minutes
    consistency_score: float = 0.0


@dataclass
class SubjectPerformance:
    completion_rate: float                     # 0-1
    average_time_spent: float = 0.0            # minutes


@dataclass
class SubjectInsights:
    preferred_subjects: List[str] = field(default_factory=list)
    struggling_subjects: List[str] = field(default_factory=list)
    subject_performance: Dict[str, SubjectPerformance] = field(default_factory=dict)


@dataclass
class DifficultyProfile:
    average_task_difficulty: int = DEFAULT_DIFFICULTY
    adaptation_rate: float = 0.5               # mean completion rate across priority tiers
    subject_difficulty: Dict[str, int] = field(default_factory=dict)


@dataclass
class PatternData:
    time_pattern: TimePattern = field(default_factory=TimePattern)
    subject_insights: SubjectInsights = field(default_factory=SubjectInsights)
    difficulty_profile: DifficultyProfile = field(default_factory=DifficultyProfile)
    total_tasks_analyzed: int = 0
    data_quality: float = 0.5                  # 0-1 confidence in the analysis


# ── Intermediate records ───────────────────────────────────────────────────

@dataclass
class ProductivityWindow:
    start_hour: int                            # inclusive
    end_hour: int                              # exclusive, at most 24
    efficiency: float
    day_of_week: Optional[int] = None          # 0 = Monday, as datetime.weekday()

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(f"Invalid window hours {self.start_hour}-{self.end_hour}")
        if not 0.0 <= self.efficiency <= 1.0:
            raise ValueError(f"Window efficiency out of range: {self.efficiency}")

    def covers(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass
class TimeSlot:
    start: datetime
    end: datetime
    efficiency: float
    time_of_day: TimeOfDay
    available: bool = True


# ── Outputs ────────────────────────────────────────────────────────────────

@dataclass
class ScheduledTask:
    """A task bound to a concrete, hour-aligned interval."""
    task: Task
    start: datetime
    end: datetime
    confidence: float
    reasoning: str
    efficiency: float                          # mean efficiency of the allocated slots
    allocated_slots: int
    duration_minutes: int                      # working minutes within [start, end)
    part: int = 1
    parts: int = 1

    @property
    def task_id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    @property
    def priority(self) -> Priority:
        return self.task.priority

    @property
    def subject(self) -> Optional[str]:
        return self.task.subject

    @property
    def difficulty(self) -> int:
        return self.task.difficulty_level

    def overlaps(self, other: "ScheduledTask") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass
class ConflictResolution:
    type: ResolutionType
    original_task: ScheduledTask               # the task that lost or was split
    kept_task: ScheduledTask                   # the task that kept its time
    reason: str


@dataclass
class ScheduleAdjustment:
    id: str
    kind: AdjustmentKind
    title: str
    description: str
    suggested_change: str
    priority: str                              # low | medium | high
    impact: str
    effort: str
    confidence: float
    affected_task_ids: List[str] = field(default_factory=list)
    original_time: Optional[datetime] = None
    suggested_time: Optional[datetime] = None


@dataclass
class ScheduleMetadata:
    total_tasks: int
    scheduled_tasks: int
    conflicts: int
    efficiency: float
    confidence: float
    generated_at: datetime
    elapsed_ms: float = 0.0


@dataclass
class ScheduleResult:
    schedule: List[ScheduledTask]
    adjustments: List[ScheduleAdjustment]
    metadata: ScheduleMetadata
    resolutions: List[ConflictResolution] = field(default_factory=list)
