"""
Unit tests for TaskPrioritizer scoring and ordering.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from planner.scheduling.models import (
    PatternData,
    SubjectInsights,
    SubjectPerformance,
    Task,
    UserPreferences,
)
from planner.scheduling.prioritizer import TaskPrioritizer

NOW = datetime(2026, 10, 19, 7, 0)


def _task(id: str = "t", **kwargs) -> Task:
    return Task(id=id, title=kwargs.pop("title", id.upper()), **kwargs)


@pytest.fixture
def prioritizer():
    return TaskPrioritizer(UserPreferences())


# ── Priority tier ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("priority,expected", [("high", 10.0), ("medium", 5.0), ("low", 2.0)])
def test_priority_weight(prioritizer, priority, expected):
    assert prioritizer.score(_task(priority=priority), NOW) == expected


# ── Urgency ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("delta,bonus", [
    (timedelta(hours=-2), 20.0),
    (timedelta(0), 15.0),
    (timedelta(hours=12), 15.0),
    (timedelta(days=2, hours=12), 10.0),
    (timedelta(days=6), 5.0),
    (timedelta(days=7), 5.0),
    (timedelta(days=10), 0.0),
])
def test_due_date_urgency(prioritizer, delta, bonus):
    task = _task(priority="low", due_date=NOW + delta)
    assert prioritizer.score(task, NOW) == 2.0 + bonus


def test_overdue_outranks_due_today(prioritizer):
    overdue = _task("a", due_date=NOW - timedelta(days=3))
    today = _task("b", due_date=NOW + timedelta(hours=3))
    assert prioritizer.score(overdue, NOW) > prioritizer.score(today, NOW)


# ── Subject signals ──────────────────────────────────────────────────────────

def test_struggling_subject_bonus():
    p = TaskPrioritizer(UserPreferences(struggling_subjects=["Physics"]))
    assert p.score(_task(priority="low", subject="Physics"), NOW) == 10.0
    assert p.score(_task(priority="low", subject="History"), NOW) == 2.0


def test_completion_rate_signal_from_patterns():
    patterns = PatternData(subject_insights=SubjectInsights(
        subject_performance={"Chemistry": SubjectPerformance(completion_rate=0.6)},
    ))
    p = TaskPrioritizer(UserPreferences(), patterns)
    assert p.score(_task(priority="low", subject="Chemistry"), NOW) == pytest.approx(4.0)


def test_struggling_bonus_takes_precedence_over_patterns():
    patterns = PatternData(subject_insights=SubjectInsights(
        subject_performance={"Physics": SubjectPerformance(completion_rate=0.0)},
    ))
    p = TaskPrioritizer(UserPreferences(struggling_subjects=["Physics"]), patterns)
    assert p.score(_task(priority="low", subject="Physics"), NOW) == 10.0


# ── Duration and history ─────────────────────────────────────────────────────

def test_long_task_bonus(prioritizer):
    assert prioritizer.score(_task(priority="low", estimated_duration=150), NOW) == 5.0
    assert prioritizer.score(_task(priority="low", estimated_duration=120), NOW) == 2.0


def test_underestimated_similar_history_bonus():
    history = [
        _task("h1", subject="Math", completed=True, estimated_duration=60, time_spent=90),
        _task("h2", subject="Math", completed=True, estimated_duration=60, time_spent=100),
    ]
    p = TaskPrioritizer(UserPreferences(), history=history)
    assert p.score(_task(priority="low", subject="Math", estimated_duration=60), NOW) == 6.0


def test_accurate_history_gives_no_bonus():
    history = [_task("h1", subject="Math", completed=True, estimated_duration=60, time_spent=65)]
    p = TaskPrioritizer(UserPreferences(), history=history)
    assert p.score(_task(priority="low", subject="Math", estimated_duration=60), NOW) == 2.0


def test_incomplete_history_is_ignored():
    history = [_task("h1", subject="Math", completed=False, estimated_duration=60, time_spent=300)]
    p = TaskPrioritizer(UserPreferences(), history=history)
    assert p.score(_task(priority="low", subject="Math"), NOW) == 2.0


# ── Ordering ─────────────────────────────────────────────────────────────────

def test_prioritize_orders_by_score(prioritizer):
    tasks = [
        _task("low", priority="low"),
        _task("high", priority="high", due_date=NOW + timedelta(hours=20)),
        _task("medium", priority="medium"),
    ]
    assert [t.id for t in prioritizer.prioritize(tasks, NOW)] == ["high", "medium", "low"]


def test_prioritize_drops_completed(prioritizer):
    tasks = [_task("a"), _task("b", completed=True)]
    assert [t.id for t in prioritizer.prioritize(tasks, NOW)] == ["a"]


def test_equal_scores_keep_input_order(prioritizer):
    tasks = [_task(c) for c in "abcde"]
    assert [t.id for t in prioritizer.prioritize(tasks, NOW)] == list("abcde")


def test_rank_exposes_scores(prioritizer):
    ranked = prioritizer.rank([_task("a", priority="high")], NOW)
    assert ranked[0].task.id == "a"
    assert ranked[0].score == 10.0


# ── Task validation ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("kwargs", [
    {"priority": "urgent"},
    {"type": "hobby"},
    {"estimated_duration": 0},
    {"estimated_duration": -30},
    {"time_spent": -1},
    {"difficulty": 11},
    {"difficulty": 0},
])
def test_malformed_task_raises(kwargs):
    with pytest.raises(ValueError):
        _task(**kwargs)
