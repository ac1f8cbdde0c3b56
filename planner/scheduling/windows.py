"""
Productivity Window Analyzer — derives hour-of-day efficiency weights that
bias slot generation.

Sources, in order of precedence:
  1. precomputed pattern data (most productive hours)      → 2h windows @ 0.9
  2. historical completions (>= 10 completed tasks)        → 1h windows, measured
  3. user-declared available hours not already covered     → 1h windows @ 0.7
  4. nothing outside late night                            → hardcoded defaults added
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import PatternData, ProductivityWindow, Task, TimeOfDay, UserPreferences

PATTERN_WINDOW_EFFICIENCY = 0.9
AVAILABLE_HOUR_EFFICIENCY = 0.7
MIN_HISTORY_TASKS = 10
MIN_SAMPLES_PER_HOUR = 3
MAX_EFFICIENCY_RATIO = 2.0

DEFAULT_WINDOWS = (
    (9, 11, 0.8),
    (14, 16, 0.7),
    (19, 21, 0.6),
)


def default_windows() -> List[ProductivityWindow]:
    return [ProductivityWindow(start, end, eff) for start, end, eff in DEFAULT_WINDOWS]


def _daytime(window: ProductivityWindow) -> bool:
    return any(
        TimeOfDay.for_hour(hour) != TimeOfDay.LATE_NIGHT
        for hour in range(window.start_hour, window.end_hour)
    )


class ProductivityWindowAnalyzer:

    def __init__(
        self,
        preferences: UserPreferences,
        patterns: Optional[PatternData] = None,
        history: Sequence[Task] = (),
    ):
        self._preferences = preferences
        self._patterns = patterns
        self._history = list(history)

    def analyze(self) -> List[ProductivityWindow]:
        windows: List[ProductivityWindow] = []

        if self._patterns is not None:
            for hour in self._patterns.time_pattern.most_productive_hours:
                windows.append(ProductivityWindow(
                    start_hour=hour,
                    end_hour=min(hour + 2, 24),
                    efficiency=PATTERN_WINDOW_EFFICIENCY,
                ))

        completed = [t for t in self._history if t.completed and t.completed_at]
        if len(completed) >= MIN_HISTORY_TASKS:
            windows.extend(self._historical_windows(completed))

        for hour in self._preferences.available_study_hours:
            if not any(w.covers(hour) for w in windows):
                windows.append(ProductivityWindow(hour, hour + 1, AVAILABLE_HOUR_EFFICIENCY))

        # academic work is never placed late at night
        if not any(_daytime(w) for w in windows):
            windows.extend(default_windows())

        return sorted(windows, key=lambda w: w.efficiency, reverse=True)

    @staticmethod
    def _historical_windows(completed: List[Task]) -> List[ProductivityWindow]:
        ratios: Dict[int, List[float]] = {}
        for task in completed:
            ratio = min(task.duration / task.actual_duration, MAX_EFFICIENCY_RATIO)
            ratios.setdefault(task.completed_at.hour, []).append(ratio)

        windows = [
            ProductivityWindow(
                start_hour=hour,
                end_hour=hour + 1,
                efficiency=round(min(sum(samples) / len(samples), 1.0), 4),
            )
            for hour, samples in ratios.items()
            if len(samples) >= MIN_SAMPLES_PER_HOUR
        ]
        return sorted(windows, key=lambda w: w.efficiency, reverse=True)
