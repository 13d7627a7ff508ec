"""
Activity heatmap - hour x weekday grid and work-pattern ratios.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..history.models import Command
from ..utils.datetime import ensure_utc, utc_now
from .common import argmax, ratio
from .models import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    ActivityPeriod,
    HeatmapData,
    TimeRange,
    ViewMode,
    Weekday,
    WorkPatternAnalysis,
)

WORK_HOURS = range(9, 17)
DAYTIME_HOURS = range(6, 22)


def matches_view(cmd: Command, view_mode: ViewMode) -> bool:
    if view_mode is ViewMode.DANGEROUS:
        return cmd.is_dangerous
    if view_mode is ViewMode.EXPERIMENTS:
        return cmd.is_experiment
    if view_mode is ViewMode.FAILED:
        return cmd.failed
    return True


def filter_commands(
    commands: Sequence[Command],
    time_range: TimeRange,
    view_mode: ViewMode,
    now: Optional[datetime] = None,
) -> list[Command]:
    """Apply the view filter, then the time window.

    When the window is empty but the view is not, the most recent commands
    of the view are used instead (50 / 200 / 500 / all by window size).
    """
    now = ensure_utc(now) if now else utc_now()
    cutoff = now - timedelta(days=time_range.days)

    in_view = [c for c in commands if matches_view(c, view_mode)]
    in_window = [c for c in in_view if c.timestamp >= cutoff]

    if in_window or not in_view:
        return in_window

    newest_first = sorted(in_view, key=lambda c: c.timestamp, reverse=True)
    limit = time_range.fallback_limit
    return newest_first if limit is None else newest_first[:limit]


def generate_heatmap(
    commands: Sequence[Command],
    time_range: TimeRange = TimeRange.WEEK,
    view_mode: ViewMode = ViewMode.ALL,
    now: Optional[datetime] = None,
) -> HeatmapData:
    selected = filter_commands(commands, time_range, view_mode, now)

    counts = [[0] * DAYS_PER_WEEK for _ in range(HOURS_PER_DAY)]
    for cmd in selected:
        counts[cmd.timestamp.hour][cmd.timestamp.weekday()] += 1

    max_count = max(max(row) for row in counts)
    grid = tuple(
        tuple((count / max_count) if max_count else 0.0 for count in row) for row in counts
    )

    return HeatmapData(grid=grid, max_activity=float(max_count), total_commands=len(selected))


def get_peak_activity_periods(heatmap: HeatmapData, threshold: float) -> list[ActivityPeriod]:
    """Cells at or above `threshold`, most active first."""
    periods = []
    for hour in range(HOURS_PER_DAY):
        for day in range(DAYS_PER_WEEK):
            level = heatmap.level(hour, day)
            if level >= threshold:
                periods.append(
                    ActivityPeriod(
                        hour=hour,
                        day_of_week=Weekday(day),
                        activity_level=level,
                        command_count=round(level * heatmap.max_activity),
                    )
                )

    periods.sort(key=lambda p: (-p.activity_level, p.day_of_week, p.hour))
    return periods


def analyze_work_patterns(commands: Sequence[Command]) -> WorkPatternAnalysis:
    if not commands:
        return WorkPatternAnalysis()

    total = len(commands)
    weekend = sum(1 for c in commands if Weekday(c.timestamp.weekday()).is_weekend)
    work_hours = sum(1 for c in commands if c.timestamp.hour in WORK_HOURS)
    late_night = sum(1 for c in commands if c.timestamp.hour not in DAYTIME_HOURS)

    return WorkPatternAnalysis(
        weekday_ratio=ratio(total - weekend, total),
        weekend_ratio=ratio(weekend, total),
        work_hours_ratio=ratio(work_hours, total),
        late_night_ratio=ratio(late_night, total),
        most_active_day=Weekday(
            argmax(Counter(c.timestamp.weekday() for c in commands), Weekday.MONDAY)
        ),
        most_active_hour=argmax(Counter(c.timestamp.hour for c in commands), 12),
    )
