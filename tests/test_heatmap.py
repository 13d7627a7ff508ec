"""Tests for the activity heatmap and work patterns."""

from datetime import timedelta

import pytest

from whiskerlog.analysis import analyze_work_patterns, generate_heatmap, get_peak_activity_periods
from whiskerlog.analysis.heatmap import filter_commands
from whiskerlog.analysis.models import TimeRange, ViewMode, Weekday, WorkPatternAnalysis

# Minute offsets from Monday 2024-01-15 10:00 UTC
SUNDAY_14H = -20 * 60
SATURDAY_23H = -(48 * 60) + 13 * 60


@pytest.fixture
def now(base_time):
    return base_time + timedelta(hours=1)


class TestGenerateHeatmap:
    def test_empty(self, now):
        heatmap = generate_heatmap([], now=now)
        assert heatmap.total_commands == 0
        assert heatmap.max_activity == 0.0
        assert all(level == 0.0 for row in heatmap.grid for level in row)

    def test_grid(self, make_command, now):
        commands = [make_command("ls", 0), make_command("ls", 5), make_command("ls", SUNDAY_14H)]
        heatmap = generate_heatmap(commands, TimeRange.WEEK, ViewMode.ALL, now=now)

        assert (len(heatmap.grid), len(heatmap.grid[0])) == (24, 7)
        assert heatmap.level(10, Weekday.MONDAY) == 1.0
        assert heatmap.level(14, Weekday.SUNDAY) == 0.5
        assert heatmap.max_activity == 2.0
        assert heatmap.total_commands == 3
        assert all(0.0 <= level <= 1.0 for row in heatmap.grid for level in row)

    def test_time_window(self, make_command, now):
        commands = [make_command("ls", 0), make_command("ls", -3 * 24 * 60)]
        assert generate_heatmap(commands, TimeRange.DAY, now=now).total_commands == 1
        assert generate_heatmap(commands, TimeRange.WEEK, now=now).total_commands == 2

    def test_view_modes(self, make_command, now):
        commands = [
            make_command("rm -rf /tmp/x", 0),
            make_command("man ls", 1),
            make_command("make", 2, exit_code=2),
            make_command("ls", 3),
        ]
        totals = {
            mode: generate_heatmap(commands, TimeRange.WEEK, mode, now=now).total_commands
            for mode in ViewMode
        }
        assert totals == {
            ViewMode.ALL: 4,
            ViewMode.DANGEROUS: 1,
            ViewMode.EXPERIMENTS: 1,
            ViewMode.FAILED: 1,
        }

    def test_empty_window_falls_back_to_recent(self, make_command, now):
        old = [make_command(f"ls {i}", -60 * 24 * 60 + i) for i in range(60)]
        selected = filter_commands(old, TimeRange.DAY, ViewMode.ALL, now=now)
        assert len(selected) == 50
        assert selected[0].command == "ls 59"

    def test_fallback_year_uses_everything(self, make_command, now):
        old = [make_command("ls", -400 * 24 * 60 + i) for i in range(3)]
        assert len(filter_commands(old, TimeRange.YEAR, ViewMode.ALL, now=now)) == 3


class TestPeakActivity:
    def test_periods(self, make_command, now):
        commands = [make_command("ls", 0), make_command("ls", 5), make_command("ls", SUNDAY_14H)]
        heatmap = generate_heatmap(commands, now=now)
        periods = get_peak_activity_periods(heatmap, 0.5)

        assert [(p.hour, p.day_of_week, p.command_count) for p in periods] == [
            (10, Weekday.MONDAY, 2),
            (14, Weekday.SUNDAY, 1),
        ]
        assert get_peak_activity_periods(heatmap, 0.9)[0].activity_level == 1.0

    def test_empty_heatmap_threshold_zero(self, now):
        periods = get_peak_activity_periods(generate_heatmap([], now=now), 0.0)
        assert len(periods) == 24 * 7
        assert periods[0].day_of_week is Weekday.MONDAY and periods[0].hour == 0


class TestWorkPatterns:
    def test_empty(self):
        assert analyze_work_patterns([]) == WorkPatternAnalysis()

    def test_ratios(self, make_command):
        commands = [make_command("ls", i) for i in range(3)]
        commands.append(make_command("ls", SATURDAY_23H))
        patterns = analyze_work_patterns(commands)

        assert patterns.weekday_ratio == pytest.approx(0.75)
        assert patterns.weekend_ratio == pytest.approx(0.25)
        assert patterns.work_hours_ratio == pytest.approx(0.75)
        assert patterns.late_night_ratio == pytest.approx(0.25)
        assert patterns.most_active_day is Weekday.MONDAY
        assert patterns.most_active_hour == 10
        assert patterns.weekday_ratio + patterns.weekend_ratio == pytest.approx(1.0)

    def test_day_names_in_report(self, make_command):
        patterns = analyze_work_patterns([make_command("ls", SUNDAY_14H)])
        assert patterns.to_dict()["most_active_day"] == "Sunday"

    @pytest.mark.parametrize("day", list(Weekday))
    def test_weekend_days(self, day):
        assert day.is_weekend is (day in (Weekday.SATURDAY, Weekday.SUNDAY))
