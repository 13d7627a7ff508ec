"""
Command statistics - frequency, sessions and productivity.

Provides:
- analyze_commands: overall CommandStats
- analyze_sessions: SessionStats grouped by session id
- analyze_productivity: ProductivityStats (score, indicators, suggestions)
- estimate_complexity: heuristic 1-10 complexity of a command line
"""

from collections import Counter, defaultdict
from datetime import timedelta
from typing import Sequence

from ..history.models import Command
from .common import argmax, first_token, group_by_session, ratio, success_rate, whole_days, whole_minutes
from .models import (
    CommandFrequency,
    CommandStats,
    ProductivityStats,
    SessionStats,
    Weekday,
    WorkflowPattern,
)

TOP_COMMANDS_LIMIT = 10
MAX_SUGGESTIONS = 5
MAX_WORKFLOW_PATTERNS = 5
SEQUENCE_LENGTH = 3
MIN_SEQUENCE_FREQUENCY = 3
PEAK_HOUR_RATIO = 0.7


def analyze_commands(commands: Sequence[Command]) -> CommandStats:
    """Overall statistics; an empty list gives the zero report."""
    if not commands:
        return CommandStats()

    return CommandStats(
        total_commands=len(commands),
        unique_commands=count_unique(commands),
        success_rate=success_rate(commands),
        average_duration=average_duration(commands),
        commands_per_day=commands_per_day(commands),
        most_active_hour=argmax(Counter(c.timestamp.hour for c in commands), 12),
        most_active_day=Weekday(
            argmax(Counter(c.timestamp.weekday() for c in commands), Weekday.MONDAY)
        ),
        top_commands=top_commands(commands, TOP_COMMANDS_LIMIT),
        shell_distribution=dict(Counter(c.shell for c in commands)),
        host_distribution=dict(Counter(c.host_id for c in commands)),
    )


def analyze_sessions(commands: Sequence[Command]) -> SessionStats:
    sessions = group_by_session(commands)
    if not sessions:
        return SessionStats()

    lengths = []
    longest = timedelta(0)
    most_productive = ""
    max_commands = 0
    shells: Counter = Counter()

    for session_id, session_commands in sessions.items():
        # First session to reach the maximum wins ties
        if len(session_commands) > max_commands:
            max_commands = len(session_commands)
            most_productive = session_id

        timestamps = [c.timestamp for c in session_commands]
        span = max(timestamps) - min(timestamps)
        lengths.append(float(whole_minutes(span.total_seconds())))
        longest = max(longest, span)

        shells.update(c.shell for c in session_commands)

    return SessionStats(
        total_sessions=len(sessions),
        average_session_length=sum(lengths) / len(lengths),
        average_commands_per_session=len(commands) / len(sessions),
        longest_session=longest,
        most_productive_session=most_productive,
        session_distribution=dict(shells),
    )


def analyze_productivity(commands: Sequence[Command]) -> ProductivityStats:
    if not commands:
        return ProductivityStats()

    return ProductivityStats(
        productivity_score=productivity_score(commands),
        efficiency_indicators=efficiency_indicators(commands),
        improvement_suggestions=improvement_suggestions(commands),
        peak_hours=peak_hours(commands),
        workflow_patterns=workflow_patterns(commands),
    )


# ===== Building blocks =====


def count_unique(commands: Sequence[Command]) -> int:
    return len({c.command for c in commands})


def average_duration(commands: Sequence[Command]):
    durations = [c.duration for c in commands if c.duration is not None]
    if not durations:
        return None
    return sum(durations) / len(durations)


def commands_per_day(commands: Sequence[Command]) -> float:
    if not commands:
        return 0.0
    timestamps = [c.timestamp for c in commands]
    span = max(timestamps) - min(timestamps)
    days = max(1, whole_days(span.total_seconds()))
    return len(commands) / days


def top_commands(commands: Sequence[Command], limit: int) -> list[CommandFrequency]:
    """Most frequent exact command texts, ties broken alphabetically."""
    counts: Counter = Counter()
    last_used = {}
    durations = defaultdict(list)

    for cmd in commands:
        counts[cmd.command] += 1
        if cmd.command not in last_used or cmd.timestamp > last_used[cmd.command]:
            last_used[cmd.command] = cmd.timestamp
        if cmd.duration is not None:
            durations[cmd.command].append(cmd.duration)

    total = len(commands)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [
        CommandFrequency(
            command=text,
            count=count,
            percentage=count / total * 100.0,
            last_used=last_used[text],
            average_duration=(
                sum(durations[text]) / len(durations[text]) if durations[text] else None
            ),
        )
        for text, count in ranked
    ]


def estimate_complexity(command: str) -> float:
    """Heuristic complexity: words plus pipes, redirects, chaining, substitution."""
    complexity = 1.0
    complexity += (len(command.split()) - 1) * 0.5

    if "|" in command:
        complexity += 2.0
    if ">" in command or "<" in command:
        complexity += 1.0
    if "&&" in command or "||" in command:
        complexity += 1.5
    if "$(" in command or "`" in command:
        complexity += 2.0
    if "--" in command:
        complexity += 0.5

    return min(complexity, 10.0)


def _experiment_ratio(commands: Sequence[Command]) -> float:
    return ratio(sum(1 for c in commands if c.is_experiment), len(commands))


def productivity_score(commands: Sequence[Command]) -> float:
    """Weighted 0-100 score: success 30, diversity 25, complexity 25, learning 20."""
    if not commands:
        return 0.0

    avg_complexity = sum(estimate_complexity(c.command) for c in commands) / len(commands)

    score = success_rate(commands) * 30.0
    score += ratio(count_unique(commands), len(commands)) * 25.0
    score += (avg_complexity / 10.0) * 25.0
    score += _experiment_ratio(commands) * 20.0
    return min(score, 100.0)


def efficiency_indicators(commands: Sequence[Command]) -> list[str]:
    if not commands:
        return []

    indicators = []
    if success_rate(commands) > 0.9:
        indicators.append("High command success rate")
    if ratio(count_unique(commands), len(commands)) > 0.7:
        indicators.append("Good command diversity")
    if _experiment_ratio(commands) > 0.1:
        indicators.append("Active learning and experimentation")

    avg = average_duration(commands)
    if avg is not None and avg < 1000.0:
        indicators.append("Fast command execution")
    return indicators


def improvement_suggestions(commands: Sequence[Command]) -> list[str]:
    if not commands:
        return []

    suggestions = []
    if success_rate(commands) < 0.8:
        suggestions.append("Consider using --help or man pages to reduce command failures")

    # One alias suggestion at most
    for freq in top_commands(commands, 5):
        if len(freq.command) > 20 and freq.count > 5:
            text = freq.command
            if len(text) > 30:
                text = f"{text[:27]}..."
            suggestions.append(f"Consider creating an alias for '{text}'")
            break

    if _experiment_ratio(commands) < 0.05:
        suggestions.append("Try exploring new tools and commands to expand your skills")

    if ratio(sum(1 for c in commands if c.is_dangerous), len(commands)) > 0.1:
        suggestions.append("Review dangerous commands and consider safer alternatives")

    return suggestions[:MAX_SUGGESTIONS]


def peak_hours(commands: Sequence[Command]) -> list[int]:
    """Hours (ascending) with at least 70% of the busiest hour's count."""
    counts = Counter(c.timestamp.hour for c in commands)
    if not counts:
        return []
    threshold = int(max(counts.values()) * PEAK_HOUR_RATIO)
    return sorted(hour for hour, count in counts.items() if count >= threshold)


def find_common_sequences(commands: Sequence[Command], length: int) -> Counter:
    """Count windows of leading tokens within each session, in time order."""
    sequences: Counter = Counter()
    for session_commands in group_by_session(commands).values():
        if len(session_commands) < length:
            continue
        ordered = sorted(session_commands, key=lambda c: c.timestamp)
        tokens = [first_token(c.command) or c.command for c in ordered]
        for i in range(len(tokens) - length + 1):
            sequences[tuple(tokens[i : i + length])] += 1
    return sequences


def sequence_efficiency(sequence: Sequence[str], commands: Sequence[Command]) -> float:
    """Success share of commands starting with any step of the sequence (0.5 if none)."""
    total = 0
    successes = 0
    for name in sequence:
        for cmd in commands:
            if cmd.command.startswith(name):
                total += 1
                if cmd.exit_code == 0:
                    successes += 1
    if total == 0:
        return 0.5
    return successes / total


def workflow_patterns(commands: Sequence[Command]) -> list[WorkflowPattern]:
    patterns = []
    for sequence, frequency in find_common_sequences(commands, SEQUENCE_LENGTH).items():
        if frequency < MIN_SEQUENCE_FREQUENCY:
            continue
        patterns.append(
            WorkflowPattern(
                pattern=" → ".join(sequence),
                frequency=frequency,
                efficiency_score=sequence_efficiency(sequence, commands),
                description=f"Common workflow sequence (used {frequency} times)",
            )
        )

    patterns.sort(key=lambda p: (-p.frequency, p.pattern))
    return patterns[:MAX_WORKFLOW_PATTERNS]
