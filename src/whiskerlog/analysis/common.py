"""Helpers shared by the analyzers."""

from collections import Counter, defaultdict
from typing import Hashable, Iterable, Optional, Sequence, TypeVar

from ..history.models import Command

K = TypeVar("K", bound=Hashable)


def first_token(text: str) -> Optional[str]:
    """Leading whitespace-separated token, or None for blank text."""
    parts = text.split()
    return parts[0] if parts else None


def ratio(part: float, total: float) -> float:
    """part / total, 0.0 when total is zero."""
    if not total:
        return 0.0
    return part / total


def argmax(counts: Counter, default: K) -> K:
    """Key with the highest count; ties go to the smallest key."""
    if not counts:
        return default
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def group_by_session(commands: Iterable[Command]) -> dict[str, list[Command]]:
    """Commands per session id, in input order (dict ordered by first sighting)."""
    sessions: dict[str, list[Command]] = defaultdict(list)
    for cmd in commands:
        sessions[cmd.session_id].append(cmd)
    return dict(sessions)


def group_by_tool(commands: Iterable[Command]) -> dict[str, list[Command]]:
    """Commands per leading token; blank commands are skipped."""
    tools: dict[str, list[Command]] = defaultdict(list)
    for cmd in commands:
        tool = first_token(cmd.command)
        if tool is not None:
            tools[tool].append(cmd)
    return dict(tools)


def success_rate(commands: Sequence[Command], default: float = 1.0) -> float:
    """Share of exit code 0 among commands with a known exit code."""
    known = [c for c in commands if c.exit_code is not None]
    if not known:
        return default
    return sum(1 for c in known if c.exit_code == 0) / len(known)


def whole_days(seconds: float) -> int:
    """Whole days in a span, truncated toward zero."""
    return int(seconds // 86400) if seconds >= 0 else -int(-seconds // 86400)


def whole_minutes(seconds: float) -> int:
    return int(seconds // 60) if seconds >= 0 else -int(-seconds // 60)


def whole_hours(seconds: float) -> int:
    return int(seconds // 3600) if seconds >= 0 else -int(-seconds // 3600)
