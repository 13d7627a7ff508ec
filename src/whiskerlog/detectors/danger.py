"""Danger assessment for a single command."""

from typing import Optional

from .patterns import DetectorTables, default_tables
from .types import DangerResult


def assess_danger(command: str, tables: Optional[DetectorTables] = None) -> DangerResult:
    """Score a command against the danger tables.

    The score is the maximum of every triggered pattern or leading command,
    never a sum. Pattern reasons come first; a leading-command reason is only
    added when no collected reason already mentions it.
    """
    tables = tables or default_tables()
    score = 0.0
    reasons: list[str] = []

    for pattern in tables.danger_patterns:
        if pattern.matches(command):
            score = max(score, pattern.score)
            if pattern.reason not in reasons:
                reasons.append(pattern.reason)

    parts = command.split()
    first_word = parts[0] if parts else ""
    for risky in tables.risky_commands:
        if first_word == risky.command:
            score = max(score, risky.score)
            if not any(risky.reason in r for r in reasons):
                reasons.append(risky.reason)

    return DangerResult(score=min(1.0, score), reasons=reasons)
