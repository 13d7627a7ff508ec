"""
Danger analysis - risk trends and safety recommendations over a history.
"""

from collections import Counter, defaultdict
from typing import Sequence

from ..history.models import Command
from ..utils.datetime import day_of
from .common import first_token, ratio
from .models import DangerAnalysis, DangerTrend, RiskyCommandUsage

TOP_RISKY_LIMIT = 10
MAX_RECOMMENDATIONS = 8

GENERAL_RECOMMENDATIONS = (
    "🛡️ Always backup important data before running destructive commands",
    "🔍 Use 'man' or '--help' to understand command options before use",
    "🧪 Test dangerous commands in a safe environment first",
)

# Format: (reason, minimum count exclusive, recommendation)
CATEGORY_RECOMMENDATIONS = (
    (
        "File deletion",
        5,
        "📁 Consider using a trash utility instead of 'rm' for safer file deletion",
    ),
    ("Permission change", 3, "🔐 Use principle of least privilege - avoid 777 permissions"),
    (
        "Privileged execution",
        10,
        "👑 Minimize sudo usage - use regular user permissions when possible",
    ),
)


def analyze_danger(commands: Sequence[Command]) -> DangerAnalysis:
    dangerous = [c for c in commands if c.is_dangerous]

    by_category: Counter = Counter()
    for cmd in dangerous:
        by_category.update(cmd.danger_reasons)

    risky = top_risky_commands(commands)

    return DangerAnalysis(
        total_dangerous=len(dangerous),
        danger_by_category=dict(by_category),
        danger_trends=danger_trends(commands),
        top_risky_commands=risky,
        safety_recommendations=safety_recommendations(by_category, risky),
    )


def danger_trends(commands: Sequence[Command]) -> list[DangerTrend]:
    """Per-day dangerous/total counts, oldest day first."""
    daily: dict = defaultdict(lambda: [0, 0])  # date -> [dangerous, total]
    for cmd in commands:
        stats = daily[day_of(cmd.timestamp)]
        stats[1] += 1
        if cmd.is_dangerous:
            stats[0] += 1

    return [
        DangerTrend(
            date=day,
            danger_count=danger_count,
            total_count=total,
            danger_ratio=ratio(danger_count, total),
        )
        for day, (danger_count, total) in sorted(daily.items())
    ]


def top_risky_commands(commands: Sequence[Command]) -> list[RiskyCommandUsage]:
    """Dangerous command texts ranked by max score x occurrences."""
    counts: Counter = Counter()
    max_scores: dict[str, float] = {}
    reasons: dict[str, list[str]] = defaultdict(list)

    for cmd in commands:
        if not cmd.is_dangerous:
            continue
        counts[cmd.command] += 1
        max_scores[cmd.command] = max(max_scores.get(cmd.command, 0.0), cmd.danger_score)
        for reason in cmd.danger_reasons:
            if reason not in reasons[cmd.command]:
                reasons[cmd.command].append(reason)

    usages = [
        RiskyCommandUsage(
            command=text,
            count=count,
            max_danger_score=max_scores[text],
            reasons=list(reasons[text]),
            safer_alternatives=suggest_safer_alternatives(text),
        )
        for text, count in counts.items()
    ]
    usages.sort(key=lambda u: (-u.impact, u.command))
    return usages[:TOP_RISKY_LIMIT]


def suggest_safer_alternatives(command: str) -> list[str]:
    alternatives = []

    if "rm -rf" in command:
        alternatives.append("Use 'rm -i' for interactive deletion")
        alternatives.append("Move to trash instead of permanent deletion")
        alternatives.append("Use 'find' with '-delete' for more control")

    if "chmod 777" in command:
        alternatives.append("Use more restrictive permissions like 755 or 644")
        alternatives.append("Set specific user/group permissions instead")

    if "sudo rm" in command:
        alternatives.append("Double-check the path before running")
        alternatives.append("Use 'sudo -l' to verify permissions first")

    if "curl" in command and "| bash" in command:
        alternatives.append("Download script first, then review before executing")
        alternatives.append("Use package manager instead of direct script execution")

    if "dd" in command:
        alternatives.append("Double-check input and output devices")
        alternatives.append("Use 'lsblk' to verify device names first")
        alternatives.append("Consider using 'cp' for file copying instead")

    if not alternatives:
        alternatives.append("Review command carefully before execution")
        alternatives.append("Test in a safe environment first")

    return alternatives


def safety_recommendations(
    by_category: Counter, risky: Sequence[RiskyCommandUsage]
) -> list[str]:
    recommendations = list(GENERAL_RECOMMENDATIONS)

    for reason, minimum, text in CATEGORY_RECOMMENDATIONS:
        if by_category.get(reason, 0) > minimum:
            recommendations.append(text)

    for usage in risky[:3]:
        if usage.count > 5:
            tool = first_token(usage.command) or usage.command
            recommendations.append(
                f"⚠️ You frequently use '{tool}' - consider safer alternatives"
            )

    return recommendations[:MAX_RECOMMENDATIONS]


def calculate_safety_score(commands: Sequence[Command]) -> float:
    """Share of safe commands minus half the mean danger score, in [0, 1]."""
    if not commands:
        return 1.0

    total = len(commands)
    dangerous = sum(1 for c in commands if c.is_dangerous)
    mean_score = sum(c.danger_score for c in commands) / total

    score = (total - dangerous) / total - mean_score * 0.5
    return max(0.0, min(1.0, score))
