"""
Alias suggestions for frequently typed commands.

Commands are normalized first (digit tokens -> "N", data/log file paths
-> "/FILE") so invocations differing only in such literals are counted
together.
"""

from collections import Counter
from typing import Optional, Sequence

from ..history.models import Command
from .common import first_token
from .models import AliasAnalysis, AliasSuggestion

ANALYSIS_WINDOW = 1000
SUGGESTIONS_LIMIT = 25
SHELL_ALIASES_LIMIT = 10
MIN_SAVINGS = 3

FILE_EXTENSIONS = (".txt", ".log", ".json", ".yaml", ".yml")

# Tools whose commands qualify with fewer repetitions and shorter text
FAST_TRACK_TOOLS = ("git", "docker")

# Subcommand -> alias per tool; unknown subcommands get prefix + first letter
SUBCOMMAND_ALIASES = {
    "git": (
        "g",
        {
            "status": "gs",
            "checkout": "gco",
            "branch": "gb",
            "diff": "gd",
            "merge": "gm",
            "rebase": "gr",
            "stash": "gst",
            "remote": "grem",
        },
    ),
    "docker": (
        "d",
        {
            "ps": "dps",
            "images": "di",
            "run": "dr",
            "exec": "de",
            "build": "db",
            "compose": "dc",
        },
    ),
    "kubectl": (
        "k",
        {
            "get": "kg",
            "describe": "kd",
            "apply": "ka",
            "delete": "kdel",
            "logs": "kl",
            "exec": "ke",
            "port-forward": "kpf",
        },
    ),
    "npm": (
        "n",
        {"install": "ni", "start": "ns", "test": "nt", "run": "nr", "build": "nb"},
    ),
    "yarn": (
        "y",
        {"install": "yi", "start": "ys", "test": "yt", "build": "yb", "add": "ya"},
    ),
    "cargo": (
        "c",
        {"build": "cb", "run": "cr", "test": "ct", "check": "cc", "clippy": "ccl"},
    ),
    "systemctl": (
        "sc",
        {
            "status": "scs",
            "start": "scst",
            "stop": "scsp",
            "restart": "scr",
            "enable": "sce",
            "disable": "scd",
        },
    ),
}

COMMON_ALIASES = frozenset(
    {
        "ll", "la", "l", "gs", "ga", "gc", "gp", "gl", "gco", "gb",
        "dps", "di", "dr", "de", "db", "dc", "kg", "kd", "ka", "kl",
        "vim", "vi", "nano", "cat", "less", "more", "grep", "find",
    }
)  # fmt: skip


def normalize_command(command: str) -> str:
    """Replace digit tokens and data-file paths with placeholders.

    Idempotent: normalizing a normalized command returns it unchanged.
    """
    words = []
    for word in command.split():
        if word.isascii() and word.isdigit():
            words.append("N")
        elif "/" in word and word.endswith(FILE_EXTENSIONS):
            words.append("/FILE")
        else:
            words.append(word)
    return " ".join(words)


def complexity_score(command: str) -> int:
    score = 1
    score += max(len(command.split()) - 1, 0)
    score += command.count("--")
    score += command.count(" -")

    if "docker" in command:
        score += 2
    if "kubectl" in command:
        score += 3
    if "git" in command:
        score += 1
    if "npm" in command or "yarn" in command:
        score += 1
    return score


def _git_alias(parts: list[str]) -> Optional[str]:
    sub = parts[1]
    if sub == "add":
        return "gaa" if len(parts) > 2 and parts[2] == "." else "ga"
    if sub == "commit":
        if "-m" in parts:
            return "gcm"
        if "--amend" in parts:
            return "gca"
        return "gc"
    if sub == "push":
        return "gpo" if "origin" in parts else "gp"
    if sub == "pull":
        return "glo" if "origin" in parts else "gl"
    if sub == "log":
        return "glog1" if "--oneline" in parts else "glog"
    return None


def create_alias_name(command: str) -> Optional[str]:
    """Alias for a (normalized) command, or None if no sensible one exists."""
    parts = command.split()
    if not parts:
        return None
    base = parts[0]

    if base in SUBCOMMAND_ALIASES:
        prefix, table = SUBCOMMAND_ALIASES[base]
        if len(parts) == 1:
            return prefix
        if base == "git":
            alias = _git_alias(parts)
            if alias:
                return alias
        return table.get(parts[1], f"{prefix}{parts[1][0]}")

    if base == "ls":
        if "-la" in command or "-al" in command:
            return "ll"
        if "-l" in command:
            return "l"
        return None

    # Generic: initials of the first three words
    if len(command) > 15:
        alias = "".join(word[0] for word in parts[:3])
        if 2 <= len(alias) <= 5:
            return alias
    return None


def suggest_alias(command: str, frequency: int) -> Optional[AliasSuggestion]:
    alias = create_alias_name(command)
    if alias is None:
        return None

    saved = max(len(command) - len(alias), 0)
    if saved < MIN_SAVINGS:
        return None

    return AliasSuggestion(
        command=command,
        suggested_alias=alias,
        frequency=frequency,
        time_saved_per_use=saved,
        total_time_saved=saved * frequency,
    )


def _thresholds(command: str) -> tuple[int, int]:
    """(minimum frequency, length that must be exceeded) for a command."""
    if any(tool in command for tool in FAST_TRACK_TOOLS):
        return 2, 8
    return 3, (8 if len(command.split()) > 3 else 12)


def detect_existing_aliases(commands: Sequence[Command]) -> dict[str, int]:
    usage: Counter = Counter()
    for cmd in commands:
        tool = first_token(cmd.command)
        if tool in COMMON_ALIASES:
            usage[tool] += 1
    return dict(usage)


def analyze_aliases(commands: Sequence[Command]) -> AliasAnalysis:
    """Alias suggestions over the most recent 1000 commands."""
    if not commands:
        return AliasAnalysis()

    recent = commands[-ANALYSIS_WINDOW:]
    counts = Counter(normalize_command(c.command) for c in recent)

    suggestions = []
    for command, count in counts.items():
        min_frequency, min_length = _thresholds(command)
        if count < min_frequency or len(command) <= min_length:
            continue
        suggestion = suggest_alias(command, count)
        if suggestion is not None:
            suggestions.append(suggestion)

    potential_savings = sum(s.total_time_saved for s in suggestions)
    suggestions.sort(
        key=lambda s: (-(s.frequency * s.time_saved_per_use * complexity_score(s.command)), s.command)
    )

    return AliasAnalysis(
        suggestions=suggestions[:SUGGESTIONS_LIMIT],
        existing_aliases_usage=detect_existing_aliases(commands),
        potential_savings=potential_savings,
    )


def _quote(command: str, shell: str) -> str:
    if shell == "fish":
        return "'" + command.replace("\\", "\\\\").replace("'", "\\'") + "'"
    return "'" + command.replace("'", "'\\''") + "'"


def generate_shell_aliases(suggestions: Sequence[AliasSuggestion], shell: str) -> str:
    """Alias definitions for the top 10 suggestions in the given shell's syntax."""
    if shell in ("bash", "zsh"):
        template = "alias {alias}={command}\n"
    elif shell == "fish":
        template = "alias {alias} {command}\n"
    else:
        return "# Shell not supported for alias generation\n"

    lines = ["# Generated aliases by Whiskerlog\n"]
    for suggestion in suggestions[:SHELL_ALIASES_LIMIT]:
        lines.append(
            template.format(
                alias=suggestion.suggested_alias, command=_quote(suggestion.command, shell)
            )
        )
    return "".join(lines)


def calculate_efficiency_gain(analysis: AliasAnalysis) -> float:
    """Typing-time benefit on a 0-100 scale (200 characters ~ one minute)."""
    if analysis.potential_savings == 0:
        return 0.0
    minutes_saved = analysis.potential_savings / 200.0
    return min(minutes_saved * 10.0, 100.0)
