"""
Detector pattern tables

Provides:
- DANGER_PATTERNS: High-confidence dangerous command patterns
- RISKY_COMMANDS: Leading commands that carry risk on their own
- LEARNING_COMMANDS, HELP_PATTERNS, TESTING_PATTERNS, EXPLORATION_TOOLS:
  Experiment signals
- PACKAGE_MANAGERS: Package manager invocation matchers
- DetectorTables: Immutable bundle of all tables, passed to every detector
- default_tables: Build (once) the built-in tables
"""

import re
from dataclasses import dataclass, field, replace
from functools import lru_cache

from .pattern import DangerPattern, PackageManager, RiskyCommand, compile_all


# Format: (pattern, score, reason)
DANGER_PATTERNS = (
    (r"rm\s+-rf\s+/", 1.0, "Recursive delete from root"),
    (r"chmod\s+777", 0.8, "Overly permissive permissions"),
    (r"sudo\s+rm", 0.7, "Privileged file deletion"),
    (r"dd\s+.*of=/dev/", 0.9, "Direct disk write"),
    (r"mkfs", 0.9, "Filesystem creation"),
    (r"curl.*\|\s*(?:bash|sh)", 0.8, "Pipe to shell execution"),
    (r"wget.*-O-.*\|\s*(?:bash|sh)", 0.8, "Pipe to shell execution"),
)

# Format: (first word, score, reason)
RISKY_COMMANDS = (
    ("rm", 0.6, "File deletion"),
    ("rmdir", 0.5, "Directory deletion"),
    ("mv", 0.3, "File movement"),
    ("cp", 0.2, "File copying"),
    ("chmod", 0.4, "Permission change"),
    ("chown", 0.4, "Ownership change"),
    ("sudo", 0.5, "Privileged execution"),
)

LEARNING_COMMANDS = (
    "man",
    "help",
    "tldr",
    "info",
    "which",
    "type",
    "whatis",
    "apropos",
)

HELP_PATTERNS = (r"--help", r"-h\b", r"--usage")

TESTING_PATTERNS = (
    r"\btest\b",
    r"\btry\b",
    r"\bplay\b",
    r"\bsandbox\b",
    r"\bexperiment\b",
    r"\bdemo\b",
)

# Tools commonly run bare to see their usage
EXPLORATION_TOOLS = ("jq", "ffmpeg", "docker", "kubectl", "git", "curl", "grep")

# Format: (manager, invocation regex, version separator)
PACKAGE_MANAGERS = (
    ("npm", r"\bnpm", "@"),
    ("apt", r"\bapt(?:-get)?", None),
    ("pip", r"\bpip3?", "=="),
    ("cargo", r"\bcargo", "@"),
    ("brew", r"\bbrew", None),
)

# Remote execution idioms, checked in this order (first match wins)
SSH_HOST_REGEX = r"ssh\s+(?:(\w+)@)?(\S+)"
DOCKER_HOST_REGEX = r"docker\s+(?:exec|run).*?(?:-it\s+)?(\S+)"
KUBECTL_HOST_REGEX = r"kubectl\s+exec.*?(\S+)"

# Network endpoints, reported in this order
CURL_URL_REGEX = r"curl\s+.*?(https?://\S+)"
WGET_URL_REGEX = r"wget\s+.*?(https?://\S+)"
SSH_TARGET_REGEX = r"ssh\s+(?:\w+@)?(\S+)"
DATABASE_HOST_REGEX = r"(?:psql|mysql|redis-cli).*?(?:-h\s+(\S+)|@(\S+))"


@dataclass(frozen=True)
class DetectorTables:
    """All detector configuration, built once and shared read-only."""

    danger_patterns: tuple[DangerPattern, ...] = ()
    risky_commands: tuple[RiskyCommand, ...] = ()
    learning_commands: frozenset[str] = frozenset()
    help_patterns: tuple[re.Pattern, ...] = ()
    testing_patterns: tuple[re.Pattern, ...] = ()
    exploration_tools: frozenset[str] = frozenset()
    package_managers: tuple[PackageManager, ...] = ()
    ssh_host: re.Pattern = field(default_factory=lambda: re.compile(SSH_HOST_REGEX))
    docker_host: re.Pattern = field(default_factory=lambda: re.compile(DOCKER_HOST_REGEX))
    kubectl_host: re.Pattern = field(
        default_factory=lambda: re.compile(KUBECTL_HOST_REGEX)
    )
    url_patterns: tuple[re.Pattern, ...] = field(
        default_factory=lambda: compile_all((CURL_URL_REGEX, WGET_URL_REGEX))
    )
    ssh_target: re.Pattern = field(default_factory=lambda: re.compile(SSH_TARGET_REGEX))
    database_host: re.Pattern = field(
        default_factory=lambda: re.compile(DATABASE_HOST_REGEX)
    )

    def extended(
        self,
        danger_patterns: tuple[DangerPattern, ...] = (),
        risky_commands: tuple[RiskyCommand, ...] = (),
        learning_commands: tuple[str, ...] = (),
        help_patterns: tuple[re.Pattern, ...] = (),
        testing_patterns: tuple[re.Pattern, ...] = (),
        exploration_tools: tuple[str, ...] = (),
    ) -> "DetectorTables":
        """Return a copy with extra entries appended to each table."""
        return replace(
            self,
            danger_patterns=self.danger_patterns + tuple(danger_patterns),
            risky_commands=self.risky_commands + tuple(risky_commands),
            learning_commands=self.learning_commands | frozenset(learning_commands),
            help_patterns=self.help_patterns + tuple(help_patterns),
            testing_patterns=self.testing_patterns + tuple(testing_patterns),
            exploration_tools=self.exploration_tools | frozenset(exploration_tools),
        )


@lru_cache(maxsize=None)
def default_tables() -> DetectorTables:
    """Built-in detector tables."""
    return DetectorTables(
        danger_patterns=tuple(DangerPattern(r, s, why) for r, s, why in DANGER_PATTERNS),
        risky_commands=tuple(RiskyCommand(c, s, why) for c, s, why in RISKY_COMMANDS),
        learning_commands=frozenset(LEARNING_COMMANDS),
        help_patterns=compile_all(HELP_PATTERNS),
        testing_patterns=compile_all(TESTING_PATTERNS),
        exploration_tools=frozenset(EXPLORATION_TOOLS),
        package_managers=tuple(
            PackageManager(name, invocation, sep)
            for name, invocation, sep in PACKAGE_MANAGERS
        ),
    )
