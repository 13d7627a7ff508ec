"""Detector pattern domain model.

Validated dataclasses for the entries of the detector tables.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


def _compile(regex: str) -> re.Pattern:
    try:
        return re.compile(regex)
    except re.error as e:
        raise ValueError(f"Invalid regex pattern '{regex}': {e}")


def _check_score(score: float) -> None:
    if not 0.0 <= score <= 1.0:
        raise ValueError(f"Score must be 0.0-1.0, got {score}")


@dataclass(frozen=True)
class DangerPattern:
    """High-confidence dangerous pattern: (regex, score, reason)"""

    regex: str
    score: float
    reason: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate pattern after initialization."""
        _check_score(self.score)
        object.__setattr__(self, "compiled", _compile(self.regex))

    def matches(self, command: str) -> bool:
        return self.compiled.search(command) is not None


@dataclass(frozen=True)
class RiskyCommand:
    """Leading command that is risky on its own: (command, score, reason)"""

    command: str
    score: float
    reason: str

    def __post_init__(self):
        _check_score(self.score)
        if not self.command or any(c.isspace() for c in self.command):
            raise ValueError(f"Risky command must be a single word, got '{self.command}'")


@dataclass(frozen=True)
class PackageManager:
    """Package manager invocation matcher.

    `invocation` matches the manager executable; the action keyword and
    package arguments are parsed from the text that follows it, up to the
    next shell operator (";", "&", "|").
    """

    name: str
    invocation: str
    version_separator: Optional[str] = None  # "@" (npm, cargo) or "==" (pip)
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "compiled",
            _compile(
                rf"{self.invocation}\s+(install|remove|uninstall|update|upgrade)\b([^;&|\n]*)"
            ),
        )

    def split_version(self, requirement: str) -> tuple[str, Optional[str]]:
        """Split "name@1.2" / "name==1.2" into (name, version)."""
        sep = self.version_separator
        if not sep:
            return requirement, None
        # Scoped npm packages ("@types/node@20") keep their leading "@"
        index = requirement.rfind(sep)
        if index <= 0 or index + len(sep) >= len(requirement):
            return requirement, None
        return requirement[:index], requirement[index + len(sep) :]


def compile_all(regexes: "list[str] | tuple[str, ...]") -> tuple[re.Pattern, ...]:
    """Compile a list of plain regexes, raising ValueError on the first bad one."""
    return tuple(_compile(r) for r in regexes)
