"""Pattern registry for extending the detector tables from YAML.

Example file:

    danger_patterns:
      - regex: "git\\s+push\\s+--force"
        score: 0.6
        reason: "Force push"
    risky_commands:
      - command: shred
        score: 0.7
        reason: "Secure file deletion"
    learning_commands: [cheat]
    exploration_tools: [fzf]
"""

from pathlib import Path
from typing import Optional, Union

import yaml

from ..utils.logger import debug
from .pattern import DangerPattern, RiskyCommand, compile_all
from .patterns import DetectorTables, default_tables


def _entries(data: dict, key: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list, got {type(value).__name__}")
    return value


def _score(entry: dict) -> float:
    try:
        return float(entry["score"])
    except (TypeError, ValueError):
        raise ValueError(f"Score must be a number, got {entry['score']!r}")


class PatternRegistry:
    """Loads detector table extensions from a YAML configuration file."""

    def __init__(self, config_path: Optional[Path] = None, base: Optional[DetectorTables] = None):
        self.config_path = config_path
        self.tables = base or default_tables()

        if config_path is not None and config_path.exists():
            self.load()

    def load(self) -> None:
        """Load patterns from YAML and append them to the tables.

        Raises:
            ValueError: on a malformed entry, an invalid regex or a score
                outside [0, 1]
        """
        if self.config_path is None:
            return

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Pattern file {self.config_path} must contain a mapping")

        try:
            danger = tuple(
                DangerPattern(regex=p["regex"], score=_score(p), reason=p["reason"])
                for p in _entries(data, "danger_patterns")
            )
            risky = tuple(
                RiskyCommand(command=c["command"], score=_score(c), reason=c["reason"])
                for c in _entries(data, "risky_commands")
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed pattern entry in {self.config_path}: {e}")

        self.tables = self.tables.extended(
            danger_patterns=danger,
            risky_commands=risky,
            learning_commands=tuple(str(c) for c in _entries(data, "learning_commands")),
            help_patterns=compile_all([str(r) for r in _entries(data, "help_patterns")]),
            testing_patterns=compile_all(
                [str(r) for r in _entries(data, "testing_patterns")]
            ),
            exploration_tools=tuple(str(t) for t in _entries(data, "exploration_tools")),
        )
        debug(
            f"Loaded {len(danger)} danger patterns and {len(risky)} risky commands "
            f"from {self.config_path}"
        )


def load_tables(path: Optional[Union[str, Path]] = None) -> DetectorTables:
    """Built-in tables, extended by the YAML file at `path` when given."""
    if not path:
        return default_tables()
    return PatternRegistry(Path(path).expanduser()).tables
