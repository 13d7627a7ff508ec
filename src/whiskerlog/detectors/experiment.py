"""Experiment (learning / exploration) detection."""

from typing import Optional

from .patterns import DetectorTables, default_tables
from .types import ExperimentResult


def detect_experiment(command: str, tables: Optional[DetectorTables] = None) -> ExperimentResult:
    tables = tables or default_tables()
    tags = []

    parts = command.split()
    first_word = parts[0] if parts else ""

    if first_word in tables.learning_commands:
        tags.append("learning")

    if any(p.search(command) for p in tables.help_patterns):
        tags.append("help-seeking")

    if any(p.search(command) for p in tables.testing_patterns):
        tags.append("testing")

    # Bare tool invocation, typically to see its usage
    if (
        len(parts) == 1
        and first_word not in tables.learning_commands
        and first_word in tables.exploration_tools
    ):
        tags.append("tool-exploration")

    return ExperimentResult(tags=tags)
