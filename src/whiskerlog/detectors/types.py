"""
Detector result types

Provides:
- DangerResult: Outcome of danger assessment for a command
- ExperimentResult: Outcome of experiment detection for a command
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DangerResult:
    """Result of danger assessment for a command"""

    score: float = 0.0  # 0.0-1.0, maximum of all triggered scores
    reasons: list[str] = field(default_factory=list)

    @property
    def is_dangerous(self) -> bool:
        return self.score > 0.5


@dataclass(frozen=True)
class ExperimentResult:
    """Result of experiment detection for a command"""

    tags: list[str] = field(default_factory=list)

    @property
    def is_experiment(self) -> bool:
        return bool(self.tags)
