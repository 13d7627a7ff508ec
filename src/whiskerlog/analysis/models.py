"""
Analysis data models.

Report value objects produced by the analyzers. Every report is a frozen
dataclass that owns its data (no references back into the command list)
and renders to JSON-compatible data with to_dict().
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timedelta
from enum import Enum, IntEnum
from typing import Any, Optional


def to_plain(value: Any) -> Any:
    """Convert report values to JSON-compatible data."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value if not isinstance(value, IntEnum) else value.name.title()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


class Report:
    """Mixin giving report dataclasses a to_dict().

    List arguments are frozen into tuples on construction, so a report
    cannot be changed through its sequence fields.
    """

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                object.__setattr__(self, f.name, tuple(value))

    def to_dict(self) -> dict:
        return to_plain(self)


class Weekday(IntEnum):
    """Day of week, Monday = 0 (datetime.weekday() numbering)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def is_weekend(self) -> bool:
        return self >= Weekday.SATURDAY


# =============================================================================
# Stats
# =============================================================================


@dataclass(frozen=True)
class CommandFrequency(Report):
    """Usage of one exact command text."""

    command: str
    count: int
    percentage: float
    last_used: datetime
    average_duration: Optional[float] = None


@dataclass(frozen=True)
class CommandStats(Report):
    """Overall command statistics."""

    total_commands: int = 0
    unique_commands: int = 0
    success_rate: float = 0.0
    average_duration: Optional[float] = None  # milliseconds
    commands_per_day: float = 0.0
    most_active_hour: int = 12
    most_active_day: Weekday = Weekday.MONDAY
    top_commands: tuple[CommandFrequency, ...] = ()
    shell_distribution: dict[str, int] = field(default_factory=dict)
    host_distribution: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionStats(Report):
    """Statistics over parse sessions."""

    total_sessions: int = 0
    average_session_length: float = 0.0  # minutes
    average_commands_per_session: float = 0.0
    longest_session: timedelta = timedelta(0)
    most_productive_session: str = ""
    session_distribution: dict[str, int] = field(default_factory=dict)  # by shell


@dataclass(frozen=True)
class WorkflowPattern(Report):
    """Recurring sequence of leading commands."""

    pattern: str  # e.g. "git → npm → git"
    frequency: int
    efficiency_score: float
    description: str


@dataclass(frozen=True)
class ProductivityStats(Report):
    productivity_score: float = 0.0  # 0-100
    efficiency_indicators: tuple[str, ...] = ()
    improvement_suggestions: tuple[str, ...] = ()
    peak_hours: tuple[int, ...] = ()
    workflow_patterns: tuple[WorkflowPattern, ...] = ()


# =============================================================================
# Danger
# =============================================================================


@dataclass(frozen=True)
class DangerTrend(Report):
    """Dangerous command ratio for one day."""

    date: date
    danger_count: int
    total_count: int
    danger_ratio: float


@dataclass(frozen=True)
class RiskyCommandUsage(Report):
    """A dangerous command text and how often it was run."""

    command: str
    count: int
    max_danger_score: float
    reasons: tuple[str, ...] = ()
    safer_alternatives: tuple[str, ...] = ()

    @property
    def impact(self) -> float:
        return self.max_danger_score * self.count


@dataclass(frozen=True)
class DangerAnalysis(Report):
    total_dangerous: int = 0
    danger_by_category: dict[str, int] = field(default_factory=dict)
    danger_trends: tuple[DangerTrend, ...] = ()
    top_risky_commands: tuple[RiskyCommandUsage, ...] = ()
    safety_recommendations: tuple[str, ...] = ()


# =============================================================================
# Packages
# =============================================================================


class TrendType(Enum):
    FREQUENT_INSTALLS = "frequent_installs"
    REPEATED_INSTALLS = "repeated_installs"  # Installed more often than removed
    QUICK_REMOVAL = "quick_removal"  # Removed within 24h of install
    VERSION_CHURN = "version_churn"


class ConflictType(Enum):
    MULTIPLE_VERSIONS = "multiple_versions"
    DOWNGRADE_DETECTED = "downgrade_detected"
    INCONSISTENT_VERSIONING = "inconsistent_versioning"

    @property
    def recommendation(self) -> str:
        return {
            ConflictType.DOWNGRADE_DETECTED: (
                "Consider if downgrade was intentional. Check for compatibility issues."
            ),
            ConflictType.MULTIPLE_VERSIONS: (
                "Multiple versions detected. Consider standardizing on one version."
            ),
            ConflictType.INCONSISTENT_VERSIONING: "Inconsistent versioning scheme detected.",
        }[self]


@dataclass(frozen=True)
class PackageStats(Report):
    """Per-package operation counts within one manager."""

    name: str
    install_count: int
    remove_count: int
    first_installed: Optional[datetime]
    last_used: datetime
    versions_seen: tuple[str, ...] = ()


@dataclass(frozen=True)
class ManagerStats(Report):
    manager: str
    total_operations: int
    installs: int
    removes: int
    updates: int
    top_packages: tuple[PackageStats, ...] = ()


@dataclass(frozen=True)
class PackageTrend(Report):
    package: str
    manager: str
    trend_type: TrendType
    frequency: int
    time_span_days: int


@dataclass(frozen=True)
class VersionConflict(Report):
    package: str
    manager: str
    versions: tuple[str, ...]
    conflict_type: ConflictType
    recommendation: str


@dataclass(frozen=True)
class PackageAnalysis(Report):
    total_package_operations: int = 0
    managers_used: tuple[ManagerStats, ...] = ()
    package_trends: tuple[PackageTrend, ...] = ()
    version_conflicts: tuple[VersionConflict, ...] = ()
    recommendations: tuple[str, ...] = ()


# =============================================================================
# Network
# =============================================================================


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def penalty(self) -> float:
        """Security score penalty weight."""
        return {
            Severity.CRITICAL: 0.4,
            Severity.HIGH: 0.3,
            Severity.MEDIUM: 0.2,
            Severity.LOW: 0.1,
        }[self]


class IssueType(Enum):
    INSECURE_HTTP = "Insecure HTTP"
    CREDENTIAL_EXPOSURE = "Credential Exposure"
    SUSPICIOUS_ENDPOINTS = "Suspicious Endpoints"


class ConnectionType(Enum):
    API_USAGE = "API Usage"
    DATABASE_ACCESS = "Database Access"
    REMOTE_ACCESS = "Remote Access"


@dataclass(frozen=True)
class SecurityIssue(Report):
    issue_type: IssueType
    description: str
    severity: Severity
    affected_commands: tuple[str, ...]
    recommendation: str


@dataclass(frozen=True)
class EndpointStats(Report):
    endpoint: str
    protocol: str  # "HTTPS", "HTTP", "SSH", "Database", "Unknown"
    usage_count: int
    first_seen: datetime
    last_seen: datetime
    is_secure: bool
    success_rate: float


@dataclass(frozen=True)
class ConnectionPattern(Report):
    pattern_type: ConnectionType
    description: str
    frequency: int
    risk_level: Severity


@dataclass(frozen=True)
class NetworkAnalysis(Report):
    total_network_commands: int = 0
    unique_endpoints: int = 0
    protocol_breakdown: dict[str, int] = field(default_factory=dict)
    security_issues: tuple[SecurityIssue, ...] = ()
    top_endpoints: tuple[EndpointStats, ...] = ()
    connection_patterns: tuple[ConnectionPattern, ...] = ()


# =============================================================================
# Heatmap
# =============================================================================


class TimeRange(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def days(self) -> int:
        return {TimeRange.DAY: 1, TimeRange.WEEK: 7, TimeRange.MONTH: 30, TimeRange.YEAR: 365}[
            self
        ]

    @property
    def fallback_limit(self) -> Optional[int]:
        """Most recent commands shown when the window is empty (None = all)."""
        return {TimeRange.DAY: 50, TimeRange.WEEK: 200, TimeRange.MONTH: 500}.get(self)


class ViewMode(Enum):
    ALL = "all"
    DANGEROUS = "dangerous"
    EXPERIMENTS = "experiments"
    FAILED = "failed"


HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class HeatmapData(Report):
    """Activity grid indexed [hour][weekday], values normalized to 0.0-1.0."""

    grid: tuple[tuple[float, ...], ...] = field(
        default_factory=lambda: tuple((0.0,) * DAYS_PER_WEEK for _ in range(HOURS_PER_DAY))
    )
    max_activity: float = 0.0
    total_commands: int = 0

    def level(self, hour: int, day: int) -> float:
        return self.grid[hour][day]


@dataclass(frozen=True)
class ActivityPeriod(Report):
    hour: int
    day_of_week: Weekday
    activity_level: float
    command_count: int


@dataclass(frozen=True)
class WorkPatternAnalysis(Report):
    weekday_ratio: float = 0.0
    weekend_ratio: float = 0.0
    work_hours_ratio: float = 0.0  # 09:00-17:00
    late_night_ratio: float = 0.0  # 22:00-06:00
    most_active_day: Weekday = Weekday.MONDAY
    most_active_hour: int = 12


# =============================================================================
# Aliases
# =============================================================================


@dataclass(frozen=True)
class AliasSuggestion(Report):
    command: str  # normalized command text
    suggested_alias: str
    frequency: int
    time_saved_per_use: int  # characters
    total_time_saved: int  # characters


@dataclass(frozen=True)
class AliasAnalysis(Report):
    suggestions: tuple[AliasSuggestion, ...] = ()
    existing_aliases_usage: dict[str, int] = field(default_factory=dict)
    potential_savings: int = 0  # characters


# =============================================================================
# Experiments
# =============================================================================


class LearningPatternType(Enum):
    HELP_SEEKING = "help_seeking"  # --help, man pages
    TOOL_EXPLORATION = "tool_exploration"  # Bare commands to see usage
    TRIAL_AND_ERROR = "trial_and_error"  # Rapid variations of one tool
    DOCUMENTATION = "documentation"
    EXPERIMENTATION = "experimentation"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ExperimentSession(Report):
    session_id: str
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    command_count: int
    experiment_ratio: float
    primary_focus: str
    tools_explored: tuple[str, ...] = ()
    learning_indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class LearningPattern(Report):
    pattern_type: LearningPatternType
    description: str
    frequency: int
    tools_involved: tuple[str, ...] = ()
    confidence: float = 0.0


@dataclass(frozen=True)
class ProgressionStep(Report):
    timestamp: datetime
    command: str
    complexity_level: int  # 1-10
    success: bool


@dataclass(frozen=True)
class ToolExploration(Report):
    tool: str
    exploration_commands: tuple[str, ...]
    help_commands: int
    test_commands: int
    success_rate: float
    learning_progression: tuple[ProgressionStep, ...] = ()


@dataclass(frozen=True)
class KnowledgeGap(Report):
    area: str
    indicators: tuple[str, ...]
    suggested_resources: tuple[str, ...]
    priority: Priority


@dataclass(frozen=True)
class ExperimentAnalysis(Report):
    total_experiment_commands: int = 0
    experiment_sessions: tuple[ExperimentSession, ...] = ()
    learning_patterns: tuple[LearningPattern, ...] = ()
    tool_exploration: tuple[ToolExploration, ...] = ()
    knowledge_gaps: tuple[KnowledgeGap, ...] = ()
    recommendations: tuple[str, ...] = ()
