"""
Analysis - read-only aggregation passes over a command history

Every analyzer takes the full (or sliced) command list and returns one
report value; analyzers never mutate their input and do not depend on
each other.
"""

from .models import (
    AliasAnalysis,
    CommandStats,
    DangerAnalysis,
    ExperimentAnalysis,
    HeatmapData,
    NetworkAnalysis,
    PackageAnalysis,
    ProductivityStats,
    SessionStats,
    TimeRange,
    ViewMode,
    WorkPatternAnalysis,
)
from .stats import analyze_commands, analyze_sessions, analyze_productivity
from .danger import analyze_danger, calculate_safety_score
from .packages import analyze_packages, calculate_package_health_score
from .network import analyze_network, calculate_network_security_score
from .heatmap import generate_heatmap, get_peak_activity_periods, analyze_work_patterns
from .aliases import analyze_aliases, generate_shell_aliases, calculate_efficiency_gain
from .experiments import analyze_experiments, calculate_learning_score
from .cache import AnalysisCache

__all__ = [
    # Reports
    "AliasAnalysis",
    "CommandStats",
    "DangerAnalysis",
    "ExperimentAnalysis",
    "HeatmapData",
    "NetworkAnalysis",
    "PackageAnalysis",
    "ProductivityStats",
    "SessionStats",
    "TimeRange",
    "ViewMode",
    "WorkPatternAnalysis",
    # Analyzers
    "analyze_commands",
    "analyze_sessions",
    "analyze_productivity",
    "analyze_danger",
    "calculate_safety_score",
    "analyze_packages",
    "calculate_package_health_score",
    "analyze_network",
    "calculate_network_security_score",
    "generate_heatmap",
    "get_peak_activity_periods",
    "analyze_work_patterns",
    "analyze_aliases",
    "generate_shell_aliases",
    "calculate_efficiency_gain",
    "analyze_experiments",
    "calculate_learning_score",
    # Cache
    "AnalysisCache",
]
