"""
Package analysis - manager usage, install trends and version conflicts.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..history.models import Command, PackageAction
from .common import whole_days, whole_hours
from .models import (
    ConflictType,
    ManagerStats,
    PackageAnalysis,
    PackageStats,
    PackageTrend,
    TrendType,
    VersionConflict,
)

TOP_PACKAGES_LIMIT = 10
TRENDS_LIMIT = 20
MAX_RECOMMENDATIONS = 8
QUICK_REMOVAL_HOURS = 24


@dataclass
class _PackageTally:
    name: str
    last_used: datetime
    install_count: int = 0
    remove_count: int = 0
    first_installed: Optional[datetime] = None
    versions_seen: list[str] = field(default_factory=list)

    def freeze(self) -> PackageStats:
        return PackageStats(
            name=self.name,
            install_count=self.install_count,
            remove_count=self.remove_count,
            first_installed=self.first_installed,
            last_used=self.last_used,
            versions_seen=list(self.versions_seen),
        )


@dataclass
class _ManagerTally:
    installs: int = 0
    removes: int = 0
    updates: int = 0
    packages: dict[str, _PackageTally] = field(default_factory=dict)


def analyze_packages(commands: Sequence[Command]) -> PackageAnalysis:
    package_commands = [c for c in commands if c.packages_used]

    managers = manager_stats(package_commands)
    trends = package_trends(package_commands)
    conflicts = version_conflicts(package_commands)

    return PackageAnalysis(
        total_package_operations=len(package_commands),
        managers_used=managers,
        package_trends=trends,
        version_conflicts=conflicts,
        recommendations=recommendations(managers, trends, conflicts),
    )


def manager_stats(commands: Sequence[Command]) -> list[ManagerStats]:
    """Per-manager action counts, busiest manager first."""
    tallies: dict[str, _ManagerTally] = defaultdict(_ManagerTally)

    for cmd in commands:
        for package in cmd.packages_used:
            tally = tallies[package.manager]
            kind = package.action.kind
            if kind is PackageAction.REMOVE:
                tally.removes += 1
            elif kind is PackageAction.UPDATE:
                tally.updates += 1
            else:
                tally.installs += 1

            pkg = tally.packages.get(package.name)
            if pkg is None:
                pkg = tally.packages[package.name] = _PackageTally(
                    name=package.name, last_used=cmd.timestamp
                )

            if kind is PackageAction.INSTALL:
                pkg.install_count += 1
                if pkg.first_installed is None:
                    pkg.first_installed = cmd.timestamp
            elif kind is PackageAction.REMOVE:
                pkg.remove_count += 1

            pkg.last_used = max(pkg.last_used, cmd.timestamp)
            if package.version and package.version not in pkg.versions_seen:
                pkg.versions_seen.append(package.version)

    stats = []
    for manager, tally in tallies.items():
        top = sorted(tally.packages.values(), key=lambda p: (-p.install_count, p.name))
        stats.append(
            ManagerStats(
                manager=manager,
                total_operations=tally.installs + tally.removes + tally.updates,
                installs=tally.installs,
                removes=tally.removes,
                updates=tally.updates,
                top_packages=[p.freeze() for p in top[:TOP_PACKAGES_LIMIT]],
            )
        )

    stats.sort(key=lambda m: (-m.total_operations, m.manager))
    return stats


def _timelines(commands: Sequence[Command]) -> dict[tuple[str, str], list[tuple[datetime, PackageAction]]]:
    timelines: dict = defaultdict(list)
    for cmd in commands:
        for package in cmd.packages_used:
            timelines[(package.manager, package.name)].append((cmd.timestamp, package.action))
    for timeline in timelines.values():
        timeline.sort(key=lambda entry: entry[0])
    return dict(timelines)


def _time_span_days(timeline) -> int:
    if len(timeline) < 2:
        return 0
    times = [t for t, _ in timeline]
    return whole_days((max(times) - min(times)).total_seconds())


def _quick_removal(manager: str, package: str, timeline) -> Optional[PackageTrend]:
    """Install followed by the next removal within 24 hours."""
    for i, (installed_at, action) in enumerate(timeline[:-1]):
        if action.kind is not PackageAction.INSTALL:
            continue
        for removed_at, later_action in timeline[i + 1 :]:
            if later_action.is_removal:
                elapsed = (removed_at - installed_at).total_seconds()
                if whole_hours(elapsed) <= QUICK_REMOVAL_HOURS:
                    return PackageTrend(
                        package=package,
                        manager=manager,
                        trend_type=TrendType.QUICK_REMOVAL,
                        frequency=1,
                        time_span_days=whole_days(elapsed),
                    )
                break
    return None


def package_trends(commands: Sequence[Command]) -> list[PackageTrend]:
    trends = []
    for (manager, package), timeline in _timelines(commands).items():
        installs = sum(1 for _, action in timeline if action.kind is PackageAction.INSTALL)
        removes = sum(1 for _, action in timeline if action.is_removal)
        span = _time_span_days(timeline)

        if installs >= 3:
            trends.append(
                PackageTrend(package, manager, TrendType.FREQUENT_INSTALLS, installs, span)
            )

        if installs > removes + 1:
            trends.append(
                PackageTrend(
                    package, manager, TrendType.REPEATED_INSTALLS, installs - removes, span
                )
            )

        quick = _quick_removal(manager, package, timeline)
        if quick is not None:
            trends.append(quick)

    # Stable sort keeps frequent / repeated / quick order for equal keys
    trends.sort(key=lambda t: (-t.frequency, t.manager, t.package))
    return trends[:TRENDS_LIMIT]


def has_version_downgrade(versions: Sequence[str]) -> bool:
    """Approximate downgrade check.

    Not a semantic version comparison: any "0." inside a version, or a
    version starting with "1.", among two or more versions counts.
    """
    return len(versions) > 1 and any("0." in v or v.startswith("1.") for v in versions)


def version_conflicts(commands: Sequence[Command]) -> list[VersionConflict]:
    versions: dict[tuple[str, str], list[str]] = defaultdict(list)
    for cmd in commands:
        for package in cmd.packages_used:
            if package.version:
                seen = versions[(package.manager, package.name)]
                if package.version not in seen:
                    seen.append(package.version)

    conflicts = []
    for (manager, package), seen in sorted(versions.items()):
        if len(seen) <= 1:
            continue
        if has_version_downgrade(seen):
            conflict_type = ConflictType.DOWNGRADE_DETECTED
        else:
            conflict_type = ConflictType.MULTIPLE_VERSIONS
        conflicts.append(
            VersionConflict(
                package=package,
                manager=manager,
                versions=list(seen),
                conflict_type=conflict_type,
                recommendation=conflict_type.recommendation,
            )
        )
    return conflicts


def recommendations(
    managers: Sequence[ManagerStats],
    trends: Sequence[PackageTrend],
    conflicts: Sequence[VersionConflict],
) -> list[str]:
    result = []

    for manager in managers:
        if manager.removes > manager.installs // 2:
            result.append(
                f"📦 High removal rate for {manager.manager} packages - "
                "consider testing before installing"
            )
        if manager.manager == "npm" and manager.installs > 20:
            result.append("📦 Consider using npm ci for faster, reliable installs in CI/CD")
        if manager.manager == "pip" and manager.installs > 15:
            result.append(
                "🐍 Consider using virtual environments to isolate Python dependencies"
            )

    for trend in trends[:5]:
        if trend.trend_type is TrendType.REPEATED_INSTALLS:
            result.append(
                f"🔄 Package '{trend.package}' installed {trend.frequency} times - "
                "check if this is intentional"
            )
        elif trend.trend_type is TrendType.FREQUENT_INSTALLS:
            result.append(
                f"📈 Frequent installs of '{trend.package}' - consider adding to requirements file"
            )

    if conflicts:
        result.append(
            f"⚠️ {len(conflicts)} version conflicts detected - "
            "review package versions for consistency"
        )

    if len(managers) > 3:
        result.append(
            "🔧 Multiple package managers in use - consider standardizing where possible"
        )

    return result[:MAX_RECOMMENDATIONS]


def calculate_package_health_score(analysis: PackageAnalysis) -> float:
    """1.0 minus conflict and repeat penalties, plus a consistency bonus."""
    if analysis.total_package_operations == 0:
        return 1.0

    score = 1.0
    score -= min(len(analysis.version_conflicts) * 0.1, 0.3)

    repeated = sum(
        1 for t in analysis.package_trends if t.trend_type is TrendType.REPEATED_INSTALLS
    )
    score -= min(repeated * 0.05, 0.2)

    total_ops = sum(m.total_operations for m in analysis.managers_used)
    if total_ops > 0:
        primary_ops = analysis.managers_used[0].total_operations
        if primary_ops / total_ops > 0.7:
            score += 0.1

    return max(0.0, min(1.0, score))
