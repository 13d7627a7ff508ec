"""
Command line entry point.

Usage: python -m whiskerlog [--json] [--limit N] {report,aliases,import,search}
"""

import argparse
import json
import os
import sys
from typing import Optional, Sequence

from .analysis import (
    analyze_aliases,
    analyze_commands,
    analyze_danger,
    analyze_experiments,
    analyze_network,
    analyze_packages,
    analyze_productivity,
    analyze_sessions,
    analyze_work_patterns,
    calculate_efficiency_gain,
    calculate_learning_score,
    calculate_network_security_score,
    calculate_package_health_score,
    calculate_safety_score,
    generate_heatmap,
    generate_shell_aliases,
    get_peak_activity_periods,
)
from .detectors.registry import load_tables
from .history.enricher import CommandEnricher
from .history.models import Command
from .history.parsers import HistoryParser, HistoryReadError
from .storage import CommandRepository, HistoryDB
from .utils.logger import error, info
from .utils.settings import Settings, get_settings

ALIAS_SHELLS = ("bash", "zsh", "fish")
PEAK_THRESHOLD = 0.7


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whiskerlog", description="Analyze your shell command history"
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only use the N most recent commands",
    )
    parser.add_argument(
        "--from-db",
        action="store_true",
        help="Read commands from the database instead of history files",
    )
    parser.add_argument("--db", type=str, help="Database path (overrides settings)")

    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("report", help="Print every analysis")

    aliases = sub.add_parser("aliases", help="Print suggested shell aliases")
    aliases.add_argument(
        "--shell",
        choices=ALIAS_SHELLS,
        default=None,
        help="Alias syntax (defaults to $SHELL)",
    )

    sub.add_parser("import", help="Import parsed history into the database")

    search = sub.add_parser("search", help="Search stored commands")
    search.add_argument("text", help="Substring to look for")
    return parser


def load_commands(settings: Settings, from_db: Optional[HistoryDB] = None) -> list[Command]:
    """Commands from the history files (or the database), oldest first."""
    if from_db is not None:
        commands = CommandRepository(from_db).get_commands()
        commands.reverse()
        return commands

    tables = load_tables(settings.patterns_path)
    enricher = CommandEnricher(tables, detect_experiments=settings.experiment_detection)
    return HistoryParser(settings.history_paths, enricher).parse_all()


def build_report(commands: Sequence[Command], danger_threshold: float = 0.7) -> dict:
    """Every analyzer's output as JSON-compatible data."""
    danger = analyze_danger(commands)
    packages = analyze_packages(commands)
    network = analyze_network(commands)
    aliases = analyze_aliases(commands)
    experiments = analyze_experiments(commands)
    heatmap = generate_heatmap(commands)

    return {
        "stats": analyze_commands(commands).to_dict(),
        "sessions": analyze_sessions(commands).to_dict(),
        "productivity": analyze_productivity(commands).to_dict(),
        "danger": {
            **danger.to_dict(),
            "safety_score": calculate_safety_score(commands),
            "high_risk_commands": sum(1 for c in commands if c.danger_score >= danger_threshold),
        },
        "packages": {
            **packages.to_dict(),
            "health_score": calculate_package_health_score(packages),
        },
        "network": {
            **network.to_dict(),
            "security_score": calculate_network_security_score(network),
        },
        "heatmap": {
            **heatmap.to_dict(),
            "peaks": [p.to_dict() for p in get_peak_activity_periods(heatmap, PEAK_THRESHOLD)],
        },
        "work_patterns": analyze_work_patterns(commands).to_dict(),
        "aliases": {
            **aliases.to_dict(),
            "efficiency_gain": calculate_efficiency_gain(aliases),
        },
        "experiments": {
            **experiments.to_dict(),
            "learning_score": calculate_learning_score(experiments),
        },
    }


def format_report(report: dict) -> str:
    stats = report["stats"]
    sessions = report["sessions"]
    danger = report["danger"]
    packages = report["packages"]
    network = report["network"]
    work = report["work_patterns"]
    aliases = report["aliases"]
    experiments = report["experiments"]

    lines = [
        "Commands",
        f"  total: {stats['total_commands']}  unique: {stats['unique_commands']}",
        f"  success rate: {stats['success_rate']:.0%}",
        f"  per day: {stats['commands_per_day']:.1f}",
        f"  most active: {stats['most_active_day']} {stats['most_active_hour']:02d}:00",
        "",
        "Top commands",
    ]
    for entry in stats["top_commands"]:
        lines.append(f"  {entry['count']:>5}  {entry['command']}")

    lines += [
        "",
        "Sessions",
        f"  total: {sessions['total_sessions']}",
        f"  average length: {sessions['average_session_length']:.1f} min",
        f"  productivity score: {report['productivity']['productivity_score']:.0f}/100",
        "",
        "Safety",
        f"  dangerous commands: {danger['total_dangerous']}",
        f"  high risk: {danger['high_risk_commands']}",
        f"  safety score: {danger['safety_score']:.2f}",
    ]
    lines += [f"  {r}" for r in danger["safety_recommendations"]]

    lines += [
        "",
        "Packages",
        f"  operations: {packages['total_package_operations']}",
        f"  health score: {packages['health_score']:.2f}",
    ]
    lines += [f"  {r}" for r in packages["recommendations"]]

    lines += [
        "",
        "Network",
        f"  commands: {network['total_network_commands']}  "
        f"endpoints: {network['unique_endpoints']}",
        f"  security score: {network['security_score']:.2f}",
    ]
    lines += [f"  {issue['description']}" for issue in network["security_issues"]]

    lines += [
        "",
        "Work patterns",
        f"  weekday: {work['weekday_ratio']:.0%}  weekend: {work['weekend_ratio']:.0%}",
        f"  work hours: {work['work_hours_ratio']:.0%}  "
        f"late night: {work['late_night_ratio']:.0%}",
        "",
        "Aliases",
        f"  potential savings: {aliases['potential_savings']} characters",
    ]
    for suggestion in aliases["suggestions"][:10]:
        lines.append(f"  {suggestion['suggested_alias']:<8} {suggestion['command']}")

    lines += [
        "",
        "Learning",
        f"  experimental commands: {experiments['total_experiment_commands']}",
        f"  learning score: {experiments['learning_score']:.2f}",
    ]
    lines += [f"  {r}" for r in experiments["recommendations"]]
    return "\n".join(lines) + "\n"


def default_alias_shell() -> str:
    shell = os.path.basename(os.environ.get("SHELL", ""))
    return shell if shell in ALIAS_SHELLS else "bash"


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    db = None
    if args.from_db or args.action in ("import", "search"):
        db = HistoryDB(args.db or settings.database_path)

    try:
        if args.action == "search":
            results = CommandRepository(db).search(args.text, limit=args.limit)
            if args.json:
                _print_json([c.to_dict() for c in results])
            else:
                for cmd in results:
                    print(f"{cmd.timestamp:%Y-%m-%d %H:%M}  {cmd.command}")
            return 0

        commands = load_commands(settings, db if args.from_db else None)
        if args.limit is not None:
            commands = commands[-args.limit :] if args.limit > 0 else []

        if args.action == "import":
            stored = CommandRepository(db).import_commands(commands)
            if args.json:
                _print_json({"imported": len(stored)})
            else:
                print(f"Imported {len(stored)} commands into {db.path}")
            return 0

        if args.action == "aliases":
            analysis = analyze_aliases(commands)
            if args.json:
                _print_json(analysis.to_dict())
            else:
                sys.stdout.write(
                    generate_shell_aliases(
                        analysis.suggestions, args.shell or default_alias_shell()
                    )
                )
            return 0

        report = build_report(commands, settings.danger_threshold)
        info(f"Report built from {len(commands)} commands")
        if args.json:
            _print_json(report)
        else:
            sys.stdout.write(format_report(report))
        return 0
    except HistoryReadError as e:
        error(str(e))
        print(f"whiskerlog: {e}", file=sys.stderr)
        return 1
    finally:
        if db is not None:
            db.close()


if __name__ == "__main__":
    sys.exit(main())
