"""
Experiment analysis - learning sessions, patterns and knowledge gaps.
"""

from collections import Counter
from datetime import timedelta
from typing import Sequence

from ..history.models import Command
from .common import argmax, first_token, group_by_session, group_by_tool, whole_minutes
from .models import (
    ExperimentAnalysis,
    ExperimentSession,
    KnowledgeGap,
    LearningPattern,
    LearningPatternType,
    Priority,
    ProgressionStep,
    ToolExploration,
)

SESSION_EXPERIMENT_RATIO = 0.3
SESSION_MIN_EXPERIMENTS = 2
TRIAL_WINDOW = 3
TRIAL_MAX_SPAN = timedelta(minutes=10)
EXPLORATIONS_LIMIT = 10
MIN_TOOL_COMMANDS = 3
MIN_TOOL_FAILURES = 3
MAX_RECOMMENDATIONS = 6

# Bare commands that are routine rather than exploration
ROUTINE_BARE_COMMANDS = frozenset({"ls", "cd", "pwd", "clear"})


def _is_help_request(command: str) -> bool:
    return (
        "--help" in command
        or "-h " in command
        or command.startswith(("man ", "tldr ", "info "))
    )


def analyze_experiments(commands: Sequence[Command]) -> ExperimentAnalysis:
    experiments = [c for c in commands if c.is_experiment]

    patterns = learning_patterns(experiments)
    explorations = tool_explorations(experiments)
    gaps = knowledge_gaps(experiments)

    return ExperimentAnalysis(
        total_experiment_commands=len(experiments),
        experiment_sessions=experiment_sessions(commands),
        learning_patterns=patterns,
        tool_exploration=explorations,
        knowledge_gaps=gaps,
        recommendations=learning_recommendations(patterns, explorations, gaps),
    )


# ===== Sessions =====


def _learning_indicators(commands: Sequence[Command]) -> list[str]:
    indicators = []

    help_count = sum(
        1
        for c in commands
        if "--help" in c.command or c.command.startswith(("man ", "tldr "))
    )
    if help_count:
        indicators.append(f"Help-seeking: {help_count} commands")

    test_count = sum(
        1 for c in commands if any(word in c.command for word in ("test", "try", "example"))
    )
    if test_count:
        indicators.append(f"Testing: {test_count} commands")

    return indicators


def experiment_sessions(commands: Sequence[Command]) -> list[ExperimentSession]:
    """Sessions where >30% and more than two commands are experimental, newest first."""
    sessions = []
    for session_id, session_commands in group_by_session(commands).items():
        experiment_count = sum(1 for c in session_commands if c.is_experiment)
        experiment_ratio = experiment_count / len(session_commands)
        if experiment_ratio <= SESSION_EXPERIMENT_RATIO or experiment_count <= SESSION_MIN_EXPERIMENTS:
            continue

        start = min(c.timestamp for c in session_commands)
        end = max(c.timestamp for c in session_commands)
        tools = Counter(
            tool for tool in (first_token(c.command) for c in session_commands) if tool
        )

        sessions.append(
            ExperimentSession(
                session_id=session_id,
                start_time=start,
                end_time=end,
                duration_minutes=whole_minutes((end - start).total_seconds()),
                command_count=len(session_commands),
                experiment_ratio=experiment_ratio,
                primary_focus=argmax(tools, "General"),
                tools_explored=sorted(tools),
                learning_indicators=_learning_indicators(session_commands),
            )
        )

    sessions.sort(key=lambda s: (s.start_time, s.session_id), reverse=True)
    return sessions


# ===== Learning patterns =====


def _are_variations(texts: Sequence[str]) -> bool:
    """Same leading tool throughout, with at least one differing command."""
    if len(texts) < 2:
        return False
    tool = first_token(texts[0])
    for text in texts[1:]:
        if first_token(text) != tool:
            return False
        if text != texts[0]:
            return True
    return False


def detect_trial_and_error(commands: Sequence[Command]) -> list[str]:
    """Tools with 3 consecutive uses inside 10 minutes that are not all identical."""
    tools = []
    for tool, sequence in group_by_tool(commands).items():
        if len(sequence) < TRIAL_WINDOW:
            continue
        for i in range(len(sequence) - TRIAL_WINDOW + 1):
            window = sequence[i : i + TRIAL_WINDOW]
            if window[-1].timestamp - window[0].timestamp > TRIAL_MAX_SPAN:
                continue
            if _are_variations([c.command for c in window]):
                tools.append(tool)
                break
    return sorted(tools)


def _help_tools(commands: Sequence[Command]) -> list[str]:
    tools = set()
    for cmd in commands:
        parts = cmd.command.split()
        if cmd.command.startswith("man ") and len(parts) > 1:
            tools.add(parts[1])
        elif "--help" in cmd.command and parts:
            tools.add(parts[0])
    return sorted(tools)


def learning_patterns(commands: Sequence[Command]) -> list[LearningPattern]:
    patterns = []

    help_count = sum(1 for c in commands if _is_help_request(c.command))
    if help_count > 5:
        patterns.append(
            LearningPattern(
                pattern_type=LearningPatternType.HELP_SEEKING,
                description=f"Frequent help command usage ({help_count} instances)",
                frequency=help_count,
                tools_involved=_help_tools(commands),
                confidence=0.9,
            )
        )

    bare = [c.command.split() for c in commands]
    bare = [parts[0] for parts in bare if len(parts) == 1]
    exploration_count = sum(1 for tool in bare if tool not in ROUTINE_BARE_COMMANDS)
    if exploration_count > 3:
        patterns.append(
            LearningPattern(
                pattern_type=LearningPatternType.TOOL_EXPLORATION,
                description=f"Tool exploration detected ({exploration_count} bare commands)",
                frequency=exploration_count,
                tools_involved=sorted(set(bare)),
                confidence=0.8,
            )
        )

    trial_tools = detect_trial_and_error(commands)
    if trial_tools:
        patterns.append(
            LearningPattern(
                pattern_type=LearningPatternType.TRIAL_AND_ERROR,
                description=f"Trial and error learning ({len(trial_tools)} command groups)",
                frequency=len(trial_tools),
                tools_involved=trial_tools,
                confidence=0.7,
            )
        )

    return patterns


# ===== Tools and gaps =====


def progression_complexity(command: str) -> int:
    """1-10 complexity used for learning progression steps."""
    words = len(command.split())
    complexity = 1
    if words > 3:
        complexity += 1
    if words > 6:
        complexity += 1
    if "|" in command:
        complexity += 2
    if ">" in command or "<" in command:
        complexity += 1
    if "--" in command or "$(" in command:
        complexity += 1
    return min(complexity, 10)


def tool_explorations(commands: Sequence[Command]) -> list[ToolExploration]:
    explorations = []
    for tool, tool_commands in group_by_tool(commands).items():
        if len(tool_commands) < MIN_TOOL_COMMANDS:
            continue

        progression = sorted(
            (
                ProgressionStep(
                    timestamp=c.timestamp,
                    command=c.command,
                    complexity_level=progression_complexity(c.command),
                    success=c.exit_code == 0,
                )
                for c in tool_commands
            ),
            key=lambda step: step.timestamp,
        )

        explorations.append(
            ToolExploration(
                tool=tool,
                exploration_commands=[c.command for c in tool_commands],
                help_commands=sum(
                    1 for c in tool_commands if "--help" in c.command or "-h" in c.command
                ),
                test_commands=sum(
                    1 for c in tool_commands if "test" in c.command or "example" in c.command
                ),
                # Unknown exit codes count as unsuccessful here
                success_rate=sum(1 for c in tool_commands if c.exit_code == 0)
                / len(tool_commands),
                learning_progression=progression,
            )
        )

    explorations.sort(key=lambda e: (-len(e.exploration_commands), e.tool))
    return explorations[:EXPLORATIONS_LIMIT]


def knowledge_gaps(commands: Sequence[Command]) -> list[KnowledgeGap]:
    """Tools with three or more failed runs."""
    failures = Counter(
        tool for tool in (first_token(c.command) for c in commands if c.failed) if tool
    )

    gaps = []
    for tool, count in sorted(failures.items(), key=lambda item: (-item[1], item[0])):
        if count < MIN_TOOL_FAILURES:
            continue
        gaps.append(
            KnowledgeGap(
                area=f"{tool} usage",
                indicators=[f"{count} failed commands"],
                suggested_resources=[
                    f"man {tool}",
                    f"{tool} --help",
                    f"Online tutorials for {tool}",
                ],
                priority=Priority.HIGH if count > 5 else Priority.MEDIUM,
            )
        )
    return gaps


def learning_recommendations(
    patterns: Sequence[LearningPattern],
    explorations: Sequence[ToolExploration],
    gaps: Sequence[KnowledgeGap],
) -> list[str]:
    recommendations = []

    for pattern in patterns:
        if pattern.pattern_type is LearningPatternType.HELP_SEEKING:
            recommendations.append(
                "📚 Great job using help resources! Consider bookmarking useful man pages"
            )
        elif pattern.pattern_type is LearningPatternType.TOOL_EXPLORATION:
            recommendations.append(
                "🔍 Your tool exploration shows curiosity! Try 'tldr' for quick examples"
            )
        elif pattern.pattern_type is LearningPatternType.TRIAL_AND_ERROR:
            recommendations.append(
                "🧪 Trial and error is valuable! Consider testing in safe environments first"
            )

    for exploration in explorations[:3]:
        if exploration.success_rate < 0.5:
            recommendations.append(
                f"💡 Struggling with {exploration.tool}? "
                "Try starting with basic examples and building up"
            )
        elif exploration.success_rate > 0.8:
            recommendations.append(
                f"🎉 You're mastering {exploration.tool}! Consider exploring advanced features"
            )

    for gap in gaps[:2]:
        if gap.priority is Priority.HIGH:
            recommendations.append(
                f"🎯 Focus on improving {gap.area} skills - high impact area"
            )

    if any(p.pattern_type is LearningPatternType.HELP_SEEKING for p in patterns):
        recommendations.append(
            "📖 Consider creating a personal cheat sheet for frequently used commands"
        )

    return recommendations[:MAX_RECOMMENDATIONS]


def calculate_learning_score(analysis: ExperimentAnalysis) -> float:
    """Volume (<= 0.4) + pattern diversity (<= 0.3) + exploration success (<= 0.3)."""
    if analysis.total_experiment_commands == 0:
        return 0.0

    score = min(analysis.total_experiment_commands / 100.0, 0.4)
    score += min(len(analysis.learning_patterns) * 0.1, 0.3)

    if analysis.tool_exploration:
        avg_success = sum(e.success_rate for e in analysis.tool_exploration) / len(
            analysis.tool_exploration
        )
        score += avg_success * 0.3

    return min(score, 1.0)
