"""Tests for experiment and learning analysis."""

import pytest

from whiskerlog.analysis import analyze_experiments, calculate_learning_score
from whiskerlog.analysis.experiments import (
    detect_trial_and_error,
    experiment_sessions,
    knowledge_gaps,
    learning_patterns,
    tool_explorations,
)
from whiskerlog.analysis.models import LearningPatternType, Priority

HELP_COMMANDS = ["git --help", "docker --help", "npm --help", "kubectl --help", "jq --help", "curl --help"]


class TestAnalyzeExperiments:
    def test_empty(self):
        analysis = analyze_experiments([])
        assert analysis.total_experiment_commands == 0
        assert analysis.experiment_sessions == ()
        assert analysis.learning_patterns == ()
        assert analysis.recommendations == ()
        assert calculate_learning_score(analysis) == 0.0

    def test_only_experimental_commands_counted(self, make_command):
        commands = [make_command("man ls", 0), make_command("ls -la", 1), make_command("jq", 2)]
        assert analyze_experiments(commands).total_experiment_commands == 2

    def test_help_seeking(self, make_command):
        commands = [make_command(text, i) for i, text in enumerate(HELP_COMMANDS)]
        analysis = analyze_experiments(commands)

        [pattern] = analysis.learning_patterns
        assert pattern.pattern_type is LearningPatternType.HELP_SEEKING
        assert pattern.frequency == 6
        assert pattern.confidence == 0.9
        assert pattern.tools_involved == tuple(sorted(t.split()[0] for t in HELP_COMMANDS))
        assert analysis.recommendations[0].startswith("📚")
        assert len(analysis.recommendations) <= 6

    def test_learning_score_in_range(self, make_command):
        commands = [make_command(text, i, exit_code=0) for i, text in enumerate(HELP_COMMANDS * 3)]
        score = calculate_learning_score(analyze_experiments(commands))
        assert 0.0 < score <= 1.0


class TestExperimentSessions:
    def test_experimental_session_detected(self, make_command):
        commands = [
            make_command("man ls", 0, session_id="learn"),
            make_command("man grep", 5, session_id="learn"),
            make_command("git --help", 10, session_id="learn"),
            make_command("jq", 15, session_id="learn"),
            make_command("ls", 0, session_id="work"),
            make_command("pwd", 1, session_id="work"),
        ]
        [session] = experiment_sessions(commands)

        assert session.session_id == "learn"
        assert session.duration_minutes == 15
        assert session.experiment_ratio == 1.0
        assert session.primary_focus == "man"
        assert session.tools_explored == ("git", "jq", "man")
        assert "Help-seeking: 3 commands" in session.learning_indicators

    def test_newest_first(self, make_command):
        commands = [
            make_command("man ls", minute, session_id=session)
            for session, start in (("old", 0), ("new", 600))
            for minute in (start, start + 1, start + 2)
        ]
        assert [s.session_id for s in experiment_sessions(commands)] == ["new", "old"]

    def test_two_experiments_are_not_enough(self, make_command):
        commands = [make_command("man ls", 0), make_command("man cp", 1)]
        assert experiment_sessions(commands) == []


class TestLearningPatterns:
    def test_trial_and_error(self, make_command):
        commands = [
            make_command("ffmpeg -i a.mp4 out.gif", 0),
            make_command("ffmpeg -i a.mp4 -r 10 out.gif", 1),
            make_command("ffmpeg -i a.mp4 -r 5 out.gif", 2),
        ]
        assert detect_trial_and_error(commands) == ["ffmpeg"]

    def test_identical_repeats_are_not_trials(self, make_command):
        commands = [make_command("make test", i) for i in range(3)]
        assert detect_trial_and_error(commands) == []

    def test_slow_variations_are_not_trials(self, make_command):
        commands = [make_command(f"ffmpeg -r {i} out.gif", i * 10) for i in range(3)]
        assert detect_trial_and_error(commands) == []

    def test_tool_exploration(self, make_command):
        commands = [make_command(tool, i) for i, tool in enumerate(["jq", "ffmpeg", "docker", "kubectl"])]
        [pattern] = learning_patterns(commands)
        assert pattern.pattern_type is LearningPatternType.TOOL_EXPLORATION
        assert pattern.tools_involved == ("docker", "ffmpeg", "jq", "kubectl")


class TestToolsAndGaps:
    def test_tool_explorations(self, make_command):
        commands = [
            make_command("jq --help", 0, exit_code=0),
            make_command("jq '.a' f.json", 1, exit_code=1),
            make_command("jq '.a | length' f.json", 2),
            make_command("man jq", 3, exit_code=0),
        ]
        [exploration] = tool_explorations(commands)

        assert exploration.tool == "jq"
        assert exploration.help_commands == 1
        assert exploration.success_rate == pytest.approx(1 / 3)
        steps = exploration.learning_progression
        assert [s.success for s in steps] == [True, False, False]
        assert steps[2].complexity_level == 4

    def test_explorations_bounded(self, make_command):
        commands = [make_command(f"tool{i} --help", i * 3 + j) for i in range(12) for j in range(3)]
        assert len(tool_explorations(commands)) == 10

    @pytest.mark.parametrize("failures,priority", [(6, Priority.HIGH), (3, Priority.MEDIUM)])
    def test_knowledge_gaps(self, make_command, failures, priority):
        commands = [make_command("cargo build", i, exit_code=101) for i in range(failures)]
        [gap] = knowledge_gaps(commands)
        assert gap.area == "cargo usage"
        assert gap.priority is priority
        assert gap.indicators == (f"{failures} failed commands",)
        assert gap.suggested_resources[0] == "man cargo"

    def test_few_failures_are_not_a_gap(self, make_command):
        commands = [make_command("cargo build", i, exit_code=1) for i in range(2)]
        commands.append(make_command("cargo build", 3, exit_code=0))
        assert knowledge_gaps(commands) == []
