"""Tests for YAML extensions of the detector tables."""

from pathlib import Path

import pytest

from whiskerlog.detectors import assess_danger, default_tables, detect_experiment
from whiskerlog.detectors.registry import PatternRegistry, load_tables


def write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "patterns.yaml"
    path.write_text(text)
    return path


class TestLoadTables:
    def test_no_path_returns_builtin_tables(self):
        assert load_tables() is default_tables()
        assert load_tables("") is default_tables()

    def test_missing_file_keeps_builtin_tables(self, tmp_path):
        tables = load_tables(tmp_path / "absent.yaml")
        assert tables == default_tables()

    def test_extends_tables(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """
danger_patterns:
  - regex: "git\\\\s+push\\\\s+--force"
    score: 0.6
    reason: "Force push"
risky_commands:
  - command: shred
    score: 0.7
    reason: "Secure file deletion"
learning_commands: [cheat]
exploration_tools: [fzf]
""",
        )
        tables = load_tables(path)

        assert len(tables.danger_patterns) == len(default_tables().danger_patterns) + 1
        result = assess_danger("git push --force origin main", tables)
        assert (result.score, result.reasons) == (0.6, ["Force push"])
        assert assess_danger("shred secrets.txt", tables).reasons == ["Secure file deletion"]
        assert detect_experiment("cheat tar", tables).tags == ["learning"]
        assert detect_experiment("fzf", tables).tags == ["tool-exploration"]

    def test_builtin_tables_untouched(self, tmp_path):
        path = write_yaml(tmp_path, "risky_commands:\n  - {command: shred, score: 0.7, reason: x}\n")
        load_tables(path)
        assert assess_danger("shred file").score == 0.0

    def test_empty_file(self, tmp_path):
        assert load_tables(write_yaml(tmp_path, "")) == default_tables()


class TestInvalidPatterns:
    @pytest.mark.parametrize(
        "text,message",
        [
            ("danger_patterns:\n  - {regex: 'rm (', score: 0.5, reason: x}\n", "Invalid regex"),
            ("danger_patterns:\n  - {regex: rm, score: 1.5, reason: x}\n", "Score"),
            ("danger_patterns:\n  - {regex: rm, score: high, reason: x}\n", "Score"),
            ("danger_patterns:\n  - {regex: rm, score: 0.5}\n", "Malformed"),
            ("risky_commands:\n  - {command: 'rm -rf', score: 0.5, reason: x}\n", "single word"),
            ("danger_patterns: rm\n", "must be a list"),
            ("- just\n- a list\n", "mapping"),
            ("help_patterns: ['(']\n", "Invalid regex"),
        ],
    )
    def test_raises_value_error(self, tmp_path, text, message):
        path = write_yaml(tmp_path, text)
        with pytest.raises(ValueError, match=message):
            load_tables(path)

    def test_registry_load_can_be_repeated(self, tmp_path):
        path = write_yaml(tmp_path, "learning_commands: [cheat]\n")
        registry = PatternRegistry(path)
        registry.load()
        assert "cheat" in registry.tables.learning_commands
