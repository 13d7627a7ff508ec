"""
Pytest configuration and shared fixtures for whiskerlog tests.

This module provides:
- An isolated log directory (set before whiskerlog is imported)
- Command factories with a fixed reference time
- History file fixtures for the parsers
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

# Loggers are configured on first import; keep test runs out of ~/.local
os.environ.setdefault("WHISKERLOG_LOG_DIR", tempfile.mkdtemp(prefix="whiskerlog-logs-"))

from whiskerlog.history.enricher import CommandEnricher  # noqa: E402
from whiskerlog.history.models import Command  # noqa: E402
from whiskerlog.utils import settings as settings_module  # noqa: E402

# Monday 2024-01-15 10:00 UTC
BASE_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def enricher() -> CommandEnricher:
    return CommandEnricher()


@pytest.fixture
def make_command(enricher: CommandEnricher) -> Callable[..., Command]:
    """Factory for enriched commands.

    `minutes` offsets the timestamp from BASE_TIME. Pass enrich=False to
    keep detector fields exactly as given.
    """

    def factory(
        command: str,
        minutes: float = 0,
        session_id: str = "s1",
        shell: str = "zsh",
        enrich: bool = True,
        **fields,
    ) -> Command:
        cmd = Command(
            command=command,
            timestamp=BASE_TIME + timedelta(minutes=minutes),
            session_id=session_id,
            shell=shell,
            **fields,
        )
        return enricher.enrich(cmd) if enrich else cmd

    return factory


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    """Directory holding one history file per shell."""
    (tmp_path / "bash_history").write_text("ls -la\ncd /tmp\nrm -rf /\n")
    (tmp_path / "zsh_history").write_text(
        ": 1700000000:5;git status\n"
        ": 1700000060:0;npm install react@18.2.0\n"
    )
    (tmp_path / "fish_history").write_text(
        "- cmd: man grep\n  when: 1700000030\n\n- cmd: curl https://api.github.com\n  when: 1700000090\n"
    )
    return tmp_path


@pytest.fixture
def history_paths(history_dir: Path) -> dict[str, str]:
    return {
        "bash": str(history_dir / "bash_history"),
        "zsh": str(history_dir / "zsh_history"),
        "fish": str(history_dir / "fish_history"),
    }


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Never read or cache the user's real settings file."""
    monkeypatch.setattr(settings_module, "_settings", None)
    monkeypatch.setattr(settings_module, "CONFIG_FILE", str(tmp_path / "config" / "settings.json"))
