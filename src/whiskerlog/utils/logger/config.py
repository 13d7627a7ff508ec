"""
Log configuration read from WHISKERLOG_* environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEBUG_ENV = "WHISKERLOG_DEBUG"
LOG_LEVEL_ENV = "WHISKERLOG_LOG_LEVEL"
LOG_CONSOLE_ENV = "WHISKERLOG_LOG_CONSOLE"
LOG_DIR_ENV = "WHISKERLOG_LOG_DIR"

# XDG state location
LOG_DIR = Path.home() / ".local" / "state" / "whiskerlog" / "logs"

HUMAN_LOG_FILE = "whiskerlog.log"
JSON_LOG_FILE = "whiskerlog.json"

LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

TRUTHY = ("1", "true", "yes")
FALSY = ("0", "false", "no")


@dataclass
class LogConfig:
    """Where logs go and how much is kept.

    Both log files rotate; `*_backup_count` rotated copies are kept next to
    the live file. The console handler is only attached when
    `console_enabled` is set.
    """

    log_dir: Path = field(default_factory=lambda: LOG_DIR)
    default_level: int = logging.INFO
    console_enabled: bool = False

    human_log_max_bytes: int = 5 * 1024 * 1024
    human_log_backup_count: int = 3
    json_log_max_bytes: int = 10 * 1024 * 1024
    json_log_backup_count: int = 2

    @property
    def human_log_path(self) -> Path:
        return self.log_dir / HUMAN_LOG_FILE

    @property
    def json_log_path(self) -> Path:
        return self.log_dir / JSON_LOG_FILE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LogConfig":
        """Build a config from the environment.

        WHISKERLOG_DEBUG turns on debug level and the console;
        WHISKERLOG_LOG_LEVEL and WHISKERLOG_LOG_CONSOLE then override either
        half. Unrecognised values are ignored.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if env.get(LOG_DIR_ENV):
            config.log_dir = Path(env[LOG_DIR_ENV]).expanduser()

        if env.get(DEBUG_ENV, "").lower() in TRUTHY:
            config.default_level = logging.DEBUG
            config.console_enabled = True

        level = env.get(LOG_LEVEL_ENV, "").lower()
        if level in LOG_LEVEL_MAP:
            config.default_level = LOG_LEVEL_MAP[level]

        console = env.get(LOG_CONSOLE_ENV, "").lower()
        if console in TRUTHY:
            config.console_enabled = True
        elif console in FALSY:
            config.console_enabled = False

        return config


def get_config() -> LogConfig:
    return LogConfig.from_env()


def ensure_log_directory(config: Optional[LogConfig] = None) -> Path:
    """Create the log directory if needed and return it."""
    log_dir = (config or LogConfig()).log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
