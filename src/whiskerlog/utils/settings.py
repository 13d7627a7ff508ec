"""
Settings management for Whiskerlog
"""

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from .logger import debug, warning

CONFIG_DIR = os.path.expanduser("~/.config/whiskerlog")
CONFIG_FILE = os.path.join(CONFIG_DIR, "settings.json")
DATA_DIR = os.path.expanduser("~/.local/share/whiskerlog")


def default_history_paths() -> dict[str, str]:
    """Default on-disk history locations keyed by shell name."""
    home = Path.home()
    return {
        "bash": str(home / ".bash_history"),
        "zsh": str(home / ".zsh_history"),
        "fish": str(home / ".local" / "share" / "fish" / "fish_history"),
    }


@dataclass
class Settings:
    """Application settings"""

    database_path: str = field(
        default_factory=lambda: os.path.join(DATA_DIR, "history.duckdb")
    )

    # Shell name -> history file path
    history_paths: dict[str, str] = field(default_factory=default_history_paths)

    # Optional YAML file extending the detector pattern tables
    patterns_path: Optional[str] = None

    # Score at or above which a command counts as high risk
    danger_threshold: float = 0.7

    experiment_detection: bool = True

    # Staleness window for cached analyzer output
    analysis_cache_seconds: int = 30

    def save(self, path: Optional[str] = None):
        """Save settings to config file"""
        target = path or CONFIG_FILE
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "w") as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        """Load settings from config file, or return defaults"""
        source = path or CONFIG_FILE
        if not os.path.exists(source):
            debug(f"No settings file at {source}, using defaults")
            return cls()

        try:
            with open(source, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            warning(f"Unreadable settings file {source}: {e}")
            return cls()

        if not isinstance(data, dict):
            warning(f"Ignoring settings file {source}: expected a JSON object")
            return cls()

        # Filter to only known fields (ignore obsolete settings)
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}

        if "history_paths" in filtered_data:
            paths = default_history_paths()
            paths.update(filtered_data["history_paths"] or {})
            filtered_data["history_paths"] = paths

        return cls(**filtered_data)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def save_settings():
    """Save the global settings"""
    if _settings is not None:
        _settings.save()
