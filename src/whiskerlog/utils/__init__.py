"""Utility modules for whiskerlog."""

from .datetime import utc_now, parse_epoch, to_epoch
from .settings import Settings, get_settings

__all__ = [
    "utc_now",
    "parse_epoch",
    "to_epoch",
    "Settings",
    "get_settings",
]
