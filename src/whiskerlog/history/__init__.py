"""
History - Shell history records

- models: Command, PackageRef and friends (imported here)
- parsers: bash / zsh / fish history file parsers
- enricher: applies every detector to a parsed record
"""

from .models import (
    Command,
    HostKind,
    HostType,
    PackageAction,
    PackageRef,
    RawRecord,
)

__all__ = [
    "Command",
    "HostKind",
    "HostType",
    "PackageAction",
    "PackageRef",
    "RawRecord",
]
