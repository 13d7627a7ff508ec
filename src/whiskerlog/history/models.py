"""
Data models for shell history records.

Provides:
- PackageAction: Closed vocabulary of package-manager actions
- PackageRef: One package operation found in a command
- HostKind / HostType: Parsed form of a command's host identifier
- Command: One fully enriched shell history line
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence

from ..utils.datetime import (
    ensure_utc,
    format_iso,
    from_epoch_micros,
    parse_epoch,
    parse_iso,
    to_epoch_micros,
    utc_now,
)

LOCAL_HOST = "local"
UNKNOWN_SHELL = "unknown"


class PackageAction(str, Enum):
    """Package-manager action keywords"""

    INSTALL = "install"
    REMOVE = "remove"
    UNINSTALL = "uninstall"
    UPDATE = "update"
    UPGRADE = "upgrade"

    @classmethod
    def parse(cls, value: "str | PackageAction") -> "PackageAction":
        """Map action text to a member; unknown actions count as installs."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.INSTALL

    @property
    def kind(self) -> "PackageAction":
        """Fold synonyms: uninstall -> remove, upgrade -> update."""
        if self in (PackageAction.REMOVE, PackageAction.UNINSTALL):
            return PackageAction.REMOVE
        if self in (PackageAction.UPDATE, PackageAction.UPGRADE):
            return PackageAction.UPDATE
        return PackageAction.INSTALL

    @property
    def is_install(self) -> bool:
        return self is PackageAction.INSTALL

    @property
    def is_removal(self) -> bool:
        return self.kind is PackageAction.REMOVE

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PackageRef:
    """A package operation: (manager, name, version?, action)"""

    manager: str  # "apt", "npm", "pip", "cargo", "brew"
    name: str
    version: Optional[str] = None
    action: PackageAction = PackageAction.INSTALL

    def __post_init__(self):
        object.__setattr__(self, "action", PackageAction.parse(self.action))

    def to_dict(self) -> dict:
        return {
            "manager": self.manager,
            "name": self.name,
            "version": self.version,
            "action": self.action.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PackageRef":
        return cls(
            manager=data["manager"],
            name=data["name"],
            version=data.get("version"),
            action=PackageAction.parse(data.get("action", "install")),
        )


class HostKind(Enum):
    LOCAL = "local"
    SSH = "ssh"
    DOCKER = "docker"
    KUBERNETES = "k8s"


@dataclass(frozen=True)
class HostType:
    """Parsed host identifier (e.g. "ssh:deploy@web1" -> SSH, "deploy@web1")"""

    kind: HostKind
    target: str = ""

    @property
    def is_remote(self) -> bool:
        return self.kind is not HostKind.LOCAL

    @property
    def user(self) -> Optional[str]:
        if self.kind is HostKind.SSH and "@" in self.target:
            return self.target.split("@", 1)[0]
        return None

    @property
    def host(self) -> str:
        if self.kind is HostKind.SSH and "@" in self.target:
            return self.target.split("@", 1)[1]
        return self.target

    @classmethod
    def parse(cls, host_id: str) -> "HostType":
        prefix, sep, rest = (host_id or "").partition(":")
        if sep:
            for kind in (HostKind.SSH, HostKind.DOCKER, HostKind.KUBERNETES):
                if prefix == kind.value:
                    return cls(kind=kind, target=rest)
        return cls(kind=HostKind.LOCAL, target=host_id or LOCAL_HOST)

    def __str__(self) -> str:
        if self.kind is HostKind.LOCAL:
            return LOCAL_HOST
        return f"{self.kind.value}:{self.target}"


# Column order shared by to_row()/from_row() and the storage schema
ROW_FIELDS = (
    "id",
    "command",
    "timestamp",
    "exit_code",
    "duration",
    "working_directory",
    "session_id",
    "host_id",
    "network_endpoints",
    "packages_used",
    "is_experiment",
    "experiment_tags",
    "is_dangerous",
    "danger_score",
    "danger_reasons",
    "shell",
)


# Command fields holding sequences of annotations
SEQUENCE_FIELDS = ("network_endpoints", "packages_used", "experiment_tags", "danger_reasons")


def _load_json_list(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    try:
        loaded = json.loads(value)
    except (TypeError, ValueError):
        return []
    return loaded if isinstance(loaded, list) else []


@dataclass(frozen=True)
class Command:
    """One executed shell line with all enrichment annotations.

    Created once by the enrichment pipeline and never mutated afterwards;
    use dataclasses.replace() to derive a modified copy (e.g. to attach a
    storage id).
    """

    command: str
    timestamp: datetime = field(default_factory=utc_now)
    exit_code: Optional[int] = None
    duration: Optional[int] = None  # milliseconds
    working_directory: Optional[str] = None
    session_id: str = ""
    host_id: str = LOCAL_HOST
    network_endpoints: tuple[str, ...] = ()
    packages_used: tuple[PackageRef, ...] = ()
    is_experiment: bool = False
    experiment_tags: tuple[str, ...] = ()
    is_dangerous: bool = False
    danger_score: float = 0.0
    danger_reasons: tuple[str, ...] = ()
    shell: str = UNKNOWN_SHELL
    id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        # Sequence fields are stored as tuples so a Command stays immutable
        for name in SEQUENCE_FIELDS:
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def first_word(self) -> str:
        """Leading token of the command text ("" for blank commands)."""
        parts = self.command.split()
        return parts[0] if parts else ""

    @property
    def host(self) -> HostType:
        return HostType.parse(self.host_id)

    @property
    def failed(self) -> bool:
        """Known non-zero exit code."""
        return self.exit_code is not None and self.exit_code != 0

    def with_id(self, command_id: int) -> "Command":
        return replace(self, id=command_id)

    # ===== Serialization =====

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "command": self.command,
            "timestamp": format_iso(self.timestamp),
            "exit_code": self.exit_code,
            "duration": self.duration,
            "working_directory": self.working_directory,
            "session_id": self.session_id,
            "host_id": self.host_id,
            "network_endpoints": list(self.network_endpoints),
            "packages_used": [p.to_dict() for p in self.packages_used],
            "is_experiment": self.is_experiment,
            "experiment_tags": list(self.experiment_tags),
            "is_dangerous": self.is_dangerous,
            "danger_score": self.danger_score,
            "danger_reasons": list(self.danger_reasons),
            "shell": self.shell,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Command":
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = parse_iso(timestamp)
        elif isinstance(timestamp, (int, float)):
            timestamp = parse_epoch(timestamp)
        return cls(
            id=data.get("id"),
            command=data["command"],
            timestamp=timestamp or utc_now(),
            exit_code=data.get("exit_code"),
            duration=data.get("duration"),
            working_directory=data.get("working_directory"),
            session_id=data.get("session_id", ""),
            host_id=data.get("host_id", LOCAL_HOST),
            network_endpoints=list(data.get("network_endpoints") or []),
            packages_used=[
                p if isinstance(p, PackageRef) else PackageRef.from_dict(p)
                for p in data.get("packages_used") or []
            ],
            is_experiment=bool(data.get("is_experiment", False)),
            experiment_tags=list(data.get("experiment_tags") or []),
            is_dangerous=bool(data.get("is_dangerous", False)),
            danger_score=float(data.get("danger_score", 0.0)),
            danger_reasons=list(data.get("danger_reasons") or []),
            shell=data.get("shell", UNKNOWN_SHELL),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "Command":
        return cls.from_dict(json.loads(text))

    def to_row(self) -> tuple:
        """Flat row in ROW_FIELDS order: epoch microseconds, JSON text for lists."""
        return (
            self.id,
            self.command,
            to_epoch_micros(self.timestamp),
            self.exit_code,
            self.duration,
            self.working_directory,
            self.session_id,
            self.host_id,
            json.dumps(list(self.network_endpoints)),
            json.dumps([p.to_dict() for p in self.packages_used]),
            self.is_experiment,
            json.dumps(list(self.experiment_tags)),
            self.is_dangerous,
            self.danger_score,
            json.dumps(list(self.danger_reasons)),
            self.shell,
        )

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Command":
        values = dict(zip(ROW_FIELDS, row))
        return cls(
            id=values["id"],
            command=values["command"],
            timestamp=from_epoch_micros(values["timestamp"]) or utc_now(),
            exit_code=values["exit_code"],
            duration=values["duration"],
            working_directory=values["working_directory"],
            session_id=values["session_id"] or "",
            host_id=values["host_id"] or LOCAL_HOST,
            network_endpoints=_load_json_list(values["network_endpoints"]),
            packages_used=[
                PackageRef.from_dict(p)
                for p in _load_json_list(values["packages_used"])
                if isinstance(p, dict)
            ],
            is_experiment=bool(values["is_experiment"]),
            experiment_tags=_load_json_list(values["experiment_tags"]),
            is_dangerous=bool(values["is_dangerous"]),
            danger_score=float(values["danger_score"] or 0.0),
            danger_reasons=_load_json_list(values["danger_reasons"]),
            shell=values["shell"] or UNKNOWN_SHELL,
        )


@dataclass(frozen=True)
class RawRecord:
    """Parser output before enrichment.

    `timestamp` is None when the source format carried none; enrichment
    then stamps the record with the current time.
    """

    command: str
    shell: str = UNKNOWN_SHELL
    session_id: str = ""
    timestamp: Optional[datetime] = None
    duration: Optional[int] = None  # milliseconds
    exit_code: Optional[int] = None
    working_directory: Optional[str] = None
