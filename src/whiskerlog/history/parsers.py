"""
History file parsers for bash, zsh and fish.

Each parse_* function turns the text of one history file into RawRecord
values. Malformed lines never raise: they fall back to "raw line as the
command, timestamp now". A missing history file is empty input; any
other I/O failure raises HistoryReadError.
"""

import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..utils.datetime import parse_epoch, to_epoch, utc_now
from ..utils.logger import get_logger, log_context
from ..utils.settings import default_history_paths
from .enricher import CommandEnricher
from .models import Command, RawRecord

logger = get_logger("parsers")

# : <epoch seconds>:<duration seconds>;<command>
ZSH_EXTENDED_LINE = re.compile(r"^: (\d+):(\d+);(.+)$")

# Bash HISTTIMEFORMAT marker preceding a command
BASH_TIMESTAMP_LINE = re.compile(r"^#(\d+)\s*$")

FISH_CMD_PREFIX = "- cmd: "
FISH_WHEN_PREFIX = "  when: "

SHELLS = ("bash", "zsh", "fish")


class HistoryReadError(OSError):
    """A history file exists but could not be read."""

    def __init__(self, shell: str, path: Union[str, Path], cause: OSError):
        self.shell = shell
        self.path = str(path)
        super().__init__(cause.errno, f"Cannot read {shell} history {path}: {cause}")


def make_session_id(shell: str, now: Optional[datetime] = None) -> str:
    """Session id unique to one parse run of one shell, e.g. "zsh-1700000000"."""
    return f"{shell}-{to_epoch(now or utc_now())}"


def parse_bash(
    text: str, session_id: Optional[str] = None, now: Optional[datetime] = None
) -> list[RawRecord]:
    """Parse bash history: one command per line.

    Blank lines and "#" lines are skipped. A "#<epoch>" line written by
    HISTTIMEFORMAT stamps the command that follows it; every other command
    gets a synthetic time, one minute apart, with the last line at `now`.
    """
    now = now or utc_now()
    session_id = session_id or make_session_id("bash", now)
    lines = text.splitlines()
    last_index = len(lines) - 1

    records = []
    pending_timestamp = None
    for line_num, line in enumerate(lines):
        if not line.strip():
            continue
        if line.startswith("#"):
            marker = BASH_TIMESTAMP_LINE.match(line)
            pending_timestamp = parse_epoch(marker.group(1)) if marker else None
            continue

        timestamp = pending_timestamp or now - timedelta(minutes=last_index - line_num)
        pending_timestamp = None
        records.append(
            RawRecord(command=line, shell="bash", session_id=session_id, timestamp=timestamp)
        )
    return records


def parse_zsh(
    text: str, session_id: Optional[str] = None, now: Optional[datetime] = None
) -> list[RawRecord]:
    """Parse zsh extended history (": <epoch>:<seconds>;<command>")."""
    now = now or utc_now()
    session_id = session_id or make_session_id("zsh", now)

    records = []
    for line in text.splitlines():
        if not line.strip():
            continue

        match = ZSH_EXTENDED_LINE.match(line)
        if match is None:
            logger.debug(f"Non-extended zsh history line: {line[:60]!r}")
            records.append(
                RawRecord(command=line, shell="zsh", session_id=session_id, timestamp=now)
            )
            continue

        records.append(
            RawRecord(
                command=match.group(3),
                shell="zsh",
                session_id=session_id,
                timestamp=parse_epoch(match.group(1)) or now,
                duration=int(match.group(2)) * 1000,
            )
        )
    return records


def parse_fish(
    text: str, session_id: Optional[str] = None, now: Optional[datetime] = None
) -> list[RawRecord]:
    """Parse fish history blocks.

    "- cmd: <text>" opens a record, "  when: <epoch>" stamps it, and a blank
    line, the next "- cmd:" or the end of the file closes it. Records with
    no usable "when" are stamped `now`.
    """
    now = now or utc_now()
    session_id = session_id or make_session_id("fish", now)

    records = []
    current_command: Optional[str] = None
    current_timestamp: Optional[datetime] = None

    def flush():
        nonlocal current_command, current_timestamp
        if current_command is not None:
            records.append(
                RawRecord(
                    command=current_command,
                    shell="fish",
                    session_id=session_id,
                    timestamp=current_timestamp or now,
                )
            )
        current_command = None
        current_timestamp = None

    for line in text.splitlines():
        if line.startswith(FISH_CMD_PREFIX):
            flush()
            current_command = line[len(FISH_CMD_PREFIX) :]
        elif line.startswith(FISH_WHEN_PREFIX):
            value = line[len(FISH_WHEN_PREFIX) :].strip()
            if value.isdigit():
                current_timestamp = parse_epoch(value)
            else:
                logger.debug(f"Ignoring fish timestamp {value!r}")
        elif not line.strip():
            flush()

    flush()
    return records


PARSERS: dict[str, Callable[..., list[RawRecord]]] = {
    "bash": parse_bash,
    "zsh": parse_zsh,
    "fish": parse_fish,
}


def read_history_file(shell: str, path: Union[str, Path]) -> Optional[str]:
    """Read a history file; None when it does not exist.

    Raises:
        HistoryReadError: the file exists but cannot be read
    """
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise HistoryReadError(shell, path, e) from e


class HistoryParser:
    """Reads, parses and enriches the history files of every shell."""

    def __init__(
        self,
        history_paths: Optional[dict[str, str]] = None,
        enricher: Optional[CommandEnricher] = None,
    ):
        self.history_paths = history_paths or default_history_paths()
        self.enricher = enricher or CommandEnricher()

    def parse_shell(self, shell: str, now: Optional[datetime] = None) -> list[Command]:
        """Parse and enrich one shell's history ([] if the file is absent)."""
        path = self.history_paths.get(shell)
        parser = PARSERS.get(shell)
        if not path or parser is None:
            return []

        text = read_history_file(shell, path)
        if text is None:
            logger.debug(f"No {shell} history at {path}")
            return []

        session_id = make_session_id(shell, now)
        with log_context(session_id=session_id):
            records = parser(text, session_id=session_id, now=now)
            commands = self.enricher.enrich_all(records)
            logger.info(f"Parsed {len(commands)} {shell} commands from {path}")
        return commands

    def parse_all(self, now: Optional[datetime] = None) -> list[Command]:
        """Every shell's commands merged and sorted by timestamp (stable)."""
        now = now or utc_now()
        commands: list[Command] = []
        for shell in SHELLS:
            commands.extend(self.parse_shell(shell, now))
        commands.sort(key=lambda c: c.timestamp)
        return commands


def parse_all_histories(
    history_paths: Optional[dict[str, str]] = None,
    enricher: Optional[CommandEnricher] = None,
) -> list[Command]:
    """Parse, enrich and time-sort the bash, zsh and fish histories."""
    return HistoryParser(history_paths, enricher).parse_all()


def parse_records(shell: str, lines: Iterable[str]) -> list[RawRecord]:
    """Parse in-memory history lines for `shell` (used by importers and tests)."""
    parser = PARSERS.get(shell)
    if parser is None:
        raise ValueError(f"Unsupported shell: {shell}")
    return parser("\n".join(lines))
