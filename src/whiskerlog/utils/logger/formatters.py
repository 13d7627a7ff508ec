"""
Formatters for the human-readable and JSON Lines log files.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

NAME_WIDTH = 20
LEVEL_WIDTH = 5


def record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


def shorten_name(name: str, width: int = NAME_WIDTH) -> str:
    """Fit a dotted logger name into `width` columns.

    "whiskerlog.history.parsers" -> "whiskerlog...parsers"; names that
    still do not fit are truncated with a trailing "...".
    """
    if len(name) <= width:
        return name.ljust(width)

    head, _, tail = name.partition(".")
    if tail:
        short = f"{head}...{name.rsplit('.', 1)[-1]}"
        if len(short) <= width:
            return short.ljust(width)

    return name[: width - 3] + "..."


class HumanFormatter(logging.Formatter):
    """One line per record:

        2024-01-15 14:23:45.123 | INFO  | whiskerlog.parsers   | parsers.py:42 | Parsed 120 zsh commands [session=zsh-1705328625]
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = record_time(record).strftime("%Y-%m-%d %H:%M:%S") + f".{int(record.msecs):03d}"

        message = record.getMessage()
        session_id = getattr(record, "session_id", None)
        if session_id:
            message += f" [session={session_id}]"

        line = " | ".join(
            (
                stamp,
                record.levelname.ljust(LEVEL_WIDTH),
                shorten_name(record.name),
                f"{record.filename}:{record.lineno}",
                message,
            )
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record, plus `session_id` and `exception` when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        session_id = getattr(record, "session_id", None)
        if session_id:
            entry["session_id"] = session_id

        if record.exc_info:
            exc_type, exc_value, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value is not None else None,
                "traceback": [
                    line
                    for chunk in traceback.format_exception(exc_type, exc_value, tb)
                    for line in chunk.splitlines()
                    if line.strip()
                ]
                if tb
                else [],
            }

        return json.dumps(entry, ensure_ascii=False, default=str)
