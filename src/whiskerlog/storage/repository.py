"""
Command persistence queries.

Rows are read and written through Command.to_row() / Command.from_row(),
so the column list here must stay in ROW_FIELDS order.
"""

from typing import TYPE_CHECKING, Iterable, Optional

from ..history.models import ROW_FIELDS, Command
from ..utils.logger import debug, info

if TYPE_CHECKING:
    from .db import HistoryDB

_COLUMNS = ", ".join(ROW_FIELDS)
_INSERT_COLUMNS = ", ".join(ROW_FIELDS[1:])
_INSERT_SQL = (
    f"INSERT INTO commands ({_INSERT_COLUMNS}) "
    f"VALUES ({', '.join('?' for _ in ROW_FIELDS[1:])}) RETURNING id"
)
_NEWEST_FIRST = "ORDER BY timestamp DESC, id DESC"


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CommandRepository:
    """Reads and writes enriched commands in the history database."""

    def __init__(self, db: "HistoryDB"):
        """Initialize with a database instance.

        Args:
            db: The history database instance
        """
        self._db = db

    @property
    def _conn(self):
        """Get database connection."""
        return self._db.connect()

    def insert_command(self, command: Command) -> int:
        """Store one command; returns the id assigned by the database."""
        row = self._conn.execute(_INSERT_SQL, list(command.to_row()[1:])).fetchone()
        return row[0]

    def import_commands(self, commands: Iterable[Command]) -> list[Command]:
        """Store commands in a single transaction.

        Returns the commands carrying their assigned ids. On failure the
        transaction is rolled back and the error propagates.
        """
        conn = self._conn
        stored = []
        conn.begin()
        try:
            for command in commands:
                stored.append(command.with_id(self.insert_command(command)))
        except Exception:
            conn.rollback()
            raise
        conn.commit()

        info(f"Imported {len(stored)} commands")
        return stored

    def get_commands(self, limit: Optional[int] = None) -> list[Command]:
        """Stored commands, newest first."""
        sql = f"SELECT {_COLUMNS} FROM commands {_NEWEST_FIRST}"
        params: list = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        rows = self._conn.execute(sql, params).fetchall()
        return [Command.from_row(row) for row in rows]

    def get_commands_paginated(self, offset: int, limit: int) -> list[Command]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM commands {_NEWEST_FIRST} LIMIT ? OFFSET ?",
            [limit, offset],
        ).fetchall()
        return [Command.from_row(row) for row in rows]

    def get_command(self, command_id: int) -> Optional[Command]:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM commands WHERE id = ?", [command_id]
        ).fetchone()
        return Command.from_row(row) if row else None

    def search(self, text: str, limit: Optional[int] = None) -> list[Command]:
        """Case-insensitive substring match on command text and directory."""
        pattern = _like_pattern(text)
        sql = (
            f"SELECT {_COLUMNS} FROM commands "
            "WHERE command ILIKE ? ESCAPE '\\' OR working_directory ILIKE ? ESCAPE '\\' "
            f"{_NEWEST_FIRST}"
        )
        params: list = [pattern, pattern]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        rows = self._conn.execute(sql, params).fetchall()
        debug(f"Search '{text}' matched {len(rows)} commands")
        return [Command.from_row(row) for row in rows]

    def count(self) -> int:
        result = self._conn.execute("SELECT COUNT(*) FROM commands").fetchone()
        return result[0] if result else 0
