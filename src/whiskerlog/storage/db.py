"""
DuckDB database management for command history.

One HistoryDB owns one connection; the CLI opens it per invocation and
closes it on exit.
"""

import threading
from pathlib import Path
from typing import Optional

import duckdb

from ..utils.logger import debug, info
from ..utils.settings import get_settings

TABLES = ("commands",)


def get_db_path() -> Path:
    """Get the path to the history database from settings."""
    path = Path(get_settings().database_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class HistoryDB:
    """Manages the DuckDB database holding enriched commands."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the history database.

        Args:
            db_path: Optional path to database. Uses settings if not provided.
                ":memory:" opens an in-memory database.
        """
        self._db_path = db_path or get_db_path()
        self._conn: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return Path(self._db_path)

    def connect(self, read_only: bool = False) -> duckdb.DuckDBPyConnection:
        """Get or create a database connection (thread-safe).

        Args:
            read_only: If True, open in read-only mode (allows concurrent access)
        """
        with self._lock:
            if self._conn is None:
                if str(self._db_path) != ":memory:":
                    Path(self._db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
                self._conn = duckdb.connect(str(self._db_path), read_only=read_only)
                if not read_only:
                    self._create_schema()
            return self._conn

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "HistoryDB":
        self.connect()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _create_schema(self) -> None:
        """Create the commands table, its id sequence and indexes."""
        conn = self._conn
        if not conn:
            return

        conn.execute("CREATE SEQUENCE IF NOT EXISTS commands_id_seq START 1")

        # List columns hold JSON text; timestamp is epoch microseconds
        conn.execute("""
            CREATE TABLE IF NOT EXISTS commands (
                id BIGINT PRIMARY KEY DEFAULT nextval('commands_id_seq'),
                command VARCHAR NOT NULL,
                timestamp BIGINT NOT NULL,
                exit_code INTEGER,
                duration BIGINT,
                working_directory VARCHAR,
                session_id VARCHAR NOT NULL,
                host_id VARCHAR NOT NULL DEFAULT 'local',
                network_endpoints VARCHAR DEFAULT '[]',
                packages_used VARCHAR DEFAULT '[]',
                is_experiment BOOLEAN DEFAULT FALSE,
                experiment_tags VARCHAR DEFAULT '[]',
                is_dangerous BOOLEAN DEFAULT FALSE,
                danger_score DOUBLE DEFAULT 0.0,
                danger_reasons VARCHAR DEFAULT '[]',
                shell VARCHAR NOT NULL DEFAULT 'unknown',
                created_at TIMESTAMP DEFAULT current_timestamp
            )
        """)

        for name, column in (
            ("timestamp", "timestamp"),
            ("session", "session_id"),
            ("host", "host_id"),
            ("dangerous", "is_dangerous"),
            ("experiment", "is_experiment"),
            ("shell", "shell"),
        ):
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_commands_{name} ON commands({column})"
            )

        debug("History database schema created")

    def clear_data(self) -> None:
        """Clear all data from the database."""
        conn = self.connect()
        for table in TABLES:
            conn.execute(f"DELETE FROM {table}")
        info("History database cleared")

    def get_stats(self) -> dict:
        """Get basic stats about the database."""
        conn = self.connect()
        result = {}
        for table in TABLES:
            count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
            result[table] = count[0] if count else 0

        flagged = conn.execute(
            "SELECT COUNT(*) FILTER (WHERE is_dangerous), "
            "COUNT(*) FILTER (WHERE is_experiment) FROM commands"
        ).fetchone()
        result["dangerous"] = flagged[0] if flagged else 0
        result["experiments"] = flagged[1] if flagged else 0
        return result
