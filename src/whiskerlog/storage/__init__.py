"""
Storage - DuckDB persistence for enriched commands.
"""

from .db import HistoryDB, get_db_path
from .repository import CommandRepository

__all__ = ["HistoryDB", "CommandRepository", "get_db_path"]
