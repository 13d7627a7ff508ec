"""
Logging context management for Whiskerlog.

Tracks the history-parse session currently being processed so log lines
emitted by parsers and the enricher can be correlated.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


def get_session_id() -> Optional[str]:
    """Get the current session ID from context."""
    return session_id_var.get()


def set_session_id(session_id: Optional[str]) -> None:
    """Set the current session ID in context."""
    session_id_var.set(session_id)


@contextmanager
def log_context(session_id: Optional[str] = None) -> Generator[Optional[str], None, None]:
    """Context manager for setting the log session for a block.

    The previous value is restored when the context exits.

    Example:
        with log_context(session_id="zsh-1700000000"):
            logger.info("Parsing")  # Includes session in log
    """
    token = session_id_var.set(session_id) if session_id is not None else None
    try:
        yield session_id_var.get()
    finally:
        if token is not None:
            session_id_var.reset(token)


class ContextFilter(logging.Filter):
    """Logging filter that adds the session context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = session_id_var.get()
        return True
