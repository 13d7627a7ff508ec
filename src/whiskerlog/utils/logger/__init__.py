"""
Logging for Whiskerlog.

Two rotating files (human-readable and JSON Lines) under the log
directory, plus stderr when WHISKERLOG_DEBUG or WHISKERLOG_LOG_CONSOLE is
set. Records carry the history-parse session set with log_context().

    from whiskerlog.utils.logger import info
    info("Imported 120 commands")

    from whiskerlog.utils.logger import get_logger, log_context
    logger = get_logger("parsers")
    with log_context(session_id="bash-1700000000"):
        logger.info("Parsing bash history")
"""

import logging
from typing import Any, Optional

from .config import LogConfig, ensure_log_directory, get_config
from .context import ContextFilter, get_session_id, log_context, set_session_id
from .handlers import setup_handlers

ROOT_LOGGER_NAME = "whiskerlog"

_root_logger: Optional[logging.Logger] = None


def setup_logging(config: Optional[LogConfig] = None) -> logging.Logger:
    """Configure the whiskerlog root logger (idempotent; handlers are replaced).

    get_logger() calls this on first use; call it directly to pass a
    custom LogConfig.
    """
    global _root_logger

    config = config or get_config()
    ensure_log_directory(config)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    setup_handlers(root, config)
    if not any(isinstance(f, ContextFilter) for f in root.filters):
        root.addFilter(ContextFilter())
    root.propagate = False

    _root_logger = root
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """The root logger, or its child "whiskerlog.<name>"."""
    root = _root_logger or setup_logging()
    return root.getChild(name) if name else root


def debug(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().debug(msg, *args, **kwargs)


def info(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().info(msg, *args, **kwargs)


def warning(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().warning(msg, *args, **kwargs)


warn = warning


def error(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().error(msg, *args, **kwargs)


def exception(msg: str, *args: Any, **kwargs: Any) -> None:
    """error() with the active exception's traceback attached."""
    get_logger().exception(msg, *args, **kwargs)


__all__ = [
    "ROOT_LOGGER_NAME",
    "LogConfig",
    "ContextFilter",
    "debug",
    "info",
    "warn",
    "warning",
    "error",
    "exception",
    "get_config",
    "get_logger",
    "get_session_id",
    "log_context",
    "set_session_id",
    "setup_logging",
]
