"""Logging utilities for bfgsmin.

Every module obtains its logger through :func:`get_logger` so that all solver
output shares one namespace and one handler configuration. The initial level
can be set with the ``BFGSMIN_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

_ENV_VAR = "BFGSMIN_LOG_LEVEL"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _parse_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


_DEFAULT_LEVEL = _parse_level(os.getenv(_ENV_VAR, "WARNING"))

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached to avoid duplicate handlers. The logger name should
    typically be ``__name__`` from the calling module.

    Args:
        name: Logger name (typically ``__name__``). If None, returns the
            package logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from bfgsmin.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting line search")
    """
    if name is None:
        name = "bfgsmin"

    if name == "bfgsmin" or name.startswith("bfgsmin."):
        logger_name = name
    else:
        logger_name = f"bfgsmin.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all bfgsmin loggers.

    Args:
        level: Logging level (``logging.DEBUG``, ``logging.INFO``, ...) or
            its name (``"DEBUG"``, ``"INFO"``, ...).
    """
    level = _parse_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure logging for bfgsmin.

    Replaces the handlers of every existing bfgsmin logger with a single
    stream handler. Loggers created afterwards use the new level.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses the default.
        stream: Output stream (default: ``sys.stderr``).

    Example:
        >>> import logging
        >>> from bfgsmin.logging import configure_logging
        >>> configure_logging(level=logging.INFO)
    """
    level = _parse_level(level)

    if stream is None:
        stream = sys.stderr

    formatter = logging.Formatter(format_string or _FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


__all__ = ["configure_logging", "get_logger", "set_log_level"]
