"""Logging utilities for pydatagrid.

Boundary degradation (clamped pages, ignored filters) is logged rather than
raised.
"""

from __future__ import annotations

import logging
import sys


class _LoggerHolder:
    """Holder for the global logger instance."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the pydatagrid logger instance.

    The initial level and format are read from ``LogSettings``
    (``PYDATAGRID_LOG__LEVEL`` / ``PYDATAGRID_LOG__FORMAT``).

    Returns
    -------
    logging.Logger
        The pydatagrid logger configured with a stream handler.
    """
    if _LoggerHolder.instance is None:
        from .config import LogSettings

        log_settings = LogSettings()
        logger = logging.getLogger("pydatagrid")
        logger.setLevel(log_settings.level)

        # Only add handler if none exists
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(log_settings.format))
            logger.addHandler(handler)

        _LoggerHolder.instance = logger

    return _LoggerHolder.instance


def debug(msg: str) -> None:
    """Log a debug message.

    Parameters
    ----------
    msg : str
        The message to log.
    """
    get_logger().debug(msg)


def warn(msg: str) -> None:
    """Log a warning message. Never raises exceptions.

    Parameters
    ----------
    msg : str
        The warning message to log.
    """
    get_logger().warning(msg)


def set_level(level: int | str) -> None:
    """Change the package logger level.

    Parameters
    ----------
    level : int or str
        A ``logging`` constant or a level name such as ``"debug"``.

    Raises
    ------
    ValueError
        If ``level`` names no logging level.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            msg = f"Unknown log level: {level!r}"
            raise ValueError(msg)
        level = resolved
    get_logger().setLevel(level)


def log_callback_error(callback_name: str, exc: BaseException) -> None:
    """Log a collaborator callback error with standardized format.

    Parameters
    ----------
    callback_name : str
        The callback slot that raised (e.g. ``on_edit_commit``).
    exc : BaseException
        The exception that was raised.
    """
    get_logger().exception(f"Callback error in '{callback_name}': {exc}")


def enable_debug() -> None:
    """Show the debug output of the query pipeline and the edit session."""
    set_level(logging.DEBUG)
