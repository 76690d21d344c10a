"""Logging helpers for femtologging integration.

The content node layer logs through femtologging. Repositories report query
completion at DEBUG, value conversion reports absorbed parse failures at
DEBUG, and a broken version index is reported at ERROR before it raises.
The helpers below own level normalisation and percent-style formatting so
call sites pass a template and arguments only.

Examples
--------
Configure logging and emit a message:

>>> level, used_default = configure_logging("DEBUG")
>>> log_debug(get_logger(__name__), "Folded %d media rows", 12)
"""

from __future__ import annotations

import enum
import typing as typ
import warnings

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Log levels accepted by femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


DEFAULT_LOG_LEVEL = LogLevel.INFO

# Deprecated spellings still accepted from the environment.
_DEPRECATED_ALIASES: dict[str, LogLevel] = {"WARN": LogLevel.WARNING}


def normalise_level(level: str | None) -> tuple[LogLevel, bool]:
    """Resolve a configured level name.

    Parameters
    ----------
    level : str | None
        Level name in any case, surrounding whitespace allowed.

    Returns
    -------
    tuple[LogLevel, bool]
        The resolved level and whether ``DEFAULT_LOG_LEVEL`` was substituted
        for a missing or unknown name.
    """
    name = (level or "").strip().upper()
    if name in _DEPRECATED_ALIASES:
        replacement = _DEPRECATED_ALIASES[name]
        warnings.warn(
            f"Log level {name} is deprecated; use {replacement} instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return (replacement, False)
    try:
        return (LogLevel(name), False)
    except ValueError:
        return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install the femtologging root configuration at ``level``.

    Returns the effective level and whether the default was used, so callers
    can warn about an unrecognised setting once logging is live.
    """
    resolved, used_default = normalise_level(level)
    basicConfig(level=resolved, force=force)
    return (resolved, used_default)


class _SupportsLog(typ.Protocol):
    """Protocol for loggers supporting the femtologging API."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> None: ...


def log_at(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format ``template`` with ``args`` and emit it at ``level``.

    Parameters
    ----------
    logger : _SupportsLog
        Logger instance that supports the femtologging log API.
    level : LogLevel
        Level of the emitted record.
    template : str
        Percent-style format string. Used verbatim when ``args`` is empty.
    *args : object
        Arguments interpolated into the template.
    exc_info : object | None, optional
        Exception info to attach to the record.

    Raises
    ------
    TypeError
        If the template and arguments do not align for percent formatting.
    """
    message = template % args if args else template
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit a DEBUG record through ``log_at``."""
    log_at(logger, LogLevel.DEBUG, template, *args, exc_info=exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit an INFO record through ``log_at``."""
    log_at(logger, LogLevel.INFO, template, *args, exc_info=exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit a WARNING record through ``log_at``."""
    log_at(logger, LogLevel.WARNING, template, *args, exc_info=exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit an ERROR record through ``log_at``."""
    log_at(logger, LogLevel.ERROR, template, *args, exc_info=exc_info)


__all__ = (
    "DEFAULT_LOG_LEVEL",
    "LogLevel",
    "configure_logging",
    "get_logger",
    "log_at",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "normalise_level",
)
