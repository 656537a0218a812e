"""Logging utilities for containerd mirror setup.

This module provides standardized logging functionality for the setup steps.
Every record carries the step it belongs to as ``event`` so handlers can
group or style output per step.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict

# Type for log callback functions
LogCallback = Callable[[int, str, Dict[str, Any]], None]

LOGGER_NAMESPACE = "containerd_mirror"


class LogLevel(int, Enum):
    """Log levels for mirror setup."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for mirror setup logging."""

    PREFLIGHT = "preflight"
    CONFIG_PATCH = "config_patch"
    CLIENT_CONFIG = "client_config"
    SERVICE = "service"
    VERIFY = "verify"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace.

    Args:
        name: Short logger name, e.g. ``"patcher"``

    Returns:
        Logger named ``containerd_mirror.<name>``
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_logger = get_logger("events")


def _log(
    callback: LogCallback,
    level: LogLevel,
    event: LogEvent,
    data: Dict[str, Any],
) -> None:
    """Log an event with the provided callback.

    Args:
        callback: Function to call with the log data
        level: Severity level
        event: Event type
        data: Dictionary of event data
    """
    try:
        callback(level, event.value, data)
    except Exception as e:
        # Fallback to standard logging if callback fails
        logging.error(
            f"Logging callback failed with error: {e}. Original log: "
            f"level={level}, event={event}, data={data}"
        )


def _emit(level: LogLevel, event: LogEvent, message: str, data: Dict[str, Any]) -> None:
    def _callback(lvl: int, evt: str, payload: Dict[str, Any]) -> None:
        _logger.log(lvl, message, extra={"event": evt, "data": payload})

    _log(_callback, level, event, data)


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level event."""
    _emit(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level event."""
    _emit(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level event."""
    _emit(LogLevel.WARNING, event, message, data)
