"""Constants used throughout aoplog.

This module defines the framework logger, the sentinel marking an unset
return value, and the well-known keys interceptors store in
:attr:`InvocationContext.local <aoplog.invocation.InvocationContext.local>`.
"""

import logging

LOGGER_NAME: str = "aoplog"
"""Default logger name for aoplog internal diagnostics."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Logger instance for aoplog internal diagnostics."""

CALLS_LOGGER_NAME: str = "aoplog.calls"
"""Logger name used for the structured call log written by interceptors."""

ELAPSED_MS: str = "elapsed_ms"
"""Key under which timing interceptors publish the elapsed milliseconds."""


class _NoValue:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return "NO_VALUE"


NO_VALUE = _NoValue()
"""Sentinel for a return value that has not been written yet."""
