"""Call-logging interceptors.

Both interceptors report the call name and arguments before proceeding,
then the result and the elapsed time afterwards. Elapsed time is taken
with :func:`time.perf_counter_ns` and reported in milliseconds.
"""

import logging
import threading
import time
from typing import TextIO

from .constants import ELAPSED_MS
from .exceptions import BindingError
from .invocation import InvocationContext


def _elapsed_ms(started_ns: int) -> float:
    return (time.perf_counter_ns() - started_ns) / 1_000_000


class ConsoleInterceptor:
    """Writes call, arguments, result and timing lines to a text stream.

    Failures from the rest of the chain pass through untouched and no
    result line is written for them.

    Args:
        writer: Any object with ``write``; typically ``sys.stdout``.

    Raises:
        BindingError: If *writer* is ``None``.
    """

    def __init__(self, writer: TextIO):
        if writer is None:
            raise BindingError("ConsoleInterceptor requires a writer")
        self._writer = writer
        self._lock = threading.Lock()

    def _write_lines(self, *lines: str) -> None:
        with self._lock:
            for line in lines:
                self._writer.write(line + "\n")
            flush = getattr(self._writer, "flush", None)
            if flush is not None:
                flush()

    def intercept(self, ctx: InvocationContext, proceed) -> None:
        self._write_lines(f"Call: {ctx.qualified_name}", f"Args: {ctx.args_display}")

        started = time.perf_counter_ns()
        proceed()
        elapsed = _elapsed_ms(started)
        ctx.local[ELAPSED_MS] = elapsed

        self._write_lines(
            f"Done: result was {ctx.return_value}",
            f"Execution Time: {elapsed:.3f} ms.",
            "",
        )


class LoggingInterceptor:
    """Writes the call trace to a :class:`logging.Logger`.

    Call, arguments and result go out at INFO, execution time at DEBUG.
    A failure is logged once at ERROR and re-raised unchanged.

    Args:
        logger: The destination logger (see
            :func:`aoplog.log_setup.configure_logging`).

    Raises:
        BindingError: If *logger* is ``None``.
    """

    def __init__(self, logger: logging.Logger):
        if logger is None:
            raise BindingError("LoggingInterceptor requires a logger")
        self._logger = logger

    def intercept(self, ctx: InvocationContext, proceed) -> None:
        self._logger.info("Call: %s", ctx.qualified_name)
        self._logger.info("Args: %s", ctx.args_display)

        started = time.perf_counter_ns()
        try:
            proceed()
        except Exception as e:
            self._logger.error("%s", e)
            raise
        elapsed = _elapsed_ms(started)
        ctx.local[ELAPSED_MS] = elapsed

        self._logger.info("Done: result was %s", ctx.return_value)
        self._logger.debug("Execution Time: %.3f ms.", elapsed)
