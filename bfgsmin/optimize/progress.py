"""Progress reporting for the BFGS solver.

The solver notifies observers once per iteration with an
:class:`IterationRecord` and once at the end with the final result. Reporters
never influence the iteration.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Protocol, TextIO

from ..logging import get_logger
from .core import Array, OptimizeResult
from .options import Display


HEADER_FORMAT = "%7s  %15s  %15s  %15s  %10s"
ROW_FORMAT = "%7d  %15.6g  %15.6g  %15.6g  %10d"
HEADER = HEADER_FORMAT % ("Iters", "Fval", "Fval.ch", "1st-ord norm", "backtracks")


@dataclass(frozen=True)
class IterationRecord:
    """
    Diagnostics for one solver iteration.

    Args:
        iteration: Iteration index; 0 is the starting point.
        fun: Objective value after the iteration.
        fun_change: ``fun`` minus the previous value; NaN for iteration 0.
        grad_norm: Infinity norm of the current gradient.
        backtracks: Number of shrink steps taken by the line search.
        step_scale: Accepted step scale (1.0 for a full step, 0.0 when no
            step was accepted).
        x: Copy of the current point.
    """

    iteration: int
    fun: float
    fun_change: float
    grad_norm: float
    backtracks: int
    step_scale: float
    x: Array


class ProgressObserver(Protocol):
    """Protocol for objects notified of solver progress."""

    def iteration(self, record: IterationRecord) -> None:
        """Called after the starting point and after every iteration."""
        ...

    def finish(self, result: OptimizeResult) -> None:
        """Called once with the final result."""
        ...


def format_row(record: IterationRecord) -> str:
    return ROW_FORMAT % (
        record.iteration,
        record.fun,
        record.fun_change,
        record.grad_norm,
        record.backtracks,
    )


def format_final(result: OptimizeResult) -> str:
    status = result.status
    return (
        f"bfgs terminated with exit status {int(status)} "
        f"({status.name.lower()})"
    )


class TableReporter:
    """
    Print a progress table to a text stream.

    Args:
        stream: Output stream. Defaults to ``sys.stdout`` at write time.
        show_iterations: Print the header and per-iteration rows. When False
            only the final status line is written.
    """

    def __init__(
        self, stream: Optional[TextIO] = None, show_iterations: bool = True
    ) -> None:
        self.stream = stream
        self.show_iterations = show_iterations
        self._header_written = False

    def _write(self, line: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        print(line, file=stream)

    def iteration(self, record: IterationRecord) -> None:
        if not self.show_iterations:
            return
        if not self._header_written:
            self._write(HEADER)
            self._header_written = True
        self._write(format_row(record))

    def finish(self, result: OptimizeResult) -> None:
        self._write(format_final(result))


class LoggingReporter:
    """Send progress rows to a logger instead of a stream."""

    def __init__(
        self, logger: Optional[logging.Logger] = None, level: int = logging.INFO
    ) -> None:
        self.logger = logger if logger is not None else get_logger(__name__)
        self.level = level

    def iteration(self, record: IterationRecord) -> None:
        self.logger.log(
            self.level,
            "iter %d: fval=%.6g change=%.6g grad_norm=%.6g backtracks=%d",
            record.iteration,
            record.fun,
            record.fun_change,
            record.grad_norm,
            record.backtracks,
        )

    def finish(self, result: OptimizeResult) -> None:
        self.logger.log(self.level, "%s: %s", format_final(result), result.message)


def observers_for_display(
    display: Display | str, stream: Optional[TextIO] = None
) -> List[ProgressObserver]:
    """Return the default observers for a display level."""
    display = Display.parse(display)
    if display is Display.SILENT:
        return []
    if display is Display.FINAL:
        return [TableReporter(stream=stream, show_iterations=False)]
    return [TableReporter(stream=stream)]


__all__ = [
    "HEADER",
    "IterationRecord",
    "LoggingReporter",
    "ProgressObserver",
    "TableReporter",
    "format_final",
    "format_row",
    "observers_for_display",
]
