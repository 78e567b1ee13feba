"""bfgsmin - BFGS quasi-Newton minimization with backtracking line search."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    BFGSOptions,
    Display,
    ExitStatus,
    IterationRecord,
    LoggingReporter,
    Objective,
    OptimizeResult,
    Problem,
    ProgressObserver,
    TableReporter,
    ValueAndGrad,
    bfgs,
    optimset,
    solve,
)

__all__ = [
    "__version__",
    # Solver
    "bfgs",
    "solve",
    "ExitStatus",
    "OptimizeResult",
    # Objectives
    "Objective",
    "Problem",
    "ValueAndGrad",
    # Options
    "BFGSOptions",
    "Display",
    "optimset",
    # Progress reporting
    "IterationRecord",
    "LoggingReporter",
    "ProgressObserver",
    "TableReporter",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
]
