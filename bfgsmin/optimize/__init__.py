"""BFGS minimization of smooth unconstrained objectives.

Example
-------
>>> import numpy as np
>>> from bfgsmin.optimize import Problem, bfgs
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, dim=2)
>>> res = bfgs(problem, np.array([-1.2, 1.0]), tolx=1e-10, tolfun=1e-14)
>>> bool(res.fun < 1e-8)
True
"""

from .core import (
    ExitStatus,
    Objective,
    OptimizeResult,
    Problem,
    ValueAndGrad,
    as_objective,
)
from .line_search import BacktrackResult, backtracking_decrease
from .options import BFGSOptions, Display, optimset
from .progress import (
    IterationRecord,
    LoggingReporter,
    ProgressObserver,
    TableReporter,
    observers_for_display,
)
from .quasi_newton import bfgs, solve
from .utils import bfgs_update, is_pos_def, norm_inf, safe_solve

__all__ = [
    "BFGSOptions",
    "BacktrackResult",
    "Display",
    "ExitStatus",
    "IterationRecord",
    "LoggingReporter",
    "Objective",
    "OptimizeResult",
    "Problem",
    "ProgressObserver",
    "TableReporter",
    "ValueAndGrad",
    "as_objective",
    "backtracking_decrease",
    "bfgs",
    "bfgs_update",
    "is_pos_def",
    "norm_inf",
    "observers_for_display",
    "optimset",
    "safe_solve",
    "solve",
]
