"""BFGS quasi-Newton minimization with a backtracking line search."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Mapping, Optional

import numpy as np

from ..logging import get_logger
from .core import (
    EXIT_MESSAGES,
    Array,
    ExitStatus,
    Objective,
    OptimizeResult,
    as_objective,
    as_scalar,
)
from .line_search import backtracking_decrease
from .options import BFGSOptions, optimset
from .progress import IterationRecord, ProgressObserver, observers_for_display
from .utils import bfgs_update, norm_inf, safe_solve

logger = get_logger(__name__)


class _CountingObjective(Objective):
    """Count evaluations and check gradient shapes for one solver run."""

    def __init__(self, objective: Objective) -> None:
        self.objective = objective
        self.nfev = 0
        self.njev = 0

    def evaluate(self, x: Array) -> float:
        self.nfev += 1
        return as_scalar(self.objective.evaluate(x.copy()))

    def evaluate_with_gradient(self, x: Array) -> tuple[float, Array]:
        self.nfev += 1
        self.njev += 1
        value, grad = self.objective.evaluate_with_gradient(x.copy())
        grad = np.asarray(grad, dtype=float)
        if grad.shape != x.shape:
            raise ValueError(
                f"Gradient has shape {grad.shape}, expected {x.shape}."
            )
        return as_scalar(value), grad


def _as_vector(x0: Any) -> Array:
    x = np.array(x0, dtype=float)
    if x.ndim == 0:
        x = x.reshape(1)
    if x.ndim != 1:
        raise ValueError(f"x0 must be a 1-D vector, got shape {x.shape}")
    if x.size == 0:
        raise ValueError("x0 must have at least one component.")
    if not np.all(np.isfinite(x)):
        raise ValueError("x0 must be finite.")
    return x


def bfgs(
    objective: Objective | Callable[[Array], tuple[float, Array]],
    x0: Any,
    options: Optional[BFGSOptions | Mapping[str, Any]] = None,
    *,
    observers: Optional[Iterable[ProgressObserver]] = None,
    callback: Optional[Callable[[IterationRecord], None]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    history: bool = False,
    **overrides: Any,
) -> OptimizeResult:
    """
    Minimize a smooth function with BFGS and backtracking.

    Each iteration solves ``H p = g`` with the current Hessian approximation
    ``H`` and tries the full step ``x - p``. If that does not decrease the
    objective but both the value change and ``p`` are within tolerance, the
    current point is stationary and the run converges there. Otherwise the
    step is shrunk by ``options.backtrack`` using value-only
    evaluations until it does, or until the scale drops below
    ``options.min_step`` (``ExitStatus.STEP_UNDERFLOW``). Accepted steps
    update ``H`` with the BFGS secant formula. The run converges when the
    value change is below ``tolfun`` and the step's infinity norm is below
    ``tolx`` in the same iteration.

    Args:
        objective: An :class:`Objective`, or a callable returning
            ``(value, gradient)``.
        x0: Starting point.
        options: Solver options, or a mapping of option overrides. Defaults
            to :func:`optimset` defaults.
        observers: Progress observers. When None, observers are chosen from
            ``options.display``.
        callback: Called with each :class:`IterationRecord`.
        should_stop: Polled before each iteration; returning True ends the
            run with ``ExitStatus.NOT_CONVERGED``.
        history: Record accepted iterates in ``OptimizeResult.history``.
        **overrides: Individual options applied on top of ``options``.

    Returns:
        OptimizeResult with the last accepted point.

    Raises:
        TypeError: If ``objective`` cannot be evaluated.
        ValueError: If ``x0`` or the options are invalid, if the objective is
            not finite at ``x0``, or if a gradient has the wrong shape.
    """
    oracle = _CountingObjective(as_objective(objective))
    opts = optimset(options, **overrides)
    x = _as_vector(x0)
    if observers is None:
        reporters = observers_for_display(opts.display)
    else:
        reporters = list(observers)

    def notify(record: IterationRecord) -> None:
        for reporter in reporters:
            reporter.iteration(record)
        if callback is not None:
            callback(record)

    value, grad = oracle.evaluate_with_gradient(x)
    if not (math.isfinite(value) and np.all(np.isfinite(grad))):
        raise ValueError("Objective value and gradient must be finite at x0.")

    n = x.size
    hessian = np.eye(n)
    status = ExitStatus.NOT_CONVERGED
    message: Optional[str] = None
    nit = 0
    hist: list[Array] = [x.copy()] if history else []

    logger.info(
        "Starting BFGS: dim=%d, fval=%.6g, maxiter=%d", n, value, opts.maxiter
    )
    notify(IterationRecord(0, value, math.nan, norm_inf(grad), 0, 0.0, x.copy()))

    while status is ExitStatus.NOT_CONVERGED and nit < opts.maxiter:
        if should_stop is not None and should_stop():
            message = "Stopped by caller."
            break
        nit += 1
        x_prev = x
        grad_prev = grad
        value_prev = value

        direction = -safe_solve(hessian, grad)
        candidate = x + direction
        c_value, c_grad = oracle.evaluate_with_gradient(candidate)

        if c_value < value:
            x, value, grad = candidate, c_value, c_grad
            backtracks = 0
            step = 1.0
        elif (
            abs(c_value - value) < opts.tolfun
            and norm_inf(direction) < opts.tolx
        ):
            # full step within tolerance and no decrease: x is stationary
            status = ExitStatus.CONVERGED
            backtracks = 0
            step = 0.0
        else:
            search = backtracking_decrease(
                oracle.evaluate,
                x,
                direction,
                value,
                shrink=opts.backtrack,
                min_step=opts.min_step,
                f_full=c_value,
            )
            backtracks = search.backtracks
            step = search.step
            if search.success:
                x = search.x
                value, grad = oracle.evaluate_with_gradient(x)
            else:
                status = ExitStatus.STEP_UNDERFLOW
                logger.debug(
                    "Iteration %d: no decrease after %d backtracks", nit, backtracks
                )

        if status is ExitStatus.NOT_CONVERGED:
            dx = x - x_prev
            hessian, _ = bfgs_update(
                hessian, dx, grad - grad_prev, curvature_tol=opts.curvature_tol
            )
            if abs(value - value_prev) < opts.tolfun and norm_inf(dx) < opts.tolx:
                status = ExitStatus.CONVERGED
            if history:
                hist.append(x.copy())

        notify(
            IterationRecord(
                nit,
                value,
                value - value_prev,
                norm_inf(grad),
                backtracks,
                step,
                x.copy(),
            )
        )

    if message is None:
        message = EXIT_MESSAGES[status]
    logger.info("BFGS finished after %d iterations: %s", nit, message)

    result = OptimizeResult(
        x=x,
        fun=float(value),
        status=status,
        nit=nit,
        nfev=oracle.nfev,
        njev=oracle.njev,
        grad=grad,
        grad_norm=norm_inf(grad),
        hessian=hessian,
        message=message,
        history=hist,
    )
    for reporter in reporters:
        reporter.finish(result)
    return result


def solve(
    objective: Objective | Callable[[Array], tuple[float, Array]],
    x0: Any,
    options: Optional[BFGSOptions | Mapping[str, Any]] = None,
) -> tuple[Array, float, ExitStatus]:
    """Run :func:`bfgs` and return ``(x, value, status)``."""
    result = bfgs(objective, x0, options)
    return result.x, result.fun, result.status


__all__ = ["bfgs", "solve"]
