"""Backtracking line search on objective values only."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core import Array, ValueFunction


@dataclass(frozen=True)
class BacktrackResult:
    """Outcome of :func:`backtracking_decrease`.

    ``step`` is the accepted scale, or 0.0 when no trial decreased the value.
    ``x`` and ``fun`` describe the last trial point in either case.
    """

    x: Array
    fun: float
    step: float
    backtracks: int
    nfev: int

    @property
    def success(self) -> bool:
        return self.step > 0.0


def backtracking_decrease(
    f: ValueFunction,
    x: Array,
    direction: Array,
    fx: float,
    shrink: float = 0.5,
    min_step: float = 1e-12,
    f_full: Optional[float] = None,
) -> BacktrackResult:
    """
    Shrink the step along ``direction`` until the objective decreases.

    Trials are ``x + eta * direction`` with ``eta = 1, shrink, shrink**2, ...``
    and are accepted on simple decrease, ``f(trial) < fx``. Shrinking stops
    once ``eta`` is no longer above ``min_step``. Non-finite trial values
    never count as a decrease.

    Args:
        f: Value-only objective.
        x: Current point.
        direction: Search direction.
        fx: Objective value at ``x``.
        shrink: Factor in (0, 1) applied to ``eta`` per trial.
        min_step: Lower bound on ``eta``.
        f_full: Value at the full step ``x + direction`` when the caller has
            already computed it; otherwise it is evaluated here.
    """
    if not (0 < shrink < 1):
        raise ValueError("shrink must lie in (0, 1)")
    if min_step <= 0:
        raise ValueError("min_step must be positive")
    nfev = 0
    eta = 1.0
    candidate = x + direction
    if f_full is None:
        f_trial = float(f(candidate))
        nfev += 1
    else:
        f_trial = float(f_full)
    backtracks = 0
    while not f_trial < fx and eta > min_step:
        backtracks += 1
        eta *= shrink
        candidate = x + eta * direction
        f_trial = float(f(candidate))
        nfev += 1
    step = eta if f_trial < fx else 0.0
    return BacktrackResult(
        x=candidate, fun=f_trial, step=step, backtracks=backtracks, nfev=nfev
    )


__all__ = ["BacktrackResult", "backtracking_decrease"]
