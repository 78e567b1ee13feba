"""Core interfaces shared by the solver, line search and reporters.

An objective is queried in two modes. ``evaluate`` returns the value only and
is used for rejected line-search trials; ``evaluate_with_gradient`` returns
the value together with the gradient and is used wherever a gradient is
needed. Implementations must be deterministic: both modes evaluated at the
same point return the same value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, List, Optional

import numpy as np

Array = np.ndarray
ValueFunction = Callable[[Array], float]
GradientFunction = Callable[[Array], Array]
ValueAndGradFunction = Callable[[Array], tuple[float, Array]]


def as_scalar(value: object) -> float:
    """Convert an objective value (Python number or size-1 array) to float."""
    arr = np.asarray(value, dtype=float)
    if arr.size != 1:
        raise ValueError(f"Objective must return a scalar, got shape {arr.shape}")
    return float(arr.reshape(()))


class ExitStatus(IntEnum):
    """Reason the solver stopped."""

    NOT_CONVERGED = 0
    CONVERGED = 1
    STEP_UNDERFLOW = 2


EXIT_MESSAGES = {
    ExitStatus.NOT_CONVERGED: "Maximum iterations reached.",
    ExitStatus.CONVERGED: "Function and step tolerances satisfied.",
    ExitStatus.STEP_UNDERFLOW: "Line search step fell below the minimum step size.",
}


class Objective(ABC):
    """Base class for objective oracles.

    Subclasses implement :meth:`evaluate_with_gradient`. Override
    :meth:`evaluate` when the value alone is cheaper to compute than the
    value and gradient together.
    """

    @abstractmethod
    def evaluate_with_gradient(self, x: Array) -> tuple[float, Array]:
        """Return ``(value, gradient)`` at ``x``."""

    def evaluate(self, x: Array) -> float:
        """Return the objective value at ``x``."""
        value, _ = self.evaluate_with_gradient(x)
        return value


@dataclass(frozen=True)
class Problem(Objective):
    """Objective given as separate value and gradient callables."""

    fun: ValueFunction
    grad: Optional[GradientFunction] = None
    dim: Optional[int] = None

    def __post_init__(self) -> None:
        if not callable(self.fun):
            raise TypeError(f"fun must be callable, got {type(self.fun).__name__}")
        if self.grad is None:
            raise TypeError("Problem requires a gradient callable.")
        if not callable(self.grad):
            raise TypeError(f"grad must be callable, got {type(self.grad).__name__}")

    def evaluate(self, x: Array) -> float:
        return as_scalar(self.fun(x))

    def evaluate_with_gradient(self, x: Array) -> tuple[float, Array]:
        return as_scalar(self.fun(x)), np.asarray(self.grad(x), dtype=float)


class ValueAndGrad(Objective):
    """Objective given as one callable returning ``(value, gradient)``.

    Args:
        fun_and_grad: Callable mapping ``x`` to ``(value, gradient)``.
        fun: Optional value-only callable. When omitted, value-only queries
            call ``fun_and_grad`` and discard the gradient.
    """

    def __init__(
        self,
        fun_and_grad: ValueAndGradFunction,
        fun: Optional[ValueFunction] = None,
    ) -> None:
        if not callable(fun_and_grad):
            raise TypeError(
                f"fun_and_grad must be callable, got {type(fun_and_grad).__name__}"
            )
        if fun is not None and not callable(fun):
            raise TypeError(f"fun must be callable, got {type(fun).__name__}")
        self.fun_and_grad = fun_and_grad
        self.fun = fun

    def evaluate(self, x: Array) -> float:
        if self.fun is not None:
            return as_scalar(self.fun(x))
        return self.evaluate_with_gradient(x)[0]

    def evaluate_with_gradient(self, x: Array) -> tuple[float, Array]:
        value, grad = self.fun_and_grad(x)
        return as_scalar(value), np.asarray(grad, dtype=float)


def as_objective(obj: object) -> Objective:
    """Coerce ``obj`` into an :class:`Objective`.

    Objectives pass through unchanged. A plain callable is treated as
    returning ``(value, gradient)``.

    Raises:
        TypeError: If ``obj`` is neither an Objective nor callable.
    """
    if isinstance(obj, Objective):
        return obj
    if callable(obj):
        return ValueAndGrad(obj)
    raise TypeError(
        f"objective must be an Objective or a callable, got {type(obj).__name__}"
    )


@dataclass
class OptimizeResult:
    """Result returned by :func:`bfgsmin.optimize.bfgs`.

    Attributes:
        x: Final point (last accepted iterate).
        fun: Objective value at ``x``.
        status: Terminal exit status.
        nit: Number of iterations performed.
        nfev: Total number of objective evaluations (both modes).
        njev: Number of value-and-gradient evaluations.
        grad: Gradient at ``x``.
        grad_norm: Infinity norm of ``grad``.
        hessian: Final curvature matrix.
        message: Human-readable description of ``status``.
        history: Accepted iterates, starting with ``x0``, when requested.
    """

    x: Array
    fun: float
    status: ExitStatus
    nit: int
    nfev: int
    njev: int
    grad: Array
    grad_norm: float
    hessian: Array
    message: str
    history: List[Array] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is ExitStatus.CONVERGED


__all__ = [
    "Array",
    "EXIT_MESSAGES",
    "ExitStatus",
    "GradientFunction",
    "Objective",
    "OptimizeResult",
    "Problem",
    "ValueAndGrad",
    "ValueAndGradFunction",
    "ValueFunction",
    "as_objective",
    "as_scalar",
]
