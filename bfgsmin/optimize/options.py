"""Solver options and the options provider."""

from __future__ import annotations

import dataclasses
import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class Display(str, Enum):
    """Verbosity of the default progress reporting."""

    SILENT = "silent"
    FINAL = "final"
    ITER = "iter"

    @classmethod
    def parse(cls, value: Display | str) -> Display:
        """Return the member named by ``value`` (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"display must be a string, got {type(value).__name__}")
        key = value.strip().lower()
        if key in ("off", "none"):
            return cls.SILENT
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown display level {value!r}; expected one of {choices}."
            ) from None


@dataclass(frozen=True)
class BFGSOptions:
    """
    Configuration for :func:`bfgsmin.optimize.bfgs`.

    Args:
        maxiter: Maximum number of outer iterations. Zero evaluates the
            starting point only.
        tolx: Step tolerance on the infinity norm of ``x - x_prev``.
        tolfun: Tolerance on the absolute change of the objective value.
        backtrack: Factor in (0, 1) by which the step shrinks on each
            backtracking trial.
        display: Verbosity of the default progress reporting.
        min_step: Lower bound on the step scale. The line search gives up once
            the scale falls below it.
        curvature_tol: The secant update is skipped when ``y.dx`` or
            ``dx.H.dx`` is not above this threshold.
    """

    maxiter: int = 200
    tolx: float = 1e-6
    tolfun: float = 1e-6
    backtrack: float = 0.5
    display: Display = Display.SILENT
    min_step: float = 1e-12
    curvature_tol: float = 1e-12

    def __post_init__(self) -> None:
        if isinstance(self.maxiter, bool) or not isinstance(
            self.maxiter, numbers.Integral
        ):
            raise ValueError(f"maxiter must be an integer, got {self.maxiter!r}")
        if self.maxiter < 0:
            raise ValueError("maxiter must be non-negative.")
        _check_positive("tolx", self.tolx)
        _check_positive("tolfun", self.tolfun)
        _check_positive("min_step", self.min_step)
        if not (0.0 < self.backtrack < 1.0):
            raise ValueError("backtrack must lie in (0, 1).")
        if not (math.isfinite(self.curvature_tol) and self.curvature_tol >= 0.0):
            raise ValueError("curvature_tol must be a non-negative finite number.")
        # frozen: bypass __setattr__ to normalise field types
        object.__setattr__(self, "maxiter", int(self.maxiter))
        object.__setattr__(self, "display", Display.parse(self.display))


def _check_positive(name: str, value: float) -> None:
    if not (math.isfinite(value) and value > 0.0):
        raise ValueError(f"{name} must be a positive finite number, got {value!r}")


_OPTION_NAMES = frozenset(f.name for f in dataclasses.fields(BFGSOptions))


def optimset(
    base: Optional[BFGSOptions | Mapping[str, Any]] = None, **overrides: Any
) -> BFGSOptions:
    """
    Build validated solver options.

    Starts from ``base`` (defaults when None), applies ``overrides`` and
    validates the result.

    Example:
        >>> opts = optimset(maxiter=50, display="iter")
        >>> opts.maxiter, opts.display.value
        (50, 'iter')

    Raises:
        ValueError: If an option name is unknown or a value is out of range.
    """
    if base is None:
        options = BFGSOptions()
    elif isinstance(base, BFGSOptions):
        options = base
    else:
        overrides = {**dict(base), **overrides}
        options = BFGSOptions()

    unknown = sorted(set(overrides) - _OPTION_NAMES)
    if unknown:
        raise ValueError(f"Unknown option(s): {', '.join(unknown)}")
    if not overrides:
        return options
    return dataclasses.replace(options, **overrides)


__all__ = ["BFGSOptions", "Display", "optimset"]
