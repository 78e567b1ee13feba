"""Linear algebra helpers for the quasi-Newton solver.

Pure NumPy implementations; the matrices involved are small and dense.
"""

from __future__ import annotations

import numpy as np

from ..logging import get_logger
from .core import Array

logger = get_logger(__name__)


def norm_inf(vec: Array) -> float:
    """Return the infinity norm of ``vec`` (0.0 for an empty vector)."""
    if vec.size == 0:
        return 0.0
    return float(np.max(np.abs(vec)))


def is_pos_def(mat: Array, tol: float = 1e-12) -> bool:
    """Check if a matrix is positive definite via eigenvalues."""
    sym = 0.5 * (mat + mat.T)
    eigvals = np.linalg.eigvalsh(sym)
    return bool(np.all(eigvals > tol))


def safe_solve(mat: Array, vec: Array, reg: float = 1e-12) -> Array:
    """Solve linear system with ridge fallback for singular matrices."""
    try:
        return np.linalg.solve(mat, vec)
    except np.linalg.LinAlgError:
        logger.debug("Singular curvature matrix, retrying with ridge %g", reg)
        eye = np.eye(mat.shape[0], dtype=mat.dtype)
        return np.linalg.solve(mat + reg * eye, vec)


def bfgs_update(
    hessian: Array, dx: Array, y: Array, curvature_tol: float = 1e-12
) -> tuple[Array, bool]:
    """
    Apply the BFGS secant update to a Hessian approximation.

    Computes ``H + y y^T / (y^T dx) - (H dx)(H dx)^T / (dx^T H dx)``, which
    satisfies the secant equation ``H_new dx = y``.

    The update is skipped, and ``hessian`` returned unchanged, when either
    denominator is not above ``curvature_tol``. Starting from a positive
    definite matrix, this keeps every iterate positive definite.

    Returns:
        The updated matrix and whether the update was applied.
    """
    hdx = hessian @ dx
    ys = float(np.dot(y, dx))
    dhd = float(np.dot(dx, hdx))
    # NaN compares false, so non-finite curvature also skips
    if not (ys > curvature_tol and dhd > curvature_tol):
        logger.debug(
            "Skipping secant update: y.dx=%g, dx.H.dx=%g (threshold %g)",
            ys,
            dhd,
            curvature_tol,
        )
        return hessian, False
    updated = hessian + np.outer(y, y) / ys - np.outer(hdx, hdx) / dhd
    return updated, True


__all__ = ["bfgs_update", "is_pos_def", "norm_inf", "safe_solve"]
