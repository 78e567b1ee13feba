"""
Example: BFGS minimization with bfgsmin

Minimizes a convex quadratic, the Rosenbrock function with a per-iteration
progress table, and an objective whose gradient comes from PyTorch autograd.
"""

import numpy as np
import torch

from bfgsmin import ExitStatus, Problem, bfgs, optimset, solve
from bfgsmin.torch import TorchObjective


def example_quadratic():
    """Example: convex quadratic 0.5 x^T A x - b^T x."""
    print("=" * 60)
    print("Example 1: Convex quadratic")
    print("=" * 60)

    A = np.array([[3.0, 0.5], [0.5, 2.0]])
    b = np.array([1.0, -1.0])

    def fun_and_grad(x):
        return 0.5 * x @ (A @ x) - b @ x, A @ x - b

    x, value, status = solve(fun_and_grad, np.zeros(2))
    print(f"Status: {status.name} ({int(status)})")
    print(f"Solution: x = {x}")
    print(f"Exact:    x = {np.linalg.solve(A, b)}")
    print(f"Objective value: {value:.6g}")
    print()


def example_rosenbrock():
    """Example: Rosenbrock function with the iteration table."""
    print("=" * 60)
    print("Example 2: Rosenbrock function")
    print("=" * 60)

    def rosen(x):
        return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2

    def rosen_grad(x):
        return np.array(
            [
                -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
                200 * (x[1] - x[0] ** 2),
            ]
        )

    options = optimset(maxiter=30, display="iter")
    result = bfgs(Problem(fun=rosen, grad=rosen_grad), np.array([-1.2, 1.0]), options)
    print(f"Iterations: {result.nit}, evaluations: {result.nfev}")
    print(f"Final point: {result.x}, f = {result.fun:.6g}")
    print()


def example_torch():
    """Example: gradient supplied by autograd."""
    print("=" * 60)
    print("Example 3: PyTorch objective")
    print("=" * 60)

    center = torch.tensor([0.5, -1.5, 2.0], dtype=torch.float64)

    def log_cosh(t):
        return torch.log(torch.cosh(t - center)).sum()

    result = bfgs(TorchObjective(log_cosh), np.zeros(3), display="final")
    if result.status is ExitStatus.CONVERGED:
        print(f"Minimizer found: {result.x}")
    else:
        print(f"Stopped early: {result.message}")
    print()


if __name__ == "__main__":
    example_quadratic()
    example_rosenbrock()
    example_torch()
    print("Done.")
