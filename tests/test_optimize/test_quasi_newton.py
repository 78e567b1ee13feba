import numpy as np
import pytest

from bfgsmin.optimize import (
    BFGSOptions,
    ExitStatus,
    Objective,
    Problem,
    ValueAndGrad,
    bfgs,
    is_pos_def,
    optimset,
    solve,
)


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def shifted_parabola() -> Problem:
    return Problem(
        fun=lambda x: float((x[0] - 3.0) ** 2), grad=lambda x: 2 * (x - 3.0)
    )


def quadratic_problem(A: np.ndarray, b: np.ndarray) -> Problem:
    def fun(x: np.ndarray) -> float:
        return 0.5 * x @ (A @ x) - b @ x

    def grad(x: np.ndarray) -> np.ndarray:
        return A @ x - b

    return Problem(fun=fun, grad=grad, dim=b.size)


class CountingProblem(Objective):
    """Records every query so tests can check the evaluation sequence."""

    def __init__(self, fun, grad):
        self.fun = fun
        self.grad = grad
        self.calls: list[str] = []

    def evaluate(self, x):
        self.calls.append("value")
        return float(self.fun(x))

    def evaluate_with_gradient(self, x):
        self.calls.append("value_and_grad")
        return float(self.fun(x)), self.grad(x)


def test_shifted_parabola_scenario():
    problem = shifted_parabola()
    res = bfgs(problem, 0.0, tolx=1e-6, tolfun=1e-6, maxiter=50)
    assert res.status is ExitStatus.CONVERGED
    assert res.success
    assert abs(res.x[0] - 3.0) < 1e-5
    assert res.nit <= 5


def test_quadratic_identity_converges_within_two_d_iterations():
    A = np.eye(2)
    b = np.array([3.0, -1.0])
    res = bfgs(quadratic_problem(A, b), np.zeros(2), tolx=1e-8, tolfun=1e-8)
    assert res.status is ExitStatus.CONVERGED
    assert res.nit <= 2 * b.size
    assert np.max(np.abs(res.x - np.linalg.solve(A, b))) < 1e-6


def test_quadratic_general_spd_converges():
    A = np.array([[2.0, 0.2], [0.2, 3.0]])
    b = np.array([1.0, 1.0])
    res = bfgs(quadratic_problem(A, b), np.zeros(2), tolx=1e-6, tolfun=1e-10)
    assert res.status is ExitStatus.CONVERGED
    assert np.allclose(res.x, np.linalg.solve(A, b), atol=1e-5)


def test_zero_budget_returns_starting_point():
    objective = CountingProblem(rosenbrock, rosenbrock_grad)
    x0 = np.array([-1.2, 1.0])
    res = bfgs(objective, x0, maxiter=0)
    assert res.status is ExitStatus.NOT_CONVERGED
    assert res.nit == 0
    assert np.array_equal(res.x, x0)
    assert res.fun == rosenbrock(x0)
    assert objective.calls == ["value_and_grad"]
    assert res.nfev == 1 and res.njev == 1


def test_starting_point_is_not_mutated():
    x0 = np.array([-1.2, 1.0])
    bfgs(Problem(fun=rosenbrock, grad=rosenbrock_grad), x0, maxiter=5)
    assert np.array_equal(x0, np.array([-1.2, 1.0]))


def test_monotonic_decrease_on_rosenbrock():
    records = []
    res = bfgs(
        Problem(fun=rosenbrock, grad=rosenbrock_grad),
        np.array([-1.2, 1.0]),
        maxiter=100,
        callback=records.append,
    )
    values = [record.fun for record in records]
    assert records[0].iteration == 0
    assert np.isnan(records[0].fun_change)
    assert all(b <= a for a, b in zip(values, values[1:]))
    for record in records[1:]:
        if record.step_scale > 0:
            assert record.fun_change < 0
    assert res.fun < rosenbrock(np.array([-1.2, 1.0]))
    assert res.fun == values[-1]


def test_backtracking_engages_when_full_step_overshoots():
    A = np.diag([2.0, 5.0])
    problem = quadratic_problem(A, np.zeros(2))
    records = []
    res = bfgs(problem, np.array([1.0, 1.0]), maxiter=1, callback=records.append)
    first = records[1]
    assert first.backtracks == 2
    assert first.step_scale == pytest.approx(0.5**2)
    assert first.step_scale < 1.0
    assert np.allclose(res.x, np.array([0.5, -0.25]))


def test_backtracking_uses_value_only_trials():
    A = np.diag([2.0, 5.0])
    problem = quadratic_problem(A, np.zeros(2))
    objective = CountingProblem(problem.fun, problem.grad)
    res = bfgs(objective, np.array([1.0, 1.0]), maxiter=1)
    # initial point, rejected full step, two shrunk trials, accepted point
    assert objective.calls == [
        "value_and_grad",
        "value_and_grad",
        "value",
        "value",
        "value_and_grad",
    ]
    assert res.nfev == 5
    assert res.njev == 3


def test_step_underflow_keeps_last_accepted_point():
    # the reported gradient points uphill, so no step along -H^{-1} g helps
    problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: -2 * x)
    x0 = np.array([1.0, 2.0])
    records = []
    res = bfgs(problem, x0, callback=records.append)
    assert res.status is ExitStatus.STEP_UNDERFLOW
    assert not res.success
    assert res.nit == 1
    assert np.array_equal(res.x, x0)
    assert res.fun == 5.0
    assert np.array_equal(res.hessian, np.eye(2))
    assert records[-1].backtracks == 40
    assert records[-1].step_scale == 0.0
    assert res.nfev == 2 + 40


def test_step_underflow_respects_min_step():
    problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: -2 * x)
    records = []
    res = bfgs(problem, np.array([1.0]), min_step=1e-3, callback=records.append)
    assert res.status is ExitStatus.STEP_UNDERFLOW
    # 0.5**10 < 1e-3 < 0.5**9
    assert records[-1].backtracks == 10


def test_hessian_update_matches_manual_secant_update():
    A = np.diag([2.0, 5.0])
    problem = quadratic_problem(A, np.zeros(2))
    x0 = np.array([1.0, 1.0])
    res = bfgs(problem, x0, maxiter=1)
    dx = res.x - x0
    y = problem.grad(res.x) - problem.grad(x0)
    H = np.eye(2)
    Hdx = H @ dx
    expected = H + np.outer(y, y) / (y @ dx) - np.outer(Hdx, Hdx) / (dx @ Hdx)
    assert np.allclose(res.hessian, expected, atol=1e-12)
    assert np.allclose(res.hessian @ dx, y, atol=1e-12)
    assert is_pos_def(res.hessian)


def test_hessian_recovered_exactly_in_one_dimension():
    problem = shifted_parabola()
    res = bfgs(problem, np.array([0.0]), maxiter=1)
    assert np.allclose(res.hessian, np.array([[2.0]]))


def test_negative_curvature_update_is_skipped():
    # concave region: y.dx < 0 for the first step
    def fun(x):
        return float(-np.cos(x[0]))

    def grad(x):
        return np.array([np.sin(x[0])])

    x0 = np.array([2.5])
    res = bfgs(Problem(fun=fun, grad=grad), x0, maxiter=1)
    dx = res.x - x0
    y = grad(res.x) - grad(x0)
    assert float(y @ dx) < 0
    assert np.array_equal(res.hessian, np.eye(1))
    assert res.fun < fun(x0)


def test_smooth_convex_function_converges():
    c = np.array([1.0, -0.5, 0.25])

    def fun(x):
        return float(np.sum(np.cosh(x - c)))

    def grad(x):
        return np.sinh(x - c)

    res = bfgs(Problem(fun=fun, grad=grad), np.zeros(3), tolx=1e-6, tolfun=1e-10)
    assert res.status is ExitStatus.CONVERGED
    assert np.allclose(res.x, c, atol=1e-5)


def test_value_and_grad_callable_is_accepted():
    def fg(x):
        return float((x[0] - 3.0) ** 2), 2 * (x - 3.0)

    x, value, status = solve(fg, [0.0], optimset(tolx=1e-6, tolfun=1e-6))
    assert status is ExitStatus.CONVERGED
    assert abs(x[0] - 3.0) < 1e-5
    assert value < 1e-10


def test_solve_uses_default_options():
    x, value, status = solve(
        ValueAndGrad(lambda x: (float(x @ x), 2 * x)), np.array([1.0, -2.0])
    )
    assert status is ExitStatus.CONVERGED
    assert np.allclose(x, 0.0)
    assert value == pytest.approx(0.0)


def test_options_mapping_and_overrides():
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad)
    res = bfgs(problem, np.array([-1.2, 1.0]), {"maxiter": 3}, backtrack=0.3)
    assert res.nit == 3


def test_history_records_accepted_points():
    problem = shifted_parabola()
    res = bfgs(problem, [0.0], history=True)
    assert np.array_equal(res.history[0], np.array([0.0]))
    assert np.array_equal(res.history[-1], res.x)
    assert len(res.history) >= 2


def test_should_stop_ends_run_early():
    calls = []

    def stop():
        calls.append(1)
        return len(calls) > 2

    res = bfgs(
        Problem(fun=rosenbrock, grad=rosenbrock_grad),
        np.array([-1.2, 1.0]),
        should_stop=stop,
    )
    assert res.status is ExitStatus.NOT_CONVERGED
    assert res.nit == 2
    assert res.message == "Stopped by caller."


def test_maxiter_exhaustion_is_not_an_error():
    res = bfgs(
        Problem(fun=rosenbrock, grad=rosenbrock_grad),
        np.array([-1.2, 1.0]),
        BFGSOptions(maxiter=2),
    )
    assert res.status is ExitStatus.NOT_CONVERGED
    assert res.nit == 2
    assert res.message == "Maximum iterations reached."


def test_non_finite_trial_values_are_rejected():
    def fun(x):
        if x[0] > 1.5:
            return float("nan")
        return float((x[0] - 1.0) ** 2)

    def grad(x):
        return 2 * (x - 1.0)

    records = []
    res = bfgs(
        Problem(fun=fun, grad=grad), [-2.0], maxiter=1, callback=records.append
    )
    # full step lands on x = 4 (nan); the first shrink lands on the minimizer
    assert records[1].backtracks == 1
    assert res.x[0] == pytest.approx(1.0)


def test_invalid_objective_raises_type_error():
    with pytest.raises(TypeError):
        bfgs(42, np.zeros(2))


def test_problem_without_gradient_raises_type_error():
    with pytest.raises(TypeError):
        bfgs(Problem(fun=rosenbrock), np.zeros(2))


def test_invalid_starting_point_raises():
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad)
    with pytest.raises(ValueError):
        bfgs(problem, np.zeros((2, 2)))
    with pytest.raises(ValueError):
        bfgs(problem, np.array([np.nan, 1.0]))
    with pytest.raises(ValueError):
        bfgs(problem, np.array([]))


def test_wrong_gradient_shape_raises():
    problem = Problem(fun=rosenbrock, grad=lambda x: np.zeros(3))
    with pytest.raises(ValueError):
        bfgs(problem, np.zeros(2))


def test_non_finite_start_raises():
    problem = Problem(fun=lambda x: float("inf"), grad=lambda x: np.zeros_like(x))
    with pytest.raises(ValueError):
        bfgs(problem, np.zeros(2))


def test_oracle_exceptions_propagate():
    def fun(x):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        bfgs(Problem(fun=fun, grad=lambda x: x), np.zeros(1))
