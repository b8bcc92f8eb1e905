"""
Example: Unconstrained descent methods on an ill-conditioned problem

Compares gradient descent, BFGS and Newton on the Rosenbrock function, and
shows how the line search changes the cost of a single step on a badly scaled
quadratic.
"""

import numpy as np

from minimizers import (
    BFGS,
    BackTracking,
    Evaluation,
    GradientDescent,
    MoreThuente,
    Newton,
    SolverError,
)


def rosenbrock(x):
    f = (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2
    g = np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )
    h = np.array(
        [
            [2 - 400 * (x[1] - 3 * x[0] ** 2), -400 * x[0]],
            [-400 * x[0], 200.0],
        ]
    )
    return Evaluation(f=f, g=g, hessian=h)


def example_solver_comparison():
    """Example: Same problem, three directions."""
    print("=" * 60)
    print("Example 1: Rosenbrock from (-1.2, 1.0)")
    print("=" * 60)

    x0 = np.array([-1.2, 1.0])
    for name, solver in [
        ("gradient descent", GradientDescent(1e-6, x0)),
        ("BFGS", BFGS(1e-8, x0)),
        ("Newton", Newton(1e-10, x0)),
    ]:
        try:
            res = solver.minimize(MoreThuente(), rosenbrock, 500, 50)
            print(f"{name:>16}: x = {res.x}, iterations = {res.nit}, evaluations = {res.nfev}")
        except SolverError as err:
            res = err.result
            print(f"{name:>16}: stopped at x = {res.x} after {res.nit} iterations")
    print()


def example_line_search_cost():
    """Example: Trial evaluations per line search on a badly scaled quadratic."""
    print("=" * 60)
    print("Example 2: One step on 0.5 * (x^2 + 1222 y^2)")
    print("=" * 60)

    scale = np.array([1.0, 1222.0])
    calls = {"count": 0}

    def oracle(x):
        calls["count"] += 1
        return 0.5 * float(x @ (scale * x)), scale * x

    x = np.array([1.0, 1.0])
    f0, g0 = oracle(x)
    for name, search in [("backtracking", BackTracking()), ("More-Thuente", MoreThuente())]:
        calls["count"] = 0
        t = search.compute_step_len(x, Evaluation(f0, g0), -g0, oracle, 50)
        print(f"{name:>16}: step = {t:.3e}, trial evaluations = {calls['count']}")
    print()


if __name__ == "__main__":
    example_solver_comparison()
    example_line_search_cost()
    print("Done.")
