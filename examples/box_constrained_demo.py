"""
Example: Box-constrained minimization

Runs the spectral projected gradient method and the bounded BFGS variant on
problems whose minimizer is either inside the box or pinned to its boundary.
"""

import numpy as np

from minimizers import LineSearchConfig, SolverConfig, minimize


def radial_exp(x):
    r2 = float(x @ x)
    return r2 + np.exp(r2), 2 * x * (1 + np.exp(r2))


def shifted_bowl(x):
    target = np.array([2.0, -0.5])
    diff = x - target
    return float(diff @ diff), 2 * diff


def example_spg():
    """Example: SPG with the non-monotone GLL line search."""
    print("=" * 60)
    print("Example 1: SPG on x^2 + y^2 + exp(x^2 + y^2) in [-1, 1]^2")
    print("=" * 60)

    config = SolverConfig(
        method="spg",
        max_iter_solver=100,
        line_search=LineSearchConfig(name="gll", m=10),
        lower=(-1.0, -1.0),
        upper=(1.0, 1.0),
    )
    res = minimize(radial_exp, np.array([0.5, 0.5]), config)
    print(f"Status: {res.status}")
    print(f"Solution: x = {res.x}")
    print(f"Projected gradient norm: {res.grad_norm:.2e}")
    print(f"Iterations: {res.nit}")
    print()


def example_active_bound():
    """Example: Minimizer outside the box."""
    print("=" * 60)
    print("Example 2: BFGS-B with the unconstrained minimizer outside [0, 1]^2")
    print("=" * 60)

    config = SolverConfig(
        method="bfgs_b",
        tol=1e-8,
        line_search=LineSearchConfig(name="backtracking_b"),
        lower=(0.0, 0.0),
        upper=(1.0, 1.0),
    )
    res = minimize(shifted_bowl, np.array([0.5, 0.5]), config)
    print(f"Status: {res.status}")
    print(f"Solution: x = {res.x}")
    print(f"Objective: {res.fun}")
    print()


if __name__ == "__main__":
    example_spg()
    example_active_bound()
    print("Done.")
