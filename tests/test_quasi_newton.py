import numpy as np
import pytest

from minimizers import (
    BFGS,
    BFGSB,
    DFP,
    DFPB,
    SR1,
    SR1B,
    BackTracking,
    BackTrackingB,
    Broyden,
    BroydenB,
    Evaluation,
    MoreThuente,
)
from minimizers.quasi_newton import bfgs_update, broyden_update, dfp_update, sr1_update


def diagonal_quadratic(x: np.ndarray):
    weights = np.array([1.0, 4.0])
    return 0.5 * float(np.sum(weights * x**2)), weights * x


def rosenbrock(x: np.ndarray):
    f = (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2
    g = np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )
    return f, g


def coupled(x: np.ndarray):
    f = x[0] ** 2 + 2 * x[1] ** 2 + x[0] * x[1]
    return f, np.array([2 * x[0] + x[1], 4 * x[1] + x[0]])


@pytest.mark.parametrize("cls", [BFGS, DFP, SR1, Broyden])
def test_unbounded_variants_on_quadratic(cls):
    solver = cls(1e-8, np.array([1.0, 1.0]))
    res = solver.minimize(BackTracking(), diagonal_quadratic, 500, 50)
    assert res.success
    assert np.allclose(res.x, 0.0, atol=1e-6)


@pytest.mark.parametrize("cls", [BFGSB, DFPB, SR1B, BroydenB])
def test_bounded_variants_with_interior_minimizer(cls):
    lower = -5 * np.ones(2)
    upper = 5 * np.ones(2)
    solver = cls(1e-8, np.array([1.0, 1.0]), lower, upper)
    res = solver.minimize(BackTrackingB(lower, upper), diagonal_quadratic, 500, 50)
    assert res.success
    assert np.allclose(res.x, 0.0, atol=1e-6)


def test_bfgs_reaches_rosenbrock_minimum():
    solver = BFGS(1e-8, np.array([-1.2, 1.0]))
    res = solver.minimize(MoreThuente(), rosenbrock, 1000, 50)
    assert res.success
    assert np.allclose(res.x, np.ones(2), atol=1e-5)


def test_bfgsb_on_coupled_quadratic_in_box():
    lower = np.zeros(2)
    upper = 2 * np.ones(2)
    solver = BFGSB(1e-6, np.array([0.5, 0.5]), lower, upper)
    res = solver.minimize(BackTrackingB(lower, upper), coupled, 100, 50)
    assert res.success
    assert res.nit <= 100
    assert np.allclose(res.x, 0.0)
    assert res.grad_norm < 1e-6


def test_bfgsb_active_bound():
    # unconstrained minimizer (-1, 0) lies outside the box
    def shifted(x):
        return float((x[0] + 1) ** 2 + x[1] ** 2), np.array([2 * (x[0] + 1), 2 * x[1]])

    lower = np.zeros(2)
    upper = np.ones(2)
    solver = BFGSB(1e-8, np.array([0.7, 0.4]), lower, upper)
    res = solver.minimize(BackTrackingB(lower, upper), shifted, 100, 50)
    assert res.success
    assert np.allclose(res.x, 0.0, atol=1e-8)


def test_bfgs_inverse_hessian_stays_symmetric():
    solver = BFGS(1e-8, np.array([-1.2, 1.0]))
    solver.minimize(MoreThuente(), rosenbrock, 1000, 50)
    approx = solver.approx_inv_hessian
    assert np.array_equal(approx, approx.T)


def test_bfgs_update_satisfies_secant_equation():
    s = np.array([1.0, 0.5])
    y = np.array([2.0, 1.5])
    updated = bfgs_update(np.eye(2), s, y)
    assert np.allclose(updated @ y, s)
    assert np.array_equal(updated, updated.T)


@pytest.mark.parametrize("update", [bfgs_update, dfp_update, sr1_update])
def test_updates_satisfy_secant_equation(update):
    h = np.array([[2.0, 0.3], [0.3, 1.0]])
    s = np.array([0.4, -0.2])
    y = np.array([1.0, 0.3])
    assert np.allclose(update(h, s, y) @ y, s)


def test_updates_skip_vanishing_denominator():
    h = np.eye(2)
    s = np.array([1.0, 0.0])
    y = np.array([0.0, 1.0])
    # s'y == 0
    assert bfgs_update(h, s, y) is None
    assert dfp_update(h, s, y) is None
    assert broyden_update(h, s, y) is None
    # s - Hy == 0 for H = I and y = s
    assert sr1_update(h, s, s) is None


@pytest.mark.parametrize("cls", [BFGS, DFP, Broyden])
def test_orthogonal_pair_keeps_approximation(cls):
    solver = cls(1e-8, np.array([1.0, 1.0]))
    before = solver.approx_inv_hessian
    changed = solver.apply_correction(np.array([1.0, 0.0]), np.array([0.0, 1.0]))
    assert changed is False
    assert np.array_equal(solver.approx_inv_hessian, before)


def test_sr1_skip_leaves_matrix_bit_identical():
    solver = SR1(1e-8, np.array([1.0, 1.0]))
    before = solver.approx_inv_hessian
    changed = solver.apply_correction(np.array([1.0, 2.0]), np.array([1.0, 2.0]))
    assert changed is False
    assert np.array_equal(solver.approx_inv_hessian, before)


def test_small_step_reports_convergence():
    solver = BFGS(1e-3, np.array([1.0, 1.0]))
    solver.apply_correction(np.array([1e-5, 0.0]), np.array([1.0, 1.0]))
    assert solver.next_iterate_too_close()
    _, g = diagonal_quadratic(solver.x)
    assert solver.has_converged(Evaluation(1.0, g))


def test_correction_norms_reset_between_runs():
    solver = BFGS(1e-3, np.array([1.0, 1.0]))
    solver.apply_correction(np.array([1e-5, 0.0]), np.array([1.0, 1.0]))
    res = solver.minimize(BackTracking(), diagonal_quadratic, 200, 50)
    assert res.nit > 0


@pytest.mark.parametrize("cls", [BFGS, DFP, SR1, Broyden])
def test_tiny_step_leaves_matrix_bit_identical(cls):
    solver = cls(1e-3, np.array([1.0, 1.0]))
    solver.apply_correction(np.array([0.5, 0.1]), np.array([1.0, 0.4]))
    before = solver.approx_inv_hessian
    changed = solver.apply_correction(np.array([1e-5, 0.0]), np.array([1.0, 1.0]))
    assert changed is False
    assert np.array_equal(solver.approx_inv_hessian, before)
