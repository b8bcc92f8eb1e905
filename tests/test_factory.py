"""Tests for the solver and line search factory."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from minimizers import (
    BFGSB,
    BackTracking,
    BackTrackingB,
    GLLQuadratic,
    LineSearchConfig,
    MoreThuente,
    Newton,
    NoSearch,
    PnormDescent,
    SolverConfig,
    SpectralProjectedGradient,
    create_line_search,
    create_solver,
    minimize,
)
from minimizers.factory import LINE_SEARCHES, SOLVERS


def coupled(x: np.ndarray):
    f = x[0] ** 2 + 2 * x[1] ** 2 + x[0] * x[1]
    return f, np.array([2 * x[0] + x[1], 4 * x[1] + x[0]])


def test_create_backtracking() -> None:
    """Test creation of the backtracking line search."""
    search = create_line_search(LineSearchConfig(name="backtracking", c1=0.01, beta=0.3))
    assert isinstance(search, BackTracking)
    assert search.c1 == 0.01
    assert search.beta == 0.3


def test_create_backtracking_b_requires_bounds() -> None:
    with pytest.raises(ValueError, match="requires lower and upper"):
        create_line_search(LineSearchConfig(name="backtracking_b"))
    search = create_line_search(
        LineSearchConfig(name="backtracking_b"), lower=np.zeros(2), upper=np.ones(2)
    )
    assert isinstance(search, BackTrackingB)


def test_create_more_thuente() -> None:
    search = create_line_search(LineSearchConfig(name="more_thuente", c1=1e-3, c2=0.5))
    assert isinstance(search, MoreThuente)
    assert search.c2 == 0.5
    assert not search.bounded


def test_create_gll_and_nosearch() -> None:
    gll = create_line_search(LineSearchConfig(name="GLL", m=4))
    assert isinstance(gll, GLLQuadratic)
    assert gll.config.m == 4
    assert isinstance(create_line_search(LineSearchConfig(name="none")), NoSearch)


def test_create_line_search_invalid_name_raises() -> None:
    """Test that an invalid line search name raises ValueError."""
    with pytest.raises(ValueError, match="Unsupported line search name"):
        create_line_search(LineSearchConfig(name="golden"))


def test_create_line_search_validates_constants() -> None:
    with pytest.raises(ValueError):
        create_line_search(LineSearchConfig(name="backtracking", beta=1.5))


@pytest.mark.parametrize("method", SOLVERS)
def test_create_every_solver(method: str) -> None:
    config = SolverConfig(method=method, lower=(-1.0, -1.0), upper=(1.0, 1.0))
    solver = create_solver(config, np.array([0.5, 0.5]))
    assert solver.dim == 2
    assert solver.tol == config.tol


def test_create_solver_types() -> None:
    assert isinstance(create_solver(SolverConfig(method="newton"), np.zeros(2)), Newton)
    pnorm = create_solver(SolverConfig(method="pnorm_descent"), np.zeros(3))
    assert isinstance(pnorm, PnormDescent)
    assert np.array_equal(pnorm.inverse_p, np.eye(3))
    bounded = create_solver(
        SolverConfig(method="bfgs_b", lower=(0.0, 0.0), upper=(1.0, 1.0)), np.array([2.0, 2.0])
    )
    assert isinstance(bounded, BFGSB)
    assert np.array_equal(bounded.x, [1.0, 1.0])


def test_create_spg_with_oracle_initializes_lambda() -> None:
    config = SolverConfig(method="spg", lower=(-1.0, -1.0), upper=(1.0, 1.0))
    solver = create_solver(config, np.array([0.5, 0.5]), oracle=coupled)
    assert isinstance(solver, SpectralProjectedGradient)
    assert solver.lambda_ is not None


def test_bounded_solver_without_bounds_raises() -> None:
    with pytest.raises(ValueError, match="requires lower and upper bounds"):
        create_solver(SolverConfig(method="projected_newton"), np.zeros(2))


def test_create_solver_invalid_method_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported solver method"):
        create_solver(SolverConfig(method="nelder_mead"), np.zeros(2))


def test_minimize_bounded_quasi_newton() -> None:
    config = SolverConfig(
        method="bfgs_b",
        tol=1e-6,
        max_iter_solver=100,
        line_search=LineSearchConfig(name="backtracking_b"),
        lower=(0.0, 0.0),
        upper=(2.0, 2.0),
    )
    res = minimize(coupled, np.array([0.5, 0.5]), config)
    assert res.success
    assert np.allclose(res.x, 0.0)


def test_minimize_spg_with_gll() -> None:
    config = SolverConfig(
        method="spg",
        line_search=LineSearchConfig(name="gll"),
        lower=(-1.0, -1.0),
        upper=(1.0, 1.0),
    )
    res = minimize(coupled, np.array([0.5, -0.5]), config, history=True)
    assert res.success
    assert len(res.history) == res.nit + 1


def test_configs_are_frozen() -> None:
    config = SolverConfig(method="bfgs")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.tol = 1.0  # type: ignore[misc]
    assert config.line_search.name == "backtracking"
    assert set(LINE_SEARCHES) == {"backtracking", "backtracking_b", "more_thuente", "gll", "none"}


def test_create_more_thuente_with_extrapolation_factors() -> None:
    search = create_line_search(
        LineSearchConfig(name="more_thuente", delta_min=0.5, delta_max=2.0)
    )
    assert search.config.delta_min == 0.5
    assert search.config.delta_max == 2.0
    with pytest.raises(ValueError, match="delta_min"):
        create_line_search(LineSearchConfig(name="more_thuente", delta_min=2.0, delta_max=1.0))
