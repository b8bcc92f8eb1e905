"""Factory for building solvers and line searches from configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from .core import Array, OptimizeResult, Oracle
from .line_search import (
    BackTracking,
    BackTrackingB,
    BackTrackingConfig,
    GLLConfig,
    GLLQuadratic,
    LineSearch,
    MoreThuente,
    MoreThuenteConfig,
    NoSearch,
)
from .newton import Newton, ProjectedNewton
from .quasi_newton import BFGS, BFGSB, DFP, DFPB, SR1, SR1B, Broyden, BroydenB
from .solver import Callback, Solver
from .steepest_descent import (
    CoordinateDescent,
    GradientDescent,
    PnormDescent,
    ProjectedGradientDescent,
    SpectralProjectedGradient,
)

LINE_SEARCHES = ("backtracking", "backtracking_b", "more_thuente", "gll", "none")

_UNBOUNDED_SOLVERS = {
    "gradient_descent": GradientDescent,
    "coordinate_descent": CoordinateDescent,
    "newton": Newton,
    "bfgs": BFGS,
    "dfp": DFP,
    "broyden": Broyden,
    "sr1": SR1,
}

_BOUNDED_SOLVERS = {
    "projected_gradient": ProjectedGradientDescent,
    "projected_newton": ProjectedNewton,
    "bfgs_b": BFGSB,
    "dfp_b": DFPB,
    "broyden_b": BroydenB,
    "sr1_b": SR1B,
}

SOLVERS = tuple(_UNBOUNDED_SOLVERS) + ("pnorm_descent", "spg") + tuple(_BOUNDED_SOLVERS)


@dataclass(frozen=True)
class LineSearchConfig:
    """
    Configuration for creating a line search.

    Fields a given line search does not use are ignored.

    Args:
        name: One of "backtracking", "backtracking_b", "more_thuente", "gll",
            "none".
        c1: Sufficient-decrease constant (all except "none").
        beta: Shrink factor of the backtracking searches.
        c2: Curvature constant of More-Thuente.
        t_min: Smallest step of More-Thuente.
        t_max: Largest step of More-Thuente.
        delta_min: Lower extrapolation factor of More-Thuente.
        delta: Case-3 safeguard of More-Thuente.
        delta_max: Upper extrapolation factor of More-Thuente.
        m: History length of GLL.
        sigma1: Lower interpolation safeguard of GLL.
        sigma2: Upper interpolation safeguard of GLL.
    """

    name: str = "backtracking"
    c1: float = 1e-4
    beta: float = 0.5
    c2: float = 0.9
    t_min: float = 0.0
    t_max: float = math.inf
    delta_min: float = 0.58333333
    delta: float = 0.66
    delta_max: float = 1.1
    m: int = 10
    sigma1: float = 0.1
    sigma2: float = 0.9


@dataclass(frozen=True)
class SolverConfig:
    """
    Configuration for creating a solver and running it.

    Args:
        method: Solver name, see :data:`SOLVERS`.
        tol: Convergence tolerance of the method.
        max_iter_solver: Outer iteration budget.
        max_iter_line_search: Trial budget of each line search.
        line_search: Line search configuration.
        lower: Lower bounds, required by the box-constrained methods.
        upper: Upper bounds, required by the box-constrained methods.
        inverse_p: Inverse preconditioner of "pnorm_descent" (identity if None).
        lambda_min: Smallest spectral scaling of "spg".
        lambda_max: Largest spectral scaling of "spg".
    """

    method: str
    tol: float = 1e-6
    max_iter_solver: int = 1000
    max_iter_line_search: int = 100
    line_search: LineSearchConfig = field(default_factory=LineSearchConfig)
    lower: Optional[Sequence[float]] = None
    upper: Optional[Sequence[float]] = None
    inverse_p: Optional[Sequence[Sequence[float]]] = None
    lambda_min: float = 1e-3
    lambda_max: float = 1e3


def create_line_search(
    config: LineSearchConfig,
    lower: Optional[Array] = None,
    upper: Optional[Array] = None,
) -> LineSearch:
    """
    Create a line search from a configuration.

    Args:
        config: Line search configuration.
        lower: Lower bounds, required by "backtracking_b" and optional for
            "more_thuente".
        upper: Upper bounds, same rules as ``lower``.

    Raises:
        ValueError: If the name is not supported, a constant is out of range, or
            "backtracking_b" is requested without bounds.
    """
    name = config.name.lower()

    if name == "backtracking":
        return BackTracking(BackTrackingConfig(c1=config.c1, beta=config.beta))
    elif name == "backtracking_b":
        if lower is None or upper is None:
            raise ValueError("backtracking_b requires lower and upper bounds.")
        return BackTrackingB(
            lower, upper, BackTrackingConfig(c1=config.c1, beta=config.beta)
        )
    elif name == "more_thuente":
        return MoreThuente(
            MoreThuenteConfig(
                c1=config.c1,
                c2=config.c2,
                t_min=config.t_min,
                t_max=config.t_max,
                delta_min=config.delta_min,
                delta=config.delta,
                delta_max=config.delta_max,
            ),
            lower=lower,
            upper=upper,
        )
    elif name == "gll":
        return GLLQuadratic(
            GLLConfig(
                c1=config.c1, m=config.m, sigma1=config.sigma1, sigma2=config.sigma2
            )
        )
    elif name == "none":
        return NoSearch()
    else:
        raise ValueError(
            f"Unsupported line search name '{config.name}'. "
            f"Supported names: {list(LINE_SEARCHES)}"
        )


def create_solver(
    config: SolverConfig, x0: Array, oracle: Optional[Oracle] = None
) -> Solver:
    """
    Create a solver from a configuration.

    Args:
        config: Solver configuration.
        x0: Starting point.
        oracle: Passed to "spg" to initialize its spectral scaling.

    Raises:
        ValueError: If the method is not supported or bounds are missing for a
            box-constrained method.
    """
    method = config.method.lower()
    x0 = np.asarray(x0, dtype=float)

    if method in _UNBOUNDED_SOLVERS:
        return _UNBOUNDED_SOLVERS[method](config.tol, x0)
    elif method == "pnorm_descent":
        inverse_p = (
            np.eye(x0.size) if config.inverse_p is None else np.asarray(config.inverse_p)
        )
        return PnormDescent(config.tol, x0, inverse_p)

    if method not in _BOUNDED_SOLVERS and method != "spg":
        raise ValueError(
            f"Unsupported solver method '{config.method}'. "
            f"Supported methods: {list(SOLVERS)}"
        )
    if config.lower is None or config.upper is None:
        raise ValueError(f"Method '{config.method}' requires lower and upper bounds.")
    lower = np.asarray(config.lower, dtype=float)
    upper = np.asarray(config.upper, dtype=float)
    if method == "spg":
        return SpectralProjectedGradient(
            config.tol,
            x0,
            lower,
            upper,
            oracle=oracle,
            lambda_min=config.lambda_min,
            lambda_max=config.lambda_max,
        )
    return _BOUNDED_SOLVERS[method](config.tol, x0, lower, upper)


def minimize(
    oracle: Oracle,
    x0: Array,
    config: SolverConfig,
    callback: Optional[Callback] = None,
    history: bool = False,
) -> OptimizeResult:
    """
    Build the solver and line search described by ``config`` and run them.

    Raises:
        OutOfDomainError: The objective is NaN/inf at an iterate.
        MaxIterReachedError: The iteration budget is exhausted.
    """
    lower = None if config.lower is None else np.asarray(config.lower, dtype=float)
    upper = None if config.upper is None else np.asarray(config.upper, dtype=float)
    line_search = create_line_search(config.line_search, lower=lower, upper=upper)
    solver = create_solver(config, x0, oracle=oracle)
    return solver.minimize(
        line_search,
        oracle,
        config.max_iter_solver,
        config.max_iter_line_search,
        callback=callback,
        history=history,
    )


__all__ = [
    "LINE_SEARCHES",
    "LineSearchConfig",
    "SOLVERS",
    "SolverConfig",
    "create_line_search",
    "create_solver",
    "minimize",
]
