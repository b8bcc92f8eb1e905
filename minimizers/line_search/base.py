"""Shared pieces of the line-search family.

The predicates follow Nocedal & Wright, chapter 3. ``d`` is the search
direction, ``t`` the trial step length and ``g0``/``g_t`` the gradients at the
current iterate and at the trial point.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from ..core import Array, Evaluation

EvalOracle = Callable[[Array], Evaluation]


def sufficient_decrease(
    f0: float, f_t: float, g0: Array, t: float, d: Array, c1: float
) -> bool:
    """Armijo condition ``f(x + t d) - f(x) <= c1 t <g(x), d>``."""
    return f_t - f0 <= c1 * t * float(np.dot(g0, d))


def projected_sufficient_decrease(
    x0: Array, x_t: Array, f0: float, f_t: float, t: float, c1: float
) -> bool:
    """Armijo-like condition for projected steps.

    ``x_t`` is the projected trial point, so the actual step is not ``t d``;
    the decrease is measured against ``|x_t - x0|^2 / t`` instead.
    """
    diff = x_t - x0
    return f_t - f0 <= (-c1 / t) * float(np.dot(diff, diff))


def curvature(g0: Array, g_t: Array, d: Array, c2: float) -> bool:
    """Weak curvature condition ``<g_t, d> >= c2 <g0, d>``."""
    return float(np.dot(g_t, d)) >= c2 * float(np.dot(g0, d))


def strong_curvature(g0: Array, g_t: Array, d: Array, c2: float) -> bool:
    """Strong curvature condition ``|<g_t, d>| <= c2 |<g0, d>|``."""
    return abs(float(np.dot(g_t, d))) <= c2 * abs(float(np.dot(g0, d)))


def strong_wolfe(
    f0: float,
    f_t: float,
    g0: Array,
    g_t: Array,
    t: float,
    d: Array,
    c1: float,
    c2: float,
) -> bool:
    return sufficient_decrease(f0, f_t, g0, t, d, c1) and strong_curvature(
        g0, g_t, d, c2
    )


def check_armijo_constants(c1: float, beta: float) -> None:
    if not (0 < c1 < 1):
        raise ValueError("Armijo constant c1 must lie in (0, 1)")
    if not (0 < beta < 1):
        raise ValueError("beta must lie in (0, 1)")


class LineSearch(ABC):
    """Strategy computing a scalar step length along a search direction."""

    @abstractmethod
    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        """Return the step length ``t`` to apply to ``direction`` at ``x_k``."""

    def reset(self) -> None:
        """Forget any state kept between calls."""


__all__ = [
    "EvalOracle",
    "LineSearch",
    "check_armijo_constants",
    "curvature",
    "projected_sufficient_decrease",
    "strong_curvature",
    "strong_wolfe",
    "sufficient_decrease",
]
