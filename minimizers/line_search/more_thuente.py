"""
More-Thuente line search for the strong Wolfe conditions.

References:
    - J. J. More and D. J. Thuente, "Line search algorithms with guaranteed
      sufficient decrease", ACM TOMS 20 (1994).
    - W. Sun and Y. Yuan, *Optimization Theory and Methods* (2006), 2.4.

The search works on the restriction ``phi(t) = f(x + t d)`` of the objective
to the ray. Until the modified updating switch fires, trial selection and
bracket updates use the auxiliary function
``psi(t) = phi(t) - phi(0) - c1 t phi'(0)``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional

import numpy as np

from ..core import Array, Evaluation, as_evaluation
from ..logging import get_logger
from ..utils import box_projection, is_out_of_domain, validate_bounds
from .base import (
    EvalOracle,
    LineSearch,
    projected_sufficient_decrease,
    strong_curvature,
    sufficient_decrease,
)

logger = get_logger(__name__)

_INTERVAL_XTOL = 1e-12


@dataclass(frozen=True)
class MoreThuenteConfig:
    """
    Constants of the More-Thuente line search.

    Args:
        c1: Sufficient-decrease sensitivity (``mu`` in the paper).
        c2: Curvature sensitivity (``eta`` in the paper), ``c1 < c2 < 1``.
        t_min: Smallest admissible step.
        t_max: Largest admissible step.
        delta_min: Lower extrapolation factor used while the bracket is
            still unbounded above.
        delta: Safeguard factor of case 3, ``0 < delta < 1``.
        delta_max: Upper extrapolation factor used while the bracket is still
            unbounded above.
    """

    c1: float = 1e-4
    c2: float = 0.9
    t_min: float = 0.0
    t_max: float = math.inf
    delta_min: float = 0.58333333
    delta: float = 0.66
    delta_max: float = 1.1

    def __post_init__(self) -> None:
        if not (0 < self.c1 < self.c2 < 1):
            raise ValueError("Require 0 < c1 < c2 < 1 for the strong Wolfe conditions.")
        if self.t_min < 0:
            raise ValueError("t_min must be non-negative")
        if not self.t_max > self.t_min:
            raise ValueError("t_max must be greater than t_min")
        if not (0 < self.delta < 1):
            raise ValueError("delta must lie in (0, 1)")
        if not (0 < self.delta_min <= self.delta_max):
            raise ValueError("Require 0 < delta_min <= delta_max")


class UnivariateEval(NamedTuple):
    """Value and derivative of a one-dimensional restriction."""

    f: float
    g: float


def phi(evaluation: Evaluation, direction: Array) -> UnivariateEval:
    """Restriction of the objective to the ray; ``phi'(t) = <g(x + t d), d>``."""
    return UnivariateEval(evaluation.f, float(np.dot(evaluation.g, direction)))


def psi(
    phi_0: UnivariateEval, phi_t: UnivariateEval, t: float, c1: float
) -> UnivariateEval:
    return UnivariateEval(
        phi_t.f - phi_0.f - c1 * t * phi_0.g,
        phi_t.g - c1 * phi_0.g,
    )


def cubic_minimizer(
    ta: float, tb: float, f_ta: float, f_tb: float, g_ta: float, g_tb: float
) -> float:
    """Minimizer of the cubic interpolating values and slopes at ``ta``, ``tb``.

    Equations 2.4.51 and 2.4.56 of Sun & Yuan. The discriminant is clipped
    at zero so a cubic without a local minimizer still yields a finite point.
    Returns ``nan`` when the data are linear (equal slopes) and the cubic is
    degenerate.
    """
    if tb == ta:
        return math.nan
    s = 3.0 * (f_tb - f_ta) / (tb - ta)
    z = s - g_ta - g_tb
    w = math.sqrt(max(z * z - g_ta * g_tb, 0.0))
    denominator = g_tb - g_ta + 2.0 * w
    if denominator == 0.0:
        return math.nan
    return ta + (tb - ta) * ((w - g_ta - z) / denominator)


def quadratic_minimizer_1(
    ta: float, tb: float, f_ta: float, f_tb: float, g_ta: float
) -> float:
    """Minimizer of the quadratic through two values and the slope at ``ta``.

    Returns ``nan`` when the quadratic has no curvature.
    """
    if ta == tb:
        return math.nan
    lin_int = (f_ta - f_tb) / (ta - tb)
    if g_ta == lin_int:
        return math.nan
    return ta - 0.5 * ((ta - tb) * g_ta / (g_ta - lin_int))


def quadratic_minimizer_2(ta: float, tb: float, g_ta: float, g_tb: float) -> float:
    """Secant step on the derivative (Sun & Yuan, equation 2.4.5).

    Returns ``nan`` for equal slopes.
    """
    if g_ta == g_tb:
        return math.nan
    return ta - g_ta * ((ta - tb) / (g_ta - g_tb))


def update_interval(
    f_tl: float, f_t: float, g_t: float, tl: float, t: float, tu: float
) -> tuple[float, float, bool]:
    """Bracket update (rules U1-U3 of the paper).

    Returns the new ``(tl, tu)`` and whether the interval collapsed to a point.
    """
    if f_t > f_tl:
        return tl, t, False
    if g_t * (tl - t) > 0.0:
        return t, tu, False
    if g_t * (tl - t) < 0.0:
        return t, tl, False
    return tl, tu, True


class MoreThuente(LineSearch):
    """Strong-Wolfe line search with safeguarded cubic/quadratic interpolation.

    When both ``lower`` and ``upper`` are given, trial points are projected into
    the box and sufficient decrease is measured with the projected form.
    """

    def __init__(
        self,
        config: Optional[MoreThuenteConfig] = None,
        lower: Optional[Array] = None,
        upper: Optional[Array] = None,
    ) -> None:
        self.config = config or MoreThuenteConfig()
        if (lower is None) != (upper is None):
            raise ValueError("lower and upper bounds must be given together")
        self.lower: Optional[Array] = None
        self.upper: Optional[Array] = None
        if lower is not None and upper is not None:
            self.lower, self.upper = validate_bounds(lower, upper)

    @property
    def c1(self) -> float:
        return self.config.c1

    @property
    def c2(self) -> float:
        return self.config.c2

    @property
    def bounded(self) -> bool:
        return self.lower is not None

    def _trial_point(self, x_k: Array, t: float, direction: Array) -> Array:
        point = x_k + t * direction
        if self.bounded:
            point = box_projection(point, self.lower, self.upper)
        return point

    def _wolfe(
        self,
        x_k: Array,
        eval_0: Evaluation,
        eval_t: Evaluation,
        t: float,
        direction: Array,
    ) -> bool:
        if self.bounded:
            x_t = self._trial_point(x_k, t, direction)
            decrease = projected_sufficient_decrease(
                x_k, x_t, eval_0.f, eval_t.f, t, self.c1
            )
        else:
            decrease = sufficient_decrease(
                eval_0.f, eval_t.f, eval_0.g, t, direction, self.c1
            )
        return decrease and strong_curvature(eval_0.g, eval_t.g, direction, self.c2)

    def _select_trial(
        self,
        tl: float,
        t: float,
        tu: float,
        f_tl: float,
        g_tl: float,
        f_t: float,
        g_t: float,
        restriction_at_tu,
    ) -> float:
        """Trial value selection (section 4 of the paper)."""
        cfg = self.config
        # case 1: higher function value, the minimizer is bracketed
        if f_t > f_tl:
            tc = cubic_minimizer(tl, t, f_tl, f_t, g_tl, g_t)
            tq = quadratic_minimizer_1(tl, t, f_tl, f_t, g_tl)
            logger.debug("Case 1: tc: %s, tq: %s", tc, tq)
            if abs(tc - tl) < abs(tq - tl):
                return tc
            return 0.5 * (tq + tc)
        # case 2: derivatives of opposite sign
        if g_t * g_tl < 0.0:
            tc = cubic_minimizer(tl, t, f_tl, f_t, g_tl, g_t)
            ts = quadratic_minimizer_2(tl, t, g_tl, g_t)
            logger.debug("Case 2: tc: %s, ts: %s", tc, ts)
            return tc if abs(tc - t) >= abs(ts - t) else ts
        # case 3: same sign, derivative magnitude decreases
        if abs(g_t) <= abs(g_tl):
            tc = cubic_minimizer(tl, t, f_tl, f_t, g_tl, g_t)
            ts = quadratic_minimizer_2(tl, t, g_tl, g_t)
            logger.debug("Case 3: tc: %s, ts: %s", tc, ts)
            t_plus = tc if abs(tc - t) < abs(ts - t) else ts
            if not math.isfinite(tu):
                low = t + cfg.delta_min * (t - tl)
                high = t + cfg.delta_max * (t - tl)
                if not math.isfinite(t_plus):
                    return high
                return min(max(t_plus, min(low, high)), max(low, high))
            if t > tl:
                return min(t_plus, t + cfg.delta * (tu - t))
            return max(t_plus, t + cfg.delta * (tu - t))
        # case 4: same sign, derivative magnitude does not decrease
        if not math.isfinite(tu):
            return t + cfg.delta_max * (t - tl)
        f_tu, g_tu = restriction_at_tu()
        logger.debug("Case 4: f_tu: %s, g_tu: %s", f_tu, g_tu)
        return cubic_minimizer(tu, t, f_tu, f_t, g_tu, g_t)

    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        cfg = self.config
        use_modified_updating = False
        interval_converged = False

        t = min(max(1.0, cfg.t_min), cfg.t_max)
        tl = cfg.t_min
        tu = cfg.t_max

        cache: Dict[float, Evaluation] = {0.0: eval_x_k}

        def evaluate(step: float) -> Evaluation:
            if step not in cache:
                cache[step] = as_evaluation(oracle(self._trial_point(x_k, step, direction)))
            return cache[step]

        phi_0 = phi(eval_x_k, direction)

        def restriction(step: float):
            phi_s = phi(evaluate(step), direction)
            if use_modified_updating:
                return phi_s
            return psi(phi_0, phi_s, step, cfg.c1)

        for i in range(max_iter):
            eval_t = evaluate(t)

            if is_out_of_domain(eval_t.f):
                logger.debug("Trial step %s is out of domain. Bisecting toward %s", t, tl)
                tu = t
                t = 0.5 * (tl + t)
                continue

            if self._wolfe(x_k, eval_x_k, eval_t, t, direction):
                logger.debug("Strong Wolfe conditions satisfied at iteration %d", i)
                return t
            if interval_converged:
                logger.debug("Interval converged at iteration %d", i)
                return t
            if t == tl:
                logger.debug("t is at the lower end of the interval at iteration %d", i)
                return t
            if t == tu:
                logger.debug("t is at the upper end of the interval at iteration %d", i)
                return t

            phi_t = phi(eval_t, direction)
            psi_t = psi(phi_0, phi_t, t, cfg.c1)
            if not use_modified_updating and psi_t.f <= 0.0 and phi_t.g > 0.0:
                # once triggered, modified updating is used until the end
                use_modified_updating = True

            f_tl, g_tl = restriction(tl)
            f_t, g_t = phi_t if use_modified_updating else psi_t

            t_next = self._select_trial(
                tl, t, tu, f_tl, g_tl, f_t, g_t, lambda: restriction(tu)
            )
            tl, tu, interval_converged = update_interval(f_tl, f_t, g_t, tl, t, tu)
            if not math.isfinite(t_next):
                # degenerate interpolation, e.g. phi linear on the bracket
                t_next = 0.5 * (tl + tu) if math.isfinite(tu) else 2.0 * t
            if math.isfinite(tu) and abs(tu - tl) <= _INTERVAL_XTOL * max(1.0, abs(tl)):
                interval_converged = True

            t = min(max(t_next, cfg.t_min), cfg.t_max)

        logger.warning("Line search did not converge in %d iterations", max_iter)
        return t


__all__ = [
    "MoreThuente",
    "MoreThuenteConfig",
    "UnivariateEval",
    "cubic_minimizer",
    "phi",
    "psi",
    "quadratic_minimizer_1",
    "quadratic_minimizer_2",
    "update_interval",
]
