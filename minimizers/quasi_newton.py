"""Quasi-Newton methods with a dense inverse-Hessian approximation.

Each method keeps ``H``, an approximation of the inverse Hessian initialized
to the identity, and refreshes it after every accepted step from the
correction pair

    s = x_{k+1} - x_k,    y = g_{k+1} - g_k.

The update is skipped when ``|s|`` or ``|y|`` falls below the tolerance, and
in that case the solver also reports convergence at the next check: the
iterates (or their gradients) no longer move, so continuing would only
divide by vanishing quantities.

The ``*B`` classes are the box-constrained counterparts: the quasi-Newton
target ``x - H g`` is projected into the box before being turned into a
direction, and convergence is measured on the projected gradient.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .core import Array, Evaluation
from .logging import get_logger
from .solver import BoundedSolver, CountingOracle, Solver
from .utils import symmetrize

logger = get_logger(__name__)

_EPS = np.finfo(float).eps


def _negligible(denominator: float, scale: float) -> bool:
    return abs(denominator) <= _EPS * scale


def bfgs_update(h: Array, s: Array, y: Array) -> Optional[Array]:
    """BFGS inverse update ``(I - rho s y') H (I - rho y s') + rho s s'``."""
    ys = float(np.dot(y, s))
    if _negligible(ys, np.linalg.norm(y) * np.linalg.norm(s)):
        return None
    rho = 1.0 / ys
    identity = np.eye(h.shape[0])
    left = identity - rho * np.outer(s, y)
    right = identity - rho * np.outer(y, s)
    return symmetrize(left @ h @ right + rho * np.outer(s, s))


def dfp_update(h: Array, s: Array, y: Array) -> Optional[Array]:
    """DFP inverse update ``H + s s'/(y's) - (H y)(H y)'/(y' H y)``."""
    ys = float(np.dot(y, s))
    hy = h @ y
    yhy = float(np.dot(y, hy))
    if _negligible(ys, np.linalg.norm(y) * np.linalg.norm(s)):
        return None
    if _negligible(yhy, np.linalg.norm(y) * np.linalg.norm(hy)):
        return None
    return symmetrize(h + np.outer(s, s) / ys - np.outer(hy, hy) / yhy)


def broyden_update(h: Array, s: Array, y: Array) -> Optional[Array]:
    """Good Broyden inverse update ``H + ((s - H y) s' H) / (s' y)``."""
    sy = float(np.dot(s, y))
    if _negligible(sy, np.linalg.norm(y) * np.linalg.norm(s)):
        return None
    hy = h @ y
    return h + (np.outer(s - hy, s) @ h) / sy


def sr1_update(h: Array, s: Array, y: Array) -> Optional[Array]:
    """Symmetric rank-one update ``H + (s - H y)(s - H y)' / ((s - H y)' y)``."""
    shy = s - h @ y
    denominator = float(np.dot(shy, y))
    if _negligible(denominator, np.linalg.norm(shy) * np.linalg.norm(y)):
        return None
    return h + np.outer(shy, shy) / denominator


class _QuasiNewtonState(ABC):
    """Inverse-Hessian bookkeeping shared by the bounded and unbounded solvers."""

    _x: Array
    _tol: float

    def _init_quasi_newton(self) -> None:
        n = self._x.size
        self._approx_inv_hessian = np.eye(n)
        self._s_norm: Optional[float] = None
        self._y_norm: Optional[float] = None

    def setup(self, oracle: CountingOracle) -> None:
        self._s_norm = None
        self._y_norm = None

    @property
    def approx_inv_hessian(self) -> Array:
        return self._approx_inv_hessian.copy()

    @property
    def s_norm(self) -> Optional[float]:
        return self._s_norm

    @property
    def y_norm(self) -> Optional[float]:
        return self._y_norm

    def next_iterate_too_close(self) -> bool:
        return self._s_norm is not None and self._s_norm < self._tol

    def gradient_next_iterate_too_close(self) -> bool:
        return self._y_norm is not None and self._y_norm < self._tol

    def _degenerate_exit(self) -> bool:
        name = type(self).__name__
        if self.next_iterate_too_close():
            logger.warning("%s: minimization completed, next iterate too close", name)
            return True
        if self.gradient_next_iterate_too_close():
            logger.warning(
                "%s: minimization completed, gradient next iterate too close", name
            )
            return True
        return False

    @abstractmethod
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        """Return the updated approximation, or None to keep the current one."""

    def apply_correction(self, s: Array, y: Array) -> bool:
        """Record the correction pair and update ``H`` unless it is negligible.

        Returns True when the approximation changed.
        """
        self._s_norm = float(np.linalg.norm(s))
        self._y_norm = float(np.linalg.norm(y))
        if self.next_iterate_too_close() or self.gradient_next_iterate_too_close():
            return False
        updated = self.update_inverse_hessian(s, y)
        if updated is None:
            logger.debug("%s: update skipped, vanishing denominator", type(self).__name__)
            return False
        self._approx_inv_hessian = updated
        return True

    def _advance(
        self,
        line_search,
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
        project,
    ) -> None:
        step = line_search.compute_step_len(
            self._x, eval_x_k, direction, oracle, max_iter_line_search
        )
        next_iterate = project(self._x + step * direction)
        logger.debug("ITERATE: %s + %s * %s = %s", self._x, step, direction, next_iterate)

        s = next_iterate - self._x
        y = oracle(next_iterate).g - eval_x_k.g
        # the iterate moves even when the correction is too small to update H
        self._set_x(next_iterate)
        self.apply_correction(s, y)


class QuasiNewton(_QuasiNewtonState, Solver):
    """Unconstrained quasi-Newton solver: ``d = -H g``."""

    def __init__(self, tol: float, x0: Array) -> None:
        super().__init__(tol, x0)
        self._init_quasi_newton()

    def compute_direction(self, evaluation: Evaluation) -> Array:
        return -self._approx_inv_hessian @ evaluation.g

    def has_converged(self, evaluation: Evaluation) -> bool:
        if self._degenerate_exit():
            return True
        return float(np.linalg.norm(evaluation.g)) < self.tol

    def update_next_iterate(
        self,
        line_search,
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
    ) -> None:
        self._advance(
            line_search,
            eval_x_k,
            oracle,
            direction,
            max_iter_line_search,
            project=lambda x: x,
        )


class QuasiNewtonB(_QuasiNewtonState, BoundedSolver):
    """Box-constrained quasi-Newton solver: ``d = P(x - H g) - x``."""

    def __init__(self, tol: float, x0: Array, lower: Array, upper: Array) -> None:
        super().__init__(tol, x0, lower, upper)
        self._init_quasi_newton()

    def compute_direction(self, evaluation: Evaluation) -> Array:
        return self.projected_direction(self._x - self._approx_inv_hessian @ evaluation.g)

    def has_converged(self, evaluation: Evaluation) -> bool:
        if self._degenerate_exit():
            return True
        return self.optimality_measure(evaluation) < self.tol

    def update_next_iterate(
        self,
        line_search,
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
    ) -> None:
        self._advance(
            line_search,
            eval_x_k,
            oracle,
            direction,
            max_iter_line_search,
            project=self.project,
        )


class BFGS(QuasiNewton):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return bfgs_update(self._approx_inv_hessian, s, y)


class DFP(QuasiNewton):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return dfp_update(self._approx_inv_hessian, s, y)


class Broyden(QuasiNewton):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return broyden_update(self._approx_inv_hessian, s, y)


class SR1(QuasiNewton):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return sr1_update(self._approx_inv_hessian, s, y)


class BFGSB(QuasiNewtonB):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return bfgs_update(self._approx_inv_hessian, s, y)


class DFPB(QuasiNewtonB):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return dfp_update(self._approx_inv_hessian, s, y)


class BroydenB(QuasiNewtonB):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return broyden_update(self._approx_inv_hessian, s, y)


class SR1B(QuasiNewtonB):
    def update_inverse_hessian(self, s: Array, y: Array) -> Optional[Array]:
        return sr1_update(self._approx_inv_hessian, s, y)


__all__ = [
    "BFGS",
    "BFGSB",
    "Broyden",
    "BroydenB",
    "DFP",
    "DFPB",
    "QuasiNewton",
    "QuasiNewtonB",
    "SR1",
    "SR1B",
    "bfgs_update",
    "broyden_update",
    "dfp_update",
    "sr1_update",
]
