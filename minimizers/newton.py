"""Newton and projected Newton methods.

Both require the oracle to return a Hessian with every evaluation.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array, Evaluation, MissingHessianError
from .logging import get_logger
from .solver import BoundedSolver, Solver
from .utils import try_inverse

logger = get_logger(__name__)


def _require_hessian(evaluation: Evaluation) -> Array:
    if evaluation.hessian is None:
        raise MissingHessianError("Hessian not available in the oracle")
    return evaluation.hessian


class Newton(Solver):
    """Newton's method with a gradient-step fallback on singular Hessians.

    The stopping criterion is half the squared Newton decrement,
    ``0.5 * d' H d < tol`` with ``d`` the Newton direction at the current
    point. When the Hessian is singular no decrement is available and the
    criterion never fires; the line search and the iteration budget then decide.
    """

    def __init__(self, tol: float, x0: Array) -> None:
        super().__init__(tol, x0)
        self._decrement_squared: Optional[float] = None
        self._solved_for: Optional[Evaluation] = None
        self._direction: Optional[Array] = None

    @property
    def decrement_squared(self) -> Optional[float]:
        """Squared Newton decrement at the last evaluated point, if defined."""
        return self._decrement_squared

    def _solve(self, evaluation: Evaluation) -> Optional[Array]:
        # has_converged and compute_direction see the same evaluation
        if evaluation is self._solved_for:
            return self._direction
        hessian = _require_hessian(evaluation)
        hessian_inv = try_inverse(hessian)
        if hessian_inv is None:
            self._decrement_squared = None
            self._direction = None
        else:
            self._direction = -hessian_inv @ evaluation.g
            self._decrement_squared = float((hessian @ self._direction) @ self._direction)
        self._solved_for = evaluation
        return self._direction

    def has_converged(self, evaluation: Evaluation) -> bool:
        self._solve(evaluation)
        if self._decrement_squared is None:
            return False
        return 0.5 * self._decrement_squared < self.tol

    def compute_direction(self, evaluation: Evaluation) -> Array:
        direction = self._solve(evaluation)
        if direction is None:
            logger.warning("Hessian is singular. Using gradient descent direction.")
            return -evaluation.g
        return direction


class ProjectedNewton(BoundedSolver):
    """Newton step through a Cholesky solve, projected into the box.

    The Hessian is assumed symmetric positive definite inside the box. When the
    Cholesky factorization fails the projected gradient direction is used.
    """

    def compute_direction(self, evaluation: Evaluation) -> Array:
        hessian = _require_hessian(evaluation)
        try:
            chol = np.linalg.cholesky(hessian)
        except np.linalg.LinAlgError:
            logger.warning("Hessian is not positive definite. Using projected gradient direction.")
            return self.projected_direction(self._x - evaluation.g)
        newton_step = np.linalg.solve(chol.T, np.linalg.solve(chol, evaluation.g))
        return self.projected_direction(self._x - newton_step)


__all__ = ["Newton", "ProjectedNewton"]
