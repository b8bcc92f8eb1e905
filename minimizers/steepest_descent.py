"""First-order descent methods.

All members of the steepest-descent family differ only in the norm whose unit
ball constrains the search for the direction of steepest decrease: the
Euclidean ball gives the negative gradient, the l1 ball a single coordinate,
and the quadratic norm ``|P^(-1/2) d|`` a preconditioned gradient. Their
convergence is at most linear and degrades with the condition number of the
Hessian, which is what the preconditioner in :class:`PnormDescent` (and
Newton-type methods) try to correct.

The box-constrained members turn the target point ``x - lambda g`` into a
feasible direction ``P(x - lambda g) - x`` and stop on the projected gradient.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array, Evaluation, Oracle, as_evaluation
from .logging import get_logger
from .solver import BoundedSolver, CountingOracle, Solver
from .utils import infinity_norm

logger = get_logger(__name__)


class GradientDescent(Solver):
    """Steepest descent in the Euclidean norm: ``d = -g``."""

    def compute_direction(self, evaluation: Evaluation) -> Array:
        return -evaluation.g

    def has_converged(self, evaluation: Evaluation) -> bool:
        return float(np.linalg.norm(evaluation.g)) < self.tol


class CoordinateDescent(Solver):
    """Steepest descent in the l1 norm.

    The direction is the signed canonical vector of the gradient component with
    the largest magnitude.
    """

    def compute_direction(self, evaluation: Evaluation) -> Array:
        grad = evaluation.g
        position = int(np.argmax(np.abs(grad)))
        direction = np.zeros_like(grad)
        direction[position] = -np.sign(grad[position])
        return direction

    def has_converged(self, evaluation: Evaluation) -> bool:
        return infinity_norm(evaluation.g) < self.tol

    def optimality_measure(self, evaluation: Evaluation) -> float:
        return infinity_norm(evaluation.g)


class PnormDescent(Solver):
    """Steepest descent in the quadratic norm induced by ``P``.

    Args:
        tol: Tolerance on the infinity norm of the gradient.
        x0: Starting point.
        inverse_p: Inverse of the (symmetric positive definite) matrix ``P``.
            The identity recovers plain gradient descent.
    """

    def __init__(self, tol: float, x0: Array, inverse_p: Array) -> None:
        super().__init__(tol, x0)
        inverse_p = np.asarray(inverse_p, dtype=float)
        if inverse_p.shape != (self.dim, self.dim):
            raise ValueError(
                f"inverse_p must have shape {(self.dim, self.dim)}, got {inverse_p.shape}"
            )
        self._inverse_p = inverse_p

    @property
    def inverse_p(self) -> Array:
        return self._inverse_p.copy()

    def compute_direction(self, evaluation: Evaluation) -> Array:
        return -self._inverse_p @ evaluation.g

    def has_converged(self, evaluation: Evaluation) -> bool:
        return infinity_norm(evaluation.g) < self.tol

    def optimality_measure(self, evaluation: Evaluation) -> float:
        return infinity_norm(evaluation.g)


class ProjectedGradientDescent(BoundedSolver):
    """Projected gradient method (Andrei 2022, algorithm 12.1)."""

    def compute_direction(self, evaluation: Evaluation) -> Array:
        return self.projected_direction(self._x - evaluation.g)


class SpectralProjectedGradient(BoundedSolver):
    """Spectral projected gradient with a Barzilai-Borwein scaling.

    The direction is ``P(x - lambda g) - x``. After every step ``lambda`` is
    refreshed to ``s's / s'y`` clipped to ``[lambda_min, lambda_max]``, and
    reset to ``lambda_max`` when ``s'y <= 0``.

    Args:
        tol: Tolerance on the infinity norm of the projected gradient.
        x0: Starting point, projected into the box.
        lower: Lower bounds.
        upper: Upper bounds.
        oracle: Used to initialize ``lambda``. When omitted, the
            initialization happens at the start of :meth:`minimize`.
        lambda_min: Smallest admissible spectral scaling.
        lambda_max: Largest admissible spectral scaling.
    """

    def __init__(
        self,
        tol: float,
        x0: Array,
        lower: Array,
        upper: Array,
        oracle: Optional[Oracle] = None,
        lambda_min: float = 1e-3,
        lambda_max: float = 1e3,
    ) -> None:
        super().__init__(tol, x0, lower, upper)
        if not (0 < lambda_min <= lambda_max):
            raise ValueError("Require 0 < lambda_min <= lambda_max")
        self._lambda_min = float(lambda_min)
        self._lambda_max = float(lambda_max)
        self._lambda: Optional[float] = None
        if oracle is not None:
            self._init_lambda(as_evaluation(oracle(self._x)))

    @property
    def lambda_(self) -> Optional[float]:
        return self._lambda

    def _clip_lambda(self, value: float) -> float:
        return min(max(value, self._lambda_min), self._lambda_max)

    def _init_lambda(self, evaluation: Evaluation) -> None:
        direction0 = self.projected_direction(self._x - evaluation.g)
        norm0 = infinity_norm(direction0)
        if norm0 == 0.0:
            self._lambda = self._lambda_max
        else:
            self._lambda = self._clip_lambda(1.0 / norm0)
        logger.debug("Initial spectral step: %s", self._lambda)

    def setup(self, oracle: CountingOracle) -> None:
        if self._lambda is None:
            self._init_lambda(oracle(self._x))

    def compute_direction(self, evaluation: Evaluation) -> Array:
        if self._lambda is None:
            self._init_lambda(evaluation)
        return self.projected_direction(self._x - self._lambda * evaluation.g)

    def update_next_iterate(
        self,
        line_search,
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
    ) -> None:
        step = line_search.compute_step_len(
            self._x, eval_x_k, direction, oracle, max_iter_line_search
        )
        next_iterate = self.project(self._x + step * direction)
        logger.debug("ITERATE: %s + %s * %s = %s", self._x, step, direction, next_iterate)

        s_k = next_iterate - self._x
        y_k = oracle(next_iterate).g - eval_x_k.g
        self._set_x(next_iterate)

        skyk = float(np.dot(s_k, y_k))
        if skyk <= 0.0:
            logger.debug("skyk = %s <= 0. Resetting lambda to lambda_max", skyk)
            self._lambda = self._lambda_max
            return
        sksk = float(np.dot(s_k, s_k))
        self._lambda = self._clip_lambda(sksk / skyk)


__all__ = [
    "CoordinateDescent",
    "GradientDescent",
    "PnormDescent",
    "ProjectedGradientDescent",
    "SpectralProjectedGradient",
]
