"""Iteration driver shared by every descent method.

A solver owns its iterate ``x``, its iteration counter ``k`` and whatever
method-specific state it needs (an inverse-Hessian approximation, a spectral
step scalar, ...). Subclasses provide two hooks:

* :meth:`Solver.compute_direction` - the search direction at the current
  evaluation;
* :meth:`Solver.has_converged` - the method's stopping predicate.

and may override :meth:`Solver.update_next_iterate` to refresh their own state
after the line search has produced a step length.

Example
-------
>>> import numpy as np
>>> from minimizers import BackTracking, GradientDescent, Problem
>>> problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
>>> solver = GradientDescent(tol=1e-8, x0=np.array([1.0, -2.0]))
>>> res = solver.minimize(BackTracking(), problem, 100, 50)
>>> res.success
True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional

import numpy as np

from .core import (
    Array,
    Evaluation,
    MaxIterReachedError,
    OptimizeResult,
    Oracle,
    OutOfDomainError,
    Status,
    as_evaluation,
)
from .logging import get_logger
from .utils import box_projection, infinity_norm, is_out_of_domain, validate_bounds

if TYPE_CHECKING:
    from .line_search.base import LineSearch

logger = get_logger(__name__)

Callback = Callable[["Solver"], Optional[bool]]


class CountingOracle:
    """Wrap an oracle, coercing its output and counting the calls."""

    def __init__(self, oracle: Oracle) -> None:
        self._oracle = oracle
        self.calls = 0

    def __call__(self, x: Array) -> Evaluation:
        self.calls += 1
        return as_evaluation(self._oracle(x))


class Solver(ABC):
    """Template-method base class for line-search based descent methods."""

    def __init__(self, tol: float, x0: Array) -> None:
        if tol <= 0:
            raise ValueError("tol must be positive")
        self._tol = float(tol)
        self._x = np.array(x0, dtype=float, copy=True).reshape(-1)
        if self._x.size == 0:
            raise ValueError("x0 must have at least one component")
        self._k = 0
        self._status = Status.RUNNING
        self._oracle: Optional[CountingOracle] = None
        self._last_eval: Optional[Evaluation] = None
        self._last_eval_x: Optional[Array] = None
        self._history: List[Array] = []
        self._record_history = False

    @property
    def x(self) -> Array:
        """Current iterate (a copy)."""
        return self._x.copy()

    @property
    def k(self) -> int:
        return self._k

    @property
    def tol(self) -> float:
        return self._tol

    @property
    def status(self) -> Status:
        return self._status

    @property
    def nfev(self) -> int:
        """Oracle calls made since the last :meth:`minimize` started."""
        return 0 if self._oracle is None else self._oracle.calls

    @property
    def dim(self) -> int:
        return self._x.size

    @abstractmethod
    def compute_direction(self, evaluation: Evaluation) -> Array:
        """Return the search direction at the current iterate."""

    @abstractmethod
    def has_converged(self, evaluation: Evaluation) -> bool:
        """Return True when the stopping criterion holds at the current iterate."""

    def setup(self, oracle: CountingOracle) -> None:
        """Hook called once at the start of :meth:`minimize`."""

    def optimality_measure(self, evaluation: Evaluation) -> float:
        """Norm reported as ``grad_norm`` in results."""
        return float(np.linalg.norm(evaluation.g))

    def _set_x(self, x_next: Array) -> None:
        self._x = np.asarray(x_next, dtype=float).reshape(-1)
        if self._record_history:
            self._history.append(self._x.copy())

    def evaluate_x_k(self, oracle: CountingOracle) -> Evaluation:
        evaluation = oracle(self._x)
        self._last_eval = evaluation
        self._last_eval_x = self._x.copy()
        if is_out_of_domain(evaluation.f):
            self._status = Status.OUT_OF_DOMAIN
            logger.error(
                "Minimization stopped: iterate %s is out of domain (f=%s)",
                self._x,
                evaluation.f,
            )
            raise OutOfDomainError(
                "Out of domain", result=self.result("Iterate is out of domain")
            )
        return evaluation

    def update_next_iterate(
        self,
        line_search: "LineSearch",
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
    ) -> None:
        step = line_search.compute_step_len(
            self._x, eval_x_k, direction, oracle, max_iter_line_search
        )
        self._set_x(self._x + step * direction)

    def step(
        self,
        line_search: "LineSearch",
        oracle: Oracle,
        max_iter_line_search: int,
    ) -> Status:
        """Perform one iteration and return the resulting status.

        Raises:
            OutOfDomainError: If the oracle is non-finite at the current iterate.
        """
        counted = self._counted(oracle)
        evaluation = self.evaluate_x_k(counted)

        if self.has_converged(evaluation):
            self._status = Status.CONVERGED
            logger.info("Minimization completed: convergence in %d iterations", self._k)
            return self._status

        self._status = Status.RUNNING
        direction = np.asarray(self.compute_direction(evaluation), dtype=float)
        logger.debug("Gradient: %s, Direction: %s", evaluation.g, direction)
        self.update_next_iterate(
            line_search, evaluation, counted, direction, max_iter_line_search
        )
        logger.debug("Iterate: %s", self._x)
        self._k += 1
        return self._status

    def minimize(
        self,
        line_search: "LineSearch",
        oracle: Oracle,
        max_iter_solver: int,
        max_iter_line_search: int,
        callback: Optional[Callback] = None,
        history: bool = False,
    ) -> OptimizeResult:
        """Iterate until convergence.

        Args:
            line_search: Strategy computing the step length along each direction.
            oracle: Callable returning an :class:`Evaluation` (or a tuple) at ``x``.
            max_iter_solver: Maximum number of outer iterations.
            max_iter_line_search: Maximum number of trials per line search.
            callback: Called with the solver after each accepted step. Returning
                ``True`` stops the run early.
            history: Record every iterate in ``result.history``.

        Returns:
            The result on convergence (or on a callback stop).

        Raises:
            OutOfDomainError: The objective is NaN/inf at an iterate.
            MaxIterReachedError: ``max_iter_solver`` iterations were not enough.
        """
        if max_iter_solver < 0 or max_iter_line_search < 0:
            raise ValueError("iteration budgets must be non-negative")
        self._k = 0
        self._status = Status.RUNNING
        self._oracle = CountingOracle(oracle)
        self._last_eval = None
        self._last_eval_x = None
        self._record_history = history
        self._history = [self._x.copy()] if history else []

        line_search.reset()
        self.setup(self._oracle)

        while self._k < max_iter_solver:
            status = self.step(line_search, self._oracle, max_iter_line_search)
            if status is Status.CONVERGED:
                return self.result("Convergence criterion satisfied.")
            if callback is not None and callback(self):
                logger.info("Minimization stopped by callback after %d iterations", self._k)
                return self.result("Stopped by callback.")

        self._status = Status.MAX_ITER_REACHED
        logger.warning("Minimization completed: max iter reached during minimization")
        raise MaxIterReachedError(
            "Max iter reached", result=self.result("Maximum iterations reached.")
        )

    def _counted(self, oracle: Oracle) -> CountingOracle:
        if isinstance(oracle, CountingOracle):
            return oracle
        if self._oracle is None or self._oracle._oracle is not oracle:
            self._oracle = CountingOracle(oracle)
        return self._oracle

    def result(self, message: str) -> OptimizeResult:
        """Build a result snapshot.

        ``fun`` and ``grad_norm`` are only filled when the last oracle call was
        made at the current iterate; otherwise they are ``None``.
        """
        fun = None
        grad_norm = None
        if self._last_eval is not None and np.array_equal(self._last_eval_x, self._x):
            fun = self._last_eval.f
            grad_norm = self.optimality_measure(self._last_eval)
        return OptimizeResult(
            x=self._x.copy(),
            fun=fun,
            nit=self._k,
            status=self._status,
            success=self._status is Status.CONVERGED,
            message=message,
            grad_norm=grad_norm,
            nfev=self.nfev,
            history=list(self._history),
        )


class BoundedSolver(Solver):
    """Solver restricted to the box ``lower <= x <= upper``.

    The initial point is projected into the box, accepted iterates are
    projected again after the step, and the optimality measure is the
    infinity norm of the projected gradient.
    """

    def __init__(self, tol: float, x0: Array, lower: Array, upper: Array) -> None:
        super().__init__(tol, x0)
        self._lower, self._upper = validate_bounds(lower, upper, dim=self.dim)
        self._x = box_projection(self._x, self._lower, self._upper)

    @property
    def lower(self) -> Array:
        return self._lower.copy()

    @property
    def upper(self) -> Array:
        return self._upper.copy()

    def project(self, x: Array) -> Array:
        return box_projection(x, self._lower, self._upper)

    def projected_direction(self, target: Array) -> Array:
        """Turn an unconstrained target point into a feasible direction."""
        return self.project(target) - self._x

    def projected_gradient(self, evaluation: Evaluation) -> Array:
        """Gradient with the components pushing into an active bound zeroed."""
        proj_grad = np.array(evaluation.g, dtype=float, copy=True)
        at_lower = (self._x == self._lower) & (proj_grad > 0.0)
        at_upper = (self._x == self._upper) & (proj_grad < 0.0)
        proj_grad[at_lower | at_upper] = 0.0
        return proj_grad

    def optimality_measure(self, evaluation: Evaluation) -> float:
        return infinity_norm(self.projected_gradient(evaluation))

    def has_converged(self, evaluation: Evaluation) -> bool:
        return self.optimality_measure(evaluation) < self._tol

    def update_next_iterate(
        self,
        line_search: "LineSearch",
        eval_x_k: Evaluation,
        oracle: CountingOracle,
        direction: Array,
        max_iter_line_search: int,
    ) -> None:
        step = line_search.compute_step_len(
            self._x, eval_x_k, direction, oracle, max_iter_line_search
        )
        logger.debug("ITERATE: %s + %s * %s", self._x, step, direction)
        self._set_x(self.project(self._x + step * direction))


__all__ = ["BoundedSolver", "Callback", "CountingOracle", "Solver"]
