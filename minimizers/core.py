"""Core interfaces shared across the minimizers package.

An oracle is any callable mapping a point ``x`` to an :class:`Evaluation`
(or to a ``(f, g)`` / ``(f, g, hessian)`` tuple, which the solvers coerce with
:func:`as_evaluation`). Solvers never differentiate anything themselves: the
gradient, and for the Newton family the Hessian, come from the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]
Hessian = Callable[[Array], Array]

def _frozen_array(value) -> Array:
    arr = np.array(value, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class Evaluation:
    """Value, gradient and optional Hessian of the objective at one point."""

    f: float
    g: Array
    hessian: Optional[Array] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "f", float(self.f))
        object.__setattr__(self, "g", _frozen_array(self.g).reshape(-1))
        if self.hessian is not None:
            object.__setattr__(self, "hessian", _frozen_array(self.hessian))

    @classmethod
    def from_tuple(cls, value: Tuple) -> "Evaluation":
        """Build an evaluation from ``(f, g)`` or ``(f, g, hessian)``."""
        if len(value) == 2:
            f, g = value
            return cls(f=f, g=g)
        if len(value) == 3:
            f, g, hessian = value
            return cls(f=f, g=g, hessian=hessian)
        raise ValueError(
            f"Expected a (f, g) or (f, g, hessian) tuple, got {len(value)} items."
        )


OracleOutput = Union[Evaluation, Tuple]
Oracle = Callable[[Array], OracleOutput]


def as_evaluation(value: OracleOutput) -> Evaluation:
    """Coerce an oracle return value into an :class:`Evaluation`."""
    if isinstance(value, Evaluation):
        return value
    if isinstance(value, tuple):
        return Evaluation.from_tuple(value)
    raise TypeError(
        f"Oracle must return an Evaluation or a tuple, got {type(value).__name__}."
    )


@dataclass(frozen=True)
class Problem:
    """Container describing an optimization problem.

    Calling a problem (or :meth:`evaluate`) returns an :class:`Evaluation`, so a
    ``Problem`` can be passed anywhere an oracle is expected. When ``dim`` is
    set, gradients of any other length are rejected.
    """

    fun: Objective
    grad: Gradient
    hess: Optional[Hessian] = None
    dim: Optional[int] = None

    def evaluate(self, x: Array) -> Evaluation:
        x = np.asarray(x, dtype=float)
        hessian = None if self.hess is None else self.hess(x)
        evaluation = Evaluation(f=self.fun(x), g=self.grad(x), hessian=hessian)
        if self.dim is not None and evaluation.g.size != self.dim:
            raise ValueError(
                f"Gradient has length {evaluation.g.size} but the problem has dimension {self.dim}."
            )
        return evaluation

    def __call__(self, x: Array) -> Evaluation:
        return self.evaluate(x)


class Status(Enum):
    """State of the iteration driver."""

    RUNNING = "running"
    CONVERGED = "converged"
    OUT_OF_DOMAIN = "out_of_domain"
    MAX_ITER_REACHED = "max_iter_reached"


@dataclass
class OptimizeResult:
    """Snapshot of a solver after :meth:`Solver.minimize` stops."""

    x: Array
    fun: Optional[float]
    nit: int
    status: Status
    success: bool
    message: str
    grad_norm: Optional[float]
    nfev: int
    history: List[Array] = field(default_factory=list)


class SolverError(Exception):
    """Base class for failures propagated by the iteration driver."""

    def __init__(self, message: str, result: Optional[OptimizeResult] = None) -> None:
        super().__init__(message)
        self.result = result


class OutOfDomainError(SolverError):
    """The oracle returned a non-finite objective value at the current iterate."""


class MaxIterReachedError(SolverError):
    """The iteration budget was exhausted before convergence."""


class MissingHessianError(SolverError):
    """A second-order method received an evaluation without a Hessian."""


__all__ = [
    "Array",
    "Evaluation",
    "Gradient",
    "Hessian",
    "MaxIterReachedError",
    "MissingHessianError",
    "Objective",
    "OptimizeResult",
    "Oracle",
    "OracleOutput",
    "OutOfDomainError",
    "Problem",
    "SolverError",
    "Status",
    "as_evaluation",
]
