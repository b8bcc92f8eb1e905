"""Armijo backtracking line searches (Boyd & Vandenberghe, section 9.2)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core import Array, Evaluation, as_evaluation
from ..logging import get_logger
from ..utils import box_projection, is_out_of_domain, validate_bounds
from .base import (
    EvalOracle,
    LineSearch,
    check_armijo_constants,
    projected_sufficient_decrease,
    sufficient_decrease,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackTrackingConfig:
    """
    Constants of the backtracking line search.

    Args:
        c1: Armijo sensitivity, recommended range [0.01, 0.3] (1e-4 is common).
        beta: Shrink factor applied to ``t`` after a rejected trial,
            recommended range [0.1, 0.8].
    """

    c1: float = 1e-4
    beta: float = 0.5

    def __post_init__(self) -> None:
        check_armijo_constants(self.c1, self.beta)


class BackTracking(LineSearch):
    """Shrink ``t`` from 1 by ``beta`` until the Armijo condition holds."""

    def __init__(self, config: Optional[BackTrackingConfig] = None) -> None:
        self.config = config or BackTrackingConfig()

    @property
    def c1(self) -> float:
        return self.config.c1

    @property
    def beta(self) -> float:
        return self.config.beta

    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        t = 1.0
        for _ in range(max_iter):
            x_next = x_k + t * direction
            eval_next = as_evaluation(oracle(x_next))
            if is_out_of_domain(eval_next.f):
                logger.debug(
                    "Step size too big: %s is out of domain. Decreasing step by beta",
                    x_next,
                )
                t *= self.beta
                continue
            if sufficient_decrease(
                eval_x_k.f, eval_next.f, eval_x_k.g, t, direction, self.c1
            ):
                return t
            t *= self.beta
        logger.warning("Max iter reached. Early stopping with step size %s", t)
        return t


class BackTrackingB(LineSearch):
    """Backtracking for box-constrained solvers.

    Each trial point is projected into ``[lower, upper]`` and accepted with the
    projected sufficient-decrease test.
    """

    def __init__(
        self,
        lower: Array,
        upper: Array,
        config: Optional[BackTrackingConfig] = None,
    ) -> None:
        self.config = config or BackTrackingConfig()
        self.lower, self.upper = validate_bounds(lower, upper)

    @property
    def c1(self) -> float:
        return self.config.c1

    @property
    def beta(self) -> float:
        return self.config.beta

    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        t = 1.0
        for i in range(max_iter):
            x_next = box_projection(x_k + t * direction, self.lower, self.upper)
            eval_next = as_evaluation(oracle(x_next))
            if is_out_of_domain(eval_next.f):
                logger.debug(
                    "Step size too big: %s is out of domain. Decreasing step by beta",
                    x_next,
                )
                t *= self.beta
                continue
            if projected_sufficient_decrease(
                x_k, x_next, eval_x_k.f, eval_next.f, t, self.c1
            ):
                logger.debug(
                    "Modified Armijo rule met. Exiting with step size %s at iteration %d",
                    t,
                    i,
                )
                return t
            t *= self.beta
        logger.warning("Max iter reached. Early stopping with step size %s", t)
        return t


__all__ = ["BackTracking", "BackTrackingB", "BackTrackingConfig"]
