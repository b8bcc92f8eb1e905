"""Grippo-Lampariello-Lucidi non-monotone line search with quadratic steps.

The Armijo test is made against the largest objective value among the last
``m`` iterates instead of the current one. This is the line search spectral
(Barzilai-Borwein) directions are usually paired with.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import numpy as np

from ..core import Array, Evaluation, as_evaluation
from ..logging import get_logger
from ..utils import is_out_of_domain
from .base import EvalOracle, LineSearch, sufficient_decrease

logger = get_logger(__name__)


@dataclass(frozen=True)
class GLLConfig:
    """
    Constants of the GLL line search.

    Args:
        c1: Armijo sensitivity.
        m: Length of the history window; ``m=1`` gives monotone Armijo.
        sigma1: Lower safeguard of the interpolated step.
        sigma2: Upper safeguard, as a fraction of the current step.
    """

    c1: float = 1e-4
    m: int = 10
    sigma1: float = 0.1
    sigma2: float = 0.9

    def __post_init__(self) -> None:
        if not (0 < self.c1 < 1):
            raise ValueError("Armijo constant c1 must lie in (0, 1)")
        if self.m < 1:
            raise ValueError("History length m must be at least 1.")
        if not (0 < self.sigma1 < self.sigma2 < 1):
            raise ValueError("Require 0 < sigma1 < sigma2 < 1")


class GLLQuadratic(LineSearch):
    def __init__(self, config: Optional[GLLConfig] = None) -> None:
        self.config = config or GLLConfig()
        self._f_previous: Deque[float] = deque(maxlen=self.config.m)

    @property
    def history(self) -> list[float]:
        """Objective values currently in the window, oldest first."""
        return list(self._f_previous)

    def reset(self) -> None:
        self._f_previous.clear()

    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        cfg = self.config
        self._f_previous.append(eval_x_k.f)
        f_max = max(self._f_previous)
        slope = float(np.dot(eval_x_k.g, direction))

        t = 1.0
        for _ in range(max_iter):
            eval_next = as_evaluation(oracle(x_k + t * direction))

            if not is_out_of_domain(eval_next.f) and sufficient_decrease(
                f_max, eval_next.f, eval_x_k.g, t, direction, cfg.c1
            ):
                logger.debug("Sufficient decrease condition met. Exiting with step size %s", t)
                return t

            if t <= 0.1 or is_out_of_domain(eval_next.f):
                logger.debug("Step size %s too small or out of domain; bisecting.", t)
                t *= 0.5
            else:
                denominator = eval_next.f - eval_x_k.f - t * slope
                t_tmp = -0.5 * t * t * slope / denominator if denominator != 0.0 else np.nan
                if not np.isfinite(t_tmp) or t_tmp <= 0.0:
                    # no interior minimizer of the quadratic model: ascent or linear ray
                    t *= 0.5
                elif cfg.sigma1 * t < t_tmp < cfg.sigma2 * t:
                    logger.debug("Safeguarded step size: %s", t_tmp)
                    t = t_tmp
                else:
                    logger.debug(
                        "t_tmp = %s not in [%s, %s]. Bisecting t_tmp.",
                        t_tmp,
                        cfg.sigma1 * t,
                        cfg.sigma2 * t,
                    )
                    t = 0.5 * t_tmp
        logger.warning("Max iter reached. Early stopping with step size %s", t)
        return t


__all__ = ["GLLConfig", "GLLQuadratic"]
