"""Fixed unit step."""

from __future__ import annotations

from ..core import Array, Evaluation
from .base import EvalOracle, LineSearch


class NoSearch(LineSearch):
    """Always return ``t = 1`` without querying the oracle."""

    def compute_step_len(
        self,
        x_k: Array,
        eval_x_k: Evaluation,
        direction: Array,
        oracle: EvalOracle,
        max_iter: int,
    ) -> float:
        return 1.0


__all__ = ["NoSearch"]
