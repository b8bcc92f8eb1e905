"""
Numerical helper routines shared by the solvers and line searches.

Everything here is pure NumPy. Bounds may contain ``-np.inf``/``np.inf`` to
leave a coordinate free on one or both sides.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array


def box_projection(x: Array, lower: Array, upper: Array) -> Array:
    """
    Clamp ``x`` component-wise into ``[lower, upper]``.

    Returns a new array; ``x`` is left untouched. Projection is idempotent:
    projecting an already feasible point returns an equal point.
    """

    projected = np.array(x, dtype=float, copy=True)
    projected = np.maximum(projected, lower)
    projected = np.minimum(projected, upper)
    return projected


def infinity_norm(v: Array) -> float:
    """Largest absolute component of ``v`` (``0.0`` for an empty vector)."""
    v = np.asarray(v, dtype=float)
    if v.size == 0:
        return 0.0
    return float(np.max(np.abs(v)))


def is_out_of_domain(f: float) -> bool:
    """Return True when an objective value is NaN or infinite."""
    return not np.isfinite(f)


def try_inverse(mat: Array) -> Optional[Array]:
    """Invert ``mat``, returning ``None`` instead of raising when singular."""
    try:
        inverse = np.linalg.inv(mat)
    except np.linalg.LinAlgError:
        return None
    if not np.all(np.isfinite(inverse)):
        return None
    return inverse


def symmetrize(matrix: Array) -> Array:
    """
    Return the symmetric part of ``matrix``.

    Used to wash out the floating-point asymmetry accumulated by repeated
    rank-two updates.
    """

    return 0.5 * (matrix + matrix.T)


def validate_bounds(lower: Array, upper: Array, dim: Optional[int] = None) -> tuple[Array, Array]:
    """Convert bounds to float arrays and check their shapes."""
    lower = np.asarray(lower, dtype=float).reshape(-1)
    upper = np.asarray(upper, dtype=float).reshape(-1)
    if lower.shape != upper.shape:
        raise ValueError("lower and upper bounds must have the same length")
    if dim is not None and lower.size != dim:
        raise ValueError(
            f"bounds have length {lower.size} but the point has dimension {dim}"
        )
    if np.any(lower > upper):
        raise ValueError("lower bound must not exceed upper bound")
    return lower, upper


__all__ = [
    "box_projection",
    "infinity_norm",
    "is_out_of_domain",
    "symmetrize",
    "try_inverse",
    "validate_bounds",
]
