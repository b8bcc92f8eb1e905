"""Step-length strategies used by the iteration driver."""

from .backtracking import BackTracking, BackTrackingB, BackTrackingConfig
from .base import (
    LineSearch,
    curvature,
    projected_sufficient_decrease,
    strong_curvature,
    strong_wolfe,
    sufficient_decrease,
)
from .gll import GLLConfig, GLLQuadratic
from .more_thuente import MoreThuente, MoreThuenteConfig
from .nosearch import NoSearch

__all__ = [
    "BackTracking",
    "BackTrackingB",
    "BackTrackingConfig",
    "GLLConfig",
    "GLLQuadratic",
    "LineSearch",
    "MoreThuente",
    "MoreThuenteConfig",
    "NoSearch",
    "curvature",
    "projected_sufficient_decrease",
    "strong_curvature",
    "strong_wolfe",
    "sufficient_decrease",
]
