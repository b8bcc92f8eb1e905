"""Line-search based descent methods for smooth, box-constrained minimization.

Example
-------
>>> import numpy as np
>>> from minimizers import BFGS, MoreThuente, Problem
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, dim=2)
>>> solver = BFGS(tol=1e-8, x0=np.array([-1.2, 1.0]))
>>> res = solver.minimize(MoreThuente(), problem, 500, 50)
>>> bool(np.allclose(res.x, [1.0, 1.0], atol=1e-5))
True
"""

__version__ = "0.1.0"

from .core import (
    Evaluation,
    MaxIterReachedError,
    MissingHessianError,
    OptimizeResult,
    OutOfDomainError,
    Problem,
    SolverError,
    Status,
    as_evaluation,
)
from .factory import (
    LineSearchConfig,
    SolverConfig,
    create_line_search,
    create_solver,
    minimize,
)
from .line_search import (
    BackTracking,
    BackTrackingB,
    BackTrackingConfig,
    GLLConfig,
    GLLQuadratic,
    LineSearch,
    MoreThuente,
    MoreThuenteConfig,
    NoSearch,
)
from .logging import configure_logging, get_logger, set_log_level
from .newton import Newton, ProjectedNewton
from .quasi_newton import (
    BFGS,
    BFGSB,
    DFP,
    DFPB,
    SR1,
    SR1B,
    Broyden,
    BroydenB,
    QuasiNewton,
    QuasiNewtonB,
)
from .solver import BoundedSolver, Solver
from .steepest_descent import (
    CoordinateDescent,
    GradientDescent,
    PnormDescent,
    ProjectedGradientDescent,
    SpectralProjectedGradient,
)
from .utils import box_projection, infinity_norm

__all__ = [
    "BFGS",
    "BFGSB",
    "BackTracking",
    "BackTrackingB",
    "BackTrackingConfig",
    "BoundedSolver",
    "Broyden",
    "BroydenB",
    "CoordinateDescent",
    "DFP",
    "DFPB",
    "Evaluation",
    "GLLConfig",
    "GLLQuadratic",
    "GradientDescent",
    "LineSearch",
    "LineSearchConfig",
    "MaxIterReachedError",
    "MissingHessianError",
    "MoreThuente",
    "MoreThuenteConfig",
    "Newton",
    "NoSearch",
    "OptimizeResult",
    "OutOfDomainError",
    "PnormDescent",
    "Problem",
    "ProjectedGradientDescent",
    "ProjectedNewton",
    "QuasiNewton",
    "QuasiNewtonB",
    "SR1",
    "SR1B",
    "Solver",
    "SolverConfig",
    "SolverError",
    "SpectralProjectedGradient",
    "Status",
    "as_evaluation",
    "box_projection",
    "configure_logging",
    "create_line_search",
    "create_solver",
    "get_logger",
    "infinity_norm",
    "minimize",
    "set_log_level",
]
