"""fullGPy: Python implementation of dense Gaussian Process regression"""

from .gp import (
    GaussianProcess,
    newGP
)

from .kernel import (
    Kernel,
    SquaredExponential,
    Periodic
)

from .points import (
    PointSet
)

from .covar import (
    covar,
    covar_symm,
    diff_covar_symm
)

from .matrix import (
    Cholesky
)

from .likelihood import (
    TrainingLogLikelihood,
    negative_log_likelihood
)

from .params import (
    LearningResult,
    learn_params
)

from .utils.solver import (
    SolverOptions,
    SolverSummary,
    TerminationType,
    solve
)

from .errors import (
    PreconditionError,
    NumericalError
)

from .config import (
    get_config,
    get_logger,
    set_log_level,
    __version__
)


__all__ = [
    'GaussianProcess',
    'newGP',
    'Kernel',
    'SquaredExponential',
    'Periodic',
    'PointSet',
    'covar',
    'covar_symm',
    'diff_covar_symm',
    'Cholesky',
    'TrainingLogLikelihood',
    'negative_log_likelihood',
    'LearningResult',
    'learn_params',
    'SolverOptions',
    'SolverSummary',
    'TerminationType',
    'solve',
    'PreconditionError',
    'NumericalError',
    'get_config',
    'get_logger',
    'set_log_level',
    '__version__'
]
