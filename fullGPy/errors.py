class PreconditionError(ValueError):
    """Raised when a caller passes arguments that would break a GP invariant
    (bad noise, capacity, dimension, index or target length)."""


class NumericalError(RuntimeError):
    """Raised when the training covariance cannot be factorized, i.e. it is
    not symmetric positive-definite. This points to an invalid kernel rather
    than a bad argument."""
