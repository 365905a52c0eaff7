import numpy as np
from scipy.linalg import cho_factor, cho_solve
from .errors import NumericalError


class Cholesky:
    """
    Lower Cholesky factorization of a symmetric positive-definite matrix.

    Raises NumericalError when the matrix is not positive-definite or holds
    non-finite entries, instead of handing back a meaningless factor.
    """

    def __init__(self, K: np.ndarray):
        if K.shape[0] == 0:
            self._factor = (np.zeros((0, 0)), True)
            return
        try:
            self._factor = cho_factor(K, lower=True)
        except np.linalg.LinAlgError as e:
            raise NumericalError(
                f"covariance matrix ({K.shape[0]}x{K.shape[0]}) is not positive definite; "
                "check that the kernel is a valid positive semi-definite kernel") from e
        except ValueError as e:
            raise NumericalError(f"covariance matrix has non-finite entries: {e}") from e

    @property
    def L(self) -> np.ndarray:
        """Lower-triangular factor"""
        return np.tril(self._factor[0])

    @property
    def n(self) -> int:
        return self._factor[0].shape[0]

    def solve(self, b: np.ndarray) -> np.ndarray:
        """Solve K x = b"""
        if self.n == 0:
            return np.zeros_like(b, dtype=float)
        return cho_solve(self._factor, b)

    def log_det(self) -> float:
        """log |K|"""
        return 2.0 * float(np.sum(np.log(np.diag(self._factor[0]))))

    def inverse(self) -> np.ndarray:
        if self.n == 0:
            return np.zeros((0, 0))
        return cho_solve(self._factor, np.eye(self.n))
