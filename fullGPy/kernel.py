import copy
import numpy as np
from abc import ABC, abstractmethod
from typing import Sequence, Union
from .errors import PreconditionError
from .utils.distance import sq_distance, scaled_sq_diffs


class Kernel(ABC):
    """
    Covariance function with a mutable hyperparameter vector.

    The GP engine only relies on evaluate(), gradient() and params. Kernels
    must be symmetric, positive semi-definite and equal 1 at zero distance,
    since the covariance diagonal is fixed at 1 + noise.
    """

    def __init__(self, params: Union[float, Sequence[float], np.ndarray]):
        self._params = np.array(np.atleast_1d(params), dtype=float)

    @property
    def params(self) -> np.ndarray:
        """Live hyperparameter vector; in-place edits are seen by every holder"""
        return self._params

    @params.setter
    def params(self, value) -> None:
        value = np.asarray(value, dtype=float).reshape(-1)
        if value.shape != self._params.shape:
            raise PreconditionError(
                f"kernel expects {self._params.size} parameters, got {value.size}")
        self._params[:] = value

    @abstractmethod
    def evaluate(self, x: np.ndarray, y: np.ndarray) -> float:
        """Kernel value k(x, y)"""

    @abstractmethod
    def gradient(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Derivatives of k(x, y) with respect to each entry of params"""

    def copy(self) -> 'Kernel':
        return copy.deepcopy(self)

    def __repr__(self):
        return f"{type(self).__name__}(params={self._params.tolist()})"


class SquaredExponential(Kernel):
    """
    Squared exponential kernel with one length scale per coordinate (or a
    single shared one):

        k(x, y) = exp(-0.5 * sum(((x - y) / l)**2))
    """

    def evaluate(self, x, y):
        return float(np.exp(-0.5 * np.sum(scaled_sq_diffs(x, y, self._params))))

    def gradient(self, x, y):
        r2 = scaled_sq_diffs(x, y, self._params)
        k = np.exp(-0.5 * np.sum(r2))
        # d/dl_i of -0.5 * (x_i - y_i)^2 / l_i^2 is (x_i - y_i)^2 / l_i^3
        grad = k * r2 / self._params
        if self._params.size == 1:
            return np.array([np.sum(grad)])
        return grad


class Periodic(Kernel):
    """
    Periodic kernel on the Euclidean distance r = |x - y|, with
    params = [lengthscale, period]:

        k(x, y) = exp(-2 * sin(pi * r / period)**2 / lengthscale**2)
    """

    def __init__(self, lengthscale: float = 1.0, period: float = 1.0):
        super().__init__([lengthscale, period])

    def evaluate(self, x, y):
        l, p = self._params
        s = np.sin(np.pi * np.sqrt(sq_distance(x, y)) / p)
        return float(np.exp(-2.0 * s * s / (l * l)))

    def gradient(self, x, y):
        l, p = self._params
        r = np.sqrt(sq_distance(x, y))
        arg = np.pi * r / p
        s, c = np.sin(arg), np.cos(arg)
        k = np.exp(-2.0 * s * s / (l * l))
        dl = k * 4.0 * s * s / l**3
        dp = k * 4.0 * s * c * arg / (l * l * p)
        return np.array([dl, dp])
