"""
Negative log marginal likelihood of the training data and its gradient with
respect to the kernel parameters.

For a zero-mean GP with covariance K (noise ridge included) and targets t,

    nll = 0.5 * t' K^-1 t + 0.5 * log|K| + 0.5 * n * log(2 pi)

and, writing alpha = K^-1 t,

    d nll / d theta_k = 0.5 * tr((K^-1 - alpha alpha') dK/dtheta_k)
"""
import numpy as np
from typing import Sequence, Tuple
from .covar import covar_symm, diff_covar_symm
from .errors import NumericalError
from .kernel import Kernel
from .matrix import Cholesky


def negative_log_likelihood(kernel: Kernel, points: Sequence[np.ndarray],
                            targets: np.ndarray, noise: float) -> float:
    """
    Negative log marginal likelihood at the kernel's current parameters

    Args:
        kernel: Covariance function
        points: Training points
        targets: Training targets (n,)
        noise: Noise (nugget) parameter

    Returns:
        nll value
    """
    chol = Cholesky(covar_symm(kernel, points, noise))
    alpha = chol.solve(targets)
    n = len(points)
    return 0.5 * (targets @ alpha + chol.log_det() + n * np.log(2.0 * np.pi))


class TrainingLogLikelihood:
    """
    Objective for hyperparameter learning: maps a kernel parameter vector to
    the negative log marginal likelihood and its gradient.

    Trial parameters are evaluated on a private copy of the kernel, so the
    caller's kernel is never modified.
    """

    def __init__(self, points: Sequence[np.ndarray], targets: np.ndarray,
                 kernel: Kernel, noise: float):
        self.points = points
        self.targets = np.array(targets, dtype=float)
        self.kernel = kernel.copy()
        self.noise = noise
        self.evaluations = 0

    @property
    def n(self) -> int:
        return len(self.points)

    def __call__(self, params: np.ndarray) -> Tuple[float, np.ndarray]:
        self.evaluations += 1
        self.kernel.params = params

        K = covar_symm(self.kernel, self.points, self.noise)
        try:
            chol = Cholesky(K)
        except NumericalError:
            # Unusable trial point; an infinite cost makes the line search back off
            return np.inf, np.zeros(len(params))

        alpha = chol.solve(self.targets)
        nll = 0.5 * (self.targets @ alpha + chol.log_det()
                     + self.n * np.log(2.0 * np.pi))

        dK = diff_covar_symm(self.kernel, self.points)
        W = chol.inverse() - np.outer(alpha, alpha)
        # tr(W dK_k) for every k; both matrices are symmetric
        grad = 0.5 * np.einsum("ij,kij->k", W, dK)
        return float(nll), grad
