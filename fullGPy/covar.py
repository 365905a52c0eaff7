import numpy as np
from typing import Optional, Sequence
from .kernel import Kernel


def covar(kernel: Kernel, points: Sequence[np.ndarray], x: np.ndarray,
          out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Calculate cross covariance between the training points and one query point

    Args:
        kernel: Covariance function
        points: Training points (n of them)
        x: Query point
        out: Optional output vector of length >= n

    Returns:
        Vector (n,) whose i-th entry is kernel(points[i], x)
    """
    n = len(points)
    k = np.empty(n) if out is None else out[:n]
    for i in range(n):
        k[i] = kernel.evaluate(points[i], x)
    return k


def covar_symm(kernel: Kernel, points: Sequence[np.ndarray], noise: float,
               K: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Calculate symmetric covariance matrix for the training points

    Only the lower triangle is evaluated and then mirrored; the kernel is
    assumed symmetric. The diagonal is 1 + noise.

    Args:
        kernel: Covariance function
        points: Training points (n of them)
        noise: Noise (nugget) parameter added to the diagonal
        K: Optional preallocated matrix of shape >= (n, n); only its
           top-left n x n block is written

    Returns:
        The n x n covariance block (a view into K when K is given)
    """
    n = len(points)
    if K is None:
        K = np.empty((n, n))
    for i in range(n):
        K[i, i] = 1.0 + noise
        for j in range(i):
            K[i, j] = kernel.evaluate(points[i], points[j])
            K[j, i] = K[i, j]
    return K[:n, :n]


def diff_covar_symm(kernel: Kernel, points: Sequence[np.ndarray]) -> np.ndarray:
    """
    Calculate the derivatives of the symmetric covariance matrix with respect
    to each kernel parameter.

    Args:
        kernel: Covariance function
        points: Training points (n of them)

    Returns:
        dK: Array (p, n, n), dK[k] = d K / d params[k]. The diagonal is zero
            since 1 + noise does not depend on the kernel parameters.
    """
    n = len(points)
    p = kernel.params.size
    dK = np.zeros((p, n, n))
    for i in range(n):
        for j in range(i):
            dK[:, i, j] = kernel.gradient(points[i], points[j])
            dK[:, j, i] = dK[:, i, j]
    return dK
