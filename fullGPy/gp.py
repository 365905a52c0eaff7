import numpy as np
from typing import Dict, Optional, Sequence, Tuple, Union
from .config import get_config, get_logger
from .covar import covar, covar_symm
from .errors import NumericalError, PreconditionError
from .kernel import Kernel
from .matrix import Cholesky
from .params import LearningResult, learn_params
from .points import PointSet
from .utils.solver import SolverOptions

Points = Union[PointSet, np.ndarray, Sequence[Sequence[float]]]


def _check_args(kernel: Kernel, noise: float, dimension: int, max_points: int) -> None:
    if kernel is None:
        raise PreconditionError("kernel must not be None")
    if not noise > 0 or not np.isfinite(noise):
        raise PreconditionError(f"noise must be a positive finite number, got {noise}")
    if max_points is None or max_points < 1:
        raise PreconditionError(f"max_points must be >= 1, got {max_points}")
    if dimension is None or dimension < 1:
        raise PreconditionError(f"dimension must be >= 1, got {dimension}")


def _as_point_set(points: Points) -> PointSet:
    """PointSets are shared as-is; anything else is copied into a new one"""
    if points is None:
        raise PreconditionError("points must not be None")
    if isinstance(points, PointSet):
        return points
    return PointSet.from_array(points)


def _random_targets(rng: np.random.Generator, n: int) -> np.ndarray:
    return rng.normal(0.0, get_config().init_target_std, size=n)


class GaussianProcess:
    """
    Gaussian Process regression over a dense, capacity-bounded training set.

    The GP caches the covariance of the training points (kernel values off the
    diagonal, 1 + noise on it) in a max_points x max_points buffer, its Cholesky
    factorization and the regressed coefficients K^-1 t. The three are rebuilt
    together, from scratch, whenever the points, targets or kernel parameters
    change.

    The point set and the kernel are shared with the caller, not copied. After
    appending to the point set from outside, call refresh().
    """

    def __init__(self, kernel: Kernel, noise: float, points: Points,
                 targets: np.ndarray, max_points: int):
        """
        Build a GP from training points and their targets.

        Args:
            kernel: Covariance function (shared, parameters may be learned)
            noise: Noise (nugget) parameter, > 0
            points: PointSet (shared by reference) or (n x m) array (copied)
            targets: Training targets (n,)
            max_points: Capacity of the training set

        Raises:
            PreconditionError: on invalid arguments
            NumericalError: if the training covariance is not positive definite
        """
        points = _as_point_set(points)
        _check_args(kernel, noise, points.dimension, max_points)
        n = len(points)
        if n > max_points:
            raise PreconditionError(
                f"point set holds {n} points, more than max_points={max_points}")
        targets = np.asarray(targets, dtype=float).reshape(-1)
        if targets.size != n:
            raise PreconditionError(
                f"got {targets.size} targets for {n} training points")

        self.kernel = kernel
        self.noise = float(noise)
        self.points = points
        self.max_points = int(max_points)
        self.last_learning: Optional[LearningResult] = None

        self._targets = np.zeros(self.max_points)
        self._targets[:n] = targets
        self._ntargets = n
        self._regressed = np.zeros(self.max_points)
        self._K = np.zeros((self.max_points, self.max_points))
        self._X = []
        self._chol = None

        self.refresh()

    @classmethod
    def random(cls, kernel: Kernel, noise: float, dimension: int, max_points: int,
               seed: Optional[int] = None) -> 'GaussianProcess':
        """
        Build a GP on a small random design: max_points // 10 + 1 points drawn
        uniformly in [-1, 1]^dimension with N(0, 0.1^2) targets.

        Args:
            kernel: Covariance function
            noise: Noise (nugget) parameter, > 0
            dimension: Dimension of the input space
            max_points: Capacity of the training set
            seed: Optional seed for the random design

        Returns:
            New GaussianProcess
        """
        _check_args(kernel, noise, dimension, max_points)
        config = get_config()
        rng = np.random.default_rng(seed)
        n = min(max_points // config.init_points_divisor + 1, max_points)
        lo, hi = config.init_box
        points = PointSet(dimension, rng.uniform(lo, hi, size=(n, dimension)))
        return cls(kernel, noise, points, _random_targets(rng, n), max_points)

    @classmethod
    def from_points(cls, kernel: Kernel, noise: float, points: Points,
                    max_points: int, seed: Optional[int] = None) -> 'GaussianProcess':
        """
        Build a GP on existing points with random N(0, 0.1^2) targets.

        Args:
            kernel: Covariance function
            noise: Noise (nugget) parameter, > 0
            points: PointSet (shared by reference) or (n x m) array (copied)
            max_points: Capacity of the training set
            seed: Optional seed for the random targets

        Returns:
            New GaussianProcess
        """
        points = _as_point_set(points)
        _check_args(kernel, noise, points.dimension, max_points)
        if len(points) > max_points:
            raise PreconditionError(
                f"point set holds {len(points)} points, more than max_points={max_points}")
        rng = np.random.default_rng(seed)
        return cls(kernel, noise, points, _random_targets(rng, len(points)), max_points)

    @property
    def n(self) -> int:
        """Number of training points the caches were built on"""
        return len(self._X)

    @property
    def m(self) -> int:
        """Dimension of the input space"""
        return self.points.dimension

    @property
    def targets(self) -> np.ndarray:
        return self._readonly(self._targets[:self.n])

    @property
    def covariance(self) -> np.ndarray:
        """Valid n x n block of the training covariance"""
        return self._readonly(self._K[:self.n, :self.n])

    @property
    def regressed(self) -> np.ndarray:
        """Regressed coefficients K^-1 t"""
        return self._readonly(self._regressed[:self.n])

    @property
    def cholesky(self) -> Cholesky:
        if self._chol is None:
            raise NumericalError("no valid factorization; the last refresh failed")
        return self._chol

    @staticmethod
    def _readonly(a: np.ndarray) -> np.ndarray:
        view = a.view()
        view.flags.writeable = False
        return view

    def refresh(self, targets: Optional[np.ndarray] = None) -> None:
        """
        Rebuild covariance, Cholesky factorization and regressed coefficients
        from the current point set, targets, noise and kernel parameters.

        Args:
            targets: Full target vector; required when the point set has grown
                     since the last refresh

        Raises:
            PreconditionError: if the point set exceeds capacity or targets
                               do not match it
            NumericalError: if the covariance is not positive definite
        """
        n = len(self.points)
        if n > self.max_points:
            raise PreconditionError(
                f"point set holds {n} points, more than max_points={self.max_points}")
        if targets is not None:
            targets = np.asarray(targets, dtype=float).reshape(-1)
            if targets.size != n:
                raise PreconditionError(f"got {targets.size} targets for {n} training points")
            self._targets[:n] = targets
            self._ntargets = n
        elif self._ntargets != n:
            raise PreconditionError(
                f"point set holds {n} points but only {self._ntargets} targets are "
                "known; pass the full target vector to refresh()")

        self._X = [self.points[i] for i in range(n)]
        self._chol = None
        K = covar_symm(self.kernel, self._X, self.noise, self._K)
        chol = Cholesky(K)
        self._regressed[:] = 0.0
        self._regressed[:n] = chol.solve(self._targets[:n])
        self._chol = chol
        get_logger().debug(f"refreshed GP caches: n={n}, kernel={self.kernel}")

    def _check_synced(self) -> None:
        if len(self.points) != self.n:
            raise PreconditionError(
                f"point set changed from {self.n} to {len(self.points)} points; "
                "call refresh() first")

    def _check_point(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.size != self.m:
            raise PreconditionError(f"query point has dimension {x.size}, expected {self.m}")
        return x

    def _clamp(self, variance):
        # Negative variances only come from round-off when K is positive definite
        tol = get_config().variance_tolerance
        if np.any(variance < -tol):
            get_logger().warning(
                f"predictive variance {np.min(variance):.3g} below zero, clamping; "
                "the covariance may be badly conditioned")
        return np.maximum(variance, 0.0)

    def _mean_var(self, k: np.ndarray) -> Tuple[float, float]:
        mean = float(k @ self._regressed[:self.n])
        variance = 1.0 - float(k @ self.cholesky.solve(k))
        return mean, float(self._clamp(variance))

    def evaluate(self, x: np.ndarray) -> Tuple[float, float]:
        """
        Posterior mean and variance at a query point.

        Args:
            x: Query point (m,)

        Returns:
            Tuple of (mean, variance)
        """
        x = self._check_point(x)
        k = covar(self.kernel, self._X, x)
        return self._mean_var(k)

    def evaluate_training_point(self, i: int) -> Tuple[float, float]:
        """
        Posterior mean and variance at the i-th training point.

        The cross covariance is column i of the training covariance with the
        noise removed from its diagonal entry.

        Args:
            i: Training point index in [0, n)

        Returns:
            Tuple of (mean, variance)
        """
        n = self.n
        if not 0 <= i < n:
            raise PreconditionError(f"training point index {i} out of range [0, {n})")
        k = self._K[:n, i].copy()
        k[i] -= self.noise
        return self._mean_var(k)

    def predict(self, Xref: np.ndarray) -> Dict:
        """
        Posterior mean and variance at several reference points.

        Args:
            Xref: Reference points (nn x m)

        Returns:
            Dictionary with the following keys:
                "mean": Mean predictions (nn,)
                "s2": Variance predictions (nn,)
        """
        Xref = np.asarray(Xref, dtype=float)
        if Xref.ndim == 1:
            Xref = Xref.reshape(-1, 1) if self.m == 1 else Xref.reshape(1, -1)
        if Xref.shape[1] != self.m:
            raise PreconditionError(
                f"reference points have dimension {Xref.shape[1]}, expected {self.m}")

        nn, n = Xref.shape[0], self.n
        k = np.array([covar(self.kernel, self._X, x) for x in Xref]).reshape(nn, n)
        mean = k @ self._regressed[:n]
        Kik = self.cholesky.solve(k.T).reshape(n, nn)
        s2 = 1.0 - np.sum(k.T * Kik, axis=0)

        return {
            "mean": mean,
            "s2": self._clamp(s2)
        }

    def add(self, x: np.ndarray, z: float) -> None:
        """
        Append one observation to the shared point set and rebuild the caches.

        Args:
            x: New input point (m,)
            z: New observation
        """
        self._check_synced()
        n = self.n
        if n >= self.max_points:
            raise PreconditionError(f"GP is full (max_points={self.max_points})")
        self.points.append(x)
        self._targets[n] = z
        self._ntargets = n + 1
        self.refresh()

    def log_likelihood(self) -> float:
        """Log marginal likelihood of the training targets at the current parameters"""
        t = self._targets[:self.n]
        return -0.5 * (t @ self._regressed[:self.n] + self.cholesky.log_det()
                       + self.n * np.log(2.0 * np.pi))

    def learn_hyperparams(self, options: Optional[SolverOptions] = None,
                          rollback_on_failure: bool = False) -> bool:
        """
        Learn kernel hyperparameters by maximizing the log likelihood of the
        training data, then rebuild the caches.

        The refined parameters are written into the shared kernel in place. By
        default this happens even when the solver reports an unusable result;
        pass rollback_on_failure=True to keep the previous parameters instead.

        Args:
            options: Solver settings (defaults used when None)
            rollback_on_failure: Keep the old parameters if the result is unusable

        Returns:
            Whether the solver reports a usable solution
        """
        self._check_synced()
        result = learn_params(self._X, self.targets, self.kernel, self.noise, options)
        self.last_learning = result

        if not result.usable and rollback_on_failure:
            get_logger().warning("rolling back to previous kernel parameters")
            return False

        self.kernel.params = result.params
        self.refresh()
        return result.usable

    def __repr__(self):
        return (f"GaussianProcess(n={self.n}, m={self.m}, max_points={self.max_points}, "
                f"noise={self.noise}, kernel={self.kernel})")


def newGP(kernel: Kernel,
          noise: float,
          points: Optional[Points] = None,
          targets: Optional[np.ndarray] = None,
          max_points: Optional[int] = None,
          dimension: Optional[int] = None,
          seed: Optional[int] = None) -> GaussianProcess:
    """
    Create a new Gaussian Process

    Args:
        kernel: Covariance function
        noise: Noise (nugget) parameter, > 0
        points: Training points; when None a random design of the given
                dimension is drawn
        targets: Training targets; when None they are drawn at random
        max_points: Capacity; defaults to the number of points given
        dimension: Input dimension, only used for random designs
        seed: Seed for random designs and targets

    Returns:
        New GaussianProcess
    """
    if points is None:
        if targets is not None:
            raise PreconditionError("targets given without points")
        return GaussianProcess.random(kernel, noise, dimension, max_points, seed)

    points = _as_point_set(points)
    if max_points is None:
        max_points = len(points)
    if targets is None:
        return GaussianProcess.from_points(kernel, noise, points, max_points, seed)
    return GaussianProcess(kernel, noise, points, targets, max_points)
