import numpy as np
from typing import Iterator, Optional
from .errors import PreconditionError


class PointSet:
    """
    Ordered, append-only set of training points of a fixed dimension.

    A PointSet is owned by the caller and shared by reference with every
    GaussianProcess built from it. Points can be appended but never removed
    or reordered; after appending outside of the GP, call
    GaussianProcess.refresh() so its cached covariance catches up.
    """

    def __init__(self, dimension: int, points: Optional[np.ndarray] = None,
                 capacity: Optional[int] = None):
        if dimension < 1:
            raise PreconditionError(f"dimension must be >= 1, got {dimension}")
        if capacity is not None and capacity < 1:
            raise PreconditionError(f"capacity must be >= 1, got {capacity}")
        self._dimension = int(dimension)
        self._capacity = capacity
        self._points = []
        if points is not None:
            self.extend(points)

    @classmethod
    def from_array(cls, X: np.ndarray, capacity: Optional[int] = None) -> 'PointSet':
        """Build a PointSet from an (n x m) array, or a 1-D array of n scalars"""
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        return cls(X.shape[1], X, capacity)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def capacity(self) -> Optional[int]:
        return self._capacity

    def append(self, x: np.ndarray) -> None:
        x = np.array(np.atleast_1d(x), dtype=float).reshape(-1)
        if x.size != self._dimension:
            raise PreconditionError(
                f"point has dimension {x.size}, expected {self._dimension}")
        if self._capacity is not None and len(self._points) >= self._capacity:
            raise PreconditionError(
                f"point set is full (capacity {self._capacity})")
        # Stored points are frozen so nobody can edit them in place
        x.flags.writeable = False
        self._points.append(x)

    def extend(self, X: np.ndarray) -> None:
        X = np.asarray(X, dtype=float)
        if X.size == 0:
            return
        if X.ndim == 1 and self._dimension == 1:
            X = X.reshape(-1, 1)
        for x in np.atleast_2d(X):
            self.append(x)

    def as_array(self) -> np.ndarray:
        """Copy of the points as an (n x m) array"""
        if not self._points:
            return np.zeros((0, self._dimension))
        return np.vstack(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, i: int) -> np.ndarray:
        return self._points[i]

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __repr__(self):
        return f"PointSet(n={len(self)}, dimension={self._dimension}, capacity={self._capacity})"
