import numpy as np


def sq_distance(x: np.ndarray, y: np.ndarray) -> float:
    """
    Squared Euclidean distance between two points.

    Args:
        x: First point (m,)
        y: Second point (m,)

    Returns:
        Squared distance
    """
    diff = np.asarray(x, dtype=float) - np.asarray(y, dtype=float)
    return float(diff @ diff)


def scaled_sq_diffs(x: np.ndarray, y: np.ndarray, scales: np.ndarray) -> np.ndarray:
    """
    Per-coordinate squared differences divided by squared scales.

    Args:
        x: First point (m,)
        y: Second point (m,)
        scales: Length scale per coordinate (m,) or a single scale

    Returns:
        Array (m,) of ((x - y) / scales)**2
    """
    diff = (np.asarray(x, dtype=float) - np.asarray(y, dtype=float)) / scales
    return diff**2
