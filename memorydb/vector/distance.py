"""
Cosine distance between two equal-length vectors.
"""

from typing import Sequence, Union
import numpy as np

from ..core.errors import DimensionMismatchError

VectorLike = Union[np.ndarray, Sequence[float]]

# Returned when either side is the zero vector and cosine is undefined
MAX_DISTANCE = 1.0


def cosine_distance(a: VectorLike, b: VectorLike) -> float:
    """
    Return 1 - cosine similarity of ``a`` and ``b``.

    Args:
        a: First vector
        b: Second vector, same length as ``a``

    Returns:
        Distance in [0, 2]; 0 for identical directions, 1.0 when either
        vector is all zeros.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    vec_a = np.asarray(a, dtype=np.float64).reshape(-1)
    vec_b = np.asarray(b, dtype=np.float64).reshape(-1)

    if vec_a.shape[0] != vec_b.shape[0]:
        raise DimensionMismatchError(vec_a.shape[0], vec_b.shape[0])

    if not vec_a.any() or not vec_b.any():
        return MAX_DISTANCE

    # Unit max-abs keeps the squared norms clear of overflow and underflow
    vec_a = vec_a / np.abs(vec_a).max()
    vec_b = vec_b / np.abs(vec_b).max()

    dot_product = np.sum(vec_a * vec_b)
    norm_product = np.sqrt(np.sum(vec_a * vec_a) * np.sum(vec_b * vec_b))
    similarity = float(dot_product / norm_product)

    # Rounding can push similarity just outside [-1, 1]
    similarity = min(1.0, max(-1.0, similarity))
    return 1.0 - similarity
