# vector.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Fixed-length dense vector of float64 values.  Every vector the engine
#   produces is freshly allocated; nothing is resized or copied in place.

import numpy as np
from sparse_pagerank.errors import ResourceExhausted


class Vector:
    """
    Dense probability vector.

    Attributes:
        dimension (int): number of entries
        entries (np.ndarray): float64 array, len(entries) == dimension
    """
    __slots__ = ("dimension", "entries")

    def __init__(self, entries):
        self.entries = entries
        self.dimension = len(entries)

    def __len__(self):
        return self.dimension

    def __repr__(self):
        return f"Vector(dimension={self.dimension})"

    def sum(self):
        return float(self.entries.sum())

    def tolist(self):
        return self.entries.tolist()


def create_vector(size):
    """
    Allocate a Vector of `size` entries, all 0.0.

    Raises:
        ValueError: negative size
        ResourceExhausted: numpy could not allocate the backing array
    """
    if size < 0:
        raise ValueError(f"vector size must be non-negative, got {size}")
    try:
        entries = np.zeros(size, dtype=np.float64)
    except MemoryError as exc:
        raise ResourceExhausted(f"could not allocate vector of dimension {size}") from exc
    return Vector(entries)


def uniform_vector(size):
    """Vector of `size` entries, each 1/size (the PageRank starting point)."""
    v = create_vector(size)
    if size > 0:
        v.entries.fill(1.0 / size)
    return v


def release_vector(vector):
    """
    Drop a vector's backing storage.

    Returns:
        bool: False when there was nothing to release (None), True otherwise.
    """
    if vector is None:
        return False
    vector.entries = np.empty(0, dtype=np.float64)
    vector.dimension = 0
    return True
