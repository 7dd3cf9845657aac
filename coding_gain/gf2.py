"""Vectors and matrices over GF(2).

Binary vectors and matrices are plain numpy ``uint8`` arrays holding 0/1.
Everything returned from this module is read-only; the mod-2 reduction is
applied at every operation boundary so callers never see values outside
the field.
"""

from __future__ import annotations

import numpy as np

from coding_gain.errors import DimensionMismatchError


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _check_binary(arr: np.ndarray) -> np.ndarray:
    if arr.size and not np.all((arr == 0) | (arr == 1)):
        raise ValueError(f"GF(2) entries must be 0 or 1, got {np.unique(arr).tolist()}")
    return arr.astype(np.uint8)


def as_vector(values) -> np.ndarray:
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise ValueError(f"vector must be 1-D, got shape {arr.shape}")
    return _freeze(_check_binary(arr))


def as_matrix(rows) -> np.ndarray:
    arr = np.asarray(rows)
    if arr.ndim != 2:
        raise ValueError(f"matrix must be 2-D with equal-length rows, got shape {arr.shape}")
    return _freeze(_check_binary(arr))


def height(matrix: np.ndarray) -> int:
    return int(np.shape(matrix)[0])


def width(matrix: np.ndarray) -> int:
    return int(np.shape(matrix)[1])


def transpose(matrix) -> np.ndarray:
    m = as_matrix(matrix)
    return _freeze(np.ascontiguousarray(m.T))


def multiply(left, right) -> np.ndarray:
    """Product over GF(2).

    ``left`` is either a vector (length must equal the height of ``right``)
    or a matrix whose width equals the height of ``right``. A matrix on the
    left doubles as a batch of row vectors, which is how the estimator
    encodes many messages at once.
    """
    a = np.asarray(left)
    b = as_matrix(right)
    if a.ndim == 1:
        a = as_vector(a)
        if a.shape[0] != height(b):
            raise DimensionMismatchError("vector * matrix", a.shape, b.shape)
    else:
        a = as_matrix(a)
        if width(a) != height(b):
            raise DimensionMismatchError("matrix * matrix", a.shape, b.shape)
    out = (a.astype(np.int64) @ b.astype(np.int64)) % 2
    return _freeze(out.astype(np.uint8))


def rank(matrix) -> int:
    """Row rank over GF(2), by Gaussian elimination."""
    m = np.array(as_matrix(matrix), dtype=np.uint8)
    rows, cols = m.shape
    r = 0
    for c in range(cols):
        if r == rows:
            break
        pivots = np.nonzero(m[r:, c])[0]
        if pivots.size == 0:
            continue
        p = r + int(pivots[0])
        if p != r:
            m[[r, p]] = m[[p, r]]
        below = np.nonzero(m[:, c])[0]
        for i in below:
            if i != r:
                m[i] ^= m[r]
        r += 1
    return r


def hamming_weight(vector) -> int:
    return int(np.count_nonzero(as_vector(vector)))


def hamming_distances(rows, others) -> np.ndarray:
    """Distance from every row of ``rows`` to every row of ``others``, shape ``(len(rows), len(others))``."""
    a, b = as_matrix(rows), as_matrix(others)
    if width(a) != width(b):
        raise DimensionMismatchError("hamming distance", a.shape, b.shape)
    return np.count_nonzero(a[:, None, :] != b[None, :, :], axis=2)
