from __future__ import annotations

from functools import lru_cache

import numpy as np

from coding_gain import gf2
from coding_gain.errors import CodeConstructionError, DimensionMismatchError

DEFAULT_GENERATOR = gf2.as_matrix(
    [
        [1, 0, 0, 0, 0, 0, 0, 0, 1, 1],
        [0, 1, 0, 0, 0, 0, 0, 1, 1, 1],
        [0, 0, 1, 0, 0, 0, 1, 1, 0, 1],
        [0, 0, 0, 1, 0, 0, 1, 1, 1, 0],
        [0, 0, 0, 0, 1, 0, 1, 1, 1, 1],
        [0, 0, 0, 0, 0, 1, 1, 1, 0, 0],
    ]
)

DEFAULT_PARITY_CHECK = gf2.as_matrix(
    [
        [0, 1, 1, 1, 0, 0, 1, 1, 1, 1],
        [0, 1, 0, 0, 1, 1, 0, 1, 1, 1],
        [1, 0, 1, 0, 0, 1, 0, 1, 1, 0],
        [0, 0, 0, 0, 1, 1, 1, 0, 1, 1],
    ]
)


def enumerate_vectors(size: int) -> np.ndarray:
    """All ``2**size`` binary vectors of length ``size``, one per row.

    Rows follow binary counting order with the first coordinate as the most
    significant bit, so row ``i`` is the binary representation of ``i``.
    """
    size = int(size)
    if size < 0:
        raise ValueError(f"size must be >= 0, got {size}")
    if size == 0:
        return gf2.as_matrix(np.zeros((0, 0), dtype=np.uint8))
    idx = np.arange(2**size, dtype=np.int64)
    shifts = np.arange(size - 1, -1, -1, dtype=np.int64)
    return gf2.as_matrix((idx[:, None] >> shifts) & 1)


class LinearBlockCode:
    def __init__(self, generator, parity_check=None):
        self.G = gf2.as_matrix(generator)
        self.k, self.n = self.G.shape
        if self.k == 0 or self.n == 0:
            raise CodeConstructionError(f"empty generator matrix {self.G.shape}")
        self.rate = self.k / self.n

        g_rank = gf2.rank(self.G)
        if g_rank != self.k:
            raise CodeConstructionError(
                f"generator has GF(2) rank {g_rank} < {self.k}; encoding is not injective"
            )

        self.H = None
        if parity_check is not None:
            H = gf2.as_matrix(parity_check)
            if gf2.width(H) != self.n:
                raise DimensionMismatchError("generator vs parity check", self.G.shape, H.shape)
            if np.any(gf2.multiply(self.G, gf2.transpose(H))):
                raise CodeConstructionError("G * H^T != 0: parity check does not annihilate the code")
            self.H = H

        self.messages = enumerate_vectors(self.k)
        self.codewords = gf2.multiply(self.messages, self.G)
        self._bpsk_codewords = 2.0 * self.codewords.astype(np.float64) - 1.0
        self.codebook = {
            tuple(cw.tolist()): tuple(m.tolist()) for cw, m in zip(self.codewords, self.messages)
        }
        if len(self.codebook) != len(self.messages):
            raise CodeConstructionError(
                f"{len(self.messages)} messages map to {len(self.codebook)} codewords"
            )

    def __len__(self):
        return len(self.messages)

    def __repr__(self):
        return f"{type(self).__name__}(n={self.n}, k={self.k})"

    def encode(self, message) -> np.ndarray:
        return gf2.multiply(message, self.G)

    def source_of(self, codeword) -> np.ndarray:
        return gf2.as_vector(self.codebook[tuple(gf2.as_vector(codeword).tolist())])

    @property
    def min_distance(self) -> int:
        return min(gf2.hamming_weight(cw) for cw in self.codewords if cw.any())

    @property
    def correctable_errors(self) -> int:
        return (self.min_distance - 1) // 2

    def syndrome(self, word) -> np.ndarray:
        if self.H is None:
            raise ValueError(f"{self!r} was built without a parity-check matrix")
        return gf2.multiply(word, gf2.transpose(self.H))

    def is_codeword(self, word):
        syn = self.syndrome(word)
        if syn.ndim == 1:
            return not np.any(syn)
        return ~np.any(syn, axis=1)

    def _as_rows(self, received, binary=False):
        rx = np.asarray(received) if binary else np.asarray(received, dtype=np.float64)
        one_dim = rx.ndim == 1
        if one_dim:
            rx = rx.reshape(1, -1)
        if rx.ndim != 2 or rx.shape[1] != self.n:
            raise DimensionMismatchError("decode", rx.shape, self.codewords.shape)
        if binary:
            rx = gf2.as_matrix(rx)
        return rx, one_dim

    def decode_hard_index(self, received):
        """Index of the codeword nearest in Hamming distance; ties go to the lowest index."""
        rx, one_dim = self._as_rows(received, binary=True)
        idx = np.argmin(gf2.hamming_distances(rx, self.codewords), axis=1)
        return int(idx[0]) if one_dim else idx

    def decode_soft_index(self, received):
        """Index of the codeword with the largest correlation to the BPSK-mapped codeword."""
        rx, one_dim = self._as_rows(received)
        idx = np.argmax(rx @ self._bpsk_codewords.T, axis=1)
        return int(idx[0]) if one_dim else idx

    def decode_hard(self, received) -> np.ndarray:
        return self.codewords[self.decode_hard_index(received)]

    def decode_soft(self, received) -> np.ndarray:
        return self.codewords[self.decode_soft_index(received)]

    def decode(self, received, decoder="hard") -> np.ndarray:
        """Decode straight to source vectors."""
        if decoder == "hard":
            return self.messages[self.decode_hard_index(received)]
        if decoder == "soft":
            return self.messages[self.decode_soft_index(received)]
        raise ValueError(f"unknown decoder: {decoder}")


@lru_cache(maxsize=None)
def default_code() -> LinearBlockCode:
    """The (10,6) code used throughout the simulations."""
    return LinearBlockCode(DEFAULT_GENERATOR, DEFAULT_PARITY_CHECK)
