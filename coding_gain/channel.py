"""Channel models: BPSK over additive Gaussian noise and binary bit-flip channels."""

from __future__ import annotations

import math

import numpy as np
from numpy.random import Generator, Philox
from scipy.special import erfc


def noise_sigma(quality_db: float, rate: float) -> float:
    """Noise standard deviation for unit-energy BPSK at ``quality_db`` (Eb/N0) and code ``rate``."""
    return math.sqrt(0.5 * 10.0 ** (-quality_db / 10.0) / rate)


def bpsk(bits) -> np.ndarray:
    return 2.0 * np.asarray(bits, dtype=np.float64) - 1.0


def with_noise(codeword, sigma: float, rng: Generator) -> np.ndarray:
    tx = bpsk(codeword)
    return tx + rng.normal(0.0, sigma, tx.shape)


def with_hard_noise(codeword, sigma: float, rng: Generator) -> np.ndarray:
    rx = with_noise(codeword, sigma, rng)
    return (rx >= 0).astype(np.uint8)


def with_error(codeword, flip_probability: float, rng: Generator) -> np.ndarray:
    if not 0.0 <= flip_probability <= 1.0:
        raise ValueError(f"flip probability must be in [0,1], got {flip_probability}")
    bits = np.asarray(codeword, dtype=np.uint8)
    flips = rng.random(bits.shape) < flip_probability
    return bits ^ flips.astype(np.uint8)


def qam_bit_error_rate(modulation_order: int, quality_db: float, rate: float) -> float:
    """Approximate bit-error rate of M-QAM at ``quality_db`` for a code of the given ``rate``.

    The approximation breaks down when the per-bit energy term is not
    positive; that region is reported as NaN. Results above 0.5 are clipped
    to 0.5.
    """
    m = int(modulation_order)
    if m != modulation_order or m < 2:
        raise ValueError(f"modulation order must be an integer >= 2, got {modulation_order}")
    bits = math.log2(m)
    energy = quality_db - 10.0 * math.log10(bits / rate)
    if not energy > 0.0:
        return math.nan
    arg = 3.0 * bits * energy / (2.0 * (m - 1))
    ber = 2.0 * (1.0 - 1.0 / math.sqrt(m)) * float(erfc(math.sqrt(arg))) / energy
    if not math.isfinite(ber):
        return math.nan
    return min(ber, 0.5)


class ChannelBase:
    soft = False
    defined = True

    def transmit(self, bits: np.ndarray, rng: Generator) -> np.ndarray:
        raise NotImplementedError


class GaussianChannel(ChannelBase):
    soft = True

    def __init__(self, quality_db: float, rate: float):
        self.quality_db = float(quality_db)
        self.rate = float(rate)
        self.sigma = noise_sigma(self.quality_db, self.rate)

    def transmit(self, bits, rng):
        return with_noise(bits, self.sigma, rng)

    def __repr__(self):
        return f"GaussianChannel(quality_db={self.quality_db}, sigma={self.sigma:.4g})"


class GaussianHardChannel(GaussianChannel):
    """Gaussian channel followed by a sign decision on every sample."""

    soft = False

    def transmit(self, bits, rng):
        return with_hard_noise(bits, self.sigma, rng)

    def __repr__(self):
        return f"GaussianHardChannel(quality_db={self.quality_db}, sigma={self.sigma:.4g})"


class BinarySymmetricChannel(ChannelBase):
    def __init__(self, flip_probability: float):
        p = float(flip_probability)
        if not math.isnan(p) and not 0.0 <= p <= 1.0:
            raise ValueError(f"flip probability must be in [0,1], got {p}")
        self.flip_probability = p

    @property
    def defined(self):
        return not math.isnan(self.flip_probability)

    def transmit(self, bits, rng):
        if not self.defined:
            raise ValueError(f"{self!r} is undefined and cannot transmit")
        return with_error(bits, self.flip_probability, rng)

    def __repr__(self):
        return f"{type(self).__name__}(p={self.flip_probability:.4g})"


class QamBitFlipChannel(BinarySymmetricChannel):
    """Bit-flip channel whose crossover probability comes from the M-QAM approximation."""

    def __init__(self, modulation_order: int, quality_db: float, rate: float):
        self.modulation_order = int(modulation_order)
        self.quality_db = float(quality_db)
        self.rate = float(rate)
        super().__init__(qam_bit_error_rate(self.modulation_order, self.quality_db, self.rate))


def default_rng(seed=None) -> Generator:
    return Generator(Philox(seed))
