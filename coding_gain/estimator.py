from __future__ import annotations

import math
from typing import Callable, Iterable

import numpy as np
from numpy.random import Generator

from coding_gain.channel import ChannelBase, default_rng
from coding_gain.code_linear import LinearBlockCode, default_code, enumerate_vectors
from coding_gain.registry import get_channel

DEFAULT_TRIAL_COUNT = 1000
DEFAULT_BATCH_SIZE = 10000


def _pick_decoder(channel: ChannelBase, decoder):
    if decoder is None:
        return "soft" if channel.soft else "hard"
    if decoder not in ("hard", "soft"):
        raise ValueError(f"unknown decoder: {decoder}")
    if decoder == "soft" and not channel.soft:
        raise ValueError(f"soft decoding needs real-valued output, {channel!r} is hard-decision")
    return decoder


def _rounds(trial_count, batch_size):
    trial_count = int(trial_count)
    batch_size = int(batch_size)
    if trial_count <= 0:
        raise ValueError(f"trial_count must be positive, got {trial_count}")
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    rounds = int(np.ceil(trial_count / batch_size))
    return [min(batch_size, trial_count - r * batch_size) for r in range(rounds)]


def estimate_error(
    code: LinearBlockCode,
    channel: ChannelBase,
    trial_count: int = DEFAULT_TRIAL_COUNT,
    rng: Generator | None = None,
    decoder: str | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    verbose: bool = False,
) -> float:
    """Block-error probability of ``code`` over ``channel``.

    Every source vector is sent ``trial_count`` times, in rounds of at most
    ``batch_size`` trials; the per-source error rates are averaged with
    equal weight. Returns NaN when the channel is undefined at its
    operating point.
    """
    if not channel.defined:
        return math.nan
    batches = _rounds(trial_count, batch_size)
    trial_count = sum(batches)
    decoder = _pick_decoder(channel, decoder)
    rng = default_rng() if rng is None else rng

    per_source = np.empty(len(code), dtype=np.float64)
    for i, (message, codeword) in enumerate(zip(code.messages, code.codewords)):
        err_nums = 0
        for size in batches:
            tx = np.broadcast_to(codeword, (size, code.n))
            rx = channel.transmit(tx, rng)
            if channel.soft and decoder == "hard":
                rx = (rx >= 0).astype(np.uint8)
            decoded = code.decode(rx, decoder=decoder)
            err_nums += int(np.sum(np.any(decoded != message, axis=1)))
        per_source[i] = err_nums / trial_count
        if verbose and i % 16 == 0:
            print(f"Source {i + 1}/{len(code)}, {channel!r}, error_ratio: {err_nums}/{trial_count}")
    return float(per_source.mean())


def estimate_raw_error(
    channel: ChannelBase,
    k: int,
    trial_count: int = DEFAULT_TRIAL_COUNT,
    rng: Generator | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> float:
    """Uncoded baseline: send the ``k``-bit source vectors as they are."""
    if not channel.defined:
        return math.nan
    batches = _rounds(trial_count, batch_size)
    trial_count = sum(batches)
    rng = default_rng() if rng is None else rng

    sources = enumerate_vectors(k)
    per_source = np.empty(len(sources), dtype=np.float64)
    for i, source in enumerate(sources):
        err_nums = 0
        for size in batches:
            rx = channel.transmit(np.broadcast_to(source, (size, k)), rng)
            if channel.soft:
                rx = (rx >= 0).astype(np.uint8)
            err_nums += int(np.sum(np.any(rx != source, axis=1)))
        per_source[i] = err_nums / trial_count
    return float(per_source.mean())


class ErrorEstimator:
    """Error probability as a function of channel quality (dB).

    ``channel_factory`` maps a quality value to a channel. With
    ``coded=False`` the estimate is the uncoded baseline over the same
    channel.
    """

    def __init__(
        self,
        channel_factory: Callable[[float], ChannelBase],
        code: LinearBlockCode | None = None,
        decoder: str | None = None,
        trial_count: int = DEFAULT_TRIAL_COUNT,
        rng: Generator | None = None,
        coded: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
        verbose: bool = False,
    ):
        self.channel_factory = channel_factory
        self.code = default_code() if code is None else code
        self.decoder = decoder
        self.trial_count = int(trial_count)
        self.rng = default_rng() if rng is None else rng
        self.coded = coded
        self.batch_size = int(batch_size)
        self.verbose = verbose

    @classmethod
    def for_channel(cls, name: str, code: LinearBlockCode | None = None, modulation_order: int = 2, **kwargs):
        code = default_code() if code is None else code
        make = get_channel(name)
        rate = code.rate
        return cls(
            lambda quality_db: make(quality_db, rate, modulation_order=modulation_order),
            code=code,
            **kwargs,
        )

    def uncoded(self) -> "ErrorEstimator":
        return ErrorEstimator(
            self.channel_factory,
            code=self.code,
            trial_count=self.trial_count,
            rng=self.rng,
            coded=False,
            batch_size=self.batch_size,
            verbose=self.verbose,
        )

    def __call__(self, quality_db: float) -> float:
        channel = self.channel_factory(quality_db)
        if self.coded:
            return estimate_error(
                self.code,
                channel,
                trial_count=self.trial_count,
                rng=self.rng,
                decoder=self.decoder,
                batch_size=self.batch_size,
                verbose=self.verbose,
            )
        return estimate_raw_error(
            channel, self.code.k, trial_count=self.trial_count, rng=self.rng, batch_size=self.batch_size
        )


def sweep(estimator: Callable[[float], float], qualities: Iterable[float]) -> list[tuple[float, float]]:
    return [(float(q), estimator(float(q))) for q in qualities]
