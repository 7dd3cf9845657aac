"""Bisection for the channel quality that reaches a target error probability.

The estimators are Monte Carlo averages, so the objective is only monotone
in expectation. Thirty-two halvings of a 100 dB range resolve far below the
sampling noise of any practical trial count; the noise, not the search,
bounds the precision of a threshold.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from numpy.random import Generator

from coding_gain.channel import default_rng
from coding_gain.code_linear import LinearBlockCode, default_code
from coding_gain.estimator import DEFAULT_BATCH_SIZE, DEFAULT_TRIAL_COUNT, ErrorEstimator

DEFAULT_LOW = 0.0
DEFAULT_HIGH = 100.0
DEFAULT_ITERATIONS = 32
DEFAULT_TARGET = 1e-5


def binary_search(left: float, right: float, choose: Callable[[float], bool], iterations: int = DEFAULT_ITERATIONS) -> float:
    """Shrink ``[left, right]`` toward the boundary where ``choose`` turns True.

    Returns the right bound: the smallest tested point that satisfied
    ``choose``, or ``right`` itself when none did.
    """
    lo, hi = float(left), float(right)
    if not lo <= hi:
        raise ValueError(f"empty search range [{left}, {right}]")
    for _ in range(int(iterations)):
        middle = min(max((lo + hi) / 2, lo), hi)
        if choose(middle):
            hi = middle
        else:
            lo = middle
    return hi


def find_threshold(
    estimate: Callable[[float], float],
    target: float = DEFAULT_TARGET,
    low: float = DEFAULT_LOW,
    high: float = DEFAULT_HIGH,
    iterations: int = DEFAULT_ITERATIONS,
    verbose: bool = False,
) -> float:
    """Smallest quality in ``[low, high]`` whose estimated error is below ``target``.

    NaN estimates count as not meeting the target, which pushes the search
    toward higher quality.
    """
    if not 0.0 < target <= 1.0:
        raise ValueError(f"target probability must be in (0,1], got {target}")

    def meets(quality: float) -> bool:
        p = estimate(quality)
        ok = not math.isnan(p) and p < target
        if verbose:
            print(f"  quality={quality:.6f}dB, error={p:.3e}, {'<' if ok else '>='} {target:g}")
        return ok

    return binary_search(low, high, meets, iterations)


@dataclass(frozen=True)
class GainResult:
    target: float
    coded: float
    uncoded: float

    @property
    def gap(self) -> float:
        return self.uncoded - self.coded

    def unreached_as_nan(self, high: float) -> "GainResult":
        """Copy with thresholds still sitting at ``high`` (target never met) replaced by NaN."""
        return GainResult(
            target=self.target,
            coded=self.coded if self.coded < high else math.nan,
            uncoded=self.uncoded if self.uncoded < high else math.nan,
        )


def coding_gain(
    coded: Callable[[float], float],
    uncoded: Callable[[float], float],
    target: float = DEFAULT_TARGET,
    low: float = DEFAULT_LOW,
    high: float = DEFAULT_HIGH,
    iterations: int = DEFAULT_ITERATIONS,
    verbose: bool = False,
) -> GainResult:
    kwargs = dict(target=target, low=low, high=high, iterations=iterations, verbose=verbose)
    return GainResult(
        target=target,
        coded=find_threshold(coded, **kwargs),
        uncoded=find_threshold(uncoded, **kwargs),
    )


def efficiency_table(
    modulation_orders: Iterable[int],
    code: LinearBlockCode | None = None,
    target: float = DEFAULT_TARGET,
    trial_count: int = DEFAULT_TRIAL_COUNT,
    rng: Generator | None = None,
    low: float = DEFAULT_LOW,
    high: float = DEFAULT_HIGH,
    iterations: int = DEFAULT_ITERATIONS,
    batch_size: int = DEFAULT_BATCH_SIZE,
    verbose: bool = False,
) -> list[tuple[int, float, float]]:
    """``(modulation_order, threshold_quality, efficiency_gap)`` rows for the M-QAM bit-flip channel.

    A threshold that never met the target inside ``[low, high]`` is NaN, and
    so is the gap computed from it.
    """
    code = default_code() if code is None else code
    rng = default_rng() if rng is None else rng
    rows = []
    for m in modulation_orders:
        coded = ErrorEstimator.for_channel(
            "qam", code=code, modulation_order=m, trial_count=trial_count, rng=rng, batch_size=batch_size
        )
        result = coding_gain(
            coded, coded.uncoded(), target=target, low=low, high=high, iterations=iterations, verbose=verbose
        ).unreached_as_nan(high)
        rows.append((int(m), result.coded, result.gap))
    return rows
