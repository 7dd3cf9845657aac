from __future__ import annotations

from collections.abc import Callable

from coding_gain.channel import ChannelBase, GaussianChannel, GaussianHardChannel, QamBitFlipChannel


def _soft(quality_db: float, rate: float, **_) -> ChannelBase:
    return GaussianChannel(quality_db, rate)


def _hard(quality_db: float, rate: float, **_) -> ChannelBase:
    return GaussianHardChannel(quality_db, rate)


def _qam(quality_db: float, rate: float, modulation_order: int = 2, **_) -> ChannelBase:
    return QamBitFlipChannel(modulation_order, quality_db, rate)


_CHANNELS: dict[str, Callable[..., ChannelBase]] = {
    "soft": _soft,
    "hard": _hard,
    "qam": _qam,
}


def get_channel(name: str) -> Callable[..., ChannelBase]:
    if name not in _CHANNELS:
        raise KeyError(f"Unknown channel '{name}'. Available: {sorted(_CHANNELS)}")
    return _CHANNELS[name]


def available_channels() -> list[str]:
    return sorted(_CHANNELS)
