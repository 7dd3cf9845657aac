from __future__ import annotations

from typing import Any, Optional

import numpy as np
from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field, field_validator, model_validator

from coding_gain.estimator import DEFAULT_BATCH_SIZE, DEFAULT_TRIAL_COUNT
from coding_gain.registry import available_channels
from coding_gain.search import DEFAULT_HIGH, DEFAULT_ITERATIONS, DEFAULT_LOW, DEFAULT_TARGET


def _as_dict(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, DictConfig):
        plain = OmegaConf.to_container(value, resolve=True)
        if isinstance(plain, dict):
            return dict(plain)
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise TypeError(f"config must be a mapping, got {type(value)}")


class SweepSettings(BaseModel):
    start: float = 1.0
    stop: float = 30.0
    step: float = Field(1.0, gt=0)

    @model_validator(mode="after")
    def check_order(self):
        if self.stop < self.start:
            raise ValueError(f"sweep.stop ({self.stop}) < sweep.start ({self.start})")
        return self

    def qualities(self) -> list[float]:
        return np.arange(self.start, self.stop + self.step / 2, self.step).tolist()


class SearchSettings(BaseModel):
    low: float = DEFAULT_LOW
    high: float = DEFAULT_HIGH
    iterations: int = Field(DEFAULT_ITERATIONS, ge=1)
    target: float = Field(DEFAULT_TARGET, gt=0, le=1)

    @model_validator(mode="after")
    def check_order(self):
        if not self.low < self.high:
            raise ValueError(f"search.low ({self.low}) must be below search.high ({self.high})")
        return self


class SimulationSettings(BaseModel):
    trial_count: int = Field(DEFAULT_TRIAL_COUNT, gt=0)
    batch_size: int = Field(DEFAULT_BATCH_SIZE, gt=0)
    seed: Optional[int] = None
    verbose: bool = False
    channels: list[str] = Field(default_factory=lambda: ["soft", "hard"])
    modulation_orders: list[int] = Field(default_factory=lambda: [2, 4, 16, 64])
    sweep: SweepSettings = Field(default_factory=SweepSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @field_validator("channels")
    @classmethod
    def check_channels(cls, value: list[str]) -> list[str]:
        unknown = [name for name in value if name not in available_channels()]
        if unknown:
            raise ValueError(f"unknown channels {unknown}. Available: {available_channels()}")
        return value

    @field_validator("modulation_orders")
    @classmethod
    def check_orders(cls, value: list[int]) -> list[int]:
        bad = [m for m in value if m < 2]
        if bad:
            raise ValueError(f"modulation orders must be >= 2, got {bad}")
        return value


def load_settings(cfg: Any = None) -> SimulationSettings:
    return SimulationSettings.model_validate(_as_dict(cfg))
