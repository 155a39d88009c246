from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from geocoin.sim.grid import DEFAULT_GRID_SIZE, GeoCoord

DEFAULT_ANCHOR = GeoCoord(lat=36.9895, lng=-122.0628)
DEFAULT_CACHE_PROBABILITY = 0.1
DEFAULT_MAX_CACHE_DISTANCE = 5
DEFAULT_MIN_COINS = 1
DEFAULT_MAX_COINS = 10
DEFAULT_DEPOSIT_COUNT = 5
DEFAULT_SEED = 7


@dataclass(frozen=True)
class GameConfig:
    grid_size: float = DEFAULT_GRID_SIZE
    cache_probability: float = DEFAULT_CACHE_PROBABILITY
    max_cache_distance: int = DEFAULT_MAX_CACHE_DISTANCE
    min_coins: int = DEFAULT_MIN_COINS
    max_coins: int = DEFAULT_MAX_COINS
    deposit_count: int = DEFAULT_DEPOSIT_COUNT
    anchor: GeoCoord = field(default=DEFAULT_ANCHOR)

    def __post_init__(self) -> None:
        if isinstance(self.grid_size, bool) or not isinstance(self.grid_size, (int, float)) or self.grid_size <= 0:
            raise ValueError("config.grid_size must be a number > 0")
        if not isinstance(self.cache_probability, (int, float)) or not 0.0 <= self.cache_probability <= 1.0:
            raise ValueError("config.cache_probability must be within [0.0, 1.0]")
        if isinstance(self.max_cache_distance, bool) or not isinstance(self.max_cache_distance, int):
            raise ValueError("config.max_cache_distance must be an integer")
        if self.max_cache_distance < 0:
            raise ValueError("config.max_cache_distance must be >= 0")
        if not isinstance(self.min_coins, int) or self.min_coins < 1:
            raise ValueError("config.min_coins must be an integer >= 1")
        if not isinstance(self.max_coins, int) or self.max_coins < self.min_coins:
            raise ValueError("config.max_coins must be an integer >= min_coins")
        if not isinstance(self.deposit_count, int) or self.deposit_count < 0:
            raise ValueError("config.deposit_count must be an integer >= 0")
        if not isinstance(self.anchor, GeoCoord):
            raise ValueError("config.anchor must be a GeoCoord")

    def to_dict(self) -> dict[str, Any]:
        return {
            "grid_size": self.grid_size,
            "cache_probability": self.cache_probability,
            "max_cache_distance": self.max_cache_distance,
            "min_coins": self.min_coins,
            "max_coins": self.max_coins,
            "deposit_count": self.deposit_count,
            "anchor": self.anchor.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "GameConfig":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("config must be an object")
        anchor = data.get("anchor")
        return cls(
            grid_size=data.get("grid_size", DEFAULT_GRID_SIZE),
            cache_probability=data.get("cache_probability", DEFAULT_CACHE_PROBABILITY),
            max_cache_distance=data.get("max_cache_distance", DEFAULT_MAX_CACHE_DISTANCE),
            min_coins=data.get("min_coins", DEFAULT_MIN_COINS),
            max_coins=data.get("max_coins", DEFAULT_MAX_COINS),
            deposit_count=data.get("deposit_count", DEFAULT_DEPOSIT_COUNT),
            anchor=GeoCoord.from_dict(anchor, field_name="config.anchor") if anchor is not None else DEFAULT_ANCHOR,
        )
