from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from geocoin.sim.config import DEFAULT_CACHE_PROBABILITY, DEFAULT_MAX_COINS, DEFAULT_MIN_COINS
from geocoin.sim.grid import GridCell, cell_key
from geocoin.sim.rng import CACHE_COINS_STREAM_PREFIX, CACHE_PRESENCE_STREAM_PREFIX, cell_stream


def coin_id_for(cell: GridCell, serial: int) -> str:
    return f"{cell.i}:{cell.j}#{serial}"


@dataclass(frozen=True)
class Coin:
    coin_id: str
    origin_cell: GridCell

    def __post_init__(self) -> None:
        if not isinstance(self.coin_id, str) or not self.coin_id:
            raise ValueError("coin.id must be a non-empty string")
        if not isinstance(self.origin_cell, GridCell):
            raise ValueError("coin.origin_cell must be a GridCell")

    def retagged(self, cell: GridCell) -> "Coin":
        return Coin(coin_id=self.coin_id, origin_cell=cell)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.coin_id, "origin_cell": self.origin_cell.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, field_name: str = "coin") -> "Coin":
        if not isinstance(data, dict):
            raise ValueError(f"{field_name} must be an object")
        coin_id = data.get("id")
        if not isinstance(coin_id, str) or not coin_id:
            raise ValueError(f"{field_name}.id must be a non-empty string")
        return cls(
            coin_id=coin_id,
            origin_cell=GridCell.from_dict(data.get("origin_cell"), field_name=f"{field_name}.origin_cell"),
        )


@dataclass
class Cache:
    """Coins held at one grid cell. ``cache_id`` always equals the cell key."""

    cell: GridCell
    coins: list[Coin] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.cell, GridCell):
            raise ValueError("cache.cell must be a GridCell")
        self.coins = list(self.coins)
        seen: set[str] = set()
        for coin in self.coins:
            if coin.coin_id in seen:
                raise ValueError(f"duplicate coin id in cache {self.cache_id}: {coin.coin_id}")
            seen.add(coin.coin_id)

    @property
    def cache_id(self) -> str:
        return cell_key(self.cell)

    def coin_ids(self) -> list[str]:
        return [coin.coin_id for coin in self.coins]

    def find_coin_index(self, coin_id: str) -> int | None:
        for index, coin in enumerate(self.coins):
            if coin.coin_id == coin_id:
                return index
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.cache_id,
            "cell": self.cell.to_dict(),
            "coins": [coin.to_dict() for coin in self.coins],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, field_name: str = "cache") -> "Cache":
        if not isinstance(data, dict):
            raise ValueError(f"{field_name} must be an object")
        cell = GridCell.from_dict(data.get("cell"), field_name=f"{field_name}.cell")
        if data.get("id") != cell_key(cell):
            raise ValueError(f"{field_name}.id must equal its cell key")
        coins = data.get("coins")
        if not isinstance(coins, list):
            raise ValueError(f"{field_name}.coins must be a list")
        return cls(
            cell=cell,
            coins=[Coin.from_dict(row, field_name=f"{field_name}.coins[{index}]") for index, row in enumerate(coins)],
        )


def generate_cache(
    cell: GridCell,
    rng: random.Random,
    *,
    min_coins: int = DEFAULT_MIN_COINS,
    max_coins: int = DEFAULT_MAX_COINS,
) -> Cache:
    count = rng.randint(min_coins, max_coins)
    return Cache(cell=cell, coins=[Coin(coin_id=coin_id_for(cell, serial), origin_cell=cell) for serial in range(count)])


def cache_exists_at(cell: GridCell, *, master_seed: int, cache_probability: float = DEFAULT_CACHE_PROBABILITY) -> bool:
    rng = cell_stream(master_seed, CACHE_PRESENCE_STREAM_PREFIX, cell_key(cell))
    return rng.random() < cache_probability


def decide_cell(
    cell: GridCell,
    *,
    master_seed: int,
    cache_probability: float = DEFAULT_CACHE_PROBABILITY,
    min_coins: int = DEFAULT_MIN_COINS,
    max_coins: int = DEFAULT_MAX_COINS,
) -> Cache | None:
    """First-visit decision for ``cell``: a fresh cache, or None for an empty cell."""
    if not cache_exists_at(cell, master_seed=master_seed, cache_probability=cache_probability):
        return None
    rng = cell_stream(master_seed, CACHE_COINS_STREAM_PREFIX, cell_key(cell))
    return generate_cache(cell, rng, min_coins=min_coins, max_coins=max_coins)
