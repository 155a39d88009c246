from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from geocoin.sim.caches import Coin
from geocoin.sim.config import DEFAULT_ANCHOR, DEFAULT_SEED
from geocoin.sim.grid import GeoCoord
from geocoin.sim.ledger import CacheLedger


def _require_non_negative_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return value


@dataclass
class PlayerState:
    location: GeoCoord = DEFAULT_ANCHOR
    points: int = 0
    inventory: list[Coin] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.location, GeoCoord):
            raise ValueError("player.location must be a GeoCoord")
        _require_non_negative_int(self.points, field_name="player.points")
        self.inventory = list(self.inventory)


@dataclass
class WorldState:
    """Everything a save slot holds: seed, player, ledger and movement trail."""

    master_seed: int = DEFAULT_SEED
    player: PlayerState = field(default_factory=PlayerState)
    ledger: CacheLedger = field(default_factory=CacheLedger)
    movement_history: list[GeoCoord] = field(default_factory=list)

    @classmethod
    def fresh(cls, *, master_seed: int = DEFAULT_SEED, anchor: GeoCoord = DEFAULT_ANCHOR) -> "WorldState":
        return cls(master_seed=master_seed, player=PlayerState(location=anchor))

    def to_dict(self) -> dict[str, Any]:
        return {
            "master_seed": self.master_seed,
            "player_location": self.player.location.to_dict(),
            "cache_states": [[key, state] for key, state in self.ledger.entries()],
            "player_points": self.player.points,
            "collected_coins": [coin.to_dict() for coin in self.player.inventory],
            "movement_history": [coord.to_dict() for coord in self.movement_history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorldState":
        if not isinstance(data, dict):
            raise ValueError("world_state must be an object")
        master_seed = data.get("master_seed", DEFAULT_SEED)
        if isinstance(master_seed, bool) or not isinstance(master_seed, int):
            raise ValueError("master_seed must be an integer")
        raw_entries = data.get("cache_states", [])
        if not isinstance(raw_entries, list):
            raise ValueError("cache_states must be a list")
        entries: list[tuple[str, str]] = []
        for index, row in enumerate(raw_entries):
            if not isinstance(row, (list, tuple)) or len(row) != 2:
                raise ValueError(f"cache_states[{index}] must be a [key, state] pair")
            key, state = row
            if not isinstance(key, str) or not isinstance(state, str):
                raise ValueError(f"cache_states[{index}] must contain strings")
            entries.append((key, state))
        raw_coins = data.get("collected_coins", [])
        if not isinstance(raw_coins, list):
            raise ValueError("collected_coins must be a list")
        raw_history = data.get("movement_history", [])
        if not isinstance(raw_history, list):
            raise ValueError("movement_history must be a list")
        return cls(
            master_seed=master_seed,
            player=PlayerState(
                location=GeoCoord.from_dict(data.get("player_location"), field_name="player_location"),
                points=_require_non_negative_int(data.get("player_points", 0), field_name="player_points"),
                inventory=[
                    Coin.from_dict(row, field_name=f"collected_coins[{index}]") for index, row in enumerate(raw_coins)
                ],
            ),
            ledger=CacheLedger.from_entries(entries),
            movement_history=[
                GeoCoord.from_dict(row, field_name=f"movement_history[{index}]") for index, row in enumerate(raw_history)
            ],
        )
