from __future__ import annotations

import copy
import math
from typing import Any

from geocoin.sim.caches import Cache, Coin, decide_cell
from geocoin.sim.config import GameConfig
from geocoin.sim.errors import CacheNotFound, CoinNotFound, GeolocationUnavailable
from geocoin.sim.geolocation import GeolocationTracker
from geocoin.sim.grid import DIRECTIONS, GeoCoord, GridCell, require_location, step, to_cell
from geocoin.sim.intents import (
    INTENT_COLLECT,
    INTENT_DEPOSIT,
    INTENT_DISABLE_GEOLOCATION,
    INTENT_ENABLE_GEOLOCATION,
    INTENT_MOVE,
    INTENT_MOVE_TO,
    INTENT_RESET,
    OUTCOME_ALREADY_ACTIVE,
    OUTCOME_APPLIED,
    OUTCOME_CACHE_NOT_FOUND,
    OUTCOME_COIN_NOT_FOUND,
    OUTCOME_GEOLOCATION_UNAVAILABLE,
    OUTCOME_INVALID_INTENT,
    OUTCOME_INVALID_QUANTITY,
    OUTCOME_NOT_ACTIVE,
    GameIntent,
    IntentOutcome,
)
from geocoin.sim.ledger import encode_cache
from geocoin.sim.views import CacheView, InventoryCoinView, PlayerView, cache_view, inventory_coin_view
from geocoin.sim.window import recompute_window
from geocoin.sim.world import PlayerState, WorldState

MAX_OUTCOME_TRACE = 64


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


class Game:
    """Owns the world state and the active window; the single intent dispatcher."""

    def __init__(
        self,
        world: WorldState | None = None,
        *,
        config: GameConfig | None = None,
        geolocation: GeolocationTracker | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.world = world if world is not None else WorldState.fresh(anchor=self.config.anchor)
        self.geolocation = geolocation
        self.window: list[Cache] = []
        self._window_by_id: dict[str, Cache] = {}
        self.outcome_trace: list[dict[str, Any]] = []
        self.initialize_caches()

    @property
    def player(self) -> PlayerState:
        return self.world.player

    @property
    def player_cell(self) -> GridCell:
        return to_cell(self.world.player.location, self.config.grid_size)

    def decide(self, cell: GridCell) -> Cache | None:
        return decide_cell(
            cell,
            master_seed=self.world.master_seed,
            cache_probability=self.config.cache_probability,
            min_coins=self.config.min_coins,
            max_coins=self.config.max_coins,
        )

    def initialize_caches(self) -> list[Cache]:
        self.window = recompute_window(
            self.player_cell,
            self.world.ledger,
            radius=self.config.max_cache_distance,
            decide=self.decide,
        )
        self._window_by_id = {cache.cache_id: cache for cache in self.window}
        return self.window

    def active_cache(self, cache_id: str) -> Cache:
        cache = self._window_by_id.get(cache_id)
        if cache is None:
            raise CacheNotFound(cache_id)
        return cache

    def move(self, direction: str) -> GeoCoord:
        return self.move_to(step(self.world.player.location, direction, self.config.grid_size))

    def move_to(self, location: GeoCoord) -> GeoCoord:
        require_location(location)
        self.world.movement_history.append(self.world.player.location)
        self.world.player.location = location
        self.initialize_caches()
        return location

    def collect(self, cache_id: str, coin_id: str) -> Coin:
        cache = self.active_cache(cache_id)
        index = cache.find_coin_index(coin_id)
        if index is None:
            raise CoinNotFound(cache_id, coin_id)
        coin = cache.coins[index]
        remaining = cache.coins[:index] + cache.coins[index + 1 :]
        state = encode_cache(Cache(cell=cache.cell, coins=remaining))

        self.world.ledger.put(cache_id, state)
        cache.coins = remaining
        self.world.player.inventory.append(coin)
        self.world.player.points += 1
        return coin

    def deposit(self, cache_id: str, count: int | None = None) -> list[Coin]:
        cache = self.active_cache(cache_id)
        requested = self.config.deposit_count if count is None else count
        if isinstance(requested, bool) or not isinstance(requested, int) or requested < 0:
            raise ValueError("deposit count must be an integer >= 0")
        inventory = self.world.player.inventory
        moving = [coin.retagged(cache.cell) for coin in inventory[: min(requested, len(inventory))]]
        updated = Cache(cell=cache.cell, coins=cache.coins + moving)
        state = encode_cache(updated)

        self.world.ledger.put(cache_id, state)
        cache.coins = updated.coins
        del inventory[: len(moving)]
        return moving

    def reset(self, *, master_seed: int | None = None) -> None:
        if self.geolocation is not None:
            self.geolocation.disable()
        seed = self.world.master_seed if master_seed is None else master_seed
        self.world = WorldState.fresh(master_seed=seed, anchor=self.config.anchor)
        self.initialize_caches()

    def player_view(self) -> PlayerView:
        location = self.world.player.location
        return PlayerView(lat=location.lat, lng=location.lng, points=self.world.player.points)

    def window_view(self) -> list[CacheView]:
        return [cache_view(cache, self.config.grid_size) for cache in self.window]

    def inventory_view(self) -> list[InventoryCoinView]:
        return [inventory_coin_view(coin, self.config.grid_size) for coin in self.world.player.inventory]

    def coins_in_play(self) -> int:
        return sum(len(cache.coins) for cache in self.window) + len(self.world.player.inventory)

    def get_outcome_trace(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self.outcome_trace)

    def apply_intent(self, intent: GameIntent | dict[str, Any]) -> IntentOutcome:
        if isinstance(intent, GameIntent):
            outcome = self._execute_intent(intent)
        else:
            try:
                normalized = GameIntent.from_dict(intent)
            except (KeyError, TypeError, ValueError) as exc:
                raw_type = intent.get("intent_type", "") if isinstance(intent, dict) else ""
                outcome = IntentOutcome(str(raw_type), OUTCOME_INVALID_INTENT, details={"reason": str(exc)})
            else:
                outcome = self._execute_intent(normalized)
        self.record_outcome(outcome)
        return outcome

    def _execute_intent(self, intent: GameIntent) -> IntentOutcome:
        params = intent.params
        intent_type = intent.intent_type

        if intent_type == INTENT_MOVE:
            direction = params.get("direction")
            if direction not in DIRECTIONS:
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details={"direction": direction})
            try:
                location = self.move(str(direction))
            except ValueError as exc:
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details={"direction": direction, "reason": str(exc)})
            return IntentOutcome(intent_type, OUTCOME_APPLIED, mutated=True, details={"location": location.to_dict()})

        if intent_type == INTENT_MOVE_TO:
            lat = params.get("lat")
            lng = params.get("lng")
            if not _is_number(lat) or not _is_number(lng):
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details={"lat": lat, "lng": lng})
            try:
                location = self.move_to(GeoCoord(lat=float(lat), lng=float(lng)))
            except ValueError as exc:
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details={"lat": lat, "lng": lng, "reason": str(exc)})
            return IntentOutcome(intent_type, OUTCOME_APPLIED, mutated=True, details={"location": location.to_dict()})

        if intent_type == INTENT_COLLECT:
            cache_id = params.get("cache_id")
            coin_id = params.get("coin_id")
            details = {"cache_id": cache_id, "coin_id": coin_id}
            if not isinstance(cache_id, str) or not isinstance(coin_id, str):
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details=details)
            try:
                self.collect(cache_id, coin_id)
            except CacheNotFound:
                return IntentOutcome(intent_type, OUTCOME_CACHE_NOT_FOUND, details=details)
            except CoinNotFound:
                return IntentOutcome(intent_type, OUTCOME_COIN_NOT_FOUND, details=details)
            details["points"] = self.world.player.points
            return IntentOutcome(intent_type, OUTCOME_APPLIED, mutated=True, details=details)

        if intent_type == INTENT_DEPOSIT:
            cache_id = params.get("cache_id")
            count = params.get("count")
            details = {"cache_id": cache_id, "count": count}
            if not isinstance(cache_id, str):
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details=details)
            if count is not None and (isinstance(count, bool) or not isinstance(count, int) or count < 0):
                return IntentOutcome(intent_type, OUTCOME_INVALID_QUANTITY, details=details)
            try:
                moved = self.deposit(cache_id, count)
            except CacheNotFound:
                return IntentOutcome(intent_type, OUTCOME_CACHE_NOT_FOUND, details=details)
            details["deposited"] = [coin.coin_id for coin in moved]
            return IntentOutcome(intent_type, OUTCOME_APPLIED, mutated=bool(moved), details=details)

        if intent_type == INTENT_ENABLE_GEOLOCATION:
            if self.geolocation is None:
                return IntentOutcome(intent_type, OUTCOME_GEOLOCATION_UNAVAILABLE)
            if self.geolocation.active:
                return IntentOutcome(intent_type, OUTCOME_ALREADY_ACTIVE, details={"watch_id": self.geolocation.watch_id})
            try:
                watch_id = self.geolocation.enable()
            except GeolocationUnavailable as exc:
                return IntentOutcome(intent_type, OUTCOME_GEOLOCATION_UNAVAILABLE, details={"reason": str(exc)})
            return IntentOutcome(intent_type, OUTCOME_APPLIED, details={"watch_id": watch_id})

        if intent_type == INTENT_DISABLE_GEOLOCATION:
            if self.geolocation is None or not self.geolocation.disable():
                return IntentOutcome(intent_type, OUTCOME_NOT_ACTIVE)
            return IntentOutcome(intent_type, OUTCOME_APPLIED)

        if intent_type == INTENT_RESET:
            seed = params.get("master_seed")
            if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
                return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT, details={"master_seed": seed})
            self.reset(master_seed=seed)
            return IntentOutcome(intent_type, OUTCOME_APPLIED, mutated=True, details={"master_seed": self.world.master_seed})

        return IntentOutcome(intent_type, OUTCOME_INVALID_INTENT)

    def record_outcome(self, outcome: IntentOutcome) -> None:
        self.outcome_trace.append(outcome.to_dict())
        if len(self.outcome_trace) > MAX_OUTCOME_TRACE:
            del self.outcome_trace[: len(self.outcome_trace) - MAX_OUTCOME_TRACE]
