from __future__ import annotations

import math
from typing import Any

from geocoin.sim.caches import Coin
from geocoin.sim.grid import MAX_ABS_LAT, MAX_ABS_LNG, parse_cell_key
from geocoin.sim.ledger import decode_cache

SUPPORTED_SCHEMA_VERSIONS = {1}
REQUIRED_SAVE_FIELDS = {"schema_version", "player_location", "cache_states", "collected_coins", "save_hash"}


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def _validate_location(value: Any, *, field_name: str) -> None:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object")
    for axis, limit in (("lat", MAX_ABS_LAT), ("lng", MAX_ABS_LNG)):
        if not _is_number(value.get(axis)):
            raise ValueError(f"{field_name}.{axis} must be numeric")
        if abs(value[axis]) > limit:
            raise ValueError(f"{field_name}.{axis} must be within [-{limit}, {limit}]")


def _validate_cache_states(entries: Any) -> list[str]:
    if not isinstance(entries, list):
        raise ValueError("cache_states must be a list")
    coin_ids: list[str] = []
    seen_keys: set[str] = set()
    for index, row in enumerate(entries):
        field_name = f"cache_states[{index}]"
        if not isinstance(row, list) or len(row) != 2:
            raise ValueError(f"{field_name} must be a [key, state] pair")
        key, state = row
        if not isinstance(key, str) or not isinstance(state, str):
            raise ValueError(f"{field_name} key and state must be strings")
        if key in seen_keys:
            raise ValueError(f"{field_name} duplicate cell key: {key}")
        seen_keys.add(key)
        try:
            parse_cell_key(key)
            cache = decode_cache(state)
        except ValueError as exc:
            raise ValueError(f"{field_name} invalid: {exc}") from exc
        if cache is None:
            continue
        if cache.cache_id != key:
            raise ValueError(f"{field_name} state id {cache.cache_id} does not match key {key}")
        coin_ids.extend(cache.coin_ids())
    return coin_ids


def _validate_collected_coins(coins: Any) -> list[str]:
    if not isinstance(coins, list):
        raise ValueError("collected_coins must be a list")
    return [Coin.from_dict(row, field_name=f"collected_coins[{index}]").coin_id for index, row in enumerate(coins)]


def validate_save_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("save payload must be an object")
    missing = REQUIRED_SAVE_FIELDS - set(payload.keys())
    if missing:
        raise ValueError(f"save payload missing fields: {sorted(missing)}")

    schema_version = payload["schema_version"]
    if isinstance(schema_version, bool) or not isinstance(schema_version, int):
        raise ValueError("schema_version must be an integer")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")

    if not isinstance(payload["save_hash"], str):
        raise ValueError("save_hash must be a string")

    master_seed = payload.get("master_seed", 0)
    if isinstance(master_seed, bool) or not isinstance(master_seed, int):
        raise ValueError("master_seed must be an integer")

    _validate_location(payload["player_location"], field_name="player_location")

    points = payload.get("player_points", 0)
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        raise ValueError("player_points must be a non-negative integer")

    history = payload.get("movement_history", [])
    if not isinstance(history, list):
        raise ValueError("movement_history must be a list")
    for index, row in enumerate(history):
        _validate_location(row, field_name=f"movement_history[{index}]")

    coin_ids = _validate_cache_states(payload["cache_states"])
    coin_ids.extend(_validate_collected_coins(payload["collected_coins"]))
    seen: set[str] = set()
    for coin_id in coin_ids:
        if coin_id in seen:
            raise ValueError(f"coin id appears more than once: {coin_id}")
        seen.add(coin_id)
