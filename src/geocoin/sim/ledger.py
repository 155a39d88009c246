from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable

from geocoin.sim.caches import Cache
from geocoin.sim.grid import GridCell, cell_key, parse_cell_key

EMPTY_CELL_STATE = "null"


def encode_cache(cache: Cache | None) -> str:
    """Canonical memento for a decided cell; ``None`` marks a cell without a cache."""
    if cache is None:
        return EMPTY_CELL_STATE
    return json.dumps(cache.to_dict(), sort_keys=True, separators=(",", ":"))


def decode_cache(state: str) -> Cache | None:
    if not isinstance(state, str):
        raise ValueError("cache state must be a string")
    try:
        payload = json.loads(state)
    except json.JSONDecodeError as exc:
        raise ValueError(f"cache state is not valid JSON: {exc}") from exc
    if payload is None:
        return None
    return Cache.from_dict(payload, field_name="cache_state")


@dataclass
class CacheLedger:
    """Authoritative record of decided cells: cell key -> cache memento.

    A key, once present, is never removed except by ``clear``. Only the coin
    membership inside a positive entry may change afterwards.
    """

    _states: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def has(self, key: str) -> bool:
        return key in self._states

    def get(self, key: str) -> str | None:
        return self._states.get(key)

    def put(self, key: str, state: str) -> None:
        cache = decode_cache(state)
        if cache is not None and cache.cache_id != key:
            raise ValueError(f"cache state id {cache.cache_id} does not match ledger key {key}")
        parse_cell_key(key)
        self._states[key] = state

    def record(self, cache: Cache) -> None:
        self.put(cache.cache_id, encode_cache(cache))

    def record_empty(self, cell: GridCell) -> None:
        self.put(cell_key(cell), EMPTY_CELL_STATE)

    def restore(self, key: str) -> Cache | None:
        state = self._states.get(key)
        if state is None:
            raise KeyError(key)
        return decode_cache(state)

    def entries(self) -> list[tuple[str, str]]:
        return sorted(self._states.items())

    def positive_count(self) -> int:
        return sum(1 for state in self._states.values() if state != EMPTY_CELL_STATE)

    def clear(self) -> None:
        self._states.clear()

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[str, str]]) -> "CacheLedger":
        ledger = cls()
        for key, state in entries:
            ledger.put(key, state)
        return ledger
