from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any

INTENT_MOVE = "move"
INTENT_MOVE_TO = "move_to"
INTENT_COLLECT = "collect"
INTENT_DEPOSIT = "deposit"
INTENT_ENABLE_GEOLOCATION = "enable_geolocation"
INTENT_DISABLE_GEOLOCATION = "disable_geolocation"
INTENT_RESET = "reset"

INTENT_TYPES = {
    INTENT_MOVE,
    INTENT_MOVE_TO,
    INTENT_COLLECT,
    INTENT_DEPOSIT,
    INTENT_ENABLE_GEOLOCATION,
    INTENT_DISABLE_GEOLOCATION,
    INTENT_RESET,
}

OUTCOME_APPLIED = "applied"
OUTCOME_CACHE_NOT_FOUND = "cache_not_found"
OUTCOME_COIN_NOT_FOUND = "coin_not_found"
OUTCOME_INVALID_QUANTITY = "invalid_quantity"
OUTCOME_INVALID_INTENT = "invalid_intent"
OUTCOME_GEOLOCATION_UNAVAILABLE = "geolocation_unavailable"
OUTCOME_GEOLOCATION_ERROR = "geolocation_error"
OUTCOME_ALREADY_ACTIVE = "already_active"
OUTCOME_NOT_ACTIVE = "not_active"


@dataclass(frozen=True)
class GameIntent:
    """A discrete external request, processed atomically by ``Game.apply_intent``."""

    intent_type: str
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.intent_type not in INTENT_TYPES:
            raise ValueError(f"unknown intent_type: {self.intent_type}")
        if not isinstance(self.params, dict):
            raise ValueError("intent params must be a dict")

    def to_dict(self) -> dict[str, Any]:
        return {"intent_type": self.intent_type, "params": dict(self.params)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameIntent":
        return cls(intent_type=str(data["intent_type"]), params=dict(data.get("params", {})))

    @classmethod
    def move(cls, direction: str) -> "GameIntent":
        return cls(INTENT_MOVE, {"direction": direction})

    @classmethod
    def move_to(cls, lat: float, lng: float) -> "GameIntent":
        return cls(INTENT_MOVE_TO, {"lat": lat, "lng": lng})

    @classmethod
    def collect(cls, cache_id: str, coin_id: str) -> "GameIntent":
        return cls(INTENT_COLLECT, {"cache_id": cache_id, "coin_id": coin_id})

    @classmethod
    def deposit(cls, cache_id: str, count: int | None = None) -> "GameIntent":
        params: dict[str, Any] = {"cache_id": cache_id}
        if count is not None:
            params["count"] = count
        return cls(INTENT_DEPOSIT, params)

    @classmethod
    def reset(cls) -> "GameIntent":
        return cls(INTENT_RESET)


@dataclass(frozen=True)
class IntentOutcome:
    intent_type: str
    outcome: str
    mutated: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def applied(self) -> bool:
        return self.outcome == OUTCOME_APPLIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent_type": self.intent_type,
            "outcome": self.outcome,
            "mutated": self.mutated,
            "details": dict(self.details),
        }


class IntentQueue:
    """FIFO of pending intents; intents run to completion one at a time."""

    def __init__(self) -> None:
        self._pending: deque[GameIntent] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def submit(self, intent: GameIntent | dict[str, Any]) -> None:
        normalized = intent if isinstance(intent, GameIntent) else GameIntent.from_dict(intent)
        self._pending.append(normalized)

    def pop(self) -> GameIntent | None:
        if not self._pending:
            return None
        return self._pending.popleft()

    def clear(self) -> None:
        self._pending.clear()
