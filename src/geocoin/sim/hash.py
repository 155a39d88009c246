from __future__ import annotations

import hashlib
import json
from typing import Any

from geocoin.sim.world import WorldState


def world_hash(world: WorldState) -> str:
    encoded = json.dumps(
        world.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
    ).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def save_hash(payload: dict[str, Any]) -> str:
    hash_payload = {key: value for key, value in payload.items() if key != "save_hash"}
    encoded = json.dumps(hash_payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
