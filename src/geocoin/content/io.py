from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from geocoin.content.schema import validate_save_payload
from geocoin.sim.errors import InvalidSaveData
from geocoin.sim.hash import save_hash
from geocoin.sim.world import WorldState

SCHEMA_VERSION = 1
SAVE_SLOT = "geocoin-carrier-save"
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


class BlobStore:
    """Key/value text storage addressed by slot name."""

    def read(self, slot: str) -> str | None:
        raise NotImplementedError

    def write(self, slot: str, blob: str) -> None:
        raise NotImplementedError

    def delete(self, slot: str) -> None:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(initial or {})

    def read(self, slot: str) -> str | None:
        return self.blobs.get(slot)

    def write(self, slot: str, blob: str) -> None:
        self.blobs[slot] = blob

    def delete(self, slot: str) -> None:
        self.blobs.pop(slot, None)


class FileBlobStore(BlobStore):
    """One ``<slot>.json`` file per slot under ``root``; writes are atomic."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, slot: str) -> Path:
        if not slot or "/" in slot or "\\" in slot or slot.startswith("."):
            raise ValueError(f"invalid save slot name: {slot!r}")
        return self.root / f"{slot}.json"

    def read(self, slot: str) -> str | None:
        path = self.path_for(slot)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, slot: str, blob: str) -> None:
        _write_atomic_text(self.path_for(slot), blob)

    def delete(self, slot: str) -> None:
        self.path_for(slot).unlink(missing_ok=True)


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_text(path: str | Path, serialized: str) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def build_save_payload(world: WorldState) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        **world.to_dict(),
    }
    payload["save_hash"] = save_hash(payload)
    return payload


def save_game_blob(world: WorldState) -> str:
    payload = build_save_payload(world)
    validate_save_payload(payload)
    return _canonical_json(payload)


def load_game_blob(blob: str) -> WorldState:
    """Decode a save blob; any defect raises ``InvalidSaveData`` and nothing is applied."""
    try:
        payload = json.loads(blob)
    except (TypeError, json.JSONDecodeError) as exc:
        raise InvalidSaveData(f"save blob is not valid JSON: {exc}") from exc
    try:
        validate_save_payload(payload)
    except ValueError as exc:
        raise InvalidSaveData(str(exc)) from exc

    expected_hash = payload["save_hash"]
    actual_hash = save_hash(payload)
    if expected_hash != actual_hash:
        raise InvalidSaveData(f"save_hash mismatch while loading save (stored={expected_hash}, recomputed={actual_hash})")

    try:
        return WorldState.from_dict(payload)
    except ValueError as exc:
        raise InvalidSaveData(str(exc)) from exc


def save_world(store: BlobStore, world: WorldState, *, slot: str = SAVE_SLOT) -> str:
    blob = save_game_blob(world)
    store.write(slot, blob)
    return blob


def load_world(store: BlobStore, *, slot: str = SAVE_SLOT) -> WorldState | None:
    """Returns None when the slot is empty; raises ``InvalidSaveData`` on a corrupt blob."""
    blob = store.read(slot)
    if blob is None:
        return None
    return load_game_blob(blob)
