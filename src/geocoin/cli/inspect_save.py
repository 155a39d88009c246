from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from geocoin.content.io import load_game_blob
from geocoin.sim.errors import InvalidSaveData
from geocoin.sim.grid import DEFAULT_GRID_SIZE, to_cell
from geocoin.sim.hash import world_hash
from geocoin.sim.world import WorldState

PRINT_CACHE_LIMIT = 20


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geocoin-inspect-save",
        description="Validate a Geocoin Carrier save file and print a concise summary.",
    )
    parser.add_argument("save_path", help="Path to a save slot JSON file")
    parser.add_argument(
        "--print-caches",
        action="store_true",
        help=f"Print up to {PRINT_CACHE_LIMIT} non-empty ledger caches with their coin counts",
    )
    parser.add_argument(
        "--print-inventory",
        action="store_true",
        help="Print inventory coin ids in collection order",
    )
    return parser


def _print_summary(world: WorldState, save_hash_value: str) -> None:
    location = world.player.location
    cell = to_cell(location, DEFAULT_GRID_SIZE)
    print(
        "summary "
        f"master_seed={world.master_seed} "
        f"lat={location.lat} lng={location.lng} cell={cell.i}:{cell.j} "
        f"ledger_entries={len(world.ledger)} "
        f"caches={world.ledger.positive_count()} "
        f"empty_cells={len(world.ledger) - world.ledger.positive_count()} "
        f"inventory={len(world.player.inventory)} "
        f"points={world.player.points} "
        f"trail={len(world.movement_history)}"
    )
    print(f"save_hash={save_hash_value} world_hash={world_hash(world)}")


def _print_caches(world: WorldState) -> None:
    rows = []
    for key, _ in world.ledger.entries():
        cache = world.ledger.restore(key)
        if cache is not None and cache.coins:
            rows.append(f"cache {key} coins={len(cache.coins)}")
    print(f"caches.limit={PRINT_CACHE_LIMIT}")
    if not rows:
        print("cache none")
        return
    for row in rows[:PRINT_CACHE_LIMIT]:
        print(row)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    save_path = Path(args.save_path)
    if not save_path.exists():
        print(f"error: save_path does not exist: {save_path}")
        return 1

    blob = save_path.read_text(encoding="utf-8")
    try:
        world = load_game_blob(blob)
    except InvalidSaveData as exc:
        print(f"integrity=INVALID reason={exc}")
        return 1

    print("integrity=OK")
    _print_summary(world, json.loads(blob)["save_hash"])
    if args.print_caches:
        _print_caches(world)
    if args.print_inventory:
        coin_ids = [coin.coin_id for coin in world.player.inventory]
        print("inventory " + (" ".join(coin_ids) if coin_ids else "none"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
