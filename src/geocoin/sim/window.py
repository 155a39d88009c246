from __future__ import annotations

from typing import Callable

from geocoin.sim.caches import Cache
from geocoin.sim.grid import GridCell, cell_key, window_cells
from geocoin.sim.ledger import CacheLedger

CellDecider = Callable[[GridCell], "Cache | None"]


def recompute_window(
    center: GridCell,
    ledger: CacheLedger,
    *,
    radius: int,
    decide: CellDecider,
) -> list[Cache]:
    """Materialize the caches around ``center``.

    Decided cells are restored from their memento; undecided cells are passed
    to ``decide`` exactly once and the outcome (including "no cache") is
    recorded before the cell is considered again.
    """
    caches: list[Cache] = []
    for cell in window_cells(center, radius):
        key = cell_key(cell)
        if ledger.has(key):
            restored = ledger.restore(key)
            if restored is not None:
                caches.append(restored)
            continue
        decided = decide(cell)
        if decided is None:
            ledger.record_empty(cell)
            continue
        if decided.cell != cell:
            raise ValueError(f"decider returned cache for {decided.cache_id} when asked for {key}")
        ledger.record(decided)
        caches.append(decided)
    return caches
