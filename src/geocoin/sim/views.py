from __future__ import annotations

from dataclasses import dataclass

from geocoin.sim.caches import Cache, Coin
from geocoin.sim.grid import GeoCoord, GridCell, cell_origin


@dataclass(frozen=True)
class PlayerView:
    lat: float
    lng: float
    points: int


@dataclass(frozen=True)
class CacheView:
    cache_id: str
    cell: GridCell
    coin_ids: tuple[str, ...]
    origin: GeoCoord


@dataclass(frozen=True)
class InventoryCoinView:
    coin_id: str
    origin_cell: GridCell
    origin: GeoCoord


def cache_view(cache: Cache, grid_size: float) -> CacheView:
    return CacheView(
        cache_id=cache.cache_id,
        cell=cache.cell,
        coin_ids=tuple(cache.coin_ids()),
        origin=cell_origin(cache.cell, grid_size),
    )


def inventory_coin_view(coin: Coin, grid_size: float) -> InventoryCoinView:
    return InventoryCoinView(
        coin_id=coin.coin_id,
        origin_cell=coin.origin_cell,
        origin=cell_origin(coin.origin_cell, grid_size),
    )
