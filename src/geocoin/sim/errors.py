from __future__ import annotations


class GeocoinError(Exception):
    """Base class for recoverable game errors; none of them is fatal."""


class CacheNotFound(GeocoinError, LookupError):
    def __init__(self, cache_id: str) -> None:
        super().__init__(f"cache not found: {cache_id}")
        self.cache_id = cache_id


class CoinNotFound(GeocoinError, LookupError):
    def __init__(self, cache_id: str, coin_id: str) -> None:
        super().__init__(f"coin not found: {coin_id} (cache {cache_id})")
        self.cache_id = cache_id
        self.coin_id = coin_id


class InvalidSaveData(GeocoinError, ValueError):
    """Raised when a save blob fails shape or integrity validation."""


class GeolocationUnavailable(GeocoinError):
    pass
