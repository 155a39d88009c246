from __future__ import annotations

from typing import Any, Callable

from geocoin.sim.errors import GeolocationUnavailable
from geocoin.sim.intents import GameIntent

FixCallback = Callable[[float, float], None]
ErrorCallback = Callable[[str], None]


class GeolocationSource:
    """Coordinate source contract.

    A source emits ``(lat, lng)`` fixes or an error reason to every active
    watch, in arrival order. Sources that cannot provide positions report
    ``available = False``.
    """

    available: bool = True
    unavailable_reason: str = "geolocation is not supported"

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback) -> int:
        raise NotImplementedError

    def clear_watch(self, watch_id: int) -> None:
        raise NotImplementedError

    def poll(self) -> int:
        """Deliver buffered emissions; push-based sources deliver on their own and return 0."""
        return 0


class UnavailableGeolocationSource(GeolocationSource):
    available = False

    def __init__(self, reason: str = GeolocationSource.unavailable_reason) -> None:
        self.unavailable_reason = reason

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback) -> int:
        raise GeolocationUnavailable(self.unavailable_reason)

    def clear_watch(self, watch_id: int) -> None:
        return None


class ScriptedGeolocationSource(GeolocationSource):
    """Source fed by explicit ``push_fix``/``push_error`` calls and drained by ``poll``."""

    def __init__(self, fixes: list[tuple[float, float]] | None = None) -> None:
        self._queued: list[tuple[str, Any]] = [("fix", fix) for fix in (fixes or [])]
        self._watchers: dict[int, tuple[FixCallback, ErrorCallback]] = {}
        self._next_watch_id = 1

    @property
    def watch_count(self) -> int:
        return len(self._watchers)

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback) -> int:
        watch_id = self._next_watch_id
        self._next_watch_id += 1
        self._watchers[watch_id] = (on_fix, on_error)
        return watch_id

    def clear_watch(self, watch_id: int) -> None:
        self._watchers.pop(watch_id, None)

    def push_fix(self, lat: float, lng: float) -> None:
        self._queued.append(("fix", (lat, lng)))

    def push_error(self, reason: str) -> None:
        self._queued.append(("error", reason))

    def poll(self) -> int:
        """Deliver queued emissions to current watchers; returns the number delivered.

        Emissions polled while nobody is watching are discarded.
        """
        queued, self._queued = self._queued, []
        if not self._watchers:
            return 0
        delivered = 0
        for kind, payload in queued:
            for watch_id in sorted(self._watchers):
                callbacks = self._watchers.get(watch_id)
                if callbacks is None:
                    continue
                on_fix, on_error = callbacks
                if kind == "fix":
                    lat, lng = payload
                    on_fix(float(lat), float(lng))
                else:
                    on_error(str(payload))
            delivered += 1
        return delivered


class GeolocationTracker:
    """Bridges a source into the intent queue; at most one watch is active."""

    def __init__(
        self,
        source: GeolocationSource,
        enqueue: Callable[[GameIntent], None],
        *,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.source = source
        self._enqueue = enqueue
        self._on_error_hook = on_error
        self.watch_id: int | None = None
        self.last_error: str | None = None

    @property
    def active(self) -> bool:
        return self.watch_id is not None

    def enable(self) -> int:
        if self.watch_id is not None:
            return self.watch_id
        if not self.source.available:
            raise GeolocationUnavailable(self.source.unavailable_reason)
        self.watch_id = self.source.watch(self._on_fix, self._on_error)
        return self.watch_id

    def disable(self) -> bool:
        if self.watch_id is None:
            return False
        self.source.clear_watch(self.watch_id)
        self.watch_id = None
        return True

    def _on_fix(self, lat: float, lng: float) -> None:
        # Fixes that race a cleared watch are dropped.
        if self.watch_id is None:
            return
        self._enqueue(GameIntent.move_to(lat, lng))

    def _on_error(self, reason: str) -> None:
        self.last_error = reason
        if self._on_error_hook is not None:
            self._on_error_hook(reason)
