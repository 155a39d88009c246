from __future__ import annotations

from geocoin.content.io import SAVE_SLOT, BlobStore, load_world, save_world
from geocoin.sim.config import DEFAULT_SEED, GameConfig
from geocoin.sim.core import Game
from geocoin.sim.errors import InvalidSaveData
from geocoin.sim.geolocation import GeolocationSource, GeolocationTracker
from geocoin.sim.intents import (
    INTENT_ENABLE_GEOLOCATION,
    INTENT_RESET,
    OUTCOME_GEOLOCATION_ERROR,
    GameIntent,
    IntentOutcome,
    IntentQueue,
)
from geocoin.sim.world import WorldState

LOAD_STATUS_FRESH = "fresh"
LOAD_STATUS_LOADED = "loaded"
LOAD_STATUS_INVALID = "invalid"


class GameSession:
    """Event loop glue: queue, dispatch, geolocation bridge and autosave.

    The saved slot is read once, at construction. Every intent that mutates
    the world is followed by a save; ``reset`` deletes the slot instead.
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        config: GameConfig | None = None,
        seed: int = DEFAULT_SEED,
        geolocation_source: GeolocationSource | None = None,
        slot: str = SAVE_SLOT,
    ) -> None:
        self.store = store
        self.slot = slot
        self.config = config if config is not None else GameConfig()
        self.queue = IntentQueue()
        self.load_error: str | None = None
        self.save_count = 0

        world: WorldState | None
        try:
            world = load_world(store, slot=slot)
        except InvalidSaveData as exc:
            world = None
            self.load_error = str(exc)
            self.load_status = LOAD_STATUS_INVALID
        else:
            self.load_status = LOAD_STATUS_LOADED if world is not None else LOAD_STATUS_FRESH
        if world is None:
            world = WorldState.fresh(master_seed=seed, anchor=self.config.anchor)

        tracker = None
        if geolocation_source is not None:
            tracker = GeolocationTracker(geolocation_source, self.queue.submit, on_error=self._on_geolocation_error)
        self.game = Game(world, config=self.config, geolocation=tracker)

    def submit(self, intent: GameIntent) -> None:
        self.queue.submit(intent)

    def process_pending(self) -> list[IntentOutcome]:
        outcomes: list[IntentOutcome] = []
        while True:
            intent = self.queue.pop()
            if intent is None:
                return outcomes
            outcomes.append(self._dispatch(intent))

    def dispatch(self, intent: GameIntent) -> IntentOutcome:
        """Submit and drain the queue; returns the last outcome processed."""
        self.submit(intent)
        outcomes = self.process_pending()
        return outcomes[-1]

    def save(self) -> str:
        blob = save_world(self.store, self.game.world, slot=self.slot)
        self.save_count += 1
        return blob

    def _dispatch(self, intent: GameIntent) -> IntentOutcome:
        outcome = self.game.apply_intent(intent)
        if not outcome.mutated:
            return outcome
        if intent.intent_type == INTENT_RESET:
            self.queue.clear()
            self.store.delete(self.slot)
        else:
            self.save()
        return outcome

    def _on_geolocation_error(self, reason: str) -> None:
        self.game.record_outcome(
            IntentOutcome(INTENT_ENABLE_GEOLOCATION, OUTCOME_GEOLOCATION_ERROR, details={"reason": reason})
        )

    def pump(self) -> list[IntentOutcome]:
        """Poll the geolocation source and process whatever is queued."""
        tracker = self.game.geolocation
        if tracker is not None and tracker.active:
            tracker.source.poll()
        return self.process_pending()
