import pytest

from geocoin.sim.errors import GeolocationUnavailable
from geocoin.sim.geolocation import GeolocationTracker, ScriptedGeolocationSource, UnavailableGeolocationSource
from geocoin.sim.intents import INTENT_MOVE_TO, GameIntent, IntentQueue


def _tracker(source) -> tuple[GeolocationTracker, IntentQueue, list[str]]:
    queue = IntentQueue()
    errors: list[str] = []
    return GeolocationTracker(source, queue.submit, on_error=errors.append), queue, errors


def test_enabled_tracker_turns_fixes_into_move_to_intents() -> None:
    source = ScriptedGeolocationSource([(1.5, 2.5)])
    tracker, queue, _ = _tracker(source)

    watch_id = tracker.enable()
    source.push_fix(3.0, 4.0)
    delivered = source.poll()

    assert tracker.active
    assert watch_id == tracker.watch_id
    assert delivered == 2
    assert queue.pop() == GameIntent(INTENT_MOVE_TO, {"lat": 1.5, "lng": 2.5})
    assert queue.pop() == GameIntent(INTENT_MOVE_TO, {"lat": 3.0, "lng": 4.0})
    assert queue.pop() is None


def test_enable_is_idempotent_while_watching() -> None:
    source = ScriptedGeolocationSource()
    tracker, _, _ = _tracker(source)

    first = tracker.enable()
    second = tracker.enable()

    assert first == second
    assert source.watch_count == 1


def test_fixes_after_disable_are_dropped() -> None:
    source = ScriptedGeolocationSource()
    tracker, queue, _ = _tracker(source)
    tracker.enable()

    assert tracker.disable() is True
    source.push_fix(1.0, 1.0)
    source.poll()
    tracker.enable()
    source.poll()

    assert source.watch_count == 1
    assert len(queue) == 0
    assert tracker.disable() is True
    assert tracker.disable() is False


def test_errors_are_reported_without_moving() -> None:
    source = ScriptedGeolocationSource()
    tracker, queue, errors = _tracker(source)
    tracker.enable()

    source.push_error("permission denied")
    source.poll()

    assert errors == ["permission denied"]
    assert tracker.last_error == "permission denied"
    assert len(queue) == 0


def test_unavailable_source_refuses_to_watch() -> None:
    tracker, _, _ = _tracker(UnavailableGeolocationSource())

    with pytest.raises(GeolocationUnavailable):
        tracker.enable()
    assert not tracker.active


def test_intent_queue_is_fifo_and_accepts_dicts() -> None:
    queue = IntentQueue()
    queue.submit(GameIntent.move("up"))
    queue.submit({"intent_type": "collect", "params": {"cache_id": "1:1", "coin_id": "1:1#0"}})

    assert len(queue) == 2
    assert queue.pop() == GameIntent.move("up")
    assert queue.pop() == GameIntent.collect("1:1", "1:1#0")
    queue.submit(GameIntent.reset())
    queue.clear()
    assert queue.pop() is None
