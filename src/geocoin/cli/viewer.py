from __future__ import annotations

from typing import Callable

from geocoin.sim.core import Game
from geocoin.sim.grid import GridCell
from geocoin.sim.intents import INTENT_DISABLE_GEOLOCATION, INTENT_ENABLE_GEOLOCATION, GameIntent, IntentOutcome
from geocoin.sim.session import GameSession

CACHE_GLYPH = "C"
EMPTY_CACHE_GLYPH = "c"
PLAYER_GLYPH = "@"
EMPTY_GLYPH = "."
RESET_CONFIRMATION = "YES"


class AsciiViewer:
    """Read-only projection of the game state for terminal display."""

    def render(self, game: Game) -> str:
        player = game.player_view()
        center = game.player_cell
        lines = [f"player lat={player.lat:.6f} lng={player.lng:.6f} cell={center.i}:{center.j} points={player.points}"]

        radius = game.config.max_cache_distance
        caches = {view.cell: view for view in game.window_view()}
        # North at the top: rows run from high i to low i.
        for di in range(radius, -radius - 1, -1):
            row: list[str] = []
            for dj in range(-radius, radius + 1):
                cell = GridCell(center.i + di, center.j + dj)
                if di == 0 and dj == 0:
                    row.append(PLAYER_GLYPH)
                elif cell in caches:
                    row.append(CACHE_GLYPH if caches[cell].coin_ids else EMPTY_CACHE_GLYPH)
                else:
                    row.append(EMPTY_GLYPH)
            lines.append(" ".join(row))

        for view in game.window_view():
            coins = ", ".join(view.coin_ids) if view.coin_ids else "<empty>"
            lines.append(f"cache[{view.cache_id}] at ({view.origin.lat:.6f},{view.origin.lng:.6f}) coins: {coins}")

        inventory = [coin.coin_id for coin in game.inventory_view()]
        lines.append("inventory: " + (", ".join(inventory) if inventory else "<empty>"))
        return "\n".join(lines)


def format_outcome(outcome: IntentOutcome) -> str:
    details = " ".join(f"{key}={value}" for key, value in sorted(outcome.details.items()))
    return f"{outcome.intent_type}: {outcome.outcome}" + (f" {details}" if details else "")


class SessionController:
    """Small intent adapter; forwards user intents, never touches state directly."""

    def __init__(self, session: GameSession) -> None:
        self.session = session

    def move(self, direction: str) -> IntentOutcome:
        return self.session.dispatch(GameIntent.move(direction))

    def collect(self, cache_id: str, coin_id: str) -> IntentOutcome:
        return self.session.dispatch(GameIntent.collect(cache_id, coin_id))

    def deposit(self, cache_id: str, count: int | None = None) -> IntentOutcome:
        return self.session.dispatch(GameIntent.deposit(cache_id, count))

    def enable_geolocation(self) -> IntentOutcome:
        return self.session.dispatch(GameIntent(INTENT_ENABLE_GEOLOCATION))

    def disable_geolocation(self) -> IntentOutcome:
        return self.session.dispatch(GameIntent(INTENT_DISABLE_GEOLOCATION))

    def reset(self) -> IntentOutcome:
        return self.session.dispatch(GameIntent.reset())


def run_console(
    session: GameSession,
    *,
    read_line: Callable[[str], str] | None = None,
    write: Callable[[str], None] = print,
) -> int:
    read_line = read_line if read_line is not None else input
    view = AsciiViewer()
    controller = SessionController(session)

    write("Geocoin Carrier. Commands: show | up | down | left | right | collect <cache> <coin> | deposit <cache> [n] | geo | nogeo | reset | quit")
    write(view.render(session.game))

    while True:
        try:
            raw = read_line("> ").strip()
        except EOFError:
            break
        if raw in {"quit", "exit"}:
            break
        if raw == "show":
            write(view.render(session.game))
            continue

        parts = raw.split()
        outcome: IntentOutcome | None = None
        if len(parts) == 1 and parts[0] in {"up", "down", "left", "right"}:
            outcome = controller.move(parts[0])
        elif len(parts) == 3 and parts[0] == "collect":
            outcome = controller.collect(parts[1], parts[2])
        elif len(parts) in {2, 3} and parts[0] == "deposit":
            if len(parts) == 3 and not parts[2].isdigit():
                write("deposit count must be a non-negative integer")
                continue
            outcome = controller.deposit(parts[1], int(parts[2]) if len(parts) == 3 else None)
        elif raw == "geo":
            outcome = controller.enable_geolocation()
        elif raw == "nogeo":
            outcome = controller.disable_geolocation()
        elif raw == "reset":
            confirmation = read_line(f"Type '{RESET_CONFIRMATION}' to erase your game state: ").strip()
            if confirmation != RESET_CONFIRMATION:
                write("reset canceled")
                continue
            outcome = controller.reset()

        if outcome is None:
            write("unknown command")
            continue
        write(format_outcome(outcome))
        followups = session.pump()
        for followup in followups:
            write(format_outcome(followup))
        if outcome.mutated or any(followup.mutated for followup in followups):
            write(view.render(session.game))

    return 0
