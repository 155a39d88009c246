from __future__ import annotations

import argparse
import importlib.metadata
import json
import math
import os
import platform
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from geocoin.cli.viewer import SessionController, format_outcome
from geocoin.content.io import SAVE_SLOT, FileBlobStore
from geocoin.sim.config import DEFAULT_SEED
from geocoin.sim.core import Game
from geocoin.sim.geolocation import GeolocationSource, ScriptedGeolocationSource, UnavailableGeolocationSource
from geocoin.sim.grid import GeoCoord, GridCell
from geocoin.sim.hash import world_hash
from geocoin.sim.session import LOAD_STATUS_INVALID, GameSession
from geocoin.sim.views import CacheView

CELL_SIZE = 44
WINDOW_SIZE = (1280, 820)
PANEL_WIDTH = 400
VIEWPORT_MARGIN = 12
PANEL_MARGIN = 12
PANEL_LINE_LIMIT = 26
DEFAULT_SAVE_DIR = "saves"
RESET_CONFIRM_WINDOW_SECONDS = 3.0

BACKGROUND_COLOR = (17, 18, 25)
GRID_COLOR = (44, 48, 60)
CELL_COLOR = (28, 31, 40)
CACHE_COLOR = (232, 190, 64)
EMPTY_CACHE_COLOR = (120, 110, 80)
PLAYER_COLOR = (255, 243, 130)
TRAIL_COLOR = (80, 160, 255)
TEXT_COLOR = (240, 240, 240)

pygame: Any | None = None


@dataclass(frozen=True)
class ViewportGeometry:
    center_x: float
    center_y: float
    cell_size: int = CELL_SIZE


def cell_to_pixel(cell: GridCell, player_cell: GridCell, geometry: ViewportGeometry) -> tuple[int, int]:
    """Top-left pixel of ``cell``; north is up, so larger i moves up the screen."""
    x = geometry.center_x + (cell.j - player_cell.j - 0.5) * geometry.cell_size
    y = geometry.center_y - (cell.i - player_cell.i + 0.5) * geometry.cell_size
    return (int(round(x)), int(round(y)))


def pixel_to_cell(pixel_x: float, pixel_y: float, player_cell: GridCell, geometry: ViewportGeometry) -> GridCell:
    dj = math.floor((pixel_x - geometry.center_x) / geometry.cell_size + 0.5)
    di = math.ceil((geometry.center_y - pixel_y) / geometry.cell_size - 0.5)
    return GridCell(player_cell.i + di, player_cell.j + dj)


def coord_to_pixel(coord: GeoCoord, player: GeoCoord, grid_size: float, geometry: ViewportGeometry) -> tuple[int, int]:
    x = geometry.center_x + (coord.lng - player.lng) / grid_size * geometry.cell_size
    y = geometry.center_y - (coord.lat - player.lat) / grid_size * geometry.cell_size
    return (int(round(x)), int(round(y)))


def find_cache_at_pixel(game: Game, pixel: tuple[int, int], geometry: ViewportGeometry) -> CacheView | None:
    cell = pixel_to_cell(pixel[0], pixel[1], game.player_cell, geometry)
    for view in game.window_view():
        if view.cell == cell:
            return view
    return None


def parse_geo_fix(value: str) -> tuple[float, float]:
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("geo fix must be LAT,LNG")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError:
        raise argparse.ArgumentTypeError("geo fix must be LAT,LNG") from None


def _viewport_rect() -> pygame.Rect:
    panel_x = WINDOW_SIZE[0] - PANEL_WIDTH - PANEL_MARGIN
    width = panel_x - (VIEWPORT_MARGIN * 2)
    return pygame.Rect(VIEWPORT_MARGIN, VIEWPORT_MARGIN, width, WINDOW_SIZE[1] - (VIEWPORT_MARGIN * 2))


def _panel_rect() -> pygame.Rect:
    panel_x = WINDOW_SIZE[0] - PANEL_WIDTH - PANEL_MARGIN
    return pygame.Rect(panel_x, PANEL_MARGIN, PANEL_WIDTH, WINDOW_SIZE[1] - (PANEL_MARGIN * 2))


def _draw_world(
    screen: pygame.Surface,
    game: Game,
    geometry: ViewportGeometry,
    font: pygame.font.Font,
    *,
    clip_rect: pygame.Rect,
) -> None:
    old_clip = screen.get_clip()
    screen.set_clip(clip_rect)
    player_cell = game.player_cell
    radius = game.config.max_cache_distance
    for di in range(-radius, radius + 1):
        for dj in range(-radius, radius + 1):
            x, y = cell_to_pixel(player_cell.offset(di, dj), player_cell, geometry)
            rect = pygame.Rect(x, y, geometry.cell_size, geometry.cell_size)
            pygame.draw.rect(screen, CELL_COLOR, rect)
            pygame.draw.rect(screen, GRID_COLOR, rect, 1)

    for view in game.window_view():
        x, y = cell_to_pixel(view.cell, player_cell, geometry)
        marker_center = (x + geometry.cell_size // 2, y + geometry.cell_size // 2)
        color = CACHE_COLOR if view.coin_ids else EMPTY_CACHE_COLOR
        pygame.draw.circle(screen, color, marker_center, geometry.cell_size // 3)
        pygame.draw.circle(screen, (14, 24, 30), marker_center, geometry.cell_size // 3, 1)
        label = font.render(str(len(view.coin_ids)), True, (18, 20, 25))
        screen.blit(label, label.get_rect(center=marker_center))

    player = game.world.player.location
    trail = [coord_to_pixel(coord, player, game.config.grid_size, geometry) for coord in game.world.movement_history]
    if len(trail) >= 1:
        trail.append((int(geometry.center_x), int(geometry.center_y)))
        pygame.draw.lines(screen, TRAIL_COLOR, False, trail, 2)
    pygame.draw.circle(screen, PLAYER_COLOR, (int(geometry.center_x), int(geometry.center_y)), 8)
    pygame.draw.circle(screen, (15, 15, 15), (int(geometry.center_x), int(geometry.center_y)), 8, 1)
    screen.set_clip(old_clip)


def _panel_lines(game: Game, selected: CacheView | None, status_message: str | None, geolocation_active: bool) -> list[str]:
    player = game.player_view()
    lines = [
        f"lat={player.lat:.6f} lng={player.lng:.6f}",
        f"points={player.points} geolocation={'on' if geolocation_active else 'off'}",
        "WASD/arrows move | LMB collect | RMB deposit",
        "G geolocate | H stop | R reset | ESC quit",
    ]
    if status_message:
        lines.append(f"status: {status_message}")
    lines.append("")
    if selected is not None:
        lines.append(f"Cache {selected.origin.lat:.6f}:{selected.origin.lng:.6f} [{selected.cache_id}]")
        lines.extend(f"  {coin_id}" for coin_id in selected.coin_ids)
        if not selected.coin_ids:
            lines.append("  <empty>")
        lines.append("")
    inventory = game.inventory_view()
    lines.append(f"Inventory ({len(inventory)}):")
    lines.extend(f"  {coin.coin_id}" for coin in inventory)
    return lines[:PANEL_LINE_LIMIT]


def _draw_panel(screen: pygame.Surface, font: pygame.font.Font, lines: list[str]) -> None:
    panel = _panel_rect()
    pygame.draw.rect(screen, (26, 28, 36), panel)
    pygame.draw.rect(screen, (64, 68, 84), panel, 1)
    y = panel.y + 10
    for line in lines:
        surface = font.render(line, True, TEXT_COLOR)
        screen.blit(surface, (panel.x + 10, y))
        y += 22


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m geocoin.cli.pygame_viewer",
        description="Run the Geocoin Carrier pygame map viewer.",
    )
    parser.add_argument(
        "--save-dir",
        default=DEFAULT_SAVE_DIR,
        help="Directory holding the save slot file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="World seed used when no valid save exists.",
    )
    parser.add_argument(
        "--geo-fix",
        type=parse_geo_fix,
        action="append",
        default=[],
        metavar="LAT,LNG",
        help="Scripted geolocation fix delivered after geolocation is enabled (repeatable).",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Force SDL dummy video driver for CI/testing and exit without opening a real window.",
    )
    return parser


def env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[geocoin.viewer] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )
    for name in ("SDL_VIDEODRIVER", "SDL_AUDIODRIVER"):
        value = os.environ.get(name, "<unset>")
        print(f"[geocoin.viewer] env {name}={value}")


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def _build_geolocation_source(geo_fixes: list[tuple[float, float]]) -> GeolocationSource:
    if not geo_fixes:
        return UnavailableGeolocationSource("no geolocation source configured (use --geo-fix LAT,LNG)")
    return ScriptedGeolocationSource(list(geo_fixes))


def build_viewer_session(save_dir: str, *, seed: int, geo_fixes: list[tuple[float, float]] | None = None) -> GameSession:
    store = FileBlobStore(save_dir)
    session = GameSession(store, seed=seed, geolocation_source=_build_geolocation_source(geo_fixes or []))
    if session.load_status == LOAD_STATUS_INVALID:
        print(f"[geocoin.viewer] discarded invalid save slot={SAVE_SLOT}: {session.load_error}", file=sys.stderr)
    print(
        "[geocoin.viewer] session "
        f"status={session.load_status} "
        f"path={store.path_for(SAVE_SLOT)} "
        f"master_seed={session.game.world.master_seed} "
        f"world_hash={world_hash(session.game.world)}"
    )
    return session


def report_saved_slot(session: GameSession) -> None:
    blob = session.store.read(session.slot)
    if blob is None:
        print(f"[geocoin.viewer] no save slot={session.slot}")
        return
    print(f"[geocoin.viewer] saved slot={session.slot} save_hash={json.loads(blob)['save_hash']} saves={session.save_count}")


def run_pygame_viewer(
    save_dir: str = DEFAULT_SAVE_DIR,
    *,
    seed: int = DEFAULT_SEED,
    geo_fixes: list[tuple[float, float]] | None = None,
    headless: bool = False,
) -> int:
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[geocoin.viewer] warning: headless mode active; no window will open.")

    _print_startup_banner()
    pygame_module = _ensure_pygame_imported()

    try:
        pygame_module.init()
    except Exception as exc:
        print(
            "[geocoin.viewer] failed during pygame.init(): "
            f"{exc}. Hint: verify a working SDL video driver (set SDL_VIDEODRIVER=dummy for headless mode).",
            file=sys.stderr,
        )
        return 1

    session = build_viewer_session(save_dir, seed=seed, geo_fixes=geo_fixes)
    controller = SessionController(session)

    try:
        pygame_module.display.set_caption("Geocoin Carrier")
        screen = pygame_module.display.set_mode(WINDOW_SIZE)
    except Exception as exc:
        print(
            "[geocoin.viewer] failed during pygame.display.set_mode(...): "
            f"{exc}. Hint: GUI sessions require a valid display; use --headless or GEOCOIN_HEADLESS=1.",
            file=sys.stderr,
        )
        pygame_module.quit()
        return 1

    driver_name = pygame_module.display.get_driver()
    print(f"[geocoin.viewer] display initialized: {driver_name}, window size={WINDOW_SIZE}")

    if headless:
        session.pump()
        pygame_module.quit()
        return 0

    clock = pygame_module.time.Clock()
    font = pygame_module.font.SysFont("consolas", 18)
    marker_font = pygame_module.font.SysFont("consolas", 14)
    viewport_rect = _viewport_rect()
    geometry = ViewportGeometry(center_x=float(viewport_rect.centerx), center_y=float(viewport_rect.centery))

    move_keys = {
        pygame_module.K_w: "up",
        pygame_module.K_UP: "up",
        pygame_module.K_s: "down",
        pygame_module.K_DOWN: "down",
        pygame_module.K_a: "left",
        pygame_module.K_LEFT: "left",
        pygame_module.K_d: "right",
        pygame_module.K_RIGHT: "right",
    }
    selected_cache_id: str | None = None
    status_message: str | None = None
    reset_armed_at: float | None = None
    running = True

    def report(outcome_text: str) -> None:
        nonlocal status_message
        status_message = outcome_text
        print(f"[geocoin.viewer] {outcome_text}")

    while running:
        clock.tick(30)
        now_seconds = pygame_module.time.get_ticks() / 1000.0

        for event in pygame_module.event.get():
            if event.type == pygame_module.QUIT:
                running = False
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_ESCAPE:
                running = False
            elif event.type == pygame_module.KEYDOWN and event.key in move_keys:
                report(format_outcome(controller.move(move_keys[event.key])))
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_g:
                report(format_outcome(controller.enable_geolocation()))
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_h:
                report(format_outcome(controller.disable_geolocation()))
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_r:
                if reset_armed_at is not None and now_seconds - reset_armed_at <= RESET_CONFIRM_WINDOW_SECONDS:
                    reset_armed_at = None
                    selected_cache_id = None
                    report(format_outcome(controller.reset()))
                else:
                    reset_armed_at = now_seconds
                    status_message = "press R again to erase your game state"
            elif event.type == pygame_module.MOUSEBUTTONDOWN and event.button in (1, 3):
                if not viewport_rect.collidepoint(event.pos):
                    continue
                view = find_cache_at_pixel(session.game, event.pos, geometry)
                if view is None:
                    selected_cache_id = None
                    continue
                selected_cache_id = view.cache_id
                if event.button == 1 and view.coin_ids:
                    report(format_outcome(controller.collect(view.cache_id, view.coin_ids[0])))
                elif event.button == 3:
                    report(format_outcome(controller.deposit(view.cache_id)))

        for outcome in session.pump():
            report(format_outcome(outcome))

        selected = None
        if selected_cache_id is not None:
            selected = next((view for view in session.game.window_view() if view.cache_id == selected_cache_id), None)
        tracker = session.game.geolocation
        screen.fill(BACKGROUND_COLOR)
        _draw_world(screen, session.game, geometry, marker_font, clip_rect=viewport_rect)
        pygame_module.draw.rect(screen, (64, 68, 84), viewport_rect, 1)
        _draw_panel(screen, font, _panel_lines(session.game, selected, status_message, tracker is not None and tracker.active))
        pygame_module.display.flip()

    report_saved_slot(session)
    pygame_module.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    headless = args.headless or env_flag_enabled("GEOCOIN_HEADLESS")
    raise SystemExit(
        run_pygame_viewer(
            save_dir=str(Path(args.save_dir)),
            seed=args.seed,
            geo_fixes=args.geo_fix,
            headless=headless,
        )
    )


if __name__ == "__main__":
    main()
