from pathlib import Path

import pytest

from geocoin.cli.pygame_viewer import (
    CELL_SIZE,
    DEFAULT_SAVE_DIR,
    ViewportGeometry,
    _build_parser,
    _panel_lines,
    build_viewer_session,
    cell_to_pixel,
    coord_to_pixel,
    find_cache_at_pixel,
    pixel_to_cell,
)
from geocoin.content.io import SAVE_SLOT, FileBlobStore, save_world
from geocoin.sim.caches import Cache, Coin
from geocoin.sim.config import GameConfig
from geocoin.sim.core import Game
from geocoin.sim.grid import GeoCoord, GridCell
from geocoin.sim.session import LOAD_STATUS_INVALID, LOAD_STATUS_LOADED
from geocoin.sim.world import WorldState

GEOMETRY = ViewportGeometry(center_x=400.0, center_y=300.0)


def _game_with_cache() -> Game:
    anchor = GeoCoord(0.00055, 0.00035)
    world = WorldState.fresh(anchor=anchor)
    cell = GridCell(6, 4)
    world.ledger.record(Cache(cell=cell, coins=[Coin(coin_id="6:4#0", origin_cell=cell)]))
    return Game(world, config=GameConfig(cache_probability=0.0, max_cache_distance=2, anchor=anchor))


def test_viewer_parser_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.save_dir == DEFAULT_SAVE_DIR
    assert args.seed == 7
    assert args.geo_fix == []
    assert args.headless is False


def test_player_cell_is_centered_and_north_is_up() -> None:
    player_cell = GridCell(5, 3)

    x, y = cell_to_pixel(player_cell, player_cell, GEOMETRY)
    north_x, north_y = cell_to_pixel(GridCell(6, 3), player_cell, GEOMETRY)
    east_x, east_y = cell_to_pixel(GridCell(5, 4), player_cell, GEOMETRY)

    assert (x, y) == (400 - CELL_SIZE // 2, 300 - CELL_SIZE // 2)
    assert north_y == y - CELL_SIZE and north_x == x
    assert east_x == x + CELL_SIZE and east_y == y


def test_pixel_to_cell_inverts_cell_to_pixel() -> None:
    player_cell = GridCell(5, 3)
    for di in range(-2, 3):
        for dj in range(-2, 3):
            cell = GridCell(5 + di, 3 + dj)
            x, y = cell_to_pixel(cell, player_cell, GEOMETRY)
            assert pixel_to_cell(x + 1, y + 1, player_cell, GEOMETRY) == cell
            assert pixel_to_cell(x + CELL_SIZE - 1, y + CELL_SIZE - 1, player_cell, GEOMETRY) == cell


def test_coord_to_pixel_places_player_at_center() -> None:
    player = GeoCoord(0.00055, 0.00035)

    assert coord_to_pixel(player, player, 0.0001, GEOMETRY) == (400, 300)
    assert coord_to_pixel(GeoCoord(0.00065, 0.00035), player, 0.0001, GEOMETRY) == (400, 300 - CELL_SIZE)


def test_find_cache_at_pixel_hits_cache_marker_cell() -> None:
    game = _game_with_cache()
    x, y = cell_to_pixel(GridCell(6, 4), game.player_cell, GEOMETRY)

    hit = find_cache_at_pixel(game, (x + CELL_SIZE // 2, y + CELL_SIZE // 2), GEOMETRY)
    miss = find_cache_at_pixel(game, (400, 300), GEOMETRY)

    assert hit is not None and hit.cache_id == "6:4"
    assert miss is None


def test_panel_lines_show_selected_cache_and_inventory() -> None:
    game = _game_with_cache()
    game.collect("6:4", "6:4#0")
    selected = game.window_view()[0]

    lines = _panel_lines(game, selected, "collect: applied", True)

    assert "points=1 geolocation=on" in lines
    assert "status: collect: applied" in lines
    assert "Cache 0.000600:0.000400 [6:4]" in lines
    assert "  <empty>" in lines
    assert "Inventory (1):" in lines
    assert "  6:4#0" in lines


def test_build_viewer_session_loads_existing_slot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    game = Game()
    game.move("up")
    save_world(FileBlobStore(tmp_path), game.world)

    session = build_viewer_session(str(tmp_path), seed=99)

    assert session.load_status == LOAD_STATUS_LOADED
    assert session.game.world == game.world
    assert "status=loaded" in capsys.readouterr().out


def test_build_viewer_session_reports_invalid_slot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / f"{SAVE_SLOT}.json").write_text("{}", encoding="utf-8")

    session = build_viewer_session(str(tmp_path), seed=4)

    captured = capsys.readouterr()
    assert session.load_status == LOAD_STATUS_INVALID
    assert session.game.world.master_seed == 4
    assert "discarded invalid save" in captured.err


def test_main_help_prints_usage_without_starting_viewer(capsys: pytest.CaptureFixture[str]) -> None:
    from geocoin.cli.pygame_viewer import main

    with pytest.raises(SystemExit) as result:
        main(["--help"])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "usage:" in captured.out
    assert "--headless" in captured.out


def test_main_headless_mode_exits_cleanly_and_warns(
    tmp_path: Path, monkeypatch, capsys: pytest.CaptureFixture[str]
) -> None:
    from geocoin.cli.pygame_viewer import main

    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")

    with pytest.raises(SystemExit) as result:
        main(["--headless", "--save-dir", str(tmp_path)])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "headless mode active" in captured.out
    assert not (tmp_path / f"{SAVE_SLOT}.json").exists()
