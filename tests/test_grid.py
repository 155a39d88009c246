import pytest

from geocoin.sim.grid import (
    DEFAULT_GRID_SIZE,
    GeoCoord,
    GridCell,
    cell_key,
    cell_origin,
    chebyshev_distance,
    parse_cell_key,
    require_location,
    step,
    to_cell,
    window_cells,
)


def test_to_cell_floors_both_axes() -> None:
    assert to_cell(GeoCoord(0.00055, 0.00035)) == GridCell(5, 3)
    assert to_cell(GeoCoord(-0.00005, -0.00015)) == GridCell(-1, -2)


def test_cell_key_round_trips_through_parse() -> None:
    for cell in (GridCell(0, 0), GridCell(369895, -1220628), GridCell(-3, 7)):
        assert parse_cell_key(cell_key(cell)) == cell
    assert GridCell(5, 3).key == "5:3"


@pytest.mark.parametrize("key", ["", "5", "5:3:1", "a:b", "05:3", "+5:3", " 5:3", "5.0:3"])
def test_parse_cell_key_rejects_malformed_keys(key: str) -> None:
    with pytest.raises(ValueError):
        parse_cell_key(key)


def test_step_moves_one_cell_per_direction() -> None:
    start = GeoCoord(0.00055, 0.00035)

    assert to_cell(step(start, "up")) == GridCell(6, 3)
    assert to_cell(step(start, "down")) == GridCell(4, 3)
    assert to_cell(step(start, "left")) == GridCell(5, 2)
    assert to_cell(step(start, "right")) == GridCell(5, 4)


def test_step_rejects_unknown_direction() -> None:
    with pytest.raises(ValueError, match="unknown direction"):
        step(GeoCoord(0.0, 0.0), "north")


def test_opposite_steps_return_to_identical_coordinate() -> None:
    start = GeoCoord(36.9895, -122.0628)
    location = start
    for _ in range(4):
        location = step(location, "up")
    for _ in range(4):
        location = step(location, "down")
    for _ in range(7):
        location = step(location, "left")
    for _ in range(7):
        location = step(location, "right")

    assert location == start
    assert to_cell(location) == to_cell(start)


def test_window_cells_is_row_major_and_sized_by_radius() -> None:
    cells = window_cells(GridCell(0, 0), 1)

    assert len(cells) == 9
    assert cells[0] == GridCell(-1, -1)
    assert cells[1] == GridCell(-1, 0)
    assert cells[3] == GridCell(0, -1)
    assert cells[-1] == GridCell(1, 1)
    assert len(window_cells(GridCell(10, 10), 5)) == 121
    assert window_cells(GridCell(4, 4), 0) == [GridCell(4, 4)]
    assert all(chebyshev_distance(cell, GridCell(10, 10)) <= 5 for cell in window_cells(GridCell(10, 10), 5))


def test_window_cells_rejects_negative_radius() -> None:
    with pytest.raises(ValueError):
        window_cells(GridCell(0, 0), -1)


def test_cell_origin_is_south_west_corner() -> None:
    origin = cell_origin(GridCell(5, 3))

    assert origin == GeoCoord(0.0005, 0.0003)
    assert cell_origin(GridCell(-2, 0), DEFAULT_GRID_SIZE) == GeoCoord(-0.0002, 0.0)
    assert to_cell(origin, DEFAULT_GRID_SIZE) == GridCell(5, 3)
    assert to_cell(GeoCoord(36.9895, -122.0628)) == GridCell(369895, -1220628)


def test_geo_coord_from_dict_validates_numeric_fields() -> None:
    assert GeoCoord.from_dict({"lat": 1, "lng": 2.5}) == GeoCoord(1.0, 2.5)
    with pytest.raises(ValueError, match="player_location.lat must be numeric"):
        GeoCoord.from_dict({"lat": "1", "lng": 2.0}, field_name="player_location")
    with pytest.raises(ValueError, match="coord.lng must be numeric"):
        GeoCoord.from_dict({"lat": 1.0, "lng": True})
    with pytest.raises(ValueError, match="must be finite"):
        GeoCoord.from_dict({"lat": float("nan"), "lng": 0.0})


def test_to_cell_snaps_only_float_noise_below_a_grid_line() -> None:
    assert to_cell(GeoCoord(0.0005, 0.0)) == GridCell(5, 0)
    assert to_cell(GeoCoord(0.00049999999, 0.0)) == GridCell(4, 0)
    assert to_cell(GeoCoord(-0.00000000001, 0.0)) == GridCell(-1, 0)


def test_repeated_steps_advance_exactly_one_cell_each() -> None:
    location = GeoCoord(36.9895, -122.0628)
    start = to_cell(location)

    for count in range(1, 1001):
        location = step(location, "up")
        assert to_cell(location) == GridCell(start.i + count, start.j)


def test_require_location_rejects_unmappable_coordinates() -> None:
    assert require_location(GeoCoord(90.0, -180.0)) == GeoCoord(90.0, -180.0)
    with pytest.raises(ValueError, match="location.lat must be finite"):
        require_location(GeoCoord(float("inf"), 0.0))
    with pytest.raises(ValueError, match=r"location.lat must be within \[-90.0, 90.0\]"):
        require_location(GeoCoord(1e308, 0.0))
    with pytest.raises(ValueError, match=r"target.lng must be within \[-180.0, 180.0\]"):
        require_location(GeoCoord(0.0, 180.5), field_name="target")
