import pytest

from geocoin.sim.config import DEFAULT_ANCHOR, GameConfig
from geocoin.sim.grid import GeoCoord


def test_default_config_matches_documented_constants() -> None:
    config = GameConfig()

    assert config.grid_size == 0.0001
    assert config.cache_probability == 0.1
    assert config.max_cache_distance == 5
    assert (config.min_coins, config.max_coins) == (1, 10)
    assert config.deposit_count == 5
    assert config.anchor == GeoCoord(36.9895, -122.0628)


def test_config_dict_round_trip() -> None:
    config = GameConfig(cache_probability=0.25, max_cache_distance=3, anchor=GeoCoord(1.0, 2.0))

    assert GameConfig.from_dict(config.to_dict()) == config
    assert GameConfig.from_dict(None) == GameConfig()
    assert GameConfig.from_dict({}).anchor == DEFAULT_ANCHOR


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"grid_size": 0}, "config.grid_size"),
        ({"cache_probability": 1.5}, "config.cache_probability"),
        ({"max_cache_distance": -1}, "config.max_cache_distance"),
        ({"max_cache_distance": True}, "config.max_cache_distance"),
        ({"min_coins": 0}, "config.min_coins"),
        ({"min_coins": 4, "max_coins": 3}, "config.max_coins"),
        ({"deposit_count": -5}, "config.deposit_count"),
    ],
)
def test_config_rejects_invalid_values(kwargs: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        GameConfig(**kwargs)


def test_config_from_dict_validates_anchor() -> None:
    with pytest.raises(ValueError, match="config.anchor.lat must be numeric"):
        GameConfig.from_dict({"anchor": {"lat": None, "lng": 0.0}})
