from geocoin.sim.rng import CACHE_COINS_STREAM_PREFIX, CACHE_PRESENCE_STREAM_PREFIX, cell_stream, derive_stream_seed


def test_derived_stream_seed_is_stable_for_same_master_seed() -> None:
    first = derive_stream_seed(master_seed=123, stream_name="cache_presence:5:3")
    second = derive_stream_seed(master_seed=123, stream_name="cache_presence:5:3")

    assert first == second


def test_derived_stream_seed_changes_with_stream_name_and_seed() -> None:
    presence = derive_stream_seed(master_seed=123, stream_name="cache_presence:5:3")
    coins = derive_stream_seed(master_seed=123, stream_name="cache_coins:5:3")
    other_seed = derive_stream_seed(master_seed=124, stream_name="cache_presence:5:3")

    assert presence != coins
    assert presence != other_seed


def test_cell_streams_do_not_depend_on_draw_order() -> None:
    forward = [cell_stream(7, CACHE_PRESENCE_STREAM_PREFIX, f"{i}:0").random() for i in range(10)]
    backward = [cell_stream(7, CACHE_PRESENCE_STREAM_PREFIX, f"{i}:0").random() for i in reversed(range(10))]

    assert forward == list(reversed(backward))


def test_presence_and_coin_streams_are_independent() -> None:
    presence = cell_stream(7, CACHE_PRESENCE_STREAM_PREFIX, "1:1")
    coins = cell_stream(7, CACHE_COINS_STREAM_PREFIX, "1:1")

    assert presence.random() != coins.random()
