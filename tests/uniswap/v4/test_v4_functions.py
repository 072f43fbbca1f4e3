import eth_abi.abi
import hypothesis
import hypothesis.strategies
import pytest
from eth_utils.crypto import keccak

from tickswap.constants import ZERO_ADDRESS
from tickswap.exceptions import TickswapValueError
from tickswap.uniswap.v4_functions import (
    align_tick,
    build_pool_key,
    exchange_rate_from_sqrt_price_x96,
    generate_v4_pool_id,
    sort_currencies,
    tick_window,
)
from tickswap.uniswap.v4_libraries.tick_math import (
    MAX_TICK,
    MIN_TICK,
    max_usable_tick,
    min_usable_tick,
)

DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def test_sort_currencies():
    assert sort_currencies(USDC, DAI) == (DAI, USDC)
    assert sort_currencies(DAI, USDC) == (DAI, USDC)
    assert sort_currencies(DAI, ZERO_ADDRESS) == (ZERO_ADDRESS, DAI)


def test_sort_currencies_checksums_addresses():
    currency0, currency1 = sort_currencies(DAI.lower(), USDC.lower())
    assert (currency0, currency1) == (DAI, USDC)


def test_sort_currencies_rejects_identical_currencies():
    with pytest.raises(TickswapValueError):
        sort_currencies(DAI, DAI.lower())


def test_pool_key_is_ordered():
    key = build_pool_key(USDC, ZERO_ADDRESS, fee=500, tick_spacing=10, hooks=ZERO_ADDRESS)
    assert key.currency0 == ZERO_ADDRESS
    assert key.currency1 == USDC
    assert key.fee == 500
    assert key.tick_spacing == 10
    assert key.hooks == ZERO_ADDRESS


def test_pool_id_is_hash_of_encoded_key():
    key = build_pool_key(ZERO_ADDRESS, USDC, fee=3000, tick_spacing=60, hooks=ZERO_ADDRESS)
    expected = keccak(
        eth_abi.abi.encode(
            ("address", "address", "uint24", "int24", "address"),
            (ZERO_ADDRESS, USDC, 3000, 60, ZERO_ADDRESS),
        )
    )
    pool_id = generate_v4_pool_id(key)
    assert pool_id == expected
    assert len(pool_id) == 32


def test_pool_id_does_not_depend_on_currency_order():
    assert generate_v4_pool_id(
        build_pool_key(DAI, USDC, fee=100, tick_spacing=1, hooks=ZERO_ADDRESS)
    ) == generate_v4_pool_id(build_pool_key(USDC, DAI, fee=100, tick_spacing=1, hooks=ZERO_ADDRESS))


def test_pool_id_changes_with_key_fields():
    base_key = build_pool_key(DAI, USDC, fee=100, tick_spacing=1, hooks=ZERO_ADDRESS)
    other_keys = [
        build_pool_key(DAI, USDC, fee=500, tick_spacing=1, hooks=ZERO_ADDRESS),
        build_pool_key(DAI, USDC, fee=100, tick_spacing=10, hooks=ZERO_ADDRESS),
        build_pool_key(DAI, ZERO_ADDRESS, fee=100, tick_spacing=1, hooks=ZERO_ADDRESS),
        build_pool_key(
            DAI, USDC, fee=100, tick_spacing=1, hooks="0x0000000000000000000000000000000000000080"
        ),
    ]
    pool_ids = {generate_v4_pool_id(key) for key in [base_key, *other_keys]}
    assert len(pool_ids) == 5


def test_exchange_rate_at_unit_price():
    assert exchange_rate_from_sqrt_price_x96(2**96) == 1
    assert exchange_rate_from_sqrt_price_x96(2 * 2**96) == 4


@pytest.mark.parametrize(
    ("tick", "tick_spacing", "expected"),
    [
        (0, 60, 0),
        (29, 60, 0),
        (30, 60, 60),
        (31, 60, 60),
        (89, 60, 60),
        (90, 60, 120),
        (-29, 60, 0),
        (-30, 60, 0),
        (-31, 60, -60),
        (-90, 60, -60),
        (-91, 60, -120),
        (7, 1, 7),
        (-7, 1, -7),
        (5, 10, 10),
        (-5, 10, 0),
    ],
)
def test_align_tick(tick: int, tick_spacing: int, expected: int):
    assert align_tick(tick, tick_spacing) == expected


def test_align_tick_rejects_invalid_spacing():
    with pytest.raises(TickswapValueError):
        align_tick(0, 0)
    with pytest.raises(TickswapValueError):
        align_tick(0, -60)


@hypothesis.given(
    tick=hypothesis.strategies.integers(min_value=MIN_TICK, max_value=MAX_TICK),
    tick_spacing=hypothesis.strategies.integers(min_value=1, max_value=32767),
)
def test_aligned_tick_is_nearest_multiple(tick: int, tick_spacing: int):
    aligned = align_tick(tick, tick_spacing)
    assert aligned % tick_spacing == 0
    assert 2 * abs(aligned - tick) <= tick_spacing


def test_tick_window():
    assert tick_window(0, 60) == (-180, -120, -60, 0, 60, 120, 180)
    assert tick_window(-100, 60, radius=1) == (-180, -120, -60)
    assert tick_window(5, 10, radius=0) == (10,)


@hypothesis.given(
    tick=hypothesis.strategies.integers(min_value=MIN_TICK, max_value=MAX_TICK),
    tick_spacing=hypothesis.strategies.integers(min_value=1, max_value=32767),
    radius=hypothesis.strategies.integers(min_value=0, max_value=64),
)
def test_tick_window_shape(tick: int, tick_spacing: int, radius: int):
    window = tick_window(tick, tick_spacing, radius)
    aligned_tick = align_tick(tick, tick_spacing)
    lowest, highest = min_usable_tick(tick_spacing), max_usable_tick(tick_spacing)

    assert window == tuple(
        aligned_tick + k * tick_spacing
        for k in range(-radius, radius + 1)
        if lowest <= aligned_tick + k * tick_spacing <= highest
    )
    assert all(b - a == tick_spacing for a, b in zip(window, window[1:], strict=False))
    if lowest + radius * tick_spacing <= aligned_tick <= highest - radius * tick_spacing:
        assert len(window) == 2 * radius + 1
        assert window[radius] == aligned_tick


def test_tick_window_stays_within_usable_ticks():
    assert max_usable_tick(60) == 887220
    assert tick_window(MAX_TICK, 60, radius=2) == (887160, 887220)
    assert tick_window(MIN_TICK, 60, radius=2) == (-887220, -887160)
    assert tick_window(887160, 60, radius=2) == (887040, 887100, 887160, 887220)


def test_tick_window_rejects_negative_radius():
    with pytest.raises(TickswapValueError):
        tick_window(0, 60, radius=-1)
