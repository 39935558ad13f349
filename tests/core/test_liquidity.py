# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm import add_liquidity, execute_swap, initialize, remove_liquidity
from cpamm.errors import (
    InsufficientLiquidity,
    PoolNotInitialized,
    SlippageExceeded,
    ZeroLiquidityMinted,
    ZeroWithdrawal,
)
from cpamm.state.pools import PoolState, PoolStatus


def _state(pool: PoolState) -> tuple[int, int, int]:
    return pool.reserve_a, pool.reserve_b, pool.total_liquidity


def test_add_liquidity_proportional() -> None:
    pool = initialize(1000, 4000, 30)
    minted, actual_a, actual_b = add_liquidity(pool, 100, 400)
    assert (minted, actual_a, actual_b) == (200, 100, 400)
    assert _state(pool) == (1100, 4400, 2200)


def test_add_liquidity_consumes_only_the_ratio() -> None:
    pool = initialize(1000, 4000, 30)
    res = add_liquidity(pool, 100, 1000)
    assert res.minted_liquidity == 200
    assert (res.actual_a, res.actual_b) == (100, 400)
    assert _state(pool) == (1100, 4400, 2200)


def test_add_liquidity_dust_is_rejected() -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(ZeroLiquidityMinted):
        add_liquidity(pool, 1, 1)
    assert _state(pool) == (1000, 4000, 2000)


def test_add_liquidity_min_liquidity_guard() -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(SlippageExceeded):
        add_liquidity(pool, 100, 400, min_liquidity=201)
    assert _state(pool) == (1000, 4000, 2000)
    assert add_liquidity(pool, 100, 400, min_liquidity=200).minted_liquidity == 200


def test_add_liquidity_requires_bootstrap() -> None:
    pool = PoolState(pool_id="p", asset_a="A", asset_b="B")
    with pytest.raises(PoolNotInitialized):
        add_liquidity(pool, 100, 400)


def test_remove_liquidity_proportional() -> None:
    pool = initialize(1000, 4000, 30)
    amount_a, amount_b = remove_liquidity(pool, 500)
    assert (amount_a, amount_b) == (250, 1000)
    assert _state(pool) == (750, 3000, 1500)


@pytest.mark.parametrize("liquidity_amount", [0, 2001, -1, 2**64])
def test_remove_liquidity_out_of_range(liquidity_amount: int) -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(InsufficientLiquidity):
        remove_liquidity(pool, liquidity_amount)
    assert _state(pool) == (1000, 4000, 2000)


def test_remove_liquidity_min_amount_guards() -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(SlippageExceeded):
        remove_liquidity(pool, 500, min_amount_a=251)
    with pytest.raises(SlippageExceeded):
        remove_liquidity(pool, 500, min_amount_b=1001)
    assert _state(pool) == (1000, 4000, 2000)


def test_remove_liquidity_zero_withdrawal() -> None:
    pool = PoolState(pool_id="p", asset_a="A", asset_b="B")
    pool.activate(reserve_a=1, reserve_b=1, total_liquidity=10, fee_bps=0)
    with pytest.raises(ZeroWithdrawal):
        remove_liquidity(pool, 1)
    assert _state(pool) == (1, 1, 10)


def test_round_trip_after_swap_never_profits() -> None:
    pool = initialize(1000, 4000, 30)
    execute_swap(pool, True, 100, 0)
    assert _state(pool) == (1100, 3637, 2000)

    res = add_liquidity(pool, 110, 364)
    assert tuple(res) == (200, 110, 364)
    assert _state(pool) == (1210, 4001, 2200)

    amount_a, amount_b = remove_liquidity(pool, 200)
    assert (amount_a, amount_b) == (110, 363)
    assert amount_a <= res.actual_a and amount_b <= res.actual_b


def test_full_withdrawal_drains_and_reseeds() -> None:
    pool = initialize(1000, 4000, 30)
    assert tuple(remove_liquidity(pool, 2000)) == (1000, 4000)
    assert _state(pool) == (0, 0, 0)
    assert pool.status is PoolStatus.ACTIVE

    with pytest.raises(InsufficientLiquidity):
        execute_swap(pool, True, 100, 0)
    with pytest.raises(InsufficientLiquidity):
        remove_liquidity(pool, 1)

    res = add_liquidity(pool, 9, 16)
    assert tuple(res) == (12, 9, 16)
    assert _state(pool) == (9, 16, 12)
