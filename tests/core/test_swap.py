# [TESTER] v1

from __future__ import annotations

import threading

import pytest

from cpamm import (
    execute_swap,
    execute_swap_exact_output,
    initialize,
    quote_exact_input,
    quote_exact_output,
)
from cpamm.errors import (
    ArithmeticOverflow,
    InsufficientLiquidity,
    InvalidAmount,
    PoolNotInitialized,
    SlippageExceeded,
)
from cpamm.kernels.python.fixed_point import MAX_AMOUNT
from cpamm.state.pools import PoolState


def test_quote_exact_input_reference_trade() -> None:
    pool = initialize(1000, 4000, 30)
    q = quote_exact_input(pool, True, 100)
    assert q.input_is_asset_a is True
    assert q.amount_in == 100
    assert q.fee_amount == 0
    assert q.net_input == 100
    assert q.amount_out == 363
    assert q.price_impact_bps == 925


def test_quote_is_pure() -> None:
    pool = initialize(1000, 4000, 30)
    before = pool.snapshot()
    quote_exact_input(pool, True, 100)
    quote_exact_output(pool, False, 50)
    assert pool.snapshot() == before


def test_quote_reverse_direction() -> None:
    pool = initialize(1000, 4000, 30)
    q = quote_exact_input(pool, False, 400)
    # floor(1000 * 399 / 4399) with fee floor(400 * 30 / 10000) == 1
    assert q.fee_amount == 1
    assert q.net_input == 399
    assert q.amount_out == 90


def test_execute_swap_commits_and_grows_k() -> None:
    pool = initialize(1000, 4000, 30)
    k_before = pool.constant_product()
    q = execute_swap(pool, True, 100, 363)
    assert q.amount_out == 363
    assert (pool.reserve_a, pool.reserve_b, pool.total_liquidity) == (1100, 3637, 2000)
    assert pool.constant_product() == 4_000_700 > k_before


def test_execute_swap_fee_is_retained() -> None:
    pool = initialize(1000, 4000, 30)
    q = execute_swap(pool, True, 1000, 0)
    assert (q.fee_amount, q.net_input, q.amount_out) == (3, 997, 1996)
    assert (pool.reserve_a, pool.reserve_b) == (2000, 2004)


def test_execute_swap_slippage_leaves_pool_untouched() -> None:
    pool = initialize(1000, 4000, 30)
    before = pool.snapshot()
    with pytest.raises(SlippageExceeded):
        execute_swap(pool, True, 100, 364)
    assert pool.snapshot() == before


@pytest.mark.parametrize("amount_in", [0, -1])
def test_execute_swap_rejects_non_positive_input(amount_in: int) -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(InvalidAmount):
        execute_swap(pool, True, amount_in, 0)


def test_execute_swap_rejects_dust() -> None:
    pool = initialize(1_000_000, 10, 0)
    with pytest.raises(InsufficientLiquidity):
        execute_swap(pool, True, 1, 0)


def test_swap_requires_bootstrap() -> None:
    pool = PoolState(pool_id="p", asset_a="A", asset_b="B")
    with pytest.raises(PoolNotInitialized):
        quote_exact_input(pool, True, 100)
    with pytest.raises(PoolNotInitialized):
        execute_swap(pool, True, 100, 0)


def test_swap_direction_must_be_bool() -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(TypeError):
        quote_exact_input(pool, 1, 100)  # type: ignore[arg-type]


def test_swap_overflow_is_rejected_cleanly() -> None:
    pool = initialize(MAX_AMOUNT - 10, MAX_AMOUNT - 10, 0)
    before = pool.snapshot()
    with pytest.raises(ArithmeticOverflow):
        execute_swap(pool, True, 100, 0)
    assert pool.snapshot() == before


def test_quote_exact_output_finds_minimal_input() -> None:
    pool = initialize(1000, 4000, 30)
    assert quote_exact_output(pool, True, 363).amount_in == 100
    q = quote_exact_output(pool, True, 1996)
    assert q.amount_in == 999
    assert q.amount_out >= 1996
    assert quote_exact_input(pool, True, 998).amount_out < 1996


def test_quote_exact_output_bounds() -> None:
    pool = initialize(1000, 4000, 30)
    with pytest.raises(InvalidAmount):
        quote_exact_output(pool, True, 0)
    with pytest.raises(InsufficientLiquidity):
        quote_exact_output(pool, True, 4000)


def test_execute_swap_exact_output() -> None:
    pool = initialize(1000, 4000, 30)
    before = pool.snapshot()
    with pytest.raises(SlippageExceeded):
        execute_swap_exact_output(pool, True, 1996, 998)
    assert pool.snapshot() == before

    q = execute_swap_exact_output(pool, True, 1996, 999)
    assert q.amount_in == 999
    assert pool.reserve_a == 1999
    assert pool.reserve_b == 4000 - q.amount_out
    assert pool.constant_product() >= before.constant_product()


def test_concurrent_swaps_match_sequential_execution() -> None:
    threaded = initialize(1_000_000, 4_000_000, 30)
    sequential = initialize(1_000_000, 4_000_000, 30)
    n_threads, per_thread, amount_in = 8, 25, 1_000

    barrier = threading.Barrier(n_threads)
    errors: list[BaseException] = []

    def worker() -> None:
        barrier.wait()
        try:
            for _ in range(per_thread):
                execute_swap(threaded, True, amount_in, 0)
        except BaseException as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []

    for _ in range(n_threads * per_thread):
        execute_swap(sequential, True, amount_in, 0)

    assert threaded.snapshot().reserve_a == sequential.snapshot().reserve_a
    assert threaded.snapshot().reserve_b == sequential.snapshot().reserve_b
    assert threaded.total_liquidity == sequential.total_liquidity


def test_fee_that_floors_to_zero_can_leave_k_unchanged() -> None:
    pool = initialize(100, 200, 30)
    q = execute_swap(pool, True, 100, 0)
    assert (q.fee_amount, q.amount_out) == (0, 100)
    assert (pool.reserve_a, pool.reserve_b) == (200, 100)
    assert pool.constant_product() == 20_000
