# [TESTER] v1

from __future__ import annotations

import dataclasses
import logging

import pytest

from cpamm.errors import AlreadyInitialized, InvalidAmount, InvalidFee, InvariantViolation, PoolNotInitialized
from cpamm.kernels.python.fixed_point import MAX_AMOUNT
from cpamm.state.invariants import check_transition
from cpamm.state.pools import PoolState, PoolStatus, compute_pool_id


def _active_pool(reserve_a: int = 1000, reserve_b: int = 4000, total_liquidity: int = 2000) -> PoolState:
    pool = PoolState(pool_id=compute_pool_id("test", "A", "B"), asset_a="A", asset_b="B")
    pool.activate(reserve_a=reserve_a, reserve_b=reserve_b, total_liquidity=total_liquidity, fee_bps=30)
    return pool


def test_pool_id_is_deterministic_and_scoped() -> None:
    pid = compute_pool_id("amm1", "USDC", "WETH")
    assert pid == compute_pool_id("amm1", "USDC", "WETH")
    assert pid.startswith("0x") and len(pid) == 66
    assert pid != compute_pool_id("amm2", "USDC", "WETH")
    assert pid != compute_pool_id("amm1", "WETH", "USDC")
    # Length prefixes keep ("ab", "c") and ("a", "bc") apart.
    assert compute_pool_id("x", "ab", "c") != compute_pool_id("x", "a", "bc")


def test_pool_id_rejects_identical_assets() -> None:
    with pytest.raises(InvalidAmount):
        compute_pool_id("amm1", "USDC", "USDC")
    with pytest.raises(TypeError):
        compute_pool_id("", "A", "B")


def test_new_pool_is_uninitialized() -> None:
    pool = PoolState(pool_id="p", asset_a="A", asset_b="B")
    assert pool.status is PoolStatus.UNINITIALIZED
    assert not pool.is_active
    with pytest.raises(PoolNotInitialized):
        pool.require_active()
    with pytest.raises(PoolNotInitialized):
        pool.commit(1, 1, 1)


def test_pool_state_validates_fields() -> None:
    with pytest.raises(InvalidAmount):
        PoolState(pool_id="p", asset_a="A", asset_b="A")
    with pytest.raises(InvalidAmount):
        PoolState(pool_id="p", asset_a="A", asset_b="B", reserve_a=-1)
    with pytest.raises(InvalidFee):
        PoolState(pool_id="p", asset_a="A", asset_b="B", fee_bps=10_000)


def test_activate_is_one_way() -> None:
    pool = _active_pool()
    assert pool.status is PoolStatus.ACTIVE
    with pytest.raises(AlreadyInitialized):
        pool.activate(reserve_a=1, reserve_b=1, total_liquidity=1, fee_bps=0)
    assert (pool.reserve_a, pool.reserve_b, pool.total_liquidity) == (1000, 4000, 2000)


def test_snapshot_is_frozen_value() -> None:
    pool = _active_pool()
    snap = pool.snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.reserve_a = 0  # type: ignore[misc]
    assert snap == pool.snapshot()
    assert snap.constant_product() == pool.constant_product() == 4_000_000
    assert snap.reserves(True) == (1000, 4000)
    assert snap.reserves(False) == (4000, 1000)
    assert snap.spot_price(True) == (4000, 1000)


def test_commit_accepts_growing_swap() -> None:
    pool = _active_pool()
    after = pool.commit(1100, 3637, 2000, is_swap=True)
    assert (after.reserve_a, after.reserve_b, after.total_liquidity) == (1100, 3637, 2000)
    assert pool.constant_product() == 4_000_700


def test_commit_accepts_proportional_withdrawal() -> None:
    pool = _active_pool()
    pool.commit(750, 3000, 1500)
    assert (pool.reserve_a, pool.reserve_b, pool.total_liquidity) == (750, 3000, 1500)


def test_commit_accepts_full_drain() -> None:
    pool = _active_pool()
    pool.commit(0, 0, 0)
    assert pool.is_active
    assert pool.constant_product() == 0


def test_commit_rejects_shrinking_product(caplog: pytest.LogCaptureFixture) -> None:
    pool = _active_pool()
    with caplog.at_level(logging.ERROR, logger="cpamm.state.pools"):
        with pytest.raises(InvariantViolation) as exc_info:
            pool.commit(1000, 3999, 2000, is_swap=True)
    assert "inv_swap_product_non_decreasing" in exc_info.value.violations
    assert "inv_value_per_share_non_decreasing" in exc_info.value.violations
    assert (pool.reserve_a, pool.reserve_b, pool.total_liquidity) == (1000, 4000, 2000)
    assert any("Rejected commit" in r.getMessage() for r in caplog.records)


def test_commit_rejects_swap_that_changes_supply() -> None:
    pool = _active_pool()
    with pytest.raises(InvariantViolation) as exc_info:
        pool.commit(1100, 3637, 2001, is_swap=True)
    assert "inv_swap_keeps_supply" in exc_info.value.violations
    assert pool.total_liquidity == 2000


def test_commit_rejects_reserves_without_supply() -> None:
    pool = _active_pool()
    with pytest.raises(InvariantViolation) as exc_info:
        pool.commit(0, 5, 0)
    assert exc_info.value.violations == ["inv_empty_supply_iff_empty_reserves"]


def test_commit_rejects_out_of_range_values() -> None:
    pool = _active_pool()
    with pytest.raises(InvariantViolation) as exc_info:
        pool.commit(MAX_AMOUNT + 1, 4000, 2000)
    assert "inv_amounts_in_range" in exc_info.value.violations


def test_invariant_violation_is_not_a_rejection() -> None:
    pool = _active_pool()
    with pytest.raises(AssertionError):
        pool.commit(1, 1, 2000)
    with pytest.raises(InvariantViolation) as exc_info:
        pool.commit(1, 1, 2000)
    assert not isinstance(exc_info.value, ValueError)


def test_check_transition_flags_config_change() -> None:
    before = _active_pool().snapshot()
    after = dataclasses.replace(before, fee_bps=5)
    assert check_transition(before, after) == ["inv_config_unchanged"]
    assert check_transition(before, before, is_swap=True) == []


def test_restore_rolls_back_to_snapshot() -> None:
    pool = _active_pool()
    before = pool.snapshot()
    pool.commit(1100, 3637, 2000, is_swap=True)
    pool.restore(before)
    assert pool.snapshot() == before

    other = PoolState(pool_id="other", asset_a="A", asset_b="B")
    with pytest.raises(ValueError):
        other.restore(before)


def test_restore_can_return_pool_to_uninitialized() -> None:
    pool = PoolState(pool_id="p", asset_a="A", asset_b="B")
    before = pool.snapshot()
    pool.activate(reserve_a=4, reserve_b=9, total_liquidity=6, fee_bps=0)
    pool.restore(before)
    assert pool.status is PoolStatus.UNINITIALIZED
    assert pool.total_liquidity == 0
