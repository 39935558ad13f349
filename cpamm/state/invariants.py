"""Transition invariants checked on every pool commit.

Each function takes the pre-state, the proposed post-state and whether the
transition is a swap, and returns True when the invariant holds.
`check_transition()` returns the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from ..kernels.python.fixed_point import MAX_AMOUNT

if TYPE_CHECKING:
    from .pools import PoolSnapshot


def inv_amounts_in_range(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    return all(
        isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= MAX_AMOUNT
        for v in (after.reserve_a, after.reserve_b, after.total_liquidity)
    )


def inv_empty_supply_iff_empty_reserves(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    if after.total_liquidity == 0:
        return after.reserve_a == 0 and after.reserve_b == 0
    return after.reserve_a > 0 and after.reserve_b > 0


def inv_value_per_share_non_decreasing(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    # k / L^2 must not drop. With L unchanged this is exactly k' >= k.
    if before.total_liquidity == 0 or after.total_liquidity == 0:
        return True
    lhs = after.constant_product() * before.total_liquidity * before.total_liquidity
    rhs = before.constant_product() * after.total_liquidity * after.total_liquidity
    return lhs >= rhs


def inv_swap_keeps_supply(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    return not is_swap or after.total_liquidity == before.total_liquidity


def inv_swap_product_non_decreasing(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    """Non-strict: a fee that floors to zero can leave k unchanged (100/200 pool, 30 bps, 100 in)."""
    return not is_swap or after.constant_product() >= before.constant_product()


def inv_config_unchanged(before: PoolSnapshot, after: PoolSnapshot, is_swap: bool) -> bool:
    return (
        before.pool_id == after.pool_id
        and before.fee_bps == after.fee_bps
        and before.status == after.status
    )


INVARIANT_REGISTRY: dict[str, Callable[[PoolSnapshot, PoolSnapshot, bool], bool]] = {
    "inv_amounts_in_range": inv_amounts_in_range,
    "inv_empty_supply_iff_empty_reserves": inv_empty_supply_iff_empty_reserves,
    "inv_value_per_share_non_decreasing": inv_value_per_share_non_decreasing,
    "inv_swap_keeps_supply": inv_swap_keeps_supply,
    "inv_swap_product_non_decreasing": inv_swap_product_non_decreasing,
    "inv_config_unchanged": inv_config_unchanged,
}


def check_transition(before: PoolSnapshot, after: PoolSnapshot, *, is_swap: bool = False) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(before, after, is_swap)
    ]
