"""
Liquidity operations: add/remove liquidity against an active pool.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from ..errors import SlippageExceeded
from ..kernels.python.fixed_point import require_input_amount
from ..kernels.python.lp_math import burn_liquidity, mint_liquidity
from ..state.pools import PoolState

logger = logging.getLogger(__name__)


class AddLiquidityResult(NamedTuple):
    minted_liquidity: int
    actual_a: int
    actual_b: int


class RemoveLiquidityResult(NamedTuple):
    amount_a: int
    amount_b: int


def add_liquidity(
    pool: PoolState,
    amount_a: int,
    amount_b: int,
    *,
    min_liquidity: int = 0,
) -> AddLiquidityResult:
    """
    Deposit both assets at the pool's current ratio.

    Minted:
        minted = min(floor(amount_a * L / reserve_a), floor(amount_b * L / reserve_b))

    Consumed:
        actual_x = ceil(minted * reserve_x / L)   (never above amount_x)

    Args:
        pool: Active pool
        amount_a: Proposed amount of asset A
        amount_b: Proposed amount of asset B
        min_liquidity: Reject if fewer shares would be minted

    Returns:
        (minted_liquidity, actual_a, actual_b)

    Raises:
        ZeroLiquidityMinted: If the deposit is too small to mint anything
        InsufficientLiquidity: If the pool has a zero reserve but live supply
        SlippageExceeded: If minted < min_liquidity
    """
    require_input_amount("min_liquidity", min_liquidity)
    with pool.lock:
        pool.require_active()
        snap = pool.snapshot()
        res = mint_liquidity(
            reserve_a=snap.reserve_a,
            reserve_b=snap.reserve_b,
            total_supply=snap.total_liquidity,
            amount_a_desired=amount_a,
            amount_b_desired=amount_b,
        )
        if res.liquidity_minted < min_liquidity:
            raise SlippageExceeded(
                f"liquidity_minted ({res.liquidity_minted}) < min_liquidity ({min_liquidity})"
            )
        pool.commit(res.new_reserve_a, res.new_reserve_b, res.new_total_supply)

    logger.debug(
        "Added liquidity to pool %s: minted=%d used=(%d, %d)",
        pool.pool_id,
        res.liquidity_minted,
        res.amount_a_used,
        res.amount_b_used,
    )
    return AddLiquidityResult(
        minted_liquidity=res.liquidity_minted,
        actual_a=res.amount_a_used,
        actual_b=res.amount_b_used,
    )


def remove_liquidity(
    pool: PoolState,
    liquidity_amount: int,
    *,
    min_amount_a: int = 0,
    min_amount_b: int = 0,
) -> RemoveLiquidityResult:
    """
    Burn `liquidity_amount` shares for a pro-rata slice of both reserves.

    Outputs:
        amount_x = floor(reserve_x * liquidity_amount / L)

    Raises:
        InsufficientLiquidity: Unless 0 < liquidity_amount <= L
        ZeroWithdrawal: If both outputs round to zero
        SlippageExceeded: If an output is below its minimum
    """
    require_input_amount("min_amount_a", min_amount_a)
    require_input_amount("min_amount_b", min_amount_b)
    with pool.lock:
        pool.require_active()
        snap = pool.snapshot()
        res = burn_liquidity(
            liquidity=liquidity_amount,
            reserve_a=snap.reserve_a,
            reserve_b=snap.reserve_b,
            total_supply=snap.total_liquidity,
        )
        if res.amount_a_out < min_amount_a:
            raise SlippageExceeded(f"amount_a ({res.amount_a_out}) < min_amount_a ({min_amount_a})")
        if res.amount_b_out < min_amount_b:
            raise SlippageExceeded(f"amount_b ({res.amount_b_out}) < min_amount_b ({min_amount_b})")
        pool.commit(res.new_reserve_a, res.new_reserve_b, res.new_total_supply)

    logger.debug(
        "Removed liquidity from pool %s: burned=%d out=(%d, %d)",
        pool.pool_id,
        liquidity_amount,
        res.amount_a_out,
        res.amount_b_out,
    )
    return RemoveLiquidityResult(amount_a=res.amount_a_out, amount_b=res.amount_b_out)
