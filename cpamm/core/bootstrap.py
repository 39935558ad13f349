"""
Pool bootstrap: the one-way UNINITIALIZED -> ACTIVE transition.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import AlreadyInitialized, InvalidInitialReserves
from ..kernels.python.fixed_point import BPS_DENOM, require_amount, require_int
from ..kernels.python.lp_math import seed_liquidity
from ..state.pools import PoolState, compute_pool_id

logger = logging.getLogger(__name__)

STANDALONE_AMM_ID = "standalone"


def initialize(
    initial_a: int,
    initial_b: int,
    fee_bps: int,
    *,
    pool: Optional[PoolState] = None,
) -> PoolState:
    """
    Seed a pool with its first reserves.

        total_liquidity = isqrt(initial_a * initial_b)

    This is the only state change exempt from the commit invariants; it
    establishes the baseline `k`.

    Args:
        initial_a: Initial reserve of asset A (> 0)
        initial_b: Initial reserve of asset B (> 0)
        fee_bps: Swap fee in basis points, in [0, 10000)
        pool: Registered pool to activate; a standalone pool is created if omitted

    Returns:
        The active pool

    Raises:
        AlreadyInitialized: If `pool` is already active
        InvalidInitialReserves: If a reserve is not positive or the fee is out of range
        DegenerateLiquidity: If the seeded supply is zero
    """
    require_int("initial_a", initial_a)
    require_int("initial_b", initial_b)
    require_int("fee_bps", fee_bps)

    if pool is not None and pool.is_active:
        raise AlreadyInitialized(f"pool {pool.pool_id} is already active")
    if initial_a <= 0 or initial_b <= 0:
        raise InvalidInitialReserves(f"initial reserves must be positive: ({initial_a}, {initial_b})")
    if not (0 <= fee_bps < BPS_DENOM):
        raise InvalidInitialReserves(f"fee_bps must be in [0, {BPS_DENOM}): {fee_bps}")
    require_amount("initial_a", initial_a)
    require_amount("initial_b", initial_b)

    total_liquidity = seed_liquidity(amount_a=initial_a, amount_b=initial_b)

    if pool is None:
        pool = PoolState(
            pool_id=compute_pool_id(STANDALONE_AMM_ID, "A", "B"),
            asset_a="A",
            asset_b="B",
        )

    pool.activate(
        reserve_a=initial_a,
        reserve_b=initial_b,
        total_liquidity=total_liquidity,
        fee_bps=fee_bps,
    )
    logger.info(
        "Bootstrapped pool %s: reserves=(%d, %d) total_liquidity=%d fee_bps=%d",
        pool.pool_id,
        initial_a,
        initial_b,
        total_liquidity,
        fee_bps,
    )
    return pool
