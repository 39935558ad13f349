"""
Swap operations: quote and execute trades against an active pool.

Quotes are pure reads of a snapshot. Execution re-quotes under the pool lock
and commits `reserve_in += amount_in`, `reserve_out -= amount_out`. The fee
never leaves the pool, which is how `k` grows.

Slippage limits (`min_amount_out`, `max_amount_in`) are caller policy; the
reported `price_impact_bps` is informational only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import SlippageExceeded
from ..kernels.python.cpmm_swap import SwapExactInResult, swap_exact_in, swap_exact_out
from ..kernels.python.fixed_point import require_input_amount
from ..state.pools import PoolSnapshot, PoolState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapQuote:
    input_is_asset_a: bool
    amount_in: int
    amount_out: int
    fee_amount: int
    net_input: int
    price_impact_bps: int


def _require_direction(input_is_asset_a: bool) -> None:
    if not isinstance(input_is_asset_a, bool):
        raise TypeError("input_is_asset_a must be a bool")


def _to_quote(input_is_asset_a: bool, res: SwapExactInResult) -> SwapQuote:
    return SwapQuote(
        input_is_asset_a=input_is_asset_a,
        amount_in=res.gross_in,
        amount_out=res.amount_out,
        fee_amount=res.fee_total,
        net_input=res.net_in,
        price_impact_bps=res.price_impact_bps,
    )


def _quote_in(snap: PoolSnapshot, input_is_asset_a: bool, amount_in: int) -> SwapExactInResult:
    reserve_in, reserve_out = snap.reserves(input_is_asset_a)
    return swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_bps=snap.fee_bps,
    )


def _quote_out(snap: PoolSnapshot, input_is_asset_a: bool, amount_out: int) -> SwapExactInResult:
    reserve_in, reserve_out = snap.reserves(input_is_asset_a)
    return swap_exact_out(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_out=amount_out,
        fee_bps=snap.fee_bps,
    )


def _commit_swap(pool: PoolState, input_is_asset_a: bool, res: SwapExactInResult) -> None:
    if input_is_asset_a:
        new_a, new_b = res.new_reserve_in, res.new_reserve_out
    else:
        new_a, new_b = res.new_reserve_out, res.new_reserve_in
    pool.commit(new_a, new_b, pool.total_liquidity, is_swap=True)


def quote_exact_input(pool: PoolState, input_is_asset_a: bool, amount_in: int) -> SwapQuote:
    """
    Quote selling exactly `amount_in` of the input asset.

        fee_amount = floor(amount_in * fee_bps / 10_000)
        net_input  = amount_in - fee_amount
        amount_out = floor(reserve_out * net_input / (reserve_in + net_input))

    Raises:
        InvalidAmount: If amount_in <= 0
        InsufficientLiquidity: If the output is zero or would drain the pool
    """
    _require_direction(input_is_asset_a)
    pool.require_active()
    quote = _to_quote(input_is_asset_a, _quote_in(pool.snapshot(), input_is_asset_a, amount_in))
    logger.debug("Quoted exact-in on pool %s: %s", pool.pool_id, quote)
    return quote


def quote_exact_output(pool: PoolState, input_is_asset_a: bool, amount_out: int) -> SwapQuote:
    """
    Quote the smallest input that buys at least `amount_out`.

    The returned quote is the exact-in trade for that input; its `amount_out`
    can exceed the request by rounding.
    """
    _require_direction(input_is_asset_a)
    pool.require_active()
    quote = _to_quote(input_is_asset_a, _quote_out(pool.snapshot(), input_is_asset_a, amount_out))
    logger.debug("Quoted exact-out on pool %s: %s", pool.pool_id, quote)
    return quote


def execute_swap(pool: PoolState, input_is_asset_a: bool, amount_in: int, min_amount_out: int) -> SwapQuote:
    """
    Sell exactly `amount_in` and commit the trade.

    Raises:
        SlippageExceeded: If amount_out < min_amount_out (pool unchanged)
    """
    _require_direction(input_is_asset_a)
    require_input_amount("min_amount_out", min_amount_out)
    with pool.lock:
        pool.require_active()
        res = _quote_in(pool.snapshot(), input_is_asset_a, amount_in)
        if res.amount_out < min_amount_out:
            raise SlippageExceeded(f"amount_out ({res.amount_out}) < min_amount_out ({min_amount_out})")
        _commit_swap(pool, input_is_asset_a, res)
    return _to_quote(input_is_asset_a, res)


def execute_swap_exact_output(
    pool: PoolState,
    input_is_asset_a: bool,
    amount_out: int,
    max_amount_in: int,
) -> SwapQuote:
    """
    Buy at least `amount_out` and commit the trade.

    Raises:
        SlippageExceeded: If the required input exceeds max_amount_in (pool unchanged)
    """
    _require_direction(input_is_asset_a)
    require_input_amount("max_amount_in", max_amount_in)
    with pool.lock:
        pool.require_active()
        res = _quote_out(pool.snapshot(), input_is_asset_a, amount_out)
        if res.gross_in > max_amount_in:
            raise SlippageExceeded(f"amount_in ({res.gross_in}) > max_amount_in ({max_amount_in})")
        _commit_swap(pool, input_is_asset_a, res)
    return _to_quote(input_is_asset_a, res)
