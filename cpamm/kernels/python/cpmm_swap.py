"""
CPMM swap kernel.

Semantics:
- Fee is charged on the gross input amount using floor rounding.
- Pricing uses `net_in = gross_in - fee_total`.
- The whole gross input (fee included) stays in the pool, which is what grows `k`.
- Output is `floor(reserve_out * net_in / (reserve_in + net_in))`, so every
  rounding step truncates in the pool's favor.

This kernel is a small, auditable, integer-only set of pure functions. The
engines in `cpamm.core` wrap it with state access and the atomic commit.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InsufficientLiquidity, InvalidAmount, InvalidFee
from .fixed_point import BPS_DENOM, checked_add, checked_sub, mul_div, mul_div_up, require_amount, require_int, to_amount


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    fee_total: int
    net_in: int
    gross_in: int
    price_impact_bps: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def require_fee_bps(fee_bps: int) -> int:
    require_int("fee_bps", fee_bps)
    if not (0 <= fee_bps < BPS_DENOM):
        raise InvalidFee(f"fee_bps must be in [0, {BPS_DENOM}): {fee_bps}")
    return fee_bps


def compute_fee_total(*, gross_in: int, fee_bps: int) -> int:
    """
    Compute `fee_total = floor(gross_in * fee_bps / 10_000)`.
    """
    require_amount("gross_in", gross_in)
    require_fee_bps(fee_bps)
    return mul_div(gross_in, fee_bps, BPS_DENOM)


def compute_price_impact_bps(*, reserve_in: int, reserve_out: int, net_in: int, amount_out: int) -> int:
    """
    Shortfall of `amount_out` against the fee-free spot output for `net_in`, in bps.

    spot_out = net_in * reserve_out / reserve_in, so the ratio
    amount_out / spot_out = amount_out * reserve_in / (net_in * reserve_out).
    """
    spot_num = net_in * reserve_out
    if spot_num == 0:
        return 0
    realized_bps = mul_div(amount_out * reserve_in, BPS_DENOM, spot_num)
    return max(0, BPS_DENOM - realized_bps)


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises InvalidAmount for a non-positive input and InsufficientLiquidity if
    the pool is empty, the trade is dust, or the output would drain the pool.
    """
    require_amount("reserve_in", reserve_in)
    require_amount("reserve_out", reserve_out)
    require_int("amount_in", amount_in)
    require_fee_bps(fee_bps)

    if amount_in <= 0:
        raise InvalidAmount(f"amount_in must be positive: {amount_in}")
    require_amount("amount_in", amount_in)
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("cannot swap against an empty reserve")

    k_before = reserve_in * reserve_out

    fee_total = compute_fee_total(gross_in=amount_in, fee_bps=fee_bps)
    net_in = checked_sub(amount_in, fee_total)
    if net_in <= 0:
        raise InvalidAmount("net_in must be positive after fees")

    denominator = reserve_in + net_in
    amount_out = to_amount("amount_out", mul_div(reserve_out, net_in, denominator))

    if amount_out == 0:
        raise InsufficientLiquidity("amount_out is zero (trade too small)")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"amount_out ({amount_out}) would drain reserve_out ({reserve_out})"
        )

    new_reserve_in = checked_add(reserve_in, amount_in)
    new_reserve_out = checked_sub(reserve_out, amount_out)
    k_after = new_reserve_in * new_reserve_out

    return SwapExactInResult(
        amount_out=amount_out,
        fee_total=fee_total,
        net_in=net_in,
        gross_in=amount_in,
        price_impact_bps=compute_price_impact_bps(
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            net_in=net_in,
            amount_out=amount_out,
        ),
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )


def required_amount_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_out: int,
    fee_bps: int,
) -> int:
    """
    Smallest gross input whose exact-in quote yields at least `amount_out`.

    net_in  = ceil(reserve_in * amount_out / (reserve_out - amount_out))
    gross   = floor((net_in - 1) * 10_000 / (10_000 - fee_bps)) + 1

    The second line inverts `net = gross - floor(gross * fee_bps / 10_000)`,
    which equals `ceil(gross * (10_000 - fee_bps) / 10_000)`.
    """
    require_amount("reserve_in", reserve_in)
    require_amount("reserve_out", reserve_out)
    require_int("amount_out", amount_out)
    require_fee_bps(fee_bps)

    if amount_out <= 0:
        raise InvalidAmount(f"amount_out must be positive: {amount_out}")
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("cannot swap against an empty reserve")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )

    net_in = mul_div_up(reserve_in, amount_out, reserve_out - amount_out)
    gross_in = mul_div(net_in - 1, BPS_DENOM, BPS_DENOM - fee_bps) + 1
    return to_amount("amount_in", gross_in)


def swap_exact_out(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_out: int,
    fee_bps: int,
) -> SwapExactInResult:
    """
    Exact-out quote expressed as the exact-in trade that delivers it.

    The returned `amount_out` can exceed the request by rounding; the post-state
    is that of the exact-in trade, so quoting and execution always agree.
    """
    amount_in = required_amount_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_out=amount_out,
        fee_bps=fee_bps,
    )
    res = swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_bps=fee_bps,
    )
    if res.amount_out < amount_out:
        raise AssertionError("computed amount_in insufficient for desired amount_out")
    return res
