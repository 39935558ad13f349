"""
Liquidity math kernel.

Pure functions with explicit rounding rules:
- mint: `min(floor(a * L / ra), floor(b * L / rb))`,
- consumed amounts: `ceil(minted * r / L)` (never above the proposal, never short
  of the pool's ratio),
- burn: `floor(r * liquidity / L)` per asset.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import DegenerateLiquidity, InsufficientLiquidity, ZeroLiquidityMinted, ZeroWithdrawal
from .fixed_point import (
    checked_add,
    checked_sub,
    integer_sqrt,
    mul_div,
    mul_div_up,
    require_amount,
    require_input_amount,
    require_int,
    to_amount,
)


@dataclass(frozen=True)
class MintLiquidityResult:
    liquidity_minted: int
    amount_a_used: int
    amount_b_used: int
    amount_a_refund: int
    amount_b_refund: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_a_out: int
    amount_b_out: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_supply: int


def seed_liquidity(*, amount_a: int, amount_b: int) -> int:
    """
    Initial liquidity supply: `isqrt(amount_a * amount_b)`.

    Raises DegenerateLiquidity if the square root is zero.
    """
    require_amount("amount_a", amount_a)
    require_amount("amount_b", amount_b)
    seeded = integer_sqrt(amount_a * amount_b)
    if seeded == 0:
        raise DegenerateLiquidity(f"sqrt({amount_a} * {amount_b}) is zero")
    return seeded


def mint_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    total_supply: int,
    amount_a_desired: int,
    amount_b_desired: int,
) -> MintLiquidityResult:
    """
    Mint liquidity for a ratio-preserving deposit.

    A pool drained to all-zero state is re-seeded with the square-root rule and
    consumes both amounts in full.
    """
    require_amount("reserve_a", reserve_a)
    require_amount("reserve_b", reserve_b)
    require_amount("total_supply", total_supply)
    require_input_amount("amount_a_desired", amount_a_desired)
    require_input_amount("amount_b_desired", amount_b_desired)

    if total_supply == 0 and reserve_a == 0 and reserve_b == 0:
        minted = integer_sqrt(amount_a_desired * amount_b_desired)
        if minted == 0:
            raise ZeroLiquidityMinted("deposit too small to re-seed an empty pool")
        return MintLiquidityResult(
            liquidity_minted=minted,
            amount_a_used=amount_a_desired,
            amount_b_used=amount_b_desired,
            amount_a_refund=0,
            amount_b_refund=0,
            new_reserve_a=amount_a_desired,
            new_reserve_b=amount_b_desired,
            new_total_supply=minted,
        )

    if total_supply == 0 or reserve_a == 0 or reserve_b == 0:
        raise InsufficientLiquidity(
            f"cannot mint against reserves ({reserve_a}, {reserve_b}) with supply {total_supply}"
        )

    liquidity_a = mul_div(amount_a_desired, total_supply, reserve_a)
    liquidity_b = mul_div(amount_b_desired, total_supply, reserve_b)
    minted = to_amount("liquidity_minted", min(liquidity_a, liquidity_b))
    if minted == 0:
        raise ZeroLiquidityMinted("liquidity_minted is zero (deposit too small)")

    amount_a_used = mul_div_up(minted, reserve_a, total_supply)
    amount_b_used = mul_div_up(minted, reserve_b, total_supply)
    if amount_a_used > amount_a_desired or amount_b_used > amount_b_desired:
        raise AssertionError("used amounts exceed desired amounts")

    return MintLiquidityResult(
        liquidity_minted=minted,
        amount_a_used=amount_a_used,
        amount_b_used=amount_b_used,
        amount_a_refund=amount_a_desired - amount_a_used,
        amount_b_refund=amount_b_desired - amount_b_used,
        new_reserve_a=checked_add(reserve_a, amount_a_used),
        new_reserve_b=checked_add(reserve_b, amount_b_used),
        new_total_supply=checked_add(total_supply, minted),
    )


def burn_liquidity(*, liquidity: int, reserve_a: int, reserve_b: int, total_supply: int) -> BurnLiquidityResult:
    """
    Burn liquidity for underlying assets (floor rounding).

    Burning the whole supply returns the whole reserves.
    """
    require_int("liquidity", liquidity)
    require_amount("reserve_a", reserve_a)
    require_amount("reserve_b", reserve_b)
    require_amount("total_supply", total_supply)

    if liquidity <= 0 or liquidity > total_supply:
        raise InsufficientLiquidity(
            f"liquidity must be in (0, {total_supply}]: {liquidity}"
        )

    amount_a_out = mul_div(reserve_a, liquidity, total_supply)
    amount_b_out = mul_div(reserve_b, liquidity, total_supply)
    if amount_a_out == 0 and amount_b_out == 0:
        raise ZeroWithdrawal(f"burning {liquidity} of {total_supply} returns nothing")

    return BurnLiquidityResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_reserve_a=checked_sub(reserve_a, amount_a_out),
        new_reserve_b=checked_sub(reserve_b, amount_b_out),
        new_total_supply=checked_sub(total_supply, liquidity),
    )
