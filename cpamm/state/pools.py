"""
Pool state management for constant-product pools.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple

from ..errors import AlreadyInitialized, InvalidAmount, InvariantViolation, PoolNotInitialized
from ..kernels.python.cpmm_swap import require_fee_bps
from ..kernels.python.fixed_point import require_int
from .canonical import domain_sep_bytes, encode_str, sha256_hex
from .invariants import check_transition

logger = logging.getLogger(__name__)

# Type aliases
AssetId = str
PoolId = str
Amount = int


class PoolStatus(Enum):
    """Pool lifecycle: UNINITIALIZED -> ACTIVE, never reversed."""
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


def compute_pool_id(amm_id: str, asset_a: AssetId, asset_b: AssetId) -> PoolId:
    """
    Deterministically compute a pool_id for an (AMM, asset pair).

        pool_id = H(domain("pool") || amm_id || asset_a || asset_b)

    Each component is length-prefixed, so distinct tuples never collide by
    concatenation.
    """
    if not isinstance(amm_id, str) or not amm_id:
        raise TypeError("amm_id must be a non-empty str")
    for name, asset in (("asset_a", asset_a), ("asset_b", asset_b)):
        if not isinstance(asset, str) or not asset:
            raise TypeError(f"{name} must be a non-empty str")
    if asset_a == asset_b:
        raise InvalidAmount(f"pool assets must differ: {asset_a}")
    data = domain_sep_bytes("pool") + encode_str(amm_id) + encode_str(asset_a) + encode_str(asset_b)
    return sha256_hex(data)


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable view of a pool at one instant."""

    pool_id: PoolId
    asset_a: AssetId
    asset_b: AssetId
    status: PoolStatus
    reserve_a: Amount
    reserve_b: Amount
    total_liquidity: Amount
    fee_bps: int

    def constant_product(self) -> int:
        return self.reserve_a * self.reserve_b

    def reserves(self, input_is_asset_a: bool) -> Tuple[Amount, Amount]:
        """Return (reserve_in, reserve_out) for a trade direction."""
        if input_is_asset_a:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def spot_price(self, input_is_asset_a: bool) -> Tuple[int, int]:
        """Marginal price of the input asset as an integer ratio (numerator, denominator)."""
        reserve_in, reserve_out = self.reserves(input_is_asset_a)
        return reserve_out, reserve_in


@dataclass
class PoolState:
    """
    Authoritative, mutable record of one trading pair.

    Attributes:
        pool_id: Opaque pool identifier (0x-prefixed hex)
        asset_a: First asset identifier
        asset_b: Second asset identifier
        status: Lifecycle status
        reserve_a: Reserve amount for asset_a
        reserve_b: Reserve amount for asset_b
        total_liquidity: Outstanding liquidity supply
        fee_bps: Swap fee in basis points, in [0, 10000)

    Reserves and supply only change through `commit()`, which validates the
    whole triple before writing any of it. `lock` serializes the
    read-compute-commit sequence of the engines.
    """
    pool_id: PoolId
    asset_a: AssetId
    asset_b: AssetId
    status: PoolStatus = PoolStatus.UNINITIALIZED
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_liquidity: Amount = 0
    fee_bps: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.asset_a == self.asset_b:
            raise InvalidAmount(f"pool assets must differ: {self.asset_a}")
        for name, v in (
            ("reserve_a", self.reserve_a),
            ("reserve_b", self.reserve_b),
            ("total_liquidity", self.total_liquidity),
        ):
            require_int(name, v)
            if v < 0:
                raise InvalidAmount(f"{name} must be non-negative: {v}")
        require_fee_bps(self.fee_bps)

    @property
    def is_active(self) -> bool:
        return self.status is PoolStatus.ACTIVE

    def require_active(self) -> None:
        if not self.is_active:
            raise PoolNotInitialized(f"pool {self.pool_id} has not been bootstrapped")

    def snapshot(self) -> PoolSnapshot:
        with self.lock:
            return PoolSnapshot(
                pool_id=self.pool_id,
                asset_a=self.asset_a,
                asset_b=self.asset_b,
                status=self.status,
                reserve_a=self.reserve_a,
                reserve_b=self.reserve_b,
                total_liquidity=self.total_liquidity,
                fee_bps=self.fee_bps,
            )

    def constant_product(self) -> int:
        return self.reserve_a * self.reserve_b

    def activate(self, *, reserve_a: Amount, reserve_b: Amount, total_liquidity: Amount, fee_bps: int) -> None:
        """
        One-way UNINITIALIZED -> ACTIVE transition.

        This is the only write that skips the transition invariants: it
        establishes the baseline `k`.
        """
        with self.lock:
            if self.is_active:
                raise AlreadyInitialized(f"pool {self.pool_id} is already active")
            self.reserve_a = reserve_a
            self.reserve_b = reserve_b
            self.total_liquidity = total_liquidity
            self.fee_bps = fee_bps
            self.status = PoolStatus.ACTIVE

    def commit(
        self,
        new_reserve_a: Amount,
        new_reserve_b: Amount,
        new_total_liquidity: Amount,
        *,
        is_swap: bool = False,
    ) -> PoolSnapshot:
        """
        Replace (reserve_a, reserve_b, total_liquidity) atomically.

        Raises:
            PoolNotInitialized: If the pool is not active
            InvariantViolation: If the transition breaks a pool invariant;
                nothing is written in that case
        """
        with self.lock:
            self.require_active()
            before = self.snapshot()
            after = replace(
                before,
                reserve_a=new_reserve_a,
                reserve_b=new_reserve_b,
                total_liquidity=new_total_liquidity,
            )
            violations = check_transition(before, after, is_swap=is_swap)
            if violations:
                logger.error(
                    "Rejected commit on pool %s: %s (before=%s after=%s)",
                    self.pool_id,
                    violations,
                    before,
                    after,
                )
                raise InvariantViolation(violations)

            self.reserve_a = new_reserve_a
            self.reserve_b = new_reserve_b
            self.total_liquidity = new_total_liquidity
            logger.debug(
                "Committed pool %s: reserves=(%d, %d) total_liquidity=%d",
                self.pool_id,
                new_reserve_a,
                new_reserve_b,
                new_total_liquidity,
            )
            return after

    def restore(self, snapshot: PoolSnapshot) -> None:
        """Roll this pool back to an earlier snapshot of itself."""
        with self.lock:
            if snapshot.pool_id != self.pool_id:
                raise ValueError(f"snapshot of {snapshot.pool_id} cannot restore {self.pool_id}")
            self.status = snapshot.status
            self.reserve_a = snapshot.reserve_a
            self.reserve_b = snapshot.reserve_b
            self.total_liquidity = snapshot.total_liquidity
            self.fee_bps = snapshot.fee_bps
            logger.debug("Restored pool %s to %s", self.pool_id, snapshot)

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:18]}..., "
            f"assets=({self.asset_a}, {self.asset_b}), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"total_liquidity={self.total_liquidity}, fee_bps={self.fee_bps}, "
            f"status={self.status.value})"
        )
