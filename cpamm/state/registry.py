"""
Pool registry: an arena of independently addressable pools.

Pools are owned by AMM instances (each with an admin and a default fee) and
addressed by opaque, deterministic pool ids. There is no process-wide pool
state; callers hold a registry and pass pools into the engines explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from ..errors import AmmExists, PoolExists, UnknownPool
from ..kernels.python.cpmm_swap import require_fee_bps
from .canonical import domain_sep_bytes, encode_str, encode_uvarint, sha256_hex
from .pools import AssetId, PoolId, PoolSnapshot, PoolState, PoolStatus, compute_pool_id

logger = logging.getLogger(__name__)


STATE_ROOT_VERSION = 1

_POOL_STATUS_CODE: dict[PoolStatus, int] = {
    PoolStatus.UNINITIALIZED: 0,
    PoolStatus.ACTIVE: 1,
}


@dataclass(frozen=True)
class AmmDescriptor:
    """An AMM instance: the owner of a family of pools."""

    amm_id: str
    admin: str
    default_fee_bps: int

    def __post_init__(self) -> None:
        if not isinstance(self.amm_id, str) or not self.amm_id:
            raise TypeError("amm_id must be a non-empty str")
        if not isinstance(self.admin, str):
            raise TypeError("admin must be a str")
        require_fee_bps(self.default_fee_bps)


def _encode_pool(snap: PoolSnapshot) -> bytes:
    return (
        encode_str(snap.pool_id)
        + encode_str(snap.asset_a)
        + encode_str(snap.asset_b)
        + encode_uvarint(_POOL_STATUS_CODE[snap.status])
        + encode_uvarint(snap.reserve_a)
        + encode_uvarint(snap.reserve_b)
        + encode_uvarint(snap.total_liquidity)
        + encode_uvarint(snap.fee_bps)
    )


class PoolRegistry:
    """
    Mapping amm_id -> AmmDescriptor and pool_id -> PoolState.

    Notes:
    - Registration is one-shot: re-registering an AMM or an (AMM, pair) fails.
    - Iteration is always in sorted id order.
    """

    def __init__(self) -> None:
        self._amms: Dict[str, AmmDescriptor] = {}
        self._pools: Dict[PoolId, PoolState] = {}
        self._pool_amm: Dict[PoolId, str] = {}

    def register_amm(self, amm_id: str, admin: str = "", default_fee_bps: int = 0) -> AmmDescriptor:
        if amm_id in self._amms:
            raise AmmExists(f"AMM already registered: {amm_id}")
        amm = AmmDescriptor(amm_id=amm_id, admin=admin, default_fee_bps=default_fee_bps)
        self._amms[amm_id] = amm
        logger.info("Registered AMM %s (admin=%s, default_fee_bps=%d)", amm_id, admin, default_fee_bps)
        return amm

    def get_amm(self, amm_id: str) -> AmmDescriptor:
        try:
            return self._amms[amm_id]
        except KeyError:
            raise UnknownPool(f"unknown AMM: {amm_id}") from None

    def create_pool(self, amm_id: str, asset_a: AssetId, asset_b: AssetId) -> PoolId:
        """
        Allocate an UNINITIALIZED pool for (amm_id, asset_a, asset_b).

        Returns:
            The deterministic pool id
        """
        self.get_amm(amm_id)
        pool_id = compute_pool_id(amm_id, asset_a, asset_b)
        if pool_id in self._pools:
            raise PoolExists(f"pool already exists for {amm_id}: ({asset_a}, {asset_b})")
        self._pools[pool_id] = PoolState(pool_id=pool_id, asset_a=asset_a, asset_b=asset_b)
        self._pool_amm[pool_id] = amm_id
        logger.info("Created pool %s for AMM %s: (%s, %s)", pool_id, amm_id, asset_a, asset_b)
        return pool_id

    def get(self, pool_id: PoolId) -> PoolState:
        try:
            return self._pools[pool_id]
        except KeyError:
            raise UnknownPool(f"unknown pool: {pool_id}") from None

    def amm_of(self, pool_id: PoolId) -> AmmDescriptor:
        self.get(pool_id)
        return self._amms[self._pool_amm[pool_id]]

    def find(self, amm_id: str, asset_a: AssetId, asset_b: AssetId) -> Optional[PoolState]:
        """Look up a pool by its defining tuple; None if not registered."""
        return self._pools.get(compute_pool_id(amm_id, asset_a, asset_b))

    def pools(self) -> Iterator[PoolState]:
        for pool_id in sorted(self._pools):
            yield self._pools[pool_id]

    def __contains__(self, pool_id: object) -> bool:
        return pool_id in self._pools

    def __len__(self) -> int:
        return len(self._pools)

    def state_root(self) -> str:
        """
        Deterministic hash over every pool (v1).

        Stable for the same logical state regardless of insertion order.
        """
        out = bytearray(domain_sep_bytes("registry_state", STATE_ROOT_VERSION))
        snapshots = [pool.snapshot() for pool in self.pools()]
        out += encode_uvarint(len(snapshots))
        for snap in snapshots:
            out += _encode_pool(snap)
        return sha256_hex(bytes(out))

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._amms)} AMMs, {len(self._pools)} pools)"
