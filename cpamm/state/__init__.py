"""
State management for constant-product pools
"""

from .balances import BalanceTable
from .lp import LPTable
from .pools import PoolSnapshot, PoolState, PoolStatus, compute_pool_id
from .registry import AmmDescriptor, PoolRegistry

__all__ = [
    "BalanceTable",
    "LPTable",
    "PoolSnapshot",
    "PoolState",
    "PoolStatus",
    "compute_pool_id",
    "AmmDescriptor",
    "PoolRegistry",
]
