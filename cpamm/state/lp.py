"""
Liquidity share custody.

The core only computes mint/burn quantities; who holds them is tracked here,
scoped per pool_id, outside PoolState.
"""

from __future__ import annotations

import threading
from typing import Dict, Tuple

from ..errors import InsufficientFunds
from ..kernels.python.fixed_point import checked_add, require_input_amount
from .balances import Amount, Owner

# Type alias
PoolId = str


class LPTable:
    """
    LP balance table mapping (owner, pool_id) -> liquidity.

    Notes:
    - LP balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Owner, PoolId], Amount] = {}
        self._lock = threading.RLock()

    def balance_of(self, owner: Owner, pool_id: PoolId) -> Amount:
        """Get LP balance for (owner, pool_id). Returns 0 if not found."""
        return self._balances.get((owner, pool_id), 0)

    def _set(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop((owner, pool_id), None)
        else:
            self._balances[(owner, pool_id)] = amount

    def mint(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        require_input_amount("amount", amount)
        with self._lock:
            self._set(owner, pool_id, checked_add(self.balance_of(owner, pool_id), amount))

    def burn(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        require_input_amount("amount", amount)
        with self._lock:
            current = self.balance_of(owner, pool_id)
            if amount > current:
                raise InsufficientFunds(
                    f"{owner} holds {current} liquidity in {pool_id}, needs {amount}"
                )
            self._set(owner, pool_id, current - amount)

    def total_for_pool(self, pool_id: PoolId) -> Amount:
        with self._lock:
            return sum(amount for (_, p), amount in self._balances.items() if p == pool_id)

    def get_all_balances(self) -> Dict[Tuple[Owner, PoolId], Amount]:
        """Return all LP balances."""
        with self._lock:
            return dict(self._balances)

    def __repr__(self) -> str:
        return f"LPTable({len(self._balances)} entries)"
