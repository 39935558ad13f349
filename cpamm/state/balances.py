"""
In-memory token ledger.

Implements BalanceTable[Owner, AssetId] -> Amount and the `TokenLedger` port
used by the exchange facade. Pools hold their reserves in custody under their
own pool id as owner.
"""

from __future__ import annotations

import threading
from typing import Dict, Tuple

from ..errors import InsufficientFunds
from ..kernels.python.fixed_point import checked_add, require_input_amount


# Type aliases
Owner = str
AssetId = str
Amount = int


class BalanceTable:
    """
    Balance table mapping (owner, asset) -> amount.

    Updates are serialized by an internal lock, since one table is shared by
    every pool an exchange settles through.

    Note: this class stores balances in a plain dict. Do not rely on dict
    iteration order; callers should sort keys explicitly where order matters.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Owner, AssetId], Amount] = {}
        self._lock = threading.RLock()

    def get(self, owner: Owner, asset: AssetId) -> Amount:
        """Get balance for (owner, asset). Returns 0 if not found."""
        return self._balances.get((owner, asset), 0)

    balance_of = get

    def set(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (owner, asset).

        Raises:
            InvalidAmount: If amount is negative
        """
        require_input_amount("amount", amount)
        with self._lock:
            if amount == 0:
                # Remove zero balances to keep table sparse
                self._balances.pop((owner, asset), None)
            else:
                self._balances[(owner, asset)] = amount

    def credit(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        require_input_amount("amount", amount)
        with self._lock:
            self.set(owner, asset, checked_add(self.get(owner, asset), amount))

    def debit(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        """
        Subtract a non-negative amount.

        Raises:
            InsufficientFunds: If the balance is smaller than amount
        """
        require_input_amount("amount", amount)
        with self._lock:
            current = self.get(owner, asset)
            if amount > current:
                raise InsufficientFunds(
                    f"{owner} holds {current} of {asset}, needs {amount}"
                )
            self.set(owner, asset, current - amount)

    def transfer(self, sender: Owner, recipient: Owner, asset: AssetId, amount: Amount) -> None:
        """Move `amount` of `asset` from sender to recipient, all or nothing."""
        with self._lock:
            self.debit(sender, asset, amount)
            try:
                self.credit(recipient, asset, amount)
            except Exception:
                self.credit(sender, asset, amount)
                raise

    def get_all_balances(self) -> Dict[Tuple[Owner, AssetId], Amount]:
        """Return all non-zero balances."""
        with self._lock:
            return dict(self._balances)

    def total_supply(self, asset: AssetId) -> Amount:
        """Sum of all balances of one asset (conservation checks)."""
        with self._lock:
            return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
