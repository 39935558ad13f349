"""
Ledger ports.

The core never moves tokens itself. The exchange facade calls through these
interfaces to check that a caller controls what it pays and to move assets and
liquidity shares once a pool commit has succeeded. `BalanceTable` and
`LPTable` in `cpamm.state` are the in-memory implementations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLedger(Protocol):
    def balance_of(self, owner: str, asset: str) -> int: ...

    def transfer(self, sender: str, recipient: str, asset: str, amount: int) -> None:
        """Move `amount` atomically or raise without moving anything."""
        ...


@runtime_checkable
class LiquidityLedger(Protocol):
    def balance_of(self, owner: str, pool_id: str) -> int: ...

    def mint(self, owner: str, pool_id: str, amount: int) -> None: ...

    def burn(self, owner: str, pool_id: str, amount: int) -> None: ...
