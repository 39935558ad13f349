"""
Exchange facade: core operations bound to token and liquidity ledgers.

Each request runs as:
- verify the caller controls what it pays (fail before any state change),
- compute and commit the pool transition under the pool lock,
- move assets and liquidity shares through the ledgers.

If a ledger move fails after the commit, the moves already applied are
reversed and the pool is restored to its pre-request snapshot, so the pool
change and the transfers happen together or not at all.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from ..config import AmmConfig
from ..errors import InsufficientFunds, RequestRejected
from ..kernels.python.fixed_point import require_int
from ..state.balances import BalanceTable
from ..state.lp import LPTable
from ..state.pools import AssetId, PoolId, PoolState
from ..state.registry import PoolRegistry
from .bootstrap import initialize
from .ledger import LiquidityLedger, TokenLedger
from .liquidity import AddLiquidityResult, RemoveLiquidityResult, add_liquidity, remove_liquidity
from .swap import SwapQuote, execute_swap, quote_exact_input

logger = logging.getLogger(__name__)

_Undo = Callable[[], None]


class _Settlement:
    """Ordered ledger moves with their inverses."""

    def __init__(self, ledger: TokenLedger, lp_ledger: LiquidityLedger) -> None:
        self._ledger = ledger
        self._lp_ledger = lp_ledger
        self._undo: List[_Undo] = []

    @property
    def applied(self) -> bool:
        return bool(self._undo)

    def transfer(self, sender: str, recipient: str, asset: AssetId, amount: int) -> None:
        if amount == 0:
            return
        self._ledger.transfer(sender, recipient, asset, amount)
        self._undo.append(lambda: self._ledger.transfer(recipient, sender, asset, amount))

    def mint(self, owner: str, pool_id: PoolId, amount: int) -> None:
        self._lp_ledger.mint(owner, pool_id, amount)
        self._undo.append(lambda: self._lp_ledger.burn(owner, pool_id, amount))

    def burn(self, owner: str, pool_id: PoolId, amount: int) -> None:
        self._lp_ledger.burn(owner, pool_id, amount)
        self._undo.append(lambda: self._lp_ledger.mint(owner, pool_id, amount))

    def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()


class Exchange:
    """
    Request surface over a PoolRegistry.

    The pool's own id is the custody account for its reserves on the token
    ledger.
    """

    def __init__(
        self,
        registry: Optional[PoolRegistry] = None,
        ledger: Optional[TokenLedger] = None,
        lp_ledger: Optional[LiquidityLedger] = None,
        config: Optional[AmmConfig] = None,
    ) -> None:
        self.registry = registry if registry is not None else PoolRegistry()
        self.ledger: TokenLedger = ledger if ledger is not None else BalanceTable()
        self.lp_ledger: LiquidityLedger = lp_ledger if lp_ledger is not None else LPTable()
        self.config = config if config is not None else AmmConfig()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _require_funds(self, owner: str, asset: AssetId, amount: int) -> None:
        require_int("amount", amount)
        if amount > 0:
            held = self.ledger.balance_of(owner, asset)
            if held < amount:
                raise InsufficientFunds(f"{owner} holds {held} of {asset}, needs {amount}")

    @contextmanager
    def _request(self, kind: str, pool: PoolState) -> Iterator[_Settlement]:
        settlement = _Settlement(self.ledger, self.lp_ledger)
        with pool.lock:
            before = pool.snapshot()
            try:
                yield settlement
            except RequestRejected as exc:
                if settlement.applied:
                    logger.error("Ledger rejected %s on pool %s, rolling back: %s", kind, pool.pool_id, exc)
                else:
                    logger.warning("Rejected %s on pool %s: %s: %s", kind, pool.pool_id, type(exc).__name__, exc)
                settlement.rollback()
                pool.restore(before)
                raise
            except Exception:
                logger.error("%s on pool %s failed, rolling back", kind, pool.pool_id, exc_info=True)
                settlement.rollback()
                pool.restore(before)
                raise

    # ------------------------------------------------------------------
    # pool lifecycle
    # ------------------------------------------------------------------

    def open_pool(self, asset_a: AssetId, asset_b: AssetId, *, amm_id: Optional[str] = None) -> PoolId:
        """Create a pool under `amm_id` (default AMM from config, registered on first use)."""
        amm_id = amm_id or self.config.default_amm_id
        try:
            self.registry.get_amm(amm_id)
        except RequestRejected:
            if amm_id != self.config.default_amm_id:
                raise
            self.registry.register_amm(amm_id, default_fee_bps=self.config.default_fee_bps)
        return self.registry.create_pool(amm_id, asset_a, asset_b)

    def bootstrap(
        self,
        creator: str,
        pool_id: PoolId,
        initial_a: int,
        initial_b: int,
        fee_bps: Optional[int] = None,
    ) -> int:
        """
        Seed a registered pool from the creator's balances.

        Returns:
            Liquidity minted to the creator
        """
        pool = self.registry.get(pool_id)
        if fee_bps is None:
            fee_bps = self.registry.amm_of(pool_id).default_fee_bps
        self._require_funds(creator, pool.asset_a, initial_a)
        self._require_funds(creator, pool.asset_b, initial_b)

        with self._request("bootstrap", pool) as settlement:
            initialize(initial_a, initial_b, fee_bps, pool=pool)
            settlement.transfer(creator, pool_id, pool.asset_a, initial_a)
            settlement.transfer(creator, pool_id, pool.asset_b, initial_b)
            minted = pool.total_liquidity
            settlement.mint(creator, pool_id, minted)

        logger.info("%s bootstrapped pool %s with (%d, %d), minted %d", creator, pool_id, initial_a, initial_b, minted)
        return minted

    # ------------------------------------------------------------------
    # liquidity
    # ------------------------------------------------------------------

    def add_liquidity(
        self,
        provider: str,
        pool_id: PoolId,
        amount_a: int,
        amount_b: int,
        *,
        min_liquidity: int = 0,
    ) -> AddLiquidityResult:
        pool = self.registry.get(pool_id)
        self._require_funds(provider, pool.asset_a, amount_a)
        self._require_funds(provider, pool.asset_b, amount_b)

        with self._request("add_liquidity", pool) as settlement:
            res = add_liquidity(pool, amount_a, amount_b, min_liquidity=min_liquidity)
            settlement.transfer(provider, pool_id, pool.asset_a, res.actual_a)
            settlement.transfer(provider, pool_id, pool.asset_b, res.actual_b)
            settlement.mint(provider, pool_id, res.minted_liquidity)

        logger.info(
            "%s added (%d, %d) to pool %s, minted %d",
            provider,
            res.actual_a,
            res.actual_b,
            pool_id,
            res.minted_liquidity,
        )
        return res

    def remove_liquidity(
        self,
        provider: str,
        pool_id: PoolId,
        liquidity_amount: int,
        *,
        min_amount_a: int = 0,
        min_amount_b: int = 0,
    ) -> RemoveLiquidityResult:
        pool = self.registry.get(pool_id)
        require_int("liquidity_amount", liquidity_amount)
        if liquidity_amount > 0:
            held = self.lp_ledger.balance_of(provider, pool_id)
            if held < liquidity_amount:
                raise InsufficientFunds(f"{provider} holds {held} liquidity in {pool_id}, needs {liquidity_amount}")

        with self._request("remove_liquidity", pool) as settlement:
            res = remove_liquidity(pool, liquidity_amount, min_amount_a=min_amount_a, min_amount_b=min_amount_b)
            settlement.burn(provider, pool_id, liquidity_amount)
            settlement.transfer(pool_id, provider, pool.asset_a, res.amount_a)
            settlement.transfer(pool_id, provider, pool.asset_b, res.amount_b)

        logger.info(
            "%s removed %d liquidity from pool %s for (%d, %d)",
            provider,
            liquidity_amount,
            pool_id,
            res.amount_a,
            res.amount_b,
        )
        return res

    # ------------------------------------------------------------------
    # swaps
    # ------------------------------------------------------------------

    def quote(self, pool_id: PoolId, input_is_asset_a: bool, amount_in: int) -> SwapQuote:
        return quote_exact_input(self.registry.get(pool_id), input_is_asset_a, amount_in)

    def swap(
        self,
        trader: str,
        pool_id: PoolId,
        input_is_asset_a: bool,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> SwapQuote:
        pool = self.registry.get(pool_id)
        asset_in, asset_out = self._assets(pool, input_is_asset_a)
        self._require_funds(trader, asset_in, amount_in)

        with self._request("swap", pool) as settlement:
            quote = execute_swap(pool, input_is_asset_a, amount_in, min_amount_out)
            settlement.transfer(trader, pool_id, asset_in, quote.amount_in)
            settlement.transfer(pool_id, trader, asset_out, quote.amount_out)

        logger.info(
            "%s swapped %d %s for %d %s on pool %s (fee=%d, impact=%dbps)",
            trader,
            quote.amount_in,
            asset_in,
            quote.amount_out,
            asset_out,
            pool_id,
            quote.fee_amount,
            quote.price_impact_bps,
        )
        return quote

    @staticmethod
    def _assets(pool: PoolState, input_is_asset_a: bool) -> Tuple[AssetId, AssetId]:
        if input_is_asset_a:
            return pool.asset_a, pool.asset_b
        return pool.asset_b, pool.asset_a
