"""
Core AMM operations
"""

from .bootstrap import initialize
from .exchange import Exchange
from .ledger import LiquidityLedger, TokenLedger
from .liquidity import AddLiquidityResult, RemoveLiquidityResult, add_liquidity, remove_liquidity
from .swap import (
    SwapQuote,
    execute_swap,
    execute_swap_exact_output,
    quote_exact_input,
    quote_exact_output,
)

__all__ = [
    "initialize",
    "Exchange",
    "LiquidityLedger",
    "TokenLedger",
    "AddLiquidityResult",
    "RemoveLiquidityResult",
    "add_liquidity",
    "remove_liquidity",
    "SwapQuote",
    "execute_swap",
    "execute_swap_exact_output",
    "quote_exact_input",
    "quote_exact_output",
]
