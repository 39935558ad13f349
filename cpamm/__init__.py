"""`cpamm`: integer-exact constant-product (x*y=k) AMM core.

Public API:
- `initialize(initial_a, initial_b, fee_bps, pool=None) -> PoolState`
- `add_liquidity(pool, amount_a, amount_b) -> (minted_liquidity, actual_a, actual_b)`
- `remove_liquidity(pool, liquidity_amount) -> (amount_a, amount_b)`
- `quote_exact_input(pool, input_is_asset_a, amount_in) -> SwapQuote`
- `execute_swap(pool, input_is_asset_a, amount_in, min_amount_out) -> SwapQuote`

`Exchange` binds these to token and liquidity ledgers; `PoolRegistry` holds
independently addressable pools.
"""

from .config import AmmConfig
from .core import (
    AddLiquidityResult,
    Exchange,
    RemoveLiquidityResult,
    SwapQuote,
    add_liquidity,
    execute_swap,
    execute_swap_exact_output,
    initialize,
    quote_exact_input,
    quote_exact_output,
    remove_liquidity,
)
from .errors import (
    AlreadyInitialized,
    AmmError,
    ArithmeticOverflow,
    DegenerateLiquidity,
    DivisionByZero,
    InsufficientFunds,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidInitialReserves,
    InvariantViolation,
    PoolNotInitialized,
    RequestRejected,
    SlippageExceeded,
    ZeroLiquidityMinted,
    ZeroWithdrawal,
)
from .state import PoolRegistry, PoolSnapshot, PoolState, PoolStatus

__all__ = [
    "AmmConfig",
    "AddLiquidityResult",
    "Exchange",
    "RemoveLiquidityResult",
    "SwapQuote",
    "add_liquidity",
    "execute_swap",
    "execute_swap_exact_output",
    "initialize",
    "quote_exact_input",
    "quote_exact_output",
    "remove_liquidity",
    "AlreadyInitialized",
    "AmmError",
    "ArithmeticOverflow",
    "DegenerateLiquidity",
    "DivisionByZero",
    "InsufficientFunds",
    "InsufficientLiquidity",
    "InvalidAmount",
    "InvalidFee",
    "InvalidInitialReserves",
    "InvariantViolation",
    "PoolNotInitialized",
    "RequestRejected",
    "SlippageExceeded",
    "ZeroLiquidityMinted",
    "ZeroWithdrawal",
    "PoolRegistry",
    "PoolSnapshot",
    "PoolState",
    "PoolStatus",
]
