"""Exception types for the constant-product AMM core.

Two families:
- ``RequestRejected``: the caller asked for something the pool cannot do.
  These are ordinary outcomes and leave pool state untouched.
- ``InvariantViolation``: a commit would break the pool invariant. This is an
  internal defect and is raised as an ``AssertionError``.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for every error raised by the AMM core."""


class RequestRejected(AmmError, ValueError):
    """Raised when a request is rejected before any state change."""


class InvalidInitialReserves(RequestRejected):
    """Bootstrap reserves or fee are outside their allowed range."""


class DegenerateLiquidity(RequestRejected):
    """Bootstrap would seed a zero liquidity supply."""


class AlreadyInitialized(RequestRejected):
    """Bootstrap was invoked on a pool that is already active."""


class PoolNotInitialized(RequestRejected):
    """An operation was invoked on a pool that was never bootstrapped."""


class InvalidAmount(RequestRejected):
    """An amount argument is zero, negative or out of range."""


class InvalidFee(RequestRejected):
    """A fee rate is outside ``[0, 10000)`` basis points."""


class InsufficientLiquidity(RequestRejected):
    """The pool cannot satisfy the request from its reserves or supply."""


class ZeroLiquidityMinted(RequestRejected):
    """A deposit is too small to mint any liquidity."""


class ZeroWithdrawal(RequestRejected):
    """A withdrawal is too small to return any asset."""


class SlippageExceeded(RequestRejected):
    """The computed result is worse than the caller's limit."""


class InsufficientFunds(RequestRejected):
    """The caller does not hold the amount it offered to pay."""


class UnknownPool(RequestRejected, KeyError):
    """No pool (or AMM) is registered under the given id."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class PoolExists(RequestRejected):
    """A pool for this AMM and asset pair is already registered."""


class AmmExists(RequestRejected):
    """An AMM with this id is already registered."""


class ArithmeticOverflow(RequestRejected, OverflowError):
    """An intermediate or result does not fit its integer width."""


class DivisionByZero(RequestRejected, ZeroDivisionError):
    """A fixed-point division was asked to divide by zero."""


class InvariantViolation(AmmError, AssertionError):
    """Raised when a post-state violates one or more pool invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
