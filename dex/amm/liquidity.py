"""Liquidity manager: proportional deposits and withdrawals.

Liquidity operations always recompute the invariant exactly from the
new reserves, unlike trades. No fee is charged on either direction.
"""

from __future__ import annotations

from dataclasses import dataclass

from dex.amm.ledger import PoolState
from dex.constants import MAX_WITHDRAW_PERCENT, MIN_WITHDRAW_PERCENT, PERCENT_DENOMINATOR
from dex.errors import InsufficientBalanceError, InvalidAmountError, NotInitializedError
from dex.safe_int import S, is_uint128


@dataclass(frozen=True)
class LiquidityChange:
    """Candidate reserves after a deposit or withdrawal.

    Attributes:
        amount_base: Base moved (into the pool for deposits, out for withdrawals)
        amount_quote: Quote moved
        new_reserve_base: Base reserve afterwards
        new_reserve_quote: Quote reserve afterwards
        new_invariant: Exact product of the new reserves
    """

    amount_base: int
    amount_quote: int
    new_reserve_base: int
    new_reserve_quote: int
    new_invariant: int

    def apply(self, state: PoolState) -> PoolState:
        return state.with_changes(
            reserve_base=self.new_reserve_base,
            reserve_quote=self.new_reserve_quote,
            invariant=self.new_invariant,
        )


def _require_positive(name: str, amount: int) -> None:
    if not is_uint128(amount) or amount <= 0:
        raise InvalidAmountError(f"{name} must be a positive uint128, got {amount!r}")


def plan_initialize(initial_base: int, initial_quote: int) -> LiquidityChange:
    """Seed reserves for an empty pool.

    Raises:
        InvalidAmountError: If either amount is not positive
        Overflow: If initial_base * initial_quote exceeds uint128
    """
    _require_positive("initial_base", initial_base)
    _require_positive("initial_quote", initial_quote)

    invariant = S(initial_base) * S(initial_quote)
    return LiquidityChange(
        amount_base=initial_base,
        amount_quote=initial_quote,
        new_reserve_base=initial_base,
        new_reserve_quote=initial_quote,
        new_invariant=invariant.value,
    )


def required_quote_for(state: PoolState, amount_base: int) -> int:
    """Minimum quote to deposit alongside amount_base at the current ratio.

    floor(amount_base * reserve_quote / reserve_base)

    Raises:
        DivisionByZero: If the pool has no base reserve
    """
    return S(amount_base).mul_div(state.reserve_quote, state.reserve_base).value


def plan_add_liquidity(state: PoolState, amount_base: int, amount_quote: int) -> LiquidityChange:
    """Deposit both assets at (or above) the current ratio.

    Supplying more quote than required is accepted; the surplus shifts
    the pool ratio in favor of base holders.

    Raises:
        NotInitializedError: If the pool is not initialized
        InvalidAmountError: If an amount is not positive or quote is short
        InsufficientBalanceError: If the pool was drained and has no ratio
        Overflow: If a reserve or the invariant exceeds uint128
    """
    if not state.initialized:
        raise NotInitializedError("pool is not initialized")
    _require_positive("amount_base", amount_base)
    _require_positive("amount_quote", amount_quote)
    if state.reserve_base == 0:
        raise InsufficientBalanceError("pool has no base reserve to price a deposit against")

    required = required_quote_for(state, amount_base)
    if amount_quote < required:
        raise InvalidAmountError(
            f"amount_quote {amount_quote} below required {required} for {amount_base} base"
        )

    new_base = S(state.reserve_base) + S(amount_base)
    new_quote = S(state.reserve_quote) + S(amount_quote)
    return LiquidityChange(
        amount_base=amount_base,
        amount_quote=amount_quote,
        new_reserve_base=new_base.value,
        new_reserve_quote=new_quote.value,
        new_invariant=(new_base * new_quote).value,
    )


def plan_remove_liquidity(state: PoolState, percent: int) -> LiquidityChange:
    """Withdraw percent of both reserves.

    out = floor(reserve * percent / 100) on each side; percent=100 drains
    the pool to zero.

    Raises:
        NotInitializedError: If the pool is not initialized
        InvalidAmountError: If percent is outside [1, 100]
    """
    if not state.initialized:
        raise NotInitializedError("pool is not initialized")
    if (
        not is_uint128(percent)
        or not MIN_WITHDRAW_PERCENT <= percent <= MAX_WITHDRAW_PERCENT
    ):
        raise InvalidAmountError(
            f"percent must be in [{MIN_WITHDRAW_PERCENT}, {MAX_WITHDRAW_PERCENT}], got {percent!r}"
        )

    out_base = S(state.reserve_base).mul_div(percent, PERCENT_DENOMINATOR)
    out_quote = S(state.reserve_quote).mul_div(percent, PERCENT_DENOMINATOR)
    new_base = S(state.reserve_base) - out_base
    new_quote = S(state.reserve_quote) - out_quote
    return LiquidityChange(
        amount_base=out_base.value,
        amount_quote=out_quote.value,
        new_reserve_base=new_base.value,
        new_reserve_quote=new_quote.value,
        new_invariant=(new_base * new_quote).value,
    )


__all__ = [
    "LiquidityChange",
    "plan_initialize",
    "required_quote_for",
    "plan_add_liquidity",
    "plan_remove_liquidity",
]
