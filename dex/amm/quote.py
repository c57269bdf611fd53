"""Quote calculator for the constant-product curve.

The pool prices trades against its cached invariant K:

    new_reserve_out = floor(K / new_reserve_in)

Buys (quote in, base out) take the fee from the input before it reaches
the curve. Sells (base in, quote out) take the fee from the output after
the curve. The two sides are deliberately asymmetric.

All functions here are pure: they read a PoolState and return a
TradeQuote describing the candidate state. They raise PoolError for
rejected inputs and let SafeInt errors (Overflow, Underflow,
DivisionByZero) propagate for the engine to translate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dex.amm.ledger import PoolState
from dex.constants import FEE_DENOMINATOR
from dex.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    NotInitializedError,
    SlippageExceededError,
)
from dex.safe_int import S, is_uint128


class TradeSide(str, Enum):
    """Direction of a trade from the trader's point of view."""

    BUY = "buy"  # pay quote, receive base
    SELL = "sell"  # pay base, receive quote


@dataclass(frozen=True)
class TradeQuote:
    """Result of pricing a trade against a pool state.

    Attributes:
        side: BUY or SELL
        amount_in: Amount the trader pays (full amount, fee included for buys)
        amount_out: Amount the trader receives (net of fee for sells)
        fee: Fee retained by the pool, in the input asset for buys and the
            output asset for sells
        new_reserve_base: Base reserve after the trade
        new_reserve_quote: Quote reserve after the trade
    """

    side: TradeSide
    amount_in: int
    amount_out: int
    fee: int
    new_reserve_base: int
    new_reserve_quote: int

    @property
    def drains_pool(self) -> bool:
        """True if the trade would leave either reserve at zero."""
        return self.new_reserve_base == 0 or self.new_reserve_quote == 0

    def apply(self, state: PoolState) -> PoolState:
        """Candidate state with the new reserves; the invariant is left as is."""
        return state.with_changes(
            reserve_base=self.new_reserve_base,
            reserve_quote=self.new_reserve_quote,
        )


def fee_for(amount: int, fee_bps: int) -> int:
    """Fee on an amount: floor(amount * fee_bps / 10000)."""
    return S(amount).mul_div(fee_bps, FEE_DENOMINATOR).value


def _require_tradable(state: PoolState, amount_in: int) -> None:
    if not state.initialized:
        raise NotInitializedError("pool is not initialized")
    if not is_uint128(amount_in) or amount_in <= 0:
        raise InvalidAmountError(f"amount_in must be a positive uint128, got {amount_in!r}")


def quote_buy(state: PoolState, amount_in: int) -> TradeQuote:
    """Price a buy: the trader pays amount_in of quote and receives base.

    Formula:
        fee = floor(amount_in * fee_bps / 10000)
        new_reserve_quote = reserve_quote + (amount_in - fee)
        new_reserve_base = floor(K / new_reserve_quote)
        amount_out = reserve_base - new_reserve_base

    Raises:
        NotInitializedError: If the pool is not initialized
        InvalidAmountError: If amount_in is not positive
        Underflow: If the stale invariant would make amount_out negative
    """
    _require_tradable(state, amount_in)

    fee = S(fee_for(amount_in, state.fee_bps))
    net_in = S(amount_in) - fee
    new_reserve_quote = S(state.reserve_quote) + net_in
    new_reserve_base = S(state.invariant) // new_reserve_quote
    amount_out = S(state.reserve_base) - new_reserve_base

    return TradeQuote(
        side=TradeSide.BUY,
        amount_in=amount_in,
        amount_out=amount_out.value,
        fee=fee.value,
        new_reserve_base=new_reserve_base.value,
        new_reserve_quote=new_reserve_quote.value,
    )


def quote_sell(state: PoolState, amount_in: int) -> TradeQuote:
    """Price a sell: the trader pays amount_in of base and receives quote.

    Formula:
        new_reserve_base = reserve_base + amount_in
        new_reserve_quote = floor(K / new_reserve_base)
        gross_out = reserve_quote - new_reserve_quote
        fee = floor(gross_out * fee_bps / 10000)
        amount_out = gross_out - fee

    The fee is withheld from the trader but not returned to the reserve.

    Raises:
        NotInitializedError: If the pool is not initialized
        InvalidAmountError: If amount_in is not positive
        Underflow: If the stale invariant would make gross_out negative
    """
    _require_tradable(state, amount_in)

    new_reserve_base = S(state.reserve_base) + S(amount_in)
    new_reserve_quote = S(state.invariant) // new_reserve_base
    gross_out = S(state.reserve_quote) - new_reserve_quote
    fee = S(fee_for(gross_out.value, state.fee_bps))
    amount_out = gross_out - fee

    return TradeQuote(
        side=TradeSide.SELL,
        amount_in=amount_in,
        amount_out=amount_out.value,
        fee=fee.value,
        new_reserve_base=new_reserve_base.value,
        new_reserve_quote=new_reserve_quote.value,
    )


def check_min_out(quote: TradeQuote, min_out: int) -> None:
    """Reject a quote whose output is strictly below the caller's minimum.

    Raises:
        InvalidAmountError: If min_out is not a uint128
        SlippageExceededError: If quote.amount_out < min_out
    """
    if not is_uint128(min_out):
        raise InvalidAmountError(f"min_out must be a uint128, got {min_out!r}")
    if quote.amount_out < min_out:
        raise SlippageExceededError(
            f"{quote.side.value} output {quote.amount_out} below minimum {min_out}"
        )


def check_pool_can_cover(quote: TradeQuote) -> None:
    """Reject a trade that would empty a reserve.

    A zero reserve would make every later quote divide by zero.

    Raises:
        InsufficientBalanceError: If the trade drains either reserve
    """
    if quote.drains_pool:
        raise InsufficientBalanceError(
            f"{quote.side.value} of {quote.amount_in} would drain the pool"
        )


def spot_price(state: PoolState, scale: int) -> int | None:
    """Quote per base as a fixed-point integer: floor(reserve_quote * scale / reserve_base).

    Returns:
        The scaled price, or None if reserve_base is zero
    """
    if state.reserve_base == 0:
        return None
    return S(state.reserve_quote).mul_div(scale, state.reserve_base).value


__all__ = [
    "TradeSide",
    "TradeQuote",
    "fee_for",
    "quote_buy",
    "quote_sell",
    "check_min_out",
    "check_pool_can_cover",
    "spot_price",
]
