"""Constant-product pool math: reserve ledger, quotes and liquidity."""

from dex.amm.ledger import PoolState, ReservesSnapshot
from dex.amm.liquidity import (
    LiquidityChange,
    plan_add_liquidity,
    plan_initialize,
    plan_remove_liquidity,
    required_quote_for,
)
from dex.amm.quote import (
    TradeQuote,
    TradeSide,
    check_min_out,
    check_pool_can_cover,
    fee_for,
    quote_buy,
    quote_sell,
    spot_price,
)

__all__ = [
    # Ledger
    "PoolState",
    "ReservesSnapshot",
    # Quotes
    "TradeSide",
    "TradeQuote",
    "fee_for",
    "quote_buy",
    "quote_sell",
    "check_min_out",
    "check_pool_can_cover",
    "spot_price",
    # Liquidity
    "LiquidityChange",
    "plan_initialize",
    "plan_add_liquidity",
    "plan_remove_liquidity",
    "required_quote_for",
]
