"""Pydantic models for pool operation responses."""

from __future__ import annotations

from pydantic import BaseModel

from dex.amm.ledger import ReservesSnapshot
from dex.amm.quote import TradeQuote, TradeSide
from dex.errors import PoolError


class ReservesResponse(BaseModel):
    reserve_base: int
    reserve_quote: int
    invariant: int
    fee_bps: int
    initialized: bool

    @classmethod
    def from_snapshot(cls, snapshot: ReservesSnapshot) -> ReservesResponse:
        return cls(
            reserve_base=snapshot.reserve_base,
            reserve_quote=snapshot.reserve_quote,
            invariant=snapshot.invariant,
            fee_bps=snapshot.fee_bps,
            initialized=snapshot.initialized,
        )


class PriceResponse(BaseModel):
    """Quote per base as a fixed-point integer with the given scale."""

    price: int
    scale: int


class TradeResponse(BaseModel):
    amount_out: int


class QuoteResponse(BaseModel):
    """Preview of a trade against the current reserves."""

    side: TradeSide
    amount_in: int
    amount_out: int
    fee: int
    new_reserve_base: int
    new_reserve_quote: int

    @classmethod
    def from_quote(cls, quote: TradeQuote) -> QuoteResponse:
        return cls(
            side=quote.side,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            fee=quote.fee,
            new_reserve_base=quote.new_reserve_base,
            new_reserve_quote=quote.new_reserve_quote,
        )


class StatusResponse(BaseModel):
    ok: bool = True


class InitializedResponse(BaseModel):
    initialized: bool


class QuoteAssetResponse(BaseModel):
    quote_asset_id: str


class ErrorResponse(BaseModel):
    """Body returned for a rejected pool operation."""

    error: str
    code: int
    detail: str

    @classmethod
    def from_error(cls, err: PoolError) -> ErrorResponse:
        return cls(error=err.kind, code=int(err.code), detail=str(err))
