"""API endpoints for the pool engine."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Header

from dex.constants import PRICE_SCALE
from dex.engine import PoolEngine, get_default_engine
from dex.models import (
    AddLiquidityRequest,
    InitializedResponse,
    InitializeRequest,
    PriceResponse,
    QuoteAssetResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    ReservesResponse,
    SetFeeRequest,
    StatusResponse,
    TradeRequest,
    TradeResponse,
)

logger = structlog.get_logger()

router = APIRouter()


def get_engine() -> PoolEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject an engine with fake collaborators:
        app.dependency_overrides[get_engine] = lambda: engine

    Returns:
        The engine serving requests.
    """
    return get_default_engine()


def get_caller(x_caller: Annotated[str, Header(min_length=1)]) -> str:
    """Calling identity, taken from the X-Caller header."""
    return x_caller


Engine = Annotated[PoolEngine, Depends(get_engine)]
Caller = Annotated[str, Depends(get_caller)]


# =============================================================================
# Read-only
# =============================================================================


@router.get("/reserves")
def reserves(engine: Engine) -> ReservesResponse:
    return ReservesResponse.from_snapshot(engine.get_reserves())


@router.get("/price")
def price(engine: Engine) -> PriceResponse:
    return PriceResponse(price=engine.get_price(), scale=PRICE_SCALE)


@router.get("/initialized")
def initialized(engine: Engine) -> InitializedResponse:
    return InitializedResponse(initialized=engine.is_initialized())


@router.get("/quote-asset")
def quote_asset(engine: Engine) -> QuoteAssetResponse:
    return QuoteAssetResponse(quote_asset_id=engine.get_quote_asset())


@router.get("/quote/buy")
def preview_buy(engine: Engine, amount_in: int) -> QuoteResponse:
    """Price a buy without executing it."""
    return QuoteResponse.from_quote(engine.preview_buy(amount_in))


@router.get("/quote/sell")
def preview_sell(engine: Engine, amount_in: int) -> QuoteResponse:
    """Price a sell without executing it."""
    return QuoteResponse.from_quote(engine.preview_sell(amount_in))


# =============================================================================
# Governance
# =============================================================================


@router.post("/initialize")
def initialize(request: InitializeRequest, engine: Engine, caller: Caller) -> StatusResponse:
    engine.initialize(
        caller,
        quote_asset_id=request.quote_asset_id,
        initial_base=request.initial_base,
        initial_quote=request.initial_quote,
    )
    return StatusResponse()


@router.post("/fee")
def set_fee(request: SetFeeRequest, engine: Engine, caller: Caller) -> StatusResponse:
    engine.set_fee(caller, request.fee_bps)
    return StatusResponse()


# =============================================================================
# Trades
# =============================================================================


@router.post("/buy")
def buy(request: TradeRequest, engine: Engine, caller: Caller) -> TradeResponse:
    """Pay quote, receive base."""
    amount_out = engine.buy(caller, request.amount_in, request.min_out)
    logger.debug("buy_filled", caller=caller, amount_in=request.amount_in, amount_out=amount_out)
    return TradeResponse(amount_out=amount_out)


@router.post("/sell")
def sell(request: TradeRequest, engine: Engine, caller: Caller) -> TradeResponse:
    """Pay base, receive quote."""
    amount_out = engine.sell(caller, request.amount_in, request.min_out)
    logger.debug("sell_filled", caller=caller, amount_in=request.amount_in, amount_out=amount_out)
    return TradeResponse(amount_out=amount_out)


# =============================================================================
# Liquidity
# =============================================================================


@router.post("/liquidity/add")
def add_liquidity(request: AddLiquidityRequest, engine: Engine, caller: Caller) -> StatusResponse:
    engine.add_liquidity(caller, request.amount_base, request.amount_quote)
    return StatusResponse()


@router.post("/liquidity/remove")
def remove_liquidity(
    request: RemoveLiquidityRequest, engine: Engine, caller: Caller
) -> StatusResponse:
    engine.remove_liquidity(caller, request.percent)
    return StatusResponse()
