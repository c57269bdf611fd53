"""Pydantic models for the pool HTTP API."""

from dex.models.requests import (
    AddLiquidityRequest,
    InitializeRequest,
    RemoveLiquidityRequest,
    SetFeeRequest,
    TradeRequest,
)
from dex.models.responses import (
    ErrorResponse,
    InitializedResponse,
    PriceResponse,
    QuoteAssetResponse,
    QuoteResponse,
    ReservesResponse,
    StatusResponse,
    TradeResponse,
)
from dex.models.types import AssetId, Uint128

__all__ = [
    # Types
    "AssetId",
    "Uint128",
    # Requests
    "InitializeRequest",
    "TradeRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "SetFeeRequest",
    # Responses
    "ReservesResponse",
    "PriceResponse",
    "TradeResponse",
    "QuoteResponse",
    "StatusResponse",
    "InitializedResponse",
    "QuoteAssetResponse",
    "ErrorResponse",
]
