"""Pydantic models for pool operation requests."""

from pydantic import BaseModel, Field

from dex.models.types import AssetId, Uint128


class InitializeRequest(BaseModel):
    """Pair the pool with a quote asset and seed both reserves."""

    quote_asset_id: AssetId
    initial_base: Uint128
    initial_quote: Uint128


class TradeRequest(BaseModel):
    """Buy or sell with a slippage bound."""

    amount_in: Uint128
    min_out: Uint128 = Field(default=0, description="Minimum acceptable output.")


class AddLiquidityRequest(BaseModel):
    amount_base: Uint128
    amount_quote: Uint128


class RemoveLiquidityRequest(BaseModel):
    percent: Uint128 = Field(description="Share of both reserves to withdraw, 1-100.")


class SetFeeRequest(BaseModel):
    fee_bps: Uint128 = Field(description="New fee in basis points, at most 1000.")
