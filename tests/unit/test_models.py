"""Tests for Pydantic request and response models."""

import pytest
from pydantic import ValidationError

from dex.amm.quote import quote_sell
from dex.errors import SlippageExceededError
from dex.models import (
    ErrorResponse,
    InitializeRequest,
    QuoteResponse,
    RemoveLiquidityRequest,
    TradeRequest,
)
from dex.models.types import validate_uint128
from tests.helpers import make_state


class TestUint128:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, 0),
            ("42", 42),
            (2**128 - 1, 2**128 - 1),
            ("340282366920938463463374607431768211455", 2**128 - 1),
        ],
    )
    def test_valid(self, value, expected):
        assert validate_uint128(value) == expected

    @pytest.mark.parametrize("value", [-1, "-1", 2**128, "1.5", "0x10", 1.0, None, False])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_uint128(value)


class TestRequests:
    def test_trade_min_out_defaults_to_zero(self):
        request = TradeRequest.model_validate({"amount_in": "100000"})
        assert request.amount_in == 100_000
        assert request.min_out == 0

    def test_initialize_requires_asset_id(self):
        with pytest.raises(ValidationError):
            InitializeRequest.model_validate(
                {"quote_asset_id": "", "initial_base": 1, "initial_quote": 1}
            )

    def test_percent_is_not_range_checked_by_the_model(self):
        """The 1-100 range is enforced by the engine so it reports invalid_amount."""
        assert RemoveLiquidityRequest(percent=150).percent == 150


class TestResponses:
    def test_quote_response(self):
        response = QuoteResponse.from_quote(quote_sell(make_state(), 100_000))
        assert response.model_dump(mode="json") == {
            "side": "sell",
            "amount_in": 100_000,
            "amount_out": 90_638,
            "fee": 272,
            "new_reserve_base": 1_100_000,
            "new_reserve_quote": 909_090,
        }

    def test_error_response(self):
        response = ErrorResponse.from_error(SlippageExceededError())
        assert response.model_dump() == {
            "error": "slippage_exceeded",
            "code": 104,
            "detail": "slippage_exceeded",
        }
