"""Tests for all-or-nothing operations: transfer failures, compensation, concurrency."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from structlog.testing import capture_logs

from dex.config import PoolConfig
from dex.engine import PoolEngine
from dex.errors import AlreadyInitializedError, InsufficientBalanceError
from tests.conftest import ExplodingEventSink, FailingTransfer, RecordingEventSink
from tests.helpers import (
    ALICE,
    BASE_ASSET,
    INITIAL_INVARIANT,
    OWNER,
    POOL,
    QUOTE_ASSET,
    STARTING_BALANCE,
    TRADERS,
    make_custody,
)


def make_failing_pool(**failures) -> tuple[PoolEngine, FailingTransfer, RecordingEventSink]:
    """Initialized pool whose transfer service fails as configured.

    Initialization makes calls 1 and 2 (base and quote debits).
    """
    transfers = FailingTransfer(make_custody(), **failures)
    events = RecordingEventSink()
    engine = PoolEngine(
        config=PoolConfig(owner=OWNER, pool_account=POOL),
        transfers=transfers,
        events=events,
    )
    engine.initialize(OWNER, QUOTE_ASSET, 1_000_000, 1_000_000)
    return engine, transfers, events


class TestTransferFailure:
    def test_failed_payout_refunds_trader(self):
        engine, transfers, events = make_failing_pool(fail_on_call=4)
        custody = transfers.custody

        with pytest.raises(InsufficientBalanceError):
            engine.buy(ALICE, 100_000, 0)

        assert transfers.calls[2:] == [
            ("debit", QUOTE_ASSET, ALICE, 100_000),
            ("credit", BASE_ASSET, ALICE, 90_662),
            ("credit", QUOTE_ASSET, ALICE, 100_000),
        ]
        assert custody.balance_of(QUOTE_ASSET, ALICE) == STARTING_BALANCE
        assert custody.balance_of(BASE_ASSET, ALICE) == STARTING_BALANCE
        assert custody.balance_of(QUOTE_ASSET, POOL) == 1_000_000

        snapshot = engine.get_reserves()
        assert snapshot.reserve_base == 1_000_000
        assert snapshot.reserve_quote == 1_000_000
        assert events.kinds == ["initialize"]

    def test_failed_first_leg_needs_no_compensation(self):
        engine, transfers, _ = make_failing_pool(fail_on_call=3)

        with pytest.raises(InsufficientBalanceError):
            engine.sell(ALICE, 100_000, 0)

        assert len(transfers.calls) == 3
        assert engine.get_reserves().reserve_base == 1_000_000

    def test_raising_transfer_service(self):
        engine, transfers, events = make_failing_pool(fail_on_call=3, raise_error=True)

        with capture_logs() as logs:
            with pytest.raises(InsufficientBalanceError):
                engine.buy(ALICE, 100_000, 0)

        assert "transfer_leg_raised" in [entry["event"] for entry in logs]
        assert engine.get_reserves().reserve_quote == 1_000_000
        assert events.kinds == ["initialize"]

    def test_failed_withdrawal_returns_base(self):
        engine, transfers, _ = make_failing_pool(fail_on_call=4)
        custody = transfers.custody

        with pytest.raises(InsufficientBalanceError):
            engine.remove_liquidity(OWNER, 50)

        # Base credit (call 3) was undone by a debit after the quote credit failed
        assert transfers.calls[-1] == ("debit", BASE_ASSET, OWNER, 500_000)
        assert custody.balance_of(BASE_ASSET, POOL) == 1_000_000
        assert engine.get_reserves().invariant == INITIAL_INVARIANT

    def test_failed_compensation_is_logged(self):
        engine, transfers, _ = make_failing_pool()
        transfers.fail_credits = True

        with capture_logs() as logs:
            with pytest.raises(InsufficientBalanceError):
                engine.buy(ALICE, 100_000, 0)

        events = [entry["event"] for entry in logs]
        assert "transfer_leg_failed" in events
        assert "transfer_compensation_failed" in events
        assert engine.get_reserves().reserve_base == 1_000_000

    def test_rejection_is_logged(self):
        engine, _, _ = make_failing_pool()

        with capture_logs() as logs:
            with pytest.raises(InsufficientBalanceError):
                engine.buy("nobody", 100_000, 0)

        rejected = [entry for entry in logs if entry["event"] == "pool_operation_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["operation"] == "buy"
        assert rejected[0]["error"] == "insufficient_balance"
        assert rejected[0]["code"] == 102


class TestEventSink:
    def test_failing_sink_does_not_undo_commit(self):
        custody = make_custody()
        engine = PoolEngine(
            config=PoolConfig(owner=OWNER, pool_account=POOL),
            transfers=custody,
            events=ExplodingEventSink(),
        )

        with capture_logs() as logs:
            engine.initialize(OWNER, QUOTE_ASSET, 1_000_000, 1_000_000)
            amount_out = engine.buy(ALICE, 100_000, 0)

        assert amount_out == 90_662
        assert engine.get_reserves().reserve_base == 909_338
        assert [entry["event"] for entry in logs].count("event_sink_failed") == 2


class TestConcurrency:
    def test_parallel_trades_are_serialized(self, pool, pool_custody):
        """Concurrent buys from several traders keep reserves and custody consistent."""
        trades_per_trader = 25

        def trade(trader: str) -> int:
            return sum(pool.buy(trader, 1_000, 0) for _ in range(trades_per_trader))

        with ThreadPoolExecutor(max_workers=len(TRADERS)) as executor:
            paid_out = sum(executor.map(trade, TRADERS))

        total_trades = trades_per_trader * len(TRADERS)
        snapshot = pool.get_reserves()
        assert snapshot.reserve_quote == 1_000_000 + total_trades * 997
        assert snapshot.reserve_base == 1_000_000 - paid_out
        assert snapshot.invariant == INITIAL_INVARIANT
        assert snapshot.reserve_base * snapshot.reserve_quote <= INITIAL_INVARIANT

        assert pool_custody.balance_of(BASE_ASSET, POOL) == snapshot.reserve_base
        assert pool_custody.balance_of(QUOTE_ASSET, POOL) == 1_000_000 + total_trades * 1_000

    def test_parallel_initialize_succeeds_once(self, engine):
        def attempt(_: int) -> bool:
            try:
                return engine.initialize(OWNER, QUOTE_ASSET, 1_000, 1_000)
            except AlreadyInitializedError:
                return False

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(attempt, range(16)))

        assert results.count(True) == 1
        assert engine.get_reserves().reserve_base == 1_000
