"""Pool engine: the single entry point for every pool operation.

The engine owns one PoolState and serializes access to it with a lock.
Each mutating operation follows the same shape:

1. snapshot the current state (under the lock)
2. compute a candidate state with the pure functions in dex.amm
3. validate (ownership, amounts, slippage, pool coverage)
4. run the asset transfer legs, compensating on any failure
5. commit the candidate by replacing the state reference
6. emit an audit event

Any failure in steps 2-4 raises a PoolError and leaves the state exactly
as it was; no event is emitted.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from dex.amm.ledger import PoolState, ReservesSnapshot
from dex.amm.liquidity import plan_add_liquidity, plan_initialize, plan_remove_liquidity
from dex.amm.quote import (
    TradeQuote,
    check_min_out,
    check_pool_can_cover,
    quote_buy,
    quote_sell,
    spot_price,
)
from dex.config import EmptyPoolPricePolicy, InitializationPolicy, PoolConfig
from dex.constants import MAX_FEE_BPS, PRICE_SCALE
from dex.errors import (
    AlreadyInitializedError,
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    InsufficientBalanceError,
    InvalidAmountError,
    NotFoundError,
    OwnerOnlyError,
    PoolError,
)
from dex.ports import (
    AssetTransfer,
    Authorizer,
    EventKind,
    EventSink,
    FixedOwner,
    PoolEvent,
    StructlogEventSink,
    TransferDirection,
    TransferLeg,
)
from dex.safe_int import DivisionByZero, Overflow, Underflow, is_uint128

logger = structlog.get_logger()


class PoolEngine:
    """Constant-product pool with owner governance and atomic operations.

    Args:
        config: Pool configuration (owner, asset ids, policies, initial fee)
        transfers: Asset transfer service used to move funds for each operation
        authorizer: Owner capability check. Defaults to FixedOwner(config.owner).
        events: Audit event sink. Defaults to StructlogEventSink.
    """

    def __init__(
        self,
        config: PoolConfig,
        transfers: AssetTransfer,
        authorizer: Authorizer | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.config = config
        self._transfers = transfers
        self._authorizer = authorizer or FixedOwner(config.owner)
        self._events = events or StructlogEventSink()
        self._state = PoolState(fee_bps=config.fee_bps)
        self._lock = threading.Lock()

    # =========================================================================
    # Read-only accessors
    # =========================================================================

    def get_reserves(self) -> ReservesSnapshot:
        with self._lock:
            return self._state.snapshot()

    def is_initialized(self) -> bool:
        with self._lock:
            return self._state.initialized

    def get_quote_asset(self) -> str:
        """Identifier of the external asset paired with the pool.

        Raises:
            NotFoundError: If the pool has not been initialized yet
        """
        with self._lock:
            asset = self._state.quote_asset_id
        if asset is None:
            raise NotFoundError("quote asset has not been set")
        return asset

    def get_price(self) -> int:
        """Quote per base scaled by PRICE_SCALE.

        On a pool with no base reserve, returns 0 or raises according to
        config.empty_price_policy.

        Raises:
            InsufficientBalanceError: If the pool is empty and the policy is RAISE
        """
        with self._lock:
            price = spot_price(self._state, PRICE_SCALE)
        if price is None:
            if self.config.empty_price_policy == EmptyPoolPricePolicy.RAISE:
                raise InsufficientBalanceError("pool has no base reserve to price against")
            return 0
        return price

    def preview_buy(self, amount_in: int) -> TradeQuote:
        """Price a buy against the current state without executing it."""
        with self._operation("preview_buy", caller=None, amount_in=amount_in) as state:
            return quote_buy(state, amount_in)

    def preview_sell(self, amount_in: int) -> TradeQuote:
        """Price a sell against the current state without executing it."""
        with self._operation("preview_sell", caller=None, amount_in=amount_in) as state:
            return quote_sell(state, amount_in)

    # =========================================================================
    # Governance
    # =========================================================================

    def initialize(
        self,
        caller: str,
        quote_asset_id: str,
        initial_base: int,
        initial_quote: int,
    ) -> bool:
        """Pair the pool with quote_asset_id and seed both reserves.

        The owner's initial deposit is debited through the transfer service.

        Raises:
            OwnerOnlyError: If caller is not the owner
            AlreadyInitializedError: If the initialization policy forbids it
            NotFoundError: If quote_asset_id is empty
            InvalidAmountError: If quote_asset_id is the base asset, or an amount
                is not positive
            ArithmeticOverflowError: If the invariant exceeds uint128
            InsufficientBalanceError: If the owner's deposit cannot be debited
        """
        with self._operation(
            "initialize",
            caller,
            quote_asset_id=quote_asset_id,
            initial_base=initial_base,
            initial_quote=initial_quote,
        ) as state:
            self._require_owner(caller)
            if not self._can_initialize(state):
                raise AlreadyInitializedError("pool is already initialized")
            if not quote_asset_id:
                raise NotFoundError("quote_asset_id must be a non-empty identifier")
            if quote_asset_id == self.config.base_asset_id:
                raise InvalidAmountError(
                    f"quote asset must differ from the base asset {quote_asset_id!r}"
                )

            change = plan_initialize(initial_base, initial_quote)
            candidate = change.apply(state).with_changes(
                initialized=True,
                quote_asset_id=quote_asset_id,
            )

            self._settle(
                self._pair_legs(
                    TransferDirection.DEBIT, caller, quote_asset_id, initial_base, initial_quote
                )
            )
            self._commit(
                candidate,
                PoolEvent(
                    EventKind.INITIALIZE,
                    caller,
                    {
                        "initial_base": initial_base,
                        "initial_quote": initial_quote,
                        "invariant": change.new_invariant,
                    },
                ),
            )
        return True

    def set_fee(self, caller: str, new_fee_bps: int) -> bool:
        """Change the fee rate; applies from the next trade.

        Raises:
            OwnerOnlyError: If caller is not the owner
            InvalidAmountError: If new_fee_bps is outside [0, MAX_FEE_BPS]
        """
        with self._operation("set_fee", caller, new_fee_bps=new_fee_bps) as state:
            self._require_owner(caller)
            if not is_uint128(new_fee_bps) or new_fee_bps > MAX_FEE_BPS:
                raise InvalidAmountError(
                    f"fee must be in [0, {MAX_FEE_BPS}] bps, got {new_fee_bps!r}"
                )
            self._commit(
                state.with_changes(fee_bps=new_fee_bps),
                PoolEvent(
                    EventKind.SET_FEE,
                    caller,
                    {"old_fee_bps": state.fee_bps, "new_fee_bps": new_fee_bps},
                ),
            )
        return True

    # =========================================================================
    # Trades
    # =========================================================================

    def buy(self, caller: str, amount_in: int, min_out: int) -> int:
        """Pay amount_in of quote, receive base.

        The fee is taken from amount_in before it reaches the curve.

        Returns:
            Base amount paid out to caller

        Raises:
            NotInitializedError: If the pool is not initialized
            InvalidAmountError: If amount_in is not positive
            SlippageExceededError: If the output is below min_out
            InsufficientBalanceError: If the trade would drain the base reserve,
                or a transfer leg fails
        """
        with self._operation("buy", caller, amount_in=amount_in, min_out=min_out) as state:
            quote = quote_buy(state, amount_in)
            check_min_out(quote, min_out)
            check_pool_can_cover(quote)
            self._execute_trade(
                state,
                quote,
                caller,
                asset_in=self._quote_asset(state),
                asset_out=self.config.base_asset_id,
                kind=EventKind.BUY,
            )
        return quote.amount_out

    def sell(self, caller: str, amount_in: int, min_out: int) -> int:
        """Pay amount_in of base, receive quote.

        The fee is taken from the curve output before it is paid out.

        Returns:
            Quote amount paid out to caller, net of fee

        Raises:
            NotInitializedError: If the pool is not initialized
            InvalidAmountError: If amount_in is not positive
            SlippageExceededError: If the net output is below min_out
            InsufficientBalanceError: If the trade would drain the quote reserve,
                or a transfer leg fails
        """
        with self._operation("sell", caller, amount_in=amount_in, min_out=min_out) as state:
            quote = quote_sell(state, amount_in)
            check_min_out(quote, min_out)
            check_pool_can_cover(quote)
            self._execute_trade(
                state,
                quote,
                caller,
                asset_in=self.config.base_asset_id,
                asset_out=self._quote_asset(state),
                kind=EventKind.SELL,
            )
        return quote.amount_out

    def _execute_trade(
        self,
        state: PoolState,
        quote: TradeQuote,
        caller: str,
        asset_in: str,
        asset_out: str,
        kind: EventKind,
    ) -> None:
        self._settle(
            [
                self._leg(TransferDirection.DEBIT, asset_in, caller, quote.amount_in),
                self._leg(TransferDirection.CREDIT, asset_out, caller, quote.amount_out),
            ]
        )
        self._commit(
            quote.apply(state),
            PoolEvent(
                kind,
                caller,
                {"amount_in": quote.amount_in, "amount_out": quote.amount_out, "fee": quote.fee},
            ),
        )

    # =========================================================================
    # Liquidity
    # =========================================================================

    def add_liquidity(self, caller: str, amount_base: int, amount_quote: int) -> bool:
        """Deposit both assets at or above the current ratio.

        Raises:
            NotInitializedError: If the pool is not initialized
            InvalidAmountError: If an amount is zero or the quote is short
            InsufficientBalanceError: If the pool is drained or a debit fails
        """
        with self._operation(
            "add_liquidity", caller, amount_base=amount_base, amount_quote=amount_quote
        ) as state:
            change = plan_add_liquidity(state, amount_base, amount_quote)
            self._settle(
                self._pair_legs(
                    TransferDirection.DEBIT,
                    caller,
                    self._quote_asset(state),
                    amount_base,
                    amount_quote,
                )
            )
            self._commit(
                change.apply(state),
                PoolEvent(
                    EventKind.ADD_LIQUIDITY,
                    caller,
                    {"amount_base": amount_base, "amount_quote": amount_quote},
                ),
            )
        return True

    def remove_liquidity(self, caller: str, percent: int) -> bool:
        """Withdraw percent of both reserves to caller.

        Raises:
            NotInitializedError: If the pool is not initialized
            InvalidAmountError: If percent is outside [1, 100]
            InsufficientBalanceError: If a credit fails
        """
        with self._operation("remove_liquidity", caller, percent=percent) as state:
            change = plan_remove_liquidity(state, percent)
            self._settle(
                self._pair_legs(
                    TransferDirection.CREDIT,
                    caller,
                    self._quote_asset(state),
                    change.amount_base,
                    change.amount_quote,
                )
            )
            self._commit(
                change.apply(state),
                PoolEvent(
                    EventKind.REMOVE_LIQUIDITY,
                    caller,
                    {
                        "percent": percent,
                        "amount_base": change.amount_base,
                        "amount_quote": change.amount_quote,
                    },
                ),
            )
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    @contextmanager
    def _operation(self, name: str, caller: str | None, **context: object) -> Iterator[PoolState]:
        """Run an operation under the lock against a snapshot of the state.

        Translates checked-arithmetic failures into pool errors and logs
        every rejection.
        """
        with self._lock:
            try:
                try:
                    yield self._state
                except Overflow as err:
                    raise ArithmeticOverflowError(str(err)) from err
                except Underflow as err:
                    raise ArithmeticUnderflowError(str(err)) from err
                except DivisionByZero as err:
                    raise InsufficientBalanceError(f"pool reserve is empty: {err}") from err
            except PoolError as err:
                logger.info(
                    "pool_operation_rejected",
                    operation=name,
                    caller=caller,
                    error=err.kind,
                    code=int(err.code),
                    detail=str(err),
                    **context,
                )
                raise

    def _require_owner(self, caller: str) -> None:
        if not self._authorizer.is_owner(caller):
            raise OwnerOnlyError(f"{caller!r} is not the pool owner")

    def _can_initialize(self, state: PoolState) -> bool:
        if self.config.initialization_policy == InitializationPolicy.EMPTY_RESERVES:
            return state.reserve_base == 0
        return not state.initialized

    @staticmethod
    def _quote_asset(state: PoolState) -> str:
        if state.quote_asset_id is None:
            raise NotFoundError("quote asset has not been set")
        return state.quote_asset_id

    @staticmethod
    def _leg(direction: TransferDirection, asset: str, account: str, amount: int) -> TransferLeg:
        return TransferLeg(direction=direction, asset=asset, account=account, amount=amount)

    def _pair_legs(
        self,
        direction: TransferDirection,
        account: str,
        quote_asset: str,
        amount_base: int,
        amount_quote: int,
    ) -> list[TransferLeg]:
        """Base then quote legs moving in the same direction."""
        return [
            self._leg(direction, self.config.base_asset_id, account, amount_base),
            self._leg(direction, quote_asset, account, amount_quote),
        ]

    def _apply_leg(self, leg: TransferLeg) -> bool:
        move = (
            self._transfers.debit
            if leg.direction == TransferDirection.DEBIT
            else self._transfers.credit
        )
        try:
            return bool(move(leg.asset, leg.account, leg.amount))
        except Exception:
            logger.exception(
                "transfer_leg_raised",
                direction=leg.direction.value,
                asset=leg.asset,
                account=leg.account,
                amount=leg.amount,
            )
            return False

    def _settle(self, legs: list[TransferLeg]) -> None:
        """Execute transfer legs in order; undo executed legs if one fails.

        Zero-amount legs are skipped.

        Raises:
            InsufficientBalanceError: If any leg fails
        """
        done: list[TransferLeg] = []
        for leg in legs:
            if leg.amount == 0:
                continue
            if not self._apply_leg(leg):
                logger.warning(
                    "transfer_leg_failed",
                    direction=leg.direction.value,
                    asset=leg.asset,
                    account=leg.account,
                    amount=leg.amount,
                    compensating=len(done),
                )
                self._compensate(done)
                raise InsufficientBalanceError(
                    f"{leg.direction.value} of {leg.amount} {leg.asset} for {leg.account} failed"
                )
            done.append(leg)

    def _compensate(self, done: list[TransferLeg]) -> None:
        for leg in reversed(done):
            undo = leg.reversed()
            if not self._apply_leg(undo):
                logger.error(
                    "transfer_compensation_failed",
                    direction=undo.direction.value,
                    asset=undo.asset,
                    account=undo.account,
                    amount=undo.amount,
                )

    def _commit(self, candidate: PoolState, event: PoolEvent) -> None:
        self._state = candidate
        logger.debug("pool_state_committed", operation=event.kind.value, actor=event.actor)
        try:
            self._events.emit(event)
        except Exception:
            logger.exception("event_sink_failed", kind=event.kind.value, actor=event.actor)


def create_default_engine() -> PoolEngine:
    """Create an engine configured from DEX_* environment variables.

    Uses an in-memory custody seeded from DEX_BALANCES.
    """
    from dex.config import load_seed_balances
    from dex.custody import InMemoryCustody

    config = PoolConfig.from_env()
    custody = InMemoryCustody(pool_account=config.pool_account, balances=load_seed_balances())
    logger.info(
        "engine_created",
        owner=config.owner,
        base_asset=config.base_asset_id,
        fee_bps=config.fee_bps,
        initialization_policy=config.initialization_policy.value,
    )
    return PoolEngine(config=config, transfers=custody)


_default_engine: PoolEngine | None = None
_default_engine_lock = threading.Lock()


def get_default_engine() -> PoolEngine:
    """Process-wide engine, created on first use."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = create_default_engine()
        return _default_engine


__all__ = ["PoolEngine", "create_default_engine", "get_default_engine"]
