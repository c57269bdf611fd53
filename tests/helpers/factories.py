"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_engine, make_initialized_engine

    engine, custody = make_engine()
"""

from dex.amm.ledger import PoolState
from dex.config import PoolConfig
from dex.custody import InMemoryCustody
from dex.engine import PoolEngine
from dex.ports import AssetTransfer, EventSink
from tests.helpers.constants import (
    BASE_ASSET,
    INITIAL_RESERVE,
    OWNER,
    POOL,
    QUOTE_ASSET,
    STARTING_BALANCE,
    TRADERS,
)


def make_custody(
    accounts: tuple[str, ...] = (OWNER, *TRADERS),
    balance: int = STARTING_BALANCE,
) -> InMemoryCustody:
    """Custody where every account holds `balance` of both test assets."""
    return InMemoryCustody(
        pool_account=POOL,
        balances={
            account: {BASE_ASSET: balance, QUOTE_ASSET: balance} for account in accounts
        },
    )


def make_engine(
    config: PoolConfig | None = None,
    transfers: AssetTransfer | None = None,
    events: EventSink | None = None,
) -> tuple[PoolEngine, InMemoryCustody]:
    """Create an uninitialized engine backed by funded in-memory custody.

    If `transfers` is given it is used by the engine; the returned custody
    is still a fresh funded one for tests that need balances.
    """
    custody = make_custody()
    engine = PoolEngine(
        config=config or PoolConfig(owner=OWNER, base_asset_id=BASE_ASSET, pool_account=POOL),
        transfers=transfers or custody,
        events=events,
    )
    return engine, custody


def make_initialized_engine(
    initial_base: int = INITIAL_RESERVE,
    initial_quote: int = INITIAL_RESERVE,
    **kwargs,
) -> tuple[PoolEngine, InMemoryCustody]:
    """Create an engine already initialized by the owner."""
    engine, custody = make_engine(**kwargs)
    engine.initialize(OWNER, QUOTE_ASSET, initial_base, initial_quote)
    return engine, custody


def make_state(
    reserve_base: int = INITIAL_RESERVE,
    reserve_quote: int = INITIAL_RESERVE,
    invariant: int | None = None,
    fee_bps: int = 30,
    initialized: bool = True,
) -> PoolState:
    """Create a PoolState; the invariant defaults to the exact product."""
    return PoolState(
        reserve_base=reserve_base,
        reserve_quote=reserve_quote,
        invariant=reserve_base * reserve_quote if invariant is None else invariant,
        fee_bps=fee_bps,
        initialized=initialized,
        quote_asset_id=QUOTE_ASSET if initialized else None,
    )
