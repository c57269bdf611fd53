"""Test helpers module for shared test utilities.

- constants: Accounts, asset identifiers and common amounts
- factories: Engine, custody and state factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BASE_ASSET,
    BOB,
    CHARLIE,
    INITIAL_INVARIANT,
    INITIAL_RESERVE,
    OTHER_QUOTE_ASSET,
    OWNER,
    POOL,
    QUOTE_ASSET,
    STARTING_BALANCE,
    TRADERS,
)
from tests.helpers.factories import make_custody, make_engine, make_initialized_engine, make_state

__all__ = [
    # Constants
    "OWNER",
    "ALICE",
    "BOB",
    "CHARLIE",
    "POOL",
    "BASE_ASSET",
    "QUOTE_ASSET",
    "OTHER_QUOTE_ASSET",
    "INITIAL_RESERVE",
    "INITIAL_INVARIANT",
    "STARTING_BALANCE",
    "TRADERS",
    # Factories
    "make_custody",
    "make_engine",
    "make_initialized_engine",
    "make_state",
]
