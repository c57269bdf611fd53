"""Pytest configuration and fixtures."""

from dataclasses import dataclass, field

import pytest

from dex.custody import InMemoryCustody
from dex.engine import PoolEngine
from dex.ports import PoolEvent
from tests.helpers import make_engine, make_initialized_engine

# =============================================================================
# Fake collaborators for dependency injection
# =============================================================================


class RecordingEventSink:
    """Event sink that keeps every emitted event for assertions."""

    def __init__(self) -> None:
        self.events: list[PoolEvent] = []

    def emit(self, event: PoolEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [event.kind.value for event in self.events]


class ExplodingEventSink:
    """Event sink that always raises."""

    def emit(self, event: PoolEvent) -> None:
        raise RuntimeError(f"sink down while emitting {event.kind.value}")


@dataclass
class FailingTransfer:
    """Transfer service that delegates to custody but fails selected legs.

    Usage:
        # Fail every credit (pool -> caller)
        transfers = FailingTransfer(custody, fail_credits=True)

        # Fail the 2nd call overall (1-based), whatever its direction
        transfers = FailingTransfer(custody, fail_on_call=2)

        # Raise instead of returning False
        transfers = FailingTransfer(custody, fail_on_call=1, raise_error=True)
    """

    custody: InMemoryCustody
    fail_debits: bool = False
    fail_credits: bool = False
    fail_on_call: int | None = None
    raise_error: bool = False
    calls: list[tuple[str, str, str, int]] = field(default_factory=list)

    def _should_fail(self, direction: str) -> bool:
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            return True
        if direction == "debit":
            return self.fail_debits
        return self.fail_credits

    def _fail(self) -> bool:
        if self.raise_error:
            raise ConnectionError("transfer service unavailable")
        return False

    def debit(self, asset: str, account: str, amount: int) -> bool:
        self.calls.append(("debit", asset, account, amount))
        if self._should_fail("debit"):
            return self._fail()
        return self.custody.debit(asset, account, amount)

    def credit(self, asset: str, account: str, amount: int) -> bool:
        self.calls.append(("credit", asset, account, amount))
        if self._should_fail("credit"):
            return self._fail()
        return self.custody.credit(asset, account, amount)


class AllowListAuthorizer:
    """Authorizer recognizing any identity in a set."""

    def __init__(self, *owners: str) -> None:
        self.owners = set(owners)

    def is_owner(self, caller: str) -> bool:
        return caller in self.owners


# =============================================================================
# Pytest fixtures
# =============================================================================


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def engine_and_custody(events: RecordingEventSink) -> tuple[PoolEngine, InMemoryCustody]:
    """An uninitialized engine with funded custody and recorded events."""
    return make_engine(events=events)


@pytest.fixture
def engine(engine_and_custody: tuple[PoolEngine, InMemoryCustody]) -> PoolEngine:
    return engine_and_custody[0]


@pytest.fixture
def custody(engine_and_custody: tuple[PoolEngine, InMemoryCustody]) -> InMemoryCustody:
    return engine_and_custody[1]


@pytest.fixture
def pool_and_custody(events: RecordingEventSink) -> tuple[PoolEngine, InMemoryCustody]:
    """An engine initialized with 1,000,000 of each asset at 30 bps."""
    return make_initialized_engine(events=events)


@pytest.fixture
def pool(pool_and_custody: tuple[PoolEngine, InMemoryCustody]) -> PoolEngine:
    return pool_and_custody[0]


@pytest.fixture
def pool_custody(pool_and_custody: tuple[PoolEngine, InMemoryCustody]) -> InMemoryCustody:
    return pool_and_custody[1]
