"""Collaborator interfaces consumed by the pool engine.

The engine never reaches for ambient state: the owner check, asset
movements and audit trail are all injected through these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class AssetTransfer(Protocol):
    """Moves assets between accounts.

    Both methods return False (rather than raising) when the movement
    cannot be made, e.g. the source account is short.
    """

    def debit(self, asset: str, account: str, amount: int) -> bool:
        """Move amount of asset from account into pool custody."""
        ...

    def credit(self, asset: str, account: str, amount: int) -> bool:
        """Move amount of asset from pool custody to account."""
        ...


@runtime_checkable
class Authorizer(Protocol):
    """Decides whether a caller holds the pool owner capability."""

    def is_owner(self, caller: str) -> bool: ...


@dataclass(frozen=True)
class FixedOwner:
    """Authorizer that recognizes a single identity fixed at construction."""

    owner: str

    def is_owner(self, caller: str) -> bool:
        return caller == self.owner


class TransferDirection(str, Enum):
    DEBIT = "debit"  # caller -> pool
    CREDIT = "credit"  # pool -> caller


@dataclass(frozen=True)
class TransferLeg:
    """One asset movement performed as part of a pool operation."""

    direction: TransferDirection
    asset: str
    account: str
    amount: int

    def reversed(self) -> TransferLeg:
        """The leg that undoes this one."""
        opposite = (
            TransferDirection.CREDIT
            if self.direction == TransferDirection.DEBIT
            else TransferDirection.DEBIT
        )
        return TransferLeg(opposite, self.asset, self.account, self.amount)


class EventKind(str, Enum):
    """Kinds of audited pool operations."""

    INITIALIZE = "initialize"
    BUY = "buy"
    SELL = "sell"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"
    SET_FEE = "set_fee"


@dataclass(frozen=True)
class PoolEvent:
    """Audit record for a committed pool operation.

    Attributes:
        kind: Which operation committed
        actor: Calling identity
        amounts: Named amounts for the operation (e.g. amount_in, amount_out, fee)
    """

    kind: EventKind
    actor: str
    amounts: dict[str, int] = field(default_factory=dict)


@runtime_checkable
class EventSink(Protocol):
    """Receives audit events. Observational only."""

    def emit(self, event: PoolEvent) -> None: ...


class StructlogEventSink:
    """Event sink that writes each event to the structured log."""

    def emit(self, event: PoolEvent) -> None:
        logger.info("pool_event", kind=event.kind.value, actor=event.actor, **event.amounts)


__all__ = [
    "AssetTransfer",
    "Authorizer",
    "FixedOwner",
    "TransferDirection",
    "TransferLeg",
    "EventKind",
    "PoolEvent",
    "EventSink",
    "StructlogEventSink",
]
