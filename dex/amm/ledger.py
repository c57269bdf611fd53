"""Reserve ledger: the single state record shared by all pool operations."""

from __future__ import annotations

from dataclasses import dataclass, replace

from dex.constants import DEFAULT_FEE_BPS


@dataclass(frozen=True)
class ReservesSnapshot:
    """Read-only view of the pool returned by get_reserves()."""

    reserve_base: int
    reserve_quote: int
    invariant: int
    fee_bps: int
    initialized: bool


@dataclass(frozen=True)
class PoolState:
    """State of a constant-product pool.

    Instances are immutable. Operations build a candidate state with
    with_changes() and the engine commits it by swapping the reference,
    so no observer ever sees a partially applied update.

    The invariant is the cached reference product used as the divisor
    basis for quotes. Only initialization and liquidity changes write it;
    trades leave it stale, which keeps reserve_base * reserve_quote at or
    below it.
    """

    reserve_base: int = 0
    reserve_quote: int = 0
    invariant: int = 0
    fee_bps: int = DEFAULT_FEE_BPS
    initialized: bool = False
    quote_asset_id: str | None = None

    def snapshot(self) -> ReservesSnapshot:
        return ReservesSnapshot(
            reserve_base=self.reserve_base,
            reserve_quote=self.reserve_quote,
            invariant=self.invariant,
            fee_bps=self.fee_bps,
            initialized=self.initialized,
        )

    def with_changes(self, **changes: object) -> PoolState:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]

    @property
    def product(self) -> int:
        """Actual product of the reserves (may lag the cached invariant)."""
        return self.reserve_base * self.reserve_quote


__all__ = ["PoolState", "ReservesSnapshot"]
