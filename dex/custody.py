"""In-memory asset custody.

A per-asset balance book that satisfies the AssetTransfer protocol. Used
by the API server and tests; production deployments inject a transfer
service backed by real custody.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Mapping

import structlog

from dex.constants import DEFAULT_POOL_ACCOUNT
from dex.safe_int import is_uint128

logger = structlog.get_logger()


class InMemoryCustody:
    """Balance book keyed by (asset, account).

    debit() moves funds from an account into the pool account; credit()
    moves funds from the pool account out to an account. Either returns
    False if the source balance is short, leaving every balance unchanged.

    Args:
        pool_account: Account that holds the pool's assets
        balances: Optional seed balances, {account: {asset: amount}}
    """

    def __init__(
        self,
        pool_account: str = DEFAULT_POOL_ACCOUNT,
        balances: Mapping[str, Mapping[str, int]] | None = None,
    ) -> None:
        self.pool_account = pool_account
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()
        for account, assets in (balances or {}).items():
            for asset, amount in assets.items():
                self.deposit(asset, account, amount)

    def deposit(self, asset: str, account: str, amount: int) -> None:
        """Add externally sourced funds to an account.

        Raises:
            ValueError: If amount is not a uint128
        """
        if not is_uint128(amount):
            raise ValueError(f"deposit amount must be a uint128, got {amount!r}")
        with self._lock:
            self._balances[(asset, account)] += amount

    def balance_of(self, asset: str, account: str) -> int:
        with self._lock:
            return self._balances.get((asset, account), 0)

    def debit(self, asset: str, account: str, amount: int) -> bool:
        return self._move(asset, account, self.pool_account, amount)

    def credit(self, asset: str, account: str, amount: int) -> bool:
        return self._move(asset, self.pool_account, account, amount)

    def _move(self, asset: str, source: str, destination: str, amount: int) -> bool:
        if not is_uint128(amount):
            return False
        with self._lock:
            available = self._balances.get((asset, source), 0)
            if available < amount:
                logger.info(
                    "custody_transfer_rejected",
                    asset=asset,
                    source=source,
                    destination=destination,
                    amount=amount,
                    available=available,
                )
                return False
            self._balances[(asset, source)] = available - amount
            self._balances[(asset, destination)] += amount
        return True


__all__ = ["InMemoryCustody"]
