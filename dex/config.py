"""Pool configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from pydantic import TypeAdapter

from dex.constants import (
    DEFAULT_BASE_ASSET,
    DEFAULT_FEE_BPS,
    DEFAULT_POOL_ACCOUNT,
    MAX_FEE_BPS,
)
from dex.models.types import Uint128

_SEED_BALANCES: TypeAdapter[dict[str, dict[str, int]]] = TypeAdapter(dict[str, dict[str, Uint128]])


class InitializationPolicy(str, Enum):
    """When the owner may (re-)initialize the pool.

    ONE_SHOT: explicit flag; once initialized, never again.
    EMPTY_RESERVES: allowed whenever reserve_base is zero, so a pool that
        was fully drained by remove_liquidity(100) can be seeded again.
    """

    ONE_SHOT = "one_shot"
    EMPTY_RESERVES = "empty_reserves"


class EmptyPoolPricePolicy(str, Enum):
    """What get_price does when reserve_base is zero."""

    ZERO = "zero"
    RAISE = "raise"


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for a pool engine.

    Attributes:
        owner: Identity allowed to initialize the pool and change the fee
        base_asset_id: Asset identifier passed to the transfer service for
            the base side of the pool
        pool_account: Custody account holding the pool's assets
        fee_bps: Fee rate at construction, in basis points (<= MAX_FEE_BPS)
        initialization_policy: Gate used by initialize()
        empty_price_policy: Behavior of get_price() on a drained pool
    """

    owner: str
    base_asset_id: str = DEFAULT_BASE_ASSET
    pool_account: str = DEFAULT_POOL_ACCOUNT
    fee_bps: int = DEFAULT_FEE_BPS
    initialization_policy: InitializationPolicy = InitializationPolicy.ONE_SHOT
    empty_price_policy: EmptyPoolPricePolicy = EmptyPoolPricePolicy.ZERO

    def __post_init__(self) -> None:
        if not self.owner:
            raise ValueError("owner must be a non-empty identity")
        if not 0 <= self.fee_bps <= MAX_FEE_BPS:
            raise ValueError(f"fee_bps must be in [0, {MAX_FEE_BPS}], got {self.fee_bps}")
        if self.pool_account == self.owner:
            raise ValueError("pool_account must differ from owner")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PoolConfig:
        """Build a config from DEX_* environment variables.

        - DEX_OWNER: owner identity (default: "owner")
        - DEX_BASE_ASSET: base asset identifier (default: "base")
        - DEX_POOL_ACCOUNT: custody account (default: "pool")
        - DEX_FEE_BPS: initial fee in bps (default: 30)
        - DEX_INIT_POLICY: "one_shot" or "empty_reserves"
        - DEX_EMPTY_PRICE_POLICY: "zero" or "raise"

        Raises:
            ValueError: If a value cannot be parsed or is out of range
        """
        env = os.environ if environ is None else environ
        return cls(
            owner=env.get("DEX_OWNER", "owner"),
            base_asset_id=env.get("DEX_BASE_ASSET", DEFAULT_BASE_ASSET),
            pool_account=env.get("DEX_POOL_ACCOUNT", DEFAULT_POOL_ACCOUNT),
            fee_bps=int(env.get("DEX_FEE_BPS", str(DEFAULT_FEE_BPS))),
            initialization_policy=InitializationPolicy(
                env.get("DEX_INIT_POLICY", InitializationPolicy.ONE_SHOT.value)
            ),
            empty_price_policy=EmptyPoolPricePolicy(
                env.get("DEX_EMPTY_PRICE_POLICY", EmptyPoolPricePolicy.ZERO.value)
            ),
        )


def load_seed_balances(environ: Mapping[str, str] | None = None) -> dict[str, dict[str, int]]:
    """Parse DEX_BALANCES, a JSON object {account: {asset: amount}}.

    Used to fund the in-memory custody of a development server.

    Raises:
        pydantic.ValidationError: If the JSON is malformed or an amount is not a uint128
    """
    env = os.environ if environ is None else environ
    raw = env.get("DEX_BALANCES")
    if not raw:
        return {}
    return _SEED_BALANCES.validate_json(raw)
