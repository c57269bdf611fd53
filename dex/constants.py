"""Pool protocol constants.

Centralizes the fixed parameters of the bonding curve, fee schedule and
price representation.
"""

from dex.safe_int import UINT128_MAX

# Fees are expressed in basis points (1 bps = 0.01%)
FEE_DENOMINATOR = 10_000

# Fee cap: 1000 bps = 10%
MAX_FEE_BPS = 1_000

# Fee applied until the owner changes it (30 bps = 0.3%)
DEFAULT_FEE_BPS = 30

# Withdrawals are expressed as a whole percentage of the reserves
PERCENT_DENOMINATOR = 100
MIN_WITHDRAW_PERCENT = 1
MAX_WITHDRAW_PERCENT = 100

# Fixed-point scale for get_price (quote per base, 6 decimals)
PRICE_SCALE = 1_000_000

# Default asset and account identifiers
DEFAULT_BASE_ASSET = "base"
DEFAULT_POOL_ACCOUNT = "pool"

__all__ = [
    "UINT128_MAX",
    "FEE_DENOMINATOR",
    "MAX_FEE_BPS",
    "DEFAULT_FEE_BPS",
    "PERCENT_DENOMINATOR",
    "MIN_WITHDRAW_PERCENT",
    "MAX_WITHDRAW_PERCENT",
    "PRICE_SCALE",
    "DEFAULT_BASE_ASSET",
    "DEFAULT_POOL_ACCOUNT",
]
