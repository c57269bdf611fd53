"""Constant-product automated market maker."""

from dex.config import EmptyPoolPricePolicy, InitializationPolicy, PoolConfig
from dex.engine import PoolEngine, get_default_engine

__version__ = "0.1.0"
__all__ = [
    "PoolEngine",
    "PoolConfig",
    "InitializationPolicy",
    "EmptyPoolPricePolicy",
    "get_default_engine",
    "__version__",
]
