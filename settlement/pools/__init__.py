"""Pool management package.

Provides LiquidityPool (reserve and share accounting, swap pricing) and
PoolRegistry (pair-to-pool map and fee configuration).
"""

from .pool import Initialized, LiquidityPool, PoolState, Uninitialized
from .registry import FeeConfig, PoolRegistry, canonical_pair, pool_address_for

__all__ = [
    "LiquidityPool",
    "PoolState",
    "Uninitialized",
    "Initialized",
    "PoolRegistry",
    "FeeConfig",
    "canonical_pair",
    "pool_address_for",
]
