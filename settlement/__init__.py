"""AMM settlement core - pool registry, liquidity pools and swap router."""

from settlement.config import DeploymentConfig
from settlement.deployment import Deployment, deploy, deploy_from_env
from settlement.pools import LiquidityPool, PoolRegistry
from settlement.routing import Router

__version__ = "0.1.0"
__all__ = [
    "Deployment",
    "DeploymentConfig",
    "LiquidityPool",
    "PoolRegistry",
    "Router",
    "deploy",
    "deploy_from_env",
    "__version__",
]
