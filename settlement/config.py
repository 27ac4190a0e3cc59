"""Deployment configuration.

Defaults can be overridden through environment variables:
- SETTLEMENT_FEE_BPS: Swap fee (default: 30, max 500)
- SETTLEMENT_PROTOCOL_FEE_PORTION_BPS: Protocol part of the swap fee (default: 0, max 10000)
- SETTLEMENT_FORWARDING_FEE_BPS: Router forwarding fee (default: 50, max 200)
- SETTLEMENT_LOCK_MINIMUM_LIQUIDITY: Lock 1000 shares on first deposit (default: true)
- SETTLEMENT_LOG_LEVEL: Log level name (default: INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from settlement.constants import (
    DEFAULT_FEE_BPS,
    DEFAULT_FORWARDING_FEE_BPS,
    DEFAULT_PROTOCOL_FEE_PORTION_BPS,
    MAX_FEE_BPS,
    MAX_FORWARDING_FEE_BPS,
    MAX_PROTOCOL_FEE_PORTION_BPS,
)
from settlement.errors import FeeTooHigh, InvalidPortion
from settlement.safe_int import to_uint256

TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class DeploymentConfig:
    """Initial parameters for one deployment.

    Attributes:
        fee_bps: Swap fee in basis points
        protocol_fee_portion_bps: Part of the swap fee paid to the fee recipient
        forwarding_fee_bps: Router fee on trades forwarded to the external AMM
        lock_minimum_liquidity: Lock MINIMUM_LIQUIDITY shares on first deposits
        log_level: structlog filtering level name
    """

    fee_bps: int = DEFAULT_FEE_BPS
    protocol_fee_portion_bps: int = DEFAULT_PROTOCOL_FEE_PORTION_BPS
    forwarding_fee_bps: int = DEFAULT_FORWARDING_FEE_BPS
    lock_minimum_liquidity: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if to_uint256(self.fee_bps) > MAX_FEE_BPS:
            raise FeeTooHigh(f"Fee {self.fee_bps} bps exceeds {MAX_FEE_BPS} bps")
        if to_uint256(self.protocol_fee_portion_bps) > MAX_PROTOCOL_FEE_PORTION_BPS:
            raise InvalidPortion(
                f"Portion {self.protocol_fee_portion_bps} bps exceeds "
                f"{MAX_PROTOCOL_FEE_PORTION_BPS} bps"
            )
        if to_uint256(self.forwarding_fee_bps) > MAX_FORWARDING_FEE_BPS:
            raise FeeTooHigh(
                f"Forwarding fee {self.forwarding_fee_bps} bps exceeds "
                f"{MAX_FORWARDING_FEE_BPS} bps"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DeploymentConfig:
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            fee_bps=int(env.get("SETTLEMENT_FEE_BPS", str(DEFAULT_FEE_BPS))),
            protocol_fee_portion_bps=int(
                env.get(
                    "SETTLEMENT_PROTOCOL_FEE_PORTION_BPS", str(DEFAULT_PROTOCOL_FEE_PORTION_BPS)
                )
            ),
            forwarding_fee_bps=int(
                env.get("SETTLEMENT_FORWARDING_FEE_BPS", str(DEFAULT_FORWARDING_FEE_BPS))
            ),
            lock_minimum_liquidity=env.get("SETTLEMENT_LOCK_MINIMUM_LIQUIDITY", "true").lower()
            in TRUE_VALUES,
            log_level=env.get("SETTLEMENT_LOG_LEVEL", "INFO").upper(),
        )


# Default configuration instance
DEFAULT_CONFIG = DeploymentConfig()
