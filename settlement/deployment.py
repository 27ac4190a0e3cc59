"""Wiring of one settlement deployment.

A deployment owns exactly one journal, event log, asset ledger, controller,
pool registry and router, all sharing the same journal so that any
operation spanning several of them commits or aborts as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from settlement.config import DeploymentConfig
from settlement.events import EventLog
from settlement.governance import SingleController
from settlement.journal import Journal
from settlement.ledger import AssetLedger
from settlement.log_config import configure_logging
from settlement.pools.registry import PoolRegistry
from settlement.routing.external import ExternalAMM
from settlement.routing.router import Router

logger = structlog.get_logger()


@dataclass
class Deployment:
    """All components of one deployment."""

    journal: Journal
    events: EventLog
    ledger: AssetLedger
    controller: SingleController
    registry: PoolRegistry
    router: Router


def deploy(
    controller: str,
    fee_recipient: str,
    external_amm: ExternalAMM,
    config: DeploymentConfig | None = None,
    ledger: AssetLedger | None = None,
    journal: Journal | None = None,
) -> Deployment:
    """Create and wire a deployment.

    Args:
        controller: Identity allowed to change fee parameters
        fee_recipient: Initial destination of protocol and forwarding fees
        external_amm: Fallback AMM for pairs without an internal pool
        config: Initial parameters (default: DeploymentConfig())
        ledger: Existing asset ledger to settle against. Must share `journal`.
        journal: Existing journal (default: a fresh one with its own event log)

    Returns:
        The wired Deployment
    """
    config = config or DeploymentConfig()
    journal = journal or Journal()
    ledger = ledger or AssetLedger(journal)

    governance = SingleController(journal, controller)
    registry = PoolRegistry(
        journal=journal,
        ledger=ledger,
        controller=governance,
        fee_recipient=fee_recipient,
        fee_bps=config.fee_bps,
        protocol_fee_portion_bps=config.protocol_fee_portion_bps,
        lock_minimum_liquidity=config.lock_minimum_liquidity,
    )
    router = Router(
        journal=journal,
        registry=registry,
        ledger=ledger,
        controller=governance,
        external_amm=external_amm,
        forwarding_fee_bps=config.forwarding_fee_bps,
    )

    logger.info(
        "deployment_created",
        registry=registry.address,
        router=router.address,
        fee_bps=config.fee_bps,
        forwarding_fee_bps=config.forwarding_fee_bps,
        lock_minimum_liquidity=config.lock_minimum_liquidity,
    )
    return Deployment(
        journal=journal,
        events=journal.event_log,
        ledger=ledger,
        controller=governance,
        registry=registry,
        router=router,
    )


def deploy_from_env(controller: str, fee_recipient: str, external_amm: ExternalAMM) -> Deployment:
    """Configure logging and deploy with parameters read from the environment."""
    config = DeploymentConfig.from_env()
    configure_logging(config.log_level)
    return deploy(controller, fee_recipient, external_amm, config=config)
