"""Pytest configuration and fixtures."""

import pytest
import structlog

from settlement.deployment import Deployment
from settlement.journal import Journal
from settlement.ledger import AssetLedger
from settlement.pools.pool import LiquidityPool
from tests.helpers import FakeV2Router, make_deployment, seed_pool


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog.configure() a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def journal() -> Journal:
    return Journal()


@pytest.fixture
def ledger(journal: Journal) -> AssetLedger:
    return AssetLedger(journal)


@pytest.fixture
def deployment_setup() -> tuple[Deployment, FakeV2Router]:
    """Deployment without the minimum-liquidity lock, plus its fake external router."""
    return make_deployment(lock_minimum_liquidity=False)


@pytest.fixture
def deployment(deployment_setup: tuple[Deployment, FakeV2Router]) -> Deployment:
    return deployment_setup[0]


@pytest.fixture
def external(deployment_setup: tuple[Deployment, FakeV2Router]) -> FakeV2Router:
    return deployment_setup[1]


@pytest.fixture
def locked_deployment() -> Deployment:
    """Deployment with the default configuration (minimum-liquidity lock on)."""
    deployment, _ = make_deployment()
    return deployment


@pytest.fixture
def pool(deployment: Deployment) -> LiquidityPool:
    """TOKEN_LOW/TOKEN_HIGH pool seeded by ALICE with reserves (1_000_000, 2_000_000).

    ALICE holds 1_414_213 shares, the whole supply.
    """
    return seed_pool(deployment, 1_000_000, 2_000_000)
