"""Test helpers module for shared test utilities.

- constants: Asset and identity addresses, common amounts
- factories: Deployment factory, the fake external router, pool seeding
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    CONTROLLER,
    DEADLINE,
    EXTERNAL_RESERVE,
    EXTERNAL_ROUTER,
    FEE_RECIPIENT,
    TOKEN_HIGH,
    TOKEN_LOW,
    TOKEN_OTHER,
)
from tests.helpers.factories import FakeV2Router, fund, make_deployment, seed_pool

__all__ = [
    # Constants
    "TOKEN_LOW",
    "TOKEN_HIGH",
    "TOKEN_OTHER",
    "ALICE",
    "BOB",
    "CAROL",
    "CONTROLLER",
    "FEE_RECIPIENT",
    "EXTERNAL_ROUTER",
    "EXTERNAL_RESERVE",
    "DEADLINE",
    # Factories
    "FakeV2Router",
    "make_deployment",
    "fund",
    "seed_pool",
]
