"""Pool registry: one pool per unordered asset pair, plus global fee settings.

The registry canonicalizes every pair to (low, high) order, derives the pool
identity from the canonical pair, and owns the FeeConfig object that every
pool reads live on each swap. Fee changes are controller-gated and take
effect for the next swap of every pool; they never touch past swaps.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from settlement.constants import (
    DEFAULT_FEE_BPS,
    DEFAULT_PROTOCOL_FEE_PORTION_BPS,
    MAX_FEE_BPS,
    MAX_PROTOCOL_FEE_PORTION_BPS,
)
from settlement.errors import (
    FeeTooHigh,
    InvalidPortion,
    PairInvalid,
    PoolExists,
    UnknownPool,
    ZeroAddress,
)
from settlement.governance import Controller, require_controller
from settlement.journal import Journal
from settlement.ledger import AssetTransfer
from settlement.models.events import (
    FeeRecipientUpdated,
    FeeUpdated,
    PoolCreated,
    ProtocolFeePortionUpdated,
)
from settlement.models.types import (
    derive_address,
    is_null_address,
    is_valid_address,
    normalize_address,
    short_address,
)
from settlement.pools.pool import LiquidityPool
from settlement.safe_int import to_uint256

logger = structlog.get_logger()

POOL_NAMESPACE = "settlement.pool"


@dataclass
class FeeConfig:
    """Live fee parameters shared by reference with every pool.

    Only the registry writes these fields, and only through its
    controller-gated setters.

    Attributes:
        fee_bps: Swap fee in basis points (0-500)
        protocol_fee_portion_bps: Part of the swap fee paid to fee_recipient (0-10000)
        fee_recipient: Destination of protocol and forwarding fees
        lock_minimum_liquidity: Lock MINIMUM_LIQUIDITY shares on the first deposit
    """

    fee_bps: int
    protocol_fee_portion_bps: int
    fee_recipient: str
    lock_minimum_liquidity: bool = True


def canonical_pair(asset_a: str, asset_b: str) -> tuple[str, str]:
    """Order a pair as (low, high).

    Raises:
        PairInvalid: If the assets are equal, null or malformed
    """
    a = normalize_address(asset_a)
    b = normalize_address(asset_b)
    for asset in (a, b):
        if not is_valid_address(asset) or is_null_address(asset):
            raise PairInvalid(f"Invalid asset: {asset}")
    if a == b:
        raise PairInvalid(f"Pair assets must differ: {a}")
    return (a, b) if a < b else (b, a)


def pool_address_for(asset_a: str, asset_b: str) -> str:
    """Stable pool identity for a pair (either order gives the same address)."""
    return derive_address(POOL_NAMESPACE, *canonical_pair(asset_a, asset_b))


class PoolRegistry:
    """Canonical map from asset pair to liquidity pool."""

    def __init__(
        self,
        journal: Journal,
        ledger: AssetTransfer,
        controller: Controller,
        fee_recipient: str,
        fee_bps: int = DEFAULT_FEE_BPS,
        protocol_fee_portion_bps: int = DEFAULT_PROTOCOL_FEE_PORTION_BPS,
        lock_minimum_liquidity: bool = True,
        address: str | None = None,
    ) -> None:
        """Create an empty registry.

        Raises:
            ZeroAddress: If fee_recipient is the null address
            FeeTooHigh: If fee_bps exceeds MAX_FEE_BPS
            InvalidPortion: If protocol_fee_portion_bps exceeds 10000
        """
        _check_fee_recipient(fee_recipient)
        _check_fee(fee_bps)
        _check_portion(protocol_fee_portion_bps)

        self._journal = journal
        self._ledger = ledger
        self._controller = controller
        self.address = normalize_address(address or derive_address("settlement.registry"))
        self.fees = FeeConfig(
            fee_bps=fee_bps,
            protocol_fee_portion_bps=protocol_fee_portion_bps,
            fee_recipient=normalize_address(fee_recipient),
            lock_minimum_liquidity=lock_minimum_liquidity,
        )
        self._pair_to_pool: dict[tuple[str, str], LiquidityPool] = {}
        self._pools_by_address: dict[str, LiquidityPool] = {}
        self._all_pools: list[LiquidityPool] = []

    # --- Views ---

    @property
    def fee_bps(self) -> int:
        return self.fees.fee_bps

    @property
    def protocol_fee_portion_bps(self) -> int:
        return self.fees.protocol_fee_portion_bps

    def get_fee_recipient(self) -> str:
        return self.fees.fee_recipient

    @property
    def all_pools(self) -> list[LiquidityPool]:
        """Pools in creation order."""
        return list(self._all_pools)

    def all_pools_length(self) -> int:
        return len(self._all_pools)

    def pool_at(self, index: int) -> LiquidityPool:
        """Pool by creation index.

        Raises:
            IndexError: If index is out of range
        """
        if index < 0:
            raise IndexError(f"Pool index must be non-negative: {index}")
        return self._all_pools[index]

    def lookup_pool(self, asset_a: str, asset_b: str) -> LiquidityPool | None:
        """Pool for a pair in either order, or None.

        Malformed, null or equal assets simply have no pool.
        """
        a = normalize_address(asset_a)
        b = normalize_address(asset_b)
        return self._pair_to_pool.get((a, b))

    def get_pool(self, address: str) -> LiquidityPool:
        """Pool by identity.

        Raises:
            UnknownPool: If no pool has this address
        """
        pool = self._pools_by_address.get(normalize_address(address))
        if pool is None:
            raise UnknownPool(f"No pool at {address}")
        return pool

    # --- Pool creation ---

    def create_pool(self, asset_a: str, asset_b: str) -> LiquidityPool:
        """Register a new pool for an unordered pair.

        Returns:
            The new, initialized pool

        Raises:
            PairInvalid: If the assets are equal, null or malformed
            PoolExists: If a pool for this pair already exists (either order)
        """
        low, high = canonical_pair(asset_a, asset_b)
        if (low, high) in self._pair_to_pool:
            raise PoolExists(f"Pool already exists for {low}/{high}")

        with self._journal.atomic():
            pool = LiquidityPool(
                address=derive_address(POOL_NAMESPACE, low, high),
                ledger=self._ledger,
                journal=self._journal,
            )
            pool.initialize(low, high, self.fees)

            self._pair_to_pool[(low, high)] = pool
            self._pair_to_pool[(high, low)] = pool
            self._pools_by_address[pool.address] = pool
            self._all_pools.append(pool)
            self._journal.record(lambda: self._forget_pool(pool, low, high))

            self._journal.emit(
                PoolCreated(
                    contract=self.address,
                    asset_low=low,
                    asset_high=high,
                    pool=pool.address,
                    pool_index=len(self._all_pools) - 1,
                )
            )

        logger.info(
            "pool_created",
            pool=pool.address,
            asset_low=short_address(low),
            asset_high=short_address(high),
            pool_count=len(self._all_pools),
        )
        return pool

    def _forget_pool(self, pool: LiquidityPool, low: str, high: str) -> None:
        del self._pair_to_pool[(low, high)]
        del self._pair_to_pool[(high, low)]
        del self._pools_by_address[pool.address]
        self._all_pools.remove(pool)

    # --- Controller-gated fee parameters ---

    def set_fee(self, caller: str, fee_bps: int) -> None:
        """Set the swap fee for all pools.

        Raises:
            NotController: If caller is not the controller
            FeeTooHigh: If fee_bps exceeds MAX_FEE_BPS
        """
        require_controller(self._controller, caller)
        _check_fee(fee_bps)
        with self._journal.atomic():
            old = self._set_fee_field("fee_bps", fee_bps)
            self._journal.emit(FeeUpdated(contract=self.address, old=old, new=fee_bps))
        logger.info("fee_updated", old=old, new=fee_bps)

    def set_fee_recipient(self, caller: str, fee_recipient: str) -> None:
        """Set the destination of protocol and forwarding fees.

        Raises:
            NotController: If caller is not the controller
            ZeroAddress: If fee_recipient is the null address
        """
        require_controller(self._controller, caller)
        _check_fee_recipient(fee_recipient)
        new = normalize_address(fee_recipient)
        with self._journal.atomic():
            old = self._set_fee_field("fee_recipient", new)
            self._journal.emit(FeeRecipientUpdated(contract=self.address, old=old, new=new))
        logger.info("fee_recipient_updated", old=old, new=new)

    def set_protocol_fee_portion(self, caller: str, portion_bps: int) -> None:
        """Set the part of the swap fee routed to the fee recipient.

        Raises:
            NotController: If caller is not the controller
            InvalidPortion: If portion_bps exceeds 10000
        """
        require_controller(self._controller, caller)
        _check_portion(portion_bps)
        with self._journal.atomic():
            old = self._set_fee_field("protocol_fee_portion_bps", portion_bps)
            self._journal.emit(
                ProtocolFeePortionUpdated(contract=self.address, old=old, new=portion_bps)
            )
        logger.info("protocol_fee_portion_updated", old=old, new=portion_bps)

    def _set_fee_field(self, name: str, value: int | str) -> int | str:
        old = getattr(self.fees, name)
        setattr(self.fees, name, value)
        self._journal.record(lambda: setattr(self.fees, name, old))
        return old


def _check_fee(fee_bps: int) -> None:
    if to_uint256(fee_bps) > MAX_FEE_BPS:
        raise FeeTooHigh(f"Fee {fee_bps} bps exceeds {MAX_FEE_BPS} bps")


def _check_portion(portion_bps: int) -> None:
    if to_uint256(portion_bps) > MAX_PROTOCOL_FEE_PORTION_BPS:
        raise InvalidPortion(
            f"Portion {portion_bps} bps exceeds {MAX_PROTOCOL_FEE_PORTION_BPS} bps"
        )


def _check_fee_recipient(fee_recipient: str) -> None:
    if is_null_address(fee_recipient):
        raise ZeroAddress("Fee recipient cannot be the null address")
