"""Swap router: internal pool when one exists, external AMM otherwise.

Internal path: the caller's input goes straight into the pool, the pool
swaps it, and the router enforces the caller's minimum output.

Forwarding path: the router skims its forwarding fee to the registry's fee
recipient, moves the rest to the external adapter and forwards the trade
over the two-hop path [asset_in, asset_out]. The deadline is passed through
untouched; only the external AMM interprets it.

Both paths run as one transaction: any failure, including the slippage
check after the pool has already paid out, undoes every transfer.
"""

from __future__ import annotations

import structlog

from settlement.constants import (
    BPS_DENOMINATOR,
    DEFAULT_FORWARDING_FEE_BPS,
    MAX_FORWARDING_FEE_BPS,
)
from settlement.errors import (
    FeeTooHigh,
    InsufficientInputAmount,
    InsufficientOutputAmount,
    InvalidExternalReturn,
    InvalidRecipient,
)
from settlement.governance import Controller, require_controller
from settlement.journal import Journal
from settlement.ledger import AssetTransfer, safe_transfer
from settlement.models.events import ForwardingFeeUpdated
from settlement.models.types import (
    derive_address,
    is_null_address,
    is_valid_address,
    normalize_address,
    short_address,
)
from settlement.pools.registry import PoolRegistry, canonical_pair
from settlement.routing.external import ExternalAMM
from settlement.safe_int import S, to_uint256

logger = structlog.get_logger()


class Router:
    """Routes single swaps to an internal pool or the external AMM.

    Args:
        journal: Transaction journal shared with the registry and ledger
        registry: Pool registry used for lookups and the fee recipient
        ledger: Asset transfer primitive
        controller: Authorization for set_forwarding_fee
        external_amm: Fallback AMM for pairs without an internal pool
        forwarding_fee_bps: Initial forwarding fee (default 50 bps)
        address: Router identity; derived when omitted
    """

    def __init__(
        self,
        journal: Journal,
        registry: PoolRegistry,
        ledger: AssetTransfer,
        controller: Controller,
        external_amm: ExternalAMM,
        forwarding_fee_bps: int = DEFAULT_FORWARDING_FEE_BPS,
        address: str | None = None,
    ) -> None:
        _check_forwarding_fee(forwarding_fee_bps)
        self._journal = journal
        self._registry = registry
        self._ledger = ledger
        self._controller = controller
        self.external_amm = external_amm
        self._forwarding_fee_bps = forwarding_fee_bps
        self.address = normalize_address(
            address or derive_address("settlement.router", registry.address)
        )

    @property
    def registry(self) -> PoolRegistry:
        return self._registry

    @property
    def forwarding_fee_bps(self) -> int:
        return self._forwarding_fee_bps

    def forwarding_fee_for(self, amount_in: int) -> int:
        """Fee skimmed from amount_in on the forwarding path (floor)."""
        return (S(amount_in) * S(self._forwarding_fee_bps) // S(BPS_DENOMINATOR)).value

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> int | None:
        """Expected internal-pool output, or None when the trade would be forwarded."""
        pool = self._registry.lookup_pool(asset_in, asset_out)
        if pool is None:
            return None
        return pool.quote_amount_out(asset_in, amount_in)

    def swap(
        self,
        caller: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        recipient: str,
        deadline: int,
    ) -> int:
        """Swap an exact input for as much output as possible.

        Args:
            caller: Identity paying amount_in
            asset_in: Asset sold
            asset_out: Asset bought
            amount_in: Exact input amount
            min_amount_out: Slippage floor on the output
            recipient: Identity receiving the output
            deadline: Opaque deadline forwarded to the external AMM

        Returns:
            Output amount received by recipient

        Raises:
            PairInvalid: If the assets are equal, null or malformed
            InsufficientInputAmount: If amount_in is not positive
            InvalidRecipient: If recipient is the null address or malformed
            InsufficientOutputAmount: If the internal pool pays less than min_amount_out
            InvalidExternalReturn: If the external AMM returns fewer than two amounts
            TransferFailed: If the caller cannot pay
        """
        canonical_pair(asset_in, asset_out)
        if amount_in <= 0:
            raise InsufficientInputAmount(f"Input must be positive: {amount_in}")
        if is_null_address(recipient) or not is_valid_address(normalize_address(recipient)):
            raise InvalidRecipient(f"Invalid recipient: {recipient}")
        to_uint256(min_amount_out)

        caller = normalize_address(caller)
        asset_in = normalize_address(asset_in)
        asset_out = normalize_address(asset_out)
        recipient = normalize_address(recipient)

        pool = self._registry.lookup_pool(asset_in, asset_out)
        with self._journal.atomic():
            if pool is not None:
                safe_transfer(self._ledger, asset_in, caller, pool.address, amount_in)
                amount_out = pool.swap(caller, asset_in, amount_in, recipient)
                if amount_out < min_amount_out:
                    raise InsufficientOutputAmount(
                        f"Output {amount_out} below minimum {min_amount_out}"
                    )
                route = "internal"
            else:
                amount_out = self._forward(
                    caller, asset_in, asset_out, amount_in, min_amount_out, recipient, deadline
                )
                route = "external"

        logger.info(
            "swap_routed",
            route=route,
            caller=short_address(caller),
            asset_in=short_address(asset_in),
            asset_out=short_address(asset_out),
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return amount_out

    def _forward(
        self,
        caller: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        recipient: str,
        deadline: int,
    ) -> int:
        fee_amount = self.forwarding_fee_for(amount_in)
        net_amount = (S(amount_in) - S(fee_amount)).value

        if fee_amount > 0:
            safe_transfer(
                self._ledger, asset_in, caller, self._registry.get_fee_recipient(), fee_amount
            )
        safe_transfer(self._ledger, asset_in, caller, self.external_amm.address, net_amount)

        amounts = self.external_amm.swap_exact_in(
            net_amount, min_amount_out, [asset_in, asset_out], recipient, deadline
        )
        if len(amounts) < 2:
            raise InvalidExternalReturn(f"External AMM returned {len(amounts)} amounts")

        logger.debug(
            "swap_forwarded",
            fee_amount=fee_amount,
            net_amount=net_amount,
            amount_out=amounts[-1],
        )
        return amounts[-1]

    def set_forwarding_fee(self, caller: str, fee_bps: int) -> None:
        """Set the forwarding fee.

        Raises:
            NotController: If caller is not the controller
            FeeTooHigh: If fee_bps exceeds MAX_FORWARDING_FEE_BPS
        """
        require_controller(self._controller, caller)
        _check_forwarding_fee(fee_bps)
        with self._journal.atomic():
            old = self._forwarding_fee_bps
            self._forwarding_fee_bps = fee_bps
            self._journal.record(lambda: setattr(self, "_forwarding_fee_bps", old))
            self._journal.emit(ForwardingFeeUpdated(contract=self.address, old=old, new=fee_bps))
        logger.info("forwarding_fee_updated", old=old, new=fee_bps)


def _check_forwarding_fee(fee_bps: int) -> None:
    if to_uint256(fee_bps) > MAX_FORWARDING_FEE_BPS:
        raise FeeTooHigh(f"Forwarding fee {fee_bps} bps exceeds {MAX_FORWARDING_FEE_BPS} bps")
