"""Asset transfer primitive: a journaled multi-asset balance table.

Implements the AssetTransfer collaborator consumed by pools and the router:
`transfer(asset, sender, recipient, amount) -> bool` moves units atomically
and signals failure by returning False, leaving balances untouched.
Callers turn a False into TransferFailed so the whole operation aborts.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import structlog

from settlement.errors import TransferFailed
from settlement.journal import Journal
from settlement.models.types import normalize_address, short_address
from settlement.safe_int import S

logger = structlog.get_logger()

# Called after every successful transfer with (asset, sender, recipient, amount)
TransferHook = Callable[[str, str, str, int], None]


@runtime_checkable
class AssetTransfer(Protocol):
    """Interface of the fungible-asset transfer primitive."""

    def balance_of(self, asset: str, holder: str) -> int: ...

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool: ...


class AssetLedger:
    """In-memory balance table mapping (asset, holder) -> amount.

    Zero balances are removed to keep the table sparse. Every mutation is
    recorded in the journal, so balances roll back with the operation that
    changed them.
    """

    def __init__(self, journal: Journal, on_transfer: TransferHook | None = None) -> None:
        self._journal = journal
        self._balances: dict[tuple[str, str], int] = {}
        self.on_transfer = on_transfer

    def balance_of(self, asset: str, holder: str) -> int:
        """Balance of holder in asset. Returns 0 if not found."""
        return self._balances.get((normalize_address(asset), normalize_address(holder)), 0)

    def total_supply(self, asset: str) -> int:
        """Sum of all balances of one asset."""
        asset_norm = normalize_address(asset)
        return sum(amount for (a, _), amount in self._balances.items() if a == asset_norm)

    def mint(self, asset: str, holder: str, amount: int) -> None:
        """Create new units of an asset (funding accounts for simulations and tests)."""
        with self._journal.atomic():
            key = (normalize_address(asset), normalize_address(holder))
            self._set(key, (S(self._balances.get(key, 0)) + S(amount)).value)

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """Move amount of asset from sender to recipient.

        Returns:
            True on success, False if amount is negative or sender's balance is
            insufficient (balances are left untouched).
        """
        asset_norm = normalize_address(asset)
        sender_key = (asset_norm, normalize_address(sender))
        recipient_key = (asset_norm, normalize_address(recipient))

        available = self._balances.get(sender_key, 0)
        if amount < 0 or amount > available:
            logger.debug(
                "transfer_rejected",
                asset=short_address(asset_norm),
                sender=short_address(sender_key[1]),
                amount=amount,
                available=available,
            )
            return False

        with self._journal.atomic():
            if sender_key != recipient_key:
                self._set(sender_key, available - amount)
                self._set(recipient_key, (S(self._balances.get(recipient_key, 0)) + S(amount)).value)
            if self.on_transfer is not None:
                self.on_transfer(asset_norm, sender_key[1], recipient_key[1], amount)
        return True

    def _set(self, key: tuple[str, str], amount: int) -> None:
        previous = self._balances.get(key, 0)
        self._write(key, amount)
        self._journal.record(lambda: self._write(key, previous))

    def _write(self, key: tuple[str, str], amount: int) -> None:
        if amount == 0:
            self._balances.pop(key, None)
        else:
            self._balances[key] = amount


def safe_transfer(
    ledger: AssetTransfer, asset: str, sender: str, recipient: str, amount: int
) -> None:
    """Transfer or abort: turns a failed transfer into TransferFailed."""
    if not ledger.transfer(asset, sender, recipient, amount):
        raise TransferFailed(
            f"Transfer of {amount} {asset} from {sender} to {recipient} failed"
        )
