"""Liquidity pool for one canonical asset pair.

The pool holds two reserves and a ledger of LP shares. Reserves are a cached
mirror of the pool's live balances in the asset ledger and are resynchronized
at the end of every mutating operation.

Lifecycle:
    Uninitialized --initialize()--> Initialized

Every mutating operation runs inside a journal transaction and behind a
per-pool re-entrancy guard, and follows checks -> effects -> interactions:
inputs are validated and results computed first, the share ledger is updated
second, asset transfers and notifications come last.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from settlement.constants import MINIMUM_LIQUIDITY, NULL_ADDRESS
from settlement.errors import (
    AlreadyInitialized,
    InsufficientAmounts,
    InsufficientBalance,
    InsufficientDeposit,
    InsufficientInputAmount,
    InsufficientLiquidityForOutput,
    InsufficientLiquidityMinted,
    InsufficientOutput,
    InvalidAsset,
    InvalidInputToken,
    InvalidRecipient,
    InvariantViolation,
    NotInitialized,
    ReentrantCall,
    ZeroAddress,
)
from settlement.journal import Journal
from settlement.ledger import AssetTransfer, safe_transfer
from settlement.models.events import (
    LiquidityAdded,
    LiquidityRemoved,
    ProtocolFeeCollected,
    Swap,
)
from settlement.models.types import (
    is_null_address,
    is_valid_address,
    normalize_address,
    short_address,
)
from settlement.pools.math import (
    amounts_for_shares,
    get_amount_in,
    get_amount_out,
    protocol_fee_amount,
    shares_for_deposit,
    shares_for_first_deposit,
)
from settlement.safe_int import S

if TYPE_CHECKING:
    from settlement.pools.registry import FeeConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class Uninitialized:
    """Pool allocated by the registry but not yet bound to its pair."""


@dataclass(frozen=True)
class Initialized:
    """Pool bound to its pair and to the registry's live fee configuration."""

    asset_low: str
    asset_high: str
    fees: FeeConfig


PoolState = Uninitialized | Initialized


class LiquidityPool:
    """Constant product pool with proportional LP shares.

    Token A is always the lower asset of the pair and token B the higher one;
    amounts in liquidity calls and notifications follow that order.
    """

    def __init__(self, address: str, ledger: AssetTransfer, journal: Journal) -> None:
        self.address = normalize_address(address)
        self._ledger = ledger
        self._journal = journal
        self._state: PoolState = Uninitialized()
        self._reserve_low = 0
        self._reserve_high = 0
        self._total_shares = 0
        self._shares: dict[str, int] = {}
        self._entered = False

    def __repr__(self) -> str:
        if isinstance(self._state, Initialized):
            pair = f"{short_address(self._state.asset_low)}/{short_address(self._state.asset_high)}"
        else:
            pair = "uninitialized"
        return f"LiquidityPool({short_address(self.address)}, {pair})"

    # --- Views ---

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return isinstance(self._state, Initialized)

    @property
    def asset_low(self) -> str:
        return self._require_initialized().asset_low

    @property
    def asset_high(self) -> str:
        return self._require_initialized().asset_high

    @property
    def total_shares(self) -> int:
        return self._total_shares

    @property
    def fee_bps(self) -> int:
        """Swap fee currently in force (read live from the registry)."""
        return self._require_initialized().fees.fee_bps

    def get_tokens(self) -> tuple[str, str]:
        state = self._require_initialized()
        return state.asset_low, state.asset_high

    def get_reserves(self) -> tuple[int, int]:
        """Cached reserves as (reserve_low, reserve_high)."""
        return self._reserve_low, self._reserve_high

    def balance_of(self, holder: str) -> int:
        """LP shares held by holder."""
        return self._shares.get(normalize_address(holder), 0)

    def holders(self) -> dict[str, int]:
        """Snapshot of all non-zero share balances."""
        return dict(self._shares)

    def get_token_out(self, asset_in: str) -> str:
        """The opposite asset of the pair.

        Raises:
            InvalidInputToken: If asset_in is not one of the pool's assets
        """
        state = self._require_initialized()
        asset_in_norm = normalize_address(asset_in)
        if asset_in_norm == state.asset_low:
            return state.asset_high
        if asset_in_norm == state.asset_high:
            return state.asset_low
        raise InvalidInputToken(f"Asset {asset_in} not in pool {self.address}")

    def get_reserves_for(self, asset_in: str) -> tuple[int, int]:
        """Cached reserves ordered as (reserve_in, reserve_out)."""
        state = self._require_initialized()
        asset_in_norm = normalize_address(asset_in)
        if asset_in_norm == state.asset_low:
            return self._reserve_low, self._reserve_high
        if asset_in_norm == state.asset_high:
            return self._reserve_high, self._reserve_low
        raise InvalidInputToken(f"Asset {asset_in} not in pool {self.address}")

    def quote_amount_out(self, asset_in: str, amount_in: int) -> int:
        """Output a swap of amount_in would produce at the current reserves."""
        reserve_in, reserve_out = self.get_reserves_for(asset_in)
        if amount_in <= 0 or reserve_in == 0 or reserve_out == 0:
            return 0
        return get_amount_out(amount_in, reserve_in, reserve_out, self.fee_bps)

    def quote_amount_in(self, asset_in: str, amount_out: int) -> int:
        """Input of asset_in needed to receive amount_out at the current reserves.

        Raises:
            InsufficientLiquidityForOutput: If amount_out would drain the output reserve
        """
        reserve_in, reserve_out = self.get_reserves_for(asset_in)
        if amount_out <= 0:
            return 0
        if amount_out >= reserve_out:
            raise InsufficientLiquidityForOutput(
                f"Requested {amount_out} of reserve {reserve_out}"
            )
        return get_amount_in(amount_out, reserve_in, reserve_out, self.fee_bps)

    # --- Lifecycle ---

    def initialize(self, asset_low: str, asset_high: str, fees: FeeConfig) -> None:
        """Bind the pool to its canonical pair. Allowed exactly once.

        Raises:
            AlreadyInitialized: On a second call
            InvalidAsset: If either asset is null or malformed, or the pair is
                not strictly ordered (asset_low < asset_high)
        """
        if isinstance(self._state, Initialized):
            raise AlreadyInitialized(f"Pool {self.address} already initialized")

        low = normalize_address(asset_low)
        high = normalize_address(asset_high)
        for asset in (low, high):
            if not is_valid_address(asset) or is_null_address(asset):
                raise InvalidAsset(f"Invalid pool asset: {asset}")
        if low >= high:
            raise InvalidAsset(f"Pool assets must be distinct and ordered: {low}, {high}")

        with self._journal.atomic():
            previous = self._state
            self._state = Initialized(asset_low=low, asset_high=high, fees=fees)
            self._journal.record(lambda: setattr(self, "_state", previous))

    # --- Mutating operations ---

    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> int:
        """Deposit both assets and mint LP shares to provider.

        The first deposit mints floor(sqrt(amount_a * amount_b)) shares. When
        the minimum-liquidity lock is on, MINIMUM_LIQUIDITY of those are
        credited to the null holder and can never be redeemed. Later deposits
        mint min(amount_a * total / reserve_a, amount_b * total / reserve_b).

        Returns:
            Shares minted to provider

        Raises:
            ZeroAddress: If provider is the null address or malformed
            InsufficientDeposit: If either amount is not positive
            InsufficientLiquidityMinted: If the deposit would mint no shares
            TransferFailed: If provider cannot pay either amount
        """
        provider = _checked_provider(provider)
        with self._lock() as state:
            if amount_a <= 0 or amount_b <= 0:
                raise InsufficientDeposit(f"Deposit must be positive: ({amount_a}, {amount_b})")

            locked = 0
            if self._total_shares == 0:
                shares = shares_for_first_deposit(amount_a, amount_b)
                if state.fees.lock_minimum_liquidity:
                    if shares <= MINIMUM_LIQUIDITY:
                        raise InsufficientLiquidityMinted(
                            f"First deposit mints {shares} <= {MINIMUM_LIQUIDITY} locked shares"
                        )
                    locked = MINIMUM_LIQUIDITY
                    shares -= locked
            else:
                shares = shares_for_deposit(
                    amount_a, amount_b, self._reserve_low, self._reserve_high, self._total_shares
                )
            if shares == 0:
                raise InsufficientLiquidityMinted("Deposit too small to mint shares")

            if locked:
                self._mint(NULL_ADDRESS, locked)
            self._mint(provider, shares)

            safe_transfer(self._ledger, state.asset_low, provider, self.address, amount_a)
            safe_transfer(self._ledger, state.asset_high, provider, self.address, amount_b)
            self._sync(state)

            self._journal.emit(
                LiquidityAdded(
                    contract=self.address,
                    provider=provider,
                    amount_a=amount_a,
                    amount_b=amount_b,
                    shares_minted=shares,
                )
            )

        logger.debug(
            "liquidity_added",
            pool=short_address(self.address),
            provider=short_address(provider),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
            locked=locked,
        )
        return shares

    def remove_liquidity(self, provider: str, shares: int) -> tuple[int, int]:
        """Burn shares and pay out the proportional part of both reserves.

        Returns:
            (amount_a, amount_b) paid to provider

        Raises:
            ZeroAddress: If provider is the null address or malformed
            InsufficientBalance: If provider holds fewer than shares
            InsufficientAmounts: If either payout rounds down to zero
        """
        provider = _checked_provider(provider)
        with self._lock() as state:
            balance = self._shares.get(provider, 0)
            if shares < 0 or balance < shares:
                raise InsufficientBalance(f"{provider} holds {balance} shares, needs {shares}")
            if shares == 0:
                raise InsufficientAmounts("Cannot redeem zero shares")

            amount_a, amount_b = amounts_for_shares(
                shares, self._reserve_low, self._reserve_high, self._total_shares
            )
            if amount_a == 0 or amount_b == 0:
                raise InsufficientAmounts(f"Redemption rounds to ({amount_a}, {amount_b})")

            self._burn(provider, shares)

            safe_transfer(self._ledger, state.asset_low, self.address, provider, amount_a)
            safe_transfer(self._ledger, state.asset_high, self.address, provider, amount_b)
            self._sync(state)

            self._journal.emit(
                LiquidityRemoved(
                    contract=self.address,
                    provider=provider,
                    amount_a=amount_a,
                    amount_b=amount_b,
                    shares_burned=shares,
                )
            )

        logger.debug(
            "liquidity_removed",
            pool=short_address(self.address),
            provider=short_address(provider),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return amount_a, amount_b

    def swap(self, sender: str, asset_in: str, amount_in: int, recipient: str) -> int:
        """Swap an input that was already delivered to the pool.

        The caller must move amount_in of asset_in into the pool's balance
        before calling. The pool prices against the input reserve excluding
        that amount, pays the output to recipient, skims the protocol part of
        the fee to the fee recipient and keeps the rest of the fee in reserves.

        Returns:
            Output amount paid to recipient

        Raises:
            InvalidInputToken: If asset_in is not one of the pool's assets
            InsufficientInputAmount: If amount_in is not positive or was not delivered
            InvalidRecipient: If recipient is the null address or malformed
            InsufficientOutput: If the output rounds down to zero
            InsufficientLiquidityForOutput: If the output would drain the reserve
            InvariantViolation: If the reserve product decreased
        """
        sender = normalize_address(sender)
        asset_in = normalize_address(asset_in)
        with self._lock() as state:
            if asset_in not in (state.asset_low, state.asset_high):
                raise InvalidInputToken(f"Asset {asset_in} not in pool {self.address}")
            if amount_in <= 0:
                raise InsufficientInputAmount(f"Input must be positive: {amount_in}")
            if is_null_address(recipient) or not is_valid_address(normalize_address(recipient)):
                raise InvalidRecipient(f"Invalid recipient: {recipient}")
            recipient = normalize_address(recipient)
            asset_out = state.asset_high if asset_in == state.asset_low else state.asset_low

            # The input counts only if it shows up on top of the cached reserve
            cached_in = self._reserve_low if asset_in == state.asset_low else self._reserve_high
            self._sync(state)
            if asset_in == state.asset_low:
                reserve_in_raw, reserve_out = self._reserve_low, self._reserve_high
            else:
                reserve_in_raw, reserve_out = self._reserve_high, self._reserve_low
            if reserve_in_raw - cached_in < amount_in:
                raise InsufficientInputAmount(
                    f"Pool received {reserve_in_raw - cached_in} of {asset_in}, "
                    f"expected at least {amount_in}"
                )
            reserve_in = reserve_in_raw - amount_in

            fee_bps = state.fees.fee_bps
            amount_out = get_amount_out(amount_in, reserve_in, reserve_out, fee_bps)
            if amount_out == 0:
                raise InsufficientOutput(f"Input {amount_in} produces no output")
            if amount_out >= reserve_out:
                raise InsufficientLiquidityForOutput(
                    f"Output {amount_out} would drain reserve {reserve_out}"
                )
            protocol_fee = protocol_fee_amount(
                amount_in, fee_bps, state.fees.protocol_fee_portion_bps
            )
            k_before = S(reserve_in) * S(reserve_out)

            safe_transfer(self._ledger, asset_out, self.address, recipient, amount_out)
            if protocol_fee > 0:
                fee_recipient = state.fees.fee_recipient
                safe_transfer(self._ledger, asset_in, self.address, fee_recipient, protocol_fee)
                self._journal.emit(
                    ProtocolFeeCollected(
                        contract=self.address,
                        asset=asset_in,
                        amount=protocol_fee,
                        recipient=fee_recipient,
                    )
                )
            self._sync(state)

            k_after = S(self._reserve_low) * S(self._reserve_high)
            if k_after < k_before:
                raise InvariantViolation(f"Reserve product fell from {k_before} to {k_after}")

            self._journal.emit(
                Swap(
                    contract=self.address,
                    caller=sender,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    asset_in=asset_in,
                )
            )

        logger.debug(
            "pool_swap",
            pool=short_address(self.address),
            asset_in=short_address(asset_in),
            amount_in=amount_in,
            amount_out=amount_out,
            protocol_fee=protocol_fee,
        )
        return amount_out

    def sync(self) -> tuple[int, int]:
        """Resynchronize cached reserves with live balances (absorbs donations)."""
        with self._lock() as state:
            self._sync(state)
        return self.get_reserves()

    # --- Internals ---

    def _require_initialized(self) -> Initialized:
        if not isinstance(self._state, Initialized):
            raise NotInitialized(f"Pool {self.address} is not initialized")
        return self._state

    @contextmanager
    def _lock(self) -> Iterator[Initialized]:
        """Non-reentrancy guard plus transaction scope for one mutating call."""
        state = self._require_initialized()
        if self._entered:
            raise ReentrantCall(f"Pool {self.address} is already executing an operation")
        self._entered = True
        try:
            with self._journal.atomic():
                yield state
        finally:
            self._entered = False

    def _sync(self, state: Initialized) -> None:
        self._set_reserves(
            self._ledger.balance_of(state.asset_low, self.address),
            self._ledger.balance_of(state.asset_high, self.address),
        )

    def _set_reserves(self, reserve_low: int, reserve_high: int) -> None:
        previous = (self._reserve_low, self._reserve_high)
        self._reserve_low, self._reserve_high = reserve_low, reserve_high
        self._journal.record(lambda: self._restore_reserves(previous))

    def _restore_reserves(self, reserves: tuple[int, int]) -> None:
        self._reserve_low, self._reserve_high = reserves

    def _mint(self, holder: str, shares: int) -> None:
        self._set_share_balance(holder, (S(self._shares.get(holder, 0)) + S(shares)).value)
        self._set_total_shares((S(self._total_shares) + S(shares)).value)

    def _burn(self, holder: str, shares: int) -> None:
        self._set_share_balance(holder, (S(self._shares.get(holder, 0)) - S(shares)).value)
        self._set_total_shares((S(self._total_shares) - S(shares)).value)

    def _set_share_balance(self, holder: str, amount: int) -> None:
        previous = self._shares.get(holder, 0)
        self._write_share_balance(holder, amount)
        self._journal.record(lambda: self._write_share_balance(holder, previous))

    def _write_share_balance(self, holder: str, amount: int) -> None:
        if amount == 0:
            self._shares.pop(holder, None)
        else:
            self._shares[holder] = amount

    def _set_total_shares(self, total: int) -> None:
        previous = self._total_shares
        self._total_shares = total
        self._journal.record(lambda: setattr(self, "_total_shares", previous))


def _checked_provider(provider: str) -> str:
    """Normalized provider, refusing the null holder of the locked shares."""
    provider_norm = normalize_address(provider)
    if is_null_address(provider_norm) or not is_valid_address(provider_norm):
        raise ZeroAddress(f"Invalid liquidity provider: {provider}")
    return provider_norm
