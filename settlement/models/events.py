"""Pydantic models for notifications emitted by the settlement core.

Events are buffered by the journal while an operation runs and published to
the event log only when the outermost operation commits, so a failed
operation never leaves an entry behind. The log assigns `sequence` at commit.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from settlement.models.types import Address, Uint256


class Event(BaseModel):
    """Common fields of every emitted notification."""

    model_config = ConfigDict(frozen=True)

    # Identity of the emitting component (registry, pool, router, controller)
    contract: Address
    sequence: int | None = None


class PoolCreated(Event):
    kind: Literal["PoolCreated"] = "PoolCreated"
    asset_low: Address
    asset_high: Address
    pool: Address
    pool_index: int


class LiquidityAdded(Event):
    kind: Literal["LiquidityAdded"] = "LiquidityAdded"
    provider: Address
    amount_a: Uint256
    amount_b: Uint256
    shares_minted: Uint256


class LiquidityRemoved(Event):
    kind: Literal["LiquidityRemoved"] = "LiquidityRemoved"
    provider: Address
    amount_a: Uint256
    amount_b: Uint256
    shares_burned: Uint256


class Swap(Event):
    kind: Literal["Swap"] = "Swap"
    caller: Address
    amount_in: Uint256
    amount_out: Uint256
    asset_in: Address


class ProtocolFeeCollected(Event):
    kind: Literal["ProtocolFeeCollected"] = "ProtocolFeeCollected"
    asset: Address
    amount: Uint256
    recipient: Address


class ForwardingFeeUpdated(Event):
    kind: Literal["ForwardingFeeUpdated"] = "ForwardingFeeUpdated"
    old: Uint256
    new: Uint256


class FeeUpdated(Event):
    kind: Literal["FeeUpdated"] = "FeeUpdated"
    old: Uint256
    new: Uint256


class FeeRecipientUpdated(Event):
    kind: Literal["FeeRecipientUpdated"] = "FeeRecipientUpdated"
    old: Address
    new: Address


class ProtocolFeePortionUpdated(Event):
    kind: Literal["ProtocolFeePortionUpdated"] = "ProtocolFeePortionUpdated"
    old: Uint256
    new: Uint256


class ControllerTransferred(Event):
    kind: Literal["ControllerTransferred"] = "ControllerTransferred"
    old: Address
    new: Address


AnyEvent = (
    PoolCreated
    | LiquidityAdded
    | LiquidityRemoved
    | Swap
    | ProtocolFeeCollected
    | ForwardingFeeUpdated
    | FeeUpdated
    | FeeRecipientUpdated
    | ProtocolFeePortionUpdated
    | ControllerTransferred
)
