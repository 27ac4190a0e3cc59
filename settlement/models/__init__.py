"""Data models for the settlement core."""

from settlement.models.events import (
    AnyEvent,
    ControllerTransferred,
    Event,
    FeeRecipientUpdated,
    FeeUpdated,
    ForwardingFeeUpdated,
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    ProtocolFeeCollected,
    ProtocolFeePortionUpdated,
    Swap,
)
from settlement.models.types import (
    Address,
    Uint256,
    derive_address,
    is_null_address,
    is_valid_address,
    normalize_address,
)

__all__ = [
    # Types
    "Address",
    "Uint256",
    "derive_address",
    "is_null_address",
    "is_valid_address",
    "normalize_address",
    # Events
    "AnyEvent",
    "Event",
    "PoolCreated",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swap",
    "ProtocolFeeCollected",
    "ForwardingFeeUpdated",
    "FeeUpdated",
    "FeeRecipientUpdated",
    "ProtocolFeePortionUpdated",
    "ControllerTransferred",
]
