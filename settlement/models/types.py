"""Shared type definitions for settlement models.

Asset and holder identities are 20-byte addresses written as 0x-prefixed
lowercase hex. Lowercase fixed-width hex sorts the same way as the underlying
160-bit integers, so string comparison gives the canonical pair order.
"""

import hashlib
from typing import Annotated, Any

from eth_abi import encode  # type: ignore[attr-defined]
from pydantic import BeforeValidator, Field

from settlement.constants import NULL_ADDRESS
from settlement.safe_int import UINT256_MAX

# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]


def validate_uint256(value: Any) -> int:
    """Validate that a value is an integer within uint256 range.

    Raises:
        ValueError: If value is not an int, or is negative or above 2**256 - 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Uint256 must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return value


# Token amounts, share counts and basis points
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with 0x prefix.

    Args:
        address: An address (with or without 0x prefix, any case)
        validate: If True, raises ValueError for malformed addresses

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is malformed
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a well-formed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_null_address(address: str) -> bool:
    """True for the null identifier (any case)."""
    return normalize_address(address) == NULL_ADDRESS


def short_address(address: str) -> str:
    """Last 8 hex chars of an address, for log output."""
    return address[-8:]


def derive_address(namespace: str, *addresses: str) -> str:
    """Derive a stable address from a namespace and a list of addresses.

    The addresses are ABI-encoded as an address[] and hashed together with the
    namespace; the low 20 bytes of the digest become the derived address.
    The same inputs always produce the same address.
    """
    encoded = encode(
        ["string", "address[]"],
        [namespace, [bytes.fromhex(normalize_address(a)[2:]) for a in addresses]],
    )
    digest = hashlib.sha256(encoded).digest()
    return "0x" + digest[-20:].hex()
