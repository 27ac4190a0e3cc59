"""External fallback AMM adapter.

When no internal pool exists for a pair, the router forwards the trade to an
external AMM through the ExternalAMM interface. The router moves the input to
the adapter's address first; the adapter spends it and returns the amounts
array of the executed path (last entry is the realized output).

EncodedRouterAdapter speaks the UniswapV2 Router02 ABI: it encodes a
swapExactTokensForTokens call, hands the calldata to a call executor (an RPC
client, a fork simulator, a test double) and decodes the returned uint256[].
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

import structlog
from eth_abi import decode, encode  # type: ignore[attr-defined]

from settlement.constants import SWAP_EXACT_TOKENS_SELECTOR
from settlement.models.types import is_valid_address, normalize_address, short_address

logger = structlog.get_logger()

# (target address, calldata) -> ABI-encoded return data
CallExecutor = Callable[[str, bytes], bytes]

SWAP_EXACT_TOKENS_ARGS = ["uint256", "uint256", "address[]", "address", "uint256"]


@runtime_checkable
class ExternalAMM(Protocol):
    """Opaque swap service used for pairs without an internal pool."""

    address: str

    def swap_exact_in(
        self,
        amount_in: int,
        min_amount_out: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
    ) -> list[int]: ...


def encode_swap_exact_in(
    amount_in: int,
    min_amount_out: int,
    path: Sequence[str],
    recipient: str,
    deadline: int,
) -> bytes:
    """Encode swapExactTokensForTokens(uint256,uint256,address[],address,uint256).

    Raises:
        ValueError: If any address is invalid
    """
    for i, addr in enumerate(path):
        if not is_valid_address(addr):
            raise ValueError(f"Invalid address in path[{i}]: {addr}")
    if not is_valid_address(recipient):
        raise ValueError(f"Invalid recipient address: {recipient}")

    path_bytes = [bytes.fromhex(addr[2:]) for addr in path]
    recipient_bytes = bytes.fromhex(recipient[2:])
    encoded_args = encode(
        SWAP_EXACT_TOKENS_ARGS,
        [amount_in, min_amount_out, path_bytes, recipient_bytes, deadline],
    )
    return bytes.fromhex(SWAP_EXACT_TOKENS_SELECTOR[2:]) + encoded_args


def decode_swap_exact_in(calldata: bytes) -> tuple[int, int, list[str], str, int]:
    """Inverse of encode_swap_exact_in, with addresses normalized.

    Raises:
        ValueError: If the selector does not match
    """
    selector = bytes.fromhex(SWAP_EXACT_TOKENS_SELECTOR[2:])
    if calldata[:4] != selector:
        raise ValueError(f"Unexpected selector: 0x{calldata[:4].hex()}")
    amount_in, min_out, path, recipient, deadline = decode(SWAP_EXACT_TOKENS_ARGS, calldata[4:])
    return (
        amount_in,
        min_out,
        [normalize_address(a) for a in path],
        normalize_address(recipient),
        deadline,
    )


class EncodedRouterAdapter:
    """ExternalAMM backed by an ABI-speaking router contract."""

    def __init__(self, address: str, execute: CallExecutor) -> None:
        self.address = normalize_address(address, validate=True)
        self._execute = execute

    def swap_exact_in(
        self,
        amount_in: int,
        min_amount_out: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
    ) -> list[int]:
        calldata = encode_swap_exact_in(amount_in, min_amount_out, path, recipient, deadline)
        logger.debug(
            "external_swap_call",
            target=short_address(self.address),
            amount_in=amount_in,
            min_amount_out=min_amount_out,
            hops=len(path) - 1,
        )
        return_data = self._execute(self.address, calldata)
        (amounts,) = decode(["uint256[]"], return_data)
        return list(amounts)
