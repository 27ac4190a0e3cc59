"""Swap routing.

Module structure:
- router.py: Router facade (internal pool or external AMM)
- external.py: ExternalAMM interface and the ABI-encoding adapter
"""

from settlement.routing.external import (
    EncodedRouterAdapter,
    ExternalAMM,
    decode_swap_exact_in,
    encode_swap_exact_in,
)
from settlement.routing.router import Router

__all__ = [
    "EncodedRouterAdapter",
    "ExternalAMM",
    "Router",
    "decode_swap_exact_in",
    "encode_swap_exact_in",
]
