"""Protocol constants for the settlement core.

Centralizes fee ceilings, defaults and well-known identities.
"""

# Basis-point denominator (10000 bps = 100%)
BPS_DENOMINATOR = 10_000

# Swap fee ceiling and default (30 bps = 0.3%)
MAX_FEE_BPS = 500
DEFAULT_FEE_BPS = 30

# Share of the swap fee routed to the fee recipient (0 = everything stays with LPs)
MAX_PROTOCOL_FEE_PORTION_BPS = BPS_DENOMINATOR
DEFAULT_PROTOCOL_FEE_PORTION_BPS = 0

# Router fee charged when a trade is forwarded to the external AMM
MAX_FORWARDING_FEE_BPS = 200
DEFAULT_FORWARDING_FEE_BPS = 50

# Shares permanently credited to the null holder on the first deposit
MINIMUM_LIQUIDITY = 1_000

# The null identifier (never a valid asset, recipient or controller)
NULL_ADDRESS = "0x" + "00" * 20

# swapExactTokensForTokens(uint256,uint256,address[],address,uint256)
SWAP_EXACT_TOKENS_SELECTOR = "0x38ed1739"
