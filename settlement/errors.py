"""Settlement error classes.

Each class is one categorical failure kind. Raising any of them inside an
operation aborts the whole operation: the journal rolls back every ledger,
share and configuration mutation and drops the pending events.
"""


class SettlementError(Exception):
    """Base error for settlement operations."""

    code = "SettlementError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


# --- Registry ---


class PairInvalid(SettlementError):
    """Pair assets are equal, null or malformed."""

    code = "PairInvalid"


class PoolExists(SettlementError):
    """A pool is already registered for this unordered pair."""

    code = "PoolExists"


class UnknownPool(SettlementError):
    """No pool is registered under this identity."""

    code = "UnknownPool"


# --- Governance and fee parameters ---


class NotController(SettlementError):
    """Caller is not the designated controller."""

    code = "NotController"


class FeeTooHigh(SettlementError):
    """Fee exceeds its ceiling (500 bps swap, 200 bps forwarding)."""

    code = "FeeTooHigh"


class InvalidPortion(SettlementError):
    """Protocol fee portion exceeds 10000 bps."""

    code = "InvalidPortion"


class ZeroAddress(SettlementError):
    """The null identifier was supplied where a real one is required."""

    code = "ZeroAddress"


# --- Pool lifecycle ---


class AlreadyInitialized(SettlementError):
    """Pool was already initialized."""

    code = "AlreadyInitialized"


class NotInitialized(SettlementError):
    """Economic operation on a pool that was never initialized."""

    code = "NotInitialized"


class InvalidAsset(SettlementError):
    """Pool assets are null, equal or not in canonical order."""

    code = "InvalidAsset"


class ReentrantCall(SettlementError):
    """A mutating call re-entered a pool whose operation is still in progress."""

    code = "ReentrantCall"


# --- Liquidity ---


class InsufficientDeposit(SettlementError):
    """Both deposit amounts must be positive."""

    code = "InsufficientDeposit"


class InsufficientLiquidityMinted(SettlementError):
    """Deposit would mint zero shares."""

    code = "InsufficientLiquidityMinted"


class InsufficientBalance(SettlementError):
    """Provider holds fewer shares than requested."""

    code = "InsufficientBalance"


class InsufficientAmounts(SettlementError):
    """Redemption would return zero of an asset."""

    code = "InsufficientAmounts"


# --- Swaps ---


class InvalidInputToken(SettlementError):
    """Input asset is not one of the pool's assets."""

    code = "InvalidInputToken"


class InsufficientInputAmount(SettlementError):
    """Input amount is zero or was not delivered to the pool."""

    code = "InsufficientInputAmount"


class InvalidRecipient(SettlementError):
    """Recipient is the null identifier."""

    code = "InvalidRecipient"


class InsufficientOutput(SettlementError):
    """Swap would produce zero output."""

    code = "InsufficientOutput"


class InsufficientLiquidityForOutput(SettlementError):
    """Swap would drain the output reserve."""

    code = "InsufficientLiquidityForOutput"


class InvariantViolation(SettlementError):
    """Reserve product decreased across a swap."""

    code = "InvariantViolation"


# --- Router ---


class InsufficientOutputAmount(SettlementError):
    """Router-level slippage check failed (output below minAmountOut)."""

    code = "InsufficientOutputAmount"


class InvalidExternalReturn(SettlementError):
    """External AMM returned fewer than two amounts."""

    code = "InvalidExternalReturn"


# --- Asset transfer ---


class TransferFailed(SettlementError):
    """The asset transfer primitive signalled failure."""

    code = "TransferFailed"
