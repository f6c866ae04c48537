"""Pool error classes.

Every failure of a pool operation raises a subclass of PoolError. The
intermediate classes group errors by kind so callers can handle a whole
family at once (e.g. all lifecycle errors) without listing each one.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


# =============================================================================
# Error kinds
# =============================================================================


class InputValidationError(PoolError):
    """Caller-supplied input is rejected before any calculation."""

    pass


class CalculationError(PoolError):
    """Checked arithmetic overflowed, underflowed or divided by zero."""

    pass


class InvariantViolation(PoolError):
    """Candidate state moves an invariant outside the allowed tolerance."""

    pass


class SlippageError(PoolError):
    """Realized result deviates from the caller's estimate."""

    pass


class LifecycleError(PoolError):
    """Operation attempted in the wrong pool state."""

    pass


class SupplySafetyError(PoolError):
    """Mint or burn would overflow or underflow a token supply."""

    pass


class LedgerError(PoolError):
    """Token movement collaborator rejected a transfer."""

    pass


class LookupFailure(PoolError):
    """Referenced pool or config does not exist."""

    pass


# =============================================================================
# Input validation
# =============================================================================


class FeeRateExceeded(InputValidationError):
    """Provider rate + protocol rate exceeds 10000 basis points."""

    pass


class AmountOutOfRange(InputValidationError):
    """Amount is negative or does not fit in u64."""

    pass


class ProvidedBaseLiquidityIsZero(InputValidationError):
    """Base liquidity input is zero."""

    pass


class ProvidedQuoteLiquidityIsZero(InputValidationError):
    """Quote liquidity input is zero."""

    pass


class ProvidedLpTokensIsZero(InputValidationError):
    """LP tokens to withdraw is zero."""

    pass


class SwapAmountIsZero(InputValidationError):
    """Swap input amount is zero."""

    pass


class EstimatedResultIsZero(InputValidationError):
    """Estimated swap result is zero."""

    pass


class LaunchLiquidityTooSmall(InputValidationError):
    """Launch liquidity is below the minimum multiple of the locked seed."""

    pass


class LpTokensIsZero(InputValidationError):
    """Operation would mint zero LP tokens."""

    pass


class ProvidersFeesIsZero(InputValidationError):
    """No protocol fees accrued to collect."""

    pass


class LpTokensLeftSupplyIsZero(InputValidationError):
    """Withdrawal would drain the LP supply to zero."""

    pass


# =============================================================================
# Arithmetic
# =============================================================================


class ProvideOverflow(CalculationError):
    """Reserve or LP supply overflow while providing liquidity."""

    pass


class WithdrawOverflow(CalculationError):
    """Reserve or LP supply underflow while withdrawing liquidity."""

    pass


class SwapOverflow(CalculationError):
    """Reserve or fee accumulator overflow while swapping."""

    pass


class LpTokensCalculationFailed(CalculationError):
    """LP mint amount could not be computed."""

    pass


class AfterswapCalculationFailed(CalculationError):
    """Opposite reserve after a swap could not be computed."""

    pass


class WithdrawLiquidityCalculationFailed(CalculationError):
    """Withdrawal amounts could not be computed or are zero."""

    pass


class BaseQuoteRatioCalculationFailed(CalculationError):
    """Square root of the base/quote ratio could not be computed."""

    pass


class ConstantProductCalculationFailed(CalculationError):
    """Square root of the constant product could not be computed."""

    pass


class SwapResultIsZero(CalculationError):
    """Swap would pay out nothing."""

    pass


# =============================================================================
# Invariant violation
# =============================================================================


class ConstantProductToleranceExceeded(InvariantViolation):
    """New constant product deviates from the old one beyond tolerance."""

    pass


class LiquidityRatioToleranceExceeded(InvariantViolation):
    """New base/quote ratio deviates from the old one beyond tolerance."""

    pass


# =============================================================================
# Slippage
# =============================================================================


class SwapSlippageExceeded(SlippageError):
    """Swap result differs from the estimate by more than allowed."""

    pass


# =============================================================================
# Lifecycle
# =============================================================================


class PoolNotInitialized(LifecycleError):
    """Pool has not been initialized."""

    pass


class PoolAlreadyInitialized(LifecycleError):
    """Pool is already initialized."""

    pass


class PoolNotLaunched(LifecycleError):
    """Pool has not been launched."""

    pass


class PoolAlreadyLaunched(LifecycleError):
    """Pool is already launched."""

    pass


class BaseLiquidityIsZero(LifecycleError):
    """Launched pool has an empty base reserve."""

    pass


class QuoteLiquidityIsZero(LifecycleError):
    """Launched pool has an empty quote reserve."""

    pass


class LpTokensSupplyIsZero(LifecycleError):
    """Launched pool has no LP supply."""

    pass


# =============================================================================
# Mint/supply safety
# =============================================================================


class LiquidityMintOverflow(SupplySafetyError):
    """Minting would overflow the token supply."""

    pass


class LiquidityBurnOverflow(SupplySafetyError):
    """Burning would underflow the token supply."""

    pass


# =============================================================================
# Ledger and lookup
# =============================================================================


class InsufficientBalanceForTransfer(LedgerError):
    """Source account balance is below the transfer or burn amount."""

    pass


class MintTransferFeeCalculationFailed(LedgerError):
    """Transfer fee withheld differs from the quoted fee."""

    pass


class UnknownPool(LookupFailure):
    """No pool with the given id."""

    pass


class UnknownConfig(LookupFailure):
    """No config with the given id."""

    pass
