"""Invariant and slippage guards.

Integer rounding in provide/withdraw/swap makes an exactly
invariant-preserving result generally unrepresentable, so candidate
states are accepted within a small relative tolerance band instead:

    |new - old| <= old * tolerance

Violations always abort the operation; nothing is clamped.
"""

from __future__ import annotations

import structlog

from cpamm.errors import (
    BaseQuoteRatioCalculationFailed,
    ConstantProductCalculationFailed,
    ConstantProductToleranceExceeded,
    LiquidityRatioToleranceExceeded,
    SwapResultIsZero,
    SwapSlippageExceeded,
)
from cpamm.math.fixed_point import Q64x64, Q64x128
from cpamm.pool.config import DEFAULT_ENGINE_CONFIG
from cpamm.pool.curve import sqrt_base_quote_ratio, sqrt_constant_product

logger = structlog.get_logger()


class InvariantGuard:
    """Relative-tolerance checks on the cached square roots."""

    def __init__(self, tolerance: Q64x128 | None = None) -> None:
        """Create a guard.

        Args:
            tolerance: Relative tolerance as a wide fixed-point fraction.
                Defaults to the engine default (1e-5).
        """
        self.tolerance = tolerance if tolerance is not None else DEFAULT_ENGINE_CONFIG.tolerance

    def within_tolerance(self, old: Q64x64, new: Q64x64) -> bool:
        """True if |new - old| <= old * tolerance."""
        old_wide = old.to_precision(Q64x128)
        allowed = old_wide.saturating_mul(self.tolerance)
        difference = old_wide.abs_diff(new.to_precision(Q64x128))
        return difference <= allowed

    def validate_constant_product(
        self,
        old_sqrt_constant_product: Q64x64,
        new_base_reserve: int,
        new_quote_reserve: int,
    ) -> Q64x64:
        """Check that sqrt(new_base * new_quote) stays within tolerance.

        Returns:
            The new sqrt constant product

        Raises:
            ConstantProductCalculationFailed: If the new product is zero
            ConstantProductToleranceExceeded: If the deviation is too large
        """
        new_sqrt_cp = sqrt_constant_product(new_base_reserve, new_quote_reserve)
        if new_sqrt_cp is None:
            raise ConstantProductCalculationFailed(
                f"Constant product of {new_base_reserve} x {new_quote_reserve} is zero"
            )
        if not self.within_tolerance(old_sqrt_constant_product, new_sqrt_cp):
            logger.debug(
                "constant_product_tolerance_exceeded",
                old=str(old_sqrt_constant_product),
                new=str(new_sqrt_cp),
            )
            raise ConstantProductToleranceExceeded(
                f"sqrt constant product moved from {old_sqrt_constant_product} to {new_sqrt_cp}"
            )
        return new_sqrt_cp

    def validate_ratio(
        self,
        old_sqrt_base_quote_ratio: Q64x64,
        new_base_reserve: int,
        new_quote_reserve: int,
    ) -> Q64x64:
        """Check that sqrt(new_base / new_quote) stays within tolerance.

        Returns:
            The new sqrt base/quote ratio

        Raises:
            BaseQuoteRatioCalculationFailed: If either reserve is zero
            LiquidityRatioToleranceExceeded: If the deviation is too large
        """
        new_sqrt_ratio = sqrt_base_quote_ratio(new_base_reserve, new_quote_reserve)
        if new_sqrt_ratio is None:
            raise BaseQuoteRatioCalculationFailed(
                f"Ratio of {new_base_reserve} / {new_quote_reserve} cannot be computed"
            )
        if not self.within_tolerance(old_sqrt_base_quote_ratio, new_sqrt_ratio):
            logger.debug(
                "liquidity_ratio_tolerance_exceeded",
                old=str(old_sqrt_base_quote_ratio),
                new=str(new_sqrt_ratio),
            )
            raise LiquidityRatioToleranceExceeded(
                f"sqrt base/quote ratio moved from {old_sqrt_base_quote_ratio} to {new_sqrt_ratio}"
            )
        return new_sqrt_ratio


def check_swap_result(result: int, estimated_result: int, allowed_slippage: int) -> None:
    """Validate a swap output against the caller's estimate.

    Raises:
        SwapResultIsZero: If result is zero or negative
        SwapSlippageExceeded: If |result - estimated_result| > allowed_slippage
    """
    if result <= 0:
        raise SwapResultIsZero(f"Swap result is {result}")
    if abs(result - estimated_result) > allowed_slippage:
        raise SwapSlippageExceeded(
            f"Swap result {result} differs from estimate {estimated_result} "
            f"by more than {allowed_slippage}"
        )
