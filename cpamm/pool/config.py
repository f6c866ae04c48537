"""Engine configuration for pool calculations."""

from dataclasses import dataclass

from cpamm.constants import (
    INVARIANT_TOLERANCE_DENOMINATOR,
    LP_MINT_DECIMALS,
    MIN_LAUNCH_SUPPLY_MULTIPLE,
)
from cpamm.math.fixed_point import Q64x128


@dataclass(frozen=True)
class EngineConfig:
    """Centralized constants for the calculation engine.

    Attributes:
        lp_mint_decimals: Decimals of the LP mint; the locked seed liquidity
            is 10**lp_mint_decimals (default: 5, i.e. 100,000)
        min_launch_supply_multiple: Launch fails unless the initial LP supply
            is at least this multiple of the locked seed (default: 4)
        tolerance_denominator: Relative invariant tolerance is
            1 / tolerance_denominator (default: 100,000, i.e. 1e-5)
    """

    lp_mint_decimals: int = LP_MINT_DECIMALS
    min_launch_supply_multiple: int = MIN_LAUNCH_SUPPLY_MULTIPLE
    tolerance_denominator: int = INVARIANT_TOLERANCE_DENOMINATOR

    @property
    def initial_locked_liquidity(self) -> int:
        return 10**self.lp_mint_decimals

    @property
    def tolerance(self) -> Q64x128:
        """Relative tolerance as a wide fixed-point fraction."""
        return Q64x128.from_ratio(1, self.tolerance_denominator)


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
