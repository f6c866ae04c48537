"""cpamm - constant-product AMM pool calculation core."""

__version__ = "0.1.0"

from cpamm.pool import PoolCalculationEngine, PoolRecord, PoolStateMachine, SwapDirection
from cpamm.service import PoolService

__all__ = [
    "PoolCalculationEngine",
    "PoolRecord",
    "PoolStateMachine",
    "PoolService",
    "SwapDirection",
    "__version__",
]
