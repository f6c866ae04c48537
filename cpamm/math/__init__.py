"""Mathematical primitives for the pool core.

This package provides binary fixed-point arithmetic:
- Q64x64: standard precision for cached square roots
- Q64x128: wide precision for intermediate share and tolerance chains
"""

from cpamm.math.fixed_point import (
    FixedPoint,
    FixedPointDivisionByZero,
    FixedPointError,
    FixedPointOverflow,
    FixedPointUnderflow,
    Q64x64,
    Q64x128,
    isqrt_bisect,
)

__all__ = [
    "FixedPoint",
    "Q64x64",
    "Q64x128",
    "FixedPointError",
    "FixedPointOverflow",
    "FixedPointUnderflow",
    "FixedPointDivisionByZero",
    "isqrt_bisect",
]
