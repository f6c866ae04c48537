"""Binary fixed-point (Qm.n) arithmetic for pool invariants.

Values are unsigned integers with an implicit binary point: a Qm.n number
stores `value` and represents value / 2^n. Two layouts are provided:

- Q64x64: 64 integer bits, 64 fractional bits (128-bit backing). This is
  the standard precision used for the cached square roots persisted in a
  pool record.
- Q64x128: 64 integer bits, 128 fractional bits (192-bit backing). This is
  the wide precision used for share and tolerance chains; it is never
  persisted.

Multiplication computes (a * b) >> n and division computes (a << n) // b on
a double-width intermediate before truncating back, so neither loses
precision nor overflows before the final bound check. The checked_*
methods return None on overflow, underflow or a zero divisor. The operators
raise a FixedPointError subclass instead.

Square roots are found by bisection on integers; floating point is never
used.
"""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar, TypeVar

__all__ = [
    # Classes
    "FixedPoint",
    "Q64x64",
    "Q64x128",
    # Errors
    "FixedPointError",
    "FixedPointOverflow",
    "FixedPointUnderflow",
    "FixedPointDivisionByZero",
    # Functions
    "isqrt_bisect",
    # Constants
    "ROUND_WINDOW_BITS",
]

# =============================================================================
# Constants
# =============================================================================

# to_int_round() snaps up when the fractional remainder is within
# 2^-ROUND_WINDOW_BITS of the next integer
ROUND_WINDOW_BITS = 56


# =============================================================================
# Error classes
# =============================================================================


class FixedPointError(ArithmeticError):
    """Base error for fixed-point operations."""

    pass


class FixedPointOverflow(FixedPointError):
    """Result exceeds the backing width of the fixed-point type."""

    pass


class FixedPointUnderflow(FixedPointError):
    """Result would be negative."""

    pass


class FixedPointDivisionByZero(FixedPointError):
    """Division by a zero fixed-point value."""

    pass


# =============================================================================
# Integer square root
# =============================================================================


def isqrt_bisect(target: int) -> int:
    """Floor square root of a non-negative integer by bisection.

    Maintains low^2 <= target < high^2 and halves the interval until the
    bounds are adjacent.

    Args:
        target: Non-negative integer

    Returns:
        The largest integer r with r * r <= target

    Raises:
        ValueError: If target is negative
    """
    if target < 0:
        raise ValueError(f"Square root of negative value: {target}")

    low = 0
    high = 1 << ((target.bit_length() + 1) // 2 + 1)
    while high - low > 1:
        mid = (low + high) >> 1
        if mid * mid <= target:
            low = mid
        else:
            high = mid
    return low


F = TypeVar("F", bound="FixedPoint")
G = TypeVar("G", bound="FixedPoint")


class FixedPoint:
    """Unsigned binary fixed-point number.

    Concrete layouts subclass this and declare INTEGER_BITS, FRACTIONAL_BITS,
    ONE (raw value of 1.0) and MAX (largest raw value). Arithmetic is only
    defined between values of the same layout; use to_precision() to move
    between them.
    """

    INTEGER_BITS: ClassVar[int]
    FRACTIONAL_BITS: ClassVar[int]
    ONE: ClassVar[int]
    MAX: ClassVar[int]

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create from a raw scaled value.

        Raises:
            TypeError: If value is not an int
            FixedPointUnderflow: If value is negative
            FixedPointOverflow: If value exceeds MAX
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{type(self).__name__} requires int, got {type(value).__name__}")
        if value < 0:
            raise FixedPointUnderflow(f"{type(self).__name__} cannot be negative: {value}")
        if value > self.MAX:
            raise FixedPointOverflow(f"{type(self).__name__} raw value exceeds {self.MAX}: {value}")
        self.value = value

    # --- Construction ---

    @classmethod
    def from_bits(cls: type[F], raw: int) -> F:
        """Create from a raw scaled value (alias of the constructor)."""
        return cls(raw)

    @classmethod
    def from_int(cls: type[F], n: int) -> F:
        """Create from an integer (will be scaled by 2^FRACTIONAL_BITS)."""
        return cls(n << cls.FRACTIONAL_BITS)

    @classmethod
    def from_ratio(cls: type[F], numerator: int, denominator: int) -> F:
        """Create numerator / denominator, rounded down.

        Raises:
            FixedPointDivisionByZero: If denominator is zero
        """
        if denominator == 0:
            raise FixedPointDivisionByZero(f"from_ratio({numerator}, 0)")
        return cls((numerator << cls.FRACTIONAL_BITS) // denominator)

    @classmethod
    def zero(cls: type[F]) -> F:
        return cls(0)

    @classmethod
    def one(cls: type[F]) -> F:
        return cls(cls.ONE)

    @classmethod
    def sqrt_of_int(cls: type[F], n: int) -> F:
        """Square root of a plain integer as a fixed-point value.

        The raw result is isqrt(n * 2^(2 * FRACTIONAL_BITS)), so every
        fractional bit of the root is exact (rounded down).

        Args:
            n: Non-negative integer, typically the u128 product of two reserves

        Raises:
            ValueError: If n is negative
            FixedPointOverflow: If the root does not fit in INTEGER_BITS
        """
        return cls(isqrt_bisect(n << (2 * cls.FRACTIONAL_BITS)))

    # --- Inspection and conversion ---

    def is_zero(self) -> bool:
        return self.value == 0

    def is_one(self) -> bool:
        return self.value == self.ONE

    def split(self) -> tuple[int, int]:
        """Return (integer part, raw fractional part)."""
        return self.value >> self.FRACTIONAL_BITS, self.value & (self.ONE - 1)

    def to_int(self) -> int:
        """Truncate to an integer (rounds down)."""
        return self.value >> self.FRACTIONAL_BITS

    def to_int_round(self) -> int:
        """Convert to an integer, absorbing truncation error.

        Binary fractions such as 1/3 cannot be represented exactly, so a
        chain like (3 * (1/3)) lands just below 1. A fractional remainder
        within 2^-ROUND_WINDOW_BITS of the next integer rounds up to it;
        anything else rounds down.
        """
        integer, fraction = self.split()
        if fraction >= self.ONE - (self.ONE >> ROUND_WINDOW_BITS):
            return integer + 1
        return integer

    def to_precision(self, target: type[G]) -> G:
        """Convert to another fixed-point layout.

        Widening is exact. Narrowing drops the extra fractional bits
        (rounds down).

        Raises:
            FixedPointOverflow: If the value does not fit the target layout
        """
        shift = target.FRACTIONAL_BITS - self.FRACTIONAL_BITS
        if shift >= 0:
            return target(self.value << shift)
        return target(self.value >> -shift)

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(self.value) / Decimal(self.ONE)

    # --- Checked arithmetic ---

    def checked_add(self: F, other: F) -> F | None:
        """Add, returning None on overflow."""
        raw = self.value + self._raw(other)
        if raw > self.MAX:
            return None
        return type(self)(raw)

    def checked_sub(self: F, other: F) -> F | None:
        """Subtract, returning None on underflow."""
        raw = self.value - self._raw(other)
        if raw < 0:
            return None
        return type(self)(raw)

    def checked_mul(self: F, other: F) -> F | None:
        """Multiply with floor rounding: (a * b) >> FRACTIONAL_BITS.

        Returns None if the product exceeds MAX.
        """
        raw = (self.value * self._raw(other)) >> self.FRACTIONAL_BITS
        if raw > self.MAX:
            return None
        return type(self)(raw)

    def checked_div(self: F, other: F) -> F | None:
        """Divide with floor rounding: (a << FRACTIONAL_BITS) // b.

        Returns None if other is zero or the quotient exceeds MAX.
        """
        divisor = self._raw(other)
        if divisor == 0:
            return None
        raw = (self.value << self.FRACTIONAL_BITS) // divisor
        if raw > self.MAX:
            return None
        return type(self)(raw)

    def checked_div_sqrt(self: F, other: F) -> F | None:
        """Square root of self / other.

        Returns ONE exactly when the operands are equal, and None if other
        is zero or the quotient overflows.
        """
        if other.is_zero():
            return None
        if self == other:
            return self.one()
        quotient = self.checked_div(other)
        if quotient is None:
            return None
        return quotient.sqrt()

    # --- Saturating arithmetic ---

    def saturating_add(self: F, other: F) -> F:
        return type(self)(min(self.MAX, self.value + self._raw(other)))

    def saturating_sub(self: F, other: F) -> F:
        """Subtract, clamping to zero."""
        return type(self)(max(0, self.value - self._raw(other)))

    def saturating_mul(self: F, other: F) -> F:
        """Multiply, clamping to MAX on overflow."""
        raw = (self.value * self._raw(other)) >> self.FRACTIONAL_BITS
        return type(self)(min(self.MAX, raw))

    def saturating_checked_div(self: F, other: F) -> F | None:
        """Divide, clamping to MAX on overflow.

        Returns None only if other is zero.
        """
        divisor = self._raw(other)
        if divisor == 0:
            return None
        raw = (self.value << self.FRACTIONAL_BITS) // divisor
        return type(self)(min(self.MAX, raw))

    def abs_diff(self: F, other: F) -> F:
        return type(self)(abs(self.value - self._raw(other)))

    # --- Roots and squares ---

    def sqrt(self: F) -> F:
        """Square root: isqrt(value * 2^FRACTIONAL_BITS), rounded down."""
        return type(self)(isqrt_bisect(self.value << self.FRACTIONAL_BITS))

    def square(self: F) -> F:
        """self * self.

        Raises:
            FixedPointOverflow: If the square exceeds MAX
        """
        return self * self

    def square_as_int(self) -> int:
        """Square as a plain integer, rounded half up.

        Used to recover an integer constant product from its cached root:
        truncation in the root makes the exact square land just below the
        original integer, so rounding (not flooring) restores it.
        """
        shift = 2 * self.FRACTIONAL_BITS
        return (self.value * self.value + (1 << (shift - 1))) >> shift

    # --- Operators (raise instead of returning None) ---

    def __add__(self: F, other: object) -> F:
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.checked_add(other)
        if result is None:
            raise FixedPointOverflow(f"Overflow: {self!r} + {other!r}")
        return result

    def __sub__(self: F, other: object) -> F:
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.checked_sub(other)
        if result is None:
            raise FixedPointUnderflow(f"Underflow: {self!r} - {other!r}")
        return result

    def __mul__(self: F, other: object) -> F:
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.checked_mul(other)
        if result is None:
            raise FixedPointOverflow(f"Overflow: {self!r} * {other!r}")
        return result

    def __truediv__(self: F, other: object) -> F:
        if not isinstance(other, type(self)):
            return NotImplemented
        if other.is_zero():
            raise FixedPointDivisionByZero(f"Division by zero: {self!r} / 0")
        result = self.checked_div(other)
        if result is None:
            raise FixedPointOverflow(f"Overflow: {self!r} / {other!r}")
        return result

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())

    def _raw(self, other: FixedPoint) -> int:
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__}; "
                "convert with to_precision() first"
            )
        return other.value


class Q64x64(FixedPoint):
    """Standard precision: 64 integer bits, 64 fractional bits."""

    INTEGER_BITS: ClassVar[int] = 64
    FRACTIONAL_BITS: ClassVar[int] = 64
    ONE: ClassVar[int] = 1 << 64
    MAX: ClassVar[int] = (1 << 128) - 1

    __slots__ = ()


class Q64x128(FixedPoint):
    """Wide intermediate precision: 64 integer bits, 128 fractional bits."""

    INTEGER_BITS: ClassVar[int] = 64
    FRACTIONAL_BITS: ClassVar[int] = 128
    ONE: ClassVar[int] = 1 << 128
    MAX: ClassVar[int] = (1 << 192) - 1

    __slots__ = ()
