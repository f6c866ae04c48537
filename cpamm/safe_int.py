"""Integer wrapper for u64 token amounts.

Reserves, LP supply, balances and fee accumulators are u64. Products of
two amounts are allowed to grow past that bound as intermediates; only
the checked_* methods and is_u64() look at it.

    new_reserve = S(reserve).checked_add(amount)
    if new_reserve is None:
        raise ProvideOverflow(...)
"""

from __future__ import annotations

from cpamm.constants import U64_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would go below zero."""

    pass


class SafeInt:
    """Non-negative integer arithmetic that raises instead of wrapping."""

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _unwrap(other)
        return NotImplemented

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        result = self.checked_sub(other)
        if result is None:
            raise Underflow(f"Underflow: {self._value} - {_unwrap(other)}")
        return result

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // divisor)

    def checked_add(self, other: SafeInt | int) -> SafeInt | None:
        """Add, returning None when the sum leaves u64."""
        result = SafeInt(self._value + _unwrap(other))
        return result if result.is_u64() else None

    def checked_sub(self, other: SafeInt | int) -> SafeInt | None:
        """Subtract, returning None when the result would be negative."""
        result = self._value - _unwrap(other)
        return SafeInt(result) if result >= 0 else None

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Divide rounding up, as used for transfer fees.

        Raises:
            DivisionByZero: If other is zero
        """
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // divisor))

    def is_u64(self) -> bool:
        return 0 <= self._value <= U64_MAX


def _unwrap(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


S = SafeInt
