"""Shared type definitions for API models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from cpamm.constants import FEE_MAX_BASIS_POINTS, IDENTITY_SIZE, U64_MAX


def validate_u64(value: Any) -> int:
    """Validate that a value is a u64 given as int or decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        The value as int

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("U64 must be string or int, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"U64 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"U64 must be string or int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")
    return value


# 64-bit unsigned integer, accepted as int or decimal string
U64 = Annotated[
    int,
    BeforeValidator(validate_u64),
    Field(description="64-bit unsigned integer"),
]

# Fee rate in basis points
BasisPoints = Annotated[int, Field(ge=0, le=FEE_MAX_BASIS_POINTS)]

# 32-byte identity as 0x-prefixed hex (64 hex chars)
Identity = Annotated[str, Field(pattern=rf"^0x[a-fA-F0-9]{{{IDENTITY_SIZE * 2}}}$")]


def identity_to_hex(identity: bytes) -> str:
    return "0x" + identity.hex()


def identity_from_hex(value: str) -> bytes:
    """Parse a 0x-prefixed identity.

    Raises:
        ValueError: If value is not 0x + 64 hex chars
    """
    if not value.startswith("0x"):
        raise ValueError(f"Identity must start with 0x: {value}")
    raw = bytes.fromhex(value[2:])
    if len(raw) != IDENTITY_SIZE:
        raise ValueError(f"Identity must be {IDENTITY_SIZE} bytes, got {len(raw)}")
    return raw
