"""Binary layout of a persisted pool record.

Fields are written little-endian in a fixed order:

    offset  size  field
    0       1     initialized (0 or 1)
    1       1     launched (0 or 1)
    2       8     base_reserve (u64)
    10      8     quote_reserve (u64)
    18      8     lp_supply (u64)
    26      16    sqrt_constant_product (Q64x64 raw, u128)
    42      16    sqrt_base_quote_ratio (Q64x64 raw, u128)
    58      8     initial_locked_liquidity (u64)
    66      8     protocol_base_fees_to_redeem (u64)
    74      8     protocol_quote_fees_to_redeem (u64)
    82      2     providers_fee_rate_bp (u16)
    84      2     protocol_fee_rate_bp (u16)
    86      256   identities: pool, config, base_mint, quote_mint, lp_mint,
                  base_vault, quote_vault, locked_lp_vault (32 bytes each)
"""

from __future__ import annotations

import struct
from dataclasses import fields

from cpamm.constants import IDENTITY_SIZE
from cpamm.math.fixed_point import Q64x64
from cpamm.pool.record import PoolIdentities, PoolRecord

__all__ = [
    "LayoutError",
    "POOL_RECORD_SIZE",
    "encode_pool_record",
    "decode_pool_record",
]

_IDENTITY_FIELDS = tuple(f.name for f in fields(PoolIdentities))
_FIXED_POINT_SIZE = 16

_POOL_RECORD_FORMAT = (
    "<BBQQQ"
    f"{_FIXED_POINT_SIZE}s{_FIXED_POINT_SIZE}s"
    "QQQHH" + f"{IDENTITY_SIZE}s" * len(_IDENTITY_FIELDS)
)
_POOL_RECORD_STRUCT = struct.Struct(_POOL_RECORD_FORMAT)

POOL_RECORD_SIZE = _POOL_RECORD_STRUCT.size


class LayoutError(ValueError):
    """Bytes do not describe a valid pool record."""

    pass


def _encode_fixed_point(value: Q64x64) -> bytes:
    return value.value.to_bytes(_FIXED_POINT_SIZE, "little")


def _decode_fixed_point(raw: bytes) -> Q64x64:
    return Q64x64.from_bits(int.from_bytes(raw, "little"))


def _decode_flag(name: str, raw: int) -> bool:
    if raw not in (0, 1):
        raise LayoutError(f"Invalid {name} flag byte: {raw}")
    return raw == 1


def encode_pool_record(record: PoolRecord) -> bytes:
    """Serialize a record to its fixed-width binary layout.

    Raises:
        LayoutError: If a field does not fit its width
    """
    identities = [getattr(record.identities, name) for name in _IDENTITY_FIELDS]
    for name, identity in zip(_IDENTITY_FIELDS, identities, strict=True):
        if len(identity) != IDENTITY_SIZE:
            raise LayoutError(f"Identity {name} must be {IDENTITY_SIZE} bytes, got {len(identity)}")
    try:
        return _POOL_RECORD_STRUCT.pack(
            int(record.initialized),
            int(record.launched),
            record.base_reserve,
            record.quote_reserve,
            record.lp_supply,
            _encode_fixed_point(record.sqrt_constant_product),
            _encode_fixed_point(record.sqrt_base_quote_ratio),
            record.initial_locked_liquidity,
            record.protocol_base_fees_to_redeem,
            record.protocol_quote_fees_to_redeem,
            record.providers_fee_rate_bp,
            record.protocol_fee_rate_bp,
            *identities,
        )
    except struct.error as err:
        raise LayoutError(f"Pool record field out of range: {err}") from err


def decode_pool_record(data: bytes) -> PoolRecord:
    """Deserialize a record from its fixed-width binary layout.

    Raises:
        LayoutError: If the size is wrong, a flag byte is not 0/1, or the
            record is launched without being initialized
    """
    if len(data) != POOL_RECORD_SIZE:
        raise LayoutError(f"Pool record must be {POOL_RECORD_SIZE} bytes, got {len(data)}")

    (
        initialized_raw,
        launched_raw,
        base_reserve,
        quote_reserve,
        lp_supply,
        sqrt_cp_raw,
        sqrt_ratio_raw,
        initial_locked_liquidity,
        protocol_base_fees,
        protocol_quote_fees,
        providers_fee_rate_bp,
        protocol_fee_rate_bp,
        *identities,
    ) = _POOL_RECORD_STRUCT.unpack(data)

    initialized = _decode_flag("initialized", initialized_raw)
    launched = _decode_flag("launched", launched_raw)
    if launched and not initialized:
        raise LayoutError("Pool record is launched but not initialized")

    return PoolRecord(
        initialized=initialized,
        launched=launched,
        base_reserve=base_reserve,
        quote_reserve=quote_reserve,
        lp_supply=lp_supply,
        sqrt_constant_product=_decode_fixed_point(sqrt_cp_raw),
        sqrt_base_quote_ratio=_decode_fixed_point(sqrt_ratio_raw),
        initial_locked_liquidity=initial_locked_liquidity,
        protocol_base_fees_to_redeem=protocol_base_fees,
        protocol_quote_fees_to_redeem=protocol_quote_fees,
        providers_fee_rate_bp=providers_fee_rate_bp,
        protocol_fee_rate_bp=protocol_fee_rate_bp,
        identities=PoolIdentities(**dict(zip(_IDENTITY_FIELDS, identities, strict=True))),
    )
