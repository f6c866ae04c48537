"""Fee handling for the pool core.

This module provides:
- Provider/protocol fee splitting for swaps
- Fee rate validation (sum of rates capped at 10000 bp)
- Fee configs referenced by pools

Usage:
    from cpamm.fees import FeeSplitter

    split = FeeSplitter().split(amount_in, providers_rate_bp=30, protocol_rate_bp=5)
    assert split.gross_amount == amount_in
"""

from cpamm.fees.config import ConfigRegistry, PoolConfig, derive_config_id
from cpamm.fees.splitter import (
    DEFAULT_FEE_SPLITTER,
    FeeSplit,
    FeeSplitter,
    calculate_fee,
    validate_rates,
)

__all__ = [
    # Splitter
    "FeeSplitter",
    "FeeSplit",
    "DEFAULT_FEE_SPLITTER",
    "calculate_fee",
    "validate_rates",
    # Config
    "PoolConfig",
    "ConfigRegistry",
    "derive_config_id",
]
