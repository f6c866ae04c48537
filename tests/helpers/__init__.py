"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Mint and account identities, common amounts
- factories: Pool record and ledger factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BASE_MINT,
    BOB,
    FEE_AUTHORITY,
    FUNDED_BALANCE,
    LOCKED_LIQUIDITY,
    LP_MINT,
    QUOTE_MINT,
)
from tests.helpers.factories import (
    TEST_CONFIG_ID,
    make_funded_ledger,
    make_identities,
    make_initialized_record,
    make_launched_record,
    sqrt_constant_product_of,
)

__all__ = [
    # Constants
    "BASE_MINT",
    "QUOTE_MINT",
    "LP_MINT",
    "ALICE",
    "BOB",
    "FEE_AUTHORITY",
    "FUNDED_BALANCE",
    "LOCKED_LIQUIDITY",
    # Factories
    "TEST_CONFIG_ID",
    "make_identities",
    "make_initialized_record",
    "make_launched_record",
    "make_funded_ledger",
    "sqrt_constant_product_of",
]
