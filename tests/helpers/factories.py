"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_launched_record

    record = make_launched_record(4_000_000, 1_000_000, lp_supply=2_000_000)
"""

from cpamm.ledger.memory import InMemoryTokenLedger
from cpamm.math.fixed_point import Q64x64
from cpamm.pool.curve import sqrt_base_quote_ratio, sqrt_constant_product
from cpamm.pool.record import PoolIdentities, PoolRecord
from cpamm.service import derive_pool_identities
from tests.helpers.constants import (
    ALICE,
    BASE_MINT,
    BOB,
    FUNDED_BALANCE,
    LOCKED_LIQUIDITY,
    LP_MINT,
    QUOTE_MINT,
)

TEST_CONFIG_ID = bytes([0xC0]) * 32


def make_identities() -> PoolIdentities:
    """Identities of a pool over the test mints."""
    return derive_pool_identities(TEST_CONFIG_ID, BASE_MINT, QUOTE_MINT, LP_MINT)


def make_initialized_record(
    providers_fee_rate_bp: int = 0,
    protocol_fee_rate_bp: int = 0,
) -> PoolRecord:
    """Create an initialized, not launched record."""
    return PoolRecord(
        initialized=True,
        providers_fee_rate_bp=providers_fee_rate_bp,
        protocol_fee_rate_bp=protocol_fee_rate_bp,
        identities=make_identities(),
    )


def make_launched_record(
    base_reserve: int,
    quote_reserve: int,
    lp_supply: int,
    sqrt_constant_product: Q64x64 | None = None,
    sqrt_base_quote_ratio_value: Q64x64 | None = None,
    protocol_base_fees_to_redeem: int = 0,
    protocol_quote_fees_to_redeem: int = 0,
    providers_fee_rate_bp: int = 0,
    protocol_fee_rate_bp: int = 0,
) -> PoolRecord:
    """Create a launched record.

    Caches default to the values computed from the reserves; pass them
    explicitly (e.g. Q64x64.from_int(...)) to pin exact values.

    Args:
        base_reserve: Base reserve
        quote_reserve: Quote reserve
        lp_supply: Total LP supply including the locked seed
        sqrt_constant_product: Cached sqrt(base * quote) (default: computed)
        sqrt_base_quote_ratio_value: Cached sqrt(base / quote) (default: computed)
        protocol_base_fees_to_redeem: Accrued base protocol fees (default: 0)
        protocol_quote_fees_to_redeem: Accrued quote protocol fees (default: 0)
        providers_fee_rate_bp: Provider fee rate snapshot (default: 0)
        protocol_fee_rate_bp: Protocol fee rate snapshot (default: 0)

    Returns:
        PoolRecord ready for provide/withdraw/swap/collect_fees
    """
    if sqrt_constant_product is None:
        sqrt_constant_product = sqrt_constant_product_of(base_reserve, quote_reserve)
    if sqrt_base_quote_ratio_value is None:
        sqrt_base_quote_ratio_value = sqrt_base_quote_ratio(base_reserve, quote_reserve)

    return PoolRecord(
        initialized=True,
        launched=True,
        base_reserve=base_reserve,
        quote_reserve=quote_reserve,
        lp_supply=lp_supply,
        sqrt_constant_product=sqrt_constant_product,
        sqrt_base_quote_ratio=sqrt_base_quote_ratio_value,
        initial_locked_liquidity=LOCKED_LIQUIDITY,
        protocol_base_fees_to_redeem=protocol_base_fees_to_redeem,
        protocol_quote_fees_to_redeem=protocol_quote_fees_to_redeem,
        providers_fee_rate_bp=providers_fee_rate_bp,
        protocol_fee_rate_bp=protocol_fee_rate_bp,
        identities=make_identities(),
    )


def sqrt_constant_product_of(base_reserve: int, quote_reserve: int) -> Q64x64:
    result = sqrt_constant_product(base_reserve, quote_reserve)
    assert result is not None
    return result


def make_funded_ledger(accounts: tuple[bytes, ...] = (ALICE, BOB)) -> InMemoryTokenLedger:
    """Create a ledger where each account holds FUNDED_BALANCE of both test mints."""
    ledger = InMemoryTokenLedger()
    for account in accounts:
        ledger.mint_to(BASE_MINT, account, FUNDED_BALANCE)
        ledger.mint_to(QUOTE_MINT, account, FUNDED_BALANCE)
    return ledger


__all__ = [
    "TEST_CONFIG_ID",
    "make_identities",
    "make_initialized_record",
    "make_launched_record",
    "make_funded_ledger",
    "sqrt_constant_product_of",
]
