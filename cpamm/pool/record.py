"""Pool record: the persisted state of one constant-product pool."""

from __future__ import annotations

from dataclasses import dataclass, field

from cpamm.constants import EMPTY_IDENTITY
from cpamm.math.fixed_point import Q64x64


@dataclass(frozen=True)
class PoolIdentities:
    """Opaque 32-byte identities of a pool and the accounts it references."""

    pool: bytes = EMPTY_IDENTITY
    config: bytes = EMPTY_IDENTITY
    base_mint: bytes = EMPTY_IDENTITY
    quote_mint: bytes = EMPTY_IDENTITY
    lp_mint: bytes = EMPTY_IDENTITY
    base_vault: bytes = EMPTY_IDENTITY
    quote_vault: bytes = EMPTY_IDENTITY
    locked_lp_vault: bytes = EMPTY_IDENTITY


@dataclass(frozen=True)
class PoolRecord:
    """Snapshot of a pool's state.

    Records are immutable values: the calculation engine reads a record and
    returns a payload, and PoolStateMachine installs a new record built from
    that payload. A record is always exactly one of uninitialized,
    initialized-not-launched or launched.

    Attributes:
        initialized: Identities and fee snapshot are set
        launched: First liquidity was provided; one-way transition
        base_reserve: Base tokens held for trading (u64)
        quote_reserve: Quote tokens held for trading (u64)
        lp_supply: Outstanding LP tokens, including the locked seed (u64)
        sqrt_constant_product: Cached sqrt(base_reserve * quote_reserve)
        sqrt_base_quote_ratio: Cached sqrt(base_reserve / quote_reserve)
        initial_locked_liquidity: LP supply permanently held after launch
        protocol_base_fees_to_redeem: Accrued base-side protocol fees
        protocol_quote_fees_to_redeem: Accrued quote-side protocol fees
        providers_fee_rate_bp: Provider fee rate snapshot from the config
        protocol_fee_rate_bp: Protocol fee rate snapshot from the config
        identities: Pool, config, mint and vault identities
    """

    initialized: bool = False
    launched: bool = False
    base_reserve: int = 0
    quote_reserve: int = 0
    lp_supply: int = 0
    sqrt_constant_product: Q64x64 = field(default_factory=Q64x64.zero)
    sqrt_base_quote_ratio: Q64x64 = field(default_factory=Q64x64.zero)
    initial_locked_liquidity: int = 0
    protocol_base_fees_to_redeem: int = 0
    protocol_quote_fees_to_redeem: int = 0
    providers_fee_rate_bp: int = 0
    protocol_fee_rate_bp: int = 0
    identities: PoolIdentities = field(default_factory=PoolIdentities)

    @property
    def pool_id(self) -> bytes:
        return self.identities.pool

    @property
    def withdrawable_lp_supply(self) -> int:
        """LP supply excluding the permanently locked seed."""
        return max(0, self.lp_supply - self.initial_locked_liquidity)
