"""Payloads produced by the calculation engine.

A payload carries every new field value of a pool operation plus the
amounts the caller must transfer, mint or burn. It is produced by one
PoolCalculationEngine method against one record snapshot and consumed
once by the matching PoolStateMachine.apply_* method, after the token
movement has succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cpamm.math.fixed_point import Q64x64
from cpamm.pool.record import PoolIdentities


class SwapDirection(str, Enum):
    """Which reserve receives the swap input."""

    BASE_TO_QUOTE = "base_to_quote"
    QUOTE_TO_BASE = "quote_to_base"

    @property
    def is_base_in(self) -> bool:
        return self is SwapDirection.BASE_TO_QUOTE


@dataclass(frozen=True)
class InitializePayload:
    identities: PoolIdentities
    providers_fee_rate_bp: int
    protocol_fee_rate_bp: int


@dataclass(frozen=True)
class LaunchPayload:
    """New state after launch.

    Attributes:
        launch_liquidity: LP tokens to mint to the launcher
        initial_locked_liquidity: LP tokens to mint to the locked vault
    """

    base_reserve: int
    quote_reserve: int
    lp_supply: int
    initial_locked_liquidity: int
    launch_liquidity: int
    sqrt_constant_product: Q64x64
    sqrt_base_quote_ratio: Q64x64


@dataclass(frozen=True)
class ProvidePayload:
    """New state after providing liquidity.

    Attributes:
        lp_tokens_to_mint: LP tokens to mint to the provider
    """

    base_reserve: int
    quote_reserve: int
    lp_supply: int
    lp_tokens_to_mint: int
    sqrt_constant_product: Q64x64
    sqrt_base_quote_ratio: Q64x64


@dataclass(frozen=True)
class WithdrawPayload:
    """New state after withdrawing liquidity.

    Attributes:
        lp_tokens_to_burn: LP tokens to burn from the withdrawer
        base_withdraw_amount: Base tokens to transfer out of the vault
        quote_withdraw_amount: Quote tokens to transfer out of the vault
    """

    base_reserve: int
    quote_reserve: int
    lp_supply: int
    lp_tokens_to_burn: int
    base_withdraw_amount: int
    quote_withdraw_amount: int
    sqrt_constant_product: Q64x64
    sqrt_base_quote_ratio: Q64x64


@dataclass(frozen=True)
class SwapPayload:
    """New state after a swap.

    Attributes:
        amount_to_withdraw: Output tokens owed to the trader
        provider_fee: Part of the input kept in the reserve for LPs
        protocol_fee: Part of the input added to the fee accumulator
        direction: Swap direction the payload was computed for
    """

    base_reserve: int
    quote_reserve: int
    protocol_base_fees_to_redeem: int
    protocol_quote_fees_to_redeem: int
    amount_to_withdraw: int
    provider_fee: int
    protocol_fee: int
    direction: SwapDirection
    sqrt_constant_product: Q64x64
    sqrt_base_quote_ratio: Q64x64


@dataclass(frozen=True)
class CollectFeesPayload:
    """Protocol fees to transfer to the fee authority.

    Applying this payload resets both accumulators to zero.
    """

    base_fees: int
    quote_fees: int
