"""Pydantic models for pool API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cpamm.fees.config import PoolConfig
from cpamm.models.types import U64, BasisPoints, Identity, identity_to_hex
from cpamm.pool.payloads import SwapDirection
from cpamm.pool.record import PoolRecord

# =============================================================================
# Requests
# =============================================================================


class CreateConfigRequest(BaseModel):
    """Create a fee config."""

    fee_authority: Identity = Field(alias="feeAuthority")
    providers_fee_rate_bp: BasisPoints = Field(alias="providersFeeRateBasisPoints")
    protocol_fee_rate_bp: BasisPoints = Field(alias="protocolFeeRateBasisPoints")

    model_config = {"populate_by_name": True}


class InitializePoolRequest(BaseModel):
    """Create a pool for a base/quote pair under a config."""

    base_mint: Identity = Field(alias="baseMint")
    quote_mint: Identity = Field(alias="quoteMint")
    lp_mint: Identity = Field(alias="lpMint")
    config_id: Identity = Field(alias="configId")

    model_config = {"populate_by_name": True}


class LiquidityRequest(BaseModel):
    """Deposit both sides of the pool (launch or provide)."""

    owner: Identity = Field(description="Account that deposits and receives LP tokens")
    base_liquidity: U64 = Field(alias="baseLiquidity")
    quote_liquidity: U64 = Field(alias="quoteLiquidity")

    model_config = {"populate_by_name": True}


class WithdrawRequest(BaseModel):
    owner: Identity
    lp_tokens: U64 = Field(alias="lpTokens")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Swap with an expected result and a tolerated deviation."""

    owner: Identity
    amount_in: U64 = Field(alias="amountIn")
    estimated_result: U64 = Field(alias="estimatedResult")
    allowed_slippage: U64 = Field(alias="allowedSlippage")
    direction: SwapDirection

    model_config = {"populate_by_name": True}


# =============================================================================
# Responses
# =============================================================================


class ConfigResponse(BaseModel):
    id: Identity
    index: int
    fee_authority: Identity = Field(alias="feeAuthority")
    providers_fee_rate_bp: int = Field(alias="providersFeeRateBasisPoints")
    protocol_fee_rate_bp: int = Field(alias="protocolFeeRateBasisPoints")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_config(cls, config: PoolConfig) -> ConfigResponse:
        return cls(
            id=identity_to_hex(config.id),
            index=config.index,
            fee_authority=identity_to_hex(config.fee_authority),
            providers_fee_rate_bp=config.providers_fee_rate_bp,
            protocol_fee_rate_bp=config.protocol_fee_rate_bp,
        )


class PoolResponse(BaseModel):
    """Pool state as exposed over the API.

    Cached square roots are returned as raw Q64.64 integers in decimal
    strings, so no precision is lost in JSON.
    """

    id: Identity
    config_id: Identity = Field(alias="configId")
    base_mint: Identity = Field(alias="baseMint")
    quote_mint: Identity = Field(alias="quoteMint")
    lp_mint: Identity = Field(alias="lpMint")
    initialized: bool
    launched: bool
    base_reserve: int = Field(alias="baseReserve")
    quote_reserve: int = Field(alias="quoteReserve")
    lp_supply: int = Field(alias="lpSupply")
    initial_locked_liquidity: int = Field(alias="initialLockedLiquidity")
    sqrt_constant_product: str = Field(alias="sqrtConstantProductRaw")
    sqrt_base_quote_ratio: str = Field(alias="sqrtBaseQuoteRatioRaw")
    protocol_base_fees_to_redeem: int = Field(alias="protocolBaseFeesToRedeem")
    protocol_quote_fees_to_redeem: int = Field(alias="protocolQuoteFeesToRedeem")
    providers_fee_rate_bp: int = Field(alias="providersFeeRateBasisPoints")
    protocol_fee_rate_bp: int = Field(alias="protocolFeeRateBasisPoints")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: PoolRecord) -> PoolResponse:
        ids = record.identities
        return cls(
            id=identity_to_hex(ids.pool),
            config_id=identity_to_hex(ids.config),
            base_mint=identity_to_hex(ids.base_mint),
            quote_mint=identity_to_hex(ids.quote_mint),
            lp_mint=identity_to_hex(ids.lp_mint),
            initialized=record.initialized,
            launched=record.launched,
            base_reserve=record.base_reserve,
            quote_reserve=record.quote_reserve,
            lp_supply=record.lp_supply,
            initial_locked_liquidity=record.initial_locked_liquidity,
            sqrt_constant_product=str(record.sqrt_constant_product.value),
            sqrt_base_quote_ratio=str(record.sqrt_base_quote_ratio.value),
            protocol_base_fees_to_redeem=record.protocol_base_fees_to_redeem,
            protocol_quote_fees_to_redeem=record.protocol_quote_fees_to_redeem,
            providers_fee_rate_bp=record.providers_fee_rate_bp,
            protocol_fee_rate_bp=record.protocol_fee_rate_bp,
        )


class LaunchResponse(BaseModel):
    mint_to_launcher: int = Field(alias="mintToLauncher")
    mint_to_locked_vault: int = Field(alias="mintToLockedVault")

    model_config = {"populate_by_name": True}


class ProvideResponse(BaseModel):
    mint_to_provider: int = Field(alias="mintToProvider")

    model_config = {"populate_by_name": True}


class WithdrawResponse(BaseModel):
    base_out: int = Field(alias="baseOut")
    quote_out: int = Field(alias="quoteOut")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: int = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class CollectFeesResponse(BaseModel):
    base_fees: int = Field(alias="baseFees")
    quote_fees: int = Field(alias="quoteFees")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Body returned when a pool operation is rejected."""

    error: str = Field(description="Error class name, e.g. SwapSlippageExceeded")
    detail: str
