"""Pydantic models for the pool API."""

from cpamm.models.pool import (
    CollectFeesResponse,
    ConfigResponse,
    CreateConfigRequest,
    ErrorResponse,
    InitializePoolRequest,
    LaunchResponse,
    LiquidityRequest,
    PoolResponse,
    ProvideResponse,
    SwapRequest,
    SwapResponse,
    WithdrawRequest,
    WithdrawResponse,
)
from cpamm.models.types import (
    U64,
    BasisPoints,
    Identity,
    identity_from_hex,
    identity_to_hex,
    validate_u64,
)

__all__ = [
    # Requests
    "CreateConfigRequest",
    "InitializePoolRequest",
    "LiquidityRequest",
    "WithdrawRequest",
    "SwapRequest",
    # Responses
    "ConfigResponse",
    "PoolResponse",
    "LaunchResponse",
    "ProvideResponse",
    "WithdrawResponse",
    "SwapResponse",
    "CollectFeesResponse",
    "ErrorResponse",
    # Types
    "U64",
    "BasisPoints",
    "Identity",
    "validate_u64",
    "identity_to_hex",
    "identity_from_hex",
]
