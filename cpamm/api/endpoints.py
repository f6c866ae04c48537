"""API endpoints for pool operations.

Routes are async and call the synchronous PoolService on the event loop,
so requests run one at a time.
"""

import structlog
from fastapi import APIRouter, Depends

from cpamm.ledger.memory import InMemoryTokenLedger
from cpamm.models.pool import (
    CollectFeesResponse,
    ConfigResponse,
    CreateConfigRequest,
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
from cpamm.models.types import identity_from_hex
from cpamm.service import PoolService

logger = structlog.get_logger()

router = APIRouter()


class InvalidPoolId(ValueError):
    """Path parameter is not a 0x-prefixed 32-byte identity."""

    pass


_default_service = PoolService(ledger=InMemoryTokenLedger())


def get_service() -> PoolService:
    """Dependency provider for the pool service.

    Override this in tests to inject a service with a prepared ledger:
        app.dependency_overrides[get_service] = lambda: service

    Returns:
        The service that executes pool operations.
    """
    return _default_service


@router.post("/configs")
async def create_config(
    request: CreateConfigRequest,
    service: PoolService = Depends(get_service),
) -> ConfigResponse:
    config = service.create_config(
        identity_from_hex(request.fee_authority),
        request.providers_fee_rate_bp,
        request.protocol_fee_rate_bp,
    )
    return ConfigResponse.from_config(config)


@router.post("/pools")
async def initialize_pool(
    request: InitializePoolRequest,
    service: PoolService = Depends(get_service),
) -> PoolResponse:
    """Create a pool for a base/quote pair under an existing config."""
    record = service.initialize(
        identity_from_hex(request.base_mint),
        identity_from_hex(request.quote_mint),
        identity_from_hex(request.lp_mint),
        identity_from_hex(request.config_id),
    )
    return PoolResponse.from_record(record)


@router.get("/pools/{pool_id}")
async def get_pool(pool_id: str, service: PoolService = Depends(get_service)) -> PoolResponse:
    return PoolResponse.from_record(service.get_pool(_parse_pool_id(pool_id)))


@router.post("/pools/{pool_id}/launch")
async def launch(
    pool_id: str,
    request: LiquidityRequest,
    service: PoolService = Depends(get_service),
) -> LaunchResponse:
    """Deposit the first liquidity of a pool."""
    result = service.launch(
        _parse_pool_id(pool_id),
        identity_from_hex(request.owner),
        request.base_liquidity,
        request.quote_liquidity,
    )
    return LaunchResponse(
        mint_to_launcher=result.mint_to_launcher,
        mint_to_locked_vault=result.mint_to_locked_vault,
    )


@router.post("/pools/{pool_id}/provide")
async def provide(
    pool_id: str,
    request: LiquidityRequest,
    service: PoolService = Depends(get_service),
) -> ProvideResponse:
    result = service.provide(
        _parse_pool_id(pool_id),
        identity_from_hex(request.owner),
        request.base_liquidity,
        request.quote_liquidity,
    )
    return ProvideResponse(mint_to_provider=result.mint_to_provider)


@router.post("/pools/{pool_id}/withdraw")
async def withdraw(
    pool_id: str,
    request: WithdrawRequest,
    service: PoolService = Depends(get_service),
) -> WithdrawResponse:
    result = service.withdraw(
        _parse_pool_id(pool_id),
        identity_from_hex(request.owner),
        request.lp_tokens,
    )
    return WithdrawResponse(base_out=result.base_out, quote_out=result.quote_out)


@router.post("/pools/{pool_id}/swap")
async def swap(
    pool_id: str,
    request: SwapRequest,
    service: PoolService = Depends(get_service),
) -> SwapResponse:
    """Swap against the pool.

    Fails with SwapSlippageExceeded (400) if the result differs from
    estimatedResult by more than allowedSlippage.
    """
    result = service.swap(
        _parse_pool_id(pool_id),
        identity_from_hex(request.owner),
        request.amount_in,
        request.estimated_result,
        request.allowed_slippage,
        request.direction,
    )
    return SwapResponse(amount_out=result.amount_out)


@router.post("/pools/{pool_id}/collect-fees")
async def collect_fees(pool_id: str, service: PoolService = Depends(get_service)) -> CollectFeesResponse:
    result = service.collect_fees(_parse_pool_id(pool_id))
    return CollectFeesResponse(base_fees=result.base_fees, quote_fees=result.quote_fees)


def _parse_pool_id(pool_id: str) -> bytes:
    try:
        return identity_from_hex(pool_id)
    except ValueError as err:
        logger.warning("invalid_pool_id", pool_id=pool_id)
        raise InvalidPoolId(str(err)) from err
