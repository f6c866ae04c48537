"""FastAPI application for the pool core.

Pool errors are mapped to JSON responses by exception handlers:
- LookupFailure (unknown pool or config): 404
- Any other PoolError, or a malformed pool id: 400
Request schema violations are rejected by pydantic with 422.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import InvalidPoolId, router
from cpamm.errors import LookupFailure, PoolError
from cpamm.models import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="cpamm",
    description="Constant-product AMM pool calculation core",
    version=__version__,
)

app.include_router(router)


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    """Return the error class and message; the pool state is unchanged."""
    status_code = 404 if isinstance(exc, LookupFailure) else 400
    logger.warning(
        "pool_operation_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


@app.exception_handler(InvalidPoolId)
async def invalid_pool_id_handler(request: Request, exc: InvalidPoolId) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="InvalidPoolId", detail=str(exc)).model_dump(),
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
