"""FastAPI application for the ampswap quote service.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ampswap.api.endpoints import get_default_client, router
from ampswap.errors import NoRouteError, PoolNotFoundError, RpcError, StateNotLoadedError
from ampswap.logs import configure_logging

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMPSWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMPSWAP_PORT", "8000"))
DEBUG = os.environ.get("AMPSWAP_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB)
MAX_REQUEST_SIZE = 64 * 1024


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Load pool state and start the observer for the default client."""
    client = get_default_client()
    try:
        await client.refresh()
    except Exception:
        # Each quote retries the fetch; 503 while it keeps failing
        logger.exception("initial_refresh_failed")
    client.start()
    yield
    await client.teardown()


app = FastAPI(
    title="ampswap",
    description="Quotes and routes for amplified AMM pools",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(NoRouteError)
async def no_route_handler(_request: Request, exc: NoRouteError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PoolNotFoundError)
async def pool_not_found_handler(_request: Request, exc: PoolNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StateNotLoadedError)
async def state_not_loaded_handler(_request: Request, exc: StateNotLoadedError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(RpcError)
async def rpc_error_handler(_request: Request, exc: RpcError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the quote service.

    Configuration via environment variables:
    - AMPSWAP_HOST: Host to bind to (default: 0.0.0.0)
    - AMPSWAP_PORT: Port to bind to (default: 8000)
    - AMPSWAP_DEBUG: Enable debug logging and reload mode (default: false)
    - AMPSWAP_RPC_URL, AMPSWAP_ROUTER_ADDRESS, ...: see ClientConfig.from_env
    """
    configure_logging("DEBUG" if DEBUG else "INFO")
    uvicorn.run(
        "ampswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
