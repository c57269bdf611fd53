"""FastAPI application for the pool engine.

Note: Authentication is not implemented here. The X-Caller header is
trusted as-is; put the service behind an authenticating proxy that sets it.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import router
from dex.errors import ErrorCode, PoolError
from dex.models import ErrorResponse

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "127.0.0.1")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("DEX_LOG_LEVEL", "INFO").upper()

# Maximum request body size (64 KB)
MAX_REQUEST_SIZE = 64 * 1024

# HTTP status for each rejected-operation code (400 when not listed)
ERROR_STATUS = {
    ErrorCode.OWNER_ONLY: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.NOT_INITIALIZED: 409,
    ErrorCode.ALREADY_INITIALIZED: 409,
}

logger = structlog.get_logger()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog with a console renderer at the given level."""
    level_value = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
    )


app = FastAPI(
    title="Constant-product pool",
    description="Two-asset automated market maker with owner governance",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length is not None:
        if not content_length.isdigit():
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})
        if int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(PoolError)
async def pool_error_handler(_request: Request, exc: PoolError) -> JSONResponse:
    """Map a rejected pool operation to a JSON error body."""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, 400),
        content=ErrorResponse.from_error(exc).model_dump(),
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 127.0.0.1)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_LOG_LEVEL: Log level (default: INFO)
    - DEX_OWNER, DEX_FEE_BPS, DEX_BALANCES, ...: see dex.config
    """
    configure_logging()
    logger.info("starting_server", host=HOST, port=PORT, debug=DEBUG)
    uvicorn.run(
        "dex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
