"""Application entry point.

Builds the FastAPI application serving the geo API, wires services through the
DI container and opens the shared outbound HTTP session used for IP lookups.
Run with the ``storefront-geo`` console script or ``python -m storefront_geo.main``.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import aiohttp
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .api.errors import register_error_handlers
from .api.routes import router as geo_router
from .core.container import Container

logger = logging.getLogger(__name__)

GZIP_MINIMUM_SIZE = 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the outbound HTTP session on startup and close it on shutdown."""
    app.state.http_session = aiohttp.ClientSession()
    logger.info("Outbound HTTP session opened")
    try:
        yield
    finally:
        await app.state.http_session.close()
        logger.info("Outbound HTTP session closed")


def create_app(container: Container | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        container: DI container to use, a fresh one if omitted.

    Returns:
        Configured application with routes, middleware and error handlers.
    """
    if container is None:
        container = Container()

    app = FastAPI(title="Storefront Geo", version="0.1.0", lifespan=lifespan)
    app.state.container = container

    server_config = container.config().server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000)

        response.headers["X-Response-Time"] = f"{elapsed_ms}ms"
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms}ms"
        )
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(geo_router)
    register_error_handlers(app)

    return app


def main() -> None:
    """Main application entry point.

    Configures logging and serves the application with uvicorn on the
    configured host and port.
    """
    container = Container()
    server_config = container.config().server

    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=server_config.log_level.upper(),
    )

    app = create_app(container)
    logger.info(f"Starting geo service on {server_config.host}:{server_config.port}")
    uvicorn.run(app, host=server_config.host, port=server_config.port, log_config=None)


if __name__ == "__main__":
    main()
