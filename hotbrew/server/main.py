"""Subscription server FastAPI application."""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotbrew.server.ratelimit import RateLimiter
from hotbrew.server.storage import SubscriberStore
from hotbrew.settings.config import server_data_dir
from hotbrew.shared.config import ServerSettings
from hotbrew.shared.constants import DEFAULT_SERVE_ADDR, SERVER_SERVICE_NAME, VERSION
from hotbrew.shared.errors import register_exception_handlers
from hotbrew.shared.logging import TraceIDMiddleware, setup_logging

config = ServerSettings()
logger = setup_logging(SERVER_SERVICE_NAME, config.log_level)


def create_app(data_dir: str | Path | None = None) -> FastAPI:
    """Build the server app storing subscribers under *data_dir*."""
    resolved_dir = Path(data_dir or config.data_dir or server_data_dir()).expanduser()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan - initialize and cleanup resources."""
        app.state.start_time = time.time()
        app.state.subscribers = SubscriberStore(resolved_dir)
        app.state.rate_limiter = RateLimiter()

        logger.info(
            "Service started: name=%s version=%s data_dir=%s",
            SERVER_SERVICE_NAME, VERSION, resolved_dir,
        )
        yield
        logger.info("Service stopped: name=%s", SERVER_SERVICE_NAME)

    app = FastAPI(
        title="Hotbrew Server",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(TraceIDMiddleware)
    register_exception_handlers(app)

    from hotbrew.server.routers.health import router as health_router
    from hotbrew.server.routers.subscribers import router as subscribers_router

    app.include_router(health_router)
    app.include_router(subscribers_router)
    return app


def parse_addr(addr: str) -> tuple[str, int]:
    """Split ``":8080"`` or ``"host:port"`` into ``(host, port)``.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = (addr or DEFAULT_SERVE_ADDR).rpartition(":")
    if not sep:
        host, port = "", addr
    return host or "0.0.0.0", int(port)


def run(addr: str = DEFAULT_SERVE_ADDR, data_dir: str | Path | None = None) -> None:
    """Serve the API with uvicorn until interrupted."""
    host, port = parse_addr(addr)
    uvicorn.run(create_app(data_dir), host=host, port=port, log_level=config.log_level.lower())
