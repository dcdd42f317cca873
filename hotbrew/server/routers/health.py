"""Health check router for the subscription server."""
from __future__ import annotations

import asyncio
import os
import time

from fastapi import APIRouter, Request

from hotbrew.server.models import HealthStatus
from hotbrew.shared.constants import SERVER_SERVICE_NAME, VERSION

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health(request: Request) -> HealthStatus:
    """Health check endpoint returning service status."""

    def _check() -> HealthStatus:
        store = request.app.state.subscribers
        writable = os.access(store.data_dir, os.W_OK) if store.data_dir.exists() else True
        return HealthStatus(
            status="ok" if writable else "degraded",
            service_name=SERVER_SERVICE_NAME,
            version=VERSION,
            subscribers=len(store),
            uptime_seconds=time.time() - request.app.state.start_time,
        )

    return await asyncio.to_thread(_check)
