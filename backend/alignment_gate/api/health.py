"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from alignment_gate.models.responses import HealthResponse

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """System health check — the engine is the only dependency."""
    engine = getattr(request.app.state, "engine", None)

    if engine is None:
        return HealthResponse(
            status="unhealthy",
            uptime_seconds=round(time.time() - _start_time, 2),
            operation_types=[],
        )

    return HealthResponse(
        status="healthy",
        uptime_seconds=round(time.time() - _start_time, 2),
        operation_types=engine.registry.operation_types(),
    )
