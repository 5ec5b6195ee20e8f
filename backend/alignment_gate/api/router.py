"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from alignment_gate.api.health import router as health_router
from alignment_gate.api.alignment import router as alignment_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Alignment gate
api_router.include_router(alignment_router, tags=["Alignment"])
