"""Alignment Gate — pre-execution policy gate for autonomous agent operations.

Main FastAPI application with lifespan management and global error handling.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from alignment_gate.alignment import ConfigurationError, UnknownOperationTypeError, get_engine
from alignment_gate.api.router import api_router
from alignment_gate.config import get_settings


def configure_logging() -> None:
    """Configure structured logging once per process."""
    settings = get_settings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.LOG_LEVEL.upper())
        ),
    )


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    app.state.engine = get_engine()

    logger.info("app_started", operation_types=app.state.engine.registry.operation_types())

    yield

    # ── Shutdown ──
    logger.info("app_stopped", stats=app.state.engine.statistics.model_dump())
    app.state.engine.close()
    get_engine.cache_clear()


# ── Create Application ──

app = FastAPI(
    title="Alignment Gate",
    description=(
        "Pre-execution policy gate for autonomous agents. "
        "Every operation is checked by a set of independent rules that must "
        "align before it is allowed to run."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Global Exception Handlers ──

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


@app.exception_handler(UnknownOperationTypeError)
async def unknown_operation_handler(request: Request, exc: UnknownOperationTypeError):
    """Unregistered operation type — fail fast, never allow."""
    return JSONResponse(
        status_code=404,
        content={
            "error": "unknown_operation_type",
            "operation_type": exc.operation_type,
            "message": str(exc),
        },
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(
        status_code=422,
        content={"error": "configuration_error", "message": str(exc)},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "message": str(exc)},
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")


# ── Root endpoint ──

@app.get("/")
async def root():
    """Root endpoint — API info."""
    return {
        "name": "Alignment Gate",
        "version": "1.0.0",
        "description": "Pre-execution policy gate for autonomous agent operations",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
