"""Alignment API — validate an operation, list parameter sets, read statistics."""

from fastapi import APIRouter, Request

import structlog

from alignment_gate.alignment import AlignmentEngine, AlignmentVerdict, StatisticsSnapshot
from alignment_gate.models.requests import ValidateOperationRequest
from alignment_gate.models.responses import CheckDescription, ParameterSetDescription

logger = structlog.get_logger()

router = APIRouter(prefix="/alignment")


def _engine(request: Request) -> AlignmentEngine:
    return request.app.state.engine


@router.get("/operations", response_model=list[ParameterSetDescription])
async def list_operations(request: Request):
    """Every registered operation type with its checks in registration order."""
    return [
        ParameterSetDescription(
            operation_type=parameter_set.operation_type,
            checks=[
                CheckDescription(
                    name=c.name,
                    display_name=c.display_name,
                    category=c.category,
                    critical=c.critical,
                    confidence=c.confidence,
                )
                for c in parameter_set
            ],
        )
        for parameter_set in _engine(request).registry
    ]


@router.post("/{operation_type}/validate", response_model=AlignmentVerdict)
async def validate_operation(operation_type: str, body: ValidateOperationRequest, request: Request):
    """Run the full parameter set for an operation and return the verdict.

    A denied operation is a normal 200 response with allowed=false; only an
    unregistered operation type is an error (404).
    """
    verdict = await _engine(request).validate(operation_type, body.params)

    if not verdict.allowed:
        logger.info(
            "operation_denied",
            operation_type=operation_type,
            risk_level=verdict.risk_level.value,
            confidence=verdict.confidence,
        )

    return verdict


@router.get("/stats", response_model=StatisticsSnapshot)
async def get_stats(request: Request):
    """Cumulative and per-operation-type validation counters."""
    return _engine(request).statistics
