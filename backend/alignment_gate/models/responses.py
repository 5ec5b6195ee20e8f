"""API response models."""

from pydantic import BaseModel
from typing import Literal


class CheckDescription(BaseModel):
    """Static definition of one registered check."""

    name: str
    display_name: str
    category: str
    critical: bool
    confidence: int


class ParameterSetDescription(BaseModel):
    """All checks bound to one operation type, in registration order."""

    operation_type: str
    checks: list[CheckDescription]


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str = "1.0.0"
    uptime_seconds: float
    operation_types: list[str]
