"""API request models."""

from typing import Any

from pydantic import BaseModel, Field


class ValidateOperationRequest(BaseModel):
    """Parameters of an operation the agent is about to perform."""

    params: dict[str, Any] = Field(
        ...,
        description="Operation parameters, passed unchanged to every check",
        examples=[
            {
                "command": "pytest -q",
                "cwd": "/workspace/project",
                "workspace_root": "/workspace/project",
            }
        ],
    )
