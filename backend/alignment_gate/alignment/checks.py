"""Check — a single named, independently evaluable predicate over operation params.

Each check is a standalone unit: it never reads another check's output and
never assumes another check has already run. Rule bodies are plain functions
(sync or async) so they can be unit-tested without the engine.

Contract:
    - predicate(params) returns a bool, or a CheckOutcome when it wants to
      carry details through to its own describe() step
    - params is a read-only mapping over a deep copy private to each check;
      derived data goes into CheckOutcome.details, which is private to the
      check that produced it
    - describe(passed, params, details) only affects reporting, never policy
"""

import copy
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Params = Mapping[str, Any]


class CheckOutcome(BaseModel):
    """What a predicate returns when it has more to say than a bare bool."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> "CheckOutcome":
        """Normalise a predicate's return value."""
        if isinstance(value, CheckOutcome):
            return value
        if isinstance(value, bool):
            return cls(passed=value)
        raise TypeError(f"Predicate must return bool or CheckOutcome, got {type(value).__name__}")


class Check(BaseModel):
    """Immutable check definition, built once when the registry is assembled."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    display_name: str = ""
    category: str = "General"
    critical: bool = False
    confidence: int = Field(ge=0, le=100, description="Trust weight when the check passes")
    predicate: Callable[..., Any]
    describe: Optional[Callable[..., Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _default_display_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display_name") and data.get("name"):
            data = {**data, "display_name": data["name"].replace("_", " ").title()}
        return data

    def __repr__(self) -> str:
        flag = " critical" if self.critical else ""
        return f"<Check {self.name}{flag} confidence={self.confidence}>"


def freeze_params(params: Params) -> Params:
    """Private copy of the params for one check, behind a read-only top-level view.

    Nested containers are deep-copied, so a check that mutates
    ``params["tool_params"]`` only changes its own copy.
    """
    return MappingProxyType(copy.deepcopy(dict(params)))
