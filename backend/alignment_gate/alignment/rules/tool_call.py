"""Tool call rules — validate an agent's tool invocation before it is dispatched.

Params:
    tool_name:       tool the agent wants to call
    available_tools: names of registered tools
    tool_params:     arguments for the call (must be a mapping)
    recent_actions:  recent agent actions, each {"tool": str, "timestamp": float | datetime}
"""

import time
from datetime import datetime
from typing import Any, Callable, Mapping

from alignment_gate.alignment.checks import Check, Params

TOOL_VALIDATION = "Tool Validation"
CONTEXT_CHECKS = "Context Checks"

DEFAULT_PREREQUISITE_WINDOW_SECONDS = 60

# tool -> tool that must have run shortly before it
PREREQUISITES = {
    "surgical_edit": "read_file",
}


def tool_exists(params: Params) -> bool:
    return params["tool_name"] in params.get("available_tools", ())


def describe_tool_exists(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    if passed:
        return f"'{params['tool_name']}' registered"
    return f"Unknown tool: {params['tool_name']}"


def parameters_valid(params: Params) -> bool:
    return isinstance(params.get("tool_params"), Mapping)


def describe_parameters_valid(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Parameters well-formed" if passed else "Invalid parameters"


def _as_epoch(value: Any) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    return float(value)


def make_prerequisites_met(
    window_seconds: float = DEFAULT_PREREQUISITE_WINDOW_SECONDS,
    clock: Callable[[], float] = time.time,
) -> Callable[[Params], bool]:
    """Build the prerequisite predicate for a given freshness window."""

    def prerequisites_met(params: Params) -> bool:
        required = PREREQUISITES.get(params["tool_name"])
        if required is None:
            return True

        now = clock()
        return any(
            action.get("tool") == required and now - _as_epoch(action["timestamp"]) < window_seconds
            for action in params.get("recent_actions", ())
        )

    return prerequisites_met


def make_describe_prerequisites_met(window_seconds: float = DEFAULT_PREREQUISITE_WINDOW_SECONDS):
    def describe(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
        required = PREREQUISITES.get(params["tool_name"])
        if required is None:
            return "No prerequisites"
        if passed:
            return f"{required} ran <{window_seconds:g}s ago"
        return f"Must run {required} first"

    return describe


def build_tool_call_checks(
    prerequisite_window_seconds: float = DEFAULT_PREREQUISITE_WINDOW_SECONDS,
    clock: Callable[[], float] = time.time,
) -> list[Check]:
    return [
        Check(name="tool_exists", display_name="Tool Exists", category=TOOL_VALIDATION,
              critical=True, confidence=100, predicate=tool_exists, describe=describe_tool_exists),
        Check(name="parameters_valid", display_name="Parameters Valid", category=TOOL_VALIDATION,
              critical=True, confidence=100, predicate=parameters_valid, describe=describe_parameters_valid),
        Check(name="prerequisites_met", display_name="Prerequisites Met", category=CONTEXT_CHECKS,
              critical=True, confidence=100,
              predicate=make_prerequisites_met(prerequisite_window_seconds, clock),
              describe=make_describe_prerequisites_met(prerequisite_window_seconds)),
    ]


TOOL_CALL_CHECKS = build_tool_call_checks()
