"""Reference rule bodies for the four built-in operation types.

Rule bodies are swappable: any (operation_type, [Check, ...]) entries can be
handed to ParameterSetRegistry instead of these.
"""

from typing import Optional

from alignment_gate.alignment.registry import ParameterSetRegistry
from alignment_gate.alignment.rules.command_execution import COMMAND_EXECUTION_CHECKS
from alignment_gate.alignment.rules.file_operation import FILE_OPERATION_CHECKS
from alignment_gate.alignment.rules.surgical_edit import SURGICAL_EDIT_CHECKS
from alignment_gate.alignment.rules.tool_call import (
    DEFAULT_PREREQUISITE_WINDOW_SECONDS,
    build_tool_call_checks,
)
from alignment_gate.config import Settings

SURGICAL_EDIT = "surgical_edit"
COMMAND_EXECUTION = "command_execution"
TOOL_CALL = "tool_call"
FILE_OPERATION = "file_operation"


def build_default_registry(settings: Optional[Settings] = None) -> ParameterSetRegistry:
    """Registry with every reference parameter set."""
    window = (
        settings.TOOL_PREREQUISITE_WINDOW_SECONDS
        if settings is not None
        else DEFAULT_PREREQUISITE_WINDOW_SECONDS
    )
    return ParameterSetRegistry([
        (SURGICAL_EDIT, SURGICAL_EDIT_CHECKS),
        (COMMAND_EXECUTION, COMMAND_EXECUTION_CHECKS),
        (TOOL_CALL, build_tool_call_checks(prerequisite_window_seconds=window)),
        (FILE_OPERATION, FILE_OPERATION_CHECKS),
    ])


__all__ = [
    "SURGICAL_EDIT",
    "COMMAND_EXECUTION",
    "TOOL_CALL",
    "FILE_OPERATION",
    "build_default_registry",
]
