"""Command execution rules — block destructive or out-of-workspace shell commands.

Params:
    command:        shell command string
    cwd:            directory the command would run in
    workspace_root: directory the agent is confined to
"""

import os
import re

from alignment_gate.alignment.checks import Check, Params
from alignment_gate.alignment.rules.base import static_message

SAFETY_CHECKS = "Safety Checks"

DESTRUCTIVE_PATTERNS = [
    re.compile(r"rm\s+-rf"),
    re.compile(r"del\s+/[fs]", re.IGNORECASE),
    re.compile(r"format\s+", re.IGNORECASE),
    re.compile(r"mkfs"),
    re.compile(r">\s*/dev/"),
]


def not_destructive(params: Params) -> bool:
    command = params["command"]
    return not any(p.search(command) for p in DESTRUCTIVE_PATTERNS)


def working_directory_correct(params: Params) -> bool:
    """cwd must be the workspace root or somewhere beneath it, after resolving '..'."""
    root = os.path.normpath(os.path.abspath(params["workspace_root"]))
    cwd = os.path.normpath(os.path.abspath(os.path.join(root, params["cwd"])))
    return cwd == root or os.path.commonpath([root, cwd]) == root


def path_safety(params: Params) -> bool:
    return ".." not in params["command"]


COMMAND_EXECUTION_CHECKS = [
    Check(name="not_destructive", display_name="Not Destructive Command", category=SAFETY_CHECKS,
          critical=True, confidence=100, predicate=not_destructive,
          describe=static_message("No dangerous patterns", "DESTRUCTIVE COMMAND DETECTED")),
    Check(name="working_directory_correct", display_name="Working Directory Correct", category=SAFETY_CHECKS,
          critical=True, confidence=100, predicate=working_directory_correct,
          describe=static_message("Within workspace", "Outside workspace")),
    Check(name="path_safety", display_name="Path Safety", category=SAFETY_CHECKS,
          critical=True, confidence=95, predicate=path_safety,
          describe=static_message("No path traversal", "Path traversal detected")),
]
