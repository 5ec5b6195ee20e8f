"""File operation rules — validate reads/writes before they touch the workspace.

Params:
    file_path:      path relative to (or under) the workspace root
    workspace_root: directory the agent is confined to
    content:        text (or bytes) about to be written; optional for reads
"""

import ast
import json
import os
import re
from typing import Any, Mapping, Optional

from alignment_gate.alignment.checks import Check, CheckOutcome, Params
from alignment_gate.alignment.rules.base import static_message

SAFETY_CHECKS = "Safety Checks"
SIZE_VALIDATION = "Size Validation"
CONTENT_VALIDATION = "Content Validation"
SECURITY_CHECKS = "Security Checks"

MAX_FILE_SIZE_MB = 5

CRITICAL_FILES = [
    "package.json",
    ".git",
    ".env",
    "node_modules",
    ".gitignore",
]

SECRET_PATTERNS = [
    re.compile(r"""api[_-]?key\s*[:=]\s*['"][^'"]{20,}['"]""", re.IGNORECASE),
    re.compile(r"""password\s*[:=]\s*['"][^'"]{8,}['"]""", re.IGNORECASE),
    re.compile(r"""secret\s*[:=]\s*['"][^'"]{20,}['"]""", re.IGNORECASE),
    re.compile(r"""token\s*[:=]\s*['"][^'"]{20,}['"]""", re.IGNORECASE),
    re.compile(r"-----BEGIN (RSA |DSA )?PRIVATE KEY-----"),
]

_BARE_LF = re.compile(r"(?<!\r)\n")


def _text(params: Params) -> Optional[str]:
    content = params.get("content")
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def path_within_workspace(params: Params) -> bool:
    root = os.path.abspath(params["workspace_root"])
    full = os.path.normpath(os.path.join(root, params["file_path"]))
    relative = os.path.relpath(full, root)
    return not relative.startswith("..") and not os.path.isabs(relative)


def not_critical_file(params: Params) -> bool:
    file_path = params["file_path"]
    return not any(cf in file_path for cf in CRITICAL_FILES)


def describe_not_critical_file(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Not a critical file" if passed else f"Critical file: {params['file_path']}"


def file_size_reasonable(params: Params) -> CheckOutcome:
    content = params.get("content")
    if not content:
        return CheckOutcome(passed=True)

    size = len(content) if isinstance(content, bytes) else len(content.encode("utf-8", errors="surrogatepass"))
    size_mb = size / (1024 * 1024)
    return CheckOutcome(passed=size_mb < MAX_FILE_SIZE_MB, details={"bytes": size, "mb": size_mb})


def describe_file_size_reasonable(passed: bool, params: Params, details: Mapping[str, Any]) -> Optional[str]:
    if not details:
        return None
    if not passed:
        return f"File too large: {details['mb']:.2f}MB (max: {MAX_FILE_SIZE_MB}MB)"
    return f"{details['mb']:.2f}MB (OK)"


def encoding_valid(params: Params) -> bool:
    content = params.get("content")
    if not content:
        return True
    try:
        if isinstance(content, bytes):
            content.decode("utf-8")
        else:
            content.encode("utf-8")
    except UnicodeError:
        return False
    return True


def no_secrets_detected(params: Params) -> bool:
    content = _text(params)
    if not content:
        return True
    return not any(p.search(content) for p in SECRET_PATTERNS)


def line_endings_consistent(params: Params) -> bool:
    """Either all CRLF or all LF, never mixed."""
    content = _text(params)
    if not content:
        return True
    return not ("\r\n" in content and _BARE_LF.search(content))


def syntax_will_be_valid(params: Params) -> CheckOutcome:
    content = _text(params)
    file_path = params["file_path"]
    if not content:
        return CheckOutcome(passed=True)

    try:
        if file_path.endswith(".json"):
            json.loads(content)
        elif file_path.endswith(".py"):
            ast.parse(content, filename=file_path)
    except (ValueError, SyntaxError) as e:
        return CheckOutcome(passed=False, details={"syntax_error": str(e)})
    return CheckOutcome(passed=True)


def describe_syntax_will_be_valid(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    if not passed and details.get("syntax_error"):
        return f"Syntax error: {details['syntax_error']}"
    return "Syntax valid" if passed else "Syntax may be invalid"


FILE_OPERATION_CHECKS = [
    Check(name="path_within_workspace", display_name="Path Within Workspace", category=SAFETY_CHECKS,
          critical=True, confidence=100, predicate=path_within_workspace,
          describe=static_message("Path safe", "Path outside workspace")),
    Check(name="not_critical_file", display_name="Not Critical System File", category=SAFETY_CHECKS,
          critical=True, confidence=100, predicate=not_critical_file, describe=describe_not_critical_file),
    Check(name="file_size_reasonable", display_name="File Size Reasonable", category=SIZE_VALIDATION,
          confidence=95, predicate=file_size_reasonable, describe=describe_file_size_reasonable),
    Check(name="encoding_valid", display_name="Encoding Valid (UTF-8)", category=CONTENT_VALIDATION,
          confidence=98, predicate=encoding_valid,
          describe=static_message("UTF-8 encoding OK", "Invalid encoding detected")),
    Check(name="no_secrets_detected", display_name="No Secrets Detected", category=SECURITY_CHECKS,
          critical=True, confidence=95, predicate=no_secrets_detected,
          describe=static_message("No secrets detected", "POTENTIAL SECRETS DETECTED")),
    Check(name="line_endings_consistent", display_name="Line Endings Consistent", category=CONTENT_VALIDATION,
          confidence=90, predicate=line_endings_consistent,
          describe=static_message("Line endings consistent", "Mixed line endings")),
    Check(name="syntax_will_be_valid", display_name="Syntax Will Be Valid", category=CONTENT_VALIDATION,
          confidence=92, predicate=syntax_will_be_valid, describe=describe_syntax_will_be_valid),
]
