"""Surgical edit rules — guard string-replacement edits against runaway changes.

Params:
    content:    full current file text
    old_string: exact text being replaced
    new_string: replacement text

Each rule is a plain function; SURGICAL_EDIT_CHECKS binds them to names,
categories, criticality and confidence.
"""

import re
from typing import Any, Mapping, Optional

from alignment_gate.alignment.checks import Check, CheckOutcome, Params

# ── Thresholds ──

MAX_SIZE_DELTA_PERCENT = 10.0      # Character delta as % of file
MAX_LINE_DELTA_PERCENT = 20.0      # Line-count delta as % of file
MAX_SELECTION_PERCENT = 30.0       # Above this the selection is probably runaway
CONTEXT_CHARS = 50

# Definitions whose disappearance from the replaced region is never accidental
CRITICAL_PATTERNS = [
    re.compile(r"function\s+\w+"),
    re.compile(r"class\s+\w+"),
    re.compile(r"def\s+\w+"),
    re.compile(r"const\s+\w+\s*="),
    re.compile(r"export\s+(default\s+)?"),
    re.compile(r"import\s+"),
]

EXACT_TARGETING = "Exact Targeting"
SIZE_AND_SCOPE = "Size & Scope"
SYNTAX_PRESERVATION = "Syntax Preservation"
STRUCTURAL_INTEGRITY = "Structural Integrity"


def _edit(params: Params) -> tuple[str, str, str]:
    return params["content"], params["old_string"], params.get("new_string", "")


def _line_of(content: str, index: int) -> int:
    return content.count("\n", 0, index) + 1


def _pair_counts(text: str, opener: str, closer: str) -> tuple[int, int]:
    return text.count(opener), text.count(closer)


def _balance_after_edit(params: Params, opener: str, closer: str) -> dict[str, Any]:
    """Open/close counts of the file before and after the replacement."""
    content, old, new = _edit(params)
    before = _pair_counts(content, opener, closer)
    removing = _pair_counts(old, opener, closer)
    adding = _pair_counts(new, opener, closer)
    after = (
        before[0] - removing[0] + adding[0],
        before[1] - removing[1] + adding[1],
    )
    return {
        "before": before,
        "after": after,
        "before_balance": abs(before[0] - before[1]),
        "after_balance": abs(after[0] - after[1]),
    }


# ── Exact Targeting ──

def exact_match(params: Params) -> CheckOutcome:
    content, old, _ = _edit(params)
    occurrences = content.count(old) if old else 0
    return CheckOutcome(
        passed=occurrences > 0,
        details={"occurrences": occurrences, "index": content.find(old) if old else -1},
    )


def describe_exact_match(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    if not passed:
        return "String not found in file"
    line = _line_of(params["content"], details["index"])
    return f"Found {details['occurrences']} occurrence(s) at line {line}"


def position_verify(params: Params) -> CheckOutcome:
    content, old, _ = _edit(params)
    index = content.find(old) if old else -1
    if index == -1:
        return CheckOutcome(passed=False)

    end = index + len(old)
    return CheckOutcome(
        passed=True,
        details={
            "line": _line_of(content, index),
            "column": index - content.rfind("\n", 0, index) - 1,
            "context_before": content[max(0, index - CONTEXT_CHARS):index],
            "context_after": content[end:end + CONTEXT_CHARS],
        },
    )


def describe_position_verify(passed: bool, params: Params, details: Mapping[str, Any]) -> Optional[str]:
    if not details:
        return None
    return f"Line {details['line']}, Column {details['column']}"


def boundary_detect(params: Params) -> CheckOutcome:
    _, old, _ = _edit(params)
    starts = old.startswith("\n") or re.match(r"^\s*\w", old) is not None
    ends = old.endswith("\n") or old.endswith(";")
    return CheckOutcome(passed=starts or ends, details={"starts": starts, "ends": ends})


def describe_boundary_detect(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Aligned to code boundary" if passed else "Selection starts and ends mid-token"


# ── Size & Scope ──

def size_delta(params: Params) -> CheckOutcome:
    content, old, new = _edit(params)
    delta = abs(len(new) - len(old))
    if content:
        percent = delta / len(content) * 100
    else:
        percent = 100.0 if delta else 0.0
    return CheckOutcome(
        passed=percent < MAX_SIZE_DELTA_PERCENT,
        details={"delta": delta, "percent": percent},
    )


def describe_size_delta(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return f"±{details['delta']} chars ({details['percent']:.1f}% of file)"


def line_delta(params: Params) -> CheckOutcome:
    content, old, new = _edit(params)
    old_lines = old.count("\n") + 1
    new_lines = new.count("\n") + 1
    total_lines = content.count("\n") + 1
    delta = abs(new_lines - old_lines)
    percent = delta / total_lines * 100
    return CheckOutcome(
        passed=percent < MAX_LINE_DELTA_PERCENT,
        details={"delta": delta, "percent": percent},
    )


def describe_line_delta(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return f"±{details['delta']} lines ({details['percent']:.1f}% of file)"


def range_contained(params: Params) -> CheckOutcome:
    content, old, _ = _edit(params)
    index = content.find(old) if old else -1
    if index == -1 or not content:
        return CheckOutcome(passed=False)

    remaining = len(content) - (index + len(old))
    percent_selected = len(old) / len(content) * 100
    return CheckOutcome(
        passed=percent_selected < MAX_SELECTION_PERCENT,
        details={
            "percent_selected": percent_selected,
            "percent_remaining": remaining / len(content) * 100,
        },
    )


def describe_range_contained(passed: bool, params: Params, details: Mapping[str, Any]) -> Optional[str]:
    if not details:
        return None
    if not passed:
        return f"RUNAWAY SELECTION: selecting {details['percent_selected']:.1f}% of file"
    return f"{details['percent_selected']:.1f}% selected, {details['percent_remaining']:.1f}% remaining"


def scope_containment(params: Params) -> CheckOutcome:
    _, old, _ = _edit(params)
    opens_without_close = "{" in old and "}" not in old
    return CheckOutcome(
        passed=not opens_without_close,
        details={"top_level": re.match(r"^\s{4,}", old) is None},
    )


def describe_scope_containment(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Top-level statement" if details["top_level"] else "Nested scope"


# ── Syntax Preservation ──

def brace_balance(params: Params) -> CheckOutcome:
    data = _balance_after_edit(params, "{", "}")
    # Balance may improve or hold, never get worse
    return CheckOutcome(passed=data["after_balance"] <= data["before_balance"], details=data)


def describe_brace_balance(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    (open_before, close_before), (open_after, close_after) = details["before"], details["after"]
    return f"{{{open_before}→{open_after}, }}{close_before}→{close_after}"


def paren_balance(params: Params) -> CheckOutcome:
    data = _balance_after_edit(params, "(", ")")
    return CheckOutcome(passed=data["after_balance"] <= data["before_balance"], details=data)


def describe_paren_balance(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Parentheses balanced" if passed else "Edit unbalances parentheses"


def quote_balance(params: Params) -> bool:
    content, old, new = _edit(params)
    for quote in ("'", '"', "`"):
        after = content.count(quote) - old.count(quote) + new.count(quote)
        if after % 2:
            return False
    return True


def describe_quote_balance(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "All quotes paired" if passed else "Unpaired quotes detected"


def semicolon_consistency(params: Params) -> bool:
    _, old, new = _edit(params)
    return old.strip().endswith(";") == new.strip().endswith(";")


def describe_semicolon_consistency(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Semicolon style consistent" if passed else "Semicolon style changed"


# ── Structural Integrity ──

def critical_patterns(params: Params) -> CheckOutcome:
    _, old, new = _edit(params)
    deletions = 0
    for pattern in CRITICAL_PATTERNS:
        before = len(pattern.findall(old))
        if before and not pattern.search(new):
            deletions += before
    return CheckOutcome(passed=deletions == 0, details={"deletions": deletions})


def describe_critical_patterns(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    if details["deletions"]:
        return f"Deleting {details['deletions']} critical definition(s)"
    return "No critical deletions"


def _indent(text: str) -> int:
    return len(text) - len(text.lstrip())


def indentation_consistent(params: Params) -> bool:
    _, old, new = _edit(params)
    return _indent(old) == _indent(new)


def describe_indentation_consistent(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Indentation maintained" if passed else "Indentation changed"


def block_integrity(params: Params) -> bool:
    _, old, _ = _edit(params)
    return "{" not in old or "}" in old


def describe_block_integrity(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
    return "Block structure intact" if passed else "May break block structure"


SURGICAL_EDIT_CHECKS = [
    Check(name="exact_match", display_name="Exact Match Found", category=EXACT_TARGETING,
          critical=True, confidence=100, predicate=exact_match, describe=describe_exact_match),
    Check(name="position_verify", display_name="Position Verified", category=EXACT_TARGETING,
          confidence=100, predicate=position_verify, describe=describe_position_verify),
    Check(name="boundary_detect", display_name="Boundary Detected", category=EXACT_TARGETING,
          confidence=95, predicate=boundary_detect, describe=describe_boundary_detect),
    Check(name="size_delta", display_name="Size Delta Safe", category=SIZE_AND_SCOPE,
          confidence=98, predicate=size_delta, describe=describe_size_delta),
    Check(name="line_delta", display_name="Line Delta Safe", category=SIZE_AND_SCOPE,
          confidence=100, predicate=line_delta, describe=describe_line_delta),
    Check(name="range_contained", display_name="Range Contained", category=SIZE_AND_SCOPE,
          critical=True, confidence=99, predicate=range_contained, describe=describe_range_contained),
    Check(name="scope_containment", display_name="Scope Containment", category=SIZE_AND_SCOPE,
          confidence=95, predicate=scope_containment, describe=describe_scope_containment),
    Check(name="brace_balance", display_name="Brace Balance Maintained", category=SYNTAX_PRESERVATION,
          critical=True, confidence=100, predicate=brace_balance, describe=describe_brace_balance),
    Check(name="paren_balance", display_name="Parenthesis Balance OK", category=SYNTAX_PRESERVATION,
          critical=True, confidence=100, predicate=paren_balance, describe=describe_paren_balance),
    Check(name="quote_balance", display_name="Quote Balance Maintained", category=SYNTAX_PRESERVATION,
          confidence=100, predicate=quote_balance, describe=describe_quote_balance),
    Check(name="semicolon_consistency", display_name="Semicolon Consistency", category=SYNTAX_PRESERVATION,
          confidence=90, predicate=semicolon_consistency, describe=describe_semicolon_consistency),
    Check(name="critical_patterns", display_name="Critical Patterns Safe", category=STRUCTURAL_INTEGRITY,
          critical=True, confidence=100, predicate=critical_patterns, describe=describe_critical_patterns),
    Check(name="indentation_consistent", display_name="Indentation Consistent", category=STRUCTURAL_INTEGRITY,
          confidence=95, predicate=indentation_consistent, describe=describe_indentation_consistent),
    Check(name="block_integrity", display_name="Block Integrity Preserved", category=STRUCTURAL_INTEGRITY,
          confidence=98, predicate=block_integrity, describe=describe_block_integrity),
]
