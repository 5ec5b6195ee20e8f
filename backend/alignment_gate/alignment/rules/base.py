"""Shared helpers for rule modules."""

from typing import Any, Callable, Mapping

from alignment_gate.alignment.checks import Params

Describer = Callable[[bool, Params, Mapping[str, Any]], str]


def static_message(ok: str, bad: str) -> Describer:
    """describe() for checks whose explanation depends only on pass/fail."""

    def describe(passed: bool, params: Params, details: Mapping[str, Any]) -> str:
        return ok if passed else bad

    return describe
