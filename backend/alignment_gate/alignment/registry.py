"""ParameterSet registry — maps an operation type to its ordered checks.

The registry is a catalog, nothing more. It is assembled once from explicit
(operation_type, checks) entries and never changes afterwards; a reload builds
a new registry and swaps it on the engine in one assignment.

Usage:
    registry = ParameterSetRegistry([
        ("surgical_edit", SURGICAL_EDIT_CHECKS),
        ("command_execution", COMMAND_EXECUTION_CHECKS),
    ])
    parameter_set = registry.lookup("surgical_edit")
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Sequence, Union

from alignment_gate.alignment.checks import Check
from alignment_gate.alignment.errors import (
    ConfigurationError,
    DuplicateCheckError,
    EmptyParameterSetError,
    UnknownOperationTypeError,
)


class ParameterSet:
    """The ordered, non-empty collection of checks bound to one operation type."""

    __slots__ = ("operation_type", "checks")

    def __init__(self, operation_type: str, checks: Sequence[Check]):
        checks = tuple(checks)
        if not checks:
            raise EmptyParameterSetError(operation_type)

        seen: set[str] = set()
        for check in checks:
            if check.name in seen:
                raise DuplicateCheckError(operation_type, check.name)
            seen.add(check.name)

        self.operation_type = operation_type
        self.checks = checks

    def __len__(self) -> int:
        return len(self.checks)

    def __iter__(self) -> Iterator[Check]:
        return iter(self.checks)

    @property
    def critical_checks(self) -> tuple[Check, ...]:
        return tuple(c for c in self.checks if c.critical)

    def __repr__(self) -> str:
        return f"<ParameterSet {self.operation_type} checks={len(self.checks)}>"


Entry = Union[ParameterSet, tuple[str, Sequence[Check]]]


class ParameterSetRegistry:
    """Read-only catalog of parameter sets, keyed by operation type."""

    def __init__(self, entries: Iterable[Entry]):
        sets: dict[str, ParameterSet] = {}
        for entry in entries:
            parameter_set = entry if isinstance(entry, ParameterSet) else ParameterSet(*entry)
            if parameter_set.operation_type in sets:
                raise ConfigurationError(f"Operation type '{parameter_set.operation_type}' registered twice")
            sets[parameter_set.operation_type] = parameter_set
        self._sets = MappingProxyType(sets)

    def lookup(self, operation_type: str) -> ParameterSet:
        """Resolve the parameter set for an operation type.

        Raises:
            UnknownOperationTypeError: operation type is not registered
        """
        try:
            return self._sets[operation_type]
        except KeyError:
            raise UnknownOperationTypeError(operation_type) from None

    def operation_types(self) -> list[str]:
        """Registered operation types, in registration order."""
        return list(self._sets)

    def __contains__(self, operation_type: object) -> bool:
        return operation_type in self._sets

    def __len__(self) -> int:
        return len(self._sets)

    def __iter__(self) -> Iterator[ParameterSet]:
        return iter(self._sets.values())
