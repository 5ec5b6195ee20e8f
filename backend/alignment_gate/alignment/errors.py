"""Configuration errors raised by the alignment engine.

A check that raises while evaluating is NOT an error at this level: the
runner converts it into a failing CheckResult. Only mistakes in how the
engine was wired up escape validate().
"""


class ConfigurationError(ValueError):
    """The engine was asked to do something its registry cannot support."""


class UnknownOperationTypeError(ConfigurationError):
    """No parameter set is registered for the requested operation type."""

    def __init__(self, operation_type: str):
        self.operation_type = operation_type
        super().__init__(f"No alignment parameters defined for operation type: {operation_type}")


class EmptyParameterSetError(ConfigurationError):
    """A parameter set has no checks; an empty set must never pass vacuously."""

    def __init__(self, operation_type: str):
        self.operation_type = operation_type
        super().__init__(f"Parameter set for '{operation_type}' contains no checks")


class DuplicateCheckError(ConfigurationError):
    """Two checks in one parameter set share a name."""

    def __init__(self, operation_type: str, check_name: str):
        self.operation_type = operation_type
        self.check_name = check_name
        super().__init__(f"Duplicate check '{check_name}' in parameter set '{operation_type}'")
