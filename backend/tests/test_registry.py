import pytest
from pydantic import ValidationError

from alignment_gate.alignment import (
    Check,
    ConfigurationError,
    DuplicateCheckError,
    EmptyParameterSetError,
    ParameterSet,
    ParameterSetRegistry,
    UnknownOperationTypeError,
    build_default_registry,
)

from conftest import make_check


def _always(params):
    return True


def test_lookup_returns_checks_in_registration_order():
    checks = [make_check("b", _always), make_check("a", _always), make_check("c", _always)]
    registry = ParameterSetRegistry([("op", checks)])

    parameter_set = registry.lookup("op")
    assert [c.name for c in parameter_set] == ["b", "a", "c"]
    assert "op" in registry
    assert len(registry) == 1


def test_unknown_operation_type():
    registry = ParameterSetRegistry([("op", [make_check("a", _always)])])
    with pytest.raises(UnknownOperationTypeError) as exc_info:
        registry.lookup("rm_everything")
    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.operation_type == "rm_everything"


def test_empty_parameter_set_rejected():
    with pytest.raises(EmptyParameterSetError):
        ParameterSetRegistry([("op", [])])


def test_duplicate_check_names_rejected():
    with pytest.raises(DuplicateCheckError):
        ParameterSet("op", [make_check("a", _always), make_check("a", _always)])


def test_duplicate_operation_type_rejected():
    entry = ("op", [make_check("a", _always)])
    with pytest.raises(ConfigurationError):
        ParameterSetRegistry([entry, entry])


def test_accepts_prebuilt_parameter_sets():
    registry = ParameterSetRegistry([ParameterSet("op", [make_check("a", _always, critical=True)])])
    assert [c.name for c in registry.lookup("op").critical_checks] == ["a"]


@pytest.mark.parametrize("confidence", [-1, 101])
def test_confidence_out_of_range_rejected(confidence):
    with pytest.raises(ValidationError):
        Check(name="bad", confidence=confidence, predicate=_always)


def test_display_name_defaults_from_name():
    check = Check(name="brace_balance", confidence=100, predicate=_always)
    assert check.display_name == "Brace Balance"


def test_check_is_immutable():
    check = Check(name="a", confidence=100, predicate=_always)
    with pytest.raises(ValidationError):
        check.critical = True


def test_default_registry_covers_reference_operation_types():
    registry = build_default_registry()
    assert registry.operation_types() == [
        "surgical_edit",
        "command_execution",
        "tool_call",
        "file_operation",
    ]
    for parameter_set in registry:
        assert len(parameter_set) > 0
