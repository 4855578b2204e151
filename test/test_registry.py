"""Tests for CommandRegistry and RegistryHandle."""

import itertools

import pytest

from cmdschema import (
    CommandRegistry,
    DanglingAgentReferenceError,
    DuplicateCommandError,
    RegistryFrozenError,
    RegistryHandle,
    RegistryNotReadyError,
    RegistryValidationError,
    UnknownCommandError,
    parse_schema,
)


def _schema(name, agents=()):
    return parse_schema({"name": name, "agents": list(agents)})


def test_register_and_lookup() -> None:
    registry = CommandRegistry()
    registry.register(_schema("build"))
    registry.register(_schema("analyze"))

    assert registry.lookup("build").name == "build"
    assert "analyze" in registry
    assert len(registry) == 2
    assert registry.names() == ["analyze", "build"]
    assert [s.name for s in registry] == ["analyze", "build"]


def test_duplicate_command_is_rejected() -> None:
    registry = CommandRegistry([_schema("build")])
    with pytest.raises(DuplicateCommandError) as exc_info:
        registry.register(_schema("build"))
    assert exc_info.value.command == "build"


def test_lookup_unknown_command() -> None:
    registry = CommandRegistry()
    with pytest.raises(UnknownCommandError) as exc_info:
        registry.lookup("missing")
    assert exc_info.value.command == "missing"


def test_single_dangling_reference() -> None:
    registry = CommandRegistry([_schema("add-backend", ["flutter-firebase-core"])])

    errors = registry.finalize_and_validate({"flutter-builder"})

    assert len(errors) == 1
    assert errors[0].command == "add-backend"
    assert errors[0].agent == "flutter-firebase-core"
    assert errors[0] == DanglingAgentReferenceError("add-backend", "flutter-firebase-core")
    assert not registry.is_finalized


def test_all_dangling_references_are_collected() -> None:
    registry = CommandRegistry(
        [
            _schema("add-backend", ["flutter-firebase-core", "flutter-supabase-core"]),
            _schema("build", ["flutter-builder"]),
            _schema("deploy", ["flutter-firebase-core"]),
        ]
    )

    errors = registry.finalize_and_validate({"flutter-builder"})

    assert [e.key for e in errors] == [
        ("add-backend", "flutter-firebase-core"),
        ("add-backend", "flutter-supabase-core"),
        ("deploy", "flutter-firebase-core"),
    ]


def test_error_set_independent_of_registration_order() -> None:
    schemas = [
        _schema("a", ["x", "y"]),
        _schema("b", ["y"]),
        _schema("c", ["z", "known"]),
    ]
    results = set()
    for ordering in itertools.permutations(schemas):
        registry = CommandRegistry(ordering)
        errors = registry.finalize_and_validate({"known"})
        results.add(frozenset(errors))
        assert errors == sorted(errors, key=lambda e: e.key)

    assert len(results) == 1
    assert {e.key for e in results.pop()} == {("a", "x"), ("a", "y"), ("b", "y"), ("c", "z")}


def test_successful_validation_freezes_registry() -> None:
    registry = CommandRegistry([_schema("build", ["flutter-builder"])])

    assert registry.finalize_and_validate(["flutter-builder", "other"]) == []
    assert registry.is_finalized
    assert registry.known_agents == frozenset({"flutter-builder", "other"})

    with pytest.raises(RegistryFrozenError):
        registry.register(_schema("test"))
    registry.ensure_ready()


def test_failed_validation_is_not_ready() -> None:
    registry = CommandRegistry([_schema("build", ["ghost"])])
    registry.finalize_and_validate([])
    with pytest.raises(RegistryNotReadyError):
        registry.ensure_ready()


def test_validate_or_raise_aggregates() -> None:
    registry = CommandRegistry([_schema("a", ["x"]), _schema("b", ["y"])])
    with pytest.raises(RegistryValidationError) as exc_info:
        registry.validate_or_raise([])
    assert len(exc_info.value.errors) == 2
    data = exc_info.value.to_dict()
    assert data["code"] == "registry_validation"
    assert [e["agent"] for e in data["errors"]] == ["x", "y"]


def test_handle_requires_ready_registries() -> None:
    with pytest.raises(RegistryNotReadyError):
        RegistryHandle(CommandRegistry())

    ready = CommandRegistry()
    ready.validate_or_raise([])
    handle = RegistryHandle(ready)

    with pytest.raises(RegistryNotReadyError):
        handle.swap(CommandRegistry([_schema("build")]))
    assert handle.current is ready
