import pytest

from agent_keeper.errors import UnknownSchemaError
from agent_keeper.schemas import SchemaRegistry, ValidationIssue


SERVER_SCHEMA = {
    "type": "object",
    "properties": {
        "command": {"type": "string"},
        "args": {"type": "array", "items": {"type": "string"}, "default": []},
        "enabled": {"type": "boolean", "default": True},
    },
    "required": ["command"],
}


def _registry() -> SchemaRegistry:
    registry = SchemaRegistry()
    registry.register("server", SERVER_SCHEMA)
    return registry


def test_validate_fills_defaults_without_touching_input() -> None:
    registry = _registry()
    document = {"command": "npx"}

    result = registry.validate("server", document)

    assert result.ok
    assert result.document == {"command": "npx", "args": [], "enabled": True}
    assert document == {"command": "npx"}


def test_validate_keeps_explicit_values() -> None:
    result = _registry().validate("server", {"command": "uvx", "enabled": False})

    assert result.document["enabled"] is False


def test_default_values_are_not_shared_between_documents() -> None:
    registry = _registry()
    first = registry.validate("server", {"command": "a"}).document
    first["args"].append("mutated")

    second = registry.validate("server", {"command": "b"}).document

    assert second["args"] == []


def test_validate_reports_every_issue_in_stable_order() -> None:
    result = _registry().validate("server", {"args": [1], "enabled": "yes"})

    assert not result.ok
    assert result.document is None
    assert result.issues == sorted(result.issues)
    assert {issue.path for issue in result.issues} == {"", "args.0", "enabled"}
    assert "'command' is a required property" in result.summary()


def test_validation_issue_str_includes_path() -> None:
    assert str(ValidationIssue(path="args.0", message="bad")) == "bad at args.0"
    assert str(ValidationIssue(path="", message="bad")) == "bad"


def test_unknown_schema_is_a_programming_error() -> None:
    with pytest.raises(UnknownSchemaError):
        SchemaRegistry().validate("missing", {})


def test_register_many_and_names() -> None:
    registry = SchemaRegistry()
    registry.register_many({"b": {"type": "object"}, "a": {"type": "object"}})

    assert registry.names() == ["a", "b"]
    assert registry.has("a")
    assert not registry.has("c")


def test_register_rejects_malformed_schema() -> None:
    from jsonschema.exceptions import SchemaError

    with pytest.raises(SchemaError):
        SchemaRegistry().register("broken", {"type": "not-a-type"})
