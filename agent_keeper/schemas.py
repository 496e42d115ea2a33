import copy
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from jsonschema import Draft202012Validator, validators

from agent_keeper.errors import UnknownSchemaError


def _extend_with_default(validator_class: Any) -> Any:
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(
        validator: Any, properties: dict, instance: Any, schema: dict
    ) -> Iterator[Any]:
        if isinstance(instance, dict):
            for name, subschema in properties.items():
                if isinstance(subschema, dict) and "default" in subschema:
                    instance.setdefault(name, copy.deepcopy(subschema["default"]))
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultFillingValidator = _extend_with_default(Draft202012Validator)


@dataclass(frozen=True, order=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} at {self.path}" if self.path else self.message


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    document: Optional[Any] = None
    issues: list[ValidationIssue] = field(default_factory=list)

    def summary(self) -> str:
        return "; ".join(str(issue) for issue in self.issues)


class SchemaRegistry:
    """Named JSON schemas; ``validate`` returns a default-filled copy."""

    def __init__(self) -> None:
        self._validators: dict[str, Any] = {}

    def register(self, name: str, schema: dict[str, Any]) -> None:
        Draft202012Validator.check_schema(schema)
        self._validators[name] = DefaultFillingValidator(schema)

    def register_many(self, schemas: Mapping[str, dict[str, Any]]) -> None:
        for name, schema in schemas.items():
            self.register(name, schema)

    def has(self, name: str) -> bool:
        return name in self._validators

    def names(self) -> list[str]:
        return sorted(self._validators)

    def validate(self, name: str, document: Any) -> ValidationResult:
        validator = self._validators.get(name)
        if validator is None:
            raise UnknownSchemaError(name)

        normalized = copy.deepcopy(document)
        issues = sorted(
            ValidationIssue(
                path=".".join(str(part) for part in error.path),
                message=str(error.message),
            )
            for error in validator.iter_errors(normalized)
        )
        if issues:
            return ValidationResult(ok=False, issues=issues)
        return ValidationResult(ok=True, document=normalized)
