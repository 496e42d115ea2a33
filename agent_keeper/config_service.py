import copy
import logging
from pathlib import Path
from typing import Any, Callable

from agent_keeper.adapters.base import PlatformAdapter
from agent_keeper.adapters.registry import AdapterRegistry
from agent_keeper.backup import BackupService
from agent_keeper.errors import (
    ConfigReadError,
    ProgrammingError,
    SchemaValidationError,
    UnknownSchemaError,
)
from agent_keeper.fileio import FileIO, ReadResult
from agent_keeper.keys import canonical_key
from agent_keeper.markdown import set_frontmatter_field
from agent_keeper.models import (
    APPLICABLE_SCOPES,
    ConfigScope,
    ScopeEntry,
    ToolEntity,
    ToolType,
    scope_rank,
)
from agent_keeper.schemas import SchemaRegistry, ValidationIssue


logger = logging.getLogger(__name__)

Mutation = Callable[[dict[str, Any]], dict[str, Any]]


def resolve_scopes(tools: list[ToolEntity]) -> list[ToolEntity]:
    """Collapse entities sharing a canonical key into the highest-precedence one.

    The winner carries one scope entry per contributing entity; key order
    follows first appearance in ``tools``.
    """
    groups: dict[str, list[ToolEntity]] = {}
    for tool in tools:
        groups.setdefault(canonical_key(tool), []).append(tool)

    resolved: list[ToolEntity] = []
    for members in groups.values():
        winner = min(members, key=lambda item: scope_rank(item.scope))
        entries = [
            ScopeEntry(scope=item.scope, status=item.status, file_path=item.source.file_path)
            for item in members
        ]
        resolved.append(winner.with_scope_entries(entries))
    return resolved


class ConfigService:
    def __init__(
        self,
        file_io: FileIO,
        backups: BackupService,
        schemas: SchemaRegistry,
        registry: AdapterRegistry,
    ) -> None:
        self._file_io = file_io
        self._backups = backups
        self._schemas = schemas
        self._registry = registry

    @property
    def file_io(self) -> FileIO:
        return self._file_io

    @property
    def backups(self) -> BackupService:
        return self._backups

    @property
    def schemas(self) -> SchemaRegistry:
        return self._schemas

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    # --- resolution ---

    def read_all_tools(self, tool_type: ToolType) -> list[ToolEntity]:
        adapter = self._registry.require_active_adapter()
        collected: list[ToolEntity] = []
        for scope in APPLICABLE_SCOPES[tool_type]:
            collected.extend(self._read_scope(adapter, tool_type, scope))
        return resolve_scopes(collected)

    def read_tools_by_scope(self, tool_type: ToolType, scope: ConfigScope) -> list[ToolEntity]:
        adapter = self._registry.require_active_adapter()
        return adapter.read_tools(tool_type, scope)

    def resolve_scopes(self, tools: list[ToolEntity]) -> list[ToolEntity]:
        return resolve_scopes(tools)

    def _read_scope(
        self, adapter: PlatformAdapter, tool_type: ToolType, scope: ConfigScope
    ) -> list[ToolEntity]:
        try:
            return adapter.read_tools(tool_type, scope)
        except ProgrammingError:
            raise
        except Exception as exc:
            logger.warning(
                "Failed to read %s %s tools from %s: %s",
                scope.value,
                tool_type.value,
                adapter.id,
                exc,
            )
            watch_paths = adapter.get_watch_paths(scope)
            return [
                ToolEntity.error(
                    id=f"{tool_type.value}:error:{scope.value}",
                    type=tool_type,
                    name=f"Error reading {scope.value} {tool_type.value}",
                    scope=scope,
                    file_path=watch_paths[0] if watch_paths else Path(),
                    detail=str(exc),
                )
            ]

    # --- write pipeline ---

    def write_config_file(self, path: Path, schema_name: str, mutate: Mutation) -> None:
        self._write_structured(
            path, schema_name, mutate, self._file_io.read_json, self._file_io.write_json
        )

    def write_toml_config_file(
        self, path: Path, schema_name: str, mutate: Mutation
    ) -> None:
        self._write_structured(
            path, schema_name, mutate, self._file_io.read_toml, self._file_io.write_toml
        )

    def write_text_config_file(self, path: Path, content: str) -> None:
        self._backups.create_backup(path)
        self._file_io.write_text(path, content)
        logger.info("Wrote %s", path)

    def update_frontmatter_field(self, path: Path, key: str, value: Any) -> None:
        text = self._file_io.read_text(path)
        if text is None:
            raise ConfigReadError(path, "file not found")
        self.write_text_config_file(path, set_frontmatter_field(text, key, value, path))

    def _write_structured(
        self,
        path: Path,
        schema_name: str,
        mutate: Mutation,
        reader: Callable[[Path], ReadResult],
        writer: Callable[[Path, Any], None],
    ) -> None:
        if not self._schemas.has(schema_name):
            raise UnknownSchemaError(schema_name)

        current = self._read_current(path, reader)
        logger.debug("Re-read %s before mutating", path)

        candidate = mutate(copy.deepcopy(current))
        if not isinstance(candidate, dict):
            raise SchemaValidationError(
                path, schema_name, [ValidationIssue(path="", message="document must be an object")]
            )

        result = self._schemas.validate(schema_name, candidate)
        if not result.ok:
            logger.debug("Rejected %s: %s", path, result.summary())
            raise SchemaValidationError(path, schema_name, result.issues)

        backup = self._backups.create_backup(path)
        if backup is not None:
            logger.debug("Backed up %s before write", path)
        writer(path, candidate)
        logger.info("Wrote %s", path)

    def _read_current(
        self, path: Path, reader: Callable[[Path], ReadResult]
    ) -> dict[str, Any]:
        result = reader(path)
        if not result.ok:
            raise ConfigReadError(path, result.error or "unreadable")
        if result.data is None:
            return {}
        if not isinstance(result.data, dict):
            raise ConfigReadError(path, "top-level value must be an object")
        return result.data
