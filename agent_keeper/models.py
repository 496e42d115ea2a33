from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ToolType(str, Enum):
    SKILL = "skill"
    MCP_SERVER = "mcp_server"
    HOOK = "hook"
    COMMAND = "command"
    CUSTOM_PROMPT = "custom_prompt"


class ConfigScope(str, Enum):
    MANAGED = "managed"
    PROJECT = "project"
    LOCAL = "local"
    USER = "user"


class ToolStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    ERROR = "error"


SCOPE_PRECEDENCE: tuple[ConfigScope, ...] = (
    ConfigScope.MANAGED,
    ConfigScope.PROJECT,
    ConfigScope.LOCAL,
    ConfigScope.USER,
)

APPLICABLE_SCOPES: dict[ToolType, tuple[ConfigScope, ...]] = {
    ToolType.SKILL: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolType.COMMAND: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolType.CUSTOM_PROMPT: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolType.HOOK: (
        ConfigScope.USER,
        ConfigScope.PROJECT,
        ConfigScope.LOCAL,
        ConfigScope.MANAGED,
    ),
    ToolType.MCP_SERVER: (
        ConfigScope.USER,
        ConfigScope.PROJECT,
        ConfigScope.MANAGED,
    ),
}


def scope_rank(scope: ConfigScope) -> int:
    return SCOPE_PRECEDENCE.index(scope)


@dataclass(frozen=True)
class ToolSource:
    file_path: Path
    directory_path: Optional[Path] = None
    is_directory: bool = False


@dataclass(frozen=True)
class ScopeEntry:
    scope: ConfigScope
    status: ToolStatus
    file_path: Path

    def as_dict(self) -> dict[str, str]:
        return {
            "scope": self.scope.value,
            "status": self.status.value,
            "file_path": str(self.file_path),
        }


@dataclass(frozen=True)
class ToolEntity:
    id: str
    type: ToolType
    name: str
    scope: ConfigScope
    status: ToolStatus
    source: ToolSource
    description: Optional[str] = None
    status_detail: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    scope_entries: Optional[tuple[ScopeEntry, ...]] = None

    @classmethod
    def error(
        cls,
        *,
        id: str,
        type: ToolType,
        name: str,
        scope: ConfigScope,
        file_path: Path,
        detail: str,
    ) -> "ToolEntity":
        return cls(
            id=id,
            type=type,
            name=name,
            scope=scope,
            status=ToolStatus.ERROR,
            source=ToolSource(file_path=file_path),
            status_detail=detail or "Unknown error",
            metadata={},
        )

    @property
    def is_enabled(self) -> bool:
        return self.status == ToolStatus.ENABLED

    @property
    def is_managed(self) -> bool:
        return self.scope == ConfigScope.MANAGED

    def with_scope_entries(self, entries: list[ScopeEntry]) -> "ToolEntity":
        return replace(self, scope_entries=tuple(entries))

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "scope": self.scope.value,
            "status": self.status.value,
            "file_path": str(self.source.file_path),
            "description": self.description or "",
            "status_detail": self.status_detail or "",
        }
        if self.scope_entries is not None:
            payload["scope_entries"] = [entry.as_dict() for entry in self.scope_entries]
        return payload


@dataclass(frozen=True)
class ToolActionResult:
    success: bool
    error: Optional[str] = None
