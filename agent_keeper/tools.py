import logging
from enum import Enum

from agent_keeper.adapters.registry import AdapterRegistry
from agent_keeper.config_service import ConfigService
from agent_keeper.errors import ProgrammingError
from agent_keeper.models import ConfigScope, ToolActionResult, ToolEntity, ToolStatus, ToolType


logger = logging.getLogger(__name__)

WRITABLE_SCOPES: tuple[ConfigScope, ...] = (ConfigScope.USER, ConfigScope.PROJECT)


class ToolAction(str, Enum):
    TOGGLE = "toggle"
    DELETE = "delete"
    MOVE = "move"


def available_actions(tool: ToolEntity) -> list[ToolAction]:
    if tool.is_managed:
        return []
    if tool.status == ToolStatus.ERROR:
        return [ToolAction.DELETE]
    return [ToolAction.TOGGLE, ToolAction.DELETE, ToolAction.MOVE]


def move_targets(tool: ToolEntity) -> list[ConfigScope]:
    if tool.is_managed:
        return []
    return [scope for scope in WRITABLE_SCOPES if scope != tool.scope]


def describe_delete(tool: ToolEntity) -> str:
    if tool.type == ToolType.SKILL:
        path = tool.source.directory_path or tool.source.file_path
        return f"Delete skill '{tool.name}' (directory: {path})"
    if tool.type in (ToolType.COMMAND, ToolType.CUSTOM_PROMPT):
        path = tool.source.file_path
        if tool.source.is_directory and tool.source.directory_path is not None:
            path = tool.source.directory_path
        return f"Delete {tool.type.value.replace('_', ' ')} '{tool.name}' (file: {path})"
    if tool.type == ToolType.MCP_SERVER:
        return f"Remove MCP server '{tool.name}' from {tool.source.file_path}"
    if tool.type == ToolType.HOOK:
        event_name = tool.metadata.get("eventName") or "unknown"
        matcher = tool.metadata.get("matcher") or ""
        label = f"{event_name} ({matcher})" if matcher else event_name
        return f"Remove hook '{label}' from {tool.source.file_path}"
    return f"Delete '{tool.name}'"


class ToolManagerService:
    """Single-tool mutations that report failure as a result value."""

    def __init__(self, config_service: ConfigService, registry: AdapterRegistry) -> None:
        self._config_service = config_service
        self._registry = registry

    def toggle_tool(self, tool: ToolEntity) -> ToolActionResult:
        if tool.is_managed:
            return ToolActionResult(success=False, error="Cannot modify managed tools")
        if tool.status == ToolStatus.ERROR:
            return ToolActionResult(
                success=False, error=f"Cannot toggle '{tool.name}': {tool.status_detail}"
            )
        adapter = self._registry.require_active_adapter()
        try:
            adapter.toggle_tool(tool)
        except ProgrammingError:
            raise
        except Exception as exc:
            logger.error("Failed to toggle %s: %s", tool.id, exc)
            return ToolActionResult(success=False, error=str(exc))
        logger.info("Toggled %s", tool.id)
        return ToolActionResult(success=True)

    def delete_tool(self, tool: ToolEntity) -> ToolActionResult:
        if tool.is_managed:
            return ToolActionResult(success=False, error="Cannot modify managed tools")
        adapter = self._registry.require_active_adapter()
        try:
            adapter.remove_tool(tool)
        except ProgrammingError:
            raise
        except Exception as exc:
            logger.error("Failed to delete %s: %s", tool.id, exc)
            return ToolActionResult(success=False, error=str(exc))
        logger.info("Deleted %s", tool.id)
        return ToolActionResult(success=True)

    def move_tool(self, tool: ToolEntity, target_scope: ConfigScope) -> ToolActionResult:
        if tool.is_managed:
            return ToolActionResult(success=False, error="Cannot modify managed tools")
        if target_scope == tool.scope:
            return ToolActionResult(
                success=False, error="Tool is already in the target scope"
            )
        if target_scope == ConfigScope.MANAGED:
            return ToolActionResult(
                success=False, error="Cannot move to managed scope (read-only)"
            )
        adapter = self._registry.require_active_adapter()
        try:
            adapter.write_tool(tool, target_scope)
            adapter.remove_tool(tool)
        except ProgrammingError:
            raise
        except Exception as exc:
            logger.error("Failed to move %s to %s: %s", tool.id, target_scope.value, exc)
            return ToolActionResult(success=False, error=str(exc))
        logger.info("Moved %s to %s", tool.id, target_scope.value)
        return ToolActionResult(success=True)

    def check_conflict(self, tool: ToolEntity, target_scope: ConfigScope) -> bool:
        try:
            existing = self._config_service.read_tools_by_scope(tool.type, target_scope)
        except ProgrammingError:
            raise
        except Exception as exc:
            logger.debug("Conflict check for %s failed: %s", tool.id, exc)
            return False
        return any(item.name == tool.name for item in existing)
