import logging
from pathlib import Path
from typing import Any, Optional

from agent_keeper.adapters import common
from agent_keeper.adapters.base import PlatformAdapter, is_toggle_disable
from agent_keeper.adapters.codex import parsers, writers
from agent_keeper.adapters.codex import schemas as names
from agent_keeper.adapters.codex.paths import CodexPaths
from agent_keeper.config_service import ConfigService
from agent_keeper.constants import SKILL_FILENAME
from agent_keeper.errors import AdapterConfigError, AdapterScopeError
from agent_keeper.models import ConfigScope, ToolEntity, ToolStatus, ToolType


logger = logging.getLogger(__name__)

_SCOPES = (ConfigScope.USER, ConfigScope.PROJECT)


class CodexAdapter(PlatformAdapter):
    """Codex keeps MCP servers in config.toml, skills and prompts as markdown."""

    def __init__(self, config_service: ConfigService, paths: Optional[CodexPaths] = None) -> None:
        self._config = config_service
        self._paths = paths or CodexPaths()

    @property
    def id(self) -> str:
        return "codex"

    @property
    def display_name(self) -> str:
        return writers.AGENT_NAME

    @property
    def supported_tool_types(self) -> frozenset[ToolType]:
        return frozenset({ToolType.MCP_SERVER, ToolType.SKILL, ToolType.CUSTOM_PROMPT})

    @property
    def paths(self) -> CodexPaths:
        return self._paths

    @property
    def schemas(self) -> dict[str, dict[str, Any]]:
        return names.CODEX_SCHEMAS

    def read_tools(self, tool_type: ToolType, scope: ConfigScope) -> list[ToolEntity]:
        if scope not in _SCOPES:
            return []
        if scope == ConfigScope.PROJECT and self._paths.workspace_root is None:
            return []

        file_io = self._config.file_io
        schemas = self._config.schemas
        if tool_type == ToolType.MCP_SERVER:
            return parsers.parse_config_mcp_servers(
                file_io, schemas, self._config_toml(scope), scope
            )
        if tool_type == ToolType.SKILL:
            return common.parse_skills_dir(
                file_io,
                schemas,
                self._skills_dir(scope),
                scope,
                names.SKILL_FRONTMATTER,
                id_prefix="skill:codex",
            )
        if tool_type == ToolType.CUSTOM_PROMPT:
            return parsers.parse_prompts_dir(file_io, schemas, self._prompts_dir(scope), scope)
        return []

    def write_tool(self, tool: ToolEntity, scope: ConfigScope) -> None:
        if tool.type == ToolType.MCP_SERVER:
            config = dict(tool.metadata.get("config") or {})
            if tool.status == ToolStatus.DISABLED:
                config["enabled"] = False
            else:
                config.pop("enabled", None)
            writers.add_mcp_server(self._config, self._config_toml(scope), tool.name, config)
        elif tool.type == ToolType.SKILL:
            source_dir = common.skill_directory(tool)
            common.copy_skill(
                self.display_name, source_dir, self._skills_dir(scope) / source_dir.name
            )
        elif tool.type == ToolType.CUSTOM_PROMPT:
            common.copy_markdown_file(self.display_name, tool, self._prompts_dir(scope))
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def remove_tool(self, tool: ToolEntity) -> None:
        if tool.type == ToolType.MCP_SERVER:
            writers.remove_mcp_server(self._config, self._config_toml(tool.scope), tool.name)
        elif tool.type == ToolType.SKILL:
            common.remove_skill(
                self.display_name, self._config.backups, common.skill_directory(tool)
            )
        elif tool.type == ToolType.CUSTOM_PROMPT:
            common.remove_markdown_file(
                self.display_name, self._config.backups, tool.source.file_path
            )
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def toggle_tool(self, tool: ToolEntity) -> None:
        disable = is_toggle_disable(tool)
        logger.debug("%s %s %s", "Disabling" if disable else "Enabling", tool.type.value, tool.name)
        if tool.type == ToolType.MCP_SERVER:
            writers.set_mcp_server_enabled(
                self._config, self._config_toml(tool.scope), tool.name, not disable
            )
        elif tool.type in (ToolType.SKILL, ToolType.CUSTOM_PROMPT):
            common.rename_toggle(self.display_name, common.toggle_target(tool), disable)
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def install_mcp_server(
        self, scope: ConfigScope, name: str, config: dict[str, Any]
    ) -> None:
        writers.add_mcp_server(self._config, self._config_toml(scope), name, config)

    def install_skill(self, scope: ConfigScope, name: str, files: dict[str, str]) -> None:
        if SKILL_FILENAME not in files:
            raise AdapterConfigError(self.display_name, f"Skill {name} has no {SKILL_FILENAME}")
        target = self._skills_dir(scope) / name
        if target.exists():
            raise AdapterConfigError(self.display_name, f"Target already exists: {target}")
        common.write_files(target, files)

    def get_watch_paths(self, scope: ConfigScope) -> list[Path]:
        root = self._paths.workspace_root
        if scope == ConfigScope.USER:
            return [
                self._paths.user_config_toml,
                self._paths.user_skills_dir,
                self._paths.user_prompts_dir,
            ]
        if scope == ConfigScope.PROJECT and root is not None:
            return [
                self._paths.project_config_toml(root),
                self._paths.project_skills_dir(root),
                self._paths.project_prompts_dir(root),
            ]
        return []

    def detect(self) -> bool:
        return self._config.file_io.exists(self._paths.user_codex_dir)

    def _root(self, scope: ConfigScope, operation: str) -> Optional[Path]:
        if scope == ConfigScope.USER:
            return None
        if scope != ConfigScope.PROJECT:
            raise AdapterScopeError(self.display_name, scope.value, operation)
        if self._paths.workspace_root is None:
            raise AdapterScopeError(
                self.display_name, scope.value, f"{operation} (no workspace open)"
            )
        return self._paths.workspace_root

    def _config_toml(self, scope: ConfigScope) -> Path:
        root = self._root(scope, "config")
        return self._paths.user_config_toml if root is None else self._paths.project_config_toml(root)

    def _skills_dir(self, scope: ConfigScope) -> Path:
        root = self._root(scope, "skills")
        return self._paths.user_skills_dir if root is None else self._paths.project_skills_dir(root)

    def _prompts_dir(self, scope: ConfigScope) -> Path:
        root = self._root(scope, "prompts")
        return self._paths.user_prompts_dir if root is None else self._paths.project_prompts_dir(root)
