import logging
from pathlib import Path
from typing import Any, Optional

from agent_keeper.adapters import common
from agent_keeper.adapters.base import PlatformAdapter, is_toggle_disable
from agent_keeper.adapters.claude_code import parsers, writers
from agent_keeper.adapters.claude_code import schemas as names
from agent_keeper.adapters.claude_code.paths import ClaudeCodePaths
from agent_keeper.config_service import ConfigService
from agent_keeper.constants import MARKDOWN_SUFFIX, SKILL_FILENAME
from agent_keeper.errors import AdapterConfigError, AdapterScopeError
from agent_keeper.models import ConfigScope, ToolEntity, ToolStatus, ToolType


logger = logging.getLogger(__name__)


class ClaudeCodeAdapter(PlatformAdapter):
    """Reads and mutates Claude Code settings, MCP files, skills and commands."""

    def __init__(self, config_service: ConfigService, paths: Optional[ClaudeCodePaths] = None) -> None:
        self._config = config_service
        self._paths = paths or ClaudeCodePaths()

    @property
    def id(self) -> str:
        return "claude-code"

    @property
    def display_name(self) -> str:
        return writers.AGENT_NAME

    @property
    def supported_tool_types(self) -> frozenset[ToolType]:
        return frozenset({ToolType.SKILL, ToolType.MCP_SERVER, ToolType.HOOK, ToolType.COMMAND})

    @property
    def paths(self) -> ClaudeCodePaths:
        return self._paths

    @property
    def schemas(self) -> dict[str, dict[str, Any]]:
        return names.CLAUDE_CODE_SCHEMAS

    # --- reading ---

    def read_tools(self, tool_type: ToolType, scope: ConfigScope) -> list[ToolEntity]:
        root = self._paths.workspace_root
        if scope in (ConfigScope.PROJECT, ConfigScope.LOCAL) and root is None:
            return []

        file_io = self._config.file_io
        schemas = self._config.schemas
        if tool_type == ToolType.SKILL:
            skills_dir = self._skills_dir_or_none(scope)
            if skills_dir is None:
                return []
            return common.parse_skills_dir(
                file_io, schemas, skills_dir, scope, names.SKILL_FRONTMATTER
            )
        if tool_type == ToolType.COMMAND:
            commands_dir = self._commands_dir_or_none(scope)
            if commands_dir is None:
                return []
            return parsers.parse_commands_dir(file_io, schemas, commands_dir, scope)
        if tool_type == ToolType.HOOK:
            return parsers.parse_settings_file(
                file_io, schemas, self._settings_path(scope), scope
            )
        if tool_type == ToolType.MCP_SERVER:
            return self._read_mcp_servers(scope)
        return []

    def _read_mcp_servers(self, scope: ConfigScope) -> list[ToolEntity]:
        file_io = self._config.file_io
        schemas = self._config.schemas
        if scope == ConfigScope.LOCAL:
            return []
        disabled = parsers.read_disabled_mcp_servers(
            file_io, schemas, self._settings_path(scope)
        )
        if scope == ConfigScope.USER:
            return parsers.parse_claude_json(
                file_io, schemas, self._paths.user_claude_json, disabled
            )
        mcp_path, schema_name = self._mcp_file(scope)
        return parsers.parse_mcp_file(file_io, schemas, mcp_path, scope, disabled, schema_name)

    # --- mutation ---

    def write_tool(self, tool: ToolEntity, scope: ConfigScope) -> None:
        self._refuse_managed(scope, "write")
        if tool.type == ToolType.MCP_SERVER:
            path, schema_name = self._mcp_file(scope)
            writers.add_mcp_server(
                self._config, path, schema_name, tool.name, self._server_config(tool)
            )
        elif tool.type == ToolType.HOOK:
            writers.add_hook(
                self._config,
                self._settings_path(scope),
                tool.metadata["eventName"],
                {
                    "matcher": tool.metadata.get("matcher") or "",
                    "hooks": tool.metadata.get("hooks") or [],
                },
                stashed=tool.status == ToolStatus.DISABLED,
            )
        elif tool.type == ToolType.SKILL:
            source_dir = common.skill_directory(tool)
            common.copy_skill(
                self.display_name, source_dir, self._skills_dir(scope) / source_dir.name
            )
        elif tool.type == ToolType.COMMAND:
            common.copy_markdown_file(self.display_name, tool, self._commands_dir(scope))
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def remove_tool(self, tool: ToolEntity) -> None:
        self._refuse_managed(tool.scope, "remove")
        if tool.type == ToolType.MCP_SERVER:
            path, schema_name = self._mcp_file(tool.scope)
            writers.remove_mcp_server(self._config, path, schema_name, tool.name)
        elif tool.type == ToolType.HOOK:
            writers.remove_hook(
                self._config,
                tool.source.file_path,
                tool.metadata["eventName"],
                tool.metadata.get("matcher") or "",
                _index_hint(tool),
                stashed=bool(tool.metadata.get("stashed")),
            )
        elif tool.type == ToolType.SKILL:
            common.remove_skill(
                self.display_name, self._config.backups, common.skill_directory(tool)
            )
        elif tool.type == ToolType.COMMAND:
            common.remove_markdown_file(
                self.display_name, self._config.backups, tool.source.file_path
            )
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def toggle_tool(self, tool: ToolEntity) -> None:
        self._refuse_managed(tool.scope, "toggle")
        disable = is_toggle_disable(tool)
        logger.debug("%s %s %s", "Disabling" if disable else "Enabling", tool.type.value, tool.name)

        if tool.type == ToolType.MCP_SERVER:
            self._toggle_mcp_server(tool, disable)
        elif tool.type == ToolType.HOOK:
            writers.set_hook_disabled(
                self._config,
                tool.source.file_path,
                tool.metadata["eventName"],
                tool.metadata.get("matcher") or "",
                _index_hint(tool),
                disable,
            )
        elif tool.type in (ToolType.SKILL, ToolType.COMMAND):
            common.rename_toggle(self.display_name, common.toggle_target(tool), disable)
        else:
            raise AdapterConfigError(self.display_name, f"Unsupported tool type: {tool.type.value}")

    def _toggle_mcp_server(self, tool: ToolEntity, disable: bool) -> None:
        path, schema_name = self._mcp_file(tool.scope)
        config = tool.metadata.get("config") or {}
        if disable or config.get("disabled") is True:
            writers.set_mcp_server_disabled(self._config, path, schema_name, tool.name, disable)
        if disable:
            return
        settings_path = self._settings_path(tool.scope)
        listed = parsers.read_disabled_mcp_servers(
            self._config.file_io, self._config.schemas, settings_path
        )
        if tool.name in listed:
            writers.drop_from_disabled_list(self._config, settings_path, tool.name)

    # --- installation ---

    def install_mcp_server(
        self, scope: ConfigScope, name: str, config: dict[str, Any]
    ) -> None:
        self._refuse_managed(scope, "install_mcp_server")
        path, schema_name = self._mcp_file(scope)
        writers.add_mcp_server(self._config, path, schema_name, name, config)

    def install_skill(self, scope: ConfigScope, name: str, files: dict[str, str]) -> None:
        if SKILL_FILENAME not in files:
            raise AdapterConfigError(self.display_name, f"Skill {name} has no {SKILL_FILENAME}")
        target = self._skills_dir(scope) / name
        if target.exists():
            raise AdapterConfigError(self.display_name, f"Target already exists: {target}")
        common.write_files(target, files)

    def install_command(
        self, scope: ConfigScope, name: str, files: dict[str, str]
    ) -> None:
        base = self._commands_dir(scope)
        if len(files) == 1:
            ((file_name, content),) = files.items()
            if not file_name.endswith(MARKDOWN_SUFFIX):
                file_name = f"{name}{MARKDOWN_SUFFIX}"
            common.write_files(base, {file_name: content})
        else:
            common.write_files(base / name, files)

    def install_hook(
        self, scope: ConfigScope, event_name: str, matcher_group: dict[str, Any]
    ) -> None:
        self._refuse_managed(scope, "install_hook")
        writers.add_hook(self._config, self._settings_path(scope), event_name, matcher_group)

    # --- environment ---

    def get_watch_paths(self, scope: ConfigScope) -> list[Path]:
        paths = self._paths
        root = paths.workspace_root
        if scope == ConfigScope.USER:
            return [
                paths.user_settings_json,
                paths.user_claude_json,
                paths.user_skills_dir,
                paths.user_commands_dir,
            ]
        if scope == ConfigScope.PROJECT and root is not None:
            return [
                paths.project_settings_json(root),
                paths.project_local_settings_json(root),
                paths.project_mcp_json(root),
                paths.project_skills_dir(root),
                paths.project_commands_dir(root),
            ]
        if scope == ConfigScope.LOCAL and root is not None:
            return [paths.project_local_settings_json(root)]
        if scope == ConfigScope.MANAGED:
            return [paths.managed_settings_json, paths.managed_mcp_json]
        return []

    def detect(self) -> bool:
        file_io = self._config.file_io
        return file_io.exists(self._paths.user_claude_dir) or file_io.exists(
            self._paths.user_claude_json
        )

    # --- path routing ---

    def _refuse_managed(self, scope: ConfigScope, operation: str) -> None:
        if scope == ConfigScope.MANAGED:
            raise AdapterScopeError(self.display_name, scope.value, operation)

    def _workspace(self, scope: ConfigScope, operation: str) -> Path:
        root = self._paths.workspace_root
        if root is None:
            raise AdapterScopeError(
                self.display_name, scope.value, f"{operation} (no workspace open)"
            )
        return root

    def _settings_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return self._paths.user_settings_json
        if scope == ConfigScope.PROJECT:
            return self._paths.project_settings_json(self._workspace(scope, "settings"))
        if scope == ConfigScope.LOCAL:
            return self._paths.project_local_settings_json(self._workspace(scope, "settings"))
        return self._paths.managed_settings_json

    def _mcp_file(self, scope: ConfigScope) -> tuple[Path, str]:
        if scope == ConfigScope.USER:
            return self._paths.user_claude_json, names.CLAUDE_JSON
        if scope == ConfigScope.PROJECT:
            return self._paths.project_mcp_json(self._workspace(scope, "mcp")), names.MCP_FILE
        if scope == ConfigScope.MANAGED:
            return self._paths.managed_mcp_json, names.MCP_FILE
        raise AdapterScopeError(self.display_name, scope.value, "mcp")

    def _skills_dir_or_none(self, scope: ConfigScope) -> Optional[Path]:
        root = self._paths.workspace_root
        if scope == ConfigScope.USER:
            return self._paths.user_skills_dir
        if scope == ConfigScope.PROJECT and root is not None:
            return self._paths.project_skills_dir(root)
        return None

    def _commands_dir_or_none(self, scope: ConfigScope) -> Optional[Path]:
        root = self._paths.workspace_root
        if scope == ConfigScope.USER:
            return self._paths.user_commands_dir
        if scope == ConfigScope.PROJECT and root is not None:
            return self._paths.project_commands_dir(root)
        return None

    def _skills_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.PROJECT:
            self._workspace(scope, "skills")
        skills_dir = self._skills_dir_or_none(scope)
        if skills_dir is None:
            raise AdapterScopeError(self.display_name, scope.value, "skills")
        return skills_dir

    def _commands_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.PROJECT:
            self._workspace(scope, "commands")
        commands_dir = self._commands_dir_or_none(scope)
        if commands_dir is None:
            raise AdapterScopeError(self.display_name, scope.value, "commands")
        return commands_dir

    @staticmethod
    def _server_config(tool: ToolEntity) -> dict[str, Any]:
        config = dict(tool.metadata.get("config") or {})
        if not config:
            for key in ("command", "args", "env", "transport", "url"):
                if tool.metadata.get(key):
                    config[key] = tool.metadata[key]
        if tool.status == ToolStatus.DISABLED:
            config["disabled"] = True
        else:
            config.pop("disabled", None)
        return config


def _index_hint(tool: ToolEntity) -> Optional[int]:
    tail = tool.id.rsplit(":", 1)[-1]
    return int(tail) if tail.isdigit() else None
