from pathlib import Path
from typing import Any

from agent_keeper.adapters.claude_code import schemas as names
from agent_keeper.adapters.common import iter_markdown_files, parse_markdown_tool
from agent_keeper.fileio import FileIO
from agent_keeper.models import ConfigScope, ToolEntity, ToolSource, ToolStatus, ToolType
from agent_keeper.schemas import SchemaRegistry


def _settings_error(path: Path, scope: ConfigScope, detail: str) -> ToolEntity:
    return ToolEntity.error(
        id=f"settings-error:{scope.value}:{path}",
        type=ToolType.HOOK,
        name="Settings Error",
        scope=scope,
        file_path=path,
        detail=detail,
    )


def _mcp_error(path: Path, scope: ConfigScope, detail: str) -> ToolEntity:
    return ToolEntity.error(
        id=f"mcp-error:{scope.value}:{path}",
        type=ToolType.MCP_SERVER,
        name="MCP Config Error",
        scope=scope,
        file_path=path,
        detail=detail,
    )


def _hook_entity(
    group: dict[str, Any],
    event_name: str,
    index: int,
    scope: ConfigScope,
    path: Path,
    stashed: bool,
) -> ToolEntity:
    matcher = group.get("matcher", "")
    hooks = group.get("hooks", [])
    prefix = "hook-stashed" if stashed else "hook"
    return ToolEntity(
        id=f"{prefix}:{scope.value}:{event_name}:{index}",
        type=ToolType.HOOK,
        name=f"{event_name} ({matcher})" if matcher else event_name,
        scope=scope,
        status=ToolStatus.DISABLED if stashed else ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        metadata={
            "eventName": event_name,
            "matcher": matcher,
            "hooks": hooks,
            "type": hooks[0].get("type") if hooks else None,
            "stashed": stashed,
        },
    )


def parse_settings_file(
    file_io: FileIO, schemas: SchemaRegistry, path: Path, scope: ConfigScope
) -> list[ToolEntity]:
    """Hook matcher groups of one settings file, live and stashed."""
    read = file_io.read_json(path)
    if not read.ok:
        return [_settings_error(path, scope, read.error or "unreadable")]
    if read.data is None:
        return []

    result = schemas.validate(names.SETTINGS_FILE, read.data)
    if not result.ok:
        return [_settings_error(path, scope, result.summary())]

    tools: list[ToolEntity] = []
    for key, stashed in (("hooks", False), ("_disabledHooks", True)):
        for event_name, groups in (result.document.get(key) or {}).items():
            for index, group in enumerate(groups):
                tools.append(_hook_entity(group, event_name, index, scope, path, stashed))
    return tools


def read_disabled_mcp_servers(
    file_io: FileIO, schemas: SchemaRegistry, path: Path
) -> set[str]:
    read = file_io.read_json(path)
    if not read.ok or read.data is None:
        return set()
    result = schemas.validate(names.SETTINGS_FILE, read.data)
    if not result.ok:
        return set()
    return set(result.document.get("disabledMcpServers") or [])


def _mcp_entities(
    servers: dict[str, Any], scope: ConfigScope, path: Path, disabled_names: set[str]
) -> list[ToolEntity]:
    tools: list[ToolEntity] = []
    for name, config in servers.items():
        disabled = name in disabled_names or config.get("disabled") is True
        tools.append(
            ToolEntity(
                id=f"mcp:{scope.value}:{name}",
                type=ToolType.MCP_SERVER,
                name=name,
                scope=scope,
                status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
                source=ToolSource(file_path=path),
                metadata={
                    "command": config.get("command"),
                    "args": config.get("args", []),
                    "env": config.get("env", {}),
                    "transport": config.get("transport") or config.get("type"),
                    "url": config.get("url"),
                    "config": config,
                },
            )
        )
    return tools


def parse_mcp_file(
    file_io: FileIO,
    schemas: SchemaRegistry,
    path: Path,
    scope: ConfigScope,
    disabled_names: set[str],
    schema_name: str = names.MCP_FILE,
) -> list[ToolEntity]:
    """MCP servers of ``.mcp.json``, ``managed-mcp.json`` or ``~/.claude.json``."""
    read = file_io.read_json(path)
    if not read.ok:
        return [_mcp_error(path, scope, read.error or "unreadable")]
    if read.data is None:
        return []

    result = schemas.validate(schema_name, read.data)
    if not result.ok:
        return [_mcp_error(path, scope, result.summary())]
    return _mcp_entities(read.data.get("mcpServers") or {}, scope, path, disabled_names)


def parse_claude_json(
    file_io: FileIO, schemas: SchemaRegistry, path: Path, disabled_names: set[str]
) -> list[ToolEntity]:
    return parse_mcp_file(
        file_io, schemas, path, ConfigScope.USER, disabled_names, names.CLAUDE_JSON
    )


def parse_commands_dir(
    file_io: FileIO, schemas: SchemaRegistry, commands_dir: Path, scope: ConfigScope
) -> list[ToolEntity]:
    return [
        parse_markdown_tool(
            file_io,
            schemas,
            path,
            commands_dir,
            scope,
            ToolType.COMMAND,
            "command",
            names.COMMAND_FRONTMATTER,
        )
        for path in iter_markdown_files(commands_dir, recursive=True)
    ]
