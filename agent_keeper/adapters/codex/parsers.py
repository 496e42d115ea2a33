from pathlib import Path
from typing import Any

from agent_keeper.adapters.codex import schemas as names
from agent_keeper.adapters.common import iter_markdown_files, parse_markdown_tool
from agent_keeper.fileio import FileIO
from agent_keeper.models import ConfigScope, ToolEntity, ToolSource, ToolStatus, ToolType
from agent_keeper.schemas import SchemaRegistry


def _config_error(path: Path, scope: ConfigScope, detail: str) -> ToolEntity:
    return ToolEntity.error(
        id=f"mcp-error:codex:{scope.value}:{path}",
        type=ToolType.MCP_SERVER,
        name="Codex Config Error",
        scope=scope,
        file_path=path,
        detail=detail,
    )


def _server_entity(
    name: str, config: dict[str, Any], scope: ConfigScope, path: Path
) -> ToolEntity:
    return ToolEntity(
        id=f"mcp:codex:{scope.value}:{name}",
        type=ToolType.MCP_SERVER,
        name=name,
        scope=scope,
        # absent means enabled
        status=ToolStatus.DISABLED if config.get("enabled") is False else ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        metadata={
            "command": config.get("command"),
            "args": config.get("args", []),
            "url": config.get("url"),
            "env": config.get("env", {}),
            "enabled": config.get("enabled"),
            "enabledTools": config.get("enabled_tools"),
            "disabledTools": config.get("disabled_tools"),
            "config": config,
        },
    )


def parse_config_mcp_servers(
    file_io: FileIO, schemas: SchemaRegistry, path: Path, scope: ConfigScope
) -> list[ToolEntity]:
    """MCP servers declared under ``[mcp_servers.<name>]`` in config.toml."""
    read = file_io.read_toml(path)
    if not read.ok:
        return [_config_error(path, scope, read.error or "unreadable")]
    if read.data is None:
        return []

    result = schemas.validate(names.CONFIG, read.data)
    if not result.ok:
        return [_config_error(path, scope, result.summary())]

    servers = read.data.get("mcp_servers") or {}
    return [_server_entity(name, config, scope, path) for name, config in servers.items()]


def parse_prompts_dir(
    file_io: FileIO, schemas: SchemaRegistry, prompts_dir: Path, scope: ConfigScope
) -> list[ToolEntity]:
    tools = [
        parse_markdown_tool(
            file_io,
            schemas,
            path,
            prompts_dir,
            scope,
            ToolType.CUSTOM_PROMPT,
            "prompt:codex",
        )
        for path in iter_markdown_files(prompts_dir, recursive=False)
    ]
    return sorted(tools, key=lambda tool: tool.name)
