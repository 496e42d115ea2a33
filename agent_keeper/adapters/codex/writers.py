"""TOML mutations of Codex ``config.toml``.

Codex treats a server without an ``enabled`` key as enabled, so enabling
removes the key rather than writing ``enabled = true``.
"""

from pathlib import Path
from typing import Any

from agent_keeper.adapters.codex import schemas as names
from agent_keeper.config_service import ConfigService
from agent_keeper.errors import AdapterConfigError

AGENT_NAME = "Codex"


def _server(current: dict[str, Any], server_name: str, path: Path) -> dict[str, Any]:
    server = (current.get("mcp_servers") or {}).get(server_name)
    if server is None:
        raise AdapterConfigError(AGENT_NAME, f"MCP server not found in {path}: {server_name}")
    return server


def add_mcp_server(
    config_service: ConfigService, path: Path, server_name: str, server_config: dict[str, Any]
) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        current.setdefault("mcp_servers", {})[server_name] = dict(server_config)
        return current

    config_service.write_toml_config_file(path, names.CONFIG, mutate)


def remove_mcp_server(config_service: ConfigService, path: Path, server_name: str) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        _server(current, server_name, path)
        servers = current["mcp_servers"]
        del servers[server_name]
        if not servers:
            del current["mcp_servers"]
        return current

    config_service.write_toml_config_file(path, names.CONFIG, mutate)


def set_mcp_server_enabled(
    config_service: ConfigService, path: Path, server_name: str, enabled: bool
) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        server = _server(current, server_name, path)
        if enabled:
            server.pop("enabled", None)
        else:
            server["enabled"] = False
        return current

    config_service.write_toml_config_file(path, names.CONFIG, mutate)
