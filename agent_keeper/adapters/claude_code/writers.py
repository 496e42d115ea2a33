"""JSON mutations of Claude Code MCP and settings files.

Every function runs through ``ConfigService.write_config_file`` so the file is
re-read, mutated, validated, backed up and written atomically.
"""

from pathlib import Path
from typing import Any, Optional

from agent_keeper.adapters.claude_code import schemas as names
from agent_keeper.config_service import ConfigService
from agent_keeper.errors import AdapterConfigError

AGENT_NAME = "Claude Code"

LIVE_HOOKS_KEY = "hooks"
STASHED_HOOKS_KEY = "_disabledHooks"


# --- mcp servers ---


def set_mcp_server_disabled(
    config_service: ConfigService,
    path: Path,
    schema_name: str,
    server_name: str,
    disabled: bool,
) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        servers = current.get("mcpServers") or {}
        server = servers.get(server_name)
        if server is None:
            raise AdapterConfigError(AGENT_NAME, f"MCP server not found in {path}: {server_name}")
        if disabled:
            server["disabled"] = True
        else:
            server.pop("disabled", None)
        return current

    config_service.write_config_file(path, schema_name, mutate)


def add_mcp_server(
    config_service: ConfigService,
    path: Path,
    schema_name: str,
    server_name: str,
    server_config: dict[str, Any],
) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        servers = current.setdefault("mcpServers", {})
        servers[server_name] = dict(server_config)
        return current

    config_service.write_config_file(path, schema_name, mutate)


def remove_mcp_server(
    config_service: ConfigService, path: Path, schema_name: str, server_name: str
) -> None:
    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        servers = current.get("mcpServers") or {}
        if server_name not in servers:
            raise AdapterConfigError(AGENT_NAME, f"MCP server not found in {path}: {server_name}")
        del servers[server_name]
        return current

    config_service.write_config_file(path, schema_name, mutate)


def drop_from_disabled_list(
    config_service: ConfigService, settings_path: Path, server_name: str
) -> None:
    """Remove ``server_name`` from a settings file's ``disabledMcpServers``."""

    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        listed = current.get("disabledMcpServers") or []
        remaining = [name for name in listed if name != server_name]
        if remaining:
            current["disabledMcpServers"] = remaining
        else:
            current.pop("disabledMcpServers", None)
        return current

    config_service.write_config_file(settings_path, names.SETTINGS_FILE, mutate)


# --- hooks ---


def _locate_group(
    groups: list[dict[str, Any]], matcher: str, index_hint: Optional[int]
) -> Optional[int]:
    if index_hint is not None and 0 <= index_hint < len(groups):
        if groups[index_hint].get("matcher", "") == matcher:
            return index_hint
    for index, group in enumerate(groups):
        if group.get("matcher", "") == matcher:
            return index
    return None


def _pop_group(
    document: dict[str, Any],
    key: str,
    event_name: str,
    matcher: str,
    index_hint: Optional[int],
    path: Path,
) -> dict[str, Any]:
    events = document.get(key) or {}
    groups = events.get(event_name) or []
    index = _locate_group(groups, matcher, index_hint)
    if index is None:
        label = f"{event_name} ({matcher})" if matcher else event_name
        raise AdapterConfigError(AGENT_NAME, f"Hook not found in {path}: {label}")
    group = groups.pop(index)
    if not groups:
        del events[event_name]
    if key == STASHED_HOOKS_KEY and not events:
        document.pop(STASHED_HOOKS_KEY, None)
    return group


def _push_group(
    document: dict[str, Any], key: str, event_name: str, group: dict[str, Any]
) -> None:
    events = document.setdefault(key, {})
    events.setdefault(event_name, []).append(group)


def set_hook_disabled(
    config_service: ConfigService,
    path: Path,
    event_name: str,
    matcher: str,
    index_hint: Optional[int],
    disabled: bool,
) -> None:
    """Move a matcher group between the live and stashed hook maps."""
    source, target = (
        (LIVE_HOOKS_KEY, STASHED_HOOKS_KEY) if disabled else (STASHED_HOOKS_KEY, LIVE_HOOKS_KEY)
    )

    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        group = _pop_group(current, source, event_name, matcher, index_hint, path)
        _push_group(current, target, event_name, group)
        return current

    config_service.write_config_file(path, names.SETTINGS_FILE, mutate)


def add_hook(
    config_service: ConfigService,
    path: Path,
    event_name: str,
    matcher_group: dict[str, Any],
    stashed: bool = False,
) -> None:
    key = STASHED_HOOKS_KEY if stashed else LIVE_HOOKS_KEY

    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        _push_group(current, key, event_name, dict(matcher_group))
        return current

    config_service.write_config_file(path, names.SETTINGS_FILE, mutate)


def remove_hook(
    config_service: ConfigService,
    path: Path,
    event_name: str,
    matcher: str,
    index_hint: Optional[int],
    stashed: bool = False,
) -> None:
    key = STASHED_HOOKS_KEY if stashed else LIVE_HOOKS_KEY

    def mutate(current: dict[str, Any]) -> dict[str, Any]:
        _pop_group(current, key, event_name, matcher, index_hint, path)
        return current

    config_service.write_config_file(path, names.SETTINGS_FILE, mutate)
