from pathlib import Path

import pytest

from agent_keeper.adapters.registry import AdapterRegistry
from agent_keeper.backup import BackupService
from agent_keeper.config_service import ConfigService, resolve_scopes
from agent_keeper.errors import NoActiveAdapterError, UnknownAdapterError
from agent_keeper.fileio import FileIO
from agent_keeper.keys import canonical_key
from agent_keeper.models import SCOPE_PRECEDENCE, ConfigScope, ToolStatus, ToolType
from agent_keeper.schemas import SchemaRegistry


def test_empty_input_resolves_to_empty() -> None:
    assert resolve_scopes([]) == []


def test_single_tool_gets_one_scope_entry(make_tool) -> None:
    tool = make_tool(ToolType.SKILL, "review")

    [resolved] = resolve_scopes([tool])

    assert resolved.id == tool.id
    assert [entry.scope for entry in resolved.scope_entries] == [ConfigScope.USER]


def test_user_enabled_project_disabled_resolves_to_project(make_tool) -> None:
    user = make_tool(ToolType.MCP_SERVER, "docs", ConfigScope.USER)
    project = make_tool(
        ToolType.MCP_SERVER, "docs", ConfigScope.PROJECT, status=ToolStatus.DISABLED
    )

    [resolved] = resolve_scopes([user, project])

    assert resolved.scope == ConfigScope.PROJECT
    assert resolved.status == ToolStatus.DISABLED
    assert [(entry.scope, entry.status) for entry in resolved.scope_entries] == [
        (ConfigScope.USER, ToolStatus.ENABLED),
        (ConfigScope.PROJECT, ToolStatus.DISABLED),
    ]


@pytest.mark.parametrize("winner", list(ConfigScope))
def test_precedence_picks_highest_scope_regardless_of_order(make_tool, winner) -> None:
    candidates = [
        make_tool(ToolType.HOOK, "Stop", scope, eventName="Stop")
        for scope in SCOPE_PRECEDENCE
        if SCOPE_PRECEDENCE.index(scope) >= SCOPE_PRECEDENCE.index(winner)
    ]

    for ordering in (candidates, list(reversed(candidates))):
        [resolved] = resolve_scopes(ordering)
        assert resolved.scope == winner
        assert len(resolved.scope_entries) == len(candidates)


def test_distinct_keys_keep_first_appearance_order(make_tool) -> None:
    tools = [
        make_tool(ToolType.SKILL, "b"),
        make_tool(ToolType.SKILL, "a"),
        make_tool(ToolType.SKILL, "b", ConfigScope.PROJECT),
    ]

    resolved = resolve_scopes(tools)

    assert [canonical_key(tool) for tool in resolved] == ["skill:b", "skill:a"]
    assert len({canonical_key(tool) for tool in resolved}) == len(resolved)


# --- reading through the active adapter ---


def test_read_all_tools_merges_applicable_scopes(
    config_service, fake_adapter, make_tool
) -> None:
    fake_adapter.tools = [
        make_tool(ToolType.SKILL, "review", ConfigScope.USER),
        make_tool(ToolType.SKILL, "review", ConfigScope.PROJECT),
        make_tool(ToolType.SKILL, "ignored", ConfigScope.MANAGED),
        make_tool(ToolType.MCP_SERVER, "docs"),
    ]

    tools = config_service.read_all_tools(ToolType.SKILL)

    assert [(tool.name, tool.scope) for tool in tools] == [("review", ConfigScope.PROJECT)]


def test_scope_read_failure_becomes_error_entity(
    config_service, fake_adapter, make_tool
) -> None:
    fake_adapter.tools = [make_tool(ToolType.MCP_SERVER, "docs")]
    fake_adapter.read_failures[(ToolType.MCP_SERVER, ConfigScope.PROJECT)] = OSError("denied")

    tools = config_service.read_all_tools(ToolType.MCP_SERVER)

    by_scope = {tool.scope: tool for tool in tools}
    assert by_scope[ConfigScope.USER].name == "docs"
    error = by_scope[ConfigScope.PROJECT]
    assert error.status == ToolStatus.ERROR
    assert error.status_detail == "denied"
    assert error.source.file_path == Path("/fake/project")


def test_programming_errors_propagate_from_reads(config_service, fake_adapter) -> None:
    fake_adapter.read_failures[(ToolType.SKILL, ConfigScope.USER)] = UnknownAdapterError("x")

    with pytest.raises(UnknownAdapterError):
        config_service.read_all_tools(ToolType.SKILL)


def test_read_without_active_adapter_raises() -> None:
    service = ConfigService(FileIO(), BackupService(), SchemaRegistry(), AdapterRegistry())

    with pytest.raises(NoActiveAdapterError):
        service.read_all_tools(ToolType.SKILL)


def test_read_tools_by_scope_is_unresolved(config_service, fake_adapter, make_tool) -> None:
    fake_adapter.tools = [make_tool(ToolType.COMMAND, "deploy", ConfigScope.PROJECT)]

    [tool] = config_service.read_tools_by_scope(ToolType.COMMAND, ConfigScope.PROJECT)

    assert tool.scope_entries is None
