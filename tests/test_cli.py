import sys
from pathlib import Path

import pytest

from agent_keeper.__main__ import cli, main
from agent_keeper.backup import backup_path
from agent_keeper.profiles.workspace import association_path


@pytest.fixture
def invoke(cli_runner, tmp_path: Path, workspace: Path):
    def _invoke(*args: str, **kwargs):
        base = [
            "-w",
            str(workspace),
            "--home",
            str(tmp_path),
            "--state-file",
            str(tmp_path / "state.json"),
            "--managed-dir",
            str(tmp_path / "managed"),
        ]
        kwargs.setdefault("env", {"COLUMNS": "200"})
        return cli_runner.invoke(cli, [*base, *args], **kwargs)

    return _invoke


@pytest.fixture
def claude_json(tmp_path: Path, write_json) -> Path:
    path = tmp_path / ".claude.json"
    write_json(path, {"mcpServers": {"docs": {"command": "npx"}, "search": {"command": "uvx"}}})
    return path


@pytest.fixture
def claude_active(invoke, claude_json):
    result = invoke("agents", "use", "claude-code")
    assert result.exit_code == 0, result.output
    return claude_json


# --- agents ---


def test_agents_list_shows_both_agents(invoke) -> None:
    result = invoke("agents", "list")

    assert result.exit_code == 0, result.output
    assert "claude-code" in result.output
    assert "codex" in result.output


def test_agents_use_persists_choice(invoke, tmp_path: Path, read_json) -> None:
    result = invoke("agents", "use", "codex")

    assert result.exit_code == 0, result.output
    assert "Active agent: Codex (codex)" in result.output
    assert read_json(tmp_path / "state.json")["agent-keeper.activeAdapter"] == "codex"


def test_agents_use_unknown(invoke) -> None:
    result = invoke("agents", "use", "nope")

    assert result.exit_code == 1
    assert "Unknown agent: nope (known: claude-code, codex)" in result.output


def test_agents_detect(invoke, tmp_path: Path) -> None:
    result = invoke("agents", "detect")
    assert "No single agent detected" in result.output

    (tmp_path / ".claude").mkdir()
    result = invoke("agents", "detect")
    assert "Active agent: Claude Code (claude-code)" in result.output


# --- tools ---


def test_tools_require_an_active_agent(invoke) -> None:
    result = invoke("tools", "list")

    assert result.exit_code == 1
    assert "No active agent" in result.output


def test_tools_list(invoke, claude_active) -> None:
    result = invoke("tools", "list", "--type", "mcp_server")

    assert result.exit_code == 0, result.output
    assert "docs" in result.output
    assert "search" in result.output


def test_tools_scope_empty(invoke, claude_active) -> None:
    result = invoke("tools", "scope", "skill", "project")

    assert result.exit_code == 0, result.output
    assert "No tools found." in result.output


def test_tools_toggle(invoke, claude_active, read_json) -> None:
    result = invoke("tools", "toggle", "mcp_server", "docs")

    assert result.exit_code == 0, result.output
    assert "Disabled: docs" in result.output
    assert read_json(claude_active)["mcpServers"]["docs"]["disabled"] is True

    result = invoke("tools", "toggle", "mcp_server", "docs")
    assert "Enabled: docs" in result.output
    assert "disabled" not in read_json(claude_active)["mcpServers"]["docs"]


def test_tools_toggle_unknown_tool(invoke, claude_active) -> None:
    result = invoke("tools", "toggle", "mcp_server", "nope", "--scope", "user")

    assert result.exit_code == 1
    assert "mcp_server not found in user scope: nope" in result.output


def test_tools_toggle_unsupported_type(invoke, claude_active) -> None:
    result = invoke("tools", "toggle", "custom_prompt", "x")

    assert result.exit_code == 1
    assert "does not manage custom_prompt tools" in result.output


def test_tools_remove_requires_confirmation(invoke, claude_active, read_json) -> None:
    result = invoke("tools", "remove", "mcp_server", "docs", input="n\n")

    assert result.exit_code == 1
    assert "docs" in read_json(claude_active)["mcpServers"]

    result = invoke("tools", "remove", "mcp_server", "docs", "--yes")

    assert result.exit_code == 0, result.output
    assert "docs" not in read_json(claude_active)["mcpServers"]


def test_tools_move_conflict_needs_force(invoke, claude_active, workspace, write_json, read_json) -> None:
    project_mcp = workspace / ".mcp.json"
    write_json(project_mcp, {"mcpServers": {"docs": {"command": "old"}}})

    result = invoke("tools", "move", "mcp_server", "docs", "project", "--scope", "user")
    assert result.exit_code == 1
    assert "already exists in project scope" in result.output

    result = invoke("tools", "move", "mcp_server", "docs", "project", "--scope", "user", "--force")
    assert result.exit_code == 0, result.output
    assert read_json(project_mcp) == {"mcpServers": {"docs": {"command": "npx"}}}
    assert "docs" not in read_json(claude_active)["mcpServers"]


def test_tools_move_to_same_scope_is_rejected(invoke, claude_active) -> None:
    result = invoke("tools", "move", "mcp_server", "docs", "user")

    assert result.exit_code == 1
    assert "Cannot move docs from user to user" in result.output


# --- profiles ---


def test_profile_lifecycle(invoke, claude_active, read_json) -> None:
    assert "No profiles yet" in invoke("profiles", "list").output

    result = invoke("profiles", "create", "work")
    assert result.exit_code == 0, result.output
    assert "Profile saved: work (2 tools)" in result.output
    assert invoke("profiles", "create", "work").exit_code == 1

    invoke("tools", "toggle", "mcp_server", "docs")
    assert read_json(claude_active)["mcpServers"]["docs"]["disabled"] is True

    result = invoke("profiles", "switch", "work")
    assert result.exit_code == 0, result.output
    assert "switch: work" in result.output
    assert "disabled" not in read_json(claude_active)["mcpServers"]["docs"]

    assert "work (active)" in invoke("profiles", "list").output
    assert "mcp_server:docs" in invoke("profiles", "show", "work").output

    result = invoke("profiles", "deactivate")
    assert result.exit_code == 0, result.output
    assert "(active)" not in invoke("profiles", "list").output

    result = invoke("profiles", "delete", "work", "--yes")
    assert "Profile deleted: work" in result.output
    assert "No profiles yet" in invoke("profiles", "list").output


def test_toggle_updates_active_profile(invoke, claude_active, tmp_path: Path, read_json) -> None:
    invoke("profiles", "create", "work")
    invoke("profiles", "switch", "work")

    invoke("tools", "toggle", "mcp_server", "search")

    store = read_json(tmp_path / "state.json")["agent-keeper.profiles"]
    entries = {entry["key"]: entry["enabled"] for entry in store["profiles"][0]["tools"]}
    assert entries["mcp_server:search"] is False


def test_profile_reconcile(invoke, claude_active, write_json) -> None:
    invoke("profiles", "create", "work")
    write_json(claude_active, {"mcpServers": {"docs": {"command": "npx"}}})

    result = invoke("profiles", "reconcile", "work")

    assert result.exit_code == 0, result.output
    assert "kept 1, removed 1" in result.output


def _stored_keys(tmp_path: Path, read_json) -> list[str]:
    store = read_json(tmp_path / "state.json")["agent-keeper.profiles"]
    return [entry["key"] for entry in store["profiles"][0]["tools"]]


def test_profiles_list_prunes_deleted_tools(
    invoke, claude_active, write_json, read_json, tmp_path: Path
) -> None:
    invoke("profiles", "create", "work")
    write_json(claude_active, {"mcpServers": {"docs": {"command": "npx"}}})

    result = invoke("profiles", "list")

    assert result.exit_code == 0, result.output
    assert "kept 1, removed 1" in result.output
    assert _stored_keys(tmp_path, read_json) == ["mcp_server:docs"]


def test_profiles_switch_prunes_deleted_tools(
    invoke, claude_active, write_json, read_json, tmp_path: Path
) -> None:
    invoke("profiles", "create", "work")
    write_json(claude_active, {"mcpServers": {"docs": {"command": "npx"}}})

    result = invoke("profiles", "switch", "work")

    assert result.exit_code == 0, result.output
    assert "kept 1, removed 1" in result.output
    assert _stored_keys(tmp_path, read_json) == ["mcp_server:docs"]


def test_profiles_clone_to_other_agent(
    invoke, claude_active, write_json, read_json, tmp_path: Path
) -> None:
    write_json(
        tmp_path / ".claude" / "settings.json",
        {"hooks": {"Stop": [{"hooks": [{"type": "command", "command": "say done"}]}]}},
    )
    invoke("profiles", "create", "work")

    result = invoke("profiles", "clone", "work", "codex")

    assert result.exit_code == 0, result.output
    assert "work (Codex)" in result.output
    assert "Skipped 1 unsupported" in result.output
    assert "hook:Stop:" in result.output
    store = read_json(tmp_path / "state.json")["agent-keeper.profiles"]
    clone = store["profiles"][1]
    assert clone["agentId"] == "codex"
    assert [entry["key"] for entry in clone["tools"]] == ["mcp_server:docs", "mcp_server:search"]

    assert invoke("profiles", "clone", "work", "codex").exit_code == 1
    assert "work (Codex)" not in invoke("profiles", "list").output


def test_profiles_clone_unknown_agent(invoke, claude_active) -> None:
    invoke("profiles", "create", "work")

    result = invoke("profiles", "clone", "work", "nope")

    assert result.exit_code == 1
    assert "Unknown agent: nope" in result.output


def test_unknown_profile(invoke, claude_active) -> None:
    result = invoke("profiles", "show", "nope")

    assert result.exit_code == 1
    assert "Profile not found: nope" in result.output


# --- backups ---


def test_backups_list_and_restore(invoke, claude_active, read_json) -> None:
    assert "No backups" in invoke("backups", "list", str(claude_active)).output

    invoke("tools", "toggle", "mcp_server", "docs")
    result = invoke("backups", "list", str(claude_active))
    assert result.exit_code == 0, result.output
    assert ".claude.json.bak.1" in result.output

    result = invoke("backups", "restore", str(claude_active))
    assert result.exit_code == 0, result.output
    assert "Restored" in result.output
    assert "disabled" not in read_json(claude_active)["mcpServers"]["docs"]
    assert backup_path(claude_active, 2).exists()


def test_backups_restore_missing_slot(invoke, claude_active) -> None:
    result = invoke("backups", "restore", str(claude_active), "--slot", "3")

    assert result.exit_code == 1
    assert "No backup in slot 3" in result.output


# --- workspace ---


def test_workspace_association_flow(invoke, claude_active, workspace, read_json) -> None:
    invoke("profiles", "create", "work")
    invoke("profiles", "create", "focus")

    result = invoke("workspace", "associate", "work")
    assert result.exit_code == 0, result.output
    assert read_json(association_path(workspace)) == {"profileName": "work"}

    result = invoke("workspace", "activate")
    assert result.exit_code == 0, result.output
    assert "switch: work" in result.output

    invoke("profiles", "switch", "focus")
    status = invoke("workspace", "status").output
    assert "Associated profile: work" in status
    assert "Manual override: yes" in status
    assert "Active profile: focus" in status
    assert "Nothing to activate" in invoke("workspace", "activate").output

    result = invoke("workspace", "dissociate")
    assert result.exit_code == 0, result.output
    assert not association_path(workspace).exists()


# --- entry point ---


def test_main_reports_errors_with_exit_code_two(monkeypatch, capsys, tmp_path: Path) -> None:
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "agent-keeper",
            "--state-file",
            str(tmp_path / "state.json"),
            "agents",
            "use",
            "nope",
        ],
    )

    assert main() == 2
    assert "Unknown agent: nope" in capsys.readouterr().err


def test_main_success(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        sys, "argv", ["agent-keeper", "--state-file", str(tmp_path / "state.json"), "agents", "list"]
    )

    assert main() == 0
