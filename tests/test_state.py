from pathlib import Path

import pytest

from agent_keeper.errors import ConfigReadError
from agent_keeper.state import JsonFileStateStore, MemoryStateStore, default_state_path


def test_default_state_path_uses_xdg_config_home(tmp_path: Path) -> None:
    assert default_state_path() == tmp_path / ".config" / "agent-keeper" / "state.json"


def test_default_state_path_env_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("AGENT_KEEPER_STATE", str(tmp_path / "custom.json"))

    assert default_state_path() == tmp_path / "custom.json"


def test_memory_store_returns_copies() -> None:
    store = MemoryStateStore({"key": {"a": 1}})
    value = store.get("key")
    value["a"] = 2

    assert store.get("key") == {"a": 1}
    assert store.get("missing", "fallback") == "fallback"


def test_memory_store_none_deletes() -> None:
    store = MemoryStateStore()
    store.update("key", [1])
    store.update("key", None)

    assert store.get("key") is None


def test_json_store_persists_between_instances(tmp_path: Path, read_json) -> None:
    path = tmp_path / "state" / "state.json"
    JsonFileStateStore(path).update("agent", "codex")
    JsonFileStateStore(path).update("other", 1)

    assert JsonFileStateStore(path).get("agent") == "codex"
    assert read_json(path) == {"agent": "codex", "other": 1}


def test_json_store_sees_external_edits(tmp_path: Path, write_json) -> None:
    path = tmp_path / "state.json"
    store = JsonFileStateStore(path)
    store.update("agent", "codex")

    write_json(path, {"agent": "claude-code"})

    assert store.get("agent") == "claude-code"


def test_json_store_rejects_non_object(tmp_path: Path, write_json) -> None:
    path = tmp_path / "state.json"
    write_json(path, [1, 2])

    with pytest.raises(ConfigReadError):
        JsonFileStateStore(path).get("agent")
