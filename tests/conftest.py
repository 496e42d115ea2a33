import sys
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()


from agent_keeper.adapters.base import PlatformAdapter  # noqa: E402
from agent_keeper.adapters.registry import AdapterRegistry  # noqa: E402
from agent_keeper.backup import BackupService  # noqa: E402
from agent_keeper.config_service import ConfigService  # noqa: E402
from agent_keeper.engine import Engine, build_engine  # noqa: E402
from agent_keeper.errors import AdapterConfigError  # noqa: E402
from agent_keeper.fileio import FileIO  # noqa: E402
from agent_keeper.models import (  # noqa: E402
    ConfigScope,
    ToolEntity,
    ToolSource,
    ToolStatus,
    ToolType,
)
from agent_keeper.profiles import ProfileService  # noqa: E402
from agent_keeper.schemas import SchemaRegistry  # noqa: E402
from agent_keeper.state import MemoryStateStore  # noqa: E402
from agent_keeper.tools import ToolManagerService  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.delenv("AGENT_KEEPER_STATE", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def read_json():
    def _read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def write_text():
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()


# --- fake adapter ---


def _tool(
    tool_type: ToolType,
    name: str,
    scope: ConfigScope = ConfigScope.USER,
    status: ToolStatus = ToolStatus.ENABLED,
    **metadata: Any,
) -> ToolEntity:
    return ToolEntity(
        id=f"{tool_type.value}:{scope.value}:{name}",
        type=tool_type,
        name=name,
        scope=scope,
        status=status,
        source=ToolSource(file_path=Path(f"/fake/{scope.value}/{name}")),
        metadata=dict(metadata),
    )


class FakeAdapter(PlatformAdapter):
    """In-memory adapter that records every call in order."""

    def __init__(
        self,
        adapter_id: str = "fake",
        tools: Optional[list[ToolEntity]] = None,
        detected: bool = False,
    ) -> None:
        self._id = adapter_id
        self.tools: list[ToolEntity] = list(tools or [])
        self.detected = detected
        self.calls: list[tuple[str, str]] = []
        self.fail_names: set[str] = set()
        self.read_failures: dict[tuple[ToolType, ConfigScope], Exception] = {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def display_name(self) -> str:
        return f"Fake {self._id}"

    @property
    def supported_tool_types(self) -> frozenset[ToolType]:
        return frozenset(ToolType)

    def read_tools(self, tool_type: ToolType, scope: ConfigScope) -> list[ToolEntity]:
        failure = self.read_failures.get((tool_type, scope))
        if failure is not None:
            raise failure
        return [tool for tool in self.tools if tool.type == tool_type and tool.scope == scope]

    def write_tool(self, tool: ToolEntity, scope: ConfigScope) -> None:
        self.calls.append(("write", tool.id))
        self._fail_if_requested(tool)
        self.tools.append(
            replace(tool, id=f"{tool.type.value}:{scope.value}:{tool.name}", scope=scope)
        )

    def remove_tool(self, tool: ToolEntity) -> None:
        self.calls.append(("remove", tool.id))
        self._fail_if_requested(tool)
        self.tools = [item for item in self.tools if item.id != tool.id]

    def toggle_tool(self, tool: ToolEntity) -> None:
        self.calls.append(("toggle:start", tool.id))
        self._fail_if_requested(tool)
        flipped = ToolStatus.DISABLED if tool.is_enabled else ToolStatus.ENABLED
        self.tools = [
            replace(item, status=flipped) if item.id == tool.id else item
            for item in self.tools
        ]
        self.calls.append(("toggle:end", tool.id))

    def get_watch_paths(self, scope: ConfigScope) -> list[Path]:
        return [Path(f"/fake/{scope.value}")]

    def detect(self) -> bool:
        return self.detected

    def _fail_if_requested(self, tool: ToolEntity) -> None:
        if tool.name in self.fail_names:
            raise AdapterConfigError(self.display_name, f"refused {tool.name}")


@pytest.fixture
def make_tool():
    return _tool


@pytest.fixture
def state() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def registry(state: MemoryStateStore, fake_adapter: FakeAdapter) -> AdapterRegistry:
    registry = AdapterRegistry(state)
    registry.register(fake_adapter)
    registry.set_active_adapter(fake_adapter.id)
    return registry


@pytest.fixture
def config_service(registry: AdapterRegistry) -> ConfigService:
    return ConfigService(FileIO(), BackupService(), SchemaRegistry(), registry)


@pytest.fixture
def tool_manager(config_service: ConfigService, registry: AdapterRegistry) -> ToolManagerService:
    return ToolManagerService(config_service, registry)


@pytest.fixture
def profile_service(
    state: MemoryStateStore, config_service: ConfigService, tool_manager: ToolManagerService
) -> ProfileService:
    return ProfileService(state, config_service, tool_manager)


# --- real adapters ---


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def managed_dir(tmp_path: Path) -> Path:
    return tmp_path / "managed"


def _engine_for(agent_id: str, tmp_path: Path, workspace: Path, managed_dir: Path) -> Engine:
    engine = build_engine(
        workspace_root=workspace,
        state=MemoryStateStore(),
        home=tmp_path,
        managed_dir=managed_dir,
    )
    engine.registry.set_active_adapter(agent_id)
    return engine


@pytest.fixture
def claude_engine(tmp_path: Path, workspace: Path, managed_dir: Path) -> Engine:
    return _engine_for("claude-code", tmp_path, workspace, managed_dir)


@pytest.fixture
def codex_engine(tmp_path: Path, workspace: Path, managed_dir: Path) -> Engine:
    return _engine_for("codex", tmp_path, workspace, managed_dir)
