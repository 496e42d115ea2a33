import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from agent_keeper.adapters.claude_code import ClaudeCodeAdapter, ClaudeCodePaths
from agent_keeper.adapters.codex import CodexAdapter, CodexPaths
from agent_keeper.adapters.registry import AdapterRegistry
from agent_keeper.backup import BackupService
from agent_keeper.config_service import ConfigService
from agent_keeper.fileio import FileIO
from agent_keeper.profiles import ProfileService, WorkspaceProfileService
from agent_keeper.schemas import SchemaRegistry
from agent_keeper.state import MemoryStateStore, StateStore
from agent_keeper.tools import ToolManagerService


logger = logging.getLogger(__name__)


@dataclass
class Engine:
    file_io: FileIO
    backups: BackupService
    schemas: SchemaRegistry
    registry: AdapterRegistry
    config: ConfigService
    tools: ToolManagerService
    profiles: ProfileService
    workspace: WorkspaceProfileService
    state: StateStore
    workspace_root: Optional[Path] = None


def build_engine(
    workspace_root: Optional[Path] = None,
    state: Optional[StateStore] = None,
    home: Optional[Path] = None,
    managed_dir: Optional[Path] = None,
) -> Engine:
    """Wire every service once; adapters receive the config service up front."""
    state = state if state is not None else MemoryStateStore()
    file_io = FileIO()
    backups = BackupService()
    schemas = SchemaRegistry()
    registry = AdapterRegistry(state)
    config = ConfigService(file_io, backups, schemas, registry)

    adapters = [
        ClaudeCodeAdapter(
            config,
            ClaudeCodePaths(home=home, workspace_root=workspace_root, managed_dir=managed_dir),
        ),
        CodexAdapter(config, CodexPaths(home=home, workspace_root=workspace_root)),
    ]
    for adapter in adapters:
        schemas.register_many(adapter.schemas)
        registry.register(adapter)

    active = registry.restore_active_adapter() or registry.detect_and_activate()
    logger.debug("Active agent: %s", active.id if active else "none")

    tools = ToolManagerService(config, registry)
    return Engine(
        file_io=file_io,
        backups=backups,
        schemas=schemas,
        registry=registry,
        config=config,
        tools=tools,
        profiles=ProfileService(state, config, tools),
        workspace=WorkspaceProfileService(state, file_io),
        state=state,
        workspace_root=workspace_root,
    )
