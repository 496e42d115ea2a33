from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from agent_keeper.errors import UnsupportedOperationError
from agent_keeper.models import ConfigScope, ToolEntity, ToolStatus, ToolType


def is_toggle_disable(tool: ToolEntity) -> bool:
    return tool.status == ToolStatus.ENABLED


class PlatformAdapter(ABC):
    """Per-vendor plugin translating config files into tool entities.

    ``read_tools`` returns ``[]`` for "nothing configured here" and raises only
    for genuine I/O failures. Mutating methods go through the config write
    pipeline.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def display_name(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def supported_tool_types(self) -> frozenset[ToolType]:
        raise NotImplementedError

    @abstractmethod
    def read_tools(self, tool_type: ToolType, scope: ConfigScope) -> list[ToolEntity]:
        raise NotImplementedError

    @abstractmethod
    def write_tool(self, tool: ToolEntity, scope: ConfigScope) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_tool(self, tool: ToolEntity) -> None:
        raise NotImplementedError

    @abstractmethod
    def toggle_tool(self, tool: ToolEntity) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_watch_paths(self, scope: ConfigScope) -> list[Path]:
        raise NotImplementedError

    @abstractmethod
    def detect(self) -> bool:
        raise NotImplementedError

    @property
    def schemas(self) -> dict[str, dict[str, Any]]:
        """Validation schemas this adapter relies on, keyed by registry name."""
        return {}

    def supports(self, tool_type: ToolType) -> bool:
        return tool_type in self.supported_tool_types

    def install_mcp_server(
        self, scope: ConfigScope, name: str, config: dict[str, Any]
    ) -> None:
        raise UnsupportedOperationError(self.display_name, "install_mcp_server")

    def install_skill(self, scope: ConfigScope, name: str, files: dict[str, str]) -> None:
        raise UnsupportedOperationError(self.display_name, "install_skill")

    def install_command(
        self, scope: ConfigScope, name: str, files: dict[str, str]
    ) -> None:
        raise UnsupportedOperationError(self.display_name, "install_command")

    def install_hook(
        self, scope: ConfigScope, event_name: str, matcher_group: dict[str, Any]
    ) -> None:
        raise UnsupportedOperationError(self.display_name, "install_hook")
