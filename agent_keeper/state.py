import copy
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from agent_keeper.constants import APP_NAME, STATE_ENV_VAR, STATE_FILENAME
from agent_keeper.errors import ConfigReadError
from agent_keeper.fileio import FileIO


logger = logging.getLogger(__name__)


def default_state_path() -> Path:
    override = os.environ.get(STATE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / APP_NAME / STATE_FILENAME


class StateStore(ABC):
    """Key-value persistence port for session state."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def update(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStateStore(StateStore):
    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def update(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
            return
        self._data[key] = copy.deepcopy(value)


class JsonFileStateStore(StateStore):
    """One JSON object on disk, re-read on every access."""

    def __init__(self, path: Optional[Path] = None, file_io: Optional[FileIO] = None) -> None:
        self._path = path or default_state_path()
        self._file_io = file_io or FileIO()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        result = self._file_io.read_json(self.path)
        if not result.ok:
            raise ConfigReadError(self.path, result.error or "unreadable")
        if result.data is None:
            return {}
        if not isinstance(result.data, dict):
            raise ConfigReadError(self.path, "state file must be a JSON object")
        return result.data

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def update(self, key: str, value: Any) -> None:
        data = self._load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._file_io.write_json(self.path, data)
        logger.debug("Updated state key %s in %s", key, self.path)
