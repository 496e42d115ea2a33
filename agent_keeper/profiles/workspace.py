import logging
from pathlib import Path
from typing import Any, Optional

from agent_keeper.constants import (
    WORKSPACE_DIRNAME,
    WORKSPACE_OVERRIDES_STATE_KEY,
    WORKSPACE_PROFILE_FILENAME,
)
from agent_keeper.fileio import FileIO
from agent_keeper.state import StateStore
from agent_keeper.utils import now_iso


logger = logging.getLogger(__name__)


def association_path(workspace_root: Path) -> Path:
    return workspace_root / WORKSPACE_DIRNAME / WORKSPACE_PROFILE_FILENAME


def _workspace_key(workspace_root: Path) -> str:
    return str(workspace_root.expanduser().resolve())


class WorkspaceProfileService:
    """Per-workspace default profile plus manual overrides of it.

    The association lives in the workspace so it can be committed; overrides
    live in the state store because they are personal.
    """

    def __init__(self, state: StateStore, file_io: Optional[FileIO] = None) -> None:
        self._state = state
        self._file_io = file_io or FileIO()

    def get_association(self, workspace_root: Path) -> Optional[str]:
        path = association_path(workspace_root)
        result = self._file_io.read_json(path)
        if not result.ok or not isinstance(result.data, dict):
            if not result.ok:
                logger.warning("Ignoring unreadable %s: %s", path, result.error)
            return None
        name = result.data.get("profileName")
        return name if isinstance(name, str) and name else None

    def set_association(self, workspace_root: Path, profile_name: str) -> None:
        path = association_path(workspace_root)
        result = self._file_io.read_json(path)
        payload: dict[str, Any] = (
            dict(result.data) if result.ok and isinstance(result.data, dict) else {}
        )
        payload["profileName"] = profile_name
        self._file_io.write_json(path, payload)
        self.clear_override(workspace_root)
        logger.info("Associated %s with profile %s", workspace_root, profile_name)

    def remove_association(self, workspace_root: Path) -> None:
        association_path(workspace_root).unlink(missing_ok=True)
        self.clear_override(workspace_root)

    def is_overridden(
        self, workspace_root: Path, existing_profile_names: Optional[list[str]] = None
    ) -> bool:
        entry = self._overrides().get(_workspace_key(workspace_root))
        if not isinstance(entry, dict):
            return False
        manual = entry.get("manualProfileName")
        if existing_profile_names is not None and manual is not None:
            if manual not in existing_profile_names:
                self.clear_override(workspace_root)
                return False
        return True

    def set_override(self, workspace_root: Path, manual_profile_name: Optional[str]) -> None:
        overrides = self._overrides()
        overrides[_workspace_key(workspace_root)] = {
            "manualProfileName": manual_profile_name,
            "timestamp": now_iso(),
        }
        self._state.update(WORKSPACE_OVERRIDES_STATE_KEY, overrides)

    def clear_override(self, workspace_root: Path) -> None:
        overrides = self._overrides()
        if overrides.pop(_workspace_key(workspace_root), None) is not None:
            self._state.update(WORKSPACE_OVERRIDES_STATE_KEY, overrides)

    def profile_to_activate(
        self, workspace_root: Path, existing_profile_names: list[str]
    ) -> Optional[str]:
        name = self.get_association(workspace_root)
        if name is None or name not in existing_profile_names:
            return None
        if self.is_overridden(workspace_root, existing_profile_names):
            return None
        return name

    def _overrides(self) -> dict[str, Any]:
        raw = self._state.get(WORKSPACE_OVERRIDES_STATE_KEY, {})
        return dict(raw) if isinstance(raw, dict) else {}
