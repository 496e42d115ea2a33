import logging
import uuid
from typing import Optional

from agent_keeper.config_service import ConfigService
from agent_keeper.constants import PROFILES_STATE_KEY
from agent_keeper.errors import (
    ProfileExistsError,
    ProfileNotFoundError,
    UnknownAdapterError,
)
from agent_keeper.keys import canonical_key, tool_type_from_key
from agent_keeper.models import ToolEntity, ToolStatus, ToolType
from agent_keeper.profiles.models import (
    PROFILE_STORE_SCHEMA,
    PROFILE_STORE_SCHEMA_NAME,
    CloneResult,
    Profile,
    ProfileStore,
    ProfileToolEntry,
    ReconcileResult,
    SwitchResult,
)
from agent_keeper.state import StateStore
from agent_keeper.tools import ToolManagerService
from agent_keeper.utils import now_iso


logger = logging.getLogger(__name__)


def _is_profiled(tool: ToolEntity) -> bool:
    return not tool.is_managed and tool.status != ToolStatus.ERROR


class ProfileService:
    """Named snapshots of desired tool states, applied by sequential toggles.

    The store is loaded fresh from the state port on every call, so changes
    made by another process between calls are always seen.
    """

    def __init__(
        self,
        state: StateStore,
        config_service: ConfigService,
        tool_manager: ToolManagerService,
    ) -> None:
        self._state = state
        self._config_service = config_service
        self._tool_manager = tool_manager
        if not config_service.schemas.has(PROFILE_STORE_SCHEMA_NAME):
            config_service.schemas.register(PROFILE_STORE_SCHEMA_NAME, PROFILE_STORE_SCHEMA)

    # --- queries ---

    def get_profiles(self, agent_id: Optional[str] = None) -> list[Profile]:
        profiles = self._load_store().profiles
        if agent_id is None:
            return profiles
        return [item for item in profiles if item.agent_id in (None, agent_id)]

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self._load_store().find(profile_id)

    def get_profile_by_name(self, name: str) -> Optional[Profile]:
        return next((item for item in self._load_store().profiles if item.name == name), None)

    def get_active_profile_id(self) -> Optional[str]:
        return self._load_store().active_profile_id

    # --- mutations ---

    def create_profile(self, name: str) -> Profile:
        adapter = self._config_service.registry.require_active_adapter()
        entries: list[ProfileToolEntry] = []
        seen: set[str] = set()
        for tool in self._read_live_tools():
            if not _is_profiled(tool):
                continue
            key = canonical_key(tool)
            if key in seen:
                continue
            seen.add(key)
            entries.append(ProfileToolEntry(key=key, enabled=tool.is_enabled))

        now = now_iso()
        profile = Profile(
            id=str(uuid.uuid4()),
            name=name,
            tools=entries,
            created_at=now,
            updated_at=now,
            agent_id=adapter.id,
        )
        store = self._load_store()
        store.profiles.append(profile)
        self._save_store(store)
        logger.info("Created profile %s with %d tools", name, len(entries))
        return profile

    def update_profile(
        self,
        profile_id: str,
        name: Optional[str] = None,
        tools: Optional[list[ProfileToolEntry]] = None,
    ) -> Profile:
        store = self._load_store()
        profile = store.find(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        if name is not None:
            profile.name = name
        if tools is not None:
            profile.tools = list(tools)
        profile.updated_at = now_iso()
        self._save_store(store)
        return profile

    def delete_profile(self, profile_id: str) -> bool:
        store = self._load_store()
        profile = store.find(profile_id)
        if profile is None:
            return False
        store.profiles.remove(profile)
        if store.active_profile_id == profile_id:
            store.active_profile_id = None
        self._save_store(store)
        logger.info("Deleted profile %s", profile.name)
        return True

    def clone_profile_to_agent(
        self, profile_id: str, agent_id: str, name: Optional[str] = None
    ) -> CloneResult:
        """Copy a profile to another agent, dropping entries it cannot manage."""
        store = self._load_store()
        source = store.find(profile_id)
        if source is None:
            raise ProfileNotFoundError(profile_id)
        target = self._config_service.registry.get_adapter(agent_id)
        if target is None:
            raise UnknownAdapterError(agent_id)

        clone_name = name or f"{source.name} ({target.display_name})"
        if any(item.agent_id == target.id and item.name == clone_name for item in store.profiles):
            raise ProfileExistsError(clone_name, target.id)

        kept: list[ProfileToolEntry] = []
        skipped: list[ProfileToolEntry] = []
        for entry in source.tools:
            tool_type = tool_type_from_key(entry.key)
            if tool_type is not None and target.supports(tool_type):
                kept.append(ProfileToolEntry(key=entry.key, enabled=entry.enabled))
            else:
                skipped.append(entry)

        now = now_iso()
        clone = Profile(
            id=str(uuid.uuid4()),
            name=clone_name,
            tools=kept,
            created_at=now,
            updated_at=now,
            agent_id=target.id,
        )
        store.profiles.append(clone)
        self._save_store(store)
        logger.info(
            "Cloned profile %s to %s as %s (%d kept, %d skipped)",
            source.name,
            target.id,
            clone_name,
            len(kept),
            len(skipped),
        )
        return CloneResult(profile=clone, skipped=skipped)

    def set_active_profile_id(self, profile_id: Optional[str]) -> None:
        store = self._load_store()
        if profile_id is not None and store.find(profile_id) is None:
            raise ProfileNotFoundError(profile_id)
        store.active_profile_id = profile_id
        self._save_store(store)

    # --- reconciliation and switching ---

    def reconcile_profile(self, profile_id: str) -> ReconcileResult:
        profile = self.get_profile(profile_id)
        if profile is None:
            return ReconcileResult(valid=0, removed=0)

        current_keys = {
            canonical_key(tool) for tool in self._read_live_tools() if _is_profiled(tool)
        }
        valid_entries = [entry for entry in profile.tools if entry.key in current_keys]
        removed = len(profile.tools) - len(valid_entries)
        if removed:
            self.update_profile(profile_id, tools=valid_entries)
            logger.info("Pruned %d stale entries from profile %s", removed, profile.name)
        return ReconcileResult(valid=len(valid_entries), removed=removed)

    def switch_profile(self, profile_id: Optional[str]) -> SwitchResult:
        if profile_id is None:
            self.set_active_profile_id(None)
            return SwitchResult(success=True)

        profile = self.get_profile(profile_id)
        if profile is None:
            return SwitchResult(success=False, errors=[f"Profile not found: {profile_id}"])

        tools_by_key: dict[str, ToolEntity] = {}
        for tool in self._read_live_tools():
            if _is_profiled(tool):
                tools_by_key.setdefault(canonical_key(tool), tool)

        queued: list[ToolEntity] = []
        skipped = 0
        for entry in profile.tools:
            tool = tools_by_key.get(entry.key)
            if tool is None:
                skipped += 1
                continue
            if tool.is_enabled == entry.enabled:
                continue
            queued.append(tool)

        toggled = 0
        errors: list[str] = []
        # Toggles sharing a file must run one after another.
        for tool in queued:
            result = self._tool_manager.toggle_tool(tool)
            if result.success:
                toggled += 1
            else:
                errors.append(f"{tool.name}: {result.error}")

        self.set_active_profile_id(profile_id)
        failed = len(errors)
        logger.info(
            "Switched to profile %s: toggled=%d skipped=%d failed=%d",
            profile.name,
            toggled,
            skipped,
            failed,
        )
        return SwitchResult(
            success=failed == 0,
            toggled=toggled,
            skipped=skipped,
            failed=failed,
            errors=errors,
        )

    def sync_tool_to_active_profile(self, tool: ToolEntity, enabled: bool) -> None:
        profile = self._active_profile()
        if profile is None:
            return
        key = canonical_key(tool)
        tools = list(profile.tools)
        for entry in tools:
            if entry.key == key:
                entry.enabled = enabled
                break
        else:
            tools.append(ProfileToolEntry(key=key, enabled=enabled))
        self.update_profile(profile.id, tools=tools)

    def remove_tool_from_active_profile(self, tool: ToolEntity) -> None:
        profile = self._active_profile()
        if profile is None:
            return
        key = canonical_key(tool)
        remaining = [entry for entry in profile.tools if entry.key != key]
        if len(remaining) != len(profile.tools):
            self.update_profile(profile.id, tools=remaining)

    # --- internals ---

    def _active_profile(self) -> Optional[Profile]:
        store = self._load_store()
        if store.active_profile_id is None:
            return None
        return store.find(store.active_profile_id)

    def _read_live_tools(self) -> list[ToolEntity]:
        adapter = self._config_service.registry.require_active_adapter()
        tools: list[ToolEntity] = []
        for tool_type in ToolType:
            if adapter.supports(tool_type):
                tools.extend(self._config_service.read_all_tools(tool_type))
        return tools

    def _load_store(self) -> ProfileStore:
        raw = self._state.get(PROFILES_STATE_KEY)
        if raw is None:
            return ProfileStore()
        result = self._config_service.schemas.validate(PROFILE_STORE_SCHEMA_NAME, raw)
        if not result.ok:
            logger.warning("Ignoring corrupt profile store: %s", result.summary())
            return ProfileStore()
        return ProfileStore.from_dict(result.document)

    def _save_store(self, store: ProfileStore) -> None:
        self._state.update(PROFILES_STATE_KEY, store.as_dict())
