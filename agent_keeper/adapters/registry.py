import logging
from typing import Optional

from agent_keeper.adapters.base import PlatformAdapter
from agent_keeper.constants import ACTIVE_ADAPTER_STATE_KEY
from agent_keeper.errors import NoActiveAdapterError, UnknownAdapterError
from agent_keeper.state import StateStore


logger = logging.getLogger(__name__)


class AdapterRegistry:
    def __init__(self, state: Optional[StateStore] = None) -> None:
        self._state = state
        self._adapters: dict[str, PlatformAdapter] = {}
        self._active_id: Optional[str] = None

    def register(self, adapter: PlatformAdapter) -> None:
        self._adapters[adapter.id] = adapter

    def get_adapter(self, adapter_id: str) -> Optional[PlatformAdapter]:
        return self._adapters.get(adapter_id)

    def all_adapters(self) -> list[PlatformAdapter]:
        return list(self._adapters.values())

    def get_active_adapter(self) -> Optional[PlatformAdapter]:
        if self._active_id is None:
            return None
        return self._adapters.get(self._active_id)

    def require_active_adapter(self) -> PlatformAdapter:
        adapter = self.get_active_adapter()
        if adapter is None:
            raise NoActiveAdapterError()
        return adapter

    def set_active_adapter(self, adapter_id: str) -> PlatformAdapter:
        adapter = self._adapters.get(adapter_id)
        if adapter is None:
            raise UnknownAdapterError(adapter_id)
        self._active_id = adapter_id
        if self._state is not None:
            self._state.update(ACTIVE_ADAPTER_STATE_KEY, adapter_id)
        logger.info("Active agent set to %s", adapter_id)
        return adapter

    def restore_active_adapter(self) -> Optional[PlatformAdapter]:
        if self._state is None:
            return None
        stored = self._state.get(ACTIVE_ADAPTER_STATE_KEY)
        if not isinstance(stored, str) or stored not in self._adapters:
            return None
        self._active_id = stored
        return self._adapters[stored]

    def detect_and_activate(self) -> Optional[PlatformAdapter]:
        detected = [adapter for adapter in self._adapters.values() if adapter.detect()]
        if len(detected) != 1:
            logger.debug(
                "Detected %d agents; leaving active agent unchanged", len(detected)
            )
            return None
        return self.set_active_adapter(detected[0].id)
