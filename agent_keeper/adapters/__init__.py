from agent_keeper.adapters.base import PlatformAdapter, is_toggle_disable
from agent_keeper.adapters.registry import AdapterRegistry

__all__ = ["AdapterRegistry", "PlatformAdapter", "is_toggle_disable"]
