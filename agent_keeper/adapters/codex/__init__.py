from agent_keeper.adapters.codex.adapter import CodexAdapter
from agent_keeper.adapters.codex.paths import CodexPaths

__all__ = ["CodexAdapter", "CodexPaths"]
