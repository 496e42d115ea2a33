from agent_keeper.adapters.claude_code.adapter import ClaudeCodeAdapter
from agent_keeper.adapters.claude_code.paths import ClaudeCodePaths, default_managed_dir

__all__ = ["ClaudeCodeAdapter", "ClaudeCodePaths", "default_managed_dir"]
