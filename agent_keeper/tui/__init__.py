from agent_keeper.tui.renderers import KeeperConsoleUI

__all__ = ["KeeperConsoleUI"]
