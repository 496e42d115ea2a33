from enum import Enum

from agent_keeper.models import ConfigScope, ToolStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


TOOL_STATUS_STYLE = {
    ToolStatus.ENABLED: UIStyle.GREEN.value,
    ToolStatus.DISABLED: UIStyle.DIM.value,
    ToolStatus.ERROR: UIStyle.RED.value,
}

SCOPE_STYLE = {
    ConfigScope.MANAGED: UIStyle.MAGENTA.value,
    ConfigScope.PROJECT: UIStyle.CYAN.value,
    ConfigScope.LOCAL: UIStyle.YELLOW.value,
    ConfigScope.USER: UIStyle.BLUE.value,
}
