from typing import Optional

from agent_keeper.models import ToolEntity, ToolType


def canonical_key(tool: ToolEntity) -> str:
    """Scope-independent identity used for resolution and profiles."""
    if tool.type == ToolType.HOOK:
        event_name = tool.metadata.get("eventName")
        if event_name:
            matcher = tool.metadata.get("matcher") or ""
            return f"hook:{event_name}:{matcher}"
        head, sep, _ = tool.id.rpartition(":")
        return head if sep else tool.id
    return f"{tool.type.value}:{tool.name}"


def tool_type_from_key(key: str) -> Optional[ToolType]:
    prefix = key.split(":", 1)[0]
    try:
        return ToolType(prefix)
    except ValueError:
        return None
