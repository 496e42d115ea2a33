from typing import Any


CONFIG = "codex-config"
MCP_SERVER = "codex-mcp-server"
SKILL_FRONTMATTER = "codex-skill-frontmatter"

_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

MCP_SERVER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "command": {"type": "string"},
        "args": _STRING_LIST,
        "url": {"type": "string"},
        "env": {"type": "object", "additionalProperties": {"type": "string"}},
        "enabled": {"type": "boolean"},
        "enabled_tools": _STRING_LIST,
        "disabled_tools": _STRING_LIST,
        "startup_timeout_sec": {"type": "number"},
        "tool_timeout_sec": {"type": "number"},
    },
    "additionalProperties": True,
}

# auth, history and otel tables pass through untouched.
CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "model": {"type": "string"},
        "model_provider": {"type": "string"},
        "approval_policy": {"type": "string"},
        "sandbox_mode": {"enum": ["read-only", "workspace-write", "danger-full-access"]},
        "mcp_servers": {"type": "object", "additionalProperties": MCP_SERVER_SCHEMA},
        "profile": {"type": "string"},
        "profiles": {"type": "object"},
    },
    "additionalProperties": True,
}

SKILL_FRONTMATTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 100},
        "description": {"type": "string", "maxLength": 500},
    },
    "required": ["name", "description"],
    "additionalProperties": True,
}

CODEX_SCHEMAS: dict[str, dict[str, Any]] = {
    CONFIG: CONFIG_SCHEMA,
    MCP_SERVER: MCP_SERVER_SCHEMA,
    SKILL_FRONTMATTER: SKILL_FRONTMATTER_SCHEMA,
}
