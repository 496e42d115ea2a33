from typing import Any


SETTINGS_FILE = "settings-file"
MCP_FILE = "mcp-file"
CLAUDE_JSON = "claude-json"
MCP_SERVER = "mcp-server"
HOOK_MATCHER = "hook-matcher"
HOOK_ENTRY = "hook-entry"
SKILL_FRONTMATTER = "skill-frontmatter"
COMMAND_FRONTMATTER = "command-frontmatter"

_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}
_STRING_MAP: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

HOOK_ENTRY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"enum": ["command", "prompt", "agent"]},
        "command": {"type": "string"},
        "prompt": {"type": "string"},
        "timeout": {"type": "number"},
    },
    "required": ["type"],
    "additionalProperties": True,
}

HOOK_MATCHER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "matcher": {"type": "string", "default": ""},
        "hooks": {"type": "array", "items": HOOK_ENTRY_SCHEMA},
    },
    "required": ["hooks"],
    "additionalProperties": True,
}

_HOOKS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "array", "items": HOOK_MATCHER_SCHEMA},
}

SETTINGS_FILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "hooks": _HOOKS_SCHEMA,
        "_disabledHooks": _HOOKS_SCHEMA,
        "permissions": {
            "type": "object",
            "properties": {
                "allow": _STRING_LIST,
                "deny": _STRING_LIST,
                "ask": _STRING_LIST,
            },
            "additionalProperties": True,
        },
        "env": _STRING_MAP,
        "disabledMcpServers": _STRING_LIST,
    },
    "additionalProperties": True,
}

MCP_SERVER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "command": {"type": "string"},
        "args": {**_STRING_LIST, "default": []},
        "env": {**_STRING_MAP, "default": {}},
        "type": {"enum": ["stdio", "http", "sse"]},
        "transport": {"enum": ["stdio", "http", "sse"]},
        "url": {"type": "string"},
        "headers": _STRING_MAP,
        "disabled": {"type": "boolean"},
    },
    "anyOf": [{"required": ["command"]}, {"required": ["url"]}],
    "additionalProperties": True,
}

MCP_FILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "mcpServers": {
            "type": "object",
            "additionalProperties": MCP_SERVER_SCHEMA,
            "default": {},
        },
    },
    "additionalProperties": True,
}

# ~/.claude.json also carries OAuth tokens, project history and preferences.
CLAUDE_JSON_SCHEMA: dict[str, Any] = MCP_FILE_SCHEMA

SKILL_FRONTMATTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 64},
        "description": {"type": "string", "maxLength": 1024},
        "allowed-tools": {"type": "string"},
        "model": {"type": "string"},
        "disable-model-invocation": {"type": "boolean"},
        "user-invocable": {"type": "boolean"},
    },
    "required": ["name", "description"],
    "additionalProperties": True,
}

COMMAND_FRONTMATTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "argument-hint": {"type": "string"},
        "model": {"type": "string"},
        "allowed-tools": {"type": "string"},
    },
    "additionalProperties": True,
}

CLAUDE_CODE_SCHEMAS: dict[str, dict[str, Any]] = {
    SETTINGS_FILE: SETTINGS_FILE_SCHEMA,
    MCP_FILE: MCP_FILE_SCHEMA,
    CLAUDE_JSON: CLAUDE_JSON_SCHEMA,
    MCP_SERVER: MCP_SERVER_SCHEMA,
    HOOK_MATCHER: HOOK_MATCHER_SCHEMA,
    HOOK_ENTRY: HOOK_ENTRY_SCHEMA,
    SKILL_FRONTMATTER: SKILL_FRONTMATTER_SCHEMA,
    COMMAND_FRONTMATTER: COMMAND_FRONTMATTER_SCHEMA,
}
