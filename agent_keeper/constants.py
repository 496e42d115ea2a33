from typing import Final


APP_NAME: Final[str] = "agent-keeper"

MAX_BACKUPS: Final[int] = 5
BACKUP_SUFFIX: Final[str] = ".bak"

DISABLED_SUFFIX: Final[str] = ".disabled"
SKILL_FILENAME: Final[str] = "SKILL.md"
MARKDOWN_SUFFIX: Final[str] = ".md"

STATE_FILENAME: Final[str] = "state.json"
STATE_ENV_VAR: Final[str] = "AGENT_KEEPER_STATE"

PROFILES_STATE_KEY: Final[str] = "agent-keeper.profiles"
ACTIVE_ADAPTER_STATE_KEY: Final[str] = "agent-keeper.activeAdapter"
WORKSPACE_OVERRIDES_STATE_KEY: Final[str] = "agent-keeper.workspaceProfileOverrides"

PROFILE_STORE_VERSION: Final[int] = 2

WORKSPACE_DIRNAME: Final[str] = ".agent-keeper"
WORKSPACE_PROFILE_FILENAME: Final[str] = "profile.json"
