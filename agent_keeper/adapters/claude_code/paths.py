import sys
from pathlib import Path
from typing import Optional


def default_managed_dir(home: Optional[Path] = None) -> Path:
    if sys.platform == "darwin":
        return (home or Path.home()) / "Library" / "Application Support" / "ClaudeCode"
    if sys.platform.startswith("win"):
        return Path("C:/ProgramData/ClaudeCode")
    return Path("/etc/claude-code")


class ClaudeCodePaths:
    """Every Claude Code location, relative to an injectable home and workspace."""

    def __init__(
        self,
        home: Optional[Path] = None,
        workspace_root: Optional[Path] = None,
        managed_dir: Optional[Path] = None,
    ) -> None:
        self._home = home
        self.workspace_root = workspace_root
        self.managed_dir = managed_dir or default_managed_dir(home)

    @property
    def home(self) -> Path:
        return self._home or Path.home()

    @property
    def user_claude_dir(self) -> Path:
        return self.home / ".claude"

    @property
    def user_settings_json(self) -> Path:
        return self.user_claude_dir / "settings.json"

    @property
    def user_claude_json(self) -> Path:
        return self.home / ".claude.json"

    @property
    def user_skills_dir(self) -> Path:
        return self.user_claude_dir / "skills"

    @property
    def user_commands_dir(self) -> Path:
        return self.user_claude_dir / "commands"

    def project_settings_json(self, root: Path) -> Path:
        return root / ".claude" / "settings.json"

    def project_local_settings_json(self, root: Path) -> Path:
        return root / ".claude" / "settings.local.json"

    def project_mcp_json(self, root: Path) -> Path:
        return root / ".mcp.json"

    def project_skills_dir(self, root: Path) -> Path:
        return root / ".claude" / "skills"

    def project_commands_dir(self, root: Path) -> Path:
        return root / ".claude" / "commands"

    @property
    def managed_settings_json(self) -> Path:
        return self.managed_dir / "managed-settings.json"

    @property
    def managed_mcp_json(self) -> Path:
        return self.managed_dir / "managed-mcp.json"
