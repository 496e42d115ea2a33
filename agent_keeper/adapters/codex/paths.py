from pathlib import Path
from typing import Optional


class CodexPaths:
    def __init__(self, home: Optional[Path] = None, workspace_root: Optional[Path] = None) -> None:
        self._home = home
        self.workspace_root = workspace_root

    @property
    def home(self) -> Path:
        return self._home or Path.home()

    @property
    def user_codex_dir(self) -> Path:
        return self.home / ".codex"

    @property
    def user_config_toml(self) -> Path:
        return self.user_codex_dir / "config.toml"

    @property
    def user_skills_dir(self) -> Path:
        return self.user_codex_dir / "skills"

    @property
    def user_prompts_dir(self) -> Path:
        return self.user_codex_dir / "prompts"

    def project_codex_dir(self, root: Path) -> Path:
        return root / ".codex"

    def project_config_toml(self, root: Path) -> Path:
        return self.project_codex_dir(root) / "config.toml"

    def project_skills_dir(self, root: Path) -> Path:
        return self.project_codex_dir(root) / "skills"

    def project_prompts_dir(self, root: Path) -> Path:
        return self.project_codex_dir(root) / "prompts"
