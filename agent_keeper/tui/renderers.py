from pathlib import Path
from typing import Optional

from rich.console import Console

from agent_keeper.adapters.base import PlatformAdapter
from agent_keeper.models import ToolEntity
from agent_keeper.profiles.models import (
    CloneResult,
    Profile,
    ReconcileResult,
    SwitchResult,
)
from agent_keeper.tui.enums import UIStyle
from agent_keeper.tui.sections import UISection
from agent_keeper.tui.tables import (
    AgentTable,
    BackupTable,
    ProfileTable,
    ToolTable,
    scope_badge,
)
from agent_keeper.utils import compact_home_path, compact_home_paths_in_text


class KeeperConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_agents(
        self, adapters: list[PlatformAdapter], active_id: Optional[str]
    ) -> None:
        self.console.print(
            UISection.wrap(
                "agents",
                AgentTable.agents_table(adapters, active_id),
                style=UIStyle.BLUE.value,
                subtitle=f"active: {active_id or 'none'}",
            )
        )

    def render_active_agent(self, adapter: Optional[PlatformAdapter]) -> None:
        if adapter is None:
            self.console.print(
                UISection.note(
                    "agents",
                    "No single agent detected. Pick one with: agent-keeper agents use <id>",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        self.console.print(
            UISection.note(
                "agents",
                f"Active agent: [bold]{adapter.display_name}[/bold] ({adapter.id})",
                style=UIStyle.GREEN.value,
            )
        )

    def render_tools(self, title: str, tools: list[ToolEntity], resolved: bool = True) -> None:
        if not tools:
            self.console.print(
                UISection.note(title, "No tools found.", style=UIStyle.DIM.value)
            )
            return
        self.console.print(
            UISection.wrap(
                title,
                ToolTable.tools_table(tools, resolved=resolved),
                style=UIStyle.CYAN.value,
            )
        )

    def render_tool_action(self, action: str, tool: ToolEntity, detail: str = "") -> None:
        body = f"{action}: [bold]{tool.name}[/bold] ({scope_badge(tool.scope)})"
        if detail:
            body = f"{body}\n{compact_home_paths_in_text(detail)}"
        self.console.print(UISection.note("tools", body, style=UIStyle.GREEN.value))

    def render_profiles(self, profiles: list[Profile], active_id: Optional[str]) -> None:
        if not profiles:
            self.console.print(
                UISection.note(
                    "profiles",
                    "No profiles yet. Create one with: agent-keeper profiles create <name>",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        self.console.print(
            UISection.wrap(
                "profiles",
                ProfileTable.profiles_table(profiles, active_id),
                style=UIStyle.BLUE.value,
            )
        )

    def render_profile(self, profile: Profile, active: bool) -> None:
        subtitle = "active" if active else None
        self.console.print(
            UISection.wrap(
                f"profile: {profile.name}",
                ProfileTable.entries_table(profile),
                style=UIStyle.GREEN.value if active else UIStyle.BLUE.value,
                subtitle=subtitle,
            )
        )

    def render_profile_saved(self, profile: Profile, removed: bool = False) -> None:
        verb = "deleted" if removed else "saved"
        self.console.print(
            UISection.note(
                "profiles",
                f"Profile {verb}: [bold]{profile.name}[/bold] ({len(profile.tools)} tools)",
                style=UIStyle.YELLOW.value if removed else UIStyle.GREEN.value,
            )
        )

    def render_switch_result(self, name: Optional[str], result: SwitchResult) -> None:
        title = f"switch: {name}" if name else "deactivate"
        self.console.print(
            UISection.wrap(
                title,
                ProfileTable.switch_table(result),
                style=UIStyle.GREEN.value if result.success else UIStyle.RED.value,
            )
        )
        if result.errors:
            failure_text = "\n".join(
                f"- {compact_home_paths_in_text(item)}" for item in result.errors
            )
            self.console.print(
                UISection.note("failures", failure_text, style=UIStyle.RED.value)
            )

    def render_reconcile_result(self, profile: Profile, result: ReconcileResult) -> None:
        self.console.print(
            UISection.note(
                "reconcile",
                f"[bold]{profile.name}[/bold]: kept {result.valid}, removed {result.removed}",
                style=UIStyle.GREEN.value if not result.removed else UIStyle.YELLOW.value,
            )
        )

    def render_clone_result(self, source: Profile, agent_name: str, result: CloneResult) -> None:
        lines = [
            f"Cloned [bold]{source.name}[/bold] to {agent_name} as "
            f"[bold]{result.profile.name}[/bold] ({len(result.profile.tools)} tools)"
        ]
        if result.skipped:
            lines.append(f"Skipped {len(result.skipped)} unsupported:")
            lines.extend(f"- {entry.key}" for entry in result.skipped)
        self.console.print(
            UISection.note(
                "clone",
                "\n".join(lines),
                style=UIStyle.YELLOW.value if result.skipped else UIStyle.GREEN.value,
            )
        )

    def render_backups(self, path: Path, backups: list[Path]) -> None:
        if not backups:
            self.console.print(
                UISection.note(
                    "backups",
                    f"No backups for {compact_home_path(path)}",
                    style=UIStyle.DIM.value,
                )
            )
            return
        self.console.print(
            UISection.wrap(
                "backups",
                BackupTable.backups_table(backups),
                style=UIStyle.BLUE.value,
                subtitle=compact_home_path(path),
            )
        )

    def render_restored(self, path: Path, slot: int) -> None:
        self.console.print(
            UISection.note(
                "backups",
                f"Restored {compact_home_path(path)} from slot {slot}",
                style=UIStyle.GREEN.value,
            )
        )

    def render_workspace_status(
        self,
        root: Path,
        association: Optional[str],
        overridden: bool,
        active_name: Optional[str],
    ) -> None:
        lines = [
            f"Workspace: {compact_home_path(root)}",
            f"Associated profile: {association or '-'}",
            f"Manual override: {'yes' if overridden else 'no'}",
            f"Active profile: {active_name or '-'}",
        ]
        self.console.print(
            UISection.note("workspace", "\n".join(lines), style=UIStyle.BLUE.value)
        )

    def render_message(self, title: str, body: str, style: str = UIStyle.GREEN.value) -> None:
        self.console.print(UISection.note(title, body, style=style))
