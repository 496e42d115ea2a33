from pathlib import Path
from typing import Optional

from rich.table import Column, Table

from agent_keeper.adapters.base import PlatformAdapter
from agent_keeper.models import ConfigScope, ToolEntity, ToolStatus
from agent_keeper.profiles.models import Profile, SwitchResult
from agent_keeper.tui.enums import SCOPE_STYLE, TOOL_STATUS_STYLE, UIStyle
from agent_keeper.utils import compact_home_path


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


def status_text(status: ToolStatus) -> str:
    return _styled(status.value, TOOL_STATUS_STYLE.get(status, UIStyle.WHITE.value))


def scope_badge(scope: ConfigScope) -> str:
    return _styled(scope.value, SCOPE_STYLE.get(scope, UIStyle.WHITE.value))


def scope_badges(tool: ToolEntity) -> str:
    if not tool.scope_entries:
        return scope_badge(tool.scope)
    badges = []
    for entry in tool.scope_entries:
        badge = scope_badge(entry.scope)
        if entry.scope == tool.scope:
            badge = f"[bold]{badge}[/bold]"
        badges.append(badge)
    return " ".join(badges)


class ToolTable:
    @staticmethod
    def tools_table(tools: list[ToolEntity], resolved: bool = True) -> Table:
        table = Table(
            Column(header="Type", width=12),
            Column(header="Name", overflow="fold"),
            Column(header="Status", width=10),
            Column(header="Scopes" if resolved else "Scope", width=24),
            Column(header="Source", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for tool in tools:
            source = compact_home_path(tool.source.file_path)
            if tool.status == ToolStatus.ERROR and tool.status_detail:
                source = f"{source}\n[red]{tool.status_detail}[/red]"
            table.add_row(
                tool.type.value,
                tool.name,
                status_text(tool.status),
                scope_badges(tool) if resolved else scope_badge(tool.scope),
                source,
            )
        return table


class AgentTable:
    @staticmethod
    def agents_table(adapters: list[PlatformAdapter], active_id: Optional[str]) -> Table:
        table = Table(
            Column(header="Id", width=14),
            Column(header="Name", width=16),
            Column(header="Detected", width=10),
            Column(header="Tool types", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for adapter in adapters:
            marker = " *" if adapter.id == active_id else ""
            table.add_row(
                f"{adapter.id}{marker}",
                adapter.display_name,
                _styled("yes", UIStyle.GREEN.value)
                if adapter.detect()
                else _styled("no", UIStyle.DIM.value),
                ", ".join(sorted(item.value for item in adapter.supported_tool_types)),
            )
        return table


class ProfileTable:
    @staticmethod
    def profiles_table(profiles: list[Profile], active_id: Optional[str]) -> Table:
        table = Table(
            Column(header="Name", overflow="fold"),
            Column(header="Agent", width=14),
            Column(header="Tools", width=8, justify="right"),
            Column(header="Enabled", width=8, justify="right"),
            Column(header="Updated", width=26),
            expand=True,
            header_style="bold",
        )
        for profile in profiles:
            name = profile.name
            if profile.id == active_id:
                name = _styled(f"{name} (active)", UIStyle.GREEN.value)
            table.add_row(
                name,
                profile.agent_id or "-",
                str(len(profile.tools)),
                str(profile.enabled_count),
                profile.updated_at,
            )
        return table

    @staticmethod
    def entries_table(profile: Profile) -> Table:
        table = Table(
            Column(header="Key", overflow="fold"),
            Column(header="Desired", width=10),
            expand=True,
            header_style="bold",
        )
        for entry in profile.tools:
            table.add_row(
                entry.key,
                status_text(ToolStatus.ENABLED if entry.enabled else ToolStatus.DISABLED),
            )
        return table

    @staticmethod
    def switch_table(result: SwitchResult) -> Table:
        table = Table(show_header=False, box=None)
        for key, value in (
            ("toggled", result.toggled),
            ("skipped", result.skipped),
            ("failed", result.failed),
        ):
            table.add_row(f"[bold]{key}[/bold]", str(value))
        return table


class BackupTable:
    @staticmethod
    def backups_table(backups: list[Path]) -> Table:
        table = Table(
            Column(header="Slot", width=6, justify="right"),
            Column(header="Path", overflow="ellipsis"),
            Column(header="Size", width=10, justify="right"),
            expand=True,
            header_style="bold",
        )
        for slot, path in enumerate(backups, start=1):
            table.add_row(str(slot), compact_home_path(path), str(path.stat().st_size))
        return table
