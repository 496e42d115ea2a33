import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from agent_keeper.adapters import PlatformAdapter
from agent_keeper.constants import APP_NAME
from agent_keeper.engine import Engine, build_engine
from agent_keeper.errors import KeeperError
from agent_keeper.models import ConfigScope, ToolEntity, ToolType
from agent_keeper.profiles import Profile
from agent_keeper.state import JsonFileStateStore, default_state_path
from agent_keeper.tools import describe_delete, move_targets
from agent_keeper.tui import KeeperConsoleUI
from agent_keeper.tui.enums import UIStyle


TYPE_VALUES = [item.value for item in ToolType]
SCOPE_VALUES = [item.value for item in ConfigScope]

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_logging(verbosity: int) -> None:
    level = _LOG_LEVELS.get(verbosity, logging.DEBUG)
    package_logger = logging.getLogger("agent_keeper")
    package_logger.setLevel(level)
    if not any(isinstance(item, RichHandler) for item in package_logger.handlers):
        package_logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        )


class KeeperGroup(click.Group):
    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except KeeperError as exc:
            raise click.ClickException(str(exc)) from exc


def _engine(obj: Dict[str, Any]) -> Engine:
    return obj["engine"]


def _ui() -> KeeperConsoleUI:
    return KeeperConsoleUI(Console())


def _active_adapter_or_fail(engine: Engine) -> PlatformAdapter:
    adapter = engine.registry.get_active_adapter()
    if adapter is None:
        raise click.ClickException(
            f"No active agent. Run '{APP_NAME} agents use <id>' first."
        )
    return adapter


def _tool_type(value: str) -> ToolType:
    return ToolType(value.lower())


def _scope(value: Optional[str]) -> Optional[ConfigScope]:
    return ConfigScope(value.lower()) if value else None


def _find_tool(
    engine: Engine, tool_type: ToolType, name: str, scope: Optional[ConfigScope]
) -> ToolEntity:
    adapter = _active_adapter_or_fail(engine)
    if not adapter.supports(tool_type):
        raise click.ClickException(
            f"{adapter.display_name} does not manage {tool_type.value} tools"
        )
    if scope is None:
        candidates = engine.config.read_all_tools(tool_type)
    else:
        candidates = engine.config.read_tools_by_scope(tool_type, scope)
    for tool in candidates:
        if tool.name == name:
            return tool
    where = f" in {scope.value} scope" if scope else ""
    raise click.ClickException(f"{tool_type.value} not found{where}: {name}")


def _profile_by_name(engine: Engine, name: str) -> Profile:
    profile = engine.profiles.get_profile_by_name(name)
    if profile is None:
        raise click.ClickException(f"Profile not found: {name}")
    return profile


def _prune_stale_entries(engine: Engine, profiles: list[Profile]) -> None:
    adapter = engine.registry.get_active_adapter()
    if adapter is None:
        return
    ui = _ui()
    for profile in profiles:
        if profile.agent_id not in (None, adapter.id):
            continue
        result = engine.profiles.reconcile_profile(profile.id)
        if result.removed:
            ui.render_reconcile_result(profile, result)


def _workspace_root(engine: Engine) -> Path:
    if engine.workspace_root is None:
        raise click.ClickException("No workspace root")
    return engine.workspace_root


@click.group(cls=KeeperGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--workspace",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root for project and local scopes (default: current directory).",
)
@click.option("--home", type=click.Path(file_okay=False, path_type=Path), hidden=True)
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Session state file (default: $AGENT_KEEPER_STATE or ~/.config/agent-keeper/state.json).",
)
@click.option(
    "--managed-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding managed-settings.json and managed-mcp.json.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
@click.pass_context
def cli(
    ctx: click.Context,
    workspace: Optional[Path],
    home: Optional[Path],
    state_file: Optional[Path],
    managed_dir: Optional[Path],
    verbose: int,
) -> None:
    """Inspect and switch AI coding-assistant tool configuration."""
    _configure_logging(verbose)
    root = (workspace or Path.cwd()).expanduser().resolve()
    state = JsonFileStateStore(state_file or default_state_path())
    ctx.obj = {
        "engine": build_engine(
            workspace_root=root, state=state, home=home, managed_dir=managed_dir
        )
    }


# --- agents ---


@cli.group(help="List and select the active coding agent.")
def agents() -> None:
    pass


@agents.command("list", help="List known agents and whether they are installed.")
@click.pass_obj
def agents_list(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    active = engine.registry.get_active_adapter()
    _ui().render_agents(engine.registry.all_adapters(), active.id if active else None)


@agents.command("use", help="Make an agent the active one.")
@click.argument("agent_id")
@click.pass_obj
def agents_use(obj: Dict[str, Any], agent_id: str) -> None:
    engine = _engine(obj)
    if engine.registry.get_adapter(agent_id) is None:
        known = ", ".join(adapter.id for adapter in engine.registry.all_adapters())
        raise click.ClickException(f"Unknown agent: {agent_id} (known: {known})")
    _ui().render_active_agent(engine.registry.set_active_adapter(agent_id))


@agents.command("detect", help="Activate the agent found on this machine.")
@click.pass_obj
def agents_detect(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    _ui().render_active_agent(engine.registry.detect_and_activate())


# --- tools ---


@cli.group(help="Inspect and change individual tools.")
def tools() -> None:
    pass


@tools.command("list", help="Show the resolved view across scopes.")
@click.option(
    "--type", "type_", type=click.Choice(TYPE_VALUES, case_sensitive=False), default=None
)
@click.pass_obj
def tools_list(obj: Dict[str, Any], type_: Optional[str]) -> None:
    engine = _engine(obj)
    adapter = _active_adapter_or_fail(engine)
    ui = _ui()
    types = [_tool_type(type_)] if type_ else [item for item in ToolType if adapter.supports(item)]
    for tool_type in types:
        ui.render_tools(tool_type.value, engine.config.read_all_tools(tool_type))


@tools.command("scope", help="Show the raw entities of one scope.")
@click.argument("type_", metavar="TYPE", type=click.Choice(TYPE_VALUES, case_sensitive=False))
@click.argument("scope", type=click.Choice(SCOPE_VALUES, case_sensitive=False))
@click.pass_obj
def tools_scope(obj: Dict[str, Any], type_: str, scope: str) -> None:
    engine = _engine(obj)
    _active_adapter_or_fail(engine)
    tool_type = _tool_type(type_)
    scope_value = ConfigScope(scope.lower())
    _ui().render_tools(
        f"{tool_type.value} ({scope_value.value})",
        engine.config.read_tools_by_scope(tool_type, scope_value),
        resolved=False,
    )


@tools.command("toggle", help="Enable a disabled tool or disable an enabled one.")
@click.argument("type_", metavar="TYPE", type=click.Choice(TYPE_VALUES, case_sensitive=False))
@click.argument("name")
@click.option("--scope", type=click.Choice(SCOPE_VALUES, case_sensitive=False), default=None)
@click.pass_obj
def tools_toggle(obj: Dict[str, Any], type_: str, name: str, scope: Optional[str]) -> None:
    engine = _engine(obj)
    tool = _find_tool(engine, _tool_type(type_), name, _scope(scope))
    result = engine.tools.toggle_tool(tool)
    if not result.success:
        raise click.ClickException(result.error or f"Cannot toggle {name}")
    enabled = not tool.is_enabled
    engine.profiles.sync_tool_to_active_profile(tool, enabled)
    _ui().render_tool_action("Enabled" if enabled else "Disabled", tool)


@tools.command("remove", help="Delete a tool from its scope (a backup is kept).")
@click.argument("type_", metavar="TYPE", type=click.Choice(TYPE_VALUES, case_sensitive=False))
@click.argument("name")
@click.option("--scope", type=click.Choice(SCOPE_VALUES, case_sensitive=False), default=None)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def tools_remove(
    obj: Dict[str, Any], type_: str, name: str, scope: Optional[str], yes: bool
) -> None:
    engine = _engine(obj)
    tool = _find_tool(engine, _tool_type(type_), name, _scope(scope))
    description = describe_delete(tool)
    if not yes:
        click.confirm(f"{description}?", abort=True)
    result = engine.tools.delete_tool(tool)
    if not result.success:
        raise click.ClickException(result.error or f"Cannot remove {name}")
    engine.profiles.remove_tool_from_active_profile(tool)
    _ui().render_tool_action("Removed", tool, description)


@tools.command("move", help="Move a tool to another scope.")
@click.argument("type_", metavar="TYPE", type=click.Choice(TYPE_VALUES, case_sensitive=False))
@click.argument("name")
@click.argument("target_scope", type=click.Choice(SCOPE_VALUES, case_sensitive=False))
@click.option("--scope", type=click.Choice(SCOPE_VALUES, case_sensitive=False), default=None)
@click.option("--force", is_flag=True, help="Replace a same-named tool in the target scope.")
@click.pass_obj
def tools_move(
    obj: Dict[str, Any],
    type_: str,
    name: str,
    target_scope: str,
    scope: Optional[str],
    force: bool,
) -> None:
    engine = _engine(obj)
    tool_type = _tool_type(type_)
    tool = _find_tool(engine, tool_type, name, _scope(scope))
    target = ConfigScope(target_scope.lower())
    if target not in move_targets(tool):
        raise click.ClickException(
            f"Cannot move {tool.name} from {tool.scope.value} to {target.value}"
        )
    if engine.tools.check_conflict(tool, target):
        if not force:
            raise click.ClickException(
                f"{tool.name} already exists in {target.value} scope; use --force to replace it"
            )
        existing = _find_tool(engine, tool_type, name, target)
        removed = engine.tools.delete_tool(existing)
        if not removed.success:
            raise click.ClickException(removed.error or f"Cannot replace {name}")
    result = engine.tools.move_tool(tool, target)
    if not result.success:
        raise click.ClickException(result.error or f"Cannot move {name}")
    _ui().render_tool_action(f"Moved to {target.value}", tool)


# --- profiles ---


@cli.group(help="Save and switch named tool configurations.")
def profiles() -> None:
    pass


@profiles.command("list", help="List profiles for the active agent.")
@click.pass_obj
def profiles_list(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    active = engine.registry.get_active_adapter()
    agent_id = active.id if active else None
    _prune_stale_entries(engine, engine.profiles.get_profiles(agent_id))
    _ui().render_profiles(
        engine.profiles.get_profiles(agent_id),
        engine.profiles.get_active_profile_id(),
    )


@profiles.command("create", help="Snapshot the current tool states as a profile.")
@click.argument("name")
@click.pass_obj
def profiles_create(obj: Dict[str, Any], name: str) -> None:
    engine = _engine(obj)
    _active_adapter_or_fail(engine)
    if engine.profiles.get_profile_by_name(name) is not None:
        raise click.ClickException(f"Profile already exists: {name}")
    _ui().render_profile_saved(engine.profiles.create_profile(name))


@profiles.command("show", help="Show the desired state recorded in a profile.")
@click.argument("name")
@click.pass_obj
def profiles_show(obj: Dict[str, Any], name: str) -> None:
    engine = _engine(obj)
    profile = _profile_by_name(engine, name)
    _ui().render_profile(profile, profile.id == engine.profiles.get_active_profile_id())


@profiles.command("switch", help="Toggle tools until they match a profile.")
@click.argument("name")
@click.pass_obj
def profiles_switch(obj: Dict[str, Any], name: str) -> None:
    engine = _engine(obj)
    _active_adapter_or_fail(engine)
    profile = _profile_by_name(engine, name)
    _prune_stale_entries(engine, [profile])
    result = engine.profiles.switch_profile(profile.id)

    root = engine.workspace_root
    if root is not None:
        associated = engine.workspace.get_association(root)
        if associated is not None and associated != profile.name:
            engine.workspace.set_override(root, profile.name)

    _ui().render_switch_result(profile.name, result)
    if not result.success:
        raise click.exceptions.Exit(1)


@profiles.command("deactivate", help="Clear the active profile without touching tools.")
@click.pass_obj
def profiles_deactivate(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    _ui().render_switch_result(None, engine.profiles.switch_profile(None))


@profiles.command("delete", help="Delete a profile.")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def profiles_delete(obj: Dict[str, Any], name: str, yes: bool) -> None:
    engine = _engine(obj)
    profile = _profile_by_name(engine, name)
    if not yes:
        click.confirm(f"Delete profile '{profile.name}'?", abort=True)
    engine.profiles.delete_profile(profile.id)
    _ui().render_profile_saved(profile, removed=True)


@profiles.command("clone", help="Copy a profile to another agent, skipping unsupported tools.")
@click.argument("name")
@click.argument("agent_id")
@click.option("--as", "new_name", default=None, help="Name of the copy (default: '<name> (<agent>)').")
@click.pass_obj
def profiles_clone(obj: Dict[str, Any], name: str, agent_id: str, new_name: Optional[str]) -> None:
    engine = _engine(obj)
    target = engine.registry.get_adapter(agent_id)
    if target is None:
        known = ", ".join(adapter.id for adapter in engine.registry.all_adapters())
        raise click.ClickException(f"Unknown agent: {agent_id} (known: {known})")
    profile = _profile_by_name(engine, name)
    _prune_stale_entries(engine, [profile])
    result = engine.profiles.clone_profile_to_agent(profile.id, target.id, new_name)
    _ui().render_clone_result(profile, target.display_name, result)


@profiles.command("reconcile", help="Drop entries for tools that no longer exist.")
@click.argument("name")
@click.pass_obj
def profiles_reconcile(obj: Dict[str, Any], name: str) -> None:
    engine = _engine(obj)
    _active_adapter_or_fail(engine)
    profile = _profile_by_name(engine, name)
    _ui().render_reconcile_result(profile, engine.profiles.reconcile_profile(profile.id))


# --- backups ---


@cli.group(help="Inspect and restore rotating config backups.")
def backups() -> None:
    pass


@backups.command("list", help="List backups of a config file, newest first.")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def backups_list(obj: Dict[str, Any], path: Path) -> None:
    engine = _engine(obj)
    target = path.expanduser()
    _ui().render_backups(target, engine.backups.list_backups(target))


@backups.command("restore", help="Restore a config file from a backup slot.")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--slot", type=click.IntRange(min=1), default=1, show_default=True)
@click.pass_obj
def backups_restore(obj: Dict[str, Any], path: Path, slot: int) -> None:
    engine = _engine(obj)
    target = path.expanduser()
    engine.backups.restore_backup(target, slot)
    _ui().render_restored(target, slot)


# --- workspace ---


@cli.group(help="Associate the workspace with a default profile.")
def workspace() -> None:
    pass


@workspace.command("associate", help="Record a default profile for this workspace.")
@click.argument("profile_name")
@click.pass_obj
def workspace_associate(obj: Dict[str, Any], profile_name: str) -> None:
    engine = _engine(obj)
    profile = _profile_by_name(engine, profile_name)
    root = _workspace_root(engine)
    engine.workspace.set_association(root, profile.name)
    _ui().render_message("workspace", f"Associated [bold]{profile.name}[/bold] with this workspace")


@workspace.command("dissociate", help="Forget this workspace's default profile.")
@click.pass_obj
def workspace_dissociate(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    engine.workspace.remove_association(_workspace_root(engine))
    _ui().render_message("workspace", "Association removed", style=UIStyle.YELLOW.value)


@workspace.command("status", help="Show the association and override state.")
@click.pass_obj
def workspace_status(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    root = _workspace_root(engine)
    names = [profile.name for profile in engine.profiles.get_profiles()]
    active_id = engine.profiles.get_active_profile_id()
    active = engine.profiles.get_profile(active_id) if active_id else None
    _ui().render_workspace_status(
        root,
        engine.workspace.get_association(root),
        engine.workspace.is_overridden(root, names),
        active.name if active else None,
    )


@workspace.command("activate", help="Switch to the associated profile unless overridden.")
@click.pass_obj
def workspace_activate(obj: Dict[str, Any]) -> None:
    engine = _engine(obj)
    _active_adapter_or_fail(engine)
    root = _workspace_root(engine)
    names = [profile.name for profile in engine.profiles.get_profiles()]
    name = engine.workspace.profile_to_activate(root, names)
    if name is None:
        _ui().render_message(
            "workspace", "Nothing to activate", style=UIStyle.DIM.value
        )
        return
    profile = _profile_by_name(engine, name)
    _prune_stale_entries(engine, [profile])
    result = engine.profiles.switch_profile(profile.id)
    _ui().render_switch_result(profile.name, result)
    if not result.success:
        raise click.exceptions.Exit(1)


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
