"""CLI entry point for barconf."""

import argparse
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

import barconf.app.settings_store
import barconf.io.logging_setup
from barconf.commands import CommandResult, Commands
from barconf.errors import BarconfError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="barconf",
        description="Manage app settings and Waybar configuration profiles",
    )
    groups = parser.add_subparsers(dest="group", required=True)

    settings = groups.add_parser("settings", help="Global application settings")
    settings_cmds = settings.add_subparsers(dest="action", required=True)
    settings_cmds.add_parser("show", help="Print the current settings")
    update = settings_cmds.add_parser("update", help="Replace settings with a full JSON document")
    update.add_argument("file", help="JSON file ('-' for stdin)")
    settings_cmds.add_parser("reset", help="Restore default settings")

    profiles = groups.add_parser("profiles", help="Waybar configuration profiles")
    profile_cmds = profiles.add_subparsers(dest="action", required=True)
    profile_cmds.add_parser("list", help="List profiles")
    create = profile_cmds.add_parser("create", help="Create a profile from the default template")
    create.add_argument("name")
    select = profile_cmds.add_parser("select", help="Activate a profile and write it to Waybar")
    select.add_argument("profile_id")
    delete = profile_cmds.add_parser("delete", help="Delete a profile")
    delete.add_argument("profile_id")
    profile_cmds.add_parser("reset", help="Reset the active profile to the default template")

    snapshot = groups.add_parser("snapshot", help="Active profile configuration")
    snapshot_cmds = snapshot.add_subparsers(dest="action", required=True)
    snapshot_cmds.add_parser("show", help="Print the active profile as JSON")
    save = snapshot_cmds.add_parser("save", help="Replace the active profile from a JSON payload")
    save.add_argument("file", help="JSON file ('-' for stdin)")

    style = groups.add_parser("style", help="Active profile stylesheet")
    style_cmds = style.add_subparsers(dest="action", required=True)
    style_cmds.add_parser("show", help="Print the active stylesheet")
    style_save = style_cmds.add_parser("save", help="Replace the active stylesheet")
    style_save.add_argument("file", help="CSS file ('-' for stdin)")

    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _read_json_input(source: str) -> object:
    return json.loads(_read_input(source))


def _configure_logging() -> None:
    # The stored log level is a preference; an unreadable settings file must not block the CLI.
    try:
        level = barconf.app.settings_store.load_settings().log_level
    except BarconfError:
        level = "INFO"
    barconf.io.logging_setup.configure(default_level=level)


def _profiles_table(listing: dict) -> Table:
    table = Table(title="Waybar profiles")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for profile in listing["profiles"]:
        table.add_row(
            "●" if profile["is_active"] else "",
            escape(profile["id"]),
            escape(profile["name"]),
        )
    return table


def _dispatch(commands: Commands, args: argparse.Namespace) -> CommandResult:
    # [LAW:dataflow-not-control-flow] (group, action) → operation lookup table.
    handlers = {
        ("settings", "show"): lambda: commands.get_settings(),
        ("settings", "update"): lambda: commands.update_settings(_read_json_input(args.file)),
        ("settings", "reset"): lambda: commands.reset_settings(),
        ("profiles", "list"): lambda: commands.list_profiles(),
        ("profiles", "create"): lambda: commands.create_profile(args.name),
        ("profiles", "select"): lambda: commands.select_profile(args.profile_id),
        ("profiles", "delete"): lambda: commands.delete_profile(args.profile_id),
        ("profiles", "reset"): lambda: commands.reset_active_profile(),
        ("snapshot", "show"): lambda: commands.get_snapshot(),
        ("snapshot", "save"): lambda: commands.save_snapshot(_read_json_input(args.file)),
        ("style", "show"): lambda: commands.get_style(),
        ("style", "save"): lambda: commands.save_style(_read_input(args.file)),
    }
    return handlers[(args.group, args.action)]()


def _render(console: Console, args: argparse.Namespace, result: CommandResult) -> None:
    if (args.group, args.action) == ("style", "show"):
        console.out(result.value, highlight=False, end="")
    elif args.group == "profiles" and args.action == "list":
        console.print(_profiles_table(result.value))
    elif args.group == "profiles" and args.action != "reset":
        console.print(_profiles_table(result.value))
        affected = result.value["profile"]
        verb = {"create": "Created", "select": "Selected", "delete": "Deleted"}[args.action]
        console.print(f"{verb} profile [cyan]{escape(affected['id'])}[/]")
    elif (args.group, args.action) == ("style", "save"):
        console.print("Saved Waybar style")
    else:
        console.print_json(data=result.value)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    console = Console()
    err_console = Console(stderr=True)

    _configure_logging()

    try:
        result = _dispatch(Commands(), args)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        err_console.print(f"[bold red]error:[/] unable to read input: {escape(str(exc))}", soft_wrap=True)
        return 1

    if not result.ok:
        err_console.print(f"[bold red]error:[/] {escape(result.error)}", soft_wrap=True)
        return 1
    _render(console, args, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
