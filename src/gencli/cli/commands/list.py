# ==================================================================================================
#                               CLI: list
# ==================================================================================================
#
# Command handler for: `gencli list`
#
# Prints the configured command tree, one line per command:
#
#   build    [string]  Build the project
#   db       [group]   Database tasks
#     migrate  [string]  -
#

import argparse
from typing import Any, List, Mapping

from gencli.commands.context import ExecutionContext
from gencli.commands.model import CommandResult, GroupCommand, command_help, command_kind
from gencli.config import ProjectConfig

INDENT: str = "  "


def render_command_tree(commands: Mapping[str, Any], depth: int = 0) -> List[str]:
    """
    Render a command mapping (and nested groups) as indented lines.

    Usage example
    -------------
        print("\\n".join(render_command_tree(cfg.commands)))
    """
    if not commands:
        return []

    width = max(len(name) for name in commands)
    lines: List[str] = []
    for name, command in commands.items():
        lines.append(f"{INDENT * depth}{name.ljust(width)}  [{command_kind(command)}]  {command_help(command) or '-'}")
        if isinstance(command, GroupCommand):
            lines.extend(render_command_tree(command.commands, depth + 1))
    return lines


def add_subparser(subparsers: Any) -> None:
    """Register the `list` subcommand."""
    subparsers.add_parser("list", help="List configured commands")


async def run(args: argparse.Namespace, cfg: ProjectConfig, context: ExecutionContext) -> CommandResult:
    """Print the command tree; an empty configuration is not an error."""
    lines = render_command_tree(cfg.commands)
    print("\n".join(lines) if lines else "No commands defined in configuration")
    return CommandResult.ok()
