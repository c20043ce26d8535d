# ==================================================================================================
#                               CLI: run
# ==================================================================================================
#
# Command handler for: `gencli run <name> [tokens...]`
#
# Dispatches a configured command by name without going through its
# synthesized parser: the remaining tokens are handed to the dispatcher as
# positionals, so groups consume them one level at a time.
#

# ==================================================================================================
# Imports
# ==================================================================================================

import argparse
from typing import Any

from gencli.commands.context import ExecutionContext
from gencli.commands.dispatcher import run_command
from gencli.commands.model import CommandResult
from gencli.config import ProjectConfig


# ==================================================================================================
# Subparser
# ==================================================================================================

def add_subparser(subparsers: Any) -> None:
    """
    Register the `run` subcommand.

    Parameters
    ----------
    subparsers
        Subparser registry from the top-level CLI.

    Usage example
    -------------
        gencli run db migrate --dry-run
    """
    parser = subparsers.add_parser(
        "run",
        help="Run a configured command by name",
    )

    parser.add_argument("name", help="Top-level command name.")
    parser.add_argument(
        "tokens",
        nargs=argparse.REMAINDER,
        help="Positional tokens passed on to the command (groups consume one per level).",
    )


# ==================================================================================================
# Runner
# ==================================================================================================

async def run(args: argparse.Namespace, cfg: ProjectConfig, context: ExecutionContext) -> CommandResult:
    """
    Execute the `run` command.

    Parameters
    ----------
    args
        Parsed argparse namespace for this subcommand.
    cfg
        Project config (already loaded once in gencli.cli.main).
    context
        Execution context of this invocation.
    """
    return await run_command(args.name, context, cfg.commands, args=list(args.tokens or []))
