# ==================================================================================================
#                                   CLI
# ==================================================================================================
#
# Entry point for the `gencli` command-line interface.
#
# This module is a thin dispatcher:
# - parse global options (--config, --verbose), which precede the command name
# - load project config once and register every configured command
# - parse the rest and hand the selected command to the dispatcher
#
# Command semantics live in `gencli.commands.*`, not here.
#
# ==================================================================================================
# Imports
# ==================================================================================================

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import yaml

from gencli.cli.types import CliCommand
from gencli.commands.context import build_context
from gencli.commands.model import CommandResult
from gencli.commands.surface import INVOCATION_KEY, build_command_surface
from gencli.config import ProjectConfig, load_project_config
from gencli.constants import (
    CONFIG_ERROR_EXIT_CODE,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_FAILURE_EXIT_CODE,
    RESERVED_COMMAND_NAMES,
)
from gencli.errors import ConfigurationError
from gencli.logging import configure_logging, level_for

# Built-in command handlers
from gencli.cli.commands import list as cmd_list
from gencli.cli.commands import run as cmd_run

logger = logging.getLogger(__name__)


# ==================================================================================================
# Command registry
# ==================================================================================================

_BUILTINS: Dict[str, CliCommand] = {
    "run": cmd_run,
    "list": cmd_list,
}


# ==================================================================================================
# Argument parsing
# ==================================================================================================

def build_global_parser() -> argparse.ArgumentParser:
    """
    Parser for the options that must be known before the config is loaded.

    Also used as a parent of the full parser so the options show up in ``--help``.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILENAME,
        help=f"Path to the project config (default: {DEFAULT_CONFIG_FILENAME}).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def parse_global_options(argv: Sequence[str] | None) -> argparse.Namespace:
    """
    Read ``--config`` / ``--verbose`` from the tokens before the command name.

    Everything from the first positional on is left alone, so a command may
    declare its own ``--config`` option.
    """
    parser = build_global_parser()
    parser.add_argument("rest", nargs=argparse.REMAINDER)
    args, _ = parser.parse_known_args(argv)
    return args


def build_arg_parser(cfg: ProjectConfig) -> argparse.ArgumentParser:
    """
    Build the top-level CLI parser with built-in and configured subcommands.

    Parameters
    ----------
    cfg
        Loaded project configuration.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.

    Raises
    ------
    ConfigurationError
        When a configured command cannot be registered.

    Usage example
    -------------
        gencli --config gencli.yaml list
        gencli deploy production --force
        gencli db migrate
    """
    parser = argparse.ArgumentParser(
        prog="gencli",
        description="Run project commands declared in configuration",
        parents=[build_global_parser()],
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    for name, module in _BUILTINS.items():
        if not hasattr(module, "add_subparser"):
            raise RuntimeError(f"CLI command module for '{name}' is missing add_subparser().")
        module.add_subparser(subparsers)

    build_command_surface(subparsers, cfg.commands, reserved=RESERVED_COMMAND_NAMES)
    return parser


def _load_config(config: str) -> ProjectConfig:
    path = Path(config)
    if config == DEFAULT_CONFIG_FILENAME and not path.exists():
        logger.debug("no %s in %s, starting with no configured commands", config, Path.cwd())
        return ProjectConfig.from_mapping({})
    return load_project_config(path)


# ==================================================================================================
# Dispatch
# ==================================================================================================

async def dispatch(args: argparse.Namespace, extras: List[str], cfg: ProjectConfig) -> CommandResult:
    """
    Run the command selected by a parsed command line.

    Parameters
    ----------
    args
        Namespace from ``build_arg_parser(cfg).parse_known_args(...)``.
    extras
        Unknown tokens; only untyped commands receive them.
    cfg
        Project config the parser was built from.
    """
    context = build_context(cwd=Path.cwd(), environ=os.environ, verbose=bool(args.verbose), config=cfg)

    module = _BUILTINS.get(str(args.command))
    if module is not None:
        if not hasattr(module, "run"):
            raise RuntimeError(f"CLI command module for '{args.command}' is missing run().")
        return await module.run(args, cfg, context)

    node = getattr(args, INVOCATION_KEY)
    return await node.invoke(args, extras, context)


def _reject_unknown(parser: argparse.ArgumentParser, args: argparse.Namespace, extras: List[str]) -> None:
    # Exits with status 2, like any other usage error.
    if not extras:
        return
    node = getattr(args, INVOCATION_KEY, None)
    if node is None:
        parser.error(f"unrecognized arguments: {' '.join(extras)}")
    elif not node.accepts_unknown:
        node.parser.error(f"unrecognized arguments: {' '.join(extras)}")


def report(result: CommandResult) -> int:
    """
    Map a command result to a process exit code, printing the error if any.

    Usage example
    -------------
        sys.exit(report(CommandResult.failure("boom", exit_code=3)))
    """
    if result.success:
        return 0
    print(f"Command failed: {result.error}", file=sys.stderr)
    return result.exit_code or DEFAULT_FAILURE_EXIT_CODE


# ==================================================================================================
# Entry point
# ==================================================================================================

def main(argv: Sequence[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv
        Optional argv for testing. If None, reads from sys.argv.

    Returns
    -------
    int
        Process exit code: 0 on success, the command's exit code (or 1) on
        failure, 2 for configuration errors. Usage errors exit through argparse.

    Usage example
    -------------
        main(["--config", "gencli.yaml", "build"])
    """
    global_args = parse_global_options(argv)
    configure_logging(level_for(global_args.verbose))

    try:
        cfg = _load_config(global_args.config)
        parser = build_arg_parser(cfg)
    except (ConfigurationError, ValueError, OSError, yaml.YAMLError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return CONFIG_ERROR_EXIT_CODE

    args, extras = parser.parse_known_args(argv)
    _reject_unknown(parser, args, extras)

    result = asyncio.run(dispatch(args, extras, cfg))
    return report(result)


def entrypoint() -> None:
    """Console-script wrapper around `main`."""
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
