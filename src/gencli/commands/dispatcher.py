# ==================================================================================================
#                               Execution dispatcher
# ==================================================================================================
#
# One entry point, `execute_command(command, context, ...)`, with one branch per
# command variant:
#
#   StringCommand    -> shell; success iff exit code 0
#   FunctionCommand  -> handler(context); exceptions become failures
#   TypedCommand     -> decode + validate, then handler(HandlerContext)
#   GroupCommand     -> pop one positional token, recurse into that child
#
# Every path returns a `CommandResult`; nothing raised by user code or by input
# validation escapes this module. There are no retries.
#

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from gencli.commands.context import ExecutionContext, HandlerContext
from gencli.commands.decoder import decode
from gencli.commands.model import (
    CommandResult,
    FunctionCommand,
    GroupCommand,
    StringCommand,
    TypedCommand,
    as_command,
    command_help,
    command_kind,
)
from gencli.commands.shell import run_shell
from gencli.errors import CommandValidationError, describe_exception, run_step

logger = logging.getLogger(__name__)

# ==================================================================================================
# Constants
# ==================================================================================================

NO_DESCRIPTION: str = "No description available"
NO_SUBCOMMANDS: str = "No subcommands available"
LISTING_HEADER: str = "Available subcommands:"


# ==================================================================================================
# Helpers
# ==================================================================================================

def render_group_listing(group: GroupCommand) -> str:
    """
    Render the child listing printed when a group is invoked without a subcommand.

    Usage example
    -------------
        print(render_group_listing(command_group({"build": "make"}, help="Project tasks")))
        # Project tasks
        #
        #   build  No description available
    """
    lines: List[str] = [group.help or LISTING_HEADER, ""]
    if not group.commands:
        lines.append(f"  - {NO_SUBCOMMANDS}")
        return "\n".join(lines)

    width = max(len(name) for name in group.commands)
    for name, child in group.commands.items():
        lines.append(f"  {name.ljust(width)}  {command_help(child) or NO_DESCRIPTION}")
    return "\n".join(lines)


def _step_context(command: Any, args: Sequence[str]) -> Dict[str, Any]:
    return {"variant": command_kind(command), "args": list(args)}


# ==================================================================================================
# Variants
# ==================================================================================================

async def _execute_string(command: StringCommand, context: ExecutionContext) -> CommandResult:
    try:
        exit_code = await run_shell(command.command, cwd=context.cwd, env=context.env)
    except (OSError, ValueError) as exc:
        # ValueError: command text the shell cannot take (embedded NUL, ...).
        return CommandResult.failure(describe_exception(exc))

    if exit_code != 0:
        return CommandResult.failure(f"Command exited with code {exit_code}", exit_code=exit_code)
    return CommandResult.ok()


async def _execute_function(command: FunctionCommand, context: ExecutionContext, args: Sequence[str]) -> CommandResult:
    result = await run_step("function", _step_context(command, args), command.handler, context)
    if result.failure is not None:
        return CommandResult.failure(result.failure.message)
    return CommandResult.ok()


async def _execute_typed(
    command: TypedCommand,
    context: ExecutionContext,
    args: Sequence[str],
    options: Mapping[str, Any],
) -> CommandResult:
    try:
        decoded = decode(options, args, command)
    except CommandValidationError as exc:
        logger.debug("validation failed: %s", exc.issues)
        return CommandResult.failure(f"Validation error: {exc}")
    except Exception as exc:  # noqa: BLE001 (intentional: boundary catch)
        # Validator bugs and annotations pydantic cannot build a schema for.
        logger.debug("decode failed | %s: %s", type(exc).__name__, exc, exc_info=True)
        return CommandResult.failure(describe_exception(exc))

    handler_context = HandlerContext(options=decoded.options, args=decoded.args, context=context)
    result = await run_step("typed", _step_context(command, args), command.handler, handler_context)
    if result.failure is not None:
        return CommandResult.failure(result.failure.message)
    return CommandResult.ok()


async def _execute_group(
    group: GroupCommand,
    context: ExecutionContext,
    args: Sequence[str],
    options: Mapping[str, Any],
) -> CommandResult:
    if not args:
        print(render_group_listing(group))
        return CommandResult.ok()

    name, remaining = args[0], args[1:]
    child = group.commands.get(name)
    if child is None:
        return CommandResult.failure(f'Subcommand "{name}" not found')
    try:
        child = as_command(child)
    except TypeError:
        return CommandResult.failure("Unknown command type")

    logger.debug("group -> %s (%s)", name, command_kind(child))
    return await execute_command(child, context, args=remaining, options=options)


# ==================================================================================================
# Dispatcher
# ==================================================================================================

async def execute_command(
    command: Any,
    context: ExecutionContext,
    *,
    args: Sequence[str] = (),
    options: Optional[Mapping[str, Any]] = None,
) -> CommandResult:
    """
    Execute one command and report a single `CommandResult`.

    Parameters
    ----------
    command
        A command variant.
    context
        Shared, read-only execution context.
    args
        Remaining positional tokens. Groups consume the first one; typed
        commands map them onto their declared arguments.
    options
        Raw option values for typed commands (name -> raw value).

    Returns
    -------
    CommandResult
        Exactly one outcome; failures are values, never exceptions.

    Usage example
    -------------
        ctx = build_context(cwd=Path.cwd(), environ=os.environ)
        result = await execute_command(command_group({"test": "pytest"}), ctx, args=["test"])
    """
    args = list(args)
    options = dict(options or {})

    if isinstance(command, StringCommand):
        return await _execute_string(command, context)
    if isinstance(command, FunctionCommand):
        return await _execute_function(command, context, args)
    if isinstance(command, TypedCommand):
        return await _execute_typed(command, context, args, options)
    if isinstance(command, GroupCommand):
        return await _execute_group(command, context, args, options)
    return CommandResult.failure("Unknown command type")


async def run_command(
    name: str,
    context: ExecutionContext,
    commands: Optional[Mapping[str, Any]],
    *,
    args: Sequence[str] = (),
    options: Optional[Mapping[str, Any]] = None,
) -> CommandResult:
    """
    Resolve a top-level command by name and execute it.

    Usage example
    -------------
        result = await run_command("db", ctx, cfg.commands, args=["migrate"])
    """
    if not commands:
        return CommandResult.failure("No commands defined in configuration")

    command = commands.get(name)
    if command is None:
        return CommandResult.failure(f'Command "{name}" not found')

    return await execute_command(command, context, args=args, options=options)
