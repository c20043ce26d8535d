# ==================================================================================================
#                               Command model
# ==================================================================================================
#
# Declarative command variants and the builders that produce them.
#
#   StringCommand    shell invocation text
#   FunctionCommand  callback(context), no declared inputs
#   TypedCommand     options/args backed by validators + handler(HandlerContext)
#   GroupCommand     name -> Command subtree, dispatched one token per level
#
# Values are frozen and their mappings read-only: the loaded configuration
# owns the tree, the dispatcher only reads it. Shape checks that need the CLI
# (array argument placement, flag collisions) happen later, at synthesis.
#

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from gencli.commands.validators import SchemaField, as_validator

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

Handler = Callable[[Any], Union[None, Awaitable[None]]]

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class StringCommand:
    """Shell invocation text run through the system shell."""

    command: str
    help: Optional[str] = None


@dataclass(frozen=True)
class FunctionCommand:
    """Opaque callback receiving the execution context; sync or async."""

    handler: Handler
    help: Optional[str] = None


@dataclass(frozen=True)
class TypedCommand:
    """
    Command whose options and positional arguments are validated.

    Attributes
    ----------
    handler : callable
        Handler receiving a `HandlerContext` (validated options/args + context).
    help : str, optional
        Help text.
    options : Mapping[str, SchemaField]
        Option name -> validator.
    args : Mapping[str, SchemaField]
        Argument name -> validator; iteration order is positional order.
    """

    handler: Handler
    help: Optional[str] = None
    options: Mapping[str, SchemaField] = field(default_factory=lambda: _EMPTY)
    args: Mapping[str, SchemaField] = field(default_factory=lambda: _EMPTY)


@dataclass(frozen=True)
class GroupCommand:
    """Named subtree of commands."""

    commands: Mapping[str, "Command"]
    help: Optional[str] = None


Command = Union[StringCommand, FunctionCommand, TypedCommand, GroupCommand]

COMMAND_TYPES = (StringCommand, FunctionCommand, TypedCommand, GroupCommand)


@dataclass(frozen=True)
class CommandResult:
    """
    Uniform outcome of one `execute_command` call.

    Build it with `CommandResult.ok()` or `CommandResult.failure(...)`.

    Usage example
    -------------
        result = CommandResult.failure("Command exited with code 2", exit_code=2)
        assert not result.success
    """

    success: bool
    error: Optional[str] = None
    exit_code: Optional[int] = None

    @classmethod
    def ok(cls) -> "CommandResult":
        """Successful outcome."""
        return cls(success=True)

    @classmethod
    def failure(cls, error: str, exit_code: Optional[int] = None) -> "CommandResult":
        """Failed outcome carrying a message and, optionally, a process exit code."""
        return cls(success=False, error=error, exit_code=exit_code)


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def _freeze(mapping: Optional[Mapping[str, Any]], convert: Callable[[Any], Any]) -> Mapping[str, Any]:
    if not mapping:
        return _EMPTY
    return MappingProxyType({str(name): convert(value) for name, value in mapping.items()})


def as_command(value: Any) -> Command:
    """
    Normalize shorthand into a command variant.

    A bare string is a string command and a bare callable a function command;
    existing variants pass through unchanged.

    Raises
    ------
    TypeError
        For anything else.
    """
    if isinstance(value, COMMAND_TYPES):
        return value
    if isinstance(value, str):
        return StringCommand(command=value)
    if callable(value):
        return FunctionCommand(handler=value)
    raise TypeError(f"Cannot build a command from {type(value).__name__}")


def command_help(command: Any) -> Optional[str]:
    """Help text of any variant (None when undeclared)."""
    return getattr(command, "help", None)


def command_kind(command: Any) -> str:
    """Short variant label used in listings and log lines."""
    if isinstance(command, StringCommand):
        return "string"
    if isinstance(command, FunctionCommand):
        return "function"
    if isinstance(command, TypedCommand):
        return "typed"
    if isinstance(command, GroupCommand):
        return "group"
    return "unknown"


# ==================================================================================================
#                                   BUILDERS
# ==================================================================================================

def string_command(command: str, help: Optional[str] = None) -> StringCommand:
    """Build a shell command."""
    return StringCommand(command=command, help=help)


def function_command(handler: Handler, help: Optional[str] = None) -> FunctionCommand:
    """Build a function command from a callback taking the execution context."""
    return FunctionCommand(handler=handler, help=help)


def define_command(
    *,
    handler: Handler,
    help: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    args: Optional[Mapping[str, Any]] = None,
) -> TypedCommand:
    """
    Build a typed command.

    Options and args accept validators or bare annotations; argument order is
    the mapping's insertion order.

    Usage example
    -------------
        deploy = define_command(
            help="Deploy a service",
            options={"tags": array(str).optional(), "dry_run": boolean().default(False)},
            args={"env": choice("dev", "prod")},
            handler=lambda ctx: print(ctx.args.env, ctx.options.tags),
        )
    """
    return TypedCommand(
        handler=handler,
        help=help,
        options=_freeze(options, as_validator),
        args=_freeze(args, as_validator),
    )


def command_group(commands: Mapping[str, Any], help: Optional[str] = None) -> GroupCommand:
    """Build a group; children may use the string/callable shorthand."""
    return GroupCommand(commands=_freeze(commands, as_command), help=help)


class _CommandBuilders:
    """Namespace mirroring the builders: `command.string(...)`, `command.group(...)`, ..."""

    string = staticmethod(string_command)
    function = staticmethod(function_command)
    define = staticmethod(define_command)
    group = staticmethod(command_group)


command = _CommandBuilders()
