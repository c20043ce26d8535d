# ==================================================================================================
#                           CLI surface synthesizer
# ==================================================================================================
#
# Grows argparse subcommands out of the command model, once, at startup.
#
#   TypedCommand   -> one flag per option, one positional per argument
#   Group          -> nested subparsers, one per child (recursive)
#   String / func  -> a node accepting any trailing tokens and unknown flags
#
# Every node stores its `SurfaceNode` in the namespace under INVOCATION_KEY;
# after parsing, the entry point picks it up and calls `node.invoke(...)`.
# That is the action callback of the synthesized tree.
#
# Absent flags and positionals are never written to the namespace
# (argparse.SUPPRESS), so requirement checks and defaults stay with the
# validators instead of being split between two layers.
#

import argparse
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from gencli.commands.analyzer import TypeDescriptor, analyze
from gencli.commands.context import ExecutionContext
from gencli.commands.dispatcher import execute_command
from gencli.commands.model import (
    Command,
    CommandResult,
    GroupCommand,
    TypedCommand,
    as_command,
    command_help,
    command_kind,
)
from gencli.errors import ConfigurationError

logger = logging.getLogger(__name__)

# ==================================================================================================
# Constants
# ==================================================================================================

INVOCATION_KEY: str = "_gencli_node"
OPTION_DEST_PREFIX: str = "option:"
ARG_DEST_PREFIX: str = "arg:"
TOKENS_DEST: str = "tokens:"

# Flags argparse already owns on every parser.
BUILTIN_FLAGS: Tuple[str, ...] = ("-h", "--help")


# ==================================================================================================
# Types
# ==================================================================================================

@dataclass(frozen=True)
class SurfaceNode:
    """
    Registration record of one synthesized command.

    Parameters
    ----------
    path
        Command names from the root, e.g. ``("db", "migrate")``.
    command
        The command this node runs.
    parser
        The argparse parser created for it.
    children
        Child nodes for groups (empty otherwise).

    Usage example
    -------------
        nodes = build_command_surface(subparsers, cfg.commands)
        args, extras = parser.parse_known_args(argv)
        node = getattr(args, INVOCATION_KEY)
        result = await node.invoke(args, extras, ctx)
    """

    path: Tuple[str, ...]
    command: Command
    parser: argparse.ArgumentParser
    children: Mapping[str, "SurfaceNode"] = field(default_factory=dict)

    @property
    def accepts_unknown(self) -> bool:
        """Untyped commands take unknown flags and extra tokens verbatim."""
        return not isinstance(self.command, (TypedCommand, GroupCommand))

    def collect(self, namespace: argparse.Namespace, extras: Sequence[str] = ()) -> Tuple[List[Any], Dict[str, Any]]:
        """
        Pull this node's raw positionals and options out of a parsed namespace.

        Returns
        -------
        tuple
            ``(positionals, options)``: positionals in command-line order,
            options keyed by declared name (absent ones omitted).
        """
        values = vars(namespace)

        if isinstance(self.command, TypedCommand):
            options = {
                name: values[_option_dest(name)]
                for name in self.command.options
                if _present(values, _option_dest(name))
            }
            positionals: List[Any] = []
            for name in self.command.args:
                dest = _arg_dest(name)
                if not _present(values, dest):
                    break
                value = values[dest]
                if isinstance(value, list):
                    positionals.extend(value)
                else:
                    positionals.append(value)
            return positionals, options

        if isinstance(self.command, GroupCommand):
            # A group only runs itself when no child was selected.
            return [], {}

        tokens = values.get(TOKENS_DEST) or []
        return [*tokens, *extras], {}

    async def invoke(
        self,
        namespace: argparse.Namespace,
        extras: Sequence[str],
        context: ExecutionContext,
    ) -> CommandResult:
        """Execute the node's command with the values parsed for it."""
        positionals, options = self.collect(namespace, extras)
        logger.debug("invoke %s (%s) args=%s options=%s", ".".join(self.path), command_kind(self.command), positionals, options)
        return await execute_command(self.command, context, args=positionals, options=options)


# ==================================================================================================
# Helpers
# ==================================================================================================

def _option_dest(name: str) -> str:
    return f"{OPTION_DEST_PREFIX}{name}"


def _arg_dest(name: str) -> str:
    return f"{ARG_DEST_PREFIX}{name}"


def _present(values: Mapping[str, Any], key: str) -> bool:
    return key in values and values[key] is not argparse.SUPPRESS


def flag_for(name: str) -> str:
    """CLI flag for an option name: ``dry_run`` -> ``--dry-run``."""
    return "--" + name.replace("_", "-")


def _check_field_names(path: Tuple[str, ...], names: Iterable[str], what: str) -> None:
    for name in names:
        if not name.isidentifier() or name.startswith("_"):
            raise ConfigurationError(path, f'{what} name "{name}" must be an identifier not starting with "_"')


def check_typed_command(path: Tuple[str, ...], command: TypedCommand) -> Dict[str, TypeDescriptor]:
    """
    Validate the declaration of a typed command before registering it.

    Returns
    -------
    dict
        Descriptors of the declared arguments, in order.

    Raises
    ------
    ConfigurationError
        Invalid names, colliding flags, more than one array argument, or an
        array argument that is not last.
    """
    _check_field_names(path, command.options, "option")
    _check_field_names(path, command.args, "argument")

    seen_flags = {flag: "<builtin>" for flag in BUILTIN_FLAGS}
    for name in command.options:
        flag = flag_for(name)
        if flag in seen_flags:
            raise ConfigurationError(path, f'option "{name}" collides with "{seen_flags[flag]}" on flag {flag}')
        seen_flags[flag] = name

    descriptors = {name: analyze(validator) for name, validator in command.args.items()}
    arrays = [name for name, info in descriptors.items() if info.base_kind == "array"]
    if len(arrays) > 1:
        raise ConfigurationError(path, f"only one array argument is allowed, got: {', '.join(arrays)}")
    if arrays and arrays[0] != list(descriptors)[-1]:
        raise ConfigurationError(path, f'array argument "{arrays[0]}" must be the last argument')
    return descriptors


def _add_option(parser: argparse.ArgumentParser, name: str, validator: Any) -> None:
    info = analyze(validator)
    help_text = info.description or f"{name} option"
    flag = flag_for(name)
    dest = _option_dest(name)

    if info.base_kind == "boolean":
        parser.add_argument(flag, dest=dest, action="store_true", default=argparse.SUPPRESS, help=help_text)
        return

    if info.base_kind == "array":
        help_text = f"{help_text} (comma-separated)"

    if info.is_optional:
        # A bare optional flag leaves the value to the validator's default.
        parser.add_argument(
            flag,
            dest=dest,
            nargs="?",
            const=argparse.SUPPRESS,
            default=argparse.SUPPRESS,
            metavar=name,
            help=help_text,
        )
    else:
        parser.add_argument(flag, dest=dest, default=argparse.SUPPRESS, metavar=f"<{name}>", help=help_text)


def _add_argument(parser: argparse.ArgumentParser, name: str, info: TypeDescriptor) -> None:
    help_text = info.description or f"{name} argument"

    if info.base_kind == "array":
        nargs = "*" if info.is_optional else "+"
    else:
        nargs = "?" if info.is_optional else None

    parser.add_argument(_arg_dest(name), nargs=nargs, default=argparse.SUPPRESS, metavar=name, help=help_text)


# ==================================================================================================
# Synthesis
# ==================================================================================================

def synthesize(subparsers: Any, name: str, command: Any, path: Tuple[str, ...] = ()) -> SurfaceNode:
    """
    Register `command` as subcommand `name` on an argparse subparser registry.

    Parameters
    ----------
    subparsers
        Result of ``parser.add_subparsers(...)``.
    name
        Subcommand name.
    command
        Command variant (string/callable shorthand accepted).
    path
        Names of the enclosing groups, used in error messages.

    Returns
    -------
    SurfaceNode
        The node, with children for groups.

    Raises
    ------
    ConfigurationError
        When a typed command's declaration cannot be rendered.
    """
    command = as_command(command)
    node_path = (*path, name)
    help_text = command_help(command)

    if isinstance(command, TypedCommand):
        descriptors = check_typed_command(node_path, command)
        parser = subparsers.add_parser(name, help=help_text, description=help_text)
        for option_name, validator in command.options.items():
            _add_option(parser, option_name, validator)
        for arg_name, info in descriptors.items():
            _add_argument(parser, arg_name, info)
        node = SurfaceNode(path=node_path, command=command, parser=parser)

    elif isinstance(command, GroupCommand):
        parser = subparsers.add_parser(name, help=help_text, description=help_text)
        child_registry = parser.add_subparsers(
            title="subcommands",
            dest=f"subcommand:{'.'.join(node_path)}",
            metavar="<subcommand>",
        )
        children = {
            child_name: synthesize(child_registry, child_name, child, node_path)
            for child_name, child in command.commands.items()
        }
        node = SurfaceNode(path=node_path, command=command, parser=parser, children=children)

    else:
        parser = subparsers.add_parser(name, help=help_text, description=help_text)
        parser.add_argument(TOKENS_DEST, nargs=argparse.REMAINDER, metavar="args", help=argparse.SUPPRESS)
        node = SurfaceNode(path=node_path, command=command, parser=parser)

    parser.set_defaults(**{INVOCATION_KEY: node})
    return node


def build_command_surface(
    subparsers: Any,
    commands: Mapping[str, Any],
    *,
    reserved: Iterable[str] = (),
) -> Dict[str, SurfaceNode]:
    """
    Register every top-level command once, before any CLI input is parsed.

    Parameters
    ----------
    subparsers
        Root subparser registry.
    commands
        Top-level command mapping from the configuration.
    reserved
        Names already taken on the root registry (built-in commands).

    Returns
    -------
    dict[str, SurfaceNode]
        Top-level nodes by name.

    Usage example
    -------------
        parser = argparse.ArgumentParser(prog="gencli")
        subparsers = parser.add_subparsers(dest="command", required=True)
        build_command_surface(subparsers, cfg.commands, reserved=("run", "list"))
    """
    taken = set(reserved)
    nodes: Dict[str, SurfaceNode] = {}
    for name, command in commands.items():
        if name in taken:
            raise ConfigurationError((name,), "name is already used by another command")
        taken.add(name)
        nodes[name] = synthesize(subparsers, name, command)
    return nodes
