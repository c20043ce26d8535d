"""Declarative commands: model, validators, CLI surface synthesis and execution."""

from .analyzer import TypeDescriptor, analyze
from .context import ExecutionContext, HandlerContext, build_context
from .decoder import DecodedInput, decode
from .dispatcher import execute_command, render_group_listing, run_command
from .model import (
    Command,
    CommandResult,
    FunctionCommand,
    GroupCommand,
    StringCommand,
    TypedCommand,
    as_command,
    command,
    command_group,
    define_command,
    function_command,
    string_command,
)
from .surface import SurfaceNode, build_command_surface, synthesize
from .validators import FieldValidator, Validator, array, boolean, choice, field, integer, number, string

__all__ = [
    "Command",
    "CommandResult",
    "DecodedInput",
    "ExecutionContext",
    "FieldValidator",
    "FunctionCommand",
    "GroupCommand",
    "HandlerContext",
    "StringCommand",
    "SurfaceNode",
    "TypeDescriptor",
    "TypedCommand",
    "Validator",
    "analyze",
    "array",
    "as_command",
    "boolean",
    "build_command_surface",
    "build_context",
    "choice",
    "command",
    "command_group",
    "decode",
    "define_command",
    "execute_command",
    "field",
    "function_command",
    "integer",
    "number",
    "render_group_listing",
    "run_command",
    "string",
    "string_command",
    "synthesize",
]
