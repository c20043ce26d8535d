# ==================================================================================================
#                               Input decoder
# ==================================================================================================
#
# Turns raw parser output into validated handler input:
#
#   raw options  {"tags": "a, b"}        -> split comma text for array options
#                                        -> pydantic model (coercion/defaults)
#   raw tokens   ["prod", "api", "web"]  -> {"env": "prod", "services": ["api", "web"]}
#                                        -> pydantic model, issue paths prefixed "args"
#
# The argparse layer only collects strings; every conversion, default and
# requirement check belongs to the validators. Validation failures propagate
# as `CommandValidationError`; the dispatcher turns them into results.
#

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from gencli.commands.analyzer import analyze
from gencli.commands.model import TypedCommand
from gencli.commands.validators import SchemaField
from gencli.errors import CommandValidationError

# ==================================================================================================
# Constants
# ==================================================================================================

ARGS_PATH_PREFIX: str = "args"

_MODEL_CONFIG = ConfigDict(protected_namespaces=(), extra="ignore")


# ==================================================================================================
# Types
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class DecodedInput:
    """Validated options and arguments of one typed command invocation."""

    options: BaseModel
    args: BaseModel


# ==================================================================================================
# Helpers
# ==================================================================================================

def build_model(name: str, fields: Mapping[str, SchemaField]) -> Type[BaseModel]:
    """
    Build a pydantic model with one field per validator.

    Usage example
    -------------
        Options = build_model("DeployOptions", {"tags": array(str).optional()})
        Options.model_validate({"tags": ["a"]})
    """
    definitions: Dict[str, Any] = {key: validator.field_definition() for key, validator in fields.items()}
    return create_model(name, __config__=_MODEL_CONFIG, **definitions)


def split_array_options(raw_options: Mapping[str, Any], options: Mapping[str, SchemaField]) -> Dict[str, Any]:
    """Split single comma-separated text values of array-kind options into trimmed lists."""
    processed = dict(raw_options)
    for key, validator in options.items():
        value = processed.get(key)
        if isinstance(value, str) and analyze(validator).base_kind == "array":
            processed[key] = [piece.strip() for piece in value.split(",")]
    return processed


def map_positionals(raw_positionals: Sequence[Any], args: Mapping[str, SchemaField]) -> Dict[str, Any]:
    """
    Assign positional tokens to argument names in declaration order.

    Positions beyond the supplied tokens are left out so defaults can apply.
    A trailing array-kind argument absorbs every remaining token.
    """
    names = list(args)
    tokens = list(raw_positionals)
    trailing_array = bool(names) and analyze(args[names[-1]]).base_kind == "array"

    mapped: Dict[str, Any] = {}
    for index, name in enumerate(names):
        if index >= len(tokens):
            break
        if trailing_array and index == len(names) - 1:
            rest = tokens[index:]
            # Tolerate a pre-grouped variadic value, as some parsers deliver it.
            if len(rest) == 1 and isinstance(rest[0], (list, tuple)):
                rest = list(rest[0])
            mapped[name] = rest
        else:
            mapped[name] = tokens[index]
    return mapped


def _validate(model: Type[BaseModel], values: Mapping[str, Any]) -> BaseModel:
    try:
        return model.model_validate(dict(values))
    except ValidationError as exc:
        raise CommandValidationError.from_pydantic(exc) from exc


# ==================================================================================================
# Decoder
# ==================================================================================================

def decode_options(raw_options: Optional[Mapping[str, Any]], options: Mapping[str, SchemaField]) -> BaseModel:
    """Validate raw options; issue paths are the option names."""
    processed = split_array_options(raw_options or {}, options)
    return _validate(build_model("CommandOptions", options), processed)


def decode_args(raw_positionals: Sequence[Any], args: Mapping[str, SchemaField]) -> BaseModel:
    """Validate positional tokens; issue paths start with ``"args"``."""
    try:
        return _validate(build_model("CommandArgs", args), map_positionals(raw_positionals, args))
    except CommandValidationError as exc:
        raise exc.with_prefix(ARGS_PATH_PREFIX) from exc.__cause__


def decode(
    raw_options: Optional[Mapping[str, Any]],
    raw_positionals: Sequence[Any],
    command: TypedCommand,
) -> DecodedInput:
    """
    Decode and validate the input of a typed command.

    Parameters
    ----------
    raw_options
        Option name -> raw value as delivered by the parser (absent keys omitted).
    raw_positionals
        Positional tokens in command-line order.
    command
        The typed command whose validators apply.

    Returns
    -------
    DecodedInput
        Validated option and argument models.

    Raises
    ------
    CommandValidationError
        On the first failing group (options are checked before arguments).

    Usage example
    -------------
        decoded = decode({"tags": "a,b ,c"}, ["prod"], deploy)
        decoded.options.tags   # ["a", "b", "c"]
    """
    options = decode_options(raw_options, command.options)
    args = decode_args(raw_positionals, command.args)
    return DecodedInput(options=options, args=args)
