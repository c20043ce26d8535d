# ==================================================================================================
#                               Config loading
# ==================================================================================================
#
# This module defines the *single, canonical entry point* for reading project
# configuration and turning its `commands` section into the command model.
#
# Config shape (YAML)
# -------------------
#   commands:
#     lint: "ruff check ."                      # string command
#     test:
#       command: "pytest -q"                    # string command with help
#       help: "Run the test suite"
#     db:
#       help: "Database tasks"
#       commands:                               # group, nested at any depth
#         migrate: "alembic upgrade head"
#     deploy:
#       ref: "tasks.deploy:deploy_command"      # any Python-defined command
#
# Everything except `commands` is kept untouched in `ProjectConfig.raw`; the
# rest of the tool decides what those keys mean.
#
# Python-built configurations go through `ProjectConfig.from_mapping(...)`,
# which accepts ready command objects as well as the YAML shapes above.
#

import importlib
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import yaml

from gencli.commands.model import COMMAND_TYPES, Command, GroupCommand, StringCommand, as_command
from gencli.errors import ConfigurationError

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

_ENTRY_KEYS = frozenset({"command", "commands", "help", "ref"})


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """
    Parsed project configuration.

    Parameters
    ----------
    raw
        Raw config dictionary (YAML or Python).
    commands
        Top-level commands, normalized into the command model.

    Usage example
    -------------
        cfg = load_project_config(Path("gencli.yaml"))
        sorted(cfg.commands)
    """

    raw: Dict[str, Any]
    commands: Mapping[str, Command] = field(default_factory=lambda: MappingProxyType({}))

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "ProjectConfig":
        """
        Build a ProjectConfig from an in-memory mapping.

        Parameters
        ----------
        data
            Mapping with an optional ``commands`` section.

        Returns
        -------
        ProjectConfig
            Configuration with normalized commands.

        Usage example
        -------------
            cfg = ProjectConfig.from_mapping({"commands": {"build": "make"}})
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Config must be a mapping at top-level, got: {type(data)}")

        section = data.get("commands") or {}
        if not isinstance(section, Mapping):
            raise ConfigurationError((), f"`commands` must be a mapping, got: {type(section).__name__}")

        commands = {str(name): coerce_command(node, (str(name),)) for name, node in section.items()}
        return ProjectConfig(raw=dict(data), commands=MappingProxyType(commands))


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def resolve_reference(ref: str, path: Tuple[str, ...]) -> Any:
    """
    Import the object named by ``"package.module:attribute"``.

    Dotted attributes after the colon are followed (``"mod:obj.child"``).
    """
    module_name, sep, attribute = ref.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(path, f'reference "{ref}" must look like "package.module:attribute"')

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(path, f'cannot import "{module_name}": {exc}') from exc

    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigurationError(path, f'"{module_name}" has no attribute "{attribute}"') from exc
    return target


def _help_of(node: Mapping[str, Any], path: Tuple[str, ...]) -> Any:
    help_text = node.get("help")
    if help_text is not None and not isinstance(help_text, str):
        raise ConfigurationError(path, "`help` must be a string")
    return help_text


def coerce_command(node: Any, path: Tuple[str, ...]) -> Command:
    """
    Convert one config entry into a command variant.

    Parameters
    ----------
    node
        A command object, a string, a callable, or a mapping with one of
        ``command`` / ``commands`` / ``ref``.
    path
        Position of the entry in the command tree (for error messages).

    Returns
    -------
    Command
        Normalized command.

    Raises
    ------
    ConfigurationError
        For entries that match none of the accepted shapes.
    """
    if isinstance(node, COMMAND_TYPES) or isinstance(node, str) or callable(node):
        return as_command(node)

    if not isinstance(node, Mapping):
        raise ConfigurationError(path, f"unsupported command entry of type {type(node).__name__}")

    unknown = set(node) - _ENTRY_KEYS
    if unknown:
        raise ConfigurationError(path, f"unknown keys: {', '.join(sorted(map(str, unknown)))}")

    help_text = _help_of(node, path)

    if "ref" in node:
        target = resolve_reference(str(node["ref"]), path)
        resolved = coerce_command(target, path)
        if help_text is not None and resolved.help is None:
            resolved = replace(resolved, help=help_text)
        return resolved

    if "commands" in node:
        children = node["commands"]
        if not isinstance(children, Mapping):
            raise ConfigurationError(path, "`commands` of a group must be a mapping")
        return GroupCommand(
            commands=MappingProxyType(
                {str(name): coerce_command(child, (*path, str(name))) for name, child in children.items()}
            ),
            help=help_text,
        )

    if "command" in node:
        text = node["command"]
        if not isinstance(text, str):
            raise ConfigurationError(path, "`command` must be a string")
        return StringCommand(command=text, help=help_text)

    raise ConfigurationError(path, "expected one of `command`, `commands` or `ref`")


# ==================================================================================================
#                                   IO
# ==================================================================================================

def load_project_config(config_path: Path) -> ProjectConfig:
    """
    Load YAML config into a ProjectConfig object.

    Parameters
    ----------
    config_path
        Path to YAML config file.

    Returns
    -------
    ProjectConfig
        Loaded configuration.

    Usage example
    -------------
        cfg = load_project_config(Path("gencli.yaml"))
        print(cfg.raw.get("project"))
    """
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config must be a mapping at top-level, got: {type(data)}")

    return ProjectConfig.from_mapping(data)
