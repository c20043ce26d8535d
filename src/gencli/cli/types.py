"""
Shared CLI typing contracts.

This module defines the protocol implemented by the built-in command modules
registered in `gencli.cli.main._BUILTINS`. Configured commands do not use it;
their parsers come from `gencli.commands.surface`.
"""

import argparse
from typing import Any, Protocol

from gencli.commands.context import ExecutionContext
from gencli.commands.model import CommandResult
from gencli.config import ProjectConfig

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

class CliCommand(Protocol):
    """
    Structural interface for built-in CLI subcommand modules.

    - `add_subparser(...)` registers CLI arguments.
    - `run(...)` executes the command after parsing + config load and reports
      a `CommandResult` like any configured command.
    """

    def add_subparser(self, subparsers: Any) -> None: ...
    async def run(self, args: argparse.Namespace, cfg: ProjectConfig, context: ExecutionContext) -> CommandResult: ...
