# ==================================================================================================
#                                   Constants
# ==================================================================================================
#
# Shared names and limits used across the command subsystem. Defining them once
# here keeps the analyzer, the surface synthesizer and the dispatcher in sync.

from typing import Final, FrozenSet, Tuple

# Validator kinds that only decorate another validator and can be unwrapped.
WRAPPER_KINDS: Final[FrozenSet[str]] = frozenset({"optional", "nullable", "default"})
# Kind reported when a validator cannot be introspected.
UNKNOWN_KIND: Final[str] = "unknown"
# Upper bound on wrapper layers; deeper chains degrade to UNKNOWN_KIND.
MAX_UNWRAP_DEPTH: Final[int] = 32

# Exit code used when a failed command does not report its own.
DEFAULT_FAILURE_EXIT_CODE: Final[int] = 1
# Exit code for configuration errors detected before any command runs.
CONFIG_ERROR_EXIT_CODE: Final[int] = 2

DEFAULT_CONFIG_FILENAME: Final[str] = "gencli.yaml"

# Names taken by the built-in CLI commands.
RESERVED_COMMAND_NAMES: Final[Tuple[str, ...]] = ("run", "list")
