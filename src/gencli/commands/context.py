# ==================================================================================================
#                               Execution context
# ==================================================================================================
#
# Read-only context handed to every command of one CLI invocation.
#
# Nothing in the command subsystem reads `os.environ` or the process working
# directory on its own: the entry point calls `build_context(...)` once with
# the real values and the result travels by reference through recursive
# group dispatch.
#

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from gencli.config import ProjectConfig

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """
    Immutable per-invocation context.

    Parameters
    ----------
    cwd
        Working directory commands run in.
    env
        Read-only snapshot of the environment variables.
    verbose
        Whether `--verbose` was given.
    config
        The whole resolved project configuration, when one was loaded.

    Usage example
    -------------
        ctx = build_context(cwd=Path.cwd(), environ=os.environ, verbose=True)
        print(ctx.env["HOME"])
    """

    cwd: Path
    env: Mapping[str, str]
    verbose: bool = False
    config: Optional["ProjectConfig"] = None


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """
    Argument passed to typed command handlers.

    `options` and `args` are pydantic model instances holding validated values,
    so handlers read them as attributes (``ctx.options.tags``).
    """

    options: Any
    args: Any
    context: ExecutionContext


# ==================================================================================================
#                                   CORE LOGIC
# ==================================================================================================

def build_context(
    *,
    cwd: Path,
    environ: Mapping[str, str],
    verbose: bool = False,
    config: Optional["ProjectConfig"] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ExecutionContext:
    """
    Snapshot the environment into an `ExecutionContext`.

    Parameters
    ----------
    cwd
        Working directory.
    environ
        Base environment, usually `os.environ` at the entry point.
    verbose
        Verbose flag.
    config
        Loaded configuration.
    overrides
        Variables layered over `environ`.

    Returns
    -------
    ExecutionContext
        Context whose `env` no longer tracks later changes to `environ`.
    """
    snapshot = {str(k): str(v) for k, v in environ.items()}
    if overrides:
        snapshot.update({str(k): str(v) for k, v in overrides.items()})

    return ExecutionContext(
        cwd=Path(cwd),
        env=MappingProxyType(snapshot),
        verbose=bool(verbose),
        config=config,
    )
