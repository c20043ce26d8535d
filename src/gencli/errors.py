"""
Shared error types and failure-capture primitives for command execution.

Two kinds of problems are modelled here:
1) Errors detected before anything runs (bad configuration, bad input). These
   are raised as exceptions from the `GencliError` hierarchy.
2) Errors raised by user code while a command runs. These are captured at the
   dispatcher boundary by `run_step(...)` and returned as structured failures,
   so a failing handler never escapes as an exception.
"""

import inspect
import logging
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Tuple, TypeVar, Union

from pydantic import ValidationError

logger = logging.getLogger(__name__)

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

T = TypeVar("T")

PathItem = Union[str, int]

# pydantic error types that mean "the value is there but has the wrong kind".
_TYPE_ERROR_SUFFIXES: Tuple[str, ...] = ("_type", "_parsing")


class GencliError(Exception):
    """Base class for every error raised by the command subsystem."""


class ConfigurationError(GencliError, ValueError):
    """
    A command declaration that cannot be turned into a CLI surface.

    Raised at config load or synthesis time; always names the offending
    command so the author can find it in the config.

    Usage example
    -------------
        raise ConfigurationError(("db", "migrate"), 'array argument "files" must be last')
    """

    def __init__(self, command_path: Iterable[str], message: str) -> None:
        self.command_path = tuple(command_path)
        self.reason = message
        label = ".".join(self.command_path) or "<root>"
        super().__init__(f'Command "{label}": {message}')


@dataclass(frozen=True)
class ValidationIssue:
    """
    One field-level validation problem.

    Attributes
    ----------
    path : tuple
        Key sequence leading to the offending field, e.g. ``("args", "target")``.
    message : str
        Human-readable message from the validator.
    kind : str
        ``"missing"`` when a required field is absent, ``"type"`` when the value
        has the wrong kind, ``"invalid"`` for everything else.
    """

    path: Tuple[PathItem, ...]
    message: str
    kind: str

    @property
    def field(self) -> str:
        """Dotted rendering of `path`."""
        return ".".join(str(p) for p in self.path)


class CommandValidationError(GencliError):
    """
    Structured input validation failure for a typed command.

    Usage example
    -------------
        try:
            decoded = decode(raw_options, raw_args, command)
        except CommandValidationError as exc:
            print(format_issues(exc.issues))
    """

    def __init__(self, issues: Iterable[ValidationIssue]) -> None:
        self.issues: Tuple[ValidationIssue, ...] = tuple(issues)
        super().__init__(format_issues(self.issues))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "CommandValidationError":
        """Convert a pydantic `ValidationError` into issues with a stable classification."""
        return cls(
            ValidationIssue(
                path=tuple(err.get("loc", ())),
                message=str(err.get("msg", "")),
                kind=classify_error_type(str(err.get("type", ""))),
            )
            for err in exc.errors()
        )

    def with_prefix(self, *prefix: PathItem) -> "CommandValidationError":
        """Return a copy whose issue paths all start with `prefix`."""
        return CommandValidationError(
            ValidationIssue(path=(*prefix, *issue.path), message=issue.message, kind=issue.kind)
            for issue in self.issues
        )


@dataclass(frozen=True)
class StepFailure:
    """
    Structured failure record for a captured step.

    Attributes
    ----------
    step : str
        Name of the step that failed.
    context : dict[str, Any]
        Useful metadata (command path, variant, ...).
    exc_type : str
        Exception class name.
    message : str
        Exception message, or the class name when the message is empty.
    traceback : str
        Full traceback.
    timestamp_utc : str
        ISO timestamp.
    """

    step: str
    context: dict[str, Any]
    exc_type: str
    message: str
    traceback: str
    timestamp_utc: str


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Result wrapper: either value or failure.

    Usage example
    -------------
        result = await run_step("function", {"variant": "function"}, command.handler, ctx)
        if result.failure is not None:
            return CommandResult.failure(result.failure.message)
    """

    value: Optional[T]
    failure: Optional[StepFailure]


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def classify_error_type(error_type: str) -> str:
    """Map a pydantic error type onto ``missing`` / ``type`` / ``invalid``."""
    if error_type == "missing":
        return "missing"
    if error_type.endswith(_TYPE_ERROR_SUFFIXES) or error_type == "is_instance_of":
        return "type"
    return "invalid"


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    """
    Render issues as one line, e.g. ``"target: Field required [missing]"``.

    Presentation (colors, tables) is left to the caller; this is the plain
    form stored in `CommandResult.error`.
    """
    return ", ".join(f"{issue.field}: {issue.message} [{issue.kind}]" for issue in issues)


def describe_exception(exc: BaseException) -> str:
    """Return the exception message verbatim, falling back to its class name."""
    message = str(exc)
    return message if message else type(exc).__name__


# ==================================================================================================
#                                   CORE LOGIC
# ==================================================================================================

async def run_step(
    step: str,
    context: Mapping[str, Any],
    func: Callable[..., Any],
    *args: Any,
    **kwargs: Any,
) -> StepResult[Any]:
    """
    Run user code and capture any exception as a structured failure.

    `func` may be a plain function or return an awaitable; awaitables are
    awaited before the step counts as finished.

    Usage example
    -------------
        res = await run_step("typed", {"variant": "typed"}, command.handler, handler_context)
        if res.failure:
            ...
    """
    try:
        value = func(*args, **kwargs)
        if inspect.isawaitable(value):
            value = await value
        return StepResult(value=value, failure=None)
    except Exception as exc:  # noqa: BLE001 (intentional: boundary catch)
        tb = traceback.format_exc()
        failure = StepFailure(
            step=step,
            context=dict(context),
            exc_type=type(exc).__name__,
            message=describe_exception(exc),
            traceback=tb,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
        )

        logger.debug("%s failed | %s: %s", step, failure.exc_type, failure.message)
        logger.debug("context=%s traceback=%s", failure.context, tb)

        return StepResult(value=None, failure=failure)
