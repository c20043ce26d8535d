"""Tests for the error hierarchy and failure-capture helpers."""

import pytest
from pydantic import BaseModel

from gencli.errors import (
    CommandValidationError,
    ConfigurationError,
    ValidationIssue,
    classify_error_type,
    describe_exception,
    format_issues,
    run_step,
)


class _Port(BaseModel):
    port: int


def _ok_step(x: int, y: int) -> int:
    """Simple helper for success path tests."""
    return x + y


async def _async_ok_step(x: int) -> int:
    return x * 2


def _fail_step() -> int:
    """Simple helper for failure path tests."""
    raise RuntimeError("boom")


def _validation_error(payload: dict) -> CommandValidationError:
    try:
        _Port.model_validate(payload)
    except Exception as exc:  # noqa: BLE001
        return CommandValidationError.from_pydantic(exc)
    raise AssertionError("payload unexpectedly validated")


@pytest.mark.asyncio
async def test_run_step_returns_value_on_success() -> None:
    """Successful execution should populate `value` and no `failure`."""
    result = await run_step("add", {"case": "ok"}, _ok_step, 1, 2)

    assert result.value == 3
    assert result.failure is None


@pytest.mark.asyncio
async def test_run_step_awaits_coroutine_results() -> None:
    result = await run_step("double", {}, _async_ok_step, 4)

    assert result.value == 8


@pytest.mark.asyncio
async def test_run_step_captures_failure() -> None:
    """Exceptions become structured failure metadata instead of propagating."""
    result = await run_step("explode", {"case": "fail"}, _fail_step)

    assert result.value is None
    assert result.failure is not None
    assert result.failure.step == "explode"
    assert result.failure.exc_type == "RuntimeError"
    assert result.failure.message == "boom"
    assert result.failure.context == {"case": "fail"}
    assert "RuntimeError: boom" in result.failure.traceback


@pytest.mark.asyncio
async def test_run_step_uses_class_name_for_empty_messages() -> None:
    def _silent() -> None:
        raise KeyError()

    result = await run_step("silent", {}, _silent)

    assert result.failure is not None
    assert result.failure.message == "KeyError"


def test_describe_exception() -> None:
    assert describe_exception(ValueError("bad value")) == "bad value"
    assert describe_exception(ValueError()) == "ValueError"


@pytest.mark.parametrize(
    ("error_type", "kind"),
    [
        ("missing", "missing"),
        ("int_parsing", "type"),
        ("string_type", "type"),
        ("is_instance_of", "type"),
        ("literal_error", "invalid"),
        ("greater_than", "invalid"),
    ],
)
def test_classify_error_type(error_type: str, kind: str) -> None:
    assert classify_error_type(error_type) == kind


def test_from_pydantic_classifies_missing_and_type_errors() -> None:
    missing = _validation_error({})
    wrong = _validation_error({"port": "eighty"})

    assert [(i.path, i.kind) for i in missing.issues] == [(("port",), "missing")]
    assert [(i.path, i.kind) for i in wrong.issues] == [(("port",), "type")]
    assert str(missing) == "port: Field required [missing]"


def test_with_prefix_prepends_to_every_issue() -> None:
    error = CommandValidationError(
        [ValidationIssue(path=("env",), message="Field required", kind="missing")]
    ).with_prefix("args")

    assert error.issues[0].path == ("args", "env")
    assert error.issues[0].field == "args.env"


def test_format_issues_joins_issues() -> None:
    issues = [
        ValidationIssue(path=("a",), message="m1", kind="missing"),
        ValidationIssue(path=("b", 0), message="m2", kind="type"),
    ]

    assert format_issues(issues) == "a: m1 [missing], b.0: m2 [type]"


def test_configuration_error_names_the_command() -> None:
    error = ConfigurationError(("db", "migrate"), "bad declaration")

    assert str(error) == 'Command "db.migrate": bad declaration'
    assert error.command_path == ("db", "migrate")
    assert error.reason == "bad declaration"
    assert isinstance(error, ValueError)
