"""Tests for raw parser output -> validated handler input."""

import pytest

from gencli.commands.decoder import decode, map_positionals, split_array_options
from gencli.commands.model import define_command
from gencli.commands.validators import array, boolean, choice, integer, string
from gencli.errors import CommandValidationError


def _deploy():
    return define_command(
        handler=lambda ctx: None,
        options={
            "tags": array().optional(),
            "retries": integer().default(3),
            "force": boolean().default(False),
        },
        args={"env": choice("dev", "prod"), "services": array().optional()},
    )


def test_split_array_options_only_touches_array_text() -> None:
    options = {"tags": array().optional(), "name": string()}

    processed = split_array_options({"tags": "a,b ,c", "name": "x,y"}, options)

    assert processed == {"tags": ["a", "b", "c"], "name": "x,y"}
    assert split_array_options({"tags": ["a,b"]}, options) == {"tags": ["a,b"]}


def test_map_positionals_assigns_in_declaration_order() -> None:
    args = {"env": string(), "services": array().optional()}

    assert map_positionals(["prod", "api", "web"], args) == {"env": "prod", "services": ["api", "web"]}
    assert map_positionals(["prod"], args) == {"env": "prod"}
    assert map_positionals([], args) == {}


def test_map_positionals_accepts_pre_grouped_variadic_value() -> None:
    args = {"env": string(), "services": array()}

    assert map_positionals(["prod", ["api", "web"]], args) == {"env": "prod", "services": ["api", "web"]}


def test_map_positionals_ignores_surplus_without_trailing_array() -> None:
    assert map_positionals(["a", "b", "c"], {"first": string()}) == {"first": "a"}


def test_decode_applies_splitting_coercion_and_defaults() -> None:
    decoded = decode({"tags": "a,b ,c"}, ["prod", "api", "web"], _deploy())

    assert decoded.options.tags == ["a", "b", "c"]
    assert decoded.options.retries == 3
    assert decoded.options.force is False
    assert decoded.args.env == "prod"
    assert decoded.args.services == ["api", "web"]


def test_decode_leaves_absent_optionals_as_none() -> None:
    decoded = decode({}, ["dev"], _deploy())

    assert decoded.options.tags is None
    assert decoded.args.services is None


def test_decode_coerces_numeric_text() -> None:
    decoded = decode({"retries": "5"}, ["dev"], _deploy())

    assert decoded.options.retries == 5


def test_missing_argument_is_prefixed_with_args() -> None:
    with pytest.raises(CommandValidationError) as excinfo:
        decode({}, [], _deploy())

    issue = excinfo.value.issues[0]
    assert issue.path == ("args", "env")
    assert issue.kind == "missing"


def test_wrong_option_type_is_a_type_issue() -> None:
    with pytest.raises(CommandValidationError) as excinfo:
        decode({"retries": "many"}, ["dev"], _deploy())

    issue = excinfo.value.issues[0]
    assert issue.path == ("retries",)
    assert issue.kind == "type"


def test_value_outside_choice_is_invalid() -> None:
    with pytest.raises(CommandValidationError) as excinfo:
        decode({}, ["staging"], _deploy())

    issue = excinfo.value.issues[0]
    assert issue.path == ("args", "env")
    assert issue.kind == "invalid"


def test_options_are_checked_before_arguments() -> None:
    with pytest.raises(CommandValidationError) as excinfo:
        decode({"retries": "many"}, [], _deploy())

    assert [issue.path for issue in excinfo.value.issues] == [("retries",)]


def test_required_option_reports_missing() -> None:
    cmd = define_command(handler=lambda ctx: None, options={"token": string()})

    with pytest.raises(CommandValidationError, match=r"token: Field required \[missing\]"):
        decode({}, [], cmd)
