"""Tests for configuration loading behavior.

These tests guard the single config ingestion boundary used by both CLI and
library layers, including the YAML shapes of the `commands` section.
"""

from pathlib import Path

import pytest

from gencli.commands.model import FunctionCommand, GroupCommand, StringCommand, TypedCommand, define_command
from gencli.config import ProjectConfig, coerce_command, load_project_config, resolve_reference
from gencli.errors import ConfigurationError


def test_load_project_config_returns_project_config(tmp_path: Path) -> None:
    """A valid YAML mapping should be returned as `ProjectConfig.raw`."""
    cfg_path = tmp_path / "gencli.yaml"
    cfg_path.write_text("project:\n  name: demo\n", encoding="utf-8")

    cfg = load_project_config(cfg_path)

    assert isinstance(cfg, ProjectConfig)
    assert cfg.raw["project"]["name"] == "demo"
    assert dict(cfg.commands) == {}


def test_load_project_config_rejects_non_mapping_top_level(tmp_path: Path) -> None:
    """Top-level YAML must be a mapping, not a list/scalar."""
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Config must be a mapping"):
        load_project_config(cfg_path)


def test_empty_file_is_an_empty_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("", encoding="utf-8")

    assert dict(load_project_config(cfg_path).commands) == {}


def test_load_project_config_builds_command_tree(tmp_path: Path) -> None:
    """String, string-with-help and group entries map onto the command model."""
    cfg_path = tmp_path / "gencli.yaml"
    cfg_path.write_text(
        "commands:\n"
        "  build: make all\n"
        "  test:\n"
        "    command: pytest -q\n"
        "    help: Run the test suite\n"
        "  db:\n"
        "    help: Database tasks\n"
        "    commands:\n"
        "      migrate: alembic upgrade head\n",
        encoding="utf-8",
    )

    cfg = load_project_config(cfg_path)

    assert cfg.commands["build"] == StringCommand(command="make all")
    assert cfg.commands["test"] == StringCommand(command="pytest -q", help="Run the test suite")

    db = cfg.commands["db"]
    assert isinstance(db, GroupCommand)
    assert db.help == "Database tasks"
    assert db.commands["migrate"] == StringCommand(command="alembic upgrade head")


def test_from_mapping_keeps_other_sections_and_accepts_command_objects(sample_config_dict) -> None:
    deploy = define_command(handler=lambda ctx: None, help="Deploy")
    data = dict(sample_config_dict)
    data["commands"] = {**sample_config_dict["commands"], "deploy": deploy}

    cfg = ProjectConfig.from_mapping(data)

    assert cfg.raw["project"] == {"name": "demo"}
    assert cfg.commands["deploy"] is deploy
    assert list(cfg.commands["db"].commands) == ["migrate", "seed"]


def test_commands_mapping_is_read_only(sample_config_dict) -> None:
    cfg = ProjectConfig.from_mapping(sample_config_dict)

    with pytest.raises(TypeError):
        cfg.commands["new"] = StringCommand(command="echo")  # type: ignore[index]


def test_commands_section_must_be_a_mapping() -> None:
    with pytest.raises(ConfigurationError, match="`commands` must be a mapping"):
        ProjectConfig.from_mapping({"commands": ["build"]})


def test_unknown_entry_keys_name_the_command() -> None:
    with pytest.raises(ConfigurationError, match=r'Command "build": unknown keys: cmd'):
        ProjectConfig.from_mapping({"commands": {"build": {"cmd": "make"}}})


def test_nested_errors_report_the_full_path() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ProjectConfig.from_mapping({"commands": {"db": {"commands": {"bad": 3}}}})

    assert excinfo.value.command_path == ("db", "bad")
    assert "unsupported command entry of type int" in str(excinfo.value)


def test_mapping_entry_without_a_command_shape_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="expected one of"):
        coerce_command({"help": "nothing to run"}, ("empty",))


def test_help_must_be_text() -> None:
    with pytest.raises(ConfigurationError, match="`help` must be a string"):
        coerce_command({"command": "make", "help": 3}, ("build",))


def test_reference_entries_import_python_commands(tmp_path: Path, monkeypatch) -> None:
    """`ref` entries resolve "module:attribute" and may add help to the result."""
    (tmp_path / "gencli_sample_tasks.py").write_text(
        "from gencli.commands.model import define_command\n"
        "\n"
        "def hello(ctx):\n"
        "    return None\n"
        "\n"
        "class Tasks:\n"
        "    deploy = define_command(handler=hello, help='Deploy it')\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    cfg = ProjectConfig.from_mapping(
        {
            "commands": {
                "hello": {"ref": "gencli_sample_tasks:hello", "help": "Say hello"},
                "deploy": {"ref": "gencli_sample_tasks:Tasks.deploy", "help": "ignored"},
            }
        }
    )

    hello = cfg.commands["hello"]
    assert isinstance(hello, FunctionCommand)
    assert hello.help == "Say hello"

    deploy = cfg.commands["deploy"]
    assert isinstance(deploy, TypedCommand)
    assert deploy.help == "Deploy it"


@pytest.mark.parametrize(
    ("ref", "message"),
    [
        ("no_colon_here", "must look like"),
        ("gencli_no_such_module_xyz:thing", "cannot import"),
        ("gencli.config:does_not_exist", "has no attribute"),
    ],
)
def test_resolve_reference_errors(ref: str, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        resolve_reference(ref, ("task",))
