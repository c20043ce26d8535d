"""Shared pytest fixtures for the gencli test suite.

Commands under test run against a context built from `tmp_path` and a tiny
environment, so nothing depends on the developer's shell or home directory.
"""

from pathlib import Path
import sys
from typing import Any

import pytest

# Ensure `import gencli` resolves to the in-repo source tree during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from gencli.commands.context import ExecutionContext, build_context  # noqa: E402


class Recorder:
    """Callable test double that records every call it receives."""

    def __init__(self, result: Any = None, error: BaseException | None = None) -> None:
        self.calls: list[Any] = []
        self.result = result
        self.error = error

    def __call__(self, ctx: Any) -> Any:
        self.calls.append(ctx)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def execution_context(tmp_path: Path) -> ExecutionContext:
    """Context rooted in a temporary directory with a minimal environment."""
    return build_context(
        cwd=tmp_path,
        environ={"PATH": "/usr/bin:/bin", "GENCLI_TEST": "1"},
        verbose=False,
    )


@pytest.fixture
def recorder() -> Recorder:
    """Fresh recording handler."""
    return Recorder()


@pytest.fixture
def make_recorder() -> type[Recorder]:
    """Factory for tests that need several handlers or a failing one."""
    return Recorder


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """Small config payload covering string commands and a nested group."""
    return {
        "project": {"name": "demo"},
        "commands": {
            "build": "make all",
            "test": {"command": "pytest -q", "help": "Run the test suite"},
            "db": {
                "help": "Database tasks",
                "commands": {
                    "migrate": "alembic upgrade head",
                    "seed": {"command": "python seed.py", "help": "Load fixtures"},
                },
            },
        },
    }
