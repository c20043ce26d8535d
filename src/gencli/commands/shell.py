# ==================================================================================================
#                               Shell execution
# ==================================================================================================
#
# Minimal shell collaborator for string commands: spawn through the system
# shell, inherit stdin/stdout/stderr, await the exit status. No output capture
# and no timeouts; callers only get the exit code.
#

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, Mapping

logger = logging.getLogger(__name__)

# ==================================================================================================
# Constants
# ==================================================================================================

# Short labels for well-known tools, used to tag log lines.
COMMAND_LABELS: Dict[str, str] = {
    "npm": "NPM",
    "yarn": "YARN",
    "pnpm": "PNPM",
    "bun": "BUN",
    "cargo": "CARGO",
    "rustc": "RUST",
    "node": "NODE",
    "deno": "DENO",
    "python": "PYTHON",
    "python3": "PYTHON",
    "pip": "PIP",
    "uv": "UV",
    "git": "GIT",
    "docker": "DOCKER",
    "kubectl": "K8S",
    "helm": "HELM",
    "terraform": "TF",
    "aws": "AWS",
    "gcloud": "GCP",
    "az": "AZURE",
    "make": "MAKE",
    "cmake": "CMAKE",
    "gcc": "GCC",
    "clang": "CLANG",
    "go": "GO",
    "java": "JAVA",
    "javac": "JAVA",
    "mvn": "MAVEN",
    "gradle": "GRADLE",
    "dotnet": "DOTNET",
    "php": "PHP",
    "composer": "PHP",
    "ruby": "RUBY",
    "gem": "GEM",
    "bundle": "BUNDLE",
    "swift": "SWIFT",
    "flutter": "FLUTTER",
    "dart": "DART",
}

MAX_LABEL_LENGTH: int = 8

_CD_AND = re.compile(r"cd\s+[^&]*&&\s*(.+)")
_SCRIPT_SUFFIX = re.compile(r"\.(exe|sh|bat|cmd|ps1)$", re.IGNORECASE)


# ==================================================================================================
# Helpers
# ==================================================================================================

def extract_command_prefix(command: str) -> str:
    """
    Derive a short, upper-case label for a shell command.

    Usage example
    -------------
        extract_command_prefix("cd web && npm run build")   # "NPM"
        extract_command_prefix("./scripts/release.sh v1")   # "RELEASE.SH"
        extract_command_prefix("pytest -q | tee log")       # "PYTEST"
    """
    trimmed = command.strip()

    match = _CD_AND.search(trimmed)
    if match:
        return extract_command_prefix(match.group(1))

    base = trimmed.split("|", 1)[0].strip()
    words = base.split()
    if not words:
        return ""
    first = words[0]

    label = COMMAND_LABELS.get(first.lower())
    if label:
        return label

    if "/" in first:
        return (first.rsplit("/", 1)[-1] or first).upper()

    return _SCRIPT_SUFFIX.sub("", first).upper()[:MAX_LABEL_LENGTH]


def normalize_exit_code(returncode: int) -> int:
    """Map asyncio's negative "killed by signal N" codes to the shell's 128 + N."""
    return 128 - returncode if returncode < 0 else returncode


# ==================================================================================================
# Runner
# ==================================================================================================

async def run_shell(command: str, *, cwd: Path, env: Mapping[str, str]) -> int:
    """
    Run `command` through the system shell and return its exit code.

    Parameters
    ----------
    command
        Shell text, passed verbatim.
    cwd
        Working directory for the child.
    env
        Complete environment for the child.

    Returns
    -------
    int
        Exit code (0 on success).

    Raises
    ------
    OSError
        When the process cannot be spawned (e.g. `cwd` does not exist).
    """
    logger.info("[%s] $ %s", extract_command_prefix(command), command)

    proc = await asyncio.create_subprocess_shell(command, cwd=str(cwd), env=dict(env))
    returncode = await proc.wait()

    logger.debug("[%s] exited with %s", extract_command_prefix(command), returncode)
    return normalize_exit_code(returncode)
