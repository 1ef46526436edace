"""Fixtures for integration tests."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

GITPLUMB = [sys.executable, "-m", "gitplumb.cli.main"]
SRC_DIR = Path(__file__).resolve().parents[2] / "src"


@pytest.fixture
def cli_env():
    """Environment with a fixed identity and timezone."""
    env = dict(os.environ)
    env.update(
        {
            "GITPLUMB_AUTHOR_NAME": "Test User",
            "GITPLUMB_AUTHOR_EMAIL": "test@example.com",
            "GITPLUMB_TZ_OFFSET": "+0000",
        }
    )
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return env


@pytest.fixture
def gitplumb(cli_env):
    """Return a callable that runs the CLI in a subprocess.

    Usage: ``gitplumb("cat-file", "-t", oid, cwd=workspace)``
    """

    def run(*args, cwd: Path, text: bool = True):
        return subprocess.run(
            [*GITPLUMB, *args],
            cwd=cwd,
            capture_output=True,
            text=text,
            env=cli_env,
        )

    return run


@pytest.fixture
def initialized_repo(tmp_path, gitplumb):
    """Create a temporary directory with an initialized repository.

    Returns:
        Path: Path to the workspace root
    """
    workspace = tmp_path / "test_workspace"
    workspace.mkdir()

    result = gitplumb("init", "--quiet", cwd=workspace)

    if result.returncode != 0:
        raise RuntimeError(f"Failed to initialize repo: {result.stdout}\n{result.stderr}")

    return workspace
