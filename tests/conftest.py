"""Shared test fixtures for pychangesets tests."""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


def write_package_json(directory: Path, name: str, version: str, **extra: object) -> Path:
    """Write a package.json manifest, creating directory if needed."""
    directory.mkdir(parents=True, exist_ok=True)
    manifest = directory / "package.json"
    manifest.write_text(json.dumps({"name": name, "version": version, **extra}, indent=2) + "\n")
    return manifest


def write_changeset(root: Path, changeset_id: str, releases: dict[str, str], summary: str) -> Path:
    """Write a changeset file under root/.changeset."""
    directory = root / ".changeset"
    directory.mkdir(exist_ok=True)
    front = "\n".join(f'"{name}": {bump}' for name, bump in releases.items())
    path = directory / f"{changeset_id}.md"
    path.write_text(f"---\n{front}\n---\n\n{summary}\n")
    return path


def run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run a git command."""
    return subprocess.run(
        ["git"] + args,
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def sample_changelog() -> str:
    """Changelog with two released versions."""
    return """\
# pkg-a

## 1.1.0

### Minor Changes

- abc1234: Add a shiny new option

### Patch Changes

- def5678: Fix a typo

## 1.0.0

### Major Changes

- First stable release
"""


@pytest.fixture
def workspace_dir(temp_dir: Path, sample_changelog: str) -> Path:
    """Create a workspace with two public packages and a private one."""
    (temp_dir / "pychangesets.yaml").write_text("""\
packages:
  - packages/*
publish: npm run release
""")
    packages_dir = temp_dir / "packages"

    write_package_json(packages_dir / "pkg-a", "pkg-a", "1.0.0")
    (packages_dir / "pkg-a" / "CHANGELOG.md").write_text(sample_changelog)

    write_package_json(packages_dir / "pkg-b", "@scope/pkg-b", "2.0.0")
    write_package_json(packages_dir / "internal", "internal", "0.1.0", private=True)

    (temp_dir / ".changeset").mkdir()
    (temp_dir / ".changeset" / "README.md").write_text("# Changesets\n")
    return temp_dir


@pytest.fixture
def git_workspace(workspace_dir: Path) -> Path:
    """Create a workspace with git initialized."""
    run_git(["init", "-q", "-b", "main"], workspace_dir)
    run_git(["config", "user.email", "test@test.com"], workspace_dir)
    run_git(["config", "user.name", "Test"], workspace_dir)
    run_git(["config", "commit.gpgsign", "false"], workspace_dir)
    run_git(["add", "-A"], workspace_dir)
    run_git(["commit", "-q", "-m", "Initial commit"], workspace_dir)
    return workspace_dir


@pytest.fixture
def add_changeset():
    """Helper writing a changeset file: ``add_changeset(root, id, releases, summary)``."""
    return write_changeset


@pytest.fixture
def add_package():
    """Helper writing a package.json: ``add_package(directory, name, version, **extra)``."""
    return write_package_json


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo configure_logging so caplog sees records in every test."""
    yield
    logger = logging.getLogger("pychangesets")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
