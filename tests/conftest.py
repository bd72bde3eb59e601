"""Pytest configuration and fixtures for rhodibot tests."""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

COMPLIANT_FILES: tuple[str, ...] = (
    "README.md",
    "LICENSE.txt",
    "SECURITY.md",
    "CONTRIBUTING.md",
    "CODE_OF_CONDUCT.md",
    "MAINTAINERS.md",
    "CHANGELOG.md",
    ".well-known/security.txt",
    ".well-known/ai.txt",
    ".well-known/humans.txt",
    "justfile",
    "flake.nix",
    ".gitlab-ci.yml",
)
COMPLIANT_DIRS: tuple[str, ...] = ("src", "tests")


def pytest_sessionfinish(session, exitstatus):
    """Fail the run when --cov was requested but no coverage data was written."""
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    if not list(Path.cwd().glob(".coverage*")):
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'rhodibot' (the package) not 'src/rhodibot'.",
            returncode=1,
        )


def populate_repo(repo: Path, *, skip: tuple[str, ...] = ()) -> Path:
    """Create every Bronze artifact under ``repo`` except those in ``skip``."""
    repo.mkdir(parents=True, exist_ok=True)
    for rel in COMPLIANT_FILES:
        if rel in skip:
            continue
        path = repo / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# {rel}\n", encoding="utf-8")
    for rel in COMPLIANT_DIRS:
        if rel not in skip:
            (repo / rel).mkdir(exist_ok=True)
    return repo


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., Path]:
    """Factory for repositories; ``skip`` names artifacts to leave out."""

    def _make(name: str = "repo", *, skip: tuple[str, ...] = ()) -> Path:
        return populate_repo(tmp_path / name, skip=skip)

    return _make


@pytest.fixture
def compliant_repo(make_repo: Callable[..., Path]) -> Path:
    return make_repo()


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "empty"
    repo.mkdir()
    return repo
