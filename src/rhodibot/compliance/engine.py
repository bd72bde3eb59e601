"""Repository compliance engine.

Runs the fixed Bronze battery in a deterministic order. Every probe returns
its outcome as a value; ``ReportBuilder`` assembles those values into an
immutable ``ComplianceReport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from rhodibot.compliance.paths import inspect_path, is_directory, is_regular_file
from rhodibot.compliance.types import (
    CheckResult,
    ComplianceLevel,
    ComplianceReport,
    SecurityWarning,
    WarningLevel,
)

logger = logging.getLogger(__name__)

EntryKind = Literal["file", "dir"]

CATEGORY_DOCUMENTATION = "Documentation"
CATEGORY_WELL_KNOWN = "Well-Known"
CATEGORY_BUILD_SYSTEM = "Build System"
CATEGORY_SOURCE_STRUCTURE = "Source Structure"

README_PRIMARY = "README.md"
README_ALTERNATE = "README.adoc"
REQUIRED_DOCS: tuple[str, ...] = (
    "LICENSE.txt",
    "SECURITY.md",
    "CONTRIBUTING.md",
    "CODE_OF_CONDUCT.md",
    "MAINTAINERS.md",
    "CHANGELOG.md",
)

WELL_KNOWN_DIR = ".well-known"
WELL_KNOWN_FILES: tuple[str, ...] = ("security.txt", "ai.txt", "humans.txt")

BUILD_FILES: tuple[tuple[str, ComplianceLevel], ...] = (
    ("justfile", ComplianceLevel.BRONZE),
    ("flake.nix", ComplianceLevel.BRONZE),
    (".gitlab-ci.yml", ComplianceLevel.BRONZE),
)

SOURCE_DIR = "src"
TEST_DIRS: tuple[str, ...] = ("tests", "test")

EXPECTED_CHECK_COUNT = 16


@dataclass(frozen=True)
class Probe:
    """Outcome of probing one candidate path."""

    passed: bool
    warnings: tuple[SecurityWarning, ...] = ()


@dataclass(frozen=True)
class Section:
    """Checks and warnings produced by one category of the battery."""

    checks: tuple[CheckResult, ...]
    warnings: tuple[SecurityWarning, ...]


@dataclass
class ReportBuilder:
    """Collects check results and warnings for one verification run."""

    repository_path: Path
    verified_at: datetime
    checks: list[CheckResult] = field(default_factory=list)
    warnings: list[SecurityWarning] = field(default_factory=list)

    def add_section(self, section: Section) -> None:
        self.checks.extend(section.checks)
        self.warnings.extend(section.warnings)

    def build(self) -> ComplianceReport:
        return ComplianceReport(
            repository_path=self.repository_path,
            verified_at=self.verified_at,
            checks=tuple(self.checks),
            warnings=tuple(self.warnings),
        )


def _symlink_warning(name: str, kind: EntryKind, path: Path, escapes: bool, target: Path | None) -> SecurityWarning:
    noun = "Symlink directory" if kind == "dir" else "Symlink"
    if escapes:
        shown = str(target) if target is not None else ""
        return SecurityWarning(
            level=WarningLevel.CRITICAL,
            message=f"{noun} '{name}' points outside repository to '{shown}'",
            path=path,
        )
    suffix = "a symlink directory" if kind == "dir" else "a symlink"
    return SecurityWarning(
        level=WarningLevel.INFO,
        message=f"'{name}' is {suffix} (within repository bounds)",
        path=path,
    )


def probe(base: Path, name: str, kind: EntryKind, repo_root: Path) -> Probe:
    """Probe ``base / name`` and decide whether it satisfies ``kind``.

    Symlinks are reported through warnings only; the outcome is judged on
    the type the link resolves to.
    """
    path = base / name
    inspection = inspect_path(path, repo_root)

    warnings: tuple[SecurityWarning, ...] = ()
    if inspection.is_symlink:
        warnings = (_symlink_warning(name, kind, path, inspection.escapes_root, inspection.target),)

    if kind == "dir":
        passed = inspection.exists and is_directory(path)
    else:
        passed = inspection.exists and is_regular_file(path)

    logger.debug("probe %s (%s): passed=%s symlink=%s", path, kind, passed, inspection.is_symlink)
    return Probe(passed=passed, warnings=warnings)


def _first_passing(base: Path, names: tuple[str, ...], kind: EntryKind, repo_root: Path) -> Probe:
    """Probe alternatives in order, stopping at the first that passes."""
    warnings: list[SecurityWarning] = []
    for name in names:
        result = probe(base, name, kind, repo_root)
        warnings.extend(result.warnings)
        if result.passed:
            return Probe(passed=True, warnings=tuple(warnings))
    return Probe(passed=False, warnings=tuple(warnings))


def check_documentation(repo_root: Path) -> Section:
    checks: list[CheckResult] = []
    warnings: list[SecurityWarning] = []

    readme = _first_passing(repo_root, (README_PRIMARY, README_ALTERNATE), "file", repo_root)
    warnings.extend(readme.warnings)
    checks.append(CheckResult(CATEGORY_DOCUMENTATION, README_PRIMARY, readme.passed))

    for doc in REQUIRED_DOCS:
        result = probe(repo_root, doc, "file", repo_root)
        warnings.extend(result.warnings)
        checks.append(CheckResult(CATEGORY_DOCUMENTATION, doc, result.passed))

    return Section(tuple(checks), tuple(warnings))


def check_well_known(repo_root: Path) -> Section:
    checks: list[CheckResult] = []
    warnings: list[SecurityWarning] = []

    directory = probe(repo_root, WELL_KNOWN_DIR, "dir", repo_root)
    warnings.extend(directory.warnings)
    checks.append(CheckResult(CATEGORY_WELL_KNOWN, f"{WELL_KNOWN_DIR}/ directory", directory.passed))

    well_known = repo_root / WELL_KNOWN_DIR
    for name in WELL_KNOWN_FILES:
        # Children of a missing directory fail without being probed.
        passed = False
        if directory.passed:
            result = probe(well_known, name, "file", repo_root)
            warnings.extend(result.warnings)
            passed = result.passed
        checks.append(CheckResult(CATEGORY_WELL_KNOWN, name, passed))

    return Section(tuple(checks), tuple(warnings))


def check_build_system(repo_root: Path) -> Section:
    checks: list[CheckResult] = []
    warnings: list[SecurityWarning] = []

    for name, level in BUILD_FILES:
        result = probe(repo_root, name, "file", repo_root)
        warnings.extend(result.warnings)
        checks.append(CheckResult(CATEGORY_BUILD_SYSTEM, name, result.passed, level))

    return Section(tuple(checks), tuple(warnings))


def check_source_structure(repo_root: Path) -> Section:
    src = probe(repo_root, SOURCE_DIR, "dir", repo_root)
    tests = _first_passing(repo_root, TEST_DIRS, "dir", repo_root)

    checks = (
        CheckResult(CATEGORY_SOURCE_STRUCTURE, f"{SOURCE_DIR}/ directory", src.passed),
        CheckResult(CATEGORY_SOURCE_STRUCTURE, "tests/ directory", tests.passed),
    )
    return Section(checks, src.warnings + tests.warnings)


def verify_repository(repo_root: Path, *, verified_at: datetime | None = None) -> ComplianceReport:
    """Run every compliance check against ``repo_root``.

    The caller must have confirmed that ``repo_root`` is an existing
    directory. Individual probe failures degrade to "absent" and never
    abort the run.

    Args:
        repo_root: Repository directory to audit
        verified_at: Timestamp to stamp on the report (defaults to now, UTC)

    Returns:
        ComplianceReport with exactly EXPECTED_CHECK_COUNT checks
    """
    builder = ReportBuilder(
        repository_path=repo_root,
        verified_at=verified_at or datetime.now(UTC),
    )

    for section in (
        check_documentation(repo_root),
        check_well_known(repo_root),
        check_build_system(repo_root),
        check_source_structure(repo_root),
    ):
        builder.add_section(section)

    report = builder.build()
    logger.debug(
        "verified %s: %d/%d passed, %d warning(s)",
        repo_root,
        report.passed_count,
        report.total_count,
        len(report.warnings),
    )
    return report
