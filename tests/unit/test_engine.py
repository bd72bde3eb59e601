"""Tests for the compliance engine battery."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from rhodibot.compliance import EXPECTED_CHECK_COUNT, ComplianceLevel, WarningLevel, verify_repository
from rhodibot.compliance.engine import (
    ReportBuilder,
    Section,
    check_source_structure,
    check_well_known,
    probe,
)
from rhodibot.compliance.types import CheckResult, SecurityWarning
from tests.unit.symlink_test_utils import requires_symlinks

EXPECTED_ITEMS = [
    ("Documentation", "README.md"),
    ("Documentation", "LICENSE.txt"),
    ("Documentation", "SECURITY.md"),
    ("Documentation", "CONTRIBUTING.md"),
    ("Documentation", "CODE_OF_CONDUCT.md"),
    ("Documentation", "MAINTAINERS.md"),
    ("Documentation", "CHANGELOG.md"),
    ("Well-Known", ".well-known/ directory"),
    ("Well-Known", "security.txt"),
    ("Well-Known", "ai.txt"),
    ("Well-Known", "humans.txt"),
    ("Build System", "justfile"),
    ("Build System", "flake.nix"),
    ("Build System", ".gitlab-ci.yml"),
    ("Source Structure", "src/ directory"),
    ("Source Structure", "tests/ directory"),
]


def _check(report, item: str):
    return next(check for check in report.checks if check.item == item)


class TestBattery:
    """Whole-repository verification."""

    def test_fully_compliant_repo(self, compliant_repo: Path):
        report = verify_repository(compliant_repo)

        assert report.total_count == EXPECTED_CHECK_COUNT
        assert report.passed_count == EXPECTED_CHECK_COUNT
        assert report.percentage == 100.0
        assert report.bronze_compliance is True
        assert report.warnings == ()
        assert report.highest_level() == ComplianceLevel.BRONZE

    def test_empty_repo(self, empty_repo: Path):
        report = verify_repository(empty_repo)

        assert report.total_count == EXPECTED_CHECK_COUNT
        assert report.passed_count == 0
        assert report.percentage == 0.0
        assert report.bronze_compliance is False
        assert report.warnings == ()
        assert report.highest_level() is None

    def test_check_order_and_labels(self, empty_repo: Path):
        report = verify_repository(empty_repo)

        assert [(c.category, c.item) for c in report.checks] == EXPECTED_ITEMS
        assert all(c.required_for == ComplianceLevel.BRONZE for c in report.checks)

    def test_count_is_fixed_for_partial_repo(self, make_repo):
        repo = make_repo(skip=(".well-known/ai.txt", "justfile", "tests"))

        report = verify_repository(repo)

        assert report.total_count == EXPECTED_CHECK_COUNT
        assert report.passed_count == EXPECTED_CHECK_COUNT - 3
        assert report.bronze_compliance is False

    def test_verified_at_is_passed_through(self, compliant_repo: Path):
        stamp = datetime(1970, 1, 1, tzinfo=UTC)

        report = verify_repository(compliant_repo, verified_at=stamp)

        assert report.verified_at == stamp
        assert report.repository_path == compliant_repo

    def test_directory_in_place_of_file_fails(self, make_repo):
        repo = make_repo(skip=("SECURITY.md",))
        (repo / "SECURITY.md").mkdir()

        report = verify_repository(repo)

        assert _check(report, "SECURITY.md").passed is False

    def test_file_in_place_of_directory_fails(self, make_repo):
        repo = make_repo(skip=("src",))
        (repo / "src").write_text("not a dir\n", encoding="utf-8")

        report = verify_repository(repo)

        assert _check(report, "src/ directory").passed is False


class TestAlternatives:
    """README.adoc and test/ stand in for their primary names."""

    def test_readme_adoc_satisfies_readme(self, make_repo):
        repo = make_repo(skip=("README.md",))
        (repo / "README.adoc").write_text("= Readme\n", encoding="utf-8")

        report = verify_repository(repo)

        readme = _check(report, "README.md")
        assert readme.passed is True
        assert readme.item == "README.md"

    def test_singular_test_dir_satisfies_tests(self, make_repo):
        repo = make_repo(skip=("tests",))
        (repo / "test").mkdir()

        section = check_source_structure(repo)

        assert [c.passed for c in section.checks] == [True, True]
        assert section.checks[1].item == "tests/ directory"

    def test_missing_both_readmes_fails(self, make_repo):
        repo = make_repo(skip=("README.md",))

        assert _check(verify_repository(repo), "README.md").passed is False


class TestWellKnown:
    def test_missing_directory_fails_children(self, make_repo):
        repo = make_repo(skip=(".well-known/security.txt", ".well-known/ai.txt", ".well-known/humans.txt"))

        section = check_well_known(repo)

        assert len(section.checks) == 4
        assert not any(c.passed for c in section.checks)

    def test_directory_without_children(self, make_repo):
        repo = make_repo(skip=(".well-known/security.txt", ".well-known/ai.txt", ".well-known/humans.txt"))
        (repo / ".well-known").mkdir()

        section = check_well_known(repo)

        assert [c.passed for c in section.checks] == [True, False, False, False]


@requires_symlinks
class TestSymlinkWarnings:
    """Symlinked artifacts raise warnings but are judged on their resolved type."""

    def test_escaping_license_raises_one_critical(self, make_repo, tmp_path: Path):
        repo = make_repo(skip=("LICENSE.txt",))
        outside = tmp_path / "elsewhere" / "LICENSE"
        outside.parent.mkdir()
        outside.write_text("MIT\n", encoding="utf-8")
        (repo / "LICENSE.txt").symlink_to(outside)

        report = verify_repository(repo)

        assert _check(report, "LICENSE.txt").passed is True
        assert len(report.warnings) == 1
        warning = report.warnings[0]
        assert warning.level == WarningLevel.CRITICAL
        assert warning.message == f"Symlink 'LICENSE.txt' points outside repository to '{outside}'"
        assert warning.path == repo / "LICENSE.txt"
        assert report.has_critical_warnings is True
        assert report.bronze_compliance is True
        assert report.highest_level() is None

    def test_in_bounds_link_raises_info(self, make_repo):
        repo = make_repo(skip=("CHANGELOG.md",))
        (repo / "docs").mkdir()
        (repo / "docs" / "CHANGES.md").write_text("x\n", encoding="utf-8")
        (repo / "CHANGELOG.md").symlink_to(Path("docs") / "CHANGES.md")

        report = verify_repository(repo)

        assert len(report.warnings) == 1
        assert report.warnings[0].level == WarningLevel.INFO
        assert report.warnings[0].message == "'CHANGELOG.md' is a symlink (within repository bounds)"
        assert report.has_critical_warnings is False
        assert report.highest_level() == ComplianceLevel.BRONZE

    def test_escaping_directory_link(self, make_repo, tmp_path: Path):
        repo = make_repo(skip=("src",))
        outside = tmp_path / "outside-src"
        outside.mkdir()
        (repo / "src").symlink_to(outside, target_is_directory=True)

        report = verify_repository(repo)

        assert _check(report, "src/ directory").passed is True
        assert report.warnings[0].message == f"Symlink directory 'src' points outside repository to '{outside}'"

    def test_dangling_escape_fails_but_warns(self, make_repo):
        repo = make_repo(skip=("MAINTAINERS.md",))
        (repo / "MAINTAINERS.md").symlink_to(Path("..") / ".." / "nowhere.md")

        report = verify_repository(repo)

        assert _check(report, "MAINTAINERS.md").passed is False
        assert [w.level for w in report.warnings] == [WarningLevel.CRITICAL]

    def test_probe_reports_link_to_wrong_kind(self, tmp_path: Path):
        (tmp_path / "real_dir").mkdir()
        (tmp_path / "justfile").symlink_to("real_dir", target_is_directory=True)

        result = probe(tmp_path, "justfile", "file", tmp_path)

        assert result.passed is False
        assert len(result.warnings) == 1
        assert result.warnings[0].level == WarningLevel.INFO


class TestReportBuilder:
    def test_build_is_immutable_snapshot(self, tmp_path: Path):
        builder = ReportBuilder(repository_path=tmp_path, verified_at=datetime(2025, 1, 1, tzinfo=UTC))
        builder.add_section(
            Section(
                (CheckResult("Documentation", "README.md", True),),
                (SecurityWarning(WarningLevel.INFO, "note"),),
            )
        )

        report = builder.build()
        builder.add_section(Section((CheckResult("Documentation", "LICENSE.txt", False),), ()))

        assert report.total_count == 1
        assert report.checks[0].required_for == ComplianceLevel.BRONZE
        assert report.warnings[0].path is None
