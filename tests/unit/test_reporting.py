"""Tests for report rendering, exit codes and written artifacts."""

from __future__ import annotations

import io
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from rich.console import Console

from rhodibot import __version__, exit_codes
from rhodibot.compliance import verify_repository
from rhodibot.compliance.types import CheckResult, ComplianceReport, SecurityWarning, WarningLevel
from rhodibot.reporting import (
    REPORT_JSON,
    REPORT_MD,
    exit_code_for,
    render_human,
    render_json,
    render_quiet,
    render_verbose,
    report_to_dict,
    write_report_artifacts,
)
from rhodibot.schemas.validator import REPORT_SCHEMA, SchemaValidationError, validate_data

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _capture() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, color_system=None), buffer


def _report(passed: bool = True, warning: WarningLevel | None = None) -> ComplianceReport:
    warnings = ()
    if warning is not None:
        message = "Symlink 'LICENSE.txt' points outside repository to '/etc/x'"
        warnings = (SecurityWarning(warning, message, Path("r/LICENSE.txt")),)
    return ComplianceReport(
        repository_path=Path("r"),
        verified_at=EPOCH,
        checks=(
            CheckResult("Documentation", "README.md", True),
            CheckResult("Documentation", "LICENSE.txt", passed),
        ),
        warnings=warnings,
    )


class TestExitCodes:
    def test_success(self):
        assert exit_code_for(_report()) == exit_codes.SUCCESS

    def test_compliance_failed(self):
        assert exit_code_for(_report(passed=False)) == exit_codes.COMPLIANCE_FAILED

    def test_critical_warning_wins(self):
        assert exit_code_for(_report(passed=False, warning=WarningLevel.CRITICAL)) == exit_codes.SECURITY_WARNING

    def test_info_warning_is_success(self):
        assert exit_code_for(_report(warning=WarningLevel.INFO)) == exit_codes.SUCCESS

    def test_fail_on_warning_disabled(self):
        report = _report(warning=WarningLevel.CRITICAL)

        assert exit_code_for(report, fail_on_warning=False) == exit_codes.SUCCESS


class TestJson:
    def test_payload_shape(self):
        payload = report_to_dict(_report(passed=False))

        assert payload["tool"] == "rhodibot"
        assert payload["version"] == __version__
        assert payload["verified_at"] == "1970-01-01T00:00:00Z"
        assert payload["score"] == {"passed": 1, "total": 2, "percentage": 50.0}
        assert payload["bronze_compliant"] is False
        assert payload["highest_level"] is None
        assert payload["checks"][1] == {
            "category": "Documentation",
            "item": "LICENSE.txt",
            "passed": False,
            "level": "Bronze",
        }

    def test_render_json_is_schema_valid(self, compliant_repo: Path):
        text = render_json(verify_repository(compliant_repo, verified_at=EPOCH))
        payload = json.loads(text)

        ok, errors = validate_data(payload, REPORT_SCHEMA, strict=False)
        assert ok, errors
        assert payload["highest_level"] == "Bronze"
        assert payload["score"]["percentage"] == 100.0

    def test_warning_serialization(self):
        payload = report_to_dict(_report(warning=WarningLevel.CRITICAL))

        assert payload["has_critical_warnings"] is True
        assert payload["warnings"][0]["level"] == "critical"
        assert payload["warnings"][0]["path"] == str(Path("r/LICENSE.txt"))

    def test_invalid_payload_rejected(self):
        payload = report_to_dict(_report())
        payload["score"]["percentage"] = 150

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_data(payload, REPORT_SCHEMA)

        assert "score.percentage" in str(exc_info.value)


class TestTextViews:
    def test_quiet(self):
        assert render_quiet(_report()) == "PASS"
        assert render_quiet(_report(passed=False)) == "FAIL"
        assert render_quiet(_report(warning=WarningLevel.CRITICAL)) == "FAIL (security)"

    def test_human_achieved(self):
        console, buffer = _capture()

        render_human(_report(), console)
        text = buffer.getvalue()

        assert "Rhodibot - RSR Compliance Report" in text
        assert "📋 Documentation" in text
        assert "README.md [Bronze]" in text
        assert "Score: 2/2 checks passed (100.0%)" in text
        assert "Bronze-level RSR compliance: ACHIEVED" in text
        assert "Exit code" not in text

    def test_human_not_met(self):
        console, buffer = _capture()

        render_human(_report(passed=False), console)

        assert "Bronze-level RSR compliance: NOT MET" in buffer.getvalue()

    def test_human_with_critical_warning(self):
        console, buffer = _capture()

        render_human(_report(warning=WarningLevel.CRITICAL), console)
        text = buffer.getvalue()

        assert "Security Warnings" in text
        assert "🚨 CRITICAL: Security warnings detected" in text
        assert "ACHIEVED (with warnings)" in text

    def test_verbose_adds_paths_and_exit_code(self):
        console, buffer = _capture()

        render_verbose(_report(warning=WarningLevel.CRITICAL), console)
        text = buffer.getvalue()

        assert f"Version:    {__version__}" in text
        assert "[CRITICAL] Symlink 'LICENSE.txt'" in text
        assert f"Path: {Path('r/LICENSE.txt')}" in text
        assert "Exit code: 2 (SECURITY_WARNING)" in text


def test_write_report_artifacts(tmp_path: Path, compliant_repo: Path):
    report = verify_repository(compliant_repo, verified_at=EPOCH)

    json_path, md_path = write_report_artifacts(tmp_path / "out", report)

    assert json_path == tmp_path / "out" / REPORT_JSON
    assert md_path == tmp_path / "out" / REPORT_MD
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert payload["score"]["passed"] == 16
    assert md_path.read_text(encoding="utf-8").startswith("# RSR Conformity Statement")
