"""Report rendering: human, verbose, quiet and JSON views plus artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.text import Text

from rhodibot import TOOL_NAME, __version__, exit_codes
from rhodibot.badge import generate_conformity_doc
from rhodibot.clock import format_timestamp
from rhodibot.compliance.types import ComplianceReport, WarningLevel
from rhodibot.schemas.validator import REPORT_SCHEMA, validate_data

REPORT_JSON = "RHODIBOT_REPORT.json"
REPORT_MD = "RHODIBOT_REPORT.md"

RULE = "━" * 50

_WARNING_ICONS: dict[WarningLevel, str] = {
    WarningLevel.INFO: "ℹ️ ",
    WarningLevel.WARNING: "⚠️ ",
    WarningLevel.CRITICAL: "🚨",
}

_WARNING_TAGS: dict[WarningLevel, str] = {
    WarningLevel.INFO: "[INFO]",
    WarningLevel.WARNING: "[WARN]",
    WarningLevel.CRITICAL: "[CRITICAL]",
}

_WARNING_STYLES: dict[WarningLevel, str] = {
    WarningLevel.INFO: "cyan",
    WarningLevel.WARNING: "yellow",
    WarningLevel.CRITICAL: "bold red",
}


def exit_code_for(report: ComplianceReport, *, fail_on_warning: bool = True) -> int:
    """Map report state to the CLI exit code."""
    if fail_on_warning and report.has_critical_warnings:
        return exit_codes.SECURITY_WARNING
    if not report.bronze_compliance:
        return exit_codes.COMPLIANCE_FAILED
    return exit_codes.SUCCESS


def report_to_dict(report: ComplianceReport) -> dict[str, Any]:
    """Serialize a report into the JSON contract (see report.schema.json)."""
    level = report.highest_level()
    return {
        "tool": TOOL_NAME,
        "version": __version__,
        "repository": str(report.repository_path),
        "verified_at": format_timestamp(report.verified_at),
        "score": {
            "passed": report.passed_count,
            "total": report.total_count,
            "percentage": round(report.percentage, 1),
        },
        "bronze_compliant": report.bronze_compliance,
        "highest_level": level.display_name if level else None,
        "has_critical_warnings": report.has_critical_warnings,
        "checks": [
            {
                "category": check.category,
                "item": check.item,
                "passed": check.passed,
                "level": check.required_for.display_name,
            }
            for check in report.checks
        ],
        "warnings": [
            {
                "level": warning.level.value,
                "message": warning.message,
                "path": str(warning.path) if warning.path is not None else None,
            }
            for warning in report.warnings
        ],
    }


def render_json(report: ComplianceReport) -> str:
    payload = report_to_dict(report)
    validate_data(payload, REPORT_SCHEMA)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_quiet(report: ComplianceReport) -> str:
    if report.bronze_compliance and not report.has_critical_warnings:
        return "PASS"
    if report.has_critical_warnings:
        return "FAIL (security)"
    return "FAIL"


def _emit(console: Console, text: str = "", style: str | None = None) -> None:
    # Text objects keep bracketed labels such as "[Bronze]" out of rich markup.
    console.print(Text(text, style=style or ""), soft_wrap=True)


def _score_line(report: ComplianceReport) -> str:
    return (
        f"Score: {report.passed_count}/{report.total_count} checks passed "
        f"({report.percentage:.1f}%)"
    )


def _emit_checks(console: Console, report: ComplianceReport) -> None:
    for category, checks in report.checks_by_category().items():
        _emit(console)
        _emit(console, f"📋 {category}", "bold")
        for check in checks:
            icon = "✅" if check.passed else "❌"
            _emit(
                console,
                f"  {icon} {check.item} [{check.required_for.display_name}]",
                None if check.passed else "red",
            )


def _emit_verdict(console: Console, report: ComplianceReport, *, explain: bool, fail_on_warning: bool) -> None:
    critical = report.has_critical_warnings
    if critical:
        _emit(console, "🚨 CRITICAL: Security warnings detected - review required", "bold red")

    if report.bronze_compliance and not critical:
        _emit(console, "🏆 Bronze-level RSR compliance: ACHIEVED", "bold green")
    elif report.bronze_compliance:
        _emit(console, "⚠️  Bronze-level RSR compliance: ACHIEVED (with warnings)", "bold yellow")
    else:
        _emit(console, "⚠️  Bronze-level RSR compliance: NOT MET", "bold yellow")

    if explain:
        code = exit_code_for(report, fail_on_warning=fail_on_warning)
        _emit(console, f"   Exit code: {code} ({exit_codes.DESCRIPTIONS[code]})")


def render_human(report: ComplianceReport, console: Console, *, fail_on_warning: bool = True) -> None:
    """Standard grouped listing of checks and warnings."""
    _emit(console, "🤖 Rhodibot - RSR Compliance Report", "bold")
    _emit(console, RULE)
    _emit(console, f"Repository: {report.repository_path}")
    _emit(console, f"Verified:   {format_timestamp(report.verified_at)}")

    _emit_checks(console, report)

    if report.warnings:
        _emit(console)
        _emit(console, "🛡️  Security Warnings", "bold")
        for warning in report.warnings:
            _emit(console, f"  {_WARNING_ICONS[warning.level]} {warning.message}", _WARNING_STYLES[warning.level])

    _emit(console)
    _emit(console, RULE)
    _emit(console, _score_line(report))
    _emit_verdict(console, report, explain=False, fail_on_warning=fail_on_warning)


def render_verbose(report: ComplianceReport, console: Console, *, fail_on_warning: bool = True) -> None:
    """Human view plus version, tagged warnings with paths, and exit-code notes."""
    _emit(console, "🤖 Rhodibot - RSR Compliance Report (Verbose)", "bold")
    _emit(console, RULE)
    _emit(console, f"Repository: {report.repository_path}")
    _emit(console, f"Verified:   {format_timestamp(report.verified_at)}")
    _emit(console, f"Version:    {__version__}")

    _emit_checks(console, report)

    if report.warnings:
        _emit(console)
        _emit(console, f"🛡️  Security Warnings ({len(report.warnings)} total)", "bold")
        for warning in report.warnings:
            _emit(
                console,
                f"  {_WARNING_ICONS[warning.level]} {_WARNING_TAGS[warning.level]} {warning.message}",
                _WARNING_STYLES[warning.level],
            )
            if warning.path is not None:
                _emit(console, f"      Path: {warning.path}")

    _emit(console)
    _emit(console, RULE)
    _emit(console, _score_line(report))
    _emit_verdict(console, report, explain=True, fail_on_warning=fail_on_warning)


def write_report_artifacts(out_dir: Path, report: ComplianceReport) -> tuple[Path, Path]:
    """Write the JSON report and the conformity statement to ``out_dir``.

    The JSON payload is validated before anything is written.

    Returns:
        Tuple of (json_path, markdown_path)
    """
    payload = report_to_dict(report)
    validate_data(payload, REPORT_SCHEMA)

    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / REPORT_JSON
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)
        f.write("\n")

    md_path = out_dir / REPORT_MD
    md_path.write_text(generate_conformity_doc(report), encoding="utf-8")

    return json_path, md_path
