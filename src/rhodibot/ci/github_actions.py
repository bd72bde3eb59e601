"""GitHub Actions output: step outputs, annotations and job summary."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Literal, TextIO

from rhodibot.compliance.types import ComplianceReport, WarningLevel

logger = logging.getLogger(__name__)

AnnotationKind = Literal["warning", "error", "notice"]

_SUMMARY_ICONS: dict[WarningLevel, str] = {
    WarningLevel.INFO: "ℹ️",
    WarningLevel.WARNING: "⚠️",
    WarningLevel.CRITICAL: "🚨",
}


def set_output(name: str, value: str, *, env: Mapping[str, str] | None = None) -> bool:
    """Append ``name=value`` to $GITHUB_OUTPUT.

    Returns False without writing when the runner provides no output file.
    """
    environ = os.environ if env is None else env
    output_file = environ.get("GITHUB_OUTPUT")
    if not output_file:
        logger.debug("GITHUB_OUTPUT not set; skipping output %s", name)
        return False
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
    return True


def annotation(kind: AnnotationKind, message: str, file: str | None = None, line: int | None = None) -> str:
    """Format a workflow annotation command."""
    command = f"::{kind}"
    if file:
        command += f" file={file}"
        if line is not None:
            command += f",line={line}"
    return f"{command}::{message}"


def render_summary(report: ComplianceReport) -> str:
    """Markdown job summary for $GITHUB_STEP_SUMMARY."""
    lines = ["## 🤖 Rhodibot RSR Compliance Report", ""]

    if report.bronze_compliance and not report.has_critical_warnings:
        lines.append("✅ **Bronze-level RSR compliance: ACHIEVED**")
    else:
        lines.append("❌ **Bronze-level RSR compliance: NOT MET**")
    lines.append("")
    lines.append(
        f"**Score**: {report.passed_count}/{report.total_count} checks passed "
        f"({report.percentage:.1f}%)"
    )
    lines.extend(["", "### Checks", "", "| Category | Item | Status |", "|----------|------|--------|"])
    for check in report.checks:
        lines.append(f"| {check.category} | {check.item} | {'✅' if check.passed else '❌'} |")

    if report.warnings:
        lines.extend(["", "### Security Warnings", ""])
        for warning in report.warnings:
            lines.append(f"- {_SUMMARY_ICONS[warning.level]} {warning.message}")

    return "\n".join(lines) + "\n"


def output_report(
    report: ComplianceReport,
    *,
    env: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Publish a report as step outputs, annotations and a job summary."""
    environ = os.environ if env is None else env
    out = stream or sys.stdout

    outputs = {
        "passed": str(report.passed_count),
        "total": str(report.total_count),
        "percentage": f"{report.percentage:.1f}",
        "bronze_compliant": str(report.bronze_compliance).lower(),
        "has_warnings": str(report.has_critical_warnings).lower(),
    }
    for name, value in outputs.items():
        set_output(name, value, env=environ)

    for check in report.checks:
        if not check.passed:
            print(annotation("warning", f"RSR check failed: {check.category} - {check.item}"), file=out)

    for warning in report.warnings:
        kind: AnnotationKind = "error" if warning.level == WarningLevel.CRITICAL else "warning"
        file = str(warning.path) if warning.path is not None else None
        print(annotation(kind, warning.message, file), file=out)

    summary_file = environ.get("GITHUB_STEP_SUMMARY")
    if summary_file:
        with open(summary_file, "a", encoding="utf-8") as f:
            f.write(render_summary(report))
