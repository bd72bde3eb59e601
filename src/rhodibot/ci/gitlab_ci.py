"""GitLab CI output: dotenv variables and a collapsible log section."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import TextIO

from rhodibot.compliance.types import ComplianceReport

ESC = "\x1b"
SECTION_NAME = "rhodibot_report"


def dotenv_variables(report: ComplianceReport) -> dict[str, str]:
    return {
        "RHODIBOT_PASSED": str(report.passed_count),
        "RHODIBOT_TOTAL": str(report.total_count),
        "RHODIBOT_PERCENTAGE": f"{report.percentage:.1f}",
        "RHODIBOT_BRONZE_COMPLIANT": str(report.bronze_compliance).lower(),
        "RHODIBOT_HAS_WARNINGS": str(report.has_critical_warnings).lower(),
    }


def render_dotenv(report: ComplianceReport) -> str:
    return "".join(f"{key}={value}\n" for key, value in dotenv_variables(report).items())


def write_dotenv(path: Path, report: ComplianceReport) -> Path:
    """Write the dotenv artifact consumed by ``artifacts:reports:dotenv``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_dotenv(report), encoding="utf-8")
    return path


def render_section(report: ComplianceReport, *, timestamp: int | None = None) -> str:
    """Collapsible job-log section listing every check."""
    ts = int(time.time()) if timestamp is None else timestamp
    lines = [
        f"{ESC}[0Ksection_start:{ts}:{SECTION_NAME}[collapsed=false]\r{ESC}[0K{ESC}[36mRhodibot Report{ESC}[0m"
    ]
    for check in report.checks:
        status, color = ("✓", "32") if check.passed else ("✗", "31")
        lines.append(f"{ESC}[{color}m[{status}]{ESC}[0m {check.category} - {check.item}")
    lines.append(f"{ESC}[0Ksection_end:{ts}:{SECTION_NAME}\r{ESC}[0K")
    return "\n".join(lines) + "\n"


def output_report(
    report: ComplianceReport,
    *,
    stream: TextIO | None = None,
    dotenv_path: Path | None = None,
    timestamp: int | None = None,
) -> None:
    out = stream or sys.stdout
    out.write(render_dotenv(report))
    out.write("\n")
    out.write(render_section(report, timestamp=timestamp))
    if dotenv_path is not None:
        write_dotenv(dotenv_path, report)
