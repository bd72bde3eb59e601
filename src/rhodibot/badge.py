"""Badge and conformity statement markdown for a compliance report."""

from __future__ import annotations

from rhodibot.clock import format_timestamp
from rhodibot.compliance.types import ComplianceLevel, ComplianceReport

STANDARD_URL = "https://github.com/hyperpolymath/rhodium-standard-repositories"
NOT_MET_LABEL = "Not Met"
NOT_MET_COLOR = "lightgrey"


def generate_badge(level: ComplianceLevel | None) -> str:
    """Shields.io badge markdown for ``level`` (None renders a "Not Met" badge)."""
    if level is None:
        label = NOT_MET_LABEL
        slug = NOT_MET_LABEL.replace(" ", "%20")
        color = NOT_MET_COLOR
    else:
        label = slug = level.display_name
        color = level.badge_color
    return (
        f"[![Rhodium Standard {label}](https://img.shields.io/badge/RSR-{slug}-{color})]"
        f"({STANDARD_URL})"
    )


def generate_conformity_doc(report: ComplianceReport) -> str:
    """Markdown attestation listing the requirements of the achieved tier."""
    level = report.highest_level()
    level_name = level.display_name if level else NOT_MET_LABEL
    verified_on = format_timestamp(report.verified_at).split("T")[0]
    project = report.repository_path.resolve().name or "Unknown"

    lines = [
        "# RSR Conformity Statement",
        "",
        f"**Project**: {project}",
        f"**RSR Level**: {level_name}",
        f"**Standard**: [Rhodium Standard Repository]({STANDARD_URL})",
        f"**Last Verified**: {verified_on}",
        "",
    ]

    if level is not None:
        lines.extend([
            f"## {level.display_name} Requirements Met",
            "",
            "| Requirement | Status |",
            "|-------------|--------|",
        ])
        for check in report.level_checks(level):
            lines.append(f"| {check.item} | {'Yes' if check.passed else 'No'} |")
        lines.append("")

    lines.extend([
        "## Verification",
        "",
        "Run self-verification:",
        "```bash",
        "rhodibot check .",
        "```",
        "",
        (
            f"Expected output: `{report.passed_count}/{report.total_count} checks passed "
            f"({report.percentage:.1f}%)`"
        ),
        "",
    ])
    return "\n".join(lines)
