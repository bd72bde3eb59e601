"""RSR compliance verification core."""

from rhodibot.compliance.engine import EXPECTED_CHECK_COUNT, ReportBuilder, verify_repository
from rhodibot.compliance.paths import inspect_path
from rhodibot.compliance.types import (
    CheckResult,
    ComplianceLevel,
    ComplianceReport,
    PathCheckResult,
    SecurityWarning,
    WarningLevel,
)

__all__ = [
    "EXPECTED_CHECK_COUNT",
    "CheckResult",
    "ComplianceLevel",
    "ComplianceReport",
    "PathCheckResult",
    "ReportBuilder",
    "SecurityWarning",
    "WarningLevel",
    "inspect_path",
    "verify_repository",
]
