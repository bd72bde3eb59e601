"""Compliance report domain types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class ComplianceLevel(str, Enum):
    """RSR compliance tiers, lowest first."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def badge_color(self) -> str:
        """Shields.io badge color (hex, no leading #)."""
        return _BADGE_COLORS[self]


_LEVEL_ORDER: tuple[ComplianceLevel, ...] = (
    ComplianceLevel.BRONZE,
    ComplianceLevel.SILVER,
    ComplianceLevel.GOLD,
    ComplianceLevel.PLATINUM,
)

_BADGE_COLORS: dict[ComplianceLevel, str] = {
    ComplianceLevel.BRONZE: "cd7f32",
    ComplianceLevel.SILVER: "c0c0c0",
    ComplianceLevel.GOLD: "ffd700",
    ComplianceLevel.PLATINUM: "e5e4e2",
}


class WarningLevel(str, Enum):
    """Severity of a security warning raised while probing paths."""

    INFO = "info"
    WARNING = "warning"  # reserved
    CRITICAL = "critical"


@dataclass(frozen=True)
class CheckResult:
    """One evaluated requirement."""

    category: str
    item: str
    passed: bool
    required_for: ComplianceLevel = ComplianceLevel.BRONZE
    description: str | None = None


@dataclass(frozen=True)
class SecurityWarning:
    """Anomaly detected while inspecting a required path."""

    level: WarningLevel
    message: str
    path: Path | None = None


@dataclass(frozen=True)
class PathCheckResult:
    """Outcome of a single link-aware path inspection."""

    exists: bool
    is_symlink: bool = False
    escapes_root: bool = False
    target: Path | None = None


@dataclass(frozen=True)
class ComplianceReport:
    """Aggregate result of one verification run.

    Built once by the engine and never mutated afterwards; every score and
    compliance flag is derived from ``checks`` and ``warnings`` on demand.
    """

    repository_path: Path
    verified_at: datetime
    checks: tuple[CheckResult, ...] = ()
    warnings: tuple[SecurityWarning, ...] = ()

    @property
    def passed_count(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    @property
    def total_count(self) -> int:
        return len(self.checks)

    @property
    def percentage(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.passed_count / self.total_count * 100.0

    def level_checks(self, level: ComplianceLevel) -> tuple[CheckResult, ...]:
        return tuple(check for check in self.checks if check.required_for == level)

    def level_compliance(self, level: ComplianceLevel) -> bool:
        """True when every check tagged with ``level`` passed."""
        return all(check.passed for check in self.level_checks(level))

    @property
    def bronze_compliance(self) -> bool:
        return self.level_compliance(ComplianceLevel.BRONZE)

    @property
    def has_critical_warnings(self) -> bool:
        return any(warning.level == WarningLevel.CRITICAL for warning in self.warnings)

    def highest_level(self) -> ComplianceLevel | None:
        """Return the highest tier achieved, or None.

        A tier is achieved only when it and every lower tier carry at least
        one check and all of them pass. Any critical warning withholds the
        result entirely.
        """
        if not self.bronze_compliance or self.has_critical_warnings:
            return None

        achieved: ComplianceLevel | None = None
        for level in _LEVEL_ORDER:
            checks = self.level_checks(level)
            if not checks or not all(check.passed for check in checks):
                break
            achieved = level
        return achieved

    def checks_by_category(self) -> dict[str, list[CheckResult]]:
        grouped: dict[str, list[CheckResult]] = {}
        for check in self.checks:
            grouped.setdefault(check.category, []).append(check)
        return grouped
