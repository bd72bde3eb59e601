"""Report timestamp helpers (wallclock or deterministic)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

TimestampMode = Literal["wallclock", "deterministic"]

DETERMINISTIC_TIMESTAMP = datetime(1970, 1, 1, tzinfo=UTC)


def normalize_timestamp_mode(timestamp_mode: str) -> TimestampMode:
    """Normalize CLI/config timestamp modes."""
    normalized = timestamp_mode.strip().lower()
    if normalized in {"wallclock", "now"}:
        return "wallclock"
    if normalized == "deterministic":
        return "deterministic"
    raise ValueError(
        f"Unsupported timestamp mode: {timestamp_mode}. "
        "Expected one of: wallclock, deterministic."
    )


def verification_time(timestamp_mode: str) -> datetime:
    """Timestamp to stamp on a report for the given mode."""
    if normalize_timestamp_mode(timestamp_mode) == "deterministic":
        return DETERMINISTIC_TIMESTAMP
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Format as ISO 8601 UTC with second precision (``...Z``)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
