"""Load and validate optional rhodibot configuration (``.rhodibot.yaml``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

import yaml  # type: ignore[import-untyped]

from rhodibot.clock import normalize_timestamp_mode

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".rhodibot.yaml"

OutputFormatName = Literal["human", "json"]
VerbosityName = Literal["quiet", "normal", "verbose"]

OUTPUT_FORMATS: tuple[str, ...] = ("human", "json")
VERBOSITIES: tuple[str, ...] = ("quiet", "normal", "verbose")

CONFIG_REASON_MISSING = "CONFIG_MISSING"
CONFIG_REASON_PARSE_ERROR = "CONFIG_PARSE_ERROR"
CONFIG_REASON_INVALID = "CONFIG_INVALID"


class ConfigError(ValueError):
    """Configuration file could not be loaded or validated."""

    reason_code: str

    def __init__(self, message: str, reason_code: str = CONFIG_REASON_INVALID) -> None:
        super().__init__(message)
        self.reason_code = reason_code


@dataclass(frozen=True)
class BotConfig:
    """Effective run configuration."""

    format: OutputFormatName = "human"
    verbosity: VerbosityName = "normal"
    fail_on_warning: bool = True
    timestamp_mode: str = "wallclock"

    def with_overrides(self, **overrides: Any) -> BotConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def config_path_for_repo(repo_root: Path) -> Path:
    return repo_root / CONFIG_FILENAME


def _choice(raw: dict[str, Any], key: str, allowed: tuple[str, ...], default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or value.strip().lower() not in allowed:
        raise ConfigError(f"`{key}` must be one of {allowed}, got `{value}`")
    return value.strip().lower()


def parse_config(raw: Any) -> BotConfig:
    """Normalize a parsed YAML document into a BotConfig."""
    if raw is None:
        return BotConfig()
    if not isinstance(raw, dict):
        raise ConfigError("config parse error: expected mapping at top level", CONFIG_REASON_PARSE_ERROR)

    known = {"format", "verbosity", "fail_on_warning", "timestamp_mode"}
    unknown = sorted(str(k) for k in raw if k not in known)
    if unknown:
        raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")

    defaults = BotConfig()
    fail_on_warning = raw.get("fail_on_warning", defaults.fail_on_warning)
    if not isinstance(fail_on_warning, bool):
        raise ConfigError(f"`fail_on_warning` must be a boolean, got `{fail_on_warning}`")

    timestamp_mode = raw.get("timestamp_mode", defaults.timestamp_mode)
    try:
        timestamp_mode = normalize_timestamp_mode(str(timestamp_mode))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    return BotConfig(
        format=_choice(raw, "format", OUTPUT_FORMATS, defaults.format),  # type: ignore[arg-type]
        verbosity=_choice(raw, "verbosity", VERBOSITIES, defaults.verbosity),  # type: ignore[arg-type]
        fail_on_warning=fail_on_warning,
        timestamp_mode=timestamp_mode,
    )


def load_config(repo_root: Path, config_path: Path | None = None) -> BotConfig:
    """Load configuration for a run.

    An explicit ``config_path`` must exist. Without one, ``.rhodibot.yaml``
    at the repository root is used when present, else defaults apply.

    Raises:
        ConfigError: If the file is missing (explicit path), malformed or invalid
    """
    if config_path is None:
        path = config_path_for_repo(repo_root)
        if not path.is_file():
            return BotConfig()
    else:
        path = config_path
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}", CONFIG_REASON_MISSING)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path.name} parse error: {exc}", CONFIG_REASON_PARSE_ERROR) from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}", CONFIG_REASON_PARSE_ERROR) from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc}", CONFIG_REASON_PARSE_ERROR) from exc

    logger.debug("loaded config from %s", path)
    return parse_config(raw)
