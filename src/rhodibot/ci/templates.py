"""Generate and validate CI pipeline configurations that run rhodibot."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

SUPPORTED_PLATFORMS: tuple[str, ...] = ("github", "gitlab")

DEFAULT_OUTPUT_PATHS: dict[str, Path] = {
    "github": Path(".github/workflows/rsr-compliance.yml"),
    "gitlab": Path(".gitlab-ci.yml"),
}

REPORT_DIR = "rhodibot-report"
DOTENV_FILE = "rhodibot.env"

_HEADER = (
    "# Rhodibot RSR Compliance Check\n"
    "# Checks this repository for Rhodium Standard Repository compliance.\n"
)

GITHUB_WORKFLOW: dict[str, Any] = {
    "name": "RSR Compliance",
    "on": {
        "push": {"branches": ["main", "master"]},
        "pull_request": {"branches": ["main", "master"]},
        "schedule": [{"cron": "0 0 * * 1"}],
    },
    "jobs": {
        "rhodibot": {
            "name": "RSR Compliance Check",
            "runs-on": "ubuntu-latest",
            "steps": [
                {"name": "Checkout repository", "uses": "actions/checkout@v4"},
                {
                    "name": "Set up Python",
                    "uses": "actions/setup-python@v5",
                    "with": {"python-version": "3.12"},
                },
                {"name": "Install rhodibot", "run": "pip install rhodibot"},
                {
                    "name": "Run RSR compliance check",
                    "id": "check",
                    "run": f"rhodibot check . --ci github --out {REPORT_DIR}",
                },
                {
                    "name": "Upload report",
                    "if": "always()",
                    "uses": "actions/upload-artifact@v4",
                    "with": {"name": "rhodibot-report", "path": REPORT_DIR},
                },
            ],
        }
    },
}

GITLAB_CONFIG: dict[str, Any] = {
    "rhodibot": {
        "stage": "test",
        "image": "python:3.12-slim",
        "before_script": ["pip install rhodibot"],
        "script": [f"rhodibot check . --ci gitlab --dotenv {DOTENV_FILE} --out {REPORT_DIR}"],
        "artifacts": {
            "reports": {"dotenv": DOTENV_FILE},
            "paths": [f"{REPORT_DIR}/"],
            "when": "always",
        },
        "allow_failure": False,
        "rules": [
            {"if": '$CI_PIPELINE_SOURCE == "merge_request_event"'},
            {"if": "$CI_COMMIT_BRANCH == $CI_DEFAULT_BRANCH"},
            {"if": '$CI_PIPELINE_SOURCE == "schedule"'},
        ],
    }
}

_TEMPLATES: dict[str, dict[str, Any]] = {
    "github": GITHUB_WORKFLOW,
    "gitlab": GITLAB_CONFIG,
}


@dataclass
class PipelineValidation:
    """Result of validating a repository's CI pipeline files."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


def render_workflow(platform: str) -> str:
    """Render the pipeline configuration for ``platform`` as YAML text.

    Raises:
        ValueError: If the platform is not supported
    """
    key = platform.strip().lower()
    if key not in _TEMPLATES:
        raise ValueError(
            f"Unsupported platform: {platform}. Expected one of: {', '.join(SUPPORTED_PLATFORMS)}"
        )
    body = yaml.safe_dump(_TEMPLATES[key], sort_keys=False, default_flow_style=False, width=120)
    return _HEADER + "\n" + body


def pipeline_files(repo_root: Path) -> list[Path]:
    """Existing CI configuration files, in a stable order."""
    found: list[Path] = []
    gitlab = repo_root / ".gitlab-ci.yml"
    if gitlab.is_file():
        found.append(gitlab)
    workflows = repo_root / ".github" / "workflows"
    if workflows.is_dir():
        found.extend(
            sorted(p for p in workflows.iterdir() if p.is_file() and p.suffix in {".yml", ".yaml"})
        )
    return found


def _mentions_rhodibot(node: Any) -> bool:
    if isinstance(node, str):
        return "rhodibot" in node
    if isinstance(node, dict):
        return any(_mentions_rhodibot(value) for value in node.values())
    if isinstance(node, list):
        return any(_mentions_rhodibot(item) for item in node)
    return False


def validate_pipeline(repo_root: Path) -> PipelineValidation:
    """Check that CI files parse and that at least one runs rhodibot."""
    result = PipelineValidation()
    files = pipeline_files(repo_root)

    if not files:
        result.warnings.append("No CI pipeline configuration found (.gitlab-ci.yml or .github/workflows/)")
        return result

    runs_rhodibot = False
    for path in files:
        rel = path.relative_to(repo_root).as_posix()
        result.files.append(rel)
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            result.errors.append(f"{rel}: YAML parse error: {exc}")
            continue
        except OSError as exc:
            result.errors.append(f"{rel}: unreadable: {exc}")
            continue
        except UnicodeDecodeError as exc:
            result.errors.append(f"{rel}: not valid UTF-8: {exc}")
            continue

        if not isinstance(document, dict):
            result.errors.append(f"{rel}: expected a mapping at top level")
            continue

        if _mentions_rhodibot(document):
            runs_rhodibot = True

    if not runs_rhodibot and not result.errors:
        result.warnings.append("No pipeline job runs rhodibot")

    result.valid = not result.errors
    return result
