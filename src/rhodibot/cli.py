"""Rhodibot CLI - RSR compliance checks for repositories."""

import sys
from enum import Enum
from pathlib import Path
from typing import TextIO

import typer
from rich.console import Console
from typer.core import TyperGroup

from rhodibot import TOOL_NAME, __version__, exit_codes
from rhodibot.badge import generate_badge, generate_conformity_doc
from rhodibot.ci import github_actions, gitlab_ci
from rhodibot.ci.platform import CIPlatform, detect_platform
from rhodibot.ci.templates import render_workflow, validate_pipeline
from rhodibot.clock import verification_time
from rhodibot.compliance.engine import verify_repository
from rhodibot.compliance.types import ComplianceReport
from rhodibot.config import BotConfig, ConfigError, load_config
from rhodibot.log import configure_logging
from rhodibot.reporting import (
    exit_code_for,
    render_human,
    render_json,
    render_quiet,
    render_verbose,
    write_report_artifacts,
)

DEFAULT_COMMAND = "check"


class _DefaultCheckGroup(TyperGroup):
    """Route bare invocations (``rhodibot``, ``rhodibot PATH``) to ``check``."""

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        group_flags = {opt for param in self.get_params(ctx) for opt in (*param.opts, *param.secondary_opts)}
        index = 0
        while index < len(args) and args[index] in group_flags:
            index += 1
        if index == len(args) or args[index] not in self.commands:
            args = [*args[:index], DEFAULT_COMMAND, *args[index:]]
        return super().parse_args(ctx, args)


cli = typer.Typer(
    name=TOOL_NAME,
    help="Rhodibot - Rhodium Standard Repository compliance checks.",
    cls=_DefaultCheckGroup,
)
ci_app = typer.Typer(help="CI/CD integration: platform detection and pipeline templates.")
cli.add_typer(ci_app, name="ci")

console = Console()


class OutputFormat(str, Enum):
    """Report output formats."""

    HUMAN = "human"
    JSON = "json"


class CiTarget(str, Enum):
    """CI adapter selection for ``check --ci``."""

    NONE = "none"
    AUTO = "auto"
    GITHUB = "github"
    GITLAB = "gitlab"


class PipelinePlatform(str, Enum):
    """Platforms with a pipeline template."""

    GITHUB = "github"
    GITLAB = "gitlab"


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(f"{TOOL_NAME} {__version__}")
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show rhodibot version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log probe-level diagnostics to stderr.",
    ),
) -> None:
    """Rhodibot - like Dependabot, but for repository standards.

    Running without a command checks the current directory.
    """
    configure_logging(debug)


def _require_repo(path: Path | None) -> Path:
    """Validate the repository root; exit with INVALID_PATH when unusable."""
    repo = path if path is not None else Path.cwd()
    if not repo.exists():
        typer.echo(f"Error: Path does not exist: {repo}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_PATH)
    if not repo.is_dir():
        typer.echo(f"Error: Path is not a directory: {repo}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_PATH)
    return repo


def _load_config_or_exit(repo: Path, config_path: Path | None) -> BotConfig:
    try:
        return load_config(repo, config_path)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS) from exc


def _verify(repo: Path, timestamp_mode: str) -> ComplianceReport:
    try:
        verified_at = verification_time(timestamp_mode)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS) from exc
    return verify_repository(repo, verified_at=verified_at)


def _emit_ci(report: ComplianceReport, target: CiTarget, dotenv: Path | None, stream: TextIO) -> None:
    platform = detect_platform() if target == CiTarget.AUTO else CIPlatform(target.value)
    if platform == CIPlatform.GITHUB_ACTIONS:
        github_actions.output_report(report, stream=stream)
    elif platform == CIPlatform.GITLAB_CI:
        gitlab_ci.output_report(report, stream=stream, dotenv_path=dotenv)


def _write_text(output: Path, text: str, force: bool) -> None:
    if output.exists() and not force:
        typer.echo(f"Error: {output} already exists. Use --force to overwrite.", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    except OSError as exc:
        typer.echo(f"Error writing {output}: {exc}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS) from exc
    typer.echo(f"Generated: {output}")


@cli.command(name="check")
def check_cmd(
    path: Path | None = typer.Argument(
        None,
        help="Repository path to verify (default: current directory)",
        show_default=False,
    ),
    output_format: OutputFormat | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: human or json",
        case_sensitive=False,
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print PASS or FAIL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Include warning paths and exit-code notes"),
    timestamp_mode: str | None = typer.Option(
        None,
        "--timestamp-mode",
        help="Timestamp mode: wallclock or deterministic",
    ),
    no_fail_on_warning: bool = typer.Option(
        False,
        "--no-fail-on-warning",
        help="Report critical security warnings without exit code 2",
    ),
    ci: CiTarget = typer.Option(
        CiTarget.NONE,
        "--ci",
        help="Also emit CI output: auto, github, gitlab or none",
        case_sensitive=False,
    ),
    dotenv: Path | None = typer.Option(None, "--dotenv", help="GitLab dotenv artifact path (with --ci gitlab)"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Directory for RHODIBOT_REPORT.json/.md"),
    config_path: Path | None = typer.Option(None, "--config", help="Config file (default: <repo>/.rhodibot.yaml)"),
) -> None:
    """Check RSR compliance of a repository.

    Exit codes:
      0 - Bronze compliance achieved
      1 - Bronze compliance not met
      2 - Critical security warning (symlink escapes the repository)
      3 - Invalid path
      4 - Invalid arguments or configuration
    """
    if quiet and verbose:
        typer.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS)

    repo = _require_repo(path)
    config = _load_config_or_exit(repo, config_path).with_overrides(
        format=output_format.value if output_format else None,
        verbosity="quiet" if quiet else "verbose" if verbose else None,
        timestamp_mode=timestamp_mode,
        fail_on_warning=False if no_fail_on_warning else None,
    )

    report = _verify(repo, config.timestamp_mode)

    if config.format == OutputFormat.JSON.value:
        typer.echo(render_json(report))
    elif config.verbosity == "quiet":
        typer.echo(render_quiet(report))
    elif config.verbosity == "verbose":
        render_verbose(report, console, fail_on_warning=config.fail_on_warning)
    else:
        render_human(report, console, fail_on_warning=config.fail_on_warning)

    try:
        if ci != CiTarget.NONE:
            # Keep stdout a single JSON document.
            ci_stream = sys.stderr if config.format == OutputFormat.JSON.value else sys.stdout
            _emit_ci(report, ci, dotenv, ci_stream)
        if out is not None:
            json_path, md_path = write_report_artifacts(out, report)
            if config.format == OutputFormat.HUMAN.value and config.verbosity != "quiet":
                typer.echo("Reports written to:")
                typer.echo(f"  {json_path}")
                typer.echo(f"  {md_path}")
    except OSError as exc:
        typer.echo(f"Error writing output: {exc}", err=True)
        raise typer.Exit(code=exit_codes.INVALID_ARGS) from exc

    raise typer.Exit(code=exit_code_for(report, fail_on_warning=config.fail_on_warning))


@cli.command(name="badge")
def badge_cmd(
    path: Path | None = typer.Argument(None, help="Repository path (default: current directory)", show_default=False),
) -> None:
    """Print RSR badge markdown for the achieved compliance level."""
    repo = _require_repo(path)
    report = _verify(repo, "wallclock")
    typer.echo(generate_badge(report.highest_level()))


@cli.command(name="conformity")
def conformity_cmd(
    path: Path | None = typer.Argument(None, help="Repository path (default: current directory)", show_default=False),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the statement to this file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing output file"),
    timestamp_mode: str = typer.Option("wallclock", "--timestamp-mode", help="Timestamp mode: wallclock or deterministic"),
) -> None:
    """Generate an RSR conformity statement (markdown)."""
    repo = _require_repo(path)
    report = _verify(repo, timestamp_mode)
    document = generate_conformity_doc(report)
    if output is None:
        typer.echo(document, nl=False)
    else:
        _write_text(output, document, force)


@ci_app.command(name="detect")
def ci_detect_cmd() -> None:
    """Print the detected CI/CD platform."""
    typer.echo(detect_platform().display_name)


@ci_app.command(name="workflow")
def ci_workflow_cmd(
    platform: PipelinePlatform = typer.Argument(..., help="Pipeline platform: github or gitlab", case_sensitive=False),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing output file"),
) -> None:
    """Generate a CI pipeline configuration that runs rhodibot."""
    text = render_workflow(platform.value)
    if output is None:
        typer.echo(text, nl=False)
    else:
        _write_text(output, text, force)


@ci_app.command(name="validate")
def ci_validate_cmd(
    path: Path | None = typer.Argument(None, help="Repository path (default: current directory)", show_default=False),
) -> None:
    """Validate existing CI pipeline files."""
    repo = _require_repo(path)
    result = validate_pipeline(repo)

    if result.errors:
        typer.echo("Errors:")
        for error in result.errors:
            typer.echo(f"  - {error}")
    if result.warnings:
        typer.echo("Warnings:")
        for warning in result.warnings:
            typer.echo(f"  - {warning}")

    if result.valid:
        typer.echo("Pipeline configuration is valid.")
        raise typer.Exit(code=exit_codes.SUCCESS)
    typer.echo("Pipeline configuration has issues.")
    raise typer.Exit(code=exit_codes.COMPLIANCE_FAILED)


def main(argv: list[str] | None = None) -> int:
    """Console entry point; maps usage errors to INVALID_ARGS."""
    try:
        result = cli(args=argv, prog_name=TOOL_NAME, standalone_mode=False)
    except typer.TyperException as exc:
        typer.echo(f"Error: {exc.format_message()}", err=True)
        return exit_codes.INVALID_ARGS
    except typer.Abort:
        typer.echo("Aborted!", err=True)
        return exit_codes.INVALID_ARGS
    return result if isinstance(result, int) else exit_codes.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
