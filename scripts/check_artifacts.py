#!/usr/bin/env python3
"""
Inspect the deployment artifacts.

Usage:
    python scripts/check_artifacts.py inspect
    python scripts/check_artifacts.py inspect --root path/to/checkout
    python scripts/check_artifacts.py versions
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from moodle_image.contexts.inspection.config import PROJECT_ROOT, load_artifacts_config
from moodle_image.contexts.inspection.exceptions import ArtifactCheckError
from moodle_image.contexts.inspection.inspector import inspect_artifacts
from moodle_image.contexts.inspection.logger import setup_inspection_logger
from moodle_image.contexts.inspection.versions import extract_image_versions
from moodle_image.utils.event_logging import log_check_event
from moodle_image.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

app = typer.Typer(
    add_completion=False,
    help="Inspect Dockerfile, nginx, PHP, supervisor, cron, entrypoint, workflow and README.",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("inspect")
def inspect_command(
    root: Path = typer.Option(PROJECT_ROOT, "--root", "-r", help="Repository root to inspect"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to artifacts.yaml"),
):
    """
    Run every artifact check and report failures.

    Exits with code 1 if any check fails.
    """
    log_dir = LOGS_PATH / f"inspect_{now()}"
    setup_inspection_logger(log_dir, root)

    try:
        report = inspect_artifacts(root, config)
    except (FileNotFoundError, ValueError) as e:
        typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo("")
    for result in report.results:
        if result.passed:
            typer.secho(f"✓ {result.name}", fg=typer.colors.GREEN)
        else:
            typer.secho(f"✗ {result.name}", fg=typer.colors.RED)
            for line in result.message.splitlines():
                typer.echo(f"    {line}")

    log_check_event(
        event_type="inspection",
        source="cli",
        project_root=str(root),
        passed=report.is_valid,
        failures=[failure.name for failure in report.failures],
    )

    typer.echo(f"\n{report.summary().splitlines()[0]}")
    if not report.is_valid:
        raise typer.Exit(code=1)


@app.command("versions")
def versions_command(
    root: Path = typer.Option(PROJECT_ROOT, "--root", "-r", help="Repository root"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to artifacts.yaml"),
):
    """Print the version tokens pinned by the Dockerfile."""
    dockerfile = root / "Dockerfile"
    if not dockerfile.exists():
        typer.secho(f"ERROR: Dockerfile not found: {dockerfile}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    databases = load_artifacts_config(config)["databases"]
    try:
        versions = extract_image_versions(dockerfile.read_text(encoding="utf-8"), databases)
    except ArtifactCheckError as e:
        typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  php: {versions.php}")
    typer.echo(f"  moodle_branch: {versions.moodle_branch} ({versions.moodle_release})")
    typer.echo(f"  databases: {versions.database_label or '(none)'}")


if __name__ == "__main__":
    app()
