#!/usr/bin/env python3
"""
Compare pinned versions against upstream releases.

Commands:
    check    - Fetch (or accept) upstream versions and report drift
    history  - Show recent drift checks

Exit codes for `check`: 0 = no drift, 1 = error, 2 = drift detected.

Examples:
    python scripts/check_drift.py check
    python scripts/check_drift.py check --latest-php 8.4 --latest-moodle 500 --update-readme
    python scripts/check_drift.py check --open-issue   # needs GITHUB_TOKEN, GITHUB_REPOSITORY
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from moodle_image.contexts.drift.config import load_upstream_config
from moodle_image.contexts.drift.detector import detect_drift
from moodle_image.contexts.drift.exceptions import IssueTrackerError
from moodle_image.contexts.drift.issues import GitHubIssueTracker
from moodle_image.contexts.drift.logger import log_drift_report, setup_drift_logger
from moodle_image.contexts.drift.readme import update_readme
from moodle_image.contexts.drift.upstream import (
    UpstreamVersions,
    fetch_latest_moodle_branch,
    fetch_latest_php_version,
    normalize_moodle_branch,
    php_minor_version,
)
from moodle_image.contexts.inspection.config import PROJECT_ROOT, load_artifacts_config
from moodle_image.contexts.inspection.exceptions import ArtifactCheckError
from moodle_image.contexts.inspection.versions import extract_image_versions
from moodle_image.utils.event_logging import get_recent_events, log_check_event
from moodle_image.utils.timestamp import format_timestamp, now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

DRIFT_EXIT_CODE = 2

app = typer.Typer(
    add_completion=False,
    help="Detect drift between pinned and upstream PHP/Moodle versions.",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("check")
def check_command(
    root: Path = typer.Option(PROJECT_ROOT, "--root", "-r", help="Repository root"),
    latest_php: Optional[str] = typer.Option(
        None, "--latest-php", help="Latest PHP minor version (skip fetching)"
    ),
    latest_moodle: Optional[str] = typer.Option(
        None, "--latest-moodle", help="Latest Moodle branch number (skip fetching)"
    ),
    update_readme_badges: bool = typer.Option(
        False, "--update-readme", help="Rewrite README version and upstream badges"
    ),
    open_issue: bool = typer.Option(
        False, "--open-issue", help="Open or update the GitHub tracking issue on drift"
    ),
):
    """
    Compare the Dockerfile's PHP and Moodle versions with upstream.

    Upstream values that are not passed as options are fetched. A failed fetch
    leaves the value empty, which is reported as unknown rather than drift.
    """
    upstream_config = load_upstream_config()
    setup_drift_logger(LOGS_PATH / f"drift_{now()}", {"Project root": root})

    dockerfile = root / "Dockerfile"
    try:
        versions = extract_image_versions(
            dockerfile.read_text(encoding="utf-8"), load_artifacts_config()["databases"]
        )
    except (OSError, ArtifactCheckError) as e:
        typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    # Values passed in from the workflow may be "null" or a full release such as 8.4.13
    latest = UpstreamVersions(
        php=(
            php_minor_version(latest_php)
            if latest_php is not None
            else fetch_latest_php_version(upstream_config)
        ),
        moodle_branch=(
            normalize_moodle_branch(latest_moodle)
            if latest_moodle is not None
            else fetch_latest_moodle_branch(upstream_config)
        ),
    )

    report = detect_drift(versions, latest)
    log_drift_report(report)

    typer.echo("")
    for item in report.items:
        if not item.latest:
            typer.secho(f"? {item.component}: {item.display_current} (upstream unknown)", fg=typer.colors.YELLOW)
        elif item.drifted:
            typer.secho(
                f"↑ {item.component}: {item.display_current} -> {item.display_latest}", fg=typer.colors.YELLOW
            )
        else:
            typer.secho(f"✓ {item.component}: {item.display_current}", fg=typer.colors.GREEN)

    if update_readme_badges:
        changed = update_readme(root / "README.md", versions, report)
        typer.echo("README badges updated" if changed else "README badges already current")

    issue_number = None
    if open_issue and report.has_drift:
        github = upstream_config["github"]
        try:
            tracker = GitHubIssueTracker(
                os.getenv("GITHUB_REPOSITORY", ""),
                os.getenv("GITHUB_TOKEN", ""),
                api_url=github["api_url"],
            )
            issue_number, created = tracker.open_or_update(
                github["issue_title"], report.to_markdown(), github["issue_labels"]
            )
        except (ValueError, IssueTrackerError) as e:
            typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        typer.echo(f"{'Opened' if created else 'Updated'} issue #{issue_number}")

    log_check_event(
        event_type="drift_check",
        source="cli",
        has_drift=report.has_drift,
        php={"current": versions.php, "latest": latest.php},
        moodle={"current": versions.moodle_branch, "latest": latest.moodle_branch},
        issue_number=issue_number,
    )

    if report.has_drift:
        raise typer.Exit(code=DRIFT_EXIT_CODE)


@app.command("history")
def history_command(
    n: int = typer.Option(10, "-n", help="Number of recent checks to show"),
):
    """Show recent drift checks from the check event log."""
    events = get_recent_events(n, event_type="drift_check")
    if not events:
        typer.echo("No drift checks recorded")
        return

    for event in events:
        when = format_timestamp(event.get("timestamp", ""), relative=True)
        status = "drift" if event.get("has_drift") else "current"
        php = event.get("php", {})
        moodle = event.get("moodle", {})
        typer.echo(
            f"{when:>10}  {status:<8} "
            f"php {php.get('current', '?')}/{php.get('latest') or '?'}  "
            f"moodle {moodle.get('current', '?')}/{moodle.get('latest') or '?'}"
        )


if __name__ == "__main__":
    app()
