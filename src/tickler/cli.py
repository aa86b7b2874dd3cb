"""Command-line entry point for tickler."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional

import typer

from . import __version__
from . import log as tickler_log
from .commands.explain import explain_ticket as explain_cmd
from .commands.run import run_tickets as run_cmd

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Clone recurring tickets and nudge tickets approaching their due date.",
)


class LogLevelName(str, Enum):
    trace = "trace"
    debug = "debug"
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[LogLevelName] = typer.Option(
        None, "--log-level", help="Minimum level of log output."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    if log_level is not None:
        tickler_log.set_level(log_level.value)
    if no_color:
        tickler_log.set_no_color(True)


@app.command("run")
def run(
    repo: Optional[str] = typer.Option(
        None, "--repo", "-R", help="Repository as owner/repo (default: $GITHUB_REPOSITORY)."
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Don't actually do anything, just print what would be done.",
    ),
    search: Optional[str] = typer.Option(
        None, "--search", help="Only consider open tickets matching this search."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Maximum number of open tickets to evaluate."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", exists=True, dir_okay=False, help="JSON config file."
    ),
    now: Optional[str] = typer.Option(
        None, "--now", help="Evaluate as of this ISO-8601 time instead of the clock."
    ),
) -> None:
    """Evaluate open tickets and apply recurrence and due-date actions."""
    run_cmd(
        SimpleNamespace(
            repo=repo,
            dry_run=dry_run,
            search=search,
            limit=limit,
            config=config,
            now=now,
        )
    )


@app.command("explain")
def explain(
    body_file: str = typer.Argument("-", help="Ticket body file, or - for stdin."),
    title: Optional[str] = typer.Option(None, "--title", help="Ticket title."),
    created: Optional[str] = typer.Option(
        None, "--created", help="Creation time (default: --now)."
    ),
    updated: Optional[str] = typer.Option(
        None, "--updated", help="Last update time (default: --created)."
    ),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluation time."),
    labels: Optional[List[str]] = typer.Option(
        None, "--label", help="Label already on the ticket (repeatable)."
    ),
    legacy: bool = typer.Option(
        False, "--legacy", help="Also read RRULE:/Due:/Labels: prefix lines."
    ),
) -> None:
    """Show the directives and actions for a single ticket body."""
    explain_cmd(
        SimpleNamespace(
            body_file=body_file,
            title=title,
            created=created,
            updated=updated,
            now=now,
            labels=labels,
            legacy=legacy,
        )
    )
