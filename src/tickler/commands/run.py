"""Implementation for the ``tickler run`` command."""

from __future__ import annotations

from .. import clock, config, log
from ..engine import EngineOptions, run_engine
from ..errors import ConfigError, TicketListError
from ..github_issues import GithubIssuesTracker
from ..io import die
from ..tickets import TicketQuery
from ..trackers import DryRunTracker, TicketTracker


def run_tickets(args: object) -> None:
    """Evaluate every open ticket in the configured repository.

    Args:
        args: CLI argument object with ``repo``, ``dry_run``, ``search``,
            ``limit``, ``config`` and ``now`` attributes.

    Returns:
        None. Exits with status 1 when any ticket or action failed.

    Example:
        $ tickler run --repo octo/tasks --dry-run
    """
    overrides = {
        "repository": getattr(args, "repo", None),
        "dry_run": True if getattr(args, "dry_run", False) else None,
        "search": getattr(args, "search", None),
        "limit": getattr(args, "limit", None),
    }
    try:
        settings = config.load_config(
            config_path=getattr(args, "config", None), overrides=overrides
        )
    except ConfigError as exc:
        die(str(exc))
    if not settings.repository:
        die("no repository configured; pass --repo or set GITHUB_REPOSITORY")

    raw_now = getattr(args, "now", None)
    try:
        now = clock.parse_timestamp(raw_now) if raw_now else clock.utc_now()
    except ValueError as exc:
        die(f"invalid --now value {raw_now!r}: {exc}")

    tracker: TicketTracker = GithubIssuesTracker(
        repo=settings.repository, token=settings.github_token
    )
    if settings.dry_run:
        log.info("Dry run: no changes will be made")
        tracker = DryRunTracker(inner=tracker)

    try:
        tickets = tracker.list_open_tickets(
            TicketQuery(search=settings.search, limit=settings.limit)
        )
    except TicketListError as exc:
        die(str(exc))

    report = run_engine(
        tracker,
        tickets,
        now,
        options=EngineOptions(
            todo_label=settings.todo_label,
            due_label=settings.due_label,
            legacy_directives=settings.legacy_directives,
        ),
    )
    summary = log.fields(
        tickets=report.tickets_seen,
        actions=report.actions_dispatched,
        created=len(report.created_ids),
        failures=len(report.failures),
    )
    if not report.ok:
        die(f"run finished with failures: {summary}")
    log.success(f"Run complete: {summary}")
