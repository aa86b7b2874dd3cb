"""Implementation for the ``tickler explain`` command."""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

from .. import clock
from ..engine import EngineOptions, RunReport, execute_plan, plan_ticket
from ..io import die, say
from ..recurrence import CloneNow
from ..tickets import Ticket
from ..trackers import DryRunTracker

EXPLAIN_TICKET_ID = "0"


def _read_body(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        die(f"reading {path}: {exc}")


def _timestamp(value: str | None, default: dt.datetime, name: str) -> dt.datetime:
    if not value:
        return default
    try:
        return clock.parse_timestamp(value)
    except ValueError as exc:
        die(f"invalid {name} value {value!r}: {exc}")


def explain_ticket(args: object) -> None:
    """Show what a run would do for a single ticket body, without a tracker.

    Example:
        $ printf 'Pay rent\\n---\\ndue: 2024-02-01\\n' | tickler explain - --now 2024-01-31
    """
    body = _read_body(getattr(args, "body_file", "-"))
    now = _timestamp(getattr(args, "now", None), clock.utc_now(), "--now")
    created = _timestamp(getattr(args, "created", None), now, "--created")
    updated = _timestamp(getattr(args, "updated", None), created, "--updated")
    ticket = Ticket(
        ticket_id=EXPLAIN_TICKET_ID,
        title=getattr(args, "title", None) or "(untitled)",
        body=body,
        created_at=created,
        updated_at=updated,
        labels=frozenset(getattr(args, "labels", None) or ()),
    )
    plan = plan_ticket(
        ticket,
        now,
        options=EngineOptions(legacy_directives=bool(getattr(args, "legacy", False))),
    )

    if not plan.directives:
        say("No directives found.")
    for key, value in plan.directives.values.items():
        say(f"{key}: {value}")

    if plan.recurrence is not None:
        if isinstance(plan.recurrence, CloneNow):
            say(f"recurrence: clone now (occurrence {plan.recurrence.occurrence.isoformat()})")
        elif plan.recurrence.exhausted:
            say("recurrence: exhausted")
        else:
            say(f"recurrence: next occurrence {plan.recurrence.next_occurrence.isoformat()}")
    if plan.notification is not None:
        say(f"due in days: {plan.notification.due_in_days}")

    report = RunReport(tickets_seen=1)
    execute_plan(DryRunTracker(), plan, report)
    if not plan.actions:
        say("No actions.")
    if not report.ok:
        for failure in report.failures:
            say(f"error: {failure.error}")
        sys.exit(1)
