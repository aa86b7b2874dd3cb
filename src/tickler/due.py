"""Due-date labeling and reminder comments.

Labels are only ever added. Comments are debounced without any notification
history: the ticket's last update stands in for "already nudged", and the
staleness needed before another nudge shrinks as the due date approaches.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import AbstractSet

from .errors import InvalidDateError

DUE_DATE_FORMAT = "%Y-%m-%d"
DEFAULT_TODO_LABEL = "todo"
DEFAULT_DUE_LABEL = "due"

TODO_WITHIN_DAYS = 7
DUE_WITHIN_DAYS = 1
OVERDUE_AFTER = dt.timedelta(days=1)

# (minimum staleness, maximum days until due) pairs for upcoming reminders.
UPCOMING_REMINDER_POLICY: tuple[tuple[dt.timedelta, int], ...] = (
    (dt.timedelta(days=30), 7),
    (dt.timedelta(days=7), 2),
    (dt.timedelta(hours=24), 1),
)


@dataclass(frozen=True)
class NotificationDecision:
    """Labels to add and an optional comment. Both empty means do nothing."""

    labels_to_add: tuple[str, ...] = ()
    comment: str | None = None
    due_in_days: int | None = None

    @property
    def is_noop(self) -> bool:
        return not self.labels_to_add and self.comment is None


def parse_due_date(value: str) -> dt.datetime:
    """Parse ``YYYY-MM-DD`` into midnight UTC of that date.

    Raises:
        InvalidDateError: ``value`` is not a calendar date in that format.
    """
    try:
        parsed = dt.datetime.strptime(value.strip(), DUE_DATE_FORMAT)
    except ValueError as exc:
        raise InvalidDateError(
            f"invalid due date {value!r}: {exc}",
            recovery_hint="use YYYY-MM-DD, e.g. due: 2024-01-31",
        ) from exc
    return parsed.replace(tzinfo=dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def due_in_days(due: dt.datetime, now: dt.datetime) -> int:
    """Whole days from the UTC date of ``now`` until ``due``.

    Zero means due today, negative means overdue.

    Example:
        >>> due = parse_due_date("2024-01-01")
        >>> due_in_days(due, dt.datetime(2024, 1, 8, 15, 30, tzinfo=dt.timezone.utc))
        -7
    """
    today = _as_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return (_as_utc(due) - today) // dt.timedelta(days=1)


def _days(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def overdue_comment(days: int) -> str:
    return f"This issue is overdue by {_days(days)}."


def due_today_comment() -> str:
    return "This issue is due today."


def upcoming_comment(days: int) -> str:
    return f"This issue is due in {_days(days)}."


def evaluate_due(
    due: str | dt.datetime,
    now: dt.datetime,
    last_update: dt.datetime,
    current_labels: AbstractSet[str],
    *,
    todo_label: str = DEFAULT_TODO_LABEL,
    due_label: str = DEFAULT_DUE_LABEL,
) -> NotificationDecision:
    """Decide which labels to add and whether to comment.

    Args:
        due: Due date as ``YYYY-MM-DD`` text or a parsed UTC midnight.
        now: Evaluation instant.
        last_update: When the ticket was last updated.
        current_labels: Labels already on the ticket.
        todo_label: Label applied within a week of the due date.
        due_label: Label applied within a day of the due date.

    Raises:
        InvalidDateError: ``due`` text is not a valid date.
    """
    due_at = parse_due_date(due) if isinstance(due, str) else _as_utc(due)
    now_utc = _as_utc(now)
    updated = _as_utc(last_update)
    days = due_in_days(due_at, now_utc)

    labels: list[str] = []
    if days <= TODO_WITHIN_DAYS and todo_label not in current_labels:
        labels.append(todo_label)
    if days <= DUE_WITHIN_DAYS and due_label not in current_labels and due_label not in labels:
        labels.append(due_label)

    comment: str | None = None
    if days < 0:
        # Overdue starts once the due date has fully passed.
        if updated < due_at + OVERDUE_AFTER:
            comment = overdue_comment(-days)
    elif days == 0:
        if updated < due_at:
            comment = due_today_comment()
    else:
        staleness = now_utc - updated
        if any(
            staleness >= min_staleness and days <= max_days
            for min_staleness, max_days in UPCOMING_REMINDER_POLICY
        ):
            comment = upcoming_comment(days)

    return NotificationDecision(labels_to_add=tuple(labels), comment=comment, due_in_days=days)
