"""Ticket snapshots and the actions the engine emits for a tracker."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Ticket:
    """Read-only snapshot of a tracker ticket.

    Fields:
        ticket_id: Tracker identifier (GitHub issue number as text).
        title: Ticket title.
        body: Free-text body, possibly ending in a directive block.
        created_at: Creation time; anchors recurrence rules.
        updated_at: Last update time; never earlier than ``created_at``.
        labels: Current label names.
        url: Optional web URL.
    """

    ticket_id: str
    title: str
    body: str
    created_at: dt.datetime
    updated_at: dt.datetime
    labels: frozenset[str] = field(default_factory=frozenset)
    url: str | None = None


@dataclass(frozen=True)
class TicketQuery:
    """Filter handed to the tracker when listing open tickets."""

    search: str | None = None
    limit: int | None = None


@dataclass(frozen=True)
class CreateTicket:
    """Create a new occurrence of a recurring ticket."""

    title: str
    body: str
    labels: tuple[str, ...] = ()
    source_id: str | None = None

    def describe(self) -> str:
        return f"create ticket {self.title!r} labels={list(self.labels)}"


@dataclass(frozen=True)
class AddLabels:
    ticket_id: str
    labels: tuple[str, ...]

    def describe(self) -> str:
        return f"add labels {list(self.labels)} to #{self.ticket_id}"


@dataclass(frozen=True)
class PostComment:
    ticket_id: str
    text: str

    def describe(self) -> str:
        return f"comment on #{self.ticket_id}: {self.text}"


Action = Union[CreateTicket, AddLabels, PostComment]
