"""Tracker contract consumed by the engine, plus the dry-run pass-through.

Example:
    class LinearTracker(TicketTracker):
        def list_open_tickets(self, query: TicketQuery) -> Sequence[Ticket]:
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from . import log
from .tickets import Action, AddLabels, CreateTicket, PostComment, Ticket, TicketQuery

DRY_RUN_TICKET_ID = "dry-run"


class TicketTracker(Protocol):
    """Operations a tracker must provide for the engine."""

    def list_open_tickets(self, query: TicketQuery) -> Sequence[Ticket]:
        """Return open tickets matching ``query``."""
        ...

    def create_ticket(self, title: str, body: str, labels: Sequence[str]) -> str:
        """Create a ticket and return its id."""
        ...

    def add_labels(self, ticket_id: str, labels: Sequence[str]) -> None:
        """Add labels to an existing ticket."""
        ...

    def post_comment(self, ticket_id: str, text: str) -> None:
        """Comment on an existing ticket."""
        ...


def dispatch(tracker: TicketTracker, action: Action) -> str | None:
    """Execute one action against ``tracker``; returns the new id for creates."""
    if isinstance(action, CreateTicket):
        return tracker.create_ticket(action.title, action.body, action.labels)
    if isinstance(action, AddLabels):
        tracker.add_labels(action.ticket_id, action.labels)
        return None
    if isinstance(action, PostComment):
        tracker.post_comment(action.ticket_id, action.text)
        return None
    raise TypeError(f"unsupported action: {action!r}")


@dataclass(frozen=True)
class DryRunTracker:
    """Lists through ``inner`` but only logs mutations."""

    inner: TicketTracker | None = None

    def list_open_tickets(self, query: TicketQuery) -> Sequence[Ticket]:
        if self.inner is None:
            return []
        return self.inner.list_open_tickets(query)

    def create_ticket(self, title: str, body: str, labels: Sequence[str]) -> str:
        log.info(
            "Would create ticket "
            + log.fields(title=repr(title), labels=list(labels), body=repr(body))
        )
        return DRY_RUN_TICKET_ID

    def add_labels(self, ticket_id: str, labels: Sequence[str]) -> None:
        log.info(f"Would add labels to #{ticket_id} " + log.fields(labels=list(labels)))

    def post_comment(self, ticket_id: str, text: str) -> None:
        log.info(f"Would comment on #{ticket_id} " + log.fields(text=repr(text)))
