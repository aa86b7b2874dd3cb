# ruff: noqa: E402

from __future__ import annotations

import datetime as dt
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from tickler.errors import ActionFailedError
from tickler.tickets import Ticket, TicketQuery

UTC = dt.timezone.utc


def utc(*args: int) -> dt.datetime:
    return dt.datetime(*args, tzinfo=UTC)


def make_ticket(
    body: str,
    *,
    ticket_id: str = "42",
    title: str = "Weekly sync",
    created_at: dt.datetime | None = None,
    updated_at: dt.datetime | None = None,
    labels: Sequence[str] = (),
) -> Ticket:
    created = created_at or utc(2024, 1, 1)
    return Ticket(
        ticket_id=ticket_id,
        title=title,
        body=body,
        created_at=created,
        updated_at=updated_at or created,
        labels=frozenset(labels),
    )


@dataclass
class FakeTracker:
    """In-memory tracker recording every call."""

    tickets: list[Ticket] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    created: list[tuple[str, str, tuple[str, ...]]] = field(default_factory=list)
    labeled: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    comments: list[tuple[str, str]] = field(default_factory=list)
    queries: list[TicketQuery] = field(default_factory=list)
    next_id: int = 100

    def list_open_tickets(self, query: TicketQuery) -> Sequence[Ticket]:
        self.queries.append(query)
        return list(self.tickets)

    def create_ticket(self, title: str, body: str, labels: Sequence[str]) -> str:
        if "create" in self.fail_on:
            raise ActionFailedError("create failed")
        self.created.append((title, body, tuple(labels)))
        self.next_id += 1
        return str(self.next_id)

    def add_labels(self, ticket_id: str, labels: Sequence[str]) -> None:
        if "labels" in self.fail_on:
            raise ActionFailedError("labels failed")
        self.labeled.append((ticket_id, tuple(labels)))

    def post_comment(self, ticket_id: str, text: str) -> None:
        if "comment" in self.fail_on:
            raise ActionFailedError("comment failed")
        self.comments.append((ticket_id, text))
