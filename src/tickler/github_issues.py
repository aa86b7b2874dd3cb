"""GitHub Issues tracker implemented on top of the gh CLI."""

from __future__ import annotations

import datetime as dt
import json
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterator, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import exec as exec_util
from .errors import ActionFailedError, TicketListError
from .tickets import Ticket, TicketQuery

ISSUE_LIST_FIELDS = "number,title,body,labels,createdAt,updatedAt,url"
DEFAULT_LIST_LIMIT = 100


class LabelPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class IssuePayload(BaseModel):
    """Issue fields returned by ``gh issue list --json``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    number: int
    title: str = ""
    body: str = ""
    labels: list[LabelPayload] = Field(default_factory=list)
    created_at: dt.datetime = Field(alias="createdAt")
    updated_at: dt.datetime = Field(alias="updatedAt")
    url: str | None = None

    @field_validator("body", "title", mode="before")
    @classmethod
    def normalize_text(cls, value: object) -> object:
        if value is None:
            return ""
        return value

    def to_ticket(self) -> Ticket:
        return Ticket(
            ticket_id=str(self.number),
            title=self.title,
            body=self.body,
            created_at=self.created_at,
            updated_at=self.updated_at,
            labels=frozenset(label.name for label in self.labels if label.name),
            url=self.url,
        )


class CreatedIssuePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int


@dataclass(frozen=True)
class GithubIssuesTracker:
    """``TicketTracker`` for a single ``owner/repo`` via gh."""

    repo: str
    token: str | None = None
    runner: exec_util.CommandRunner | None = None

    def list_open_tickets(self, query: TicketQuery) -> Sequence[Ticket]:
        argv = [
            "gh",
            "issue",
            "list",
            "--repo",
            self.repo,
            "--state",
            "open",
            "--json",
            ISSUE_LIST_FIELDS,
            "--limit",
            str(query.limit or DEFAULT_LIST_LIMIT),
        ]
        if query.search:
            argv.extend(["--search", query.search])
        spec = exec_util.CommandSpec(
            request=self._request(argv),
            parser=lambda result: exec_util.parse_json_model_list(
                result, model_type=IssuePayload, context="gh issue list"
            ),
            context="gh issue list",
        )
        try:
            payloads = exec_util.run_typed(spec, runner=self.runner)
        except (exec_util.CommandExecutionError, exec_util.CommandParseError) as exc:
            raise TicketListError(
                f"listing issues for {self.repo}: {exc}",
                recovery_hint="check that gh is installed and authenticated",
            ) from exc
        return [payload.to_ticket() for payload in payloads]

    def create_ticket(self, title: str, body: str, labels: Sequence[str]) -> str:
        payload: dict[str, object] = {"title": title, "body": body}
        if labels:
            payload["labels"] = list(labels)
        with _temporary_text_file(json.dumps(payload), f"creating issue {title!r}") as payload_file:
            argv = [
                "gh",
                "api",
                "-X",
                "POST",
                f"repos/{self.repo}/issues",
                "--input",
                str(payload_file),
            ]
            spec = exec_util.CommandSpec(
                request=self._request(argv),
                parser=lambda result: exec_util.parse_json_model(
                    result, model_type=CreatedIssuePayload, context="gh api create issue"
                ),
                context="gh api create issue",
            )
            try:
                created = exec_util.run_typed(spec, runner=self.runner)
            except (exec_util.CommandExecutionError, exec_util.CommandParseError) as exc:
                raise ActionFailedError(f"creating issue {title!r}: {exc}") from exc
        return str(created.number)

    def add_labels(self, ticket_id: str, labels: Sequence[str]) -> None:
        if not labels:
            return
        argv = [
            "gh",
            "issue",
            "edit",
            str(ticket_id),
            "--repo",
            self.repo,
            "--add-label",
            ",".join(labels),
        ]
        try:
            exec_util.run_checked(self._request(argv), runner=self.runner)
        except exec_util.CommandExecutionError as exc:
            raise ActionFailedError(f"adding labels to #{ticket_id}: {exc}") from exc

    def post_comment(self, ticket_id: str, text: str) -> None:
        with _temporary_text_file(text, f"commenting on #{ticket_id}") as body_file:
            argv = [
                "gh",
                "issue",
                "comment",
                str(ticket_id),
                "--repo",
                self.repo,
                "--body-file",
                str(body_file),
            ]
            try:
                exec_util.run_checked(self._request(argv), runner=self.runner)
            except exec_util.CommandExecutionError as exc:
                raise ActionFailedError(f"commenting on #{ticket_id}: {exc}") from exc

    def _request(self, argv: list[str]) -> exec_util.CommandRequest:
        env = None
        if self.token:
            env = {**os.environ, "GH_TOKEN": self.token}
        return exec_util.CommandRequest(argv=tuple(argv), env=env)


@contextmanager
def _temporary_text_file(content: str, action: str) -> Iterator[Path]:
    try:
        with NamedTemporaryFile("w", encoding="utf-8", delete=False) as handle:
            handle.write(content)
            temp_path = Path(handle.name)
    except OSError as exc:
        raise ActionFailedError(f"{action}: writing temporary file: {exc}") from exc
    try:
        yield temp_path
    finally:
        temp_path.unlink(missing_ok=True)
