"""Per-ticket evaluation and action dispatch.

``plan_ticket`` is pure: it turns one ticket snapshot and an injected clock
into a list of actions plus any directive errors. ``run_engine`` walks the
tickets in order, dispatching each plan through a tracker and isolating
failures so one bad ticket never stops the rest.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable

from . import log
from .directives import DirectiveSet, extract_directives
from .due import DEFAULT_DUE_LABEL, DEFAULT_TODO_LABEL, NotificationDecision, evaluate_due
from .errors import ActionFailedError, InvalidDateError, InvalidRuleError, TicklerError
from .recurrence import CloneNow, RecurrenceDecision, RuleEngine, evaluate_recurrence
from .templating import append_provenance, render_occurrence
from .tickets import Action, AddLabels, CreateTicket, PostComment, Ticket
from .trackers import TicketTracker, dispatch


@dataclass(frozen=True)
class EngineOptions:
    todo_label: str = DEFAULT_TODO_LABEL
    due_label: str = DEFAULT_DUE_LABEL
    legacy_directives: bool = False
    rule_engine: RuleEngine | None = None


@dataclass(frozen=True)
class TicketPlan:
    """Decisions and actions for one ticket."""

    ticket: Ticket
    directives: DirectiveSet
    actions: tuple[Action, ...] = ()
    errors: tuple[TicklerError, ...] = ()
    recurrence: RecurrenceDecision | None = None
    notification: NotificationDecision | None = None


@dataclass(frozen=True)
class TicketFailure:
    ticket_id: str
    error: TicklerError


@dataclass
class RunReport:
    """Aggregate outcome of a run."""

    tickets_seen: int = 0
    actions_dispatched: int = 0
    created_ids: list[str] = field(default_factory=list)
    failures: list[TicketFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def _label(ticket: Ticket) -> str:
    return f"#{ticket.ticket_id} {ticket.title!r}"


def _plan_recurrence(
    ticket: Ticket,
    directives: DirectiveSet,
    rule_text: str,
    now: dt.datetime,
    options: EngineOptions,
) -> tuple[RecurrenceDecision, list[Action]]:
    decision = evaluate_recurrence(
        rule_text, ticket.created_at, now, engine=options.rule_engine
    )
    if not isinstance(decision, CloneNow):
        if decision.exhausted:
            log.info(f"Recurrence exhausted for {_label(ticket)}")
        else:
            log.info(
                f"Next occurrence for {_label(ticket)} "
                + log.fields(time=decision.next_occurrence.isoformat())
            )
        return decision, []

    log.info(
        f"Cloning recurring ticket {_label(ticket)} "
        + log.fields(occurrence=decision.occurrence.isoformat())
    )
    rendered = render_occurrence(ticket, directives, now, occurrence=decision.occurrence)
    action = CreateTicket(
        title=rendered.title,
        body=append_provenance(rendered.body, ticket.ticket_id),
        labels=rendered.labels,
        source_id=ticket.ticket_id,
    )
    return decision, [action]


def _plan_due(
    ticket: Ticket,
    due_text: str,
    now: dt.datetime,
    options: EngineOptions,
) -> tuple[NotificationDecision, list[Action]]:
    decision = evaluate_due(
        due_text,
        now,
        ticket.updated_at,
        ticket.labels,
        todo_label=options.todo_label,
        due_label=options.due_label,
    )
    log.debug(
        f"Due date for {_label(ticket)} " + log.fields(due=due_text, days=decision.due_in_days)
    )
    actions: list[Action] = []
    if decision.labels_to_add:
        log.info(
            f"Setting labels on {_label(ticket)} "
            + log.fields(labels=list(decision.labels_to_add))
        )
        actions.append(AddLabels(ticket_id=ticket.ticket_id, labels=decision.labels_to_add))
    if decision.comment is not None:
        log.info(f"Commenting on {_label(ticket)}: {decision.comment}")
        actions.append(PostComment(ticket_id=ticket.ticket_id, text=decision.comment))
    return decision, actions


def plan_ticket(
    ticket: Ticket,
    now: dt.datetime,
    *,
    options: EngineOptions | None = None,
) -> TicketPlan:
    """Evaluate one ticket without performing any I/O on the tracker.

    The recurrence and due-date paths run independently; an invalid ``rrule``
    or ``due`` directive is recorded in ``errors`` and only skips its own path.
    """
    active = options or EngineOptions()
    directives = extract_directives(ticket.body, legacy=active.legacy_directives)
    actions: list[Action] = []
    errors: list[TicklerError] = []
    recurrence: RecurrenceDecision | None = None
    notification: NotificationDecision | None = None

    rule_text = directives.rrule
    if rule_text is not None:
        try:
            recurrence, recurrence_actions = _plan_recurrence(
                ticket, directives, rule_text, now, active
            )
            actions.extend(recurrence_actions)
        except InvalidRuleError as exc:
            log.error(f"Processing recurring ticket {_label(ticket)}: {exc}")
            errors.append(exc)

    due_text = directives.due
    if due_text is not None:
        try:
            notification, due_actions = _plan_due(ticket, due_text, now, active)
            actions.extend(due_actions)
        except InvalidDateError as exc:
            log.error(f"Processing due ticket {_label(ticket)}: {exc}")
            errors.append(exc)

    return TicketPlan(
        ticket=ticket,
        directives=directives,
        actions=tuple(actions),
        errors=tuple(errors),
        recurrence=recurrence,
        notification=notification,
    )


def execute_plan(tracker: TicketTracker, plan: TicketPlan, report: RunReport) -> None:
    """Dispatch a plan's actions, recording failures without stopping."""
    for error in plan.errors:
        report.failures.append(TicketFailure(ticket_id=plan.ticket.ticket_id, error=error))
    for action in plan.actions:
        try:
            created_id = dispatch(tracker, action)
        except ActionFailedError as exc:
            log.error(f"Failed to {action.describe()}: {exc}")
            report.failures.append(TicketFailure(ticket_id=plan.ticket.ticket_id, error=exc))
            continue
        report.actions_dispatched += 1
        if created_id is not None:
            log.success(f"Created #{created_id} from #{plan.ticket.ticket_id}")
            report.created_ids.append(created_id)


def run_engine(
    tracker: TicketTracker,
    tickets: Iterable[Ticket],
    now: dt.datetime,
    *,
    options: EngineOptions | None = None,
) -> RunReport:
    """Evaluate ``tickets`` in order and dispatch their actions via ``tracker``."""
    report = RunReport()
    for ticket in tickets:
        report.tickets_seen += 1
        log.info(f"Considering ticket {_label(ticket)}")
        plan = plan_ticket(ticket, now, options=options)
        execute_plan(tracker, plan, report)
    return report
