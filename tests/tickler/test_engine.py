from __future__ import annotations

import datetime as dt

from tests.tickler.helpers import FakeTracker, make_ticket, utc
from tickler.engine import EngineOptions, plan_ticket, run_engine
from tickler.errors import ActionFailedError, InvalidDateError, InvalidRuleError
from tickler.recurrence import CloneNow, NotYet
from tickler.tickets import AddLabels, CreateTicket, PostComment
from tickler.trackers import DryRunTracker

NOW = utc(2024, 1, 8, 10, 0)


def test_weekly_recurring_ticket_is_cloned() -> None:
    ticket = make_ticket(
        "Weekly sync\n---\nrrule: FREQ=WEEKLY\nlabels: chore, sync",
        created_at=NOW - dt.timedelta(days=7),
    )

    plan = plan_ticket(ticket, NOW)

    assert isinstance(plan.recurrence, CloneNow)
    assert plan.actions == (
        CreateTicket(
            title="Weekly sync",
            body="Weekly sync\n\nCloned from #42\n",
            labels=("chore", "sync"),
            source_id="42",
        ),
    )
    assert plan.errors == ()


def test_recurring_ticket_not_due_yet() -> None:
    created = NOW - dt.timedelta(days=3)
    ticket = make_ticket("Sync\n---\nrrule: FREQ=WEEKLY", created_at=created)

    plan = plan_ticket(ticket, NOW)

    assert plan.recurrence == NotYet(next_occurrence=created + dt.timedelta(days=7))
    assert plan.actions == ()


def test_overdue_ticket_gets_labels_and_comment() -> None:
    ticket = make_ticket(
        "Renew certificate\n---\ndue: 2024-01-01",
        created_at=utc(2023, 12, 1),
        updated_at=utc(2024, 1, 1),
    )

    plan = plan_ticket(ticket, utc(2024, 1, 8))

    assert plan.actions == (
        AddLabels(ticket_id="42", labels=("todo", "due")),
        PostComment(ticket_id="42", text="This issue is overdue by 7 days."),
    )


def test_ticket_without_directives_is_a_noop() -> None:
    plan = plan_ticket(make_ticket("Just a bug report.\n"), NOW)

    assert plan.actions == ()
    assert plan.errors == ()
    assert plan.recurrence is None
    assert plan.notification is None


def test_invalid_rule_only_skips_recurrence_path() -> None:
    ticket = make_ticket(
        "Body\n---\nrrule: FREQ=NEVER\ndue: 2024-01-09",
        created_at=utc(2024, 1, 1),
        updated_at=utc(2024, 1, 1),
    )

    plan = plan_ticket(ticket, NOW)

    assert len(plan.errors) == 1
    assert isinstance(plan.errors[0], InvalidRuleError)
    assert plan.recurrence is None
    assert AddLabels(ticket_id="42", labels=("todo", "due")) in plan.actions


def test_invalid_due_date_only_skips_due_path() -> None:
    ticket = make_ticket(
        "Body\n---\nrrule: FREQ=DAILY\ndue: someday",
        created_at=utc(2024, 1, 1, 10, 0),
    )

    plan = plan_ticket(ticket, NOW)

    assert len(plan.errors) == 1
    assert isinstance(plan.errors[0], InvalidDateError)
    assert isinstance(plan.actions[0], CreateTicket)


def test_legacy_directives_option() -> None:
    ticket = make_ticket("Water plants\nDue: 2024-01-09\n")

    plain = plan_ticket(ticket, NOW)
    legacy = plan_ticket(ticket, NOW, options=EngineOptions(legacy_directives=True))

    assert plain.actions == ()
    assert legacy.notification is not None
    assert legacy.notification.due_in_days == 1


def test_run_engine_dispatches_actions() -> None:
    tickets = [
        make_ticket(
            "Weekly sync\n---\nrrule: FREQ=WEEKLY\nlabels: chore",
            ticket_id="1",
            created_at=NOW - dt.timedelta(days=14),
        ),
        make_ticket("No directives", ticket_id="2"),
        make_ticket(
            "Taxes\n---\ndue: 2024-01-08",
            ticket_id="3",
            title="Taxes",
            created_at=utc(2023, 12, 1),
            updated_at=utc(2024, 1, 2),
        ),
    ]
    tracker = FakeTracker()

    report = run_engine(tracker, tickets, NOW)

    assert report.ok
    assert report.exit_code == 0
    assert report.tickets_seen == 3
    assert report.actions_dispatched == 3
    assert report.created_ids == ["101"]
    assert tracker.created == [("Weekly sync", "Weekly sync\n\nCloned from #1\n", ("chore",))]
    assert tracker.labeled == [("3", ("todo", "due"))]
    assert tracker.comments == [("3", "This issue is due today.")]


def test_action_failures_are_recorded_and_do_not_stop_the_run() -> None:
    tickets = [
        make_ticket("A\n---\ndue: 2024-01-08", ticket_id="1", updated_at=utc(2024, 1, 1)),
        make_ticket("B\n---\ndue: 2024-01-08", ticket_id="2", updated_at=utc(2024, 1, 1)),
    ]
    tracker = FakeTracker(fail_on={"labels"})

    report = run_engine(tracker, tickets, NOW)

    assert not report.ok
    assert report.exit_code == 1
    assert [failure.ticket_id for failure in report.failures] == ["1", "2"]
    assert all(isinstance(failure.error, ActionFailedError) for failure in report.failures)
    assert tracker.comments == [
        ("1", "This issue is due today."),
        ("2", "This issue is due today."),
    ]


def test_directive_errors_fail_the_run() -> None:
    tracker = FakeTracker()

    report = run_engine(tracker, [make_ticket("x\n---\ndue: soon")], NOW)

    assert report.exit_code == 1
    assert isinstance(report.failures[0].error, InvalidDateError)


def test_dry_run_tracker_dispatches_nothing(capsys) -> None:
    ticket = make_ticket(
        "Weekly sync\n---\nrrule: FREQ=WEEKLY",
        created_at=NOW - dt.timedelta(days=7),
    )

    report = run_engine(DryRunTracker(), [ticket], NOW)

    output = capsys.readouterr().out
    assert report.ok
    assert report.created_ids == ["dry-run"]
    assert "Would create ticket" in output


def test_evaluation_is_repeatable() -> None:
    ticket = make_ticket(
        "Report\n---\nrrule: FREQ=DAILY\ndue: 2024-01-09",
        created_at=utc(2024, 1, 1, 9, 0),
    )

    assert plan_ticket(ticket, NOW) == plan_ticket(ticket, NOW)


def test_template_runtime_error_does_not_stop_the_run() -> None:
    tickets = [
        make_ticket(
            "Ratio {{ 1 / 0 }}\n---\nrrule: FREQ=WEEKLY",
            ticket_id="1",
            title="Totals {{ range(10**9) | list | length }}",
            created_at=NOW - dt.timedelta(days=7),
        ),
        make_ticket(
            "Taxes\n---\ndue: 2024-01-08",
            ticket_id="2",
            created_at=utc(2023, 12, 1),
            updated_at=utc(2024, 1, 2),
        ),
    ]
    tracker = FakeTracker()

    report = run_engine(tracker, tickets, NOW)

    assert report.ok
    assert tracker.created == [
        (
            "Totals {{ range(10**9) | list | length }}",
            "Ratio {{ 1 / 0 }}\n\nCloned from #1\n",
            (),
        )
    ]
    assert tracker.comments == [("2", "This issue is due today.")]


def test_zero_interval_rule_is_rejected_and_due_path_still_runs() -> None:
    ticket = make_ticket(
        "Body\n---\nrrule: FREQ=DAILY;INTERVAL=0\ndue: 2024-01-09",
        created_at=utc(2024, 1, 1),
        updated_at=utc(2024, 1, 1),
    )

    plan = plan_ticket(ticket, NOW)

    assert len(plan.errors) == 1
    assert isinstance(plan.errors[0], InvalidRuleError)
    assert plan.recurrence is None
    assert plan.actions == (
        AddLabels(ticket_id="42", labels=("todo", "due")),
        PostComment(ticket_id="42", text="This issue is due in 1 day."),
    )
