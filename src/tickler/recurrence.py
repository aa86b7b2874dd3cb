"""Recurrence decisions for tickets carrying an ``rrule`` directive.

The rule is always anchored at the ticket's creation time. A ticket is cloned
when the latest occurrence at or before ``now`` lies within the trailing clone
window (24 hours), which assumes the engine runs at least once a day.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Protocol, Union

from dateutil.rrule import rrule, rruleset, rrulestr

from .errors import InvalidRuleError

CLONE_WINDOW = dt.timedelta(hours=24)

_INTERVAL_PATTERN = re.compile(r"(?:^|[;:\s])INTERVAL=([+-]?\d+)", re.IGNORECASE)


class RuleSchedule(Protocol):
    """Occurrence queries over a parsed, anchored rule."""

    def latest_at_or_before(self, when: dt.datetime) -> dt.datetime | None: ...

    def earliest_after(self, when: dt.datetime) -> dt.datetime | None: ...


class RuleEngine(Protocol):
    """Parses rule text into an anchored schedule."""

    def parse(self, rule_text: str, anchor: dt.datetime) -> RuleSchedule: ...


@dataclass(frozen=True)
class CloneNow:
    """A new occurrence is due; ``occurrence`` is the instant that fired."""

    occurrence: dt.datetime


@dataclass(frozen=True)
class NotYet:
    """No clone this run. ``next_occurrence`` is ``None`` once the rule is exhausted."""

    next_occurrence: dt.datetime | None

    @property
    def exhausted(self) -> bool:
        return self.next_occurrence is None


RecurrenceDecision = Union[CloneNow, NotYet]


@dataclass(frozen=True)
class DateutilSchedule:
    rule: rrule | rruleset

    def latest_at_or_before(self, when: dt.datetime) -> dt.datetime | None:
        return self.rule.before(when, inc=True)

    def earliest_after(self, when: dt.datetime) -> dt.datetime | None:
        return self.rule.after(when, inc=False)


class DateutilRuleEngine:
    """``RuleEngine`` backed by ``dateutil.rrule``."""

    def parse(self, rule_text: str, anchor: dt.datetime) -> DateutilSchedule:
        text = _strip_dtstart(rule_text)
        if not text:
            raise InvalidRuleError("invalid rrule: empty rule")
        if any(int(match.group(1)) < 1 for match in _INTERVAL_PATTERN.finditer(text)):
            raise InvalidRuleError(
                f"invalid rrule {rule_text!r}: INTERVAL must be at least 1",
                recovery_hint="use RFC 5545 syntax, e.g. FREQ=WEEKLY;INTERVAL=2",
            )
        try:
            rule = rrulestr(text, dtstart=anchor)
        except (ValueError, KeyError, TypeError) as exc:
            raise InvalidRuleError(
                f"invalid rrule {rule_text!r}: {exc}",
                recovery_hint="use RFC 5545 syntax, e.g. FREQ=WEEKLY;BYDAY=MO",
            ) from exc
        return DateutilSchedule(rule=rule)


DEFAULT_RULE_ENGINE = DateutilRuleEngine()


def _strip_dtstart(rule_text: str) -> str:
    lines = [line.strip() for line in rule_text.replace("\r\n", "\n").split("\n")]
    kept = [line for line in lines if line and not line.upper().startswith("DTSTART")]
    return "\n".join(kept)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def evaluate_recurrence(
    rule_text: str,
    anchor: dt.datetime,
    now: dt.datetime,
    *,
    engine: RuleEngine | None = None,
) -> RecurrenceDecision:
    """Decide whether a recurring ticket should be cloned at ``now``.

    Args:
        rule_text: Recurrence rule, with or without an ``RRULE:`` prefix.
        anchor: Rule start; overrides any ``DTSTART`` in ``rule_text``.
        now: Evaluation instant.
        engine: Rule engine to use; defaults to dateutil.

    Returns:
        ``CloneNow`` when the latest occurrence at or before ``now`` is at most
        24 hours old, otherwise ``NotYet`` with the next occurrence after
        ``now`` (or ``None`` when no occurrences remain).

    Raises:
        InvalidRuleError: ``rule_text`` is not a valid recurrence rule.
    """
    active_engine = engine or DEFAULT_RULE_ENGINE
    anchor_utc = _as_utc(anchor)
    now_utc = _as_utc(now)
    schedule = active_engine.parse(rule_text, anchor_utc)
    try:
        latest = schedule.latest_at_or_before(now_utc)
        if latest is not None and now_utc - latest <= CLONE_WINDOW:
            return CloneNow(occurrence=latest)
        return NotYet(next_occurrence=schedule.earliest_after(now_utc))
    except (ValueError, TypeError) as exc:
        raise InvalidRuleError(f"invalid rrule {rule_text!r}: {exc}") from exc
