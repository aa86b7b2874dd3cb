"""Time helpers; the engine itself never reads the wall clock."""

from __future__ import annotations

import datetime as dt

from dateutil.parser import isoparse


def utc_now() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc).replace(microsecond=0)


def parse_timestamp(value: str) -> dt.datetime:
    """Parse an ISO-8601 timestamp or date, assuming UTC when no offset is given.

    Example:
        >>> parse_timestamp("2024-01-08").isoformat()
        '2024-01-08T00:00:00+00:00'
        >>> parse_timestamp("2024-01-08T09:30:00+02:00").isoformat()
        '2024-01-08T07:30:00+00:00'
    """
    parsed = isoparse(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)
