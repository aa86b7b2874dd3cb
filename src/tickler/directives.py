"""Directive extraction from ticket bodies.

A body may end with a block of ``key: value`` lines separated from the prose
by a marker line of two or three hyphens::

    Weekly sync with the team.

    ---
    rrule: FREQ=WEEKLY;BYDAY=MO
    labels: chore, sync

Only the last marker line counts, so earlier horizontal rules in the prose
are left alone.

Example:
    >>> directives = extract_directives("Water plants\\n---\\ndue: 2024-05-01\\n")
    >>> directives.due
    '2024-05-01'
    >>> directives.residual_body
    'Water plants\\n'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

RRULE_KEY = "rrule"
DUE_KEY = "due"
LABELS_KEY = "labels"

MARKER_PATTERN = re.compile(r"^-?--$", re.MULTILINE)
_LEGACY_PREFIXES = (
    ("RRULE:", RRULE_KEY),
    ("Due:", DUE_KEY),
    ("Labels:", LABELS_KEY),
)


@dataclass(frozen=True)
class DirectiveSet:
    """Directives parsed from a ticket body.

    Fields:
        values: Lower-cased directive name to trimmed value. Unknown names are
            kept so newer directives survive older engines.
        residual_body: Body text with the directive block removed.
    """

    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    residual_body: str = ""

    def get(self, key: str) -> str | None:
        return self.values.get(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self.values

    def __bool__(self) -> bool:
        return bool(self.values)

    @property
    def rrule(self) -> str | None:
        return self.get(RRULE_KEY)

    @property
    def due(self) -> str | None:
        return self.get(DUE_KEY)

    @property
    def labels(self) -> tuple[str, ...]:
        return split_labels(self.get(LABELS_KEY))


def split_labels(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated label list, trimming each name."""
    if value is None:
        return ()
    return tuple(label for label in (part.strip() for part in value.split(",")) if label)


def normalize_newlines(body: str) -> str:
    return body.replace("\r\n", "\n")


def extract_directives(body: str, *, legacy: bool = False) -> DirectiveSet:
    """Split ``body`` into directives and the residual prose.

    Args:
        body: Raw ticket body; ``\\r\\n`` line endings are accepted.
        legacy: Also honor ``RRULE:``/``Due:``/``Labels:`` prefix lines when
            the body carries no marker block.

    Returns:
        ``DirectiveSet`` with the parsed values. When no marker line exists
        the residual body is ``body`` unchanged.
    """
    normalized = normalize_newlines(body)
    matches = list(MARKER_PATTERN.finditer(normalized))
    if not matches:
        if legacy:
            return _extract_legacy(body)
        return DirectiveSet(residual_body=body)

    marker = matches[-1]
    values: dict[str, str] = {}
    for line in normalized[marker.end() + 1 :].split("\n"):
        key, sep, value = line.partition(":")
        if not sep:
            continue
        values[key.strip().lower()] = value.strip()
    residual = normalized[: marker.start()].strip() + "\n"
    return DirectiveSet(values=MappingProxyType(values), residual_body=residual)


def _extract_legacy(body: str) -> DirectiveSet:
    normalized = normalize_newlines(body)
    values: dict[str, str] = {}
    kept: list[str] = []
    for line in normalized.split("\n"):
        for prefix, key in _LEGACY_PREFIXES:
            if line.startswith(prefix):
                values[key] = line[len(prefix) :].strip()
                break
        else:
            kept.append(line)
    if not values:
        return DirectiveSet(residual_body=body)
    residual = "\n".join(kept).strip() + "\n"
    return DirectiveSet(values=MappingProxyType(values), residual_body=residual)


def render_directive_block(values: Mapping[str, str]) -> str:
    """Serialize directives back into a trailing ``---`` block."""
    lines = [f"{key}: {value}" for key, value in values.items()]
    return "---\n" + "\n".join(lines) + "\n"
