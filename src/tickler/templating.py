"""Render the title and body of a new occurrence of a recurring ticket.

Titles and bodies are Jinja2 templates evaluated in a sandbox, for example
``Standup notes {{ now().strftime('%Y-%m-%d') }}``. A field that fails to
render keeps its literal text; the other field is unaffected.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Mapping

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from . import log
from .directives import DirectiveSet
from .errors import TemplateRenderError
from .tickets import Ticket

PROVENANCE_TEMPLATE = "Cloned from #{ticket_id}"


@dataclass(frozen=True)
class RenderedOccurrence:
    title: str
    body: str
    labels: tuple[str, ...] = ()


def _environment() -> SandboxedEnvironment:
    return SandboxedEnvironment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def render_text(text: str, context: Mapping[str, object], *, field: str = "text") -> str:
    """Render ``text`` as a template.

    Raises:
        TemplateRenderError: the template does not parse or fails to evaluate.
    """
    try:
        return _environment().from_string(text).render(**context)
    except Exception as exc:  # template code is user text
        raise TemplateRenderError(f"rendering {field} template: {exc}", field=field) from exc


def template_context(
    ticket: Ticket,
    directives: DirectiveSet,
    now: dt.datetime,
    occurrence: dt.datetime | None = None,
) -> dict[str, object]:
    return {
        "now": lambda: now,
        "today": lambda: now.date(),
        "ticket": {"id": ticket.ticket_id, "title": ticket.title, "url": ticket.url},
        "directives": dict(directives.values),
        "occurrence": occurrence,
    }


def _render_or_literal(text: str, context: Mapping[str, object], *, field: str) -> str:
    try:
        return render_text(text, context, field=field)
    except TemplateRenderError as exc:
        log.warning(f"Keeping literal {field}: {exc}")
        return text


def append_provenance(body: str, ticket_id: str) -> str:
    note = PROVENANCE_TEMPLATE.format(ticket_id=ticket_id)
    prose = body.rstrip()
    if not prose:
        return note + "\n"
    return f"{prose}\n\n{note}\n"


def render_occurrence(
    original: Ticket,
    directives: DirectiveSet,
    now: dt.datetime,
    *,
    occurrence: dt.datetime | None = None,
) -> RenderedOccurrence:
    """Render a new occurrence from ``original`` and its directives.

    Labels come from the ``labels`` directive. Title and residual body are
    rendered independently and fall back to their literal text on error.
    """
    context = template_context(original, directives, now, occurrence)
    title = _render_or_literal(original.title, context, field="title")
    body = _render_or_literal(directives.residual_body, context, field="body")
    return RenderedOccurrence(title=title, body=body, labels=directives.labels)
