"""Error contracts for ticket evaluation and dispatch.

Decision modules raise typed errors on expected failures (bad rule text, bad
due dates, broken templates). The engine scopes them to a single ticket path;
the CLI turns the fatal ones into an exit status. Programmer bugs raise normal
exceptions.
"""

from __future__ import annotations

from typing import Literal

TicklerErrorCode = Literal[
    "invalid_rule",
    "invalid_date",
    "template_render_failed",
    "action_failed",
    "ticket_list_failed",
    "invalid_config",
]


class TicklerError(Exception):
    """Expected failure raised by tickler modules.

    Use ``raise TicklerError(...) from exc`` to chain the library exception
    that caused it; it stays available as ``__cause__``.
    """

    def __init__(
        self,
        code: TicklerErrorCode,
        message: str,
        *,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.recovery_hint = recovery_hint


class InvalidRuleError(TicklerError):
    """Recurrence rule text could not be parsed."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("invalid_rule", message, recovery_hint=recovery_hint)


class InvalidDateError(TicklerError):
    """Due date is not a ``YYYY-MM-DD`` calendar date."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("invalid_date", message, recovery_hint=recovery_hint)


class TemplateRenderError(TicklerError):
    """Title or body template failed to render; the literal text is kept."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__("template_render_failed", message, recovery_hint=recovery_hint)
        self.field = field


class ActionFailedError(TicklerError):
    """The tracker failed to execute an emitted action."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("action_failed", message, recovery_hint=recovery_hint)


class TicketListError(TicklerError):
    """Open tickets could not be listed."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("ticket_list_failed", message, recovery_hint=recovery_hint)


class ConfigError(TicklerError):
    """Configuration is missing or invalid."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("invalid_config", message, recovery_hint=recovery_hint)
