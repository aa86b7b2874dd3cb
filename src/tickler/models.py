"""Pydantic models for tickler configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from .due import DEFAULT_DUE_LABEL, DEFAULT_TODO_LABEL

DEFAULT_LIMIT = 100


class TicklerConfig(BaseModel):
    """Run configuration.

    Attributes:
        repository: Target repository as ``owner/repo``.
        github_token: Token handed to gh as ``GH_TOKEN``; gh's own login is
            used when unset.
        dry_run: Log actions instead of executing them.
        search: Optional search filter for the open ticket listing.
        limit: Maximum number of open tickets to evaluate.
        todo_label: Label added within a week of the due date.
        due_label: Label added within a day of the due date.
        legacy_directives: Honor ``RRULE:``/``Due:``/``Labels:`` prefix lines.

    Example:
        >>> TicklerConfig(repository="octo/tasks").limit
        100
    """

    model_config = ConfigDict(extra="ignore")

    repository: str | None = None
    github_token: str | None = None
    dry_run: bool = False
    search: str | None = None
    limit: int = DEFAULT_LIMIT
    todo_label: str = DEFAULT_TODO_LABEL
    due_label: str = DEFAULT_DUE_LABEL
    legacy_directives: bool = False

    @field_validator("repository", mode="before")
    @classmethod
    def normalize_repository(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            normalized = value.strip()
            if not normalized:
                return None
            owner, sep, repo = normalized.partition("/")
            if not sep or not owner or not repo or "/" in repo:
                raise ValueError(f"invalid repository name {normalized!r}; expected owner/repo")
            return normalized
        return value

    @field_validator("github_token", "search", mode="before")
    @classmethod
    def normalize_optional_strings(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            normalized = value.strip()
            return normalized or None
        return value

    @field_validator("todo_label", "due_label", mode="before")
    @classmethod
    def normalize_label(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip()
            if not normalized:
                raise ValueError("label names must not be empty")
            return normalized
        return value

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("limit must be at least 1")
        return value
