"""Configuration loading for tickler runs.

Values are layered, highest precedence first: CLI overrides, environment
variables, the JSON config file, model defaults. The config file is
``--config PATH`` when given, else ``config.json`` in the user config
directory when it exists.

Example:
    >>> load_config(overrides={"repository": "octo/tasks"}, environ={}).repository
    'octo/tasks'
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from platformdirs import user_config_dir
from pydantic import ValidationError

from .errors import ConfigError
from .models import TicklerConfig

APP_NAME = "tickler"
CONFIG_FILENAME = "config.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def default_config_path() -> Path:
    return Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME


def load_config_file(path: Path) -> dict:
    """Read a JSON config file into a dict."""
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"reading config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"config {path} must contain a JSON object")
    return payload


def environment_values(environ: Mapping[str, str]) -> dict[str, object]:
    values: dict[str, object] = {}
    repository = environ.get("GITHUB_REPOSITORY")
    if repository:
        values["repository"] = repository
    token = environ.get("GITHUB_TOKEN") or environ.get("GH_TOKEN")
    if token:
        values["github_token"] = token
    dry_run = environ.get("TICKLER_DRY_RUN")
    if dry_run:
        values["dry_run"] = dry_run.strip().lower() in _TRUE_VALUES
    return values


def load_config(
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> TicklerConfig:
    """Build the effective configuration.

    Args:
        config_path: Explicit config file; must exist when given.
        overrides: CLI values; ``None`` entries are ignored.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        ConfigError: the file is unreadable or a value fails validation.
    """
    payload: dict[str, object] = {}
    if config_path is not None:
        payload.update(load_config_file(config_path))
    else:
        default_path = default_config_path()
        if default_path.is_file():
            payload.update(load_config_file(default_path))
    payload.update(environment_values(os.environ if environ is None else environ))
    if overrides:
        payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return TicklerConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
