"""Typed subprocess execution for tracker CLIs such as ``gh``."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from typing import Callable, Generic, Mapping, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

ParsedT = TypeVar("ParsedT")
ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class CommandRequest:
    """Command invocation request."""

    argv: tuple[str, ...]
    env: Mapping[str, str] | None = None
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class CommandResult:
    """Captured command outcome."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


class CommandRunner(Protocol):
    """Runs a request; returns ``None`` when the executable is missing."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


class SubprocessCommandRunner:
    """Default runner backed by ``subprocess.run``."""

    def run(self, request: CommandRequest) -> CommandResult | None:
        try:
            completed = subprocess.run(
                list(request.argv),
                env=dict(request.env) if request.env is not None else None,
                capture_output=True,
                text=True,
                check=False,
                timeout=request.timeout_seconds,
            )
        except FileNotFoundError:
            return None
        except subprocess.TimeoutExpired as exc:
            stdout = exc.stdout if isinstance(exc.stdout, str) else ""
            stderr = exc.stderr if isinstance(exc.stderr, str) else ""
            return CommandResult(
                argv=request.argv,
                returncode=124,
                stdout=stdout,
                stderr=stderr,
                timed_out=True,
            )
        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=completed.stdout if isinstance(completed.stdout, str) else "",
            stderr=completed.stderr if isinstance(completed.stderr, str) else "",
        )


_DEFAULT_COMMAND_RUNNER: CommandRunner = SubprocessCommandRunner()


@dataclass(frozen=True)
class CommandSpec(Generic[ParsedT]):
    """Command request paired with a parser for its output."""

    request: CommandRequest
    parser: Callable[[CommandResult], ParsedT]
    context: str | None = None


@dataclass(frozen=True)
class CommandExecutionError(RuntimeError):
    """The command was missing, timed out or exited non-zero."""

    request: CommandRequest
    detail: str
    result: CommandResult | None = None

    def __str__(self) -> str:
        return self.detail


@dataclass(frozen=True)
class CommandParseError(RuntimeError):
    """The command succeeded but its output could not be parsed."""

    request: CommandRequest
    detail: str
    context: str | None = None

    def __str__(self) -> str:
        return self.detail


def _failure_detail(request: CommandRequest, result: CommandResult) -> str:
    command_text = " ".join(request.argv)
    if result.timed_out:
        return f"command timed out: {command_text}"
    output = (result.stderr or result.stdout or "").strip()
    if output:
        return f"command failed: {command_text}\n{output}"
    return f"command failed: {command_text}"


def run_checked(
    request: CommandRequest, *, runner: CommandRunner | None = None
) -> CommandResult:
    """Run ``request`` and raise ``CommandExecutionError`` unless it succeeds."""
    result = (runner or _DEFAULT_COMMAND_RUNNER).run(request)
    if result is None:
        name = request.argv[0] if request.argv else "command"
        raise CommandExecutionError(request=request, detail=f"missing required command: {name}")
    if result.returncode != 0:
        raise CommandExecutionError(
            request=request, result=result, detail=_failure_detail(request, result)
        )
    return result


def run_typed(spec: CommandSpec[ParsedT], *, runner: CommandRunner | None = None) -> ParsedT:
    """Run a command and parse its successful output."""
    result = run_checked(spec.request, runner=runner)
    try:
        return spec.parser(result)
    except CommandParseError:
        raise
    except Exception as exc:
        context = f" ({spec.context})" if spec.context else ""
        raise CommandParseError(
            request=spec.request,
            detail=f"failed to parse command output{context}: {exc}",
            context=spec.context,
        ) from exc


def _context_suffix(context: str | None) -> str:
    return f" ({context})" if context else ""


def parse_json_payload(result: CommandResult, *, context: str | None = None) -> object:
    raw = (result.stdout or "").strip()
    if not raw:
        raise CommandParseError(
            request=CommandRequest(argv=result.argv),
            detail=f"failed to parse command output{_context_suffix(context)}: empty output",
            context=context,
        )
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CommandParseError(
            request=CommandRequest(argv=result.argv),
            detail=f"failed to parse command output{_context_suffix(context)}: {exc}",
            context=context,
        ) from exc


def parse_json_model(
    result: CommandResult, *, model_type: type[ModelT], context: str | None = None
) -> ModelT:
    """Parse stdout JSON into a validated Pydantic model."""
    payload = parse_json_payload(result, context=context)
    try:
        return model_type.model_validate(payload)
    except ValidationError as exc:
        raise CommandParseError(
            request=CommandRequest(argv=result.argv),
            detail=f"failed to validate command output{_context_suffix(context)}: {exc}",
            context=context,
        ) from exc


def parse_json_model_list(
    result: CommandResult, *, model_type: type[ModelT], context: str | None = None
) -> list[ModelT]:
    """Parse a stdout JSON array into validated Pydantic models."""
    payload = parse_json_payload(result, context=context)
    if not isinstance(payload, list):
        raise CommandParseError(
            request=CommandRequest(argv=result.argv),
            detail=f"failed to parse command output{_context_suffix(context)}: expected a JSON list",
            context=context,
        )
    models: list[ModelT] = []
    for index, item in enumerate(payload):
        try:
            models.append(model_type.model_validate(item))
        except ValidationError as exc:
            raise CommandParseError(
                request=CommandRequest(argv=result.argv),
                detail=(
                    f"failed to validate command output{_context_suffix(context)}"
                    f" at index {index}: {exc}"
                ),
                context=context,
            ) from exc
    return models
