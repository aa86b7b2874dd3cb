from types import SimpleNamespace
from unittest.mock import patch

from typer.testing import CliRunner

import tickler.cli as cli


def test_run_passes_options() -> None:
    captured: dict[str, object] = {}

    def fake_run(args: SimpleNamespace) -> None:
        captured.update(vars(args))

    runner = CliRunner()
    with patch("tickler.cli.run_cmd", fake_run):
        result = runner.invoke(
            cli.app,
            ["run", "--repo", "octo/tasks", "-n", "--search", "label:chore", "--limit", "5"],
        )

    assert result.exit_code == 0
    assert captured["repo"] == "octo/tasks"
    assert captured["dry_run"] is True
    assert captured["search"] == "label:chore"
    assert captured["limit"] == 5
    assert captured["config"] is None
    assert captured["now"] is None


def test_explain_passes_options() -> None:
    captured: dict[str, object] = {}

    def fake_explain(args: SimpleNamespace) -> None:
        captured.update(vars(args))

    runner = CliRunner()
    with patch("tickler.cli.explain_cmd", fake_explain):
        result = runner.invoke(
            cli.app,
            ["explain", "body.md", "--label", "todo", "--label", "due", "--now", "2024-01-08"],
        )

    assert result.exit_code == 0
    assert captured["body_file"] == "body.md"
    assert captured["labels"] == ["todo", "due"]
    assert captured["now"] == "2024-01-08"
    assert captured["legacy"] is False


def test_global_log_level_flag_sets_runtime_level() -> None:
    runner = CliRunner()
    with (
        patch("tickler.cli.run_cmd", lambda _args: None),
        patch("tickler.cli.tickler_log.set_level") as mock_set_level,
    ):
        result = runner.invoke(cli.app, ["--log-level", "debug", "run"])

    assert result.exit_code == 0
    mock_set_level.assert_called_once_with("debug")


def test_global_log_level_rejects_unknown_values() -> None:
    runner = CliRunner()
    with patch("tickler.cli.run_cmd", lambda _args: None):
        result = runner.invoke(cli.app, ["--log-level", "loud", "run"])

    assert result.exit_code != 0


def test_no_color_flag_disables_colorized_output() -> None:
    runner = CliRunner()
    with (
        patch("tickler.cli.run_cmd", lambda _args: None),
        patch("tickler.cli.tickler_log.set_no_color") as mock_set_no_color,
    ):
        result = runner.invoke(cli.app, ["--no-color", "run"])

    assert result.exit_code == 0
    mock_set_no_color.assert_called_once_with(True)


def test_version_flag() -> None:
    result = CliRunner().invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip()
