# ruff: noqa: E402

import sys
from pathlib import Path

import pytest
from _pytest.doctest import DoctestModule

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for entry in (SRC, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

import tickler.log as tickler_log

DOCTEST_MODULES = {
    ROOT / "src" / "tickler" / "__init__.py",
    ROOT / "src" / "tickler" / "clock.py",
    ROOT / "src" / "tickler" / "directives.py",
    ROOT / "src" / "tickler" / "due.py",
    ROOT / "src" / "tickler" / "log.py",
    ROOT / "src" / "tickler" / "models.py",
}


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "GITHUB_REPOSITORY",
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "TICKLER_DRY_RUN",
        "TICKLER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TICKLER_NO_COLOR", "1")
    monkeypatch.setattr(
        "tickler.config.default_config_path", lambda: tmp_path / "no-config.json"
    )
    tickler_log.reset()


def pytest_collect_file(
    parent: pytest.Collector, file_path: Path
) -> DoctestModule | None:
    path = file_path if isinstance(file_path, Path) else Path(str(file_path))
    if path in DOCTEST_MODULES:
        return DoctestModule.from_parent(parent, path=path)
    return None
