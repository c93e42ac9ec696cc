# pytest configuration hooks.
#
# Policy: No skipped tests. If something cannot run in this environment, use xfail with a clear reason.

from __future__ import annotations

import os
import tempfile
from pathlib import Path
import pytest

from courgette.core import config as config_core

# Register pytest-bdd step definitions as a pytest plugin so fixtures are discoverable.
pytest_plugins = ["tests.bdd.steps"]

FIXTURES = Path(__file__).resolve().parent / "fixtures"

_SKIP_COUNT = 0


@pytest.fixture(autouse=True)
def isolated_properties(monkeypatch: pytest.MonkeyPatch):
    # Property overrides from the developer's shell must not leak into tests.
    for key in list(os.environ):
        if key.startswith(("COURGETTE_", "CUCUMBER_")):
            monkeypatch.delenv(key)
    monkeypatch.setenv("COURGETTE_CONFIG_PATH", str(FIXTURES / "courgette.toml"))
    config_core.reset_config_cache()
    yield
    config_core.reset_config_cache()


@pytest.fixture()
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    return str(tmp_path) + os.sep


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    global _SKIP_COUNT
    if report.when == "setup" and report.outcome == "skipped":
        _SKIP_COUNT += 1


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    if _SKIP_COUNT > 0:
        pytest.exit(f"Skipped tests are not allowed (skipped={_SKIP_COUNT}).", returncode=2)
