from __future__ import annotations

import os

from tests.integration._cli import run_cli


def test_worker_options_for_feature(tmp_path) -> None:
    env = {**os.environ, "TMPDIR": str(tmp_path)}
    code, out = run_cli("options", "--feature", "file:features/orders.feature", "--session-id", "S1", env=env)
    assert code == 0
    data = out["data"]
    assert data["mode"] == "worker"
    assert data["session_id"] == "S1"
    stem = f"{tmp_path}{os.sep}S1_thread_report_{data['feature_fingerprint']}_{data['instance_id']}"
    assert data["plugins"][0] == f"html:{stem}.html"
    assert f"junit:{stem}.xml" in data["plugins"]
    assert "json:build/courgette-report/data/report.json" in data["plugins"]
    assert data["rerun_file"].startswith(f"{tmp_path}{os.sep}S1_rerun_")
    assert data["tokens"][-1] == "features/orders.feature"
    assert "--strict" in data["tokens"]


def test_aggregate_options() -> None:
    code, out = run_cli("options")
    assert code == 0
    data = out["data"]
    assert data["mode"] == "aggregate"
    assert "html:out" in data["plugins"]
    assert data["rerun_file"] == "build/courgette-rerun.txt"
    assert data["tokens"][-1] == "features"


def test_property_override_reaches_tokens() -> None:
    env = {**os.environ, "CUCUMBER_TAGS": "@a, @b"}
    code, out = run_cli("options", env=env)
    assert code == 0
    tokens = out["data"]["tokens"]
    index = tokens.index("--tags")
    assert tokens[index : index + 4] == ["--tags", "@a", "--tags", "@b"]


def test_malformed_property_returns_config_error() -> None:
    env = {**os.environ, "COURGETTE_THREADS": "many"}
    code, out = run_cli("options", env=env)
    assert code == 1
    assert out["error"]["type"] == "CONFIG_ERROR"
    assert out["error"]["details"]["key"] == "COURGETTE_THREADS"
