from tests.integration._cli import run_cli


def test_version_json_envelope():
    code, out = run_cli("version", "--json")
    assert code == 0
    assert out["command"] == "version"
    assert out["data"]["version"] == "0.1.0"
