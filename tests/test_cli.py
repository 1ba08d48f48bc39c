"""
Tests for the helperkit command line.
"""
import json

import yaml
from click.testing import CliRunner

from helperkit.cli import main


def test_get_and_set_yaml(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("server:\n  host: localhost\n", encoding="utf-8")
    runner = CliRunner()

    res = runner.invoke(main, ["get", str(path), "server.host"])
    assert res.exit_code == 0, res.output
    assert res.output.strip() == "localhost"

    res = runner.invoke(main, ["set", str(path), "server.port", "8080"])
    assert res.exit_code == 0, res.output
    res = runner.invoke(main, ["set", str(path), "server.host", "other", "--no-overwrite"])
    assert res.exit_code == 0, res.output
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
        "server": {"host": "localhost", "port": 8080}
    }


def test_get_missing_key(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"a": {"b": [1, 2]}}', encoding="utf-8")
    runner = CliRunner()
    res = runner.invoke(main, ["get", str(path), "a.c"])
    assert res.exit_code != 0
    assert "'a.c' not found" in res.output
    res = runner.invoke(main, ["get", str(path), "a.c", "--default", "none"])
    assert res.output.strip() == "none"
    res = runner.invoke(main, ["get", str(path), "a.b"])
    assert json.loads(res.output) == [1, 2]


def test_set_creates_json_file(tmp_path):
    path = tmp_path / "new.json"
    res = CliRunner().invoke(main, ["set", str(path), "flags.beta", "true"])
    assert res.exit_code == 0, res.output
    assert json.loads(path.read_text(encoding="utf-8")) == {"flags": {"beta": True}}


def test_runtime_commands(document_root):
    runner = CliRunner()
    root = ["--document-root", str(document_root)]

    res = runner.invoke(main, root + ["config", "database.host"])
    assert res.output.strip() == "db.local"

    res = runner.invoke(main, root + ["env", "APP_ENV"])
    assert res.output.strip() == "testing"

    res = runner.invoke(main, root + ["encrypt", "hello"])
    assert res.exit_code == 0, res.output
    payload = res.output.strip()
    res = runner.invoke(main, root + ["decrypt", payload])
    assert res.output.strip() == "hello"

    (document_root / "cache").mkdir(exist_ok=True)
    (document_root / "cache" / "x.cache").write_bytes(b"")
    res = runner.invoke(main, root + ["cache-clear"])
    assert res.exit_code == 0, res.output
    assert "Removed 1 cache entries" in res.output
