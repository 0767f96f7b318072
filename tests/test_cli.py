import json

import pytest
import yaml

from pyseam import cli
from pyseam.settings import Settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.setattr(cli, "load_settings", lambda: Settings())


def test_detect(tmp_path, capsys):
    path = tmp_path / "data.txt"
    path.write_text('{\n  // c\n  "a": 1\n}', encoding="utf-8")
    assert cli.main(["detect", str(path)]) == 0
    assert capsys.readouterr().out.strip() == "jsonc"


def test_get(tmp_path, capsys):
    path = tmp_path / "conf.yaml"
    path.write_text("a:\n  b: [1, 2]\n", encoding="utf-8")
    assert cli.main(["get", str(path), "a.b"]) == 0
    assert json.loads(capsys.readouterr().out) == [1, 2]
    assert cli.main(["get", str(path), "a.missing"]) == 1


def test_set_keeps_comments(tmp_path):
    path = tmp_path / "conf.jsonc"
    path.write_text('{\n  // note\n  "a": 1\n}', encoding="utf-8")
    assert cli.main(["set", str(path), "a", "2"]) == 0
    assert path.read_text(encoding="utf-8") == '{\n  // note\n  "a": 2\n}'
    assert not (tmp_path / "conf.jsonc.tmp").exists()


def test_set_raw_string(tmp_path):
    path = tmp_path / "conf.yml"
    path.write_text("name: x  # who\n", encoding="utf-8")
    assert cli.main(["set", str(path), "name", "hello world", "--raw"]) == 0
    assert path.read_text(encoding="utf-8") == "name: hello world  # who\n"


def test_set_rejects_bad_json(tmp_path, capsys):
    path = tmp_path / "conf.json"
    path.write_text("{}", encoding="utf-8")
    assert cli.main(["set", str(path), "a", "not json"]) == 2
    assert "--raw" in capsys.readouterr().err
    assert path.read_text(encoding="utf-8") == "{}"


def test_delete(tmp_path):
    path = tmp_path / "conf.yaml"
    path.write_text("a: 1\nb: 2\n", encoding="utf-8")
    assert cli.main(["delete", str(path), "b"]) == 0
    assert path.read_text(encoding="utf-8") == "a: 1\n"
    assert cli.main(["delete", str(path), "b"]) == 1


def test_convert(tmp_path, capsys):
    path = tmp_path / "conf.json"
    path.write_text('{"a": [1]}', encoding="utf-8")
    assert cli.main(["convert", str(path), "--to", "yaml"]) == 0
    assert yaml.safe_load(capsys.readouterr().out) == {"a": [1]}


def test_locate(tmp_path, capsys):
    path = tmp_path / "conf.yaml"
    path.write_text("server:\n  host: x\n", encoding="utf-8")
    assert cli.main(["locate", str(path), "2", "3"]) == 0
    assert capsys.readouterr().out.strip() == "server.host"
    assert cli.main(["locate", str(path), "9", "1"]) == 1


def test_format_override(tmp_path, capsys):
    path = tmp_path / "conf.txt"
    path.write_text("a: 1\n", encoding="utf-8")
    assert cli.main(["-v", "get", str(path), "a", "--format", "yaml"]) == 0
    assert capsys.readouterr().out.strip() == "1"


def test_missing_file(tmp_path, capsys):
    assert cli.main(["get", str(tmp_path / "nope.json"), "a"]) == 2
    assert capsys.readouterr().err
