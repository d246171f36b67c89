from __future__ import annotations

from pathlib import Path

from px.config import parse_config, parse_value, read_config, to_project_config

SAMPLE = """\
# project settings
version: 1
python: ">=3.11,<3.12"
venv_path: .env   # trailing comment
requirements: 'reqs/base.txt'
this line has no separator
note: a#b

scripts:
  start: "python main.py"
  # comment inside the block
  greet: "echo 'hi' # kept"
  bare: pytest -q  # stripped
  broken line
lockfile: "deps.lock"
  orphan: "ignored outside scripts"
"""


def test_parse_scalars_and_scripts() -> None:
    data = parse_config(SAMPLE)

    assert data.value("version") == "1"
    assert data.value("python") == ">=3.11,<3.12"
    assert data.value("venv_path") == ".env"
    assert data.value("requirements") == "reqs/base.txt"
    assert data.value("note") == "a#b"
    assert data.value("lockfile") == "deps.lock"
    assert data.value("missing") == ""

    assert data.script_names() == ["start", "greet", "bare"]
    assert data.script("start") == "python main.py"
    assert data.script("greet") == "echo 'hi' # kept"
    assert data.script("bare") == "pytest -q"
    assert data.script("orphan") == ""
    assert "orphan" not in data.values


def test_quoted_values_use_string_literal_escapes() -> None:
    assert parse_value(r'"say \"hi\""') == 'say "hi"'
    assert parse_value(r"'tab\there'") == "tab\there"
    assert parse_value('"unterminated') == '"unterminated'
    # Undecodable literal falls back to the text between the quotes
    assert parse_value(r'"\x4"') == r"\x4"
    assert parse_value("   ") == ""


def test_missing_file_is_empty(tmp_path: Path) -> None:
    data = read_config(tmp_path / "px.yaml")
    assert data.values == {}
    assert data.script_names() == []
    assert data.value("python") == ""
    assert data.script("start") == ""


def test_undecodable_bytes_are_replaced(tmp_path: Path) -> None:
    cfg = tmp_path / "px.yaml"
    cfg.write_bytes(b"python: \xff\xfe\nvenv_path: env\n")

    data = read_config(cfg)
    assert data.value("python") == "\ufffd\ufffd"
    assert data.value("venv_path") == "env"


def test_reread_is_identical(tmp_path: Path) -> None:
    cfg = tmp_path / "px.yaml"
    cfg.write_text(SAMPLE, encoding="utf-8")
    first = read_config(cfg)
    second = read_config(cfg)
    assert first == second


def test_project_config_defaults_fill_empty_values() -> None:
    cfg = to_project_config(parse_config('python: ""\nvenv_path:\n'))
    assert cfg.python == ""
    assert cfg.venv_path == ".venv"
    assert cfg.requirements == "requirements.txt"
    assert cfg.lockfile == "requirements.lock"
    assert cfg.entrypoint == ""
    assert cfg.scripts == {}


def test_project_config_from_sample() -> None:
    cfg = to_project_config(parse_config(SAMPLE))
    assert cfg.venv_path == ".env"
    assert cfg.requirements == "reqs/base.txt"
    assert cfg.lockfile == "deps.lock"
    assert cfg.scripts["start"] == "python main.py"
