"""Reader for ``px.yaml``.

The format is a restricted two-level key/value file::

    python: ">=3.11,<3.12"
    venv_path: .venv   # trailing comments are stripped from bare values
    scripts:
      start: "python main.py"

Only the ``scripts`` key opens a nested block. Lines without a ``:`` are
skipped rather than rejected, and a missing file parses as empty.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from px.types import (
    DEFAULT_LOCKFILE,
    DEFAULT_REQUIREMENTS,
    DEFAULT_VENV_PATH,
    ProjectConfig,
)

CONFIG_FILENAME = "px.yaml"
SCRIPTS_KEY = "scripts"


class _State(Enum):
    TOP = "top"
    SCRIPTS = "scripts"


@dataclass
class ConfigData:
    values: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)

    def value(self, key: str) -> str:
        return self.values.get(key, "")

    def script(self, name: str) -> str:
        return self.scripts.get(name, "")

    def script_names(self) -> list[str]:
        return list(self.scripts)


def parse_value(raw: str) -> str:
    raw = raw.strip()
    if not raw:
        return ""
    if len(raw) >= 2 and raw[0] in "\"'" and raw[-1] == raw[0]:
        try:
            return str(ast.literal_eval(raw))
        except (ValueError, SyntaxError):
            return raw[1:-1]
    if " #" in raw:
        raw = raw.split(" #", 1)[0].rstrip()
    return raw


def _split_pair(text: str) -> tuple[str, str] | None:
    if ":" not in text:
        return None
    key, value = text.split(":", 1)
    return key.strip(), value.strip()


def parse_config(text: str) -> ConfigData:
    data = ConfigData()
    state = _State.TOP

    for line in text.splitlines():
        stripped = line.lstrip(" \t")
        if not stripped or stripped.startswith("#"):
            continue

        if stripped == line:
            state = _State.TOP
            pair = _split_pair(line)
            if pair is None:
                continue
            key, value = pair
            if key == SCRIPTS_KEY:
                state = _State.SCRIPTS
                continue
            data.values[key] = parse_value(value)
        elif state is _State.SCRIPTS:
            pair = _split_pair(stripped)
            if pair is None:
                continue
            name, command = pair
            data.scripts[name] = parse_value(command)

    return data


def read_config(path: Path) -> ConfigData:
    """Parse *path*; a missing file is empty and undecodable bytes become U+FFFD."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ConfigData()
    return parse_config(text)


def to_project_config(data: ConfigData) -> ProjectConfig:
    return ProjectConfig(
        python=data.value("python"),
        venv_path=data.value("venv_path") or DEFAULT_VENV_PATH,
        requirements=data.value("requirements") or DEFAULT_REQUIREMENTS,
        lockfile=data.value("lockfile") or DEFAULT_LOCKFILE,
        entrypoint=data.value("entrypoint"),
        scripts=dict(data.scripts),
    )
