from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

from px import tools

COMPILED = "anyio==4.4.0\nrequests==2.32.3\n"


class FakeTools:
    """Stand-in for px.tools.run/which: records argv and fakes side effects.

    - `<py> -m venv <dir>` creates `<dir>/bin`
    - `uv pip compile <req> -o <out>` writes `compiled` to `<out>`
    - `uv python find` prints `uv_python` (exit 2 when it is None)
    - `<py> -c ...` prints `host_version`
    - argv starting with a key of `launch_errors` raises that OSError
    """

    def __init__(self) -> None:
        self.installed = {"python3", "uv"}
        self.calls: list[list[str]] = []
        self.envs: list[dict | None] = []
        self.compiled = COMPILED
        self.uv_python: str | None = "/opt/uv/python3.12"
        self.host_version = "3.12.4"
        self.exit_codes: dict[str, int] = {}
        self.outputs: dict[str, str] = {}
        self.launch_errors: dict[str, OSError] = {}

    def which(self, cmd: str, path: str | None = None) -> str | None:
        return f"/usr/bin/{cmd}" if cmd in self.installed else None

    def run(self, cmd, *, env=None, cwd=None, check=True, capture=False, quiet=False):
        argv = [os.fspath(c) for c in cmd]
        self.calls.append(argv)
        self.envs.append(dict(env) if env is not None else None)
        joined = " ".join(argv)
        for prefix, error in self.launch_errors.items():
            if joined.startswith(prefix):
                raise error
        stdout = ""
        code = 0
        if argv[1:3] == ["-m", "venv"]:
            (Path(argv[3]) / "bin").mkdir(parents=True, exist_ok=True)
        elif argv[:3] == ["uv", "pip", "compile"]:
            Path(argv[argv.index("-o") + 1]).write_text(self.compiled, encoding="utf-8")
        elif argv[:3] == ["uv", "python", "find"]:
            if self.uv_python is None:
                code = 2
            else:
                stdout = self.uv_python + "\n"
        elif argv[1:2] == ["-c"]:
            stdout = self.host_version + "\n"
        for prefix, out in self.outputs.items():
            if joined.startswith(prefix):
                stdout = out
        for prefix, value in self.exit_codes.items():
            if joined.startswith(prefix):
                code = value
        if check and code:
            raise subprocess.CalledProcessError(code, argv)
        return subprocess.CompletedProcess(argv, code, stdout=stdout if capture else None, stderr="")

    def commands(self, prefix: str) -> list[list[str]]:
        return [c for c in self.calls if " ".join(c).startswith(prefix)]


@pytest.fixture
def fake_tools(monkeypatch) -> FakeTools:
    fake = FakeTools()
    monkeypatch.setattr(tools, "run", fake.run)
    monkeypatch.setattr(tools, "which", fake.which)
    return fake


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch) -> Path:
    """A configured project (px.yaml + empty requirements.txt) as the cwd."""
    root = tmp_path / "proj"
    root.mkdir()
    (root / "px.yaml").write_text(
        'python: ">=3.12,<3.13"\n'
        "scripts:\n"
        '  start: "python main.py"\n'
        '  hello: "echo hello"\n',
        encoding="utf-8",
    )
    (root / "requirements.txt").write_text("", encoding="utf-8")
    monkeypatch.chdir(root)
    for var in ("PX_SHELL", "SHELL", "PX_LOG_LEVEL", "PX_INDEX_URL"):
        monkeypatch.delenv(var, raising=False)
    return root
