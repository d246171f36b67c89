"""Run scripts, files, stdin or arbitrary commands inside the project venv.

No shell activation is involved: the child simply gets ``VIRTUAL_ENV`` and
the venv's bin directory at the front of ``PATH``.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from px import tools
from px.errors import (
    CommandNotExecutableError,
    CommandNotFoundError,
    EnvironmentMissingError,
    UsageError,
)
from px.project import Project

NOT_INSTALLED = "environment not installed (run: px install)"
RUN_USAGE = "run <script-name|path.py|-> [args...]"

# The script text is eval'd so shell syntax (pipes, &&, quoting) works and
# extra CLI args land after it.
_EVAL_SCRIPT = 'eval "$PX_SCRIPT" "$@"'
_EVAL_ENTRYPOINT = 'eval "$PX_ENTRYPOINT" "$@"'


def _require_env(project: Project) -> None:
    if not project.bin_dir.is_dir():
        raise EnvironmentMissingError(NOT_INSTALLED)


def _launch(cmd: list[str | os.PathLike], env: dict[str, str]) -> int:
    """Run *cmd* unchecked and return its exit code."""
    name = os.fspath(cmd[0])
    try:
        return tools.run(cmd, env=env, check=False).returncode
    except FileNotFoundError:
        raise CommandNotFoundError(f"command not found: {name}") from None
    except PermissionError:
        raise CommandNotExecutableError(f"permission denied: {name}") from None


def _run_shell(project: Project, snippet: str, var: str, command: str, name: str, args) -> int:
    env = tools.venv_env(project.venv_dir)
    env[var] = command
    return _launch(["sh", "-c", snippet, name, *args], env)


def _has_python_shebang(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            first = f.readline()
    except OSError:
        return False
    return first.startswith(b"#!") and b"python" in first


def _locate_file(project: Project, name: str) -> Path | None:
    """Absolute path of *name*, tried against the cwd and then the project root."""
    for candidate in (Path(name), project.root / name):
        if candidate.is_file():
            return candidate.resolve()
    return None


def run_target(project: Project, name: str | None, args: Sequence[str] = ()) -> int:
    """Dispatch *name* as a configured script, ``-`` (stdin), or a file path."""
    _require_env(project)
    if not name:
        raise UsageError(RUN_USAGE)

    script = project.data.script(name)
    if script:
        return _run_shell(project, _EVAL_SCRIPT, "PX_SCRIPT", script, name, args)

    env = tools.venv_env(project.venv_dir)
    python = project.venv_python

    if name == "-":
        return _launch([python, "-", *args], env)

    target = _locate_file(project, name)
    if target is not None:
        if target.suffix == ".py":
            return _launch([python, target, *args], env)
        if _has_python_shebang(target):
            return _launch([target, *args], env)

    if name == "start":
        entrypoint = project.config.entrypoint
        if entrypoint:
            return _run_shell(project, _EVAL_ENTRYPOINT, "PX_ENTRYPOINT", entrypoint, name, args)
        raise UsageError("no scripts.start or entrypoint configured")

    raise UsageError(f"unknown script or file: {name}")


def start(project: Project, args: Sequence[str] = ()) -> int:
    return run_target(project, "start", args)


def exec_command(project: Project, args: Sequence[str]) -> int:
    if not args:
        raise UsageError("exec <command>")
    _require_env(project)
    env = tools.venv_env(project.venv_dir)
    program = tools.which(args[0], path=env["PATH"]) or args[0]
    return _launch([program, *args[1:]], env)
