"""Environment reconciliation: interpreter -> venv -> compile (if stale) -> sync."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from px import lockfile, tools
from px.console import info
from px.interpreter import resolve_python
from px.logging import get_logger
from px.project import Project

log = get_logger(__name__)


def ensure_venv(project: Project, python: str) -> Path:
    venv = project.venv_dir
    if not venv.is_dir():
        info(f"creating venv at {venv}")
        tools.run([python, "-m", "venv", venv])
    return venv


def ensure_requirements(project: Project) -> Path:
    req = project.requirements_path
    if not req.exists():
        req.parent.mkdir(parents=True, exist_ok=True)
        req.touch()
    return req


def compile_lock(requirements: Path, lock: Path, state: lockfile.RequirementsSnapshot) -> None:
    """Compile *requirements* with uv and write *lock* headed by *state*'s digest."""
    fd, tmp_name = tempfile.mkstemp(prefix="px-lock-", suffix=".txt")
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        tools.run(["uv", "pip", "compile", requirements, "-o", tmp])
        body = tmp.read_text(encoding="utf-8")
        lockfile.write_lock(lock, state, body)
    finally:
        tmp.unlink(missing_ok=True)


def sync(project: Project, *, allow_empty: bool = False) -> None:
    env = {
        **os.environ,
        "UV_PROJECT_ENVIRONMENT": str(project.venv_dir),
        "UV_PYTHON": str(project.venv_python),
    }
    cmd: list[str | os.PathLike] = ["uv", "pip", "sync"]
    if allow_empty:
        cmd.append("--allow-empty-requirements")
    cmd.append(project.lock_path)
    tools.run(cmd, env=env)


def install(project: Project) -> None:
    tools.ensure_python()
    tools.ensure_pip()
    tools.ensure_uv()

    python = resolve_python(project)
    ensure_venv(project, python)
    req = ensure_requirements(project)
    lock = project.lock_path

    state = lockfile.snapshot(req)
    if state.blank:
        log.info("requirements empty; writing header-only lock", extra={"lock": lock})
        lockfile.write_lock(lock, state)
        sync(project, allow_empty=True)
        return

    if lockfile.matches(lock, state):
        log.info("lock up-to-date", extra={"lock": lock})
    else:
        log.info("lock stale or missing; compiling %s", req, extra={"lock": lock})
        compile_lock(req, lock, state)
    sync(project)
