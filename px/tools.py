"""External tool seam: lookups, presence checks and subprocess calls.

Every shell-out in px goes through :func:`run` so it is logged in one place
(and can be replaced in tests).
"""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from px.errors import ToolNotFoundError
from px.logging import get_logger
from px.project import venv_bin

log = get_logger(__name__)

UV_HINT = "uv not found; install uv via 'pipx install uv' or see https://github.com/astral-sh/uv"
PYTHON_HINT = "python3 not found; install Python 3 (e.g. via pyenv or your package manager)"
PIP_HINT = "pip not found for python3; install pip (e.g. 'python3 -m ensurepip --upgrade')"


def which(cmd: str, path: str | None = None) -> str | None:
    return shutil.which(cmd, path=path)


def has(cmd: str) -> bool:
    return which(cmd) is not None


def run(
    cmd: Sequence[str | os.PathLike],
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    check: bool = True,
    capture: bool = False,
    quiet: bool = False,
) -> subprocess.CompletedProcess:
    """Run *cmd* synchronously; no timeout is applied at this layer.

    ``capture`` collects stdout/stderr as text; ``quiet`` discards both.
    """
    argv = [os.fspath(c) for c in cmd]
    log.debug("exec %s", argv[0], extra={"argv": argv, "cwd": cwd})
    kwargs: dict = {"env": dict(env) if env is not None else None, "cwd": cwd, "check": check}
    if capture:
        kwargs.update(capture_output=True, text=True)
    elif quiet:
        kwargs.update(stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    proc = subprocess.run(argv, **kwargs)
    log.debug("exit %s", argv[0], extra={"argv": argv, "returncode": proc.returncode})
    return proc


def ensure_uv() -> str:
    path = which("uv")
    if not path:
        raise ToolNotFoundError(UV_HINT)
    return path


def ensure_python() -> str:
    path = which("python3")
    if not path:
        raise ToolNotFoundError(PYTHON_HINT)
    return path


def ensure_pip() -> None:
    python = ensure_python()
    proc = run([python, "-m", "pip", "--version"], check=False, quiet=True)
    if proc.returncode != 0:
        raise ToolNotFoundError(PIP_HINT)


def venv_env(venv_dir: Path, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment with *venv_dir* active: VIRTUAL_ENV set, its bin first on PATH."""
    env = dict(os.environ if base is None else base)
    bin_dir = venv_bin(venv_dir)
    path = env.get("PATH", "")
    env["PATH"] = f"{bin_dir}{os.pathsep}{path}" if path else str(bin_dir)
    env["VIRTUAL_ENV"] = str(venv_dir)
    return env
