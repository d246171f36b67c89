"""Interpreter resolution.

With a ``px.yaml`` the ``python`` constraint is resolved through, in order:
``uv python find``, the host ``python3`` (when it satisfies the constraint),
and finally ``pyenv``. Without a config the host ``python3`` is used as is.
"""

from __future__ import annotations

import os
import re
import subprocess

from packaging.specifiers import InvalidSpecifier, SpecifierSet

from px import tools
from px.errors import ConstraintError, PxError, ToolNotFoundError
from px.logging import get_logger
from px.project import Project

log = get_logger(__name__)

ANY_VERSION = "*"
PYENV_DEFAULT = "3.11"

_VERSION_SNIPPET = "import platform; print(platform.python_version())"
_MINOR_RE = re.compile(r"[0-9]+\.[0-9]+")


def host_python_version(python: str) -> str:
    proc = tools.run([python, "-c", _VERSION_SNIPPET], check=False, capture=True)
    if proc.returncode != 0:
        return ""
    return (proc.stdout or "").strip()


def satisfies(version: str, constraint: str) -> bool:
    """PEP 440 check; unparseable constraints never match."""
    if not version or not constraint.strip():
        return False
    try:
        spec = SpecifierSet(constraint.replace(" ", ""))
    except InvalidSpecifier:
        return False
    return spec.contains(version, prereleases=True)


def _uv_find(constraint: str) -> str | None:
    proc = tools.run(["uv", "python", "find", constraint], check=False, capture=True)
    path = (proc.stdout or "").strip()
    if proc.returncode == 0 and path:
        return path
    return None


def _pyenv_find(constraint: str) -> str | None:
    if not tools.has("pyenv"):
        return None
    match = _MINOR_RE.search(constraint)
    version = match.group(0) if match else PYENV_DEFAULT
    tools.run(["pyenv", "install", "-s", version], check=False, quiet=True)
    env = {**os.environ, "PYENV_VERSION": version}
    proc = tools.run(["pyenv", "which", "python3"], env=env, check=False, capture=True)
    path = (proc.stdout or "").strip()
    if proc.returncode == 0 and path:
        return path
    return None


def _resolve(project: Project) -> str | None:
    if not project.has_config:
        return tools.which("python3")

    tools.ensure_uv()
    constraint = project.config.python or ANY_VERSION

    path = _uv_find(constraint)
    if path:
        log.info("python resolved by uv: %s", path, extra={"constraint": constraint})
        return path

    host = tools.which("python3")
    if constraint == ANY_VERSION and host:
        return host
    if host and satisfies(host_python_version(host), constraint):
        log.info("host python3 satisfies constraint: %s", host, extra={"constraint": constraint})
        return host

    path = _pyenv_find(constraint)
    if path:
        log.info("python resolved by pyenv: %s", path, extra={"constraint": constraint})
        return path
    return None


def resolve_python(project: Project) -> str:
    path = _resolve(project)
    if path:
        return path
    if not project.has_config:
        raise ToolNotFoundError(tools.PYTHON_HINT)
    raise ConstraintError(
        f"cannot satisfy python version constraint: {project.config.python or ANY_VERSION} "
        "(install pyenv or adjust python constraint)"
    )


def try_resolve_python(project: Project) -> str | None:
    """Like :func:`resolve_python` but returns ``None`` instead of raising."""
    try:
        return _resolve(project)
    except (PxError, subprocess.CalledProcessError, OSError):
        return None
