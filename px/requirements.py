"""Editing the requirements file for ``px add`` / ``px rm``.

Both operations are plain line edits followed by a full ``install`` so the
lock and environment are reconciled against the new contents.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

import httpx

from px import tools
from px.console import info, warn
from px.errors import PackageIndexError, UsageError
from px.installer import ensure_requirements, install
from px.project import Project
from px.settings import load_settings

ADD_FLAGS = {"--latest", "--exact", "--compatible"}
_SPEC_CHARS = set("<>=!~@")
_URL_MARKERS = ("git+", "ssh+", "file:")


class AddMode(str, Enum):
    RAW = "raw"
    EXACT = "exact"
    COMPATIBLE = "compatible"


def has_version_spec(entry: str) -> bool:
    return any(c in _SPEC_CHARS for c in entry)


def normalize_add_arg(arg: str) -> str:
    """Turn ``name@spec`` into a requirement line.

    ``pkg@1.2`` -> ``pkg==1.2``, ``pkg@>=1`` -> ``pkg>=1``; URL-ish specs and
    anything without a name or spec are left untouched.
    """
    if "@" not in arg:
        return arg
    name, spec = arg.split("@", 1)
    if not name or not spec:
        return arg
    if "://" in spec or spec.startswith(_URL_MARKERS):
        return arg
    if spec[0] in "<>=!~":
        return f"{name}{spec}"
    return f"{name}=={spec}"


def format_requirement_with_constraint(entry: str, op: str, version: str) -> str:
    name, sep, rest = entry.partition("[")
    extras = f"{sep}{rest}" if sep else ""
    return f"{name}{extras}{op}{version}"


def fetch_latest_version(requirement: str, *, client: httpx.Client | None = None) -> str:
    """Return the latest published version of *requirement* from the index."""
    name = requirement.split("[", 1)[0].strip()
    if not name:
        raise UsageError(f"invalid package name: {requirement}")

    settings = load_settings()
    url = f"{settings.index_url.rstrip('/')}/{name}/json"
    try:
        if client is None:
            with httpx.Client(timeout=settings.http_timeout) as own:
                resp = own.get(url)
        else:
            resp = client.get(url)
    except httpx.HTTPError as exc:
        raise PackageIndexError(f"unable to fetch version for {name}: {exc}") from exc

    if resp.status_code != 200:
        raise PackageIndexError(
            f"unable to fetch version for {name} (status {resp.status_code})"
        )
    try:
        version = (resp.json().get("info") or {}).get("version")
    except ValueError:
        version = None
    if not version:
        raise PackageIndexError(f"unable to determine latest version for {name}")
    return str(version)


def _read_lines(project: Project) -> list[str]:
    text = ensure_requirements(project).read_text(encoding="utf-8")
    return text.splitlines()


def _write_lines(project: Project, lines: list[str]) -> None:
    text = "".join(f"{line}\n" for line in lines)
    project.requirements_path.write_text(text, encoding="utf-8")


def add_requirements(
    project: Project,
    packages: Iterable[str],
    mode: AddMode = AddMode.RAW,
    *,
    client: httpx.Client | None = None,
) -> list[str]:
    """Append new requirement lines, then reinstall. Returns the added lines."""
    packages = list(packages)
    if not packages:
        raise UsageError("add [--latest|--compatible] <pkg...>")
    tools.ensure_uv()

    req = ensure_requirements(project)
    lines = _read_lines(project)
    added: list[str] = []

    for pkg in packages:
        if pkg in ADD_FLAGS:
            raise UsageError(f"add flags must appear before package names (move {pkg} earlier)")
        entry = normalize_add_arg(pkg)
        if mode is not AddMode.RAW and not has_version_spec(entry):
            version = fetch_latest_version(entry, client=client)
            op = "==" if mode is AddMode.EXACT else "~="
            entry = format_requirement_with_constraint(entry, op, version)
            info(f"resolved {pkg} -> {entry}")
        if entry in lines:
            continue
        lines.append(entry)
        added.append(entry)

    if added:
        _write_lines(project, lines)
    else:
        warn(f"dependencies already present in {req.name}")

    install(project)
    return added


def remove_requirements(project: Project, packages: Iterable[str]) -> list[str]:
    """Drop every line exactly matching one of *packages*, then reinstall."""
    packages = list(packages)
    if not packages:
        raise UsageError("rm <pkg...>")
    tools.ensure_uv()

    lines = _read_lines(project)
    targets = set(packages)
    kept = [line for line in lines if line not in targets]
    removed = [pkg for pkg in packages if pkg in lines]

    if not removed:
        raise UsageError(f"no matching dependencies found in {project.config.requirements}")

    _write_lines(project, kept)
    install(project)
    return removed
