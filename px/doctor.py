"""``px doctor``: a read-only status report.

Each field is collected on its own and degrades to missing/unavailable; nothing
here raises.
"""

from __future__ import annotations

from pathlib import Path

from px import lockfile, tools
from px.interpreter import try_resolve_python
from px.project import Project
from px.types import DoctorReport, SyncState


def collect(project: Project) -> DoctorReport:
    has_config = project.has_config
    if has_config:
        python = try_resolve_python(project)
    else:
        python = tools.which("python3")

    req = project.requirements_path
    lock = project.lock_path
    try:
        sync = lockfile.sync_state(req, lock)
    except OSError:
        sync = SyncState.UNAVAILABLE

    return DoctorReport(
        root=str(project.root),
        has_config=has_config,
        constraint=project.config.python if has_config else "",
        python=python,
        venv_dir=str(project.venv_dir),
        venv_present=project.bin_dir.is_dir(),
        requirements=project.config.requirements,
        requirements_present=req.is_file(),
        lockfile=project.config.lockfile,
        lockfile_present=lock.is_file(),
        sync=sync,
    )


def _present(flag: bool, present: str, missing: str) -> str:
    return f"present ({present})" if flag else f"missing ({missing})"


def render(report: DoctorReport) -> list[str]:
    if not report.has_config:
        constraint = "(px.yaml not found)"
        resolved = f"using system python3 ({report.python or 'unavailable'})"
    else:
        constraint = report.constraint or "(not set)"
        resolved = report.python or "(unavailable)"

    if report.sync is SyncState.UP_TO_DATE:
        sync = "up-to-date"
    else:
        sync = f"{report.sync.value} (run: px install)"

    req_name = Path(report.requirements).name
    lock_name = Path(report.lockfile).name
    return [
        f"root: {report.root}",
        f"python constraint: {constraint}",
        f"python resolved: {resolved}",
        f"venv: {_present(report.venv_present, report.venv_dir, report.venv_dir)}",
        f"requirements: {_present(report.requirements_present, req_name, report.requirements)}",
        f"lockfile: {_present(report.lockfile_present, lock_name, report.lockfile)}",
        f"sync: {sync}",
    ]
