from __future__ import annotations

from pathlib import Path

from px import doctor
from px.lockfile import snapshot, write_lock
from px.project import load_project
from px.types import SyncState


def test_doctor_without_config(tmp_path: Path, monkeypatch, fake_tools) -> None:
    monkeypatch.chdir(tmp_path)
    lines = doctor.render(doctor.collect(load_project()))

    assert lines == [
        f"root: {tmp_path.resolve()}",
        "python constraint: (px.yaml not found)",
        "python resolved: using system python3 (/usr/bin/python3)",
        f"venv: missing ({tmp_path.resolve() / '.venv'})",
        "requirements: missing (requirements.txt)",
        "lockfile: missing (requirements.lock)",
        "sync: unavailable (run: px install)",
    ]


def test_doctor_degrades_per_field(project_dir: Path, fake_tools) -> None:
    fake_tools.installed.clear()
    report = doctor.collect(load_project())
    lines = doctor.render(report)

    assert report.python is None
    assert "python constraint: >=3.12,<3.13" in lines
    assert "python resolved: (unavailable)" in lines
    assert "requirements: present (requirements.txt)" in lines
    assert lines[-1] == "sync: unavailable (run: px install)"


def test_doctor_up_to_date_then_stale(project_dir: Path, fake_tools) -> None:
    (project_dir / ".venv" / "bin").mkdir(parents=True)
    req = project_dir / "requirements.txt"
    req.write_text("requests\n", encoding="utf-8")
    write_lock(project_dir / "requirements.lock", snapshot(req), "requests==2.32.3\n")

    report = doctor.collect(load_project())
    assert report.sync is SyncState.UP_TO_DATE
    assert report.python == "/opt/uv/python3.12"
    lines = doctor.render(report)
    assert f"venv: present ({project_dir.resolve() / '.venv'})" in lines
    assert "lockfile: present (requirements.lock)" in lines
    assert lines[-1] == "sync: up-to-date"

    req.write_text("requests\nrich\n", encoding="utf-8")
    lines = doctor.render(doctor.collect(load_project()))
    assert lines[-1] == "sync: out-of-date (run: px install)"


def test_doctor_constraint_not_set(project_dir: Path, fake_tools) -> None:
    (project_dir / "px.yaml").write_text("venv_path: .venv\n", encoding="utf-8")
    lines = doctor.render(doctor.collect(load_project()))
    assert "python constraint: (not set)" in lines


def test_doctor_with_undecodable_config(project_dir: Path, fake_tools) -> None:
    (project_dir / "px.yaml").write_bytes(b"python: \xff\xfe\n")

    lines = doctor.render(doctor.collect(load_project()))
    assert lines[0] == f"root: {project_dir.resolve()}"
    assert len(lines) == 7
    assert lines[-1] == "sync: unavailable (run: px install)"
