"""Shared Pydantic models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_VENV_PATH = ".venv"
DEFAULT_REQUIREMENTS = "requirements.txt"
DEFAULT_LOCKFILE = "requirements.lock"


class ProjectConfig(BaseModel):
    """Settings derived from ``px.yaml``; empty values fall back to defaults."""

    model_config = ConfigDict(frozen=True)

    python: str = ""
    venv_path: str = DEFAULT_VENV_PATH
    requirements: str = DEFAULT_REQUIREMENTS
    lockfile: str = DEFAULT_LOCKFILE
    entrypoint: str = ""
    scripts: dict[str, str] = Field(default_factory=dict)


class SyncState(str, Enum):
    UP_TO_DATE = "up-to-date"
    OUT_OF_DATE = "out-of-date"
    UNAVAILABLE = "unavailable"


class DoctorReport(BaseModel):
    root: str
    has_config: bool
    constraint: str = ""
    python: str | None = None
    venv_dir: str
    venv_present: bool = False
    requirements: str
    requirements_present: bool = False
    lockfile: str
    lockfile_present: bool = False
    sync: SyncState = SyncState.UNAVAILABLE
