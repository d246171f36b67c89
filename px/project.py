"""Project root discovery and derived paths."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from px.config import CONFIG_FILENAME, ConfigData, read_config, to_project_config
from px.types import ProjectConfig


def find_root(start: Path) -> Path | None:
    """Return the first of *start* and its ancestors holding ``px.yaml``."""
    start = start.resolve()
    for candidate in [start, *start.parents]:
        if (candidate / CONFIG_FILENAME).is_file():
            return candidate
    return None


def project_root(start: Path) -> Path:
    return find_root(start) or start.resolve()


def venv_bin(venv_dir: Path) -> Path:
    return venv_dir / ("Scripts" if os.name == "nt" else "bin")


@dataclass
class Project:
    root: Path
    data: ConfigData
    config: ProjectConfig

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def has_config(self) -> bool:
        return self.config_path.is_file()

    @property
    def venv_dir(self) -> Path:
        return self.root / self.config.venv_path

    @property
    def bin_dir(self) -> Path:
        return venv_bin(self.venv_dir)

    @property
    def venv_python(self) -> Path:
        return self.bin_dir / "python"

    @property
    def requirements_path(self) -> Path:
        return self.root / self.config.requirements

    @property
    def lock_path(self) -> Path:
        return self.root / self.config.lockfile


def load_project(start: Path | None = None) -> Project:
    """Locate the project owning *start* (default: cwd) and read its config.

    Nothing is cached: each call re-reads ``px.yaml`` from disk.
    """
    root = project_root(start or Path.cwd())
    data = read_config(root / CONFIG_FILENAME)
    return Project(root=root, data=data, config=to_project_config(data))
