"""Environment-driven settings.

Read fresh from ``os.environ`` on every call; px keeps no state between
invocations.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    shell_override: str = ""
    shell: str = ""
    log_level: str = "WARNING"
    index_url: str = "https://pypi.org/pypi"
    http_timeout: float = 15.0

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        v = v.strip().upper()
        return v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "WARNING"


_ENV_MAP = {
    "PX_SHELL": "shell_override",
    "SHELL": "shell",
    "PX_LOG_LEVEL": "log_level",
    "PX_INDEX_URL": "index_url",
    "PX_HTTP_TIMEOUT": "http_timeout",
}


def load_settings() -> Settings:
    data = {field: os.environ[var] for var, field in _ENV_MAP.items() if os.environ.get(var)}
    return Settings(**data)
