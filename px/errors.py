"""Error taxonomy for px.

Every handled failure derives from :class:`PxError`; the CLI prints
``px: <message>`` to stderr and exits with ``exit_code`` (1 unless a subclass
says otherwise). Failures of delegated tools are left as
:class:`subprocess.CalledProcessError` so their exit code survives.
"""

from __future__ import annotations


class PxError(Exception):
    exit_code = 1


class ToolNotFoundError(PxError):
    """A required external tool (python3, pip, uv) is not available."""


class ConstraintError(PxError):
    """The configured python constraint cannot be satisfied."""


class UsageError(PxError):
    """Bad arguments, unknown targets, nothing to remove, etc."""


class EnvironmentMissingError(PxError):
    """The project's virtualenv has not been created yet."""


class PackageIndexError(PxError):
    """Looking up a package on the index failed."""


class CommandNotFoundError(PxError):
    """The program handed to run/exec does not exist (shell status 127)."""

    exit_code = 127


class CommandNotExecutableError(PxError):
    """The program exists but cannot be executed (shell status 126)."""

    exit_code = 126
