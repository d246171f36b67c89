"""Lock freshness: a SHA-256 of the requirements file kept in the lock header.

The first line of the lock is ``# px-lock-sha256: <hex>``; the remainder is
the resolver's compiled output, verbatim. The requirements file is read once
per decision (:func:`snapshot`) so the blank check and the recorded digest
always describe the same bytes.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

from px.types import SyncState

LOCK_HASH_PREFIX = "# px-lock-sha256:"


@dataclass(frozen=True)
class RequirementsSnapshot:
    digest: str
    blank: bool

    @property
    def header(self) -> str:
        return lock_header(self.digest)


def snapshot(requirements: Path) -> RequirementsSnapshot:
    """Digest *requirements* and note whether it holds only whitespace."""
    data = requirements.read_bytes()
    return RequirementsSnapshot(digest=hashlib.sha256(data).hexdigest(), blank=not data.strip())


def lock_header(digest: str) -> str:
    return f"{LOCK_HASH_PREFIX} {digest}\n"


def read_lock_hash(lock: Path) -> str:
    """Return the digest recorded in *lock*'s first line, or ``""``."""
    try:
        with open(lock, encoding="utf-8", errors="replace") as f:
            first = f.readline()
    except OSError:
        return ""
    if not first.startswith(LOCK_HASH_PREFIX):
        return ""
    return first[len(LOCK_HASH_PREFIX) :].strip()


def write_lock(lock: Path, state: RequirementsSnapshot, body: str = "") -> None:
    lock.parent.mkdir(parents=True, exist_ok=True)
    lock.write_text(state.header + body, encoding="utf-8")


def matches(lock: Path, state: RequirementsSnapshot) -> bool:
    return read_lock_hash(lock) == state.digest


def is_fresh(requirements: Path, lock: Path) -> bool:
    if not (requirements.is_file() and lock.is_file()):
        return False
    return matches(lock, snapshot(requirements))


def sync_state(requirements: Path, lock: Path) -> SyncState:
    recorded = read_lock_hash(lock) if lock.is_file() else ""
    if not (recorded and requirements.is_file()):
        return SyncState.UNAVAILABLE
    if recorded == snapshot(requirements).digest:
        return SyncState.UP_TO_DATE
    return SyncState.OUT_OF_DATE
