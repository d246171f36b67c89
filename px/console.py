"""Rich consoles for user-facing ``px: ...`` status lines."""

from __future__ import annotations

from rich.console import Console

console = Console(highlight=False, soft_wrap=True, emoji=False)
err_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


def info(msg: str) -> None:
    console.print(f"px: {msg}", markup=False)


def warn(msg: str) -> None:
    err_console.print(f"px: {msg}", markup=False)
