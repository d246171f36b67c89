"""px CLI: project-local python environments over uv.

Commands:
- init [dir]            scaffold px.yaml + requirements.txt
- install               resolve python, create venv, compile (when stale) and sync
- run / start / exec    run things inside the venv without activating it
- add / rm              edit requirements.txt and reinstall
- doctor                read-only status report
- gen completions|autoactivate [shell]
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer

from px import doctor as doctor_mod
from px import runner, shells
from px.config import CONFIG_FILENAME
from px.console import console, err_console, info
from px.errors import PxError, UsageError
from px.installer import install as install_project
from px.project import load_project
from px.requirements import AddMode, add_requirements, remove_requirements
from px.types import DEFAULT_LOCKFILE, DEFAULT_REQUIREMENTS, DEFAULT_VENV_PATH

DIST_NAME = "px-env"

# Everything after the first positional is handed to the child untouched.
PASSTHROUGH = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Project-local Python environments: px.yaml + uv + venv",
)
gen_app = typer.Typer(add_completion=False, help="Generate shell integration scripts")
app.add_typer(gen_app, name="gen")


def get_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "0.0.0"


@contextmanager
def _handled() -> Iterator[None]:
    """Map px errors to their exit code and delegated tool failures to their own."""
    try:
        yield
    except PxError as exc:
        err_console.print(f"px: {exc}", markup=False)
        raise typer.Exit(code=exc.exit_code) from exc
    except subprocess.CalledProcessError as exc:
        raise typer.Exit(code=exc.returncode or 1) from exc


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"px {get_version()}", markup=False)
        raise typer.Exit()


@app.callback()
def main_callback(
    show_version: bool = typer.Option(
        False, "--version", help="Show px version", callback=_version_callback, is_eager=True
    ),
) -> None:
    """Project-local Python environments: px.yaml + uv + venv."""


def default_constraint() -> str:
    major, minor = sys.version_info[:2]
    return f">={major}.{minor},<{major}.{minor + 1}"


def render_default_config(constraint: str) -> str:
    return (
        "version: 1\n"
        f'python: "{constraint}"\n'
        f'venv_path: "{DEFAULT_VENV_PATH}"\n'
        f'requirements: "{DEFAULT_REQUIREMENTS}"\n'
        f'lockfile: "{DEFAULT_LOCKFILE}"\n'
        "\n"
        "scripts:\n"
        '  start: "python main.py"\n'
    )


@app.command()
def init(path: str = typer.Argument(".", help="Project directory (created if missing)")) -> None:
    """Initialize px.yaml and requirements.txt."""
    with _handled():
        root = Path(path)
        if path != ".":
            root.mkdir(parents=True, exist_ok=True)
        config_path = root / CONFIG_FILENAME
        if config_path.exists():
            raise UsageError(f"{CONFIG_FILENAME} already exists at {path}")
        config_path.write_text(render_default_config(default_constraint()), encoding="utf-8")
        req = root / DEFAULT_REQUIREMENTS
        if not req.exists():
            req.touch()
        info(f"initialized project at {path}")


@app.command()
def install() -> None:
    """Resolve python, create venv, sync dependencies."""
    with _handled():
        install_project(load_project())


@app.command(context_settings=PASSTHROUGH, add_help_option=False)
def run(
    ctx: typer.Context,
    target: str | None = typer.Argument(None, help="Script name, python file, or '-' for stdin"),
) -> None:
    """Run a px.yaml script, python file, or stdin."""
    with _handled():
        code = runner.run_target(load_project(), target, list(ctx.args))
    raise typer.Exit(code=code)


@app.command(context_settings=PASSTHROUGH, add_help_option=False)
def start(ctx: typer.Context) -> None:
    """Run scripts.start or the configured entrypoint."""
    with _handled():
        code = runner.start(load_project(), list(ctx.args))
    raise typer.Exit(code=code)


@app.command("exec", context_settings=PASSTHROUGH, add_help_option=False)
def exec_(ctx: typer.Context) -> None:
    """Execute a command inside the virtualenv."""
    with _handled():
        code = runner.exec_command(load_project(), list(ctx.args))
    raise typer.Exit(code=code)


@app.command(context_settings={"allow_interspersed_args": False})
def add(
    packages: list[str] | None = typer.Argument(None, help="pkg or pkg@spec"),
    latest: bool = typer.Option(
        False, "--latest", "--exact", help="Pin to the latest version (==)"
    ),
    compatible: bool = typer.Option(
        False, "--compatible", help="Pin compatible with the latest version (~=)"
    ),
) -> None:
    """Add dependencies (optionally pinned) and reinstall."""
    with _handled():
        if latest and compatible:
            raise UsageError("--latest and --compatible are mutually exclusive")
        mode = AddMode.EXACT if latest else AddMode.COMPATIBLE if compatible else AddMode.RAW
        add_requirements(load_project(), packages or [], mode)


@app.command("rm")
def rm(packages: list[str] | None = typer.Argument(None, help="Exact requirement lines")) -> None:
    """Remove direct dependencies and reinstall."""
    with _handled():
        remove_requirements(load_project(), packages or [])


@app.command()
def doctor() -> None:
    """Show project + environment status."""
    with _handled():
        report = doctor_mod.collect(load_project())
    for line in doctor_mod.render(report):
        console.print(line, markup=False)


@gen_app.command()
def completions(shell: str | None = typer.Argument(None, help="bash | fish | zsh")) -> None:
    """Generate shell completions."""
    with _handled():
        typer.echo(shells.completion_script(shell), nl=False)


@gen_app.command()
def autoactivate(shell: str | None = typer.Argument(None, help="zsh")) -> None:
    """Generate a shell hook that puts the project venv on PATH."""
    with _handled():
        typer.echo(shells.autoactivate_script(shell), nl=False)


@app.command("__complete", hidden=True, context_settings=PASSTHROUGH, add_help_option=False)
def complete(ctx: typer.Context) -> None:
    for candidate in shells.complete(list(ctx.args), load_project()):
        typer.echo(candidate)


@app.command("__venv", hidden=True)
def venv_dir(path: str = typer.Argument(".")) -> None:
    typer.echo(str(load_project(Path(path)).venv_dir))


def main() -> None:
    app(prog_name="px")


if __name__ == "__main__":
    main()
