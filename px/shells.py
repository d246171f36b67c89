"""Shell integration: completion scripts, the zsh auto-activation hook, and
the candidates served to them through the hidden ``px __complete`` command.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from px import tools
from px.errors import UsageError
from px.project import Project
from px.settings import Settings, load_settings

SUBCOMMANDS = ["init", "install", "run", "start", "exec", "add", "rm", "doctor", "gen"]
ADD_FLAG_CANDIDATES = ["--latest", "--compatible"]
GEN_TARGETS = ["completions", "autoactivate"]
COMPLETION_SHELLS = ["bash", "fish", "zsh"]
AUTOACTIVATE_SHELLS = ["zsh"]

BASH_COMPLETION = """\
# bash completion for px
_px_complete() {
	local words=("${COMP_WORDS[@]:1}")
	local out
	out="$(px __complete "${words[@]}")" || return 0
	COMPREPLY=()
	[ -n "$out" ] || return 0
	while IFS= read -r line; do
		COMPREPLY+=("$line")
	done <<<"$out"
}
complete -F _px_complete px
"""

FISH_COMPLETION = """\
function __px_complete
	set -l tokens (commandline -opc)
	if test (count $tokens) -gt 0
		set -e tokens[1]
	end
	set -a tokens (commandline -ct)
	px __complete $tokens
end

complete -c px -f -a "(__px_complete)"
"""

ZSH_COMPLETION = """\
# zsh completion for px
_px_complete_bridge() {
	local out
	out="$(px __complete "$@")" || return 0
	local -a entries
	entries=(${(f)out})
	(( ${#entries[@]} )) || return 0
	compadd -a -- entries
}
_pxc() {
	zstyle ':completion:*' matcher-list 'm:{a-z}={A-Za-z}'
	_px_complete_bridge "${(@)words[2,CURRENT]}"
}
compdef _pxc px
"""

ZSH_AUTOACTIVATE = """\
# auto-add the project venv to PATH when entering a directory with px.yaml
px_auto() {
	if [ -z "${PX_AUTO_ORIG_PATH:-}" ]; then
		PX_AUTO_ORIG_PATH="$PATH"
	fi
	local base="$PX_AUTO_ORIG_PATH"
	local d="$PWD"
	PATH="$base"
	unset VIRTUAL_ENV
	while [ "$d" != "/" ]; do
		if [ -f "$d/px.yaml" ]; then
			local envdir
			envdir="$(px __venv "$d" 2>/dev/null)"
			[ -z "$envdir" ] && envdir="$d/.venv"
			if [ -d "$envdir/bin" ]; then
				case ":$PATH:" in
					*":$envdir/bin:"*) ;;
					*) PATH="$envdir/bin:$PATH";;
				esac
				export VIRTUAL_ENV="$envdir"
			fi
			export PATH
			return
		fi
		d="$(dirname "$d")"
	done
	export PATH="$base"
	unset VIRTUAL_ENV
}
autoload -U add-zsh-hook
add-zsh-hook chpwd px_auto
px_auto
"""

_COMPLETIONS = {"bash": BASH_COMPLETION, "fish": FISH_COMPLETION, "zsh": ZSH_COMPLETION}
_AUTOACTIVATE = {"zsh": ZSH_AUTOACTIVATE}


def detect_shell(settings: Settings | None = None) -> str:
    """Shell name from ``PX_SHELL`` or ``SHELL`` (basename, lowercased)."""
    settings = settings or load_settings()
    shell = settings.shell_override or settings.shell
    if not shell:
        return ""
    return Path(shell).name.lower()


def resolve_shell(provided: str | None, settings: Settings | None = None) -> str:
    if provided:
        return provided.lower()
    return detect_shell(settings)


def _pick(kind: str, table: dict[str, str], provided: str | None, what: str) -> str:
    shell = resolve_shell(provided)
    if not shell:
        raise UsageError(
            f"unable to detect shell; pass it explicitly (e.g. px gen {kind} zsh)"
        )
    try:
        return table[shell]
    except KeyError:
        supported = ", ".join(sorted(table))
        raise UsageError(
            f"{what} for shell '{shell}' not supported (supported: {supported})"
        ) from None


def completion_script(shell: str | None = None) -> str:
    return _pick("completions", _COMPLETIONS, shell, "completions")


def autoactivate_script(shell: str | None = None) -> str:
    return _pick("autoactivate", _AUTOACTIVATE, shell, "autoactivate hook")


def list_python_files(root: Path) -> list[str]:
    """``*.py`` files under *root*: git-tracked ones when inside a work tree."""
    if tools.has("git"):
        work_tree = tools.run(
            ["git", "-C", root, "rev-parse", "--is-inside-work-tree"], check=False, quiet=True
        )
        if work_tree.returncode == 0:
            proc = tools.run(["git", "-C", root, "ls-files", "*.py"], check=False, capture=True)
            return [line for line in (proc.stdout or "").splitlines() if line]

    files = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts):
            continue
        files.append(rel.as_posix())
    return files


def _run_targets(project: Project) -> list[str]:
    seen: dict[str, None] = {}
    for item in [*project.data.script_names(), *list_python_files(project.root)]:
        if item:
            seen.setdefault(item, None)
    return list(seen)


def complete(words: Sequence[str], project: Project) -> list[str]:
    """Candidates for the word after *words* (the command line minus ``px``)."""
    if not words or not words[0]:
        return list(SUBCOMMANDS)

    first = words[0]
    if first == "run":
        return _run_targets(project)
    if first == "add":
        current = words[-1] if len(words) > 1 else ""
        if not current or current.startswith("-"):
            return list(ADD_FLAG_CANDIDATES)
        return []
    if first == "gen":
        if len(words) < 2 or not words[1]:
            return list(GEN_TARGETS)
        if words[1] == "completions":
            return list(COMPLETION_SHELLS)
        if words[1] == "autoactivate":
            return list(AUTOACTIVATE_SHELLS)
    return []
