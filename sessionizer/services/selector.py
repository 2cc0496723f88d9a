import itertools
import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

from sessionizer.config import ResolvedConfig
from sessionizer.services.discovery import iter_candidates
from sessionizer.services.recent import RecentCache

logger = logging.getLogger(__name__)

FZF_ARGS = ["--no-multi", "--prompt", "project> "]

# fzf exits 1 when nothing matched and 130 when the user pressed Esc/Ctrl-C
_FZF_NO_SELECTION = {1, 130}


class InvalidDirectoryError(Exception):
    """Raised when a path argument does not resolve to an existing directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a directory: {path}")


def resolve_directory(arg: str, cwd: Path | None = None) -> Path:
    """Expand `~`, anchor relative paths at cwd and resolve symlinks."""
    path = Path(arg).expanduser()
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    resolved = path.resolve()
    if not resolved.is_dir():
        raise InvalidDirectoryError(arg)
    return resolved


def pick_directory(candidates: Iterable[str], fzf: str = "fzf") -> str | None:
    """Stream candidates into fzf and return the chosen line, or None if cancelled."""
    lines = iter(candidates)
    first = next(lines, None)
    if first is None:
        logger.debug("No candidate directories to pick from")
        return None

    proc = subprocess.Popen([fzf, *FZF_ARGS], stdin=subprocess.PIPE, stdout=subprocess.PIPE, text=True)
    try:
        for line in itertools.chain([first], lines):
            proc.stdin.write(f"{line}\n")
    except BrokenPipeError:
        # fzf exits as soon as the user picks; the rest of the list is not needed
        logger.debug("fzf closed its input early")
    finally:
        try:
            proc.stdin.close()
        except BrokenPipeError:
            pass
    output = proc.stdout.read()
    proc.wait()

    if proc.returncode in _FZF_NO_SELECTION:
        return None
    if proc.returncode != 0:
        raise RuntimeError(f"fzf exited with status {proc.returncode}")
    return output.strip() or None


def select_directory(arg: str | None, config: ResolvedConfig, cache: RecentCache | None = None) -> Path | None:
    """Resolve the target directory from an argument or the picker.

    Returns None when the picker produced no selection. A successful
    selection is recorded in the recent cache (best-effort).
    """
    if arg is not None:
        target = resolve_directory(arg)
    else:
        recent = cache.load() if cache is not None else []
        choice = pick_directory(iter_candidates(config, recent))
        if choice is None:
            return None
        target = resolve_directory(choice)

    if cache is not None:
        cache.touch(str(target))
    return target
