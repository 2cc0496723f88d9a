import logging
import shutil
import sys
from pathlib import Path

import click
from libtmux.exc import LibTmuxException

from sessionizer.config import ConfigError, ResolvedConfig, load_config
from sessionizer.services.layout import initialize_session
from sessionizer.services.recent import RecentCache
from sessionizer.services.selector import InvalidDirectoryError, select_directory
from sessionizer.services.tmux import (
    InvalidSessionNameError,
    attach_or_switch,
    create_session,
    inside_tmux,
    session_exists,
    session_name_for,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Send package logs to stderr as `[LEVEL] message`."""
    pkg_logger = logging.getLogger("sessionizer")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _check_prerequisites(need_fzf: bool) -> None:
    """Verify tmux (and fzf when picking interactively) are available, exit with helpful message if not."""
    missing = []
    if not shutil.which("tmux"):
        missing.append("tmux — install via: brew install tmux (macOS) or apt install tmux (Linux)")
    if need_fzf and not shutil.which("fzf"):
        missing.append("fzf — install via: brew install fzf (macOS) or apt install fzf (Linux)")
    if missing:
        click.echo("[ERROR] Missing required tools:\n", err=True)
        for m in missing:
            click.echo(f"  • {m}", err=True)
        sys.exit(1)


def _fail(message: str) -> None:
    click.echo(f"[ERROR] {message}", err=True)
    raise SystemExit(1)


def _ensure_session(session_name: str, directory: Path, config: ResolvedConfig) -> bool:
    """Create and lay out the session unless it already exists. Returns True if created."""
    if session_exists(session_name):
        logger.debug("Reusing existing session", extra={"session": session_name})
        return False
    session = create_session(session_name, directory)
    initialize_session(session, directory, config)
    return True


@click.command()
@click.argument("directory", required=False)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
@click.version_option(package_name="sessionizer")
def cli(directory: str | None, verbose: bool) -> None:
    """Open a tmux session for a project directory.

    With DIRECTORY, use it directly. Without it, pick one with fzf from the
    configured search directories. An existing session with the same name is
    reused as-is; a new one gets the project's window layout.
    """
    _configure_logging(verbose)
    _check_prerequisites(need_fzf=directory is None)

    try:
        config = load_config()
    except ConfigError as e:
        _fail(str(e))

    cache = RecentCache(config.recent_path, config.recent_max) if config.recent_enabled else None

    try:
        target = select_directory(directory, config, cache)
    except (InvalidDirectoryError, RuntimeError) as e:
        _fail(str(e))

    if target is None:
        logger.debug("No directory selected")
        return

    try:
        session_name = session_name_for(target)
        _ensure_session(session_name, target, config)
        attach_or_switch(session_name, inside=inside_tmux())
    except InvalidSessionNameError as e:
        _fail(str(e))
    except (LibTmuxException, RuntimeError) as e:
        _fail(f"tmux failed: {e}")
