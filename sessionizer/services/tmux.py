import logging
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path

import libtmux

from sessionizer.constants import TMUX_ENV_VAR

logger = logging.getLogger(__name__)

# Cached server reference, reused for every call in this process.
_server: libtmux.Server | None = None

_UNSAFE_CHARS = ". :"
_SANITIZE = str.maketrans({c: "_" for c in _UNSAFE_CHARS})


def _client_socket(environ: Mapping[str, str] | None = None) -> str | None:
    """Socket of the tmux server this process runs inside, from `$TMUX` (`socket,pid,session`)."""
    env = os.environ if environ is None else environ
    value = env.get(TMUX_ENV_VAR)
    if not value:
        return None
    return value.split(",")[0] or None


def _get_server() -> libtmux.Server:
    global _server
    if _server is None:
        # Inside tmux, talk to the client's own server even on a -L/-S socket
        socket_path = _client_socket()
        _server = libtmux.Server(socket_path=socket_path) if socket_path else libtmux.Server()
    return _server


class InvalidSessionNameError(Exception):
    """Raised when a directory name leaves nothing usable after sanitizing."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__(f"Cannot derive a tmux session name from directory: {directory!r}")


def session_name_for(directory: Path | str) -> str:
    """Base name of the directory with `.`, space and `:` replaced by `_`."""
    base = Path(directory).name
    if not base.strip(_UNSAFE_CHARS):
        raise InvalidSessionNameError(str(directory))
    return base.translate(_SANITIZE)


def inside_tmux(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get(TMUX_ENV_VAR))


def get_session(session_name: str) -> libtmux.Session | None:
    try:
        return _get_server().sessions.get(session_name=session_name)
    except Exception:
        return None


def session_exists(session_name: str) -> bool:
    """Check if a tmux session exists."""
    return get_session(session_name) is not None


def create_session(session_name: str, directory: Path) -> libtmux.Session:
    """Create a detached tmux session rooted at directory."""
    logger.info("Creating tmux session", extra={"session": session_name, "directory": str(directory)})
    return _get_server().new_session(
        session_name=session_name,
        start_directory=str(directory),
        attach=False,
    )


def rename_first_window(session: libtmux.Session, window_name: str) -> libtmux.Window:
    window = session.windows[0]
    window.rename_window(window_name)
    return window


def new_window(session: libtmux.Session, window_name: str, directory: Path) -> libtmux.Window:
    return session.new_window(window_name=window_name, start_directory=str(directory), attach=False)


def select_window(session: libtmux.Session, window_name: str) -> None:
    session.select_window(window_name)


def send_command(window: libtmux.Window, command: str) -> None:
    """Type a command into the window's active pane and press Enter."""
    window.active_pane.send_keys(command, enter=True)


def attach_or_switch(session_name: str, inside: bool) -> None:
    """Switch the current client when inside tmux, otherwise attach this terminal."""
    if inside:
        _get_server().switch_client(session_name)
        return
    result = subprocess.run(["tmux", "attach-session", "-t", session_name])
    if result.returncode != 0:
        raise RuntimeError(f"tmux attach-session exited with status {result.returncode}")
