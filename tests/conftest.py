import logging
from pathlib import Path

import pytest

from sessionizer.config import ResolvedConfig
import sessionizer.services.tmux as _tmux_mod


@pytest.fixture(autouse=True)
def _reset_tmux_server(monkeypatch):
    """Reset the cached libtmux server between tests and start outside any tmux client."""
    monkeypatch.delenv("TMUX", raising=False)
    _tmux_mod._server = None
    yield
    _tmux_mod._server = None


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI installs so they don't outlive the runner's streams."""
    yield
    pkg_logger = logging.getLogger("sessionizer")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def fake_config(tmp_path: Path) -> ResolvedConfig:
    root = tmp_path / "projects"
    root.mkdir()
    return ResolvedConfig(
        search_dirs=[root],
        search_depth=3,
        excluded_dirs=["node_modules", "vendor", ".git"],
        recent_enabled=True,
        recent_max=20,
        recent_path=tmp_path / "cache" / "recent",
        global_hydrate_script=tmp_path / "home" / ".tmux-sessionizer",
        editors=["nvim", "vim"],
    )
