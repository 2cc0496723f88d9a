"""Configuration loading with defaults.

Reads `$XDG_CONFIG_HOME/sessionizer/config.toml`, or the older shell-style
`sessionizer.conf` when no TOML file exists, and resolves everything into a
flat `ResolvedConfig` with search roots filtered to directories on disk.
"""

import os
import re
import shlex
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from sessionizer.constants import (
    APP_NAME,
    DEFAULT_EDITORS,
    DEFAULT_RECENT_MAX,
    DEFAULT_SEARCH_DEPTH,
    DEFAULT_SEARCH_DIRS,
    EXCLUDED_DIRS,
    HYDRATE_SCRIPT_NAME,
)


class ConfigError(Exception):
    """Raised when a config file exists but cannot be parsed or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid config file {path}: {reason}")


class SearchConfig(BaseModel):
    dirs: list[str] = []
    depth: int | None = Field(default=None, ge=1)
    exclude: list[str] = []


class CacheConfig(BaseModel):
    enabled: bool = True
    max_entries: int | None = Field(default=None, ge=1)


class LayoutConfig(BaseModel):
    editors: list[str] = []


class SessionizerConfig(BaseModel):
    search: SearchConfig = SearchConfig()
    cache: CacheConfig = CacheConfig()
    layout: LayoutConfig = LayoutConfig()


class ResolvedConfig(BaseModel):
    """Flat config with all values guaranteed filled."""

    search_dirs: list[Path]
    search_depth: int
    excluded_dirs: list[str]
    recent_enabled: bool
    recent_max: int
    recent_path: Path
    global_hydrate_script: Path
    editors: list[str]


def config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def cache_dir() -> Path:
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / APP_NAME


def load_toml(path: Path) -> SessionizerConfig:
    if not path.exists():
        return SessionizerConfig()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return SessionizerConfig.model_validate(data)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError, OSError) as e:
        raise ConfigError(path, str(e)) from e
    except ValidationError as e:
        raise ConfigError(path, str(e)) from e


_ASSIGNMENT = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


def _legacy_assignments(text: str) -> dict[str, str]:
    """Collect `KEY=value` lines, joining `KEY=( ... )` arrays that span lines."""
    values: dict[str, str] = {}
    pending_key: str | None = None
    pending: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if pending_key is not None:
            pending.append(stripped)
            if ")" in stripped:
                values[pending_key] = "\n".join(pending)
                pending_key = None
                pending = []
            continue
        if not stripped or stripped.startswith("#"):
            continue
        match = _ASSIGNMENT.match(stripped)
        if not match:
            continue
        key, raw = match.groups()
        if raw.startswith("(") and ")" not in raw:
            pending_key = key
            pending = [raw]
        else:
            values[key] = raw
    if pending_key is not None:
        values[pending_key] = "\n".join(pending)
    return values


def _split_shell_words(raw: str) -> list[str]:
    raw = raw.strip()
    if raw.startswith("("):
        raw = raw[1:].rsplit(")", 1)[0]
    return shlex.split(raw, comments=True)


def load_legacy_conf(path: Path) -> SessionizerConfig:
    """Parse the shell-style `SEARCH_DIRS` / `SEARCH_DEPTH` file without executing it."""
    if not path.exists():
        return SessionizerConfig()
    try:
        text = path.read_text()
    except (UnicodeDecodeError, OSError) as e:
        raise ConfigError(path, str(e)) from e
    values = _legacy_assignments(text)
    search = SearchConfig()
    try:
        if "SEARCH_DIRS" in values:
            search.dirs = [os.path.expandvars(d) for d in _split_shell_words(values["SEARCH_DIRS"])]
        if "SEARCH_DEPTH" in values:
            words = _split_shell_words(values["SEARCH_DEPTH"])
            search = SearchConfig(dirs=search.dirs, depth=int(words[0]) if words else None)
    except (ValueError, ValidationError) as e:
        raise ConfigError(path, str(e)) from e
    return SessionizerConfig(search=search)


def _expand_dir(value: str) -> Path:
    return Path(os.path.expandvars(value)).expanduser().resolve()


def load_config() -> ResolvedConfig:
    """Load and resolve configuration, falling back to defaults for unset values."""
    directory = config_dir()
    toml_path = directory / "config.toml"
    if toml_path.exists():
        cfg = load_toml(toml_path)
    else:
        cfg = load_legacy_conf(directory / "sessionizer.conf")

    search_dirs = [path for path in map(_expand_dir, cfg.search.dirs or DEFAULT_SEARCH_DIRS) if path.is_dir()]

    return ResolvedConfig(
        search_dirs=search_dirs,
        search_depth=cfg.search.depth or DEFAULT_SEARCH_DEPTH,
        excluded_dirs=sorted(EXCLUDED_DIRS | set(cfg.search.exclude)),
        recent_enabled=cfg.cache.enabled,
        recent_max=cfg.cache.max_entries or DEFAULT_RECENT_MAX,
        recent_path=cache_dir() / "recent",
        global_hydrate_script=Path.home() / HYDRATE_SCRIPT_NAME,
        editors=cfg.layout.editors or list(DEFAULT_EDITORS),
    )
