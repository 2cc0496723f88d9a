from pathlib import Path

import pytest

from sessionizer.config import (
    ConfigError,
    SessionizerConfig,
    _legacy_assignments,
    load_config,
    load_legacy_conf,
    load_toml,
)
from sessionizer.constants import DEFAULT_EDITORS, DEFAULT_RECENT_MAX, DEFAULT_SEARCH_DEPTH


@pytest.fixture()
def home(tmp_path, monkeypatch) -> Path:
    """Point HOME and the XDG dirs at a temp tree."""
    home = tmp_path / "home"
    home.mkdir()
    home = home.resolve()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    return home


def _write_config(home: Path, name: str, text: str) -> Path:
    path = home / ".config" / "sessionizer" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestLoadToml:
    def test_missing_file_returns_default(self, tmp_path):
        assert load_toml(tmp_path / "nonexistent.toml") == SessionizerConfig()

    def test_valid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[search]\ndirs = ["~/src"]\ndepth = 2\n[cache]\nenabled = false\n')
        cfg = load_toml(path)
        assert cfg.search.dirs == ["~/src"]
        assert cfg.search.depth == 2
        assert cfg.cache.enabled is False

    def test_malformed_toml_raises(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[search\n")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_toml(path)

    def test_invalid_depth_raises(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[search]\ndepth = 0\n")
        with pytest.raises(ConfigError):
            load_toml(path)

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_bytes(b'[search]\ndirs = ["\xff\xfe"]')
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_toml(path)

    def test_unreadable_file_raises(self, tmp_path):
        # A directory where the file should be
        path = tmp_path / "config.toml"
        path.mkdir()
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_toml(path)


class TestLegacyConf:
    def test_single_line_array(self, tmp_path):
        path = tmp_path / "sessionizer.conf"
        path.write_text('SEARCH_DIRS=("~/work" "~/personal")\nSEARCH_DEPTH=2\n')
        cfg = load_legacy_conf(path)
        assert cfg.search.dirs == ["~/work", "~/personal"]
        assert cfg.search.depth == 2

    def test_multi_line_array_with_comments(self, tmp_path):
        path = tmp_path / "sessionizer.conf"
        path.write_text(
            "# my dirs\n"
            "SEARCH_DIRS=(\n"
            '  "~/work"\n'
            "  ~/code  # side projects\n"
            ")\n"
        )
        cfg = load_legacy_conf(path)
        assert cfg.search.dirs == ["~/work", "~/code"]
        assert cfg.search.depth is None

    def test_expands_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", "/home/u")
        path = tmp_path / "sessionizer.conf"
        path.write_text('export SEARCH_DIRS="$HOME/projects"\n')
        assert load_legacy_conf(path).search.dirs == ["/home/u/projects"]

    def test_non_numeric_depth_raises(self, tmp_path):
        path = tmp_path / "sessionizer.conf"
        path.write_text("SEARCH_DEPTH=deep\n")
        with pytest.raises(ConfigError):
            load_legacy_conf(path)

    def test_ignores_other_statements(self):
        values = _legacy_assignments('echo hi\nif true; then :; fi\nSEARCH_DEPTH=4\n')
        assert values == {"SEARCH_DEPTH": "4"}

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "sessionizer.conf"
        path.write_bytes(b"SEARCH_DIRS=(\xff)")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_legacy_conf(path)

    def test_missing_file_returns_default(self, tmp_path):
        assert load_legacy_conf(tmp_path / "nope.conf") == SessionizerConfig()


class TestLoadConfig:
    def test_defaults_filtered_to_existing_dirs(self, home):
        (home / "projects").mkdir()
        (home / "code").mkdir()

        cfg = load_config()

        assert cfg.search_dirs == [home / "projects", home / "code"]
        assert cfg.search_depth == DEFAULT_SEARCH_DEPTH
        assert cfg.recent_enabled is True
        assert cfg.recent_max == DEFAULT_RECENT_MAX
        assert cfg.editors == DEFAULT_EDITORS
        assert cfg.recent_path == home / ".cache" / "sessionizer" / "recent"
        assert cfg.global_hydrate_script == home / ".tmux-sessionizer"

    def test_no_existing_dirs_gives_empty_list(self, home):
        assert load_config().search_dirs == []

    def test_toml_overrides(self, home):
        (home / "src").mkdir()
        _write_config(
            home,
            "config.toml",
            '[search]\ndirs = ["~/src", "~/missing"]\ndepth = 1\nexclude = ["build"]\n'
            "[cache]\nmax_entries = 5\n"
            '[layout]\neditors = ["hx"]\n',
        )

        cfg = load_config()

        assert cfg.search_dirs == [home / "src"]
        assert cfg.search_depth == 1
        assert "build" in cfg.excluded_dirs
        assert "node_modules" in cfg.excluded_dirs
        assert cfg.recent_max == 5
        assert cfg.editors == ["hx"]

    def test_legacy_conf_used_without_toml(self, home):
        (home / "work").mkdir()
        _write_config(home, "sessionizer.conf", 'SEARCH_DIRS=("$HOME/work")\nSEARCH_DEPTH=5\n')

        cfg = load_config()

        assert cfg.search_dirs == [home / "work"]
        assert cfg.search_depth == 5

    def test_toml_wins_over_legacy(self, home):
        _write_config(home, "sessionizer.conf", "SEARCH_DEPTH=5\n")
        _write_config(home, "config.toml", "[search]\ndepth = 2\n")
        assert load_config().search_depth == 2

    def test_xdg_overrides(self, home, tmp_path, monkeypatch):
        xdg_config = tmp_path / "xdg-config"
        (xdg_config / "sessionizer").mkdir(parents=True)
        (xdg_config / "sessionizer" / "config.toml").write_text("[search]\ndepth = 4\n")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_config))
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))

        cfg = load_config()

        assert cfg.search_depth == 4
        assert cfg.recent_path == tmp_path / "xdg-cache" / "sessionizer" / "recent"

    def test_invalid_utf8_toml_raises_config_error(self, home):
        path = home / ".config" / "sessionizer" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_bytes(b'[search]\ndirs = ["\xff\xfe"]')
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config()

    def test_symlinked_root_resolves_to_target(self, home):
        real = home / "real-projects"
        real.mkdir()
        (home / "projects").symlink_to(real)
        _write_config(home, "config.toml", '[search]\ndirs = ["~/projects"]\n')

        assert load_config().search_dirs == [real]
