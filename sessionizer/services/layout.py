"""First-run population of a new session.

A hydration script (project-local `.tmux-sessionizer`, else the one in the
home directory) wins outright. Without one, the project type is detected from
marker files and the matching window layout from `WINDOW_LAYOUTS` is built.
"""

import logging
import os
import shlex
import shutil
from pathlib import Path

# Only Repo() construction is used, which reads .git without the git binary;
# without this GitPython refuses to import when git is not on PATH.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

import git as gitpython  # noqa: E402
import libtmux

from sessionizer.config import ResolvedConfig
from sessionizer.constants import EDIT_WINDOW_NAME, HYDRATE_SCRIPT_NAME
from sessionizer.models import ProjectType, WindowSpec
from sessionizer.services.tmux import new_window, rename_first_window, select_window, send_command

logger = logging.getLogger(__name__)

# Checked top to bottom; the first hit wins.
MARKER_FILES: list[tuple[tuple[str, ...], ProjectType]] = [
    (("package.json",), ProjectType.NODE),
    (("go.mod",), ProjectType.GO),
    (("Cargo.toml",), ProjectType.RUST),
    (("composer.json",), ProjectType.PHP),
    (("requirements.txt", "setup.py", "pyproject.toml"), ProjectType.PYTHON),
    (("Gemfile", "config.ru"), ProjectType.RUBY),
    (("pom.xml", "build.gradle", "build.gradle.kts"), ProjectType.JAVA),
    (("CMakeLists.txt", "Makefile"), ProjectType.C),
]

_GENERIC = (WindowSpec(name="shell"),)

WINDOW_LAYOUTS: dict[ProjectType, tuple[WindowSpec, ...]] = {
    ProjectType.NODE: (WindowSpec(name="shell"), WindowSpec(name="server"), WindowSpec(name="test")),
    ProjectType.GO: (WindowSpec(name="shell"), WindowSpec(name="run"), WindowSpec(name="test")),
    ProjectType.RUST: (WindowSpec(name="shell"), WindowSpec(name="build"), WindowSpec(name="test")),
    ProjectType.PHP: (WindowSpec(name="shell"), WindowSpec(name="server"), WindowSpec(name="test")),
    ProjectType.PYTHON: (WindowSpec(name="shell"), WindowSpec(name="run"), WindowSpec(name="test")),
    ProjectType.RUBY: _GENERIC,
    ProjectType.JAVA: _GENERIC,
    ProjectType.C: _GENERIC,
    ProjectType.GIT: _GENERIC,
    ProjectType.GENERIC: _GENERIC,
}


def _is_git_repo(directory: Path) -> bool:
    try:
        gitpython.Repo(directory)
        return True
    except (gitpython.InvalidGitRepositoryError, gitpython.NoSuchPathError):
        return False


def detect_project_type(directory: Path) -> ProjectType:
    for names, project_type in MARKER_FILES:
        if any((directory / name).exists() for name in names):
            return project_type
    if _is_git_repo(directory):
        return ProjectType.GIT
    return ProjectType.GENERIC


def find_hydration_script(directory: Path, global_script: Path) -> Path | None:
    local = directory / HYDRATE_SCRIPT_NAME
    if local.is_file():
        return local
    if global_script.is_file():
        return global_script
    return None


def hydration_command(script: Path) -> str:
    message = shlex.quote(f"sessionizer: hydration script failed: {script}")
    return f"source {shlex.quote(str(script))} || echo {message}"


def pick_editor(editors: list[str]) -> str | None:
    for editor in editors:
        if shutil.which(editor):
            return editor
    return None


def build_layout(session: libtmux.Session, directory: Path, project_type: ProjectType, editors: list[str]) -> None:
    """Rename the first window to `edit`, add the type's windows, open the editor."""
    quoted = shlex.quote(str(directory))
    edit_window = rename_first_window(session, EDIT_WINDOW_NAME)
    for spec in WINDOW_LAYOUTS[project_type]:
        window = new_window(session, spec.name, directory)
        send_command(window, spec.render(quoted))
    select_window(session, EDIT_WINDOW_NAME)

    editor = pick_editor(editors)
    if editor is None:
        logger.warning("No editor found (tried %s); leaving the edit window at a shell", ", ".join(editors))
        return
    send_command(edit_window, f"{shlex.quote(editor)} {quoted}")


def initialize_session(session: libtmux.Session, directory: Path, config: ResolvedConfig) -> ProjectType | None:
    """Populate a freshly created session. Returns the detected type, or None when hydrated."""
    script = find_hydration_script(directory, config.global_hydrate_script)
    if script is not None:
        logger.info("Hydrating session", extra={"session": session.session_name, "script": str(script)})
        send_command(session.windows[0], hydration_command(script))
        return None

    project_type = detect_project_type(directory)
    logger.info(
        "Building window layout",
        extra={"session": session.session_name, "project_type": project_type.value},
    )
    build_layout(session, directory, project_type, config.editors)
    return project_type
