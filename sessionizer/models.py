from enum import Enum

from pydantic import BaseModel, ConfigDict

CD_AND_CLEAR = "cd {directory} && clear"


class ProjectType(Enum):
    NODE = "node"
    GO = "go"
    RUST = "rust"
    PHP = "php"
    PYTHON = "python"
    RUBY = "ruby"
    JAVA = "java"
    C = "c"
    GIT = "git"
    GENERIC = "generic"


class WindowSpec(BaseModel):
    """A window to create in a fresh session and the command typed into it.

    `command` is a template; `{directory}` is replaced with the shell-quoted
    project directory.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    command: str = CD_AND_CLEAR

    def render(self, quoted_directory: str) -> str:
        return self.command.format(directory=quoted_directory)
