APP_NAME = "sessionizer"

DEFAULT_SEARCH_DIRS = ["~/projects", "~/work", "~/personal", "~/code", "~/src"]
DEFAULT_SEARCH_DEPTH = 3
DEFAULT_RECENT_MAX = 20
DEFAULT_EDITORS = ["nvim", "vim"]

# Directory names never offered as candidates (hidden dirs are pruned separately)
EXCLUDED_DIRS = {"node_modules", "vendor", "target", "__pycache__", "venv", ".git"}

HYDRATE_SCRIPT_NAME = ".tmux-sessionizer"

EDIT_WINDOW_NAME = "edit"
TMUX_ENV_VAR = "TMUX"
