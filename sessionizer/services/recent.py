import fcntl
import logging
from pathlib import Path

from sessionizer.constants import DEFAULT_RECENT_MAX

logger = logging.getLogger(__name__)


def _normalize(lines: list[str], limit: int) -> list[str]:
    entries: list[str] = []
    for line in lines:
        entry = line.strip()
        if entry and entry not in entries:
            entries.append(entry)
    return entries[:limit]


class RecentCache:
    """Recently selected directories, most recent first, one path per line.

    Reads never fail: a missing or unreadable file is an empty cache. Updates
    are best-effort and serialized across processes with an exclusive lock on
    a sibling `.lock` file.
    """

    def __init__(self, path: Path, max_entries: int = DEFAULT_RECENT_MAX) -> None:
        self.path = path
        self.max_entries = max_entries

    def load(self) -> list[str]:
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            return []
        except OSError:
            logger.debug("Failed to read recent cache", extra={"path": str(self.path)}, exc_info=True)
            return []
        return _normalize(text.splitlines(), self.max_entries)

    def touch(self, directory: str) -> list[str]:
        """Move `directory` to the front and persist. Returns the new entries.

        Write failures are logged and swallowed; the returned list is empty
        in that case.
        """
        lock_file = self.path.with_suffix(".lock")
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(lock_file, "a") as lf:
                fcntl.flock(lf, fcntl.LOCK_EX)
                try:
                    entries = _normalize([directory, *self.load()], self.max_entries)
                    tmp.write_text("".join(f"{entry}\n" for entry in entries))
                    tmp.rename(self.path)
                finally:
                    fcntl.flock(lf, fcntl.LOCK_UN)
        except OSError:
            logger.warning("Could not update recent cache at %s", self.path, exc_info=True)
            return []
        return entries
