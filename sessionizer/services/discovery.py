"""Candidate directories offered to the picker."""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from sessionizer.config import ResolvedConfig

logger = logging.getLogger(__name__)


def _walk(root: Path, depth: int, excluded: set[str]) -> Iterator[str]:
    """Yield directories 1..depth levels below root, pruning hidden and excluded names."""
    root_level = len(root.parts)

    def _on_error(err: OSError) -> None:
        logger.debug("Skipping unreadable directory", extra={"path": err.filename})

    for dirpath, dirnames, _ in os.walk(root, onerror=_on_error):
        level = len(Path(dirpath).parts) - root_level
        keep = [d for d in dirnames if not d.startswith(".") and d not in excluded]
        dirnames[:] = keep if level + 1 < depth else []
        for name in keep:
            yield os.path.join(dirpath, name)


def iter_search_results(roots: Iterable[Path], depth: int, excluded: Iterable[str]) -> Iterator[str]:
    excluded_names = set(excluded)
    for root in roots:
        yield from _walk(root, depth, excluded_names)


def iter_candidates(config: ResolvedConfig, recent: Iterable[str] = ()) -> Iterator[str]:
    """Recent entries first (as stored), then sorted unique search results.

    The search only starts once every recent entry has been consumed.
    """
    seen: set[str] = set()
    for entry in recent:
        if entry not in seen:
            seen.add(entry)
            yield entry

    results = set(iter_search_results(config.search_dirs, config.search_depth, config.excluded_dirs))
    yield from sorted(results - seen)
