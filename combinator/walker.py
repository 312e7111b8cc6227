"""Recursive discovery of input files.

Files are selected by a literal suffix test on the full path string, so
``"txt"`` also matches ``notes.mytxt`` while ``".txt"`` does not. The
result is ordered by base name, with the absolute path string breaking
ties between equal base names in different directories.
"""
from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from combinator.errors import InvalidRootError
from combinator.logging_utils import METRICS, get_logger

logger = get_logger("combinator")


def ensure_directory(root: Path | str) -> Path:
    """Return ``root`` as an absolute path or raise :class:`InvalidRootError`."""

    path = Path(root).absolute()
    try:
        is_dir = path.is_dir()
    except (OSError, ValueError) as exc:
        # name too long, permission denied on a parent, embedded NUL
        raise InvalidRootError(path) from exc
    if not is_dir:
        raise InvalidRootError(path)
    return path


def _canonical(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


def _is_regular_file(path: str) -> bool:
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except OSError as exc:
        # Deleted or unreadable between listing and stat; skip it.
        logger.warning("Skipping unreadable entry", extra={"path": path, "error": str(exc)})
        METRICS.counter("walk_errors").inc()
        return False


def _log_walk_error(exc: OSError) -> None:
    logger.warning("Skipping unreadable directory", extra={"path": exc.filename, "error": exc.strerror or str(exc)})
    METRICS.counter("walk_errors").inc()


def iter_candidates(root: Path | str, extension: str, exclude: Optional[Path | str] = None) -> Iterator[Path]:
    """Yield matching regular files under ``root`` in traversal order.

    Unreadable directories and entries that vanish mid-walk are logged and
    skipped; the walk itself never aborts because of a single entry.
    """

    base = ensure_directory(root)
    excluded = _canonical(Path(exclude)) if exclude is not None else None

    for dirpath, _dirnames, filenames in os.walk(base, onerror=_log_walk_error):
        for filename in filenames:
            full = os.path.join(dirpath, filename)
            if not full.endswith(extension):
                continue
            if not _is_regular_file(full):
                continue
            path = Path(full)
            if excluded is not None and _canonical(path) == excluded:
                continue
            yield path


def sort_key(path: Path) -> Tuple[str, str]:
    return path.name, str(path)


def discover(root: Path | str, extension: str, exclude: Optional[Path | str] = None) -> List[Path]:
    """Return every matching file under ``root`` sorted by base name.

    Raises
    ------
    InvalidRootError
        If ``root`` does not exist or is not a directory. Checked before
        any traversal starts.
    """

    files = sorted(iter_candidates(root, extension, exclude), key=sort_key)
    logger.debug("Discovered files", extra={"root": str(root), "extension": extension, "count": len(files)})
    return files


class FileSet:
    """Re-iterable view over the files matching a root and extension.

    Every iteration walks the filesystem again; nothing is cached between
    passes.
    """

    def __init__(self, root: Path | str, extension: str, exclude: Optional[Path | str] = None):
        self.root = ensure_directory(root)
        self.extension = extension
        self.exclude = Path(exclude) if exclude is not None else None

    def __iter__(self) -> Iterator[Path]:
        return iter(discover(self.root, self.extension, self.exclude))

    def __repr__(self) -> str:
        return f"FileSet(root={str(self.root)!r}, extension={self.extension!r}, exclude={self.exclude!r})"


__all__ = ["FileSet", "discover", "ensure_directory", "iter_candidates", "sort_key"]
