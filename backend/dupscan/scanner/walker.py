from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Iterator, Optional, Set

from .errors import WalkError
from .models import ScanIssue, ScanPreferences

if TYPE_CHECKING:
    from .pool import HashWorkerPool

logger = logging.getLogger(__name__)


def walk_files(root: str | os.PathLike, preferences: ScanPreferences | None = None) -> Iterator[str]:
    """
    Lazily yield every regular file below ``root``.

    Entries are visited depth-first in name order, files and subdirectories
    interleaved. Directories are descended but never yielded. Symlinks to
    regular files are yielded; symlinked directories are only descended when
    ``follow_symlinks`` is set. The first listing or stat failure raises
    ``WalkError`` and ends the enumeration; files already yielded stay yielded.
    """
    root_path = os.fspath(root)
    follow_symlinks = bool(preferences and preferences.follow_symlinks)
    excluded_dirs = set(preferences.excluded_dirs or ()) if preferences else set()
    allowed_extensions = _allowed_extensions(preferences)
    max_file_size = preferences.max_file_size_bytes if preferences else None

    if os.path.isfile(root_path):
        yield root_path
        return

    stack = [iter(_list_dir(root_path))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            if entry.is_dir(follow_symlinks=follow_symlinks):
                if entry.name not in excluded_dirs:
                    stack.append(iter(_list_dir(entry.path)))
                continue
            if not entry.is_file():
                continue
            if max_file_size is not None and entry.stat().st_size > max_file_size:
                continue
        except (OSError, ValueError) as exc:
            raise WalkError(f"Failed to inspect {entry.path}: {exc}", "WALK_ERROR", entry.path) from exc

        if allowed_extensions is not None:
            if os.path.splitext(entry.name)[1].lower() not in allowed_extensions:
                continue
        yield entry.path


def _list_dir(directory: str) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as iterator:
            return sorted(iterator, key=lambda entry: entry.name)
    except (OSError, ValueError) as exc:
        raise WalkError(f"Failed to list {directory}: {exc}", "WALK_ERROR", directory) from exc


def feed_intake(
    root: str | os.PathLike,
    pool: "HashWorkerPool",
    preferences: ScanPreferences | None = None,
) -> bool:
    """
    Push every file under ``root`` into the pool's intake, then close it.

    A walk failure is logged and reported on the result stream; the intake
    is closed exactly once whether or not the walk finished. Returns True
    when enumeration completed.
    """
    submitted = 0
    try:
        for path in walk_files(root, preferences):
            pool.submit(path)
            submitted += 1
    except WalkError as exc:
        logger.error(f"Error walking through directory: {exc}")
        pool.report(ScanIssue(path=exc.path or os.fspath(root), code=exc.code, message=str(exc)))
        return False
    finally:
        pool.close_intake()
        logger.debug(f"Walker queued {submitted} files from {os.fspath(root)}")
    return True


def _allowed_extensions(preferences: ScanPreferences | None) -> Optional[Set[str]]:
    if not preferences or not preferences.allowed_extensions:
        return None
    allowed: Set[str] = set()
    for raw in preferences.allowed_extensions:
        token = raw.strip().lower()
        if token:
            allowed.add(token if token.startswith(".") else f".{token}")
    return allowed or None
