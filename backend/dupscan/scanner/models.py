from __future__ import annotations

from dataclasses import dataclass, field
import sys
from typing import Dict, List, Optional

_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class FileRecord:
    path: str
    digest: str
    size_bytes: int = 0


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class ScanIssue:
    path: str
    code: str
    message: str


@dataclass(**_DATACLASS_KWARGS)
class ScanResult:
    """Everything the aggregator folded out of the result stream."""

    groups: Dict[str, List[str]] = field(default_factory=dict)
    sizes: Dict[str, int] = field(default_factory=dict)
    issues: List[ScanIssue] = field(default_factory=list)
    files_hashed: int = 0
    walk_completed: bool = True


@dataclass(**_DATACLASS_KWARGS)
class ScanPreferences:
    """
    Optional walk filters.

    Leave a field as None/empty to disable that filter; the walker then
    reports every regular file under the root.
    """

    allowed_extensions: Optional[List[str]] = None
    excluded_dirs: Optional[List[str]] = None
    max_file_size_bytes: Optional[int] = None
    follow_symlinks: bool = False
