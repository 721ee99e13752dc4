from __future__ import annotations

import logging
from typing import Iterable, Union

from .models import FileRecord, ScanIssue, ScanResult

logger = logging.getLogger(__name__)


def aggregate(stream: Iterable[Union[FileRecord, ScanIssue]]) -> ScanResult:
    """
    Fold the result stream into a digest -> paths mapping.

    Blocks until the stream is exhausted. Must run on a single thread: the
    returned ScanResult is built here and nowhere else.
    """
    result = ScanResult()
    for item in stream:
        if isinstance(item, ScanIssue):
            result.issues.append(item)
            if item.code == "WALK_ERROR":
                result.walk_completed = False
            continue
        result.groups.setdefault(item.digest, []).append(item.path)
        result.sizes.setdefault(item.digest, item.size_bytes)
        result.files_hashed += 1

    logger.debug(
        f"Aggregated {result.files_hashed} files into {len(result.groups)} digests "
        f"({len(result.issues)} issues)"
    )
    return result
