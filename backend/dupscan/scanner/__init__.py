# Scanner module
# Walks a tree, hashes files on a worker pool and aggregates digests.

from .aggregator import aggregate
from .errors import HashError, OutputUnavailableError, ScanError, WalkError
from .hasher import hash_file
from .models import FileRecord, ScanIssue, ScanPreferences, ScanResult
from .pool import HashWorkerPool
from .walker import feed_intake, walk_files

__all__ = [
    "aggregate",
    "feed_intake",
    "hash_file",
    "walk_files",
    "FileRecord",
    "HashError",
    "HashWorkerPool",
    "OutputUnavailableError",
    "ScanError",
    "ScanIssue",
    "ScanPreferences",
    "ScanResult",
    "WalkError",
]
