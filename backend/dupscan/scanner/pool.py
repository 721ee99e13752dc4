"""Fixed-size thread pool that turns file paths into FileRecords."""

from __future__ import annotations

import logging
import os
import queue
import threading
from typing import Callable, Iterator, List, Optional, Tuple, Union

from .errors import HashError
from .hasher import HASH_CHUNK_SIZE, hash_file
from .models import FileRecord, ScanIssue

logger = logging.getLogger(__name__)

HashFunc = Callable[[str, int], Tuple[str, int]]
ResultItem = Union[FileRecord, ScanIssue]

# Marks the end of the intake (one per worker) and of the result stream.
_CLOSED = object()


def default_worker_count() -> int:
    return os.cpu_count() or 1


class HashWorkerPool:
    """
    Hash files on a fixed set of worker threads.

    Workers are spawned on construction and share two unbounded queues:
    the intake of paths and the result stream of FileRecords/ScanIssues.
    The result stream is closed only after every worker has returned,
    which in turn only happens after ``close_intake`` was called.
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        *,
        chunk_size: int = HASH_CHUNK_SIZE,
        hasher: Optional[HashFunc] = None,
    ) -> None:
        if workers is None:
            workers = default_worker_count()
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = workers
        self._chunk_size = chunk_size
        self._hasher = hasher or hash_file
        self._intake: "queue.Queue[object]" = queue.Queue()
        self._results: "queue.Queue[object]" = queue.Queue()
        self._intake_closed = False
        self._threads: List[threading.Thread] = [
            threading.Thread(target=self._work, name=f"dupscan-hash-{idx}", daemon=True)
            for idx in range(workers)
        ]
        for thread in self._threads:
            thread.start()
        self._closer = threading.Thread(
            target=self._close_results_when_done, name="dupscan-closer", daemon=True
        )
        self._closer.start()
        logger.debug(f"Started {workers} hash workers")

    def submit(self, path: str) -> None:
        if self._intake_closed:
            raise RuntimeError("intake is closed")
        self._intake.put(path)

    def report(self, issue: ScanIssue) -> None:
        """Put a producer-side issue on the result stream."""
        self._results.put(issue)

    def close_intake(self) -> None:
        if self._intake_closed:
            return
        self._intake_closed = True
        for _ in self._threads:
            self._intake.put(_CLOSED)

    def results(self) -> Iterator[ResultItem]:
        """Yield results as they complete until the stream is closed."""
        while True:
            item = self._results.get()
            if item is _CLOSED:
                return
            yield item

    def join(self, timeout: Optional[float] = None) -> None:
        for thread in self._threads:
            thread.join(timeout)
        self._closer.join(timeout)

    def _work(self) -> None:
        while True:
            path = self._intake.get()
            if path is _CLOSED:
                return
            try:
                digest, size = self._hasher(path, self._chunk_size)
            except HashError as exc:
                logger.warning(f"Error calculating hash for {path}: {exc}")
                self._results.put(ScanIssue(path=path, code=exc.code, message=str(exc)))
                continue
            self._results.put(FileRecord(path=path, digest=digest, size_bytes=size))

    def _close_results_when_done(self) -> None:
        for thread in self._threads:
            thread.join()
        self._results.put(_CLOSED)
